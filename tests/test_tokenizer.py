"""Unit tests for the tokenizer adapter helpers."""
from unittest.mock import MagicMock, patch

import pytest

from turn_detection.errors import EndTokenResolutionError, TokenBudgetExceededError
from turn_detection.tokenizer import HuggingFaceTokenizer, enforce_budget, resolve_end_token_id

from conftest import END_MARKER, END_MARKER_ID


class TestHuggingFaceTokenizer:
    """Test suite for HuggingFaceTokenizer."""

    def test_sets_left_truncation(self):
        hf = MagicMock()
        HuggingFaceTokenizer(hf)
        assert hf.truncation_side == "left"

    def test_encode_truncates_without_padding(self):
        """Test encode asks for truncation at the budget and no special tokens."""
        hf = MagicMock(return_value={"input_ids": [5, 6, 7]})
        adapter = HuggingFaceTokenizer(hf)

        assert adapter.encode("hello there", 512) == [5, 6, 7]
        hf.assert_called_once_with(
            "hello there",
            add_special_tokens=False,
            truncation=True,
            max_length=512,
            padding=False
        )

    def test_decode(self):
        hf = MagicMock()
        hf.decode.return_value = "hello"
        assert HuggingFaceTokenizer(hf).decode((1, 2)) == "hello"
        hf.decode.assert_called_once_with([1, 2])

    def test_apply_chat_template(self):
        """Test the chat template is rendered as text without a generation prompt."""
        hf = MagicMock()
        hf.apply_chat_template.return_value = "<|im_start|>user\nhi<|im_end|>\n"
        messages = [{"role": "user", "content": "hi"}]

        assert HuggingFaceTokenizer(hf).apply_chat_template(messages) == "<|im_start|>user\nhi<|im_end|>\n"
        hf.apply_chat_template.assert_called_once_with(
            messages, add_generation_prompt=False, tokenize=False
        )

    @patch("turn_detection.tokenizer.AutoTokenizer")
    def test_from_pretrained(self, mock_auto):
        adapter = HuggingFaceTokenizer.from_pretrained("livekit/turn-detector")
        mock_auto.from_pretrained.assert_called_once_with("livekit/turn-detector", truncation_side="left")
        assert adapter.tokenizer is mock_auto.from_pretrained.return_value


class TestResolveEndTokenId:
    """Test suite for resolve_end_token_id."""

    def test_single_token(self, tokenizer):
        assert resolve_end_token_id(tokenizer, END_MARKER) == END_MARKER_ID

    def test_multi_token_marker_is_rejected(self):
        """Test a marker spanning several tokens is a configuration error."""
        tokenizer = MagicMock()
        tokenizer.encode.return_value = [10, 11]
        with pytest.raises(EndTokenResolutionError, match="exactly one token"):
            resolve_end_token_id(tokenizer, "<|end of turn|>")

    def test_empty_encoding_is_rejected(self):
        tokenizer = MagicMock()
        tokenizer.encode.return_value = []
        with pytest.raises(EndTokenResolutionError):
            resolve_end_token_id(tokenizer, "")


class TestEnforceBudget:
    """Test suite for enforce_budget."""

    def test_within_budget_unchanged(self):
        assert enforce_budget([1, 2, 3], 3) == [1, 2, 3]

    def test_truncation_keeps_most_recent(self):
        """Test over-budget sequences keep exactly the trailing tokens."""
        token_ids = list(range(100))
        result = enforce_budget(token_ids, 10)
        assert len(result) == 10
        assert result == token_ids[-10:]

    def test_strict_mode_raises(self):
        with pytest.raises(TokenBudgetExceededError):
            enforce_budget([1, 2, 3, 4], 2, truncate=False)
