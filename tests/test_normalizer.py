"""Unit tests for turn normalization."""
import pytest

from turn_detection.models import ConversationTurn, Role
from turn_detection.normalizer import normalize, normalize_conversation


class TestNormalize:
    """Test suite for normalize."""

    def test_lowercases_and_strips_apostrophes(self):
        """Test apostrophes are removed and content lower-cased."""
        turn = ConversationTurn(Role.USER, "I'm SURE it's Bob's")
        assert normalize(turn).content == "im sure its bobs"

    def test_strips_every_apostrophe(self):
        """Test all apostrophes are removed, not only the first."""
        turn = ConversationTurn(Role.USER, "don't won't can’t")
        assert normalize(turn).content == "dont wont cant"

    def test_keeps_role(self):
        turn = ConversationTurn(Role.AGENT, "Hello")
        assert normalize(turn).role is Role.AGENT

    def test_empty_content(self):
        """Test empty content normalizes to empty content."""
        assert normalize(ConversationTurn(Role.USER, "")).content == ""

    def test_returns_new_turn(self):
        """Test the input turn is never modified."""
        turn = ConversationTurn(Role.USER, "What's UP")
        result = normalize(turn)
        assert result is not turn
        assert turn.content == "What's UP"

    @pytest.mark.parametrize("content", [
        "What's the Weather like?",
        "''''",
        "ÀÉÎ l'été",
        "",
    ])
    def test_idempotent(self, content):
        """Test normalizing twice equals normalizing once."""
        turn = ConversationTurn(Role.USER, content)
        assert normalize(normalize(turn)) == normalize(turn)

    def test_normalize_conversation(self, conversation):
        result = normalize_conversation(conversation)
        assert [t.content for t in result] == [
            "hi, how can i help you today?",
            "id like to book a table for two",
        ]
        assert conversation[1].content == "I'd like to book a table for two"
