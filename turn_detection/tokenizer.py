"""Tokenizer adapter used by the turn detector."""
import logging
from typing import Any, Dict, List, Protocol, Sequence

from transformers import AutoTokenizer

from .errors import EndTokenResolutionError, TokenBudgetExceededError

logger = logging.getLogger(__name__)

TokenSequence = List[int]

# Two is enough to tell a single-token marker from a multi-token one.
_RESOLUTION_BUDGET = 2


class TokenizerAdapter(Protocol):
    """Narrow tokenizer interface the detector depends on."""

    def encode(self, text: str, max_tokens: int) -> TokenSequence:
        """Token ids for ``text``, truncated from the left to ``max_tokens``."""
        ...

    def decode(self, token_ids: Sequence[int]) -> str:
        ...


class HuggingFaceTokenizer:
    """TokenizerAdapter over a transformers tokenizer."""

    def __init__(self, tokenizer: Any):
        self.tokenizer = tokenizer
        # Recent context matters most for turn-taking, so drop the oldest tokens.
        self.tokenizer.truncation_side = "left"

    @classmethod
    def from_pretrained(cls, model_id: str, **kwargs: Any) -> "HuggingFaceTokenizer":
        return cls(AutoTokenizer.from_pretrained(model_id, truncation_side="left", **kwargs))

    def encode(self, text: str, max_tokens: int) -> TokenSequence:
        inputs = self.tokenizer(
            text,
            add_special_tokens=False,
            truncation=True,
            max_length=max_tokens,
            padding=False
        )
        return list(inputs["input_ids"])

    def decode(self, token_ids: Sequence[int]) -> str:
        return self.tokenizer.decode(list(token_ids))

    def apply_chat_template(self, messages: List[Dict[str, str]]) -> str:
        """Render messages with the tokenizer's own chat template."""
        return self.tokenizer.apply_chat_template(
            messages,
            add_generation_prompt=False,
            tokenize=False
        )


def resolve_end_token_id(tokenizer: TokenizerAdapter, marker: str) -> int:
    """
    Resolve the vocabulary id of the end-of-turn marker.

    Called once per detector; the result is shared by all estimations.

    Raises:
        EndTokenResolutionError: If the marker does not encode to exactly one token
    """
    token_ids = tokenizer.encode(marker, _RESOLUTION_BUDGET)
    if len(token_ids) != 1:
        raise EndTokenResolutionError(
            f"End-of-turn marker {marker!r} must encode to exactly one token, "
            f"got {len(token_ids)}"
        )
    logger.info(f"Resolved end-of-turn marker {marker!r} to token id {token_ids[0]}")
    return int(token_ids[0])


def enforce_budget(token_ids: Sequence[int], max_tokens: int, truncate: bool = True) -> TokenSequence:
    """
    Keep ``token_ids`` within ``max_tokens``.

    Over-budget sequences keep their trailing ``max_tokens`` ids.

    Raises:
        TokenBudgetExceededError: If the sequence is over budget and ``truncate`` is False
    """
    if len(token_ids) <= max_tokens:
        return list(token_ids)
    if not truncate:
        raise TokenBudgetExceededError(
            f"Token sequence of length {len(token_ids)} exceeds budget of {max_tokens}"
        )
    logger.warning(
        f"Tokenizer returned {len(token_ids)} tokens for a budget of {max_tokens}; "
        f"dropping the oldest {len(token_ids) - max_tokens}"
    )
    return list(token_ids[-max_tokens:])
