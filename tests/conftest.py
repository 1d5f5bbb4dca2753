"""Shared fakes for the tokenizer and inference collaborators."""
import re
from typing import Dict, List, Sequence

import numpy as np
import pytest

from turn_detection.models import ConversationTurn, Role

END_MARKER = "<|im_end|>"
END_MARKER_ID = 2

_TOKEN_PATTERN = re.compile(r"<\|[^|]+\|>|\S+")


class FakeTokenizer:
    """Whitespace tokenizer with left truncation; special markers are one token."""

    def __init__(self):
        self.vocab: Dict[str, int] = {"<|im_start|>": 1, END_MARKER: END_MARKER_ID}
        self.calls: List[tuple] = []

    def _id(self, token: str) -> int:
        if token not in self.vocab:
            self.vocab[token] = len(self.vocab) + 10
        return self.vocab[token]

    def encode(self, text: str, max_tokens: int) -> List[int]:
        self.calls.append((text, max_tokens))
        ids = [self._id(token) for token in _TOKEN_PATTERN.findall(text)]
        return ids[-max_tokens:]

    def decode(self, token_ids: Sequence[int]) -> str:
        reverse = {v: k for k, v in self.vocab.items()}
        return " ".join(reverse[i] for i in token_ids)


class FakeRunner:
    """Returns fixed scores and remembers what it was asked to run."""

    def __init__(self, scores):
        self.scores = np.asarray(scores, dtype=np.float64)
        self.calls: List[List[int]] = []

    def run(self, token_ids: Sequence[int]) -> np.ndarray:
        self.calls.append(list(token_ids))
        return self.scores


@pytest.fixture
def tokenizer():
    return FakeTokenizer()


@pytest.fixture
def vocab_logits():
    """Vocabulary-sized logits peaking on the end marker."""
    scores = np.zeros(32)
    scores[END_MARKER_ID] = 4.0
    return scores


@pytest.fixture
def conversation():
    return [
        ConversationTurn(Role.AGENT, "Hi, how can I help you today?"),
        ConversationTurn(Role.USER, "I'd like to book a table for two"),
    ]
