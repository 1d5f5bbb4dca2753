"""Error taxonomy for end-of-utterance estimation.

Every error can carry the name of the pipeline stage it came from. The
detector fills that in on the way out, so callers can tell a rendering
problem from a model backend failure without parsing messages.
"""
from typing import Optional


class EOUError(Exception):
    """Base class for all estimation errors."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class EmptyConversationError(EOUError):
    """Raised when there are no turns to estimate over."""


class TokenBudgetExceededError(EOUError):
    """Raised when a token sequence is over budget and truncation is disabled."""


class EmptyScoreVectorError(EOUError):
    """Raised when the model returned no scores."""


class InvalidTokenIndexError(EOUError):
    """Raised when the end token id does not index into the score vector."""


class InvalidScoreError(EOUError):
    """Raised for NaN/inf scores or a head score that is not a probability."""


class EndTokenResolutionError(EOUError):
    """Raised when the end-of-turn marker does not map to exactly one token."""


class TokenizerBackendError(EOUError):
    """Wraps an unexpected failure from the tokenizer backend."""


class InferenceBackendError(EOUError):
    """Wraps any failure from the inference runner."""
