"""End-of-utterance estimation for voice agents."""
from .errors import (
    EOUError,
    EmptyConversationError,
    EmptyScoreVectorError,
    EndTokenResolutionError,
    InferenceBackendError,
    InvalidScoreError,
    InvalidTokenIndexError,
    TokenBudgetExceededError,
    TokenizerBackendError
)
from .models import ConversationTurn, EOUResult, Role, ScoringMode, parse_conversation
from .normalizer import normalize
from .scorer import score_from_head, score_from_logits, softmax
from .template import ChatTemplateRenderer
from .turn import ConversationTurnDetector

__all__ = [
    "ChatTemplateRenderer",
    "ConversationTurn",
    "ConversationTurnDetector",
    "EOUError",
    "EOUResult",
    "EmptyConversationError",
    "EmptyScoreVectorError",
    "EndTokenResolutionError",
    "InferenceBackendError",
    "InvalidScoreError",
    "InvalidTokenIndexError",
    "Role",
    "ScoringMode",
    "TokenBudgetExceededError",
    "TokenizerBackendError",
    "normalize",
    "parse_conversation",
    "score_from_head",
    "score_from_logits",
    "softmax",
]
