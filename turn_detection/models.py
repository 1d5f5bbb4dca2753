"""Conversation and result data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence


class Role(str, Enum):
    """Speaker of a conversation turn."""
    USER = "user"
    AGENT = "agent"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        if isinstance(value, Role):
            return value
        name = str(value).strip().lower()
        if name == "assistant":
            return cls.AGENT
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None


class ScoringMode(str, Enum):
    """How the model output is turned into a probability."""
    HEAD = "head"
    LOGITS = "logits"


@dataclass(frozen=True)
class ConversationTurn:
    """A single turn of dialogue."""
    role: Role
    content: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversationTurn":
        if "role" not in data or "content" not in data:
            raise ValueError("A turn needs both 'role' and 'content'")
        content = data["content"]
        if not isinstance(content, str):
            raise ValueError(f"Turn content must be a string, got {type(content).__name__}")
        return cls(role=Role.parse(data["role"]), content=content)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


# Chronological; the last element is the turn being scored.
Conversation = List[ConversationTurn]


@dataclass(frozen=True)
class EOUResult:
    """Outcome of one estimation call."""
    probability: float
    latency_ms: int


def parse_conversation(messages: Sequence[Mapping[str, Any]]) -> Conversation:
    """Build a conversation from ``{"role", "content"}`` mappings."""
    if not isinstance(messages, (list, tuple)):
        raise ValueError("Expected a list of messages")
    turns = []
    for message in messages:
        if not isinstance(message, Mapping):
            raise ValueError(f"Each message must be an object, got {type(message).__name__}")
        turns.append(ConversationTurn.from_dict(message))
    return turns
