"""Text normalization applied to every turn before rendering."""
from dataclasses import replace
from typing import Iterable

from .models import Conversation, ConversationTurn

APOSTROPHES = ("'", "’")


def normalize(turn: ConversationTurn) -> ConversationTurn:
    """Return a copy of ``turn`` with apostrophes removed and content lower-cased."""
    content = turn.content
    for apostrophe in APOSTROPHES:
        content = content.replace(apostrophe, "")
    return replace(turn, content=content.lower())


def normalize_conversation(turns: Iterable[ConversationTurn]) -> Conversation:
    return [normalize(turn) for turn in turns]
