"""Chat template rendering for end-of-turn prediction."""
import logging
from typing import Callable, Dict, List, Optional, Sequence

from .config import END_OF_TURN_TOKEN
from .errors import EmptyConversationError
from .models import ConversationTurn, Role

logger = logging.getLogger(__name__)

Message = Dict[str, str]
TemplateFn = Callable[[List[Message]], str]

CONTENT_PLACEHOLDER = "\u241ecurrent-turn\u241e"

DEFAULT_ROLE_LABELS: Dict[Role, str] = {
    Role.USER: "user",
    Role.AGENT: "assistant",
}


def chatml_template(messages: List[Message]) -> str:
    """Render messages in ChatML, the format the turn detector models are tuned on."""
    return "".join(
        f"<|im_start|>{message['role']}\n{message['content']}<|im_end|>\n"
        for message in messages
    )


class ChatTemplateRenderer:
    """
    Renders a conversation into the text the model continues from.

    The template is applied without a generation prompt and the result is cut
    at the end-of-message marker of the last turn, so the model is asked to
    predict that marker itself.
    """

    def __init__(
        self,
        template: Optional[TemplateFn] = None,
        end_marker: str = END_OF_TURN_TOKEN,
        role_labels: Optional[Dict[Role, str]] = None
    ):
        self.template = template or chatml_template
        self.end_marker = end_marker
        self.role_labels = role_labels or DEFAULT_ROLE_LABELS

    def to_messages(self, turns: Sequence[ConversationTurn]) -> List[Message]:
        return [
            {"role": self.role_labels[turn.role], "content": turn.content}
            for turn in turns
        ]

    def render(self, turns: Sequence[ConversationTurn]) -> str:
        """
        Render ``turns`` and truncate at the last turn's end marker.

        Raises:
            EmptyConversationError: If no turns are supplied
        """
        if not turns:
            raise EmptyConversationError("Cannot render an empty conversation")

        messages = self.to_messages(turns)
        rendered = self.template(messages)

        start = self._last_turn_offset(messages, rendered)
        cut = rendered.find(self.end_marker, start)
        text = rendered if cut == -1 else rendered[:cut]

        logger.debug(f"Conversation text formatted: {text!r}")
        return text

    def _last_turn_offset(self, messages: List[Message], rendered: str) -> int:
        """Index in ``rendered`` past which the last turn's marker is searched for."""
        content = messages[-1]["content"]

        # Text before the last turn's content does not depend on that content.
        placeholder_messages = messages[:-1] + [dict(messages[-1], content=CONTENT_PLACEHOLDER)]
        position = self.template(placeholder_messages).find(CONTENT_PLACEHOLDER)
        if position != -1 and rendered[position:position + len(content)] == content:
            return position + len(content)

        offset = 0
        if len(messages) > 1:
            history = self.template(messages[:-1])
            if rendered.startswith(history):
                offset = len(history)

        if content:
            position = rendered.rfind(content)
            if position >= offset:
                offset = position + len(content)
        return offset
