"""
Outbound message directives produced by the state machine.
Opaque to the core; the transport decides how to render them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


MAX_BUTTONS = 3
MAX_LIST_OPTIONS = 10


class ChoiceStyle(Enum):
    """How a choice set should be presented."""
    BUTTONS = "buttons"     # Up to 3 inline buttons
    LIST = "list"           # Scrollable list, up to 10 rows


@dataclass(frozen=True)
class ChoiceOption:
    """One selectable option. `id` is what comes back as the user's reply."""
    id: str
    title: str
    description: Optional[str] = None


@dataclass(frozen=True)
class TextMessage:
    """Plain text message."""
    body: str
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class ChoiceMessage:
    """Interactive choice: buttons or list."""
    body: str
    options: tuple[ChoiceOption, ...]
    style: ChoiceStyle = ChoiceStyle.BUTTONS
    kind: str = field(default="choice", init=False)

    @classmethod
    def build(cls, body: str, options: list[ChoiceOption]) -> "ChoiceMessage":
        """Pick buttons for small sets, otherwise a list capped at MAX_LIST_OPTIONS."""
        if len(options) <= MAX_BUTTONS:
            return cls(body=body, options=tuple(options), style=ChoiceStyle.BUTTONS)
        return cls(
            body=body,
            options=tuple(options[:MAX_LIST_OPTIONS]),
            style=ChoiceStyle.LIST,
        )

    @property
    def option_ids(self) -> list[str]:
        return [option.id for option in self.options]


OutboundMessage = Union[TextMessage, ChoiceMessage]


def render_plain(message: OutboundMessage) -> str:
    """Flatten a directive into text, used for the conversation log."""
    if isinstance(message, ChoiceMessage):
        titles = " | ".join(option.title for option in message.options)
        return f"{message.body} [{titles}]"
    return message.body
