"""
Contracts for the services the resolver talks to.

The resolver never reaches into a host directly. It reads and writes pools
through a CharacterStore, asks the player through a PromptService, posts
results to a MessageLog and raises warnings through a Notifier.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from dadlands.data_models import CharacterState
    from dadlands.draw.messages import MessageKey
    from dadlands.draw.resolver import ResolutionRecord


@dataclass
class PromptButton:
    """One button on a prompt."""

    button_id: str
    label: str
    icon: str = ""


@dataclass
class PromptField:
    """
    One input on a form prompt.

    field_type is "radio", "number" or "checkbox".
    """

    name: str
    label: str
    field_type: str
    default: Any = None
    choices: list[tuple[str, str]] = field(default_factory=list)  # (value, label)
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    hint: str = ""


@dataclass
class PromptOptions:
    """Everything needed to show a modal prompt."""

    title: str
    prompt: str = ""
    buttons: list[PromptButton] = field(default_factory=list)
    fields: list[PromptField] = field(default_factory=list)
    default_button: Optional[str] = None

    def button_ids(self) -> list[str]:
        return [b.button_id for b in self.buttons]


@dataclass
class PromptResponse:
    """The button a player pressed on a form and the values they entered."""

    button_id: str
    values: dict[str, Any] = field(default_factory=dict)


class CharacterStore(Protocol):
    def get_character(self, character_id: str) -> "CharacterState": ...

    def update_pool(self, character_id: str, law: int, chaos: int) -> "CharacterState": ...


class PromptService(Protocol):
    def ask_choice(self, options: PromptOptions) -> Optional[str]:
        """Return the chosen button id, or None if the prompt was dismissed."""
        ...

    def ask_form(self, options: PromptOptions) -> Optional[PromptResponse]:
        """Return the pressed button and field values, or None if dismissed."""
        ...


class MessageLog(Protocol):
    def append(self, record: "ResolutionRecord") -> None: ...


class Notifier(Protocol):
    def warn(self, message_key: "MessageKey", message: str) -> None: ...
