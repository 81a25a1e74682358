"""
Test helpers for the Dadlands Draw System test suite.

Provides deterministic stand-ins for the random draw and the player:
- FixedSampler returns pre-set draws in order
- ScriptedPromptService answers prompts from a script
- RecordingMessageLog / RecordingNotifier capture what the resolver posts
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from dadlands.data_models import DrawResult, TokenPool
from dadlands.draw.collaborators import PromptOptions, PromptResponse
from dadlands.draw.errors import InsufficientPoolError
from dadlands.draw.messages import MessageKey


class FixedSampler:
    """
    Sampler that returns pre-set draws.

    Usage:
        sampler = FixedSampler(DrawResult.of("law", "law", "chaos"))
        resolver = MoveResolver(store=roster, sampler=sampler)
    """

    def __init__(self, *draws: DrawResult):
        self._draws = list(draws)
        self.calls: list[tuple[TokenPool, int]] = []

    def draw(self, pool: TokenPool, count: int) -> DrawResult:
        self.calls.append((pool, count))
        if count < 0 or count > pool.total:
            raise InsufficientPoolError(count, pool.total)
        return self._draws.pop(0)


class ScriptedPromptService:
    """
    PromptService that answers from scripted lists.

    None in a script means the player dismissed that prompt. Every prompt
    shown is kept so tests can check what the player saw.
    """

    def __init__(
        self,
        choices: Optional[list[Optional[str]]] = None,
        forms: Optional[list[Optional[PromptResponse]]] = None,
    ):
        self._choices = list(choices or [])
        self._forms = list(forms or [])
        self.choice_prompts: list[PromptOptions] = []
        self.form_prompts: list[PromptOptions] = []

    def ask_choice(self, options: PromptOptions) -> Optional[str]:
        self.choice_prompts.append(options)
        return self._choices.pop(0) if self._choices else None

    def ask_form(self, options: PromptOptions) -> Optional[PromptResponse]:
        self.form_prompts.append(options)
        return self._forms.pop(0) if self._forms else None


@dataclass
class RecordingMessageLog:
    """MessageLog that keeps every record appended."""

    records: list[Any] = field(default_factory=list)

    def append(self, record: Any) -> None:
        self.records.append(record)


@dataclass
class RecordingNotifier:
    """Notifier that keeps every warning raised."""

    warnings: list[tuple[MessageKey, str]] = field(default_factory=list)

    def warn(self, message_key: MessageKey, message: str) -> None:
        self.warnings.append((message_key, message))


def draw_form(**values: Any) -> PromptResponse:
    """A submitted move form."""
    return PromptResponse(button_id="draw", values=values)
