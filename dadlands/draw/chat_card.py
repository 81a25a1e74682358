"""
Chat card for a resolved move.

Turns a ResolutionRecord into the fields a host's chat template renders,
plus a plain-text rendering for consoles and logs.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from dadlands.data_models import FailureKind, TokenType
from dadlands.draw.messages import Localizer, MessageKey, join_messages, localize
from dadlands.draw.resolver import ResolutionRecord


_FAILURE_KEYS = {
    FailureKind.DEADBEAT: MessageKey.BECAME_DEADBEAT,
    FailureKind.HARDASS: MessageKey.BECAME_HARDASS,
    FailureKind.BOTH: MessageKey.CHARACTER_FAILED,
}

_APPROACH_KEYS = {
    TokenType.LAW: MessageKey.LAW,
    TokenType.CHAOS: MessageKey.CHAOS,
}


@dataclass
class ChatCard:
    """Display fields for one resolution."""

    title: str
    description: str
    approach_label: str
    difficulty: int
    tags: list[str] = field(default_factory=list)
    drawn_labels: list[str] = field(default_factory=list)
    law_drawn: int = 0
    chaos_drawn: int = 0
    outcome_class: str = "failure"
    outcome_text: str = ""
    change_text: str = ""
    new_law: int = 0
    new_chaos: int = 0
    max_tokens_text: str = ""
    failure_text: str = ""
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "approach": self.approach_label,
            "difficulty": self.difficulty,
            "tags": list(self.tags),
            "drawn": list(self.drawn_labels),
            "law_drawn": self.law_drawn,
            "chaos_drawn": self.chaos_drawn,
            "outcome_class": self.outcome_class,
            "outcome_text": self.outcome_text,
            "change_text": self.change_text,
            "new_law": self.new_law,
            "new_chaos": self.new_chaos,
            "max_tokens_text": self.max_tokens_text,
            "failure_text": self.failure_text,
        }

    def to_text(self) -> str:
        """Render as a plain-text block."""
        label = self.labels.get
        lines = [f"=== {self.title} ==="]
        if self.description:
            lines.append(self.description)

        header = f"{label('approach', 'Approach')}: {self.approach_label}  {label('difficulty', 'Difficulty')}: {self.difficulty}"
        if self.tags:
            header += f"  [{', '.join(self.tags)}]"
        lines.append(header)

        lines.append(
            f"{label('tokens_drawn', 'Tokens Drawn')}: {' '.join(self.drawn_labels)} "
            f"({self.law_drawn} {label('law', 'Law')}, {self.chaos_drawn} {label('chaos', 'Chaos')})"
        )
        lines.append(f"{label('outcome', 'Outcome')} ({self.outcome_class}): {self.outcome_text}")

        change = f"{label('token_change', 'Token Change')}: {self.change_text}"
        if self.max_tokens_text:
            change += f" {self.max_tokens_text}"
        lines.append(change)

        lines.append(
            f"{label('new_totals', 'New Totals')}: {label('law', 'Law')} {self.new_law}, "
            f"{label('chaos', 'Chaos')} {self.new_chaos}"
        )
        if self.failure_text:
            lines.append(f"!! {self.failure_text}")
        return "\n".join(lines)


def format_change(law_change: int, chaos_change: int, localizer: Optional[Localizer] = None) -> str:
    """Signed change text, e.g. "Law: +1 Chaos: -1", or the no-change text."""
    loc = localizer or localize
    parts = []
    if law_change != 0:
        parts.append(f"{loc(MessageKey.LAW)}: {law_change:+d}")
    if chaos_change != 0:
        parts.append(f"{loc(MessageKey.CHAOS)}: {chaos_change:+d}")
    return " ".join(parts) if parts else loc(MessageKey.NO_CHANGE)


def failure_message_key(kind: Optional[FailureKind]) -> Optional[MessageKey]:
    return _FAILURE_KEYS.get(kind) if kind else None


def build_chat_card(record: ResolutionRecord, localizer: Optional[Localizer] = None) -> ChatCard:
    """
    Build the chat card for a committed resolution.

    Args:
        record: The committed resolution
        localizer: Key-to-text lookup; English defaults if None

    Returns:
        ChatCard ready to post
    """
    loc = localizer or localize

    move_name = record.special_move_name or loc(MessageKey.MAKE_MOVE)
    tags = []
    if record.is_difficult:
        tags.append(loc(MessageKey.DIFFICULT_CHALLENGE))
    if record.is_defining:
        tags.append(loc(MessageKey.DEFINING_MOMENT))

    failure_key = failure_message_key(record.failure_kind)

    return ChatCard(
        title=f"{record.character_name} - {move_name}",
        description=record.special_move_description,
        approach_label=loc(_APPROACH_KEYS[record.approach]),
        difficulty=record.difficulty,
        tags=tags,
        drawn_labels=[loc(_APPROACH_KEYS[t]) for t in record.drawn.tokens],
        law_drawn=record.drawn.law_drawn,
        chaos_drawn=record.drawn.chaos_drawn,
        outcome_class="success" if "success" in record.outcome.value else "failure",
        outcome_text=join_messages(list(record.message_keys), loc),
        change_text=format_change(record.law_change, record.chaos_change, loc),
        new_law=record.new_pool.law,
        new_chaos=record.new_pool.chaos,
        max_tokens_text=loc(MessageKey.MAX_TOKENS_REACHED) if record.max_tokens_reached else "",
        failure_text=loc(failure_key) if failure_key else "",
        labels={
            "approach": loc(MessageKey.APPROACH),
            "difficulty": loc(MessageKey.DIFFICULTY),
            "tokens_drawn": loc(MessageKey.TOKENS_DRAWN),
            "outcome": loc(MessageKey.OUTCOME),
            "token_change": loc(MessageKey.TOKEN_CHANGE),
            "new_totals": loc(MessageKey.NEW_TOTALS),
            "law": loc(MessageKey.LAW),
            "chaos": loc(MessageKey.CHAOS),
        },
    )
