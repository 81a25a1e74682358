"""
Outcome classification for a draw.

Compare every drawn token to the approach:
- All match: success, gain one token of the approach
- None match: failure, discard one of the drawn opposing tokens
- Some match: mixed; a difficult challenge turns it into a failure.
  The discard for a mixed result is chosen later by the player, so the
  delta stays at zero here.
"""

from dataclasses import dataclass, field
from typing import Union

from dadlands.data_models import DrawResult, MoveOutcome, TokenDelta, TokenType
from dadlands.draw.messages import MessageKey


@dataclass
class DrawClassification:
    """Outcome of a draw plus the provisional pool change."""

    outcome: MoveOutcome
    delta: TokenDelta
    message_key: MessageKey
    law_drawn: int = 0
    chaos_drawn: int = 0
    matching: int = 0
    extra_messages: list[MessageKey] = field(default_factory=list)

    @property
    def message_keys(self) -> list[MessageKey]:
        """The outcome key followed by any qualifiers."""
        return [self.message_key, *self.extra_messages]


_MIXED_KEYS = {
    MoveOutcome.MIXED_SUCCESS: MessageKey.OUTCOME_MIXED_SUCCESS,
    MoveOutcome.MIXED_FAIL: MessageKey.OUTCOME_MIXED_FAIL,
}


def classify_draw(
    drawn: DrawResult,
    approach: Union[TokenType, str],
    difficulty: int,
    is_difficult: bool = False,
) -> DrawClassification:
    """
    Classify a draw. Pure: no I/O, no mutation of the inputs.

    Args:
        drawn: Tokens drawn for the move
        approach: The token type the move aligns with
        difficulty: Number of tokens drawn
        is_difficult: Whether mixed results count as failures

    Returns:
        DrawClassification with outcome, delta and message key
    """
    approach = TokenType(approach)
    matching = drawn.count(approach)
    non_matching = difficulty - matching
    delta = TokenDelta()

    if matching == difficulty:
        outcome = MoveOutcome.SUCCESS
        delta.adjust(approach, 1)
        key = MessageKey.OUTCOME_SUCCESS
    elif non_matching == difficulty:
        outcome = MoveOutcome.FAILURE
        delta.adjust(approach.opposite(), -1)
        key = MessageKey.OUTCOME_FAILURE
    else:
        outcome = MoveOutcome.MIXED_FAIL if is_difficult else MoveOutcome.MIXED_SUCCESS
        key = _MIXED_KEYS[outcome]

    return DrawClassification(
        outcome=outcome,
        delta=delta,
        message_key=key,
        law_drawn=drawn.law_drawn,
        chaos_drawn=drawn.chaos_drawn,
        matching=matching,
    )
