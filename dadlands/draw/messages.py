"""
Message keys for everything the draw system shows a player.

Keys are stable identifiers. The host translates them; DEFAULT_MESSAGES is
the English text used when no host table is supplied.
"""

from enum import Enum
from typing import Callable, Mapping, Optional, Union


class MessageKey(str, Enum):
    """Stable identifiers for player-facing text."""

    # Outcomes
    OUTCOME_SUCCESS = "OutcomeSuccess"
    OUTCOME_FAILURE = "OutcomeFailure"
    OUTCOME_MIXED_SUCCESS = "OutcomeMixedSuccess"
    OUTCOME_MIXED_FAIL = "OutcomeMixedFail"
    DEFINING_FAILURE = "DefiningFailure"

    # Character failure and pool limits
    BECAME_HARDASS = "BecameHardass"
    BECAME_DEADBEAT = "BecameDeadbeat"
    CHARACTER_FAILED = "CharacterFailed"
    MAX_TOKENS_REACHED = "MaxTokensReached"
    NOT_ENOUGH_TOKENS = "NotEnoughTokens"

    # Dialogs and chat card labels
    MAKE_MOVE = "MakeMove"
    USE_MOVE = "UseMove"
    DRAW = "Draw"
    CANCEL = "Cancel"
    APPROACH = "Approach"
    DIFFICULTY = "Difficulty"
    DIFFICULTY_HINT = "DifficultyHint"
    DIFFICULT_CHALLENGE = "DifficultChallenge"
    DIFFICULT_HINT = "DifficultHint"
    DEFINING_MOMENT = "DefiningMoment"
    DEFINING_HINT = "DefiningHint"
    LAW = "Law"
    CHAOS = "Chaos"
    TOKENS_DRAWN = "TokensDrawn"
    OUTCOME = "Outcome"
    TOKEN_CHANGE = "TokenChange"
    NO_CHANGE = "NoChange"
    NEW_TOTALS = "NewTotals"
    DRAWN = "Drawn"
    CHOOSE_DISCARD = "ChooseDiscard"
    CHOOSE_DISCARD_PROMPT = "ChooseDiscardPrompt"
    DISCARD_LAW = "DiscardLaw"
    DISCARD_CHAOS = "DiscardChaos"


DEFAULT_MESSAGES: dict[str, str] = {
    "OutcomeSuccess": "Success! Gain a token of your approach.",
    "OutcomeFailure": "Failure. Discard one of the drawn tokens.",
    "OutcomeMixedSuccess": "Success at a cost. Choose a drawn token to discard.",
    "OutcomeMixedFail": "Failure on a difficult challenge. Choose a drawn token to discard.",
    "DefiningFailure": "Defining moment: all drawn tokens are lost!",
    "BecameHardass": "No chaos left. This dad has become a Hardass!",
    "BecameDeadbeat": "No law left. This dad has become a Deadbeat!",
    "CharacterFailed": "No law and no chaos left. This dad is done for.",
    "MaxTokensReached": "(max tokens reached)",
    "NotEnoughTokens": "You don't have enough tokens for that difficulty.",
    "MakeMove": "Make a Move",
    "UseMove": "Use Move",
    "Draw": "Draw",
    "Cancel": "Cancel",
    "Approach": "Approach",
    "Difficulty": "Difficulty",
    "DifficultyHint": "Number of tokens to draw.",
    "DifficultChallenge": "Difficult Challenge",
    "DifficultHint": "Mixed results count as failures.",
    "DefiningMoment": "Defining Moment",
    "DefiningHint": "On a failure, lose every drawn token.",
    "Law": "Law",
    "Chaos": "Chaos",
    "TokensDrawn": "Tokens Drawn",
    "Outcome": "Outcome",
    "TokenChange": "Token Change",
    "NoChange": "No change",
    "NewTotals": "New Totals",
    "Drawn": "Drawn",
    "ChooseDiscard": "Choose a Token to Discard",
    "ChooseDiscardPrompt": "Your draw was mixed. Which token do you discard?",
    "DiscardLaw": "Discard Law",
    "DiscardChaos": "Discard Chaos",
}

Localizer = Callable[[Union[MessageKey, str]], str]


def localize(key: Union[MessageKey, str], table: Optional[Mapping[str, str]] = None) -> str:
    """Look up display text for a key, falling back to the key itself."""
    name = key.value if isinstance(key, MessageKey) else key
    messages = DEFAULT_MESSAGES if table is None else table
    return messages.get(name, name)


def make_localizer(table: Optional[Mapping[str, str]] = None) -> Localizer:
    """Bind a host table into a one-argument localize callable."""
    return lambda key: localize(key, table)


def join_messages(keys: list[MessageKey], localizer: Optional[Localizer] = None) -> str:
    """Render several keys as one sentence run, as the outcome line does."""
    loc = localizer or localize
    return " ".join(loc(k) for k in keys)
