"""
Shared data structures for the Dadlands Draw System.

A character's resources are two piles of tokens, law and chaos. Moves draw
from those piles; everything the resolver reads or writes is defined here.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
import random


# =============================================================================
# ENUMS
# =============================================================================


class TokenType(str, Enum):
    """The two kinds of token a character holds."""
    LAW = "law"
    CHAOS = "chaos"

    def opposite(self) -> "TokenType":
        """The other token type."""
        return TokenType.CHAOS if self is TokenType.LAW else TokenType.LAW


class MoveOutcome(str, Enum):
    """Classification of a draw."""
    SUCCESS = "success"              # Every drawn token matched the approach
    FAILURE = "failure"              # No drawn token matched
    MIXED_SUCCESS = "mixed_success"  # Both types drawn, normal challenge
    MIXED_FAIL = "mixed_fail"        # Both types drawn, difficult challenge

    @property
    def is_mixed(self) -> bool:
        return self in (MoveOutcome.MIXED_SUCCESS, MoveOutcome.MIXED_FAIL)

    @property
    def is_failure(self) -> bool:
        """Failures are the outcomes a defining moment escalates."""
        return self in (MoveOutcome.FAILURE, MoveOutcome.MIXED_FAIL)

    @property
    def is_success(self) -> bool:
        return self in (MoveOutcome.SUCCESS, MoveOutcome.MIXED_SUCCESS)


class FailureKind(str, Enum):
    """Which pile ran dry when a character fails."""
    DEADBEAT = "deadbeat"  # No law left
    HARDASS = "hardass"    # No chaos left
    BOTH = "both"


# =============================================================================
# POOL CONSTANTS
# =============================================================================

MAX_POOL_TOKENS = 10  # Gains are discarded once the pool holds this many
DEFAULT_LAW = 4
DEFAULT_CHAOS = 3


# =============================================================================
# RANDOMIZATION
# =============================================================================


class DiceRoller:
    """
    Centralized randomization interface.
    Every random number a game mechanic uses must go through this class
    for reproducibility and logging.
    """

    _instance = None
    _seed: Optional[int] = None
    _roll_log: list = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def set_seed(cls, seed: int) -> None:
        """Set random seed for reproducibility."""
        cls._seed = seed
        random.seed(seed)

    @classmethod
    def get_seed(cls) -> Optional[int]:
        return cls._seed

    @classmethod
    def randint(cls, low: int, high: int, reason: str = "") -> int:
        """
        Return a uniformly random integer in [low, high], inclusive.

        Args:
            low: Minimum value
            high: Maximum value
            reason: Why this number is needed (for logging)

        Returns:
            The rolled value
        """
        if high < low:
            raise ValueError(f"Empty range: [{low}, {high}]")

        value = random.randint(low, high)
        record = RollRecord(low=low, high=high, value=value, reason=reason)
        cls._roll_log.append(record)
        cls._log_to_run_log(record)
        return value

    @classmethod
    def _log_to_run_log(cls, record: "RollRecord") -> None:
        # Lazy import keeps data_models free of package-level cycles
        from dadlands.observability.run_log import get_run_log

        get_run_log().log_roll(
            low=record.low,
            high=record.high,
            value=record.value,
            reason=record.reason,
        )

    @classmethod
    def get_roll_log(cls) -> list:
        """Get the complete roll log for the session."""
        return cls._roll_log.copy()

    @classmethod
    def clear_roll_log(cls) -> None:
        """Clear the roll log."""
        cls._roll_log = []


@dataclass
class RollRecord:
    """A single random integer drawn through DiceRoller."""
    low: int
    high: int
    value: int
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.low}-{self.high}] = {self.value}"


# =============================================================================
# TOKEN POOL
# =============================================================================


@dataclass(frozen=True)
class TokenPool:
    """
    Snapshot of a character's tokens.

    The character owns the live counts; a pool is what the resolver reads
    at the start of a move and writes back at commit.
    """
    law: int
    chaos: int

    def __post_init__(self):
        if self.law < 0 or self.chaos < 0:
            raise ValueError(f"Token counts cannot be negative: law={self.law}, chaos={self.chaos}")

    @property
    def total(self) -> int:
        return self.law + self.chaos

    def count(self, token_type: TokenType) -> int:
        return self.law if token_type == TokenType.LAW else self.chaos

    def to_dict(self) -> dict[str, int]:
        return {"law": self.law, "chaos": self.chaos}

    def __str__(self) -> str:
        return f"Law {self.law} / Chaos {self.chaos}"


@dataclass
class TokenDelta:
    """Pending change to a pool, one signed count per token type."""
    law: int = 0
    chaos: int = 0

    def get(self, token_type: TokenType) -> int:
        return self.law if token_type == TokenType.LAW else self.chaos

    def set(self, token_type: TokenType, amount: int) -> None:
        if token_type == TokenType.LAW:
            self.law = amount
        else:
            self.chaos = amount

    def adjust(self, token_type: TokenType, amount: int) -> None:
        self.set(token_type, self.get(token_type) + amount)

    @property
    def is_gain(self) -> bool:
        """True when either component would add tokens."""
        return self.law > 0 or self.chaos > 0

    @property
    def is_zero(self) -> bool:
        return self.law == 0 and self.chaos == 0

    def copy(self) -> "TokenDelta":
        return TokenDelta(law=self.law, chaos=self.chaos)

    def to_dict(self) -> dict[str, int]:
        return {"law": self.law, "chaos": self.chaos}


# =============================================================================
# CHARACTERS AND MOVES
# =============================================================================


@dataclass
class SpecialMove:
    """A named move whose approach is fixed when it is written."""
    move_id: str
    name: str
    approach: TokenType = TokenType.LAW
    description: str = ""

    def __post_init__(self):
        if isinstance(self.approach, str):
            self.approach = TokenType(self.approach)


@dataclass
class ResourceTrack:
    """A bounded value shown on the sheet (health, power)."""
    value: int
    min: int = 0
    max: int = 10


@dataclass
class CharacterState:
    """
    A Dadlands character.

    Only law and chaos take part in move resolution; the remaining fields
    are sheet data the host displays.
    """
    character_id: str
    name: str
    law: int = DEFAULT_LAW
    chaos: int = DEFAULT_CHAOS
    biography: str = ""
    clan: str = ""
    health: ResourceTrack = field(default_factory=lambda: ResourceTrack(value=10, min=0, max=10))
    power: ResourceTrack = field(default_factory=lambda: ResourceTrack(value=5, min=0, max=5))
    special_moves: list[SpecialMove] = field(default_factory=list)

    @property
    def pool(self) -> TokenPool:
        """Current tokens as an immutable snapshot."""
        return TokenPool(law=self.law, chaos=self.chaos)

    def get_special_move(self, move_id: str) -> Optional[SpecialMove]:
        for move in self.special_moves:
            if move.move_id == move_id:
                return move
        return None

    def has_failed(self) -> bool:
        """A character with an empty pile has become a deadbeat or a hardass."""
        return self.law <= 0 or self.chaos <= 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "character_id": self.character_id,
            "name": self.name,
            "law": self.law,
            "chaos": self.chaos,
            "biography": self.biography,
            "clan": self.clan,
            "health": {"value": self.health.value, "min": self.health.min, "max": self.health.max},
            "power": {"value": self.power.value, "min": self.power.min, "max": self.power.max},
            "special_moves": [
                {
                    "move_id": m.move_id,
                    "name": m.name,
                    "approach": m.approach.value,
                    "description": m.description,
                }
                for m in self.special_moves
            ],
        }


@dataclass
class MoveRequest:
    """
    One attempt at a move, built fresh from the dialog.

    difficulty is the number of tokens drawn and may not exceed the
    character's total pool.
    """
    approach: TokenType
    difficulty: int
    is_difficult: bool = False
    is_defining: bool = False
    special_move: Optional[SpecialMove] = None

    def __post_init__(self):
        if isinstance(self.approach, str):
            self.approach = TokenType(self.approach)


@dataclass(frozen=True)
class DrawResult:
    """Tokens drawn for one move, in draw order."""
    tokens: tuple[TokenType, ...]

    @property
    def law_drawn(self) -> int:
        return self.count(TokenType.LAW)

    @property
    def chaos_drawn(self) -> int:
        return self.count(TokenType.CHAOS)

    def count(self, token_type: TokenType) -> int:
        return sum(1 for t in self.tokens if t == token_type)

    def __len__(self) -> int:
        return len(self.tokens)

    def labels(self) -> list[str]:
        return [t.value for t in self.tokens]

    @classmethod
    def of(cls, *labels: str) -> "DrawResult":
        """Build a draw from labels, e.g. DrawResult.of("law", "chaos")."""
        return cls(tokens=tuple(TokenType(label) for label in labels))
