"""
Deterministic RNG adapter for the token sampler.

The sampler accepts any source exposing randint(a, b), the same surface as
random.Random. This adapter provides that surface on top of DiceRoller so
draws made during play are:
- Reproducible via DiceRoller.set_seed
- Recorded in the roll log and the run log
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from dadlands.data_models import DiceRoller


class DiceRngAdapter:
    """
    Adapter that makes DiceRoller usable wherever a random.Random is expected.

    Usage:
        from dadlands.draw.rng_adapter import DiceRngAdapter
        from dadlands.draw.sampler import TokenSampler

        sampler = TokenSampler(rng=DiceRngAdapter(reason_prefix="Draw"))
    """

    def __init__(
        self,
        reason_prefix: str = "Draw",
        dice_roller: Optional["DiceRoller"] = None,
    ):
        """
        Initialize the adapter.

        Args:
            reason_prefix: Prefix for roll reason logging
            dice_roller: Optional DiceRoller instance. If None, uses singleton.
        """
        self._reason_prefix = reason_prefix
        self._dice_roller = dice_roller
        self._roll_count = 0

    def _get_dice_roller(self) -> "DiceRoller":
        if self._dice_roller is not None:
            return self._dice_roller
        from dadlands.data_models import DiceRoller
        return DiceRoller()

    def _make_reason(self, context: str) -> str:
        self._roll_count += 1
        return f"{self._reason_prefix}: {context} (roll #{self._roll_count})"

    def randint(self, a: int, b: int) -> int:
        """
        Return random integer in range [a, b], inclusive.

        The shuffle asks for one of these per swap position.
        """
        dice = self._get_dice_roller()
        reason = self._make_reason(f"swap index for position {b}" if a == 0 else f"range({a}-{b})")
        return dice.randint(a, b, reason)

    @property
    def roll_count(self) -> int:
        """Number of rolls made through this adapter."""
        return self._roll_count

    def reset_count(self) -> None:
        self._roll_count = 0
