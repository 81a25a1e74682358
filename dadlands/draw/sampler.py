"""
Token sampling for the Draw System.

A move draws `count` tokens without replacement from the character's pool.
The pool is laid out as a flat list (all law tokens, then all chaos tokens),
shuffled with Fisher-Yates, and the first `count` tokens are taken.
"""

import logging
from typing import Optional, Protocol

from dadlands.data_models import DrawResult, TokenPool, TokenType
from dadlands.draw.errors import InsufficientPoolError
from dadlands.draw.rng_adapter import DiceRngAdapter

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with random.Random's randint: DiceRngAdapter, random.Random."""

    def randint(self, a: int, b: int) -> int: ...


def build_token_pool(pool: TokenPool) -> list[TokenType]:
    """Lay the pool out as one token per entry, law first."""
    return [TokenType.LAW] * pool.law + [TokenType.CHAOS] * pool.chaos


def fisher_yates_shuffle(tokens: list, rng: RandomSource) -> list:
    """
    Shuffle in place and return the same list.

    For i from the last index down to 1, swap element i with a uniformly
    chosen element at index <= i.
    """
    for i in range(len(tokens) - 1, 0, -1):
        j = rng.randint(0, i)
        tokens[i], tokens[j] = tokens[j], tokens[i]
    return tokens


class TokenSampler:
    """Draws tokens from a pool using an injectable random source."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self._rng = rng or DiceRngAdapter(reason_prefix="Draw")

    def draw(self, pool: TokenPool, count: int) -> DrawResult:
        """
        Draw `count` tokens without replacement.

        Args:
            pool: The tokens available
            count: How many to draw

        Returns:
            DrawResult with exactly `count` tokens in draw order

        Raises:
            InsufficientPoolError: If count is negative or exceeds the pool
        """
        if count < 0 or count > pool.total:
            raise InsufficientPoolError(count, pool.total)

        tokens = fisher_yates_shuffle(build_token_pool(pool), self._rng)
        result = DrawResult(tokens=tuple(tokens[:count]))

        logger.debug(f"Drew {count} from {pool}: {result.labels()}")
        self._log_to_run_log(pool, count, result)
        return result

    def _log_to_run_log(self, pool: TokenPool, count: int, result: DrawResult) -> None:
        from dadlands.observability.run_log import get_run_log

        get_run_log().log_draw(
            law_available=pool.law,
            chaos_available=pool.chaos,
            count=count,
            drawn=result.labels(),
        )


def draw_tokens(pool: TokenPool, count: int, rng: Optional[RandomSource] = None) -> DrawResult:
    """
    Draw tokens from a pool.

    Convenience function that builds a one-off sampler.
    """
    return TokenSampler(rng).draw(pool, count)
