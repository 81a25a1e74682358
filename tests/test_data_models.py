"""
Unit tests for the shared data structures in dadlands/data_models.py.
"""

import pytest

from dadlands.data_models import (
    DEFAULT_CHAOS,
    DEFAULT_LAW,
    MAX_POOL_TOKENS,
    CharacterState,
    DrawResult,
    MoveOutcome,
    MoveRequest,
    SpecialMove,
    TokenDelta,
    TokenPool,
    TokenType,
)


class TestTokenType:
    """Tests for TokenType."""

    def test_opposite(self):
        assert TokenType.LAW.opposite() == TokenType.CHAOS
        assert TokenType.CHAOS.opposite() == TokenType.LAW

    def test_string_values(self):
        """Token types compare equal to their labels."""
        assert TokenType("law") is TokenType.LAW
        assert TokenType.CHAOS == "chaos"


class TestMoveOutcome:
    """Tests for outcome groupings."""

    def test_mixed_outcomes(self):
        assert MoveOutcome.MIXED_SUCCESS.is_mixed
        assert MoveOutcome.MIXED_FAIL.is_mixed
        assert not MoveOutcome.SUCCESS.is_mixed
        assert not MoveOutcome.FAILURE.is_mixed

    def test_failure_outcomes(self):
        """Failure and mixed failure are the outcomes a defining moment escalates."""
        assert MoveOutcome.FAILURE.is_failure
        assert MoveOutcome.MIXED_FAIL.is_failure
        assert not MoveOutcome.MIXED_SUCCESS.is_failure

    def test_success_outcomes(self):
        assert MoveOutcome.SUCCESS.is_success
        assert MoveOutcome.MIXED_SUCCESS.is_success
        assert not MoveOutcome.MIXED_FAIL.is_success


class TestTokenPool:
    """Tests for TokenPool."""

    def test_total_and_count(self):
        pool = TokenPool(law=4, chaos=3)
        assert pool.total == 7
        assert pool.count(TokenType.LAW) == 4
        assert pool.count(TokenType.CHAOS) == 3

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            TokenPool(law=-1, chaos=3)
        with pytest.raises(ValueError):
            TokenPool(law=1, chaos=-3)

    def test_immutable(self):
        pool = TokenPool(law=1, chaos=1)
        with pytest.raises(AttributeError):
            pool.law = 5

    def test_to_dict(self):
        assert TokenPool(law=2, chaos=5).to_dict() == {"law": 2, "chaos": 5}


class TestTokenDelta:
    """Tests for TokenDelta."""

    def test_adjust(self):
        delta = TokenDelta()
        delta.adjust(TokenType.LAW, 1)
        delta.adjust(TokenType.CHAOS, -2)
        assert delta.law == 1
        assert delta.chaos == -2

    def test_is_gain(self):
        assert TokenDelta(law=1).is_gain
        assert TokenDelta(chaos=1, law=-1).is_gain
        assert not TokenDelta(law=-1).is_gain
        assert not TokenDelta().is_gain

    def test_is_zero(self):
        assert TokenDelta().is_zero
        assert not TokenDelta(chaos=-1).is_zero

    def test_copy_is_independent(self):
        delta = TokenDelta(law=1)
        copied = delta.copy()
        copied.adjust(TokenType.LAW, 1)
        assert delta.law == 1
        assert copied.law == 2


class TestCharacterState:
    """Tests for CharacterState."""

    def test_defaults(self):
        """A new dad starts with four law, three chaos and full tracks."""
        char = CharacterState(character_id="c1", name="Dad")
        assert char.law == DEFAULT_LAW == 4
        assert char.chaos == DEFAULT_CHAOS == 3
        assert char.health.value == 10
        assert char.health.max == 10
        assert char.power.value == 5
        assert char.power.max == 5

    def test_pool_snapshot(self):
        char = CharacterState(character_id="c1", name="Dad", law=2, chaos=6)
        pool = char.pool
        char.law = 9
        assert pool.law == 2

    def test_has_failed(self):
        assert CharacterState(character_id="c1", name="Dad", law=0, chaos=3).has_failed()
        assert CharacterState(character_id="c1", name="Dad", law=3, chaos=0).has_failed()
        assert not CharacterState(character_id="c1", name="Dad").has_failed()

    def test_get_special_move(self, grill_move):
        char = CharacterState(character_id="c1", name="Dad", special_moves=[grill_move])
        assert char.get_special_move("move_grill") is grill_move
        assert char.get_special_move("missing") is None

    def test_to_dict(self, grill_move):
        char = CharacterState(character_id="c1", name="Dad", special_moves=[grill_move])
        data = char.to_dict()
        assert data["law"] == 4
        assert data["special_moves"][0]["approach"] == "law"
        assert data["health"] == {"value": 10, "min": 0, "max": 10}


class TestMoveRequestAndSpecialMove:
    """Tests for string coercion on requests and moves."""

    def test_request_coerces_approach(self):
        request = MoveRequest(approach="chaos", difficulty=2)
        assert request.approach is TokenType.CHAOS
        assert not request.is_difficult
        assert not request.is_defining

    def test_special_move_defaults_to_law(self):
        move = SpecialMove(move_id="m1", name="Dad Joke")
        assert move.approach is TokenType.LAW
        assert move.description == ""

    def test_special_move_coerces_approach(self):
        move = SpecialMove(move_id="m1", name="Cannonball", approach="chaos")
        assert move.approach is TokenType.CHAOS


class TestDrawResult:
    """Tests for DrawResult."""

    def test_counts(self):
        drawn = DrawResult.of("law", "chaos", "law")
        assert len(drawn) == 3
        assert drawn.law_drawn == 2
        assert drawn.chaos_drawn == 1
        assert drawn.labels() == ["law", "chaos", "law"]

    def test_empty(self):
        drawn = DrawResult(tokens=())
        assert len(drawn) == 0
        assert drawn.law_drawn == 0


def test_pool_cap_constant():
    """Gains stop once a pool holds ten tokens."""
    assert MAX_POOL_TOKENS == 10
