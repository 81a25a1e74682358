"""
Unit tests for outcome classification in dadlands/draw/classifier.py.
"""

import pytest

from dadlands.data_models import DrawResult, MoveOutcome, TokenType
from dadlands.draw.classifier import classify_draw
from dadlands.draw.messages import MessageKey


class TestSuccess:
    """Every drawn token matches the approach."""

    def test_law_success_gains_law(self):
        result = classify_draw(DrawResult.of("law", "law", "law"), TokenType.LAW, 3)
        assert result.outcome == MoveOutcome.SUCCESS
        assert result.delta.law == 1
        assert result.delta.chaos == 0
        assert result.message_key == MessageKey.OUTCOME_SUCCESS

    def test_chaos_success_gains_chaos(self):
        result = classify_draw(DrawResult.of("chaos"), "chaos", 1)
        assert result.outcome == MoveOutcome.SUCCESS
        assert result.delta.chaos == 1
        assert result.delta.law == 0

    def test_difficult_does_not_affect_success(self):
        result = classify_draw(DrawResult.of("law", "law"), TokenType.LAW, 2, is_difficult=True)
        assert result.outcome == MoveOutcome.SUCCESS


class TestFailure:
    """No drawn token matches the approach."""

    def test_law_failure_discards_chaos(self):
        result = classify_draw(DrawResult.of("chaos", "chaos", "chaos"), TokenType.LAW, 3)
        assert result.outcome == MoveOutcome.FAILURE
        assert result.delta.chaos == -1
        assert result.delta.law == 0
        assert result.message_key == MessageKey.OUTCOME_FAILURE

    def test_chaos_failure_discards_law(self):
        result = classify_draw(DrawResult.of("law", "law"), TokenType.CHAOS, 2)
        assert result.outcome == MoveOutcome.FAILURE
        assert result.delta.law == -1
        assert result.delta.chaos == 0


class TestMixed:
    """Both token types drawn."""

    def test_mixed_success(self):
        result = classify_draw(DrawResult.of("law", "chaos"), TokenType.LAW, 2)
        assert result.outcome == MoveOutcome.MIXED_SUCCESS
        assert result.delta.is_zero
        assert result.message_key == MessageKey.OUTCOME_MIXED_SUCCESS

    def test_difficult_makes_mixed_fail(self):
        result = classify_draw(DrawResult.of("law", "chaos", "law"), TokenType.LAW, 3, is_difficult=True)
        assert result.outcome == MoveOutcome.MIXED_FAIL
        assert result.delta.is_zero
        assert result.message_key == MessageKey.OUTCOME_MIXED_FAIL

    def test_counts_recorded(self):
        result = classify_draw(DrawResult.of("law", "chaos", "law"), TokenType.CHAOS, 3)
        assert result.law_drawn == 2
        assert result.chaos_drawn == 1
        assert result.matching == 1
        assert result.message_keys == [MessageKey.OUTCOME_MIXED_SUCCESS]


class TestPurity:
    """Classification has no side effects and is deterministic."""

    @pytest.mark.parametrize(
        "labels,approach",
        [
            (("law", "law"), TokenType.LAW),
            (("chaos", "law"), TokenType.CHAOS),
            (("chaos",), TokenType.LAW),
        ],
    )
    def test_repeatable(self, labels, approach):
        drawn = DrawResult.of(*labels)
        first = classify_draw(drawn, approach, len(labels))
        second = classify_draw(drawn, approach, len(labels))
        assert first == second

    def test_does_not_touch_draw(self):
        drawn = DrawResult.of("law", "chaos")
        classify_draw(drawn, TokenType.LAW, 2)
        assert drawn.labels() == ["law", "chaos"]
