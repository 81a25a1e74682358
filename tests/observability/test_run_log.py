"""
Tests for the run log.

Tests RunLog and its integration with DiceRoller, the sampler, the roster
and the resolver.
"""

import json

import pytest

from dadlands.data_models import DiceRoller, DrawResult, MoveRequest, TokenType
from dadlands.draw.resolver import MoveResolver
from dadlands.observability.run_log import (
    DrawEvent,
    EventType,
    PoolUpdateEvent,
    ResolutionEvent,
    RollEvent,
    RunLog,
    TransitionEvent,
    get_run_log,
    reset_run_log,
)
from tests.helpers import FixedSampler


class TestRunLog:
    """Tests for the RunLog class."""

    def test_singleton_pattern(self):
        """RunLog should be a singleton."""
        assert get_run_log() is get_run_log()
        assert RunLog() is get_run_log()

    def test_log_roll_event(self):
        event = get_run_log().log_roll(low=0, high=6, value=4, reason="swap")

        assert event.event_type == EventType.ROLL
        assert (event.low, event.high, event.value) == (0, 6, 4)
        assert event.sequence_number == 1

    def test_log_draw_event(self):
        event = get_run_log().log_draw(law_available=4, chaos_available=3, count=2, drawn=["law", "chaos"])

        assert event.event_type == EventType.DRAW
        assert event.drawn == ["law", "chaos"]

    def test_log_transition_event(self):
        event = get_run_log().log_transition(from_state="idle", to_state="sampling", trigger="draw")

        assert event.event_type == EventType.TRANSITION
        assert event.trigger == "draw"

    def test_log_custom_event(self):
        event = get_run_log().log_custom("character_added", {"character_id": "dad_1"})

        assert event.event_type == EventType.CUSTOM
        assert event.context == {"event_name": "character_added", "character_id": "dad_1"}

    def test_sequence_numbers_increment(self):
        log = get_run_log()
        e1 = log.log_roll(0, 1, 1)
        e2 = log.log_roll(0, 1, 0)
        e3 = log.log_transition("a", "b", "trigger")

        assert [e.sequence_number for e in (e1, e2, e3)] == [1, 2, 3]

    def test_get_events_filters(self):
        log = get_run_log()
        log.log_roll(0, 1, 1)
        log.log_transition("a", "b", "t")
        log.log_roll(0, 1, 0)

        assert len(log.get_events(EventType.ROLL)) == 2
        assert len(log.get_events(since_sequence=2)) == 1
        assert len(log.get_rolls()) == 2
        assert len(log.get_transitions()) == 1

    def test_pause_and_resume(self):
        log = get_run_log()
        log.pause()
        assert log.is_paused()
        log.log_roll(0, 1, 1)
        log.resume()
        log.log_roll(0, 1, 1)

        assert log.get_event_count() == 1

    def test_subscribers(self):
        log = get_run_log()
        seen = []
        log.subscribe(seen.append)
        log.log_roll(0, 1, 1)
        log.unsubscribe(seen.append)
        log.log_roll(0, 1, 1)

        assert len(seen) == 1
        assert isinstance(seen[0], RollEvent)

    def test_failing_subscriber_does_not_break_logging(self):
        log = get_run_log()

        def broken(event):
            raise RuntimeError("subscriber down")

        log.subscribe(broken)
        try:
            log.log_roll(0, 1, 1)
        finally:
            log.unsubscribe(broken)

        assert log.get_event_count() == 1

    def test_reset(self):
        log = get_run_log()
        log.set_seed(5)
        log.log_roll(0, 1, 1)

        reset_run_log()

        assert log.get_event_count() == 0
        assert log.get_seed() is None

    def test_summary(self):
        log = get_run_log()
        log.set_seed(42)
        log.log_roll(0, 1, 1)
        log.log_pool_update("dad_1", 4, 3, 5, 3)

        summary = log.get_summary()
        assert summary["seed"] == 42
        assert summary["total_events"] == 2
        assert summary["rolls"] == 1
        assert summary["pool_updates"] == 1

    def test_format_log(self):
        log = get_run_log()
        log.log_transition("idle", "sampling", "draw")

        text = log.format_log()
        assert "=== Run Log ===" in text
        assert "TRANSITION idle -> sampling" in text

    def test_format_log_filters_and_limits(self):
        log = get_run_log()
        for value in range(5):
            log.log_roll(0, 9, value)
        log.log_transition("a", "b", "t")

        text = log.format_log(event_types=[EventType.ROLL], max_events=2)
        assert "= 3" in text
        assert "= 4" in text
        assert "= 0 " not in text
        assert "TRANSITION" not in text


class TestSerialization:
    """to_json / save / load."""

    def test_to_json(self):
        log = get_run_log()
        log.log_draw(4, 3, 1, ["law"])

        data = json.loads(log.to_json())
        assert data["events"][0]["event_type"] == "draw"
        assert data["events"][0]["drawn"] == ["law"]

    def test_save_and_load(self, tmp_path):
        log = get_run_log()
        log.set_seed(11)
        log.log_roll(0, 3, 2, "swap")
        log.log_draw(4, 3, 2, ["law", "chaos"])
        log.log_transition("idle", "sampling", "draw")
        log.log_resolution(
            character_id="dad_1",
            character_name="Big Rick",
            approach="law",
            difficulty=2,
            outcome="mixed_success",
            delta={"law": 0, "chaos": -1},
            new_law=4,
            new_chaos=2,
        )
        log.log_pool_update("dad_1", 4, 3, 4, 2)
        path = tmp_path / "run.json"
        log.save(str(path))

        reset_run_log()
        loaded = RunLog.load(str(path))

        assert loaded.get_seed() == 11
        assert loaded.get_event_count() == 5
        types = [type(e) for e in loaded.get_events()]
        assert types == [RollEvent, DrawEvent, TransitionEvent, ResolutionEvent, PoolUpdateEvent]
        resolution = loaded.get_resolutions()[0]
        assert resolution.delta == {"law": 0, "chaos": -1}
        assert resolution.character_name == "Big Rick"


class TestIntegration:
    """Events produced by the rest of the system."""

    def test_dice_rolls_logged(self, clean_dice):
        DiceRoller.randint(0, 3, "check")
        assert get_run_log().get_rolls()[0].reason == "check"

    def test_resolution_trail(self, roster, sample_dad):
        """One committed move leaves transitions, a pool write and a resolution."""
        resolver = MoveResolver(store=roster, sampler=FixedSampler(DrawResult.of("law", "law")))
        resolver.resolve(sample_dad, MoveRequest(TokenType.LAW, 2))

        summary = get_run_log().get_summary()
        assert summary["transitions"] == 4
        assert summary["pool_updates"] == 1
        assert summary["resolutions"] == 1

    def test_failure_recorded(self, roster, sample_dad):
        roster.update_pool(sample_dad.character_id, 1, 3)
        resolver = MoveResolver(store=roster, sampler=FixedSampler(DrawResult.of("law")))
        resolver.resolve(sample_dad, MoveRequest(TokenType.CHAOS, 1))

        resolution = get_run_log().get_resolutions()[0]
        assert resolution.character_failed
        assert resolution.failure_kind == "deadbeat"
        assert "FAILED (deadbeat)" in str(resolution)
