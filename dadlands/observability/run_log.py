"""
Run Log system for draw and resolution tracking.

Captures every random number, token draw, resolver state change, pool
write and finished move so a session can be inspected after the fact.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Callable
import json
import logging

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events that can be logged."""

    ROLL = "roll"  # Random integer from DiceRoller
    DRAW = "draw"  # Tokens drawn from a pool
    TRANSITION = "transition"  # Resolver state change
    RESOLUTION = "resolution"  # Committed move result
    POOL_UPDATE = "pool_update"  # Character law/chaos written
    CUSTOM = "custom"  # Custom event


@dataclass
class LogEvent:
    """Base class for all logged events."""

    # Subclasses set the correct event_type in __post_init__
    event_type: EventType = EventType.CUSTOM
    timestamp: datetime = field(default_factory=datetime.now)
    sequence_number: int = 0
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "sequence_number": self.sequence_number,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEvent":
        """Create from dictionary."""
        return cls(
            event_type=EventType(data["event_type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence_number=data.get("sequence_number", 0),
            context=data.get("context", {}),
        )

    @staticmethod
    def _base_kwargs(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "timestamp": datetime.fromisoformat(data["timestamp"]),
            "sequence_number": data.get("sequence_number", 0),
            "context": data.get("context", {}),
        }


@dataclass
class RollEvent(LogEvent):
    """A random integer drawn through DiceRoller."""

    low: int = 0
    high: int = 0
    value: int = 0
    reason: str = ""

    def __post_init__(self):
        self.event_type = EventType.ROLL

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "low": self.low,
                "high": self.high,
                "value": self.value,
                "reason": self.reason,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RollEvent":
        return cls(
            **cls._base_kwargs(data),
            low=data.get("low", 0),
            high=data.get("high", 0),
            value=data.get("value", 0),
            reason=data.get("reason", ""),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] ROLL [{self.low}-{self.high}] = {self.value} ({self.reason})"


@dataclass
class DrawEvent(LogEvent):
    """Tokens drawn without replacement from a pool."""

    law_available: int = 0
    chaos_available: int = 0
    count: int = 0
    drawn: list[str] = field(default_factory=list)
    reason: str = ""

    def __post_init__(self):
        self.event_type = EventType.DRAW

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "law_available": self.law_available,
                "chaos_available": self.chaos_available,
                "count": self.count,
                "drawn": self.drawn,
                "reason": self.reason,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DrawEvent":
        return cls(
            **cls._base_kwargs(data),
            law_available=data.get("law_available", 0),
            chaos_available=data.get("chaos_available", 0),
            count=data.get("count", 0),
            drawn=data.get("drawn", []),
            reason=data.get("reason", ""),
        )

    def __str__(self) -> str:
        return (
            f"[{self.sequence_number}] DRAW {self.count} from "
            f"(law {self.law_available}, chaos {self.chaos_available}): {self.drawn}"
        )


@dataclass
class TransitionEvent(LogEvent):
    """A resolver state transition."""

    from_state: str = ""
    to_state: str = ""
    trigger: str = ""

    def __post_init__(self):
        self.event_type = EventType.TRANSITION

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "from_state": self.from_state,
                "to_state": self.to_state,
                "trigger": self.trigger,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransitionEvent":
        return cls(
            **cls._base_kwargs(data),
            from_state=data.get("from_state", ""),
            to_state=data.get("to_state", ""),
            trigger=data.get("trigger", ""),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] TRANSITION {self.from_state} -> {self.to_state} (trigger: {self.trigger})"


@dataclass
class ResolutionEvent(LogEvent):
    """Summary of a committed move."""

    character_id: str = ""
    character_name: str = ""
    approach: str = ""
    difficulty: int = 0
    outcome: str = ""
    delta: dict[str, int] = field(default_factory=dict)
    new_law: int = 0
    new_chaos: int = 0
    max_tokens_reached: bool = False
    character_failed: bool = False
    failure_kind: Optional[str] = None

    def __post_init__(self):
        self.event_type = EventType.RESOLUTION

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "character_id": self.character_id,
                "character_name": self.character_name,
                "approach": self.approach,
                "difficulty": self.difficulty,
                "outcome": self.outcome,
                "delta": self.delta,
                "new_law": self.new_law,
                "new_chaos": self.new_chaos,
                "max_tokens_reached": self.max_tokens_reached,
                "character_failed": self.character_failed,
                "failure_kind": self.failure_kind,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolutionEvent":
        return cls(
            **cls._base_kwargs(data),
            character_id=data.get("character_id", ""),
            character_name=data.get("character_name", ""),
            approach=data.get("approach", ""),
            difficulty=data.get("difficulty", 0),
            outcome=data.get("outcome", ""),
            delta=data.get("delta", {}),
            new_law=data.get("new_law", 0),
            new_chaos=data.get("new_chaos", 0),
            max_tokens_reached=data.get("max_tokens_reached", False),
            character_failed=data.get("character_failed", False),
            failure_kind=data.get("failure_kind"),
        )

    def __str__(self) -> str:
        failed = f" FAILED ({self.failure_kind})" if self.character_failed else ""
        return (
            f"[{self.sequence_number}] MOVE {self.character_name} {self.approach} x{self.difficulty}: "
            f"{self.outcome} -> law {self.new_law}, chaos {self.new_chaos}{failed}"
        )


@dataclass
class PoolUpdateEvent(LogEvent):
    """A write of a character's law/chaos counts."""

    character_id: str = ""
    old_law: int = 0
    old_chaos: int = 0
    new_law: int = 0
    new_chaos: int = 0

    def __post_init__(self):
        self.event_type = EventType.POOL_UPDATE

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "character_id": self.character_id,
                "old_law": self.old_law,
                "old_chaos": self.old_chaos,
                "new_law": self.new_law,
                "new_chaos": self.new_chaos,
            }
        )
        return base

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PoolUpdateEvent":
        return cls(
            **cls._base_kwargs(data),
            character_id=data.get("character_id", ""),
            old_law=data.get("old_law", 0),
            old_chaos=data.get("old_chaos", 0),
            new_law=data.get("new_law", 0),
            new_chaos=data.get("new_chaos", 0),
        )

    def __str__(self) -> str:
        return (
            f"[{self.sequence_number}] POOL {self.character_id}: "
            f"({self.old_law}, {self.old_chaos}) -> ({self.new_law}, {self.new_chaos})"
        )


_EVENT_CLASSES: dict[EventType, type[LogEvent]] = {
    EventType.ROLL: RollEvent,
    EventType.DRAW: DrawEvent,
    EventType.TRANSITION: TransitionEvent,
    EventType.RESOLUTION: ResolutionEvent,
    EventType.POOL_UPDATE: PoolUpdateEvent,
}


class RunLog:
    """
    Central run log for all draw-system events.

    Singleton pattern - use get_run_log() to access.
    """

    _instance: Optional["RunLog"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._events: list[LogEvent] = []
        self._sequence: int = 0
        self._seed: Optional[int] = None
        self._session_start: datetime = datetime.now()
        self._subscribers: list[Callable[[LogEvent], None]] = []
        self._paused: bool = False

    def reset(self) -> None:
        """Reset the log for a new session."""
        self._events = []
        self._sequence = 0
        self._seed = None
        self._session_start = datetime.now()
        logger.info("RunLog reset")

    def set_seed(self, seed: int) -> None:
        """Record the RNG seed used for this session."""
        self._seed = seed
        logger.info(f"RunLog seed set: {seed}")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def pause(self) -> None:
        """Pause logging."""
        self._paused = True

    def resume(self) -> None:
        """Resume logging."""
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    def subscribe(self, callback: Callable[[LogEvent], None]) -> None:
        """Subscribe to receive events as they are logged."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[LogEvent], None]) -> None:
        """Unsubscribe from events."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _log_event(self, event: LogEvent) -> None:
        """Internal method to log an event."""
        if self._paused:
            return

        self._sequence += 1
        event.sequence_number = self._sequence
        self._events.append(event)

        # A broken subscriber must not break the move that produced the event
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.warning(f"Subscriber error: {e}")

    def log_roll(
        self,
        low: int,
        high: int,
        value: int,
        reason: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> RollEvent:
        """Log a random integer."""
        event = RollEvent(low=low, high=high, value=value, reason=reason, context=context or {})
        self._log_event(event)
        return event

    def log_draw(
        self,
        law_available: int,
        chaos_available: int,
        count: int,
        drawn: list[str],
        reason: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> DrawEvent:
        """Log a token draw."""
        event = DrawEvent(
            law_available=law_available,
            chaos_available=chaos_available,
            count=count,
            drawn=list(drawn),
            reason=reason,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_transition(
        self,
        from_state: str,
        to_state: str,
        trigger: str,
        context: Optional[dict[str, Any]] = None,
    ) -> TransitionEvent:
        """Log a resolver state transition."""
        event = TransitionEvent(
            from_state=from_state,
            to_state=to_state,
            trigger=trigger,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_resolution(
        self,
        character_id: str,
        character_name: str,
        approach: str,
        difficulty: int,
        outcome: str,
        delta: dict[str, int],
        new_law: int,
        new_chaos: int,
        max_tokens_reached: bool = False,
        character_failed: bool = False,
        failure_kind: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> ResolutionEvent:
        """Log a committed move."""
        event = ResolutionEvent(
            character_id=character_id,
            character_name=character_name,
            approach=approach,
            difficulty=difficulty,
            outcome=outcome,
            delta=dict(delta),
            new_law=new_law,
            new_chaos=new_chaos,
            max_tokens_reached=max_tokens_reached,
            character_failed=character_failed,
            failure_kind=failure_kind,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_pool_update(
        self,
        character_id: str,
        old_law: int,
        old_chaos: int,
        new_law: int,
        new_chaos: int,
        context: Optional[dict[str, Any]] = None,
    ) -> PoolUpdateEvent:
        """Log a write of a character's tokens."""
        event = PoolUpdateEvent(
            character_id=character_id,
            old_law=old_law,
            old_chaos=old_chaos,
            new_law=new_law,
            new_chaos=new_chaos,
            context=context or {},
        )
        self._log_event(event)
        return event

    def log_custom(
        self,
        event_name: str,
        details: dict[str, Any],
    ) -> LogEvent:
        """Log a custom event."""
        event = LogEvent(
            event_type=EventType.CUSTOM,
            context={"event_name": event_name, **details},
        )
        self._log_event(event)
        return event

    def get_events(
        self,
        event_type: Optional[EventType] = None,
        since_sequence: int = 0,
    ) -> list[LogEvent]:
        """
        Get logged events.

        Args:
            event_type: Filter by event type (None = all)
            since_sequence: Only events after this sequence number

        Returns:
            List of events
        """
        events = [e for e in self._events if e.sequence_number > since_sequence]
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        return events

    def get_rolls(self) -> list[RollEvent]:
        return [e for e in self._events if isinstance(e, RollEvent)]

    def get_draws(self) -> list[DrawEvent]:
        return [e for e in self._events if isinstance(e, DrawEvent)]

    def get_transitions(self) -> list[TransitionEvent]:
        return [e for e in self._events if isinstance(e, TransitionEvent)]

    def get_resolutions(self) -> list[ResolutionEvent]:
        return [e for e in self._events if isinstance(e, ResolutionEvent)]

    def get_pool_updates(self) -> list[PoolUpdateEvent]:
        return [e for e in self._events if isinstance(e, PoolUpdateEvent)]

    def get_event_count(self) -> int:
        return len(self._events)

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the run log."""
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "total_events": len(self._events),
            "rolls": len(self.get_rolls()),
            "draws": len(self.get_draws()),
            "transitions": len(self.get_transitions()),
            "resolutions": len(self.get_resolutions()),
            "pool_updates": len(self.get_pool_updates()),
            "last_sequence": self._sequence,
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize the entire log to a dictionary."""
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "sequence": self._sequence,
            "events": [e.to_dict() for e in self._events],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize the log to JSON."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def save(self, filepath: str) -> None:
        """Save the log to a file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_json())
        logger.info(f"RunLog saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "RunLog":
        """Load a log from a file into the global instance."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        log = get_run_log()
        log.reset()
        log._session_start = datetime.fromisoformat(data["session_start"])
        log._seed = data.get("seed")
        log._sequence = data.get("sequence", 0)

        for event_data in data.get("events", []):
            event_cls = _EVENT_CLASSES.get(EventType(event_data["event_type"]), LogEvent)
            log._events.append(event_cls.from_dict(event_data))

        logger.info(f"RunLog loaded from {filepath}: {len(log._events)} events")
        return log

    def format_log(
        self,
        event_types: Optional[list[EventType]] = None,
        max_events: Optional[int] = None,
    ) -> str:
        """
        Format the log as a human-readable string.

        Args:
            event_types: Filter by event types (None = all)
            max_events: Maximum number of events to include

        Returns:
            Formatted log string
        """
        lines = [
            "=== Run Log ===",
            f"Session: {self._session_start.isoformat()}",
            f"Seed: {self._seed if self._seed is not None else 'not set'}",
            f"Total Events: {len(self._events)}",
            "",
        ]

        events = self._events
        if event_types:
            events = [e for e in events if e.event_type in event_types]
        if max_events:
            events = events[-max_events:]

        for event in events:
            lines.append(str(event))

        return "\n".join(lines)


# Singleton access
_run_log: Optional[RunLog] = None


def get_run_log() -> RunLog:
    """Get the global RunLog instance."""
    global _run_log
    if _run_log is None:
        _run_log = RunLog()
    return _run_log


def reset_run_log() -> RunLog:
    """Reset and return the global RunLog instance."""
    log = get_run_log()
    log.reset()
    return log
