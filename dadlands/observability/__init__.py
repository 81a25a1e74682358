"""
Observability for the Dadlands Draw System.

Records every roll, draw, resolver transition, pool write and committed
move so a session can be audited or saved.
"""

from dadlands.observability.run_log import (
    RunLog,
    LogEvent,
    EventType,
    RollEvent,
    DrawEvent,
    TransitionEvent,
    ResolutionEvent,
    PoolUpdateEvent,
    get_run_log,
    reset_run_log,
)

__all__ = [
    "RunLog",
    "LogEvent",
    "EventType",
    "RollEvent",
    "DrawEvent",
    "TransitionEvent",
    "ResolutionEvent",
    "PoolUpdateEvent",
    "get_run_log",
    "reset_run_log",
]
