"""
Foundry VTT Integration Bridge.

The seam between the draw system and a Foundry VTT world. The bridge is
the resolver's MessageLog and Notifier: committed moves become chat cards
and actor updates, warnings become notifications. Everything is queued as
socket messages for the host to send.

Supports two export modes:
- Snapshot mode: Full character state each export
- Delta mode: Only the characters that changed since the last export
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING
import json
import copy
import logging

from dadlands.draw.chat_card import build_chat_card
from dadlands.draw.messages import Localizer, MessageKey, localize

if TYPE_CHECKING:
    from dadlands.draw.resolver import ResolutionRecord
    from dadlands.game_state.character_store import CharacterRoster

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FoundryExportMode(str, Enum):
    """Export mode for Foundry integration."""
    SNAPSHOT = "snapshot"  # Full state each export
    DELTA = "delta"  # Only changes


class FoundryEventType(str, Enum):
    """Types of events sent to Foundry."""
    CHAT_MESSAGE = "chat_message"
    ACTOR_UPDATE = "actor_update"
    NOTIFICATION = "notification"


@dataclass
class FoundryEvent:
    """
    An event to be sent to Foundry VTT.

    Matches Foundry's socket message format.
    """
    event_type: FoundryEventType
    data: dict[str, Any]
    timestamp: str = field(default_factory=_utc_now)
    source: str = "dadlands"

    def to_socket_message(self) -> dict[str, Any]:
        """Convert to Foundry socket message format."""
        return {
            "type": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp,
            "source": self.source,
        }


@dataclass
class FoundryStateExport:
    """
    State export for Foundry.

    Contains the character sheets plus any events queued since the last
    export.
    """
    version: int = 1
    mode: str = "snapshot"
    timestamp: str = field(default_factory=_utc_now)

    characters: list[dict[str, Any]] = field(default_factory=list)
    removed_characters: list[str] = field(default_factory=list)

    # Pending events
    events: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class FoundryBridge:
    """
    Bridge between the draw system and Foundry VTT.

    Handles:
    - Chat cards and actor updates for committed moves
    - Notifications for warnings
    - State export (snapshot or delta mode)
    """

    def __init__(
        self,
        roster: CharacterRoster,
        mode: FoundryExportMode = FoundryExportMode.SNAPSHOT,
        localizer: Optional[Localizer] = None,
    ):
        self.roster = roster
        self.mode = mode
        self._localizer = localizer or localize

        # For delta mode
        self._last_state: Optional[dict[str, dict[str, Any]]] = None
        self._pending_events: list[FoundryEvent] = []
        self._records: list[ResolutionRecord] = []

    # -------------------------------------------------------------------------
    # MessageLog and Notifier
    # -------------------------------------------------------------------------

    def append(self, record: ResolutionRecord) -> None:
        """Post a committed move: its chat card, then the actor's new tokens."""
        self._records.append(record)
        card = build_chat_card(record, self._localizer)
        self.emit_chat(speaker=record.character_name, content=card.to_dict(), message_type="move")
        self.emit_actor_update(
            record.character_id,
            {"system.law": record.new_pool.law, "system.chaos": record.new_pool.chaos},
        )

    def warn(self, message_key: MessageKey, message: str) -> None:
        """Queue a warning notification."""
        logger.debug(f"Notification: {message}")
        self._pending_events.append(FoundryEvent(
            event_type=FoundryEventType.NOTIFICATION,
            data={
                "level": "warn",
                "key": message_key.value if isinstance(message_key, MessageKey) else str(message_key),
                "message": message,
            }
        ))

    def get_records(self) -> list[ResolutionRecord]:
        """Every record posted through this bridge, oldest first."""
        return list(self._records)

    # -------------------------------------------------------------------------
    # State export
    # -------------------------------------------------------------------------

    def export_state(self) -> FoundryStateExport:
        """
        Export current state for Foundry.

        In snapshot mode, exports full state.
        In delta mode, exports only changes since last export.
        """
        current = self._build_current_state()
        by_id = {c["character_id"]: c for c in current.characters}

        if self.mode == FoundryExportMode.DELTA and self._last_state is not None:
            delta_export = self._compute_delta(self._last_state, current)
            delta_export.mode = "delta"
            self._last_state = copy.deepcopy(by_id)
            return delta_export

        self._last_state = copy.deepcopy(by_id)
        current.mode = "snapshot"
        return current

    def _build_current_state(self) -> FoundryStateExport:
        export = FoundryStateExport()
        export.characters = self._export_characters()

        export.events = [e.to_socket_message() for e in self._pending_events]
        self._pending_events = []
        return export

    def _export_characters(self) -> list[dict[str, Any]]:
        characters = []
        for char in self.roster.get_all_characters():
            char_data = char.to_dict()
            char_data["total_tokens"] = char.pool.total
            char_data["has_failed"] = char.has_failed()
            characters.append(char_data)
        return characters

    def _compute_delta(
        self,
        old_state: dict[str, dict[str, Any]],
        new_state: FoundryStateExport
    ) -> FoundryStateExport:
        """
        Compute delta between old and new state.

        Only includes characters that have changed or been removed.
        """
        delta = FoundryStateExport()
        delta.timestamp = new_state.timestamp

        current_ids = set()
        for char_data in new_state.characters:
            current_ids.add(char_data["character_id"])
            if old_state.get(char_data["character_id"]) != char_data:
                delta.characters.append(char_data)

        delta.removed_characters = sorted(set(old_state) - current_ids)

        # Always include events
        delta.events = new_state.events
        return delta

    # -------------------------------------------------------------------------
    # Event helpers
    # -------------------------------------------------------------------------

    def emit_chat(self, speaker: str, content: Any, message_type: str = "ic") -> None:
        """Emit a chat message event."""
        self._pending_events.append(FoundryEvent(
            event_type=FoundryEventType.CHAT_MESSAGE,
            data={
                "speaker": speaker,
                "content": content,
                "type": message_type,
            }
        ))

    def emit_actor_update(self, actor_id: str, changes: dict[str, Any]) -> None:
        """Emit an actor update event."""
        self._pending_events.append(FoundryEvent(
            event_type=FoundryEventType.ACTOR_UPDATE,
            data={
                "actor_id": actor_id,
                "changes": changes,
            }
        ))

    def get_pending_events(self) -> list[FoundryEvent]:
        return list(self._pending_events)

    def clear_pending_events(self) -> list[FoundryEvent]:
        """Clear and return pending events."""
        events = self._pending_events
        self._pending_events = []
        return events
