"""Foundry VTT integration."""

from dadlands.integrations.foundry.foundry_bridge import (
    FoundryBridge,
    FoundryExportMode,
    FoundryStateExport,
    FoundryEvent,
    FoundryEventType,
)

__all__ = [
    "FoundryBridge",
    "FoundryExportMode",
    "FoundryStateExport",
    "FoundryEvent",
    "FoundryEventType",
]
