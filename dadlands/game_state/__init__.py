"""Game state management module."""

from dadlands.game_state.character_store import CharacterRoster, UnknownCharacterError

__all__ = [
    "CharacterRoster",
    "UnknownCharacterError",
]
