"""
Character roster for the Dadlands Draw System.

In-memory CharacterStore: holds the characters a session knows about and
is the only place their law and chaos counts are written.
"""

from typing import Any, Optional, Union
import logging

from dadlands.data_models import (
    DEFAULT_CHAOS,
    DEFAULT_LAW,
    CharacterState,
    SpecialMove,
    TokenPool,
    TokenType,
)
from dadlands.draw.errors import DrawError

logger = logging.getLogger(__name__)


class UnknownCharacterError(DrawError):
    """Raised when the roster is asked for a character it does not hold."""

    def __init__(self, character_id: str):
        self.character_id = character_id
        super().__init__(f"Unknown character: {character_id}")


class CharacterRoster:
    """
    Characters keyed by id.

    Satisfies the CharacterStore protocol the resolver writes through.
    """

    def __init__(self):
        self._characters: dict[str, CharacterState] = {}
        self._next_character = 1
        self._next_move = 1

    # =========================================================================
    # CHARACTER MANAGEMENT
    # =========================================================================

    def add_character(self, character: CharacterState) -> None:
        """Add a character to the roster, replacing any with the same id."""
        self._characters[character.character_id] = character
        self._log_event("character_added", {"character_id": character.character_id})

    def create_character(
        self,
        name: str,
        law: int = DEFAULT_LAW,
        chaos: int = DEFAULT_CHAOS,
        **sheet: Any,
    ) -> CharacterState:
        """Create a character with a generated id and add it."""
        TokenPool(law=law, chaos=chaos)  # validates counts
        character_id = f"dad-{self._next_character}"
        while character_id in self._characters:
            self._next_character += 1
            character_id = f"dad-{self._next_character}"
        self._next_character += 1

        character = CharacterState(character_id=character_id, name=name, law=law, chaos=chaos, **sheet)
        self.add_character(character)
        return character

    def find_character(self, character_id: str) -> Optional[CharacterState]:
        """Get a character by ID, or None."""
        return self._characters.get(character_id)

    def get_character(self, character_id: str) -> CharacterState:
        """
        Get a character by ID.

        Raises:
            UnknownCharacterError: If no character has that id
        """
        character = self._characters.get(character_id)
        if character is None:
            raise UnknownCharacterError(character_id)
        return character

    def get_all_characters(self) -> list[CharacterState]:
        return list(self._characters.values())

    def remove_character(self, character_id: str) -> Optional[CharacterState]:
        """Remove a character from the roster."""
        character = self._characters.pop(character_id, None)
        if character:
            self._log_event("character_removed", {"character_id": character_id})
        return character

    def __contains__(self, character_id: str) -> bool:
        return character_id in self._characters

    def __len__(self) -> int:
        return len(self._characters)

    # =========================================================================
    # TOKENS
    # =========================================================================

    def update_pool(self, character_id: str, law: int, chaos: int) -> CharacterState:
        """
        Write a character's law and chaos counts.

        Raises:
            UnknownCharacterError: If no character has that id
            ValueError: If either count is negative
        """
        character = self.get_character(character_id)
        new_pool = TokenPool(law=law, chaos=chaos)
        old_pool = character.pool

        character.law = new_pool.law
        character.chaos = new_pool.chaos

        logger.debug(f"{character.name}: {old_pool} -> {new_pool}")
        from dadlands.observability.run_log import get_run_log

        get_run_log().log_pool_update(
            character_id=character_id,
            old_law=old_pool.law,
            old_chaos=old_pool.chaos,
            new_law=new_pool.law,
            new_chaos=new_pool.chaos,
        )
        return character

    # =========================================================================
    # SPECIAL MOVES
    # =========================================================================

    def attach_special_move(
        self,
        character_id: str,
        name: str,
        approach: Union[TokenType, str] = TokenType.LAW,
        description: str = "",
    ) -> SpecialMove:
        """Create a special move and attach it to a character."""
        character = self.get_character(character_id)
        move = SpecialMove(
            move_id=f"move-{self._next_move}",
            name=name,
            approach=approach,
            description=description,
        )
        self._next_move += 1
        character.special_moves.append(move)
        self._log_event(
            "special_move_attached",
            {"character_id": character_id, "move_id": move.move_id, "approach": move.approach.value},
        )
        return move

    def get_special_move(self, character_id: str, move_id: str) -> Optional[SpecialMove]:
        """Look up one of a character's special moves by id or by name."""
        character = self.get_character(character_id)
        move = character.get_special_move(move_id)
        if move:
            return move
        lowered = move_id.lower()
        for candidate in character.special_moves:
            if candidate.name.lower() == lowered:
                return candidate
        return None

    def remove_special_move(self, character_id: str, move_id: str) -> Optional[SpecialMove]:
        character = self.get_character(character_id)
        move = character.get_special_move(move_id)
        if move:
            character.special_moves.remove(move)
        return move

    def _log_event(self, event_name: str, details: dict[str, Any]) -> None:
        from dadlands.observability.run_log import get_run_log

        get_run_log().log_custom(event_name, details)
