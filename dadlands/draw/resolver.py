"""
Move Resolver for the Dadlands Draw System.

Runs one move from the player's request to the committed pool change:

    idle -> sampling -> classified -> awaiting_discard_choice -> finalizing -> persisted
                                   \\-------------------------->/

Resolution rules applied after classification:
- Defining moment: a failure (or mixed failure) loses every drawn token
- Mixed result: the player discards one drawn token of their choice;
  dismissing that prompt discards nothing
- Pool cap: a gain is dropped when the pool already holds the maximum
- Clamping: counts never go below zero
- A character left with no law is a deadbeat, with no chaos a hardass

The steps are exposed separately (begin, resolve_discard, commit) so a
host can suspend while the player chooses, and together via resolve().
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union
import logging
import threading

from dadlands.data_models import (
    MAX_POOL_TOKENS,
    CharacterState,
    DrawResult,
    FailureKind,
    MoveOutcome,
    MoveRequest,
    SpecialMove,
    TokenDelta,
    TokenPool,
    TokenType,
)
from dadlands.draw.classifier import DrawClassification, classify_draw
from dadlands.draw.collaborators import (
    CharacterStore,
    MessageLog,
    Notifier,
    PromptButton,
    PromptOptions,
    PromptService,
)
from dadlands.draw.errors import InsufficientPoolError, InvalidTransitionError
from dadlands.draw.messages import Localizer, MessageKey, localize
from dadlands.draw.sampler import TokenSampler

logger = logging.getLogger(__name__)


class ResolutionState(str, Enum):
    """Where a move is in its resolution."""

    IDLE = "idle"
    SAMPLING = "sampling"
    CLASSIFIED = "classified"
    AWAITING_DISCARD_CHOICE = "awaiting_discard_choice"
    FINALIZING = "finalizing"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class ResolutionTransition:
    """A permitted step between resolution states."""

    from_state: ResolutionState
    to_state: ResolutionState
    trigger: str


VALID_TRANSITIONS: list[ResolutionTransition] = [
    ResolutionTransition(ResolutionState.IDLE, ResolutionState.SAMPLING, "draw"),
    ResolutionTransition(ResolutionState.SAMPLING, ResolutionState.CLASSIFIED, "classify"),
    ResolutionTransition(
        ResolutionState.CLASSIFIED, ResolutionState.AWAITING_DISCARD_CHOICE, "mixed_result"
    ),
    ResolutionTransition(ResolutionState.CLASSIFIED, ResolutionState.FINALIZING, "delta_fixed"),
    ResolutionTransition(
        ResolutionState.AWAITING_DISCARD_CHOICE, ResolutionState.FINALIZING, "discard_chosen"
    ),
    ResolutionTransition(
        ResolutionState.AWAITING_DISCARD_CHOICE, ResolutionState.FINALIZING, "discard_dismissed"
    ),
    ResolutionTransition(ResolutionState.FINALIZING, ResolutionState.PERSISTED, "commit"),
]

_TRANSITION_LOOKUP: dict[tuple[ResolutionState, str], ResolutionState] = {
    (t.from_state, t.trigger): t.to_state for t in VALID_TRANSITIONS
}


@dataclass
class PendingResolution:
    """
    A move that has been drawn and classified but not yet committed.

    The delta is provisional until commit: the pool cap and clamping are
    applied against the character's pool at commit time.
    """

    character_id: str
    character_name: str
    request: MoveRequest
    starting_pool: TokenPool
    state: ResolutionState = ResolutionState.IDLE
    drawn: Optional[DrawResult] = None
    classification: Optional[DrawClassification] = None
    delta: TokenDelta = field(default_factory=TokenDelta)
    message_keys: list[MessageKey] = field(default_factory=list)
    defining_override: bool = False
    discard_choice: Optional[TokenType] = None
    history: list[ResolutionTransition] = field(default_factory=list)

    @property
    def outcome(self) -> Optional[MoveOutcome]:
        return self.classification.outcome if self.classification else None

    @property
    def awaiting_discard(self) -> bool:
        return self.state == ResolutionState.AWAITING_DISCARD_CHOICE

    def can_transition(self, trigger: str) -> bool:
        return (self.state, trigger) in _TRANSITION_LOOKUP

    def transition(self, trigger: str) -> ResolutionState:
        """
        Move to the next state.

        Raises:
            InvalidTransitionError: If the trigger is not valid from here
        """
        key = (self.state, trigger)
        if key not in _TRANSITION_LOOKUP:
            raise InvalidTransitionError(
                f"Invalid transition: Cannot trigger '{trigger}' from state '{self.state.value}'"
            )

        old_state = self.state
        self.state = _TRANSITION_LOOKUP[key]
        self.history.append(ResolutionTransition(old_state, self.state, trigger))
        self._log_to_run_log(old_state, trigger)
        return self.state

    def _log_to_run_log(self, old_state: ResolutionState, trigger: str) -> None:
        from dadlands.observability.run_log import get_run_log

        get_run_log().log_transition(
            from_state=old_state.value,
            to_state=self.state.value,
            trigger=trigger,
            context={"character_id": self.character_id},
        )


@dataclass(frozen=True)
class ResolutionRecord:
    """
    The final account of one move, posted to the shared message log.

    Write-once: build a new record rather than changing one.
    """

    character_id: str
    character_name: str
    approach: TokenType
    difficulty: int
    is_difficult: bool
    is_defining: bool
    drawn: DrawResult
    outcome: MoveOutcome
    message_keys: tuple[MessageKey, ...]
    law_change: int
    chaos_change: int
    starting_pool: TokenPool
    new_pool: TokenPool
    max_tokens_reached: bool = False
    character_failed: bool = False
    failure_kind: Optional[FailureKind] = None
    discard_choice: Optional[TokenType] = None
    special_move_name: Optional[str] = None
    special_move_description: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def delta(self) -> TokenDelta:
        """The change actually applied (after the pool cap, before clamping)."""
        return TokenDelta(law=self.law_change, chaos=self.chaos_change)

    @property
    def is_special_move(self) -> bool:
        return self.special_move_name is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "character_id": self.character_id,
            "character_name": self.character_name,
            "approach": self.approach.value,
            "difficulty": self.difficulty,
            "is_difficult": self.is_difficult,
            "is_defining": self.is_defining,
            "drawn": self.drawn.labels(),
            "outcome": self.outcome.value,
            "message_keys": [k.value for k in self.message_keys],
            "delta": self.delta.to_dict(),
            "starting_pool": self.starting_pool.to_dict(),
            "new_pool": self.new_pool.to_dict(),
            "max_tokens_reached": self.max_tokens_reached,
            "character_failed": self.character_failed,
            "failure_kind": self.failure_kind.value if self.failure_kind else None,
            "discard_choice": self.discard_choice.value if self.discard_choice else None,
            "special_move_name": self.special_move_name,
            "special_move_description": self.special_move_description,
            "timestamp": self.timestamp.isoformat(),
        }


def build_discard_prompt(pending: PendingResolution, localizer: Optional[Localizer] = None) -> PromptOptions:
    """The prompt asking which drawn token type to discard on a mixed result."""
    loc = localizer or localize
    drawn = pending.drawn
    law_drawn = drawn.law_drawn if drawn else 0
    chaos_drawn = drawn.chaos_drawn if drawn else 0
    return PromptOptions(
        title=loc(MessageKey.CHOOSE_DISCARD),
        prompt=(
            f"{loc(MessageKey.CHOOSE_DISCARD_PROMPT)}\n"
            f"{loc(MessageKey.DRAWN)}: {law_drawn} {loc(MessageKey.LAW)}, "
            f"{chaos_drawn} {loc(MessageKey.CHAOS)}"
        ),
        buttons=[
            PromptButton(TokenType.LAW.value, loc(MessageKey.DISCARD_LAW), "fas fa-balance-scale"),
            PromptButton(TokenType.CHAOS.value, loc(MessageKey.DISCARD_CHAOS), "fas fa-random"),
        ],
    )


class MoveResolver:
    """
    Resolves moves against characters held in a CharacterStore.

    One resolver serves every character; the pool read-modify-write for a
    given character is serialized by a per-character lock.
    """

    def __init__(
        self,
        store: CharacterStore,
        message_log: Optional[MessageLog] = None,
        notifier: Optional[Notifier] = None,
        sampler: Optional[TokenSampler] = None,
        max_pool_tokens: int = MAX_POOL_TOKENS,
        localizer: Optional[Localizer] = None,
    ):
        self._store = store
        self._message_log = message_log
        self._notifier = notifier
        self._sampler = sampler or TokenSampler()
        self._max_pool_tokens = max_pool_tokens
        self._localizer = localizer or localize
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def max_pool_tokens(self) -> int:
        return self._max_pool_tokens

    def _lock_for(self, character_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(character_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[character_id] = lock
            return lock

    # -------------------------------------------------------------------------
    # Phase 1: draw and classify
    # -------------------------------------------------------------------------

    def begin(
        self,
        character: CharacterState,
        request: MoveRequest,
        drawn: Optional[DrawResult] = None,
    ) -> PendingResolution:
        """
        Draw tokens and classify the move.

        Args:
            character: The character making the move
            request: Approach, difficulty and flags
            drawn: Pre-set draw (for testing and replays); sampled if None

        Returns:
            PendingResolution awaiting a discard choice or ready to commit

        Raises:
            InsufficientPoolError: If difficulty is below 1 or above the stored pool
            UnknownCharacterError: If the store has no such character
        """
        pool = self._store.get_character(character.character_id).pool
        if request.difficulty < 1 or request.difficulty > pool.total:
            raise InsufficientPoolError(request.difficulty, pool.total)

        pending = PendingResolution(
            character_id=character.character_id,
            character_name=character.name,
            request=request,
            starting_pool=pool,
        )

        pending.transition("draw")
        if drawn is None:
            drawn = self._sampler.draw(pool, request.difficulty)
        else:
            self._check_preset_draw(drawn, pool, request.difficulty)
        pending.drawn = drawn

        classification = classify_draw(drawn, request.approach, request.difficulty, request.is_difficult)
        pending.classification = classification
        pending.delta = classification.delta.copy()
        pending.message_keys = [classification.message_key]
        pending.transition("classify")

        if request.is_defining and classification.outcome.is_failure:
            pending.delta = TokenDelta(law=-classification.law_drawn, chaos=-classification.chaos_drawn)
            pending.message_keys.append(MessageKey.DEFINING_FAILURE)
            pending.defining_override = True

        if classification.outcome.is_mixed and not request.is_defining:
            pending.transition("mixed_result")
        else:
            pending.transition("delta_fixed")

        logger.debug(
            f"{character.name} drew {drawn.labels()} for {request.approach.value} "
            f"x{request.difficulty}: {classification.outcome.value}"
        )
        return pending

    @staticmethod
    def _check_preset_draw(drawn: DrawResult, pool: TokenPool, difficulty: int) -> None:
        if len(drawn) != difficulty:
            raise ValueError(f"Preset draw has {len(drawn)} tokens, difficulty is {difficulty}")
        if drawn.law_drawn > pool.law or drawn.chaos_drawn > pool.chaos:
            raise ValueError(f"Preset draw {drawn.labels()} is not possible from {pool}")

    # -------------------------------------------------------------------------
    # Phase 2: mixed-result discard
    # -------------------------------------------------------------------------

    def resolve_discard(
        self,
        pending: PendingResolution,
        choice: Optional[Union[TokenType, str]],
    ) -> PendingResolution:
        """
        Apply the player's discard choice to a mixed result.

        Args:
            pending: A resolution awaiting the discard choice
            choice: Token type to discard, or None if the prompt was dismissed

        Raises:
            InvalidTransitionError: If the resolution is not awaiting a choice
        """
        if choice is None:
            pending.transition("discard_dismissed")
            logger.debug(f"{pending.character_name} dismissed the discard prompt")
            return pending

        token_type = TokenType(choice)
        pending.transition("discard_chosen")
        pending.delta.adjust(token_type, -1)
        pending.discard_choice = token_type
        return pending

    def prompt_discard(
        self,
        pending: PendingResolution,
        prompt_service: Optional[PromptService],
    ) -> Optional[TokenType]:
        """Ask the player which token to discard; None when dismissed."""
        if prompt_service is None:
            logger.debug("No prompt service, treating discard prompt as dismissed")
            return None

        answer = prompt_service.ask_choice(build_discard_prompt(pending, self._localizer))
        if answer not in (TokenType.LAW.value, TokenType.CHAOS.value):
            return None
        return TokenType(answer)

    # -------------------------------------------------------------------------
    # Phase 3: cap, clamp, detect failure, persist
    # -------------------------------------------------------------------------

    def commit(self, pending: PendingResolution) -> ResolutionRecord:
        """
        Apply the delta to the character and post the record.

        Raises:
            InvalidTransitionError: If the resolution is not ready to commit
        """
        with self._lock_for(pending.character_id):
            if not pending.can_transition("commit"):
                raise InvalidTransitionError(
                    f"Invalid transition: Cannot trigger 'commit' from state '{pending.state.value}'"
                )

            character = self._store.get_character(pending.character_id)
            current = character.pool
            delta = pending.delta.copy()

            # Cap is measured on the pool before the change
            max_tokens_reached = False
            if delta.is_gain and current.total >= self._max_pool_tokens:
                delta = TokenDelta()
                max_tokens_reached = True

            new_law = max(0, current.law + delta.law)
            new_chaos = max(0, current.chaos + delta.chaos)

            character_failed = False
            failure_kind: Optional[FailureKind] = None
            if new_law <= 0:
                character_failed = True
                failure_kind = FailureKind.DEADBEAT
                new_law = 0
            if new_chaos <= 0:
                character_failed = True
                failure_kind = FailureKind.BOTH if failure_kind else FailureKind.HARDASS
                new_chaos = 0

            self._store.update_pool(pending.character_id, new_law, new_chaos)
            pending.transition("commit")

        request = pending.request
        record = ResolutionRecord(
            character_id=pending.character_id,
            character_name=pending.character_name,
            approach=request.approach,
            difficulty=request.difficulty,
            is_difficult=request.is_difficult,
            is_defining=request.is_defining,
            drawn=pending.drawn,
            outcome=pending.outcome,
            message_keys=tuple(pending.message_keys),
            law_change=delta.law,
            chaos_change=delta.chaos,
            starting_pool=current,
            new_pool=TokenPool(law=new_law, chaos=new_chaos),
            max_tokens_reached=max_tokens_reached,
            character_failed=character_failed,
            failure_kind=failure_kind,
            discard_choice=pending.discard_choice,
            special_move_name=request.special_move.name if request.special_move else None,
            special_move_description=request.special_move.description if request.special_move else "",
        )

        logger.info(
            f"{record.character_name} {record.outcome.value} on {record.approach.value} "
            f"x{record.difficulty}: {current} -> {record.new_pool}"
            + (f" ({failure_kind.value})" if failure_kind else "")
        )
        self._log_to_run_log(record)
        if self._message_log is not None:
            self._message_log.append(record)
        return record

    def _log_to_run_log(self, record: ResolutionRecord) -> None:
        from dadlands.observability.run_log import get_run_log

        get_run_log().log_resolution(
            character_id=record.character_id,
            character_name=record.character_name,
            approach=record.approach.value,
            difficulty=record.difficulty,
            outcome=record.outcome.value,
            delta=record.delta.to_dict(),
            new_law=record.new_pool.law,
            new_chaos=record.new_pool.chaos,
            max_tokens_reached=record.max_tokens_reached,
            character_failed=record.character_failed,
            failure_kind=record.failure_kind.value if record.failure_kind else None,
            context={"special_move": record.special_move_name} if record.special_move_name else None,
        )

    # -------------------------------------------------------------------------
    # One-shot driver
    # -------------------------------------------------------------------------

    def resolve(
        self,
        character: CharacterState,
        request: MoveRequest,
        prompt_service: Optional[PromptService] = None,
        drawn: Optional[DrawResult] = None,
    ) -> Optional[ResolutionRecord]:
        """
        Resolve a move from draw to commit.

        Args:
            character: The character making the move
            request: Approach, difficulty and flags
            prompt_service: Asked for the discard on a mixed result
            drawn: Pre-set draw (for testing); sampled if None

        Returns:
            The committed ResolutionRecord, or None if the pool was too small
        """
        with self._lock_for(character.character_id):
            try:
                pending = self.begin(character, request, drawn)
            except InsufficientPoolError as e:
                logger.warning(f"{character.name}: {e}")
                self._warn(MessageKey.NOT_ENOUGH_TOKENS)
                return None

            if pending.awaiting_discard:
                choice = self.prompt_discard(pending, prompt_service)
                self.resolve_discard(pending, choice)

            return self.commit(pending)

    def resolve_special_move(
        self,
        character: CharacterState,
        special_move: SpecialMove,
        difficulty: int,
        is_difficult: bool = False,
        is_defining: bool = False,
        prompt_service: Optional[PromptService] = None,
        drawn: Optional[DrawResult] = None,
    ) -> Optional[ResolutionRecord]:
        """Resolve a special move; its stored approach replaces the player's choice."""
        request = MoveRequest(
            approach=special_move.approach,
            difficulty=difficulty,
            is_difficult=is_difficult,
            is_defining=is_defining,
            special_move=special_move,
        )
        return self.resolve(character, request, prompt_service, drawn)

    def _warn(self, key: MessageKey) -> None:
        if self._notifier is not None:
            self._notifier.warn(key, self._localizer(key))
