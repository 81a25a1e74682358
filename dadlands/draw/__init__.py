"""Token draw and move resolution.

Provides the sampler, outcome classifier, resolver and the presentation
pieces (messages, chat card, move dialogs) for Dadlands moves.
"""

from dadlands.draw.errors import (
    DrawError,
    InsufficientPoolError,
    InvalidTransitionError,
)
from dadlands.draw.rng_adapter import DiceRngAdapter
from dadlands.draw.sampler import (
    RandomSource,
    TokenSampler,
    build_token_pool,
    draw_tokens,
    fisher_yates_shuffle,
)
from dadlands.draw.messages import (
    DEFAULT_MESSAGES,
    Localizer,
    MessageKey,
    join_messages,
    localize,
    make_localizer,
)
from dadlands.draw.classifier import DrawClassification, classify_draw
from dadlands.draw.collaborators import (
    CharacterStore,
    MessageLog,
    Notifier,
    PromptButton,
    PromptField,
    PromptOptions,
    PromptResponse,
    PromptService,
)
from dadlands.draw.resolver import (
    VALID_TRANSITIONS,
    MoveResolver,
    PendingResolution,
    ResolutionRecord,
    ResolutionState,
    ResolutionTransition,
    build_discard_prompt,
)
from dadlands.draw.chat_card import ChatCard, build_chat_card, format_change
from dadlands.draw.move_dialogs import (
    build_move_dialog,
    build_special_move_dialog,
    open_move_dialog,
    open_special_move_dialog,
    parse_move_form,
)

__all__ = [
    "DrawError",
    "InsufficientPoolError",
    "InvalidTransitionError",
    "DiceRngAdapter",
    "RandomSource",
    "TokenSampler",
    "build_token_pool",
    "draw_tokens",
    "fisher_yates_shuffle",
    "DEFAULT_MESSAGES",
    "Localizer",
    "MessageKey",
    "join_messages",
    "localize",
    "make_localizer",
    "DrawClassification",
    "classify_draw",
    "CharacterStore",
    "MessageLog",
    "Notifier",
    "PromptButton",
    "PromptField",
    "PromptOptions",
    "PromptResponse",
    "PromptService",
    "VALID_TRANSITIONS",
    "MoveResolver",
    "PendingResolution",
    "ResolutionRecord",
    "ResolutionState",
    "ResolutionTransition",
    "build_discard_prompt",
    "ChatCard",
    "build_chat_card",
    "format_change",
    "build_move_dialog",
    "build_special_move_dialog",
    "open_move_dialog",
    "open_special_move_dialog",
    "parse_move_form",
]
