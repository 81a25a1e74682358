"""
Move dialogs.

Builds the "Make a Move" and "Use Move" forms, reads the submitted values
back into a MoveRequest, and hands the request to the resolver.
"""

from typing import Any, Mapping, Optional
import logging
import re

from dadlands.data_models import CharacterState, MoveRequest, SpecialMove, TokenType
from dadlands.draw.collaborators import PromptButton, PromptField, PromptOptions, PromptService
from dadlands.draw.messages import Localizer, MessageKey, localize
from dadlands.draw.resolver import MoveResolver, ResolutionRecord

logger = logging.getLogger(__name__)

DRAW_BUTTON = "draw"
CANCEL_BUTTON = "cancel"


def _challenge_fields(character: CharacterState, loc: Localizer) -> list[PromptField]:
    return [
        PromptField(
            name="difficulty",
            label=loc(MessageKey.DIFFICULTY),
            field_type="number",
            default=1,
            min_value=1,
            max_value=character.pool.total,
            hint=loc(MessageKey.DIFFICULTY_HINT),
        ),
        PromptField(
            name="isDifficult",
            label=loc(MessageKey.DIFFICULT_CHALLENGE),
            field_type="checkbox",
            default=False,
            hint=loc(MessageKey.DIFFICULT_HINT),
        ),
        PromptField(
            name="isDefining",
            label=loc(MessageKey.DEFINING_MOMENT),
            field_type="checkbox",
            default=False,
            hint=loc(MessageKey.DEFINING_HINT),
        ),
    ]


def _buttons(loc: Localizer) -> list[PromptButton]:
    return [
        PromptButton(DRAW_BUTTON, loc(MessageKey.DRAW), "fas fa-hand-paper"),
        PromptButton(CANCEL_BUTTON, loc(MessageKey.CANCEL), "fas fa-times"),
    ]


def build_move_dialog(character: CharacterState, localizer: Optional[Localizer] = None) -> PromptOptions:
    """The generic move form: approach, difficulty and challenge flags."""
    loc = localizer or localize
    approach = PromptField(
        name="approach",
        label=loc(MessageKey.APPROACH),
        field_type="radio",
        default=TokenType.LAW.value,
        choices=[
            (TokenType.LAW.value, f"{loc(MessageKey.LAW)} ({character.law})"),
            (TokenType.CHAOS.value, f"{loc(MessageKey.CHAOS)} ({character.chaos})"),
        ],
    )
    return PromptOptions(
        title=f"{loc(MessageKey.MAKE_MOVE)}: {character.name}",
        fields=[approach, *_challenge_fields(character, loc)],
        buttons=_buttons(loc),
        default_button=DRAW_BUTTON,
    )


def build_special_move_dialog(
    character: CharacterState,
    move: SpecialMove,
    localizer: Optional[Localizer] = None,
) -> PromptOptions:
    """The special move form. The approach is fixed, so it is shown, not asked."""
    loc = localizer or localize
    approach_key = MessageKey.LAW if move.approach == TokenType.LAW else MessageKey.CHAOS
    return PromptOptions(
        title=f"{loc(MessageKey.USE_MOVE)}: {move.name}",
        prompt=(
            f"{loc(MessageKey.APPROACH)}: {loc(approach_key)} "
            f"({character.pool.count(move.approach)})"
        ),
        fields=_challenge_fields(character, loc),
        buttons=_buttons(loc),
        default_button=DRAW_BUTTON,
    )


_CHECKED = (True, 1, "1", "on", "true", "yes", "y")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_difficulty(raw: Any) -> int:
    # Leading digits count, the rest is ignored: "3x" is 3, "2.5" is 2
    if isinstance(raw, int):
        return int(raw) or 1
    match = _LEADING_INT.match(str(raw)) if raw is not None else None
    if match is None:
        return 1
    return int(match.group(1)) or 1


def _parse_checkbox(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in _CHECKED
    return raw in _CHECKED


def _parse_approach(raw: Any) -> TokenType:
    if isinstance(raw, TokenType):
        return raw
    if not raw:
        return TokenType.LAW
    try:
        return TokenType(str(raw).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown approach: {raw!r}") from None


def parse_move_form(
    values: Mapping[str, Any],
    fixed_approach: Optional[TokenType] = None,
) -> MoveRequest:
    """
    Read submitted form values into a MoveRequest.

    A missing, non-numeric or zero difficulty becomes 1. The resolver
    rejects anything still out of range. Checkboxes may arrive as booleans
    or as form strings such as "on" and "false".

    Raises:
        ValueError: If the approach is neither law nor chaos
    """
    if fixed_approach is not None:
        approach = TokenType(fixed_approach)
    else:
        approach = _parse_approach(values.get("approach"))

    return MoveRequest(
        approach=approach,
        difficulty=_parse_difficulty(values.get("difficulty")),
        is_difficult=_parse_checkbox(values.get("isDifficult", False)),
        is_defining=_parse_checkbox(values.get("isDefining", False)),
    )


def open_move_dialog(
    character: CharacterState,
    resolver: MoveResolver,
    prompt_service: PromptService,
    localizer: Optional[Localizer] = None,
) -> Optional[ResolutionRecord]:
    """
    Ask for a move and resolve it.

    Returns:
        The committed record, or None if the dialog was cancelled or the
        pool was too small
    """
    response = prompt_service.ask_form(build_move_dialog(character, localizer))
    if response is None or response.button_id != DRAW_BUTTON:
        logger.debug(f"Move dialog for {character.name} cancelled")
        return None

    request = parse_move_form(response.values)
    return resolver.resolve(character, request, prompt_service)


def open_special_move_dialog(
    character: CharacterState,
    move: SpecialMove,
    resolver: MoveResolver,
    prompt_service: PromptService,
    localizer: Optional[Localizer] = None,
) -> Optional[ResolutionRecord]:
    """Ask for a special move's difficulty and flags, then resolve it."""
    response = prompt_service.ask_form(build_special_move_dialog(character, move, localizer))
    if response is None or response.button_id != DRAW_BUTTON:
        logger.debug(f"Special move dialog for {move.name} cancelled")
        return None

    request = parse_move_form(response.values, fixed_approach=move.approach)
    return resolver.resolve_special_move(
        character,
        move,
        difficulty=request.difficulty,
        is_difficult=request.is_difficult,
        is_defining=request.is_defining,
        prompt_service=prompt_service,
    )
