"""
Pytest fixtures for the Dadlands Draw System test suite.

Provides reusable fixtures for dice, characters, the roster, the Foundry
bridge and a resolver wired to all of them.
"""

import pytest

from dadlands.data_models import CharacterState, DiceRoller, SpecialMove, TokenType
from dadlands.draw.resolver import MoveResolver
from dadlands.game_state.character_store import CharacterRoster
from dadlands.integrations.foundry.foundry_bridge import FoundryBridge
from dadlands.observability.run_log import reset_run_log


# =============================================================================
# GLOBAL STATE
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_run_log():
    """Every test starts with an empty run log."""
    reset_run_log()
    yield
    reset_run_log()


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture
def seeded_dice():
    """Provide a seeded DiceRoller for reproducible tests."""
    DiceRoller.clear_roll_log()
    DiceRoller.set_seed(42)
    yield DiceRoller()
    DiceRoller.clear_roll_log()


@pytest.fixture
def clean_dice():
    """Provide a clean DiceRoller without seed."""
    DiceRoller.clear_roll_log()
    yield DiceRoller()
    DiceRoller.clear_roll_log()


# =============================================================================
# CHARACTER FIXTURES
# =============================================================================


@pytest.fixture
def sample_dad():
    """A starting dad: four law, three chaos."""
    return CharacterState(
        character_id="dad_1",
        name="Big Rick",
        law=4,
        chaos=3,
        clan="Grillers",
    )


@pytest.fixture
def grill_move():
    """A law special move."""
    return SpecialMove(
        move_id="move_grill",
        name="Man the Grill",
        approach=TokenType.LAW,
        description="Nobody touches the tongs.",
    )


@pytest.fixture
def roster(sample_dad):
    """A roster holding the sample dad."""
    roster = CharacterRoster()
    roster.add_character(sample_dad)
    return roster


@pytest.fixture
def bridge(roster):
    """A Foundry bridge over the roster."""
    return FoundryBridge(roster)


@pytest.fixture
def resolver(roster, bridge):
    """A resolver that writes to the roster and posts to the bridge."""
    return MoveResolver(store=roster, message_log=bridge, notifier=bridge)
