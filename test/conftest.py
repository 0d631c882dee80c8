"""
Shared fixtures: static definitions and a builder for hand-made game states.
"""

import os
import random
import tempfile

# Point the API at a throwaway database before gremios.api is imported
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "gremios_test.db")

import pytest

from gremios.engine.cards import create_treasure_deck
from gremios.engine.definitions import load_static_definitions
from gremios.engine.state import GameState, GuildState, PlayerState, PHASE_ACTION
from gremios.engine.utils import PLAYER_SEATS


@pytest.fixture(scope="session")
def defs():
    return load_static_definitions()


@pytest.fixture(scope="session")
def guild_defs(defs):
    return defs[0]


@pytest.fixture(scope="session")
def event_defs(defs):
    return defs[1]


@pytest.fixture(scope="session")
def character_defs(defs):
    return defs[2]


@pytest.fixture
def make_state(guild_defs):
    """
    Build a state in the action phase without running setup.
    characters: one entry per seat (None = no character); seat 0 is human.
    """
    def _make(
        characters=(None, None, None),
        guilds=(),
        event_deck=(),
        coins=3,
        current=0,
        phase=PHASE_ACTION,
    ) -> GameState:
        players = [
            PlayerState(
                id=seat,
                name=PLAYER_SEATS[seat]["name"],
                is_ai=seat != 0,
                color=PLAYER_SEATS[seat]["color"],
                coins=coins,
                character=character,
            )
            for seat, character in enumerate(characters)
        ]
        return GameState(
            round_number=1,
            current_player=current,
            phase=phase,
            players=players,
            active_guilds=[GuildState(number=n, name=guild_defs[n].name) for n in sorted(guilds)],
            event_deck=list(event_deck),
            treasure_deck=create_treasure_deck(random.Random(0)),
        )

    return _make
