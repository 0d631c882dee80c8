"""
Decision providers for AI seats.
play_ai_turn only needs an object with decide_actions(state, player_id) and
choose_event(state, player_id, options); scoring heuristics live outside the engine.
"""

import random

from gremios.engine.actions import Action
from gremios.engine.queries import get_available_actions
from gremios.engine.state import GameState


class RandomPolicy:
    """Picks uniformly among the legal actions, up to max_actions per turn."""

    def __init__(
        self,
        guild_defs: dict,
        event_defs: dict,
        character_defs: dict,
        rng: random.Random | None = None,
        max_actions: int = 3,
    ):
        self.guild_defs = guild_defs
        self.event_defs = event_defs
        self.character_defs = character_defs
        self.rng = rng or random.Random()
        self.max_actions = max_actions

    def decide_actions(self, state: GameState, player_id: int) -> list[Action]:
        # Proposals are made against the state before the first one applies;
        # play_ai_turn re-validates each, so stale ones are simply skipped.
        options = [
            a for a in get_available_actions(state, self.guild_defs, self.event_defs, self.character_defs)
            if a.type != "end_turn"
        ]
        self.rng.shuffle(options)
        return options[: self.rng.randint(0, self.max_actions)]

    def choose_event(self, state: GameState, player_id: int, options: list[str]) -> int:
        return self.rng.randrange(len(options))


class FirstOptionPolicy:
    """Deterministic provider: never acts, always keeps the first revealed event."""

    def decide_actions(self, state: GameState, player_id: int) -> list[Action]:
        return []

    def choose_event(self, state: GameState, player_id: int, options: list[str]) -> int:
        return 0
