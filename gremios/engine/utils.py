"""
Utility functions for the game engine.
"""

import random

from gremios.engine import INITIAL_DISCARD_COUNT, MAX_PLAYERS, MIN_PLAYERS, STARTING_COINS
from gremios.engine.cards import create_treasure_deck, generate_event_deck, shuffle_array
from gremios.engine.definitions import foundation_event_id
from gremios.engine.reducer import start_turn
from gremios.engine.state import (
    GameState,
    GuildState,
    PlayerState,
    ResourceCard,
    PHASE_TURN_START,
)

# Seat 0 is always the human
PLAYER_SEATS = [
    {"name": "Human", "color": "#c9a961"},
    {"name": "AI 1", "color": "#6b4423"},
    {"name": "AI 2", "color": "#8a8d8f"},
    {"name": "AI 3", "color": "#5b7a8c"},
]


def _assign_characters(
    num_players: int,
    character_defs: dict,
    characters: list[str | None] | None,
    rng: random.Random,
) -> list[str]:
    """Fill unchosen seats with distinct random characters."""
    chosen = list(characters or [])
    chosen += [None] * (num_players - len(chosen))
    if len(chosen) > num_players:
        raise ValueError(f"{len(chosen)} characters given for {num_players} players")

    picked = [c for c in chosen if c is not None]
    for char_id in picked:
        if char_id not in character_defs:
            raise ValueError(f"Unknown character: {char_id}")
    if len(set(picked)) != len(picked):
        raise ValueError("Each character can only be used once")

    pool = shuffle_array([c for c in character_defs if c not in picked], rng)
    return [c if c is not None else pool.pop() for c in chosen]


def initialize_game_state(
    num_players: int,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
    characters: list[str | None] | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """
    Create a game ready for the human's first action.

    Args:
        num_players: Seats at the table (seat 0 human, the rest AI)
        guild_defs: Guild definitions
        event_defs: Event card definitions
        character_defs: Character definitions
        characters: Optional character id per seat; None entries are drawn at random
        rng: Seeded random.Random for a reproducible setup

    One guild per player is founded at setup (its foundation card leaves the
    deck), the event deck is shuffled and INITIAL_DISCARD_COUNT cards are set
    aside. The first turn_start (player 0, round 1) runs before returning.
    """
    if not (MIN_PLAYERS <= num_players <= MAX_PLAYERS):
        raise ValueError(f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
    rng = rng or random.Random()

    assigned = _assign_characters(num_players, character_defs, characters, rng)
    players = []
    for seat in range(num_players):
        character_def = character_defs[assigned[seat]]
        players.append(PlayerState(
            id=seat,
            name=PLAYER_SEATS[seat]["name"],
            is_ai=seat != 0,
            color=PLAYER_SEATS[seat]["color"],
            coins=STARTING_COINS,
            character=character_def.id,
            lands=[ResourceCard("land") for _ in range(character_def.starting_lands)],
        ))

    initial_guilds = shuffle_array(sorted(guild_defs), rng)[:num_players]
    founded = {foundation_event_id(n) for n in initial_guilds}
    deck = shuffle_array([e for e in generate_event_deck(event_defs) if e not in founded], rng)

    state = GameState(
        round_number=1,
        current_player=0,
        phase=PHASE_TURN_START,
        players=players,
        active_guilds=[
            GuildState(number=n, name=guild_defs[n].name) for n in sorted(initial_guilds)
        ],
        event_deck=deck[:-INITIAL_DISCARD_COUNT],
        set_aside_events=deck[-INITIAL_DISCARD_COUNT:],
        treasure_deck=create_treasure_deck(rng),
    )
    state.add_log("Game started", "system")
    start_turn(state, character_defs)
    return state


def print_game_state(state: GameState, character_defs: dict, verbose: bool = False):
    """
    Pretty-print the current game state.

    Args:
        state: Current game state
        character_defs: Character definitions (names and VP rules)
        verbose: If True, also print the recent log
    """
    current = state.get_current_player()
    print(f"\n{'='*60}")
    print(f"Round {state.round_number} | Player: {current.name} | Phase: {state.phase}")
    print(f"{'='*60}")

    print("\nGuilds:")
    for guild in state.active_guilds:
        tokens = " ".join(str(inv.player_id) for inv in guild.investments) or "-"
        leader = guild.max_investor if guild.max_investor is not None else "-"
        blocked = " [blocked]" if guild.blocked else ""
        print(f"  {guild.number:>2} {guild.name:<12} tokens: {tokens:<8} leader: {leader}{blocked}")

    expedition = " ".join(str(inv.player_id) for inv in state.expedition.investments) or "-"
    print(f"\nExpedition: {expedition}")
    if state.active_temporary_events:
        print(f"Temporary events: {', '.join(state.active_temporary_events)}")
    print(f"Event deck: {len(state.event_deck)} | Discard: {len(state.event_discard)} "
          f"| Treasures left: {len(state.treasure_deck)}")

    print(f"\n{'Players':.<40}")
    for player in state.players:
        character_def = character_defs.get(player.character)
        name = character_def.name if character_def else "-"
        vp = player.get_victory_points(state, character_defs)
        print(f"  {player.name} ({name}): coins={player.coins} reserve={player.reserve} "
              f"lands={len(player.lands)}/{player.get_cultivated_lands_count()} "
              f"inns={player.get_active_inns_count()} treasures={player.get_treasure_count()} VP={vp}")

    if verbose:
        print(f"\n{'Log':.<40}")
        for entry in state.log[-10:]:
            print(f"  [{entry.kind}] {entry.message}")
    print()
