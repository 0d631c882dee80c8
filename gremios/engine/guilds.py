"""
Guild board: investments, max-investor tracking, blocking, mutiny and bankruptcy.
Functions mutate the state they are given; the reducer only passes them copies.
"""

from gremios.engine import MAX_GUILD_INVESTMENTS
from gremios.engine.characters import ON_MUTINY_BANKRUPTCY, trigger_ability
from gremios.engine.events import (
    GameEvent,
    bankruptcy as bankruptcy_event,
    max_investor_changed,
    mutiny as mutiny_event,
)
from gremios.engine.state import GameState, GuildState, Investment, PlayerState


def count_investments(guild: GuildState) -> dict[int, int]:
    """player_id -> tokens in the guild."""
    counts: dict[int, int] = {}
    for inv in guild.investments:
        counts[inv.player_id] = counts.get(inv.player_id, 0) + 1
    return counts


def update_max_investor(guild: GuildState) -> list[GameEvent]:
    """
    Recompute the guild's max investor.
    A tied incumbent keeps the title; otherwise the tied player whose first
    token sits earliest in the guild wins.
    """
    old = guild.max_investor
    counts = count_investments(guild)
    if not counts:
        guild.max_investor = None
    else:
        top = max(counts.values())
        tied = [pid for pid in guild.investor_ids() if counts[pid] == top]
        if guild.max_investor not in tied:
            guild.max_investor = tied[0]
    if guild.max_investor != old:
        return [max_investor_changed(guild.number, old, guild.max_investor)]
    return []


def invest(guild: GuildState, player: PlayerState) -> list[GameEvent]:
    """Place one token. Capacity is checked by the caller."""
    guild.investments.append(Investment(player.id, player.color))
    return update_max_investor(guild)


def is_full(guild: GuildState) -> bool:
    return len(guild.investments) >= MAX_GUILD_INVESTMENTS


def blocking_events(state: GameState, guild_number: int, event_defs: dict) -> list[str]:
    """Ids of active temporary events that block the guild (duplicates kept)."""
    return [
        event_id for event_id in state.active_temporary_events
        if event_defs[event_id].blocks(guild_number)
    ]


def update_guild_blocking(state: GameState, event_defs: dict) -> None:
    for guild in state.active_guilds:
        guild.blocked = bool(blocking_events(state, guild.number, event_defs))


def apply_mutiny(state: GameState, guild: GuildState, character_defs: dict, cause: str = "event") -> list[GameEvent]:
    """
    Every player with more than one token loses their most recent one.
    Remaining tokens are regrouped row by row per investor.
    """
    losses: dict[int, int] = {}
    remove_indices: list[int] = []
    for player_id in guild.investor_ids():
        indices = [i for i, inv in enumerate(guild.investments) if inv.player_id == player_id]
        if len(indices) > 1:
            remove_indices.append(indices[-1])
            losses[player_id] = 1

    for index in sorted(remove_indices, reverse=True):
        guild.investments.pop(index)

    by_player: dict[int, list[Investment]] = {}
    for inv in guild.investments:
        by_player.setdefault(inv.player_id, []).append(inv)
    regrouped: list[Investment] = []
    rows = max((len(tokens) for tokens in by_player.values()), default=0)
    for row in range(rows):
        for tokens in by_player.values():
            if row < len(tokens):
                regrouped.append(tokens[row])
    guild.investments = regrouped

    events: list[GameEvent] = [mutiny_event(guild.number, losses, cause)]
    events.extend(update_max_investor(guild))
    if losses:
        names = ", ".join(state.get_player(pid).name for pid in losses)
        state.add_log(f"Mutiny in {guild.name}: {names} lose 1 investment", "event")
    else:
        state.add_log(f"Mutiny in {guild.name}: no one loses investments", "event")
    for player_id, lost in losses.items():
        events.extend(trigger_ability(state, state.get_player(player_id), ON_MUTINY_BANKRUPTCY, character_defs, lost))
    return events


def apply_bankruptcy(state: GameState, guild: GuildState, character_defs: dict, cause: str = "event") -> list[GameEvent]:
    """All tokens are removed and the guild loses its max investor."""
    losses = count_investments(guild)
    old = guild.max_investor
    guild.investments = []
    guild.max_investor = None

    events: list[GameEvent] = [bankruptcy_event(guild.number, losses, cause)]
    if old is not None:
        events.append(max_investor_changed(guild.number, old, None))
    state.add_log(f"Bankruptcy in {guild.name}: all investments lost", "event")
    for player_id, lost in losses.items():
        events.extend(trigger_ability(state, state.get_player(player_id), ON_MUTINY_BANKRUPTCY, character_defs, lost))
    return events
