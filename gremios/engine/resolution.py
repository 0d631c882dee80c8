"""
Event resolution engine: drawing event cards, applying their effects,
the production roll that follows each event, and expedition resolution.
Functions mutate the state they are given; the reducer only passes them copies.
"""

import random
from dataclasses import dataclass

from gremios.engine import (
    CLEARING_ROLL,
    DICE_SIDES,
    DISCOVERER_MIN_TREASURES,
    EXPEDITION_SUCCESS_MAX,
    EXPEDITION_SUCCESS_MIN,
    INITIAL_DISCARD_COUNT,
    INVESTMENT_COST,
    MARKET,
    MIN_CARDS_AFTER_DISCARD,
    PORT,
    TAX_THRESHOLD,
)
from gremios.engine.cards import shuffle_array
from gremios.engine.characters import (
    ON_FAILED_EXPEDITION,
    ON_GOOD_HARVEST,
    ON_INVASION,
    ON_INVASION_INNS_DESTROYED,
    ON_PLAGUE_END,
    ON_TAX_COLLECTION,
    get_character,
    trigger_ability,
)
from gremios.engine.definitions import EVENT_ACTION, EVENT_GUILD_FOUNDATION, EVENT_TEMPORARY
from gremios.engine.events import (
    GameEvent,
    coins_changed,
    deck_reshuffled,
    event_resolved,
    expedition_resolved,
    guild_founded,
    guild_paid,
    temporary_events_cleared,
    treasure_gained,
)
from gremios.engine.guilds import apply_bankruptcy, apply_mutiny, blocking_events, update_guild_blocking
from gremios.engine.state import (
    GameState,
    GuildState,
    Investment,
    PlayerState,
    half_rounded_down,
    half_rounded_up,
)

TRADE_BLOCKADE = "trade_blockade"
PLAGUE = "plague"


@dataclass
class PendingRoll:
    """Effects an action event defers to the production roll that follows it."""
    bankruptcy: bool = False
    mutiny: bool = False
    expedition: bool = False


# ===== Deck =====

def reshuffle_event_deck(state: GameState, rng: random.Random | None = None) -> list[GameEvent]:
    """
    Discard pile plus set-aside cards become the new deck. Up to
    INITIAL_DISCARD_COUNT cards are set aside again, keeping at least
    MIN_CARDS_AFTER_DISCARD in the deck.
    """
    pool = shuffle_array(state.event_discard + state.set_aside_events, rng)
    set_aside = min(INITIAL_DISCARD_COUNT, max(0, len(pool) - MIN_CARDS_AFTER_DISCARD))
    state.set_aside_events = pool[:set_aside]
    state.event_deck = pool[set_aside:]
    state.event_discard = []
    state.add_log(f"Event deck reshuffled ({len(state.event_deck)} cards)", "system")
    return [deck_reshuffled(len(state.event_deck), set_aside)]


def draw_event(state: GameState, rng: random.Random | None = None) -> tuple[str | None, list[GameEvent]]:
    """Pop the top event, reshuffling first when the deck is empty. None when no card is left anywhere."""
    events: list[GameEvent] = []
    if not state.event_deck:
        events.extend(reshuffle_event_deck(state, rng))
    if not state.event_deck:
        return None, events
    return state.event_deck.pop(), events


# ===== Events =====

def resolve_event(
    state: GameState,
    event_id: str,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
) -> tuple[PendingRoll, list[GameEvent]]:
    """Apply one revealed event card. The card ends up in its next zone (guild, discard or active)."""
    event_def = event_defs[event_id]
    state.current_event = event_id
    pending = PendingRoll()

    if event_def.kind == EVENT_GUILD_FOUNDATION:
        events = _found_guild(state, event_def.guild, guild_defs, event_defs)
        message = f"Guild founded: {guild_defs[event_def.guild].name} ({event_def.guild})"
    elif event_def.kind == EVENT_TEMPORARY:
        message, events = _temporary_event(state, event_id, event_defs, character_defs)
    elif event_def.kind == EVENT_ACTION:
        handler = ACTION_EVENT_HANDLERS[event_id]
        message, events = handler(state, pending, event_defs, character_defs)
        state.event_discard.append(event_id)
    else:
        raise ValueError(f"Unknown event kind: {event_def.kind}")

    state.add_log(f"{event_def.name}: {message}", "event")
    return pending, [event_resolved(event_id, event_def.kind, message)] + events


def _found_guild(state: GameState, guild_number: int, guild_defs: dict, event_defs: dict) -> list[GameEvent]:
    guild_def = guild_defs[guild_number]
    state.active_guilds.append(GuildState(number=guild_def.number, name=guild_def.name))
    state.active_guilds.sort(key=lambda g: g.number)
    update_guild_blocking(state, event_defs)
    return [guild_founded(guild_def.number, guild_def.name)]


def _affected_guilds(state: GameState, event_def) -> list[GuildState]:
    return [g for g in state.active_guilds if event_def.blocks(g.number)]


def _temporary_event(state: GameState, event_id: str, event_defs: dict, character_defs: dict) -> tuple[str, list[GameEvent]]:
    """First copy blocks, second copy adds a mutiny, third bankrupts and discards every copy."""
    event_def = event_defs[event_id]
    existing = state.active_temporary_events.count(event_id)
    events: list[GameEvent] = []

    if existing == 0:
        state.active_temporary_events.append(event_id)
        update_guild_blocking(state, event_defs)
        return event_def.description, events

    guilds = _affected_guilds(state, event_def)
    if existing == 1:
        state.active_temporary_events.append(event_id)
        for guild in guilds:
            events.extend(apply_mutiny(state, guild, character_defs, cause="temporary_stack"))
        names = ", ".join(g.name for g in guilds) or "no founded guild"
        return f"second copy, mutiny in {names}", events

    for guild in guilds:
        events.extend(apply_bankruptcy(state, guild, character_defs, cause="temporary_stack"))
    state.active_temporary_events = [e for e in state.active_temporary_events if e != event_id]
    state.event_discard.extend([event_id] * (existing + 1))
    update_guild_blocking(state, event_defs)
    events.append(temporary_events_cleared([event_id] * (existing + 1), "stacked"))
    names = ", ".join(g.name for g in guilds) or "no founded guild"
    return f"third copy, bankruptcy in {names}", events


def _pay(player: PlayerState, amount: int, reason: str) -> list[GameEvent]:
    old = player.coins
    player.add_coins(amount)
    return [coins_changed(player.id, old, player.coins, reason)]


def _good_harvest(state, pending, event_defs, character_defs):
    events: list[GameEvent] = []
    parts = []
    for player in state.players:
        cultivated = player.get_cultivated_lands_count()
        if cultivated:
            events.extend(_pay(player, cultivated, "good_harvest"))
        parts.append(f"{player.name} +{cultivated}")
    for player in state.players:
        events.extend(trigger_ability(state, player, ON_GOOD_HARVEST, character_defs))
    return ", ".join(parts), events


def _prosperity(state, pending, event_defs, character_defs):
    events: list[GameEvent] = []
    for player in state.players:
        events.extend(_pay(player, 1, "prosperity"))
    events.extend(clear_temporary_events(state, "prosperity", event_defs, character_defs))
    return "everyone +1, temporary events removed", events


def _expedition(state, pending, event_defs, character_defs):
    events: list[GameEvent] = []
    for player in state.players:
        character_def = get_character(character_defs, player)
        if (
            character_def is not None
            and character_def.free_expedition_investment
            and state.expedition.count_for(player.id) == 0
            and not state.expedition.is_full()
        ):
            state.expedition.investments.append(Investment(player.id, player.color))
            state.add_log(f"{player.name} ({character_def.name}) joins the expedition for free", "ability")
    if not state.expedition.investments:
        return "no investments", events
    pending.expedition = True
    return "resolves on the next roll", events


def _bad_harvest(state, pending, event_defs, character_defs):
    parts = []
    for player in state.players:
        for land in player.lands:
            if land.cultivated:
                land.cultivated = False
                parts.append(f"{player.name} -1 cultivated land")
                break
    return ", ".join(parts) or "no cultivated lands", []


def _next_roll_bankruptcy(state, pending, event_defs, character_defs):
    pending.bankruptcy = True
    return "bankruptcy in the guild of the next roll", []


def _next_roll_mutiny(state, pending, event_defs, character_defs):
    pending.mutiny = True
    return "mutiny in the guild of the next roll", []


def _invasion(state, pending, event_defs, character_defs):
    events: list[GameEvent] = []
    destroyed_by_player: dict[int, int] = {}
    parts = []
    for player in state.players:
        to_destroy = half_rounded_down(player.get_active_inns_count())
        destroyed = 0
        for inn in player.inns:
            if destroyed >= to_destroy:
                break
            if not inn.destroyed:
                inn.destroyed = True
                destroyed += 1
        destroyed_by_player[player.id] = destroyed
        if destroyed:
            parts.append(f"{player.name} -{destroyed} inn(s)")
    total = sum(destroyed_by_player.values())
    for player in state.players:
        rival_inns = total - destroyed_by_player[player.id]
        events.extend(trigger_ability(state, player, ON_INVASION_INNS_DESTROYED, character_defs, rival_inns))
        events.extend(trigger_ability(state, player, ON_INVASION, character_defs))
    return ", ".join(parts) or "no inns destroyed", events


def _expropriation(state, pending, event_defs, character_defs):
    parts = []
    for player in state.players:
        to_lose = half_rounded_up(len(player.lands))
        for _ in range(to_lose):
            uncultivated = player.get_uncultivated_land_indices()
            player.lands.pop(uncultivated[0] if uncultivated else 0)
        if to_lose:
            parts.append(f"{player.name} -{to_lose} land(s)")
    return ", ".join(parts) or "no lands lost", []


def _tax_collection(state, pending, event_defs, character_defs):
    events: list[GameEvent] = []
    parts = []
    collected = 0
    for player in state.players:
        if player.coins >= TAX_THRESHOLD:
            to_lose = half_rounded_up(player.coins)
            old = player.coins
            player.remove_coins(to_lose)
            collected += to_lose
            events.append(coins_changed(player.id, old, player.coins, "tax_collection"))
            parts.append(f"{player.name} -{to_lose}")
    if collected:
        for player in state.players:
            events.extend(trigger_ability(state, player, ON_TAX_COLLECTION, character_defs, collected))
    return ", ".join(parts) or f"no player has {TAX_THRESHOLD}+ coins", events


ACTION_EVENT_HANDLERS = {
    "good_harvest": _good_harvest,
    "prosperity": _prosperity,
    "expedition": _expedition,
    "bad_harvest": _bad_harvest,
    "bankruptcy": _next_roll_bankruptcy,
    "mutiny": _next_roll_mutiny,
    "invasion": _invasion,
    "expropriation": _expropriation,
    "tax_collection": _tax_collection,
}


def clear_temporary_events(state: GameState, reason: str, event_defs: dict, character_defs: dict) -> list[GameEvent]:
    """Discard every active temporary event. Ending a plague pays the Healer."""
    if not state.active_temporary_events:
        return []
    cleared = list(state.active_temporary_events)
    state.event_discard.extend(cleared)
    state.active_temporary_events = []
    update_guild_blocking(state, event_defs)
    state.add_log("Temporary events removed", "event")
    events = [temporary_events_cleared(cleared, reason)]
    if PLAGUE in cleared:
        for player in state.players:
            events.extend(trigger_ability(state, player, ON_PLAGUE_END, character_defs))
    return events


# ===== Dice =====

def roll_dice(rng: random.Random | None = None, count: int = 2) -> list[int]:
    rng = rng or random.Random()
    return [rng.randint(1, DICE_SIDES) for _ in range(count)]


def distribute_guild_coins(state: GameState, guild_number: int, event_defs: dict, character_defs: dict) -> list[GameEvent]:
    """Pay every investor of the rolled guild 1 coin per token, unless the guild is blocked."""
    guild = state.get_guild(guild_number)
    if guild is None:
        state.add_log(f"Guild {guild_number} not founded, no payments", "system")
        return [guild_paid(guild_number, {}, False, False)]

    blockers = blocking_events(state, guild_number, event_defs)
    only_blockade = bool(blockers) and all(e == TRADE_BLOCKADE for e in blockers)
    payouts: dict[int, int] = {}
    events: list[GameEvent] = []
    for player in state.players:
        tokens = guild.count_for(player.id)
        if tokens == 0:
            continue
        if guild.blocked:
            character_def = get_character(character_defs, player)
            immune = (
                character_def is not None
                and character_def.immune_to_trade_blockade
                and guild_number in (PORT, MARKET)
                and only_blockade
            )
            if not immune:
                continue
            state.add_log(f"{player.name} ({character_def.name}) collects from {guild.name} despite the blockade", "ability")
        events.extend(_pay(player, tokens, "guild_payment"))
        payouts[player.id] = tokens

    if guild.blocked and not payouts:
        state.add_log(f"{guild.name} is blocked, no payments", "system")
    return [guild_paid(guild_number, payouts, guild.blocked, True)] + events


def resolve_roll(
    state: GameState,
    dice: list[int],
    pending: PendingRoll,
    event_defs: dict,
    character_defs: dict,
) -> list[GameEvent]:
    """
    Production roll made right after the event.
    A 7 clears all temporary events; any other sum pays that guild.
    Deferred bankruptcy/mutiny then hit the guild of that sum, and a
    pending expedition resolves with the same total.
    """
    total = sum(dice)
    state.last_dice_roll = list(dice)
    state.add_log(f"Roll: {' + '.join(str(d) for d in dice)} = {total}", "system")
    events: list[GameEvent] = []

    if total == CLEARING_ROLL:
        events.extend(clear_temporary_events(state, "clearing_roll", event_defs, character_defs))
    else:
        events.extend(distribute_guild_coins(state, total, event_defs, character_defs))

    guild = state.get_guild(total)
    if pending.bankruptcy and guild is not None:
        events.extend(apply_bankruptcy(state, guild, character_defs))
    if pending.mutiny and guild is not None:
        events.extend(apply_mutiny(state, guild, character_defs))
    if pending.expedition:
        events.extend(resolve_expedition(state, total, character_defs))
    return events


# ===== Expedition =====

def resolve_expedition(state: GameState, total: int, character_defs: dict) -> list[GameEvent]:
    """
    Success band hands one treasure per token (while the deck lasts); failure
    pays the Pirate. Every token returns 1 coin to its owner's reserve.
    """
    investments = list(state.expedition.investments)
    success = EXPEDITION_SUCCESS_MIN <= total <= EXPEDITION_SUCCESS_MAX
    events: list[GameEvent] = []
    treasures: dict[int, int] = {}
    pirate_coins = 0

    if success:
        for inv in investments:
            if not state.treasure_deck:
                break
            player = state.get_player(inv.player_id)
            treasure = state.treasure_deck.pop()
            player.add_treasure(treasure, state.tick())
            treasures[player.id] = treasures.get(player.id, 0) + 1
            events.append(treasure_gained(player.id, treasure.to_dict(), "expedition"))
        update_discoverer_emblem(state)
        state.add_log(f"Expedition succeeds with {total}", "event")
    else:
        coins_lost = len(investments) * INVESTMENT_COST
        if coins_lost:
            for player in state.players:
                before = player.coins
                events.extend(trigger_ability(state, player, ON_FAILED_EXPEDITION, character_defs, coins_lost))
                pirate_coins += player.coins - before
        state.add_log(f"Expedition fails with {total}", "event")

    for inv in investments:
        state.get_player(inv.player_id).add_to_reserve(1)
    state.expedition.investments = []

    return [
        expedition_resolved(total, success, [inv.player_id for inv in investments], treasures, pirate_coins)
    ] + events


def update_discoverer_emblem(state: GameState) -> None:
    """Most treasures (at least DISCOVERER_MIN_TREASURES); ties go to whoever reached the count first."""
    contenders = [p for p in state.players if p.get_treasure_count() >= DISCOVERER_MIN_TREASURES]
    holder = None
    if contenders:
        top = max(p.get_treasure_count() for p in contenders)
        holder = min(
            (p for p in contenders if p.get_treasure_count() == top),
            key=lambda p: p.treasure_timestamp,
        )
    for player in state.players:
        player.has_discoverer_emblem = holder is not None and player.id == holder.id
