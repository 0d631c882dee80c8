"""
Event resolution, the production roll, expeditions and deck handling.
"""

import random
from collections import Counter

from gremios.engine.guilds import update_guild_blocking
from gremios.engine.resolution import (
    PendingRoll,
    clear_temporary_events,
    distribute_guild_coins,
    draw_event,
    reshuffle_event_deck,
    resolve_event,
    resolve_expedition,
    resolve_roll,
    update_discoverer_emblem,
)
from gremios.engine.state import Investment, ResourceCard, Treasure


def _inns(active):
    return [ResourceCard("inn") for _ in range(active)]


def _lands(cultivated, uncultivated=0):
    return [ResourceCard("land", cultivated=True) for _ in range(cultivated)] + [
        ResourceCard("land") for _ in range(uncultivated)
    ]


# ===== Action events =====

def test_invasion_destroys_half_rounded_down(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    state.players[0].inns = _inns(3)
    state.players[1].inns = _inns(1)
    state.players[2].inns = _inns(4)

    resolve_event(state, "invasion", guild_defs, event_defs, character_defs)

    assert state.players[0].get_active_inns_count() == 2
    assert state.players[1].get_active_inns_count() == 1
    assert state.players[2].get_active_inns_count() == 2
    assert state.event_discard == ["invasion"]


def test_invasion_pays_mercenary_per_rival_inn_and_healer_from_reserve(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=("mercenary", "healer", None))
    state.players[0].inns = _inns(2)
    state.players[1].reserve = 2
    state.players[2].inns = _inns(4)

    resolve_event(state, "invasion", guild_defs, event_defs, character_defs)

    # Two rival inns fell; the Mercenary's own inn does not count
    assert state.players[0].coins == 3 + 2
    assert state.players[1].coins == 4
    assert state.players[1].reserve == 1


def test_tax_collection_takes_half_rounded_up(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=(None, "governor", None))
    state.players[0].coins = 5
    state.players[1].coins = 3
    state.players[2].coins = 4

    resolve_event(state, "tax_collection", guild_defs, event_defs, character_defs)

    assert state.players[0].coins == 2
    assert state.players[2].coins == 2
    # Governor below the threshold collects the 3 + 2 lost coins
    assert state.players[1].coins == 3 + 5


def test_expropriation_loses_uncultivated_first(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    state.players[0].lands = _lands(1, 2)
    state.players[1].lands = _lands(2, 1)

    resolve_event(state, "expropriation", guild_defs, event_defs, character_defs)

    assert len(state.players[0].lands) == 1 and state.players[0].lands[0].cultivated
    assert len(state.players[1].lands) == 1 and state.players[1].lands[0].cultivated
    assert state.players[2].lands == []


def test_good_harvest_with_peasant_bonus(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=("peasant", None, None))
    state.players[0].lands = _lands(2, 1)
    state.players[1].lands = _lands(1)

    resolve_event(state, "good_harvest", guild_defs, event_defs, character_defs)

    assert state.players[0].coins == 3 + 2 + 2
    assert state.players[1].coins == 4
    assert state.players[2].coins == 3


def test_peasant_without_a_strict_lead_gets_no_bonus(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=("peasant", None, None))
    state.players[0].lands = _lands(2)
    state.players[1].lands = _lands(1)
    state.players[2].lands = _lands(1)
    resolve_event(state, "good_harvest", guild_defs, event_defs, character_defs)
    assert state.players[0].coins == 5


def test_bad_harvest_uncultivates_lowest_index(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    state.players[0].lands = [ResourceCard("land"), ResourceCard("land", cultivated=True), ResourceCard("land", cultivated=True)]
    resolve_event(state, "bad_harvest", guild_defs, event_defs, character_defs)
    assert [land.cultivated for land in state.players[0].lands] == [False, False, True]


def test_prosperity_pays_everyone_and_clears_temporary_events(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(6,))
    state.active_temporary_events = ["famine"]
    update_guild_blocking(state, event_defs)

    resolve_event(state, "prosperity", guild_defs, event_defs, character_defs)

    assert [p.coins for p in state.players] == [4, 4, 4]
    assert state.active_temporary_events == []
    assert not state.get_guild(6).blocked
    assert Counter(state.event_discard) == {"famine": 1, "prosperity": 1}


def test_guild_foundation_activates_guild(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(4, 9))
    state.active_temporary_events = ["famine"]
    resolve_event(state, "foundation_6", guild_defs, event_defs, character_defs)
    assert [g.number for g in state.active_guilds] == [4, 6, 9]
    assert state.get_guild(6).blocked
    assert state.event_discard == []


def test_bankruptcy_and_mutiny_wait_for_the_roll(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    pending, _ = resolve_event(state, "bankruptcy", guild_defs, event_defs, character_defs)
    assert pending.bankruptcy and not pending.mutiny
    pending, _ = resolve_event(state, "mutiny", guild_defs, event_defs, character_defs)
    assert pending.mutiny and not pending.bankruptcy


# ===== Temporary events =====

def test_temporary_event_stacking(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(6,))
    guild = state.get_guild(6)
    guild.investments = [Investment(0), Investment(0), Investment(1)]
    guild.max_investor = 0

    resolve_event(state, "famine", guild_defs, event_defs, character_defs)
    assert state.active_temporary_events == ["famine"]
    assert guild.blocked
    assert len(guild.investments) == 3

    resolve_event(state, "famine", guild_defs, event_defs, character_defs)
    assert state.active_temporary_events == ["famine", "famine"]
    assert [inv.player_id for inv in guild.investments] == [0, 1]

    resolve_event(state, "famine", guild_defs, event_defs, character_defs)
    assert state.active_temporary_events == []
    assert guild.investments == []
    assert not guild.blocked
    assert state.event_discard == ["famine"] * 3


def test_plague_end_pays_healer_for_led_guilds(make_state, event_defs, character_defs):
    state = make_state(characters=("healer", None, None), guilds=(2, 4, 9))
    for guild in state.active_guilds:
        guild.max_investor = 0
    state.active_temporary_events = ["plague"]

    clear_temporary_events(state, "prosperity", event_defs, character_defs)

    # Church does not count
    assert state.players[0].coins == 3 + 4


# ===== Production roll =====

def test_production_roll_pays_tokens(make_state, event_defs, character_defs):
    state = make_state(guilds=(6,))
    state.get_guild(6).investments = [Investment(0), Investment(1), Investment(0)]
    resolve_roll(state, [2, 4], PendingRoll(), event_defs, character_defs)
    assert [p.coins for p in state.players] == [5, 4, 3]
    assert state.last_dice_roll == [2, 4]


def test_blocked_guild_pays_nothing(make_state, event_defs, character_defs):
    state = make_state(guilds=(6,))
    state.get_guild(6).investments = [Investment(0)]
    state.active_temporary_events = ["famine"]
    update_guild_blocking(state, event_defs)
    events = distribute_guild_coins(state, 6, event_defs, character_defs)
    assert state.players[0].coins == 3
    assert events[0].payload["blocked"] is True


def test_pirate_collects_through_trade_blockade(make_state, event_defs, character_defs):
    state = make_state(characters=("pirate", None, None), guilds=(5,))
    state.get_guild(5).investments = [Investment(0), Investment(1)]
    state.active_temporary_events = ["trade_blockade"]
    update_guild_blocking(state, event_defs)

    distribute_guild_coins(state, 5, event_defs, character_defs)
    assert state.players[0].coins == 4
    assert state.players[1].coins == 3

    # Not immune to the plague
    state.active_temporary_events = ["trade_blockade", "plague"]
    update_guild_blocking(state, event_defs)
    distribute_guild_coins(state, 5, event_defs, character_defs)
    assert state.players[0].coins == 4


def test_seven_clears_temporary_events(make_state, event_defs, character_defs):
    state = make_state(guilds=(6,))
    state.active_temporary_events = ["famine", "mine_collapse"]
    update_guild_blocking(state, event_defs)

    resolve_roll(state, [3, 4], PendingRoll(), event_defs, character_defs)

    assert state.active_temporary_events == []
    assert not state.get_guild(6).blocked
    assert Counter(state.event_discard) == {"famine": 1, "mine_collapse": 1}


def test_pending_bankruptcy_hits_rolled_guild_after_payment(make_state, event_defs, character_defs):
    state = make_state(guilds=(4, 6))
    state.get_guild(4).investments = [Investment(0), Investment(1)]
    state.get_guild(6).investments = [Investment(0)]

    resolve_roll(state, [1, 3], PendingRoll(bankruptcy=True), event_defs, character_defs)

    assert state.get_guild(4).investments == []
    assert len(state.get_guild(6).investments) == 1
    assert state.players[0].coins == 4


def test_pending_mutiny_on_unfounded_guild_is_noop(make_state, event_defs, character_defs):
    state = make_state(guilds=(4,))
    state.get_guild(4).investments = [Investment(0), Investment(0)]
    resolve_roll(state, [5, 5], PendingRoll(mutiny=True), event_defs, character_defs)
    assert len(state.get_guild(4).investments) == 2


# ===== Expedition =====

def test_expedition_event_without_investments_is_noop(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    pending, _ = resolve_event(state, "expedition", guild_defs, event_defs, character_defs)
    assert pending.expedition is False
    assert state.event_discard == ["expedition"]


def test_expedition_event_adds_free_stowaway_token(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=(None, "stowaway", None))
    pending, _ = resolve_event(state, "expedition", guild_defs, event_defs, character_defs)
    assert pending.expedition is True
    assert [inv.player_id for inv in state.expedition.investments] == [1]


def test_expedition_success_hands_out_treasures(make_state, character_defs):
    state = make_state()
    state.expedition.investments = [Investment(0), Investment(1), Investment(0)]
    deck_size = len(state.treasure_deck)

    events = resolve_expedition(state, 7, character_defs)

    assert events[0].payload["success"] is True
    assert events[0].payload["treasures"] == {0: 2, 1: 1}
    assert len(state.players[0].treasures) == 2
    assert len(state.treasure_deck) == deck_size - 3
    assert state.players[0].reserve == 2 and state.players[1].reserve == 1
    assert state.expedition.investments == []
    assert state.players[0].has_discoverer_emblem


def test_expedition_failure_pays_pirate(make_state, character_defs):
    state = make_state(characters=(None, None, "pirate"))
    state.expedition.investments = [Investment(0), Investment(1)]

    events = resolve_expedition(state, 10, character_defs)

    assert events[0].payload["success"] is False
    assert events[0].payload["pirate_coins"] == 4
    assert state.players[2].coins == 7
    assert state.players[0].treasures == []
    assert state.expedition.investments == []


def test_discoverer_emblem_tie_goes_to_first(make_state):
    state = make_state()
    state.players[0].add_treasure(Treasure("common", 1), state.tick())
    state.players[1].add_treasure(Treasure("common", 1), state.tick())
    state.players[1].add_treasure(Treasure("common", 1), state.tick())
    state.players[0].add_treasure(Treasure("common", 1), state.tick())
    update_discoverer_emblem(state)
    assert [p.has_discoverer_emblem for p in state.players] == [False, True, False]

    state.players[1].remove_treasure(0, state.tick())
    update_discoverer_emblem(state)
    assert [p.has_discoverer_emblem for p in state.players] == [True, False, False]


# ===== Deck =====

def test_reshuffle_conserves_cards(make_state):
    state = make_state()
    state.event_discard = ["good_harvest"] * 5 + ["famine", "invasion", "mutiny", "prosperity", "expedition"]
    state.set_aside_events = ["tax_collection", "bad_harvest", "bankruptcy"]
    before = Counter(state.event_discard + state.set_aside_events)

    reshuffle_event_deck(state, random.Random(1))

    assert state.event_discard == []
    assert len(state.set_aside_events) == 3
    assert len(state.event_deck) == 10
    assert Counter(state.event_deck + state.set_aside_events) == before


def test_reshuffle_keeps_a_minimum_deck(make_state):
    state = make_state()
    state.event_discard = ["good_harvest", "famine", "invasion", "mutiny"]
    reshuffle_event_deck(state, random.Random(1))
    assert len(state.set_aside_events) == 1
    assert len(state.event_deck) == 3


def test_draw_from_exhausted_game_returns_none(make_state):
    state = make_state()
    card, _ = draw_event(state, random.Random(0))
    assert card is None


def test_draw_takes_the_top_card(make_state):
    state = make_state(event_deck=["famine", "prosperity"])
    card, events = draw_event(state)
    assert card == "prosperity"
    assert events == []
    assert state.event_deck == ["famine"]
