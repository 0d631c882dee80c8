"""
Guild board: capacity, max investor, blocking, mutiny and bankruptcy.
"""

import pytest

from gremios.engine.actions import invest_guild
from gremios.engine.errors import IllegalAction, InvalidIndex
from gremios.engine.guilds import (
    apply_bankruptcy,
    apply_mutiny,
    count_investments,
    invest,
    update_guild_blocking,
    update_max_investor,
)
from gremios.engine.reducer import apply_action
from gremios.engine.state import GuildState, Investment


def test_full_guild_rejects_investment(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(4,))
    guild = state.get_guild(4)
    guild.investments = [Investment(1), Investment(2), Investment(1), Investment(2)]
    before = [inv.to_dict() for inv in guild.investments]

    with pytest.raises(IllegalAction):
        apply_action(state, invest_guild(0, 4), guild_defs, event_defs, character_defs)
    assert [inv.to_dict() for inv in state.get_guild(4).investments] == before
    assert state.players[0].coins == 3


def test_unfounded_guild_is_invalid(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(4,))
    with pytest.raises(InvalidIndex):
        apply_action(state, invest_guild(0, 6), guild_defs, event_defs, character_defs)


def test_investment_costs_two_and_feeds_reserve(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(4,))
    state, events = apply_action(state, invest_guild(0, 4), guild_defs, event_defs, character_defs)
    human = state.players[0]
    assert human.coins == 1
    assert human.reserve == 1
    assert state.get_guild(4).max_investor == 0
    assert events[0].type == "investment_made"


def test_max_investor_incumbent_keeps_ties(make_state):
    state = make_state(guilds=(4,))
    guild = state.get_guild(4)
    a, b = state.players[0], state.players[1]

    invest(guild, a)
    invest(guild, a)
    invest(guild, b)
    assert guild.max_investor == a.id

    invest(guild, b)
    assert count_investments(guild) == {a.id: 2, b.id: 2}
    assert guild.max_investor == a.id


def test_max_investor_changes_on_strict_lead(make_state):
    state = make_state(guilds=(4,))
    guild = state.get_guild(4)
    a, b = state.players[0], state.players[1]
    invest(guild, a)
    invest(guild, b)
    events = invest(guild, b)
    assert guild.max_investor == b.id
    assert events[0].payload["new_investor"] == b.id


def test_max_investor_without_incumbent_goes_to_earliest_token():
    guild = GuildState(number=8, name="Taberna", investments=[Investment(2), Investment(0)])
    update_max_investor(guild)
    assert guild.max_investor == 2


def test_blocking_never_prevents_investment(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(6,))
    state.active_temporary_events = ["famine"]
    update_guild_blocking(state, event_defs)
    assert state.get_guild(6).blocked

    state, _ = apply_action(state, invest_guild(0, 6), guild_defs, event_defs, character_defs)
    assert state.get_guild(6).count_for(0) == 1


def test_plague_blocks_all_but_church_and_monastery(make_state, event_defs):
    state = make_state(guilds=(2, 5, 9, 12))
    state.active_temporary_events = ["plague"]
    update_guild_blocking(state, event_defs)
    assert {g.number: g.blocked for g in state.active_guilds} == {2: False, 5: True, 9: True, 12: False}

    state.active_temporary_events = []
    update_guild_blocking(state, event_defs)
    assert not any(g.blocked for g in state.active_guilds)


def test_mutiny_removes_latest_token_of_multi_investors(make_state, character_defs):
    state = make_state(guilds=(4,))
    guild = state.get_guild(4)
    guild.investments = [Investment(0), Investment(1), Investment(0), Investment(1)]
    guild.max_investor = 0

    events = apply_mutiny(state, guild, character_defs)

    assert count_investments(guild) == {0: 1, 1: 1}
    assert events[0].type == "mutiny"
    assert events[0].payload["losses"] == {0: 1, 1: 1}
    assert guild.max_investor == 0


def test_mutiny_regroups_row_by_row(make_state, character_defs):
    state = make_state(guilds=(4,))
    guild = state.get_guild(4)
    guild.investments = [Investment(0), Investment(0), Investment(0), Investment(1)]
    apply_mutiny(state, guild, character_defs)
    assert [inv.player_id for inv in guild.investments] == [0, 1, 0]


def test_mutiny_with_single_tokens_changes_nothing(make_state, character_defs):
    state = make_state(guilds=(4,))
    guild = state.get_guild(4)
    guild.investments = [Investment(0), Investment(1), Investment(2)]
    apply_mutiny(state, guild, character_defs)
    assert len(guild.investments) == 3


def test_merchant_paid_for_mutiny_losses(make_state, character_defs):
    state = make_state(characters=("merchant", None, None), guilds=(4,))
    guild = state.get_guild(4)
    guild.investments = [Investment(0), Investment(0), Investment(1)]
    apply_mutiny(state, guild, character_defs)
    assert state.players[0].coins == 4
    assert state.players[1].coins == 3


def test_bankruptcy_clears_guild_and_pays_merchant(make_state, character_defs):
    state = make_state(characters=("merchant", None, None), guilds=(4,))
    guild = state.get_guild(4)
    for pid in (0, 0, 1):
        invest(guild, state.players[pid])
    assert guild.max_investor == 0

    events = apply_bankruptcy(state, guild, character_defs)

    assert guild.investments == []
    assert guild.max_investor is None
    assert events[0].payload["losses"] == {0: 2, 1: 1}
    assert state.players[0].coins == 3 + 2
    assert state.players[1].coins == 3
