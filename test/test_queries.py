"""
Read-only queries used by the UI and the AI policies.
"""

import pytest

from gremios.engine.actions import buy_land, end_turn, invest_guild
from gremios.engine.queries import (
    get_available_action_types,
    get_available_actions,
    get_game_summary,
    get_player_summary,
    get_victory_points_by_player,
    validate_action,
)
from gremios.engine.reducer import apply_action
from gremios.engine.state import Investment, ResourceCard, PHASE_GAME_OVER


def test_validate_action_leaves_state_untouched(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(4,), event_deck=["prosperity"])
    before = state.to_dict()

    assert validate_action(state, buy_land(0), guild_defs, event_defs, character_defs).valid
    assert validate_action(state, end_turn(0), guild_defs, event_defs, character_defs).valid
    result = validate_action(state, invest_guild(0, 6), guild_defs, event_defs, character_defs)

    assert result.valid is False
    assert result.kind == "invalid_index"
    assert state.to_dict() == before


def test_available_actions_for_a_fresh_turn(make_state, guild_defs, event_defs, character_defs):
    state = make_state(guilds=(4, 6))
    types = [a.type for a in get_available_actions(state, guild_defs, event_defs, character_defs)]
    assert types.count("invest_guild") == 2
    assert "invest_expedition" in types
    assert "buy_land" in types
    assert "end_turn" in types
    assert "cause_mutiny" not in types
    assert "buy_treasure" not in types
    assert "build_inn" not in types


def test_available_actions_follow_funds(make_state, guild_defs, event_defs, character_defs):
    state = make_state(coins=1)
    state.players[0].lands = [ResourceCard("land")]
    types = {a.type for a in get_available_actions(state, guild_defs, event_defs, character_defs)}
    assert types == {"cultivate_land", "end_turn"}


def test_mercenary_sees_mutiny_only_where_invested(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=("mercenary", None, None), guilds=(4, 6))
    state.get_guild(6).investments = [Investment(0)]
    mutinies = [
        a for a in get_available_actions(state, guild_defs, event_defs, character_defs)
        if a.type == "cause_mutiny"
    ]
    assert [a.payload["guild_number"] for a in mutinies] == [6]


def test_pending_choice_offers_only_choose_event(make_state, guild_defs, event_defs, character_defs):
    state = make_state(characters=("governor", None, None), event_deck=["prosperity", "good_harvest"])
    state, _ = apply_action(state, end_turn(0), guild_defs, event_defs, character_defs)
    actions = get_available_actions(state, guild_defs, event_defs, character_defs)
    assert [(a.type, a.payload["index"]) for a in actions] == [("choose_event", 0), ("choose_event", 1)]
    assert get_available_action_types(state) == ["choose_event"]


def test_no_actions_once_the_game_is_over(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    state.winner = 0
    state.phase = PHASE_GAME_OVER
    assert get_available_action_types(state) == []
    assert get_available_actions(state, guild_defs, event_defs, character_defs) == []


def test_victory_points_by_player(make_state, character_defs):
    state = make_state(guilds=(4,))
    state.get_guild(4).max_investor = 1
    state.players[2].inns = [ResourceCard("inn")]
    assert get_victory_points_by_player(state, character_defs) == {0: 0, 1: 1, 2: 2}


def test_player_summary(make_state, character_defs):
    state = make_state(characters=("pirate", None, None), guilds=(5,))
    state.get_guild(5).max_investor = 0
    summary = get_player_summary(state, 0, character_defs)
    assert summary["character_name"] == "Pirata"
    assert summary["guilds_led"] == [5]
    assert summary["victory_points"] == 1
    with pytest.raises(KeyError):
        get_player_summary(state, 9, character_defs)


def test_game_summary(make_state, event_defs, character_defs):
    state = make_state(guilds=(4,))
    state.current_event = "famine"
    state.event_discard = ["prosperity"]
    summary = get_game_summary(state, event_defs, character_defs)
    assert summary["current_player"] == 0
    assert summary["phase"] == "action"
    assert summary["current_event"]["id"] == "famine"
    assert summary["discard_top"] == "prosperity"
    assert [g["number"] for g in summary["active_guilds"]] == [4]
    assert len(summary["players"]) == 3
    assert "end_turn" in summary["available_actions"]
