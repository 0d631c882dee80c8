"""
Player resources and victory points.
"""

import pytest

from gremios.engine import MAX_LOG_MESSAGES
from gremios.engine.actions import buy_land
from gremios.engine.errors import InsufficientFunds
from gremios.engine.reducer import apply_action
from gremios.engine.state import GameState, PlayerState, ResourceCard, Treasure


def test_victory_points_are_pure(make_state, character_defs):
    state = make_state(characters=("archbishop", None, None), guilds=(2, 4))
    player = state.players[0]
    state.get_guild(2).max_investor = 0
    player.inns.append(ResourceCard("inn"))
    player.treasures.append(Treasure("rare", 2))
    before = state.to_dict()

    first = player.get_victory_points(state, character_defs)
    second = player.get_victory_points(state, character_defs)

    assert first == second == 2 + 2 + 2
    assert state.to_dict() == before


def test_visible_victory_points_hide_treasures(make_state, character_defs):
    state = make_state()
    player = state.players[0]
    player.treasures = [Treasure("common", 1), Treasure("rare", 2)]
    player.has_discoverer_emblem = True
    assert player.get_victory_points(state, character_defs) == 4
    assert player.get_victory_points(state, character_defs, include_treasures=False) == 1


@pytest.mark.parametrize("coins,amount,ok,left", [(5, 3, True, 2), (3, 3, True, 0), (2, 3, False, 2)])
def test_remove_coins(coins, amount, ok, left):
    player = PlayerState(id=0, name="Human", coins=coins)
    assert player.remove_coins(amount) is ok
    assert player.coins == left


def test_add_coins_from_reserve_is_capped():
    player = PlayerState(id=0, name="Human", coins=0, reserve=1)
    assert player.add_coins(3, from_reserve=True) == 1
    assert player.coins == 1
    assert player.reserve == 0
    assert player.add_coins(2, from_reserve=True) == 0
    assert player.coins == 1


def test_buy_land_then_fail_for_lack_of_coins(make_state, guild_defs, event_defs, character_defs):
    state = make_state()
    state, _ = apply_action(state, buy_land(0), guild_defs, event_defs, character_defs)
    human = state.players[0]
    assert human.coins == 1
    assert len(human.lands) == 1
    assert human.lands[0].cultivated is False

    with pytest.raises(InsufficientFunds):
        apply_action(state, buy_land(0), guild_defs, event_defs, character_defs)
    assert state.players[0].coins == 1
    assert len(state.players[0].lands) == 1


def test_cultivate_land_preconditions():
    player = PlayerState(id=0, name="Human", coins=1, lands=[ResourceCard("land"), ResourceCard("land")])
    assert player.cultivate_land(5) is False
    assert player.cultivate_land(0) is True
    assert player.coins == 0
    assert player.cultivate_land(0, is_free=True) is False
    assert player.cultivate_land(1) is False
    assert player.cultivate_land(1, is_free=True) is True
    assert player.get_cultivated_lands_count() == 2


def test_build_inn_consumes_the_land():
    player = PlayerState(id=0, name="Human", coins=6, lands=[ResourceCard("land", cultivated=True), ResourceCard("land")])
    assert player.build_inn(1) is True
    assert player.coins == 0
    assert len(player.lands) == 1 and player.lands[0].cultivated
    assert len(player.inns) == 1

    # Fails without mutation
    assert player.build_inn(0) is False
    assert len(player.lands) == 1 and len(player.inns) == 1


def test_master_builder_cost_is_a_parameter():
    player = PlayerState(id=0, name="Human", coins=5, lands=[ResourceCard("land")])
    assert player.build_inn(0, inn_cost=5) is True
    assert player.coins == 0


def test_repair_inn():
    player = PlayerState(id=0, name="Human", coins=1, inns=[ResourceCard("inn"), ResourceCard("inn", destroyed=True)])
    assert player.repair_inn(0) is False
    assert player.repair_inn(3) is False
    assert player.repair_inn(1) is True
    assert player.coins == 0
    assert player.get_destroyed_inns_count() == 0


def test_inn_victory_points(make_state, character_defs):
    state = make_state()
    player = state.players[0]
    player.inns.append(ResourceCard("inn"))
    assert player.get_victory_points(state, character_defs) == 2
    player.inns[0].destroyed = True
    assert player.get_victory_points(state, character_defs) == 0


def test_archbishop_church_vp(make_state, character_defs):
    state = make_state(characters=("archbishop", "merchant", None), guilds=(2, 4, 12))
    state.get_guild(2).max_investor = 0
    state.get_guild(4).max_investor = 1
    archbishop, merchant = state.players[0], state.players[1]
    assert archbishop.get_victory_points(state, character_defs) == 2
    assert merchant.get_victory_points(state, character_defs) == 1

    state.get_guild(12).max_investor = 0
    state.get_guild(4).max_investor = 0
    assert archbishop.get_victory_points(state, character_defs) == 2 + 2 + 1


def test_index_helpers_keep_order():
    player = PlayerState(
        id=0,
        name="Human",
        lands=[ResourceCard("land", cultivated=True), ResourceCard("land"), ResourceCard("land")],
        inns=[ResourceCard("inn", destroyed=True), ResourceCard("inn"), ResourceCard("inn", destroyed=True)],
        treasures=[Treasure("common", 1), Treasure("wealth", 0, 3), Treasure("wealth", 0, 4)],
    )
    assert player.get_uncultivated_land_indices() == [1, 2]
    assert player.get_destroyed_inn_indices() == [0, 2]
    assert player.get_wealth_treasure_indices() == [1, 2]

    assert player.convert_wealth_treasures() == 7
    assert [t.type for t in player.treasures] == ["common"]


def test_game_state_json_round_trip(make_state):
    state = make_state(guilds=(5, 6), event_deck=["famine", "prosperity"])
    state.players[1].lands.append(ResourceCard("land", cultivated=True))
    state.add_log("Game started", "system")
    restored = GameState.from_json(state.to_json())
    assert restored.to_dict() == state.to_dict()


def test_from_dict_tolerates_missing_keys():
    state = GameState.from_dict({"players": [{"id": 0, "name": "Human"}]})
    assert state.round_number == 1
    assert state.players[0].coins == 3
    assert state.active_guilds == []


def test_log_drops_duplicates_and_keeps_the_newest(make_state):
    state = make_state()
    state.log = []
    state.add_log("Roll: 3 + 4 = 7", "system")
    state.add_log("Roll: 3 + 4 = 7", "system")
    assert len(state.log) == 1

    for i in range(MAX_LOG_MESSAGES + 5):
        state.add_log(f"entry {i}")
    assert len(state.log) == MAX_LOG_MESSAGES
    assert state.log[-1].message == f"entry {MAX_LOG_MESSAGES + 4}"
    assert state.log[0].message == "entry 5"
