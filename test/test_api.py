"""
HTTP API happy path and error mapping, against a throwaway SQLite database.
"""

import pytest
from fastapi.testclient import TestClient

from gremios.api.main import app


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def game(client):
    response = client.post("/games", json={"num_players": 3, "character": "merchant", "seed": 5})
    assert response.status_code == 200
    return response.json()


def test_root(client):
    assert client.get("/").json()["message"] == "Gremios API"


def test_definitions(client):
    data = client.get("/definitions").json()
    assert len(data["guilds"]) == 10
    assert len(data["characters"]) == 12
    assert data["events"]["plague"]["affected_guilds"] == "all"
    assert "guild_vp" in data["characters"]["archbishop"]["triggers"]


def test_create_game(game):
    state = game["state"]
    assert state["phase"] == "action"
    assert state["current_player"] == 0
    assert state["players"][0]["character"] == "merchant"
    assert state["players"][0]["coins"] == 4
    assert len(state["active_guilds"]) == 3
    assert state["summary"]["available_actions"]


def test_create_game_rejects_bad_setup(client):
    assert client.post("/games", json={"num_players": 7}).status_code == 400
    assert client.post("/games", json={"character": "wizard"}).status_code == 400


def test_get_and_delete_game(client, game):
    game_id = game["game_id"]
    assert client.get(f"/games/{game_id}").json()["state"]["round_number"] == 1
    assert client.delete(f"/games/{game_id}").status_code == 200
    assert client.get(f"/games/{game_id}").status_code == 404
    assert client.delete(f"/games/{game_id}").status_code == 404


def test_unknown_game(client):
    assert client.get("/games/does-not-exist").status_code == 404
    assert client.post("/games/does-not-exist/buy-land").status_code == 404


def test_available_actions(client, game):
    data = client.get(f"/games/{game['game_id']}/available-actions").json()
    assert data["player_id"] == 0
    types = {a["type"] for a in data["actions"]}
    assert {"buy_land", "invest_expedition", "end_turn"} <= types


def test_human_turn_then_ai_turns(client, game):
    game_id = game["game_id"]

    response = client.post(f"/games/{game_id}/buy-land")
    assert response.status_code == 200
    assert response.json()["state"]["players"][0]["coins"] == 2
    assert response.json()["events"][0]["type"] == "land_bought"

    # Guild 7 does not exist
    response = client.post(f"/games/{game_id}/invest-guild", json={"guild_number": 7})
    assert response.status_code == 400

    response = client.post(f"/games/{game_id}/end-turn", json={"dice": [1, 1]})
    assert response.status_code == 200
    state = response.json()["state"]
    assert state["last_dice_roll"] == [1, 1]
    assert state["current_player"] == 1
    assert state["phase"] == "ai_thinking"

    # Not the human's turn any more
    assert client.post(f"/games/{game_id}/buy-land").status_code == 400

    response = client.post(f"/games/{game_id}/ai-turn")
    assert response.status_code == 200
    state = response.json()["state"]
    assert state["winner"] is not None or (state["current_player"] == 0 and state["phase"] == "action")
    assert state["winner"] is not None or state["round_number"] == 2

    # Persisted, not just cached
    assert client.get(f"/games/{game_id}").json()["state"]["round_number"] == state["round_number"]
