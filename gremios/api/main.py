"""
FastAPI backend for Gremios.
Provides REST API endpoints for game state management and actions.
Seat 0 is the human; AI seats are advanced with POST /games/{id}/ai-turn.
"""

import json
import os
import random
import uuid
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .database import get_db, init_db
from .models import Game as GameModel

from gremios.config import DEFAULT_HUMAN_CHARACTER, DEFAULT_NUM_PLAYERS, MAX_AI_TURNS_PER_REQUEST
from gremios.engine.actions import (
    Action,
    build_inn,
    buy_land,
    buy_treasure,
    cause_mutiny,
    choose_event,
    cultivate_land,
    end_turn,
    invest_expedition,
    invest_guild,
    repair_inn,
    sell_treasure,
)
from gremios.engine.definitions import definitions_to_dict, load_static_definitions
from gremios.engine.errors import GameRuleError
from gremios.engine.policies import RandomPolicy
from gremios.engine.queries import get_available_actions as query_available_actions, get_game_summary, validate_action
from gremios.engine.reducer import apply_action, play_ai_turns
from gremios.engine.state import GameState
from gremios.engine.utils import initialize_game_state

HUMAN_PLAYER_ID = 0

app = FastAPI(
    title="Gremios API",
    description="Backend API for Gremios - a guild investment board game",
    version="1.0.0",
)

# CORS configuration for frontend (comma-separated CORS_ORIGINS overrides)
CORS_ORIGINS = [
    o.strip() for o in os.environ.get(
        "CORS_ORIGINS", "http://localhost:5173,http://localhost:5174,http://localhost:3000"
    ).split(",") if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            print(f"[500] {method} {path}", flush=True)
        return response
    except Exception:
        print(f"[500] {method} {path} (exception)", flush=True)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return 500 with CORS headers and full traceback so the frontend can read the error."""
    import traceback
    tb = traceback.format_exc()
    traceback.print_exc()
    origin = request.headers.get("origin")
    allow_origin = origin if origin in CORS_ORIGINS else CORS_ORIGINS[0]
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "traceback": tb},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )


guild_defs, event_defs, character_defs = load_static_definitions()

# In-memory cache of loaded game state (also persisted in DB)
games: dict[str, GameState] = {}


# ===== Pydantic Models =====

class CreateGameRequest(BaseModel):
    name: str = "Gremios"
    num_players: int = DEFAULT_NUM_PLAYERS
    # Character for the human seat; None draws one at random
    character: str | None = DEFAULT_HUMAN_CHARACTER
    seed: int | None = None


class GuildRequest(BaseModel):
    guild_number: int


class LandRequest(BaseModel):
    land_index: int


class InnRequest(BaseModel):
    inn_index: int


class TreasureRequest(BaseModel):
    treasure_index: int


class ChooseEventRequest(BaseModel):
    index: int


class DiceRequest(BaseModel):
    """Optional fixed dice (two values 1-6) for the roll the action triggers."""
    dice: list[int] | None = None


# ===== Persistence =====

def get_game(game_id: str, db: Session | None = None) -> GameState:
    """Get game state from DB (always fresh when db provided); raise 404 if not found."""
    if db is None:
        if game_id in games:
            return games[game_id]
        db = next(get_db())
    row = db.query(GameModel).filter(GameModel.id == game_id).first()
    if not row:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    try:
        raw = json.loads(row.game_state) if isinstance(row.game_state, str) else row.game_state
        if not isinstance(raw, dict):
            raw = {}
        state = GameState.from_dict(raw)
    except json.JSONDecodeError:
        # Corrupt state in DB: treat as not found so the client can create a fresh game
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    games[game_id] = state
    return state


def save_game(game_id: str, state: GameState, db: Session | None = None) -> None:
    """Persist game state to DB and cache."""
    games[game_id] = state
    if db is None:
        db = next(get_db())
    row = db.query(GameModel).filter(GameModel.id == game_id).first()
    if row:
        row.game_state = state.to_json(indent=None)
        row.status = "finished" if state.winner is not None else "active"
        db.commit()


def state_for_response(state: GameState) -> dict[str, Any]:
    """State dict plus the computed summary (VP, players, available action types) for the UI."""
    out = state.to_dict()
    out["summary"] = get_game_summary(state, event_defs, character_defs)
    return out


def _apply(game_id: str, action: Action, db: Session) -> dict[str, Any]:
    """Validate and apply one human action; rule violations become 400."""
    state = get_game(game_id, db)
    validation = validate_action(state, action, guild_defs, event_defs, character_defs)
    if not validation.valid:
        raise HTTPException(status_code=400, detail=validation.error)
    try:
        new_state, events = apply_action(state, action, guild_defs, event_defs, character_defs)
    except GameRuleError as e:
        # Dice-dependent outcomes can differ between validation and application
        raise HTTPException(status_code=400, detail=str(e))
    save_game(game_id, new_state, db)
    return {
        "state": state_for_response(new_state),
        "events": [e.to_dict() for e in events],
    }


@app.on_event("startup")
def on_startup():
    init_db()


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Gremios API", "version": "1.0.0"}


@app.get("/definitions")
def get_definitions():
    """Get all static game definitions (guilds, events, characters)."""
    return definitions_to_dict(guild_defs, event_defs, character_defs)


@app.post("/games")
def create_game(request: CreateGameRequest, db: Session = Depends(get_db)):
    """Create and persist a new game. The human seat is ready to act in the response state."""
    rng = random.Random(request.seed) if request.seed is not None else random.Random()
    try:
        state = initialize_game_state(
            request.num_players,
            guild_defs,
            event_defs,
            character_defs,
            characters=[request.character],
            rng=rng,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    game_id = str(uuid.uuid4())
    config = {"num_players": request.num_players, "character": request.character, "seed": request.seed}
    db.add(GameModel(
        id=game_id,
        name=request.name,
        status="active",
        game_state=state.to_json(indent=None),
        config=json.dumps(config),
    ))
    db.commit()
    games[game_id] = state
    return {"game_id": game_id, "state": state_for_response(state)}


@app.get("/games/{game_id}")
def get_game_state(game_id: str, db: Session = Depends(get_db)):
    """Get current game state (from DB, cached in memory)."""
    state = get_game(game_id, db)
    return {"game_id": game_id, "state": state_for_response(state)}


@app.delete("/games/{game_id}")
def delete_game(game_id: str, db: Session = Depends(get_db)):
    """Delete a game from DB and cache."""
    row = db.query(GameModel).filter(GameModel.id == game_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Game not found")
    db.delete(row)
    db.commit()
    games.pop(game_id, None)
    return {"message": f"Game {game_id} deleted"}


@app.get("/games/{game_id}/available-actions")
def get_available_actions(game_id: str, db: Session = Depends(get_db)):
    """Concrete actions the current player may take right now."""
    state = get_game(game_id, db)
    actions = query_available_actions(state, guild_defs, event_defs, character_defs)
    return {
        "player_id": state.get_current_player().id,
        "phase": state.phase,
        "actions": [a.to_dict() for a in actions],
    }


@app.post("/games/{game_id}/invest-guild")
def do_invest_guild(game_id: str, request: GuildRequest, db: Session = Depends(get_db)):
    return _apply(game_id, invest_guild(HUMAN_PLAYER_ID, request.guild_number), db)


@app.post("/games/{game_id}/invest-expedition")
def do_invest_expedition(game_id: str, request: DiceRequest | None = None, db: Session = Depends(get_db)):
    dice = request.dice if request else None
    return _apply(game_id, invest_expedition(HUMAN_PLAYER_ID, dice), db)


@app.post("/games/{game_id}/buy-land")
def do_buy_land(game_id: str, db: Session = Depends(get_db)):
    return _apply(game_id, buy_land(HUMAN_PLAYER_ID), db)


@app.post("/games/{game_id}/cultivate-land")
def do_cultivate_land(game_id: str, request: LandRequest, db: Session = Depends(get_db)):
    return _apply(game_id, cultivate_land(HUMAN_PLAYER_ID, request.land_index), db)


@app.post("/games/{game_id}/build-inn")
def do_build_inn(game_id: str, request: LandRequest, db: Session = Depends(get_db)):
    return _apply(game_id, build_inn(HUMAN_PLAYER_ID, request.land_index), db)


@app.post("/games/{game_id}/repair-inn")
def do_repair_inn(game_id: str, request: InnRequest, db: Session = Depends(get_db)):
    return _apply(game_id, repair_inn(HUMAN_PLAYER_ID, request.inn_index), db)


@app.post("/games/{game_id}/cause-mutiny")
def do_cause_mutiny(game_id: str, request: GuildRequest, db: Session = Depends(get_db)):
    """Mercenary ability."""
    return _apply(game_id, cause_mutiny(HUMAN_PLAYER_ID, request.guild_number), db)


@app.post("/games/{game_id}/buy-treasure")
def do_buy_treasure(game_id: str, db: Session = Depends(get_db)):
    """Artisan ability."""
    return _apply(game_id, buy_treasure(HUMAN_PLAYER_ID), db)


@app.post("/games/{game_id}/sell-treasure")
def do_sell_treasure(game_id: str, request: TreasureRequest, db: Session = Depends(get_db)):
    """Artisan ability."""
    return _apply(game_id, sell_treasure(HUMAN_PLAYER_ID, request.treasure_index), db)


@app.post("/games/{game_id}/choose-event")
def do_choose_event(game_id: str, request: ChooseEventRequest, db: Session = Depends(get_db)):
    """Governor picks one of the two revealed events."""
    return _apply(game_id, choose_event(HUMAN_PLAYER_ID, request.index), db)


@app.post("/games/{game_id}/end-turn")
def do_end_turn(game_id: str, request: DiceRequest | None = None, db: Session = Depends(get_db)):
    """End the human's turn: event, production roll, then the next seat's turn start."""
    dice = request.dice if request else None
    return _apply(game_id, end_turn(HUMAN_PLAYER_ID, dice), db)


@app.post("/games/{game_id}/ai-turn")
def do_ai_turns(game_id: str, db: Session = Depends(get_db)):
    """Play AI seats until the human is to act (or the game ends)."""
    state = get_game(game_id, db)
    policy = RandomPolicy(guild_defs, event_defs, character_defs)
    new_state, events = play_ai_turns(
        state, policy, guild_defs, event_defs, character_defs, max_turns=MAX_AI_TURNS_PER_REQUEST)
    save_game(game_id, new_state, db)
    return {
        "state": state_for_response(new_state),
        "events": [e.to_dict() for e in events],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
