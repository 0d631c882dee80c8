"""
Query functions for UI integration.
These functions help the UI understand what actions are available
without mutating game state.
"""

from dataclasses import dataclass
from typing import Any

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
from gremios.engine.characters import get_character
from gremios.engine.errors import GameRuleError
from gremios.engine.reducer import PHASE_ALLOWED_ACTIONS, apply_action
from gremios.engine.state import GameState


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None
    kind: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error, "kind": self.kind}


# ===== Action Validation =====

def validate_action(
    state: GameState,
    action: Action,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
) -> ValidationResult:
    """
    Validate an action without applying it.
    The reducer runs against its own copy, so the given state is never touched.
    """
    try:
        apply_action(state, action, guild_defs, event_defs, character_defs)
    except GameRuleError as e:
        return ValidationResult(False, str(e), e.kind)
    return ValidationResult(True)


def get_available_action_types(state: GameState) -> list[str]:
    """Action types the current phase accepts (before per-action checks)."""
    if state.winner is not None:
        return []
    if state.pending_event_choice:
        return ["choose_event"]
    return list(PHASE_ALLOWED_ACTIONS.get(state.phase, []))


def _candidate_actions(state: GameState) -> list[Action]:
    player = state.get_current_player()
    pid = player.id
    if state.pending_event_choice:
        return [choose_event(pid, i) for i in range(len(state.pending_event_choice))]

    candidates: list[Action] = []
    candidates.extend(invest_guild(pid, g.number) for g in state.active_guilds)
    candidates.append(invest_expedition(pid))
    candidates.append(buy_land(pid))
    candidates.extend(cultivate_land(pid, i) for i in player.get_uncultivated_land_indices())
    candidates.extend(build_inn(pid, i) for i in range(len(player.lands)))
    candidates.extend(repair_inn(pid, i) for i in player.get_destroyed_inn_indices())
    candidates.extend(cause_mutiny(pid, g.number) for g in state.active_guilds if g.count_for(pid))
    candidates.append(buy_treasure(pid))
    candidates.extend(sell_treasure(pid, i) for i in range(len(player.treasures)))
    candidates.append(end_turn(pid))
    return candidates


def get_available_actions(
    state: GameState,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
) -> list[Action]:
    """Every concrete action the current player could apply right now."""
    allowed = get_available_action_types(state)
    if not allowed:
        return []
    return [
        action for action in _candidate_actions(state)
        if action.type in allowed
        and validate_action(state, action, guild_defs, event_defs, character_defs).valid
    ]


# ===== Read-only views =====

def get_victory_points_by_player(state: GameState, character_defs: dict) -> dict[int, int]:
    return {p.id: p.get_victory_points(state, character_defs) for p in state.players}


def get_player_summary(state: GameState, player_id: int, character_defs: dict) -> dict[str, Any]:
    """Public view of one seat, with derived counts and VP."""
    player = state.get_player(player_id)
    if player is None:
        raise KeyError(f"Unknown player: {player_id}")
    character_def = get_character(character_defs, player)
    return {
        "id": player.id,
        "name": player.name,
        "is_ai": player.is_ai,
        "color": player.color,
        "character": player.character,
        "character_name": character_def.name if character_def else None,
        "coins": player.coins,
        "reserve": player.reserve,
        "lands": len(player.lands),
        "cultivated_lands": player.get_cultivated_lands_count(),
        "active_inns": player.get_active_inns_count(),
        "destroyed_inns": player.get_destroyed_inns_count(),
        "treasures": player.get_treasure_count(),
        "has_discoverer_emblem": player.has_discoverer_emblem,
        "victory_points": player.get_victory_points(state, character_defs),
        "visible_victory_points": player.get_victory_points(state, character_defs, include_treasures=False),
        "guilds_led": [g.number for g in state.active_guilds if g.max_investor == player.id],
    }


def get_game_summary(
    state: GameState,
    event_defs: dict,
    character_defs: dict,
) -> dict[str, Any]:
    """
    Get a summary of the current game state for UI display.
    """
    current_event = event_defs.get(state.current_event) if state.current_event else None
    discard_top = state.event_discard[-1] if state.event_discard else None
    return {
        "round_number": state.round_number,
        "current_player": state.get_current_player().id,
        "phase": state.phase,
        "winner": state.winner,
        "active_guilds": [
            {
                "number": g.number,
                "name": g.name,
                "investments": [inv.player_id for inv in g.investments],
                "max_investor": g.max_investor,
                "blocked": g.blocked,
            }
            for g in state.active_guilds
        ],
        "current_event": current_event.to_dict() if current_event else None,
        "discard_top": discard_top,
        "event_deck_size": len(state.event_deck),
        "treasure_deck_size": len(state.treasure_deck),
        "active_temporary_events": list(state.active_temporary_events),
        "pending_event_choice": list(state.pending_event_choice),
        "expedition": [inv.player_id for inv in state.expedition.investments],
        "last_dice_roll": state.last_dice_roll,
        "players": [get_player_summary(state, p.id, character_defs) for p in state.players],
        "victory_points": get_victory_points_by_player(state, character_defs),
        "available_actions": get_available_action_types(state),
    }
