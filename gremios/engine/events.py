"""
Game events for UI hooks and logging.
Events describe what happened during action processing, with enough detail
(amounts, indices, dice) for a renderer to animate without re-deriving rules.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Phase/Turn events
PHASE_CHANGED = "phase_changed"
TURN_STARTED = "turn_started"
TURN_ENDED = "turn_ended"

# Resource events
COINS_CHANGED = "coins_changed"
INCOME_COLLECTED = "income_collected"
ABILITY_TRIGGERED = "ability_triggered"

# Board events
INVESTMENT_MADE = "investment_made"
MAX_INVESTOR_CHANGED = "max_investor_changed"
LAND_BOUGHT = "land_bought"
LAND_CULTIVATED = "land_cultivated"
INN_BUILT = "inn_built"
INN_REPAIRED = "inn_repaired"
TREASURE_GAINED = "treasure_gained"
TREASURE_SOLD = "treasure_sold"
MUTINY = "mutiny"
BANKRUPTCY = "bankruptcy"

# Event card events
EVENT_DRAWN = "event_drawn"
EVENT_CHOICE_PENDING = "event_choice_pending"
EVENT_RESOLVED = "event_resolved"
GUILD_FOUNDED = "guild_founded"
TEMPORARY_EVENTS_CLEARED = "temporary_events_cleared"
DECK_RESHUFFLED = "deck_reshuffled"

# Dice events
DICE_ROLLED = "dice_rolled"
GUILD_PAID = "guild_paid"
EXPEDITION_RESOLVED = "expedition_resolved"

# Victory events
VICTORY = "victory"


# ===== Event Factory Functions =====

def phase_changed(old_phase: str, new_phase: str, player_id: int) -> GameEvent:
    return GameEvent(PHASE_CHANGED, {
        "old_phase": old_phase,
        "new_phase": new_phase,
        "player_id": player_id,
    })


def turn_started(round_number: int, player_id: int) -> GameEvent:
    return GameEvent(TURN_STARTED, {
        "round_number": round_number,
        "player_id": player_id,
    })


def turn_ended(round_number: int, player_id: int) -> GameEvent:
    return GameEvent(TURN_ENDED, {
        "round_number": round_number,
        "player_id": player_id,
    })


def coins_changed(
    player_id: int,
    old_coins: int,
    new_coins: int,
    reason: str,
    old_reserve: int | None = None,
    new_reserve: int | None = None,
) -> GameEvent:
    payload = {
        "player_id": player_id,
        "old_coins": old_coins,
        "new_coins": new_coins,
        "change": new_coins - old_coins,
        "reason": reason,
    }
    if old_reserve is not None and new_reserve is not None:
        payload["old_reserve"] = old_reserve
        payload["new_reserve"] = new_reserve
    return GameEvent(COINS_CHANGED, payload)


def income_collected(player_id: int, base: int, inns: int, ability: int, new_coins: int) -> GameEvent:
    """Emitted at turn start when the player collects their base income."""
    return GameEvent(INCOME_COLLECTED, {
        "player_id": player_id,
        "base": base,
        "inns": inns,
        "ability": ability,
        "total": base + inns + ability,
        "new_coins": new_coins,
    })


def ability_triggered(player_id: int, character_id: str, trigger: str, coins: int, from_reserve: bool) -> GameEvent:
    """
    A character hook produced an effect.
    coins is the amount actually moved (capped by reserve when from_reserve).
    """
    return GameEvent(ABILITY_TRIGGERED, {
        "player_id": player_id,
        "character_id": character_id,
        "trigger": trigger,
        "coins": coins,
        "from_reserve": from_reserve,
    })


def investment_made(
    player_id: int,
    target: str,  # "guild" or "expedition"
    guild_number: int | None,
    cost: int,
    free: bool,
    slots_used: int,
) -> GameEvent:
    return GameEvent(INVESTMENT_MADE, {
        "player_id": player_id,
        "target": target,
        "guild_number": guild_number,
        "cost": cost,
        "free": free,
        "slots_used": slots_used,
    })


def max_investor_changed(guild_number: int, old_investor: int | None, new_investor: int | None) -> GameEvent:
    return GameEvent(MAX_INVESTOR_CHANGED, {
        "guild_number": guild_number,
        "old_investor": old_investor,
        "new_investor": new_investor,
    })


def land_bought(player_id: int, land_index: int, cost: int, cultivated: bool) -> GameEvent:
    return GameEvent(LAND_BOUGHT, {
        "player_id": player_id,
        "land_index": land_index,
        "cost": cost,
        "cultivated": cultivated,
    })


def land_cultivated(player_id: int, land_index: int, cost: int) -> GameEvent:
    return GameEvent(LAND_CULTIVATED, {
        "player_id": player_id,
        "land_index": land_index,
        "cost": cost,
    })


def inn_built(player_id: int, land_index: int, inn_index: int, cost: int) -> GameEvent:
    return GameEvent(INN_BUILT, {
        "player_id": player_id,
        "land_index": land_index,
        "inn_index": inn_index,
        "cost": cost,
    })


def inn_repaired(player_id: int, inn_index: int, cost: int) -> GameEvent:
    return GameEvent(INN_REPAIRED, {
        "player_id": player_id,
        "inn_index": inn_index,
        "cost": cost,
    })


def treasure_gained(player_id: int, treasure: dict[str, Any], source: str) -> GameEvent:
    """source: "expedition" or "purchase"."""
    return GameEvent(TREASURE_GAINED, {
        "player_id": player_id,
        "treasure": treasure,
        "source": source,
    })


def treasure_sold(player_id: int, treasure: dict[str, Any], coins: int, returned_to_deck: bool) -> GameEvent:
    return GameEvent(TREASURE_SOLD, {
        "player_id": player_id,
        "treasure": treasure,
        "coins": coins,
        "returned_to_deck": returned_to_deck,
    })


def mutiny(guild_number: int, losses: dict[int, int], cause: str) -> GameEvent:
    """losses: player_id -> investments removed. cause: "event", "temporary_stack" or "mercenary"."""
    return GameEvent(MUTINY, {
        "guild_number": guild_number,
        "losses": losses,
        "cause": cause,
    })


def bankruptcy(guild_number: int, losses: dict[int, int], cause: str) -> GameEvent:
    return GameEvent(BANKRUPTCY, {
        "guild_number": guild_number,
        "losses": losses,
        "cause": cause,
    })


def event_drawn(event_id: str, kind: str, player_id: int, carried: bool = False) -> GameEvent:
    return GameEvent(EVENT_DRAWN, {
        "event_id": event_id,
        "kind": kind,
        "player_id": player_id,
        "carried": carried,
    })


def event_choice_pending(player_id: int, options: list[str]) -> GameEvent:
    """Governor revealed two events and must pick one."""
    return GameEvent(EVENT_CHOICE_PENDING, {
        "player_id": player_id,
        "options": options,
    })


def event_resolved(event_id: str, kind: str, message: str) -> GameEvent:
    return GameEvent(EVENT_RESOLVED, {
        "event_id": event_id,
        "kind": kind,
        "message": message,
    })


def guild_founded(guild_number: int, name: str) -> GameEvent:
    return GameEvent(GUILD_FOUNDED, {
        "guild_number": guild_number,
        "name": name,
    })


def temporary_events_cleared(event_ids: list[str], reason: str) -> GameEvent:
    """reason: "prosperity", "clearing_roll" or "stacked"."""
    return GameEvent(TEMPORARY_EVENTS_CLEARED, {
        "event_ids": event_ids,
        "reason": reason,
    })


def deck_reshuffled(deck_size: int, set_aside: int) -> GameEvent:
    return GameEvent(DECK_RESHUFFLED, {
        "deck_size": deck_size,
        "set_aside": set_aside,
    })


def dice_rolled(dice: list[int], purpose: str) -> GameEvent:
    """purpose: "production" or "expedition"."""
    return GameEvent(DICE_ROLLED, {
        "dice": dice,
        "total": sum(dice),
        "purpose": purpose,
    })


def guild_paid(
    guild_number: int | None,
    payouts: dict[int, int],
    blocked: bool,
    founded: bool,
) -> GameEvent:
    """payouts: player_id -> coins received from this production roll."""
    return GameEvent(GUILD_PAID, {
        "guild_number": guild_number,
        "payouts": payouts,
        "blocked": blocked,
        "founded": founded,
    })


def expedition_resolved(
    total: int,
    success: bool,
    investments: list[int],
    treasures: dict[int, int],
    pirate_coins: int,
) -> GameEvent:
    """
    investments: player_ids of the tokens that were in the pool (in order).
    treasures: player_id -> treasures received (success only).
    pirate_coins: coins collected by the Pirate (failure only).
    """
    return GameEvent(EXPEDITION_RESOLVED, {
        "total": total,
        "success": success,
        "investments": investments,
        "treasures": treasures,
        "pirate_coins": pirate_coins,
    })


def victory(winner: int, victory_points: dict[int, int], required: int) -> GameEvent:
    """
    Emitted when a player reaches the winning threshold.

    Args:
        winner: Winning player id
        victory_points: {player_id: vp} for all players at check time
        required: The threshold needed for victory
    """
    return GameEvent(VICTORY, {
        "winner": winner,
        "victory_points": victory_points,
        "required": required,
    })
