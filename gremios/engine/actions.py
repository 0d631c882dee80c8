"""
Action definitions for the game.
Actions are immutable, deterministic instructions. Optional "dice" in a
payload fixes the roll an action triggers (replays and tests).
"""

from dataclasses import dataclass


@dataclass
class Action:
    """Base action class. All actions have a type, player_id, and payload."""
    type: str  # e.g., "invest_guild", "buy_land", "end_turn"
    player_id: int  # Seat performing the action
    payload: dict  # Action-specific data

    def to_dict(self) -> dict:
        return {"type": self.type, "player_id": self.player_id, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        return cls(type=data["type"], player_id=int(data["player_id"]), payload=dict(data.get("payload") or {}))


def _with_dice(payload: dict, dice: list[int] | None) -> dict:
    if dice is not None:
        payload["dice"] = list(dice)
    return payload


def invest_guild(player_id: int, guild_number: int) -> Action:
    """Place one token in a founded guild (2 coins, 1 of which goes to reserve)."""
    return Action(type="invest_guild", player_id=player_id, payload={"guild_number": guild_number})


def invest_expedition(player_id: int, dice: list[int] | None = None) -> Action:
    """
    Place one token in the expedition.
    dice is only used when this token fills the pool and forces an immediate resolution.
    """
    return Action(type="invest_expedition", player_id=player_id, payload=_with_dice({}, dice))


def buy_land(player_id: int) -> Action:
    return Action(type="buy_land", player_id=player_id, payload={})


def cultivate_land(player_id: int, land_index: int) -> Action:
    return Action(type="cultivate_land", player_id=player_id, payload={"land_index": land_index})


def build_inn(player_id: int, land_index: int) -> Action:
    """Replace a land with an inn."""
    return Action(type="build_inn", player_id=player_id, payload={"land_index": land_index})


def repair_inn(player_id: int, inn_index: int) -> Action:
    return Action(type="repair_inn", player_id=player_id, payload={"inn_index": inn_index})


def cause_mutiny(player_id: int, guild_number: int) -> Action:
    """Mercenary only: pay 1 coin to cause a mutiny in a guild they invested in."""
    return Action(type="cause_mutiny", player_id=player_id, payload={"guild_number": guild_number})


def buy_treasure(player_id: int) -> Action:
    """Artisan only: take the top treasure for 4 coins."""
    return Action(type="buy_treasure", player_id=player_id, payload={})


def sell_treasure(player_id: int, treasure_index: int) -> Action:
    """Artisan only: sell a treasure for 4 coins; it is shuffled back into the treasure deck."""
    return Action(type="sell_treasure", player_id=player_id, payload={"treasure_index": treasure_index})


def choose_event(player_id: int, index: int, dice: list[int] | None = None) -> Action:
    """
    Governor picks one of the two revealed events (index 0 or 1).
    The other is carried to the next event resolution.
    """
    return Action(type="choose_event", player_id=player_id, payload=_with_dice({"index": index}, dice))


def end_turn(player_id: int, dice: list[int] | None = None) -> Action:
    """
    End the action phase: the event is revealed and resolved, then the production roll.
    dice fixes the production roll.
    """
    return Action(type="end_turn", player_id=player_id, payload=_with_dice({}, dice))
