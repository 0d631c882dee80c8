"""
Game state representation.
The reducer copies state before mutating it, so callers always hold a complete state.
Includes JSON serialization for save/load functionality.
"""

import json
import math
from dataclasses import dataclass, field
from copy import deepcopy
from typing import Any

from gremios.engine import (
    STARTING_COINS,
    LAND_COST,
    CULTIVATE_COST,
    INN_COST,
    INN_REPAIR_COST,
    INN_VP,
    DISCOVERER_EMBLEM_VP,
    MAX_EXPEDITION_INVESTMENTS,
    MAX_LOG_MESSAGES,
)

TREASURE_WEALTH = "wealth"
TREASURE_COMMON = "common"
TREASURE_RARE = "rare"

PHASE_TURN_START = "turn_start"
PHASE_ACTION = "action"
PHASE_AI_THINKING = "ai_thinking"
PHASE_EVENT_RESOLUTION = "event_resolution"
PHASE_GAME_OVER = "game_over"


def _int(v: Any, default: int) -> int:
    try:
        return int(v) if v is not None else default
    except (TypeError, ValueError):
        return default


def _optional_int(v: Any) -> int | None:
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _list(v: Any) -> list:
    return list(v) if isinstance(v, list) else []


@dataclass
class ResourceCard:
    """A land (may be cultivated) or an inn (may be destroyed)."""
    type: str  # "land" or "inn"
    cultivated: bool = False  # lands only
    destroyed: bool = False  # inns only

    def get_vp(self) -> int:
        if self.type == "inn" and not self.destroyed:
            return INN_VP
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "cultivated": self.cultivated, "destroyed": self.destroyed}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResourceCard":
        if not isinstance(data, dict):
            data = {}
        return cls(
            type=str(data.get("type") or "land"),
            cultivated=bool(data.get("cultivated", False)),
            destroyed=bool(data.get("destroyed", False)),
        )


@dataclass
class Treasure:
    """Treasure card. Wealth treasures carry a coin value fixed when the deck was built."""
    type: str  # "wealth", "common", "rare"
    vp: int
    coin_value: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out = {"type": self.type, "vp": self.vp}
        if self.coin_value is not None:
            out["coin_value"] = self.coin_value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Treasure":
        if not isinstance(data, dict):
            data = {}
        return cls(
            type=str(data.get("type") or TREASURE_COMMON),
            vp=_int(data.get("vp"), 0),
            coin_value=_optional_int(data.get("coin_value")),
        )


@dataclass
class Investment:
    """One investment token in a guild or in the expedition."""
    player_id: int
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"player_id": self.player_id, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Investment":
        if not isinstance(data, dict):
            data = {}
        return cls(player_id=_int(data.get("player_id"), 0), color=data.get("color"))


@dataclass
class GuildState:
    """A founded guild on the board."""
    number: int
    name: str
    investments: list[Investment] = field(default_factory=list)  # ordered, oldest first
    max_investor: int | None = None
    blocked: bool = False

    def count_for(self, player_id: int) -> int:
        return sum(1 for inv in self.investments if inv.player_id == player_id)

    def investor_ids(self) -> list[int]:
        """Distinct investor ids in order of their first investment."""
        seen: list[int] = []
        for inv in self.investments:
            if inv.player_id not in seen:
                seen.append(inv.player_id)
        return seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "investments": [inv.to_dict() for inv in self.investments],
            "max_investor": self.max_investor,
            "blocked": self.blocked,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GuildState":
        if not isinstance(data, dict):
            data = {}
        return cls(
            number=_int(data.get("number"), 0),
            name=str(data.get("name") or ""),
            investments=[Investment.from_dict(i) for i in _list(data.get("investments")) if isinstance(i, dict)],
            max_investor=_optional_int(data.get("max_investor")),
            blocked=bool(data.get("blocked", False)),
        )


@dataclass
class ExpeditionState:
    """Shared expedition pool, resolved by dice."""
    investments: list[Investment] = field(default_factory=list)
    max_slots: int = MAX_EXPEDITION_INVESTMENTS

    def count_for(self, player_id: int) -> int:
        return sum(1 for inv in self.investments if inv.player_id == player_id)

    def is_full(self) -> bool:
        return len(self.investments) >= self.max_slots

    def to_dict(self) -> dict[str, Any]:
        return {
            "investments": [inv.to_dict() for inv in self.investments],
            "max_slots": self.max_slots,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExpeditionState":
        if not isinstance(data, dict):
            data = {}
        return cls(
            investments=[Investment.from_dict(i) for i in _list(data.get("investments")) if isinstance(i, dict)],
            max_slots=_int(data.get("max_slots"), MAX_EXPEDITION_INVESTMENTS),
        )


@dataclass
class LogEntry:
    """Human-readable line for the on-screen log."""
    message: str
    kind: str = "info"  # "info", "action", "event", "ability", "system"

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "kind": self.kind}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        if not isinstance(data, dict):
            data = {}
        return cls(message=str(data.get("message") or ""), kind=str(data.get("kind") or "info"))


@dataclass
class PlayerState:
    """One seat at the table: resources, character and per-turn flags."""
    id: int  # 0 = human, others AI
    name: str
    is_ai: bool = False
    color: str | None = None
    coins: int = STARTING_COINS
    reserve: int = 0  # Separate pool; moved into coins only by explicit transfer
    character: str | None = None  # CharacterId value, assigned once at setup
    lands: list[ResourceCard] = field(default_factory=list)
    inns: list[ResourceCard] = field(default_factory=list)
    treasures: list[Treasure] = field(default_factory=list)
    has_discoverer_emblem: bool = False
    # Game clock value when the treasure count last changed (emblem tie-break)
    treasure_timestamp: int = 0

    # Turn tracking (reset at the start of each of this player's turns)
    invested_in_guild: bool = False
    invested_in_expedition: bool = False
    investments_this_turn: int = 0
    guild_investments_this_turn: int = 0
    expedition_investments_this_turn: int = 0
    used_free_repair: bool = False
    used_free_cultivate: bool = False
    used_mutiny_ability: bool = False
    used_artisan_treasure_ability: bool = False

    def reset_turn_flags(self) -> None:
        self.invested_in_guild = False
        self.invested_in_expedition = False
        self.investments_this_turn = 0
        self.guild_investments_this_turn = 0
        self.expedition_investments_this_turn = 0
        self.used_free_repair = False
        self.used_free_cultivate = False
        self.used_mutiny_ability = False
        self.used_artisan_treasure_ability = False

    # ===== Coins =====

    def add_coins(self, amount: int, from_reserve: bool = False) -> int:
        """
        Add coins. With from_reserve, moves min(amount, reserve) out of the reserve
        instead of creating coins. Returns the amount actually added.
        """
        if from_reserve:
            actual = min(amount, self.reserve)
            self.reserve -= actual
            self.coins += actual
            return actual
        self.coins += amount
        return amount

    def remove_coins(self, amount: int) -> bool:
        if self.coins >= amount:
            self.coins -= amount
            return True
        return False

    def add_to_reserve(self, amount: int) -> None:
        self.reserve += amount

    def remove_from_reserve(self, amount: int) -> bool:
        if self.reserve >= amount:
            self.reserve -= amount
            return True
        return False

    # ===== Lands and inns =====

    def buy_land(self) -> bool:
        if self.remove_coins(LAND_COST):
            self.lands.append(ResourceCard("land", cultivated=False))
            return True
        return False

    def cultivate_land(self, index: int, is_free: bool = False) -> bool:
        if 0 <= index < len(self.lands) and not self.lands[index].cultivated:
            if is_free or self.remove_coins(CULTIVATE_COST):
                self.lands[index].cultivated = True
                return True
        return False

    def build_inn(self, land_index: int, inn_cost: int = INN_COST) -> bool:
        """The inn replaces the land at land_index."""
        if 0 <= land_index < len(self.lands) and self.remove_coins(inn_cost):
            self.lands.pop(land_index)
            self.inns.append(ResourceCard("inn", destroyed=False))
            return True
        return False

    def repair_inn(self, inn_index: int, is_free: bool = False) -> bool:
        if 0 <= inn_index < len(self.inns) and self.inns[inn_index].destroyed:
            if is_free or self.remove_coins(INN_REPAIR_COST):
                self.inns[inn_index].destroyed = False
                return True
        return False

    # ===== Treasures =====

    def add_treasure(self, treasure: Treasure, timestamp: int = 0) -> None:
        self.treasures.append(treasure)
        self.treasure_timestamp = timestamp

    def remove_treasure(self, index: int, timestamp: int = 0) -> Treasure | None:
        if 0 <= index < len(self.treasures):
            removed = self.treasures.pop(index)
            self.treasure_timestamp = timestamp
            return removed
        return None

    def convert_wealth_treasures(self, timestamp: int = 0) -> int:
        """Sell every wealth treasure for its coin value. Returns coins gained."""
        gained = 0
        # Back to front so earlier indices stay valid
        for index in reversed(self.get_wealth_treasure_indices()):
            treasure = self.remove_treasure(index, timestamp)
            if treasure and treasure.coin_value:
                self.add_coins(treasure.coin_value)
                gained += treasure.coin_value
        return gained

    # ===== Derived values =====

    def get_victory_points(
        self,
        state: "GameState",
        character_defs: dict,
        include_treasures: bool = True,
    ) -> int:
        """
        Victory points for this player. Pure: reads state, never mutates it.

        - 1 VP per guild where this player is max investor (the character's
          guild_vp hook may change the value per guild)
        - 2 VP per active inn
        - treasure VP when include_treasures
        - 1 VP for the Discoverer's Emblem
        """
        vp = 0
        guild_vp = None
        character_def = character_defs.get(self.character) if self.character else None
        if character_def is not None:
            guild_vp = character_def.hooks.get("guild_vp")

        for guild in state.active_guilds:
            if guild.max_investor == self.id:
                vp += guild_vp(state, self, guild.number) if guild_vp else 1

        vp += sum(inn.get_vp() for inn in self.inns if not inn.destroyed)

        if include_treasures:
            vp += sum(t.vp for t in self.treasures)

        if self.has_discoverer_emblem:
            vp += DISCOVERER_EMBLEM_VP

        return vp

    def get_cultivated_lands_count(self) -> int:
        return sum(1 for land in self.lands if land.cultivated)

    def get_active_inns_count(self) -> int:
        return sum(1 for inn in self.inns if not inn.destroyed)

    def get_destroyed_inns_count(self) -> int:
        return sum(1 for inn in self.inns if inn.destroyed)

    def get_treasure_count(self) -> int:
        return len(self.treasures)

    def get_uncultivated_land_indices(self) -> list[int]:
        return [i for i, land in enumerate(self.lands) if not land.cultivated]

    def get_destroyed_inn_indices(self) -> list[int]:
        return [i for i, inn in enumerate(self.inns) if inn.destroyed]

    def get_wealth_treasure_indices(self) -> list[int]:
        return [i for i, t in enumerate(self.treasures) if t.type == TREASURE_WEALTH]

    # ===== Serialization =====

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_ai": self.is_ai,
            "color": self.color,
            "coins": self.coins,
            "reserve": self.reserve,
            "character": self.character,
            "lands": [land.to_dict() for land in self.lands],
            "inns": [inn.to_dict() for inn in self.inns],
            "treasures": [t.to_dict() for t in self.treasures],
            "has_discoverer_emblem": self.has_discoverer_emblem,
            "treasure_timestamp": self.treasure_timestamp,
            "invested_in_guild": self.invested_in_guild,
            "invested_in_expedition": self.invested_in_expedition,
            "investments_this_turn": self.investments_this_turn,
            "guild_investments_this_turn": self.guild_investments_this_turn,
            "expedition_investments_this_turn": self.expedition_investments_this_turn,
            "used_free_repair": self.used_free_repair,
            "used_free_cultivate": self.used_free_cultivate,
            "used_mutiny_ability": self.used_mutiny_ability,
            "used_artisan_treasure_ability": self.used_artisan_treasure_ability,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerState":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=_int(data.get("id"), 0),
            name=str(data.get("name") or ""),
            is_ai=bool(data.get("is_ai", False)),
            color=data.get("color"),
            coins=_int(data.get("coins"), STARTING_COINS),
            reserve=_int(data.get("reserve"), 0),
            character=data.get("character"),
            lands=[ResourceCard.from_dict(c) for c in _list(data.get("lands")) if isinstance(c, dict)],
            inns=[ResourceCard.from_dict(c) for c in _list(data.get("inns")) if isinstance(c, dict)],
            treasures=[Treasure.from_dict(t) for t in _list(data.get("treasures")) if isinstance(t, dict)],
            has_discoverer_emblem=bool(data.get("has_discoverer_emblem", False)),
            treasure_timestamp=_int(data.get("treasure_timestamp"), 0),
            invested_in_guild=bool(data.get("invested_in_guild", False)),
            invested_in_expedition=bool(data.get("invested_in_expedition", False)),
            investments_this_turn=_int(data.get("investments_this_turn"), 0),
            guild_investments_this_turn=_int(data.get("guild_investments_this_turn"), 0),
            expedition_investments_this_turn=_int(data.get("expedition_investments_this_turn"), 0),
            used_free_repair=bool(data.get("used_free_repair", False)),
            used_free_cultivate=bool(data.get("used_free_cultivate", False)),
            used_mutiny_ability=bool(data.get("used_mutiny_ability", False)),
            used_artisan_treasure_ability=bool(data.get("used_artisan_treasure_ability", False)),
        )


def half_rounded_down(value: int) -> int:
    return value // 2


def half_rounded_up(value: int) -> int:
    return math.ceil(value / 2)


@dataclass
class GameState:
    """Complete game state."""
    round_number: int
    current_player: int  # index into players
    phase: str  # "turn_start", "action", "ai_thinking", "event_resolution", "game_over"
    players: list[PlayerState]
    # Founded guilds, kept sorted by number
    active_guilds: list[GuildState] = field(default_factory=list)
    # Event decks hold event definition ids; the top of the deck is the END of the list
    event_deck: list[str] = field(default_factory=list)
    event_discard: list[str] = field(default_factory=list)
    # Cards set aside face down at setup and after each reshuffle
    set_aside_events: list[str] = field(default_factory=list)
    treasure_deck: list[Treasure] = field(default_factory=list)
    # Temporary events currently in force (ids, duplicates allowed for stacking)
    active_temporary_events: list[str] = field(default_factory=list)
    expedition: ExpeditionState = field(default_factory=ExpeditionState)
    # Last event revealed (for display)
    current_event: str | None = None
    # Event left by a Governor for the next event resolution
    carried_event: str | None = None
    # Two events revealed by a Governor, waiting for choose_event
    pending_event_choice: list[str] = field(default_factory=list)
    last_dice_roll: list[int] | None = None
    # Winning player id (None while the game is ongoing)
    winner: int | None = None
    log: list[LogEntry] = field(default_factory=list)
    # Monotonic counter; increases on every treasure count change
    clock: int = 0

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    def get_player(self, player_id: int) -> PlayerState | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_current_player(self) -> PlayerState:
        return self.players[self.current_player]

    def get_guild(self, guild_number: int) -> GuildState | None:
        for guild in self.active_guilds:
            if guild.number == guild_number:
                return guild
        return None

    def tick(self) -> int:
        self.clock += 1
        return self.clock

    def add_log(self, message: str, kind: str = "info") -> None:
        """Append to the on-screen log. Consecutive duplicates are dropped; oldest entries evicted."""
        if self.log and self.log[-1].message == message:
            return
        self.log.append(LogEntry(message, kind))
        if len(self.log) > MAX_LOG_MESSAGES:
            del self.log[: len(self.log) - MAX_LOG_MESSAGES]

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a dictionary for JSON serialization."""
        return {
            "round_number": self.round_number,
            "current_player": self.current_player,
            "phase": self.phase,
            "players": [p.to_dict() for p in self.players],
            "active_guilds": [g.to_dict() for g in self.active_guilds],
            "event_deck": self.event_deck,
            "event_discard": self.event_discard,
            "set_aside_events": self.set_aside_events,
            "treasure_deck": [t.to_dict() for t in self.treasure_deck],
            "active_temporary_events": self.active_temporary_events,
            "expedition": self.expedition.to_dict(),
            "current_event": self.current_event,
            "carried_event": self.carried_event,
            "pending_event_choice": self.pending_event_choice,
            "last_dice_roll": self.last_dice_roll,
            "winner": self.winner,
            "log": [entry.to_dict() for entry in self.log],
            "clock": self.clock,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """Create GameState from a dictionary (handles missing/None for backwards compat)."""
        if not isinstance(data, dict):
            data = {}
        roll = data.get("last_dice_roll")
        return cls(
            round_number=_int(data.get("round_number"), 1),
            current_player=_int(data.get("current_player"), 0),
            phase=str(data.get("phase") or PHASE_TURN_START),
            players=[PlayerState.from_dict(p) for p in _list(data.get("players")) if isinstance(p, dict)],
            active_guilds=[GuildState.from_dict(g) for g in _list(data.get("active_guilds")) if isinstance(g, dict)],
            event_deck=[str(e) for e in _list(data.get("event_deck"))],
            event_discard=[str(e) for e in _list(data.get("event_discard"))],
            set_aside_events=[str(e) for e in _list(data.get("set_aside_events"))],
            treasure_deck=[Treasure.from_dict(t) for t in _list(data.get("treasure_deck")) if isinstance(t, dict)],
            active_temporary_events=[str(e) for e in _list(data.get("active_temporary_events"))],
            expedition=ExpeditionState.from_dict(data.get("expedition") or {}),
            current_event=data.get("current_event"),
            carried_event=data.get("carried_event"),
            pending_event_choice=[str(e) for e in _list(data.get("pending_event_choice"))],
            last_dice_roll=[_int(d, 0) for d in roll] if isinstance(roll, list) else None,
            winner=_optional_int(data.get("winner")),
            log=[LogEntry.from_dict(e) for e in _list(data.get("log")) if isinstance(e, dict)],
            clock=_int(data.get("clock"), 0),
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize GameState to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "GameState":
        """Deserialize GameState from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    def save(self, filepath: str) -> None:
        """Save GameState to a JSON file."""
        with open(filepath, "w") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, filepath: str) -> "GameState":
        """Load GameState from a JSON file."""
        with open(filepath, "r") as f:
            return cls.from_json(f.read())
