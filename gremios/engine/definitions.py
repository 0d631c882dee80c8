"""
Static definitions for guilds, event cards and characters.
All table data lives under gremios/data/: guilds.json, events.json, characters.json.
Character hooks are code, bound to each definition from characters.CHARACTER_HOOKS.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

from gremios.engine import INN_COST
from gremios.engine.characters import CHARACTER_HOOKS

DATA_DIR = Path(__file__).parent.parent / "data"

EVENT_GUILD_FOUNDATION = "guild_foundation"
EVENT_ACTION = "action"
EVENT_TEMPORARY = "temporary"


def _empty_hooks() -> Mapping[str, Callable]:
    return MappingProxyType({})


@dataclass(frozen=True)
class GuildDefinition:
    """Defines immutable properties of a guild."""
    number: int  # Dice sum that pays this guild
    name: str
    display_name: str


@dataclass(frozen=True)
class EventDefinition:
    """Defines one kind of event card and how many copies the deck holds."""
    id: str
    kind: str  # "guild_foundation", "action", "temporary"
    name: str
    count: int
    description: str = ""
    guild: int | None = None  # guild_foundation only
    affects_all_guilds: bool = False  # temporary only (plague)
    affected_guilds: tuple[int, ...] = ()
    immune_guilds: tuple[int, ...] = ()

    def blocks(self, guild_number: int) -> bool:
        if self.kind != EVENT_TEMPORARY:
            return False
        if self.affects_all_guilds:
            return guild_number not in self.immune_guilds
        return guild_number in self.affected_guilds

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "count": self.count,
            "description": self.description,
            "guild": self.guild,
            "affected_guilds": "all" if self.affects_all_guilds else list(self.affected_guilds),
            "immune_guilds": list(self.immune_guilds),
        }


@dataclass(frozen=True)
class CharacterDefinition:
    """Static modifiers of a character plus its read-only hook table."""
    id: str
    name: str
    abilities: tuple[str, ...] = ()
    inn_cost: int = INN_COST
    first_investment_free: tuple[int, ...] = ()  # Guild numbers
    additional_investment: bool = False
    can_cause_mutiny: bool = False
    can_buy_sell_treasure: bool = False
    free_repair_per_turn: bool = False
    free_cultivate_per_turn: bool = False
    starting_lands: int = 0
    immune_to_trade_blockade: bool = False
    free_expedition_investment: bool = False
    draw_two_events: bool = False
    hooks: Mapping[str, Callable] = field(default_factory=_empty_hooks, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "abilities": list(self.abilities),
            "inn_cost": self.inn_cost,
            "first_investment_free": list(self.first_investment_free),
            "additional_investment": self.additional_investment,
            "can_cause_mutiny": self.can_cause_mutiny,
            "can_buy_sell_treasure": self.can_buy_sell_treasure,
            "free_repair_per_turn": self.free_repair_per_turn,
            "free_cultivate_per_turn": self.free_cultivate_per_turn,
            "starting_lands": self.starting_lands,
            "immune_to_trade_blockade": self.immune_to_trade_blockade,
            "free_expedition_investment": self.free_expedition_investment,
            "draw_two_events": self.draw_two_events,
            "triggers": sorted(self.hooks),
        }


def _event_definition(data: dict) -> EventDefinition:
    affected = data.get("affected_guilds", [])
    return EventDefinition(
        id=data["id"],
        kind=data["kind"],
        name=data["name"],
        count=int(data["count"]),
        description=data.get("description", ""),
        guild=data.get("guild"),
        affects_all_guilds=affected == "all",
        affected_guilds=() if affected == "all" else tuple(affected),
        immune_guilds=tuple(data.get("immune_guilds", [])),
    )


def _character_definition(data: dict) -> CharacterDefinition:
    return CharacterDefinition(
        id=data["id"],
        name=data["name"],
        abilities=tuple(data.get("abilities", [])),
        inn_cost=int(data.get("inn_cost", INN_COST)),
        first_investment_free=tuple(data.get("first_investment_free", [])),
        additional_investment=bool(data.get("additional_investment", False)),
        can_cause_mutiny=bool(data.get("can_cause_mutiny", False)),
        can_buy_sell_treasure=bool(data.get("can_buy_sell_treasure", False)),
        free_repair_per_turn=bool(data.get("free_repair_per_turn", False)),
        free_cultivate_per_turn=bool(data.get("free_cultivate_per_turn", False)),
        starting_lands=int(data.get("starting_lands", 0)),
        immune_to_trade_blockade=bool(data.get("immune_to_trade_blockade", False)),
        free_expedition_investment=bool(data.get("free_expedition_investment", False)),
        draw_two_events=bool(data.get("draw_two_events", False)),
        hooks=MappingProxyType(dict(CHARACTER_HOOKS.get(data["id"], {}))),
    )


def load_static_definitions(
    data_dir: Path | str | None = None,
) -> tuple[
    dict[int, GuildDefinition],
    dict[str, EventDefinition],
    dict[str, CharacterDefinition],
]:
    """
    Load static definitions (guilds, events, characters).

    Args:
        data_dir: Directory containing the 3 JSON files. Defaults to gremios/data.

    Returns: (guild_definitions, event_definitions, character_definitions)
    """
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR

    with open(data_dir / "guilds.json", "r") as f:
        guilds_data = json.load(f)
    guilds = {}
    for data in guilds_data.values():
        guilds[int(data["number"])] = GuildDefinition(
            number=int(data["number"]),
            name=data["name"],
            display_name=data.get("display_name", data["name"]),
        )

    with open(data_dir / "events.json", "r") as f:
        events_data = json.load(f)
    events = {event_id: _event_definition(data) for event_id, data in events_data.items()}

    with open(data_dir / "characters.json", "r") as f:
        characters_data = json.load(f)
    characters = {char_id: _character_definition(data) for char_id, data in characters_data.items()}

    return guilds, events, characters


def foundation_event_id(guild_number: int) -> str:
    return f"foundation_{guild_number}"


def definitions_to_dict(guild_defs: dict, event_defs: dict, character_defs: dict) -> dict[str, Any]:
    """JSON-ready view of all tables (for the /definitions endpoint)."""
    return {
        "guilds": {
            str(n): {"number": g.number, "name": g.name, "display_name": g.display_name}
            for n, g in sorted(guild_defs.items())
        },
        "events": {eid: e.to_dict() for eid, e in event_defs.items()},
        "characters": {cid: c.to_dict() for cid, c in character_defs.items()},
    }
