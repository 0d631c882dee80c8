"""
Character ability registry.

Every character is a capability record: static modifiers loaded from
characters.json (see CharacterDefinition) plus the hooks below, keyed by
trigger name. Hooks read state and return an Effect; they never mutate.
trigger_ability applies the Effect to the owner and reports what moved.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, TYPE_CHECKING

from gremios.engine import CHURCH, MONASTERY, PORT
from gremios.engine.events import GameEvent, ability_triggered, coins_changed

if TYPE_CHECKING:
    from gremios.engine.state import GameState, PlayerState


class CharacterId(str, Enum):
    ARCHBISHOP = "archbishop"
    ARTISAN = "artisan"
    HEALER = "healer"
    GOVERNOR = "governor"
    INNKEEPER = "innkeeper"
    MASTER_BUILDER = "master_builder"
    MERCENARY = "mercenary"
    PEASANT = "peasant"
    PIRATE = "pirate"
    SHOPKEEPER = "shopkeeper"
    STOWAWAY = "stowaway"
    MERCHANT = "merchant"


@dataclass(frozen=True)
class Effect:
    """Coins a hook grants its owner. from_reserve moves coins out of the owner's reserve."""
    coins: int
    from_reserve: bool = False


NO_EFFECT = Effect(0)


# ===== Trigger names =====

ON_OTHER_PLAYER_INVEST_CHURCH = "on_other_player_invest_church"
ON_OTHER_PLAYER_BUY_LAND = "on_other_player_buy_land"
ON_OTHER_PLAYER_BUILD_INN = "on_other_player_build_inn"
ON_OTHER_PLAYER_INVEST_FARM_TAVERN = "on_other_player_invest_farm_tavern"
ON_INVASION = "on_invasion"
ON_INVASION_INNS_DESTROYED = "on_invasion_inns_destroyed"
ON_PLAGUE_END = "on_plague_end"
ON_TAX_COLLECTION = "on_tax_collection"
ON_GOOD_HARVEST = "on_good_harvest"
ON_FAILED_EXPEDITION = "on_failed_expedition"
ON_TURN_START = "on_turn_start"
ON_MUTINY_BANKRUPTCY = "on_mutiny_bankruptcy"
# Query hook: (state, player, guild_number) -> VP for leading that guild
GUILD_VP = "guild_vp"


# ===== Hooks =====

def _reserve_coin(state: "GameState", player: "PlayerState") -> Effect:
    return Effect(1, from_reserve=True)


def _archbishop_guild_vp(state: "GameState", player: "PlayerState", guild_number: int) -> int:
    return 2 if guild_number in (CHURCH, MONASTERY) else 1


def _healer_on_plague_end(state: "GameState", player: "PlayerState") -> Effect:
    led = sum(
        1 for g in state.active_guilds
        if g.max_investor == player.id and g.number not in (CHURCH, MONASTERY)
    )
    return Effect(2 * led)


def _governor_on_tax_collection(state: "GameState", player: "PlayerState", coins_collected: int) -> Effect:
    return Effect(coins_collected)


def _mercenary_on_inns_destroyed(state: "GameState", player: "PlayerState", rival_inns_destroyed: int) -> Effect:
    return Effect(rival_inns_destroyed)


def _peasant_on_good_harvest(state: "GameState", player: "PlayerState") -> Effect:
    """One extra coin per rival when the Peasant out-farms all rivals combined."""
    rivals = [p for p in state.players if p.id != player.id]
    rival_lands = sum(p.get_cultivated_lands_count() for p in rivals)
    if player.get_cultivated_lands_count() > rival_lands:
        return Effect(len(rivals))
    return NO_EFFECT


def _pirate_on_failed_expedition(state: "GameState", player: "PlayerState", coins_lost: int) -> Effect:
    return Effect(coins_lost)


def _shopkeeper_on_turn_start(state: "GameState", player: "PlayerState") -> Effect:
    return Effect(state.active_temporary_events.count("famine"))


def _stowaway_on_turn_start(state: "GameState", player: "PlayerState") -> Effect:
    tokens = state.expedition.count_for(player.id)
    port = state.get_guild(PORT)
    if port is not None:
        tokens += port.count_for(player.id)
    return Effect(1) if tokens >= 3 else NO_EFFECT


def _merchant_on_mutiny_bankruptcy(state: "GameState", player: "PlayerState", investments_lost: int) -> Effect:
    return Effect(investments_lost)


CHARACTER_HOOKS: dict[str, dict[str, Callable]] = {
    CharacterId.ARCHBISHOP.value: {
        ON_OTHER_PLAYER_INVEST_CHURCH: _reserve_coin,
        ON_OTHER_PLAYER_BUY_LAND: _reserve_coin,
        GUILD_VP: _archbishop_guild_vp,
    },
    CharacterId.ARTISAN.value: {},
    CharacterId.HEALER.value: {
        ON_INVASION: _reserve_coin,
        ON_PLAGUE_END: _healer_on_plague_end,
    },
    CharacterId.GOVERNOR.value: {
        ON_TAX_COLLECTION: _governor_on_tax_collection,
    },
    CharacterId.INNKEEPER.value: {
        ON_OTHER_PLAYER_BUILD_INN: _reserve_coin,
    },
    CharacterId.MASTER_BUILDER.value: {},
    CharacterId.MERCENARY.value: {
        ON_INVASION_INNS_DESTROYED: _mercenary_on_inns_destroyed,
    },
    CharacterId.PEASANT.value: {
        ON_GOOD_HARVEST: _peasant_on_good_harvest,
    },
    CharacterId.PIRATE.value: {
        ON_FAILED_EXPEDITION: _pirate_on_failed_expedition,
    },
    CharacterId.SHOPKEEPER.value: {
        ON_OTHER_PLAYER_INVEST_FARM_TAVERN: _reserve_coin,
        ON_TURN_START: _shopkeeper_on_turn_start,
    },
    CharacterId.STOWAWAY.value: {
        ON_TURN_START: _stowaway_on_turn_start,
    },
    CharacterId.MERCHANT.value: {
        ON_MUTINY_BANKRUPTCY: _merchant_on_mutiny_bankruptcy,
    },
}


# ===== Dispatch =====

def get_character(character_defs: dict, player: "PlayerState"):
    """CharacterDefinition of the player, or None when unassigned."""
    if not player.character:
        return None
    return character_defs.get(player.character)


def has_character(player: "PlayerState", character_id: CharacterId) -> bool:
    return player.character == character_id.value


def find_player_with_character(state: "GameState", character_id: CharacterId) -> "PlayerState | None":
    for player in state.players:
        if has_character(player, character_id):
            return player
    return None


def trigger_ability(
    state: "GameState",
    player: "PlayerState",
    trigger: str,
    character_defs: dict,
    *context,
) -> list[GameEvent]:
    """
    Run the player's hook for trigger, if their character has one, and apply the Effect.
    Returns the events describing what moved (empty when nothing did).
    """
    character_def = get_character(character_defs, player)
    if character_def is None:
        return []
    hook = character_def.hooks.get(trigger)
    if hook is None:
        return []
    effect = hook(state, player, *context)
    if effect.coins <= 0:
        return []

    old_coins, old_reserve = player.coins, player.reserve
    moved = player.add_coins(effect.coins, from_reserve=effect.from_reserve)
    if moved <= 0:
        return []

    state.add_log(f"{player.name} ({character_def.name}): +{moved} coin(s)", "ability")
    return [
        ability_triggered(player.id, character_def.id, trigger, moved, effect.from_reserve),
        coins_changed(player.id, old_coins, player.coins, trigger, old_reserve, player.reserve),
    ]


def trigger_other_players(
    state: "GameState",
    acting_player_id: int,
    trigger: str,
    character_defs: dict,
    *context,
) -> list[GameEvent]:
    """Dispatch an "other player" trigger to every seat except the acting one."""
    events: list[GameEvent] = []
    for player in state.players:
        if player.id == acting_player_id:
            continue
        events.extend(trigger_ability(state, player, trigger, character_defs, *context))
    return events
