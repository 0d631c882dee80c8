"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
Rule violations raise GameRuleError before the copy is handed back, so the
caller's state is never partially mutated.
"""

import random
from dataclasses import dataclass, field

from gremios.engine import (
    ARTISAN_TREASURE_COST,
    CHURCH,
    CULTIVATE_COST,
    DICE_SIDES,
    FARM,
    INN_COST,
    INN_REPAIR_COST,
    INVESTMENT_COST,
    LAND_COST,
    MAX_INVESTMENTS_MERCHANT,
    MAX_INVESTMENTS_PER_TURN,
    MONASTERY,
    MUTINY_ABILITY_COST,
    TAVERN,
    WINNING_VP,
)
from gremios.engine.actions import Action, choose_event as choose_event_action, end_turn as end_turn_action
from gremios.engine.cards import shuffle_array
from gremios.engine.characters import (
    ON_OTHER_PLAYER_BUILD_INN,
    ON_OTHER_PLAYER_BUY_LAND,
    ON_OTHER_PLAYER_INVEST_CHURCH,
    ON_OTHER_PLAYER_INVEST_FARM_TAVERN,
    ON_TURN_START,
    get_character,
    trigger_ability,
    trigger_other_players,
)
from gremios.engine.errors import GameRuleError, IllegalAction, InsufficientFunds, InvalidIndex
from gremios.engine.events import (
    ABILITY_TRIGGERED,
    GameEvent,
    coins_changed,
    dice_rolled,
    event_choice_pending,
    event_drawn,
    income_collected,
    inn_built,
    inn_repaired,
    investment_made,
    land_bought,
    land_cultivated,
    phase_changed,
    treasure_gained,
    treasure_sold,
    turn_ended,
    turn_started,
    victory,
)
from gremios.engine.guilds import apply_mutiny, invest, is_full
from gremios.engine.resolution import (
    PendingRoll,
    draw_event,
    resolve_event,
    resolve_expedition,
    resolve_roll,
    roll_dice,
    update_discoverer_emblem,
)
from gremios.engine.state import (
    GameState,
    GuildState,
    Investment,
    PlayerState,
    PHASE_ACTION,
    PHASE_AI_THINKING,
    PHASE_EVENT_RESOLUTION,
    PHASE_GAME_OVER,
    PHASE_TURN_START,
)

PLAYER_ACTIONS = [
    "invest_guild",
    "invest_expedition",
    "buy_land",
    "cultivate_land",
    "build_inn",
    "repair_inn",
    "cause_mutiny",
    "buy_treasure",
    "sell_treasure",
    "end_turn",
]

# Phase rules: which action types are allowed in which phases
# turn_start is transient: the engine leaves it on its own after collection
PHASE_ALLOWED_ACTIONS = {
    PHASE_TURN_START: [],
    PHASE_ACTION: PLAYER_ACTIONS,
    PHASE_AI_THINKING: PLAYER_ACTIONS,
    PHASE_EVENT_RESOLUTION: ["choose_event"],
    PHASE_GAME_OVER: [],
}


@dataclass
class ActionResult:
    """Outcome of attempt_action. On failure state is the untouched input state."""
    success: bool
    state: GameState
    events: list[GameEvent] = field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None


def _validate_action_for_phase(action: Action, state: GameState) -> None:
    """Validate that an action is allowed in the current phase."""
    phase = state.phase
    allowed_actions = PHASE_ALLOWED_ACTIONS.get(phase, [])

    if action.type not in allowed_actions:
        raise IllegalAction(
            f"Action '{action.type}' is not allowed in phase '{phase}'. "
            f"Allowed actions: {', '.join(allowed_actions) or 'none'}"
        )


def apply_action(
    state: GameState,
    action: Action,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
    rng: random.Random | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    Validates:
    - Game is not over
    - Action player matches the current player
    - Action is valid for the current phase

    Args:
        state: Current game state
        action: Action to apply
        guild_defs: Guild definitions
        event_defs: Event card definitions
        character_defs: Character definitions
        rng: Source of shuffles and dice not fixed by the action payload

    Returns:
        Tuple of (new_state, events) where events describe what happened
    """
    if state.winner is not None:
        raise IllegalAction(f"Game is over. Player {state.winner} has won.")

    current = state.get_current_player()
    if action.player_id != current.id:
        raise IllegalAction(
            f"Action player {action.player_id} does not match current player {current.id}")

    _validate_action_for_phase(action, state)

    handler = ACTION_HANDLERS.get(action.type)
    if handler is None:
        raise IllegalAction(f"Unknown action type: {action.type}")

    rng = rng or random.Random()
    new_state = state.copy()
    player = new_state.get_current_player()
    events = handler(new_state, player, action, guild_defs, event_defs, character_defs, rng)

    # Victory is checked after every applied action
    events.extend(_check_victory(new_state, character_defs))
    return new_state, events


def attempt_action(
    state: GameState,
    action: Action,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
    rng: random.Random | None = None,
) -> ActionResult:
    """apply_action that reports rule violations instead of raising them."""
    try:
        new_state, events = apply_action(state, action, guild_defs, event_defs, character_defs, rng)
    except GameRuleError as e:
        return ActionResult(False, state, [], str(e), e.kind)
    return ActionResult(True, new_state, events)


# ===== Helpers =====

def _character_flag(character_defs: dict, player: PlayerState, flag: str) -> bool:
    character_def = get_character(character_defs, player)
    return bool(character_def is not None and getattr(character_def, flag))


def _investment_caps(character_defs: dict, player: PlayerState) -> tuple[int, int, int]:
    """(guild per turn, expedition per turn, total per turn)."""
    if _character_flag(character_defs, player, "additional_investment"):
        return 2, 2, MAX_INVESTMENTS_MERCHANT
    return 1, 1, MAX_INVESTMENTS_PER_TURN


def _require_funds(player: PlayerState, amount: int, reason: str) -> None:
    if player.coins < amount:
        raise InsufficientFunds(f"{player.name} needs {amount} coins for {reason}, has {player.coins}")


def _spend(player: PlayerState, amount: int, reason: str) -> list[GameEvent]:
    _require_funds(player, amount, reason)
    old = player.coins
    player.remove_coins(amount)
    return [coins_changed(player.id, old, player.coins, reason)]


def _dice_for(action: Action, rng: random.Random) -> list[int]:
    dice = action.payload.get("dice")
    if dice is None:
        return roll_dice(rng)
    if len(dice) != 2 or any(not (1 <= int(d) <= DICE_SIDES) for d in dice):
        raise GameRuleError(f"Invalid dice: {dice}")
    return [int(d) for d in dice]


def _set_phase(state: GameState, new_phase: str, player_id: int) -> list[GameEvent]:
    old = state.phase
    state.phase = new_phase
    return [phase_changed(old, new_phase, player_id)]


def _guild_or_raise(state: GameState, guild_number) -> GuildState:
    guild = state.get_guild(guild_number) if isinstance(guild_number, int) else None
    if guild is None:
        raise InvalidIndex(f"Guild {guild_number} is not founded")
    return guild


def _index_or_raise(action: Action, key: str, size: int, what: str) -> int:
    index = action.payload.get(key)
    if not isinstance(index, int) or not (0 <= index < size):
        raise InvalidIndex(f"Invalid {what} index: {index}")
    return index


# ===== Investments =====

def _handle_invest_guild(state, player, action, guild_defs, event_defs, character_defs, rng):
    guild = _guild_or_raise(state, action.payload.get("guild_number"))
    if is_full(guild):
        raise IllegalAction(f"{guild.name} already has the maximum of investments")

    guild_cap, _, total_cap = _investment_caps(character_defs, player)
    if player.guild_investments_this_turn >= guild_cap:
        raise IllegalAction("Guild investment limit reached this turn")
    if player.investments_this_turn >= total_cap:
        raise IllegalAction("Investment limit reached this turn")

    character_def = get_character(character_defs, player)
    free = (
        character_def is not None
        and guild.number in character_def.first_investment_free
        and guild.count_for(player.id) == 0
    )

    events: list[GameEvent] = []
    if not free:
        events.extend(_spend(player, INVESTMENT_COST, "invest_guild"))
    player.add_to_reserve(1)

    events.extend(invest(guild, player))
    player.invested_in_guild = True
    player.guild_investments_this_turn += 1
    player.investments_this_turn += 1
    events.insert(0, investment_made(
        player.id, "guild", guild.number, 0 if free else INVESTMENT_COST, free, len(guild.investments)))
    state.add_log(f"{player.name} invests in {guild.name}{' (free)' if free else ''}", "action")

    if guild.number in (CHURCH, MONASTERY):
        events.extend(trigger_other_players(state, player.id, ON_OTHER_PLAYER_INVEST_CHURCH, character_defs))
    if guild.number in (FARM, TAVERN):
        events.extend(trigger_other_players(state, player.id, ON_OTHER_PLAYER_INVEST_FARM_TAVERN, character_defs))
    return events


def _handle_invest_expedition(state, player, action, guild_defs, event_defs, character_defs, rng):
    expedition = state.expedition
    if expedition.is_full():
        raise IllegalAction("Expedition is full")

    _, expedition_cap, total_cap = _investment_caps(character_defs, player)
    if player.expedition_investments_this_turn >= expedition_cap:
        raise IllegalAction("Expedition investment limit reached this turn")
    if player.investments_this_turn >= total_cap:
        raise IllegalAction("Investment limit reached this turn")

    # Stowaway invests for free while the pool is empty
    free = _character_flag(character_defs, player, "free_expedition_investment") and not expedition.investments

    events: list[GameEvent] = []
    if not free:
        events.extend(_spend(player, INVESTMENT_COST, "invest_expedition"))
        player.add_to_reserve(1)

    expedition.investments.append(Investment(player.id, player.color))
    player.invested_in_expedition = True
    player.expedition_investments_this_turn += 1
    player.investments_this_turn += 1
    events.insert(0, investment_made(
        player.id, "expedition", None, 0 if free else INVESTMENT_COST, free, len(expedition.investments)))
    state.add_log(f"{player.name} invests in the expedition{' (free)' if free else ''}", "action")

    if expedition.is_full():
        dice = _dice_for(action, rng)
        state.last_dice_roll = dice
        state.add_log("The expedition is full, rolling for it", "event")
        events.append(dice_rolled(dice, "expedition"))
        events.extend(resolve_expedition(state, sum(dice), character_defs))
    return events


# ===== Lands and inns =====

def _handle_buy_land(state, player, action, guild_defs, event_defs, character_defs, rng):
    _require_funds(player, LAND_COST, "buy_land")
    old = player.coins
    player.buy_land()
    events = [coins_changed(player.id, old, player.coins, "buy_land")]
    land_index = len(player.lands) - 1

    # Peasant: the free cultivation of the turn goes to the land just bought
    cultivated = False
    if _character_flag(character_defs, player, "free_cultivate_per_turn") and not player.used_free_cultivate:
        player.cultivate_land(land_index, is_free=True)
        player.used_free_cultivate = True
        cultivated = True

    events.insert(0, land_bought(player.id, land_index, LAND_COST, cultivated))
    state.add_log(f"{player.name} buys a land{' and cultivates it' if cultivated else ''}", "action")
    events.extend(trigger_other_players(state, player.id, ON_OTHER_PLAYER_BUY_LAND, character_defs))
    return events


def _handle_cultivate_land(state, player, action, guild_defs, event_defs, character_defs, rng):
    land_index = _index_or_raise(action, "land_index", len(player.lands), "land")
    if player.lands[land_index].cultivated:
        raise IllegalAction(f"Land {land_index} is already cultivated")

    free = _character_flag(character_defs, player, "free_cultivate_per_turn") and not player.used_free_cultivate
    if not free:
        _require_funds(player, CULTIVATE_COST, "cultivate_land")
    old = player.coins
    player.cultivate_land(land_index, is_free=free)
    if free:
        player.used_free_cultivate = True
    events = [land_cultivated(player.id, land_index, 0 if free else CULTIVATE_COST)]
    if not free:
        events.append(coins_changed(player.id, old, player.coins, "cultivate_land"))
    state.add_log(f"{player.name} cultivates a land{' (free)' if free else ''}", "action")
    return events


def _handle_build_inn(state, player, action, guild_defs, event_defs, character_defs, rng):
    land_index = _index_or_raise(action, "land_index", len(player.lands), "land")
    character_def = get_character(character_defs, player)
    cost = character_def.inn_cost if character_def is not None else INN_COST

    _require_funds(player, cost, "build_inn")
    old = player.coins
    player.build_inn(land_index, inn_cost=cost)
    events = [
        inn_built(player.id, land_index, len(player.inns) - 1, cost),
        coins_changed(player.id, old, player.coins, "build_inn"),
    ]
    state.add_log(f"{player.name} builds an inn", "action")
    events.extend(trigger_other_players(state, player.id, ON_OTHER_PLAYER_BUILD_INN, character_defs))
    return events


def _handle_repair_inn(state, player, action, guild_defs, event_defs, character_defs, rng):
    inn_index = _index_or_raise(action, "inn_index", len(player.inns), "inn")
    if not player.inns[inn_index].destroyed:
        raise IllegalAction(f"Inn {inn_index} is not destroyed")

    free = _character_flag(character_defs, player, "free_repair_per_turn") and not player.used_free_repair
    if not free:
        _require_funds(player, INN_REPAIR_COST, "repair_inn")
    old = player.coins
    player.repair_inn(inn_index, is_free=free)
    if free:
        player.used_free_repair = True
    events = [inn_repaired(player.id, inn_index, 0 if free else INN_REPAIR_COST)]
    if not free:
        events.append(coins_changed(player.id, old, player.coins, "repair_inn"))
    state.add_log(f"{player.name} repairs an inn{' (free)' if free else ''}", "action")
    return events


# ===== Character actions =====

def _handle_cause_mutiny(state, player, action, guild_defs, event_defs, character_defs, rng):
    if not _character_flag(character_defs, player, "can_cause_mutiny"):
        raise IllegalAction("Only the Mercenary can cause mutinies")
    if player.used_mutiny_ability:
        raise IllegalAction("Mutiny ability already used this turn")
    guild = _guild_or_raise(state, action.payload.get("guild_number"))
    if guild.count_for(player.id) == 0:
        raise IllegalAction(f"{player.name} has not invested in {guild.name}")

    events = _spend(player, MUTINY_ABILITY_COST, "cause_mutiny")
    player.used_mutiny_ability = True
    state.add_log(f"{player.name} causes a mutiny in {guild.name}", "action")
    events.extend(apply_mutiny(state, guild, character_defs, cause="mercenary"))
    return events


def _require_treasure_ability(character_defs: dict, player: PlayerState) -> None:
    if not _character_flag(character_defs, player, "can_buy_sell_treasure"):
        raise IllegalAction("Only the Artisan can buy or sell treasures")
    if player.used_artisan_treasure_ability:
        raise IllegalAction("Treasure ability already used this turn")


def _handle_buy_treasure(state, player, action, guild_defs, event_defs, character_defs, rng):
    _require_treasure_ability(character_defs, player)
    if not state.treasure_deck:
        raise IllegalAction("No treasures left in the deck")

    events = _spend(player, ARTISAN_TREASURE_COST, "buy_treasure")
    player.used_artisan_treasure_ability = True
    treasure = state.treasure_deck.pop()
    player.add_treasure(treasure, state.tick())
    update_discoverer_emblem(state)
    events.insert(0, treasure_gained(player.id, treasure.to_dict(), "purchase"))
    state.add_log(f"{player.name} buys a treasure for {ARTISAN_TREASURE_COST} coins", "action")
    return events


def _handle_sell_treasure(state, player, action, guild_defs, event_defs, character_defs, rng):
    _require_treasure_ability(character_defs, player)
    treasure_index = _index_or_raise(action, "treasure_index", len(player.treasures), "treasure")

    player.used_artisan_treasure_ability = True
    treasure = player.remove_treasure(treasure_index, state.tick())
    old = player.coins
    player.add_coins(ARTISAN_TREASURE_COST)
    state.treasure_deck = shuffle_array(state.treasure_deck + [treasure], rng)
    update_discoverer_emblem(state)
    state.add_log(f"{player.name} sells a treasure for {ARTISAN_TREASURE_COST} coins", "action")
    return [
        treasure_sold(player.id, treasure.to_dict(), ARTISAN_TREASURE_COST, True),
        coins_changed(player.id, old, player.coins, "sell_treasure"),
    ]


# ===== Turn flow =====

def start_turn(state: GameState, character_defs: dict) -> list[GameEvent]:
    """
    turn_start for the current player: reset flags, collect income, run the
    on_turn_start hook and, for AI seats, sell wealth treasures. Then hand the
    turn to the player (action) or to the AI driver (ai_thinking).
    """
    player = state.get_current_player()
    events = _set_phase(state, PHASE_TURN_START, player.id)
    events.append(turn_started(state.round_number, player.id))
    player.reset_turn_flags()

    inns = player.get_active_inns_count()
    player.add_coins(1 + inns)
    ability_events = trigger_ability(state, player, ON_TURN_START, character_defs)
    ability_coins = sum(e.payload["coins"] for e in ability_events if e.type == ABILITY_TRIGGERED)
    events.append(income_collected(player.id, 1, inns, ability_coins, player.coins))
    events.extend(ability_events)
    state.add_log(f"{player.name} collects {1 + inns + ability_coins} coin(s)", "system")

    if player.is_ai and player.get_wealth_treasure_indices():
        old = player.coins
        gained = player.convert_wealth_treasures(state.tick())
        update_discoverer_emblem(state)
        events.append(coins_changed(player.id, old, player.coins, "convert_wealth_treasures"))
        state.add_log(f"{player.name} sells wealth treasures for {gained} coins", "action")

    events.extend(_set_phase(state, PHASE_AI_THINKING if player.is_ai else PHASE_ACTION, player.id))
    return events


def _handle_end_turn(state, player, action, guild_defs, event_defs, character_defs, rng):
    """
    Leave the action phase and resolve the event. A Governor with two cards
    available stops here in event_resolution until choose_event.
    """
    events = [turn_ended(state.round_number, player.id)]
    events.extend(_set_phase(state, PHASE_EVENT_RESOLUTION, player.id))

    if state.carried_event is not None:
        event_id = state.carried_event
        state.carried_event = None
        events.append(event_drawn(event_id, event_defs[event_id].kind, player.id, carried=True))
        events.extend(_resolve_and_advance(state, event_id, action, event_defs, guild_defs, character_defs, rng))
        return events

    event_id, evts = draw_event(state, rng)
    events.extend(evts)
    if event_id is not None and _character_flag(character_defs, player, "draw_two_events"):
        second, evts = draw_event(state, rng)
        events.extend(evts)
        if second is not None:
            state.pending_event_choice = [event_id, second]
            events.append(event_choice_pending(player.id, [event_id, second]))
            state.add_log(f"{player.name} reveals two events and must choose one", "event")
            return events

    if event_id is not None:
        events.append(event_drawn(event_id, event_defs[event_id].kind, player.id))
    events.extend(_resolve_and_advance(state, event_id, action, event_defs, guild_defs, character_defs, rng))
    return events


def _handle_choose_event(state, player, action, guild_defs, event_defs, character_defs, rng):
    if len(state.pending_event_choice) != 2:
        raise IllegalAction("There is no event choice pending")
    index = _index_or_raise(action, "index", 2, "event choice")

    chosen = state.pending_event_choice[index]
    state.carried_event = state.pending_event_choice[1 - index]
    state.pending_event_choice = []
    state.add_log(f"{player.name} chooses {event_defs[chosen].name}", "event")

    events = [event_drawn(chosen, event_defs[chosen].kind, player.id)]
    events.extend(_resolve_and_advance(state, chosen, action, event_defs, guild_defs, character_defs, rng))
    return events


def _resolve_and_advance(
    state: GameState,
    event_id: str | None,
    action: Action,
    event_defs: dict,
    guild_defs: dict,
    character_defs: dict,
    rng: random.Random,
) -> list[GameEvent]:
    """Resolve the event, make the production roll, check victory, then start the next turn."""
    events: list[GameEvent] = []
    pending = PendingRoll()
    if event_id is not None:
        pending, evts = resolve_event(state, event_id, guild_defs, event_defs, character_defs)
        events.extend(evts)
    else:
        state.add_log("No events available", "system")

    dice = _dice_for(action, rng)
    events.append(dice_rolled(dice, "production"))
    events.extend(resolve_roll(state, dice, pending, event_defs, character_defs))

    events.extend(_check_victory(state, character_defs))
    if state.winner is not None:
        return events

    state.current_player = (state.current_player + 1) % len(state.players)
    if state.current_player == 0:
        state.round_number += 1
    events.extend(start_turn(state, character_defs))
    return events


def _check_victory(state: GameState, character_defs: dict) -> list[GameEvent]:
    """
    End the game when someone reaches WINNING_VP.
    Several at once: highest VP, then the current player, then seat order after them.
    """
    if state.winner is not None:
        return []
    vps = {p.id: p.get_victory_points(state, character_defs) for p in state.players}
    reached = [pid for pid, vp in vps.items() if vp >= WINNING_VP]
    if not reached:
        return []

    count = len(state.players)
    seat_order = [state.players[(state.current_player + k) % count].id for k in range(count)]
    winner = max(reached, key=lambda pid: (vps[pid], -seat_order.index(pid)))
    state.winner = winner
    events = _set_phase(state, PHASE_GAME_OVER, winner)
    state.add_log(f"{state.get_player(winner).name} wins with {vps[winner]} VP", "system")
    events.append(victory(winner, vps, WINNING_VP))
    return events


ACTION_HANDLERS = {
    "invest_guild": _handle_invest_guild,
    "invest_expedition": _handle_invest_expedition,
    "buy_land": _handle_buy_land,
    "cultivate_land": _handle_cultivate_land,
    "build_inn": _handle_build_inn,
    "repair_inn": _handle_repair_inn,
    "cause_mutiny": _handle_cause_mutiny,
    "buy_treasure": _handle_buy_treasure,
    "sell_treasure": _handle_sell_treasure,
    "choose_event": _handle_choose_event,
    "end_turn": _handle_end_turn,
}


# ===== AI seats =====

def play_ai_turn(
    state: GameState,
    policy,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
    rng: random.Random | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Play the current AI seat's turn.
    policy.decide_actions(state, player_id) proposes actions; each goes through
    attempt_action, so illegal proposals are skipped. The turn then ends, and a
    pending Governor choice is answered with policy.choose_event.
    """
    player = state.get_current_player()
    if not player.is_ai or state.phase != PHASE_AI_THINKING:
        raise IllegalAction(f"Player {player.id} is not an AI seat waiting to act")

    rng = rng or random.Random()
    events: list[GameEvent] = []
    for action in policy.decide_actions(state, player.id):
        if action.type == "end_turn":
            break
        result = attempt_action(state, action, guild_defs, event_defs, character_defs, rng)
        if result.success:
            state = result.state
            events.extend(result.events)
        if state.phase == PHASE_GAME_OVER:
            return state, events

    state, evts = apply_action(state, end_turn_action(player.id), guild_defs, event_defs, character_defs, rng)
    events.extend(evts)

    if state.phase == PHASE_EVENT_RESOLUTION and state.pending_event_choice:
        index = policy.choose_event(state, player.id, list(state.pending_event_choice))
        state, evts = apply_action(
            state, choose_event_action(player.id, index), guild_defs, event_defs, character_defs, rng)
        events.extend(evts)
    return state, events


def play_ai_turns(
    state: GameState,
    policy,
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
    rng: random.Random | None = None,
    max_turns: int = 50,
) -> tuple[GameState, list[GameEvent]]:
    """Play AI seats until a human is to act, the game ends, or max_turns is reached."""
    events: list[GameEvent] = []
    for _ in range(max_turns):
        if state.phase != PHASE_AI_THINKING:
            break
        state, evts = play_ai_turn(state, policy, guild_defs, event_defs, character_defs, rng)
        events.extend(evts)
    return state, events


def replay_from_actions(
    initial_state: GameState,
    actions: list[Action],
    guild_defs: dict,
    event_defs: dict,
    character_defs: dict,
    rng: random.Random | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    Event sourcing: state is derived from action log. Pass a seeded rng (or
    dice in every rolling action) for a reproducible replay.

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    rng = rng or random.Random()
    current_state = initial_state.copy()
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(
            current_state,
            action,
            guild_defs,
            event_defs,
            character_defs,
            rng,
        )
        all_events.extend(events)

    return current_state, all_events
