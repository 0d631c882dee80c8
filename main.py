"""
Main entry point for the Gremios rules engine.
Demonstrates core functionality with a simulated game: the human seat plays a
few scripted actions, then every seat is driven by a random policy.
"""

import random
import sys

from gremios.engine.actions import buy_land, choose_event, cultivate_land, end_turn, invest_guild
from gremios.engine.definitions import load_static_definitions
from gremios.engine.policies import RandomPolicy
from gremios.engine.queries import get_victory_points_by_player
from gremios.engine.reducer import apply_action, attempt_action, play_ai_turns
from gremios.engine.state import PHASE_ACTION, PHASE_GAME_OVER
from gremios.engine.utils import initialize_game_state, print_game_state

MAX_ROUNDS = 200


def main(seed: int | None = None):
    print("Gremios Rules Engine - simulated game")
    print("=" * 60)

    rng = random.Random(seed)
    guild_defs, event_defs, character_defs = load_static_definitions()
    state = initialize_game_state(3, guild_defs, event_defs, character_defs, rng=rng)

    print("\n[INITIAL STATE]")
    print_game_state(state, character_defs)

    # ===== SCENARIO 1: scripted human turn =====
    print("\n[SCENARIO 1: Human buys and cultivates land, invests, ends turn]")
    human = state.get_current_player()
    first_guild = state.active_guilds[0].number
    for action in (buy_land(human.id), cultivate_land(human.id, 0), invest_guild(human.id, first_guild)):
        result = attempt_action(state, action, guild_defs, event_defs, character_defs, rng)
        if result.success:
            state = result.state
            print(f"  {action.type}: ok ({len(result.events)} events)")
        else:
            print(f"  {action.type}: rejected [{result.error_kind}] {result.error}")

    state, events = apply_action(state, end_turn(human.id), guild_defs, event_defs, character_defs, rng)
    print(f"  end_turn: {len(events)} events, roll {state.last_dice_roll}")

    # ===== SCENARIO 2: everyone on autopilot =====
    print("\n[SCENARIO 2: Random policy for every seat until someone wins]")
    policy = RandomPolicy(guild_defs, event_defs, character_defs, rng=rng)
    while state.phase != PHASE_GAME_OVER and state.round_number <= MAX_ROUNDS:
        pid = state.get_current_player().id
        if state.pending_event_choice:
            # Human Governor waiting in event_resolution
            index = policy.choose_event(state, pid, list(state.pending_event_choice))
            state, _ = apply_action(state, choose_event(pid, index), guild_defs, event_defs, character_defs, rng)
        elif state.phase == PHASE_ACTION:
            # The human seat is played by the same policy
            for action in policy.decide_actions(state, pid):
                result = attempt_action(state, action, guild_defs, event_defs, character_defs, rng)
                if result.success:
                    state = result.state
            if state.phase == PHASE_ACTION:
                state, _ = apply_action(state, end_turn(pid), guild_defs, event_defs, character_defs, rng)
        else:
            state, _ = play_ai_turns(state, policy, guild_defs, event_defs, character_defs, rng, max_turns=1)

    print_game_state(state, character_defs, verbose=True)
    vps = get_victory_points_by_player(state, character_defs)
    if state.winner is not None:
        print(f"Winner: {state.get_player(state.winner).name} after {state.round_number} round(s)")
    else:
        print(f"No winner after {MAX_ROUNDS} rounds")
    print(f"Victory points: {vps}")


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else None)
