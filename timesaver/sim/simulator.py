from typing import Dict, List, Optional, Tuple

from timesaver.core.actions import ActionGenerator
from timesaver.core.errors import IllegalActionError
from timesaver.core.models import Action, ActionKind, GoalSpec, PlanStep, State, is_goal

# Plan replay and summary figures for solved plans


def replay_plan(generator: ActionGenerator, start: State, actions: List[Action]) -> List[State]:
    # returns the trajectory including the start state; raises IllegalActionError on a bad step
    states = [start]
    state = start
    for action in actions:
        state = generator.apply(state, action)
        states.append(state)
    return states


def validate_plan(
    generator: ActionGenerator,
    start: State,
    plan: List[PlanStep],
    goals: GoalSpec,
) -> Tuple[bool, Optional[str]]:
    state = start
    for i, step in enumerate(plan):
        try:
            state = generator.apply(state, step.action)
        except IllegalActionError as e:
            return False, f"Action {i} ({step.label}) failed: {e}"
        if state != step.state:
            return False, f"Action {i} ({step.label}) produced a different state than recorded"
    if not is_goal(state, goals):
        return False, "Final state does not satisfy goal"
    return True, None


def summarize_plan(plan: List[PlanStep]) -> Dict[str, int]:
    if not plan:
        return {"total_actions": 0, "moves": 0, "couples": 0, "decouples": 0, "nodes_visited": 0}
    kinds = [step.action.kind for step in plan]
    visited = {plan[0].action.node} | {step.state.loco for step in plan}
    return {
        "total_actions": len(plan),
        "moves": kinds.count(ActionKind.MOVE),
        "couples": kinds.count(ActionKind.COUPLE),
        "decouples": kinds.count(ActionKind.DECOUPLE),
        "nodes_visited": len(visited),
    }
