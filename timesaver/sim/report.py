from typing import Any, Dict, List

from timesaver.core.distances import UNREACHABLE, ReachabilityEntry
from timesaver.core.models import State
from timesaver.core.solver import SolveResult, SolveStatus

_FAILURE_TEXT = {
    SolveStatus.UNSOLVABLE: "No solution exists: every reachable state was explored.",
    SolveStatus.BUDGET_EXHAUSTED: "No solution found within the step budget.",
    SolveStatus.CANCELLED: "Search cancelled before a solution was found.",
}


def format_distance(d: float) -> str:
    return "inf" if d == UNREACHABLE else str(int(d))


def format_state(state: State) -> str:
    attached = ", ".join(state.attached) if state.attached else "(none)"
    cars = ", ".join(f"{c}:{n}" for c, n in state.cars) if state.cars else "(none)"
    return f"Loco={state.loco}, Attached=[{attached}], Cars={cars}"


def format_reachability(entries: List[ReachabilityEntry]) -> str:
    lines = ["Reachability (ignoring blocking):"]
    for e in entries:
        goals = ", ".join(f"{g}:{format_distance(d)}" for g, d in e.distances)
        lines.append(f" {e.car} from {e.start} -> goals [{goals}]  min={format_distance(e.minimum)}")
    return "\n".join(lines)


def format_plan(result: SolveResult) -> str:
    if not result.solved:
        return f"{_FAILURE_TEXT[result.status]} (steps={result.steps:,}, frontier={result.frontier_size:,})"
    lines = [f"Solution found in {len(result.plan)} actions:", ""]
    for i, step in enumerate(result.plan, start=1):
        lines.append(f"{i}: {step.label} -> {format_state(step.state)}")
    return "\n".join(lines)


def reachability_json(entries: List[ReachabilityEntry]) -> List[Dict[str, Any]]:
    # JSON has no infinity; unreachable distances are the string "inf"
    def enc(d: float) -> Any:
        return "inf" if d == UNREACHABLE else int(d)

    return [
        {
            "car": e.car,
            "start": e.start,
            "goals": {g: enc(d) for g, d in e.distances},
            "min": enc(e.minimum),
        }
        for e in entries
    ]
