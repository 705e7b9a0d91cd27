from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from timesaver.core.distances import DistanceTable, reachability_report
from timesaver.core.errors import ConfigurationError, ValidationIssue
from timesaver.core.layout import M1, Layout, build_layout
from timesaver.core.models import PlanStep, Problem, State
from timesaver.core.routes import parse_route_input
from timesaver.core.solver import ProgressObserver, Solver, SolveResult

DATA_DIR = Path(__file__).parents[1] / "data"


@dataclass
class Scenario:
    sidings: Dict[str, int]
    cars: Dict[str, str]              # car id -> start node
    goals: Dict[str, List[str]]       # car id -> acceptable goal nodes
    loco: str = M1
    route: Optional[List[str]] = None
    name: str = "scenario"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenario":
        missing = [k for k in ("sidings", "cars", "goals") if k not in data]
        if missing:
            raise ConfigurationError.single(f"Scenario is missing {', '.join(missing)}")
        goals = {car: [g] if isinstance(g, str) else list(g) for car, g in data["goals"].items()}
        return cls(
            sidings={k: v for k, v in data["sidings"].items()},
            cars=dict(data["cars"]),
            goals=goals,
            loco=data.get("loco") or M1,
            route=list(data["route"]) if data.get("route") else None,
            name=data.get("name", "scenario"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "sidings": self.sidings,
            "loco": self.loco,
            "cars": self.cars,
            "goals": self.goals,
        }
        if self.route:
            out["route"] = self.route
        return out

    def build(self) -> Layout:
        return build_layout(self.sidings)

    def to_problem(self) -> Problem:
        return Problem(
            start=State.of(self.loco, self.cars),
            goals={car: frozenset(nodes) for car, nodes in self.goals.items()},
            route=frozenset(self.route) if self.route else None,
        )


def with_route_text(scenario: Scenario, text: str) -> Scenario:
    """Return a copy of ``scenario`` restricted to the nodes named in operator text.

    Accepts the same input as the /route endpoint, e.g. ``"M1 MAIN A"``.
    """
    selection = parse_route_input(text, scenario.build())
    if selection.unknown:
        raise ConfigurationError([
            ValidationIssue("error", f"Unknown route token {t!r}", "Use node names or siding labels.")
            for t in selection.unknown
        ])
    if selection.unrestricted:
        raise ConfigurationError.single("Route text names no nodes")
    return replace(scenario, route=sorted(selection.restriction))


def load_scenario(path: Path | str) -> Scenario:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return Scenario.from_dict(data)


def run_scenario(
    scenario: Scenario,
    budget: int,
    progress: Optional[ProgressObserver] = None,
    progress_every: int = 1000,
    deadline_s: Optional[float] = None,
) -> Dict[str, Any]:
    layout = scenario.build()
    problem = scenario.to_problem()
    table = DistanceTable(layout)
    solver = Solver(layout, problem.goals, route=problem.route, distances=table)
    result: SolveResult = solver.solve(
        problem.start, budget, progress=progress, progress_every=progress_every, deadline_s=deadline_s
    )
    return {
        "layout": layout,
        "start": problem.start,
        "reachability": reachability_report(table, scenario.cars, problem.goals),
        "result": result,
    }


def plan_json(plan: List[PlanStep]) -> List[Dict[str, Any]]:
    # One entry per action, state shown after the action
    return [
        {
            "step": i,
            "action": step.label,
            "loco": step.state.loco,
            "attached": list(step.state.attached),
            "cars": step.state.locations,
        }
        for i, step in enumerate(plan, start=1)
    ]
