from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Callable, Dict, List, Mapping, Optional

from timesaver.core.actions import ActionGenerator
from timesaver.core.distances import DistanceTable
from timesaver.core.heuristic import Heuristic
from timesaver.core.layout import Layout
from timesaver.core.models import Action, CarId, Node, PlanStep, State, StateKey, is_goal, state_key
from timesaver.core.validate import (
    raise_on_errors,
    validate_budget,
    validate_goals,
    validate_route,
    validate_start,
)
from timesaver.logging_config import get_logger

logger = get_logger(__name__)


class SolveStatus(str, Enum):
    SOLVED = "solved"
    UNSOLVABLE = "unsolvable"              # frontier exhausted, no goal state reachable
    BUDGET_EXHAUSTED = "budget_exhausted"  # step budget hit with frontier left; unknown
    CANCELLED = "cancelled"                # deadline passed or caller cancelled


@dataclass(frozen=True)
class SearchProgress:
    steps: int
    frontier_size: int
    g: int
    h: int


ProgressObserver = Callable[[SearchProgress], None]


@dataclass(order=True)
class SearchNode:
    """Frontier entry ordered by f, then h, then insertion order."""

    f_score: int
    h_score: int
    seq: int
    state: State = field(compare=False)
    g_score: int = field(compare=False)
    parent: Optional["SearchNode"] = field(default=None, compare=False)
    action: Optional[Action] = field(default=None, compare=False)

    def reconstruct_plan(self) -> List[PlanStep]:
        plan: List[PlanStep] = []
        node = self
        while node.parent is not None:
            plan.append(PlanStep(action=node.action, state=node.state))
            node = node.parent
        plan.reverse()
        return plan


@dataclass
class SolveResult:
    status: SolveStatus
    plan: List[PlanStep] = field(default_factory=list)
    cost: Optional[int] = None  # g of the goal state when solved
    steps: int = 0              # frontier pops performed
    frontier_size: int = 0
    explored: int = 0           # distinct canonical keys costed
    elapsed_s: float = 0.0

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    @property
    def actions(self) -> List[Action]:
        return [step.action for step in self.plan]


class Solver:
    """Best-first (A*) search for a loco plan that puts every car on one of its goal nodes.

    The layout, distance table and goals are fixed at construction and only read
    during ``solve``; each ``solve`` call owns its frontier and cost map, so one
    solver may serve several start states.

    Args:
        layout: track graph from ``build_layout``
        goals: car id -> acceptable goal nodes
        route: nodes the loco may enter; None or empty means unrestricted
        distances: precomputed table for ``layout`` (built when omitted)
        merge_coupling_order: treat states that differ only in coupling order as one
    """

    def __init__(
        self,
        layout: Layout,
        goals: Mapping[CarId, AbstractSet[Node]],
        route: Optional[AbstractSet[Node]] = None,
        distances: Optional[DistanceTable] = None,
        merge_coupling_order: bool = True,
    ):
        raise_on_errors(validate_goals(layout, goals) + validate_route(layout, route))
        self.layout = layout
        self.goals: Dict[CarId, frozenset] = {car: frozenset(nodes) for car, nodes in goals.items()}
        self.route = frozenset(route) if route else None
        self.distances = distances or DistanceTable(layout)
        self.generator = ActionGenerator(layout, self.route)
        self.heuristic = Heuristic(self.distances, self.goals)
        self.merge_coupling_order = merge_coupling_order

    def key(self, state: State) -> StateKey:
        return state_key(state, ordered=not self.merge_coupling_order)

    def check(self, start: State, budget: int) -> None:
        issues = validate_start(self.layout, start, self.goals, self.route) + validate_budget(budget)
        for it in issues:
            if it.level == "warning":
                logger.warning(it.message, extra={"hint": it.hint} if it.hint else {})
        raise_on_errors(issues)

    def solve(
        self,
        start: State,
        budget: int,
        progress: Optional[ProgressObserver] = None,
        progress_every: int = 1000,
        deadline_s: Optional[float] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> SolveResult:
        """Search from ``start`` for at most ``budget`` frontier pops.

        Raises ConfigurationError before the first pop if ``start`` or ``budget``
        is invalid. Every other outcome is reported through ``SolveResult.status``.
        """
        self.check(start, budget)
        progress_every = max(1, int(progress_every))

        t0 = time.perf_counter()
        counter = itertools.count()
        h0 = self.heuristic.estimate(start)
        frontier: List[SearchNode] = [SearchNode(h0, h0, next(counter), state=start, g_score=0)]
        best_cost: Dict[StateKey, int] = {self.key(start): 0}
        steps = 0

        logger.debug(
            "Search started",
            extra={"loco": start.loco, "cars": len(start.car_ids), "h": h0, "budget": budget},
        )

        def finish(status: SolveStatus, node: Optional[SearchNode] = None) -> SolveResult:
            result = SolveResult(
                status=status,
                plan=node.reconstruct_plan() if node is not None else [],
                cost=node.g_score if node is not None else None,
                steps=steps,
                frontier_size=len(frontier),
                explored=len(best_cost),
                elapsed_s=time.perf_counter() - t0,
            )
            log = logger.info if status is SolveStatus.SOLVED else logger.warning
            log(
                f"Search finished: {status.value}",
                extra={
                    "steps": steps,
                    "frontier": result.frontier_size,
                    "explored": result.explored,
                    "cost": result.cost,
                    "elapsed_ms": round(result.elapsed_s * 1000, 2),
                },
            )
            return result

        while frontier:
            if steps >= budget:
                return finish(SolveStatus.BUDGET_EXHAUSTED)
            if should_cancel is not None and should_cancel():
                return finish(SolveStatus.CANCELLED)
            if deadline_s is not None and time.perf_counter() - t0 >= deadline_s:
                return finish(SolveStatus.CANCELLED)

            current = heapq.heappop(frontier)
            steps += 1

            if progress is not None and steps % progress_every == 0:
                progress(SearchProgress(steps, len(frontier), current.g_score, current.h_score))

            # superseded by a cheaper path to the same key
            if current.g_score > best_cost[self.key(current.state)]:
                continue

            if is_goal(current.state, self.goals):
                return finish(SolveStatus.SOLVED, current)

            for transition in self.generator.transitions(current.state):
                tentative_g = current.g_score + transition.action.cost
                next_key = self.key(transition.state)
                if next_key not in best_cost or tentative_g < best_cost[next_key]:
                    best_cost[next_key] = tentative_g
                    h = self.heuristic.estimate(transition.state)
                    heapq.heappush(frontier, SearchNode(
                        tentative_g + h,
                        h,
                        next(counter),
                        state=transition.state,
                        g_score=tentative_g,
                        parent=current,
                        action=transition.action,
                    ))

        return finish(SolveStatus.UNSOLVABLE)


def solve(
    layout: Layout,
    start: State,
    goals: Mapping[CarId, AbstractSet[Node]],
    budget: int,
    route: Optional[AbstractSet[Node]] = None,
    **kwargs,
) -> SolveResult:
    return Solver(layout, goals, route=route).solve(start, budget, **kwargs)
