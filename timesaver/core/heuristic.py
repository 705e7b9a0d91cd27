from __future__ import annotations

from timesaver.core.distances import UNREACHABLE, DistanceTable
from timesaver.core.models import GoalSpec, State


class Heuristic:
    """Sum over cars of the hop distance from where the car is to its nearest goal.

    An attached car counts from the loco's node. Couple and decouple costs are
    ignored, and a car whose goals are all unreachable contributes 0 rather
    than ruling the state out.
    """

    def __init__(self, table: DistanceTable, goals: GoalSpec):
        self.table = table
        self.goals = goals

    def estimate(self, state: State) -> int:
        est = 0
        for car in state.attached:
            est += self._car_cost(car, state.loco)
        for car, node in state.cars:
            est += self._car_cost(car, node)
        return est

    __call__ = estimate

    def _car_cost(self, car: str, node: str) -> int:
        best = self.table.min_distance(node, self.goals.get(car) or (node,))
        if best == UNREACHABLE:
            return 0
        return int(best)
