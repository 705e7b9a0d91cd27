from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from timesaver.core.layout import Graph, Layout, Node

UNREACHABLE = math.inf


def bfs_distances(graph: Graph, start: Node) -> Dict[Node, float]:
    """Hop count from ``start`` to every node of ``graph``; UNREACHABLE where no path exists."""
    dist: Dict[Node, float] = {node: UNREACHABLE for node in graph}
    dist[start] = 0
    queue = deque([start])
    while queue:
        u = queue.popleft()
        for v in graph[u]:
            if dist.get(v, UNREACHABLE) == UNREACHABLE:
                dist[v] = dist[u] + 1
                queue.append(v)
    return dist


class DistanceTable:
    """All-pairs shortest hop counts over an empty layout.

    Occupancy is ignored: the table answers how many moves a trip takes if
    nothing were in the way. Computed once in the constructor and read-only
    afterwards, so one table can back any number of solver runs.
    """

    def __init__(self, graph: Layout | Graph):
        adjacency = graph.adjacency if isinstance(graph, Layout) else graph
        self._dist: Dict[Node, Dict[Node, float]] = {node: bfs_distances(adjacency, node) for node in adjacency}

    def __contains__(self, node: object) -> bool:
        return node in self._dist

    def distance(self, source: Node, target: Node) -> float:
        row = self._dist.get(source)
        if row is None:
            return UNREACHABLE
        return row.get(target, UNREACHABLE)

    def min_distance(self, source: Node, goals: Iterable[Node]) -> float:
        return min((self.distance(source, g) for g in goals), default=UNREACHABLE)

    def row(self, source: Node) -> Mapping[Node, float]:
        return dict(self._dist[source])


@dataclass(frozen=True)
class ReachabilityEntry:
    car: str
    start: Node
    distances: Tuple[Tuple[Node, float], ...]  # (goal, hops) in goal order
    minimum: float

    @property
    def reachable(self) -> bool:
        return self.minimum != UNREACHABLE


def reachability_report(
    table: DistanceTable,
    start_cars: Mapping[str, Node],
    goals: Mapping[str, Iterable[Node]],
) -> List[ReachabilityEntry]:
    """Per-car minimum distance to its goals, ignoring blocking by other cars.

    A car without a goal entry is reported against its own start node; the
    solver itself never accepts such a car.
    """
    out: List[ReachabilityEntry] = []
    for car in sorted(start_cars):
        start = start_cars[car]
        car_goals: Optional[Iterable[Node]] = goals.get(car)
        targets = sorted(car_goals) if car_goals else [start]
        dists = tuple((g, table.distance(start, g)) for g in targets)
        out.append(ReachabilityEntry(
            car=car,
            start=start,
            distances=dists,
            minimum=min((d for _, d in dists), default=UNREACHABLE),
        ))
    return out
