from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from timesaver.core.errors import ConfigurationError
from timesaver.logging_config import get_logger

logger = get_logger(__name__)

Node = str
Graph = Mapping[Node, Tuple[Node, ...]]

MAIN: Node = "MAIN"
M1: Node = "M1"
M2: Node = "M2"
THROUGH_LINE = (MAIN, M1, M2)

# Default layout used by the console runner and the HTTP layer
DEFAULT_SIDINGS: Dict[str, int] = {"A": 2, "B": 3, "C": 1, "D": 2, "E": 1}


@dataclass(frozen=True)
class Layout:
    """Siding network: every siding is a chain whose tail opens onto MAIN.

    Built once by ``build_layout`` and shared read-only afterwards.
    """
    sidings: Tuple[Tuple[str, int], ...]
    adjacency: Graph = field(compare=False)

    def __contains__(self, node: object) -> bool:
        return node in self.adjacency

    def __iter__(self) -> Iterator[Node]:
        return iter(self.adjacency)

    def __len__(self) -> int:
        return len(self.adjacency)

    @property
    def nodes(self) -> List[Node]:
        return list(self.adjacency)

    @property
    def siding_lengths(self) -> Dict[str, int]:
        return dict(self.sidings)

    def neighbors(self, node: Node) -> Tuple[Node, ...]:
        return self.adjacency[node]

    def degree(self, node: Node) -> int:
        return len(self.adjacency[node])

    def siding_nodes(self, label: str) -> List[Node]:
        length = self.siding_lengths.get(label)
        if length is None:
            raise KeyError(f"Siding {label} not found")
        return [f"{label}{i}" for i in range(length)]

    def tail(self, label: str) -> Node:
        return self.siding_nodes(label)[-1]

    def endstations(self) -> List[Node]:
        return sorted((n for n, nbrs in self.adjacency.items() if len(nbrs) == 1), key=str.casefold)

    def coupling_stations(self) -> List[Node]:
        return sorted(set(self.adjacency.get(MAIN, ())), key=str.casefold)


def build_layout(siding_lengths: Mapping[str, int]) -> Layout:
    """Build the track graph for ``{label: length}``.

    Nodes of a siding are named label + index (``A0``, ``A1``...); the last one
    links to MAIN, and MAIN links to the through-line ends M1 and M2.
    """
    adjacency: Dict[Node, List[Node]] = {}
    tails: List[Node] = []

    for label, length in siding_lengths.items():
        if isinstance(length, bool) or not isinstance(length, int):
            raise ConfigurationError.single(f"Siding {label!r} length must be an integer, got {length!r}")
        if length < 1:
            raise ConfigurationError.single(
                f"Siding {label!r} has length {length}", "Every siding needs at least one track section."
            )
        nodes = [f"{label}{i}" for i in range(length)]
        for node in nodes:
            if node in adjacency or node in THROUGH_LINE:
                raise ConfigurationError.single(
                    f"Siding {label!r} produces node {node!r} which already exists",
                    "Pick siding labels whose generated node names do not overlap.",
                )
            adjacency[node] = []
        for a, b in zip(nodes, nodes[1:]):
            adjacency[a].append(b)
            adjacency[b].append(a)
        tails.append(nodes[-1])

    adjacency[MAIN] = []
    for tail in tails:
        adjacency[MAIN].append(tail)
        adjacency[tail].append(MAIN)
    adjacency[M1] = [MAIN]
    adjacency[M2] = [MAIN]
    adjacency[MAIN].extend([M1, M2])

    layout = Layout(
        sidings=tuple((label, int(length)) for label, length in siding_lengths.items()),
        adjacency={node: tuple(nbrs) for node, nbrs in adjacency.items()},
    )
    logger.debug("Layout built", extra={"sidings": len(tails), "nodes": len(layout)})
    return layout


def shortest_path(layout: Layout, source: Node, target: Node) -> List[Node]:
    # Plain BFS over the empty layout; occupancy is not considered.
    if source not in layout or target not in layout:
        return []
    parent: Dict[Node, Optional[Node]] = {source: None}
    queue = deque([source])
    while queue:
        u = queue.popleft()
        if u == target:
            break
        for v in layout.neighbors(u):
            if v not in parent:
                parent[v] = u
                queue.append(v)
    if target not in parent:
        return []
    path: List[Node] = []
    cur: Optional[Node] = target
    while cur is not None:
        path.append(cur)
        cur = parent[cur]
    path.reverse()
    return path


def path_moves(path: List[Node]) -> List[str]:
    return [f"{a}->{b}" for a, b in zip(path, path[1:])]
