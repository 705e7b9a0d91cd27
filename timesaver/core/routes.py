from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from timesaver.core.layout import THROUGH_LINE, Layout, Node

_SPLIT = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class RouteSelection:
    restriction: FrozenSet[Node] = frozenset()
    destination: Optional[Node] = None
    unknown: List[str] = field(default_factory=list)

    @property
    def unrestricted(self) -> bool:
        return not self.restriction


def tokenize(text: Optional[str]) -> List[str]:
    raw = (text or "").strip().upper()
    return [t for t in _SPLIT.split(raw) if t]


def _siding_label(token: str, layout: Layout) -> Optional[str]:
    # labels are matched case-insensitively since operator input is upper-cased
    for label in layout.siding_lengths:
        if label.upper() == token:
            return label
    return None


def _node(token: str, layout: Layout) -> Optional[Node]:
    for node in layout:
        if node.upper() == token:
            return node
    return None


def parse_route_input(text: Optional[str], layout: Layout) -> RouteSelection:
    """Turn operator input such as ``"M1 MAIN A"`` into a route restriction and a destination.

    A siding label stands for all of its nodes in the restriction and for its
    tail as a destination. Destination tokens other than M1, MAIN and M2 are
    preferred, so ``"M1 MAIN A1"`` heads for A1.
    """
    tokens = tokenize(text)
    restriction = set()
    unknown: List[str] = []
    for t in tokens:
        label = _siding_label(t, layout)
        node = _node(t, layout)
        if node is not None:
            restriction.add(node)
        elif label is not None:
            restriction.update(layout.siding_nodes(label))
        else:
            unknown.append(t)

    return RouteSelection(
        restriction=frozenset(restriction),
        destination=pick_destination(tokens, layout),
        unknown=unknown,
    )


def pick_destination(tokens: List[str], layout: Layout) -> Optional[Node]:
    through = {n.upper() for n in THROUGH_LINE}
    non_loco = [t for t in tokens if t not in through]

    for t in non_loco:
        label = _siding_label(t, layout)
        if label is not None:
            return layout.tail(label)
    for t in non_loco:
        node = _node(t, layout)
        if node is not None:
            return node
    for t in tokens:
        label = _siding_label(t, layout)
        if label is not None:
            return layout.tail(label)
        node = _node(t, layout)
        if node is not None:
            return node
    return None
