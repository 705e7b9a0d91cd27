from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Tuple

Node = str
CarId = str
GoalSpec = Mapping[CarId, AbstractSet[Node]]
StateKey = Tuple[Node, Tuple[CarId, ...], Tuple[Tuple[CarId, Node], ...]]


@dataclass(frozen=True)
class State:
    loco: Node
    # car ids in coupling order; order only matters for display
    attached: Tuple[CarId, ...] = ()
    # unattached cars as (car_id, node), sorted by car id
    cars: Tuple[Tuple[CarId, Node], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "attached", tuple(self.attached))
        object.__setattr__(self, "cars", tuple(sorted((c, n) for c, n in self.cars)))

    @classmethod
    def of(cls, loco: Node, cars: Mapping[CarId, Node], attached: Iterable[CarId] = ()) -> "State":
        attached = tuple(attached)
        overlap = set(attached) & set(cars)
        if overlap:
            raise ValueError(f"Cars both attached and resting: {sorted(overlap)}")
        return cls(loco=loco, attached=attached, cars=tuple(sorted(cars.items())))

    @property
    def locations(self) -> Dict[CarId, Node]:
        return dict(self.cars)

    @property
    def car_ids(self) -> List[CarId]:
        return sorted([c for c, _ in self.cars] + list(self.attached))

    def cars_at(self, node: Node) -> List[CarId]:
        return [c for c, n in self.cars if n == node]

    def effective_location(self, car: CarId) -> Node:
        if car in self.attached:
            return self.loco
        return self.locations[car]


def state_key(state: State, ordered: bool = False) -> StateKey:
    """Hashable canonical encoding used for deduplication.

    By default the attached cars are sorted, so states reached through a
    different coupling order share a key. ``ordered=True`` keeps coupling order.
    """
    attached = state.attached if ordered else tuple(sorted(state.attached))
    return (state.loco, attached, state.cars)


def state_from_key(key: StateKey) -> State:
    loco, attached, cars = key
    return State(loco=loco, attached=tuple(attached), cars=tuple(sorted(cars)))


def is_goal(state: State, goals: GoalSpec) -> bool:
    # A car without a goal entry never satisfies the test.
    if state.attached:
        return False
    for car, node in state.cars:
        allowed = goals.get(car)
        if not allowed or node not in allowed:
            return False
    return True


class ActionKind(str, Enum):
    MOVE = "MOVE"
    COUPLE = "COUPLE"
    DECOUPLE = "DECOUPLE"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    node: Node                      # loco node when the action starts
    target: Optional[Node] = None   # MOVE only
    cars: Tuple[CarId, ...] = ()    # COUPLE / DECOUPLE only
    cost: int = 1

    @property
    def label(self) -> str:
        if self.kind is ActionKind.MOVE:
            return f"MOVE {self.node}->{self.target}"
        return f"{self.kind.value} at {self.node} -> [{', '.join(self.cars)}]"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Transition:
    action: Action
    state: State


@dataclass(frozen=True)
class PlanStep:
    action: Action
    state: State  # state after the action

    @property
    def label(self) -> str:
        return self.action.label


@dataclass
class Problem:
    """Start placement, goals and the optional loco route restriction."""
    start: State
    goals: Dict[CarId, frozenset] = field(default_factory=dict)
    route: Optional[frozenset] = None

    @property
    def restricted(self) -> bool:
        return bool(self.route)
