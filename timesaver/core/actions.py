from __future__ import annotations

from typing import AbstractSet, Iterable, Iterator, Optional

from timesaver.core.errors import IllegalActionError
from timesaver.core.layout import Layout
from timesaver.core.models import Action, ActionKind, CarId, Node, State, Transition


class ActionGenerator:
    """Legal loco moves, couples and decouples from a state.

    MOVE goes to any neighbour permitted by the route restriction (occupied
    nodes included, so the loco can reach cars). COUPLE takes every car at the
    loco's node, DECOUPLE drops every attached car; partial coupling is not
    part of the puzzle.
    """

    def __init__(self, layout: Layout, route: Optional[AbstractSet[Node]] = None):
        self.layout = layout
        self.route = frozenset(route) if route else None

    def allows(self, node: Node) -> bool:
        return self.route is None or node in self.route

    def transitions(self, state: State) -> Iterator[Transition]:
        for nb in self.layout.neighbors(state.loco):
            if self.allows(nb):
                yield self._move(state, nb)

        at_loco = state.cars_at(state.loco)
        if at_loco:
            yield self._couple(state, tuple(at_loco))

        if state.attached:
            yield self._decouple(state)

    def move(self, state: State, target: Node) -> Transition:
        if target not in self.layout.neighbors(state.loco):
            raise IllegalActionError(f"{target} is not adjacent to {state.loco}")
        if not self.allows(target):
            raise IllegalActionError(f"{target} is outside the route restriction")
        return self._move(state, target)

    def couple(self, state: State, car_ids: Optional[Iterable[CarId]] = None) -> Transition:
        at_loco = state.cars_at(state.loco)
        if not at_loco:
            raise IllegalActionError(f"No cars to couple at {state.loco}")
        if car_ids is not None:
            requested = set(car_ids)
            if requested != set(at_loco):
                # all-or-nothing: the set must be exactly the cars at the node
                raise IllegalActionError(
                    f"Coupling at {state.loco} must take {sorted(at_loco)}, got {sorted(requested)}"
                )
        return self._couple(state, tuple(at_loco))

    def decouple(self, state: State) -> Transition:
        if not state.attached:
            raise IllegalActionError(f"Nothing attached to decouple at {state.loco}")
        return self._decouple(state)

    def apply(self, state: State, action: Action) -> State:
        if action.node != state.loco:
            raise IllegalActionError(f"{action.label}: loco is at {state.loco}, not {action.node}")
        if action.kind is ActionKind.MOVE:
            return self.move(state, action.target).state
        if action.kind is ActionKind.COUPLE:
            return self.couple(state, action.cars).state
        if set(action.cars) != set(state.attached):
            raise IllegalActionError(f"{action.label}: attached cars are {list(state.attached)}")
        return self.decouple(state).state

    def _move(self, state: State, target: Node) -> Transition:
        action = Action(ActionKind.MOVE, node=state.loco, target=target)
        return Transition(action, State(loco=target, attached=state.attached, cars=state.cars))

    def _couple(self, state: State, car_ids: tuple) -> Transition:
        taken = set(car_ids)
        action = Action(ActionKind.COUPLE, node=state.loco, cars=car_ids)
        return Transition(action, State(
            loco=state.loco,
            attached=state.attached + car_ids,
            cars=tuple((c, n) for c, n in state.cars if c not in taken),
        ))

    def _decouple(self, state: State) -> Transition:
        cars = dict(state.cars)
        for car in state.attached:
            cars[car] = state.loco
        action = Action(ActionKind.DECOUPLE, node=state.loco, cars=state.attached)
        return Transition(action, State(loco=state.loco, attached=(), cars=tuple(cars.items())))
