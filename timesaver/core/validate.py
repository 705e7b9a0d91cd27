from __future__ import annotations

from collections import Counter
from typing import AbstractSet, List, Mapping, Optional

from timesaver.core.errors import ConfigurationError, ValidationIssue
from timesaver.core.layout import Layout
from timesaver.core.models import CarId, Node, State


def validate_goals(layout: Layout, goals: Mapping[CarId, AbstractSet[Node]]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for car in sorted(goals):
        nodes = goals[car]
        if not nodes:
            issues.append(ValidationIssue("error", f"Car {car} has an empty goal set.", "List at least one goal node."))
            continue
        for node in sorted(nodes):
            if node not in layout:
                issues.append(ValidationIssue("error", f"Goal node {node!r} of car {car} is not in the layout."))
    return issues


def validate_route(layout: Layout, route: Optional[AbstractSet[Node]]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for node in sorted(route or ()):
        if node not in layout:
            issues.append(ValidationIssue("error", f"Route node {node!r} is not in the layout."))
    return issues


def validate_placement(layout: Layout, cars: Mapping[CarId, Node]) -> List[ValidationIssue]:
    return [
        ValidationIssue("error", f"Car {car} starts at {node!r}, which is not in the layout.")
        for car, node in sorted(cars.items())
        if node not in layout
    ]


def validate_start(
    layout: Layout,
    start: State,
    goals: Mapping[CarId, AbstractSet[Node]],
    route: Optional[AbstractSet[Node]] = None,
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if start.loco not in layout:
        issues.append(ValidationIssue("error", f"Loco start node {start.loco!r} is not in the layout."))
    elif route and start.loco not in route:
        issues.append(ValidationIssue(
            "warning",
            f"Loco starts at {start.loco} outside the route restriction.",
            "The loco may leave but never re-enter that node.",
        ))

    counts = Counter([c for c, _ in start.cars] + list(start.attached))
    for car, n in sorted(counts.items()):
        if n > 1:
            issues.append(ValidationIssue("error", f"Car {car} appears {n} times in the start state."))

    issues.extend(validate_placement(layout, dict(start.cars)))

    for car in sorted(counts):
        if car not in goals:
            issues.append(ValidationIssue(
                "error",
                f"Car {car} has no goal entry.",
                "Every car needs an explicit goal set; no default is inferred.",
            ))

    for car in sorted(set(goals) - set(counts)):
        issues.append(ValidationIssue("warning", f"Goal given for unknown car {car}."))
    return issues


def validate_budget(budget: object) -> List[ValidationIssue]:
    if isinstance(budget, bool) or not isinstance(budget, int) or budget < 1:
        return [ValidationIssue("error", f"Step budget must be a positive integer, got {budget!r}.")]
    return []


def raise_on_errors(issues: List[ValidationIssue]) -> None:
    if any(it.level == "error" for it in issues):
        raise ConfigurationError(issues)
