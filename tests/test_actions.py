import pytest

from timesaver.core.actions import ActionGenerator
from timesaver.core.errors import IllegalActionError
from timesaver.core.layout import build_layout
from timesaver.core.models import Action, ActionKind, State, state_key

LAYOUT = build_layout({"A": 2, "B": 1})


def kinds(transitions):
    return [t.action.kind for t in transitions]


def test_moves_to_every_neighbour_and_cars_stay_put():
    gen = ActionGenerator(LAYOUT)
    s = State.of("MAIN", {"C1": "A1"})
    out = list(gen.transitions(s))
    assert kinds(out) == [ActionKind.MOVE] * 4
    assert {t.state.loco for t in out} == {"A1", "B0", "M1", "M2"}
    for t in out:
        assert t.state.cars == s.cars
        assert t.action.cost == 1


def test_couple_takes_every_car_at_the_node():
    gen = ActionGenerator(LAYOUT)
    s = State.of("A0", {"C1": "A0", "C2": "A0", "C3": "B0"})
    couples = [t for t in gen.transitions(s) if t.action.kind is ActionKind.COUPLE]
    assert len(couples) == 1
    after = couples[0].state
    assert after.attached == ("C1", "C2")
    assert after.locations == {"C3": "B0"}
    assert couples[0].action.label == "COUPLE at A0 -> [C1, C2]"


def test_couple_appends_to_existing_train():
    gen = ActionGenerator(LAYOUT)
    s = State.of("B0", {"C2": "B0"}, attached=["C1"])
    assert gen.couple(s).state.attached == ("C1", "C2")


def test_explicit_couple_must_name_all_cars():
    gen = ActionGenerator(LAYOUT)
    s = State.of("A0", {"C1": "A0", "C2": "A0"})
    assert gen.couple(s, {"C2", "C1"}).state.attached == ("C1", "C2")
    with pytest.raises(IllegalActionError):
        gen.couple(s, {"C1"})
    with pytest.raises(IllegalActionError):
        gen.couple(State.of("A1", {"C1": "A0"}))


def test_decouple_drops_everything_at_loco():
    gen = ActionGenerator(LAYOUT)
    s = State.of("B0", {"C3": "A0"}, attached=["C2", "C1"])
    t = gen.decouple(s)
    assert t.state.attached == ()
    assert t.state.locations == {"C1": "B0", "C2": "B0", "C3": "A0"}
    assert t.action.cars == ("C2", "C1")
    with pytest.raises(IllegalActionError):
        gen.decouple(t.state)


def test_branching_factor_bound():
    gen = ActionGenerator(LAYOUT)
    s = State.of("A1", {"C1": "A1"}, attached=["C2"])
    out = list(gen.transitions(s))
    assert len(out) <= LAYOUT.degree("A1") + 2
    assert kinds(out).count(ActionKind.COUPLE) == 1
    assert kinds(out).count(ActionKind.DECOUPLE) == 1


def test_route_restriction_filters_moves():
    gen = ActionGenerator(LAYOUT, route={"M1", "MAIN", "A1"})
    out = list(gen.transitions(State.of("MAIN", {})))
    assert {t.state.loco for t in out} == {"M1", "A1"}
    with pytest.raises(IllegalActionError):
        gen.move(State.of("MAIN", {}), "B0")


def test_empty_route_means_unrestricted():
    gen = ActionGenerator(LAYOUT, route=set())
    assert gen.route is None
    assert len(list(gen.transitions(State.of("MAIN", {})))) == 4


def test_apply_checks_legality():
    gen = ActionGenerator(LAYOUT)
    s = State.of("M1", {"C1": "A0"})
    assert gen.apply(s, Action(ActionKind.MOVE, node="M1", target="MAIN")).loco == "MAIN"
    with pytest.raises(IllegalActionError):
        gen.apply(s, Action(ActionKind.MOVE, node="M1", target="A0"))
    with pytest.raises(IllegalActionError):
        gen.apply(s, Action(ActionKind.MOVE, node="MAIN", target="A1"))
    with pytest.raises(IllegalActionError):
        gen.apply(State.of("A0", {}, attached=["C1"]), Action(ActionKind.DECOUPLE, node="A0", cars=("C2",)))


def test_couple_then_decouple_returns_same_key():
    gen = ActionGenerator(LAYOUT)
    start = State(loco="A0", cars=(("C3", "B0"), ("C1", "A0")))
    back = gen.decouple(gen.couple(start).state).state
    assert back == start
    assert state_key(back) == state_key(start)
