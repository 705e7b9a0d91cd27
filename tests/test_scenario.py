import json

import pytest

from timesaver.core.errors import ConfigurationError
from timesaver.core.solver import SolveStatus
from timesaver.sim.report import format_plan, format_reachability
from timesaver.sim.scenario import DATA_DIR, Scenario, load_scenario, plan_json, run_scenario, with_route_text
from timesaver.sim.simulator import summarize_plan


def test_load_bundled_scenario():
    sc = load_scenario(DATA_DIR / "scenario_a.json")
    assert sc.loco == "M1"
    assert sc.cars["C2"] == "B1"
    problem = sc.to_problem()
    assert problem.goals["C3"] == frozenset({"B2"})
    assert not problem.restricted


def test_run_restricted_scenario_reports_unsolvable():
    out = run_scenario(load_scenario(DATA_DIR / "scenario_restricted.json"), budget=5_000)
    result = out["result"]
    assert result.status is SolveStatus.UNSOLVABLE
    assert "No solution exists" in format_plan(result)
    # blocking-unaware distance ignores the route restriction
    assert out["reachability"][0].minimum == 3


def test_run_small_scenario_and_render():
    sc = Scenario.from_dict({
        "sidings": {"A": 1, "B": 1},
        "cars": {"C1": "A0"},
        "goals": {"C1": "B0"},
    })
    out = run_scenario(sc, budget=10_000)
    result = out["result"]
    assert result.solved
    labels = [s.label for s in result.plan]
    assert labels == [
        "MOVE M1->MAIN",
        "MOVE MAIN->A0",
        "COUPLE at A0 -> [C1]",
        "MOVE A0->MAIN",
        "MOVE MAIN->B0",
        "DECOUPLE at B0 -> [C1]",
    ]
    kpis = summarize_plan(result.plan)
    assert kpis == {"total_actions": 6, "moves": 4, "couples": 1, "decouples": 1, "nodes_visited": 4}

    rows = plan_json(result.plan)
    assert rows[-1] == {"step": 6, "action": "DECOUPLE at B0 -> [C1]", "loco": "B0", "attached": [], "cars": {"C1": "B0"}}
    json.dumps(rows)

    text = format_plan(result)
    assert text.startswith("Solution found in 6 actions:")
    assert "3: COUPLE at A0 -> [C1] -> Loco=A0, Attached=[C1], Cars=(none)" in text
    assert "C1 from A0 -> goals [B0:2]  min=2" in format_reachability(out["reachability"])


def test_scenario_requires_core_keys():
    with pytest.raises(ConfigurationError):
        Scenario.from_dict({"sidings": {"A": 1}, "cars": {}})


def test_scenario_round_trips_through_dict():
    sc = load_scenario(DATA_DIR / "scenario_restricted.json")
    again = Scenario.from_dict(sc.to_dict())
    assert again == sc


def test_route_text_restricts_the_solver():
    sc = Scenario.from_dict({
        "sidings": {"A": 1, "B": 1},
        "cars": {"C1": "A0"},
        "goals": {"C1": "B0"},
    })
    open_route = with_route_text(sc, "m1 main a b")
    assert open_route.route == ["A0", "B0", "M1", "MAIN"]
    assert run_scenario(open_route, budget=10_000)["result"].solved

    blocked = with_route_text(sc, "M1 MAIN A")
    assert run_scenario(blocked, budget=10_000)["result"].status is SolveStatus.UNSOLVABLE


def test_route_text_rejects_unknown_tokens():
    sc = load_scenario(DATA_DIR / "scenario_restricted.json")
    with pytest.raises(ConfigurationError) as exc:
        with_route_text(sc, "M1 MAIN Z9 Q")
    assert [it.message for it in exc.value.issues] == ["Unknown route token 'Z9'", "Unknown route token 'Q'"]
    with pytest.raises(ConfigurationError):
        with_route_text(sc, "  ")
