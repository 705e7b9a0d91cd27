"""Benchmark the A* solver for varying numbers of cars.

Usage:
    python scripts/benchmark_solver.py -Min 1 -Max 4 -Runs 5 -Budget 200000
    python -m scripts.benchmark_solver -Min 1 -Max 4 -Runs 5 -Json

Notes:
    - The state space grows roughly as nodes ** cars, so keep car counts small.
    - Runs that hit the budget are reported with their status, not dropped.
"""

from __future__ import annotations
import argparse, random, statistics, json, time, os, sys
from typing import Dict, List

# Ensure project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from timesaver.config import parse_sidings  # type: ignore
from timesaver.core.distances import DistanceTable  # type: ignore
from timesaver.core.layout import M1, Layout, build_layout  # type: ignore
from timesaver.core.models import State  # type: ignore
from timesaver.core.solver import Solver  # type: ignore
from timesaver.logging_config import setup_logging  # type: ignore


def random_cars(layout: Layout, n: int) -> Dict[str, str]:
    nodes = [x for label in layout.siding_lengths for x in layout.siding_nodes(label)]
    return {f"C{i+1}": node for i, node in enumerate(random.sample(nodes, n))}


def run_once(layout: Layout, table: DistanceTable, n_cars: int, budget: int) -> dict:
    start_cars = random_cars(layout, n_cars)
    goal_cars = random_cars(layout, n_cars)
    goals = {car: {goal_cars[car]} for car in start_cars}
    solver = Solver(layout, goals, distances=table)
    t0 = time.perf_counter()
    result = solver.solve(State.of(M1, start_cars), budget)
    dt = time.perf_counter() - t0
    return {
        "n_cars": n_cars,
        "status": result.status.value,
        "plan_len": len(result.plan),
        "steps": result.steps,
        "explored": result.explored,
        "elapsed_s": dt,
    }


def main():
    p = argparse.ArgumentParser(description="Benchmark solver runtime vs car count")
    p.add_argument('-Sidings', type=str, default='A=2,B=3,C=1,D=2,E=1')
    p.add_argument('-Min', type=int, default=1)
    p.add_argument('-Max', type=int, default=4)
    p.add_argument('-Runs', type=int, default=3)
    p.add_argument('-Budget', type=int, default=200000)
    p.add_argument('-Seed', type=int, default=7)
    p.add_argument('-Json', action='store_true', help='emit one JSON row per run')
    a = p.parse_args()

    setup_logging("ERROR")
    random.seed(a.Seed)
    layout = build_layout(parse_sidings(a.Sidings))
    table = DistanceTable(layout)

    rows: List[dict] = []
    for n in range(a.Min, a.Max + 1):
        for _ in range(a.Runs):
            row = run_once(layout, table, n, a.Budget)
            rows.append(row)
            if a.Json:
                print(json.dumps(row))
            else:
                print(f"Cars={row['n_cars']:<2} elapsed={row['elapsed_s']*1000:9.2f} ms steps={row['steps']:<8} plan={row['plan_len']:<3} status={row['status']}")

    if not a.Json:
        print('\nSummary (mean ms per car count)')
        for n in range(a.Min, a.Max + 1):
            ms = statistics.fmean(r['elapsed_s'] * 1000 for r in rows if r['n_cars'] == n)
            print(f"  {n:>2}: {ms:9.2f} ms")


if __name__ == '__main__':
    main()
