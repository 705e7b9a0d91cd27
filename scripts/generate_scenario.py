"""Random scenario generator for the siding puzzle."""
import argparse, random, json, os, sys
from typing import Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from timesaver.config import parse_sidings  # type: ignore
from timesaver.core.layout import build_layout, Layout  # type: ignore


def siding_nodes(layout: Layout) -> List[str]:
    return [n for label in layout.siding_lengths for n in layout.siding_nodes(label)]


def build_scenario(layout: Layout, n_cars: int, goals_per_car: int) -> Dict:
    nodes = siding_nodes(layout)
    if n_cars > len(nodes):
        raise SystemExit(f"{n_cars} cars do not fit on {len(nodes)} siding nodes")
    starts = random.sample(nodes, n_cars)
    cars = {f"C{i+1}": node for i, node in enumerate(starts)}
    goals = {car: sorted(random.sample(nodes, goals_per_car)) for car in cars}
    return {
        "name": f"random-{n_cars}",
        "sidings": layout.siding_lengths,
        "loco": "M1",
        "cars": cars,
        "goals": goals,
    }


def main():
    p = argparse.ArgumentParser()
    p.add_argument('-Sidings', type=str, default='A=2,B=3,C=1,D=2,E=1')
    p.add_argument('-Cars', type=int, default=4)
    p.add_argument('-GoalsPerCar', type=int, default=1)
    p.add_argument('-Seed', type=int, default=42)
    p.add_argument('-Out', type=str, default='random_scenario.json')
    a = p.parse_args()

    random.seed(a.Seed)
    layout = build_layout(parse_sidings(a.Sidings))
    scenario = build_scenario(layout, a.Cars, a.GoalsPerCar)
    with open(a.Out, 'w') as f:
        json.dump(scenario, f, indent=2)
    print(f"Wrote {len(scenario['cars'])} cars on {len(layout)} nodes -> {a.Out}")


if __name__ == '__main__':
    main()
