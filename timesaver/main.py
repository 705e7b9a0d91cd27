import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from timesaver.config import SolverConfig
from timesaver.core.errors import ConfigurationError
from timesaver.core.solver import ProgressObserver, SearchProgress
from timesaver.logging_config import StructuredLogger, get_logger, setup_logging
from timesaver.sim.report import format_plan, format_reachability, reachability_json
from timesaver.sim.scenario import DATA_DIR, load_scenario, plan_json, run_scenario, with_route_text
from timesaver.sim.simulator import summarize_plan

logger = get_logger("timesaver.main")


def log_progress(log: StructuredLogger) -> ProgressObserver:
    def observe(p: SearchProgress) -> None:
        log.info(f"Step {p.steps:,}", extra={"frontier": p.frontier_size, "g": p.g, "h": p.h})
    return observe


def report_configuration_error(err: ConfigurationError) -> None:
    print("Configuration invalid:", file=sys.stderr)
    for it in err.issues:
        line = f"  {it.level}: {it.message}"
        if it.hint:
            line += f" ({it.hint})"
        print(line, file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    cfg = SolverConfig()
    p = argparse.ArgumentParser(description="Plan loco moves for a siding puzzle.")
    p.add_argument("--scenario", type=Path, default=DATA_DIR / "scenario_a.json")
    p.add_argument("--budget", type=int, default=cfg.step_budget)
    p.add_argument("--route", type=str, default=None,
                   help='restrict loco moves to these nodes or sidings, e.g. "M1 MAIN A B"')
    p.add_argument("--json", action="store_true", help="print the plan as JSON")
    a = p.parse_args(argv)

    setup_logging(cfg.log_level, Path(cfg.log_file) if cfg.log_file else None)

    try:
        scenario = load_scenario(a.scenario)
        if a.route is not None:
            scenario = with_route_text(scenario, a.route)
        out = run_scenario(
            scenario,
            budget=a.budget,
            progress=log_progress(logger),
            progress_every=cfg.progress_every,
            deadline_s=cfg.deadline_s,
        )
    except ConfigurationError as err:
        logger.error("Scenario rejected", extra={"scenario": str(a.scenario), "issues": len(err.issues)})
        report_configuration_error(err)
        return 2
    result = out["result"]

    if a.json:
        print(json.dumps({
            "scenario": scenario.name,
            "status": result.status.value,
            "steps": result.steps,
            "route": scenario.route,
            "reachability": reachability_json(out["reachability"]),
            "kpis": summarize_plan(result.plan),
            "plan": plan_json(result.plan),
        }, indent=2))
        return 0

    print(format_reachability(out["reachability"]))
    print()
    print(format_plan(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
