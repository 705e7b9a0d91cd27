from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel

from timesaver.config import SolverConfig
from timesaver.core.distances import DistanceTable, reachability_report
from timesaver.core.errors import ConfigurationError
from timesaver.core.layout import M1, build_layout, path_moves, shortest_path
from timesaver.core.routes import parse_route_input
from timesaver.core.validate import raise_on_errors, validate_goals, validate_placement
from timesaver.logging_config import get_logger
from timesaver.sim.report import reachability_json

logger = get_logger(__name__)

cfg = SolverConfig()
# Topology is fixed for the lifetime of the app and shared read-only
layout = build_layout(cfg.siding_lengths)
distances = DistanceTable(layout)

app = FastAPI(title="Timesaver Layout API")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


class RouteRequest(BaseModel):
    input: str | None = None


class ReachabilityRequest(BaseModel):
    cars: Dict[str, str]
    goals: Dict[str, List[str]]


def _issues_detail(e: ConfigurationError) -> List[Dict[str, Any]]:
    return [{"level": it.level, "message": it.message, "hint": it.hint} for it in e.issues]


@app.get("/")
async def root() -> RedirectResponse:
    # Redirect base URL to interactive docs to avoid 404 confusion
    return RedirectResponse(url="/docs")


@app.get("/favicon.ico")
async def favicon() -> Response:
    return Response(status_code=204)


@app.get("/stops")
async def stops() -> Dict[str, Any]:
    # coupling stations = nodes directly connected to MAIN; endstations = degree 1
    return {"endstations": layout.endstations(), "couplingStations": layout.coupling_stations()}


@app.get("/layout")
async def layout_topology() -> Dict[str, Any]:
    return {
        "sidings": layout.siding_lengths,
        "nodes": layout.nodes,
        "adjacency": {node: list(nbrs) for node, nbrs in layout.adjacency.items()},
    }


@app.post("/route")
async def route(req: RouteRequest) -> Dict[str, Any]:
    """Loco-only shortest path from M1 to the destination named in free-text input."""
    selection = parse_route_input(req.input, layout)
    dest = selection.destination
    if dest is None:
        return {"error": "No destination found", "path": [], "moves": []}
    path = shortest_path(layout, M1, dest)
    if not path:
        return {"error": f"No path {M1} -> {dest}", "path": [], "moves": []}
    logger.debug("Route resolved", extra={"input": req.input, "destination": dest, "hops": len(path) - 1})
    return {"path": path, "moves": path_moves(path)}


@app.post("/reachability")
async def reachability(req: ReachabilityRequest) -> Dict[str, Any]:
    goals = {car: frozenset(nodes) for car, nodes in req.goals.items()}
    try:
        raise_on_errors(validate_goals(layout, goals) + validate_placement(layout, req.cars))
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=_issues_detail(e)) from e
    return {"items": reachability_json(reachability_report(distances, req.cars, goals))}
