import httpx
import pytest
from httpx import ASGITransport

from timesaver.api import app


@pytest.mark.asyncio
async def test_stops_endpoint():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.get("/stops")
        assert r.status_code == 200
        data = r.json()
        assert data["endstations"] == ["A0", "B0", "C0", "D0", "E0", "M1", "M2"]
        assert data["couplingStations"] == ["A1", "B2", "C0", "D1", "E0", "M1", "M2"]


@pytest.mark.asyncio
async def test_layout_endpoint_is_symmetric():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.get("/layout")
        assert r.status_code == 200
        adj = r.json()["adjacency"]
        assert len(adj["MAIN"]) == len(r.json()["sidings"]) + 2
        for u, nbrs in adj.items():
            for v in nbrs:
                assert u in adj[v]


@pytest.mark.asyncio
async def test_route_endpoint():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/route", json={"input": "M1 MAIN A"})
        assert r.status_code == 200
        data = r.json()
        assert data["path"] == ["M1", "MAIN", "A1"]
        assert data["moves"] == ["M1->MAIN", "MAIN->A1"]

        r = await client.post("/route", json={"input": "nowhere"})
        assert r.status_code == 200
        assert r.json() == {"error": "No destination found", "path": [], "moves": []}


@pytest.mark.asyncio
async def test_reachability_endpoint():
    transport = ASGITransport(app=app)
    payload = {"cars": {"C1": "A0", "C2": "B1"}, "goals": {"C1": ["E0"], "C2": ["C0", "B0"]}}
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.post("/reachability", json=payload)
        assert r.status_code == 200
        items = r.json()["items"]
        assert items[0] == {"car": "C1", "start": "A0", "goals": {"E0": 3}, "min": 3}
        assert items[1]["min"] == 1

        r = await client.post("/reachability", json={"cars": {"C1": "A0"}, "goals": {"C1": ["Z9"]}})
        assert r.status_code == 422
        assert any("Z9" in it["message"] for it in r.json()["detail"])


@pytest.mark.asyncio
async def test_root_redirects_to_docs():
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        r = await client.get("/")
        assert r.status_code in (302, 307)
        assert r.headers["location"] == "/docs"
        r = await client.get("/favicon.ico")
        assert r.status_code == 204
