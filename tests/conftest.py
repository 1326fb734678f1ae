import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from state_server import StateServer
from telemetry_schema import SimState

RETRY_DELAY = 0.0137


class ScriptedEndpoint:
    """Sim-state endpoint whose next answers can be scripted per request.

    Each scripted step is a dict: {"status": int, "body": str} for a raw reply,
    {"delay": float} to stall before answering with the current state, or
    {"state": {...}} to answer with that payload once.
    """

    def __init__(self, state=None):
        self.state = state if state is not None else {"name": "RaceA"}
        self.script = []
        self.requests = 0

    async def index(self, request):
        self.requests += 1
        step = self.script.pop(0) if self.script else {}
        if "delay" in step:
            await asyncio.sleep(step["delay"])
        if "body" in step:
            return web.Response(status=step.get("status", 200), text=step["body"],
                                content_type="application/json")
        return web.json_response(step.get("state", self.state))

    def make_app(self):
        app = web.Application()
        app.router.add_get("/", self.index)
        return app


@pytest_asyncio.fixture
async def endpoint():
    sim = ScriptedEndpoint()
    server = TestServer(sim.make_app())
    await server.start_server()
    sim.uri = str(server.make_url("/"))
    yield sim
    await server.close()


@pytest_asyncio.fixture
async def state_server():
    srv = StateServer(SimState(name="RaceA"))
    server = TestServer(srv.make_app())
    await server.start_server()
    srv.uri = str(server.make_url("/"))
    yield srv
    await server.close()


@pytest.fixture
def retry_sleeps(monkeypatch):
    """Record every asyncio.sleep issued with the retry delay used in tests."""
    real_sleep = asyncio.sleep
    recorded = []

    async def recording_sleep(delay, *args, **kwargs):
        if delay == RETRY_DELAY:
            recorded.append(delay)
        return await real_sleep(delay, *args, **kwargs)

    monkeypatch.setattr(asyncio, "sleep", recording_sleep)
    return recorded


@pytest.fixture
def retry_delay():
    return RETRY_DELAY
