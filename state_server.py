# state_server.py
# Minimal sim-state server (aiohttp): answers GET / with the current state as JSON.
# Simulator plugins call update() whenever they have a new state.
import logging
from typing import Optional, Tuple

from aiohttp import web

from telemetry_schema import SimState

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "0.0.0.0:25055"


def parse_address(address: str) -> Tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"address must look like host:port, got {address!r}")
    return host.strip("[]"), int(port)


class StateServer:
    def __init__(self, state: Optional[SimState] = None):
        self.state = state or SimState()
        self.requests = 0

    def update(self, state: SimState):
        if state.name != self.state.name:
            logger.info(f"StateServer: session {self.state.name!r} -> {state.name!r}")
        self.state = state

    async def index(self, request):
        self.requests += 1
        return web.json_response(self.state.model_dump(mode="json"))

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self.index)
        return app


def run(address: str = DEFAULT_ADDRESS, state: Optional[SimState] = None):
    host, port = parse_address(address)
    web.run_app(StateServer(state).make_app(), host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run()
