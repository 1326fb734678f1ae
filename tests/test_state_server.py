"""Tests for the sim-state server and a client following it."""

import pytest

from generic_http_client import GenericHttpClient
from state_server import DEFAULT_ADDRESS, StateServer, parse_address
from telemetry_schema import BasicTelemetry, SimState
from telemetry_source import SessionEnded


def test_parse_address() -> None:
    assert parse_address(DEFAULT_ADDRESS) == ("0.0.0.0", 25055)
    assert parse_address("[::]:8080") == ("::", 8080)


@pytest.mark.parametrize("address", ["localhost", ":25055", "localhost:port"])
def test_parse_address_rejects_malformed(address) -> None:
    with pytest.raises(ValueError):
        parse_address(address)


def test_default_state_is_empty() -> None:
    assert StateServer().state == SimState()


@pytest.mark.asyncio
async def test_client_follows_server_updates(state_server) -> None:
    async with await GenericHttpClient.connect(state_server.uri) as client:
        assert client.name == "RaceA"

        state_server.update(SimState(name="RaceA", ignition_on=True,
                                     basic_telemetry=BasicTelemetry(gear=2, speed=20.0)))
        moment = await client.next_moment()
        assert moment.ignition_on is True
        assert moment.basic_telemetry.gear == 2

        state_server.update(SimState(name="RaceB"))
        assert await client.next_moment() == SessionEnded("name_changed", name="RaceB")
    assert state_server.requests == 3
