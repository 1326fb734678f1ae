# telemetry_source.py
"""Contracts shared by every telemetry backend.

A backend is anything that can name its session and hand out moments until
that session is over. The HTTP client in ``generic_http_client.py`` is one of them.
"""
from dataclasses import dataclass
from typing import Optional, Protocol, Union, runtime_checkable

from telemetry_schema import BasicTelemetry, RacingFlags


@runtime_checkable
class Moment(Protocol):
    """One telemetry state at a point in time.

    Implementations may expose these as plain attributes (``SimState`` does,
    through its fields) or as properties.
    """

    @property
    def vehicle_left(self) -> bool: ...

    @property
    def vehicle_right(self) -> bool: ...

    @property
    def basic_telemetry(self) -> Optional[BasicTelemetry]: ...

    @property
    def shift_point(self) -> Optional[float]: ...

    @property
    def flags(self) -> RacingFlags: ...

    @property
    def vehicle_unique_id(self) -> Optional[str]: ...

    @property
    def ignition_on(self) -> bool: ...

    @property
    def starter_on(self) -> bool: ...


@dataclass(frozen=True)
class SessionEnded:
    """Terminal outcome of a poll: the session being followed is over.

    ``reason`` is one of ``timeout``, ``transport``, ``decode`` or
    ``name_changed``; for the last one ``name`` carries the new session name.
    Always falsy, so ``while moment := await source.next_moment()`` stops.
    """
    reason: str
    name: Optional[str] = None

    def __bool__(self) -> bool:
        return False


PollResult = Union[Moment, SessionEnded]


@runtime_checkable
class Simetry(Protocol):
    """A telemetry source bound to one simulation session."""

    @property
    def name(self) -> str: ...

    async def next_moment(self) -> PollResult: ...
