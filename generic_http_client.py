# generic_http_client.py
"""
Polling client for a generic HTTP sim-state endpoint.

The endpoint answers a plain GET with the current simulation state as a JSON
object. A client is bound to the session name seen on its first successful
request; a later poll that times out, fails, or reports another name ends
that session for good. Build a new client to follow the next one.
"""

import asyncio
import logging
from typing import Optional

import aiohttp
from pydantic import ValidationError
from yarl import URL

from telemetry_schema import SimState
from telemetry_source import PollResult, SessionEnded

logger = logging.getLogger(__name__)

DEFAULT_URI = "http://localhost:25055/"
RETRY_DELAY = 1.5  # seconds between connect attempts
POLL_TIMEOUT = 2.0  # seconds a single poll may take


class TelemetryClientError(Exception):
    """Base class for failures surfaced by GenericHttpClient."""


class InvalidAddress(TelemetryClientError, ValueError):
    pass


class TransportFailure(TelemetryClientError):
    pass


class DecodeFailure(TelemetryClientError):
    pass


def parse_uri(uri) -> URL:
    """Parse an endpoint into an absolute http(s) URL or raise InvalidAddress."""
    try:
        url = URL(uri)
    except (TypeError, ValueError) as exc:
        raise InvalidAddress(f"invalid endpoint {uri!r}: {exc}") from exc
    if not url.is_absolute() or url.scheme not in ("http", "https") or not url.host:
        raise InvalidAddress(f"invalid endpoint {uri!r}: expected an absolute http(s) URI")
    try:
        url.raw_host.encode("idna")
    except UnicodeError as exc:
        raise InvalidAddress(f"invalid endpoint {uri!r}: bad host: {exc}") from exc
    return url


class GenericHttpClient:
    poll_timeout: float = POLL_TIMEOUT

    def __init__(self, uri: URL, session: aiohttp.ClientSession, owns_session: bool = True):
        self._uri = uri
        self._session = session
        self._owns_session = owns_session
        self._name = ""
        self._ended: Optional[SessionEnded] = None

    def __repr__(self):
        return f"GenericHttpClient(uri={str(self._uri)!r}, name={self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def uri(self) -> URL:
        return self._uri

    @property
    def ended(self) -> Optional[SessionEnded]:
        return self._ended

    # ----------------------------- CONNECT -----------------------------

    @classmethod
    async def connect(cls, uri, retry_delay: float = RETRY_DELAY, *,
                      session: Optional[aiohttp.ClientSession] = None) -> "GenericHttpClient":
        """
        Wait until the endpoint answers with a decodable state and return a
        client bound to that session. Retries forever, sleeping retry_delay
        between attempts; cancel the awaiting task to give up.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await cls.try_connect(uri, session=session)
            except TelemetryClientError as exc:
                logger.warning(f"GenericHttpClient: connect to {uri} failed (attempt {attempt}): {exc}")
            await asyncio.sleep(retry_delay)

    @classmethod
    async def try_connect(cls, uri, *,
                          session: Optional[aiohttp.ClientSession] = None) -> "GenericHttpClient":
        """Single connect attempt: parse the URI, fetch the state once, remember its name."""
        url = parse_uri(uri)
        owns_session = session is None
        if owns_session:
            session = aiohttp.ClientSession()
        client = cls(url, session, owns_session=owns_session)
        try:
            state = await client.query()
        except BaseException:
            # includes cancellation; never leave the session open behind us
            await client.close()
            raise
        client._name = state.name
        logger.info(f"GenericHttpClient: connected to {url} (session {state.name!r})")
        return client

    async def close(self):
        if self._owns_session and not self._session.closed:
            await self._session.close()
            logger.info("GenericHttpClient: closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ----------------------------- POLLING -----------------------------

    async def query(self) -> SimState:
        """One GET against the endpoint, decoded. Not deadline-bound."""
        try:
            async with self._session.get(self._uri) as response:
                status = response.status
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as exc:
            raise TransportFailure(f"GET {self._uri} failed: {exc}") from exc

        if not 200 <= status < 300:
            raise DecodeFailure(f"GET {self._uri} answered HTTP {status}")
        try:
            return SimState.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeFailure(f"GET {self._uri} returned an unusable state: {exc}") from exc

    async def next_moment(self) -> PollResult:
        """
        Poll once. Returns a fresh SimState while the session lasts, otherwise
        a SessionEnded. Timeouts, transport and decode failures all end the
        session; so does a state reporting a different session name.
        """
        if self._ended is not None:
            return self._ended

        try:
            state = await asyncio.wait_for(self.query(), timeout=self.poll_timeout)
        except asyncio.TimeoutError:
            return self._end(SessionEnded("timeout"))
        except TransportFailure as exc:
            logger.debug(f"GenericHttpClient: {exc}")
            return self._end(SessionEnded("transport"))
        except DecodeFailure as exc:
            logger.debug(f"GenericHttpClient: {exc}")
            return self._end(SessionEnded("decode"))

        if state.name != self._name:
            return self._end(SessionEnded("name_changed", name=state.name))
        logger.debug(f"GenericHttpClient: polled session {state.name!r}")
        return state

    next_snapshot = next_moment

    async def moments(self, interval: float = 0.0):
        """Yield moments until the session ends, sleeping interval seconds between polls."""
        while True:
            moment = await self.next_moment()
            if not moment:
                return
            yield moment
            if interval > 0:
                await asyncio.sleep(interval)

    def _end(self, outcome: SessionEnded) -> SessionEnded:
        self._ended = outcome
        if outcome.reason == "name_changed":
            logger.info(f"GenericHttpClient: session {self._name!r} replaced by {outcome.name!r}")
        else:
            logger.info(f"GenericHttpClient: session {self._name!r} ended ({outcome.reason})")
        return outcome
