#!/usr/bin/env python3
"""iComfort - the HTTP transport (to the vendor's cloud endpoints).

The transport publishes commands, and fetches the telemetry of a system. It does
not retry (that is the dispatcher's job), but classifies its failures:
  - TransportClientError: the request was rejected (HTTP 4xx), don't retry
  - TransportError: anything transient (network errors, timeouts, HTTP 5xx)
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Final

import aiohttp

from . import exceptions as exc
from .const import DEFAULT_REQUEST_TIMEOUT, SZ_EXT_ID
from .version import VERSION

if TYPE_CHECKING:
    from .command import Command
    from .typing import PublishResponseT


_LOGGER = logging.getLogger(__name__)


PUBLISH_URL: Final = "https://publishapimobile.prod4.myicomfort.com/v1/messages/publish"
SYSTEMS_URL: Final = "https://plantdevices.myicomfort.com/systems/"

_APP_VERSION: Final = "4.38.0022"

DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "*/*",
    "Accept-Language": "en-US;q=1",
    "App-Gen-Supported": "u-app",
    "App-Os": "python",
    "App-Version": _APP_VERSION,
    "Content-Type": "application/json",
    "Device": "mobile",
    "Request-Channel": "mobileapp",
    "User-Agent": f"lx_ic3_mobile_appstore/{_APP_VERSION} (icomfort/{VERSION})",
}


class HttpTransport:
    """An aiohttp client of the cloud's publish & systems endpoints."""

    def __init__(
        self,
        token: str,
        system_id: str,
        *,
        session: aiohttp.ClientSession | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        publish_url: str = PUBLISH_URL,
        systems_url: str = SYSTEMS_URL,
    ) -> None:
        """Create an HttpTransport instance (using an already-issued bearer token)."""

        self.system_id = system_id

        self._token = token
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=request_timeout)

        self._publish_url = publish_url
        self._systems_url = systems_url

    def __repr__(self) -> str:
        return f"HttpTransport(system_id={self.system_id})"

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session, if it was created by this transport."""

        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"bearer {self._token}"}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Make an authenticated request, and return its (JSON) response."""

        session = self._ensure_session()
        headers = DEFAULT_HEADERS | self._auth_headers | (headers or {})

        try:
            async with session.request(
                method, url, headers=headers, timeout=self._timeout, **kwargs
            ) as resp:
                if 400 <= resp.status < 500:
                    text = await resp.text()
                    raise exc.TransportClientError(
                        f"{method} {url} failed ({resp.status}): {text}",
                        status=resp.status,
                    )
                if resp.status >= 500:
                    text = await resp.text()
                    raise exc.TransportError(
                        f"{method} {url} failed ({resp.status}): {text}",
                        status=resp.status,
                    )
                return await resp.json(content_type=None)

        except (aiohttp.ClientError, ValueError) as err:
            raise exc.TransportError(f"{method} {url} failed: {err}") from err
        except TimeoutError as err:
            raise exc.TransportError(f"{method} {url} timed out") from err

    async def publish(self, cmd: Command) -> PublishResponseT:
        """Publish a command (once) and return the protocol's response."""

        _LOGGER.debug("Publishing: %s", cmd)
        result: PublishResponseT = await self._request(
            "POST", self._publish_url, json=cmd.to_dict()
        )
        return result

    async def get_systems(self) -> list[dict[str, Any]]:
        """Return all the systems of the account."""

        session_id = str(int(time.time()))
        headers = {
            "Accept-Language": "en-US,en;q=0.9",
            "App-Build": f"{_APP_VERSION}_PROD",
            "SessionID": session_id,
        }

        result = await self._request("GET", self._systems_url, headers=headers)
        if not isinstance(result, list):
            raise exc.TransportError(f"Invalid systems list: {result!r}")
        return result

    async def fetch_telemetry(self) -> dict[str, Any]:
        """Return the (raw) telemetry of the configured system."""

        for system in await self.get_systems():
            if isinstance(system, dict) and system.get(SZ_EXT_ID) == self.system_id:
                return system

        raise exc.TransportClientError(
            f"System {self.system_id} is not in the account's systems list"
        )
