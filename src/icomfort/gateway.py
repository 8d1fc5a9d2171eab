#!/usr/bin/env python3
"""iComfort - the gateway (a system, its zones, and its transport)."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from icomfort_tx import CommandDispatcher, parse_telemetry
from icomfort_tx.const import PRIMARY_ZONE_ID
from icomfort_tx.schemas import SCH_GATEWAY_CONFIG, dispatcher_kwargs

from . import exceptions as exc
from .setpoint import SetpointCommandBuilder
from .zone import Zone

if TYPE_CHECKING:
    from icomfort_tx import TransportT, ZoneStatus


_LOGGER = logging.getLogger(__name__)


def sender_id_factory(username: str | None = None) -> str:
    """Return a sender id, as used by the vendor's app: mapp<epoch_ms>_<username>."""
    return f"mapp{int(time.time() * 1000)}_{username or 'user'}"


class Gateway:
    """The gateway class.

    Owns the transport (and the dispatcher that uses it), and the zones of a single
    system. Telemetry may be polled (via update/start) or pushed (via handle_telemetry).
    """

    def __init__(
        self,
        transport: TransportT,
        system_id: str,
        config: dict[str, Any] | None = None,
        *,
        debug_mode: bool = False,
    ) -> None:
        if debug_mode:
            _LOGGER.setLevel(logging.DEBUG)

        self.config = SimpleNamespace(**SCH_GATEWAY_CONFIG(config or {}))

        self.system_id = system_id
        self.sender_id = sender_id_factory(self.config.username)  # stable per session

        self._transport = transport
        self._dispatcher = CommandDispatcher(
            transport, **dispatcher_kwargs(vars(self.config))
        )
        self._builder = SetpointCommandBuilder(
            self.sender_id,
            system_id,
            hold_expiration=self.config.hold_expiration,
            hold_duration=self.config.hold_duration,
            default_start_time=self.config.default_start_time,
        )

        self.zones: dict[int, Zone] = {}
        self._poller: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"Gateway(system_id={self.system_id}, transport={self._transport!r})"

    @property
    def zone(self) -> Zone | None:
        """Return the primary zone (the only one whose setpoints are changed)."""
        return self.zones.get(PRIMARY_ZONE_ID)

    def get_zone(self, zone_id: int = PRIMARY_ZONE_ID) -> Zone:
        """Return a zone, or raise ZoneNotFound if no telemetry has been seen for it."""

        if (zone := self.zones.get(zone_id)) is None:
            raise exc.ZoneNotFound(f"{self}: zone {zone_id} has no telemetry (yet)")
        return zone

    def _handle_status(self, status: ZoneStatus) -> None:
        if (zone := self.zones.get(status.zone_id)) is None:
            zone = self.zones[status.zone_id] = Zone(self, status.zone_id)
        zone._handle_status(status)

    def handle_telemetry(self, payload: Any) -> list[ZoneStatus]:
        """Process a (raw) telemetry payload, of any shape, e.g. one that was pushed."""

        statuses = parse_telemetry(payload, self.config.temperature_unit)
        for status in statuses:
            self._handle_status(status)
        return statuses

    async def update(self) -> list[ZoneStatus]:
        """Fetch the system's telemetry, and update the status of its zones."""

        payload = await self._transport.fetch_telemetry()
        return self.handle_telemetry(payload)

    async def _poll_telemetry(self) -> None:
        while True:
            await asyncio.sleep(self.config.poll_interval)
            try:
                await self.update()
            except exc.IComfortException as err:
                _LOGGER.warning("%s: Failed to update, will retry: %s", self, err)

    async def start(self, /, *, start_polling: bool = True) -> None:
        """Start the Gateway: get the initial telemetry and (maybe) start polling."""

        await self.update()

        if start_polling and self._poller is None:
            self._poller = asyncio.create_task(self._poll_telemetry())

    async def stop(self) -> None:
        """Stop the Gateway and tidy up."""

        try:
            if self._poller:
                self._poller.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._poller
        finally:
            self._poller = None
            await self._transport.close()
