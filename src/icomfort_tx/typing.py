#!/usr/bin/env python3
"""iComfort - Typing for CommandDispatcher & the transports."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol, TypedDict

from .const import DEFAULT_START_TIME, PRIMARY_ZONE_ID, FanMode, SystemMode

if TYPE_CHECKING:
    from .command import Command


class PublishResponseT(TypedDict):
    """The protocol's response to a published command (code 1 is accepted)."""

    code: int
    message: str
    retry_after: int | float | None


class SetpointRequest(NamedTuple):
    """A logical setpoint update, as requested of a zone.

    Two requests are identical if all of their (canonical) values are equal.
    """

    system_mode: SystemMode
    heat_setpoint: float
    cool_setpoint: float
    fan_mode: FanMode


@dataclass
class ZoneSession:
    """A container for the per-zone session state.

    Mutated only when telemetry is resolved for the zone, and by the dispatcher
    while it holds the zone's lock.
    """

    zone_id: int = PRIMARY_ZONE_ID
    schedule_id: int | None = None  # last known
    start_time: int | None = None  # of the active period, last observed

    pending_request: SetpointRequest | None = None  # in flight
    applied_request: SetpointRequest | None = None  # since the last status

    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def start_time_or_default(self) -> int:
        return DEFAULT_START_TIME if self.start_time is None else self.start_time


class TransportT(Protocol):
    """A typing.Protocol (i.e. a structural type) of the transports."""

    async def publish(self, cmd: Command) -> PublishResponseT:
        """Publish a command and return the protocol's response.

        Raises TransportClientError (4xx), or TransportError (anything transient).
        """
        ...

    async def fetch_telemetry(self) -> Any:
        """Return the system's raw telemetry (of any shape)."""
        ...

    async def close(self) -> None: ...
