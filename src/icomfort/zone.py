#!/usr/bin/env python3
"""iComfort - a zone (and its setpoints)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from icomfort_tx import SetpointRequest, ZoneSession
from icomfort_tx.const import PRIMARY_ZONE_ID, FanMode, SystemMode
from icomfort_tx.helpers import to_float

from . import exceptions as exc
from .schedule import ScheduleMode, ScheduleModeClassifier
from .setpoint import split_target_temp

if TYPE_CHECKING:
    from icomfort_tx import ZoneStatus

    from .gateway import Gateway


_LOGGER = logging.getLogger(__name__)


class Zone:
    """The Zone class.

    A zone's status is replaced whenever telemetry is resolved for it. Its setpoints
    are changed via the gateway's dispatcher, one update at a time.
    """

    def __init__(self, gwy: Gateway, zone_id: int) -> None:
        _LOGGER.debug("Creating a Zone: %s", zone_id)

        self._gwy = gwy
        self.id = zone_id

        self._session = ZoneSession(zone_id)
        self._status: ZoneStatus | None = None

    def __repr__(self) -> str:
        return f"Zone(id={self.id}, status={self._status})"

    def __str__(self) -> str:
        return f"{self._gwy.system_id}_{self.id:02d}"

    @property
    def is_primary(self) -> bool:
        return self.id == PRIMARY_ZONE_ID

    @property
    def session(self) -> ZoneSession:
        return self._session

    @property
    def status(self) -> ZoneStatus | None:
        """Return the most recent status of the zone (None if there is none)."""
        return self._status

    @property
    def schedule_mode(self) -> ScheduleMode:
        return ScheduleModeClassifier.classify(self.id, self._session.schedule_id)

    def _handle_status(self, status: ZoneStatus) -> None:
        """Process a (fresh) status of the zone."""

        self._status = status

        if status.schedule_id is not None:
            self._session.schedule_id = status.schedule_id
        if status.start_time is not None:
            self._session.start_time = status.start_time
        self._session.applied_request = None  # any applied update is now stale

    def _require_status(self) -> ZoneStatus:
        if self._status is None:
            raise exc.ZoneNotFound(f"Zone {self}: has no status")
        return self._status

    async def _update(self, request: SetpointRequest) -> bool:
        """Apply a setpoint request to the zone, and return True if commands were sent.

        An identical request that was in flight (and has been applied) is a no-op.
        """

        status = self._require_status()
        dispatcher = self._gwy._dispatcher

        async with dispatcher.zone_lock(self._session, request) as is_needed:
            if not is_needed:
                return False

            cmds = self._gwy._builder.build(
                self.id,
                heat_setpoint=request.heat_setpoint,
                cool_setpoint=request.cool_setpoint,
                system_mode=request.system_mode,
                unit=status.unit,
                schedule_id=self._session.schedule_id,
                fan_mode=request.fan_mode,
                start_time=self._session.start_time,
            )
            await dispatcher.send_setpoint_cmds(
                self._session, cmds.schedule_cmd, cmds.hold_cmd, request
            )

        return True

    async def set_setpoints(
        self,
        *,
        heat: Any = None,
        cool: Any = None,
        mode: SystemMode | str | None = None,
        fan_mode: FanMode | str | None = None,
    ) -> bool:
        """Set the zone's setpoints (in its unit), mode and/or fan mode.

        Anything not specified is unchanged (as per the zone's status).
        """

        status = self._require_status()

        heat = status.heat_setpoint if heat is None else heat
        cool = status.cool_setpoint if cool is None else cool
        heat_setpoint, cool_setpoint = to_float(heat), to_float(cool)

        if heat_setpoint is None or cool_setpoint is None:
            raise exc.CommandInvalid(
                f"Zone {self}: setpoints must be numbers: heat={heat!r}, cool={cool!r}"
            )

        try:
            request = SetpointRequest(
                SystemMode(mode or status.system_mode),
                heat_setpoint,
                cool_setpoint,
                FanMode(fan_mode or status.fan_mode or FanMode.AUTO),
            )
        except ValueError as err:
            raise exc.CommandInvalid(f"Zone {self}: {err}") from err

        return await self._update(request)

    async def set_target_temp(self, temp: Any) -> bool:
        """Set the zone's target temperature, as appropriate to its current mode."""

        status = self._require_status()

        if (target := to_float(temp)) is None:
            raise exc.CommandInvalid(f"Zone {self}: target must be a number: {temp!r}")

        if status.system_mode == SystemMode.HEAT:
            return await self.set_setpoints(heat=target)
        if status.system_mode == SystemMode.COOL:
            return await self.set_setpoints(cool=target)
        if status.system_mode == SystemMode.HEAT_COOL:
            heat, cool = split_target_temp(target, status.unit)
            return await self.set_setpoints(heat=heat, cool=cool)

        raise exc.CommandInvalid(f"Zone {self}: can't set a target temp when off")

    async def set_mode(self, mode: SystemMode | str) -> bool:
        return await self.set_setpoints(mode=mode)

    async def set_fan_mode(self, fan_mode: FanMode | str) -> bool:
        return await self.set_setpoints(fan_mode=fan_mode)
