#!/usr/bin/env python3
"""iComfort - the canonical status of a zone, whatever the telemetry source."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime as dt

from . import exceptions as exc
from .const import FanMode, RunningState, SystemMode, UnitSystem
from .helpers import dt_now


@dataclass(frozen=True)
class ZoneStatus:
    """An immutable snapshot of a zone.

    Temperatures are all in the snapshot's unit system.
    """

    zone_id: int
    temperature: float | None
    heat_setpoint: float | None
    cool_setpoint: float | None
    system_mode: SystemMode
    running_state: RunningState
    humidity: float | None
    unit: UnitSystem
    fan_mode: FanMode | None = None  # None if the system has no fan control
    start_time: int | None = None  # of the active period, as secs since midnight
    schedule_id: int | None = None
    timestamp: dt = field(default_factory=dt_now)

    def __post_init__(self) -> None:
        if self.zone_id < 0:
            raise exc.TelemetryInvalid(f"Invalid zone id: {self.zone_id}")

        if (
            self.system_mode == SystemMode.HEAT_COOL
            and self.heat_setpoint is not None
            and self.cool_setpoint is not None
            and self.heat_setpoint > self.cool_setpoint
        ):
            raise exc.TelemetryInvalid(
                f"Zone {self.zone_id}: heat setpoint ({self.heat_setpoint}) is above"
                f" the cool setpoint ({self.cool_setpoint})"
            )

    @property
    def target_temp(self) -> float | None:
        """Return the single target temperature implied by the mode & setpoints."""

        if self.system_mode == SystemMode.HEAT:
            return self.heat_setpoint
        if self.system_mode == SystemMode.COOL:
            return self.cool_setpoint
        if self.system_mode == SystemMode.HEAT_COOL:
            if self.heat_setpoint is None or self.cool_setpoint is None:
                return None
            return (self.heat_setpoint + self.cool_setpoint) / 2
        return self.temperature
