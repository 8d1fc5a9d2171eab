#!/usr/bin/env python3
"""iComfort - build the commands that apply a setpoint change to a zone.

A setpoint change is a two-phase affair:
  1. replace the (only) period of the schedule the zone is to follow
  2. hold the zone to that schedule, if it isn't already (i.e. create an override)

The protocol always carries both Fahrenheit (whole degrees) and Celsius (to 0.1)
representations of each setpoint, regardless of the system's unit.
"""

from __future__ import annotations

import logging
import time
from typing import Any, NamedTuple

from icomfort_tx import Command
from icomfort_tx.const import (
    DEADBAND_C,
    DEADBAND_F,
    DEFAULT_DEHUMIDIFY_SETPOINT,
    DEFAULT_HOLD_DURATION,
    DEFAULT_HUMIDITY_SETPOINT,
    DEFAULT_START_TIME,
    ExpirationMode,
    FanMode,
    HumidityMode,
    SystemMode,
    UnitSystem,
)
from icomfort_tx.helpers import c_to_f, f_to_c, round_half_up, to_float

from . import exceptions as exc
from .schedule import ScheduleMode, ScheduleModeClassifier

_LOGGER = logging.getLogger(__name__)


class SetpointCommands(NamedTuple):
    schedule_cmd: Command
    hold_cmd: Command | None  # None if the zone is already in manual/override
    schedule_id: int  # the target schedule
    mode: ScheduleMode  # the zone's mode before the change


def split_target_temp(temp: float, unit: UnitSystem) -> tuple[float, float]:
    """Split a single target temp into heat/cool setpoints, centred on the target.

    The setpoints are a fixed deadband apart: 3 F, or 1.5 C.
    """

    deadband = DEADBAND_C if unit == UnitSystem.CELSIUS else DEADBAND_F
    return temp - deadband / 2, temp + deadband / 2


def _as_f(value: float, unit: UnitSystem) -> float:
    return value if unit == UnitSystem.FAHRENHEIT else c_to_f(value)


def _as_c(value: float, unit: UnitSystem) -> float:
    return value if unit == UnitSystem.CELSIUS else f_to_c(value)


class SetpointCommandBuilder:
    """Build the schedule (and maybe hold) commands for a zone's setpoint change."""

    def __init__(
        self,
        sender_id: str,
        target_id: str,
        *,
        hold_expiration: ExpirationMode | str = ExpirationMode.NEXT_PERIOD,
        hold_duration: int = DEFAULT_HOLD_DURATION,
        default_start_time: int = DEFAULT_START_TIME,
    ) -> None:
        self.sender_id = sender_id
        self.target_id = target_id

        self.hold_expiration = ExpirationMode(hold_expiration)
        self.hold_duration = hold_duration  # hours
        self.default_start_time = default_start_time

    def _expires_on(self) -> str:
        """Return the hold's expiry, as epoch seconds ("0" if it is not timed).

        The vendor's app has been seen to use both a 24h timed hold, and a hold
        until the next period: the latter is the default.
        """

        if self.hold_expiration == ExpirationMode.TIMED:
            return str(int(time.time()) + self.hold_duration * 3600)
        return "0"

    def build(
        self,
        zone_id: int,
        *,
        heat_setpoint: Any,
        cool_setpoint: Any,
        system_mode: SystemMode | str,
        unit: UnitSystem | str,
        schedule_id: int | None = None,
        fan_mode: FanMode | str | None = None,
        start_time: int | None = None,
    ) -> SetpointCommands:
        """Return the commands to apply the setpoints to a zone.

        The setpoints are in the given unit. The schedule id is the zone's current
        one (None if unknown), and the start time is that of the active period (the
        default start time is used if it has never been observed).
        """

        heat = to_float(heat_setpoint)
        cool = to_float(cool_setpoint)
        if heat is None or cool is None:
            raise exc.CommandInvalid(
                f"Setpoints must be numbers: heat={heat_setpoint!r},"
                f" cool={cool_setpoint!r}"
            )

        try:
            system_mode = SystemMode(system_mode)
            unit = UnitSystem(unit)
            fan_mode = FanMode(fan_mode or FanMode.AUTO)
        except ValueError as err:
            raise exc.CommandInvalid(f"Invalid setpoint arguments: {err}") from err

        if system_mode == SystemMode.HEAT_COOL and heat > cool:
            raise exc.CommandInvalid(
                f"Heat setpoint ({heat}) is above the cool setpoint ({cool})"
            )

        mode = ScheduleModeClassifier.classify(zone_id, schedule_id)
        target_id = ScheduleModeClassifier.target_schedule_id(zone_id, mode)

        heat_f, cool_f = _as_f(heat, unit), _as_f(cool, unit)
        heat_c, cool_c = _as_c(heat, unit), _as_c(cool, unit)

        if system_mode == SystemMode.HEAT_COOL:
            setpoint_f, setpoint_c = (heat_f + cool_f) / 2, (heat_c + cool_c) / 2
        elif system_mode == SystemMode.HEAT:
            setpoint_f, setpoint_c = heat_f, heat_c
        else:  # cool, or off
            setpoint_f, setpoint_c = cool_f, cool_c

        schedule_cmd = Command.set_schedule_period(
            self.sender_id,
            self.target_id,
            target_id,
            heat_setpoint_f=int(round_half_up(heat_f)),
            heat_setpoint_c=round_half_up(heat_c, 1),
            cool_setpoint_f=int(round_half_up(cool_f)),
            cool_setpoint_c=round_half_up(cool_c, 1),
            setpoint_f=int(round_half_up(setpoint_f)),
            setpoint_c=round_half_up(setpoint_c, 1),
            system_mode=system_mode,
            fan_mode=fan_mode,
            start_time=self.default_start_time if start_time is None else start_time,
            humidity_setpoint=DEFAULT_HUMIDITY_SETPOINT,
            dehumidify_setpoint=DEFAULT_DEHUMIDIFY_SETPOINT,
            humidity_mode=HumidityMode.OFF,
        )

        hold_cmd = None
        if ScheduleModeClassifier.requires_hold(mode):
            hold_cmd = Command.set_schedule_hold(
                self.sender_id,
                self.target_id,
                zone_id,
                target_id,
                expiration_mode=self.hold_expiration,
                expires_on=self._expires_on(),
            )

        _LOGGER.debug(
            "Zone %s: mode=%s, target schedule=%s, hold=%s",
            zone_id,
            mode,
            target_id,
            hold_cmd is not None,
        )
        return SetpointCommands(schedule_cmd, hold_cmd, target_id, mode)
