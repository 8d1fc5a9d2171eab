#!/usr/bin/env python3
"""iComfort - Test the building of setpoint commands (the two-phase update)."""

from typing import Any

import pytest

from icomfort import ScheduleMode, SetpointCommandBuilder, split_target_temp
from icomfort import exceptions as exc
from icomfort.setpoint import SetpointCommands
from icomfort_tx.const import ExpirationMode, SystemMode, UnitSystem

from .helpers import SENDER_ID, SYSTEM_ID, hold_of, period_of


@pytest.fixture()
def builder() -> SetpointCommandBuilder:
    return SetpointCommandBuilder(SENDER_ID, SYSTEM_ID)


def _build(
    builder: SetpointCommandBuilder, zone_id: int = 0, **kwargs: Any
) -> SetpointCommands:
    defaults = {
        "heat_setpoint": 68,
        "cool_setpoint": 74,
        "system_mode": SystemMode.HEAT_COOL,
        "unit": UnitSystem.FAHRENHEIT,
    }
    return builder.build(zone_id, **(defaults | kwargs))


def test_build_heat_cool(builder: SetpointCommandBuilder) -> None:
    cmds = _build(builder)

    assert cmds.mode == ScheduleMode.UNKNOWN
    assert cmds.schedule_id == 32
    assert cmds.schedule_cmd.schedule_id == 32
    assert cmds.schedule_cmd.sender_id == SENDER_ID
    assert cmds.schedule_cmd.target_id == SYSTEM_ID

    period = period_of(cmds.schedule_cmd)
    assert (period["hsp"], period["hspC"]) == (68, 20.0)
    assert (period["csp"], period["cspC"]) == (74, 23.3)
    assert (period["sp"], period["spC"]) == (71, 21.7)  # the midpoint
    assert period["systemMode"] == "heat and cool"
    assert period["fanMode"] == "auto"
    assert period["startTime"] == 25200  # the default
    assert (period["husp"], period["desp"], period["humidityMode"]) == (40, 55, "off")

    assert cmds.hold_cmd is not None
    assert cmds.hold_cmd.data["zones"][0]["id"] == 0
    assert hold_of(cmds.hold_cmd) == {
        "scheduleId": 32,
        "exceptionType": "hold",
        "enabled": True,
        "expiresOn": "0",
        "expirationMode": "nextPeriod",
    }


def test_build_types(builder: SetpointCommandBuilder) -> None:
    """Whole degrees F are ints, and degrees C are to 0.1."""

    cmds = _build(builder, heat_setpoint=68.4, cool_setpoint="74.6")
    period = period_of(cmds.schedule_cmd)

    assert isinstance(period["hsp"], int) and period["hsp"] == 68
    assert isinstance(period["csp"], int) and period["csp"] == 75
    assert isinstance(period["sp"], int)
    assert isinstance(period["hspC"], float)


@pytest.mark.parametrize(
    "schedule_id, mode, target_id, has_hold",
    [
        (None, ScheduleMode.UNKNOWN, 32, True),
        (1, ScheduleMode.FOLLOWING_SCHEDULE, 32, True),
        (16, ScheduleMode.MANUAL, 16, False),
        (32, ScheduleMode.OVERRIDE, 32, False),
    ],
)
def test_build_schedule_modes(
    builder: SetpointCommandBuilder,
    schedule_id: int | None,
    mode: ScheduleMode,
    target_id: int,
    has_hold: bool,
) -> None:
    cmds = _build(builder, schedule_id=schedule_id)

    assert cmds.mode == mode
    assert cmds.schedule_id == target_id
    assert cmds.schedule_cmd.schedule_id == target_id
    assert (cmds.hold_cmd is not None) is has_hold


def test_build_other_zone(builder: SetpointCommandBuilder) -> None:
    cmds = _build(builder, zone_id=1, schedule_id=5)

    assert cmds.schedule_id == 33
    assert cmds.hold_cmd is not None
    assert cmds.hold_cmd.data["zones"][0]["id"] == 1
    assert hold_of(cmds.hold_cmd)["scheduleId"] == 33


def test_build_celsius(builder: SetpointCommandBuilder) -> None:
    cmds = _build(
        builder,
        heat_setpoint=20.5,
        cool_setpoint=24,
        system_mode=SystemMode.HEAT,
        unit=UnitSystem.CELSIUS,
    )
    period = period_of(cmds.schedule_cmd)

    assert (period["hsp"], period["hspC"]) == (69, 20.5)  # 68.9F
    assert (period["csp"], period["cspC"]) == (75, 24.0)  # 75.2F
    assert (period["sp"], period["spC"]) == (69, 20.5)  # the heat setpoint


@pytest.mark.parametrize(
    "system_mode, sp",
    [(SystemMode.HEAT, 68), (SystemMode.COOL, 74), (SystemMode.OFF, 74)],
)
def test_build_setpoint(
    builder: SetpointCommandBuilder, system_mode: SystemMode, sp: int
) -> None:
    period = period_of(_build(builder, system_mode=system_mode).schedule_cmd)

    assert period["sp"] == sp
    assert period["systemMode"] == system_mode


def test_build_start_time_and_fan(builder: SetpointCommandBuilder) -> None:
    period = period_of(
        _build(builder, start_time=21600, fan_mode="circulate").schedule_cmd
    )
    assert period["startTime"] == 21600
    assert period["fanMode"] == "circulate"

    builder = SetpointCommandBuilder(SENDER_ID, SYSTEM_ID, default_start_time=0)
    assert period_of(_build(builder).schedule_cmd)["startTime"] == 0


def test_build_timed_hold(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("icomfort.setpoint.time.time", lambda: 1_700_000_000.5)

    builder = SetpointCommandBuilder(
        SENDER_ID, SYSTEM_ID, hold_expiration=ExpirationMode.TIMED, hold_duration=24
    )
    hold_cmd = _build(builder).hold_cmd

    assert hold_cmd is not None
    assert hold_of(hold_cmd)["expirationMode"] == "timed"
    assert hold_of(hold_cmd)["expiresOn"] == "1700086400"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"heat_setpoint": "warm"},
        {"cool_setpoint": None},
        {"heat_setpoint": 75, "cool_setpoint": 74},  # inverted
        {"system_mode": "auto"},
        {"unit": "K"},
        {"fan_mode": "turbo"},
    ],
)
def test_build_invalid(builder: SetpointCommandBuilder, kwargs: dict[str, Any]) -> None:
    with pytest.raises(exc.CommandInvalid):
        _build(builder, **kwargs)


def test_build_inverted_when_not_heat_cool(builder: SetpointCommandBuilder) -> None:
    """Only a heat_cool zone requires its heat setpoint below its cool setpoint."""

    cmds = _build(builder, heat_setpoint=75, cool_setpoint=74, system_mode="heat")
    assert period_of(cmds.schedule_cmd)["sp"] == 75


@pytest.mark.parametrize(
    "temp, unit, expected",
    [
        (72, UnitSystem.FAHRENHEIT, (70.5, 73.5)),
        (21, UnitSystem.CELSIUS, (20.25, 21.75)),
    ],
)
def test_split_target_temp(
    temp: float, unit: UnitSystem, expected: tuple[float, float]
) -> None:
    heat, cool = split_target_temp(temp, unit)

    assert (heat, cool) == expected
    assert (heat + cool) / 2 == temp
