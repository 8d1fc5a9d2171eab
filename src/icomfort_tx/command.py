#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine.

Construct a command (an envelope that is to be published).
"""

from __future__ import annotations

import json
import uuid
from enum import StrEnum
from typing import Any, TypeVar

from . import exceptions as exc
from .const import (
    MESSAGE_TYPE_COMMAND,
    SZ_CONFIG,
    SZ_CSP,
    SZ_CSP_C,
    SZ_DATA,
    SZ_DESP,
    SZ_ENABLED,
    SZ_EXCEPTION_TYPE,
    SZ_EXPIRATION_MODE,
    SZ_EXPIRES_ON,
    SZ_FAN_MODE,
    SZ_HSP,
    SZ_HSP_C,
    SZ_HUMIDITY_MODE,
    SZ_HUSP,
    SZ_ID,
    SZ_MESSAGE_ID,
    SZ_MESSAGE_TYPE,
    SZ_PERIOD,
    SZ_PERIODS,
    SZ_SCHEDULE,
    SZ_SCHEDULE_HOLD,
    SZ_SCHEDULE_ID,
    SZ_SCHEDULES,
    SZ_SENDER_ID,
    SZ_SP,
    SZ_SP_C,
    SZ_START_TIME,
    SZ_SYSTEM_MODE,
    SZ_TARGET_ID,
    SZ_ZONES,
    ExpirationMode,
    FanMode,
    HumidityMode,
    SystemMode,
)

_EnumT = TypeVar("_EnumT", bound=StrEnum)

_HOLD_EXCEPTION_TYPE = "hold"


def _check_id(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise exc.CommandInvalid(f"Invalid {name}: {value!r}")
    return value


def _enum(enum_cls: type[_EnumT], value: Any) -> _EnumT:
    try:
        return enum_cls(value)
    except ValueError as err:
        raise exc.CommandInvalid(f"Invalid {enum_cls.__name__}: {value!r}") from err


class Command:
    """The Command class (envelopes to be published).

    An envelope is created once per logical command: a retry re-publishes the same
    envelope (so has the same MessageID), but a new command has a new one.
    """

    def __init__(
        self,
        sender_id: str,
        target_id: str,
        data: dict[str, Any],
        *,
        message_id: str | None = None,
        verb: str = "",
    ) -> None:
        """Create a command from its envelope attrs and payload."""

        if not sender_id or not target_id:
            raise exc.CommandInvalid(
                f"Command requires both a sender & target id: {sender_id}, {target_id}"
            )

        self.sender_id = sender_id
        self.target_id = target_id
        self.message_id = message_id or str(uuid.uuid4())
        self.data = data

        self._verb = verb  # for logging only

    def __repr__(self) -> str:
        """Return an unambiguous string representation of this object."""
        return f"Command({self._verb or '-'}, {self.target_id}, {self.message_id})"

    def __str__(self) -> str:
        """Return an brief readable string representation of this object."""
        # e.g.: set_schedule_hold|0000000-0000-0000-0000-000000000000|zone=0
        return f"{self._verb or '-'}|{self.target_id}|{self._ctx}"

    @property
    def _ctx(self) -> str:
        if schedules := self.data.get(SZ_SCHEDULES):
            return f"schedule={schedules[0][SZ_ID]}"
        if zones := self.data.get(SZ_ZONES):
            return f"zone={zones[0][SZ_ID]}"
        return ""

    @property
    def schedule_id(self) -> int | None:
        """Return the schedule id that this command targets (if any)."""

        if schedules := self.data.get(SZ_SCHEDULES):
            return schedules[0][SZ_ID]  # type: ignore[no-any-return]
        if zones := self.data.get(SZ_ZONES):
            hold = zones[0][SZ_CONFIG][SZ_SCHEDULE_HOLD]
            return hold[SZ_SCHEDULE_ID]  # type: ignore[no-any-return]
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the envelope as a dict, ready for publishing."""

        return {
            SZ_MESSAGE_TYPE: MESSAGE_TYPE_COMMAND,
            SZ_SENDER_ID: self.sender_id,
            SZ_MESSAGE_ID: self.message_id,
            SZ_TARGET_ID: self.target_id,
            SZ_DATA: self.data,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod  # constructor for a schedule (period) update
    def set_schedule_period(
        cls,
        sender_id: str,
        target_id: str,
        schedule_id: int,
        *,
        heat_setpoint_f: int,
        heat_setpoint_c: float,
        cool_setpoint_f: int,
        cool_setpoint_c: float,
        setpoint_f: int,
        setpoint_c: float,
        system_mode: SystemMode | str,
        fan_mode: FanMode | str,
        start_time: int,
        humidity_setpoint: int,
        dehumidify_setpoint: int,
        humidity_mode: HumidityMode | str = HumidityMode.OFF,
    ) -> Command:
        """Constructor to replace the only period of a schedule.

        The period's fields are in the same order as the vendor's app sends them.
        """

        schedule_id = _check_id(schedule_id, "schedule id")

        period = {
            SZ_DESP: dehumidify_setpoint,
            SZ_HSP: heat_setpoint_f,
            SZ_CSP_C: cool_setpoint_c,
            SZ_SP: setpoint_f,
            SZ_HUSP: humidity_setpoint,
            SZ_HUMIDITY_MODE: str(_enum(HumidityMode, humidity_mode)),
            SZ_SYSTEM_MODE: str(_enum(SystemMode, system_mode)),
            SZ_SP_C: setpoint_c,
            SZ_HSP_C: heat_setpoint_c,
            SZ_CSP: cool_setpoint_f,
            SZ_START_TIME: start_time,
            SZ_FAN_MODE: str(_enum(FanMode, fan_mode)),
        }

        data = {
            SZ_SCHEDULES: [
                {
                    SZ_SCHEDULE: {SZ_PERIODS: [{SZ_ID: 0, SZ_PERIOD: period}]},
                    SZ_ID: schedule_id,
                }
            ]
        }
        return cls(sender_id, target_id, data, verb="set_schedule_period")

    @classmethod  # constructor for a schedule hold (an override)
    def set_schedule_hold(
        cls,
        sender_id: str,
        target_id: str,
        zone_id: int,
        schedule_id: int,
        *,
        expiration_mode: ExpirationMode | str = ExpirationMode.NEXT_PERIOD,
        expires_on: str = "0",
    ) -> Command:
        """Constructor to hold a zone to a schedule (until the hold expires)."""

        zone_id = _check_id(zone_id, "zone id")
        schedule_id = _check_id(schedule_id, "schedule id")

        hold = {
            SZ_SCHEDULE_ID: schedule_id,
            SZ_EXCEPTION_TYPE: _HOLD_EXCEPTION_TYPE,
            SZ_ENABLED: True,
            SZ_EXPIRES_ON: expires_on,
            SZ_EXPIRATION_MODE: str(_enum(ExpirationMode, expiration_mode)),
        }

        data = {SZ_ZONES: [{SZ_CONFIG: {SZ_SCHEDULE_HOLD: hold}, SZ_ID: zone_id}]}
        return cls(sender_id, target_id, data, verb="set_schedule_hold")
