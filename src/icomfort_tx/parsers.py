#!/usr/bin/env python3
"""iComfort - telemetry processors.

The device's telemetry comes in a number of shapes, depending upon the transport
(cloud or local) and the message type:

  :shape:         | :where the zone data is:
  substatus       | status.substatuses[].user_data (a JSON string, cloud vocabulary)
  zones (root)    | zones[] (local vocabulary)
  zones (numeric) | <n>.zones[], e.g. {"1": {"zones": [...]}}
  zones (data)    | data.zones[]
  zone (object)   | zones{} (a single zone, rather than an array), or the payload itself
  status/period   | status{} & period{} (a property-change message, maybe under Data)

Each shape has a parser that returns a (possibly empty) list of zone statuses. They
are tried in the above order, and the first to return any zones wins.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from typing import Any, Final, TypeAlias

from . import exceptions as exc
from .const import (
    OP_MODE_MAP,
    STATUS_MAP,
    SZ_ACTIVE,
    SZ_ALIVE,
    SZ_CONFIG,
    SZ_CSP,
    SZ_CSP_C,
    SZ_DATA,
    SZ_DATA_LOWER,
    SZ_DISP_UNITS,
    SZ_FAN_MODE,
    SZ_HEAT_COAST,
    SZ_HSP,
    SZ_HSP_C,
    SZ_HUMIDITY,
    SZ_ID,
    SZ_OP_MODE,
    SZ_PERIOD,
    SZ_RH,
    SZ_SCHEDULE_ID,
    SZ_SSP,
    SZ_START_TIME,
    SZ_STATUS,
    SZ_SUBSTATUSES,
    SZ_SYSTEM_MODE,
    SZ_TEMP_OPERATION,
    SZ_TEMPERATURE,
    SZ_TEMPERATURE_C,
    SZ_USER_DATA,
    SZ_ZIT,
    SZ_ZIT_C,
    SZ_ZONE_ID,
    SZ_ZONES,
    TEMP_OPERATION_MAP,
    FanMode,
    RunningState,
    SystemMode,
    UnitSystem,
)
from .helpers import c_to_f, infer_unit_system, round_half_up, to_float, to_int
from .status import ZoneStatus

_LOGGER = logging.getLogger(__name__)


_RecordT: TypeAlias = dict[str, Any]
_ParserT: TypeAlias = Callable[[Any, str | None], list[ZoneStatus]]


def _decode(value: Any) -> Any:
    """Return a JSON-decoded value, if it is a str/bytes, otherwise the value itself."""

    if not isinstance(value, str | bytes | bytearray):
        return value
    try:
        return json.loads(value)
    except ValueError as err:
        raise exc.TelemetryInvalid(f"Undecodable JSON: {err}") from err


def _pick(record: _RecordT, key_f: str, key_c: str, unit: UnitSystem) -> float | None:
    """Return a temperature in the given unit, from a pair of F/C labelled fields.

    The F-labelled field is not to be trusted: in local mode it may hold a value in
    Celsius, in which case the unit will have been inferred as C.
    """

    value_f = to_float(record.get(key_f))
    value_c = to_float(record.get(key_c))

    if unit == UnitSystem.CELSIUS:
        return value_c if value_c is not None else value_f
    if value_f is not None:
        return value_f
    return None if value_c is None else round_half_up(c_to_f(value_c), 1)


def _unit_of(
    record: _RecordT, temperature: Any, unit_override: str | None, **kwargs: Any
) -> UnitSystem:
    """Return the unit system of a record, using its heat (else cool) setpoints."""

    if record.get(SZ_HSP) is not None:
        setpoint_f, setpoint_c = record.get(SZ_HSP), record.get(SZ_HSP_C)
    else:
        setpoint_f, setpoint_c = record.get(SZ_CSP), record.get(SZ_CSP_C)

    return infer_unit_system(
        unit_override,
        setpoint_f=setpoint_f,
        setpoint_c=setpoint_c,
        temperature=temperature,
        **kwargs,
    )


def _lookup(mapping: dict[str, Any], value: Any, default: Any = None) -> Any:
    return mapping.get(value, default) if isinstance(value, str) else default


def _system_mode(value: Any) -> SystemMode:
    if isinstance(value, str) and value in iter(SystemMode):
        return SystemMode(value)
    if (result := _lookup(OP_MODE_MAP, value)) is not None:
        return result  # type: ignore[no-any-return]
    _LOGGER.debug("Unknown system mode: %s, assuming off", value)
    return SystemMode.OFF


def _fan_mode(value: Any) -> FanMode | None:
    if isinstance(value, str) and value in iter(FanMode):
        return FanMode(value)
    return None


def _running_state(
    period: _RecordT,
    temperature: float | None,
    heat_setpoint: float | None,
    cool_setpoint: float | None,
) -> RunningState:
    """Derive the running state when the telemetry doesn't include one."""

    if period.get(SZ_HEAT_COAST):
        return RunningState.HEATING
    if temperature is None:
        return RunningState.IDLE
    if heat_setpoint is not None and temperature < heat_setpoint:
        return RunningState.HEATING
    if cool_setpoint is not None and temperature > cool_setpoint:
        return RunningState.COOLING
    return RunningState.IDLE


def _check_decodable(zone_id: int, *values: float | None) -> None:
    if all(v is None for v in values):
        raise exc.TelemetryInvalid(f"Zone {zone_id}: no decodable status fields")


def _statuses(
    records: Iterable[Any],
    factory: Callable[[int, Any, str | None], ZoneStatus],
    unit_override: str | None,
) -> list[ZoneStatus]:
    """Return the statuses of a set of zone records, skipping any that are invalid."""

    result: list[ZoneStatus] = []
    for idx, record in enumerate(records):
        try:
            result.append(factory(idx, record, unit_override))
        except exc.TelemetryInvalid as err:
            _LOGGER.warning("Skipping zone record #%s: %s", idx, err)
    return result


########################################################################################
# the cloud vocabulary (the user_data of a substatus)


def status_from_user_data(
    zone_id: int, user_data: Any, unit_override: str | None = None
) -> ZoneStatus:
    """Return the status of a zone from its (cloud) user data."""

    user_data = _decode(user_data)
    if not isinstance(user_data, dict):
        raise exc.TelemetryInvalid(f"Zone {zone_id}: user data is not an object")

    unit = _unit_of(
        user_data,
        user_data.get(SZ_ZIT),
        unit_override,
        reported=user_data.get(SZ_DISP_UNITS),
    )

    temperature = _pick(user_data, SZ_ZIT, SZ_ZIT_C, unit)
    heat_setpoint = _pick(user_data, SZ_HSP, SZ_HSP_C, unit)
    cool_setpoint = _pick(user_data, SZ_CSP, SZ_CSP_C, unit)
    _check_decodable(zone_id, temperature, heat_setpoint, cool_setpoint)

    start_time = to_int(user_data.get(SZ_SSP))  # only meaningful if > 0

    return ZoneStatus(
        zone_id=zone_id,
        temperature=temperature,
        heat_setpoint=heat_setpoint,
        cool_setpoint=cool_setpoint,
        system_mode=_lookup(OP_MODE_MAP, user_data.get(SZ_OP_MODE), SystemMode.OFF),
        running_state=_lookup(STATUS_MAP, user_data.get(SZ_STATUS), RunningState.IDLE),
        humidity=to_float(user_data.get(SZ_RH)),
        unit=unit,
        fan_mode=_fan_mode(user_data.get(SZ_FAN_MODE)),
        start_time=start_time if start_time and start_time > 0 else None,
    )


########################################################################################
# the local vocabulary (zone records, and property-change messages)


def _status_from_local(
    zone_id: int,
    status: _RecordT,
    period: _RecordT,
    unit_override: str | None,
    schedule_id: int | None = None,
    running_state: RunningState | None = None,
) -> ZoneStatus:
    unit = _unit_of(period, status.get(SZ_TEMPERATURE), unit_override)

    temperature = _pick(status, SZ_TEMPERATURE, SZ_TEMPERATURE_C, unit)
    heat_setpoint = _pick(period, SZ_HSP, SZ_HSP_C, unit)
    cool_setpoint = _pick(period, SZ_CSP, SZ_CSP_C, unit)
    _check_decodable(zone_id, temperature, heat_setpoint, cool_setpoint)

    if running_state is None:
        running_state = _running_state(
            period, temperature, heat_setpoint, cool_setpoint
        )

    return ZoneStatus(
        zone_id=zone_id,
        temperature=temperature,
        heat_setpoint=heat_setpoint,
        cool_setpoint=cool_setpoint,
        system_mode=_system_mode(period.get(SZ_SYSTEM_MODE)),
        running_state=running_state,
        humidity=to_float(status.get(SZ_HUMIDITY)),
        unit=unit,
        fan_mode=_fan_mode(period.get(SZ_FAN_MODE)),
        start_time=to_int(period.get(SZ_START_TIME)),
        schedule_id=schedule_id,
    )


def status_from_zone_record(
    idx: int, record: Any, unit_override: str | None = None
) -> ZoneStatus:
    """Return the status of a zone from a (local) zone record.

    The zone id is the record's own, else its position in the array.
    """

    if not isinstance(record, dict) or not isinstance(record.get(SZ_STATUS), dict):
        raise exc.TelemetryInvalid("Zone record has no status object")

    zone_id = to_int(record.get(SZ_ID))
    zone_id = idx if zone_id is None else zone_id

    status: _RecordT = record[SZ_STATUS]
    period = status.get(SZ_PERIOD)
    if not isinstance(period, dict):
        period = {}

    config = record.get(SZ_CONFIG)
    schedule_id = None
    if isinstance(config, dict):
        schedule_id = to_int(config.get(SZ_SCHEDULE_ID))
    if schedule_id is None:
        schedule_id = to_int(status.get(SZ_SCHEDULE_ID))

    return _status_from_local(
        zone_id,
        status,
        period,
        unit_override,
        schedule_id=schedule_id,
        running_state=_lookup(TEMP_OPERATION_MAP, status.get(SZ_TEMP_OPERATION)),
    )


def _is_zone_record(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get(SZ_STATUS), dict)


########################################################################################
# the shape parsers, in order of priority


def parser_substatus(payload: Any, unit_override: str | None) -> list[ZoneStatus]:
    """The cloud shape: JSON strings embedded in substatus records.

    Substatuses that are active and alive come first, so the primary zone (id 0) is
    the first of them (else the first substatus).
    """

    if not isinstance(payload, dict):
        return []

    system_status = payload.get(SZ_STATUS)
    if isinstance(system_status, dict) and SZ_SUBSTATUSES in system_status:
        substatuses = system_status[SZ_SUBSTATUSES]
    else:
        substatuses = payload.get(SZ_SUBSTATUSES)

    if not isinstance(substatuses, list):
        return []

    substatuses = [
        s for s in substatuses if isinstance(s, dict) and s.get(SZ_USER_DATA)
    ]
    substatuses.sort(key=lambda s: not (s.get(SZ_ACTIVE) and s.get(SZ_ALIVE)))

    return _statuses(
        (s[SZ_USER_DATA] for s in substatuses), status_from_user_data, unit_override
    )


def parser_zones_root(payload: Any, unit_override: str | None) -> list[ZoneStatus]:
    """A zones array at the root of the payload (or the payload is the array)."""

    if isinstance(payload, list):
        zones = payload if any(_is_zone_record(z) for z in payload) else []
    elif isinstance(payload, dict) and isinstance(payload.get(SZ_ZONES), list):
        zones = payload[SZ_ZONES]
    else:
        return []

    return _statuses(zones, status_from_zone_record, unit_override)


def parser_zones_numeric(payload: Any, unit_override: str | None) -> list[ZoneStatus]:
    """A zones array nested one level down, under a numeric key."""

    if not isinstance(payload, dict):
        return []

    for key, value in payload.items():
        if not str(key).isdigit() or not isinstance(value, dict):
            continue
        if isinstance(value.get(SZ_ZONES), list):
            if result := _statuses(
                value[SZ_ZONES], status_from_zone_record, unit_override
            ):
                return result
    return []


def parser_zones_data(payload: Any, unit_override: str | None) -> list[ZoneStatus]:
    """A zones array nested under a generic data key."""

    if not isinstance(payload, dict):
        return []

    data = payload.get(SZ_DATA_LOWER, payload.get(SZ_DATA))
    if not isinstance(data, dict) or not isinstance(data.get(SZ_ZONES), list):
        return []

    return _statuses(data[SZ_ZONES], status_from_zone_record, unit_override)


def parser_zone_object(payload: Any, unit_override: str | None) -> list[ZoneStatus]:
    """A single zone object, rather than an array of them."""

    if not isinstance(payload, dict):
        return []

    candidates = [payload.get(SZ_ZONES)]
    candidates += [
        v.get(SZ_ZONES)
        for k, v in payload.items()
        if str(k).isdigit() and isinstance(v, dict)
    ]
    data = payload.get(SZ_DATA_LOWER, payload.get(SZ_DATA))
    if isinstance(data, dict):
        candidates.append(data.get(SZ_ZONES))
    if SZ_PERIOD not in payload:  # else it's a status/period pair
        candidates.append(payload)  # maybe the payload is itself a zone

    for zone in candidates:
        if _is_zone_record(zone):
            return _statuses([zone], status_from_zone_record, unit_override)
    return []


def parser_status_period(payload: Any, unit_override: str | None) -> list[ZoneStatus]:
    """A status/period pair, as found in a property-change message."""

    if not isinstance(payload, dict):
        return []

    for container in (payload, payload.get(SZ_DATA), payload.get(SZ_DATA_LOWER)):
        if not isinstance(container, dict):
            continue
        status, period = container.get(SZ_STATUS), container.get(SZ_PERIOD)
        if isinstance(status, dict) and isinstance(period, dict):
            break
    else:
        return []

    zone_id = to_int(status.get(SZ_ZONE_ID, status.get(SZ_ID)))
    zone_id = to_int(container.get(SZ_ID)) if zone_id is None else zone_id

    try:
        return [
            _status_from_local(
                0 if zone_id is None else zone_id,
                status,
                period,
                unit_override,
                schedule_id=to_int(status.get(SZ_SCHEDULE_ID)),
            )
        ]
    except exc.TelemetryInvalid as err:
        _LOGGER.warning("Skipping status/period: %s", err)
        return []


_PAYLOAD_PARSERS: Final[tuple[tuple[str, _ParserT], ...]] = (
    ("substatus", parser_substatus),
    ("zones_root", parser_zones_root),
    ("zones_numeric", parser_zones_numeric),
    ("zones_data", parser_zones_data),
    ("zone_object", parser_zone_object),
    ("status_period", parser_status_period),
)


def parse_telemetry(payload: Any, unit_override: str | None = None) -> list[ZoneStatus]:
    """Return the status of every zone found in a telemetry payload.

    Never raises for an unrecognised (or corrupt) payload: logs it and returns [].
    """

    try:
        payload = _decode(payload)
    except exc.TelemetryInvalid as err:
        _LOGGER.warning("Unable to decode telemetry: %s", err)
        return []

    for shape, parser in _PAYLOAD_PARSERS:
        if result := parser(payload, unit_override):
            _LOGGER.debug("Telemetry shape is %s: %s zone(s)", shape, len(result))
            return result

    _LOGGER.warning("Unrecognised telemetry (no zone data): %.120s", payload)
    return []
