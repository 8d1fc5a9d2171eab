#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__dev_mode__ = False  # NOTE: this is const.py
DEV_MODE = __dev_mode__

# used by the dispatcher...
DEFAULT_MAX_RETRIES: Final[int] = 3  # attempts, incl. the 1st send
MAX_RETRY_LIMIT: Final[int] = 10
DEFAULT_RETRY_BACKOFF: Final[float] = 1.0  # seconds, doubled after each attempt
DEFAULT_SETTLE_DELAY: Final[float] = 0.5  # between schedule & hold commands
DEFAULT_LOCK_TIMEOUT: Final[float] = 5.0  # waiting for an in-flight update
DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0  # enforced by the transport

RESPONSE_CODE_ACCEPTED: Final[int] = 1

# used by the setpoint builder...
DEFAULT_START_TIME: Final[int] = 25200  # 07:00, as secs since midnight
DEFAULT_HOLD_DURATION: Final[int] = 24  # hours, for timed holds
DEFAULT_HUMIDITY_SETPOINT: Final[int] = 40
DEFAULT_DEHUMIDIFY_SETPOINT: Final[int] = 55

DEADBAND_F: Final[float] = 3.0
DEADBAND_C: Final[float] = 1.5

PRIMARY_ZONE_ID: Final[int] = 0

# used by the gateway...
DEFAULT_POLL_INTERVAL: Final[int] = 60  # seconds
SECS_PER_DAY: Final[int] = 24 * 60 * 60

MESSAGE_TYPE_COMMAND: Final = "Command"

# the command envelope
SZ_DATA: Final = "Data"
SZ_MESSAGE_ID: Final = "MessageID"
SZ_MESSAGE_TYPE: Final = "MessageType"
SZ_SENDER_ID: Final = "SenderID"
SZ_TARGET_ID: Final = "TargetID"

# the protocol response
SZ_CODE: Final = "code"
SZ_MESSAGE: Final = "message"
SZ_RETRY_AFTER: Final = "retry_after"

# schedule & hold payloads
SZ_CONFIG: Final = "config"
SZ_ENABLED: Final = "enabled"
SZ_EXCEPTION_TYPE: Final = "exceptionType"
SZ_EXPIRATION_MODE: Final = "expirationMode"
SZ_EXPIRES_ON: Final = "expiresOn"
SZ_ID: Final = "id"
SZ_PERIOD: Final = "period"
SZ_PERIODS: Final = "periods"
SZ_SCHEDULE: Final = "schedule"
SZ_SCHEDULE_HOLD: Final = "scheduleHold"
SZ_SCHEDULE_ID: Final = "scheduleId"
SZ_SCHEDULES: Final = "schedules"
SZ_ZONES: Final = "zones"

# schedule period fields (both units are always sent)
SZ_CSP: Final = "csp"
SZ_CSP_C: Final = "cspC"
SZ_DESP: Final = "desp"
SZ_FAN_MODE: Final = "fanMode"
SZ_HSP: Final = "hsp"
SZ_HSP_C: Final = "hspC"
SZ_HUMIDITY_MODE: Final = "humidityMode"
SZ_HUSP: Final = "husp"
SZ_SP: Final = "sp"
SZ_SP_C: Final = "spC"
SZ_START_TIME: Final = "startTime"
SZ_SYSTEM_MODE: Final = "systemMode"
SZ_HEAT_COAST: Final = "heatCoast"

# cloud telemetry: the user_data blob of a substatus
SZ_ACTIVE: Final = "active"
SZ_ALIVE: Final = "alive"
SZ_DISP_UNITS: Final = "dispUnits"
SZ_OP_MODE: Final = "opMode"
SZ_RH: Final = "rh"
SZ_SSP: Final = "ssp"
SZ_STATUS: Final = "status"
SZ_SUBSTATUSES: Final = "substatuses"
SZ_USER_DATA: Final = "user_data"
SZ_ZIT: Final = "zit"
SZ_ZIT_C: Final = "zitC"

# local telemetry: zone records & property-change messages
SZ_DATA_LOWER: Final = "data"
SZ_HUMIDITY: Final = "humidity"
SZ_TEMP_OPERATION: Final = "tempOperation"
SZ_TEMPERATURE: Final = "temperature"
SZ_TEMPERATURE_C: Final = "temperatureC"
SZ_ZONE_ID: Final = "zoneId"

# the (cloud) systems list
SZ_EXT_ID: Final = "extId"


class UnitSystem(StrEnum):
    FAHRENHEIT = "F"
    CELSIUS = "C"


class SystemMode(StrEnum):
    OFF = "off"
    HEAT = "heat"
    COOL = "cool"
    HEAT_COOL = "heat and cool"


class RunningState(StrEnum):
    IDLE = "idle"
    HEATING = "heating"
    COOLING = "cooling"


class FanMode(StrEnum):
    AUTO = "auto"
    ON = "on"
    CIRCULATE = "circulate"


class HumidityMode(StrEnum):
    OFF = "off"
    HUMIDIFY = "humidify"
    DEHUMIDIFY = "dehumidify"


class ExpirationMode(StrEnum):
    NEXT_PERIOD = "nextPeriod"
    TIMED = "timed"
    MANUAL = "manual"


SZ_AUTO: Final = "auto"  # temperature_unit: infer the unit system from telemetry

OP_MODE_MAP: Final[dict[str, SystemMode]] = {
    "hc": SystemMode.HEAT_COOL,
    "heat": SystemMode.HEAT,
    "cool": SystemMode.COOL,
    "off": SystemMode.OFF,
}  # cloud opMode -> system mode

STATUS_MAP: Final[dict[str, RunningState]] = {
    "h": RunningState.HEATING,
    "c": RunningState.COOLING,
    "off": RunningState.IDLE,
}  # cloud status -> running state

TEMP_OPERATION_MAP: Final[dict[str, RunningState]] = {
    "heating": RunningState.HEATING,
    "cooling": RunningState.COOLING,
    "off": RunningState.IDLE,
    "idle": RunningState.IDLE,
}  # local tempOperation -> running state
