#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine."""

from __future__ import annotations

from .command import Command
from .const import (
    PRIMARY_ZONE_ID,
    ExpirationMode,
    FanMode,
    HumidityMode,
    RunningState,
    SystemMode,
    UnitSystem,
)
from .exceptions import (
    CommandInvalid,
    CommandRejected,
    IComfortException,
    ProtocolError,
    TelemetryInvalid,
    TransportClientError,
    TransportError,
    UpdateInProgress,
)
from .helpers import c_to_f, f_to_c, infer_unit_system, temp_to_c, temp_to_f
from .logger import set_logging
from .parsers import parse_telemetry
from .protocol import CommandDispatcher
from .schemas import SCH_DISPATCHER_CONFIG, SCH_GATEWAY_CONFIG, SCH_TRANSPORT_CONFIG
from .status import ZoneStatus
from .transport import HttpTransport
from .typing import PublishResponseT, SetpointRequest, TransportT, ZoneSession
from .version import VERSION

__all__ = [
    "VERSION",
    #
    "PRIMARY_ZONE_ID",
    "SCH_DISPATCHER_CONFIG",
    "SCH_GATEWAY_CONFIG",
    "SCH_TRANSPORT_CONFIG",
    #
    "ExpirationMode",
    "FanMode",
    "HumidityMode",
    "RunningState",
    "SystemMode",
    "UnitSystem",
    #
    "Command",
    "CommandDispatcher",
    "HttpTransport",
    "PublishResponseT",
    "SetpointRequest",
    "TransportT",
    "ZoneSession",
    "ZoneStatus",
    #
    "CommandInvalid",
    "CommandRejected",
    "IComfortException",
    "ProtocolError",
    "TelemetryInvalid",
    "TransportClientError",
    "TransportError",
    "UpdateInProgress",
    #
    "c_to_f",
    "f_to_c",
    "infer_unit_system",
    "parse_telemetry",
    "set_logging",
    "temp_to_c",
    "temp_to_f",
]
