#!/usr/bin/env python3
"""iComfort - Protocol/Transport layer - Helper functions."""

from __future__ import annotations

import logging
import math
from datetime import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Final

from .const import SZ_AUTO, UnitSystem

_LOGGER = logging.getLogger(__name__)

# the unit inference thresholds
UNIT_MATCH_TOLERANCE: Final[float] = 2.0
RANGE_F: Final[tuple[float, float]] = (50.0, 90.0)
RANGE_C: Final[tuple[float, float]] = (10.0, 35.0)


def dt_now() -> dt:
    """Return the current datetime as a local/naive datetime object."""
    return dt.now()


def to_float(value: Any) -> float | None:
    """Return a float from a str/int/float telemetry value, or None if not a number.

    Telemetry values are often strings (e.g. "68", "20.5"), and sometimes empty.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) or math.isinf(result) else result


def to_int(value: Any) -> int | None:
    """Return an int from a telemetry value, or None if not a (whole) number."""
    result = to_float(value)
    return None if result is None else int(result)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round a value half away from zero (unlike round(), which is banker's)."""
    exponent = Decimal(1).scaleb(-ndigits)  # 1, 0.1, 0.01, ...
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def f_to_c(value: float) -> float:
    """Convert a temperature from Fahrenheit to Celsius (not rounded)."""
    return (value - 32) * 5 / 9


def c_to_f(value: float) -> float:
    """Convert a temperature from Celsius to Fahrenheit (not rounded)."""
    return value * 9 / 5 + 32


def temp_to_f(value: float, unit: UnitSystem) -> int:
    """Return a temperature as whole degrees Fahrenheit, as used by the protocol."""
    result = value if unit == UnitSystem.FAHRENHEIT else c_to_f(value)
    return int(round_half_up(result))


def temp_to_c(value: float, unit: UnitSystem) -> float:
    """Return a temperature as degrees Celsius to 0.1, as used by the protocol."""
    result = value if unit == UnitSystem.CELSIUS else f_to_c(value)
    return round_half_up(result, 1)


def _unit_from_range(value: float | None) -> UnitSystem | None:
    if value is None:
        return None
    if RANGE_F[0] <= value <= RANGE_F[1]:
        return UnitSystem.FAHRENHEIT
    if RANGE_C[0] <= value <= RANGE_C[1]:
        return UnitSystem.CELSIUS
    return None


def infer_unit_system(
    override: str | None = None,
    *,
    setpoint_f: Any = None,
    setpoint_c: Any = None,
    temperature: Any = None,
    reported: Any = None,
) -> UnitSystem:
    """Return the unit system of a telemetry snapshot.

    This is a best-effort heuristic, not a guarantee: in local mode the device never
    reports its unit system unambiguously.

    An explicit override (F/C) always wins, then any unit reported by the device
    (only the cloud user data has one). Otherwise:
      1. if both the F-labelled setpoint and its C-labelled counterpart are present,
         the C value being the conversion of the F value means F, and the C value
         being (nearly) the raw F-labelled value means that was already C
      2. else, a setpoint in 50-90 means F, in 10-35 means C
      3. else, the same ranges applied to the temperature reading
      4. else, F
    """

    if override and override != SZ_AUTO:
        return UnitSystem(override)

    if reported in (UnitSystem.FAHRENHEIT, UnitSystem.CELSIUS):
        return UnitSystem(reported)

    sp_f = to_float(setpoint_f)
    sp_c = to_float(setpoint_c)

    if sp_f is not None and sp_c is not None:
        if abs(f_to_c(sp_f) - sp_c) < UNIT_MATCH_TOLERANCE:
            return UnitSystem.FAHRENHEIT
        if abs(sp_c - sp_f) < UNIT_MATCH_TOLERANCE:
            return UnitSystem.CELSIUS

    setpoint = sp_f if sp_f is not None else sp_c
    if setpoint is not None:
        if unit := _unit_from_range(setpoint):
            return unit

    elif unit := _unit_from_range(to_float(temperature)):
        return unit

    _LOGGER.debug(
        "Unable to infer the unit system (setpoint=%s, temperature=%s), assuming F",
        setpoint,
        temperature,
    )
    return UnitSystem.FAHRENHEIT
