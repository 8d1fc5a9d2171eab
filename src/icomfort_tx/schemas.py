#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine.

Schema processor for the configuration of the dispatcher, transport & gateway.
"""

from __future__ import annotations

import logging
from typing import Any, Final

import voluptuous as vol

from .const import (
    DEFAULT_HOLD_DURATION,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_START_TIME,
    MAX_RETRY_LIMIT,
    SECS_PER_DAY,
    SZ_AUTO,
    ExpirationMode,
    UnitSystem,
)
from .transport import PUBLISH_URL, SYSTEMS_URL

_LOGGER = logging.getLogger(__name__)


#
# 1/3: Dispatcher configuration
SZ_LOCK_TIMEOUT: Final = "lock_timeout"
SZ_MAX_RETRIES: Final = "max_retries"
SZ_RETRY_BACKOFF: Final = "retry_backoff"
SZ_SETTLE_DELAY: Final = "settle_delay"

SCH_DISPATCHER_DICT = {
    vol.Optional(SZ_MAX_RETRIES, default=DEFAULT_MAX_RETRIES): vol.All(
        int, vol.Range(min=1, max=MAX_RETRY_LIMIT)
    ),
    vol.Optional(SZ_RETRY_BACKOFF, default=DEFAULT_RETRY_BACKOFF): vol.All(
        vol.Coerce(float), vol.Range(min=0, max=60)
    ),
    vol.Optional(SZ_SETTLE_DELAY, default=DEFAULT_SETTLE_DELAY): vol.All(
        vol.Coerce(float), vol.Range(min=0, max=10)
    ),
    vol.Optional(SZ_LOCK_TIMEOUT, default=DEFAULT_LOCK_TIMEOUT): vol.All(
        vol.Coerce(float), vol.Range(min=0, max=60)
    ),
}
SCH_DISPATCHER_CONFIG = vol.Schema(SCH_DISPATCHER_DICT, extra=vol.PREVENT_EXTRA)

_DISPATCHER_KEYS: Final = (
    SZ_MAX_RETRIES,
    SZ_RETRY_BACKOFF,
    SZ_SETTLE_DELAY,
    SZ_LOCK_TIMEOUT,
)


#
# 2/3: Transport configuration
SZ_PUBLISH_URL: Final = "publish_url"
SZ_REQUEST_TIMEOUT: Final = "request_timeout"
SZ_SYSTEMS_URL: Final = "systems_url"

SCH_TRANSPORT_DICT = {
    vol.Optional(SZ_REQUEST_TIMEOUT, default=DEFAULT_REQUEST_TIMEOUT): vol.All(
        vol.Coerce(float), vol.Range(min=1, max=300)
    ),
    vol.Optional(SZ_PUBLISH_URL, default=PUBLISH_URL): vol.Url(),
    vol.Optional(SZ_SYSTEMS_URL, default=SYSTEMS_URL): vol.Url(),
}
SCH_TRANSPORT_CONFIG = vol.Schema(SCH_TRANSPORT_DICT, extra=vol.PREVENT_EXTRA)


#
# 3/3: Gateway configuration
SZ_DEFAULT_START_TIME: Final = "default_start_time"
SZ_HOLD_DURATION: Final = "hold_duration"
SZ_HOLD_EXPIRATION: Final = "hold_expiration"
SZ_POLL_INTERVAL: Final = "poll_interval"
SZ_TEMPERATURE_UNIT: Final = "temperature_unit"
SZ_USERNAME: Final = "username"

SCH_GATEWAY_DICT = SCH_DISPATCHER_DICT | {
    vol.Optional(SZ_TEMPERATURE_UNIT, default=SZ_AUTO): vol.In(
        (SZ_AUTO, *(str(u) for u in UnitSystem))
    ),
    vol.Optional(SZ_HOLD_EXPIRATION, default=ExpirationMode.NEXT_PERIOD): vol.All(
        vol.In([str(m) for m in ExpirationMode]), vol.Coerce(ExpirationMode)
    ),
    vol.Optional(SZ_HOLD_DURATION, default=DEFAULT_HOLD_DURATION): vol.All(
        int, vol.Range(min=1, max=24 * 7)
    ),  # hours, only for timed holds
    vol.Optional(SZ_DEFAULT_START_TIME, default=DEFAULT_START_TIME): vol.All(
        int, vol.Range(min=0, max=SECS_PER_DAY - 1)
    ),
    vol.Optional(SZ_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL): vol.All(
        int, vol.Range(min=5, max=3600)
    ),
    vol.Optional(SZ_USERNAME, default=None): vol.Any(None, str),
}
SCH_GATEWAY_CONFIG = vol.Schema(SCH_GATEWAY_DICT, extra=vol.PREVENT_EXTRA)


def dispatcher_kwargs(config: dict[str, Any]) -> dict[str, Any]:
    """Return the subset of a (validated) config that is for the dispatcher."""
    return {k: v for k, v in config.items() if k in _DISPATCHER_KEYS}
