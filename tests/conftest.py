#!/usr/bin/env python3
"""Fixtures for testing."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest

from icomfort import Gateway

from .helpers import SYSTEM_ID, MockTransport, load_telemetry

# no delays between (or before the retry of) commands
GWY_CONFIG: dict[str, Any] = {
    "retry_backoff": 0,
    "settle_delay": 0,
    "lock_timeout": 1,
}


@pytest.fixture()
def transport() -> MockTransport:
    """Return a mocked transport, with the telemetry of a two-zone (cloud) system."""
    return MockTransport(telemetry=load_telemetry("substatus")["payload"])


@pytest.fixture()
async def gwy(transport: MockTransport) -> AsyncGenerator[Gateway, None]:
    """Return a gateway, with the initial telemetry of its zones (but not polling)."""

    gwy = Gateway(transport, SYSTEM_ID, config=GWY_CONFIG)
    await gwy.start(start_polling=False)

    try:
        yield gwy
    finally:
        await gwy.stop()
