#!/usr/bin/env python3
"""iComfort - helpers for testing (incl. a mocked transport)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from icomfort_tx import Command, PublishResponseT


TEST_DIR = Path(__file__).resolve().parent  # TEST_DIR = f"{os.path.dirname(__file__)}"
TELEMETRY_DIR = TEST_DIR / "telemetry"

SYSTEM_ID: Final = "SYS0000000000001"
SENDER_ID: Final = "mapp1700000000000_tester"

ACCEPTED: Final[dict[str, Any]] = {"code": 1, "message": "", "retry_after": 0}


def load_telemetry(name: str) -> dict[str, Any]:
    """Return a telemetry test case: its payload, unit override & expected statuses."""

    with open(TELEMETRY_DIR / f"{name}.json") as f:
        return json.load(f)  # type: ignore[no-any-return]


def period_of(cmd: Command) -> dict[str, Any]:
    """Return the (only) period of a schedule command."""
    schedule = cmd.data["schedules"][0]["schedule"]
    return schedule["periods"][0]["period"]  # type: ignore[no-any-return]


def hold_of(cmd: Command) -> dict[str, Any]:
    """Return the schedule hold of a hold command."""
    return cmd.data["zones"][0]["config"]["scheduleHold"]  # type: ignore[no-any-return]


class MockTransport:
    """A mocked transport: records what is published, and replies as scripted.

    Each response is either a dict (returned), or an exception (raised). Once the
    scripted responses are exhausted, every command is accepted.
    """

    def __init__(
        self,
        telemetry: Any = None,
        responses: list[Any] | None = None,
        *,
        delay: float = 0.0,
    ) -> None:
        self.telemetry = telemetry
        self.responses = list(responses or [])
        self.delay = delay

        self.published: list[Command] = []
        self.fetches = 0
        self.closed = False

    def __repr__(self) -> str:
        return f"MockTransport(published={len(self.published)})"

    async def publish(self, cmd: Command) -> PublishResponseT:
        self.published.append(cmd)

        if self.delay:
            await asyncio.sleep(self.delay)

        if not self.responses:
            return dict(ACCEPTED)  # type: ignore[return-value]

        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response  # type: ignore[no-any-return]

    async def fetch_telemetry(self) -> Any:
        self.fetches += 1

        if isinstance(self.telemetry, BaseException):
            raise self.telemetry
        return self.telemetry

    async def close(self) -> None:
        self.closed = True
