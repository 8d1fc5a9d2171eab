#!/usr/bin/env python3
"""iComfort - the command dispatcher (publishing, with retries & per-zone locking)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from . import exceptions as exc
from .const import (
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_SETTLE_DELAY,
    MAX_RETRY_LIMIT,
    RESPONSE_CODE_ACCEPTED,
    SZ_CODE,
    SZ_MESSAGE,
    SZ_RETRY_AFTER,
)

if TYPE_CHECKING:
    from .command import Command
    from .typing import PublishResponseT, SetpointRequest, TransportT, ZoneSession


_LOGGER = logging.getLogger(__name__)


class CommandDispatcher:
    """Publish commands via a transport, and serialise the updates of each zone.

    Transient (transport) failures are retried with an exponential backoff, but
    client errors (4xx) and protocol rejections (code != 1) are not.
    """

    def __init__(
        self,
        transport: TransportT,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        """Create a CommandDispatcher instance."""

        if not 1 <= max_retries <= MAX_RETRY_LIMIT:
            raise ValueError(f"max_retries must be 1-{MAX_RETRY_LIMIT}: {max_retries}")

        self._transport = transport

        self.max_retries = max_retries  # attempts, incl. the 1st
        self.retry_backoff = retry_backoff
        self.settle_delay = settle_delay
        self.lock_timeout = lock_timeout

    def __repr__(self) -> str:
        return (
            f"CommandDispatcher(max_retries={self.max_retries},"
            f" retry_backoff={self.retry_backoff}, lock_timeout={self.lock_timeout})"
        )

    @staticmethod
    def _validate_response(cmd: Command, response: Any) -> PublishResponseT:
        """Return the response if the command was accepted, else raise an exception."""

        if not isinstance(response, dict):
            raise exc.CommandRejected(f"{cmd} < Invalid response: {response!r}")

        code = response.get(SZ_CODE)
        if code != RESPONSE_CODE_ACCEPTED:
            raise exc.CommandRejected(
                f"{cmd} < Rejected (code={code}): {response.get(SZ_MESSAGE)}",
                code=code,
                retry_after=response.get(SZ_RETRY_AFTER),
            )

        return response  # type: ignore[return-value]

    async def publish(self, cmd: Command) -> PublishResponseT:
        """Publish a command, retrying transient failures, and return the response.

        Each attempt publishes the same envelope (i.e. the same message id).
        """

        _LOGGER.info("Sending: %s", cmd)
        _LOGGER.debug("Sending: %s < %s", cmd, cmd.to_json())

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self._transport.publish(cmd)

            except exc.TransportClientError as err:
                _LOGGER.error("%s < Failed to publish (not retried): %s", cmd, err)
                raise

            except exc.TransportError as err:
                if attempt >= self.max_retries:
                    _LOGGER.error(
                        "%s < Failed to publish after %s attempt(s): %s",
                        cmd,
                        attempt,
                        err,
                    )
                    raise

                delay = self.retry_backoff * 2 ** (attempt - 1)
                _LOGGER.warning(
                    "%s < Failed to publish (attempt %s of %s), retrying in %ss: %s",
                    cmd,
                    attempt,
                    self.max_retries,
                    delay,
                    err,
                )
                await asyncio.sleep(delay)
                continue

            try:
                result = self._validate_response(cmd, response)
            except exc.CommandRejected as err:
                _LOGGER.error("%s", err)
                raise

            _LOGGER.debug("%s < Accepted: %s", cmd, response)
            return result

        raise exc.ProtocolError(f"{cmd} < Not published")  # max_retries is always >= 1

    @asynccontextmanager
    async def zone_lock(
        self, session: ZoneSession, request: SetpointRequest
    ) -> AsyncIterator[bool]:
        """Obtain the zone's lock for the duration of an update.

        Yields False if the update is not needed (an identical request, in flight
        when this one arrived, has since been applied), else True.

        Raises UpdateInProgress if the lock is not obtained within lock_timeout: the
        request is abandoned rather than queued.
        """

        in_flight = session.pending_request

        # the lock may be free, but still promised to a waiter
        try:
            async with asyncio.timeout(self.lock_timeout):
                await session.lock.acquire()  # if uncontended, doesn't yield
        except TimeoutError as err:
            raise exc.UpdateInProgress(
                f"Zone {session.zone_id}: another update is in flight,"
                f" abandoning: {request}"
            ) from err

        try:
            if in_flight is not None and in_flight == request == (
                session.applied_request
            ):
                _LOGGER.info(
                    "Zone %s: identical request was just applied: %s",
                    session.zone_id,
                    request,
                )
                yield False
                return

            session.pending_request = request
            yield True

        finally:
            session.pending_request = None
            session.lock.release()

    async def send_setpoint_cmds(
        self,
        session: ZoneSession,
        schedule_cmd: Command,
        hold_cmd: Command | None,
        request: SetpointRequest,
    ) -> None:
        """Publish the schedule command then, after a settle delay, any hold command.

        Must be awaited while holding the zone's lock. On success the session's
        schedule id becomes the target schedule id.
        """

        if not session.lock.locked():
            raise RuntimeError(f"Zone {session.zone_id}: lock not held")

        await self.publish(schedule_cmd)

        if hold_cmd is not None:
            await asyncio.sleep(self.settle_delay)
            await self.publish(hold_cmd)

        session.schedule_id = schedule_cmd.schedule_id
        session.applied_request = request

        _LOGGER.info(
            "Zone %s: update applied (schedule_id=%s): %s",
            session.zone_id,
            session.schedule_id,
            request,
        )
