#!/usr/bin/env python3
"""iComfort - Test the command dispatcher (retries, rejections & zone locking)."""

import asyncio

import pytest

from icomfort_tx import (
    Command,
    CommandDispatcher,
    SetpointRequest,
    ZoneSession,
    exceptions as exc,
)
from icomfort_tx.const import FanMode, SystemMode

from .helpers import ACCEPTED, SENDER_ID, SYSTEM_ID, MockTransport

REQUEST = SetpointRequest(SystemMode.HEAT_COOL, 68.0, 74.0, FanMode.AUTO)


def _hold_cmd(schedule_id: int = 32) -> Command:
    return Command.set_schedule_hold(SENDER_ID, SYSTEM_ID, 0, schedule_id)


def _schedule_cmd(schedule_id: int = 32) -> Command:
    return Command(
        SENDER_ID,
        SYSTEM_ID,
        {"schedules": [{"schedule": {"periods": []}, "id": schedule_id}]},
        verb="set_schedule_period",
    )


@pytest.fixture()
def delays(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Don't sleep, but record the delays that would have been slept."""

    result: list[float] = []

    async def fake_sleep(delay: float) -> None:
        result.append(delay)

    monkeypatch.setattr("icomfort_tx.protocol.asyncio.sleep", fake_sleep)
    return result


def test_dispatcher_config() -> None:
    with pytest.raises(ValueError):
        CommandDispatcher(MockTransport(), max_retries=0)
    with pytest.raises(ValueError):
        CommandDispatcher(MockTransport(), max_retries=11)

    dispatcher = CommandDispatcher(MockTransport())
    assert dispatcher.max_retries == 3
    assert dispatcher.retry_backoff == 1.0
    assert dispatcher.settle_delay == 0.5
    assert dispatcher.lock_timeout == 5.0


async def test_publish_accepted() -> None:
    transport = MockTransport()
    cmd = _hold_cmd()

    assert await CommandDispatcher(transport).publish(cmd) == ACCEPTED
    assert transport.published == [cmd]


async def test_publish_retried(delays: list[float]) -> None:
    """Transient failures are retried (with backoff), re-using the same envelope."""

    transport = MockTransport(
        responses=[exc.TransportError("timed out"), exc.TransportError("503")]
    )
    cmd = _hold_cmd()

    assert await CommandDispatcher(transport).publish(cmd) == ACCEPTED

    assert delays == [1.0, 2.0]
    assert transport.published == [cmd, cmd, cmd]


async def test_publish_exhausted(delays: list[float]) -> None:
    transport = MockTransport(responses=[exc.TransportError("down")] * 5)
    dispatcher = CommandDispatcher(transport, max_retries=4, retry_backoff=0.5)

    with pytest.raises(exc.TransportError):
        await dispatcher.publish(_hold_cmd())

    assert delays == [0.5, 1.0, 2.0]
    assert len(transport.published) == 4


async def test_publish_single_attempt(delays: list[float]) -> None:
    transport = MockTransport(responses=[exc.TransportError("down")])

    with pytest.raises(exc.TransportError):
        await CommandDispatcher(transport, max_retries=1).publish(_hold_cmd())

    assert delays == []
    assert len(transport.published) == 1


async def test_publish_client_error(delays: list[float]) -> None:
    """Client errors (4xx) are not retried."""

    transport = MockTransport(responses=[exc.TransportClientError("401", status=401)])

    with pytest.raises(exc.TransportClientError) as exc_info:
        await CommandDispatcher(transport).publish(_hold_cmd())

    assert exc_info.value.status == 401
    assert delays == []
    assert len(transport.published) == 1


async def test_publish_rejected(delays: list[float]) -> None:
    """A rejection is not retried (the device may be busy: retry_after is a hint)."""

    response = {"code": 0, "message": "busy", "retry_after": 5}
    transport = MockTransport(responses=[response])

    with pytest.raises(exc.CommandRejected) as exc_info:
        await CommandDispatcher(transport).publish(_hold_cmd())

    assert exc_info.value.code == 0
    assert exc_info.value.retry_after == 5
    assert delays == []
    assert len(transport.published) == 1


@pytest.mark.parametrize("response", [None, "OK", [], {}, {"code": "1"}])
async def test_publish_invalid_response(response: object) -> None:
    transport = MockTransport(responses=[response])

    with pytest.raises(exc.CommandRejected):
        await CommandDispatcher(transport).publish(_hold_cmd())


async def test_send_setpoint_cmds(delays: list[float]) -> None:
    """The schedule is replaced first, then (after settling) the zone is held."""

    transport = MockTransport()
    dispatcher = CommandDispatcher(transport, settle_delay=0.25)
    session = ZoneSession(0, schedule_id=1)

    schedule_cmd, hold_cmd = _schedule_cmd(), _hold_cmd()

    async with dispatcher.zone_lock(session, REQUEST) as is_needed:
        assert is_needed
        assert session.pending_request == REQUEST
        await dispatcher.send_setpoint_cmds(session, schedule_cmd, hold_cmd, REQUEST)

    assert transport.published == [schedule_cmd, hold_cmd]
    assert delays == [0.25]

    assert session.schedule_id == 32
    assert session.applied_request == REQUEST
    assert session.pending_request is None
    assert not session.lock.locked()


async def test_send_setpoint_cmds_without_hold(delays: list[float]) -> None:
    transport = MockTransport()
    dispatcher = CommandDispatcher(transport)
    session = ZoneSession(0, schedule_id=16)

    async with dispatcher.zone_lock(session, REQUEST):
        await dispatcher.send_setpoint_cmds(session, _schedule_cmd(16), None, REQUEST)

    assert len(transport.published) == 1
    assert delays == []
    assert session.schedule_id == 16


async def test_send_setpoint_cmds_rejected() -> None:
    """A failed update leaves the session's state as it was."""

    transport = MockTransport(responses=[ACCEPTED, {"code": 2, "message": "no"}])
    dispatcher = CommandDispatcher(transport, settle_delay=0)
    session = ZoneSession(0, schedule_id=1)

    with pytest.raises(exc.CommandRejected):
        async with dispatcher.zone_lock(session, REQUEST):
            await dispatcher.send_setpoint_cmds(
                session, _schedule_cmd(), _hold_cmd(), REQUEST
            )

    assert len(transport.published) == 2
    assert session.schedule_id == 1
    assert session.applied_request is None
    assert session.pending_request is None
    assert not session.lock.locked()


async def test_send_setpoint_cmds_unlocked() -> None:
    transport = MockTransport()
    dispatcher = CommandDispatcher(transport)

    with pytest.raises(RuntimeError):
        await dispatcher.send_setpoint_cmds(
            ZoneSession(0), _schedule_cmd(), None, REQUEST
        )

    assert transport.published == []


async def test_zone_lock_timeout() -> None:
    dispatcher = CommandDispatcher(MockTransport(), lock_timeout=0.01)
    session = ZoneSession(0)

    await session.lock.acquire()  # another update is in flight

    with pytest.raises(exc.UpdateInProgress):
        async with dispatcher.zone_lock(session, REQUEST):
            pytest.fail("the lock should not have been obtained")

    assert session.lock.locked()
    session.lock.release()


async def test_zone_lock_timeout_after_release() -> None:
    """A request that queues behind a woken waiter still waits only lock_timeout."""

    dispatcher = CommandDispatcher(MockTransport(), lock_timeout=0.05)
    session = ZoneSession(0)

    other = REQUEST._replace(heat_setpoint=69.0)
    latest = REQUEST._replace(heat_setpoint=70.0)

    async def slow_update() -> None:
        async with dispatcher.zone_lock(session, other):
            await asyncio.sleep(0.5)

    async with dispatcher.zone_lock(session, REQUEST):
        waiter = asyncio.create_task(slow_update())
        await asyncio.sleep(0)  # the waiter is now queued for the lock

    assert not session.lock.locked()  # released, but promised to the waiter

    loop = asyncio.get_running_loop()
    started = loop.time()

    with pytest.raises(exc.UpdateInProgress):
        async with dispatcher.zone_lock(session, latest):
            pytest.fail("the lock should not have been obtained")

    assert loop.time() - started < 0.4
    assert session.lock.locked()  # held by the waiter

    await waiter
    assert not session.lock.locked()


async def test_zone_lock_released() -> None:
    dispatcher = CommandDispatcher(MockTransport())
    session = ZoneSession(0)

    with pytest.raises(ZeroDivisionError):
        async with dispatcher.zone_lock(session, REQUEST):
            _ = 1 / 0

    assert not session.lock.locked()
    assert session.pending_request is None

    async with dispatcher.zone_lock(session, REQUEST) as is_needed:
        assert is_needed


async def test_zone_lock_identical_requests() -> None:
    """An identical request, that was in flight, is not sent twice."""

    transport = MockTransport(delay=0.01)
    dispatcher = CommandDispatcher(transport, settle_delay=0)
    session = ZoneSession(0)

    async def update(request: SetpointRequest) -> bool:
        async with dispatcher.zone_lock(session, request) as is_needed:
            if is_needed:
                await dispatcher.send_setpoint_cmds(
                    session, _schedule_cmd(), None, request
                )
            return is_needed

    other = REQUEST._replace(heat_setpoint=69.0)

    assert await asyncio.gather(update(REQUEST), update(REQUEST)) == [True, False]
    assert len(transport.published) == 1

    assert await asyncio.gather(update(REQUEST), update(other)) == [True, True]
    assert len(transport.published) == 3

    # not in flight at the time, so it is sent again
    assert await update(other) is True
    assert len(transport.published) == 4
