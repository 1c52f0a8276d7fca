import asyncio

import pytest

from pgstream.task import TaskHandle, TaskStatus


@pytest.mark.asyncio
async def test_new_handle_is_idle():
    handle = TaskHandle()
    assert await handle.status() is TaskStatus.IDLE
    assert await handle.take_result() is None


@pytest.mark.asyncio
async def test_only_one_task_runs_at_a_time():
    handle = TaskHandle()
    sender = await handle.try_start()
    assert sender is not None
    assert await handle.status() is TaskStatus.RUNNING
    assert await handle.try_start() is None


@pytest.mark.asyncio
async def test_completed_result_is_taken_once():
    handle = TaskHandle()
    sender = await handle.try_start()
    sender.set_result("done")
    assert await handle.status() is TaskStatus.COMPLETED
    assert await handle.take_result() == "done"
    assert await handle.status() is TaskStatus.IDLE
    assert await handle.take_result() is None


@pytest.mark.asyncio
async def test_take_result_while_running_keeps_running():
    handle = TaskHandle()
    await handle.try_start()
    assert await handle.take_result() is None
    assert await handle.status() is TaskStatus.RUNNING


@pytest.mark.asyncio
async def test_cancelled_sender_returns_to_idle():
    handle = TaskHandle()
    sender = await handle.try_start()
    sender.cancel()
    assert await handle.status() is TaskStatus.IDLE
    assert await handle.try_start() is not None


@pytest.mark.asyncio
async def test_failed_sender_returns_to_idle():
    handle = TaskHandle()
    sender = await handle.try_start()
    sender.set_exception(RuntimeError("boom"))
    assert await handle.take_result() is None
    assert await handle.status() is TaskStatus.IDLE


@pytest.mark.asyncio
async def test_wait_returns_result_when_sent_later():
    handle = TaskHandle()
    sender = await handle.try_start()
    asyncio.get_running_loop().call_later(0.01, sender.set_result, 42)
    assert await handle.wait() == 42
    assert await handle.status() is TaskStatus.IDLE


@pytest.mark.asyncio
async def test_wait_on_idle_returns_none():
    handle = TaskHandle()
    assert await handle.wait() is None


@pytest.mark.asyncio
async def test_wait_on_completed_returns_result():
    handle = TaskHandle()
    sender = await handle.try_start()
    sender.set_result("ready")
    await handle.status()
    assert await handle.wait() == "ready"
    assert await handle.status() is TaskStatus.IDLE


@pytest.mark.asyncio
async def test_wait_with_cancelled_task_returns_none():
    handle = TaskHandle()
    sender = await handle.try_start()
    asyncio.get_running_loop().call_later(0.01, sender.cancel)
    assert await handle.wait() is None
    assert await handle.status() is TaskStatus.IDLE


@pytest.mark.asyncio
async def test_reset_cancels_running_task():
    handle = TaskHandle()
    await handle.try_start()
    await handle.reset()
    assert await handle.status() is TaskStatus.IDLE
    assert await handle.try_start() is not None


@pytest.mark.asyncio
async def test_start_after_completion_discards_old_result():
    handle = TaskHandle()
    first = await handle.try_start()
    first.set_result("old")
    second = await handle.try_start()
    assert second is not None
    assert await handle.take_result() is None
    second.set_result("new")
    assert await handle.take_result() == "new"