"""Cancellable cooperative delays.

A benchmark (or clone) waiting between cycles holds exactly one pending
timer. Cancelling it drops the scheduled callback and wakes the waiting
coroutine immediately, so the coroutine can observe the abort and unwind
instead of hanging or firing late.
"""

from __future__ import annotations

import asyncio
from typing import Any


async def delay(owner: Any, seconds: float) -> None:
    """Sleep for ``seconds`` on the running loop, cancellable via cancel_delay()."""
    loop = asyncio.get_running_loop()
    waiter: asyncio.Future[None] = loop.create_future()
    handle = loop.call_later(max(seconds, 0.0), _wake, waiter)
    owner._timer = (handle, waiter)
    try:
        await waiter
    finally:
        if getattr(owner, "_timer", None) == (handle, waiter):
            owner._timer = None


def cancel_delay(owner: Any) -> bool:
    """Cancel the pending delay of ``owner``.

    Returns:
        True if a delay was pending.
    """
    timer = getattr(owner, "_timer", None)
    if timer is None:
        return False
    handle, waiter = timer
    handle.cancel()
    _wake(waiter)
    owner._timer = None
    return True


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)
