"""Sequential method invocation across a collection of benchmarks.

invoke() calls one method (usually ``run``) on every item in order and
reports progress through ``start``, ``cycle`` and ``complete`` callbacks.
A ``cycle`` callback that sets ``event.aborted`` skips the remaining items;
``complete`` still fires exactly once.

With ``queued=True`` the collection is treated as a work queue: the front
item is removed once it finished, and items appended while running (for
example by an ``on_cycle`` callback) are picked up.

Usage:
    invoke(suite, "reset")
    invoke(queue, "run", queued=True, on_cycle=evaluate)
    await invoke_async(suite, "run", on_complete=done)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from benchly.events import Event, EventEmitter
from benchly.models.constants import EventType
from benchly.timing.timers import delay
from benchly.utils.logger import Logger

logger = Logger.for_module(__name__)

Callback = Callable[[Event], Any]


def _fire(callback: Callback | None, event: Event) -> None:
    if callback is not None:
        callback(event)


def _is_async(item: Any, name: str) -> bool:
    """Whether running ``item`` must yield to the event loop first."""
    return (
        name == "run"
        and isinstance(item, EventEmitter)
        and bool(getattr(item, "asynchronous", False) or getattr(item, "defer", False))
    )


def _next_item(collection: Any, items: list[Any], index: int, queued: bool) -> Any | None:
    """Advance past the item at ``index - 1``; return the next item or None."""
    if queued:
        if index > 0 and len(collection):
            collection.pop(0)
        return collection[0] if len(collection) else None
    return items[index] if index < len(items) else None


def _call(item: Any, name: str, args: tuple[Any, ...]) -> Any:
    method = getattr(item, name, None)
    return method(*args) if callable(method) else None


def invoke(
    collection: Any,
    name: str,
    *args: Any,
    queued: bool = False,
    on_start: Callback | None = None,
    on_cycle: Callback | None = None,
    on_complete: Callback | None = None,
) -> list[Any]:
    """Call ``name(*args)`` on each item of ``collection`` in order.

    Args:
        collection: List-like sequence of items (a list or a Suite).
        name: Method to call on every item.
        *args: Arguments passed to the method.
        queued: Pop finished items from the front of the live collection.
        on_start: Called once before the first item.
        on_cycle: Called after every item; may set ``event.aborted``.
        on_complete: Called once after the last item (or after an abort).

    Returns:
        Return values of the calls, in call order.
    """
    results: list[Any] = []
    items = list(collection)
    index = 0
    item = _next_item(collection, items, index, queued)

    if item is None:
        _fire(on_complete, Event(EventType.COMPLETE, current_target=collection))
        return results

    _fire(on_start, Event(EventType.START, target=item, current_target=collection))

    # An aborted suite finishes without running anything
    if name == "run" and getattr(collection, "aborted", False):
        _fire(on_cycle, Event(EventType.CYCLE, target=item, current_target=collection))
        _fire(on_complete, Event(EventType.COMPLETE, target=item, current_target=collection))
        return results

    while True:
        results.append(_call(item, name, args))
        cycle_event = Event(EventType.CYCLE, target=item, current_target=collection)
        _fire(on_cycle, cycle_event)
        if cycle_event.aborted:
            logger.debug(f"Invocation of '{name}' stopped after {index + 1} item(s)")
            break
        index += 1
        following = _next_item(collection, items, index, queued)
        if following is None:
            break
        item = following

    _fire(on_complete, Event(EventType.COMPLETE, target=item, current_target=collection))
    return results


async def _run_item(item: EventEmitter, args: tuple[Any, ...]) -> Any:
    """Await ``item.run_async()`` until the item emits ``complete``.

    The completion listener is placed ahead of the item's own ``complete``
    listeners so it still fires when one of those aborts the event.
    """
    loop = asyncio.get_running_loop()
    done: asyncio.Future[None] = loop.create_future()

    def on_done(event: Event, *_: Any) -> None:
        if not done.done():
            done.set_result(None)

    item.listeners(EventType.COMPLETE).insert(0, on_done)
    task = asyncio.ensure_future(item.run_async(*args))
    try:
        await asyncio.wait({task, done}, return_when=asyncio.FIRST_COMPLETED)
        return await task
    finally:
        item.off(EventType.COMPLETE, on_done)
        if not done.done():
            done.cancel()


async def invoke_async(
    collection: Any,
    name: str,
    *args: Any,
    queued: bool = False,
    on_start: Callback | None = None,
    on_cycle: Callback | None = None,
    on_complete: Callback | None = None,
) -> list[Any]:
    """Asynchronous variant of invoke().

    ``run`` is dispatched to ``run_async()`` on emitter items, and items that
    are asynchronous or deferred are preceded by a pause of ``item.delay``
    seconds so other tasks on the loop get a turn.
    """
    results: list[Any] = []
    items = list(collection)
    index = 0
    item = _next_item(collection, items, index, queued)

    if item is None:
        _fire(on_complete, Event(EventType.COMPLETE, current_target=collection))
        return results

    _fire(on_start, Event(EventType.START, target=item, current_target=collection))

    if name == "run" and getattr(collection, "aborted", False):
        _fire(on_cycle, Event(EventType.CYCLE, target=item, current_target=collection))
        _fire(on_complete, Event(EventType.COMPLETE, target=item, current_target=collection))
        return results

    while True:
        if _is_async(item, name):
            await delay(item, item.delay)
        if name == "run" and isinstance(item, EventEmitter) and hasattr(item, "run_async"):
            results.append(await _run_item(item, args))
        else:
            results.append(_call(item, name, args))
        cycle_event = Event(EventType.CYCLE, target=item, current_target=collection)
        _fire(on_cycle, cycle_event)
        if cycle_event.aborted:
            logger.debug(f"Invocation of '{name}' stopped after {index + 1} item(s)")
            break
        index += 1
        following = _next_item(collection, items, index, queued)
        if following is None:
            break
        item = following

    _fire(on_complete, Event(EventType.COMPLETE, target=item, current_target=collection))
    return results
