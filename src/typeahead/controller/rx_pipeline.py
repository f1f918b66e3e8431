"""Bridge between asyncio coroutines and reactivex observables.

``switch_map`` only disposes the inner subscription of a superseded item;
it knows nothing about asyncio. ``defer_task`` ties the two together so
that disposing the subscription cancels the running page fetch.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import reactivex as rx
from reactivex import Observable
from reactivex.abc import DisposableBase, ObserverBase, SchedulerBase
from reactivex.disposable import Disposable

T = TypeVar("T")


def defer_task(
    coro_factory: Callable[[], Awaitable[T]],
    loop: asyncio.AbstractEventLoop | None = None,
) -> Observable[T]:
    """Run ``coro_factory()`` as a Task for each subscription.

    Emits the task's result once and completes, or errors with the task's
    exception. Disposing the subscription cancels the task; a cancelled
    task emits nothing at all.

    Args:
        coro_factory: Zero-argument callable returning an awaitable.
        loop: Event loop for the task. Defaults to the running loop.
    """

    def subscribe(
        observer: ObserverBase[T], scheduler: SchedulerBase | None = None
    ) -> DisposableBase:
        task = asyncio.ensure_future(coro_factory(), loop=loop or asyncio.get_running_loop())

        def relay(done: asyncio.Future) -> None:
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                observer.on_error(error)
                return
            observer.on_next(done.result())
            observer.on_completed()

        task.add_done_callback(relay)
        return Disposable(task.cancel)

    return rx.create(subscribe)
