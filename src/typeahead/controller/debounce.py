"""Input debouncing on top of reactivex timers.

Each observed value replaces the pending one and restarts the quiet-period
timer; only a value that survives its full delay is emitted. Disposing the
subscription cancels the pending timer, so nothing settles after teardown.
"""

from __future__ import annotations

import asyncio
from typing import Callable

import reactivex as rx
from reactivex import operators as ops
from reactivex.abc import DisposableBase, SchedulerBase
from reactivex.disposable import CompositeDisposable
from reactivex.scheduler.eventloop import AsyncIOScheduler
from reactivex.subject import Subject


class Debouncer:
    """Collapse bursts of raw input into single settled values.

    ``observe()`` may pass a per-call delay; otherwise the delay given at
    construction applies. A delay of 0 settles on the next loop tick,
    never synchronously.

    Usage::

        debouncer = Debouncer(0.3)
        dispose = debouncer.subscribe(print)
        debouncer.observe("sh")
        debouncer.observe("shoe")   # only "shoe" is printed, 300ms later
        ...
        dispose.dispose()           # pending timer cancelled
    """

    def __init__(self, delay: float = 0.3, scheduler: SchedulerBase | None = None) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self._delay = delay
        self._scheduler = scheduler
        self._subject: Subject = Subject()
        self._subscriptions = CompositeDisposable()

    @property
    def delay(self) -> float:
        return self._delay

    def observe(self, raw_value: str, delay: float | None = None) -> None:
        """Feed a raw value, (re)starting the quiet-period timer."""
        self._subject.on_next((raw_value, self._delay if delay is None else delay))

    def subscribe(self, on_settled: Callable[[str], None]) -> DisposableBase:
        """Receive settled values; returns the disposer that cancels pending timers.

        Must be called with a running event loop unless a scheduler was
        supplied at construction.
        """
        scheduler = self._scheduler or AsyncIOScheduler(asyncio.get_running_loop())

        def settle_after(item: tuple[str, float]):
            value, delay = item
            return rx.timer(delay, scheduler=scheduler).pipe(ops.map(lambda _: value))

        subscription = self._subject.pipe(
            ops.switch_map(settle_after),
        ).subscribe(on_next=on_settled)
        self._subscriptions.add(subscription)
        return subscription

    def dispose(self) -> None:
        """Cancel every subscription and its pending timer."""
        self._subscriptions.dispose()
