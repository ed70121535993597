"""Observation streams.

A small push-based stream toolkit: a subject that replays its current value to
new subscribers and then forwards every update, plus cancellable subscription
handles. Delivery is synchronous on the sender's thread.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from loguru import logger

T = TypeVar("T")
U = TypeVar("U")


class Subscription:
    """Handle returned by ``Observable.subscribe``.

    ``cancel()`` is synchronous-effective: once it returns the callback is
    never invoked again, even if a delivery was in flight on another thread.
    """

    def __init__(self, callback: Callable[[Any], None], on_cancel: Callable[[], None] | None = None):
        self._callback = callback
        self._on_cancel = on_cancel
        self._lock = threading.RLock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, value: Any) -> None:
        with self._lock:
            if not self._active:
                return
            self._callback(value)

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        if self._on_cancel is not None:
            self._on_cancel()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()


class CompositeSubscription(Subscription):
    """Cancels a group of subscriptions together."""

    def __init__(self, *subscriptions: Subscription):
        super().__init__(lambda _: None)
        self._children = list(subscriptions)

    def add(self, subscription: Subscription) -> None:
        self._children.append(subscription)

    def cancel(self) -> None:
        for child in self._children:
            child.cancel()
        self._children.clear()
        super().cancel()


class Observable(Generic[T]):
    """Something that can be subscribed to."""

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        raise NotImplementedError

    def map(self, fn: Callable[[T], U]) -> Observable[U]:
        return _MappedObservable(self, fn)


class _MappedObservable(Observable[U]):
    def __init__(self, source: Observable[T], fn: Callable[[T], U]):
        self._source = source
        self._fn = fn

    def subscribe(self, callback: Callable[[U], None]) -> Subscription:
        return self._source.subscribe(lambda value: callback(self._fn(value)))


class CurrentValueSubject(Observable[T]):
    """Subject holding a current value.

    Args:
        value: Initial value, replayed to the first subscribers.
        dedupe: Drop ``send`` calls whose value equals the current one.
        on_idle: Called after the last subscriber cancels.
    """

    def __init__(
        self,
        value: T,
        *,
        dedupe: bool = False,
        on_idle: Callable[[], None] | None = None,
    ):
        self._value = value
        self._dedupe = dedupe
        self._on_idle = on_idle
        self._lock = threading.RLock()
        self._subscriptions: list[Subscription] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def send(self, value: T) -> bool:
        """Publish a new value. Returns False when it was deduplicated."""
        with self._lock:
            if self._dedupe and value == self._value:
                return False
            self._value = value
            targets = list(self._subscriptions)
            for subscription in targets:
                self._deliver(subscription, value)
        return True

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        subscription: Subscription

        def _remove() -> None:
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)
                idle = not self._subscriptions
            if idle and self._on_idle is not None:
                self._on_idle()

        subscription = Subscription(callback, on_cancel=_remove)
        with self._lock:
            self._subscriptions.append(subscription)
            self._replay(subscription)
        return subscription

    def _replay(self, subscription: Subscription) -> None:
        self._deliver(subscription, self._value)

    @staticmethod
    def _deliver(subscription: Subscription, value: Any) -> None:
        # A failing subscriber must not starve the others or end the stream
        try:
            subscription.deliver(value)
        except Exception as e:
            logger.error(
                "Stream subscriber raised",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )


class PassthroughSubject(CurrentValueSubject[T]):
    """Subject without an initial value: nothing is replayed until a first send."""

    def __init__(self, *, on_idle: Callable[[], None] | None = None):
        super().__init__(None, on_idle=on_idle)  # type: ignore[arg-type]
        self._has_value = False

    def send(self, value: T) -> bool:
        with self._lock:
            self._has_value = True
            return super().send(value)

    def reset(self) -> None:
        """Forget the last value so new subscribers wait for the next send."""
        with self._lock:
            self._has_value = False
            self._value = None  # type: ignore[assignment]

    def _replay(self, subscription: Subscription) -> None:
        if self._has_value:
            self._deliver(subscription, self._value)
