from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """One subscriber's view of a :class:`StateChannel`.

    Values arrive in publication order. Iterate with ``async for`` or poll
    with :meth:`get_nowait` / :meth:`drain`.
    """

    def __init__(self, channel: StateChannel[T]) -> None:
        self._channel = channel
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    def _push(self, value: object) -> None:
        self._queue.put_nowait(value)

    def get_nowait(self) -> T:
        value = self._queue.get_nowait()
        if value is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise asyncio.QueueEmpty
        return value  # type: ignore[return-value]

    def drain(self) -> list[T]:
        items: list[T] = []
        while True:
            try:
                items.append(self.get_nowait())
            except asyncio.QueueEmpty:
                return items

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._channel._unsubscribe(self)
        self._push(_CLOSED)

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        value = await self._queue.get()
        if value is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return value  # type: ignore[return-value]


class StateChannel(Generic[T]):
    """A single observable field: the current value plus a fan-out of changes."""

    def __init__(self, name: str, initial: T) -> None:
        self._name = name
        self._value = initial
        self._subscribers: list[Subscription[T]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> T:
        return self._value

    def publish(self, value: T) -> None:
        self._value = value
        for sub in list(self._subscribers):
            sub._push(value)

    def subscribe(self, *, replay: bool = False) -> Subscription[T]:
        sub: Subscription[T] = Subscription(self)
        self._subscribers.append(sub)
        if replay:
            sub._push(self._value)
        return sub

    def close(self) -> None:
        for sub in list(self._subscribers):
            sub.close()

    def _unsubscribe(self, sub: Subscription[T]) -> None:
        try:
            self._subscribers.remove(sub)
        except ValueError:
            pass

    def __repr__(self) -> str:
        return f"StateChannel({self._name!r}, value={self._value!r})"
