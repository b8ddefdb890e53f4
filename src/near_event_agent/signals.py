"""Typed callback registries used to wire components together."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Generic, TypeVar, Union

log = logging.getLogger(__name__)

T = TypeVar("T")

Handler = Callable[[T], Union[Awaitable[None], None]]


class Signal(Generic[T]):
    """A named, single-payload notification point.

    Handlers may be plain functions or coroutine functions. `emit` awaits
    each handler in connection order. Delivery is best-effort: a failing
    handler is logged and the remaining handlers still run.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Handler[T]] = []

    def connect(self, handler: Handler[T]) -> Handler[T]:
        """Register a handler. Returns it so this can be used as a decorator."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._handlers.append(handler)
        return handler

    def disconnect(self, handler: Handler[T]) -> bool:
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    async def emit(self, payload: T) -> int:
        """Deliver `payload` to every handler. Returns how many succeeded."""
        delivered = 0
        for handler in list(self._handlers):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as exc:
                log.warning("Handler error on signal %s: %s", self.name, exc, exc_info=True)
        return delivered


def clear_signals(owner: object) -> None:
    """Disconnect every handler from every Signal attribute of `owner`."""
    for value in vars(owner).values():
        if isinstance(value, Signal):
            value.clear()
