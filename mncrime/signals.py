"""Signals shared between area aggregates and whatever renders them."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)


class OneShotSignal:
    """
    Completion signal that fires at most once.

    Callbacks connected before the signal fires run when it fires; callbacks
    connected afterwards run immediately. Coroutines can `await wait()`.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.fired = False
        self._callbacks: List[Callable[[], Any]] = []
        self._event: Optional[asyncio.Event] = None

    def connect(self, callback: Callable[[], Any]) -> None:
        if self.fired:
            callback()
            return
        self._callbacks.append(callback)

    def emit(self) -> bool:
        """Fire the signal. Returns False if it had already fired."""
        if self.fired:
            return False
        self.fired = True
        logger.debug(f"Signal '{self.name}' fired for {len(self._callbacks)} listeners")
        callbacks, self._callbacks = self._callbacks, []
        try:
            for callback in callbacks:
                callback()
        finally:
            if self._event is not None:
                self._event.set()
        return True

    async def wait(self) -> None:
        if self.fired:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()


class CategoryContext:
    """The app-wide "current category", with change notifications."""

    def __init__(self, category: Optional[str] = None) -> None:
        self._category = category
        self._subscribers: List[Callable[[Optional[str]], Any]] = []

    @property
    def category(self) -> Optional[str]:
        return self._category

    @category.setter
    def category(self, value: Optional[str]) -> None:
        if value == self._category:
            return
        self._category = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[Optional[str]], Any]) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
