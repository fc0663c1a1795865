"""
Observable state holders, the coordinator result type and the
notification port.

Each piece of state lives in one Observable owned by one coordinator.
Subscribers are called synchronously on every set(); everything runs on
the single asyncio event loop so no locks are needed.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("State subscriber failed")

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register callback; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result[T]":
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        if not self.ok:
            raise self.error or RuntimeError("failed result without an error")
        return self.value  # type: ignore[return-value]


class Notifier(Protocol):
    """Transient user-visible message (a toast, a chat reply)."""

    async def notify(self, message: str) -> None:
        ...


class LogNotifier:
    async def notify(self, message: str) -> None:
        logger.info("Notification", extra={"notification": message})
