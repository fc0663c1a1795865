"""
Per-user guards for chat uploads.
- UploadThrottle: sliding-window quota plus one upload in flight per user.
- PendingCovers: cover images waiting for their audio, bounded and expiring.
Safe for asyncio without locks: single-threaded event loop.
"""
import time
from collections import OrderedDict, defaultdict, deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, Optional, TypeVar

from sangeet.config.settings import settings

V = TypeVar("V")


class UploadRejected(Exception):
    pass


class UploadQuotaExceeded(UploadRejected):
    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__(f"Upload quota exceeded. Retry after {retry_after:.0f}s")


class UploadInProgress(UploadRejected):
    def __init__(self):
        super().__init__("Previous upload is still running")


class UploadThrottle:
    def __init__(
        self,
        max_uploads: int = settings.UPLOAD_RATE_LIMIT_REQUESTS,
        window_seconds: int = settings.UPLOAD_RATE_LIMIT_WINDOW_SECONDS,
    ):
        self._max = max_uploads
        self._window = window_seconds
        self._started: dict[str, deque[float]] = defaultdict(deque)
        self._in_flight: set[str] = set()

    @asynccontextmanager
    async def slot(self, user_id: str) -> AsyncIterator[None]:
        """
        Hold the user's upload slot for the body of the block.
        Raises UploadInProgress or UploadQuotaExceeded without consuming quota.
        """
        if user_id in self._in_flight:
            raise UploadInProgress()
        self._consume(user_id)
        self._in_flight.add(user_id)
        try:
            yield
        finally:
            self._in_flight.discard(user_id)

    def _consume(self, user_id: str) -> None:
        now = time.monotonic()
        window_start = now - self._window
        started = self._started[user_id]

        while started and started[0] < window_start:
            started.popleft()

        if len(started) >= self._max:
            raise UploadQuotaExceeded(retry_after=started[0] - window_start)

        started.append(now)

    def reset(self, user_id: str) -> None:
        self._started.pop(user_id, None)
        self._in_flight.discard(user_id)


class PendingCovers(Generic[V]):
    """Holds at most max_entries covers, each for at most ttl_seconds."""

    def __init__(
        self,
        max_entries: int = settings.PENDING_COVER_MAX_ENTRIES,
        ttl_seconds: int = settings.PENDING_COVER_TTL_SECONDS,
    ):
        self._max = max_entries
        self._ttl = ttl_seconds
        self._entries: OrderedDict[int, tuple[float, V]] = OrderedDict()

    def put(self, user_id: int, cover: V) -> None:
        self._evict_expired()
        self._entries.pop(user_id, None)
        self._entries[user_id] = (time.monotonic(), cover)
        while len(self._entries) > self._max:
            self._entries.popitem(last=False)

    def pop(self, user_id: int) -> Optional[V]:
        self._evict_expired()
        entry = self._entries.pop(user_id, None)
        return entry[1] if entry else None

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._entries)

    def _evict_expired(self) -> None:
        cutoff = time.monotonic() - self._ttl
        while self._entries:
            stored_at, _ = next(iter(self._entries.values()))
            if stored_at >= cutoff:
                break
            self._entries.popitem(last=False)


# Module-level singleton
upload_throttle = UploadThrottle()
