"""
Dashboard and library refresh coordinators.

A refresh fires every read at once; each read publishes into its own
observable as soon as it lands. A failing read sets the recoverable error
flag and notifies, without cancelling the others.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from sangeet.config.settings import settings
from sangeet.errors import ReadError
from sangeet.models import Playlist, Track, UserProfile
from sangeet.services.backend import Backend
from sangeet.state import Notifier, Observable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DashboardError:
    message: str
    source: str


class _RefreshCoordinator:
    def __init__(self, backend: Backend, notifier: Notifier):
        self._backend = backend
        self._notifier = notifier
        self.tracks: Observable[list[Track]] = Observable([])
        self.profile: Observable[Optional[UserProfile]] = Observable(None)
        self.favorites: Observable[list[Track]] = Observable([])
        self.loading: Observable[bool] = Observable(False)
        self.error: Observable[Optional[DashboardError]] = Observable(None)

    def _reads(self, user_id: str) -> list[tuple[str, Callable[[], Awaitable], Observable]]:
        raise NotImplementedError

    async def refresh(self, user_id: str) -> list[DashboardError]:
        """Re-issue every read. Returns the failures (empty when all succeeded)."""
        self.error.set(None)
        self.loading.set(True)
        try:
            outcomes = await asyncio.gather(
                *(self._load(name, read, slot) for name, read, slot in self._reads(user_id))
            )
        finally:
            self.loading.set(False)
        failures = [o for o in outcomes if o is not None]
        logger.info(
            "Refresh finished",
            extra={"user_id": user_id, "failed": [f.source for f in failures]},
        )
        return failures

    async def retry(self, user_id: str) -> list[DashboardError]:
        """Manual refresh; confirms with a notification when every read succeeds."""
        failures = await self.refresh(user_id)
        if not failures:
            await self._notifier.notify("Refreshing...")
        return failures

    async def _load(
        self,
        name: str,
        read: Callable[[], Awaitable[T]],
        slot: Observable[T],
    ) -> Optional[DashboardError]:
        try:
            value = await read()
        except ReadError as exc:
            logger.warning("Read failed", extra={"source": name, "error": str(exc)})
            failure = DashboardError(message=str(exc) or "Unknown error occurred", source=name)
            self.error.set(failure)
            await self._notifier.notify(f"Error refreshing: {failure.message}")
            return failure
        slot.set(value)
        return None

    def is_favorite(self, track_id: str) -> bool:
        return any(t.track_id == track_id for t in self.favorites.value)


class DashboardCoordinator(_RefreshCoordinator):
    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        recent_limit: int = settings.RECENTLY_PLAYED_LIMIT,
        recommended_limit: int = settings.RECOMMENDED_LIMIT,
    ):
        super().__init__(backend, notifier)
        self.playlists: Observable[list[Playlist]] = Observable([])
        self._recent_limit = recent_limit
        self._recommended_limit = recommended_limit

    def _reads(self, user_id):
        return [
            ("tracks", self._backend.read_all_tracks, self.tracks),
            ("profile", lambda: self._backend.read_user(user_id), self.profile),
            ("favorites", lambda: self._backend.read_favorites(user_id), self.favorites),
            ("playlists", lambda: self._backend.read_playlists(user_id), self.playlists),
        ]

    def recently_played(self) -> list[Track]:
        # Positional slice of the catalogue, not play history.
        if self._recent_limit <= 0:
            return []
        return self.tracks.value[-self._recent_limit:]

    def recommended(self) -> list[Track]:
        return self.tracks.value[: self._recommended_limit]


class LibraryCoordinator(_RefreshCoordinator):
    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        recent_limit: int = settings.LIBRARY_RECENT_LIMIT,
    ):
        super().__init__(backend, notifier)
        self._recent_limit = recent_limit

    def _reads(self, user_id):
        return [
            ("profile", lambda: self._backend.read_user(user_id), self.profile),
            ("favorites", lambda: self._backend.read_favorites(user_id), self.favorites),
            ("tracks", self._backend.read_all_tracks, self.tracks),
        ]

    def recently_played(self) -> list[Track]:
        """Newest first."""
        if self._recent_limit <= 0:
            return []
        return list(reversed(self.tracks.value[-self._recent_limit:]))

    @property
    def favorite_count(self) -> int:
        return len(self.favorites.value)
