"""
Favorite toggle: flip membership in the store, then re-read the whole
favorites list. No optimistic local update.
"""
import logging

from sangeet.errors import ReadError, SangeetError, ValidationError
from sangeet.models import Track
from sangeet.services.backend import Backend
from sangeet.state import Notifier, Observable, Result

logger = logging.getLogger(__name__)


class FavoriteToggle:
    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        favorites: Observable[list[Track]],
    ):
        self._backend = backend
        self._notifier = notifier
        self._favorites = favorites

    async def toggle(self, user_id: str, track_id: str) -> Result[bool]:
        try:
            if not user_id or not track_id:
                raise ValidationError("User and track are required")
            now_favorite = await self._backend.toggle_favorite(user_id, track_id)
        except SangeetError as exc:
            logger.warning(
                "Favorite toggle failed",
                extra={"user_id": user_id, "track_id": track_id, "error": str(exc)},
            )
            await self._notifier.notify(f"Error toggling favorite: {exc}")
            return Result.failure(exc)

        await self._notifier.notify("Added to favorites" if now_favorite else "Removed from favorites")

        try:
            self._favorites.set(await self._backend.read_favorites(user_id))
        except ReadError as exc:
            # The toggle itself went through; only the reload is stale.
            logger.warning("Favorites reload failed", extra={"user_id": user_id, "error": str(exc)})
            await self._notifier.notify(f"Error refreshing: {exc}")

        return Result.success(now_favorite)
