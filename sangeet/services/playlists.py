import logging

from sangeet.errors import SangeetError, ValidationError
from sangeet.services.backend import Backend
from sangeet.state import Notifier, Result

logger = logging.getLogger(__name__)


class PlaylistAttach:
    """Append a track to the end of a playlist in the store."""

    def __init__(self, backend: Backend, notifier: Notifier):
        self._backend = backend
        self._notifier = notifier

    async def attach(self, playlist_id: str, track_id: str) -> Result[None]:
        try:
            if not playlist_id or not track_id:
                raise ValidationError("Playlist and track are required")
            await self._backend.append_to_playlist(playlist_id, track_id)
        except SangeetError as exc:
            logger.warning(
                "Add to playlist failed",
                extra={"playlist_id": playlist_id, "track_id": track_id, "error": str(exc)},
            )
            await self._notifier.notify(f"Error adding to playlist: {exc}")
            return Result.failure(exc)

        logger.info("Track added to playlist", extra={"playlist_id": playlist_id, "track_id": track_id})
        await self._notifier.notify("Added to playlist")
        return Result.success(None)
