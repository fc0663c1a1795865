"""
Capability set the coordinators need from the external backend:
identity, document data and binary object storage.

Implementations raise ReadError / UploadError / WriteError on failure.
"""
from typing import Optional, Protocol

from sangeet.models import AssetKind, Playlist, Track, UserProfile


class Backend(Protocol):
    async def current_user_id(self) -> Optional[str]:
        """Authenticated user, or None when signed out."""

    async def read_all_tracks(self) -> list[Track]:
        ...

    async def read_user(self, user_id: str) -> UserProfile:
        ...

    async def read_favorites(self, user_id: str) -> list[Track]:
        ...

    async def read_playlists(self, user_id: str) -> list[Playlist]:
        ...

    async def upload_asset(self, data: bytes, kind: AssetKind, filename: str) -> str:
        """Store the bytes and return a retrievable URL."""

    async def write_track(self, track: Track) -> None:
        ...

    async def toggle_favorite(self, user_id: str, track_id: str) -> bool:
        """Flip membership; returns True when the track is now a favorite."""

    async def append_to_playlist(self, playlist_id: str, track_id: str) -> None:
        ...
