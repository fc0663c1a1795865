import asyncio
from typing import Optional

import pytest

from sangeet.errors import ReadError, UploadError, WriteError
from sangeet.models import AssetKind, Playlist, Track, UserProfile


def make_track(track_id: str, uploaded_at: int = 0, **kwargs) -> Track:
    return Track(
        track_id=track_id,
        title=kwargs.pop("title", f"Song {track_id}"),
        artist=kwargs.pop("artist", "Artist"),
        audio_url=kwargs.pop("audio_url", f"https://cdn.test/{track_id}.mp3"),
        uploaded_by=kwargs.pop("uploaded_by", "u1"),
        uploaded_at=uploaded_at,
        **kwargs,
    )


class FakeBackend:
    """In-memory backend recording every call; `fail` maps method → error."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.fail: dict[str, Exception] = {}
        self.tracks: dict[str, Track] = {}
        self.users: dict[str, UserProfile] = {"u1": UserProfile(user_id="u1", display_name="Kush")}
        self.favorite_ids: dict[str, list[str]] = {}
        self.playlists: dict[str, Playlist] = {}
        self.uploaded: list[tuple[AssetKind, str]] = []

    def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail:
            raise self.fail[name]

    async def current_user_id(self) -> Optional[str]:
        self._enter("current_user_id")
        return "u1"

    async def read_all_tracks(self):
        self._enter("read_all_tracks")
        await asyncio.sleep(0)
        return sorted(self.tracks.values(), key=lambda t: t.uploaded_at)

    async def read_user(self, user_id):
        self._enter("read_user", user_id)
        if user_id not in self.users:
            raise ReadError(f"User not found: {user_id}")
        return self.users[user_id]

    async def read_favorites(self, user_id):
        self._enter("read_favorites", user_id)
        await asyncio.sleep(0)
        ids = self.favorite_ids.get(user_id, [])
        return [self.tracks[i] for i in ids if i in self.tracks]

    async def read_playlists(self, user_id):
        self._enter("read_playlists", user_id)
        return [p for p in self.playlists.values() if p.owner_id == user_id]

    async def upload_asset(self, data, kind, filename):
        self._enter(f"upload_{kind.value}", filename)
        self.uploaded.append((kind, filename))
        return f"https://cdn.test/{kind.value}/{filename}"

    async def write_track(self, track):
        self._enter("write_track", track.track_id)
        self.tracks[track.track_id] = track

    async def toggle_favorite(self, user_id, track_id):
        self._enter("toggle_favorite", user_id, track_id)
        ids = self.favorite_ids.setdefault(user_id, [])
        if track_id in ids:
            ids.remove(track_id)
            return False
        ids.append(track_id)
        return True

    async def append_to_playlist(self, playlist_id, track_id):
        self._enter("append_to_playlist", playlist_id, track_id)
        playlist = self.playlists.get(playlist_id)
        if playlist is None:
            raise WriteError(f"Playlist not found: {playlist_id}")
        self.playlists[playlist_id] = Playlist(
            playlist_id=playlist.playlist_id,
            owner_id=playlist.owner_id,
            name=playlist.name,
            track_ids=(*playlist.track_ids, track_id),
        )


class RecordingNotifier:
    def __init__(self):
        self.messages: list[str] = []

    async def notify(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


__all__ = ["FakeBackend", "RecordingNotifier", "make_track", "ReadError", "UploadError", "WriteError"]
