"""
Firebase / Cloudinary backend over REST.
- Document data via the Realtime Database REST API (<db>/<path>.json).
- Binary assets via Cloudinary unsigned upload (returns secure_url).
- Identity: the uid of the authenticated session, taken from settings.
"""
import json
import logging
from typing import Optional
from urllib.parse import quote

import aiohttp

from sangeet.config.settings import settings
from sangeet.errors import ReadError, UploadError, WriteError
from sangeet.models import AssetKind, Playlist, Track, UserProfile
from sangeet.utils.http_client import HttpError, fetch_json, send_json, upload_form

logger = logging.getLogger(__name__)

# Cloudinary files audio under the "video" resource type.
_RESOURCE_TYPES = {
    AssetKind.AUDIO: "video",
    AssetKind.IMAGE: "image",
}


class FirebaseBackend:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        database_url: str = settings.FIREBASE_DATABASE_URL,
        auth_token: Optional[str] = settings.FIREBASE_AUTH_TOKEN,
        user_id: Optional[str] = settings.FIREBASE_USER_ID,
        cloud_name: str = settings.CLOUDINARY_CLOUD_NAME,
        upload_base_url: str = settings.CLOUDINARY_BASE_URL,
        upload_preset: str = settings.CLOUDINARY_UPLOAD_PRESET,
    ):
        self._session = session
        self._db_url = database_url.rstrip("/")
        self._auth_token = auth_token
        self._user_id = user_id
        self._cloud_name = cloud_name
        self._upload_base_url = upload_base_url.rstrip("/")
        self._upload_preset = upload_preset

    # ── Identity ─────────────────────────────────────────────────────────────

    async def current_user_id(self) -> Optional[str]:
        return self._user_id or None

    # ── Reads ────────────────────────────────────────────────────────────────

    async def read_all_tracks(self) -> list[Track]:
        data = await self._get("musics")
        return parse_tracks(data)

    async def read_user(self, user_id: str) -> UserProfile:
        data = await self._get(f"users/{_key(user_id)}")
        if not data:
            raise ReadError(f"User not found: {user_id}")
        return UserProfile.from_record(_expect_dict(data, "users"), user_id)

    async def read_favorites(self, user_id: str) -> list[Track]:
        members = await self._get(f"favorites/{_key(user_id)}")
        if not members:
            return []
        by_id = {t.track_id: t for t in parse_tracks(await self._get("musics"))}
        return [by_id[tid] for tid in favorite_ids(_expect_dict(members, "favorites")) if tid in by_id]

    async def read_playlists(self, user_id: str) -> list[Playlist]:
        data = await self._get(
            "playlists",
            params={"orderBy": json.dumps("userId"), "equalTo": json.dumps(user_id)},
        )
        return parse_playlists(data)

    # ── Object storage ───────────────────────────────────────────────────────

    async def upload_asset(self, data: bytes, kind: AssetKind, filename: str) -> str:
        if not self._cloud_name or not self._upload_preset:
            raise UploadError("Cloudinary is not configured")
        if len(data) > settings.max_upload_size_bytes:
            raise UploadError(
                f"File is {len(data) / 1024 / 1024:.1f}MB, "
                f"exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit"
            )

        url = f"{self._upload_base_url}/{self._cloud_name}/{_RESOURCE_TYPES[kind]}/upload"
        try:
            payload = await upload_form(
                self._session,
                url,
                {"upload_preset": self._upload_preset},
                data=data,
                filename=filename,
            )
        except HttpError as exc:
            raise UploadError(f"{kind.value} upload failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise UploadError(f"{kind.value} upload returned an unexpected response")
        asset_url = payload.get("secure_url") or payload.get("url")
        if not asset_url:
            raise UploadError(f"{kind.value} upload returned no URL")
        logger.info(
            "Asset uploaded",
            extra={"kind": kind.value, "asset_filename": filename, "size_kb": len(data) // 1024},
        )
        return asset_url

    # ── Writes ───────────────────────────────────────────────────────────────

    async def write_track(self, track: Track) -> None:
        if not track.audio_url:
            raise WriteError("Refusing to write a track without an audio URL")
        await self._put(f"musics/{_key(track.track_id)}", track.to_record())

    async def toggle_favorite(self, user_id: str, track_id: str) -> bool:
        path = f"favorites/{_key(user_id)}/{_key(track_id)}"
        try:
            current = await self._get(path)
        except ReadError as exc:
            raise WriteError(str(exc)) from exc
        if current:
            await self._delete(path)
            return False
        await self._put(path, True)
        return True

    async def append_to_playlist(self, playlist_id: str, track_id: str) -> None:
        path = f"playlists/{_key(playlist_id)}"
        try:
            record = await self._get(path)
        except ReadError as exc:
            raise WriteError(str(exc)) from exc
        if not record:
            raise WriteError(f"Playlist not found: {playlist_id}")
        if not isinstance(record, dict):
            raise WriteError(f"Unexpected playlist record: {playlist_id}")
        playlist = Playlist.from_record(record, playlist_id)
        await self._put(f"{path}/musicIds", [*playlist.track_ids, track_id])

    # ── REST plumbing ────────────────────────────────────────────────────────

    def _url(self, path: str) -> str:
        return f"{self._db_url}/{path}.json"

    def _params(self, extra: Optional[dict] = None) -> dict:
        params = dict(extra or {})
        if self._auth_token:
            params["auth"] = self._auth_token
        return params

    async def _get(self, path: str, params: Optional[dict] = None):
        try:
            return await fetch_json(self._session, self._url(path), params=self._params(params))
        except HttpError as exc:
            raise ReadError(f"Failed to read {path}: {exc}") from exc

    async def _put(self, path: str, payload) -> None:
        try:
            await send_json(self._session, "PUT", self._url(path), payload, params=self._params())
        except HttpError as exc:
            raise WriteError(f"Failed to write {path}: {exc}") from exc

    async def _delete(self, path: str) -> None:
        try:
            await send_json(self._session, "DELETE", self._url(path), params=self._params())
        except HttpError as exc:
            raise WriteError(f"Failed to delete {path}: {exc}") from exc


def parse_tracks(data: Optional[dict]) -> list[Track]:
    """Collection snapshot → tracks in upload order."""
    if not data:
        return []
    data = _expect_dict(data, "musics")
    tracks = [
        Track.from_record(record, key)
        for key, record in data.items()
        if isinstance(record, dict)
    ]
    tracks.sort(key=lambda t: t.uploaded_at)
    return tracks


def parse_playlists(data: Optional[dict]) -> list[Playlist]:
    if not data:
        return []
    data = _expect_dict(data, "playlists")
    return [
        Playlist.from_record(record, key)
        for key, record in data.items()
        if isinstance(record, dict)
    ]


def favorite_ids(members: dict) -> list[str]:
    """Membership map {track_id: true} → ids that are set."""
    return [track_id for track_id, flag in members.items() if flag]


def _expect_dict(data, collection: str) -> dict:
    if not isinstance(data, dict):
        raise ReadError(f"Unexpected {collection} snapshot: {type(data).__name__}")
    return data


def _key(value: str) -> str:
    return quote(value, safe="")
