"""
Records kept in the external store.
Field names on the wire follow the store's camelCase schema.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class AssetKind(str, Enum):
    AUDIO = "audio"
    IMAGE = "image"


@dataclass(frozen=True)
class Asset:
    """A readable binary resource picked by the user."""
    data: bytes
    filename: str
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Track:
    track_id: str
    title: str
    artist: str
    audio_url: str
    uploaded_by: str
    uploaded_at: int
    genre: str = ""
    description: str = ""
    duration: int = 0
    image_url: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.artist} - {self.title}"

    @classmethod
    def from_record(cls, record: dict, track_id: str = "") -> "Track":
        return cls(
            track_id=record.get("musicId") or track_id,
            title=record.get("musicName", ""),
            artist=record.get("artistName", ""),
            genre=record.get("genre", ""),
            description=record.get("description", ""),
            duration=_as_int(record.get("duration")),
            audio_url=record.get("audioUrl", ""),
            image_url=record.get("imageUrl") or "",
            uploaded_by=record.get("uploadedBy", ""),
            uploaded_at=_as_int(record.get("uploadedAt")),
        )

    def to_record(self) -> dict:
        return {
            "musicId": self.track_id,
            "musicName": self.title,
            "artistName": self.artist,
            "genre": self.genre,
            "description": self.description,
            "duration": self.duration,
            "audioUrl": self.audio_url,
            "imageUrl": self.image_url,
            "uploadedBy": self.uploaded_by,
            "uploadedAt": self.uploaded_at,
        }


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    display_name: str
    email: str = ""
    image_url: str = ""

    @classmethod
    def from_record(cls, record: dict, user_id: str = "") -> "UserProfile":
        return cls(
            user_id=record.get("userId") or user_id,
            display_name=record.get("fullName") or record.get("username") or "",
            email=record.get("email", ""),
            image_url=record.get("profileImageUrl") or "",
        )


@dataclass(frozen=True)
class Playlist:
    playlist_id: str
    owner_id: str
    name: str = ""
    track_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def track_count(self) -> int:
        return len(self.track_ids)

    @classmethod
    def from_record(cls, record: dict, playlist_id: str = "") -> "Playlist":
        return cls(
            playlist_id=record.get("playlistId") or playlist_id,
            owner_id=record.get("userId", ""),
            name=record.get("playlistName", ""),
            track_ids=tuple(_as_id_list(record.get("musicIds"))),
        )


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_id_list(value: Any) -> list[str]:
    """
    The database stores arrays as JSON lists, but a list with holes
    comes back as an index-keyed object.
    """
    if not value:
        return []
    if isinstance(value, dict):
        return [v for _, v in sorted(value.items(), key=lambda kv: int(kv[0])) if v]
    return [v for v in value if v]
