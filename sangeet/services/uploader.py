"""
Upload coordinator, a sequential pipeline:
  validate → upload audio → upload cover (optional) → write track record

Audio failure is fatal: no record is ever written without an audio URL.
Cover failure is not: the track is written with an empty image URL.
"""
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from sangeet.errors import SangeetError, UploadError, ValidationError
from sangeet.models import Asset, AssetKind, Track
from sangeet.services.backend import Backend
from sangeet.state import Notifier, Observable, Result

logger = logging.getLogger(__name__)

_SUCCESS = "Music uploaded successfully"
_AUDIO_FAILED = "Failed to upload audio"
_MISSING_FIELDS = "Please fill required fields and select audio"


@dataclass
class UploadForm:
    title: str
    artist: str
    audio: Optional[Asset] = None
    genre: str = ""
    description: str = ""
    duration_text: str = ""
    image: Optional[Asset] = None

    def validate(self) -> None:
        if not self.title.strip() or not self.artist.strip() or self.audio is None:
            raise ValidationError(_MISSING_FIELDS)


class UploadCoordinator:
    def __init__(self, backend: Backend, notifier: Notifier):
        self._backend = backend
        self._notifier = notifier
        self.uploading: Observable[bool] = Observable(False)

    async def upload(self, user_id: str, form: UploadForm) -> Result[Track]:
        try:
            form.validate()
        except ValidationError as exc:
            await self._notifier.notify(str(exc))
            return Result.failure(exc)

        self.uploading.set(True)
        try:
            track = await self._run(user_id, form)
        except SangeetError as exc:
            logger.warning(
                "Upload failed",
                extra={"user_id": user_id, "error": str(exc), "stage": type(exc).__name__},
            )
            await self._notifier.notify(_AUDIO_FAILED if isinstance(exc, UploadError) else str(exc))
            return Result.failure(exc)
        finally:
            self.uploading.set(False)

        logger.info("Track uploaded", extra={"user_id": user_id, "track_id": track.track_id})
        await self._notifier.notify(_SUCCESS)
        return Result.success(track)

    async def _run(self, user_id: str, form: UploadForm) -> Track:
        audio = form.audio
        if audio is None:
            raise ValidationError(_MISSING_FIELDS)
        audio_url = await self._backend.upload_asset(audio.data, AssetKind.AUDIO, audio.filename)
        if not audio_url:
            raise UploadError("Audio upload returned an empty URL")

        image_url = await self._upload_cover(form.image)

        track = Track(
            track_id=str(uuid.uuid4()),
            title=form.title.strip(),
            artist=form.artist.strip(),
            genre=form.genre,
            description=form.description,
            duration=parse_duration(form.duration_text),
            audio_url=audio_url,
            image_url=image_url,
            uploaded_by=user_id,
            uploaded_at=int(time.time() * 1000),
        )
        await self._backend.write_track(track)
        return track

    async def _upload_cover(self, image: Optional[Asset]) -> str:
        if image is None:
            return ""
        try:
            return await self._backend.upload_asset(image.data, AssetKind.IMAGE, image.filename) or ""
        except UploadError as exc:
            logger.warning("Cover upload failed, continuing without it", extra={"error": str(exc)})
            return ""


def parse_duration(text: Optional[str]) -> int:
    """Free-text duration → int; anything unparseable is 0."""
    try:
        return int((text or "").strip())
    except ValueError:
        return 0
