"""
Upload handlers.
- Photo          → kept as the cover for the user's next audio upload
- Audio + caption → UploadCoordinator (caption: Title | Artist | genre | seconds | description)
"""
from typing import Optional

from aiogram import F, Router
from aiogram.types import Message

from sangeet.handlers.common import ReplyNotifier, esc, open_backend, resolve_user_id
from sangeet.models import Asset
from sangeet.services.uploader import UploadCoordinator, UploadForm
from sangeet.utils.upload_guard import (
    PendingCovers,
    UploadInProgress,
    UploadQuotaExceeded,
    upload_throttle,
)

router = Router()

# chat user id → cover waiting for the next audio upload
_pending_covers: PendingCovers[Asset] = PendingCovers()


@router.message(F.photo)
async def handle_cover(message: Message) -> None:
    photo = message.photo[-1]  # type: ignore[index]
    buffer = await message.bot.download(photo)  # type: ignore[union-attr]
    cover = Asset(data=buffer.read(), filename=f"{photo.file_unique_id}.jpg", content_type="image/jpeg")
    _pending_covers.put(message.from_user.id, cover)  # type: ignore[union-attr]
    await message.reply("🖼 Cover saved. Now send the audio file.")


@router.message(F.audio)
async def handle_audio(message: Message) -> None:
    chat_user = message.from_user.id  # type: ignore[union-attr]

    try:
        async with upload_throttle.slot(str(chat_user)):
            await _upload(message, chat_user)
    except UploadInProgress:
        await message.reply("⏳ Your previous upload is still running.")
    except UploadQuotaExceeded as exc:
        await message.reply(
            f"⏱ Too many uploads. "
            f"Please wait <b>{exc.retry_after:.0f}s</b> before trying again."
        )


async def _upload(message: Message, chat_user: int) -> None:
    audio = message.audio
    if audio is None:
        return
    buffer = await message.bot.download(audio)  # type: ignore[union-attr]
    form = parse_caption(message.caption)
    form.audio = Asset(
        data=buffer.read(),
        filename=audio.file_name or f"{audio.file_unique_id}.mp3",
        content_type=audio.mime_type,
    )
    form.image = _pending_covers.pop(chat_user)

    async with open_backend() as backend:
        user_id = await resolve_user_id(backend, message)
        result = await UploadCoordinator(backend, ReplyNotifier(message)).upload(user_id, form)

    if result.ok and result.value is not None:
        track = result.value
        await message.answer(
            f"🎵 <b>{esc(track.title)}</b>\n👤 {esc(track.artist)}\n<code>{track.track_id}</code>"
        )


def parse_caption(caption: Optional[str]) -> UploadForm:
    """
    'Title | Artist | genre | duration | description' → UploadForm.
    Missing trailing fields stay empty; the description may contain '|'.
    """
    parts = [p.strip() for p in (caption or "").split("|", 4)]
    parts += [""] * (5 - len(parts))
    title, artist, genre, duration, description = parts
    return UploadForm(
        title=title,
        artist=artist,
        genre=genre,
        duration_text=duration,
        description=description,
    )
