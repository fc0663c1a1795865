"""
Helpers shared by the chat handlers: backend wiring, user resolution and
the reply-based notifier.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from aiogram.types import Message

from sangeet.services.firebase import FirebaseBackend
from sangeet.utils.http_client import build_session


class ReplyNotifier:
    """Surfaces coordinator notifications as chat replies."""

    def __init__(self, message: Message):
        self._message = message

    async def notify(self, message: str) -> None:
        await self._message.answer(esc(message))


@asynccontextmanager
async def open_backend() -> AsyncIterator[FirebaseBackend]:
    session = build_session()
    try:
        yield FirebaseBackend(session)
    finally:
        await session.close()


async def resolve_user_id(backend: FirebaseBackend, message: Message) -> str:
    """Signed-in store user if configured, else the chat user's id."""
    user_id = await backend.current_user_id()
    if user_id:
        return user_id
    return str(message.from_user.id)  # type: ignore[union-attr]


def esc(text: str) -> str:
    """Minimal HTML escape for Telegram."""
    return (
        text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
    )
