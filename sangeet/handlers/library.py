"""
Browsing handlers.
- /start              → help
- /dashboard, /retry  → refresh all four reads and summarise
- /library            → profile, favorites and recent uploads
- /fav <track_id>     → toggle favorite
- /addto <playlist_id> <track_id> → append track to playlist
"""

from aiogram import Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message

from sangeet.handlers.common import ReplyNotifier, esc, open_backend, resolve_user_id
from sangeet.models import Track
from sangeet.services.dashboard import DashboardCoordinator, LibraryCoordinator
from sangeet.services.favorites import FavoriteToggle
from sangeet.services.playlists import PlaylistAttach

router = Router()

_HELP = (
    "🎶 <b>Sangeet</b>\n"
    "/dashboard - recently added, recommended, playlists\n"
    "/library - your profile and favorites\n"
    "/fav &lt;track_id&gt; - add or remove a favorite\n"
    "/addto &lt;playlist_id&gt; &lt;track_id&gt; - add a track to a playlist\n"
    "Send an audio file with caption <code>Title | Artist | genre | seconds | description</code> "
    "to upload it. Send a photo first to attach cover art."
)


@router.message(CommandStart())
async def cmd_start(message: Message) -> None:
    await message.answer(_HELP)


@router.message(Command("dashboard", "retry"))
async def cmd_dashboard(message: Message, command: CommandObject) -> None:
    async with open_backend() as backend:
        user_id = await resolve_user_id(backend, message)
        dashboard = DashboardCoordinator(backend, ReplyNotifier(message))
        if command.command == "retry":
            await dashboard.retry(user_id)
        else:
            await dashboard.refresh(user_id)

    profile = dashboard.profile.value
    lines = [f"👋 {esc(profile.display_name)}" if profile else "👋 Welcome"]
    lines.append("\n<b>Recently added</b>")
    lines.extend(_track_line(t, dashboard.is_favorite(t.track_id)) for t in dashboard.recently_played())
    lines.append("\n<b>Recommended</b>")
    lines.extend(_track_line(t, dashboard.is_favorite(t.track_id)) for t in dashboard.recommended())
    lines.append("\n<b>Playlists</b>")
    lines.extend(
        f"• {esc(p.name or p.playlist_id)} ({p.track_count}) <code>{p.playlist_id}</code>"
        for p in dashboard.playlists.value
    )
    if dashboard.error.value is not None:
        lines.append("\n⚠️ Some data could not be loaded. Send /retry to try again.")
    await message.answer("\n".join(lines))


@router.message(Command("library"))
async def cmd_library(message: Message) -> None:
    async with open_backend() as backend:
        user_id = await resolve_user_id(backend, message)
        library = LibraryCoordinator(backend, ReplyNotifier(message))
        await library.refresh(user_id)

    profile = library.profile.value
    lines = [
        f"📚 {esc(profile.display_name) if profile else 'Your library'}",
        f"❤️ Favorites: {library.favorite_count}",
        "\n<b>Recently added</b>",
    ]
    lines.extend(_track_line(t, library.is_favorite(t.track_id)) for t in library.recently_played())
    await message.answer("\n".join(lines))


@router.message(Command("fav"))
async def cmd_fav(message: Message, command: CommandObject) -> None:
    track_id = (command.args or "").strip()
    if not track_id:
        await message.reply("Usage: /fav &lt;track_id&gt;")
        return
    async with open_backend() as backend:
        user_id = await resolve_user_id(backend, message)
        dashboard = DashboardCoordinator(backend, ReplyNotifier(message))
        toggle = FavoriteToggle(backend, ReplyNotifier(message), dashboard.favorites)
        await toggle.toggle(user_id, track_id)


@router.message(Command("addto"))
async def cmd_addto(message: Message, command: CommandObject) -> None:
    parts = (command.args or "").split()
    if len(parts) != 2:
        await message.reply("Usage: /addto &lt;playlist_id&gt; &lt;track_id&gt;")
        return
    playlist_id, track_id = parts
    async with open_backend() as backend:
        await PlaylistAttach(backend, ReplyNotifier(message)).attach(playlist_id, track_id)


def _track_line(track: Track, favorite: bool) -> str:
    heart = "❤️" if favorite else "🤍"
    return f"{heart} {esc(track.display_name)} <code>{track.track_id}</code>"
