import pytest

from conftest import ReadError, WriteError, make_track
from sangeet.errors import ValidationError
from sangeet.models import Playlist
from sangeet.services.favorites import FavoriteToggle
from sangeet.services.playlists import PlaylistAttach
from sangeet.state import Observable


@pytest.fixture
def seeded(backend):
    for tid in ("a", "b"):
        backend.tracks[tid] = make_track(tid)
    backend.playlists["p1"] = Playlist(playlist_id="p1", owner_id="u1", track_ids=("a",))
    return backend


class TestFavoriteToggle:
    async def test_toggle_adds_then_reloads(self, seeded, notifier):
        favorites = Observable([])
        result = await FavoriteToggle(seeded, notifier, favorites).toggle("u1", "b")

        assert result.ok and result.value is True
        assert [t.track_id for t in favorites.value] == ["b"]
        assert [c[0] for c in seeded.calls] == ["toggle_favorite", "read_favorites"]
        assert notifier.messages == ["Added to favorites"]

    async def test_double_toggle_returns_to_original_state(self, seeded, notifier):
        seeded.favorite_ids["u1"] = ["a"]
        favorites = Observable([])
        toggle = FavoriteToggle(seeded, notifier, favorites)

        first = await toggle.toggle("u1", "b")
        second = await toggle.toggle("u1", "b")

        assert first.value is True
        assert second.value is False
        assert seeded.favorite_ids["u1"] == ["a"]
        assert [t.track_id for t in favorites.value] == ["a"]

    async def test_toggle_failure_leaves_state_untouched(self, seeded, notifier):
        seeded.fail["toggle_favorite"] = WriteError("denied")
        favorites = Observable([make_track("a")])
        result = await FavoriteToggle(seeded, notifier, favorites).toggle("u1", "b")

        assert not result.ok
        assert [t.track_id for t in favorites.value] == ["a"]
        assert "read_favorites" not in [c[0] for c in seeded.calls]
        assert notifier.messages == ["Error toggling favorite: denied"]

    async def test_reload_failure_still_reports_toggle(self, seeded, notifier):
        seeded.fail["read_favorites"] = ReadError("offline")
        result = await FavoriteToggle(seeded, notifier, Observable([])).toggle("u1", "a")

        assert result.ok
        assert seeded.favorite_ids["u1"] == ["a"]
        assert notifier.messages[-1] == "Error refreshing: offline"

    async def test_blank_ids_rejected(self, seeded, notifier):
        result = await FavoriteToggle(seeded, notifier, Observable([])).toggle("u1", "")
        assert isinstance(result.error, ValidationError)
        assert seeded.calls == []


class TestPlaylistAttach:
    async def test_appends_to_end(self, seeded, notifier):
        result = await PlaylistAttach(seeded, notifier).attach("p1", "b")

        assert result.ok
        assert seeded.playlists["p1"].track_ids == ("a", "b")
        assert notifier.messages == ["Added to playlist"]

    async def test_duplicate_is_appended_again(self, seeded, notifier):
        await PlaylistAttach(seeded, notifier).attach("p1", "a")
        assert seeded.playlists["p1"].track_ids == ("a", "a")

    async def test_missing_playlist_reports_failure(self, seeded, notifier):
        result = await PlaylistAttach(seeded, notifier).attach("nope", "b")

        assert not result.ok
        assert isinstance(result.error, WriteError)
        assert notifier.messages == ["Error adding to playlist: Playlist not found: nope"]

    @pytest.mark.parametrize("playlist_id,track_id", [("", "b"), ("p1", "")])
    async def test_blank_ids_rejected(self, seeded, notifier, playlist_id, track_id):
        result = await PlaylistAttach(seeded, notifier).attach(playlist_id, track_id)
        assert isinstance(result.error, ValidationError)
        assert seeded.calls == []
