"""
Tests for backend guards, settings, upload guards and caption parsing.
Run with: pytest tests/
"""
import pytest

from conftest import make_track
from sangeet.config.settings import Settings
from sangeet.errors import UploadError, WriteError
from sangeet.handlers.upload import parse_caption
from sangeet.models import AssetKind
from sangeet.services.firebase import FirebaseBackend
from sangeet.utils import upload_guard
from sangeet.utils.upload_guard import (
    PendingCovers,
    UploadInProgress,
    UploadQuotaExceeded,
    UploadThrottle,
)


def _backend(**kwargs) -> FirebaseBackend:
    # Guards fire before any request, so no session is needed.
    options = dict(database_url="https://db.test/", auth_token=None, user_id="u1",
                   cloud_name="demo", upload_preset="unsigned")
    options.update(kwargs)
    return FirebaseBackend(None, **options)  # type: ignore[arg-type]


class TestFirebaseGuards:
    async def test_current_user_id(self):
        assert await _backend().current_user_id() == "u1"
        assert await _backend(user_id="").current_user_id() is None

    async def test_refuses_track_without_audio_url(self):
        with pytest.raises(WriteError):
            await _backend().write_track(make_track("m1", audio_url=""))

    async def test_upload_requires_cloudinary_config(self):
        with pytest.raises(UploadError):
            await _backend(cloud_name="").upload_asset(b"x", AssetKind.AUDIO, "a.mp3")

    async def test_upload_rejects_oversized_file(self, monkeypatch):
        from sangeet.config.settings import settings
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)
        with pytest.raises(UploadError):
            await _backend().upload_asset(b"x", AssetKind.IMAGE, "c.jpg")

    def test_url_building(self):
        backend = _backend(auth_token="secret")
        assert backend._url("musics/m1") == "https://db.test/musics/m1.json"
        assert backend._params({"orderBy": '"userId"'}) == {"orderBy": '"userId"', "auth": "secret"}


class TestSettings:
    def test_database_url_trailing_slash_stripped(self):
        s = Settings(FIREBASE_DATABASE_URL="https://db.test/", _env_file=None)
        assert s.FIREBASE_DATABASE_URL == "https://db.test"

    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.RECENTLY_PLAYED_LIMIT == 15
        assert s.RECOMMENDED_LIMIT == 10
        assert s.max_upload_size_bytes == 50 * 1024 * 1024


class TestUploadThrottle:
    async def test_allows_within_quota(self):
        throttle = UploadThrottle(max_uploads=3, window_seconds=60)
        for _ in range(3):
            async with throttle.slot("u1"):
                pass

    async def test_blocks_over_quota(self):
        throttle = UploadThrottle(max_uploads=2, window_seconds=60)
        for _ in range(2):
            async with throttle.slot("u1"):
                pass
        with pytest.raises(UploadQuotaExceeded) as excinfo:
            async with throttle.slot("u1"):
                pass
        assert 0 < excinfo.value.retry_after <= 60

    async def test_one_upload_in_flight_per_user(self):
        throttle = UploadThrottle(max_uploads=5, window_seconds=60)
        async with throttle.slot("u1"):
            with pytest.raises(UploadInProgress):
                async with throttle.slot("u1"):
                    pass
            async with throttle.slot("u2"):
                pass
        async with throttle.slot("u1"):
            pass

    async def test_slot_released_when_upload_raises(self):
        throttle = UploadThrottle(max_uploads=5, window_seconds=60)
        with pytest.raises(RuntimeError):
            async with throttle.slot("u1"):
                raise RuntimeError("boom")
        async with throttle.slot("u1"):
            pass

    async def test_rejected_attempt_does_not_use_quota(self):
        throttle = UploadThrottle(max_uploads=2, window_seconds=60)
        async with throttle.slot("u1"):
            with pytest.raises(UploadInProgress):
                async with throttle.slot("u1"):
                    pass
        async with throttle.slot("u1"):
            pass

    async def test_reset(self):
        throttle = UploadThrottle(max_uploads=1, window_seconds=60)
        async with throttle.slot("u1"):
            pass
        throttle.reset("u1")
        async with throttle.slot("u1"):
            pass


class TestPendingCovers:
    def test_pop_returns_cover_once(self):
        covers = PendingCovers(max_entries=10, ttl_seconds=60)
        covers.put(1, "cover-a")
        assert covers.pop(1) == "cover-a"
        assert covers.pop(1) is None

    def test_newer_cover_replaces_older(self):
        covers = PendingCovers(max_entries=10, ttl_seconds=60)
        covers.put(1, "old")
        covers.put(1, "new")
        assert len(covers) == 1
        assert covers.pop(1) == "new"

    def test_oldest_entries_evicted_at_capacity(self):
        covers = PendingCovers(max_entries=2, ttl_seconds=60)
        covers.put(1, "a")
        covers.put(2, "b")
        covers.put(3, "c")
        assert len(covers) == 2
        assert covers.pop(1) is None
        assert covers.pop(3) == "c"

    def test_entries_expire(self, monkeypatch):
        clock = [1000.0]
        monkeypatch.setattr(upload_guard.time, "monotonic", lambda: clock[0])
        covers = PendingCovers(max_entries=10, ttl_seconds=60)
        covers.put(1, "a")
        clock[0] += 30
        covers.put(2, "b")
        clock[0] += 45
        assert covers.pop(1) is None
        assert covers.pop(2) == "b"
        assert len(covers) == 0


@pytest.mark.parametrize("caption,expected", [
    ("Raag | Kush | Classical | 180 | evening", ("Raag", "Kush", "Classical", "180", "evening")),
    ("Raag | Kush", ("Raag", "Kush", "", "", "")),
    ("a|b|c|d|e | f", ("a", "b", "c", "d", "e | f")),
    (None, ("", "", "", "", "")),
])
def test_parse_caption(caption, expected):
    form = parse_caption(caption)
    assert (form.title, form.artist, form.genre, form.duration_text, form.description) == expected
    assert form.audio is None
