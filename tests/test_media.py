from pathlib import Path

import pytest

from videoreview.core.errors import NotFoundError, RangeNotSatisfiableError
from videoreview.features.media.services import LocalStorage, MediaStreamService
from videoreview.utils.media_files import parse_range

CONTENT = bytes(range(256)) * 4  # 1024 octets


@pytest.fixture
def media_file(settings):
    path = Path(settings.STORAGE_ROOT) / "uploads" / "p" / "f" / "clip.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(CONTENT)
    return "uploads/p/f/clip.mp4"


class TestRangeServer:
    def test_full_file(self, client, media_file):
        resp = client.get(f"/videos/{media_file}")
        assert resp.status_code == 200
        assert resp.content == CONTENT
        assert resp.headers["accept-ranges"] == "bytes"
        assert resp.headers["content-length"] == str(len(CONTENT))
        assert resp.headers["content-type"].startswith("video/")

    def test_partial(self, client, media_file):
        resp = client.get(f"/videos/{media_file}", headers={"Range": "bytes=0-99"})
        assert resp.status_code == 206
        assert resp.headers["content-range"] == f"bytes 0-99/{len(CONTENT)}"
        assert resp.headers["content-length"] == "100"
        assert resp.content == CONTENT[:100]

    def test_open_ended_and_suffix(self, client, media_file):
        resp = client.get(f"/videos/{media_file}", headers={"Range": "bytes=1000-"})
        assert resp.status_code == 206
        assert resp.content == CONTENT[1000:]

        resp = client.get(f"/videos/{media_file}", headers={"Range": "bytes=-24"})
        assert resp.status_code == 206
        assert resp.content == CONTENT[-24:]

    def test_unsatisfiable(self, client, media_file):
        resp = client.get(f"/videos/{media_file}", headers={"Range": "bytes=5000-6000"})
        assert resp.status_code == 416
        assert resp.headers["content-range"] == f"bytes */{len(CONTENT)}"

    def test_missing_file(self, client):
        resp = client.get("/videos/uploads/nothing-here.mp4")
        assert resp.status_code == 404
        assert resp.json()["error"] == "Error loading video"

    def test_traversal_over_http(self, client, settings, media_file):
        secret = Path(settings.STORAGE_ROOT).parent / "secret.txt"
        secret.write_text("nope")
        resp = client.get("/videos/uploads/%2E%2E/%2E%2E/secret.txt")
        assert resp.status_code == 404


class TestMediaStreamService:
    def test_traversal_rejected(self, settings, media_file):
        secret = Path(settings.STORAGE_ROOT).parent / "secret.txt"
        secret.write_text("nope")
        service = MediaStreamService(LocalStorage(Path(settings.STORAGE_ROOT)))

        with pytest.raises(NotFoundError):
            service.open_window("../secret.txt", None)

    def test_window_bytes(self, settings, media_file):
        service = MediaStreamService(LocalStorage(Path(settings.STORAGE_ROOT)), chunk_size=10)
        window = service.open_window(media_file, "bytes=10-39")
        assert b"".join(service.iter_bytes(window)) == CONTENT[10:40]


class TestParseRange:
    def test_end_clamped(self):
        assert parse_range("bytes=10-99999", 100) == (10, 99)

    @pytest.mark.parametrize("header", ["bytes=abc", "items=0-1", "bytes=-", "bytes=50-10", "bytes=-0"])
    def test_invalid(self, header):
        with pytest.raises(RangeNotSatisfiableError):
            parse_range(header, 100)
