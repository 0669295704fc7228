from pathlib import Path


def _stored_files(settings):
    uploads = Path(settings.STORAGE_ROOT) / settings.UPLOADS_DIRNAME
    if not uploads.exists():
        return []
    return [p for p in uploads.rglob("*") if p.is_file()]


class TestUploads:
    def test_upload_defaults(self, client, settings, project, folder, upload):
        video = upload("clip.mp4", b"\x00" * 1024, "video/mp4")

        assert video["name"] == "clip.mp4"
        assert video["file_size"] == 1024
        assert video["file_type"] == "video/mp4"
        assert video["duration"] is None
        assert video["video_status"] == "no_status"
        assert video["is_hidden"] is False
        assert video["file_path"].startswith(f"uploads/{project['id']}/{folder['id']}/")
        assert video["file_path"].endswith("-clip.mp4")
        assert (Path(settings.STORAGE_ROOT) / video["file_path"]).stat().st_size == 1024

    def test_non_video_rejected_without_row_or_file(self, client, settings, videos_url):
        resp = client.post(videos_url, files={"file": ("notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid file type"
        assert client.get(videos_url).json() == []
        assert _stored_files(settings) == []

    def test_missing_file_field(self, client, videos_url):
        resp = client.post(videos_url, data={"other": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "File not found"

    def test_too_large(self, client, settings, videos_url):
        big = b"\x00" * (settings.max_upload_bytes + 1)
        resp = client.post(videos_url, files={"file": ("big.mp4", big, "video/mp4")})
        assert resp.status_code == 400
        assert resp.json()["error"] == "File too large"
        assert _stored_files(settings) == []

    def test_unknown_folder(self, client, project, settings):
        url = f"/api/v1/projects/{project['id']}/folders/missing/videos"
        resp = client.post(url, files={"file": ("clip.mp4", b"\x00" * 10, "video/mp4")})
        assert resp.status_code == 404
        assert _stored_files(settings) == []

    def test_fallback_copy(self, tmp_path, settings, project, folder):
        from fastapi.testclient import TestClient
        from videoreview.main import create_app

        settings.FALLBACK_UPLOAD_DIR = str(tmp_path / "mirror")
        with TestClient(create_app(settings)) as c:
            url = f"/api/v1/projects/{project['id']}/folders/{folder['id']}/videos"
            video = c.post(url, files={"file": ("clip.mp4", b"\x01" * 64, "video/mp4")}).json()

        mirrored = tmp_path / "mirror" / Path(video["file_path"]).name
        assert mirrored.read_bytes() == b"\x01" * 64


class TestVideoStatus:
    def test_status_and_processing(self, client, settings, videos_url, upload):
        video = upload()
        url = f"{videos_url}/{video['id']}/status"

        body = client.get(url).json()
        assert body["processing"] is False
        assert body["duration"] == 0
        assert body["video_status"] == "no_status"

        (Path(settings.STORAGE_ROOT) / video["file_path"]).unlink()
        assert client.get(url).json()["processing"] is True

    def test_patch_status(self, client, videos_url, upload):
        video = upload()
        url = f"{videos_url}/{video['id']}"

        resp = client.patch(url, json={"video_status": "approved"})
        assert resp.status_code == 200
        assert resp.json()["video_status"] == "approved"

        assert client.patch(url, json={}).status_code == 400
        assert client.patch(url, json={"video_status": "shipped"}).status_code == 400

    def test_put_status(self, client, videos_url, upload):
        video = upload()
        resp = client.put(f"{videos_url}/{video['id']}/status", json={"status": "review"})
        assert resp.status_code == 200
        assert resp.json()["video_status"] == "review"

    def test_update_metadata(self, client, videos_url, upload):
        video = upload()
        resp = client.put(f"{videos_url}/{video['id']}", json={"duration": 12.5})
        assert resp.status_code == 200
        assert resp.json()["duration"] == 12.5
        assert resp.json()["name"] == "clip.mp4"

    def test_info(self, client, project, folder, upload):
        video = upload()
        body = client.get(f"/api/v1/videos/{video['id']}/info").json()
        assert body["project_id"] == project["id"]
        assert body["folder_id"] == folder["id"]
        assert client.get("/api/v1/videos/missing/info").status_code == 404
