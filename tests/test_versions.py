from pathlib import Path


class TestVersions:
    def test_merge_hides_source(self, client, videos_url, upload):
        target = upload("v1.mp4")
        source = upload("v2.mp4")

        resp = client.post(f"{videos_url}/{target['id']}/versions", json={"sourceVideoId": source["id"]})
        assert resp.status_code == 201
        version = resp.json()
        assert version["video_id"] == target["id"]
        assert version["source_video_id"] == source["id"]
        assert version["file_path"] == source["file_path"]

        listing = client.get(videos_url).json()
        assert [v["id"] for v in listing] == [target["id"]]
        assert listing[0]["has_versions"] is True
        assert [v["id"] for v in listing[0]["versions"]] == [version["id"]]

        hidden = client.get(f"{videos_url}/{source['id']}")
        assert hidden.status_code == 200
        assert hidden.json()["is_hidden"] is True

    def test_merge_errors(self, client, videos_url, upload):
        video = upload()
        url = f"{videos_url}/{video['id']}/versions"

        assert client.post(url, json={"sourceVideoId": video["id"]}).status_code == 400
        assert client.post(url, json={"sourceVideoId": "missing"}).status_code == 404

        resp = client.post(url, json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Source video ID not provided"

        resp = client.post(url, content=b"raw", headers={"content-type": "text/plain"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid content type"

    def test_upload_version(self, client, settings, videos_url, upload):
        video = upload()
        url = f"{videos_url}/{video['id']}/versions"

        resp = client.post(url, files={"file": ("cut2.mp4", b"\x02" * 256, "video/mp4")})
        assert resp.status_code == 201
        version = resp.json()
        assert f"/{video['id']}/versions/" in version["file_path"]
        assert (Path(settings.STORAGE_ROOT) / version["file_path"]).is_file()

        second = client.post(url, files={"file": ("cut3.mp4", b"\x03" * 256, "video/mp4")}).json()
        ids = [v["id"] for v in client.get(url).json()]
        assert ids == [second["id"], version["id"]]

    def test_update_version_duration(self, client, videos_url, upload):
        video = upload()
        url = f"{videos_url}/{video['id']}/versions"
        version = client.post(url, files={"file": ("cut2.mp4", b"\x02" * 16, "video/mp4")}).json()

        resp = client.put(f"{url}/{version['id']}", json={"duration": 3.2})
        assert resp.status_code == 200
        assert resp.json()["duration"] == 3.2
        assert client.put(f"{url}/missing", json={"duration": 1}).status_code == 404

    def test_delete_keeps_file_shared_with_merged_video(self, client, settings, videos_url, upload):
        target = upload("v1.mp4")
        source = upload("v2.mp4")
        client.post(f"{videos_url}/{target['id']}/versions", json={"sourceVideoId": source["id"]})

        resp = client.delete(f"{videos_url}/{target['id']}")
        assert resp.status_code == 200

        root = Path(settings.STORAGE_ROOT)
        assert not (root / target["file_path"]).exists()
        # la vidéo source (cachée) existe toujours et référence ce fichier
        assert (root / source["file_path"]).is_file()
        assert client.get(f"{videos_url}/{source['id']}").status_code == 200


class TestMergeAcrossProjects:
    def test_source_from_other_project_rejected(self, client, videos_url, upload):
        target = upload("v1.mp4")

        other = client.post("/api/v1/projects", json={"name": "Autre"}).json()
        other_folder = client.post(f"/api/v1/projects/{other['id']}/folders", json={"name": "Rushes"}).json()
        other_url = f"/api/v1/projects/{other['id']}/folders/{other_folder['id']}/videos"
        source = client.post(other_url, files={"file": ("v2.mp4", b"\x00" * 64, "video/mp4")}).json()

        resp = client.post(f"{videos_url}/{target['id']}/versions", json={"sourceVideoId": source["id"]})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Source video must belong to the same project"
        assert client.get(f"{other_url}/{source['id']}").json()["is_hidden"] is False
