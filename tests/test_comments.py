from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest

from videoreview.db.models.comments import Comment
from videoreview.features.comments.services import CommentService


@pytest.fixture
def comments_url(videos_url, upload):
    video = upload()
    return f"{videos_url}/{video['id']}/comments"


class TestCommentsApi:
    def test_defaults(self, client, comments_url):
        resp = client.post(comments_url, json={"text": "Couper ici", "videoTime": 12.5})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user_name"] == "Anonymous"
        assert body["user_email"] == "anonymous@example.com"
        assert body["video_time"] == 12.5
        assert body["likes"] == 0
        assert body["liked_by"] == []
        assert body["resolved"] is False
        assert body["replies"] == []

    def test_text_or_drawing_required(self, client, comments_url):
        resp = client.post(comments_url, json={"author": "Léa"})
        assert resp.status_code == 400

    def test_nan_video_time_becomes_zero(self, client, comments_url):
        resp = client.post(
            comments_url,
            content=b'{"text": "x", "videoTime": NaN}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 200
        assert resp.json()["video_time"] == 0

    def test_forest(self, client, comments_url):
        root = client.post(comments_url, json={"text": "racine"}).json()
        reply = client.post(comments_url, json={"text": "réponse", "parentId": root["id"]}).json()
        client.post(comments_url, json={"text": "sous-réponse", "parentId": reply["id"]})
        other = client.post(comments_url, json={"text": "autre"}).json()

        forest = client.get(comments_url).json()
        assert [c["id"] for c in forest] == [root["id"], other["id"]]
        assert [c["text"] for c in forest[0]["replies"]] == ["réponse"]
        assert [c["text"] for c in forest[0]["replies"][0]["replies"]] == ["sous-réponse"]

    def test_reply_inherits_parent_location(self, client, comments_url, videos_url, upload):
        root = client.post(comments_url, json={"text": "racine"}).json()
        elsewhere = upload("autre.mp4")

        other_url = f"{videos_url}/{elsewhere['id']}/comments"
        reply = client.post(other_url, json={"text": "r", "parentId": root["id"]}).json()
        assert reply["video_id"] == root["video_id"]
        assert reply["folder_id"] == root["folder_id"]

    def test_unknown_parent(self, client, comments_url):
        resp = client.post(comments_url, json={"text": "r", "parentId": "missing"})
        assert resp.status_code == 404

    def test_version_filter(self, client, videos_url, upload):
        video = upload()
        version = client.post(
            f"{videos_url}/{video['id']}/versions",
            files={"file": ("v2.mp4", b"\x00" * 32, "video/mp4")},
        ).json()
        url = f"{videos_url}/{video['id']}/comments"
        client.post(url, json={"text": "sur l'original"})
        client.post(url, json={"text": "sur la v2", "versionId": version["id"]})

        assert len(client.get(url).json()) == 2
        filtered = client.get(url, params={"version_id": version["id"]}).json()
        assert [c["text"] for c in filtered] == ["sur la v2"]

    def test_like_toggle_is_involution(self, client, comments_url):
        comment = client.post(comments_url, json={"text": "top"}).json()
        url = f"{comments_url}/{comment['id']}/like"

        liked = client.post(url, json={"email": "lea@example.com"}).json()
        assert liked["likes"] == 1
        assert liked["liked_by"] == ["lea@example.com"]

        unliked = client.post(url, json={"email": "lea@example.com"}).json()
        assert unliked["likes"] == 0
        assert unliked["liked_by"] == []

    def test_like_errors(self, client, comments_url):
        comment = client.post(comments_url, json={"text": "top"}).json()
        assert client.post(f"{comments_url}/{comment['id']}/like", json={}).status_code == 400
        assert client.post(f"{comments_url}/missing/like", json={"email": "a@b.c"}).status_code == 404

    def test_update(self, client, comments_url):
        drawing = {"imageData": "data:image/png;base64,AAAA", "timestamp": 4}
        comment = client.post(comments_url, json={"text": "v1", "drawing": drawing}).json()
        url = f"{comments_url}/{comment['id']}"

        assert client.put(url, json={}).status_code == 400

        body = client.put(url, json={"text": "v2", "resolved": True}).json()
        assert body["text"] == "v2"
        assert body["resolved"] is True
        assert body["drawing_data"] == {"imageData": "data:image/png;base64,AAAA", "timestamp": 4.0}

        body = client.put(url, json={"text": "v3", "drawing": None}).json()
        assert body["drawing_data"] is None

    def test_delete_removes_replies(self, client, comments_url):
        root = client.post(comments_url, json={"text": "racine"}).json()
        client.post(comments_url, json={"text": "réponse", "parentId": root["id"]})

        resp = client.delete(f"{comments_url}/{root['id']}")
        assert resp.status_code == 200
        assert client.get(comments_url).json() == []
        assert client.delete(f"{comments_url}/{root['id']}").status_code == 404


class TestCommentTree:
    """Reconstruction de l'arbre sans base : repository simulé."""

    def _comment(self, id_, parent_id=None, minutes=0):
        return Comment(
            id=id_,
            project_id="p",
            folder_id="f",
            video_id="v",
            parent_id=parent_id,
            user_name="Léa",
            user_email="lea@example.com",
            text=id_,
            created_at=datetime(2024, 1, 1) + timedelta(minutes=minutes),
        )

    def test_orphan_reply_is_dropped(self, caplog):
        repo = Mock()
        repo.list_for_video.return_value = [
            self._comment("a"),
            self._comment("b", parent_id="a", minutes=1),
            self._comment("c", parent_id="gone", minutes=2),
        ]
        svc = CommentService(repo=repo, video_repo=Mock(), version_repo=Mock())

        forest = svc.list_tree("p", "f", "v")

        assert [c.id for c in forest] == ["a"]
        assert [c.id for c in forest[0].replies] == ["b"]
        assert "parent gone not found" in caplog.text

    def test_reply_listed_before_parent(self):
        repo = Mock()
        repo.list_for_video.return_value = [
            self._comment("child", parent_id="root"),
            self._comment("root"),
        ]
        svc = CommentService(repo=repo, video_repo=Mock(), version_repo=Mock())

        forest = svc.list_tree("p", "f", "v")
        assert [c.id for c in forest] == ["root"]
        assert [c.id for c in forest[0].replies] == ["child"]
