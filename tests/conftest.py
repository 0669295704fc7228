import pytest
from fastapi.testclient import TestClient

from videoreview.core.config import Settings
from videoreview.db.session import Database
from videoreview.main import create_app


@pytest.fixture
def settings(tmp_path):
    """Base SQLite et racine de stockage isolées dans tmp_path."""
    return Settings(
        ENV="test",
        LOG_LEVEL="WARNING",
        SQLITE_PATH=str(tmp_path / "test.sqlite"),
        STORAGE_ROOT=str(tmp_path / "public"),
        DB_BUSY_BACKOFF_SECONDS=0,
        MAX_UPLOAD_MB=1,
    )


@pytest.fixture
def db(settings):
    database = Database.from_settings(settings)
    database.init()
    yield database
    database.dispose()


@pytest.fixture
def session(db):
    with db.session() as s:
        yield s


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


# -----------------------------
# Helpers HTTP
# -----------------------------
@pytest.fixture
def project(client):
    resp = client.post("/api/v1/projects", json={"name": "Spot TV", "description": "Campagne été"})
    assert resp.status_code == 200
    return resp.json()


@pytest.fixture
def folder(client, project):
    resp = client.post(f"/api/v1/projects/{project['id']}/folders", json={"name": "Rushes"})
    assert resp.status_code == 200
    return resp.json()


@pytest.fixture
def videos_url(project, folder):
    return f"/api/v1/projects/{project['id']}/folders/{folder['id']}/videos"


@pytest.fixture
def upload(client, videos_url):
    """upload("clip.mp4") → JSON de la vidéo créée."""
    def _upload(name="clip.mp4", content=b"\x00" * 1024, content_type="video/mp4"):
        resp = client.post(videos_url, files={"file": (name, content, content_type)})
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _upload
