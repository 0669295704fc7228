import sqlite3

import pytest
from sqlalchemy.exc import OperationalError

from videoreview.core.errors import PersistenceError
from videoreview.db.repositories.projects import ProjectRepository
from videoreview.db.session import Database, is_busy_error


def _locked():
    return OperationalError("INSERT ...", {}, sqlite3.OperationalError("database is locked"))


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def gateway(settings, sleeps):
    database = Database(settings.DATABASE_URL, busy_retries=3, busy_backoff=0.5, sleep=sleeps.append)
    database.init()
    yield database
    database.dispose()


class TestBusyRetry:
    def test_retries_then_succeeds(self, gateway, sleeps):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise _locked()
            return "ok"

        assert gateway.call(flaky) == "ok"
        assert len(attempts) == 3
        assert sleeps == [0.5, 1.0]

    def test_gives_up_after_retries(self, gateway, sleeps):
        def always_locked():
            raise _locked()

        with pytest.raises(PersistenceError):
            gateway.call(always_locked)
        assert sleeps == [0.5, 1.0, 1.5]

    def test_other_errors_are_not_retried(self, gateway, sleeps):
        def broken():
            raise OperationalError("SELECT", {}, sqlite3.OperationalError("no such table: nope"))

        with pytest.raises(PersistenceError):
            gateway.call(broken)
        assert sleeps == []

    def test_is_busy_error(self):
        assert is_busy_error(_locked())
        assert not is_busy_error(ValueError("database is locked"))


class TestGateway:
    def test_pragmas_applied(self, db):
        assert db.execute("PRAGMA foreign_keys")[0]["foreign_keys"] == 1
        assert db.execute("PRAGMA journal_mode")[0]["journal_mode"] == "wal"

    def test_execute_with_params(self, db):
        db.execute(
            "INSERT INTO projects (id, name, created_at, updated_at) VALUES (?, ?, ?, ?)",
            ("p1", "Brut", "2024-01-01 00:00:00", "2024-01-01 00:00:00"),
        )
        rows = db.execute("SELECT name FROM projects WHERE id = ?", ("p1",))
        assert rows == [{"name": "Brut"}]

    def test_repository_roundtrip(self, session):
        repo = ProjectRepository(session)
        created = repo.create(name="Démo")
        assert repo.get(created.id).name == "Démo"
        assert repo.get("missing") is None
        assert repo.get_by_name("Démo").id == created.id

    def test_unwritable_database_path(self, tmp_path):
        from videoreview.core.errors import StorageError

        blocker = tmp_path / "file"
        blocker.write_text("x")
        database = Database(f"sqlite:///{blocker}/sub/db.sqlite")
        with pytest.raises(StorageError):
            database.init()


class TestConcurrency:
    def test_open_session_does_not_block_other_threads(self, db):
        import threading

        results = []
        with db.session():
            worker = threading.Thread(target=lambda: results.append(db.execute("SELECT 1 AS one")))
            worker.start()
            worker.join(timeout=5)
        assert results == [[{"one": 1}]]

    def test_more_requests_than_threadpool_slots(self, client):
        """Plus de requêtes simultanées que de threads disponibles (40 par défaut)."""
        import asyncio

        import httpx

        client.post("/api/v1/projects", json={"name": "Charge"})

        async def burst():
            transport = httpx.ASGITransport(app=client.app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
                calls = [ac.get("/api/v1/projects") for _ in range(100)]
                return await asyncio.wait_for(asyncio.gather(*calls), timeout=30)

        responses = asyncio.run(burst())
        assert len(responses) == 100
        assert all(r.status_code == 200 for r in responses)
        assert all(r.json()[0]["name"] == "Charge" for r in responses)


class TestRepositoryRetry:
    def test_refresh_after_commit_is_retried(self, gateway, sleeps, monkeypatch):
        with gateway.session() as session:
            repo = ProjectRepository(session)
            original = session.refresh
            failures = []

            def flaky_refresh(entity, *args, **kwargs):
                if not failures:
                    failures.append(1)
                    raise _locked()
                return original(entity, *args, **kwargs)

            monkeypatch.setattr(session, "refresh", flaky_refresh)
            created = repo.create(name="Relance")

        assert created.name == "Relance"
        assert sleeps == [0.5]
