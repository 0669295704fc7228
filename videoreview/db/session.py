"""
➡️ But : Configurer la base SQLite et gérer l'accès à l'unique connexion.

Database : ressource construite explicitement (init() au démarrage, dispose() à l'arrêt),
stockée sur app.state.db par main.py. Pas de connexion globale au niveau module.

- execute() : SQL brut paramétré (placeholders "?"), renvoie une liste de dicts.
- session() : une Session SQLModel sur l'unique connexion (aucun verrou tenu pendant la requête).
- call() / transaction() : chaque unité de travail s'exécute sous un verrou réentrant
  (SQLite = un seul écrivain) ; relance jusqu'à DB_BUSY_RETRIES fois si la base est verrouillée,
  avec une attente linéaire (backoff × tentative).

get_session() : dépendance FastAPI qui ouvre une session, la fournit aux routes, puis la ferme proprement.
"""

import logging
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models for creating all tables
from videoreview.db.models.projects import Project  # noqa: F401
from videoreview.db.models.folders import Folder  # noqa: F401
from videoreview.db.models.videos import Video  # noqa: F401
from videoreview.db.models.video_versions import VideoVersion  # noqa: F401
from videoreview.db.models.comments import Comment  # noqa: F401

from videoreview.core.config import Settings
from videoreview.core.errors import PersistenceError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BUSY_MARKERS = ("database is locked", "database is busy", "database table is locked")


def is_busy_error(exc: BaseException) -> bool:
    """Vrai si l'erreur SQLite correspond à un verrou transitoire."""
    if not isinstance(exc, OperationalError):
        return False
    return any(marker in str(exc.orig).lower() for marker in _BUSY_MARKERS)


def _sqlite_file(url: str) -> Optional[Path]:
    # sqlite:///relatif.db ou sqlite:////abs/chemin.db ; None pour :memory:
    if not url.startswith("sqlite:"):
        return None
    raw = url.split("///", 1)[1] if "///" in url else ""
    if not raw or raw == ":memory:":
        return None
    return Path(raw)


class Database:
    def __init__(
        self,
        url: str,
        *,
        busy_retries: int = 3,
        busy_backoff: float = 0.5,
        busy_timeout_ms: int = 5000,
        echo: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = url
        self.busy_retries = busy_retries
        self.busy_backoff = busy_backoff
        self.busy_timeout_ms = busy_timeout_ms
        self.echo = echo
        self._sleep = sleep
        self._lock = threading.RLock()
        self._engine: Optional[Engine] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            busy_retries=settings.DB_BUSY_RETRIES,
            busy_backoff=settings.DB_BUSY_BACKOFF_SECONDS,
            busy_timeout_ms=settings.DB_BUSY_TIMEOUT_MS,
            echo=False,
        )

    # ---------- Cycle de vie ----------

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise PersistenceError("Database not initialised")
        return self._engine

    def init(self) -> None:
        """Vérifie le fichier, ouvre l'unique connexion, applique les PRAGMA et crée les tables."""
        self._ensure_file()

        # StaticPool : une seule connexion partagée, jamais de pool
        engine = create_engine(
            self.url,
            echo=self.echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine, "connect", self._on_connect)
        self._engine = engine

        try:
            SQLModel.metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise PersistenceError("Unable to create schema", details=str(e)) from e
        self.execute("SELECT 1")
        logger.info("Database ready at %s", self.url)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")

    def _ensure_file(self) -> None:
        path = _sqlite_file(self.url)
        if path is None:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists():
                logger.info("Creating database file %s", path)
                path.touch()
            with path.open("ab"):
                pass
        except OSError as e:
            raise StorageError(f"Database file is not writable: {path}", details=str(e)) from e

    def _on_connect(self, dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA synchronous = NORMAL")
        cursor.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
        cursor.close()

    # ---------- Accès ----------

    @contextmanager
    def session(self) -> Iterator[Session]:
        # verrou pris par unité de travail (call), jamais pour toute la requête :
        # un thread en attente ne doit pas occuper un slot dont le détenteur a besoin
        session = Session(self.engine, expire_on_commit=False, info={"gateway": self})
        try:
            yield session
        finally:
            # la fermeture fait un rollback sur la connexion partagée
            with self._lock:
                session.close()

    def call(self, fn: Callable[[], T]) -> T:
        """Exécute fn() sous le verrou ; relance sur verrou SQLite, lève PersistenceError sinon."""
        attempt = 0
        while True:
            try:
                with self._lock:
                    return fn()
            except OperationalError as e:
                if is_busy_error(e) and attempt < self.busy_retries:
                    attempt += 1
                    delay = self.busy_backoff * attempt
                    logger.warning("Database busy, retry %s/%s in %.1fs", attempt, self.busy_retries, delay)
                    self._sleep(delay)
                    continue
                raise PersistenceError("Database operation failed", details=str(e.orig)) from e
            except DBAPIError as e:
                raise PersistenceError("Database operation failed", details=str(e.orig)) from e
            except SQLAlchemyError as e:
                raise PersistenceError("Database operation failed", details=str(e)) from e

    def transaction(self, session: Session, work: Callable[[], T]) -> T:
        """
        Unité de travail : work() puis commit, rollback sur toute erreur.
        Toute l'unité est rejouée si la base est verrouillée.
        """
        def attempt() -> T:
            try:
                result = work()
                session.commit()
            except Exception:
                session.rollback()
                raise
            return result

        return self.call(attempt)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """SQL brut avec paramètres positionnels ; renvoie les lignes sous forme de dicts."""
        def run() -> List[Dict[str, Any]]:
            with self.session() as session:
                raw = session.connection().exec_driver_sql(sql, tuple(params))
                rows = [dict(r._mapping) for r in raw] if raw.returns_rows else []
                session.commit()
                return rows

        return self.call(run)


def gateway_of(session: Session) -> Database:
    return session.info["gateway"]


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_session(request: Request):
    """
    Dépendance FastAPI : fournit une session par requête.
    Utilisation :
        def route(..., session: Session = Depends(get_session)):
            ...
    """
    with get_database(request).session() as session:
        yield session
