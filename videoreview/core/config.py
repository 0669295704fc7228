"""
➡️ But : Centraliser tous les paramètres configurables (nom d’app, chemin DB, stockage des vidéos, etc.)

Utilise pydantic-settings pour charger automatiquement les variables d’environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from videoreview.core.config import settings
print(settings.APP_NAME)

Les tests construisent leur propre Settings(...) et le passent à create_app().
"""

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Video-Review"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "database.sqlite"  # fichier SQLite unique
    DATABASE_URL: Optional[str] = None    # dérivée de SQLITE_PATH si absente

    DB_BUSY_RETRIES: int = 3              # tentatives supplémentaires si "database is locked"
    DB_BUSY_BACKOFF_SECONDS: float = 0.5  # attente linéaire : backoff × tentative
    DB_BUSY_TIMEOUT_MS: int = 5000        # PRAGMA busy_timeout

    # -----------------------------
    # Stockage des fichiers
    # -----------------------------
    STORAGE_ROOT: str = "public"          # racine statique servie par /videos/...
    UPLOADS_DIRNAME: str = "uploads"
    FALLBACK_UPLOAD_DIR: Optional[str] = None  # copie secondaire (ancien chemin "plat")

    MAX_UPLOAD_MB: int = 2048
    STREAM_CHUNK_SIZE: int = 1024 * 1024

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

    @property
    def storage_root(self) -> Path:
        return Path(self.STORAGE_ROOT).resolve()

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024


# Instance globale importable partout
settings = Settings()
