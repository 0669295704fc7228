"""
➡️ But : assembler toutes les pièces du puzzle.

create_app(settings) crée l’instance FastAPI (app).

Configure :

CORS (autorisations de qui peut appeler ces API)

titre, version, tags

schéma OpenAPI personnalisé

gestionnaires d'erreurs : ReviewError → JSON {"error", "details"} avec le bon code HTTP

Inclut les routers (ex : /api/v1/projects) et le serveur de fichiers /videos/<chemin>.

Ouvre la base SQLite au démarrage (lifespan) et la ferme à l'arrêt.

🔹 Avantages :

Centralise la configuration du serveur HTTP.

Les tests passent leur propre Settings (base et stockage temporaires).

Point unique d’exécution : uvicorn videoreview.main:app --reload.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from videoreview.core.config import Settings, settings as default_settings
from videoreview.core.errors import RangeNotSatisfiableError, ReviewError
from videoreview.core.logging import configure_logging
from videoreview.core.openapi import custom_openapi
from videoreview.db.session import Database

from videoreview.api.v1.routers import comments, folders, media, projects, videos

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RangeNotSatisfiableError)
    async def range_error_handler(request: Request, exc: RangeNotSatisfiableError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_body(),
            headers={"Content-Range": f"bytes */{exc.file_size}"},
        )

    @app.exception_handler(ReviewError)
    async def review_error_handler(request: Request, exc: ReviewError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = Database.from_settings(settings)
        db.init()
        settings.storage_root.mkdir(parents=True, exist_ok=True)
        app.state.db = db
        app.state.settings = settings
        logger.info("%s started (env=%s, storage=%s)", settings.APP_NAME, settings.ENV, settings.storage_root)
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "projects", "description": "Opérations liées aux projets"},
            {"name": "folders", "description": "Opérations liées aux dossiers d'un projet"},
            {"name": "videos", "description": "Upload, statut de revue et versions des vidéos"},
            {"name": "comments", "description": "Commentaires horodatés, réponses, dessins et likes"},
            {"name": "media", "description": "Lecture des fichiers vidéo (Range supporté)"},
        ],
    )

    # CORS (ajustez selon vos besoins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Routers
    app.include_router(projects.router, prefix="/api/v1")
    app.include_router(folders.router, prefix="/api/v1")
    app.include_router(videos.router, prefix="/api/v1")
    app.include_router(videos.info_router, prefix="/api/v1")
    app.include_router(comments.router, prefix="/api/v1")
    app.include_router(media.router)

    # Génération du schéma OpenAPI custom (facultatif, mais propre)
    app.openapi = lambda: custom_openapi(app)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8080, reload=(default_settings.ENV == "dev")) # http://localhost:8080
