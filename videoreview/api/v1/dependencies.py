"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_comment_service() : crée un CommentService à partir d’une session DB.

read_version_payload() : lit le corps (multipart OU JSON) avant d'ouvrir la session,
pour ne pas garder la base verrouillée pendant un upload.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session
from starlette.datastructures import UploadFile

from videoreview.core.config import Settings
from videoreview.core.errors import ValidationError
from videoreview.db.session import get_session

from videoreview.db.repositories.projects import ProjectRepository
from videoreview.db.repositories.folders import FolderRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.comments import CommentRepository

from videoreview.features.media.services import IncomingFile, LocalStorage, MediaStreamService, UploadIngestor
from videoreview.features.projects.services import ProjectService
from videoreview.features.folders.services import FolderService
from videoreview.features.videos.schemas import VersionMergeIn
from videoreview.features.videos.services import VideoService, VersionService
from videoreview.features.comments.services import CommentService


# -----------------------------
# Settings / stockage
# -----------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(settings: Settings = Depends(get_settings)) -> LocalStorage:
    return LocalStorage(
        settings.storage_root,
        uploads_dirname=settings.UPLOADS_DIRNAME,
        fallback_dir=settings.FALLBACK_UPLOAD_DIR,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )


def get_media_stream_service(
    storage: LocalStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> MediaStreamService:
    return MediaStreamService(storage, chunk_size=settings.STREAM_CHUNK_SIZE)


# -----------------------------
# Repositories
# -----------------------------
def get_project_repository(session: Session = Depends(get_session)) -> ProjectRepository:
    return ProjectRepository(session)

def get_folder_repository(session: Session = Depends(get_session)) -> FolderRepository:
    return FolderRepository(session)

def get_video_repository(session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(session)

def get_version_repository(session: Session = Depends(get_session)) -> VideoVersionRepository:
    return VideoVersionRepository(session)

def get_comment_repository(session: Session = Depends(get_session)) -> CommentRepository:
    return CommentRepository(session)


# -----------------------------
# Services
# -----------------------------
def get_upload_ingestor(
    settings: Settings = Depends(get_settings),
    storage: LocalStorage = Depends(get_storage),
    folder_repo: FolderRepository = Depends(get_folder_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
    version_repo: VideoVersionRepository = Depends(get_version_repository),
) -> UploadIngestor:
    return UploadIngestor(
        storage=storage,
        folder_repo=folder_repo,
        video_repo=video_repo,
        version_repo=version_repo,
        max_bytes=settings.max_upload_bytes,
    )

def get_project_service(
    project_repo: ProjectRepository = Depends(get_project_repository),
    folder_repo: FolderRepository = Depends(get_folder_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
    version_repo: VideoVersionRepository = Depends(get_version_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    storage: LocalStorage = Depends(get_storage),
) -> ProjectService:
    return ProjectService(
        repo=project_repo,
        folder_repo=folder_repo,
        video_repo=video_repo,
        version_repo=version_repo,
        comment_repo=comment_repo,
        storage=storage,
    )

def get_folder_service(
    folder_repo: FolderRepository = Depends(get_folder_repository),
    project_repo: ProjectRepository = Depends(get_project_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
    version_repo: VideoVersionRepository = Depends(get_version_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    storage: LocalStorage = Depends(get_storage),
) -> FolderService:
    return FolderService(
        repo=folder_repo,
        project_repo=project_repo,
        video_repo=video_repo,
        version_repo=version_repo,
        comment_repo=comment_repo,
        storage=storage,
    )

def get_video_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    version_repo: VideoVersionRepository = Depends(get_version_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    storage: LocalStorage = Depends(get_storage),
    ingestor: UploadIngestor = Depends(get_upload_ingestor),
) -> VideoService:
    return VideoService(
        repo=video_repo,
        version_repo=version_repo,
        comment_repo=comment_repo,
        storage=storage,
        ingestor=ingestor,
    )

def get_version_service(
    version_repo: VideoVersionRepository = Depends(get_version_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
    ingestor: UploadIngestor = Depends(get_upload_ingestor),
) -> VersionService:
    return VersionService(repo=version_repo, video_repo=video_repo, ingestor=ingestor)

def get_comment_service(
    comment_repo: CommentRepository = Depends(get_comment_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
    version_repo: VideoVersionRepository = Depends(get_version_repository),
) -> CommentService:
    return CommentService(repo=comment_repo, video_repo=video_repo, version_repo=version_repo)


# -----------------------------
# Corps de POST .../versions
# -----------------------------
@dataclass
class VersionPayload:
    file: Optional[IncomingFile] = None
    source_video_id: Optional[str] = None


async def read_version_payload(request: Request) -> VersionPayload:
    """
    multipart/form-data → nouveau fichier ; application/json → {"sourceVideoId"}.
    À déclarer AVANT le service dans la route : FastAPI résout les dépendances dans l'ordre.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            return VersionPayload(file=None)
        return VersionPayload(file=IncomingFile.from_upload(upload))

    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError as e:
            raise ValidationError("Invalid JSON body", details=str(e)) from e
        try:
            merge = VersionMergeIn.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError("Source video ID not provided", details=e.errors(include_url=False)) from e
        return VersionPayload(source_video_id=merge.source_video_id)

    raise ValidationError(
        "Invalid content type",
        details="Content must be multipart/form-data or application/json",
    )
