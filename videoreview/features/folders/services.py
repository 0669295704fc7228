import logging
from typing import List, Optional, Sequence

from videoreview.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from videoreview.db.models.comments import Comment
from videoreview.db.models.folders import Folder
from videoreview.db.models.video_versions import VideoVersion
from videoreview.db.models.videos import Video
from videoreview.db.repositories.comments import CommentRepository
from videoreview.db.repositories.folders import FolderRepository
from videoreview.db.repositories.projects import ProjectRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.features.folders.schemas import FolderCreateIn, FolderUpdateIn
from videoreview.features.media.services import LocalStorage

logger = logging.getLogger(__name__)


class FolderService:
    """
    Dossiers d'un projet.
    - Nom unique par projet (ConflictError, vérifié ici et non par la base).
    - Un dossier demandé sous un autre projet → ForbiddenError.
    - Suppression : le sous-arbre complet et son contenu, en une transaction.
    """

    def __init__(
        self,
        *,
        repo: FolderRepository,
        project_repo: ProjectRepository,
        video_repo: VideoRepository,
        version_repo: VideoVersionRepository,
        comment_repo: CommentRepository,
        storage: LocalStorage,
    ):
        self.repo = repo
        self.projects = project_repo
        self.videos = video_repo
        self.versions = version_repo
        self.comments = comment_repo
        self.storage = storage

    # --------------- Helpers ---------------
    def _ensure_project(self, project_id: str) -> None:
        if not self.projects.get(project_id):
            raise NotFoundError("Project not found")

    def _ensure_unique_name(self, project_id: str, name: str, *, exclude_id: Optional[str] = None) -> None:
        existing = self.repo.get_by_name(project_id, name)
        if existing and existing.id != exclude_id:
            raise ConflictError("A folder with this name already exists")

    # --------------- Queries ---------------
    def list(self, project_id: str) -> Sequence[Folder]:
        self._ensure_project(project_id)
        return self.repo.list_by_project(project_id)

    def get_one(self, project_id: str, folder_id: str) -> Folder:
        folder = self.repo.get(folder_id)
        if not folder:
            raise NotFoundError("Folder not found")
        if folder.project_id != project_id:
            raise ForbiddenError("Folder does not belong to this project")
        return folder

    # --------------- Commands ---------------
    def create(self, project_id: str, payload: FolderCreateIn) -> Folder:
        self._ensure_project(project_id)
        name = payload.name.strip()
        if not name:
            raise ValidationError("Folder name is required")
        self._ensure_unique_name(project_id, name)

        if payload.parent_id:
            parent = self.repo.get(payload.parent_id)
            if not parent or parent.project_id != project_id:
                raise ValidationError("Parent folder not found in this project")

        return self.repo.create(project_id=project_id, name=name, parent_id=payload.parent_id)

    def rename(self, project_id: str, folder_id: str, payload: FolderUpdateIn) -> Folder:
        folder = self.get_one(project_id, folder_id)
        name = payload.name.strip()
        if not name:
            raise ValidationError("Folder name is required")
        if name == folder.name:
            return folder
        self._ensure_unique_name(project_id, name, exclude_id=folder.id)
        return self.repo.update(folder, name=name)

    def delete(self, project_id: str, folder_id: str) -> None:
        self.get_one(project_id, folder_id)
        folder_ids: List[str] = self.repo.subtree_ids(folder_id)

        def cascade() -> None:
            self.comments.delete_where(Comment.folder_id.in_(folder_ids), commit=False)
            self.versions.delete_where(VideoVersion.folder_id.in_(folder_ids), commit=False)
            self.videos.delete_where(Video.folder_id.in_(folder_ids), commit=False)
            self.repo.delete_where(Folder.id.in_(folder_ids), commit=False)

        self.repo.gateway.transaction(self.repo.session, cascade)
        logger.info("Folder %s deleted (%s folders)", folder_id, len(folder_ids))
        for fid in folder_ids:
            self.storage.remove_tree(project_id, fid)
