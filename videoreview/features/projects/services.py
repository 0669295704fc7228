import logging
from typing import Sequence

from videoreview.core.errors import NotFoundError
from videoreview.db.models.comments import Comment
from videoreview.db.models.folders import Folder
from videoreview.db.models.projects import Project
from videoreview.db.models.video_versions import VideoVersion
from videoreview.db.models.videos import Video
from videoreview.db.repositories.comments import CommentRepository
from videoreview.db.repositories.folders import FolderRepository
from videoreview.db.repositories.projects import ProjectRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.features.media.services import LocalStorage
from videoreview.features.projects.schemas import ProjectCreateIn, ProjectUpdateIn

logger = logging.getLogger(__name__)


class ProjectService:
    """
    CRUD projets.
    La suppression enchaîne commentaires → versions → vidéos → dossiers → projet
    dans une seule transaction, puis supprime les fichiers du projet.
    """

    def __init__(
        self,
        *,
        repo: ProjectRepository,
        folder_repo: FolderRepository,
        video_repo: VideoRepository,
        version_repo: VideoVersionRepository,
        comment_repo: CommentRepository,
        storage: LocalStorage,
    ):
        self.repo = repo
        self.folders = folder_repo
        self.videos = video_repo
        self.versions = version_repo
        self.comments = comment_repo
        self.storage = storage

    def list(self) -> Sequence[Project]:
        return self.repo.list_newest_first()

    def get_one(self, project_id: str) -> Project:
        project = self.repo.get(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def create(self, payload: ProjectCreateIn) -> Project:
        return self.repo.create(name=payload.name, description=payload.description)

    def update(self, project_id: str, payload: ProjectUpdateIn) -> Project:
        project = self.get_one(project_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)
        if not changes:
            return project
        return self.repo.update(project, **changes)

    def delete(self, project_id: str) -> None:
        project = self.get_one(project_id)
        session = self.repo.session

        def cascade() -> None:
            # ordre imposé par les clés étrangères
            self.comments.delete_where(Comment.project_id == project_id, commit=False)
            self.versions.delete_where(VideoVersion.project_id == project_id, commit=False)
            self.videos.delete_where(Video.project_id == project_id, commit=False)
            self.folders.delete_where(Folder.project_id == project_id, commit=False)
            self.repo.delete(project, commit=False)

        self.repo.gateway.transaction(session, cascade)
        logger.info("Project %s deleted", project_id)
        self.storage.remove_tree(project_id)
