import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from videoreview.core.errors import NotFoundError, ValidationError
from videoreview.db.models.comments import Comment
from videoreview.db.models.video_versions import VideoVersion
from videoreview.db.models.videos import Video, VideoStatus
from videoreview.db.repositories.comments import CommentRepository
from videoreview.db.repositories.video_versions import VideoVersionRepository
from videoreview.db.repositories.videos import VideoRepository
from videoreview.features.media.services import IncomingFile, LocalStorage, UploadIngestor
from videoreview.features.videos.schemas import (
    VideoOut,
    VideoStatusOut,
    VideoUpdateIn,
    VideoVersionOut,
    VideoWithVersionsOut,
)

logger = logging.getLogger(__name__)


class VideoService:
    """
    Vidéos d'un dossier : listing (avec versions), métadonnées, statut de revue, suppression.
    Les vidéos cachées (fusionnées comme version) restent accessibles par id.
    """

    def __init__(
        self,
        *,
        repo: VideoRepository,
        version_repo: VideoVersionRepository,
        comment_repo: CommentRepository,
        storage: LocalStorage,
        ingestor: UploadIngestor,
    ):
        self.repo = repo
        self.versions = version_repo
        self.comments = comment_repo
        self.storage = storage
        self.ingestor = ingestor

    # --------------- Queries ---------------
    def list_with_versions(self, project_id: str, folder_id: str) -> List[VideoWithVersionsOut]:
        videos = self.repo.list_visible(project_id, folder_id)
        by_video: Dict[str, List[VideoVersionOut]] = defaultdict(list)
        for version in self.versions.list_for_videos([v.id for v in videos]):
            by_video[version.video_id].append(VideoVersionOut.model_validate(version))

        return [
            VideoWithVersionsOut(
                **VideoOut.model_validate(video).model_dump(),
                versions=by_video[video.id],
                has_versions=bool(by_video[video.id]),
            )
            for video in videos
        ]

    def get_one(self, video_id: str) -> Video:
        video = self.repo.get(video_id)
        if not video:
            raise NotFoundError("Video not found")
        return video

    def status(self, video_id: str) -> VideoStatusOut:
        video = self.get_one(video_id)
        return VideoStatusOut(
            id=video.id,
            name=video.name,
            duration=video.duration or 0,
            # tant que le fichier n'est pas sur disque, la vidéo est "en traitement"
            processing=not self.storage.exists(video.file_path),
            video_status=video.video_status or VideoStatus.NO_STATUS.value,
            file_path=video.file_path,
            created_at=video.created_at,
            updated_at=video.updated_at,
        )

    # --------------- Commands ---------------
    def upload(self, project_id: str, folder_id: str, file: Optional[IncomingFile]) -> Video:
        return self.ingestor.ingest(project_id, folder_id, file)

    def update_metadata(self, video_id: str, payload: VideoUpdateIn) -> Video:
        video = self.get_one(video_id)
        changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
        if not changes:
            return video
        return self.repo.update(video, **changes)

    def set_status(self, video_id: str, status: Optional[VideoStatus]) -> Video:
        if status is None:
            raise ValidationError("Unsupported operation", details="video_status is required")
        video = self.get_one(video_id)
        return self.repo.update(video, video_status=VideoStatus(status).value)

    def delete(self, video_id: str) -> None:
        """Supprime commentaires, versions et vidéo ; puis les fichiers que plus rien ne référence."""
        video = self.get_one(video_id)
        paths = [video.file_path] + [v.file_path for v in self.versions.list_for_video(video_id)]

        def cascade() -> None:
            self.comments.delete_where(Comment.video_id == video_id, commit=False)
            self.versions.delete_where(VideoVersion.video_id == video_id, commit=False)
            self.repo.delete(video, commit=False)

        self.repo.gateway.transaction(self.repo.session, cascade)
        logger.info("Video %s deleted", video_id)

        for path in dict.fromkeys(paths):
            # une vidéo fusionnée partage son fichier avec la version qui la référence
            if self.repo.count_by_file_path(path) or self.versions.count_by_file_path(path):
                continue
            self.storage.remove(path)


class VersionService:
    """
    Versions d'une vidéo.
    - upload d'un nouveau fichier (multipart) ;
    - fusion d'une vidéo existante : la version réutilise son fichier et la source est cachée.
      Irréversible : aucune opération ne ré-affiche la source.
    """

    def __init__(
        self,
        *,
        repo: VideoVersionRepository,
        video_repo: VideoRepository,
        ingestor: UploadIngestor,
    ):
        self.repo = repo
        self.videos = video_repo
        self.ingestor = ingestor

    def _get_video(self, video_id: str) -> Video:
        video = self.videos.get(video_id)
        if not video:
            raise NotFoundError("Video not found")
        return video

    def list(self, video_id: str) -> Sequence[VideoVersion]:
        self._get_video(video_id)
        return self.repo.list_for_video(video_id)

    def create_from_upload(self, video_id: str, file: Optional[IncomingFile]) -> VideoVersion:
        target = self._get_video(video_id)
        return self.ingestor.ingest_version(target, file)

    def merge_existing(self, video_id: str, source_video_id: str) -> VideoVersion:
        if source_video_id == video_id:
            raise ValidationError("A video cannot be a version of itself")
        target = self.videos.get(video_id)
        source = self.videos.get(source_video_id)
        if not target or not source:
            raise NotFoundError("Video not found")
        if source.project_id != target.project_id:
            # le fichier partagé suit le cycle de vie du projet de la source
            raise ValidationError("Source video must belong to the same project")

        def merge() -> VideoVersion:
            version = self.repo.create(
                commit=False,
                project_id=target.project_id,
                folder_id=target.folder_id,
                video_id=target.id,
                source_video_id=source.id,
                file_path=source.file_path,
                file_size=source.file_size,
                file_type=source.file_type,
                duration=source.duration,
            )
            self.videos.update(source, commit=False, is_hidden=True)
            return version

        version = self.repo.gateway.transaction(self.repo.session, merge)
        self.repo.refresh(version)
        logger.info("Video %s merged as version of %s", source_video_id, video_id)
        return version

    def update_duration(self, video_id: str, version_id: str, duration: float) -> VideoVersion:
        version = self.repo.get(version_id)
        if not version or version.video_id != video_id:
            raise NotFoundError("Version not found")
        return self.repo.update(version, duration=duration)
