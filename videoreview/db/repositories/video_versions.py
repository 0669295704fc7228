from typing import Iterable, Sequence

from sqlalchemy import literal_column
from sqlmodel import select, func

from videoreview.db.repositories.base import BaseRepository
from videoreview.db.models.video_versions import VideoVersion


class VideoVersionRepository(BaseRepository[VideoVersion]):
    """CRUD Versions de vidéos."""
    model = VideoVersion

    def list_for_video(self, video_id: str) -> Sequence[VideoVersion]:
        """Versions d'une vidéo, la plus récente d'abord."""
        stmt = (
            select(VideoVersion)
            .where(VideoVersion.video_id == video_id)
            .order_by(VideoVersion.created_at.desc(), literal_column("rowid").desc())
        )
        return self._all(stmt)

    def list_for_videos(self, video_ids: Iterable[str]) -> Sequence[VideoVersion]:
        """Une seule requête pour toutes les vidéos d'un dossier."""
        stmt = (
            select(VideoVersion)
            .where(VideoVersion.video_id.in_(list(video_ids)))
            .order_by(VideoVersion.created_at.desc(), literal_column("rowid").desc())
        )
        return self._all(stmt)

    def count_by_file_path(self, file_path: str) -> int:
        stmt = select(func.count(VideoVersion.id)).where(VideoVersion.file_path == file_path)
        return int(self._read(lambda: self.session.exec(stmt).one()))

    def all_file_paths(self) -> Sequence[str]:
        return self._all(select(VideoVersion.file_path))
