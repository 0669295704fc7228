from typing import Sequence

from sqlalchemy import literal_column
from sqlmodel import select, func

from videoreview.db.repositories.base import BaseRepository
from videoreview.db.models.videos import Video


class VideoRepository(BaseRepository[Video]):
    """CRUD Vidéos + requêtes spécifiques."""
    model = Video

    def list_visible(self, project_id: str, folder_id: str) -> Sequence[Video]:
        """Vidéos du dossier, hors vidéos fusionnées comme version (is_hidden)."""
        stmt = (
            select(Video)
            .where(
                Video.project_id == project_id,
                Video.folder_id == folder_id,
                Video.is_hidden == False,  # noqa: E712
            )
            .order_by(Video.created_at.desc(), literal_column("rowid").desc())
        )
        return self._all(stmt)

    def count_by_file_path(self, file_path: str) -> int:
        stmt = select(func.count(Video.id)).where(Video.file_path == file_path)
        return int(self._read(lambda: self.session.exec(stmt).one()))

    def all_file_paths(self) -> Sequence[str]:
        return self._all(select(Video.file_path))
