from typing import Optional, Sequence

from sqlalchemy import literal_column
from sqlmodel import select

from videoreview.db.repositories.base import BaseRepository
from videoreview.db.models.projects import Project


class ProjectRepository(BaseRepository[Project]):
    """CRUD Projets."""
    model = Project

    def list_newest_first(self) -> Sequence[Project]:
        stmt = select(Project).order_by(Project.created_at.desc(), literal_column("rowid").desc())
        return self._all(stmt)

    def get_by_name(self, name: str) -> Optional[Project]:
        return self._first(select(Project).where(Project.name == name))
