from typing import List, Optional, Sequence

from sqlalchemy import literal_column
from sqlmodel import select

from videoreview.db.repositories.base import BaseRepository
from videoreview.db.models.folders import Folder


class FolderRepository(BaseRepository[Folder]):
    """CRUD Dossiers + requêtes spécifiques."""
    model = Folder

    def list_by_project(self, project_id: str) -> Sequence[Folder]:
        stmt = (
            select(Folder)
            .where(Folder.project_id == project_id)
            .order_by(Folder.created_at.desc(), literal_column("rowid").desc())
        )
        return self._all(stmt)

    def get_by_name(self, project_id: str, name: str) -> Optional[Folder]:
        stmt = select(Folder).where(Folder.project_id == project_id, Folder.name == name)
        return self._first(stmt)

    def subtree_ids(self, folder_id: str) -> List[str]:
        """Le dossier et tous ses descendants (parcours en largeur sur parent_id)."""
        ids = [folder_id]
        frontier = [folder_id]
        while frontier:
            stmt = select(Folder.id).where(Folder.parent_id.in_(frontier))
            children = [c for c in self._all(stmt) if c not in ids]
            ids.extend(children)
            frontier = children
        return ids
