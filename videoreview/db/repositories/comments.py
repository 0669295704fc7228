from typing import List, Optional, Sequence

from sqlalchemy import literal_column, update
from sqlmodel import select

from videoreview.db.repositories.base import BaseRepository
from videoreview.db.models.base import utcnow
from videoreview.db.models.comments import Comment


class CommentRepository(BaseRepository[Comment]):
    model = Comment

    def list_for_video(
        self,
        project_id: str,
        folder_id: str,
        video_id: str,
        *,
        version_id: Optional[str] = None,
    ) -> Sequence[Comment]:
        """Liste plate, ordre de création croissant (rowid départage les ex aequo)."""
        stmt = select(Comment).where(
            Comment.project_id == project_id,
            Comment.folder_id == folder_id,
            Comment.video_id == video_id,
        )
        if version_id is not None:
            stmt = stmt.where(Comment.version_id == version_id)
        stmt = stmt.order_by(Comment.created_at.asc(), literal_column("rowid").asc())
        return self._all(stmt)

    def descendant_ids(self, comment_id: str) -> List[str]:
        """Toutes les réponses, à n'importe quelle profondeur."""
        found: List[str] = []
        frontier = [comment_id]
        while frontier:
            stmt = select(Comment.id).where(Comment.parent_id.in_(frontier))
            frontier = [c for c in self._all(stmt) if c not in found]
            found.extend(frontier)
        return found

    def set_likes(self, comment_id: str, *, likes: int, liked_by: str) -> None:
        """Écrit likes et liked_by dans un seul UPDATE."""
        stmt = (
            update(Comment)
            .where(Comment.id == comment_id)
            .values(likes=likes, liked_by=liked_by, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self._write(lambda: self.session.execute(stmt), commit=True)
