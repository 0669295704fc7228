from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class Comment(BaseModelDB, table=True):
    """
    Commentaire horodaté sur une vidéo. Les réponses pointent vers leur parent (parent_id),
    l'arbre est reconstruit en mémoire par CommentService.
    drawing_data et liked_by sont stockés en JSON texte.
    """
    __tablename__ = "comments"

    project_id: str = Field(foreign_key="projects.id", index=True, nullable=False)
    folder_id: str = Field(foreign_key="folders.id", index=True, nullable=False)
    video_id: str = Field(foreign_key="videos.id", index=True, nullable=False)
    version_id: Optional[str] = Field(default=None, foreign_key="video_versions.id", index=True)
    parent_id: Optional[str] = Field(default=None, foreign_key="comments.id", index=True)

    user_name: str
    user_email: str
    text: str = Field(default="")
    video_time: float = Field(default=0.0, description="Position dans la vidéo (secondes)")
    drawing_data: Optional[str] = Field(default=None, description='JSON {"imageData", "timestamp"}')

    likes: int = Field(default=0, ge=0)
    liked_by: str = Field(default="[]", description="JSON : liste des emails")
    resolved: bool = Field(default=False)
