from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class VideoVersion(BaseModelDB, table=True):
    """Rendu alternatif d'une vidéo (nouvel upload ou vidéo existante fusionnée)."""
    __tablename__ = "video_versions"

    project_id: str = Field(foreign_key="projects.id", index=True, nullable=False)
    folder_id: str = Field(foreign_key="folders.id", index=True, nullable=False)
    video_id: str = Field(foreign_key="videos.id", index=True, nullable=False)
    # vidéo (ou version) d'origine ; pas de FK : la source peut être supprimée plus tard
    source_video_id: str = Field(nullable=False)

    file_path: str
    file_size: int
    file_type: str
    duration: Optional[float] = Field(default=None)
