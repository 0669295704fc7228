from enum import Enum
from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class VideoStatus(str, Enum):
    NO_STATUS = "no_status"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    APPROVED = "approved"
    REJECTED = "rejected"


class Video(BaseModelDB, table=True):
    """Vidéos stockées sous STORAGE_ROOT, référencées en DB."""
    __tablename__ = "videos"

    project_id: str = Field(foreign_key="projects.id", index=True, nullable=False)
    folder_id: str = Field(foreign_key="folders.id", index=True, nullable=False)

    name: str = Field(description="Nom d'origine du fichier")
    file_path: str = Field(description="Chemin relatif sous la racine statique")
    file_size: int = Field(description="Taille en octets")
    file_type: str = Field(description="Type MIME (video/mp4, video/webm, etc.)")
    duration: Optional[float] = Field(default=None, description="Durée en secondes, mesurée par le client")

    # stocké en texte (valeur de VideoStatus), validé par les schémas
    video_status: str = Field(default=VideoStatus.NO_STATUS.value, index=True, description="Statut de revue")
    # vrai quand la vidéo a été fusionnée comme version d'une autre
    is_hidden: bool = Field(default=False, index=True)
