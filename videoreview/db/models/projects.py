from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class Project(BaseModelDB, table=True):
    """Projet : regroupe des dossiers de vidéos à revoir."""
    __tablename__ = "projects"

    name: str = Field(index=True, description="Nom du projet")
    description: Optional[str] = Field(default=None, description="Description libre")
