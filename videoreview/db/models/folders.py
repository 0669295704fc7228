from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class Folder(BaseModelDB, table=True):
    """
    Dossier d'un projet. Les sous-dossiers pointent vers leur parent (parent_id).
    Unicité du nom par projet : contrôlée par FolderService, pas par une contrainte SQL.
    """
    __tablename__ = "folders"

    project_id: str = Field(foreign_key="projects.id", index=True, nullable=False)
    name: str = Field(description="Nom du dossier")
    parent_id: Optional[str] = Field(default=None, foreign_key="folders.id", index=True)
