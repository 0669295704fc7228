from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field as PydField


class FolderCreateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = PydField(..., min_length=1, description="Nom du dossier (unique dans le projet)")
    parent_id: Optional[str] = PydField(None, alias="parentId")


class FolderUpdateIn(BaseModel):
    name: str = PydField(..., min_length=1)


class FolderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    parent_id: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
