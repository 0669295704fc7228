from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field as PydField


# ---------- IN / UPDATE ----------

class ProjectCreateIn(BaseModel):
    name: str = PydField(..., min_length=1, description="Nom du projet")
    description: Optional[str] = None


class ProjectUpdateIn(BaseModel):
    name: Optional[str] = PydField(None, min_length=1)
    description: Optional[str] = None


# ---------- OUT ----------

class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SuccessOut(BaseModel):
    success: bool = True
