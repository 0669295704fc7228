from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydField


class CommentCreateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    drawing: Optional[Any] = PydField(None, description='Data-URI (ancien format) ou {"imageData", "timestamp"}')
    author: Optional[str] = None
    email: Optional[str] = None
    # Any : NaN, chaînes, etc. sont normalisés à 0 par le service
    video_time: Optional[Any] = PydField(None, alias="videoTime")
    parent_id: Optional[str] = PydField(None, alias="parentId")
    version_id: Optional[str] = PydField(None, alias="versionId")


class CommentUpdateIn(BaseModel):
    text: Optional[str] = None
    drawing: Optional[Any] = None
    resolved: Optional[bool] = None


class CommentLikeIn(BaseModel):
    email: Optional[str] = None


class CommentOut(BaseModel):
    id: str
    project_id: str
    folder_id: str
    video_id: str
    version_id: Optional[str] = None
    parent_id: Optional[str] = None
    user_name: str
    user_email: str
    text: str
    video_time: float
    drawing_data: Optional[Dict[str, Any]] = None
    likes: int
    liked_by: List[str]
    resolved: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    replies: List["CommentOut"] = []


CommentOut.model_rebuild()
