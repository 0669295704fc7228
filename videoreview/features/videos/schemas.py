from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field as PydField

from videoreview.db.models.videos import VideoStatus


# ---------- IN / UPDATE ----------

class VideoUpdateIn(BaseModel):
    name: Optional[str] = PydField(None, min_length=1)
    duration: Optional[float] = PydField(None, ge=0, description="Durée mesurée côté client")


class VideoStatusPatchIn(BaseModel):
    video_status: Optional[VideoStatus] = None


class VideoStatusPutIn(BaseModel):
    status: VideoStatus


class VersionMergeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_video_id: str = PydField(..., min_length=1, alias="sourceVideoId")


class VersionUpdateIn(BaseModel):
    duration: float = PydField(..., ge=0)


# ---------- OUT ----------

class VideoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    folder_id: str
    name: str
    file_path: str
    file_size: int
    file_type: str
    duration: Optional[float]
    video_status: VideoStatus
    is_hidden: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VideoVersionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    folder_id: str
    video_id: str
    source_video_id: str
    file_path: str
    file_size: int
    file_type: str
    duration: Optional[float]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VideoWithVersionsOut(VideoOut):
    versions: List[VideoVersionOut] = []
    has_versions: bool = False


class VideoStatusOut(BaseModel):
    id: str
    name: str
    duration: float
    processing: bool
    video_status: VideoStatus
    file_path: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VideoInfoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    project_id: str
    folder_id: str
    file_path: str
    duration: Optional[float]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
