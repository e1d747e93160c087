import uuid
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

VideoStatus = Literal["waiting_for_upload", "uploading", "processing", "ready", "error"]

class DirectUploadCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    cors_origin: str | None = None

class DirectUploadOut(BaseModel):
    upload_url: str
    video_id: uuid.UUID
    mux_upload_id: str

class VideoMetadataUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None

class VideoOut(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str | None
    status: VideoStatus
    mux_upload_id: str
    mux_asset_id: str | None
    mux_playback_id: str | None
    duration: float | None
    aspect_ratio: str | None
    thumbnail_url: str | None
    error_message: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CleanupResult(BaseModel):
    deleted_count: int
