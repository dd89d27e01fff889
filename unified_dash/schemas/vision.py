from datetime import datetime

from pydantic import Field

from unified_dash.schemas.base import DashModel, PartialUpdate, utcnow


class Camera(DashModel):
    id: str
    name: str
    enabled: bool = True
    caption_enabled: bool = False
    rate_limit: int = 60  # seconds between captions
    thumbnail_url: str | None = None
    last_caption: str | None = None
    last_caption_time: datetime | None = None


class CameraUpdate(PartialUpdate):
    non_nullable = frozenset({"name", "enabled", "caption_enabled", "rate_limit"})

    name: str | None = None
    enabled: bool | None = None
    caption_enabled: bool | None = None
    rate_limit: int | None = Field(default=None, ge=1)
    thumbnail_url: str | None = None


class Caption(DashModel):
    id: str
    camera_id: str
    camera_name: str
    caption: str
    timestamp: datetime = Field(default_factory=utcnow)
    snapshot_url: str | None = None


class CaptionCreate(DashModel):
    camera_id: str = Field(..., min_length=1)
    caption: str = Field(..., min_length=1)
    snapshot_url: str | None = None
