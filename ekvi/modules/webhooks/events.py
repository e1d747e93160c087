"""
Typed Mux webhook events.

Only the three lifecycle events the application reacts to get their own shape;
anything else parses into ``UnknownEvent`` so new provider event types never
break ingestion. Mux fills optional payload fields loosely (``null`` lists,
missing policies), so those fields accept ``None`` and normalise it away.
"""
from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, Discriminator, Field, Tag, TypeAdapter, field_validator

UPLOAD_ASSET_CREATED = "video.upload.asset_created"
ASSET_READY = "video.asset.ready"
ASSET_ERRORED = "video.asset.errored"
UNKNOWN = "unknown"

KNOWN_EVENT_TYPES = (UPLOAD_ASSET_CREATED, ASSET_READY, ASSET_ERRORED)


class PlaybackId(BaseModel):
    id: str | None = None
    policy: str | None = None


class AssetErrors(BaseModel):
    type: str | None = None
    messages: list[str | None] = Field(default_factory=list)
    message: str | None = None

    @field_validator("messages", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class UploadAssetCreatedData(BaseModel):
    id: str  # upload id
    asset_id: str


class AssetReadyData(BaseModel):
    id: str  # asset id
    playback_ids: list[PlaybackId] = Field(default_factory=list)
    duration: float | None = None
    aspect_ratio: str | None = None

    @field_validator("playback_ids", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class AssetErroredData(BaseModel):
    id: str  # asset id
    errors: AssetErrors | None = None


class UploadAssetCreatedEvent(BaseModel):
    type: Literal["video.upload.asset_created"]
    data: UploadAssetCreatedData


class AssetReadyEvent(BaseModel):
    type: Literal["video.asset.ready"]
    data: AssetReadyData


class AssetErroredEvent(BaseModel):
    type: Literal["video.asset.errored"]
    data: AssetErroredData


class UnknownEvent(BaseModel):
    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _dict_or_empty(cls, v):
        return v if isinstance(v, dict) else {}


def _event_tag(value: Any) -> str:
    event_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return event_type if event_type in KNOWN_EVENT_TYPES else UNKNOWN


MuxEvent = Annotated[
    Union[
        Annotated[UploadAssetCreatedEvent, Tag(UPLOAD_ASSET_CREATED)],
        Annotated[AssetReadyEvent, Tag(ASSET_READY)],
        Annotated[AssetErroredEvent, Tag(ASSET_ERRORED)],
        Annotated[UnknownEvent, Tag(UNKNOWN)],
    ],
    Discriminator(_event_tag),
]

_mux_event_adapter = TypeAdapter(MuxEvent)


def parse_mux_event(envelope: dict[str, Any]) -> MuxEvent:
    """Build the typed event for an envelope. Raises ``pydantic.ValidationError``
    when a known event type carries a malformed payload."""
    return _mux_event_adapter.validate_python({"type": envelope.get("type"), "data": envelope.get("data")})
