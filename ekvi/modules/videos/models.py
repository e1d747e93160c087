import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Float, ForeignKey
from ekvi.core.base import Base, TimestampedMixin

VIDEO_STATUSES = ("waiting_for_upload", "uploading", "processing", "ready", "error")
# no provider asset exists yet in these states
INCOMPLETE_STATUSES = ("waiting_for_upload", "uploading")

class Video(Base, TimestampedMixin):
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("userprofile.id"), index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="waiting_for_upload", index=True)

    # Mux identifiers: upload session -> asset -> public playback id
    mux_upload_id: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    mux_asset_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    mux_playback_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    duration: Mapped[float | None] = mapped_column(Float, nullable=True)  # seconds
    aspect_ratio: Mapped[str | None] = mapped_column(String(16), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
