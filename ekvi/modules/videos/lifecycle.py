"""
Video lifecycle: waiting_for_upload -> uploading -> processing -> ready | error.

The ``mark_*`` functions are the transitions themselves. They only touch the
row they are given. The asset reference, once linked, is kept; playback
metadata is replaced or cleared by later events. ``VideoLifecycleService``
resolves the row from the provider's identifiers and persists the result.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.modules.events.outbox import OutboxService
from ekvi.modules.videos.models import Video, INCOMPLETE_STATUSES
from ekvi.modules.videos.repository import VideoRepository
from ekvi.modules.webhooks.events import AssetErrors, AssetReadyData, PlaybackId

logger = logging.getLogger(__name__)

THUMBNAIL_URL_TEMPLATE = "https://image.mux.com/{playback_id}/thumbnail.jpg?time=0"
DEFAULT_ERROR_MESSAGE = "Unknown encoding error"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def first_public_playback_id(playback_ids: list[PlaybackId]) -> str | None:
    for playback in playback_ids:
        if playback.policy == "public" and playback.id:
            return playback.id
    return None


def thumbnail_url_for(playback_id: str) -> str:
    return THUMBNAIL_URL_TEMPLATE.format(playback_id=playback_id)


def error_message_from(errors: AssetErrors | None) -> str:
    """First reported message, then the summary message, then a generic text.
    Empty strings count as absent."""
    if errors is None:
        return DEFAULT_ERROR_MESSAGE
    first = errors.messages[0] if errors.messages else None
    return first or errors.message or DEFAULT_ERROR_MESSAGE


def mark_processing(video: Video, asset_id: str, now: datetime) -> bool:
    """Asset created from the upload. Returns False when the record is already
    past the upload stage and was left untouched."""
    if video.status not in INCOMPLETE_STATUSES:
        return False
    video.mux_asset_id = asset_id
    video.status = "processing"
    video.updated_at = now
    return True


def mark_ready(video: Video, data: AssetReadyData, now: datetime) -> str | None:
    """Encoding finished. Returns the public playback id, if the event had one."""
    playback_id = first_public_playback_id(data.playback_ids)
    video.status = "ready"
    if playback_id:
        video.mux_playback_id = playback_id
        video.thumbnail_url = thumbnail_url_for(playback_id)
    if data.duration is not None:
        video.duration = data.duration
    if data.aspect_ratio is not None:
        video.aspect_ratio = data.aspect_ratio
    video.error_message = None
    video.updated_at = now
    return playback_id


def mark_errored(video: Video, errors: AssetErrors | None, now: datetime) -> str:
    message = error_message_from(errors)
    video.status = "error"
    video.error_message = message
    video.mux_playback_id = None
    video.updated_at = now
    return message


class VideoLifecycleService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = VideoRepository(session)
        self.outbox = OutboxService(session)

    async def _emit(self, event_type: str, video: Video, **extra):
        payload = {"video_id": str(video.id), "owner_id": str(video.owner_id), "status": video.status, **extra}
        await self.outbox.enqueue(event_type, "video", video.id, payload)

    async def handle_upload_asset_created(self, upload_id: str, asset_id: str) -> Video | None:
        video = await self.repo.get_by_upload_id(upload_id)
        if video is None:
            logger.error(f"Video not found for upload ID: {upload_id}")
            return None
        if not mark_processing(video, asset_id, _now()):
            logger.warning(f"Ignoring asset_created for video {video.id} in status {video.status} (asset {asset_id})")
            return video
        await self._emit("VIDEO_PROCESSING", video, mux_asset_id=asset_id)
        await self.session.commit()
        logger.info(f"Video processing started: {video.id} asset={asset_id}")
        return video

    async def handle_asset_ready(self, data: AssetReadyData) -> Video | None:
        video = await self.repo.get_by_asset_id(data.id)
        if video is None:
            logger.error(f"Video not found for asset ID: {data.id}")
            return None
        playback_id = mark_ready(video, data, _now())
        if not playback_id:
            # still ready, but unplayable until a public playback id shows up
            logger.error(f"No public playback ID found for asset: {data.id}")
        await self._emit("VIDEO_READY", video, mux_playback_id=video.mux_playback_id, duration=video.duration)
        await self.session.commit()
        logger.info(f"Video ready: {video.id} playback={video.mux_playback_id} duration={video.duration}")
        return video

    async def handle_asset_errored(self, asset_id: str, errors: AssetErrors | None) -> Video | None:
        video = await self.repo.get_by_asset_id(asset_id)
        if video is None:
            logger.error(f"Video not found for asset ID: {asset_id}")
            return None
        message = mark_errored(video, errors, _now())
        await self._emit("VIDEO_ERRORED", video, error_message=message)
        await self.session.commit()
        logger.error(f"Video processing error: {video.id} error={message}")
        return video
