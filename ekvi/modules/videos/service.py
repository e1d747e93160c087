import uuid
import logging
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.config import settings
from ekvi.core.exceptions import ForbiddenError, NotFoundError, UpstreamError
from ekvi.core.security import Principal
from ekvi.modules.events.outbox import OutboxService
from ekvi.modules.profiles.models import UserProfile
from ekvi.modules.profiles.service import require_active_profile
from ekvi.modules.videos.models import Video
from ekvi.modules.videos.repository import VideoRepository
from ekvi.modules.videos.schemas import DirectUploadCreate, VideoMetadataUpdate
from ekvi.modules.videos.tasks import delete_mux_asset
from ekvi.platform.provider_registry import registry

logger = logging.getLogger(__name__)

VIDEO_NOT_FOUND = "Video not found"
NOT_OWNER = "Unauthorized - you don't own this video"

class VideoService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = VideoRepository(session)

    async def _owned_video(self, profile: UserProfile, video_id: uuid.UUID) -> Video:
        video = await self.repo.get(video_id)
        if video is None:
            raise NotFoundError(VIDEO_NOT_FOUND)
        if video.owner_id != profile.id:
            raise ForbiddenError(NOT_OWNER)
        return video

    async def create_direct_upload(self, principal: Principal, payload: DirectUploadCreate) -> dict:
        profile = await require_active_profile(self.session, principal)
        provider = registry.video_provider()
        try:
            upload = await provider.create_direct_upload(cors_origin=payload.cors_origin or settings.MUX_CORS_ORIGIN)
        except UpstreamError as e:
            logger.error(f"Failed to create Mux upload for profile {profile.id}: {e.message}")
            raise UpstreamError(f"Failed to create upload: {e.message}") from e

        video = await self.repo.create(
            profile.id,
            mux_upload_id=upload.id,
            title=payload.title,
            description=payload.description,
            status="waiting_for_upload",
        )
        await OutboxService(self.session).enqueue(
            "VIDEO_UPLOAD_CREATED", "video", video.id,
            {"video_id": str(video.id), "owner_id": str(profile.id), "mux_upload_id": upload.id},
        )
        await self.session.commit()
        logger.info(f"Video {video.id} awaiting upload {upload.id}")
        return {"upload_url": upload.url, "video_id": video.id, "mux_upload_id": upload.id}

    async def get_video(self, video_id: uuid.UUID) -> Video | None:
        return await self.repo.get(video_id)

    async def list_videos(
        self,
        principal: Principal,
        *,
        status: str | None = None,
        limit: int = 50,
        include_incomplete: bool = False,
    ):
        profile = await require_active_profile(self.session, principal)
        return await self.repo.list_for_owner(
            profile.id, status=status, include_incomplete=include_incomplete, limit=limit
        )

    async def update_metadata(self, principal: Principal, video_id: uuid.UUID, payload: VideoMetadataUpdate) -> Video:
        profile = await require_active_profile(self.session, principal)
        video = await self._owned_video(profile, video_id)
        data = payload.model_dump(exclude_unset=True)
        changes = {}
        if data.get("title"):
            changes["title"] = data["title"]
        if "description" in data:
            changes["description"] = data["description"]
        await self.repo.update(video, **changes)
        await self.session.commit()
        return video

    async def delete_video(self, principal: Principal, video_id: uuid.UUID, background_tasks: BackgroundTasks) -> None:
        profile = await require_active_profile(self.session, principal)
        video = await self._owned_video(profile, video_id)
        asset_id = video.mux_asset_id
        await self.repo.delete(video)
        await OutboxService(self.session).enqueue(
            "VIDEO_DELETED", "video", video_id,
            {"video_id": str(video_id), "owner_id": str(profile.id), "mux_asset_id": asset_id},
        )
        await self.session.commit()
        if asset_id:
            background_tasks.add_task(delete_mux_asset, asset_id)
        logger.info(f"Video {video_id} deleted by profile {profile.id}")
