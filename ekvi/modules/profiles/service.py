import uuid
import logging
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from ekvi.core.security import Principal
from ekvi.modules.events.outbox import OutboxService
from ekvi.modules.profiles.models import UserProfile
from ekvi.modules.profiles.repository import ProfileRepository
from ekvi.modules.profiles.schemas import ProfileCreate, ProfileUpdate
from ekvi.modules.videos.repository import VideoRepository
from ekvi.modules.videos.tasks import delete_mux_asset

logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = "Profile not found"

async def require_active_profile(session: AsyncSession, principal: Principal) -> UserProfile:
    """The caller's completed, non-suspended profile."""
    profile = await ProfileRepository(session).get_by_auth_id(principal.user_id)
    if profile is None:
        raise NotFoundError(PROFILE_NOT_FOUND)
    if profile.account_status == "suspended":
        raise ForbiddenError("Account suspended")
    return profile

class ProfileService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ProfileRepository(session)

    async def create_profile(self, principal: Principal, payload: ProfileCreate) -> UserProfile:
        if await self.repo.get_by_auth_id(principal.user_id):
            raise ConflictError("Profile already exists")
        obj = await self.repo.create(principal.user_id, **payload.model_dump())
        await OutboxService(self.session).enqueue(
            "PROFILE_CREATED", "profile", obj.id, {"auth_id": obj.auth_id, "role": obj.role}
        )
        await self.session.commit()
        logger.info(f"Profile {obj.id} created for auth user {principal.user_id} as {obj.role}")
        return obj

    async def current_user(self, principal: Principal) -> dict:
        profile = await self.repo.get_by_auth_id(principal.user_id)
        return {
            "auth_user": {
                "id": principal.user_id,
                "email": principal.email,
                "name": principal.name,
                "has_completed_onboarding": profile is not None,
            },
            "profile": profile,
        }

    async def update_profile(self, principal: Principal, payload: ProfileUpdate) -> UserProfile:
        profile = await require_active_profile(self.session, principal)
        data = payload.model_dump(exclude_unset=True)
        # display_name is required on the row; ignore an explicit null
        if data.get("display_name") is None:
            data.pop("display_name", None)
        await self.repo.update(profile, **data)
        await self.session.commit()
        return profile

    async def delete_profile(self, principal: Principal, background_tasks: BackgroundTasks) -> None:
        profile = await self.repo.get_by_auth_id(principal.user_id)
        if profile is None:
            return
        videos = VideoRepository(self.session)
        for video in await videos.list_all_for_owner(profile.id):
            if video.mux_asset_id:
                background_tasks.add_task(delete_mux_asset, video.mux_asset_id)
            await videos.delete(video)
        await self.repo.delete(profile)
        await self.session.commit()
        logger.info(f"Profile {profile.id} deleted by auth user {principal.user_id}")

    async def get_profile(self, profile_id: uuid.UUID) -> UserProfile | None:
        return await self.repo.get(profile_id)

    async def list_by_role(self, role: str, limit: int = 100, offset: int = 0):
        return await self.repo.list_by_role(role, limit=limit, offset=offset)
