import logging
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.exceptions import ForbiddenError, NotFoundError
from ekvi.core.security import Principal
from ekvi.modules.events.outbox import OutboxService
from ekvi.modules.profiles.models import UserProfile
from ekvi.modules.profiles.repository import ProfileRepository
from ekvi.modules.profiles.service import require_active_profile, PROFILE_NOT_FOUND
from ekvi.modules.videos.cleanup import cleanup_abandoned_uploads

logger = logging.getLogger(__name__)

class AdminService:
    def __init__(self, s: AsyncSession):
        self.s = s
        self.profiles = ProfileRepository(s)

    async def require_admin(self, principal: Principal) -> UserProfile:
        profile = await require_active_profile(self.s, principal)
        if profile.role != "admin":
            raise ForbiddenError("Admin access required")
        return profile

    async def _set_account_status(self, principal: Principal, auth_id: str, status: str, event_type: str) -> UserProfile:
        admin = await self.require_admin(principal)
        target = await self.profiles.get_by_auth_id(auth_id)
        if target is None:
            raise NotFoundError(PROFILE_NOT_FOUND)
        await self.profiles.update(target, account_status=status)
        await OutboxService(self.s).enqueue(event_type, "profile", target.id, {"auth_id": auth_id, "by": str(admin.id)})
        await self.s.commit()
        logger.info(f"Account {auth_id} set to {status} by admin {admin.id}")
        return target

    async def suspend(self, principal: Principal, auth_id: str) -> UserProfile:
        return await self._set_account_status(principal, auth_id, "suspended", "ACCOUNT_SUSPENDED")

    async def reactivate(self, principal: Principal, auth_id: str) -> UserProfile:
        return await self._set_account_status(principal, auth_id, "active", "ACCOUNT_REACTIVATED")

    async def cleanup_abandoned_uploads(self, principal: Principal) -> int:
        await self.require_admin(principal)
        return await cleanup_abandoned_uploads(self.s)
