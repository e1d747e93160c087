import uuid
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.modules.profiles.models import UserProfile

class ProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, auth_id: str, **data) -> UserProfile:
        obj = UserProfile(auth_id=auth_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, profile_id: uuid.UUID) -> UserProfile | None:
        return await self.session.get(UserProfile, profile_id)

    async def get_by_auth_id(self, auth_id: str) -> UserProfile | None:
        res = await self.session.execute(select(UserProfile).where(UserProfile.auth_id == auth_id))
        return res.scalar_one_or_none()

    async def list_by_role(self, role: str, limit: int = 100, offset: int = 0) -> Sequence[UserProfile]:
        q = (
            select(UserProfile)
            .where(UserProfile.role == role, UserProfile.account_status == "active")
            .order_by(UserProfile.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def update(self, obj: UserProfile, **data) -> UserProfile:
        for k, v in data.items():
            setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, obj: UserProfile) -> None:
        await self.session.delete(obj)
        await self.session.flush()
