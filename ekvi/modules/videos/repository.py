import uuid
from datetime import datetime
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.modules.videos.models import Video, INCOMPLETE_STATUSES

class VideoRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, owner_id: uuid.UUID, **data) -> Video:
        obj = Video(owner_id=owner_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, video_id: uuid.UUID) -> Video | None:
        return await self.session.get(Video, video_id)

    async def get_by_upload_id(self, upload_id: str) -> Video | None:
        res = await self.session.execute(select(Video).where(Video.mux_upload_id == upload_id).limit(1))
        return res.scalar_one_or_none()

    async def get_by_asset_id(self, asset_id: str) -> Video | None:
        res = await self.session.execute(select(Video).where(Video.mux_asset_id == asset_id).limit(1))
        return res.scalar_one_or_none()

    async def list_for_owner(
        self,
        owner_id: uuid.UUID,
        *,
        status: str | None = None,
        include_incomplete: bool = False,
        limit: int = 50,
    ) -> Sequence[Video]:
        q = select(Video).where(Video.owner_id == owner_id)
        if not include_incomplete:
            q = q.where(Video.status.not_in(INCOMPLETE_STATUSES))
        if status:
            q = q.where(Video.status == status)
        q = q.order_by(Video.created_at.desc()).limit(limit)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def list_all_for_owner(self, owner_id: uuid.UUID) -> Sequence[Video]:
        res = await self.session.execute(select(Video).where(Video.owner_id == owner_id))
        return res.scalars().all()

    async def list_stale_incomplete(self, created_before: datetime) -> Sequence[Video]:
        q = select(Video).where(
            Video.status.in_(INCOMPLETE_STATUSES),
            Video.created_at < created_before,
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def update(self, obj: Video, **data) -> Video:
        for k, v in data.items():
            setattr(obj, k, v)
        await self.session.flush()
        return obj

    async def delete(self, obj: Video) -> None:
        await self.session.delete(obj)
        await self.session.flush()
