import uuid
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.db import get_session
from ekvi.core.security import get_principal, Principal
from ekvi.modules.videos.schemas import DirectUploadCreate, DirectUploadOut, VideoMetadataUpdate, VideoOut
from ekvi.modules.videos.service import VideoService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> VideoService:
    return VideoService(session)

@router.post("/videos/uploads", response_model=DirectUploadOut, status_code=201)
async def create_direct_upload(payload: DirectUploadCreate, principal: Principal = Depends(get_principal), service: VideoService = Depends(svc)):
    return await service.create_direct_upload(principal, payload)

@router.get("/videos", response_model=list[VideoOut])
async def list_videos(
    status: str | None = Query(default=None, pattern="^(waiting_for_upload|uploading|processing|ready|error)$"),
    limit: int = Query(default=50, ge=1, le=500),
    include_incomplete: bool = False,
    principal: Principal = Depends(get_principal),
    service: VideoService = Depends(svc),
):
    return await service.list_videos(principal, status=status, limit=limit, include_incomplete=include_incomplete)

@router.get("/videos/{video_id}", response_model=VideoOut)
async def get_video(video_id: uuid.UUID, principal: Principal = Depends(get_principal), service: VideoService = Depends(svc)):
    obj = await service.get_video(video_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Video not found")
    return obj

@router.patch("/videos/{video_id}")
async def update_video_metadata(video_id: uuid.UUID, payload: VideoMetadataUpdate, principal: Principal = Depends(get_principal), service: VideoService = Depends(svc)):
    await service.update_metadata(principal, video_id, payload)
    return {"success": True}

@router.delete("/videos/{video_id}")
async def delete_video(video_id: uuid.UUID, background_tasks: BackgroundTasks, principal: Principal = Depends(get_principal), service: VideoService = Depends(svc)):
    await service.delete_video(principal, video_id, background_tasks)
    return {"success": True}
