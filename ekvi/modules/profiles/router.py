import uuid
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.db import get_session
from ekvi.core.security import get_principal, Principal
from ekvi.modules.profiles.schemas import ProfileCreate, ProfileUpdate, ProfileOut, CurrentUserOut
from ekvi.modules.profiles.service import ProfileService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> ProfileService:
    return ProfileService(session)

@router.post("/profiles", response_model=ProfileOut, status_code=201)
async def create_profile(payload: ProfileCreate, principal: Principal = Depends(get_principal), service: ProfileService = Depends(svc)):
    return await service.create_profile(principal, payload)

@router.get("/profiles/me", response_model=CurrentUserOut)
async def get_current_user(principal: Principal = Depends(get_principal), service: ProfileService = Depends(svc)):
    return await service.current_user(principal)

@router.patch("/profiles/me")
async def update_profile(payload: ProfileUpdate, principal: Principal = Depends(get_principal), service: ProfileService = Depends(svc)):
    await service.update_profile(principal, payload)
    return {"success": True}

@router.delete("/profiles/me")
async def delete_profile(background_tasks: BackgroundTasks, principal: Principal = Depends(get_principal), service: ProfileService = Depends(svc)):
    await service.delete_profile(principal, background_tasks)
    return {"success": True}

@router.get("/profiles", response_model=list[ProfileOut])
async def list_profiles(
    role: str = Query(..., pattern="^(athlete|coach|admin)$"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    service: ProfileService = Depends(svc),
):
    return await service.list_by_role(role, limit=limit, offset=offset)

@router.get("/profiles/{profile_id}", response_model=ProfileOut)
async def get_profile(profile_id: uuid.UUID, principal: Principal = Depends(get_principal), service: ProfileService = Depends(svc)):
    obj = await service.get_profile(profile_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Profile not found")
    return obj
