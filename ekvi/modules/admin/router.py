from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.db import get_session
from ekvi.core.security import get_principal, Principal
from ekvi.modules.admin.service import AdminService
from ekvi.modules.profiles.schemas import ProfileOut
from ekvi.modules.videos.schemas import CleanupResult

router = APIRouter()
def svc(s: AsyncSession = Depends(get_session)) -> AdminService: return AdminService(s)

@router.post("/admin/users/{auth_id}/suspend", response_model=ProfileOut)
async def suspend_account(auth_id: str, principal: Principal = Depends(get_principal), service: AdminService = Depends(svc)):
    return await service.suspend(principal, auth_id)

@router.post("/admin/users/{auth_id}/reactivate", response_model=ProfileOut)
async def reactivate_account(auth_id: str, principal: Principal = Depends(get_principal), service: AdminService = Depends(svc)):
    return await service.reactivate(principal, auth_id)

@router.post("/admin/videos/cleanup", response_model=CleanupResult)
async def cleanup_abandoned_uploads(principal: Principal = Depends(get_principal), service: AdminService = Depends(svc)):
    return {"deleted_count": await service.cleanup_abandoned_uploads(principal)}
