from fastapi import APIRouter
from ekvi.modules.profiles.router import router as profiles_router
from ekvi.modules.videos.router import router as videos_router
from ekvi.modules.admin.router import router as admin_router

api_router = APIRouter()
api_router.include_router(profiles_router, tags=["profiles"])
api_router.include_router(videos_router, tags=["videos"])
api_router.include_router(admin_router, tags=["admin"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
