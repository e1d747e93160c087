from datetime import datetime, timezone
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ekvi.core.base import Base
from ekvi.core.config import settings
from ekvi.core.db import get_session
from ekvi.main import app
from ekvi.modules.profiles.models import UserProfile
from ekvi.modules.videos.models import Video
from ekvi.platform.ports.video_provider import DirectUpload
from ekvi.platform.provider_registry import registry


def auth_header(user_id: str, email: str | None = None, name: str | None = None) -> dict:
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
    return {"Authorization": f"Bearer {token}"}


class FakeVideoProvider:
    def __init__(self, fail: Exception | None = None):
        self.fail = fail
        self.cors_origins: list[str] = []
        self.deleted: list[str] = []

    async def create_direct_upload(self, cors_origin: str = "*") -> DirectUpload:
        if self.fail:
            raise self.fail
        self.cors_origins.append(cors_origin)
        upload_id = f"upload-{len(self.cors_origins)}"
        return DirectUpload(id=upload_id, url=f"https://storage.mux.test/{upload_id}")

    async def delete_asset(self, asset_id: str) -> None:
        if self.fail:
            raise self.fail
        self.deleted.append(asset_id)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ekvi.db'}")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield maker
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.pop(get_session, None)


@pytest.fixture
def video_provider():
    provider = FakeVideoProvider()
    with patch.object(registry, "video_provider", return_value=provider):
        yield provider


@pytest.fixture
def make_profile(session_maker):
    async def _make(auth_id: str, role: str = "coach", **data) -> UserProfile:
        async with session_maker() as s:
            obj = UserProfile(auth_id=auth_id, display_name=data.pop("display_name", auth_id), role=role, **data)
            s.add(obj)
            await s.commit()
            return obj
    return _make


@pytest.fixture
def make_video(session_maker):
    counter = {"n": 0}

    async def _make(owner: UserProfile, status: str = "waiting_for_upload", **data) -> Video:
        counter["n"] += 1
        data.setdefault("title", f"Video {counter['n']}")
        data.setdefault("mux_upload_id", f"up-{counter['n']}")
        if status not in ("waiting_for_upload", "uploading"):
            data.setdefault("mux_asset_id", f"asset-{counter['n']}")
        if "created_at" in data:
            data.setdefault("updated_at", data["created_at"])
        async with session_maker() as s:
            obj = Video(owner_id=owner.id, status=status, **data)
            s.add(obj)
            await s.commit()
            return obj
    return _make


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)
