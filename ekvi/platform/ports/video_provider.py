from dataclasses import dataclass
from typing import Protocol, runtime_checkable

@dataclass(frozen=True)
class DirectUpload:
    id: str   # provider upload-session id
    url: str  # single-use URL the browser PUTs the file to

@runtime_checkable
class VideoProviderPort(Protocol):
    async def create_direct_upload(self, cors_origin: str) -> DirectUpload: ...

    async def delete_asset(self, asset_id: str) -> None: ...
