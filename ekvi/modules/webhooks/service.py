import logging
from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.modules.videos.lifecycle import VideoLifecycleService
from ekvi.modules.webhooks.events import (
    AssetErroredEvent,
    AssetReadyEvent,
    MuxEvent,
    UploadAssetCreatedEvent,
    parse_mux_event,
)

logger = logging.getLogger(__name__)

class MuxWebhookService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.lifecycle = VideoLifecycleService(session)

    async def handle(self, envelope: dict[str, Any]) -> MuxEvent:
        event = parse_mux_event(envelope)
        await self.dispatch(event)
        return event

    async def dispatch(self, event: MuxEvent) -> None:
        if isinstance(event, UploadAssetCreatedEvent):
            await self.lifecycle.handle_upload_asset_created(event.data.id, event.data.asset_id)
        elif isinstance(event, AssetReadyEvent):
            await self.lifecycle.handle_asset_ready(event.data)
        elif isinstance(event, AssetErroredEvent):
            await self.lifecycle.handle_asset_errored(event.data.id, event.data.errors)
        else:
            logger.info(f"Mux webhook: Unhandled event type: {event.type}")
