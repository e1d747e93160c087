import logging
from ekvi.core.exceptions import EkviError
from ekvi.platform.provider_registry import registry

logger = logging.getLogger(__name__)

async def delete_mux_asset(asset_id: str) -> None:
    """Best-effort removal of a provider asset after its record is gone.

    Runs as a background task; failures are logged and dropped because the
    local record has already been deleted.
    """
    try:
        provider = registry.video_provider()
        await provider.delete_asset(asset_id)
    except EkviError as e:
        logger.error(f"Failed to delete Mux asset {asset_id}: {e.message}")
    except Exception:
        logger.exception(f"Failed to delete Mux asset {asset_id}")
