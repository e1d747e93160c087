"""
Abandoned upload cleanup.

A user who opens the upload dialog and walks away leaves a record in
``waiting_for_upload`` (or ``uploading``) that no webhook will ever advance.
Once such a record is older than the staleness threshold it is deleted. No
provider asset exists in these states, so there is nothing to reclaim remotely.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from ekvi.core.config import settings
from ekvi.core.db import SessionLocal
from ekvi.modules.videos.repository import VideoRepository

logger = logging.getLogger(__name__)

async def cleanup_abandoned_uploads(
    session: AsyncSession,
    now: datetime | None = None,
    max_age_hours: int | None = None,
) -> int:
    hours = settings.ABANDONED_UPLOAD_MAX_AGE_HOURS if max_age_hours is None else max_age_hours
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(hours=hours)
    repo = VideoRepository(session)
    stale = await repo.list_stale_incomplete(cutoff)
    for video in stale:
        await repo.delete(video)
    await session.commit()
    logger.info(f"Cleaned up {len(stale)} abandoned video uploads")
    return len(stale)

async def run_abandoned_upload_cleanup() -> dict:
    async with SessionLocal() as session:
        deleted = await cleanup_abandoned_uploads(session)
    return {"deleted_count": deleted}

def seconds_until_next_run(now: datetime, hour: int, minute: int) -> float:
    """Seconds from ``now`` until the next hour:minute UTC (strictly in the future)."""
    now = now.astimezone(timezone.utc)
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()

async def run_cleanup_schedule():
    hour, minute = settings.CLEANUP_HOUR_UTC, settings.CLEANUP_MINUTE_UTC
    logger.info(f"Abandoned upload cleanup scheduled daily at {hour:02d}:{minute:02d} UTC")
    try:
        while True:
            await asyncio.sleep(seconds_until_next_run(datetime.now(timezone.utc), hour, minute))
            try:
                result = await run_abandoned_upload_cleanup()
                logger.info(f"Abandoned upload cleanup tick: deleted={result['deleted_count']}")
            except Exception:
                logger.exception("Abandoned upload cleanup tick failed")
    except asyncio.CancelledError:
        logger.info("Cleanup schedule cancelled; shutting down")
        raise
