import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from ekvi.modules.videos.cleanup import cleanup_abandoned_uploads, run_cleanup_schedule, seconds_until_next_run
from ekvi.modules.videos.models import Video


@pytest.mark.asyncio
async def test_deletes_only_stale_incomplete_uploads(session, session_maker, make_profile, make_video, now):
    owner = await make_profile("coach-1")
    day_old = now - timedelta(hours=25)
    stale_waiting = await make_video(owner, status="waiting_for_upload", created_at=day_old)
    stale_uploading = await make_video(owner, status="uploading", created_at=day_old)
    fresh = await make_video(owner, status="waiting_for_upload", created_at=now - timedelta(hours=1))
    survivors = [
        await make_video(owner, status="processing", created_at=day_old),
        await make_video(owner, status="ready", created_at=day_old),
        await make_video(owner, status="error", created_at=day_old),
    ]

    deleted = await cleanup_abandoned_uploads(session, now=now)
    assert deleted == 2

    async with session_maker() as s:
        remaining = set((await s.execute(select(Video.id))).scalars().all())
    assert stale_waiting.id not in remaining
    assert stale_uploading.id not in remaining
    assert remaining == {fresh.id, *(v.id for v in survivors)}


@pytest.mark.asyncio
async def test_nothing_to_clean(session, make_profile, make_video, now):
    owner = await make_profile("coach-1")
    await make_video(owner, status="ready", created_at=now - timedelta(days=30))
    assert await cleanup_abandoned_uploads(session, now=now) == 0


@pytest.mark.asyncio
async def test_custom_max_age(session, make_profile, make_video, now):
    owner = await make_profile("coach-1")
    await make_video(owner, status="waiting_for_upload", created_at=now - timedelta(hours=3))
    assert await cleanup_abandoned_uploads(session, now=now, max_age_hours=4) == 0
    assert await cleanup_abandoned_uploads(session, now=now, max_age_hours=2) == 1


def test_next_run_later_today():
    now = datetime(2026, 10, 18, 1, 30, tzinfo=timezone.utc)
    assert seconds_until_next_run(now, 4, 0) == 2.5 * 3600


def test_next_run_tomorrow_once_passed():
    now = datetime(2026, 10, 18, 4, 0, tzinfo=timezone.utc)
    assert seconds_until_next_run(now, 4, 0) == 24 * 3600

    now = datetime(2026, 10, 18, 22, 0, tzinfo=timezone.utc)
    assert seconds_until_next_run(now, 4, 0) == 6 * 3600


def test_next_run_converts_to_utc():
    # 06:00 in UTC+2 is 04:00 UTC, so the run is a full day away
    now = datetime(2026, 10, 18, 6, 0, tzinfo=timezone(timedelta(hours=2)))
    assert seconds_until_next_run(now, 4, 0) == 24 * 3600


@pytest.mark.asyncio
async def test_schedule_survives_failed_tick():
    # two ticks run, the third sleep is interrupted by shutdown
    sleep = AsyncMock(side_effect=[None, None, asyncio.CancelledError()])
    sweep = AsyncMock(side_effect=[RuntimeError("database unavailable"), {"deleted_count": 3}])

    with patch("ekvi.modules.videos.cleanup.asyncio.sleep", sleep), \
            patch("ekvi.modules.videos.cleanup.run_abandoned_upload_cleanup", sweep):
        with pytest.raises(asyncio.CancelledError):
            await run_cleanup_schedule()

    assert sweep.await_count == 2
    assert sleep.await_count == 3
