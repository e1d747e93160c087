from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from ekvi.modules.events.outbox import EventOutbox
from ekvi.modules.videos.lifecycle import (
    DEFAULT_ERROR_MESSAGE,
    VideoLifecycleService,
    error_message_from,
    first_public_playback_id,
    mark_errored,
    mark_processing,
    mark_ready,
)
from ekvi.modules.videos.models import Video
from ekvi.modules.webhooks.events import AssetErrors, AssetReadyData, PlaybackId


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _video(**data) -> Video:
    data.setdefault("title", "Serve drill")
    data.setdefault("mux_upload_id", "up-1")
    data.setdefault("status", "waiting_for_upload")
    return Video(**data)


def _ready(asset_id="asset-1", playback_ids=None, duration=120.5, aspect_ratio="16:9") -> AssetReadyData:
    if playback_ids is None:
        playback_ids = [PlaybackId(id="pb-1", policy="public")]
    return AssetReadyData(id=asset_id, playback_ids=playback_ids, duration=duration, aspect_ratio=aspect_ratio)


def test_mark_processing_links_asset():
    video = _video()
    assert mark_processing(video, "asset-1", NOW) is True
    assert video.status == "processing"
    assert video.mux_asset_id == "asset-1"
    assert video.updated_at == NOW


def test_mark_processing_from_uploading():
    video = _video(status="uploading")
    assert mark_processing(video, "asset-1", NOW) is True
    assert video.status == "processing"
    assert video.mux_asset_id == "asset-1"


def test_first_public_playback_id_skips_entries_without_id():
    playback_ids = [PlaybackId(policy="public"), PlaybackId(id="pb-2", policy="public")]
    assert first_public_playback_id(playback_ids) == "pb-2"


def test_mark_processing_ignored_once_past_upload_stage():
    video = _video(status="ready", mux_asset_id="asset-1", mux_playback_id="pb-1")
    assert mark_processing(video, "asset-2", NOW) is False
    assert video.status == "ready"
    assert video.mux_asset_id == "asset-1"


def test_mark_ready_picks_first_public_playback_id():
    video = _video(status="processing", mux_asset_id="asset-1")
    data = _ready(playback_ids=[PlaybackId(id="pb-signed", policy="signed"), PlaybackId(id="pb-1", policy="public")])

    assert mark_ready(video, data, NOW) == "pb-1"
    assert video.status == "ready"
    assert video.mux_playback_id == "pb-1"
    assert video.thumbnail_url == "https://image.mux.com/pb-1/thumbnail.jpg?time=0"
    assert video.duration == 120.5
    assert video.aspect_ratio == "16:9"


def test_mark_ready_without_public_playback_id():
    video = _video(status="processing", mux_asset_id="asset-1")
    data = _ready(playback_ids=[PlaybackId(id="pb-signed", policy="signed")], duration=None, aspect_ratio=None)

    assert mark_ready(video, data, NOW) is None
    assert video.status == "ready"
    assert video.mux_playback_id is None
    assert video.thumbnail_url is None
    assert video.duration is None


def test_mark_ready_keeps_known_duration_when_event_omits_it():
    video = _video(status="processing", mux_asset_id="asset-1", duration=30.0, aspect_ratio="9:16")
    mark_ready(video, _ready(duration=None, aspect_ratio=None), NOW)
    assert video.duration == 30.0
    assert video.aspect_ratio == "9:16"


def test_mark_errored_clears_playback_id():
    video = _video(status="ready", mux_asset_id="asset-1", mux_playback_id="pb-1", duration=10.0)
    message = mark_errored(video, AssetErrors(type="invalid_input", messages=["Input file is corrupt"]), NOW)

    assert message == "Input file is corrupt"
    assert video.status == "error"
    assert video.error_message == "Input file is corrupt"
    assert video.mux_playback_id is None
    assert video.mux_asset_id == "asset-1"
    assert video.duration == 10.0


@pytest.mark.parametrize(
    "errors, expected",
    [
        (None, DEFAULT_ERROR_MESSAGE),
        (AssetErrors(), DEFAULT_ERROR_MESSAGE),
        (AssetErrors(message="Unsupported codec"), "Unsupported codec"),
        (AssetErrors(messages=["first", "second"], message="ignored"), "first"),
        (AssetErrors(messages=[""], message="Unsupported codec"), "Unsupported codec"),
        (AssetErrors(messages=[None]), DEFAULT_ERROR_MESSAGE),
    ],
)
def test_error_message_from(errors, expected):
    assert error_message_from(errors) == expected


@pytest.mark.asyncio
async def test_full_lifecycle(session, session_maker, make_profile, make_video):
    owner = await make_profile("coach-1")
    video = await make_video(owner, mux_upload_id="up-1")
    lifecycle = VideoLifecycleService(session)

    await lifecycle.handle_upload_asset_created("up-1", "asset-1")
    await lifecycle.handle_asset_ready(_ready())

    async with session_maker() as s:
        stored = await s.get(Video, video.id)
        assert stored.status == "ready"
        assert stored.mux_asset_id == "asset-1"
        assert stored.mux_playback_id == "pb-1"
        assert stored.duration == 120.5
        assert stored.aspect_ratio == "16:9"
        assert stored.thumbnail_url == "https://image.mux.com/pb-1/thumbnail.jpg?time=0"

        events = (await s.execute(select(EventOutbox.event_type))).scalars().all()
        assert sorted(events) == ["VIDEO_PROCESSING", "VIDEO_READY"]


@pytest.mark.asyncio
async def test_errored_after_ready(session, session_maker, make_profile, make_video):
    owner = await make_profile("coach-1")
    video = await make_video(owner, status="ready", mux_asset_id="asset-9", mux_playback_id="pb-9")

    await VideoLifecycleService(session).handle_asset_errored("asset-9", AssetErrors(messages=["Late failure"]))

    async with session_maker() as s:
        stored = await s.get(Video, video.id)
        assert stored.status == "error"
        assert stored.error_message == "Late failure"
        assert stored.mux_playback_id is None


@pytest.mark.asyncio
async def test_unknown_identifiers_change_nothing(session, session_maker, make_profile, make_video):
    owner = await make_profile("coach-1")
    video = await make_video(owner, mux_upload_id="up-1")
    lifecycle = VideoLifecycleService(session)

    assert await lifecycle.handle_upload_asset_created("up-unknown", "asset-1") is None
    assert await lifecycle.handle_asset_ready(_ready(asset_id="asset-unknown")) is None
    assert await lifecycle.handle_asset_errored("asset-unknown", None) is None

    async with session_maker() as s:
        stored = await s.get(Video, video.id)
        assert stored.status == "waiting_for_upload"
        assert stored.mux_asset_id is None
        assert (await s.execute(select(EventOutbox))).scalars().all() == []


@pytest.mark.asyncio
async def test_late_asset_created_does_not_regress_ready_video(session, session_maker, make_profile, make_video):
    owner = await make_profile("coach-1")
    video = await make_video(owner, status="ready", mux_upload_id="up-1", mux_asset_id="asset-1", mux_playback_id="pb-1")

    await VideoLifecycleService(session).handle_upload_asset_created("up-1", "asset-1")

    async with session_maker() as s:
        stored = await s.get(Video, video.id)
        assert stored.status == "ready"
        assert stored.mux_playback_id == "pb-1"
