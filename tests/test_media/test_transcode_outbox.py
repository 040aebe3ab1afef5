import json

import pytest
from redis.exceptions import RedisError

from sportshub.db.models import Reel, StreamHighlight
from sportshub.schemas.enums import VideoProcessingStatus
from sportshub.services.media.transcode_outbox import (
    TemporaryMediaURL,
    TranscodeOutbox,
    TranscodeRequest,
    enqueue_record_transcode,
)
from tests.fixtures.media import url

QUEUE = "test:transcode"


@pytest.fixture()
def outbox(redis_client, codec):
    return TranscodeOutbox(redis_client, queue_key=QUEUE, dedupe_ttl_seconds=600, codec=codec)


def _queued(redis_mock):
    return [json.loads(m) for m in redis_mock.lists.get(QUEUE, [])]


def test_request_for_record():
    r = Reel(id="r1", title="x")
    req = TranscodeRequest.for_record(r, url("reels/r1/r1.mp4"))
    assert req.to_message() == {
        "record_type": "reel",
        "record_id": "r1",
        "video_url": url("reels/r1/r1.mp4"),
        "folder_path": "reels/r1/",
    }


@pytest.mark.anyio
async def test_publish_pushes_once(outbox, redis_mock):
    req = TranscodeRequest("highlight", "h1", url("highlights/h1/h1.mp4"), "highlights/h1/")

    assert await outbox.publish(req) is True
    assert await outbox.publish(req) is False

    assert _queued(redis_mock) == [req.to_message()]


@pytest.mark.anyio
async def test_new_video_for_same_record_is_published(outbox, redis_mock):
    await outbox.publish(TranscodeRequest("reel", "r1", url("reels/r1/r1.mp4"), "reels/r1/"))
    await outbox.publish(TranscodeRequest("reel", "r1", url("reels/r1/r1.mov"), "reels/r1/"))
    assert len(_queued(redis_mock)) == 2


@pytest.mark.anyio
async def test_temp_urls_never_leave(outbox, redis_mock):
    with pytest.raises(TemporaryMediaURL):
        await outbox.publish(TranscodeRequest("reel", "r1", url("temp/raw.mp4"), "reels/r1/"))
    assert _queued(redis_mock) == []


@pytest.mark.anyio
async def test_failed_push_releases_dedupe_marker(outbox, redis_mock):
    req = TranscodeRequest("reel", "r1", url("reels/r1/r1.mp4"), "reels/r1/")
    redis_mock.fail_push = True
    with pytest.raises(RedisError):
        await outbox.publish(req)

    redis_mock.fail_push = False
    assert await outbox.publish(req) is True


@pytest.mark.anyio
async def test_enqueue_marks_record_processing_once(outbox, repo, redis_mock):
    h = repo.add(StreamHighlight(
        id="h1", title="x", video_url=url("highlights/h1/h1.mp4"),
        video_processing_status=VideoProcessingStatus.NOT_STARTED,
    ))

    assert await enqueue_record_transcode(h, outbox=outbox, repository=repo) is True
    assert h.video_processing_status is VideoProcessingStatus.PROCESSING

    h.video_processing_status = VideoProcessingStatus.COMPLETED
    assert await enqueue_record_transcode(h, outbox=outbox, repository=repo) is False
    assert h.video_processing_status is VideoProcessingStatus.COMPLETED
    assert len(_queued(redis_mock)) == 1


@pytest.mark.anyio
async def test_enqueue_without_video_is_a_no_op(outbox, repo, redis_mock):
    r = repo.add(Reel(id="r1", title="x"))
    assert await enqueue_record_transcode(r, outbox=outbox, repository=repo) is False
    assert _queued(redis_mock) == []
