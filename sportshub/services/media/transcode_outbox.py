# sportshub/services/media/transcode_outbox.py
from __future__ import annotations

"""
SportsHub — Transcoding Outbox
==============================

Hands a record's promoted video to the transcoding pipeline as an explicit
message on a Redis list (`TRANSCODE_QUEUE_KEY`).

Contract
--------
• Only final (permanent) URLs are published; temp URLs are refused.
• Delivery is at-least-once with dedupe: a `SET NX EX` marker per
  (record, video key) suppresses repeats within `TRANSCODE_DEDUPE_TTL_SECONDS`.
  If the push fails the marker is cleared so a retry can publish.
• After publishing, the record's `video_processing_status` moves
  NOT_STARTED → PROCESSING through an idempotent conditional update.

Message shape
-------------
    {"record_type": "reel", "record_id": "...", "video_url": "https://...",
     "folder_path": "reels/{id}/"}
"""

import hashlib
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from redis.exceptions import RedisError

from sportshub.core.config import settings
from sportshub.core.redis_client import RedisClient, redis_wrapper
from sportshub.core.storage import record_folder_prefix
from sportshub.repositories.purgeable import PurgeableRepositoryProtocol
from sportshub.services.media.key_codec import KeyCodec
from sportshub.services.media.slots import MediaOwnerMixin
from sportshub.services.media.tempness import is_temporary

logger = logging.getLogger(__name__)


class TemporaryMediaURL(ValueError):
    """A temp-scoped URL was about to leave the system."""


@dataclass(frozen=True)
class TranscodeRequest:
    record_type: str
    record_id: str
    video_url: str
    folder_path: str

    @classmethod
    def for_record(cls, record: MediaOwnerMixin, video_url: str) -> "TranscodeRequest":
        return cls(
            record_type=record.RECORD_TYPE,
            record_id=record.external_id,
            video_url=video_url,
            folder_path=record_folder_prefix(record.MEDIA_FOLDER, record.external_id),
        )

    def to_message(self) -> Dict[str, Any]:
        return asdict(self)


class TranscodeOutbox:
    """Publishes `TranscodeRequest`s to the transcoding queue."""

    def __init__(
        self,
        redis: Optional[RedisClient] = None,
        *,
        queue_key: Optional[str] = None,
        dedupe_ttl_seconds: Optional[int] = None,
        codec: Optional[KeyCodec] = None,
    ) -> None:
        self._redis = redis or redis_wrapper
        self._queue_key = queue_key or settings.TRANSCODE_QUEUE_KEY
        self._ttl = int(dedupe_ttl_seconds or settings.TRANSCODE_DEDUPE_TTL_SECONDS)
        self._codec = codec or KeyCodec()

    def _dedupe_key(self, request: TranscodeRequest, object_key: str) -> str:
        digest = hashlib.sha1(object_key.encode("utf-8")).hexdigest()[:16]
        return f"{self._queue_key}:dedupe:{request.record_type}:{request.record_id}:{digest}"

    async def publish(self, request: TranscodeRequest) -> bool:
        """
        Push `request` onto the queue. Returns False when an identical request
        was already published within the dedupe window.

        Raises
        ------
        TemporaryMediaURL
            The video URL still points into the temp area.
        redis.exceptions.RedisError
            The push failed (the dedupe marker is released first).
        """
        object_key = self._codec.try_decode(request.video_url)
        if object_key is None:
            object_key = request.video_url
        elif is_temporary(object_key):
            raise TemporaryMediaURL(f"refusing to transcode temp media: {request.video_url}")

        marker = self._dedupe_key(request, object_key)
        if not await self._redis.set_marker(marker, ttl_seconds=self._ttl):
            logger.info(
                "Transcode already queued for %s %s; skipping", request.record_type, request.record_id,
            )
            return False

        try:
            depth = await self._redis.push_json(self._queue_key, request.to_message())
        except RedisError:
            await self._redis.clear_marker(marker)
            raise
        logger.info(
            "Queued transcode for %s %s (queue depth=%s)", request.record_type, request.record_id, depth,
        )
        return True


async def enqueue_record_transcode(
    record: MediaOwnerMixin,
    *,
    outbox: TranscodeOutbox,
    repository: PurgeableRepositoryProtocol,
) -> bool:
    """
    Publish the record's video for transcoding and mark it PROCESSING.

    Returns True when a message was published. Records without a video slot
    or value are ignored.
    """
    video_attr = record.SINGLE_MEDIA_FIELDS.get("video")
    video_url = getattr(record, video_attr, None) if video_attr else None
    if not video_url:
        return False

    published = await outbox.publish(TranscodeRequest.for_record(record, video_url))
    if await repository.mark_transcode_enqueued(type(record), record.external_id):
        logger.debug("%s %s marked processing", record.RECORD_TYPE, record.external_id)
    return published


__all__ = ["TranscodeRequest", "TranscodeOutbox", "TemporaryMediaURL", "enqueue_record_transcode"]
