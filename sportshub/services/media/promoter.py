# sportshub/services/media/promoter.py
from __future__ import annotations

"""
SportsHub — Temp → Permanent Object Promotion
=============================================

Moves one uploaded object out of the temporary area into its deterministic
permanent key, before the owning record is written.

Steps (per URL)
---------------
`stage()` runs 1-4 and `release()` runs 5; `promote()` does both. Multi-slot
callers stage every slot before releasing any source, so a failed slot leaves
all temp uploads in place and the same payload can be retried.

1) Empty URL → unchanged.
2) Not a temp key (or not a store URL at all) → unchanged.
3) Permanent key = f(folder, parent id, slot, extension).
4) Server-side COPY (retried with backoff); failure → `PromotionFailed`.
5) DELETE the temp source; failure is logged and swallowed. The permanent copy
   is authoritative and the stray temp object is left to the temp-area sweep.
6) Return the canonical permanent URL.

Concurrency
-----------
Not atomic across concurrent calls for the same (parent, slot); callers
serialize mutations per parent record.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sportshub.core.config import settings
from sportshub.core.exceptions import MalformedURL, PromotionFailed, StoreUnavailable
from sportshub.core.storage import key_extension, permanent_key
from sportshub.services.media.key_codec import KeyCodec
from sportshub.services.media.tempness import is_temporary
from sportshub.utils.aws import S3StorageError, get_s3_client
from sportshub.utils.retry import retry_async

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of one promotion attempt."""

    final_url: Optional[str]
    was_moved: bool


@dataclass(frozen=True)
class StagedPromotion:
    """A completed COPY whose temp source has not been deleted yet."""

    result: PromotionResult
    source_key: Optional[str] = None


class ObjectPromoter:
    """Type-agnostic temp → permanent mover.

    Parameters
    ----------
    s3 : S3Client | DisabledS3Client | None
        Store client; defaults to the process-wide `get_s3_client()`.
    codec : KeyCodec | None
        URL ⇄ key codec; defaults to one built from settings.
    retry_attempts : int | None
        Attempts for the COPY step (defaults to `settings.STORE_RETRY_ATTEMPTS`).
    """

    def __init__(
        self,
        s3: Any = None,
        *,
        codec: Optional[KeyCodec] = None,
        retry_attempts: Optional[int] = None,
    ) -> None:
        self._s3 = s3 if s3 is not None else get_s3_client()
        self._codec = codec or KeyCodec()
        self._attempts = retry_attempts or settings.STORE_RETRY_ATTEMPTS

    @property
    def codec(self) -> KeyCodec:
        return self._codec

    async def promote(
        self,
        url: Optional[str],
        *,
        folder: str,
        parent_id: str,
        slot: str,
    ) -> PromotionResult:
        """Promote `url` to its permanent location for (`parent_id`, `slot`)."""
        staged = await self.stage(url, folder=folder, parent_id=parent_id, slot=slot)
        await self.release(staged)
        return staged.result

    async def stage(
        self,
        url: Optional[str],
        *,
        folder: str,
        parent_id: str,
        slot: str,
    ) -> StagedPromotion:
        """
        COPY `url` to its permanent key, keeping the temp source.

        Raises
        ------
        PromotionFailed
            When the COPY step fails or the store is unavailable. The caller
            must not persist the record.
        """
        if not url:
            return StagedPromotion(PromotionResult(final_url=url, was_moved=False))

        try:
            source_key = self._codec.decode(url)
        except MalformedURL as e:
            logger.warning("Not a store URL, leaving as-is: %s", e)
            return StagedPromotion(PromotionResult(final_url=url, was_moved=False))

        if not is_temporary(source_key):
            return StagedPromotion(PromotionResult(final_url=url, was_moved=False))

        dest_key = permanent_key(folder, parent_id, slot, key_extension(source_key))
        logger.info("Promoting %s -> %s (parent=%s, slot=%s)", source_key, dest_key, parent_id, slot)

        try:
            await retry_async(
                lambda: asyncio.to_thread(self._s3.copy, source_key, dest_key),
                attempts=self._attempts,
                base_delay=settings.STORE_RETRY_BASE_DELAY,
                max_delay=settings.STORE_RETRY_MAX_DELAY,
                retry_on=(S3StorageError,),
            )
        except (S3StorageError, StoreUnavailable) as e:
            logger.error("Copy to permanent location failed: %s -> %s: %s", source_key, dest_key, e)
            raise PromotionFailed(url=url, parent_id=str(parent_id), slot=slot, reason=str(e)) from e

        final_url = self._codec.encode(dest_key)
        logger.info("Promoted media for parent=%s slot=%s: %s", parent_id, slot, final_url)
        return StagedPromotion(PromotionResult(final_url=final_url, was_moved=True), source_key=source_key)

    async def release(self, staged: StagedPromotion) -> None:
        """Delete the temp source of a staged promotion; failures are logged only."""
        if not staged.source_key:
            return
        try:
            await asyncio.to_thread(self._s3.delete, staged.source_key)
        except Exception as e:  # noqa: BLE001
            logger.warning("Temp object left behind after promotion: %s (%s)", staged.source_key, e)

    async def discard(self, url: Optional[str]) -> bool:
        """
        Best-effort delete of a superseded object. Returns True when the
        delete request succeeded.
        """
        key = self._codec.try_decode(url)
        if not key:
            return False
        try:
            await asyncio.to_thread(self._s3.delete, key)
        except StoreUnavailable as e:
            logger.warning("Superseded media not deleted (%s): %s", e, key)
            return False
        except S3StorageError as e:
            logger.error("Failed to delete superseded media %s: %s", key, e)
            return False
        logger.info("Deleted superseded media %s", key)
        return True


__all__ = ["ObjectPromoter", "PromotionResult", "StagedPromotion"]
