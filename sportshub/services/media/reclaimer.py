# sportshub/services/media/reclaimer.py
from __future__ import annotations

"""
SportsHub — Prefix & Object Reclamation
=======================================

Deletes stored media for purged records.

- `delete_by_prefix` walks a "folder" page by page (LIST with continuation
  cursor → quiet batch DELETE) until the listing is exhausted.
- `delete_object` removes one key and reports whether something was there, so
  reclaiming the same media twice counts zero the second time.

Failure model
-------------
- Store disabled → 0 with a warning (the orchestrator decides if that matters).
- Keys S3 reports as failed in a batch are not counted; after every page was
  attempted a `PartialDeleteFailure` carrying the deleted count is raised.
- Whole-request failures (`S3StorageError`) propagate after retries.
"""

import asyncio
import logging
from typing import Any, List, Optional

from sportshub.core.config import settings
from sportshub.core.exceptions import PartialDeleteFailure
from sportshub.utils.aws import S3StorageError, get_s3_client
from sportshub.utils.retry import retry_async

logger = logging.getLogger(__name__)


class PrefixReclaimer:
    """Paginated prefix deletion + single-object deletion over the store client."""

    def __init__(
        self,
        s3: Any = None,
        *,
        page_size: Optional[int] = None,
        retry_attempts: Optional[int] = None,
    ) -> None:
        self._s3 = s3 if s3 is not None else get_s3_client()
        self._page_size = int(page_size or settings.S3_LIST_PAGE_SIZE)
        self._attempts = retry_attempts or settings.STORE_RETRY_ATTEMPTS

    @property
    def enabled(self) -> bool:
        return bool(getattr(self._s3, "enabled", False))

    async def _call(self, func, *args, **kwargs):
        return await retry_async(
            lambda: asyncio.to_thread(func, *args, **kwargs),
            attempts=self._attempts,
            base_delay=settings.STORE_RETRY_BASE_DELAY,
            max_delay=settings.STORE_RETRY_MAX_DELAY,
            retry_on=(S3StorageError,),
        )

    async def delete_by_prefix(self, prefix: str) -> int:
        """
        Delete every object under `prefix` and return how many were removed.

        Raises
        ------
        PartialDeleteFailure
            Some keys could not be deleted (others were; see `.deleted`).
        S3StorageError
            LIST or DELETE request failed after retries.
        """
        if not self.enabled:
            logger.warning("S3 client not configured. Skipping folder deletion: %s", prefix)
            return 0

        folder = str(prefix or "").lstrip("/")
        if not folder:
            raise ValueError("Refusing to delete an empty prefix (whole bucket)")
        if not folder.endswith("/"):
            folder += "/"

        deleted = 0
        failed: List[str] = []
        token: Optional[str] = None
        while True:
            page = await self._call(
                self._s3.list_page, folder, continuation_token=token, max_keys=self._page_size
            )
            if page.keys:
                page_failed = await self._call(self._s3.delete_many, page.keys)
                failed.extend(page_failed)
                removed = len(page.keys) - len(page_failed)
                deleted += removed
                logger.info("Deleted %s objects from %s", removed, folder)
            token = page.next_token
            if not token:
                break

        if failed:
            raise PartialDeleteFailure(folder, deleted=deleted, failed_keys=failed)
        return deleted

    async def delete_object(self, key: str) -> int:
        """Delete one object; 1 if it existed, 0 if it was already gone."""
        if not self.enabled:
            logger.warning("S3 client not configured. Skipping file deletion: %s", key)
            return 0
        if not await self._call(self._s3.exists, key):
            logger.debug("Object already absent: %s", key)
            return 0
        await self._call(self._s3.delete, key)
        logger.info("Deleted object %s", key)
        return 1


__all__ = ["PrefixReclaimer"]
