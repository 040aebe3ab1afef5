# sportshub/core/exceptions.py
from __future__ import annotations

"""
SportsHub — Application & Storage Lifecycle Exceptions
======================================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` for
errors that surface to API callers, plus plain exceptions for the unattended
storage lifecycle (promotion, reclamation, sweeps).

Taxonomy
--------
- `AppException`          → base for request-visible errors (carries code/details)
- `PromotionFailed`       → temp → permanent copy failed; abort the record write (503, retryable)
- `StorageLifecycleError` → base for non-HTTP storage lifecycle errors
  - `MalformedURL`          → media URL with no recognizable store host; skip + log
  - `StoreUnavailable`      → store client could not be constructed (disabled variant)
  - `PartialDeleteFailure`  → some keys of a batch/prefix delete failed; counted, non-fatal

Usage
-----
    raise PromotionFailed(url=temp_url, parent_id=highlight_id, slot="video")
"""

from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "PromotionFailed",
    "StorageLifecycleError",
    "MalformedURL",
    "StoreUnavailable",
    "PartialDeleteFailure",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    details : dict | list | str | None
        Machine-readable details (ids, offending URL, slot).
    headers : dict | None
        Optional headers (e.g., `{"Retry-After": "5"}`).
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details


# ──────────────────────────────────────────────────────────────
# 🚚 Promotion
# ──────────────────────────────────────────────────────────────
class PromotionFailed(AppException):
    """Raised when the copy step of a temp → permanent move fails.

    The triggering create/update must be aborted: a temp-scoped URL is never
    persisted as a record's final value. Surfaces as a retryable 503.
    """

    def __init__(
        self,
        *,
        url: str,
        parent_id: str,
        slot: str,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message="Failed to move media to permanent location. Please try again.",
            details={"url": url, "parent_id": parent_id, "slot": slot, "reason": reason},
            headers={"Retry-After": "5"},
        )
        self.url = url
        self.parent_id = parent_id
        self.slot = slot
        self.reason = reason


# ──────────────────────────────────────────────────────────────
# 🧹 Storage lifecycle (unattended)
# ──────────────────────────────────────────────────────────────
class StorageLifecycleError(Exception):
    """Base class for storage lifecycle errors that never reach HTTP callers."""


class MalformedURL(StorageLifecycleError, ValueError):
    """Media URL could not be mapped to an object key."""

    def __init__(self, url: Any, reason: str = "no recognizable store host") -> None:
        super().__init__(f"Malformed media URL ({reason}): {url!r}")
        self.url = url
        self.reason = reason


class StoreUnavailable(StorageLifecycleError):
    """The object-store client is disabled (missing bucket or credentials)."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Object store unavailable; cannot {operation}")
        self.operation = operation


class PartialDeleteFailure(StorageLifecycleError):
    """One or more keys of a batch/prefix delete were not removed.

    `deleted` still reports what *was* removed so callers can count it.
    """

    def __init__(self, locator: str, *, deleted: int, failed_keys: Sequence[str]) -> None:
        failed: List[str] = list(failed_keys)
        super().__init__(
            f"Partial delete under {locator!r}: deleted={deleted}, failed={len(failed)}"
        )
        self.locator = locator
        self.deleted = deleted
        self.failed_keys = failed
