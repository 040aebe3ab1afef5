"""Shared constants and builders for media lifecycle tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

BUCKET = "test-bucket"
BASE_URL = "https://test-bucket.s3.ap-south-1.amazonaws.com"

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def url(key: str) -> str:
    return f"{BASE_URL}/{key}"


def days_ago(days: int, *, now: Optional[datetime] = None) -> datetime:
    return (now or NOW) - timedelta(days=days)


def media_item(unique_id: str, key: Optional[str], *, thumbnail_key: Optional[str] = None,
               deleted_days_ago: Optional[int] = None) -> dict:
    item = {
        "unique_id": unique_id,
        "url": url(key) if key else None,
        "is_deleted": deleted_days_ago is not None,
        "deleted_at": days_ago(deleted_days_ago).isoformat() if deleted_days_ago is not None else None,
    }
    if thumbnail_key is not None:
        item["thumbnail"] = url(thumbnail_key)
    return item
