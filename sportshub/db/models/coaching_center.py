# sportshub/db/models/coaching_center.py
from __future__ import annotations

"""
🏟️ SportsHub — Coaching Centre Model
====================================

A coaching centre with a logo plus variable-length media galleries stored as
JSON lists. Every gallery entry is a *media item*:

    {"unique_id": "...", "url": "...", "thumbnail": "..."?,
     "is_deleted": false, "deleted_at": null | ISO-8601}

Layout
------
• `logo`                                  → ``coaching-centres/{id}/logo.{ext}``
• `documents[*].url`                      → ``.../documents/{unique_id}.{ext}``
• `sport_details[*].images[*].url`        → ``.../sports/{sport_id}/images/{unique_id}.{ext}``
• `sport_details[*].videos[*].url`        → ``.../sports/{sport_id}/videos/{unique_id}.{ext}``
• `sport_details[*].videos[*].thumbnail`  → same stem with a ``-thumbnail`` suffix

Items flagged `is_deleted` on an *active* centre are removed by the nested
media item cleanup job once their own retention elapses.
"""

from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Tuple

from sqlalchemy import Boolean, Column, Index, String, Text

from sportshub.core.storage import FOLDER_COACHING_CENTRES
from sportshub.db.base_class import Base, JSONVariant, SoftDeleteMixin, TimestampMixin, UUIDPKMixin
from sportshub.schemas.enums import RecordType
from sportshub.services.media.slots import MediaOwnerMixin, MediaRef, ensure_item_id, item_slot_name

# media item keys holding URLs
ITEM_URL = "url"
ITEM_THUMBNAIL = "thumbnail"


def parse_item_deleted_at(value: Any) -> Optional[datetime]:
    """Parse a media item's `deleted_at` (datetime or ISO string); naive → UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def media_item_expired(item: Any, cutoff: datetime) -> bool:
    """True for an item flagged `is_deleted` whose `deleted_at` is before `cutoff`."""
    if not isinstance(item, dict) or not item.get("is_deleted"):
        return False
    deleted_at = parse_item_deleted_at(item.get("deleted_at"))
    return deleted_at is not None and deleted_at < cutoff


class CoachingCenter(UUIDPKMixin, TimestampMixin, SoftDeleteMixin, MediaOwnerMixin, Base):
    """Coaching centre with logo, documents and per-sport galleries."""

    __tablename__ = "coaching_centers"

    RECORD_TYPE = RecordType.COACHING_CENTER.value
    MEDIA_FOLDER = FOLDER_COACHING_CENTRES
    SINGLE_MEDIA_FIELDS = {"logo": "logo"}
    NESTED_MEDIA_FIELDS = ("documents", "sport_details")

    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    owner_id = Column(String(36), nullable=True, index=True)

    logo = Column(Text, nullable=True)
    documents = Column(JSONVariant, nullable=True, doc="List of media items.")
    sport_details = Column(JSONVariant, nullable=True, doc="[{sport_id, images: [...], videos: [...]}]")

    __table_args__ = (
        Index("ix_coaching_centers_deleted_at_id", "deleted_at", "id"),
    )

    # ── media items ─────────────────────────────────────────
    @staticmethod
    def iter_media_items(field_name: str, value: Any) -> Iterator[Tuple[str, list, dict]]:
        """
        Yield ``(slot_stem, owning_list, item)`` for every dict item of one
        nested field. `owning_list` is the list the item can be removed from.
        """
        if not isinstance(value, list):
            return
        if field_name == "documents":
            for idx, item in enumerate(value):
                if isinstance(item, dict):
                    yield f"documents/{item_slot_name(item, idx)}", value, item
        elif field_name == "sport_details":
            for sport_idx, sport in enumerate(value):
                if not isinstance(sport, dict):
                    continue
                sport_id = str(sport.get("sport_id") or f"sport-{sport_idx}")
                for gallery in ("images", "videos"):
                    items = sport.get(gallery)
                    if not isinstance(items, list):
                        continue
                    for idx, item in enumerate(items):
                        if isinstance(item, dict):
                            yield f"sports/{sport_id}/{gallery}/{item_slot_name(item, idx)}", items, item

    def _assign_item_ids(self, field_name: str, value: Any) -> None:
        for _stem, _owner, item in list(self.iter_media_items(field_name, value)):
            ensure_item_id(item)

    def _nested_refs(self, field_name: str, value: Any) -> Iterator[MediaRef]:
        for stem, _owner, item in self.iter_media_items(field_name, value):
            yield MediaRef(slot=stem, container=item, field=ITEM_URL)
            if ITEM_THUMBNAIL in item:
                yield MediaRef(slot=f"{stem}-thumbnail", container=item, field=ITEM_THUMBNAIL)

