# sportshub/services/media/record_media.py
from __future__ import annotations

"""
Record-level media promotion.

`promote_record_media` runs the promoter over every writable media slot of a
record (single slots and nested gallery items) and rewrites the record in
place, before the caller persists it.

`apply_media_update` applies an update payload's media fields, promotes any
new temp uploads, and deletes permanent objects that a slot no longer points
at. Deletion happens only after every promotion succeeded; a
`PromotionFailed` leaves stored media untouched and must abort the write.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from sportshub.services.media.promoter import ObjectPromoter, PromotionResult, StagedPromotion
from sportshub.services.media.slots import MediaOwnerMixin, MediaRef
from sportshub.services.media.tempness import is_temporary

logger = logging.getLogger(__name__)


def ensure_record_id(record: MediaOwnerMixin) -> str:
    """Permanent keys embed the id, so new records get one before promotion."""
    if getattr(record, "id", None) is None:
        setattr(record, "id", str(uuid4()))
    return record.external_id


async def promote_record_media(record: MediaOwnerMixin, promoter: ObjectPromoter) -> List[PromotionResult]:
    """
    Copy every temp slot first, then rewrite the refs and delete the temp
    sources. A `PromotionFailed` on any slot leaves every upload in place.
    """
    parent_id = ensure_record_id(record)
    staged: List[Tuple[MediaRef, StagedPromotion]] = []
    for ref in list(record.iter_media_refs()):
        step = await promoter.stage(ref.url, folder=record.MEDIA_FOLDER, parent_id=parent_id, slot=ref.slot)
        staged.append((ref, step))

    results: List[PromotionResult] = []
    for ref, step in staged:
        if step.result.was_moved:
            ref.assign(step.result.final_url)
        results.append(step.result)
    for _ref, step in staged:
        await promoter.release(step)
    moved = sum(1 for r in results if r.was_moved)
    if moved:
        logger.info("Promoted %s media object(s) for %s %s", moved, record.RECORD_TYPE, parent_id)
    return results


def _slot_urls(record: MediaOwnerMixin) -> Dict[str, Optional[str]]:
    return {ref.slot: ref.url for ref in record.iter_media_refs()}


async def apply_media_update(
    record: MediaOwnerMixin,
    changes: Mapping[str, Any],
    promoter: ObjectPromoter,
) -> List[PromotionResult]:
    """
    Apply media `changes` (attribute name → new value) to `record`.

    Only media attributes are accepted: single-slot attributes take a URL or
    None, nested fields take their full JSON list.

    Raises
    ------
    ValueError
        A key in `changes` is not a media attribute of this record type.
    PromotionFailed
        A new upload could not be moved; the record must not be saved.
    """
    allowed = set(record.SINGLE_MEDIA_FIELDS.values()) | set(record.NESTED_MEDIA_FIELDS)
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValueError(f"Not media fields of {record.RECORD_TYPE}: {', '.join(unknown)}")

    before = _slot_urls(record)
    for attr, value in changes.items():
        setattr(record, attr, value)

    results = await promote_record_media(record, promoter)

    after = _slot_urls(record)
    codec = promoter.codec
    for slot, old_url in before.items():
        new_url = after.get(slot)
        if not old_url or slot not in after or not new_url or new_url == old_url:
            continue
        old_key = codec.try_decode(old_url)
        if not old_key or is_temporary(old_key) or old_key == codec.try_decode(new_url):
            continue
        await promoter.discard(old_url)
    return results


__all__ = ["promote_record_media", "apply_media_update", "ensure_record_id"]
