from __future__ import annotations

"""
SportsHub • S3 Layout & Lifecycle
=================================

Documented S3 key layout (single bucket, public-read via bucket policy):

    s3://{bucket}/
      temp/{upload-id}.{ext}                         # client uploads, pre-promotion
      highlights/{highlight_id}/{highlight_id}.{ext} # source video
      highlights/{highlight_id}/thumbnail.{ext}
      highlights/{highlight_id}/{360p,720p,...}/playlist.m3u8 + segments
      highlights/{highlight_id}/master.m3u8
      reels/{reel_id}/...                            # same shape as highlights
      coaching-centres/{center_id}/logo.{ext}
      coaching-centres/{center_id}/documents/{unique_id}.{ext}
      coaching-centres/{center_id}/sports/{sport_id}/images/{unique_id}.{ext}
      coaching-centres/{center_id}/sports/{sport_id}/videos/{unique_id}.{ext}

Lifecycle
---------
- Temp uploads are promoted (copy → delete) before the owning record is saved.
- Permanent keys are a pure function of (folder, parent id, slot, extension),
  so re-promotion and replacement overwrite the same key.
- Records soft-deleted past the retention window lose every object under their
  folder, then the row itself.
"""

import posixpath

# Record folders (first key segment)
FOLDER_HIGHLIGHTS = "highlights"
FOLDER_REELS = "reels"
FOLDER_COACHING_CENTRES = "coaching-centres"

# Slots whose file is named after the parent rather than the slot
_PARENT_NAMED_SLOTS = frozenset({"video"})


def key_extension(key: str) -> str:
    """Extension of the last key segment, lower-cased, without the dot ('' if none)."""
    _, ext = posixpath.splitext(posixpath.basename(key or ""))
    return ext[1:].lower()


def permanent_key(folder: str, parent_id: str, slot: str, extension: str = "") -> str:
    """
    Deterministic permanent key for one media slot of one parent record.

    `slot` may contain `/` for nested media (e.g. ``documents/{unique_id}``);
    the final segment becomes the file name.

    Examples
    --------
    >>> permanent_key("highlights", "abc", "video", "mp4")
    'highlights/abc/abc.mp4'
    >>> permanent_key("reels", "r1", "thumbnail", "jpg")
    'reels/r1/thumbnail.jpg'
    """
    parent = str(parent_id).strip().strip("/")
    slot_path = str(slot).strip().strip("/")
    if not parent or not slot_path:
        raise ValueError("permanent_key requires a parent id and a slot")
    if slot_path in _PARENT_NAMED_SLOTS:
        slot_path = parent
    name = f"{slot_path}.{extension}" if extension else slot_path
    return f"{folder.strip('/')}/{parent}/{name}"


def record_folder_prefix(folder: str, parent_id: str, template: str = "{id}") -> str:
    """Catch-all prefix for one record, e.g. ``reels/{id}/`` (always ends with `/`)."""
    name = template.format(id=str(parent_id).strip().strip("/"))
    return f"{folder.strip('/')}/{name}/"


def containing_folder(key: str) -> str:
    """Prefix up to and including the last separator (``a/b/c.m3u8`` → ``a/b/``)."""
    idx = key.rfind("/")
    return key[: idx + 1] if idx > 0 else f"{key}/"


__all__ = [
    "FOLDER_HIGHLIGHTS",
    "FOLDER_REELS",
    "FOLDER_COACHING_CENTRES",
    "key_extension",
    "permanent_key",
    "record_folder_prefix",
    "containing_folder",
]
