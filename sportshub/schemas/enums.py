from __future__ import annotations

"""
Central enum definitions used across SportsHub.

• All enums subclass `str, PyEnum` for JSON-friendly serialization.
• VALUE STRINGS are **stable** once deployed (DB enums depend on them).
"""

from enum import Enum as PyEnum


class VideoProcessingStatus(str, PyEnum):
    """Transcoding state of a record's primary video."""
    NOT_STARTED = "not_started"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RecordType(str, PyEnum):
    """Media-owning record types, in retention sweep order."""
    HIGHLIGHT = "highlight"
    REEL = "reel"
    COACHING_CENTER = "coaching_center"


__all__ = ["VideoProcessingStatus", "RecordType"]
