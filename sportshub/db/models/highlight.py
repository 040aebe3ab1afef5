# sportshub/db/models/highlight.py
from __future__ import annotations

"""
🎥 SportsHub — Stream Highlight Model
=====================================

A short clip cut from a live stream. Its media lives under
``highlights/{id}/``:

• `video_url`          uploaded source video, promoted to ``highlights/{id}/{id}.{ext}``
• `thumbnail_url`      poster frame
• `preview_url`        short preview clip
• `master_m3u8_url`    HLS master playlist written by the transcoder
• `hls_urls`           {resolution: playlist URL}; segments sit beside each playlist

Soft deletion only sets `deleted_at`; media is reclaimed by the retention sweep.
"""

from sqlalchemy import Column, Enum as SAEnum, Index, String, Text

from sportshub.core.storage import FOLDER_HIGHLIGHTS
from sportshub.db.base_class import Base, JSONVariant, SoftDeleteMixin, TimestampMixin, UUIDPKMixin
from sportshub.schemas.enums import RecordType, VideoProcessingStatus
from sportshub.services.media.slots import MediaOwnerMixin


class StreamHighlight(UUIDPKMixin, TimestampMixin, SoftDeleteMixin, MediaOwnerMixin, Base):
    """Highlight clip with transcoded renditions."""

    __tablename__ = "stream_highlights"

    RECORD_TYPE = RecordType.HIGHLIGHT.value
    MEDIA_FOLDER = FOLDER_HIGHLIGHTS
    SINGLE_MEDIA_FIELDS = {
        "video": "video_url",
        "thumbnail": "thumbnail_url",
        "preview": "preview_url",
        "master": "master_m3u8_url",
    }
    PLAYLIST_FIELD = "hls_urls"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    stream_id = Column(String(36), nullable=True, index=True)

    video_url = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    preview_url = Column(Text, nullable=True)
    master_m3u8_url = Column(Text, nullable=True)
    hls_urls = Column(JSONVariant, nullable=True, doc="Resolution → HLS playlist URL.")
    video_processing_status = Column(
        SAEnum(VideoProcessingStatus, name="video_processing_status"),
        nullable=False,
        default=VideoProcessingStatus.NOT_STARTED,
    )

    __table_args__ = (
        Index("ix_stream_highlights_deleted_at_id", "deleted_at", "id"),
    )
