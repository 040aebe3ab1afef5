# sportshub/db/models/reel.py
from __future__ import annotations

"""
SportsHub — Reel Model

Short vertical video. Media lives under ``reels/{id}/``; the uploaded video is
kept in `original_path` and promoted to ``reels/{id}/{id}.{ext}``, the
thumbnail to ``reels/{id}/thumbnail.{ext}``.
"""

from sqlalchemy import Column, Enum as SAEnum, Index, String, Text

from sportshub.core.storage import FOLDER_REELS
from sportshub.db.base_class import Base, JSONVariant, SoftDeleteMixin, TimestampMixin, UUIDPKMixin
from sportshub.schemas.enums import RecordType, VideoProcessingStatus
from sportshub.services.media.slots import MediaOwnerMixin


class Reel(UUIDPKMixin, TimestampMixin, SoftDeleteMixin, MediaOwnerMixin, Base):
    __tablename__ = "reels"

    RECORD_TYPE = RecordType.REEL.value
    MEDIA_FOLDER = FOLDER_REELS
    SINGLE_MEDIA_FIELDS = {
        "video": "original_path",
        "thumbnail": "thumbnail_path",
        "preview": "preview_url",
        "master": "master_m3u8_url",
    }
    PLAYLIST_FIELD = "hls_urls"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String(36), nullable=True, index=True)

    original_path = Column(Text, nullable=True)
    thumbnail_path = Column(Text, nullable=True)
    preview_url = Column(Text, nullable=True)
    master_m3u8_url = Column(Text, nullable=True)
    hls_urls = Column(JSONVariant, nullable=True)
    video_processing_status = Column(
        SAEnum(VideoProcessingStatus, name="video_processing_status"),
        nullable=False,
        default=VideoProcessingStatus.NOT_STARTED,
    )

    __table_args__ = (
        Index("ix_reels_deleted_at_id", "deleted_at", "id"),
    )
