from __future__ import annotations

"""Purgeable record repository.

Data access for the media lifecycle jobs: listing soft-deleted records past
their retention window, hard-deleting them, idempotent transcode status
updates and persisting edited media item lists.

Two implementations share one interface: `SqlAlchemyPurgeableRepository`
(PostgreSQL via the async session factory) and `MemoryPurgeableRepository`
(process-local; used by tests and local tooling).
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sportshub.db.models import CoachingCenter
from sportshub.schemas.enums import VideoProcessingStatus

logger = logging.getLogger(__name__)


class PurgeableRepositoryProtocol:
    async def list_purgeable(self, model: Type[Any], cutoff: datetime) -> List[Any]:
        """Records of `model` soft-deleted strictly before `cutoff`, oldest first."""
        raise NotImplementedError

    async def hard_delete(self, model: Type[Any], record_id: str) -> bool:
        raise NotImplementedError

    async def mark_transcode_enqueued(self, model: Type[Any], record_id: str) -> bool:
        """NOT_STARTED → PROCESSING; True only when this call changed the row."""
        raise NotImplementedError

    async def list_centres_with_deleted_items(self) -> List[CoachingCenter]:
        """Active coaching centres whose media lists hold at least one deleted item."""
        raise NotImplementedError

    async def update_fields(self, model: Type[Any], record_id: str, values: Mapping[str, Any]) -> None:
        raise NotImplementedError


def _has_deleted_items(centre: CoachingCenter) -> bool:
    for field_name in CoachingCenter.NESTED_MEDIA_FIELDS:
        for _stem, _owner, item in CoachingCenter.iter_media_items(field_name, getattr(centre, field_name, None)):
            if item.get("is_deleted"):
                return True
    return False


class SqlAlchemyPurgeableRepository(PurgeableRepositoryProtocol):
    """
    PostgreSQL-backed repository. Each call runs in its own short transaction
    so one record's failure never rolls back another's purge.
    """

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None) -> None:
        if session_factory is None:
            from sportshub.db.session import get_session_maker

            session_factory = get_session_maker()
        self._session_factory = session_factory

    async def list_purgeable(self, model: Type[Any], cutoff: datetime) -> List[Any]:
        stmt = (
            select(model)
            .where(model.deleted_at.is_not(None), model.deleted_at < cutoff)
            .order_by(model.deleted_at.asc(), model.id.asc())
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return list(rows)

    async def hard_delete(self, model: Type[Any], record_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(delete(model).where(model.id == record_id))
            await session.commit()
        return bool(getattr(result, "rowcount", 0))

    async def mark_transcode_enqueued(self, model: Type[Any], record_id: str) -> bool:
        stmt = (
            update(model)
            .where(
                model.id == record_id,
                model.video_processing_status == VideoProcessingStatus.NOT_STARTED,
            )
            .values(video_processing_status=VideoProcessingStatus.PROCESSING)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
        return bool(getattr(result, "rowcount", 0))

    async def list_centres_with_deleted_items(self) -> List[CoachingCenter]:
        stmt = select(CoachingCenter).where(CoachingCenter.deleted_at.is_(None)).order_by(CoachingCenter.id)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [c for c in rows if _has_deleted_items(c)]

    async def update_fields(self, model: Type[Any], record_id: str, values: Mapping[str, Any]) -> None:
        if not values:
            return
        async with self._session_factory() as session:
            await session.execute(update(model).where(model.id == record_id).values(**dict(values)))
            await session.commit()


class MemoryPurgeableRepository(PurgeableRepositoryProtocol):
    """Process-local repository keyed by model class and record id."""

    def __init__(self, records: Optional[List[Any]] = None) -> None:
        self._rows: Dict[Type[Any], Dict[str, Any]] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: Any) -> Any:
        self._rows.setdefault(type(record), {})[str(record.id)] = record
        return record

    def get(self, model: Type[Any], record_id: str) -> Optional[Any]:
        return self._rows.get(model, {}).get(str(record_id))

    def all(self, model: Type[Any]) -> List[Any]:
        return list(self._rows.get(model, {}).values())

    async def list_purgeable(self, model: Type[Any], cutoff: datetime) -> List[Any]:
        rows = [r for r in self.all(model) if r.deleted_at is not None and r.deleted_at < cutoff]
        return sorted(rows, key=lambda r: (r.deleted_at, str(r.id)))

    async def hard_delete(self, model: Type[Any], record_id: str) -> bool:
        return self._rows.get(model, {}).pop(str(record_id), None) is not None

    async def mark_transcode_enqueued(self, model: Type[Any], record_id: str) -> bool:
        record = self.get(model, record_id)
        if record is None:
            return False
        current = record.video_processing_status or VideoProcessingStatus.NOT_STARTED
        if current != VideoProcessingStatus.NOT_STARTED:
            return False
        record.video_processing_status = VideoProcessingStatus.PROCESSING
        return True

    async def list_centres_with_deleted_items(self) -> List[CoachingCenter]:
        return [c for c in self.all(CoachingCenter) if c.deleted_at is None and _has_deleted_items(c)]

    async def update_fields(self, model: Type[Any], record_id: str, values: Mapping[str, Any]) -> None:
        record = self.get(model, record_id)
        if record is None:
            logger.warning("update_fields: %s %s not found", model.__name__, record_id)
            return
        for name, value in values.items():
            setattr(record, name, value)


__all__ = [
    "PurgeableRepositoryProtocol",
    "SqlAlchemyPurgeableRepository",
    "MemoryPurgeableRepository",
]
