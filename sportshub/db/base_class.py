# sportshub/db/base_class.py
from __future__ import annotations

"""
# SportsHub — SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (Alembic-friendly)
- Automatic **snake_case `__tablename__`**
- Common mixins:
  - `UUIDPKMixin` — string UUID primary key (the record's stable external id)
  - `TimestampMixin` — `created_at` / `updated_at` (UTC, server-side)
  - `SoftDeleteMixin` — `deleted_at` flag for soft deletes + lifecycle state

Usage:
    from sportshub.db.base_class import Base, UUIDPKMixin, SoftDeleteMixin

    class Reel(UUIDPKMixin, TimestampMixin, SoftDeleteMixin, Base):
        title: Mapped[str] = mapped_column(String(255))
"""

from datetime import datetime, timezone
from enum import Enum
import re
from uuid import uuid4

from sqlalchemy import JSON, DateTime, MetaData, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

# ──────────────────────────────────────────────────────────────────────────────
# 🏷️ Naming conventions (stable constraint names for Alembic)
# ──────────────────────────────────────────────────────────────────────────────

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# JSONB on Postgres, plain JSON elsewhere
JSONVariant = JSON().with_variant(JSONB(), "postgresql")


def _to_snake(name: str) -> str:
    """Convert `CamelCase` / `PascalCase` to `snake_case` for table names."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


# ──────────────────────────────────────────────────────────────────────────────
# 🧱 Declarative Base
# ──────────────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Global declarative base for SportsHub models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        return _to_snake(cls.__name__)

    def __repr__(self) -> str:  # pragma: no cover (repr convenience)
        attrs = [f"id={getattr(self, 'id', None)!r}"]
        if getattr(self, "deleted_at", None) is not None:
            attrs.append(f"deleted_at={self.deleted_at.isoformat()}")  # type: ignore[attr-defined]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


# ──────────────────────────────────────────────────────────────────────────────
# 🧩 Common mixins
# ──────────────────────────────────────────────────────────────────────────────

class UUIDPKMixin:
    """String UUID primary key; doubles as the record's external id in storage keys."""
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))


class TimestampMixin:
    """
    Server-side timestamps (UTC).
    - `created_at`: set once at insert
    - `updated_at`: set at insert and auto-updated on change
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class LifecycleState(str, Enum):
    ACTIVE = "active"
    SOFT_DELETED = "soft_deleted"
    PURGED = "purged"  # never observed on a loaded row; the row is gone


class SoftDeleteMixin:
    """
    Soft-delete flag via timestamp.
    - `deleted_at` is NULL for active rows; set to UTC time to mark deleted.
    - Transitions are one-way: active → soft-deleted → purged (row removed).
    """
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def lifecycle_state(self) -> LifecycleState:
        return LifecycleState.SOFT_DELETED if self.is_deleted else LifecycleState.ACTIVE

    def soft_delete(self, when: datetime | None = None) -> None:
        """Mark deleted (idempotent: the first deletion time is kept). Media is untouched."""
        if self.deleted_at is None:
            self.deleted_at = when or datetime.now(timezone.utc)


__all__ = [
    "Base",
    "UUIDPKMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    "LifecycleState",
    "NAMING_CONVENTION",
    "JSONVariant",
]
