# sportshub/db/base.py
"""
SportsHub — SQLAlchemy Base registry

Import all ORM models so their tables are registered on `Base.metadata`
(Alembic autogeneration). Keep this file import-only.
"""

from sportshub.db.base_class import Base

from sportshub.db.models.highlight import StreamHighlight
from sportshub.db.models.reel import Reel
from sportshub.db.models.coaching_center import CoachingCenter

__all__ = ["Base", "StreamHighlight", "Reel", "CoachingCenter"]
