# sportshub/services/media/planner.py
from __future__ import annotations

"""
SportsHub — Media Reclamation Planner
=====================================

Turns a record's `MediaSlots` into an ordered list of delete targets.

Rules
-----
1) Each populated single slot (video, thumbnail, preview, master playlist,
   logo, ...) → one `single_object` target.
2) Each populated per-resolution playlist → a `prefix` target for its
   containing folder; segments live beside the playlist and a single-object
   delete would miss them.
3) Every non-null nested media URL (documents, sport images/videos and their
   thumbnails) → one `single_object` target.
4) Always: a catch-all `prefix` target ``{folder}/{naming(id)}/`` per configured
   naming convention, for artifacts processing wrote that no named slot tracks.

URLs that cannot be decoded are skipped with a warning; duplicate targets
collapse to the first occurrence.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from sportshub.core.config import settings
from sportshub.core.storage import containing_folder, record_folder_prefix
from sportshub.services.media.key_codec import KeyCodec
from sportshub.services.media.slots import MediaSlots

logger = logging.getLogger(__name__)

# Never sweep a top-level folder (e.g. "reels/") from a stray playlist URL
_MIN_PREFIX_DEPTH = 2


class PlanItemKind(str, Enum):
    SINGLE_OBJECT = "single_object"
    PREFIX = "prefix"


@dataclass(frozen=True)
class PlanItem:
    kind: PlanItemKind
    locator: str  # object key, or prefix ending with "/"


@dataclass
class ReclamationPlan:
    record_type: str
    parent_id: str
    items: List[PlanItem] = field(default_factory=list)

    def add(self, kind: PlanItemKind, locator: str) -> None:
        item = PlanItem(kind=kind, locator=locator)
        if item not in self.items:
            self.items.append(item)

    @property
    def singles(self) -> List[PlanItem]:
        return [i for i in self.items if i.kind is PlanItemKind.SINGLE_OBJECT]

    @property
    def prefixes(self) -> List[PlanItem]:
        return [i for i in self.items if i.kind is PlanItemKind.PREFIX]

    def __iter__(self) -> Iterator[PlanItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class MediaReclamationPlanner:
    """Builds a `ReclamationPlan` from any record's `MediaSlots`."""

    def __init__(
        self,
        codec: Optional[KeyCodec] = None,
        *,
        folder_name_templates: Optional[Sequence[str]] = None,
    ) -> None:
        self._codec = codec or KeyCodec()
        self._templates = list(folder_name_templates or settings.folder_name_templates)

    def plan(self, slots: MediaSlots) -> ReclamationPlan:
        plan = ReclamationPlan(record_type=slots.record_type, parent_id=slots.parent_id)

        for _slot, url in slots.singles.items():
            key = self._codec.try_decode(url)
            if key:
                plan.add(PlanItemKind.SINGLE_OBJECT, key)

        for resolution, url in slots.playlists.items():
            key = self._codec.try_decode(url)
            if not key:
                continue
            folder = containing_folder(key)
            if folder.count("/") < _MIN_PREFIX_DEPTH:
                logger.warning(
                    "Playlist %s of %s %s sits too high in the bucket (%s); deleting the file only",
                    resolution, slots.record_type, slots.parent_id, key,
                )
                plan.add(PlanItemKind.SINGLE_OBJECT, key)
                continue
            plan.add(PlanItemKind.PREFIX, folder)

        for _slot, url in slots.nested:
            key = self._codec.try_decode(url)
            if key:
                plan.add(PlanItemKind.SINGLE_OBJECT, key)

        for template in self._templates:
            plan.add(PlanItemKind.PREFIX, record_folder_prefix(slots.folder, slots.parent_id, template))

        return plan


__all__ = ["MediaReclamationPlanner", "ReclamationPlan", "PlanItem", "PlanItemKind"]
