# sportshub/services/media/slots.py
from __future__ import annotations

"""
Media slot enumeration for media-owning records.

Every purgeable model mixes in `MediaOwnerMixin` and declares *where* its
media lives (class attributes); the mixin turns that into:

- `media_slots()` → a `MediaSlots` snapshot, the only thing the reclamation
  planner looks at;
- `iter_media_refs()` → writable `MediaRef`s, used by record promotion.

Promotion and reclamation therefore never branch on record type.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple
from uuid import uuid4


@dataclass(frozen=True)
class MediaSlots:
    """Type-agnostic snapshot of one record's media locators."""

    record_type: str
    folder: str
    parent_id: str
    singles: Mapping[str, Optional[str]] = field(default_factory=dict)
    playlists: Mapping[str, Optional[str]] = field(default_factory=dict)
    nested: List[Tuple[str, Optional[str]]] = field(default_factory=list)


@dataclass
class MediaRef:
    """A writable pointer to one URL inside a record (attribute or JSON item)."""

    slot: str
    container: Any
    field: str

    @property
    def url(self) -> Optional[str]:
        if isinstance(self.container, dict):
            return self.container.get(self.field)
        return getattr(self.container, self.field, None)

    def assign(self, url: Optional[str]) -> None:
        if isinstance(self.container, dict):
            self.container[self.field] = url
        else:
            setattr(self.container, self.field, url)


class MediaOwnerMixin:
    """
    Declarative media layout for ORM models.

    Subclasses set:
      RECORD_TYPE            short type name used in logs and summaries
      MEDIA_FOLDER           first key segment of the record's permanent media
      SINGLE_MEDIA_FIELDS    slot name → attribute holding one URL
      PLAYLIST_FIELD         attribute holding {resolution: playlist URL}, or None
      NESTED_MEDIA_FIELDS    attributes holding JSON lists of media items

    and override `_nested_refs(field_name, value)` when NESTED_MEDIA_FIELDS is set.
    """

    RECORD_TYPE: ClassVar[str] = ""
    MEDIA_FOLDER: ClassVar[str] = ""
    SINGLE_MEDIA_FIELDS: ClassVar[Dict[str, str]] = {}
    PLAYLIST_FIELD: ClassVar[Optional[str]] = None
    NESTED_MEDIA_FIELDS: ClassVar[Tuple[str, ...]] = ()

    @property
    def external_id(self) -> str:
        return str(getattr(self, "id"))

    # ── reclamation view ────────────────────────────────────
    def media_slots(self) -> MediaSlots:
        singles = {slot: getattr(self, attr, None) for slot, attr in self.SINGLE_MEDIA_FIELDS.items()}
        playlists: Dict[str, Optional[str]] = {}
        if self.PLAYLIST_FIELD:
            playlists = dict(getattr(self, self.PLAYLIST_FIELD, None) or {})
        nested: List[Tuple[str, Optional[str]]] = []
        for attr in self.NESTED_MEDIA_FIELDS:
            for ref in self._nested_refs(attr, getattr(self, attr, None) or []):
                nested.append((ref.slot, ref.url))
        return MediaSlots(
            record_type=self.RECORD_TYPE,
            folder=self.MEDIA_FOLDER,
            parent_id=self.external_id,
            singles=singles,
            playlists=playlists,
            nested=nested,
        )

    # ── promotion view ──────────────────────────────────────
    def iter_media_refs(self) -> Iterator[MediaRef]:
        """
        Yield writable refs for every promotable URL.

        Nested JSON lists are deep-copied and re-assigned to the attribute
        first, so in-place edits through the refs are seen by change tracking.
        """
        for slot, attr in self.SINGLE_MEDIA_FIELDS.items():
            yield MediaRef(slot=slot, container=self, field=attr)
        for attr in self.NESTED_MEDIA_FIELDS:
            value = copy.deepcopy(getattr(self, attr, None) or [])
            setattr(self, attr, value)
            self._assign_item_ids(attr, value)
            yield from self._nested_refs(attr, value)

    def _nested_refs(self, field_name: str, value: Any) -> Iterator[MediaRef]:
        return iter(())

    def _assign_item_ids(self, field_name: str, value: Any) -> None:
        """Give every nested item a `unique_id` so its slot never depends on list position."""


def item_slot_name(item: Mapping[str, Any], index: int) -> str:
    """
    Per-item file stem: the item's `unique_id`.

    The positional fallback only names legacy items for reclamation; promotion
    assigns ids first (`ensure_item_id`), so new uploads never land on it.
    """
    uid = str(item.get("unique_id") or "").strip().strip("/")
    return uid or f"item-{index}"


def ensure_item_id(item: Dict[str, Any]) -> str:
    uid = str(item.get("unique_id") or "").strip().strip("/")
    if not uid:
        uid = uuid4().hex
        item["unique_id"] = uid
    return uid


__all__ = ["MediaSlots", "MediaRef", "MediaOwnerMixin", "item_slot_name", "ensure_item_id"]
