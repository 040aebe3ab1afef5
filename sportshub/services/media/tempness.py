# sportshub/services/media/tempness.py
from __future__ import annotations

"""Single source of truth for "is this key in the temporary upload area?"."""

from typing import Optional

from sportshub.core.config import settings


def is_temporary(key: Optional[str], *, segment: Optional[str] = None) -> bool:
    """
    True if `key` starts with the reserved ``temp/`` segment or contains
    ``/temp/`` anywhere in its path (legacy producers put it mid-path).

    Matching is per path segment: ``highlights/temporary-event/x.mp4`` is
    permanent.

    >>> is_temporary("temp/foo.mp4")
    True
    >>> is_temporary("highlights/abc/temp/foo.mp4")
    True
    >>> is_temporary("highlights/temporary-event/foo.mp4")
    False
    """
    if not key:
        return False
    marker = (segment or settings.TEMP_SEGMENT).strip("/")
    k = key.lstrip("/")
    return k.startswith(f"{marker}/") or f"/{marker}/" in k


__all__ = ["is_temporary"]
