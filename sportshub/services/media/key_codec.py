# sportshub/services/media/key_codec.py
from __future__ import annotations

"""
Media URL ⇄ object key codec.

Public media URLs have the shape ``https://{bucket}.{store-host-suffix}/{key}``.
`decode` is tolerant of what producers actually stored over time (query
strings, percent-encoding, path-style URLs with the bucket repeated as the
first path segment); `encode` always emits the canonical virtual-hosted form.
"""

import logging
import re
from typing import Optional
from urllib.parse import quote, unquote

from sportshub.core.config import settings
from sportshub.core.exceptions import MalformedURL

logger = logging.getLogger(__name__)

# Characters left unescaped in keys when composing URLs
_KEY_SAFE_CHARS = "/-_.~!$&'()*+,;=:@"

_VHOST_BUCKET_RE = re.compile(r"^https?://([^./]+)\.s3[.-]", re.IGNORECASE)
_PATH_STYLE_RE = re.compile(r"^https?://s3[.-]", re.IGNORECASE)


class KeyCodec:
    """Convert between public media URLs and canonical object keys.

    Parameters
    ----------
    base_url : str | None
        Canonical base used by `encode` (no trailing slash). Defaults to
        `settings.store_base_url`.
    host_marker : str | None
        Substring that separates host from key (defaults to
        `settings.STORE_HOST_MARKER`, i.e. ``.amazonaws.com/``).
    bucket : str | None
        Configured bucket, used to strip path-style bucket segments.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        host_marker: Optional[str] = None,
        bucket: Optional[str] = None,
    ) -> None:
        self.base_url = (base_url or settings.store_base_url).rstrip("/")
        marker = host_marker or settings.STORE_HOST_MARKER
        self.host_marker = marker if marker.endswith("/") else f"{marker}/"
        self.bucket = bucket if bucket is not None else (settings.AWS_BUCKET_NAME or "")

    def decode(self, url: str) -> str:
        """
        Map a media URL to its object key.

        Raises
        ------
        MalformedURL
            When `url` is not a string, has no store host marker, or has an
            empty key.
        """
        if not isinstance(url, str) or not url.strip():
            raise MalformedURL(url, "empty")

        bare = url.strip().split("#", 1)[0].split("?", 1)[0]

        # The canonical base may be a CDN host that lacks the S3 marker
        canonical = f"{self.base_url}/"
        if bare.startswith(canonical):
            raw_key = bare[len(canonical):]
        elif self.host_marker in bare:
            raw_key = bare.split(self.host_marker, 1)[1]
        else:
            raise MalformedURL(url)

        key = unquote(raw_key).lstrip("/")

        bucket_match = _VHOST_BUCKET_RE.match(bare)
        if bucket_match and key.startswith(bucket_match.group(1) + "/"):
            key = key[len(bucket_match.group(1)) + 1:]
        elif self.bucket and _PATH_STYLE_RE.match(bare) and key.startswith(self.bucket + "/"):
            key = key[len(self.bucket) + 1:]

        if not key:
            raise MalformedURL(url, "empty key")
        return key

    def try_decode(self, url: Optional[str]) -> Optional[str]:
        """`decode` that logs and returns None for empty or malformed URLs."""
        if not url:
            return None
        try:
            return self.decode(url)
        except MalformedURL as e:
            logger.warning("Skipping media URL: %s", e)
            return None

    def encode(self, key: str) -> str:
        """Compose the canonical public URL for `key`."""
        k = str(key or "").lstrip("/")
        if not k:
            raise ValueError("Cannot encode an empty object key")
        return f"{self.base_url}/{quote(k, safe=_KEY_SAFE_CHARS)}"


__all__ = ["KeyCodec"]
