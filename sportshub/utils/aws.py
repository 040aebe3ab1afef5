# sportshub/utils/aws.py
from __future__ import annotations

"""
🧊 SportsHub • S3 Utilities
===========================

Thin, hardened S3 wrapper used by the media lifecycle:
- Promotion (server-side COPY temp → permanent, then DELETE)
- Reclamation (paginated LIST under a prefix + quiet batch DELETE)
- Single-object HEAD/DELETE for named media slots
- Small server-side writes (PUT)

🎯 Goals
--------
- Explicit timeouts + bounded retries at the botocore layer
- Key normalization (no leading slash, no `..`) for keys we build; keys of
  existing objects (listed or decoded from stored URLs) are passed verbatim
- Explicit override of credentials when configured
- A documented **disabled** variant instead of a nullable client
- Zero secret leakage in logs

🔗 Contract
-----------
- Classes: `S3Client`, `DisabledS3Client`, `S3StorageError`
- Methods: `put_bytes`, `copy`, `delete`, `delete_many`, `list_page`,
           `head`, `exists`, `object_url`
- Attribute: `enabled` (False only on the disabled variant)
- Process default: `get_s3_client()` (lazy; never raises), `set_s3_client()`

Implementation notes
--------------------
- Methods are **blocking** (boto3). Async callers wrap them with
  `asyncio.to_thread`.
- Validation focuses on *inputs we control* (keys); S3-specific errors bubble
  as `S3StorageError`.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import re
import threading

import boto3
import botocore.exceptions
from botocore.config import Config as BotoConfig

from sportshub.core.config import settings
from sportshub.core.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# 🧱 Exceptions
# ─────────────────────────────────────────────────────────────────────────────

class S3StorageError(RuntimeError):
    """Raised when a storage operation fails (network, auth, policy, etc.)."""


# ─────────────────────────────────────────────────────────────────────────────
# 🧰 Key validation
# ─────────────────────────────────────────────────────────────────────────────

# Keep keys strict: readable + safe across tools, CDNs, and logs.
_KEY_ALLOWED_RE = re.compile(r"[A-Za-z0-9._\-/+=@() ]+")

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _normalize_key(key: str) -> str:
    """
    Normalize and validate S3 object keys.

    Steps
    -----
    1) Coerce to str, strip whitespace
    2) Remove leading '/'
    3) Collapse '//' runs
    4) Reject path traversal ('..') and disallowed characters

    Raises
    ------
    S3StorageError
        If key is empty or contains unsafe characters.
    """
    k = str(key or "").strip().lstrip("/")
    k = re.sub(r"/{2,}", "/", k)
    if not k:
        raise S3StorageError("Invalid storage key: empty")
    if ".." in k:
        raise S3StorageError("Invalid storage key: path traversal detected")
    if not _KEY_ALLOWED_RE.fullmatch(k):
        raise S3StorageError("Invalid storage key: contains forbidden characters")
    return k


def _existing_key(key: str) -> str:
    """
    Keys that name objects already in the bucket (listed, decoded from stored
    URLs) are sent verbatim: S3 allows any UTF-8 and `//` runs are distinct keys.
    Only an empty key is refused.
    """
    k = str(key or "")
    if not k.strip():
        raise S3StorageError("Invalid storage key: empty")
    return k


def _secret_value(v: Any) -> Optional[str]:
    """Return the underlying secret string without raising if not SecretStr."""
    if v is None:
        return None
    return v.get_secret_value() if hasattr(v, "get_secret_value") else str(v)


def _error_code(exc: BaseException) -> Optional[str]:
    if isinstance(exc, botocore.exceptions.ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


# ─────────────────────────────────────────────────────────────────────────────
# 📄 Listing page
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ListPage:
    """One page of `list_objects_v2` results."""

    keys: List[str] = field(default_factory=list)
    next_token: Optional[str] = None


# ─────────────────────────────────────────────────────────────────────────────
# 📦 S3 Client
# ─────────────────────────────────────────────────────────────────────────────

class S3Client:
    """
    High-level S3 wrapper with safe defaults.

    Parameters
    ----------
    bucket : str | None
        Bucket for every operation. Defaults to `settings.AWS_BUCKET_NAME`.
    region_name : str | None
        Defaults to `settings.AWS_REGION`.
    endpoint_url : str | None
        Custom S3-compatible endpoint (LocalStack/MinIO). Defaults to
        `settings.AWS_S3_ENDPOINT_URL`.
    client : Any | None
        Pre-built boto3 S3 client (tests inject an in-memory fake here).

    Notes
    -----
    * Credentials: when `AWS_ACCESS_KEY_ID` + `AWS_SECRET_ACCESS_KEY` are set
      they are passed explicitly; otherwise the standard AWS chain applies.
    * Retries/Timeouts: bounded retry policy (5 attempts) and short connect
      timeout help fail fast.
    """

    enabled = True

    def __init__(
        self,
        bucket: Optional[str] = None,
        *,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket or settings.AWS_BUCKET_NAME
        if not self.bucket:
            raise S3StorageError("AWS_BUCKET_NAME not configured")

        self.region = region_name or settings.AWS_REGION
        endpoint_cfg = endpoint_url or settings.AWS_S3_ENDPOINT_URL

        if client is not None:
            self.client = client
        else:
            cfg = BotoConfig(
                signature_version="s3v4",
                retries={"max_attempts": 5, "mode": "standard"},
                connect_timeout=3,
                read_timeout=10,
                s3={"addressing_style": "virtual"},
            )
            client_kwargs: Dict[str, Any] = {"config": cfg, "region_name": self.region}
            if endpoint_cfg:
                client_kwargs["endpoint_url"] = endpoint_cfg

            ak = settings.AWS_ACCESS_KEY_ID
            sk = _secret_value(settings.AWS_SECRET_ACCESS_KEY)
            st = _secret_value(settings.AWS_SESSION_TOKEN)
            if ak and sk:
                client_kwargs["aws_access_key_id"] = ak
                client_kwargs["aws_secret_access_key"] = sk
                if st:
                    client_kwargs["aws_session_token"] = st

            try:
                self.client = boto3.client("s3", **client_kwargs)
            except Exception as e:  # pragma: no cover
                raise S3StorageError(f"Failed to create S3 client: {e}") from e

        self._repr = f"S3Client(bucket={self.bucket}, region={self.region}, endpoint={'yes' if endpoint_cfg else 'no'})"

    # ────────────────────────────────────────────────────────────────────────
    # ✍️ Writes
    # ────────────────────────────────────────────────────────────────────────

    def put_bytes(self, key: str, data: bytes, *, content_type: str) -> None:
        """
        Upload a small payload from the server.

        Raises
        ------
        S3StorageError
            On upload failure or invalid key.
        """
        k = _normalize_key(key)
        try:
            self.client.put_object(Bucket=self.bucket, Key=k, Body=data, ContentType=content_type)
        except Exception as e:
            raise S3StorageError(f"Failed to upload object: {e}") from e

    def copy(self, source_key: str, dest_key: str) -> None:
        """
        Server-side COPY within the bucket (no bytes through this process).

        Raises
        ------
        S3StorageError
            When the source is missing or the request fails.
        """
        src = _existing_key(source_key)
        dst = _normalize_key(dest_key)
        try:
            self.client.copy_object(
                Bucket=self.bucket,
                Key=dst,
                CopySource={"Bucket": self.bucket, "Key": src},
            )
        except Exception as e:
            raise S3StorageError(f"Failed to copy {src} -> {dst}: {e}") from e

    # ────────────────────────────────────────────────────────────────────────
    # 🗑️ Deletes
    # ────────────────────────────────────────────────────────────────────────

    def delete(self, key: str) -> None:
        """
        Delete one object. Missing keys are not an error (S3 deletes are idempotent).

        Raises
        ------
        S3StorageError
            On non-ignorable failures.
        """
        k = _existing_key(key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=k)
        except Exception as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return
            raise S3StorageError(f"Failed to delete {k}: {e}") from e

    def delete_many(self, keys: List[str]) -> List[str]:
        """
        Quiet batch delete (≤ 1000 keys). Returns the keys S3 reported as failed.

        Raises
        ------
        S3StorageError
            When the whole request fails.
        """
        if not keys:
            return []
        objects = [{"Key": _existing_key(k)} for k in keys]
        try:
            resp = self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": objects, "Quiet": True},
            )
        except Exception as e:
            raise S3StorageError(f"Batch delete failed ({len(objects)} keys): {e}") from e
        errors = (resp or {}).get("Errors") or []
        for err in errors:
            logger.warning("delete_objects reported failure: key=%s code=%s", err.get("Key"), err.get("Code"))
        return [str(err.get("Key")) for err in errors]

    # ────────────────────────────────────────────────────────────────────────
    # 🔎 Listing & metadata
    # ────────────────────────────────────────────────────────────────────────

    def list_page(self, prefix: str, *, continuation_token: Optional[str] = None, max_keys: int = 1000) -> ListPage:
        """
        List one page of keys under `prefix`.

        Returns
        -------
        ListPage
            Keys on this page and the cursor for the next one (None when done).
        """
        params: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "MaxKeys": int(max_keys),
        }
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        try:
            resp = self.client.list_objects_v2(**params)
        except Exception as e:
            raise S3StorageError(f"Failed to list prefix {prefix}: {e}") from e
        keys = [obj["Key"] for obj in (resp.get("Contents") or []) if obj.get("Key")]
        token = resp.get("NextContinuationToken") if resp.get("IsTruncated") else None
        return ListPage(keys=keys, next_token=token)

    def head(self, key: str) -> Optional[Dict[str, Any]]:
        """
        HEAD the object and return its metadata, or None if it does not exist.

        Raises
        ------
        S3StorageError
            For failures other than "not found".
        """
        k = _existing_key(key)
        try:
            return dict(self.client.head_object(Bucket=self.bucket, Key=k) or {})
        except Exception as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return None
            raise S3StorageError(f"Failed to HEAD {k}: {e}") from e

    def exists(self, key: str) -> bool:
        """Boolean existence check using `HEAD`."""
        return self.head(key) is not None

    def object_url(self, key: str) -> str:
        """Direct virtual-hosted HTTPS URL (non-signed)."""
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{_normalize_key(key)}"

    def __repr__(self) -> str:  # pragma: no cover
        return self._repr


# ─────────────────────────────────────────────────────────────────────────────
# 🚫 Disabled variant
# ─────────────────────────────────────────────────────────────────────────────

class DisabledS3Client:
    """
    Stand-in used when the store is not configured.

    - Mutating and listing calls raise `StoreUnavailable` so uploads fail loudly.
    - Callers that must degrade (reclamation) check `enabled` first and report
      neutral results instead.
    """

    enabled = False

    def __init__(self, reason: str = "AWS bucket/credentials not configured") -> None:
        self.bucket = settings.AWS_BUCKET_NAME or ""
        self.reason = reason

    def put_bytes(self, key: str, data: bytes, *, content_type: str) -> None:
        raise StoreUnavailable("upload object")

    def copy(self, source_key: str, dest_key: str) -> None:
        raise StoreUnavailable("copy object")

    def delete(self, key: str) -> None:
        raise StoreUnavailable("delete object")

    def delete_many(self, keys: List[str]) -> List[str]:
        raise StoreUnavailable("batch delete objects")

    def list_page(self, prefix: str, *, continuation_token: Optional[str] = None, max_keys: int = 1000) -> ListPage:
        raise StoreUnavailable("list objects")

    def head(self, key: str) -> Optional[Dict[str, Any]]:
        raise StoreUnavailable("head object")

    def exists(self, key: str) -> bool:
        raise StoreUnavailable("head object")

    def __repr__(self) -> str:  # pragma: no cover
        return f"DisabledS3Client(reason={self.reason!r})"


# ─────────────────────────────────────────────────────────────────────────────
# 🏭 Process default (lazy)
# ─────────────────────────────────────────────────────────────────────────────

_default_client: Optional[Any] = None
_default_lock = threading.Lock()


def get_s3_client() -> Any:
    """
    Return the process-wide store client, building it on first use.

    Never raises: without bucket/credentials (or if construction fails) the
    disabled variant is returned and a warning is logged once.
    """
    global _default_client
    if _default_client is not None:
        return _default_client
    with _default_lock:
        if _default_client is None:
            if not settings.store_configured:
                logger.warning("AWS S3 credentials not configured. File uploads will be disabled.")
                _default_client = DisabledS3Client()
            else:
                try:
                    _default_client = S3Client()
                except S3StorageError as e:
                    logger.warning("S3 client could not be created (%s). Store disabled.", e)
                    _default_client = DisabledS3Client(reason=str(e))
    return _default_client


def set_s3_client(client: Optional[Any]) -> None:
    """Install (or with None, reset) the process-wide store client."""
    global _default_client
    with _default_lock:
        _default_client = client


__all__ = [
    "S3Client",
    "DisabledS3Client",
    "S3StorageError",
    "ListPage",
    "get_s3_client",
    "set_s3_client",
]
