# tests/conftest.py
"""
Global test bootstrap
- Pins storage settings BEFORE `sportshub` is imported (settings is a singleton)
- Exposes in-memory S3 / Redis fakes and pre-wired lifecycle services
- Keeps the process-wide S3 client reset between tests
"""

from __future__ import annotations

import os

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set before importing sportshub)
# ──────────────────────────────────────────────────────────────────────────────
os.environ["AWS_BUCKET_NAME"] = "test-bucket"
os.environ["AWS_REGION"] = "ap-south-1"
os.environ["STORE_PUBLIC_BASE_URL"] = ""
os.environ["STORE_RETRY_BASE_DELAY"] = "0"
os.environ["STORE_RETRY_MAX_DELAY"] = "0"
os.environ["MEDIA_FOLDER_NAME_TEMPLATES"] = "{id}"
for _var in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN", "AWS_S3_ENDPOINT_URL"):
    os.environ.pop(_var, None)

import pytest

from sportshub.core.redis_client import RedisClient
from sportshub.repositories.purgeable import MemoryPurgeableRepository
from sportshub.services.media.key_codec import KeyCodec
from sportshub.services.media.planner import MediaReclamationPlanner
from sportshub.services.media.promoter import ObjectPromoter
from sportshub.services.media.reclaimer import PrefixReclaimer
from sportshub.utils.aws import S3Client, set_s3_client
from tests.fixtures.media import BASE_URL, BUCKET
from tests.fixtures.mocks.redis import MockRedisClient
from tests.fixtures.mocks.s3 import InMemoryS3


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_default_s3_client():
    set_s3_client(None)
    yield
    set_s3_client(None)


# ──────────────────────────────────────────────────────────────────────────────
# 📦 Store
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def boto() -> InMemoryS3:
    return InMemoryS3(BUCKET)


@pytest.fixture()
def s3(boto) -> S3Client:
    return S3Client(BUCKET, region_name="ap-south-1", client=boto)


@pytest.fixture()
def codec() -> KeyCodec:
    return KeyCodec(BASE_URL, bucket=BUCKET)


@pytest.fixture()
def promoter(s3, codec) -> ObjectPromoter:
    return ObjectPromoter(s3, codec=codec, retry_attempts=1)


@pytest.fixture()
def reclaimer(s3) -> PrefixReclaimer:
    return PrefixReclaimer(s3, retry_attempts=1)


@pytest.fixture()
def planner(codec) -> MediaReclamationPlanner:
    return MediaReclamationPlanner(codec, folder_name_templates=["{id}"])


# ──────────────────────────────────────────────────────────────────────────────
# 🗄️ Records / queue
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def repo() -> MemoryPurgeableRepository:
    return MemoryPurgeableRepository()


@pytest.fixture()
def redis_mock() -> MockRedisClient:
    return MockRedisClient()


@pytest.fixture()
def redis_client(redis_mock) -> RedisClient:
    return RedisClient("redis://unused:6379/0", client=redis_mock)
