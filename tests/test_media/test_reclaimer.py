import pytest

from sportshub.core.exceptions import PartialDeleteFailure
from sportshub.services.media.reclaimer import PrefixReclaimer
from sportshub.utils.aws import DisabledS3Client, S3StorageError
from tests.fixtures.mocks.s3 import client_error


def _seed(boto, prefix, n):
    for i in range(n):
        boto.put(f"{prefix}seg{i:03d}.ts")


@pytest.mark.anyio
async def test_prefix_spanning_several_pages_is_fully_deleted(boto, s3):
    _seed(boto, "reels/r1/", 5)
    boto.put("reels/r10/keep.mp4")
    reclaimer = PrefixReclaimer(s3, page_size=2, retry_attempts=1)

    deleted = await reclaimer.delete_by_prefix("reels/r1/")

    assert deleted == 5
    assert boto.keys_under("reels/r1/") == []
    assert "reels/r10/keep.mp4" in boto.objects
    assert boto.calls.count("list_objects_v2") == 3


@pytest.mark.anyio
async def test_prefix_is_normalized_to_folder(boto, reclaimer):
    boto.put("reels/r1/a.ts")
    boto.put("reels/r1-extra/b.ts")

    assert await reclaimer.delete_by_prefix("/reels/r1") == 1
    assert "reels/r1-extra/b.ts" in boto.objects


@pytest.mark.anyio
async def test_empty_prefix_is_refused(reclaimer):
    with pytest.raises(ValueError):
        await reclaimer.delete_by_prefix("")


@pytest.mark.anyio
async def test_empty_folder_counts_zero(reclaimer):
    assert await reclaimer.delete_by_prefix("reels/nothing/") == 0


@pytest.mark.anyio
async def test_partial_failure_reports_deleted_and_failed(boto, s3):
    _seed(boto, "highlights/h1/hls/", 5)
    boto.fail_batch_keys.add("highlights/h1/hls/seg001.ts")
    reclaimer = PrefixReclaimer(s3, page_size=2, retry_attempts=1)

    with pytest.raises(PartialDeleteFailure) as exc:
        await reclaimer.delete_by_prefix("highlights/h1/hls/")

    assert exc.value.deleted == 4
    assert exc.value.failed_keys == ["highlights/h1/hls/seg001.ts"]
    assert boto.keys_under("highlights/h1/hls/") == ["highlights/h1/hls/seg001.ts"]


@pytest.mark.anyio
async def test_list_failure_propagates(boto, reclaimer):
    boto.put("reels/r1/a.ts")
    boto.fail_list = client_error("AccessDenied", "ListObjectsV2")

    with pytest.raises(S3StorageError):
        await reclaimer.delete_by_prefix("reels/r1/")


@pytest.mark.anyio
async def test_disabled_store_reports_zero():
    reclaimer = PrefixReclaimer(DisabledS3Client())
    assert reclaimer.enabled is False
    assert await reclaimer.delete_by_prefix("reels/r1/") == 0
    assert await reclaimer.delete_object("reels/r1/r1.mp4") == 0


@pytest.mark.anyio
async def test_delete_object_counts_only_existing(boto, reclaimer):
    boto.put("reels/r1/thumbnail.jpg")

    assert await reclaimer.delete_object("reels/r1/thumbnail.jpg") == 1
    assert await reclaimer.delete_object("reels/r1/thumbnail.jpg") == 0


@pytest.mark.anyio
async def test_listed_keys_are_deleted_verbatim(boto, s3):
    odd = ["reels/r1/a.ts", "reels/r1/my clip, v2.mp4", "reels/r1/été.jpg", "reels/r1//double.ts", "reels/r1/z.ts"]
    for k in odd:
        boto.put(k)
    boto.put("reels/r1/double.ts")
    reclaimer = PrefixReclaimer(s3, page_size=2, retry_attempts=1)

    deleted = await reclaimer.delete_by_prefix("reels/r1/")

    assert deleted == 6
    assert boto.keys_under("reels/r1") == []


@pytest.mark.anyio
async def test_single_object_with_unicode_key_is_deleted(boto, reclaimer):
    boto.put("highlights/h1/café, final.mp4")

    assert await reclaimer.delete_object("highlights/h1/café, final.mp4") == 1
    assert boto.objects == {}
