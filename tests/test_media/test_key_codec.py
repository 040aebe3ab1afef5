import pytest

from sportshub.core.exceptions import MalformedURL
from sportshub.services.media.key_codec import KeyCodec
from tests.fixtures.media import BASE_URL, BUCKET, url


def test_decode_canonical_url(codec):
    assert codec.decode(url("highlights/h1/h1.mp4")) == "highlights/h1/h1.mp4"


def test_decode_strips_query_and_fragment(codec):
    u = url("reels/r1/thumbnail.jpg") + "?X-Amz-Signature=abc&v=2#frag"
    assert codec.decode(u) == "reels/r1/thumbnail.jpg"


def test_decode_percent_encoded_key_and_round_trip(codec):
    u = f"{BASE_URL}/coaching-centres/c1/documents/fee%20schedule.pdf"
    assert codec.decode(u) == "coaching-centres/c1/documents/fee schedule.pdf"
    assert codec.encode(codec.decode(u)) == u


@pytest.mark.parametrize(
    "u",
    [
        url("highlights/h1/h1.mp4"),
        url("reels/r1/360p/playlist.m3u8"),
        url("coaching-centres/c1/sports/s1/images/u-9.png"),
    ],
)
def test_round_trip_well_formed(codec, u):
    assert codec.encode(codec.decode(u)) == u


def test_decode_strips_duplicated_vhost_bucket_segment(codec):
    u = f"https://{BUCKET}.s3.amazonaws.com/{BUCKET}/reels/r1/r1.mp4"
    assert codec.decode(u) == "reels/r1/r1.mp4"


def test_decode_path_style_url(codec):
    u = f"https://s3.ap-south-1.amazonaws.com/{BUCKET}/reels/r1/r1.mp4"
    assert codec.decode(u) == "reels/r1/r1.mp4"


def test_decode_other_region_host(codec):
    u = f"https://{BUCKET}.s3.eu-west-1.amazonaws.com/temp/abc.mp4"
    assert codec.decode(u) == "temp/abc.mp4"


@pytest.mark.parametrize("bad", ["", "   ", None, 42, "https://example.com/x.mp4", f"{BASE_URL}/"])
def test_decode_rejects_malformed(codec, bad):
    with pytest.raises(MalformedURL):
        codec.decode(bad)


def test_malformed_url_is_a_value_error(codec):
    with pytest.raises(ValueError):
        codec.decode("not a url")


def test_try_decode_returns_none(codec):
    assert codec.try_decode("https://example.com/a.png") is None
    assert codec.try_decode(None) is None


def test_custom_public_base_url():
    cdn = KeyCodec("https://cdn.example.com/", bucket=BUCKET)
    assert cdn.decode("https://cdn.example.com/reels/r1/thumbnail.jpg") == "reels/r1/thumbnail.jpg"
    assert cdn.encode("reels/r1/thumbnail.jpg") == "https://cdn.example.com/reels/r1/thumbnail.jpg"
    # S3 URLs stored before the CDN switch still decode
    assert cdn.decode(url("reels/r1/r1.mp4")) == "reels/r1/r1.mp4"


def test_encode_rejects_empty_key(codec):
    with pytest.raises(ValueError):
        codec.encode("")
