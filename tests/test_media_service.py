import hashlib

import pytest
import requests

from conftest import StubResponse, StubSession
from inkwell.errors import UpstreamError
from inkwell.services.media_service import MediaAsset, MediaService


@pytest.fixture
def session():
    return StubSession()


@pytest.fixture
def media(session):
    return MediaService("demo-cloud", "key-1", "s3cret", timeout=5, max_workers=2, session=session)


def test_sign_sorts_params_and_appends_secret(media):
    expected = hashlib.sha1(b"folder=articles/images&timestamp=1700000000s3cret").hexdigest()
    assert media.sign({"timestamp": "1700000000", "folder": "articles/images"}) == expected


def test_upload_posts_signed_form(media, session):
    session.queue(StubResponse(200, {"secure_url": "https://res.cloudinary.com/x.png", "public_id": "articles/images/x"}))

    asset = media.upload(b"png-bytes", "articles/images", "x.png")

    assert asset == MediaAsset(url="https://res.cloudinary.com/x.png", asset_ref="articles/images/x")
    call = session.post_calls[0]
    assert call["url"] == "https://api.cloudinary.com/v1_1/demo-cloud/auto/upload"
    assert call["timeout"] == 5
    assert call["files"] == {"file": ("x.png", b"png-bytes")}
    form = call["data"]
    assert form["api_key"] == "key-1"
    assert form["folder"] == "articles/images"
    assert form["signature"] == media.sign({"folder": "articles/images", "timestamp": form["timestamp"]})


def test_upload_rejected_by_host(media, session):
    session.queue(StubResponse(401, {"error": {"message": "bad signature"}}, text="bad signature"))

    with pytest.raises(UpstreamError) as exc:
        media.upload(b"data", "articles/avatars")

    assert exc.value.code == "MEDIA_UPLOAD_FAILED"
    assert exc.value.details["status_code"] == 401
    assert exc.value.retryable


def test_upload_timeout(media, session):
    session.error = requests.exceptions.Timeout("slow")

    with pytest.raises(UpstreamError) as exc:
        media.upload(b"data", "articles/avatars")

    assert exc.value.code == "MEDIA_TIMEOUT"


def test_upload_with_malformed_body(media, session):
    session.queue(StubResponse(200, {"unexpected": True}))

    with pytest.raises(UpstreamError):
        media.upload(b"data", "articles/avatars")


def test_upload_without_credentials():
    media = MediaService(None, None, None, session=StubSession())

    assert not media.configured
    assert media.health() == {"status": "not_configured"}
    with pytest.raises(UpstreamError) as exc:
        media.upload(b"data", "articles/avatars")
    assert exc.value.code == "MEDIA_UNAVAILABLE"


def test_delete_is_best_effort(media, session):
    session.queue(StubResponse(200, {"result": "ok"}))
    assert media.delete("articles/images/x") is True
    assert session.post_calls[0]["url"].endswith("/demo-cloud/image/destroy")
    assert session.post_calls[0]["data"]["public_id"] == "articles/images/x"

    session.queue(StubResponse(200, {"result": "not found"}))
    assert media.delete("articles/images/missing") is False

    session.error = requests.exceptions.ConnectionError("down")
    assert media.delete("articles/images/y") is False

    assert media.delete(None) is False


def test_upload_many_preserves_order(session):
    media = MediaService("demo-cloud", "key-1", "s3cret", max_workers=1, session=session)
    session.responses = [
        StubResponse(200, {"secure_url": "https://cdn/a.png", "public_id": "a"}),
        StubResponse(200, {"secure_url": "https://cdn/b.png", "public_id": "b"}),
    ]

    assets = media.upload_many([(b"1", "articles/avatars", "a.png"), (b"2", "articles/images", "b.png")])

    assert [a.asset_ref for a in assets] == ["a", "b"]


class FlakyMedia(MediaService):
    def __init__(self):
        super().__init__("demo", "key", "secret", session=StubSession())
        self.deleted = []

    def upload(self, data, folder, filename=None):
        if folder == "broken":
            raise UpstreamError("Image upload failed", code="MEDIA_UPLOAD_FAILED")
        return MediaAsset(url=f"https://cdn/{folder}.png", asset_ref=folder)

    def delete(self, asset_ref):
        self.deleted.append(asset_ref)
        return True


def test_upload_many_rolls_back_on_failure():
    media = FlakyMedia()

    with pytest.raises(UpstreamError):
        media.upload_many([(b"1", "ok-one", None), (b"2", "broken", None), (b"3", "ok-two", None)])

    assert sorted(media.deleted) == ["ok-one", "ok-two"]


def test_delete_many_skips_empty_refs():
    media = FlakyMedia()

    assert media.delete_many(["a", None, "", "b"]) == [True, True]
    assert sorted(media.deleted) == ["a", "b"]
