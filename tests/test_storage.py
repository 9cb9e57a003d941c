from __future__ import annotations

import re

import pytest

from data import storage
from data.service import READ_ONLY_MESSAGE


PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64


def test_object_path_shape():
    path = storage.object_path("ads/", "Banner.PNG")
    assert re.fullmatch(r"ads/\d{13}_[a-z0-9]{7}\.png", path)


def test_object_path_uses_content_type_without_extension():
    assert storage.object_path("blog", "cover", "image/jpeg").startswith("blog/")
    assert re.search(r"\.(jpg|jpe|jpeg)$", storage.object_path("blog", "cover", "image/jpeg"))
    assert "." not in storage.object_path("blog", "cover").split("/")[-1]


def test_object_paths_are_unique():
    assert len({storage.object_path("ads", "a.png") for _ in range(50)}) == 50


@pytest.mark.parametrize(
    "content, content_type, message",
    [
        (PNG, "application/pdf", "Please choose an image file."),
        (PNG, None, "Please choose an image file."),
        (b"", "image/png", "The file is empty."),
        (b"x" * 2048, "image/png", "The image is too large (max 0 MB)."),
    ],
)
def test_validate_upload_rejects(content, content_type, message):
    with pytest.raises(storage.UploadRejected, match=re.escape(message)):
        storage.validate_upload(content, content_type, max_bytes=1024)


def test_upload_returns_public_url(cfg, fake_client):
    res = storage.upload_image(cfg, False, "advertisement-images", "ads", "banner.png", PNG, "image/png")
    assert res.ok
    bucket, path, content, options = fake_client.uploads[0]
    assert bucket == "advertisement-images"
    assert content == PNG
    assert options["content-type"] == "image/png"
    assert options["upsert"] == "false"
    assert res.data == f"https://cdn.test/storage/v1/object/public/advertisement-images/{path}"


def test_upload_failure_is_reported(cfg, fake_client):
    fake_client.upload_error = RuntimeError("Bucket not found")
    res = storage.upload_image(cfg, False, "missing", "ads", "banner.png", PNG, "image/png")
    assert res.ok is False
    assert res.message == "Could not upload image: Bucket not found"


def test_upload_rejected_before_backend(cfg, fake_client):
    res = storage.upload_image(cfg, False, "b", "ads", "notes.txt", b"hello", "text/plain")
    assert res.ok is False
    assert fake_client.uploads == []


def test_upload_in_demo_mode(cfg, fake_client):
    res = storage.upload_image(cfg, True, "b", "ads", "banner.png", PNG, "image/png")
    assert res.message == READ_ONLY_MESSAGE


def test_upload_once_skips_a_file_already_uploaded(cfg, fake_client):
    state = {}

    def _upload():
        return storage.upload_image(cfg, False, "blog-images", "posts", "cover.png", PNG, "image/png")

    first = storage.upload_once(state, "post_cover_new_uploaded", "file-1", _upload)
    again = storage.upload_once(state, "post_cover_new_uploaded", "file-1", _upload)
    other = storage.upload_once(state, "post_cover_new_uploaded", "file-2", _upload)

    assert first.ok and again is None and other.ok
    assert len(fake_client.uploads) == 2
    assert state["post_cover_new_uploaded"] == "file-2"


def test_upload_once_retries_after_failure(cfg, fake_client):
    state = {}
    fake_client.upload_error = RuntimeError("Bucket not found")

    def _upload():
        return storage.upload_image(cfg, False, "blog-images", "posts", "cover.png", PNG, "image/png")

    assert storage.upload_once(state, "k", "file-1", _upload).ok is False
    assert "k" not in state
    fake_client.upload_error = None
    assert storage.upload_once(state, "k", "file-1", _upload).ok is True
