"""
Tests for local media storage.
"""

import pytest

from ticketing.core.errors import ValidationError
from ticketing.services.media_storage import (
    EVENT_IMAGES,
    MAX_MEDIA_BYTES,
    RECEIPTS,
    SPONSOR_LOGOS,
    LocalMediaStorage,
    read_upload,
)

from helpers import PNG_BYTES

BASE_URL = "https://media.example.com/uploads"


@pytest.mark.asyncio
async def test_save_writes_file_and_returns_url(tmp_path):
    storage = LocalMediaStorage(str(tmp_path), BASE_URL + "/")

    url = await storage.save(RECEIPTS, "receipt.PNG", "image/png", PNG_BYTES)

    assert url.startswith(f"{BASE_URL}/receipts/")
    assert url.endswith(".png")
    name = url.rsplit("/", 1)[1]
    assert (tmp_path / "receipts" / name).read_bytes() == PNG_BYTES


@pytest.mark.asyncio
async def test_save_keeps_folders_apart(tmp_path):
    storage = LocalMediaStorage(str(tmp_path), BASE_URL)

    image = await storage.save(EVENT_IMAGES, "poster.jpg", "image/jpeg", b"\xff\xd8\xff")
    logo = await storage.save(SPONSOR_LOGOS, "logo.svg", "image/svg+xml", b"<svg/>")

    assert image.startswith(f"{BASE_URL}/events/")
    assert logo.startswith(f"{BASE_URL}/sponsors/")
    assert logo.endswith(".svg")


@pytest.mark.asyncio
async def test_save_uses_content_type_when_extension_unknown(tmp_path):
    storage = LocalMediaStorage(str(tmp_path), BASE_URL)
    url = await storage.save(RECEIPTS, "receipt", "image/jpeg", b"\xff\xd8\xff")
    assert url.rsplit(".", 1)[1] in {"jpg", "jpeg", "jpe"}


@pytest.mark.asyncio
async def test_save_names_are_unique(tmp_path):
    storage = LocalMediaStorage(str(tmp_path), BASE_URL)
    first = await storage.save(RECEIPTS, "r.png", "image/png", PNG_BYTES)
    second = await storage.save(RECEIPTS, "r.png", "image/png", PNG_BYTES)
    assert first != second


@pytest.mark.asyncio
@pytest.mark.parametrize("folder,content_type,data,message", [
    (RECEIPTS, "image/png", b"", "Receipt image is required"),
    (RECEIPTS, "application/pdf", PNG_BYTES, "Receipt image must be an image file"),
    (RECEIPTS, "", PNG_BYTES, "Receipt image must be an image file"),
    (EVENT_IMAGES, "text/html", b"<html>", "Event image must be an image file"),
    (SPONSOR_LOGOS, "image/png", b"\x00" * (MAX_MEDIA_BYTES + 1), "Sponsor logo is too large"),
])
async def test_save_rejects_bad_upload(tmp_path, folder, content_type, data, message):
    storage = LocalMediaStorage(str(tmp_path / "media"), BASE_URL)

    with pytest.raises(ValidationError, match=message):
        await storage.save(folder, "r.png", content_type, data)

    assert not (tmp_path / "media").exists()


@pytest.mark.asyncio
async def test_delete_removes_stored_file(tmp_path):
    storage = LocalMediaStorage(str(tmp_path), BASE_URL)
    url = await storage.save(RECEIPTS, "r.png", "image/png", PNG_BYTES)

    await storage.delete(url)
    assert list((tmp_path / "receipts").iterdir()) == []

    # Deleting again is a no-op
    await storage.delete(url)


@pytest.mark.asyncio
@pytest.mark.parametrize("ref", [
    "",
    "https://cdn.example.com/logo.png",
    f"{BASE_URL}/../outside.png",
    f"{BASE_URL}/receipts/../../outside.png",
])
async def test_delete_ignores_foreign_refs(tmp_path, ref):
    media = tmp_path / "media"
    outside = tmp_path / "outside.png"
    outside.write_bytes(PNG_BYTES)
    storage = LocalMediaStorage(str(media), BASE_URL)

    await storage.delete(ref)

    assert outside.exists()


class FakeUpload:
    def __init__(self, data: bytes):
        self.data = data
        self.requested = None

    async def read(self, size: int = -1) -> bytes:
        self.requested = size
        return self.data if size < 0 else self.data[:size]


@pytest.mark.asyncio
async def test_read_upload_is_capped():
    """Never more than one byte past the limit is read into memory."""
    upload = FakeUpload(b"\x00" * (MAX_MEDIA_BYTES + 4096))

    data = await read_upload(upload)

    assert upload.requested == MAX_MEDIA_BYTES + 1
    assert len(data) == MAX_MEDIA_BYTES + 1
