"""
Local-disk media storage.

Uploaded images are written under MEDIA_UPLOAD_DIR/<folder>/ with a random
name and exposed as MEDIA_BASE_URL/<folder>/<name>. Serving the files is left
to the web server in front of the API.

Uploads are read with a hard cap: at most MAX_MEDIA_BYTES + 1 bytes are ever
held in memory, so an oversized file is rejected without buffering it whole.
"""

import mimetypes
import uuid
from pathlib import Path

import anyio

from ticketing.core.config import Settings
from ticketing.core.errors import UpstreamUnavailableError, ValidationError
from ticketing.core.logging import get_logger
from ticketing.services.interfaces.media_storage import MediaStorage

logger = get_logger(__name__)

RECEIPTS = "receipts"
EVENT_IMAGES = "events"
SPONSOR_LOGOS = "sponsors"

FOLDER_LABELS = {
    RECEIPTS: "Receipt image",
    EVENT_IMAGES: "Event image",
    SPONSOR_LOGOS: "Sponsor logo",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".heic", ".svg"}
MAX_MEDIA_BYTES = 10 * 1024 * 1024


async def read_upload(upload) -> bytes:
    """Read an UploadFile, stopping one byte past the size limit."""
    return await upload.read(MAX_MEDIA_BYTES + 1)


def validate_image(folder: str, content_type: str, data: bytes) -> None:
    label = FOLDER_LABELS.get(folder, "Image")
    if not data:
        raise ValidationError(f"{label} is required")
    if not (content_type or "").startswith("image/"):
        raise ValidationError(f"{label} must be an image file")
    if len(data) > MAX_MEDIA_BYTES:
        raise ValidationError(f"{label} is too large (max {MAX_MEDIA_BYTES // (1024 * 1024)} MB)")


class LocalMediaStorage(MediaStorage):
    def __init__(self, upload_dir: str, media_base_url: str):
        self.upload_dir = Path(upload_dir)
        self.media_base_url = media_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocalMediaStorage":
        return cls(settings.MEDIA_UPLOAD_DIR, settings.MEDIA_BASE_URL)

    @staticmethod
    def _extension(filename: str, content_type: str) -> str:
        suffix = Path(filename or "").suffix.lower()
        if suffix in ALLOWED_EXTENSIONS:
            return suffix
        return mimetypes.guess_extension(content_type) or ".img"

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _path_for(self, ref: str):
        prefix = f"{self.media_base_url}/"
        if not ref or not ref.startswith(prefix):
            return None
        root = self.upload_dir.resolve()
        path = (root / ref[len(prefix):]).resolve()
        # Never step outside the upload directory
        if root not in path.parents:
            return None
        return path

    async def save(self, folder: str, filename: str, content_type: str, data: bytes) -> str:
        validate_image(folder, content_type, data)

        name = f"{uuid.uuid4().hex}{self._extension(filename, content_type)}"
        path = self.upload_dir / folder / name
        try:
            await anyio.to_thread.run_sync(self._write, path, data)
        except OSError as exc:
            logger.error("media_store_failed", path=str(path), error=str(exc))
            raise UpstreamUnavailableError("Image could not be stored. Please try again.") from exc

        logger.info("media_stored", folder=folder, name=name, size=len(data))
        return f"{self.media_base_url}/{folder}/{name}"

    async def delete(self, ref: str) -> None:
        path = self._path_for(ref)
        if path is None:
            logger.warning("media_delete_skipped", ref=ref)
            return

        try:
            await anyio.to_thread.run_sync(lambda: path.unlink(missing_ok=True))
        except OSError as exc:
            # Best effort: callers are already propagating another error
            logger.error("media_delete_failed", path=str(path), error=str(exc))
            return

        logger.info("media_deleted", path=str(path))
