"""File storage gateway for submission uploads.

Two backends share one protocol: Cloudinary (raw uploads through its SDK)
and a local directory for development. ``validate_upload`` applies the size
and extension policy before anything is stored.
"""
import io
import logging
import os
import re
import unicodedata
import uuid
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from classroom_api.core import config
from classroom_api.core.errors import UpstreamFailure, ValidationFailed

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"[^A-Za-z0-9._-]+")
_VERSION_RE = re.compile(r"^v\d+/")


class StorageGateway(Protocol):
    def upload(self, data: bytes, filename: str) -> str: ...

    def delete(self, reference: str) -> bool: ...


def extension_of(filename: str) -> str:
    return os.path.splitext(os.path.basename(filename or ""))[1].lower()


def validate_upload(filename: str, size: int) -> None:
    if not filename or size == 0:
        raise ValidationFailed("File is required")
    if size > config.MAX_UPLOAD_BYTES:
        raise ValidationFailed("File size cannot exceed 10MB")
    ext = extension_of(filename)
    if ext not in config.ALLOWED_EXTENSIONS:
        raise ValidationFailed(f"File type {ext or '(none)'} is not allowed")


def make_object_name(filename: str) -> str:
    """``<uuid>_<stem><ext>`` with the stem reduced to safe ASCII."""
    stem = os.path.splitext(os.path.basename(filename))[0]
    normalized = unicodedata.normalize("NFKD", stem).encode("ascii", "ignore").decode("ascii")
    safe_stem = _SEGMENT_RE.sub("-", normalized).strip("-_.") or "file"
    return f"{uuid.uuid4().hex}_{safe_stem}{extension_of(filename)}"


class LocalStorage:
    """Stores files under a directory served at ``/uploads``."""

    def __init__(self, root: Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, filename: str) -> str:
        validate_upload(filename, len(data))
        name = make_object_name(filename)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(data)
        except OSError as exc:
            logger.error("local upload failed for %s: %s", filename, exc)
            raise UpstreamFailure(f"File upload failed: {exc}") from exc
        logger.info("stored %s (%d bytes)", name, len(data))
        return f"{self.base_url}/uploads/{name}"

    def delete(self, reference: str) -> bool:
        name = os.path.basename(urlparse(reference).path)
        target = self.root / name
        try:
            target.unlink()
        except OSError as exc:
            logger.error("local delete failed for %s: %s", reference, exc)
            return False
        return True


class CloudinaryStorage:
    """Raw uploads to Cloudinary through the official SDK."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = config.CLOUDINARY_FOLDER):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        self.folder = folder

    def upload(self, data: bytes, filename: str) -> str:
        validate_upload(filename, len(data))
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                resource_type="raw",
                folder=self.folder,
                public_id=make_object_name(filename),
                filename=filename,
                timeout=config.STORAGE_TIMEOUT_SECONDS,
            )
        except cloudinary.exceptions.Error as exc:
            logger.error("Error uploading file to Cloudinary: %s", exc)
            raise UpstreamFailure(f"File upload failed: {exc}") from exc

        logger.info("uploaded %s to Cloudinary as %s", filename, result.get("public_id"))
        return result["secure_url"]

    def public_id_from(self, reference: str) -> str:
        """Accept either a public id or a delivery URL."""
        if "://" not in reference:
            return reference
        path = urlparse(reference).path
        _, _, tail = path.partition("/upload/")
        return _VERSION_RE.sub("", tail)

    def delete(self, reference: str) -> bool:
        try:
            result = cloudinary.uploader.destroy(self.public_id_from(reference), resource_type="raw")
        except cloudinary.exceptions.Error as exc:
            logger.error("Error deleting file from Cloudinary: %s", exc)
            return False
        return result.get("result") == "ok"


def build_storage() -> StorageGateway:
    if config.STORAGE_BACKEND == "cloudinary":
        return CloudinaryStorage(
            config.CLOUDINARY_CLOUD_NAME,
            config.CLOUDINARY_API_KEY,
            config.CLOUDINARY_API_SECRET,
        )
    return LocalStorage(config.LOCAL_STORAGE_DIR, config.PUBLIC_BASE_URL)


_storage: StorageGateway | None = None


def get_storage() -> StorageGateway:
    global _storage
    if _storage is None:
        _storage = build_storage()
    return _storage
