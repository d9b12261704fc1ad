"""
Image Upload Service - stores screenshot bytes under a content-addressed name.

The same bytes always map to the same URL, so re-uploading a screenshot is a
no-op on storage.
"""

import base64
import hashlib
import logging
import mimetypes
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..core.exceptions import StorageError, UploadError, ValidationError
from ..storage.interface import StorageInterface

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

_UPLOAD_NAME = re.compile(r"^[0-9a-f]{64}\.(png|jpg|webp|gif)$")


@dataclass
class UploadedImage:
    """Result of a successful upload."""
    url: str
    filename: str
    content_type: str
    data_url: str


class ImageUploader:
    """Validates screenshots and writes them to blob storage."""

    def __init__(
        self,
        storage: StorageInterface,
        allowed_types: Iterable[str] = tuple(EXTENSIONS),
        max_bytes: int = 10 * 1024 * 1024,
        url_prefix: str = "/uploads",
    ):
        self.storage = storage
        self.allowed_types = {t.lower() for t in allowed_types}
        self.max_bytes = max_bytes
        self.url_prefix = url_prefix.rstrip("/")
        self.uploads_dir = "uploads"

    def _resolve_content_type(self, filename: str, content_type: Optional[str]) -> str:
        if content_type:
            content_type = content_type.lower().split(";", 1)[0].strip()
        if not content_type or content_type == "application/octet-stream":
            content_type = mimetypes.guess_type(filename)[0] or ""
        if content_type not in self.allowed_types or content_type not in EXTENSIONS:
            raise ValidationError(f"Unsupported image type: {content_type or 'unknown'}")
        return content_type

    async def upload(
        self,
        image_bytes: bytes,
        filename: str,
        content_type: Optional[str] = None
    ) -> UploadedImage:
        """
        Store an image and return its stable URL.

        Raises:
            ValidationError: Empty, oversized or non-image upload
            UploadError: Storage failed
        """
        if not filename:
            raise ValidationError("Uploaded file must have a filename")
        if not image_bytes:
            raise ValidationError("Uploaded image is empty")
        if len(image_bytes) > self.max_bytes:
            raise ValidationError(
                f"Uploaded image is too large ({len(image_bytes)} bytes, limit {self.max_bytes})"
            )

        content_type = self._resolve_content_type(filename, content_type)
        digest = hashlib.sha256(image_bytes).hexdigest()
        name = f"{digest}{EXTENSIONS[content_type]}"

        try:
            await self.storage.save(f"{self.uploads_dir}/{name}", image_bytes)
        except StorageError as e:
            raise UploadError(e.message) from e

        logger.info(f"Stored upload {filename} as {name} ({len(image_bytes)} bytes)")
        encoded = base64.b64encode(image_bytes).decode("utf-8")
        return UploadedImage(
            url=f"{self.url_prefix}/{name}",
            filename=filename,
            content_type=content_type,
            data_url=f"data:{content_type};base64,{encoded}",
        )

    async def load(self, name: str) -> Optional[Tuple[bytes, str]]:
        """
        Load a stored upload by name.

        Returns:
            (bytes, media type), or None if the name is unknown
        """
        if not _UPLOAD_NAME.match(name):
            return None
        content = await self.storage.load(f"{self.uploads_dir}/{name}")
        if content is None:
            return None
        return content, MEDIA_TYPES[name[name.rindex("."):]]
