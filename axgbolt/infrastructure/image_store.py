"""Local storage for uploaded product images."""

import secrets
import time
from dataclasses import dataclass
from pathlib import Path

import structlog

from axgbolt.domain.exceptions import NotFoundError, ValidationFailedError
from axgbolt.infrastructure.config import settings

logger = structlog.get_logger()

ALLOWED_IMAGE_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

_ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


@dataclass
class StoredImage:
    """An image written to the upload directory."""

    filename: str
    original_name: str
    size: int
    path: Path


class ImageStore:
    """Writes and resolves product images under one directory.

    Example usage:
        store = ImageStore()
        stored = store.save(data, "lens.png", "image/png")
        path = store.resolve(stored.filename)
    """

    def __init__(self, root: str | Path | None = None, max_bytes: int | None = None) -> None:
        self.root = Path(root or settings.upload_dir)
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes

    def save(self, data: bytes, original_name: str, content_type: str | None) -> StoredImage:
        """Validate and write an uploaded image.

        Raises:
            ValidationFailedError: If the type is not an accepted image
                type, or the file is empty or too large.
        """
        extension = ALLOWED_IMAGE_TYPES.get((content_type or "").lower())
        if extension is None:
            raise ValidationFailedError(
                "Only image files (JPEG, PNG, WebP, GIF) are allowed", field="image"
            )
        if not data:
            raise ValidationFailedError("Image file is empty", field="image")
        if len(data) > self.max_bytes:
            raise ValidationFailedError(
                f"Image must be smaller than {self.max_bytes // (1024 * 1024)}MB",
                field="image",
            )

        suffix = Path(original_name or "").suffix.lower()
        if suffix not in _ALLOWED_EXTENSIONS:
            suffix = extension

        filename = f"product-{int(time.time() * 1000)}-{secrets.token_hex(4)}{suffix}"
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / filename
        path.write_bytes(data)

        logger.info("Image stored", filename=filename, size=len(data))
        return StoredImage(
            filename=filename,
            original_name=original_name or filename,
            size=len(data),
            path=path,
        )

    def resolve(self, filename: str) -> Path:
        """Get the path of a stored image.

        Raises:
            NotFoundError: If the name is not a plain file name or the
                file does not exist.
        """
        if not filename or Path(filename).name != filename or filename.startswith("."):
            raise NotFoundError("Image", filename)
        path = self.root / filename
        if not path.is_file():
            raise NotFoundError("Image", filename)
        return path
