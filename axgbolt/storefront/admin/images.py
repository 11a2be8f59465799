"""Client-side checks and local previews for product image uploads."""

import os
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger()

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif")
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def validate_image(content_type: str | None, size: int) -> str | None:
    """Check an image before upload.

    Returns:
        The message to show, or None when the image is acceptable.
    """
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        return "Please select a valid image file (JPEG, PNG, WebP, or GIF)"
    if size > MAX_IMAGE_BYTES:
        return "Image size must be less than 5MB"
    if size == 0:
        return "Image file is empty"
    return None


class ImagePreview:
    """A temporary local copy of a picked image, shown until the form closes.

    Must be released; ``release`` is idempotent.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.released = False

    @classmethod
    def create(cls, data: bytes, filename: str) -> "ImagePreview":
        suffix = Path(filename).suffix.lower()
        fd, name = tempfile.mkstemp(prefix="axg-preview-", suffix=suffix)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        return cls(Path(name))

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove image preview", path=str(self.path), error=str(e))
