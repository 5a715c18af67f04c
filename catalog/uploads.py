"""
Store uploaded cover images and hand back the URL to save on the entry.
"""

import logging
import os
import re
import uuid
from typing import Optional

from catalog.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


def check_image_upload(data: bytes, filename: str) -> str:
    """
    Check that an upload is an image within the size limit.

    Args:
        data: The uploaded bytes
        filename: The uploaded file name

    Returns:
        The lowercased file extension

    Raises:
        ValidationError: If the file is empty, too large, or not an image
    """
    extension = os.path.splitext(filename or "")[1].lower()
    if extension not in IMAGE_EXTENSIONS:
        raise ValidationError(
            f"Unsupported image type '{extension or filename}'. "
            f"Use one of {', '.join(IMAGE_EXTENSIONS)}"
        )
    if not data:
        raise ValidationError("Uploaded image is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError("Image must be 10 MB or smaller")
    return extension


def save_cover_image(
    data: bytes, filename: str, upload_dir: str, name_hint: Optional[str] = None
) -> str:
    """
    Save an uploaded cover image under a unique name.

    Args:
        data: The uploaded bytes
        filename: The uploaded file name, used for its extension
        upload_dir: Directory to write into
        name_hint: Optional text, such as the entry title, to prefix the name with

    Returns:
        Path of the saved image, used as the entry's poster_url
    """
    extension = check_image_upload(data, filename)
    slug = re.sub(r"[^a-z0-9]+", "-", (name_hint or "cover").lower()).strip("-")
    saved_name = f"{slug or 'cover'}-{uuid.uuid4().hex[:8]}{extension}"

    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, saved_name)
    with open(path, "wb") as f:
        f.write(data)

    logger.info("Saved cover image %s (%d bytes)", path, len(data))
    return path
