"""Request validation for favicon creation."""

import base64
import binascii
import re
from typing import Optional

from aicon.exceptions import ValidationError

DOMAIN_REGEX = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)
DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def validate_domain(domain: str, max_length: int = 256) -> None:
    """Validate a target domain name.

    Raises:
        ValidationError: If the domain is too long or not TLD syntax

    Examples:
        >>> validate_domain("example.com")
        >>> validate_domain("example")
        Traceback (most recent call last):
        ...
        aicon.exceptions.ValidationError: Domain name must contain at least one dot (.)
    """
    if len(domain) > max_length:
        raise ValidationError(f"Domain name must not exceed {max_length} characters")

    if "." not in domain:
        raise ValidationError("Domain name must contain at least one dot (.)")

    if any(not part for part in domain.split(".")):
        raise ValidationError('Domain name cannot have empty parts (e.g., "example..com")')

    if not DOMAIN_REGEX.match(domain):
        raise ValidationError(
            "Invalid domain name format. Domain must contain only letters, numbers, "
            "hyphens, and dots, and follow TLD syntax"
        )


def validate_metadata(metadata: str, max_length: int = 256) -> None:
    """Validate embedded metadata length."""
    if len(metadata) > max_length:
        raise ValidationError(f"Metadata must not exceed {max_length} characters")


def validate_file_size(size: int, max_bytes: int = 512 * 1024) -> None:
    """Validate source image size."""
    if size > max_bytes:
        size_mb = size / (1024 * 1024)
        limit_mb = max_bytes / (1024 * 1024)
        raise ValidationError(
            f"File size ({size_mb:.2f}MB) exceeds the maximum allowed size of {limit_mb:g} MB"
        )


def validate_image_type(content: bytes) -> str:
    """Check magic bytes for PNG, JPEG or GIF and return the MIME type.

    SVG is recognized only to reject it with a clear message; the generator
    rasterizes bitmaps only.

    Raises:
        ValidationError: If the content is not one of the accepted formats
    """
    if len(content) < 4:
        raise ValidationError("File is too small to be a valid image")

    if content[:4] == b"\x89PNG":
        return "image/png"
    if content[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if content[:3] == b"GIF":
        return "image/gif"

    head = content[:100].decode("utf-8", errors="ignore").strip()
    if head.startswith("<svg") or head.startswith("<?xml"):
        raise ValidationError("SVG images are not supported, upload a PNG, JPEG or GIF")

    raise ValidationError("Only image files are allowed (PNG, JPEG, GIF)")


def decode_data_url(data_url: str) -> bytes:
    """Decode a canvas data URL (``data:image/png;base64,...``) into bytes.

    A bare base64 payload without the prefix is accepted as well.

    Raises:
        ValidationError: If the payload is empty or not valid base64
    """
    payload = DATA_URL_PREFIX.sub("", data_url.strip(), count=1)
    if not payload:
        raise ValidationError("No canvas data provided")

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Canvas data is not valid base64")


def validate_create_fields(
    target_domain: Optional[str],
    metadata: Optional[str],
    max_domain_length: int = 256,
    max_metadata_length: int = 256,
) -> None:
    """Validate the optional text fields shared by upload and canvas creation."""
    if target_domain:
        validate_domain(target_domain, max_domain_length)
    if metadata:
        validate_metadata(metadata, max_metadata_length)
