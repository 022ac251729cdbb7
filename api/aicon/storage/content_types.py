"""Content type inference for stored objects."""

EXTENSION_MIME_TYPES = {
    "png": "image/png",
    "ico": "image/x-icon",
    "svg": "image/svg+xml",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}

DEFAULT_SOURCE_MIME = "image/png"
OCTET_STREAM = "application/octet-stream"


def sniff_image_mime(data: bytes) -> str:
    """Infer the MIME type of an original source image from its magic bytes.

    Falls back to image/png when nothing matches.

    Examples:
        >>> sniff_image_mime(b"\\x89PNG\\r\\n\\x1a\\n")
        'image/png'
        >>> sniff_image_mime(b"\\xff\\xd8\\xff\\xe0")
        'image/jpeg'
    """
    if data[:4] == b"\x89PNG":
        return "image/png"
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:3] == b"GIF":
        return "image/gif"

    head = data[:100].decode("utf-8", errors="ignore").strip()
    if head.startswith("<svg") or head.startswith("<?xml"):
        return "image/svg+xml"

    return DEFAULT_SOURCE_MIME


def mime_type_from_key(key: str) -> str:
    """Infer the MIME type of a stored asset from its key's extension.

    Examples:
        >>> mime_type_from_key("favicons/abc/favicon-example.com.ico")
        'image/x-icon'
        >>> mime_type_from_key("favicons/abc/readme")
        'application/octet-stream'
    """
    filename = key.rsplit("/", 1)[-1]
    if "." not in filename:
        return OCTET_STREAM
    ext = filename.rsplit(".", 1)[-1].lower()
    return EXTENSION_MIME_TYPES.get(ext, OCTET_STREAM)
