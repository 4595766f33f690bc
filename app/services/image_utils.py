"""
Image helpers shared by the portrait backends, the API, and the export.
"""


def detect_image_mime(data: bytes, default: str = "image/png") -> str:
    """Sniff the mime type from magic bytes."""
    if not data:
        return default
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return default
