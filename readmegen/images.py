"""Image ingestion: encode user-selected image files as data URIs."""

import base64
import mimetypes
from pathlib import Path
from typing import Optional, Union

from filetype import guess

from readmegen.schema import Descriptor, DescriptorPatch

MAX_IMAGE_BYTES = 10 * 1024 * 1024

LOGO_SLOT = "logo"
SCREENSHOT_SLOT = "screenshot"
SLOTS = (LOGO_SLOT, SCREENSHOT_SLOT)


class ImageError(ValueError):
    """Raised when a file cannot be used as an image."""


def detect_image_mime(data: bytes, filename: Optional[str] = None) -> Optional[str]:
    """Detect the image MIME type from the file signature, then the file name."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        return kind.mime
    if filename:
        mime, _ = mimetypes.guess_type(filename)
        # SVG is text and has no signature filetype knows about
        if mime and mime.startswith("image/"):
            return mime
    return None


def encode_image_bytes(data: bytes, filename: Optional[str] = None) -> str:
    """
    Encode image bytes as a ``data:`` URI.

    Raises:
        ImageError: If the payload is empty, too large or not an image
    """
    if not data:
        raise ImageError("Image file is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise ImageError(f"Image exceeds {MAX_IMAGE_BYTES // (1024 * 1024)}MB limit")

    mime = detect_image_mime(data, filename)
    if mime is None:
        raise ImageError(f"Not a recognised image: {filename or 'upload'}")

    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{payload}"


def encode_image_file(path: Union[str, Path]) -> str:
    """Read an image file from disk and encode it as a data URI."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageError(f"Cannot read image {path}: {e}") from e
    return encode_image_bytes(data, path.name)


def ingest_image(slot: str, data_uri: str, descriptor: Descriptor) -> DescriptorPatch:
    """
    Build the patch that places an encoded image into an upload slot.

    The logo slot replaces ``logo_ref``; the screenshot slot appends to
    ``screenshots``.
    """
    if slot == LOGO_SLOT:
        return {"logo_ref": data_uri}
    if slot == SCREENSHOT_SLOT:
        return {"screenshots": descriptor.screenshots + (data_uri,)}
    raise ValueError(f"Unknown upload slot: {slot!r} (expected one of {', '.join(SLOTS)})")
