"""Split and join the DataMashup blob.

The blob is an opaque MS-QDEFF header followed by a ZIP archive. The header
is never interpreted; it is only cut off at the first ZIP local file header
signature and replayed verbatim.
"""

import base64
import binascii
import re
from typing import Tuple

from .errors import BlobNotFoundError, MalformedArchiveError

ZIP_SIGNATURE = b"PK\x03\x04"

_WHITESPACE = re.compile(r"\s+")


def b64decode_lenient(text: str) -> bytes:
    """Decode standard Base64, ignoring whitespace and missing padding."""
    cleaned = _WHITESPACE.sub("", text or "")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedArchiveError(f"DataMashup text is not valid Base64: {e}") from e


def split_blob(raw: bytes) -> Tuple[bytes, bytes]:
    index = raw.find(ZIP_SIGNATURE)
    if index < 0:
        raise BlobNotFoundError("DataMashup blob contains no archive signature")
    return raw[:index], raw[index:]


def decode(text: str) -> Tuple[bytes, bytes]:
    """Return ``(header_bytes, inner_archive_bytes)`` for Base64 ``text``."""
    return split_blob(b64decode_lenient(text))


def encode(header: bytes, inner: bytes) -> str:
    return base64.b64encode(header + inner).decode("ascii")


def harvest_header(text: str) -> bytes:
    """Header bytes of ``text``, or ``b""`` when it has no archive signature."""
    try:
        header, _ = decode(text)
    except BlobNotFoundError:
        return b""
    return header
