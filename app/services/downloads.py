"""Helpers for turning stored asset references back into downloadable files."""

import base64
import binascii
import re
import time
import unicodedata
from typing import Tuple
from urllib.parse import quote

DATA_URI_PATTERN = re.compile(r"^data:([^;,]+)?((?:;[^;,]*)*?);base64,(.*)$", re.DOTALL)
MIME_PATTERN = re.compile(r"^data:([^;]+);")


class InvalidDataUriError(ValueError):
    """Raised when a string is not a base64 data URI."""

    pass


def _fallback_name(extension: str = "file") -> str:
    return f"download_{int(time.time() * 1000)}.{extension}"


def filename_from_url(url: str) -> str:
    """
    Derive a download file name from a URL.

    Args:
        url: Remote file URL

    Returns:
        The last path segment without query string when it has an extension,
        otherwise a timestamped placeholder name
    """
    if "/" in url:
        last_part = url.split("/")[-1]
        if "?" in last_part:
            return last_part.split("?")[0]
        if "." in last_part:
            return last_part

    return _fallback_name()


def filename_from_data_uri(data_uri: str) -> str:
    """Derive a download file name from the MIME type of a data URI."""
    match = MIME_PATTERN.match(data_uri)
    if match:
        parts = match.group(1).split("/")
        extension = parts[1] if len(parts) > 1 else ""
        return _fallback_name(extension or "file")

    return _fallback_name()


def file_extension(file_name: str) -> str:
    """Return the text after the last dot, or an empty string."""
    if "." not in file_name or file_name.rfind(".") == 0:
        return ""
    return file_name.rsplit(".", 1)[1]


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Decode a base64 data URI.

    Args:
        data_uri: String of the form data:<mime>;base64,<payload>

    Returns:
        (mime type, decoded bytes)

    Raises:
        InvalidDataUriError: If the string is not a valid base64 data URI
    """
    match = DATA_URI_PATTERN.match(data_uri)
    if not match:
        raise InvalidDataUriError("Not a base64 data URI")

    mime_type = match.group(1) or "application/octet-stream"
    try:
        data = base64.b64decode(match.group(3), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidDataUriError(f"Invalid base64 payload: {e}") from e

    return mime_type, data


def content_disposition(file_name: str) -> str:
    """
    Build an attachment Content-Disposition header value.

    ``filename`` carries an ASCII approximation for old clients; the exact
    name goes in the RFC 5987 ``filename*`` parameter.

    Args:
        file_name: Name the browser should save the file as

    Returns:
        Header value safe to encode as Latin-1
    """
    ascii_name = (
        unicodedata.normalize("NFKD", file_name).encode("ascii", "ignore").decode("ascii")
    )
    ascii_name = re.sub(r'["\\\x00-\x1f\x7f]', "_", ascii_name).strip() or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name, safe='')}"
