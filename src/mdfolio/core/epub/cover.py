"""Cover payload decoding: data URLs or raw image bytes -> CoverInfo"""

import base64
import binascii
import re

from mdfolio.core.epub.errors import CoverDecodeError
from mdfolio.core.epub.models import CoverInfo


DATA_URL_RE = re.compile(r'^data:([^;,]+);base64,(.*)$', re.DOTALL)

EXTENSIONS = {
    'image/png':     'png',
    'image/gif':     'gif',
    'image/webp':    'webp',
    'image/svg+xml': 'svg',
    'image/jpeg':    'jpg',
}
DEFAULT_MIME = 'image/jpeg'


def sniff_mime(data: bytes) -> str:
    """Guess an image MIME type from magic bytes; JPEG when nothing matches."""
    if data.startswith(b'\x89PNG\r\n\x1a\n'):
        return 'image/png'
    if data[:6] in (b'GIF87a', b'GIF89a'):
        return 'image/gif'
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return 'image/webp'
    head = data[:512].lstrip().lower()
    if head.startswith(b'<svg') or (head.startswith(b'<?xml') and b'<svg' in head):
        return 'image/svg+xml'
    return DEFAULT_MIME


def _info(mime: str, data: bytes) -> CoverInfo:
    if mime not in EXTENSIONS:
        mime = DEFAULT_MIME
    return CoverInfo(mime=mime, extension=EXTENSIONS[mime], data=data)


def decode_cover(payload: str | bytes) -> CoverInfo:
    """Decode a cover payload. Raises CoverDecodeError for malformed input."""
    if isinstance(payload, (bytes, bytearray)):
        if not payload:
            raise CoverDecodeError("Cover image is empty")
        data = bytes(payload)
        return _info(sniff_mime(data), data)

    m = DATA_URL_RE.match(payload.strip())
    if not m:
        raise CoverDecodeError("Invalid cover data URL: expected data:<mime>;base64,<data>")
    try:
        data = base64.b64decode(re.sub(r'\s+', '', m.group(2)), validate=True)
    except (binascii.Error, ValueError) as e:
        raise CoverDecodeError(f"Invalid base64 in cover data URL: {e}") from e
    if not data:
        raise CoverDecodeError("Cover image is empty")
    return _info(m.group(1).strip().lower(), data)
