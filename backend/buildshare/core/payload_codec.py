"""Payload Codec — base64 text <-> compressed bytes for build, image, and page payloads.

Invariants:
    - decode_and_decompress accepts zlib, gzip, or raw deflate streams
    - Malformed base64, corrupt streams, truncated streams, and trailing garbage
      all raise DataCorruptionError (deterministic; retrying cannot help)
    - compress_and_encode always emits zlib-wrapped data
"""

import base64
import binascii
import zlib

from buildshare.core.errors import DataCorruptionError, ErrorContext

_GZIP_MAGIC = b"\x1f\x8b"
_ZLIB_WBITS = 15
_GZIP_WBITS = 16 + zlib.MAX_WBITS
_RAW_WBITS = -zlib.MAX_WBITS


def _looks_like_zlib(data: bytes) -> bool:
    if len(data) < 2:
        return False
    cmf, flg = data[0], data[1]
    return cmf & 0x0F == 8 and (cmf << 8 | flg) % 31 == 0


def _detect_wbits(data: bytes) -> int:
    if data.startswith(_GZIP_MAGIC):
        return _GZIP_WBITS
    if _looks_like_zlib(data):
        return _ZLIB_WBITS
    return _RAW_WBITS


def decompress(data: bytes, context: ErrorContext | None = None) -> bytes:
    """Decompress a complete zlib/gzip/deflate stream."""
    if not data:
        raise DataCorruptionError("Payload is empty", context)
    decompressor = zlib.decompressobj(wbits=_detect_wbits(data))
    try:
        raw = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as e:
        raise DataCorruptionError(f"Payload failed to decompress: {e}", context) from e
    if not decompressor.eof:
        raise DataCorruptionError("Payload is truncated", context)
    if decompressor.unused_data:
        raise DataCorruptionError(
            f"Payload has {len(decompressor.unused_data)} trailing bytes", context,
        )
    return raw


def decode_and_decompress(text: str, context: ErrorContext | None = None) -> bytes:
    """Base64-decode and decompress a stored payload."""
    try:
        data = base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DataCorruptionError(f"Payload is not valid base64: {e}", context) from e
    return decompress(data, context)


def compress_and_encode(raw: bytes, level: int = 9) -> str:
    """Compress bytes with zlib and encode them as base64 text."""
    return base64.b64encode(zlib.compress(raw, level)).decode("ascii")
