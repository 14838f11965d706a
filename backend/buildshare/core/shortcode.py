"""Shortcode Codec — base-62 conversion between identifiers and compact strings.

Invariants:
    - ALPHABET ordering is digits, lowercase, uppercase and never changes:
      every persisted shortcode depends on it
    - Input bytes are read as one unsigned big-endian integer
    - Digits are emitted most-significant first; zero encodes as "0"
    - decode(encode(b)) equals b by VALUE only: leading zero bytes are lost
      (b"\\x00\\x01" and b"\\x01" both encode to "1", which decodes to b"\\x01")
    - Characters outside ALPHABET raise InvalidShortcodeError, never skipped
"""

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE = len(ALPHABET)

_DIGIT_VALUES = {char: index for index, char in enumerate(ALPHABET)}

# Identifiers live in a signed BIGINT column
MAX_IDENTIFIER = (1 << 63) - 1


class InvalidShortcodeError(ValueError):
    """Raised when a string is not a valid base-62 shortcode."""

    def __init__(self, shortcode: str, position: int | None = None):
        if position is None:
            detail = "shortcode is empty"
        else:
            detail = (
                f"invalid character {shortcode[position]!r} at position {position}"
            )
        super().__init__(f"Invalid shortcode {shortcode!r}: {detail}")
        self.shortcode = shortcode
        self.position = position


def encode_int(value: int) -> str:
    """Encode a non-negative integer as a base-62 string."""
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")
    if value == 0:
        return ALPHABET[0]
    digits = []
    while value > 0:
        value, remainder = divmod(value, BASE)
        digits.append(ALPHABET[remainder])
    return "".join(reversed(digits))


def decode_int(shortcode: str) -> int:
    """Decode a base-62 string to its integer value."""
    if not shortcode:
        raise InvalidShortcodeError(shortcode)
    value = 0
    for position, char in enumerate(shortcode):
        digit = _DIGIT_VALUES.get(char)
        if digit is None:
            raise InvalidShortcodeError(shortcode, position)
        value = value * BASE + digit
    return value


def encode(data: bytes) -> str:
    """Encode bytes (unsigned, big-endian) as a base-62 string.

    Empty input is treated as the value zero.
    """
    return encode_int(int.from_bytes(data, "big", signed=False))


def decode(shortcode: str) -> bytes:
    """Decode a base-62 string to the minimal big-endian byte form of its value.

    Zero decodes to a single zero byte.
    """
    value = decode_int(shortcode)
    length = max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(length, "big", signed=False)


def is_valid(shortcode: str) -> bool:
    return bool(shortcode) and all(char in _DIGIT_VALUES for char in shortcode)


def shortcode_for_identifier(identifier: int) -> str:
    """Derive the shortcode of a record from its 64-bit identifier."""
    return encode(identifier.to_bytes(8, "big", signed=False))


def identifier_for_shortcode(shortcode: str) -> int:
    """Recover a record identifier from its shortcode (inverse of shortcode_for_identifier)."""
    value = decode_int(shortcode)
    if value > MAX_IDENTIFIER:
        raise ValueError(
            f"Shortcode {shortcode!r} exceeds the identifier space (signed 64-bit)"
        )
    return value
