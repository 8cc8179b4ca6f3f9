"""
Decoder errors and fixed-width field readers.

EDF headers are made of space-padded ASCII fields. Numeric fields are read
permissively: a value that does not parse becomes an explicit invalid
sentinel (``None`` for integers, ``nan`` for floats) instead of raising,
because real-world producers routinely write slightly malformed headers.
"""

import logging
import math

from edfdecode.constants import DEFAULT_HEADER_ENCODING

logger = logging.getLogger(__name__)


class EDFError(Exception):
    """Base exception for EDF decoding errors."""

    def __init__(self, message: str, offset: int | None = None):
        super().__init__(message)
        self.offset = offset


class MalformedHeaderError(EDFError):
    """The header is too short, or its layout fields cannot be used."""

    pass


class TruncatedDataError(EDFError):
    """Fewer complete data records are present than the header declares."""

    pass


def parse_int(text: str) -> int | None:
    """
    Parse an integer header field.

    Args:
        text: Raw field text (may be space padded)

    Returns:
        The integer, or None when the field is not a valid integer
    """
    try:
        return int(text.strip())
    except ValueError:
        logger.debug(f"Invalid integer field: {text!r}")
        return None


def parse_float(text: str) -> float:
    """
    Parse a floating point header field.

    Args:
        text: Raw field text (may be space padded)

    Returns:
        The number, or nan when the field is not a valid number
    """
    try:
        return float(text.strip())
    except ValueError:
        logger.debug(f"Invalid float field: {text!r}")
        return math.nan


def read_field(
    buffer: bytes,
    start: int,
    width: int,
    kind: str,
    encoding: str = DEFAULT_HEADER_ENCODING,
) -> str | int | float | None:
    """
    Read one fixed-width field.

    Args:
        buffer: Source bytes
        start: Absolute offset of the field
        width: Field width in bytes
        kind: "str", "int" or "float"
        encoding: Text encoding of header fields

    Returns:
        Trimmed string, or the parsed number (with invalid sentinel)
    """
    text = buffer[start : start + width].decode(encoding, errors="replace")
    if kind == "int":
        return parse_int(text)
    if kind == "float":
        return parse_float(text)
    return text.strip()
