"""
EDF header decoding.

The file opens with a fixed 256-byte global header followed by the signal
header block. The signal header is laid out field-major: all labels come
first, then all transducer types, and so on, so signal ``n``'s value for a
field of width ``w`` lives at ``block_start + n * w``.
"""

import logging

from edfdecode.constants import (
    DEFAULT_HEADER_ENCODING,
    HEADER_FIELDS,
    HEADER_SIZE,
    SIGNAL_HEADER_FIELDS,
    SIGNAL_HEADER_SIZE,
)
from edfdecode.parsers.base import MalformedHeaderError, read_field
from edfdecode.parsers.types import EDFHeader, SignalDescriptor

logger = logging.getLogger(__name__)


def parse_header(
    buffer: bytes, encoding: str = DEFAULT_HEADER_ENCODING
) -> EDFHeader:
    """
    Decode the fixed global header.

    Args:
        buffer: File contents (at least the first 256 bytes)
        encoding: Text encoding of header fields

    Returns:
        EDFHeader with invalid numeric fields set to their sentinel

    Raises:
        MalformedHeaderError: If the buffer is shorter than 256 bytes
    """
    if len(buffer) < HEADER_SIZE:
        raise MalformedHeaderError(
            f"EDF header requires {HEADER_SIZE} bytes, got {len(buffer)}",
            offset=len(buffer),
        )

    values = {}
    offset = 0
    for name, width, kind in HEADER_FIELDS:
        values[name] = read_field(buffer, offset, width, kind, encoding)
        offset += width

    header = EDFHeader(**values)
    logger.debug(
        f"Parsed EDF header: {header.signal_count} signals, "
        f"{header.record_count} records of {header.record_duration}s"
    )
    return header


def parse_signal_headers(
    buffer: bytes,
    header: EDFHeader,
    encoding: str = DEFAULT_HEADER_ENCODING,
) -> list[SignalDescriptor]:
    """
    Decode the field-major signal header block.

    Args:
        buffer: File contents (at least ``header_byte_size`` bytes)
        header: Previously decoded global header
        encoding: Text encoding of header fields

    Returns:
        One SignalDescriptor per signal, in interleave order

    Raises:
        MalformedHeaderError: If the signal count or header size is unusable,
            or the buffer is shorter than the declared header
    """
    signal_count = header.signal_count
    if signal_count is None or signal_count <= 0:
        raise MalformedHeaderError(
            f"Invalid signal count in EDF header: {signal_count}", offset=252
        )
    if header.header_byte_size is None or header.header_byte_size < 0:
        raise MalformedHeaderError(
            f"Invalid header size in EDF header: {header.header_byte_size}",
            offset=184,
        )

    expected_size = HEADER_SIZE + signal_count * SIGNAL_HEADER_SIZE
    required = max(expected_size, header.header_byte_size)
    if len(buffer) < required:
        raise MalformedHeaderError(
            f"EDF header declares {required} bytes, buffer holds {len(buffer)}",
            offset=len(buffer),
        )
    if header.header_byte_size != expected_size:
        logger.warning(
            f"Header size field is {header.header_byte_size}, expected "
            f"{expected_size} for {signal_count} signals; "
            "data records are read from the declared size"
        )

    fields: list[dict] = [{"index": n} for n in range(signal_count)]
    block_start = HEADER_SIZE
    for name, width, kind in SIGNAL_HEADER_FIELDS:
        for n, values in enumerate(fields):
            values[name] = read_field(
                buffer, block_start + n * width, width, kind, encoding
            )
        block_start += width * signal_count

    signals = [SignalDescriptor(**values) for values in fields]
    logger.debug(f"Parsed signal headers: {[s.label for s in signals]}")
    return signals
