"""
Data record demultiplexing.

Every data record is the concatenation, in header order, of each channel's
``sample_count * 2`` bytes. Ordinary channels hold little-endian int16
samples; the annotation and checksum channels hold raw bytes that are kept
per record.
"""

import logging

from dataclasses import dataclass, field

import numpy as np

from edfdecode.constants import SAMPLE_DTYPE, UNKNOWN_RECORD_COUNT
from edfdecode.parsers.base import MalformedHeaderError, TruncatedDataError
from edfdecode.parsers.types import EDFHeader, SignalDescriptor

logger = logging.getLogger(__name__)


@dataclass
class RecordData:
    """Per-channel output of a record walk."""

    record_count: int
    samples: dict[int, np.ndarray] = field(default_factory=dict)
    annotation_chunks: list[bytes] = field(default_factory=list)
    checksum_chunks: list[bytes] = field(default_factory=list)


def record_layout(signals: list[SignalDescriptor]) -> list[tuple[int, int]]:
    """
    Compute each channel's byte range within one data record.

    Returns:
        (start, end) offsets relative to the record start, in header order

    Raises:
        MalformedHeaderError: If a sample count is invalid or negative
    """
    layout = []
    offset = 0
    for signal in signals:
        size = signal.record_byte_size
        if size is None or size < 0:
            raise MalformedHeaderError(
                f"Invalid sample count for signal {signal.index} "
                f"({signal.label!r}): {signal.sample_count}"
            )
        layout.append((offset, offset + size))
        offset += size
    return layout


def _available_records(
    header: EDFHeader, data_size: int, record_size: int
) -> int:
    declared = header.record_count
    if declared is None or declared < 0:
        available = data_size // record_size if record_size else 0
        if declared is not None and declared != UNKNOWN_RECORD_COUNT:
            logger.warning(f"Negative record count {declared} in EDF header")
        logger.warning(
            f"Record count is {declared!r}, reading {available} complete records"
        )
        return available

    if data_size == 0:
        # header-only buffer
        return 0
    if data_size < declared * record_size:
        raise TruncatedDataError(
            f"Header declares {declared} records of {record_size} bytes, "
            f"only {data_size} bytes of data present",
            offset=(header.header_byte_size or 0) + data_size,
        )
    trailing = data_size - declared * record_size
    if trailing:
        logger.debug(f"Ignoring {trailing} trailing bytes after the last record")
    return declared


def demultiplex_records(
    buffer: bytes,
    header: EDFHeader,
    signals: list[SignalDescriptor],
) -> RecordData:
    """
    Walk the interleaved data records.

    Data starts exactly at ``header_byte_size``; bytes after the last
    declared record are ignored.

    Args:
        buffer: Complete file contents
        header: Decoded global header
        signals: Decoded signal descriptors

    Returns:
        RecordData with one int16 array per ordinary channel and the raw
        annotation/checksum bytes of every record

    Raises:
        MalformedHeaderError: If the record layout cannot be computed
        TruncatedDataError: If fewer records are present than declared
    """
    if header.header_byte_size is None:
        raise MalformedHeaderError("Invalid header size in EDF header", offset=184)

    layout = record_layout(signals)
    record_size = layout[-1][1] if layout else 0
    data_size = max(len(buffer) - header.header_byte_size, 0)
    record_count = _available_records(header, data_size, record_size)

    if record_count and record_size:
        records = np.frombuffer(
            buffer,
            dtype=np.uint8,
            count=record_count * record_size,
            offset=header.header_byte_size,
        ).reshape(record_count, record_size)
    else:
        records = np.zeros((record_count, record_size), dtype=np.uint8)

    result = RecordData(record_count=record_count)
    annotation_parts: list[list[bytes]] = [[] for _ in range(record_count)]

    for signal, (start, end) in zip(signals, layout):
        block = records[:, start:end]
        if signal.is_annotation:
            for r in range(record_count):
                annotation_parts[r].append(block[r].tobytes())
        elif signal.is_checksum:
            result.checksum_chunks.extend(
                block[r].tobytes() for r in range(record_count)
            )
        else:
            samples = np.ascontiguousarray(block).view(SAMPLE_DTYPE).ravel()
            samples = samples.astype(np.int16)
            samples.setflags(write=False)
            result.samples[signal.index] = samples

    result.annotation_chunks = [b"".join(parts) for parts in annotation_parts]
    logger.debug(
        f"Demultiplexed {record_count} records of {record_size} bytes "
        f"across {len(signals)} channels"
    )
    return result
