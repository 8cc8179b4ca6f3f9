"""
EDF/EDF+ File Decoder

Decodes a complete in-memory EDF or EDF+ file into an immutable Recording:
- header and field-major signal header
- interleaved int16 data records, demultiplexed per channel
- EDF+ annotations decoded from each record's TAL

Samples are kept as stored (digital values); physical/digital ranges are
carried as metadata only. The "EDF Annotations" and "Crc16" channels are
never emitted as signals, and the checksum is not verified.
"""

import logging

from pathlib import Path

from edfdecode.constants import DEFAULT_HEADER_ENCODING, DEFAULT_TAL_ENCODING
from edfdecode.parsers.header import parse_header, parse_signal_headers
from edfdecode.parsers.records import RecordData, demultiplex_records
from edfdecode.parsers.tal import parse_tal
from edfdecode.parsers.timestamps import resolve_start
from edfdecode.parsers.types import (
    Annotation,
    EDFHeader,
    Recording,
    SignalColumn,
    SignalDescriptor,
)

logger = logging.getLogger(__name__)


def filter_record_annotations(
    record_groups: list[list[Annotation]],
) -> list[Annotation]:
    """
    Flatten per-record annotation groups.

    Every record starts with a time-keeping annotation (an onset with no
    duration and no note). Record 0's is kept since it anchors the
    recording; the leading marker of every later record is dropped.

    Args:
        record_groups: Decoded annotations of each record, in record order

    Returns:
        Flattened annotation list in record (and onset) order
    """
    annotations: list[Annotation] = []
    for index, group in enumerate(record_groups):
        if index > 0 and group and group[0].is_time_keeping:
            group = group[1:]
        annotations.extend(group)
    return annotations


def assemble_recording(
    header: EDFHeader,
    signals: list[SignalDescriptor],
    records: RecordData,
    tal_encoding: str = DEFAULT_TAL_ENCODING,
) -> Recording:
    """
    Combine decoded parts into a Recording.

    Args:
        header: Decoded global header
        signals: Decoded signal descriptors
        records: Output of the record walk
        tal_encoding: Text encoding of annotation channels

    Returns:
        Immutable Recording
    """
    columns = tuple(
        SignalColumn(
            name=signal.label,
            metadata=signal.metadata(),
            samples=records.samples[signal.index],
        )
        for signal in signals
        if not signal.is_reserved
    )

    record_groups = [
        parse_tal(chunk, tal_encoding) for chunk in records.annotation_chunks
    ]
    annotations = filter_record_annotations(record_groups)

    record_count = header.record_count
    if record_count is None or record_count < 0:
        record_count = records.record_count
    duration_ms = header.record_duration * record_count * 1000

    recording = Recording(
        header=header,
        signals=tuple(signals),
        columns=columns,
        annotations=tuple(annotations),
        start_ms=resolve_start(header),
        duration_ms=duration_ms,
    )
    logger.debug(
        f"Assembled recording: {len(columns)} signals, "
        f"{len(annotations)} annotations, {duration_ms} ms"
    )
    return recording


def decode_edf(
    buffer: bytes,
    header_encoding: str = DEFAULT_HEADER_ENCODING,
    tal_encoding: str = DEFAULT_TAL_ENCODING,
) -> Recording:
    """
    Decode a complete EDF/EDF+ file held in memory.

    Args:
        buffer: Entire file contents
        header_encoding: Text encoding of header fields
        tal_encoding: Text encoding of annotation channels

    Returns:
        Immutable Recording

    Raises:
        MalformedHeaderError: If the header is truncated or unusable
        TruncatedDataError: If fewer data records are present than declared

    Example:
        recording = decode_edf(Path("night.edf").read_bytes())
        eeg = recording.column("EEG Fpz-Cz").samples
    """
    header = parse_header(buffer, header_encoding)
    signals = parse_signal_headers(buffer, header, header_encoding)
    if header.is_discontinuous:
        logger.warning("EDF+D file: records are decoded as if contiguous")
    records = demultiplex_records(buffer, header, signals)
    return assemble_recording(header, signals, records, tal_encoding)


def read_edf(
    file_path: Path | str,
    header_encoding: str = DEFAULT_HEADER_ENCODING,
    tal_encoding: str = DEFAULT_TAL_ENCODING,
) -> Recording:
    """
    Read an EDF/EDF+ file from disk and decode it.

    Args:
        file_path: Path to the file

    Returns:
        Immutable Recording

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(file_path)
    buffer = file_path.read_bytes()
    logger.info(f"Read {len(buffer)} bytes from {file_path.name}")
    return decode_edf(buffer, header_encoding, tal_encoding)
