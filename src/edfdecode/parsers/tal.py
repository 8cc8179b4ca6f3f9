"""
TAL (Time-stamped Annotations List) decoding.

Each data record's annotation channel holds one TAL buffer. Onset blocks
are separated by ``0x14 0x00`` followed by optional ``0x00`` padding::

    onset [0x15 duration] 0x14 (note 0x14)* 0x00

Onset and duration are decimal seconds (``+12``, ``-0.5``, ``2.5``) and are
stored as milliseconds.
"""

import logging
import math

from decimal import Decimal, DecimalException
from enum import Enum

from edfdecode.constants import (
    DEFAULT_TAL_ENCODING,
    TAL_DURATION,
    TAL_SEPARATOR,
    TAL_TERMINATOR,
)
from edfdecode.parsers.types import Annotation

logger = logging.getLogger(__name__)


class TalField(Enum):
    """Field of an onset block the scanner is currently reading."""

    ONSET = "onset"
    DURATION = "duration"
    NOTE = "note"


def seconds_to_millis(text: str) -> float:
    """
    Convert TAL seconds text to milliseconds.

    Decimal arithmetic keeps ``1.005`` at exactly 1005 ms.

    Returns:
        Milliseconds, or nan if the text is not a number or out of range
    """
    try:
        millis = float(Decimal(text.strip()) * 1000)
    except DecimalException:
        logger.debug(f"Invalid TAL time value: {text!r}")
        return math.nan
    if math.isnan(millis):
        return math.nan
    return millis


def split_onset_blocks(buffer: bytes) -> list[bytes]:
    """
    Split a TAL buffer into onset blocks.

    A block ends at a ``0x14 0x00`` pair; the ``0x14`` is dropped, and any
    further ``0x00`` padding is skipped. Text after the last pair is not a
    complete block and is ignored.
    """
    blocks = []
    end = len(buffer)
    start = 0
    offset = 0
    while offset < end - 1:
        if buffer[offset] == TAL_SEPARATOR and buffer[offset + 1] == TAL_TERMINATOR:
            if start < offset:
                blocks.append(bytes(buffer[start:offset]))
            offset += 1
            while offset < end and buffer[offset] == TAL_TERMINATOR:
                offset += 1
            start = offset
        else:
            offset += 1
    return blocks


def parse_onset_block(
    block: bytes, encoding: str = DEFAULT_TAL_ENCODING
) -> list[Annotation]:
    """
    Decode a single onset block.

    Args:
        block: Block bytes without its final ``0x14 0x00``
        encoding: Text encoding of the TAL

    Returns:
        One annotation per non-empty note, or a single note-less
        annotation when the block carries no text
    """
    state = TalField.ONSET
    field_start = 0
    onset_text = ""
    duration_text: str | None = None
    notes: list[str] = []

    def take(stop: int) -> str:
        return block[field_start:stop].decode(encoding, errors="replace")

    for offset, byte in enumerate(block):
        if byte == TAL_DURATION and state is TalField.ONSET:
            onset_text = take(offset)
            state = TalField.DURATION
            field_start = offset + 1
        elif byte == TAL_SEPARATOR:
            text = take(offset)
            if state is TalField.ONSET:
                onset_text = text
            elif state is TalField.DURATION:
                duration_text = text
            elif text:
                notes.append(text)
            state = TalField.NOTE
            field_start = offset + 1

    trailing = take(len(block))
    if state is TalField.ONSET:
        onset_text = trailing
    elif state is TalField.DURATION:
        duration_text = trailing
    elif trailing:
        notes.append(trailing)

    onset = seconds_to_millis(onset_text)
    duration = seconds_to_millis(duration_text) if duration_text is not None else None

    if not notes:
        return [Annotation(onset_ms=onset, duration_ms=duration, note=None)]
    return [
        Annotation(onset_ms=onset, duration_ms=duration, note=note) for note in notes
    ]


def parse_tal(buffer: bytes, encoding: str = DEFAULT_TAL_ENCODING) -> list[Annotation]:
    """
    Decode every annotation in one record's TAL buffer.

    Args:
        buffer: Annotation channel bytes of a single data record
        encoding: Text encoding of the TAL

    Returns:
        Annotations in buffer order; empty for a padding-only buffer
    """
    annotations: list[Annotation] = []
    for block in split_onset_blocks(buffer):
        annotations.extend(parse_onset_block(block, encoding))
    return annotations
