"""
Recording start resolution.

EDF stores the start as ``dd.mm.yy`` / ``hh.mm.ss`` with a two-digit year.
EDF+ files also carry ``Startdate DD-MON-YYYY`` in the recording
identification, which wins when present since it has a four-digit year.
All values are taken as UTC wall-clock time.
"""

import logging
import math
import re

from datetime import UTC, datetime, timedelta

from edfdecode.constants import CENTURY_PIVOT_YEAR, MONTHS
from edfdecode.parsers.base import parse_int
from edfdecode.parsers.types import EDFHeader

logger = logging.getLogger(__name__)

EDF_PLUS_STARTDATE = re.compile(
    r"Startdate (\d\d)-(" + "|".join(MONTHS) + r")-(\d{4})"
)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _split_ints(text: str) -> list[int | None]:
    parts = [parse_int(part) for part in text.split(".")]
    return parts + [None] * (3 - len(parts))


def resolve_century(year: int) -> int:
    """Map a two-digit EDF year onto 1985-2084."""
    return (1900 if year >= CENTURY_PIVOT_YEAR else 2000) + year


def utc_millis(
    year: int | None,
    month: int | None,
    day: int | None,
    hour: int | None,
    minute: int | None,
    second: int | None,
) -> float:
    """
    Compose calendar fields into UTC epoch milliseconds.

    Out-of-range fields roll over into the next unit (month 13 is January
    of the next year, day 0 is the last day of the previous month).

    Returns:
        Epoch milliseconds, or nan if any field is missing
    """
    fields = (year, month, day, hour, minute, second)
    if None in fields:
        return math.nan

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        instant = datetime(year, month, 1, tzinfo=UTC) + timedelta(
            days=day - 1, hours=hour, minutes=minute, seconds=second
        )
    except (ValueError, OverflowError):
        logger.debug(f"Start instant out of range: {fields}")
        return math.nan
    return float((instant - _EPOCH) // timedelta(milliseconds=1))


def resolve_start(header: EDFHeader) -> float:
    """
    Compute the absolute start instant of a recording.

    Args:
        header: Decoded global header

    Returns:
        UTC epoch milliseconds, nan when a date/time subfield is malformed
    """
    hour, minute, second = _split_ints(header.start_time)[:3]

    match = EDF_PLUS_STARTDATE.search(header.recording_id)
    if match:
        day_text, month_name, year_text = match.groups()
        day, month, year = int(day_text), MONTHS.index(month_name) + 1, int(year_text)
        logger.debug(f"Using EDF+ Startdate from recording id: {match.group(0)}")
    else:
        day, month, short_year = _split_ints(header.start_date)[:3]
        year = resolve_century(short_year) if short_year is not None else None

    start = utc_millis(year, month, day, hour, minute, second)
    if math.isnan(start):
        logger.warning(
            f"Could not resolve start instant from {header.start_date!r} "
            f"{header.start_time!r}"
        )
    return start
