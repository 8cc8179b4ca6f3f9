"""
edfdecode: European Data Format (EDF/EDF+) decoder

Decodes EDF/EDF+ biosignal recordings into signals, metadata and
EDF+ annotations.
"""

from edfdecode.parsers.base import EDFError, MalformedHeaderError, TruncatedDataError
from edfdecode.parsers.edf import decode_edf, read_edf
from edfdecode.parsers.types import (
    Annotation,
    EDFHeader,
    Recording,
    SignalColumn,
    SignalDescriptor,
    TimestampSequence,
)

__all__ = [
    "Annotation",
    "EDFError",
    "EDFHeader",
    "MalformedHeaderError",
    "Recording",
    "SignalColumn",
    "SignalDescriptor",
    "TimestampSequence",
    "TruncatedDataError",
    "decode_edf",
    "read_edf",
]
