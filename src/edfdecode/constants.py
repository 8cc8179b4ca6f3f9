"""
Constants for EDF/EDF+ decoding.

Based on the EDF (1992) and EDF+ (2003) file format definitions.
"""

from pathlib import Path

# ============================================================================
# Global Header Layout
# ============================================================================

# (field name, width in bytes, type) in file order
HEADER_FIELDS: list[tuple[str, int, str]] = [
    ("version", 8, "int"),
    ("patient_id", 80, "str"),
    ("recording_id", 80, "str"),
    ("start_date", 8, "str"),
    ("start_time", 8, "str"),
    ("header_byte_size", 8, "int"),
    ("reserved", 44, "str"),
    ("record_count", 8, "int"),
    ("record_duration", 8, "float"),
    ("signal_count", 4, "int"),
]

HEADER_SIZE = sum(width for _, width, _ in HEADER_FIELDS)  # 256

# ============================================================================
# Signal Header Layout (field-major: all labels, then all transducers, ...)
# ============================================================================

SIGNAL_HEADER_FIELDS: list[tuple[str, int, str]] = [
    ("label", 16, "str"),
    ("transducer_type", 80, "str"),
    ("physical_dimension", 8, "str"),
    ("physical_minimum", 8, "float"),
    ("physical_maximum", 8, "float"),
    ("digital_minimum", 8, "int"),
    ("digital_maximum", 8, "int"),
    ("prefiltering", 80, "str"),
    ("sample_count", 8, "int"),
    ("reserved", 32, "str"),
]

SIGNAL_HEADER_SIZE = sum(width for _, width, _ in SIGNAL_HEADER_FIELDS)  # per signal

# ============================================================================
# Data Records
# ============================================================================

SAMPLE_BYTES = 2  # int16
SAMPLE_DTYPE = "<i2"  # signed little-endian 16-bit

UNKNOWN_RECORD_COUNT = -1  # allowed by EDF while a recording is in progress

# ============================================================================
# Reserved Channels
# ============================================================================

ANNOTATION_LABEL = "EDF Annotations"
CHECKSUM_LABEL = "Crc16"
RESERVED_LABELS = frozenset({ANNOTATION_LABEL, CHECKSUM_LABEL})

EDF_PLUS_PREFIX = "EDF+"
EDF_PLUS_DISCONTINUOUS = "EDF+D"

# ============================================================================
# TAL (Time-stamped Annotations List) Control Bytes
# ============================================================================

TAL_SEPARATOR = 0x14  # ends onset, duration and every note
TAL_DURATION = 0x15  # introduces the duration field
TAL_TERMINATOR = 0x00  # ends a TAL, then pads the rest of the record

# ============================================================================
# Start Timestamp
# ============================================================================

MONTHS = [
    "JAN",
    "FEB",
    "MAR",
    "APR",
    "MAY",
    "JUN",
    "JUL",
    "AUG",
    "SEP",
    "OCT",
    "NOV",
    "DEC",
]

# EDF was introduced in 1985; two-digit years below this are 20xx
CENTURY_PIVOT_YEAR = 85

# ============================================================================
# Configuration & Logging
# ============================================================================

DEFAULT_APP_DIR = Path.home() / ".edfdecode"
DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_PATH_ENV_VAR = "EDFDECODE_CONFIG"

DEFAULT_LOG_DIR = DEFAULT_APP_DIR / "logs"
DEFAULT_LOG_FILE = "edfdecode.log"
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_LOG_MAX_SIZE_MB = 10

DEFAULT_HEADER_ENCODING = "ascii"
DEFAULT_TAL_ENCODING = "utf-8"
