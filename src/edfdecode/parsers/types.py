"""EDF format type definitions."""

import math

from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
from typing import Any, overload

import numpy as np

from pydantic import BaseModel, ConfigDict, Field

from edfdecode.constants import (
    ANNOTATION_LABEL,
    CHECKSUM_LABEL,
    EDF_PLUS_DISCONTINUOUS,
    EDF_PLUS_PREFIX,
    RESERVED_LABELS,
    SAMPLE_BYTES,
)


class EDFHeader(BaseModel):
    """
    Fixed 256-byte global header.

    Integer fields are None and float fields are nan when the stored text
    is not a valid number.
    """

    model_config = ConfigDict(frozen=True)

    version: int | None = Field(description="Format version (0 for EDF/EDF+)")
    patient_id: str = Field(description="Local patient identification")
    recording_id: str = Field(description="Local recording identification")
    start_date: str = Field(description="Start date, dd.mm.yy")
    start_time: str = Field(description="Start time, hh.mm.ss")
    header_byte_size: int | None = Field(description="Bytes in header record")
    reserved: str = Field(default="", description="Reserved (EDF+C / EDF+D)")
    record_count: int | None = Field(description="Number of data records")
    record_duration: float = Field(description="Duration of a data record (s)")
    signal_count: int | None = Field(description="Number of signals")

    @property
    def is_edf_plus(self) -> bool:
        """True if the reserved field marks the file as EDF+."""
        return self.reserved.startswith(EDF_PLUS_PREFIX)

    @property
    def is_discontinuous(self) -> bool:
        """True for EDF+D (interrupted) recordings."""
        return self.reserved.startswith(EDF_PLUS_DISCONTINUOUS)


class SignalDescriptor(BaseModel):
    """Metadata for a single channel, in interleave order."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="Position within each data record")
    label: str = Field(description="Signal name")
    transducer_type: str = Field(description="Transducer type")
    physical_dimension: str = Field(description="Units (e.g. 'uV', 'degC')")
    physical_minimum: float = Field(description="Physical minimum value")
    physical_maximum: float = Field(description="Physical maximum value")
    digital_minimum: int | None = Field(description="Digital minimum value")
    digital_maximum: int | None = Field(description="Digital maximum value")
    prefiltering: str = Field(description="Prefiltering info")
    sample_count: int | None = Field(description="Samples per data record")
    reserved: str = Field(default="", description="Reserved")

    @property
    def is_annotation(self) -> bool:
        return self.label == ANNOTATION_LABEL

    @property
    def is_checksum(self) -> bool:
        return self.label == CHECKSUM_LABEL

    @property
    def is_reserved(self) -> bool:
        """True for channels that are never emitted as signals."""
        return self.label in RESERVED_LABELS

    @property
    def record_byte_size(self) -> int | None:
        """Bytes this channel occupies in every data record."""
        if self.sample_count is None:
            return None
        return self.sample_count * SAMPLE_BYTES

    def _conversion(self) -> tuple[float, float]:
        dmin, dmax = self.digital_minimum, self.digital_maximum
        pmin, pmax = self.physical_minimum, self.physical_maximum
        if dmin is None or dmax is None or dmax - dmin <= 0:
            return 1.0, 0.0
        if math.isnan(pmin) or math.isnan(pmax):
            return 1.0, 0.0
        gain = (pmax - pmin) / (dmax - dmin)
        return gain, pmin - dmin * gain

    @property
    def gain(self) -> float:
        """Digital->physical gain (1.0 when the ranges are unusable)."""
        return self._conversion()[0]

    @property
    def offset(self) -> float:
        """Digital->physical offset (0.0 when the ranges are unusable)."""
        return self._conversion()[1]

    def digital_to_physical(self, values: np.ndarray) -> np.ndarray:
        """
        Convert digital samples to physical units.

        Decoded recordings keep samples unscaled; this is for callers
        that explicitly want physical values.
        """
        return np.asarray(values, dtype=np.float64) * self.gain + self.offset

    def metadata(self) -> dict[str, Any]:
        """Column metadata emitted alongside the samples."""
        return {
            "transducer_type": self.transducer_type,
            "physical_dimension": self.physical_dimension,
            "physical_minimum": self.physical_minimum,
            "physical_maximum": self.physical_maximum,
            "digital_minimum": self.digital_minimum,
            "digital_maximum": self.digital_maximum,
            "prefiltering": self.prefiltering,
            "sample_count": self.sample_count,
        }


class Annotation(BaseModel):
    """
    An EDF+ annotation.

    A duration of None means the TAL had no duration field, which is not
    the same as a duration of zero.
    """

    model_config = ConfigDict(frozen=True)

    onset_ms: float = Field(description="Milliseconds from recording start")
    duration_ms: float | None = Field(default=None, description="Duration (ms)")
    note: str | None = Field(default=None, description="Annotation text")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Annotation):
            return NotImplemented
        return _model_equal(self, other)

    @property
    def is_time_keeping(self) -> bool:
        """True for a bare onset marker (no duration, no note)."""
        return self.duration_ms is None and self.note is None

    def to_dict(self) -> dict[str, Any]:
        return {"onset": self.onset_ms, "duration": self.duration_ms, "note": self.note}


class SignalColumn(BaseModel):
    """One emitted channel: name, metadata and unscaled int16 samples."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    metadata: dict[str, Any]
    samples: np.ndarray

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignalColumn):
            return NotImplemented
        return (
            self.name == other.name
            and _metadata_equal(self.metadata, other.metadata)
            and np.array_equal(self.samples, other.samples)
        )

    def __len__(self) -> int:
        return len(self.samples)


def _metadata_equal(left: dict[str, Any], right: dict[str, Any]) -> bool:
    if left.keys() != right.keys():
        return False
    for key, value in left.items():
        other = right[key]
        if isinstance(value, float) and isinstance(other, float):
            if math.isnan(value) and math.isnan(other):
                continue
        if value != other:
            return False
    return True


class TimestampSequence(Sequence[float]):
    """
    Evenly spaced row timestamps, computed on demand.

    Values are UTC epoch milliseconds: ``start_ms + i * step_ms`` for
    ``i`` in ``range(length)``.
    """

    def __init__(self, start_ms: float, duration_ms: float, length: int):
        self.start_ms = start_ms
        self.length = length
        self.step_ms = duration_ms / length if length else 0.0

    @overload
    def __getitem__(self, index: int) -> float: ...

    @overload
    def __getitem__(self, index: slice) -> list[float]: ...

    def __getitem__(self, index: int | slice) -> float | list[float]:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(self.length))]
        if index < 0:
            index += self.length
        if not 0 <= index < self.length:
            raise IndexError("timestamp index out of range")
        return self.start_ms + index * self.step_ms

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[float]:
        for i in range(self.length):
            yield self.start_ms + i * self.step_ms

    def __repr__(self) -> str:
        return (
            f"<TimestampSequence start={self.start_ms} step={self.step_ms} "
            f"length={self.length}>"
        )

    def to_numpy(self) -> np.ndarray:
        """Materialize as a ``datetime64[ms]`` array."""
        values = self.start_ms + np.arange(self.length) * self.step_ms
        return values.astype("datetime64[ms]")


class Recording(BaseModel):
    """
    A fully decoded EDF/EDF+ file.

    ``columns`` holds every channel except the annotation and checksum
    channels, in header order. ``annotations`` is onset ordered and already
    filtered of per-record time-keeping markers (except record 0's).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    header: EDFHeader
    signals: tuple[SignalDescriptor, ...] = Field(description="All channels")
    columns: tuple[SignalColumn, ...] = Field(description="Emitted channels")
    annotations: tuple[Annotation, ...] = Field(default=())
    start_ms: float = Field(description="Start instant, UTC epoch ms")
    duration_ms: float = Field(description="Total duration (ms)")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recording):
            return NotImplemented
        return (
            _model_equal(self.header, other.header)
            and all(
                _model_equal(a, b) for a, b in zip(self.signals, other.signals)
            )
            and len(self.signals) == len(other.signals)
            and self.columns == other.columns
            and self.annotations == other.annotations
            and _float_equal(self.start_ms, other.start_ms)
            and _float_equal(self.duration_ms, other.duration_ms)
        )

    @property
    def start_datetime(self) -> datetime | None:
        """Start instant as an aware UTC datetime, None if unresolvable."""
        if math.isnan(self.start_ms):
            return None
        return datetime.fromtimestamp(self.start_ms / 1000, tz=UTC)

    @property
    def signal_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def row_count(self) -> int:
        """Row count of the emitted table (the longest column)."""
        return max((len(column) for column in self.columns), default=0)

    @property
    def timestamps(self) -> TimestampSequence:
        return TimestampSequence(self.start_ms, self.duration_ms, self.row_count)

    def column(self, name: str) -> SignalColumn:
        """Look up an emitted column by label."""
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def metadata(self) -> dict[str, Any]:
        """Global metadata for the table collaborator."""
        return {"start_instant": self.start_ms, "duration": self.duration_ms}

    def to_dict(self, include_samples: bool = False) -> dict[str, Any]:
        """
        Serializable view of the recording.

        Args:
            include_samples: Also emit every column's samples as lists

        Returns:
            Dictionary with metadata, signals and annotations
        """
        signals = []
        for column in self.columns:
            entry: dict[str, Any] = {
                "name": column.name,
                "metadata": dict(column.metadata),
                "sample_total": len(column),
            }
            if include_samples:
                entry["samples"] = column.samples.tolist()
            signals.append(entry)
        return {
            "metadata": self.metadata(),
            "signals": signals,
            "annotations": [annotation.to_dict() for annotation in self.annotations],
        }


def _float_equal(left: float, right: float) -> bool:
    return left == right or (math.isnan(left) and math.isnan(right))


def _model_equal(left: BaseModel, right: BaseModel) -> bool:
    """Field-wise equality that treats nan sentinels as equal."""
    if type(left) is not type(right):
        return False
    return _metadata_equal(left.model_dump(), right.model_dump())
