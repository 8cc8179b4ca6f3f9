"""Tests for EDF model helpers."""

import math

import numpy as np
import pytest

from edfdecode.parsers.types import (
    Annotation,
    SignalColumn,
    SignalDescriptor,
    TimestampSequence,
)


def make_descriptor(**overrides) -> SignalDescriptor:
    values = {
        "index": 0,
        "label": "EEG Fpz-Cz",
        "transducer_type": "AgAgCl cup electrodes",
        "physical_dimension": "uV",
        "physical_minimum": -440.0,
        "physical_maximum": 510.0,
        "digital_minimum": -2048,
        "digital_maximum": 2047,
        "prefiltering": "",
        "sample_count": 100,
    }
    values.update(overrides)
    return SignalDescriptor(**values)


class TestSignalDescriptor:
    """Tests for SignalDescriptor helpers."""

    def test_conversion(self):
        """Test gain/offset map the digital range onto the physical range."""
        descriptor = make_descriptor()

        physical = descriptor.digital_to_physical(np.array([-2048, 2047]))

        np.testing.assert_allclose(physical, [-440.0, 510.0])

    def test_unusable_range_is_identity(self):
        descriptor = make_descriptor(digital_minimum=None)

        assert descriptor.gain == 1.0
        assert descriptor.offset == 0.0

    def test_nan_physical_range_is_identity(self):
        descriptor = make_descriptor(physical_maximum=math.nan)

        assert descriptor.gain == 1.0
        assert descriptor.offset == 0.0

    @pytest.mark.parametrize(
        "label,annotation,checksum",
        [
            ("EDF Annotations", True, False),
            ("Crc16", False, True),
            ("EDF annotations", False, False),
            ("CRC16", False, False),
        ],
    )
    def test_reserved_labels_match_exactly(self, label, annotation, checksum):
        descriptor = make_descriptor(label=label)

        assert descriptor.is_annotation is annotation
        assert descriptor.is_checksum is checksum
        assert descriptor.is_reserved is (annotation or checksum)

    def test_record_byte_size(self):
        assert make_descriptor(sample_count=15000).record_byte_size == 30000
        assert make_descriptor(sample_count=None).record_byte_size is None


class TestAnnotation:
    def test_time_keeping(self):
        assert Annotation(onset_ms=0).is_time_keeping
        assert not Annotation(onset_ms=0, duration_ms=0).is_time_keeping
        assert not Annotation(onset_ms=0, note="x").is_time_keeping

    def test_to_dict(self):
        assert Annotation(onset_ms=1500, note="Apnea").to_dict() == {
            "onset": 1500,
            "duration": None,
            "note": "Apnea",
        }

    def test_nan_onsets_compare_equal(self):
        assert Annotation(onset_ms=float("nan"), note="x") == Annotation(
            onset_ms=float("nan"), note="x"
        )
        assert Annotation(onset_ms=float("nan")) != Annotation(onset_ms=0)


class TestSignalColumn:
    def test_equality_compares_samples(self):
        metadata = {"x": math.nan}
        first = SignalColumn(name="A", metadata=metadata, samples=np.array([1, 2]))
        same = SignalColumn(name="A", metadata=dict(metadata), samples=np.array([1, 2]))
        other = SignalColumn(name="A", metadata=metadata, samples=np.array([1, 3]))

        assert first == same
        assert first != other
        assert len(first) == 2


class TestTimestampSequence:
    """Tests for the lazy timestamp sequence."""

    @pytest.fixture
    def timestamps(self):
        return TimestampSequence(start_ms=1000.0, duration_ms=400.0, length=4)

    def test_values(self, timestamps):
        assert list(timestamps) == [1000.0, 1100.0, 1200.0, 1300.0]

    def test_indexing(self, timestamps):
        assert timestamps[0] == 1000.0
        assert timestamps[-1] == 1300.0
        assert timestamps[1:3] == [1100.0, 1200.0]
        with pytest.raises(IndexError):
            timestamps[4]

    def test_sequence_protocol(self, timestamps):
        assert len(timestamps) == 4
        assert 1200.0 in timestamps
        assert list(reversed(timestamps)) == [1300.0, 1200.0, 1100.0, 1000.0]

    def test_restartable(self, timestamps):
        assert list(timestamps) == list(timestamps)

    def test_empty(self):
        timestamps = TimestampSequence(start_ms=0.0, duration_ms=1000.0, length=0)

        assert list(timestamps) == []
        assert timestamps.step_ms == 0.0

    def test_to_numpy(self, timestamps):
        values = timestamps.to_numpy()

        assert values.dtype == np.dtype("datetime64[ms]")
        assert values[0] == np.datetime64(1000, "ms")
        assert values[-1] == np.datetime64(1300, "ms")
