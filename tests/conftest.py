"""Pytest configuration and fixtures for edfdecode tests."""

import pytest

from tests.helpers.synthetic_edf import (
    SignalSpec,
    annotation_signal,
    build_edf,
    canonical_header,
    tal_block,
    time_keeping_block,
)


def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that do not require external dependencies"
    )
    config.addinivalue_line("markers", "parser: Tests for EDF decoding stages")
    config.addinivalue_line(
        "markers", "integration: Integration tests combining multiple components"
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point configuration at a per-test file so the user's config never leaks in."""
    config_path = tmp_path / "edfdecode" / "config.toml"
    monkeypatch.setenv("EDFDECODE_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def canonical_header_bytes():
    """Header-only buffer of the two-signal sleep-study example."""
    return canonical_header()


@pytest.fixture
def edf_plus_signals():
    """Two data channels, an annotation channel and a checksum channel."""
    return [
        SignalSpec(label="EEG", sample_count=4, physical_dimension="uV"),
        annotation_signal(sample_count=30),
        SignalSpec(label="Resp", sample_count=2, physical_dimension="L/min"),
        SignalSpec(label="Crc16", sample_count=1),
    ]


@pytest.fixture
def edf_plus_bytes(edf_plus_signals):
    """A three-record EDF+ file with annotations in records 0 and 2."""
    records = [
        [
            [1, -2, 3, -4],
            time_keeping_block("+0") + tal_block("+0.5", "1.5", ["Lights off"]),
            [100, 200],
            b"\xab\xcd",
        ],
        [
            [5, 6, 7, 8],
            time_keeping_block("+1"),
            [300, 400],
            b"\x01\x02",
        ],
        [
            [-32768, 32767, 0, 9],
            time_keeping_block("+2") + tal_block("+2.25", None, ["Arousal", "Snore"]),
            [500, -600],
            b"\x03\x04",
        ],
    ]
    return build_edf(
        edf_plus_signals,
        records,
        recording_id="Startdate 02-MAR-2021 X X X",
        start_date="02.03.21",
        start_time="22.15.30",
        reserved="EDF+C",
        record_duration=1,
    )
