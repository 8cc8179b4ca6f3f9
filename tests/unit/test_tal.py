"""Tests for TAL annotation decoding."""

import math

from edfdecode.parsers.tal import (
    parse_onset_block,
    parse_tal,
    seconds_to_millis,
    split_onset_blocks,
)
from edfdecode.parsers.types import Annotation


class TestParseTal:
    """Tests for parse_tal()."""

    def test_onset_only(self):
        """Test a time-keeping TAL: onset, no duration, no note."""
        annotations = parse_tal(b"+123\x14\x14\x00")

        assert annotations == [Annotation(onset_ms=123000, duration_ms=None, note=None)]

    def test_fractional_onset(self):
        annotations = parse_tal(b"+1.25\x14\x14\x00")

        assert annotations[0].onset_ms == 1250

    def test_negative_onset(self):
        annotations = parse_tal(b"-0.5\x14\x14\x00")

        assert annotations[0].onset_ms == -500

    def test_onset_and_note(self):
        """Test that an empty note slot is skipped."""
        annotations = parse_tal(b"+12\x14\x14A note\x14\x00")

        assert annotations == [Annotation(onset_ms=12000, note="A note")]

    def test_onset_and_duration(self):
        annotations = parse_tal(b"+12\x1523\x14\x00")

        assert annotations == [Annotation(onset_ms=12000, duration_ms=23000)]

    def test_onset_duration_and_note(self):
        annotations = parse_tal(b"+12\x1542\x14A note\x14\x00")

        assert annotations == [
            Annotation(onset_ms=12000, duration_ms=42000, note="A note")
        ]

    def test_multiple_notes(self):
        """Test one annotation per note, all sharing the onset."""
        annotations = parse_tal(b"+12\x14Note 1\x14Note 2\x14Note 3\x14\x00")

        assert [a.note for a in annotations] == ["Note 1", "Note 2", "Note 3"]
        assert all(a.onset_ms == 12000 for a in annotations)
        assert all(a.duration_ms is None for a in annotations)

    def test_duration_and_multiple_notes(self):
        annotations = parse_tal(b"+12\x152.5\x14Note 1\x14Note 2\x14\x00")

        assert annotations == [
            Annotation(onset_ms=12000, duration_ms=2500, note="Note 1"),
            Annotation(onset_ms=12000, duration_ms=2500, note="Note 2"),
        ]

    def test_zero_duration_is_not_missing_duration(self):
        """Test that the duration marker, not its value, sets the duration."""
        (with_zero,) = parse_tal(b"+1\x150\x14\x00")
        (without,) = parse_tal(b"+1\x14\x14\x00")

        assert with_zero.duration_ms == 0
        assert without.duration_ms is None

    def test_multiple_blocks_and_padding(self):
        """Test blocks separated by 0x14 0x00 with zero padding between."""
        buffer = (
            b"+0\x14\x14\x00"
            + b"+3.5\x151\x14Apnea\x14\x00\x00\x00"
            + b"+7\x14Snore\x14\x00"
            + b"\x00" * 20
        )

        annotations = parse_tal(buffer)

        assert annotations == [
            Annotation(onset_ms=0),
            Annotation(onset_ms=3500, duration_ms=1000, note="Apnea"),
            Annotation(onset_ms=7000, note="Snore"),
        ]

    def test_padding_only(self):
        """Test that a buffer without 0x14 yields nothing."""
        assert parse_tal(b"\x00" * 60) == []
        assert parse_tal(b"") == []

    def test_unterminated_block_is_ignored(self):
        assert parse_tal(b"+0\x14\x14\x00+5\x14Cut off") == [Annotation(onset_ms=0)]

    def test_utf8_note(self):
        annotations = parse_tal("+1\x14Schlafstörung\x14\x00".encode())

        assert annotations[0].note == "Schlafstörung"

    def test_restartable(self):
        """Test that decoding is a pure function of the buffer."""
        buffer = b"+1\x14A\x14B\x14\x00"

        assert parse_tal(buffer) == parse_tal(buffer)


class TestOnsetBlocks:
    """Tests for the block splitter and block decoder."""

    def test_split_drops_marker_and_padding(self):
        blocks = split_onset_blocks(b"+1\x14\x14\x00\x00+2\x14x\x14\x00")

        assert blocks == [b"+1\x14", b"+2\x14x"]

    def test_block_without_separator_is_onset(self):
        (annotation,) = parse_onset_block(b"+4")

        assert annotation == Annotation(onset_ms=4000)

    def test_invalid_onset_is_nan(self):
        (annotation,) = parse_onset_block(b"abc\x14note")

        assert math.isnan(annotation.onset_ms)
        assert annotation.note == "note"


class TestSecondsToMillis:
    def test_exact_decimal(self):
        assert seconds_to_millis("1.005") == 1005
        assert seconds_to_millis("+0.1") == 100

    def test_invalid(self):
        assert math.isnan(seconds_to_millis(""))
        assert math.isnan(seconds_to_millis("1s"))

    def test_out_of_range_is_nan(self):
        assert math.isnan(seconds_to_millis("1e999999"))

    def test_out_of_range_onset_does_not_fail(self):
        (annotation,) = parse_tal(b"+1e999999\x14\x14\x00")

        assert math.isnan(annotation.onset_ms)

    def test_nan_results_share_the_sentinel(self):
        assert seconds_to_millis("nan") is math.nan
        assert parse_tal(b"nan\x14\x14\x00") == parse_tal(b"nan\x14\x14\x00")
