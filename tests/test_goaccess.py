"""
Tests for the GoAccess output format and core models.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from logs2goaccess.core.goaccess import (
    OutputOptions,
    TimestampLayout,
    describe_format,
    format_record,
    log_format,
)
from logs2goaccess.core.models import AccessRecord, ConversionStats, ParseResult


class TestAccessRecord:
    """Tests for the AccessRecord model."""

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValueError):
            AccessRecord(timestamp=datetime(2024, 3, 1, 12, 0, 0))

    def test_defaults(self):
        record = AccessRecord(timestamp=datetime(2024, 3, 1, tzinfo=timezone.utc))
        assert record.status == 0
        assert record.size == 0
        assert record.url == ""
        assert record.duration_ms == 0

    @pytest.mark.parametrize("duration,expected", [
        (timedelta(milliseconds=12, microseconds=999), 12),
        (timedelta(seconds=1.5), 1500),
        (timedelta(microseconds=999), 0),
    ])
    def test_duration_ms_truncates(self, duration, expected):
        record = AccessRecord(timestamp=datetime(2024, 3, 1, tzinfo=timezone.utc), duration=duration)
        assert record.duration_ms == expected

    def test_to_dict(self, sample_record):
        data = sample_record.to_dict()
        assert data["timestamp"] == "2024-03-01T12:00:00+00:00"
        assert data["status"] == 200
        assert data["duration_ms"] == 12


class TestParseResult:

    def test_ok(self, sample_record):
        result = ParseResult.ok(sample_record)
        assert result.record is sample_record
        assert not result.skipped

    def test_skip(self):
        result = ParseResult.skip("comment line")
        assert result.record is None
        assert result.skipped
        assert result.reason == "comment line"


class TestConversionStats:

    def test_snapshot_is_detached(self):
        stats = ConversionStats(lines_read=3, included=2, skipped=1)
        snapshot = stats.snapshot()
        stats.lines_read += 1
        assert snapshot.lines_read == 3
        assert snapshot.started_at == stats.started_at

    def test_to_dict(self):
        data = ConversionStats(lines_read=10, included=7, skipped=3, failed=1).to_dict()
        assert data["lines_read"] == 10
        assert data["failed"] == 1
        assert "lines_per_second" in data


class TestLogFormat:
    """Tests for the GoAccess format description."""

    def test_default_columns(self):
        assert log_format() == "\\t".join([
            "%d", "%t", "%v", "%e", "%h", "%m", "%U", "%s", "%b",
            "%R", "%u", "%K", "%k", "%M", "%L",
        ])

    def test_with_protocol(self):
        columns = log_format(OutputOptions(with_protocol=True)).split("\\t")
        assert columns[columns.index("%U") + 1] == "%H"

    def test_combined_layout(self):
        columns = log_format(OutputOptions(layout=TimestampLayout.COMBINED)).split("\\t")
        assert columns[0] == "%x"
        assert "%d" not in columns

    def test_describe_split(self):
        lines = describe_format().splitlines()
        assert lines[0].startswith("log-format %d\\t%t\\t%v")
        assert lines[1] == "date-format %Y-%m-%d"
        assert lines[2] == "time-format %H:%M:%S"

    def test_describe_combined(self):
        lines = describe_format(OutputOptions(layout=TimestampLayout.COMBINED)).splitlines()
        assert lines[1] == "datetime-format %Y-%m-%dT%H:%M:%S"
        assert len(lines) == 2


class TestFormatRecord:
    """Tests for record serialization."""

    def test_split_layout(self, sample_record):
        assert format_record(sample_record) == "\t".join([
            "2024-03-01", "12:00:00", "www.example.com", "alice", "198.51.100.2",
            "GET", "/index.html?a=1", "200", "612", "https://ref.example/",
            "curl/8.0", "TLSv1.3", "TLS_AES_128_GCM_SHA256", "text/html", "12",
        ])

    def test_column_count_matches_log_format(self, sample_record):
        for options in (
            OutputOptions(),
            OutputOptions(with_protocol=True),
            OutputOptions(layout=TimestampLayout.COMBINED),
        ):
            columns = log_format(options).split("\\t")
            assert len(format_record(sample_record, options).split("\t")) == len(columns)

    def test_combined_layout(self, sample_record):
        line = format_record(sample_record, OutputOptions(layout=TimestampLayout.COMBINED))
        assert line.startswith("2024-03-01T12:00:00\twww.example.com\t")

    def test_with_protocol(self, sample_record):
        fields = format_record(sample_record, OutputOptions(with_protocol=True)).split("\t")
        assert fields[7] == "HTTP/2.0"
        assert fields[8] == "200"

    def test_output_timezone(self, sample_record):
        line = format_record(sample_record, OutputOptions(tz=ZoneInfo("Europe/Berlin")))
        assert line.startswith("2024-03-01\t13:00:00\t")

    def test_empty_fields_keep_their_columns(self):
        record = AccessRecord(timestamp=datetime(2024, 3, 1, tzinfo=timezone.utc), status=404)
        fields = format_record(record).split("\t")
        assert len(fields) == 15
        assert fields[2:7] == ["", "", "", "", ""]
        assert fields[7] == "404"
        assert fields[-1] == "0"

    def test_control_characters_are_escaped(self, sample_record):
        sample_record.user_agent = "evil\tagent\r\nnext"
        line = format_record(sample_record)
        assert "\n" not in line
        assert "\r" not in line
        assert len(line.split("\t")) == 15
        assert "evil\\tagent\\r\\nnext" in line
