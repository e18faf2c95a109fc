"""
Tests for the conversion use case.
"""

import io
import json

import pytest

from logs2goaccess import build_use_case, convert
from logs2goaccess.application import ConvertLogsUseCase, ErrorPolicy
from logs2goaccess.core.exceptions import ConfigurationError, NormalizationError, ParseError, SinkError
from logs2goaccess.core.goaccess import format_record
from logs2goaccess.core.security import MAX_LINE_LENGTH
from logs2goaccess.infrastructure.filtering import FilterConfig
from logs2goaccess.infrastructure.normalization import NormalizationPipeline, URLRewriteNormalizer
from logs2goaccess.infrastructure.sinks import StreamSink
from logs2goaccess.parsers import registry

from conftest import ListSink, ListSource


class RecordingReporter:
    def __init__(self):
        self.snapshots = []

    def offer(self, stats):
        self.snapshots.append(stats)


class TestConvertLogsUseCase:
    """Tests for the orchestration of source, parser, filters and sink."""

    def test_converts_every_line(self, alb_line):
        sink = ListSink()
        use_case = ConvertLogsUseCase(
            source=ListSource([alb_line, alb_line]),
            parser=registry.create("aws:alb"),
            sink=sink,
        )
        stats = use_case.execute()

        assert len(sink.records) == 2
        assert sink.flushed
        assert stats.lines_read == 2
        assert stats.included == 2
        assert stats.skipped == 0

    def test_blank_lines_are_ignored(self, caddy_line):
        sink = ListSink()
        stats = ConvertLogsUseCase(
            source=ListSource(["", caddy_line, "   ", caddy_line + "\r\n"]),
            parser=registry.create("caddy"),
            sink=sink,
        ).execute()

        assert stats.lines_read == 2
        assert stats.included == 2

    def test_soft_skips_are_counted(self, cloudfront_header, cloudfront_line):
        sink = ListSink()
        stats = ConvertLogsUseCase(
            source=ListSource(cloudfront_header + [cloudfront_line]),
            parser=registry.create("aws:cloudfront"),
            sink=sink,
        ).execute()

        assert stats.lines_read == 3
        assert stats.skipped == 2
        assert stats.included == 1
        assert stats.failed == 0

    def test_filter_rejections_are_skips(self, caddy_line):
        sink = ListSink()
        stats = ConvertLogsUseCase(
            source=ListSource([caddy_line]),
            parser=registry.create("caddy"),
            sink=sink,
            filters=FilterConfig(include_host_prefixes=["api."]).build(),
        ).execute()

        assert sink.records == []
        assert stats.skipped == 1

    def test_normalizer_runs_before_sink(self, caddy_line):
        sink = ListSink()
        ConvertLogsUseCase(
            source=ListSource([caddy_line]),
            parser=registry.create("caddy"),
            sink=sink,
            normalizer=NormalizationPipeline([URLRewriteNormalizer([r"\?.*$=>"])]),
        ).execute()

        assert sink.records[0].url == "/index.html"

    def test_strict_aborts_on_parse_error(self, caddy_line):
        sink = ListSink()
        use_case = ConvertLogsUseCase(
            source=ListSource([caddy_line, caddy_line, "not json", caddy_line], path="app.log"),
            parser=registry.create("caddy"),
            sink=sink,
        )
        with pytest.raises(ParseError) as exc_info:
            use_case.execute()

        assert len(sink.records) == 2
        error = exc_info.value
        assert error.line == "not json"
        assert error.line_number == 3
        assert error.location == "app.log"
        assert error.parser_name == "caddy"

    def test_lenient_counts_failures(self, caddy_line):
        sink = ListSink()
        stats = ConvertLogsUseCase(
            source=ListSource([caddy_line, "not json", caddy_line]),
            parser=registry.create("caddy"),
            sink=sink,
            error_policy=ErrorPolicy.LENIENT,
        ).execute()

        assert len(sink.records) == 2
        assert stats.lines_read == 3
        assert stats.failed == 1
        assert stats.skipped == 1

    @pytest.mark.parametrize("bad_line", [
        "[" * 100000 + "]" * 100000,
        '{"ts": 1, "status": 200, "size": 0, "request": {"headers": "oops"}}',
        '{"ts": 1, "status": 200, "size": 0, "request": {}, "resp_headers": [1, 2]}',
    ])
    def test_lenient_counts_malformed_json(self, caddy_line, bad_line):
        sink = ListSink()
        stats = ConvertLogsUseCase(
            source=ListSource([caddy_line, bad_line, caddy_line]),
            parser=registry.create("caddy"),
            sink=sink,
            error_policy=ErrorPolicy.LENIENT,
        ).execute()

        assert len(sink.records) == 2
        assert stats.failed == 1
        assert stats.skipped == 1

    def test_overlong_line_is_a_parse_error(self):
        use_case = ConvertLogsUseCase(
            source=ListSource(["x" * (MAX_LINE_LENGTH + 1)]),
            parser=registry.create("caddy"),
            sink=ListSink(),
        )
        with pytest.raises(ParseError):
            use_case.execute()

    def test_normalization_error_is_fatal(self, caddy_line):
        class Broken:
            name = "broken"

            def normalize(self, record):
                raise RuntimeError("boom")

        use_case = ConvertLogsUseCase(
            source=ListSource([caddy_line]),
            parser=registry.create("caddy"),
            sink=ListSink(),
            normalizer=NormalizationPipeline([Broken()]),
            error_policy=ErrorPolicy.LENIENT,
        )
        with pytest.raises(NormalizationError):
            use_case.execute()

    def test_stats_offered_after_every_line(self, caddy_line):
        reporter = RecordingReporter()
        ConvertLogsUseCase(
            source=ListSource([caddy_line, "", caddy_line]),
            parser=registry.create("caddy"),
            sink=ListSink(),
            stats_reporter=reporter,
        ).execute()

        assert [s.lines_read for s in reporter.snapshots] == [1, 2]


class TestStreamSink:
    """Tests for the text stream sink."""

    def test_writes_one_line_per_record(self, sample_record):
        buffer = io.StringIO()
        sink = StreamSink(buffer)
        sink.write(sample_record)
        sink.write(sample_record)
        sink.flush()

        assert buffer.getvalue() == (format_record(sample_record) + "\n") * 2
        assert sink.records_written == 2

    def test_write_failure(self, sample_record):
        class BrokenStream(io.StringIO):
            def write(self, text):
                raise OSError("disk full")

        with pytest.raises(SinkError) as exc_info:
            StreamSink(BrokenStream()).write(sample_record)
        assert "disk full" in exc_info.value.message


class TestConvertFunction:
    """Tests for the convenience API."""

    def test_convert_file(self, tmp_path, alb_line):
        log_file = tmp_path / "alb.log"
        log_file.write_text(alb_line + "\n" + alb_line.replace("www.example.com", "api.example.com") + "\n")
        output = io.StringIO()

        stats = convert(
            [str(log_file)],
            format="alb",
            output=output,
            include_vhosts="www.",
            normalize_urls=["^/path=>/p"],
        )

        lines = output.getvalue().splitlines()
        assert len(lines) == 1
        assert "\t/p?x=1\t" in lines[0]
        assert stats.included == 1
        assert stats.skipped == 1


class TestMissingRequiredField:
    """Three Caddy lines, the last one without a status."""

    @pytest.fixture
    def lines(self, caddy_line):
        broken = json.loads(caddy_line)
        del broken["status"]
        return [caddy_line, caddy_line, json.dumps(broken)]

    def test_strict_emits_two_records_then_aborts(self, lines):
        sink = ListSink()
        use_case = ConvertLogsUseCase(
            source=ListSource(lines),
            parser=registry.create("caddy"),
            sink=sink,
        )
        with pytest.raises(ParseError) as exc_info:
            use_case.execute()
        assert len(sink.records) == 2
        assert "status" in exc_info.value.message

    def test_lenient_attempts_three_and_skips_one(self, lines):
        sink = ListSink()
        stats = ConvertLogsUseCase(
            source=ListSource(lines),
            parser=registry.create("caddy"),
            sink=sink,
            error_policy=ErrorPolicy.LENIENT,
        ).execute()
        assert stats.lines_read == 3
        assert stats.skipped == 1
        assert stats.included == 2


class TestBuildUseCase:
    """Tests for pipeline assembly shared by convert() and the CLI."""

    def test_wires_every_stage(self, tmp_path):
        log_file = tmp_path / "access.log"
        log_file.write_text("x\n")
        use_case = build_use_case(
            [str(log_file)],
            "alb",
            output=io.StringIO(),
            exclude_urls="/health",
            normalize_urls=["^/v1/=>/"],
            lenient=True,
        )

        assert use_case.parser.name == "aws:alb"
        assert use_case.error_policy == ErrorPolicy.LENIENT
        assert use_case.normalizer is not None
        assert use_case.source.metadata()["locations"] == "1"

    @pytest.mark.parametrize("kwargs", [
        {"format": "apache"},
        {"format": "caddy", "normalize_urls": ["no-separator"]},
        {"format": "caddy", "date_after": "not a date"},
        {"format": "caddy", "locations": ["gopher:somewhere"]},
    ])
    def test_configuration_errors_before_reading(self, kwargs):
        kwargs.setdefault("locations", ["-"])
        with pytest.raises(ConfigurationError):
            build_use_case(**kwargs)
