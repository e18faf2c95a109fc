"""
Tests for the URL normalization pipeline.
"""

import pytest

from logs2goaccess.core.exceptions import ConfigurationError, NormalizationError
from logs2goaccess.infrastructure.normalization import (
    NormalizationPipeline,
    NormalizationStep,
    URLRewriteNormalizer,
)


class TestURLRewriteNormalizer:
    """Tests for regex URL rewriting."""

    def test_prefix_rewrite(self, sample_record):
        sample_record.url = "/api/v1/users"
        URLRewriteNormalizer(["^/api/v1/=>/api/"]).normalize(sample_record)
        assert sample_record.url == "/api/users"

    def test_rules_apply_in_order(self, sample_record):
        sample_record.url = "/api/v1/users/42"
        normalizer = URLRewriteNormalizer([
            "^/api/v1/=>/api/",
            r"/users/\d+=>/users/:id",
        ])
        assert normalizer.normalize(sample_record).url == "/api/users/:id"

    def test_later_rule_sees_earlier_output(self, sample_record):
        sample_record.url = "/a"
        normalizer = URLRewriteNormalizer(["^/a$=>/b", "^/b$=>/c"])
        assert normalizer.normalize(sample_record).url == "/c"

    def test_every_match_is_replaced(self, sample_record):
        sample_record.url = "/1/2/3"
        normalizer = URLRewriteNormalizer([r"\d=>N"])
        assert normalizer.normalize(sample_record).url == "/N/N/N"

    def test_group_references(self, sample_record):
        sample_record.url = "/shop/item-123"
        normalizer = URLRewriteNormalizer([r"^/(\w+)/item-\d+=>/\1/item"])
        assert normalizer.normalize(sample_record).url == "/shop/item"

    def test_repeated_group_rule(self, sample_record):
        sample_record.url = "/static/css/site/main.css"
        normalizer = URLRewriteNormalizer(["^/static(/[^/]+)+=>/static/*"])
        assert normalizer.normalize(sample_record).url == "/static/*"

    def test_splits_on_first_separator(self, sample_record):
        sample_record.url = "/old"
        normalizer = URLRewriteNormalizer(["^/old=>/new=>x"])
        assert normalizer.normalize(sample_record).url == "/new=>x"

    def test_no_match_keeps_url(self, sample_record):
        URLRewriteNormalizer(["^/api/=>/"]).normalize(sample_record)
        assert sample_record.url == "/index.html?a=1"

    def test_missing_separator(self):
        with pytest.raises(ConfigurationError) as exc_info:
            URLRewriteNormalizer(["^/api/v1/"])
        assert "does not contain a replacement" in exc_info.value.message

    def test_invalid_regex(self):
        with pytest.raises(ConfigurationError):
            URLRewriteNormalizer(["^/api/(v1=>/api/"])

    def test_invalid_group_reference(self):
        with pytest.raises(ConfigurationError):
            URLRewriteNormalizer([r"^/api/=>/\2/"])

    def test_is_a_normalization_step(self):
        assert isinstance(URLRewriteNormalizer([]), NormalizationStep)


class TestNormalizationPipeline:
    """Tests for the normalization pipeline."""

    def test_empty_pipeline_is_identity(self, sample_record):
        pipeline = NormalizationPipeline()
        assert pipeline.process_one(sample_record) is sample_record
        assert len(pipeline) == 0

    def test_add_step_chains(self, sample_record):
        sample_record.url = "/a"
        pipeline = (
            NormalizationPipeline()
            .add_step(URLRewriteNormalizer(["^/a=>/b"]))
            .add_step(URLRewriteNormalizer(["^/b=>/c"]))
        )
        assert pipeline.process_one(sample_record).url == "/c"
        assert pipeline.stats == {"processed": 1, "steps": 2}

    def test_step_failure_is_wrapped(self, sample_record):
        class Broken:
            name = "broken"

            def normalize(self, record):
                raise RuntimeError("boom")

        pipeline = NormalizationPipeline([Broken()])
        with pytest.raises(NormalizationError) as exc_info:
            pipeline.process_one(sample_record)
        assert exc_info.value.step == "broken"
        assert "boom" in exc_info.value.message
