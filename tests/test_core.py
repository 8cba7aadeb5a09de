"""
Tests for text helpers, retry, tuning and log serialization.
"""

import json
from datetime import datetime
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock

from asgi_correlation_id.context import correlation_id

from codeheal.core.cache import make_cache_key
from codeheal.core.log import log_serializer
from codeheal.core.retry import backoff_delays, with_retry
from codeheal.core.tuning import HealingConfig, get_healing_config
from codeheal.util.text import extract_quoted_name, levenshtein_distance, similarity, split_lines


class TestTextHelpers:
    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_similarity(self):
        assert similarity("Buton", "Button") == pytest.approx(5 / 6)
        assert similarity("", "") == 1.0
        assert similarity("abc", "xyz") == 0.0

    def test_split_lines_keeps_trailing_empty_line(self):
        assert split_lines("a\nb\n") == ["a", "b", ""]

    def test_extract_quoted_name(self):
        assert extract_quoted_name("Cannot find name 'Foo'.") == "Foo"
        assert extract_quoted_name('Property "bar" does not exist') == "bar"
        assert extract_quoted_name("no quotes here") is None
        assert extract_quoted_name("x 'a' y 'b'", r"y '(\w+)'") == "b"

    def test_cache_key_is_stable(self):
        assert make_cache_key("text") == make_cache_key("text")
        assert make_cache_key("text") != make_cache_key("other")

    def test_cache_key_accepts_lone_surrogates(self):
        key = make_cache_key("bad \ud800")
        assert isinstance(key, str)
        assert key != make_cache_key("bad ")


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        fn = AsyncMock(side_effect=[ConnectionError("flaky"), "ok"])
        assert await with_retry(fn, max_retries=2, base_delay=0) == "ok"
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self):
        fn = AsyncMock(side_effect=ValueError("bad input"))
        with pytest.raises(ValueError):
            await with_retry(fn, max_retries=3, base_delay=0, retryable=(ConnectionError,))
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        fn = AsyncMock(side_effect=TimeoutError())
        with pytest.raises(TimeoutError):
            await with_retry(fn, max_retries=1, base_delay=0)
        assert fn.await_count == 2


class TestTuning:
    def test_defaults(self):
        config = HealingConfig()
        assert config.max_iterations == 5
        assert config.similarity_threshold == 0.5
        assert config.max_schema_suggestions == 3

    def test_overrides(self):
        config = get_healing_config(max_iterations=2, use_ai=False)
        assert config.max_iterations == 2
        assert config.use_ai is False


class TestLogSerializer:
    @staticmethod
    def _record(message):
        return {
            "time": datetime(2026, 1, 2, 3, 4, 5, 678000),
            "level": SimpleNamespace(name="INFO"),
            "name": "codeheal.orchestration.orchestrator",
            "message": message,
        }

    def test_includes_session_id(self):
        token = correlation_id.set("01SESSION")
        try:
            entry = json.loads(log_serializer(self._record("accepted fix")))
        finally:
            correlation_id.reset(token)

        assert entry["asctime"] == "2026-01-02 03:04:05,678"
        assert entry["levelname"] == "INFO"
        assert entry["message"] == "01SESSION - codeheal.orchestration.orchestrator - accepted fix"

    def test_long_messages_are_truncated(self):
        entry = json.loads(log_serializer(self._record("x" * 10_000)))
        assert entry["message"].endswith("...")
        assert len(entry["message"]) < 10_000


class TestBackoff:
    def test_delays_double_and_cap(self):
        assert list(backoff_delays(5, base_delay=1.0, max_delay=5.0)) == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_no_retries(self):
        assert list(backoff_delays(0)) == []
