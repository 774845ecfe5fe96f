"""Tests for error types, ErrorContext and retry backoff."""

import logging

import pytest

from src.utils.errors import (
    CacheNotLoadedError,
    DataIntegrityError,
    DecodeError,
    ErrorContext,
    NewsError,
    TransportError,
    backoff_delay,
)


class TestCustomExceptions:
    """Tests for custom exception classes."""

    def test_news_error_with_context(self):
        """Test NewsError keeps keyword context and a timestamp."""
        error = NewsError("Test error", wanted=30)
        assert str(error) == "Test error"
        assert error.context["wanted"] == 30
        assert error.timestamp > 0

    def test_transport_error_with_status_code(self):
        """Test TransportError carries URL and status code."""
        error = TransportError("Unexpected response", url="http://hn.test", status_code=503)
        assert error.url == "http://hn.test"
        assert error.status_code == 503
        assert str(error) == "Unexpected response (HTTP 503)"

    def test_transport_error_without_status_code(self):
        error = TransportError("Connection refused")
        assert str(error) == "Connection refused"

    def test_decode_error(self):
        error = DecodeError("Not JSON", url="http://hn.test")
        assert isinstance(error, NewsError)
        assert error.url == "http://hn.test"

    def test_data_integrity_error(self):
        error = DataIntegrityError("Story missing", story_id=7)
        assert isinstance(error, NewsError)
        assert error.story_id == 7

    def test_cache_not_loaded_error(self):
        assert issubclass(CacheNotLoadedError, NewsError)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_success_logs_duration(self, caplog: pytest.LogCaptureFixture):
        """Test successful operation is logged with its duration."""
        caplog.set_level(logging.INFO)

        with ErrorContext("reload") as ctx:
            ctx.add_info("wanted", 3)

        assert ctx.info == {"wanted": 3}
        assert ctx.duration >= 0
        assert any("Operation 'reload' completed" in r.message for r in caplog.records)

    def test_failure_is_logged_and_not_suppressed(self, caplog: pytest.LogCaptureFixture):
        """Test failures are logged with context and re-raised."""
        caplog.set_level(logging.ERROR)

        with pytest.raises(TransportError):
            with ErrorContext("reload") as ctx:
                ctx.add_info("wanted", 3)
                raise TransportError("boom")

        failures = [r for r in caplog.records if "Operation 'reload' failed" in r.message]
        assert len(failures) == 1
        assert failures[0].error_type == "TransportError"
        assert failures[0].context == {"wanted": 3}


class TestBackoffDelay:
    """Tests for the retry schedule."""

    def test_grows_exponentially(self):
        delays = [backoff_delay(n, 5.0, 2.0) for n in range(1, 5)]
        assert delays == [5.0, 10.0, 20.0, 40.0]

    def test_capped_at_max_delay(self):
        assert backoff_delay(10, 5.0, 2.0, max_delay=900.0) == 900.0

    def test_zero_max_delay_means_no_cap(self):
        assert backoff_delay(3, 1.0, 3.0, max_delay=0) == 9.0

    def test_attempt_must_be_positive(self):
        with pytest.raises(ValueError, match="at least 1"):
            backoff_delay(0, 5.0, 2.0)
