"""Tests for bounded retry of cluster API calls."""

import pytest
from kapply.config.settings import RetrySettings
from kapply.reconcile.retry import call_with_retry
from kapply.utils.errors import ClusterAPIError, TransientAPIError


class Flaky:
    """Callable failing a fixed number of times before returning."""

    def __init__(self, failures, error=TransientAPIError):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return "ok"


@pytest.fixture
def settings():
    return RetrySettings(attempts=3, base_delay=1.0, max_delay=3.0)


class TestCallWithRetry:
    """Test retry behaviour."""

    def test_success_first_try(self, settings):
        delays = []

        result, attempts = call_with_retry(Flaky(0), settings, "get x", sleep=delays.append)

        assert result == "ok"
        assert attempts == 1
        assert delays == []

    def test_recovers_after_transient_failures(self, settings):
        delays = []
        func = Flaky(2)

        result, attempts = call_with_retry(func, settings, "create x", sleep=delays.append)

        assert result == "ok"
        assert attempts == 3
        assert delays == [1.0, 2.0]

    def test_gives_up_after_attempts(self, settings):
        func = Flaky(10)

        with pytest.raises(TransientAPIError) as exc_info:
            call_with_retry(func, settings, "update x", sleep=lambda _: None)

        assert func.calls == 3
        assert exc_info.value.attempts == 3

    def test_non_transient_raised_immediately(self, settings):
        func = Flaky(1, error=ClusterAPIError)

        with pytest.raises(ClusterAPIError) as exc_info:
            call_with_retry(func, settings, "delete x", sleep=lambda _: None)

        assert func.calls == 1
        assert exc_info.value.attempts == 1

    def test_delay_capped(self):
        delays = []
        settings = RetrySettings(attempts=5, base_delay=1.0, max_delay=3.0)

        call_with_retry(Flaky(4), settings, "get x", sleep=delays.append)

        assert delays == [1.0, 2.0, 3.0, 3.0]
