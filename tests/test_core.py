"""Tests for retry, circuit breaker and bulkhead."""

from unittest.mock import MagicMock, patch

import pytest

from notion_sync.core.circuit_breaker import Bulkhead, CircuitBreaker, CircuitOpenError
from notion_sync.core.retry import backoff_delay, call_with_retry, retry_on_status


def response(status, headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    return resp


class TestRetry:
    """Exponential backoff on 409 / 429 / 503."""

    def test_backoff_delay(self):
        assert backoff_delay(0, 0.25) == 0.25
        assert backoff_delay(3, 0.25) == 2.0

    def test_retry_after_header_raises_delay(self):
        assert backoff_delay(0, 0.25, response(429, {"Retry-After": "2"})) == 2.0
        assert backoff_delay(4, 0.25, response(429, {"Retry-After": "1"})) == 4.0
        assert backoff_delay(0, 0.25, response(429, {"Retry-After": "soon"})) == 0.25

    @patch("notion_sync.core.retry.time.sleep")
    def test_retries_until_success(self, mock_sleep):
        func = MagicMock(side_effect=[response(429), response(409), response(200)])

        result = call_with_retry(func, "GET", max_retries=5, base_delay=0.25)

        assert result.status_code == 200
        assert func.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.25, 0.5]

    @patch("notion_sync.core.retry.time.sleep")
    def test_gives_up_and_returns_last_response(self, mock_sleep):
        func = MagicMock(return_value=response(503))

        result = call_with_retry(func, max_retries=2, base_delay=0.25)

        assert result.status_code == 503
        assert func.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("notion_sync.core.retry.time.sleep")
    def test_other_statuses_not_retried(self, mock_sleep):
        for status in (200, 400, 404, 500):
            func = MagicMock(return_value=response(status))
            assert call_with_retry(func, max_retries=3).status_code == status
            assert func.call_count == 1
        mock_sleep.assert_not_called()

    @patch("notion_sync.core.retry.time.sleep")
    def test_decorator_passes_arguments(self, mock_sleep):
        calls = []

        @retry_on_status(max_retries=1, base_delay=0.1)
        def send(method, url, **kwargs):
            calls.append((method, url, kwargs))
            return response(200)

        send("GET", "https://x", params={"a": 1})
        assert calls == [("GET", "https://x", {"params": {"a": 1}})]


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestCircuitBreaker:
    """State transitions."""

    def _failing(self):
        raise ValueError("boom")

    def _breaker(self, clock):
        return CircuitBreaker(failure_threshold=3, reset_seconds=3.0,
                              failure_exceptions=(ValueError,), clock=clock)

    def test_opens_after_threshold(self):
        clock = FakeClock()
        breaker = self._breaker(clock)

        for _ in range(3):
            with pytest.raises(ValueError):
                breaker.call(self._failing)

        assert breaker.state == CircuitBreaker.OPEN
        func = MagicMock()
        with pytest.raises(CircuitOpenError):
            breaker.call(func)
        func.assert_not_called()

    def test_success_resets_failure_count(self):
        breaker = self._breaker(FakeClock())

        for _ in range(2):
            with pytest.raises(ValueError):
                breaker.call(self._failing)
        assert breaker.call(lambda: "ok") == "ok"
        for _ in range(2):
            with pytest.raises(ValueError):
                breaker.call(self._failing)

        assert breaker.state == CircuitBreaker.CLOSED

    def test_half_open_trial(self):
        clock = FakeClock()
        breaker = self._breaker(clock)
        for _ in range(3):
            with pytest.raises(ValueError):
                breaker.call(self._failing)

        clock.now += 3.0
        assert breaker.state == CircuitBreaker.HALF_OPEN
        assert breaker.call(lambda: 1) == 1
        assert breaker.state == CircuitBreaker.CLOSED

    def test_half_open_failure_reopens(self):
        clock = FakeClock()
        breaker = self._breaker(clock)
        for _ in range(3):
            with pytest.raises(ValueError):
                breaker.call(self._failing)

        clock.now += 3.5
        with pytest.raises(ValueError):
            breaker.call(self._failing)
        assert breaker.state == CircuitBreaker.OPEN

    def test_other_exceptions_not_counted(self):
        breaker = self._breaker(FakeClock())

        def bad_request():
            raise KeyError("x")

        for _ in range(5):
            with pytest.raises(KeyError):
                breaker.call(bad_request)
        assert breaker.state == CircuitBreaker.CLOSED


class TestBulkhead:
    """Concurrency limit."""

    def test_limits_slots(self):
        bulkhead = Bulkhead(2)
        with bulkhead:
            with bulkhead:
                assert bulkhead._semaphore.acquire(blocking=False) is False
            assert bulkhead._semaphore.acquire(blocking=False) is True
            bulkhead._semaphore.release()

    def test_releases_on_error(self):
        bulkhead = Bulkhead(1)
        with pytest.raises(RuntimeError):
            with bulkhead:
                raise RuntimeError("x")
        assert bulkhead._semaphore.acquire(blocking=False) is True
