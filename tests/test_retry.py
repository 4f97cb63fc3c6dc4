"""Tests for retry with exponential backoff."""

from unittest.mock import MagicMock, patch

import pytest

from s3publish.utils.retry import calculate_backoff_delay, retry_with_backoff


class TestCalculateBackoffDelay:
    def test_exponential_without_jitter(self):
        delays = [
            calculate_backoff_delay(n, base_delay=1.0, max_delay=60.0, multiplier=2.0, jitter=False)
            for n in range(4)
        ]
        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_capped(self):
        assert calculate_backoff_delay(10, 1.0, 15.0, 2.0, jitter=False) == 15.0

    def test_jitter_bounds(self):
        for _ in range(50):
            delay = calculate_backoff_delay(1, 1.0, 60.0, 2.0, jitter=True)
            assert 1.0 <= delay <= 3.0


@patch("s3publish.utils.retry.time.sleep")
class TestRetryWithBackoff:
    """Decorator behavior with sleeping patched out."""

    def test_success_first_try(self, mock_sleep):
        func = MagicMock(return_value="ok")
        wrapped = retry_with_backoff(max_attempts=3)(func)

        assert wrapped() == "ok"
        assert func.call_count == 1
        mock_sleep.assert_not_called()

    def test_retries_then_succeeds(self, mock_sleep):
        func = MagicMock(side_effect=[ConnectionError("reset"), "ok"])
        func.__name__ = "put"
        on_retry = MagicMock()
        wrapped = retry_with_backoff(
            max_attempts=3, base_delay=0.5, jitter=False, exceptions=(ConnectionError,), on_retry=on_retry
        )(func)

        assert wrapped() == "ok"
        mock_sleep.assert_called_once_with(0.5)
        on_retry.assert_called_once()

    def test_reraises_after_last_attempt(self, mock_sleep):
        func = MagicMock(side_effect=ConnectionError("reset"))
        func.__name__ = "put"
        wrapped = retry_with_backoff(max_attempts=3, exceptions=(ConnectionError,))(func)

        with pytest.raises(ConnectionError):
            wrapped()

        assert func.call_count == 3
        assert mock_sleep.call_count == 2

    def test_other_exceptions_not_retried(self, mock_sleep):
        func = MagicMock(side_effect=KeyError("nope"))
        func.__name__ = "put"
        wrapped = retry_with_backoff(max_attempts=3, exceptions=(ConnectionError,))(func)

        with pytest.raises(KeyError):
            wrapped()

        assert func.call_count == 1
