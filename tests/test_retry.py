"""
Unit tests for the bounded retry executor.

Tests cover:
- Linear backoff wait sequence
- Success after transient failures
- Exhaustion after the attempt budget
- Immediate propagation of non-transient errors
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from api.error_handling import (
    GravityUpdateError,
    GravityUpdateExhaustedError,
    RetryExhaustedError,
    TransientNetworkError,
)
from api.host import Host
from api.retry import RetryExecutor, RetryPolicy, linear

HOST = Host(base_url="http://10.0.0.3", password="secret")
PATH = "/api/action/gravity"


def transient(status=None):
    return TransientNetworkError(HOST, PATH, status=status, cause=None if status else ConnectionRefusedError())


def sleep_waits(mock_sleep):
    return [call.args[0] for call in mock_sleep.await_args_list]


class TestRetryPolicy:
    """Test RetryPolicy construction and validation."""

    def test_default_policy(self):
        """Default policy allows one initial attempt plus five retries."""
        policy = RetryPolicy()
        assert policy.max_attempts == 6
        assert policy.base_delay == 1.0

    def test_from_retry_count(self):
        """Retry count excludes the initial attempt."""
        assert RetryPolicy.from_retry_count(2).max_attempts == 3
        assert RetryPolicy.from_retry_count(0).max_attempts == 1

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError, match="max_attempts must be at least 1"):
            RetryPolicy(max_attempts=0)

    def test_linear_generator_primes_for_backoff(self):
        """First next() primes the generator the way backoff expects."""
        gen = linear(base=2)
        assert next(gen) is None
        assert [next(gen) for _ in range(3)] == [2, 4, 6]


class TestRetryExecutor:
    """Test the retry state machine."""

    @pytest.fixture
    def logger(self):
        return Mock()

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, logger):
        """No waits when the operation succeeds right away."""
        operation = AsyncMock(return_value=True)
        executor = RetryExecutor(RetryPolicy(max_attempts=3), logger_obj=logger)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            assert await executor.run(operation, HOST, PATH) is True

        operation.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_after_transient_failures(self, logger):
        """k transient failures then success: k+1 attempts, waits base..k*base."""
        operation = AsyncMock(side_effect=[transient(), transient(503), transient(), True])
        executor = RetryExecutor(RetryPolicy(max_attempts=6, base_delay=2.0), logger_obj=logger)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await executor.run(operation, HOST, PATH)

        assert result is True
        assert operation.await_count == 4
        assert sleep_waits(mock_sleep) == [2.0, 4.0, 6.0]
        assert logger.warning.call_count == 3

    @pytest.mark.asyncio
    async def test_exhaustion_reports_total_attempts(self, logger):
        """A retry count of 2 allows 3 attempts and reports all of them."""
        operation = AsyncMock(side_effect=transient())
        executor = RetryExecutor(
            RetryPolicy.from_retry_count(2),
            logger_obj=logger,
            exhausted_error=GravityUpdateExhaustedError,
        )

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(GravityUpdateExhaustedError) as exc_info:
                await executor.run(operation, HOST, PATH)

        assert operation.await_count == 3
        assert sleep_waits(mock_sleep) == [1.0, 2.0]
        assert exc_info.value.message == "Exhausted 3 retries updating gravity on http://10.0.0.3."
        assert exc_info.value.verbose["host"] == "http://10.0.0.3"
        assert exc_info.value.verbose["path"] == PATH
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, TransientNetworkError)
        logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self, logger):
        """max_attempts=1 never waits and exhausts after one failure."""
        operation = AsyncMock(side_effect=transient(502))
        executor = RetryExecutor(RetryPolicy(max_attempts=1), logger_obj=logger)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(RetryExhaustedError) as exc_info:
                await executor.run(operation, HOST, PATH)

        operation.assert_awaited_once()
        mock_sleep.assert_not_awaited()
        assert "Exhausted 1 retries" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_transient_error_propagates_immediately(self, logger):
        """A terminal HTTP outcome is not retried."""
        error = GravityUpdateError(HOST, PATH, 401, "")
        operation = AsyncMock(side_effect=[transient(), error, True])
        executor = RetryExecutor(RetryPolicy(max_attempts=6), logger_obj=logger)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(GravityUpdateError) as exc_info:
                await executor.run(operation, HOST, PATH)

        assert exc_info.value is error
        assert operation.await_count == 2
        assert sleep_waits(mock_sleep) == [1.0]
