"""
Unit tests for the shared retry policy.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.retry import RetryConfig, RetryError, RetryPolicy, power_backoff


class Flaky:
    """Callable failing a fixed number of times before succeeding."""

    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


class TestBackoff:
    """Test cases for backoff calculation."""

    def test_power_backoff_base_three(self):
        """Test delays of 3 ** retry seconds."""
        policy = RetryPolicy("test", config=power_backoff(3, 3.0))

        assert [policy.delay_for(n) for n in (1, 2, 3)] == [3.0, 9.0, 27.0]

    def test_power_backoff_attempts(self):
        """Test retries count on top of the first attempt."""
        config = power_backoff(2)

        assert config.max_retries == 2
        assert config.max_attempts == 3

    def test_default_config_doubles(self):
        """Test the default config doubles from one second."""
        policy = RetryPolicy("default")

        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_power_backoff_caps_at_last_wait(self):
        """Test the wait never grows past the last scheduled retry."""
        policy = RetryPolicy("cap", config=power_backoff(2, 3.0))

        assert policy.delay_for(3) == 9.0

    def test_max_delay_caps(self):
        """Test delays never exceed max_delay."""
        policy = RetryPolicy("cap", config=RetryConfig(base_delay=10.0, max_delay=15.0))

        assert policy.delay_for(5) == 15.0


class TestRetryPolicy:
    """Test cases for RetryPolicy.execute."""

    @pytest.fixture
    def sleep(self):
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_success_first_time(self, sleep):
        """Test no retry when the call succeeds."""
        func = Flaky([])
        policy = RetryPolicy("test", config=power_backoff(3), sleep=sleep)

        assert await policy.execute(func) == "ok"
        assert func.calls == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_transient_exceptions(self, sleep):
        """Test transient failures are retried with backoff."""
        func = Flaky([ConnectionError("a"), ConnectionError("b")])
        policy = RetryPolicy("test", config=power_backoff(3), retry_on=(ConnectionError,), sleep=sleep)

        assert await policy.execute(func) == "ok"
        assert func.calls == 3
        assert [c.args[0] for c in sleep.await_args_list] == [3.0, 9.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_retry_error(self, sleep):
        """Test RetryError carries the last exception after max attempts."""
        errors = [ConnectionError(str(n)) for n in range(5)]
        func = Flaky(errors)
        policy = RetryPolicy("test", config=power_backoff(3), retry_on=(ConnectionError,), sleep=sleep)

        with pytest.raises(RetryError) as exc_info:
            await policy.execute(func)

        assert func.calls == 4
        assert exc_info.value.attempts == 4
        assert str(exc_info.value.last_exception) == "3"
        assert sleep.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_not_retried(self, sleep):
        """Test exceptions outside retry_on propagate immediately."""
        func = Flaky([ValueError("bad query")])
        policy = RetryPolicy("test", config=power_backoff(3), retry_on=(ConnectionError,), sleep=sleep)

        with pytest.raises(ValueError):
            await policy.execute(func)

        assert func.calls == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retry_on_result(self, sleep):
        """Test flagged results are retried and the good one returned."""
        results = iter([503, 500, 200])

        async def func():
            return next(results)

        policy = RetryPolicy(
            "test",
            config=power_backoff(2),
            retry_if_result=lambda status: status >= 500,
            sleep=sleep
        )

        assert await policy.execute(func) == 200
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_retry_on_result_exhausted_returns_last(self, sleep):
        """Test the last flagged result is handed back after exhaustion."""
        func = AsyncMock(return_value=503)
        policy = RetryPolicy(
            "test",
            config=power_backoff(2),
            retry_if_result=lambda status: status >= 500,
            sleep=sleep
        )

        assert await policy.execute(func) == 503
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_on_retry_hook(self, sleep):
        """Test the hook sees each scheduled retry."""
        hook = MagicMock()
        func = Flaky([OSError(), OSError()])
        policy = RetryPolicy("db", config=power_backoff(3), retry_on=(OSError,), on_retry=hook, sleep=sleep)

        await policy.execute(func)

        assert [c.args for c in hook.call_args_list] == [("db", 1), ("db", 2)]

    @pytest.mark.asyncio
    async def test_cancellation_during_backoff(self):
        """Test cancelling while waiting aborts without further attempts."""
        func = Flaky([ConnectionError()] * 5)
        policy = RetryPolicy("test", config=power_backoff(3), retry_on=(ConnectionError,))

        task = asyncio.create_task(policy.execute(func))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert func.calls == 1

    @pytest.mark.asyncio
    async def test_cancellation_not_retried(self, sleep):
        """Test CancelledError raised by the call is never retried."""
        func = Flaky([asyncio.CancelledError()])
        policy = RetryPolicy("test", config=power_backoff(3), sleep=sleep)

        with pytest.raises(asyncio.CancelledError):
            await policy.execute(func)

        assert func.calls == 1
        sleep.assert_not_awaited()
