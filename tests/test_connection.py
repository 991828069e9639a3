"""Tests for retry utilities and the retrying transport."""
import pytest
from nodecraft.config import Settings
from nodecraft.transport import CliError, InMemoryTransport
from nodecraft.transport.retrying import RetryingTransport
from nodecraft.utils.connection import (
    with_retry,
    retry_policy,
    RETRYABLE_EXCEPTIONS,
)


class TestWithRetry:
    """Tests for retry decorator."""

    @pytest.mark.asyncio
    async def test_async_success_no_retry(self):
        """Successful async function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3)
        async def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await succeeding_func()
        assert result == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_async_retry_then_success(self):
        """Async function retries on failure then succeeds."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def failing_then_succeeding():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ConnectionRefusedError("Connection refused")
            return "success"

        result = await failing_then_succeeding()
        assert result == "success"
        assert call_count == 2

    def test_sync_retry_then_success(self):
        """Sync function retries on failure then succeeds."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionResetError("reset")
            return "ok"

        assert flaky() == "ok"
        assert call_count == 3

    def test_sync_max_retries_exceeded(self):
        """Sync function raises the last error after max retries."""
        call_count = 0

        @with_retry(max_attempts=2, min_wait=0.01, max_wait=0.1)
        def always_failing():
            nonlocal call_count
            call_count += 1
            raise TimeoutError("Always times out")

        with pytest.raises(TimeoutError):
            always_failing()
        assert call_count == 2

    def test_cli_error_not_retried(self):
        """A device rejection is never retried."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        def rejected():
            nonlocal call_count
            call_count += 1
            raise CliError("feature bogus", "Syntax error while parsing")

        with pytest.raises(CliError):
            rejected()
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_non_retryable_exception(self):
        """Non-retryable exceptions are not retried."""
        call_count = 0

        @with_retry(max_attempts=3, exceptions=(ConnectionRefusedError,))
        async def raising_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            await raising_value_error()
        assert call_count == 1

    def test_policy_reraises(self):
        """The policy re-raises the original exception."""
        assert retry_policy()["reraise"] is True


class TestRetryableExceptions:
    """Tests for retryable exceptions list."""

    def test_connection_errors_are_retryable(self):
        """Connection level failures are retryable."""
        for exc in (ConnectionRefusedError, ConnectionResetError, TimeoutError, OSError, EOFError):
            assert exc in RETRYABLE_EXCEPTIONS

    def test_cli_error_is_not_retryable(self):
        """CliError is not a connection failure."""
        assert not issubclass(CliError, RETRYABLE_EXCEPTIONS)


class FlakyTransport(InMemoryTransport):
    """Fails the first queries with a connection error."""

    def __init__(self, failures: int, **kwargs):
        super().__init__(**kwargs)
        self.failures = failures

    def query(self, command: str) -> str:
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionResetError("reset by peer")
        return super().query(command)


class TestRetryingTransport:
    """Tests for the retrying wrapper."""

    def test_retries_query(self):
        """Transient failures are retried transparently."""
        inner = FlakyTransport(failures=2, outputs={"show vpc": "vpc domain 1"})
        transport = RetryingTransport(inner, max_attempts=3, min_wait=0.01, max_wait=0.1)
        assert transport.query("show vpc") == "vpc domain 1"
        assert transport.platform == inner.platform

    def test_gives_up(self):
        """After max attempts the error surfaces."""
        inner = FlakyTransport(failures=5)
        transport = RetryingTransport(inner, max_attempts=2, min_wait=0.01, max_wait=0.1)
        with pytest.raises(ConnectionResetError):
            transport.query("show vpc")

    def test_rejection_passes_through(self):
        """CLI errors reach the caller on the first attempt."""
        inner = InMemoryTransport()
        inner.reject("feature bogus")
        transport = RetryingTransport(inner, min_wait=0.01, max_wait=0.1)
        with pytest.raises(CliError):
            transport.send_config(["feature bogus"])
        assert len(inner.config_log) == 1

    def test_from_settings(self):
        """Retry values come from settings."""
        inner = FlakyTransport(failures=3)
        settings = Settings(retries=4, retry_min_wait=0.01, retry_max_wait=0.02)
        transport = RetryingTransport.from_settings(inner, settings)
        assert transport.query("show vpc") == ""

    def test_connect_delegates(self):
        """Connection state is the inner transport's."""
        inner = InMemoryTransport()
        with RetryingTransport(inner, min_wait=0.01, max_wait=0.1) as transport:
            assert transport.is_connected
            assert inner.is_connected
        assert not inner.is_connected
