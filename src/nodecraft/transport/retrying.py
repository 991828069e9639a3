"""Retrying transport wrapper.

Wraps any Transport so that transient connection failures are retried with
exponential backoff. CLI rejections pass straight through.
"""
import logging
from typing import Optional, Sequence

from ..config.settings import Settings
from ..utils.connection import with_retry
from ..utils.logging_config import timed
from .base import Transport

logger = logging.getLogger(__name__)


class RetryingTransport(Transport):
    """Delegate to an inner transport, retrying connection failures."""

    def __init__(
        self,
        inner: Transport,
        max_attempts: int = 3,
        min_wait: float = 1,
        max_wait: float = 10,
    ):
        super().__init__(inner.name, inner.platform)
        self.inner = inner
        retry = with_retry(max_attempts=max_attempts, min_wait=min_wait, max_wait=max_wait)
        self._query = retry(inner.query)
        self._send_config = retry(inner.send_config)
        self._connect = retry(inner.connect)

    @classmethod
    def from_settings(
        cls,
        inner: Transport,
        settings: Optional[Settings] = None
    ) -> "RetryingTransport":
        """Wrap inner using the retry values of settings (or the environment)."""
        if settings is None:
            settings = Settings.from_env()
        return cls(
            inner,
            max_attempts=settings.retries,
            min_wait=settings.retry_min_wait,
            max_wait=settings.retry_max_wait,
        )

    @property
    def is_connected(self) -> bool:
        return self.inner.is_connected

    def connect(self) -> None:
        self._connect()

    def disconnect(self) -> None:
        self.inner.disconnect()

    @timed("query")
    def query(self, command: str) -> str:
        return self._query(command)

    @timed("send_config")
    def send_config(self, commands: Sequence[str]) -> bool:
        logger.debug(f"{self.name}: sending {len(commands)} config commands")
        return self._send_config(commands)
