"""Transports connecting nodes to their CLI.

RetryingTransport lives in nodecraft.transport.retrying.
"""
from .base import Transport, CliError
from .mock import InMemoryTransport

__all__ = [
    "Transport",
    "CliError",
    "InMemoryTransport",
]
