"""In-memory transport fakes for testing."""

from __future__ import annotations

from .connection import InMemoryConnection
from .sns import InMemorySNSClient
from .sqs import InMemorySQSClient

__all__ = [
    "InMemoryConnection",
    "InMemorySNSClient",
    "InMemorySQSClient",
]
