"""SQS consuming adapter and queue client."""

from __future__ import annotations

from .client import SQSQueueClient, to_message_attributes
from .consumer import (
    Acknowledger,
    BatchResult,
    MessageOutcome,
    PollSummary,
    SQSConsumer,
)

__all__ = [
    "Acknowledger",
    "BatchResult",
    "MessageOutcome",
    "PollSummary",
    "SQSConsumer",
    "SQSQueueClient",
    "to_message_attributes",
]
