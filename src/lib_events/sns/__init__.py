"""SNS publishing adapter."""

from __future__ import annotations

from .publisher import MAX_EVENT_MESSAGE_SIZE, SNSPublisher, serialized_size

__all__ = [
    "MAX_EVENT_MESSAGE_SIZE",
    "SNSPublisher",
    "serialized_size",
]
