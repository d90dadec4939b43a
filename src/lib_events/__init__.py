"""lib-events — typed SNS publishing and SQS polling for platform events."""

from __future__ import annotations

from .aws import AWSConnectionManager
from .codec import decode_json, encode_json
from .config import AWSCredentials, ConsumerConfig, PublisherConfig
from .envelope import (
    ClassifiedEnvelope,
    EnvelopeKind,
    classify_envelope,
    decode_envelope,
)
from .events import EventType
from .exceptions import (
    BatchSendError,
    ErrorKind,
    EventError,
    LibEventsError,
    MessagingConnectionError,
    MessagingError,
)
from .factories import create_consumer, create_publisher
from .message import Message, QueueMessage
from .registry import FunctionHandler, HandlerRegistry, MessageHandler
from .retry import BackoffPolicy
from .sns import MAX_EVENT_MESSAGE_SIZE, SNSPublisher
from .sqs import (
    Acknowledger,
    BatchResult,
    MessageOutcome,
    PollSummary,
    SQSConsumer,
    SQSQueueClient,
)

__all__ = [
    "MAX_EVENT_MESSAGE_SIZE",
    "AWSConnectionManager",
    "AWSCredentials",
    "Acknowledger",
    "BackoffPolicy",
    "BatchResult",
    "BatchSendError",
    "ClassifiedEnvelope",
    "ConsumerConfig",
    "EnvelopeKind",
    "ErrorKind",
    "EventError",
    "EventType",
    "FunctionHandler",
    "HandlerRegistry",
    "LibEventsError",
    "Message",
    "MessageHandler",
    "MessageOutcome",
    "MessagingConnectionError",
    "MessagingError",
    "PollSummary",
    "PublisherConfig",
    "QueueMessage",
    "SNSPublisher",
    "SQSConsumer",
    "SQSQueueClient",
    "classify_envelope",
    "create_consumer",
    "create_publisher",
    "decode_envelope",
    "decode_json",
    "encode_json",
]
