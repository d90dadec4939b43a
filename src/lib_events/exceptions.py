"""Exceptions for lib-events.

Validation and routing failures share a single :class:`EventError` whose
``kind`` says what went wrong; callers branch on the kind rather than on
subclasses.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class LibEventsError(Exception):
    """Root exception for the entire lib-events package."""


class ErrorKind(str, Enum):
    """Closed set of event failure kinds."""

    INVALID_EVENT_TYPE = "InvalidEventType"
    INVALID_EVENT_CHECKSUM = "InvalidEventChecksum"
    INVALID_EVENT_SOURCE = "InvalidEventSource"
    INVALID_EVENT_MESSAGE = "InvalidEventMessage"
    INVALID_EVENT_JSON = "InvalidEventJson"
    INVALID_EVENT_SIZE = "InvalidEventSize"
    INVALID_FIFO_MESSAGE = "InvalidFIFOMessage"
    DUPLICATE_HANDLER = "DuplicateHandler"
    NO_HANDLER_FOUND = "NoHandlerFound"
    INVALID_MESSAGE = "InvalidMessage"
    ENCODING_ERROR = "EncodingError"
    DECODING_ERROR = "DecodingError"


class EventError(LibEventsError):
    """Raised by the publisher, codec and registry; logged by the consumer.

    Carries the failure ``kind``, a human readable ``detail`` and, when the
    failure wraps another exception, that exception as ``cause``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.cause = cause
        super().__init__(f"{kind.value}: {detail}")
        if cause is not None:
            self.__cause__ = cause


class MessagingError(LibEventsError):
    """Base class for transport-side failures raised by this package."""


class MessagingConnectionError(MessagingError):
    """Raised when a queue or topic cannot be resolved or reached."""


class BatchSendError(MessagingError):
    """Raised when SendMessageBatch reports failed entries."""

    def __init__(self, failed: list[dict[str, Any]]) -> None:
        self.failed = failed
        ids = ", ".join(str(entry.get("Id")) for entry in failed)
        super().__init__(f"Failed to send {len(failed)} message(s): {ids}")
