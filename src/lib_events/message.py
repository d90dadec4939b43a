"""Message models exchanged between application code and the transports."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """Wire-independent representation of a platform event.

    Outbound, ``type``/``source``/``checksum``/``message`` are required and the
    optional fields become message attributes. Inbound, the consumer fills the
    same fields from whichever envelope delivered the event and keeps every
    decoded attribute in ``attributes`` and the parsed body in ``body``.

    ``type``, ``source``, ``checksum`` and ``message`` accept any value here;
    the publisher checks them so that a bad event fails with the matching
    :class:`~lib_events.exceptions.ErrorKind`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Any = ""
    source: Any = ""
    checksum: Any = None
    message: Any = ""
    uri: str | None = None
    id: str | None = None
    json_: Any = Field(default=None, alias="json")
    group_id: str | None = Field(default=None, alias="groupId")
    transaction_id: str | None = Field(default=None, alias="transactionId")
    attributes: dict[str, Any] = Field(default_factory=dict)
    body: Any = None

    @property
    def json(self) -> Any:  # type: ignore[override]
        """Structured payload carried by the ``json`` attribute."""
        return self.json_


class QueueMessage(BaseModel):
    """Outbound message for a direct queue send.

    ``attributes`` values map onto SQS data types: ``str`` to String, numbers
    to Number, and anything else to Binary (JSON bytes).
    """

    model_config = ConfigDict(frozen=True)

    type: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    delay_seconds: int = Field(default=0, ge=0, le=900)
    group_id: str | None = None
    deduplication_id: str | None = None
