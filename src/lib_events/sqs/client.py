"""SQSQueueClient — send typed messages to a queue and poll them back."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..codec import encode_json, format_number, is_finite_number
from ..envelope import JSON_ATTRIBUTE
from ..exceptions import BatchSendError, ErrorKind, EventError
from ..message import QueueMessage
from .consumer import SQSConsumer

if TYPE_CHECKING:
    import asyncio

    from ..ports import IConnection
    from ..registry import HandlerRegistry, MessageHandler
    from .consumer import BatchResult

logger = logging.getLogger("lib_events.queue_client")

# SendMessageBatch accepts at most ten entries.
MAX_BATCH_ENTRIES = 10

CHECKSUM_ATTRIBUTE = "checksum"


def to_message_attributes(attributes: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Map plain attribute values onto SQS typed message attributes.

    ``str`` becomes String, numbers become Number, and any other value is
    sent as Binary JSON. ``None`` values are dropped. The reserved ``json``
    attribute is always sent through :func:`~lib_events.codec.encode_json` and
    ``checksum`` must be numeric, matching what the consumer decodes.

    Raises:
        EventError: kind ``INVALID_EVENT_CHECKSUM`` for a non-numeric
            checksum, ``ENCODING_ERROR`` for values that cannot be encoded.
    """
    mapped: dict[str, dict[str, Any]] = {}
    for name, value in attributes.items():
        if value is None:
            continue
        if name == JSON_ATTRIBUTE:
            mapped[name] = {"DataType": "String", "StringValue": encode_json(value)}
        elif name == CHECKSUM_ATTRIBUTE:
            if not is_finite_number(value):
                raise EventError(
                    ErrorKind.INVALID_EVENT_CHECKSUM, "checksum is not a number"
                )
            mapped[name] = {"DataType": "Number", "StringValue": format_number(value)}
        elif isinstance(value, bool):
            mapped[name] = {"DataType": "String", "StringValue": str(value).lower()}
        elif isinstance(value, str):
            mapped[name] = {"DataType": "String", "StringValue": value}
        elif isinstance(value, (int, float)):
            if not is_finite_number(value):
                raise EventError(
                    ErrorKind.ENCODING_ERROR, f"attribute {name!r} is not finite"
                )
            mapped[name] = {"DataType": "Number", "StringValue": str(value)}
        else:
            try:
                encoded = json.dumps(value, separators=(",", ":")).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise EventError(
                    ErrorKind.ENCODING_ERROR,
                    f"attribute {name!r} is not JSON serializable",
                    cause=e,
                ) from e
            mapped[name] = {"DataType": "Binary", "BinaryValue": encoded}
    return mapped


class SQSQueueClient:
    """Queue client for services that both produce to and consume from a queue.

    Outgoing messages always carry a ``type`` String attribute so that the
    receiving side can route them through its handler registry.
    """

    def __init__(
        self,
        connection: IConnection,
        queue_url: str,
        *,
        long_poll_duration_seconds: int = 1,
        max_number_of_messages: int = 10,
        visibility_timeout_seconds: int = 30,
        registry: HandlerRegistry | None = None,
    ) -> None:
        self._connection = connection
        self._consumer = SQSConsumer(
            connection,
            queue_url=queue_url,
            registry=registry,
            wait_time_seconds=long_poll_duration_seconds,
            visibility_timeout=visibility_timeout_seconds,
            max_number_of_messages=max_number_of_messages,
            poll_interval=long_poll_duration_seconds,
        )

    @property
    def consumer(self) -> SQSConsumer:
        return self._consumer

    async def health(self) -> bool:
        return await self._consumer.health_check()

    def register_message_handler(self, handler: MessageHandler) -> None:
        self._consumer.register_message_handler(handler)

    async def start_poll_for_messages(
        self, stop_event: asyncio.Event | None = None
    ) -> None:
        await self._consumer.start_poll_for_messages(stop_event)

    async def poll_once_for_messages(self) -> BatchResult:
        return await self._consumer.poll_once()

    async def send_messages(self, *messages: QueueMessage | Mapping[str, Any]) -> None:
        """Send *messages* with SendMessageBatch, ten per request.

        Raises:
            BatchSendError: if any entry is reported as failed.
            EventError: kind ``ENCODING_ERROR`` for unserializable values.
        """
        items = [
            m if isinstance(m, QueueMessage) else QueueMessage.model_validate(m)
            for m in messages
        ]
        if not items:
            return
        entries = [self._entry(index, m) for index, m in enumerate(items)]
        queue_url = await self._consumer.queue_url()
        client = await self._connection.get_client()
        failed: list[dict[str, Any]] = []
        for start in range(0, len(entries), MAX_BATCH_ENTRIES):
            result = await client.send_message_batch(
                QueueUrl=queue_url,
                Entries=entries[start : start + MAX_BATCH_ENTRIES],
            )
            failed.extend(result.get("Failed") or [])
        if failed:
            raise BatchSendError(failed)
        logger.debug("Sent %d message(s) to %s", len(entries), queue_url)

    def _entry(self, index: int, message: QueueMessage) -> dict[str, Any]:
        try:
            body = json.dumps(message.body, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise EventError(
                ErrorKind.ENCODING_ERROR,
                "message body is not JSON serializable",
                cause=e,
            ) from e
        attributes = to_message_attributes(message.attributes)
        if message.type:
            attributes["type"] = {"DataType": "String", "StringValue": message.type}
        entry: dict[str, Any] = {
            "Id": str(index),
            "DelaySeconds": message.delay_seconds,
            "MessageBody": body,
            "MessageAttributes": attributes,
        }
        if message.group_id:
            entry["MessageGroupId"] = message.group_id
        if message.deduplication_id:
            entry["MessageDeduplicationId"] = message.deduplication_id
        return entry
