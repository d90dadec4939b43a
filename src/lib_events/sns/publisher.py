"""SNSPublisher — validates events and publishes them to an SNS topic."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..codec import encode_json, format_number, is_finite_number
from ..events import EventType
from ..exceptions import ErrorKind, EventError
from ..message import Message

if TYPE_CHECKING:
    from ..ports import IConnection

logger = logging.getLogger("lib_events.publisher")

# SNS rejects published messages over 256 KiB.
MAX_EVENT_MESSAGE_SIZE = 256 * 1024


def serialized_size(request: Mapping[str, Any]) -> int:
    """Return the UTF-8 byte length of the compact JSON of the size-relevant
    part of a Publish request (attributes, topic and message)."""
    sized = {
        "MessageAttributes": request.get("MessageAttributes", {}),
        "TopicArn": request.get("TopicArn"),
        "Message": request.get("Message"),
    }
    text = json.dumps(sized, separators=(",", ":"), ensure_ascii=False)
    return len(text.encode("utf-8"))


def _string_attribute(value: str) -> dict[str, str]:
    return {"DataType": "String", "StringValue": value}


class SNSPublisher:
    """Publishes :class:`~lib_events.message.Message` events to one topic.

    Every check runs in :meth:`build_request` before any network call, so an
    invalid event fails with its :class:`~lib_events.exceptions.ErrorKind`
    rather than as a late transport rejection.
    """

    def __init__(
        self,
        connection: IConnection,
        *,
        topic: str,
        api_host: str = "",
        fifo: bool | None = None,
        ignore_events: bool = False,
    ) -> None:
        """Configure publisher.

        Args:
            connection: Connection manager for the ``sns`` service.
            topic: Destination topic ARN.
            api_host: Prefix joined onto relative ``uri`` fields.
            fifo: Whether the topic is FIFO; inferred from a ``.fifo`` suffix
                when None.
            ignore_events: Validate but never send (dry-run).
        """
        self._connection = connection
        self._topic = topic
        self._api_host = api_host
        self._fifo = topic.endswith(".fifo") if fifo is None else fifo
        self._ignore_events = ignore_events

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def is_fifo(self) -> bool:
        return self._fifo

    def build_request(self, message: Message | Mapping[str, Any]) -> dict[str, Any]:
        """Validate *message* and return the SNS Publish parameters.

        Raises:
            EventError: on the first failed check, in this order: type,
                checksum, source, message, FIFO groupId, FIFO transactionId,
                json encoding, size.
        """
        if not isinstance(message, Message):
            message = Message.model_validate(dict(message))

        if not EventType.is_valid(message.type):
            raise EventError(
                ErrorKind.INVALID_EVENT_TYPE, f"invalid event type '{message.type}'"
            )
        if not is_finite_number(message.checksum):
            raise EventError(
                ErrorKind.INVALID_EVENT_CHECKSUM, "checksum is not a number"
            )
        if not isinstance(message.source, str) or not message.source:
            raise EventError(ErrorKind.INVALID_EVENT_SOURCE, "event source is required")
        if not isinstance(message.message, str) or not message.message:
            raise EventError(
                ErrorKind.INVALID_EVENT_MESSAGE, "event message is required"
            )
        if self._fifo and not message.group_id:
            raise EventError(
                ErrorKind.INVALID_FIFO_MESSAGE, "groupId is required for FIFO messages"
            )
        if self._fifo and not message.transaction_id:
            raise EventError(
                ErrorKind.INVALID_FIFO_MESSAGE,
                "transactionId is required for FIFO messages",
            )

        attributes: dict[str, dict[str, str]] = {
            "type": _string_attribute(EventType(message.type).value),
            "checksum": {
                "DataType": "Number",
                "StringValue": format_number(message.checksum),
            },
            "source": _string_attribute(message.source),
        }
        if message.uri:
            attributes["uri"] = _string_attribute(f"{self._api_host}{message.uri}")
        if message.id:
            attributes["id"] = _string_attribute(message.id)
        if message.json is not None:
            try:
                encoded = encode_json(message.json)
            except EventError as e:
                raise EventError(
                    ErrorKind.INVALID_EVENT_JSON, "event json is invalid", cause=e
                ) from e
            attributes["json"] = _string_attribute(encoded)

        request: dict[str, Any] = {
            "MessageAttributes": attributes,
            "TopicArn": self._topic,
            "Message": message.message,
        }
        size = serialized_size(request)
        if size > MAX_EVENT_MESSAGE_SIZE:
            raise EventError(
                ErrorKind.INVALID_EVENT_SIZE,
                f"json message exceeded limit of 256KB ({size} bytes)",
            )

        if self._fifo:
            request["MessageGroupId"] = message.group_id
            request["MessageDeduplicationId"] = message.transaction_id
        return request

    async def dispatch(self, message: Message | Mapping[str, Any]) -> Any:
        """Validate and publish *message*.

        Returns the Publish response, or None when events are ignored.
        Transport errors propagate unchanged.
        """
        request = self.build_request(message)
        if self._ignore_events:
            logger.debug(
                "Ignoring %s event (ignore_events is set)",
                request["MessageAttributes"]["type"]["StringValue"],
            )
            return None
        client = await self._connection.get_client()
        return await client.publish(**request)

    async def health_check(self) -> bool:
        """Return True if the topic is reachable."""
        return await self._connection.health_check(TopicArn=self._topic)
