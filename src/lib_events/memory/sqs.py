"""In-memory SQS client for tests — visibility, receipt handles, deletes."""

from __future__ import annotations

import uuid
from collections import deque
from typing import Any


class InMemorySQSClient:
    """Implements the subset of the SQS client API used by lib-events.

    Received messages move in flight until deleted. :meth:`expire_visibility`
    makes in-flight messages visible again, as an elapsed visibility timeout
    would.
    """

    def __init__(self, queue_url: str = "memory://queue") -> None:
        self.queue_url = queue_url
        self._visible: deque[dict[str, Any]] = deque()
        self._in_flight: dict[str, dict[str, Any]] = {}
        self.deleted: list[dict[str, Any]] = []
        self.receive_calls = 0

    async def send_message(
        self,
        QueueUrl: str,  # noqa: N803, ARG002
        MessageBody: str,  # noqa: N803
        MessageAttributes: dict[str, Any] | None = None,  # noqa: N803
        MessageGroupId: str | None = None,  # noqa: N803
        MessageDeduplicationId: str | None = None,  # noqa: N803
        **kwargs: Any,  # noqa: ARG002
    ) -> dict[str, Any]:
        return {
            "MessageId": self.enqueue(
                MessageBody,
                MessageAttributes,
                group_id=MessageGroupId,
                deduplication_id=MessageDeduplicationId,
            )
        }

    async def send_message_batch(
        self,
        QueueUrl: str,  # noqa: N803
        Entries: list[dict[str, Any]],  # noqa: N803
    ) -> dict[str, Any]:
        successful = []
        for entry in Entries:
            out = await self.send_message(
                QueueUrl,
                entry["MessageBody"],
                entry.get("MessageAttributes"),
                entry.get("MessageGroupId"),
                entry.get("MessageDeduplicationId"),
            )
            successful.append({"Id": entry["Id"], "MessageId": out["MessageId"]})
        return {"Successful": successful, "Failed": []}

    async def receive_message(
        self,
        QueueUrl: str,  # noqa: N803, ARG002
        MaxNumberOfMessages: int = 1,  # noqa: N803
        **kwargs: Any,  # noqa: ARG002
    ) -> dict[str, Any]:
        self.receive_calls += 1
        messages = []
        while self._visible and len(messages) < MaxNumberOfMessages:
            raw = self._visible.popleft()
            receipt = str(uuid.uuid4())
            received = {**raw, "ReceiptHandle": receipt}
            self._in_flight[receipt] = raw
            messages.append(received)
        return {"Messages": messages} if messages else {}

    async def delete_message(
        self,
        QueueUrl: str,  # noqa: N803, ARG002
        ReceiptHandle: str,  # noqa: N803
    ) -> dict[str, Any]:
        raw = self._in_flight.pop(ReceiptHandle, None)
        if raw is not None:
            self.deleted.append(raw)
        return {}

    async def get_queue_attributes(
        self,
        QueueUrl: str,  # noqa: N803
        AttributeNames: list[str] | None = None,  # noqa: N803, ARG002
    ) -> dict[str, Any]:
        name = QueueUrl.rsplit("/", 1)[-1]
        return {"Attributes": {"QueueArn": f"arn:aws:sqs:memory:000000000000:{name}"}}

    async def list_queues(self, **kwargs: Any) -> dict[str, Any]:  # noqa: ARG002
        return {"QueueUrls": [self.queue_url]}

    def enqueue(
        self,
        body: str,
        attributes: dict[str, Any] | None = None,
        *,
        group_id: str | None = None,
        deduplication_id: str | None = None,
    ) -> str:
        """Append a raw message as SQS would store it; return its MessageId."""
        message_id = str(uuid.uuid4())
        raw: dict[str, Any] = {"MessageId": message_id, "Body": body}
        if attributes:
            raw["MessageAttributes"] = dict(attributes)
        system: dict[str, str] = {}
        if group_id:
            system["MessageGroupId"] = group_id
        if deduplication_id:
            system["MessageDeduplicationId"] = deduplication_id
        if system:
            raw["Attributes"] = system
        self._visible.append(raw)
        return message_id

    def expire_visibility(self) -> None:
        """Return every in-flight message to the queue."""
        self._visible.extend(self._in_flight.values())
        self._in_flight.clear()

    @property
    def visible_count(self) -> int:
        return len(self._visible)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)
