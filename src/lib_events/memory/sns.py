"""In-memory SNS client for tests — records publishes and fans out to queues."""

from __future__ import annotations

import json
import uuid
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .sqs import InMemorySQSClient


class InMemorySNSClient:
    """Implements ``publish`` and fans each message out to subscribed queues.

    With ``raw_message_delivery`` the queue receives the message text as its
    body and the attributes as native message attributes; otherwise it
    receives the SNS notification envelope as SNS would relay it.
    """

    def __init__(self) -> None:
        self.published: list[dict[str, Any]] = []
        self._subscriptions: list[tuple[InMemorySQSClient, bool]] = []

    def subscribe(
        self, queue: InMemorySQSClient, *, raw_message_delivery: bool = False
    ) -> None:
        self._subscriptions.append((queue, raw_message_delivery))

    async def publish(self, **request: Any) -> dict[str, Any]:
        self.published.append(request)
        message_id = str(uuid.uuid4())
        attributes = request.get("MessageAttributes") or {}
        for queue, raw in self._subscriptions:
            if raw:
                queue.enqueue(
                    request["Message"],
                    attributes,
                    group_id=request.get("MessageGroupId"),
                    deduplication_id=request.get("MessageDeduplicationId"),
                )
                continue
            notification = {
                "Type": "Notification",
                "MessageId": message_id,
                "TopicArn": request.get("TopicArn"),
                "Message": request["Message"],
                "MessageAttributes": {
                    name: {
                        "Type": value["DataType"],
                        "Value": value.get("StringValue", value.get("BinaryValue")),
                    }
                    for name, value in attributes.items()
                },
            }
            queue.enqueue(json.dumps(notification))
        return {"MessageId": message_id}

    async def get_topic_attributes(self, TopicArn: str) -> dict[str, Any]:  # noqa: N803
        return {"Attributes": {"TopicArn": TopicArn}}

    async def list_topics(self, **kwargs: Any) -> dict[str, Any]:  # noqa: ARG002
        return {"Topics": []}
