"""Unit tests for SQSQueueClient sends and the attribute mapping."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from lib_events.codec import encode_json
from lib_events.exceptions import BatchSendError, ErrorKind, EventError
from lib_events.memory import InMemoryConnection, InMemorySQSClient
from lib_events.message import Message, QueueMessage
from lib_events.registry import FunctionHandler
from lib_events.sqs import SQSQueueClient, to_message_attributes
from lib_events.sqs.consumer import MessageOutcome

QUEUE_URL = "https://sqs.ap-southeast-2.amazonaws.com/1234/my-sqs-name"


@pytest.fixture
def queue_client(sqs_connection: InMemoryConnection) -> SQSQueueClient:
    return SQSQueueClient(sqs_connection, QUEUE_URL, long_poll_duration_seconds=0)


def test_to_message_attributes_types() -> None:
    mapped = to_message_attributes(
        {
            "name": "x",
            "count": 3,
            "ratio": 0.5,
            "on": True,
            "meta": {"k": [1]},
            "gone": None,
        }
    )
    assert mapped["name"] == {"DataType": "String", "StringValue": "x"}
    assert mapped["count"] == {"DataType": "Number", "StringValue": "3"}
    assert mapped["ratio"] == {"DataType": "Number", "StringValue": "0.5"}
    assert mapped["on"] == {"DataType": "String", "StringValue": "true"}
    assert mapped["meta"] == {"DataType": "Binary", "BinaryValue": b'{"k":[1]}'}
    assert "gone" not in mapped


def test_to_message_attributes_rejects_unserializable() -> None:
    with pytest.raises(EventError) as exc_info:
        to_message_attributes({"bad": object()})
    assert exc_info.value.kind is ErrorKind.ENCODING_ERROR


@pytest.mark.asyncio
async def test_send_forces_type_attribute(
    queue_client: SQSQueueClient, sqs_client: InMemorySQSClient
) -> None:
    await queue_client.send_messages(
        QueueMessage(
            type="ORDER_CREATED",
            attributes={"type": "spoofed", "tenant": "au"},
            body={"order_id": 1},
        )
    )
    (raw,) = (await sqs_client.receive_message(QUEUE_URL, 10))["Messages"]
    assert raw["Body"] == '{"order_id":1}'
    assert raw["MessageAttributes"]["type"]["StringValue"] == "ORDER_CREATED"
    assert raw["MessageAttributes"]["tenant"]["StringValue"] == "au"


@pytest.mark.asyncio
async def test_send_chunks_into_batches_of_ten() -> None:
    client = MagicMock()
    client.send_message_batch = AsyncMock(return_value={"Failed": []})
    queue_client = SQSQueueClient(InMemoryConnection(client), QUEUE_URL)

    await queue_client.send_messages(
        *({"type": "ORDER_CREATED", "body": i} for i in range(23))
    )

    calls = client.send_message_batch.call_args_list
    sizes = [len(c.kwargs["Entries"]) for c in calls]
    assert sizes == [10, 10, 3]
    ids = [
        entry["Id"]
        for c in client.send_message_batch.call_args_list
        for entry in c.kwargs["Entries"]
    ]
    assert len(set(ids)) == 23


@pytest.mark.asyncio
async def test_send_nothing_makes_no_request() -> None:
    client = MagicMock()
    client.send_message_batch = AsyncMock()
    await SQSQueueClient(InMemoryConnection(client), QUEUE_URL).send_messages()
    client.send_message_batch.assert_not_called()


@pytest.mark.asyncio
async def test_send_raises_on_failed_entries() -> None:
    failed: list[dict[str, Any]] = [{"Id": "1", "Code": "InternalError"}]
    client = MagicMock()
    client.send_message_batch = AsyncMock(
        return_value={"Successful": [{"Id": "0"}], "Failed": failed}
    )
    queue_client = SQSQueueClient(InMemoryConnection(client), QUEUE_URL)

    with pytest.raises(BatchSendError) as exc_info:
        await queue_client.send_messages(
            {"type": "ORDER_CREATED", "body": 1}, {"type": "ORDER_CREATED", "body": 2}
        )
    assert exc_info.value.failed == failed


@pytest.mark.asyncio
async def test_send_fifo_ids_and_delay() -> None:
    client = MagicMock()
    client.send_message_batch = AsyncMock(return_value={"Failed": []})
    queue_client = SQSQueueClient(InMemoryConnection(client), QUEUE_URL)

    await queue_client.send_messages(
        QueueMessage(
            type="ORDER_CREATED",
            group_id="g",
            deduplication_id="d",
            delay_seconds=5,
        )
    )

    (entry,) = client.send_message_batch.call_args.kwargs["Entries"]
    assert entry["MessageGroupId"] == "g"
    assert entry["MessageDeduplicationId"] == "d"
    assert entry["DelaySeconds"] == 5
    assert entry["MessageBody"] == "null"


@pytest.mark.asyncio
async def test_send_then_poll_round_trip(
    queue_client: SQSQueueClient, sqs_client: InMemorySQSClient
) -> None:
    received: list[Message] = []
    queue_client.register_message_handler(
        FunctionHandler("ORDER_CREATED", received.append)
    )

    await queue_client.send_messages(
        QueueMessage(
            type="ORDER_CREATED",
            attributes={"checksum": 9, "meta": {"k": "v"}},
            body={"order_id": 1},
        )
    )
    batch = await queue_client.poll_once_for_messages()

    assert batch.outcomes == [MessageOutcome.ACKED]
    (message,) = received
    assert message.type == "ORDER_CREATED"
    assert message.checksum == 9
    assert message.attributes["meta"] == {"k": "v"}
    assert message.body == {"order_id": 1}
    assert sqs_client.deleted


@pytest.mark.asyncio
async def test_health_delegates_to_connection(sqs_client: InMemorySQSClient) -> None:
    queue_client = SQSQueueClient(
        InMemoryConnection(sqs_client, healthy=False), QUEUE_URL
    )
    assert await queue_client.health() is False


def test_json_attribute_is_codec_encoded() -> None:
    mapped = to_message_attributes({"json": "plain", "checksum": "12"})
    assert mapped["json"] == {"DataType": "String", "StringValue": encode_json("plain")}
    assert mapped["checksum"] == {"DataType": "Number", "StringValue": "12"}


@pytest.mark.parametrize("checksum", ["v2", float("nan"), True, [1]])
def test_non_numeric_checksum_is_rejected(checksum: Any) -> None:
    with pytest.raises(EventError) as exc_info:
        to_message_attributes({"checksum": checksum})
    assert exc_info.value.kind is ErrorKind.INVALID_EVENT_CHECKSUM


def test_non_finite_number_attribute_is_rejected() -> None:
    with pytest.raises(EventError) as exc_info:
        to_message_attributes({"ratio": float("inf")})
    assert exc_info.value.kind is ErrorKind.ENCODING_ERROR


@pytest.mark.asyncio
async def test_bad_checksum_fails_before_sending() -> None:
    client = MagicMock()
    client.send_message_batch = AsyncMock()
    queue_client = SQSQueueClient(InMemoryConnection(client), QUEUE_URL)

    with pytest.raises(EventError):
        await queue_client.send_messages(
            QueueMessage(type="ORDER_CREATED", attributes={"checksum": "v2"})
        )
    client.send_message_batch.assert_not_called()


@pytest.mark.asyncio
async def test_json_attribute_survives_send_then_poll(
    queue_client: SQSQueueClient, sqs_client: InMemorySQSClient
) -> None:
    received: list[Message] = []
    queue_client.register_message_handler(
        FunctionHandler("ORDER_CREATED", received.append)
    )

    await queue_client.send_messages(
        QueueMessage(
            type="ORDER_CREATED",
            attributes={"json": "plain", "checksum": "7"},
            body={"a": 1},
        ),
        QueueMessage(
            type="ORDER_CREATED",
            attributes={"json": {"items": [1, 2]}},
            body={"a": 2},
        ),
    )
    batch = await queue_client.poll_once_for_messages()

    assert batch.outcomes == [MessageOutcome.ACKED, MessageOutcome.ACKED]
    assert [m.json for m in received] == ["plain", {"items": [1, 2]}]
    assert received[0].checksum == 7
    assert len(sqs_client.deleted) == 2
