"""Unit tests for SNSPublisher with mocked connection (no real AWS)."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from lib_events.codec import decode_json
from lib_events.events import EventType
from lib_events.exceptions import ErrorKind, EventError
from lib_events.message import Message
from lib_events.sns.publisher import (
    MAX_EVENT_MESSAGE_SIZE,
    SNSPublisher,
    serialized_size,
)

TOPIC = "arn:aws:sns:ap-southeast-2:1234:events"
FIFO_TOPIC = "arn:aws:sns:ap-southeast-2:1234:events.fifo"


@pytest.fixture
def mock_connection() -> MagicMock:
    conn = MagicMock()
    conn.get_client = AsyncMock()
    conn.health_check = AsyncMock(return_value=True)
    mock_client = MagicMock()
    mock_client.publish = AsyncMock(return_value={"MessageId": "m-1"})
    conn.get_client.return_value = mock_client
    return conn


@pytest.fixture
def publisher(mock_connection: MagicMock) -> SNSPublisher:
    return SNSPublisher(mock_connection, topic=TOPIC, api_host="https://api.test")


def _event(**overrides: Any) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": EventType.ORDER_CREATED,
        "source": "svc-order",
        "checksum": 1,
        "message": "order created",
    }
    event.update(overrides)
    return event


@pytest.mark.asyncio
async def test_dispatch_publishes_attributes(
    publisher: SNSPublisher, mock_connection: MagicMock
) -> None:
    result = await publisher.dispatch(
        _event(uri="/api/orders/1", id="order-1", json={"a": 1})
    )
    assert result == {"MessageId": "m-1"}
    client = mock_connection.get_client.return_value
    client.publish.assert_called_once()
    call = client.publish.call_args.kwargs
    assert call["TopicArn"] == TOPIC
    assert call["Message"] == "order created"
    attributes = call["MessageAttributes"]
    assert attributes["type"] == {"DataType": "String", "StringValue": "ORDER_CREATED"}
    assert attributes["checksum"] == {"DataType": "Number", "StringValue": "1"}
    assert attributes["source"] == {"DataType": "String", "StringValue": "svc-order"}
    assert attributes["uri"]["StringValue"] == "https://api.test/api/orders/1"
    assert attributes["id"]["StringValue"] == "order-1"
    assert attributes["json"]["DataType"] == "String"
    assert decode_json(attributes["json"]["StringValue"]) == {"a": 1}
    assert "MessageGroupId" not in call


@pytest.mark.asyncio
async def test_dispatch_accepts_message_model(
    publisher: SNSPublisher, mock_connection: MagicMock
) -> None:
    await publisher.dispatch(
        Message(type="OFFER_UPDATE", source="svc", checksum=2.5, message="m")
    )
    call = mock_connection.get_client.return_value.publish.call_args.kwargs
    assert call["MessageAttributes"]["checksum"]["StringValue"] == "2.5"
    assert set(call["MessageAttributes"]) == {"type", "checksum", "source"}


def test_invalid_type_checked_first(publisher: SNSPublisher) -> None:
    with pytest.raises(EventError) as exc_info:
        publisher.build_request(
            {"type": "NOT_AN_EVENT", "checksum": "x", "source": "", "message": ""}
        )
    assert exc_info.value.kind is ErrorKind.INVALID_EVENT_TYPE
    assert "NOT_AN_EVENT" in exc_info.value.detail


@pytest.mark.parametrize("event_type", ["NOT_AN_EVENT", None, 7, ["ORDER_CREATED"]])
def test_invalid_type_wins_over_malformed_fields(
    publisher: SNSPublisher, event_type: Any
) -> None:
    with pytest.raises(EventError) as exc_info:
        publisher.build_request(
            {"type": event_type, "checksum": [1], "source": None, "message": None}
        )
    assert exc_info.value.kind is ErrorKind.INVALID_EVENT_TYPE


@pytest.mark.parametrize(
    ("overrides", "kind"),
    [
        ({"checksum": "abc"}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"checksum": float("nan")}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"checksum": float("inf")}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"checksum": None}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"checksum": [1]}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"checksum": 10**400}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"checksum": True}, ErrorKind.INVALID_EVENT_CHECKSUM),
        ({"source": None}, ErrorKind.INVALID_EVENT_SOURCE),
        ({"source": 5}, ErrorKind.INVALID_EVENT_SOURCE),
        ({"message": None}, ErrorKind.INVALID_EVENT_MESSAGE),
        ({"message": {"text": "m"}}, ErrorKind.INVALID_EVENT_MESSAGE),
        ({"source": ""}, ErrorKind.INVALID_EVENT_SOURCE),
        ({"message": ""}, ErrorKind.INVALID_EVENT_MESSAGE),
    ],
)
def test_field_validation(
    publisher: SNSPublisher, overrides: dict[str, Any], kind: ErrorKind
) -> None:
    with pytest.raises(EventError) as exc_info:
        publisher.build_request(_event(**overrides))
    assert exc_info.value.kind is kind


def test_numeric_string_checksum_is_accepted(publisher: SNSPublisher) -> None:
    request = publisher.build_request(_event(checksum="42"))
    assert request["MessageAttributes"]["checksum"]["StringValue"] == "42"


@pytest.mark.asyncio
async def test_invalid_json_aborts_before_transport(
    publisher: SNSPublisher, mock_connection: MagicMock
) -> None:
    cyclic: dict[str, Any] = {}
    cyclic["self"] = cyclic
    with pytest.raises(EventError) as exc_info:
        await publisher.dispatch(_event(json=cyclic))
    assert exc_info.value.kind is ErrorKind.INVALID_EVENT_JSON
    assert exc_info.value.cause is not None
    mock_connection.get_client.return_value.publish.assert_not_called()


def test_fifo_requires_group_id(mock_connection: MagicMock) -> None:
    publisher = SNSPublisher(mock_connection, topic=FIFO_TOPIC)
    assert publisher.is_fifo is True
    with pytest.raises(EventError) as exc_info:
        publisher.build_request(_event(transactionId="tx-1"))
    assert exc_info.value.kind is ErrorKind.INVALID_FIFO_MESSAGE
    assert "groupId" in exc_info.value.detail


def test_fifo_requires_transaction_id(mock_connection: MagicMock) -> None:
    publisher = SNSPublisher(mock_connection, topic=FIFO_TOPIC)
    with pytest.raises(EventError) as exc_info:
        publisher.build_request(_event(groupId="group-1"))
    assert exc_info.value.kind is ErrorKind.INVALID_FIFO_MESSAGE
    assert "transactionId" in exc_info.value.detail


@pytest.mark.asyncio
async def test_fifo_with_both_ids_succeeds(mock_connection: MagicMock) -> None:
    publisher = SNSPublisher(mock_connection, topic=FIFO_TOPIC)
    await publisher.dispatch(_event(groupId="group-1", transactionId="tx-1"))
    call = mock_connection.get_client.return_value.publish.call_args.kwargs
    assert call["MessageGroupId"] == "group-1"
    assert call["MessageDeduplicationId"] == "tx-1"


def test_fifo_flag_overrides_topic_suffix(mock_connection: MagicMock) -> None:
    assert SNSPublisher(mock_connection, topic=TOPIC, fifo=True).is_fifo is True
    assert SNSPublisher(mock_connection, topic=FIFO_TOPIC, fifo=False).is_fifo is False


def test_non_fifo_ignores_group_and_transaction_ids(publisher: SNSPublisher) -> None:
    request = publisher.build_request(_event(groupId="g", transactionId="t"))
    assert "MessageGroupId" not in request
    assert "MessageDeduplicationId" not in request


def _overhead(publisher: SNSPublisher) -> int:
    return serialized_size(publisher.build_request(_event(message="x"))) - 1


@pytest.mark.parametrize("delta", [-1, 0])
def test_size_at_or_under_limit_succeeds(publisher: SNSPublisher, delta: int) -> None:
    body = "a" * (MAX_EVENT_MESSAGE_SIZE - _overhead(publisher) + delta)
    request = publisher.build_request(_event(message=body))
    assert serialized_size(request) == MAX_EVENT_MESSAGE_SIZE + delta


def test_size_one_byte_over_limit_fails(publisher: SNSPublisher) -> None:
    body = "a" * (MAX_EVENT_MESSAGE_SIZE - _overhead(publisher) + 1)
    with pytest.raises(EventError) as exc_info:
        publisher.build_request(_event(message=body))
    assert exc_info.value.kind is ErrorKind.INVALID_EVENT_SIZE


def test_size_counts_utf8_bytes(publisher: SNSPublisher) -> None:
    request = publisher.build_request(_event(message="é"))
    ascii_request = publisher.build_request(_event(message="e"))
    assert serialized_size(request) == serialized_size(ascii_request) + 1


@pytest.mark.asyncio
async def test_ignore_events_skips_transport(mock_connection: MagicMock) -> None:
    publisher = SNSPublisher(mock_connection, topic=TOPIC, ignore_events=True)
    assert await publisher.dispatch(_event()) is None
    mock_connection.get_client.assert_not_called()


@pytest.mark.asyncio
async def test_ignore_events_still_validates(mock_connection: MagicMock) -> None:
    publisher = SNSPublisher(mock_connection, topic=TOPIC, ignore_events=True)
    with pytest.raises(EventError):
        await publisher.dispatch(_event(source=""))


@pytest.mark.asyncio
async def test_transport_error_propagates_unwrapped(
    publisher: SNSPublisher, mock_connection: MagicMock
) -> None:
    boom = RuntimeError("throttled")
    mock_connection.get_client.return_value.publish = AsyncMock(side_effect=boom)
    with pytest.raises(RuntimeError) as exc_info:
        await publisher.dispatch(_event())
    assert exc_info.value is boom


@pytest.mark.asyncio
async def test_health_check_probes_topic(
    publisher: SNSPublisher, mock_connection: MagicMock
) -> None:
    assert await publisher.health_check() is True
    mock_connection.health_check.assert_called_once_with(TopicArn=TOPIC)
