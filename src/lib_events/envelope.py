"""Envelope classification and decoding for received queue messages.

A message arrives in one of three shapes:

* **storage**: an object-storage notification forwarded to the queue; the
  body holds a ``Records`` array and only the first record is used.
* **relayed**: an SNS notification delivered without raw message delivery;
  the body is the SNS envelope (``Type == "Notification"``) with the event
  text under ``Message`` and ``{Type, Value}`` attributes under
  ``MessageAttributes``.
* **direct**: the queue message itself carries native
  ``{DataType, StringValue|BinaryValue}`` message attributes.

:func:`classify_envelope` picks the shape once, then one decoder per shape
builds the :class:`~lib_events.message.Message`.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .codec import decode_json
from .exceptions import ErrorKind, EventError
from .message import Message

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("lib_events.envelope")

JSON_ATTRIBUTE = "json"
NOTIFICATION_TYPE = "Notification"


class EnvelopeKind(str, Enum):
    STORAGE = "storage"
    RELAYED = "relayed"
    DIRECT = "direct"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedEnvelope:
    """A raw queue message tagged with its envelope shape."""

    kind: EnvelopeKind
    raw: Mapping[str, Any]
    body_text: str
    body: Any
    body_is_json: bool


def classify_envelope(raw: Mapping[str, Any]) -> ClassifiedEnvelope:
    """Decide which envelope shape *raw* (an SQS ``Message`` dict) has."""
    body_text = raw.get("Body") or ""
    body, is_json = _parse_body(body_text)
    native = raw.get("MessageAttributes") or {}

    if isinstance(body, dict):
        records = body.get("Records")
        if isinstance(records, list) and records:
            kind = EnvelopeKind.STORAGE
        elif not native and _is_notification(body):
            kind = EnvelopeKind.RELAYED
        elif native:
            kind = EnvelopeKind.DIRECT
        else:
            kind = EnvelopeKind.UNKNOWN
    elif native:
        kind = EnvelopeKind.DIRECT
    else:
        kind = EnvelopeKind.UNKNOWN
    return ClassifiedEnvelope(kind, raw, body_text, body, is_json)


def decode_envelope(raw: Mapping[str, Any]) -> Message:
    """Classify *raw* and decode it into a :class:`Message`.

    Raises:
        EventError: kind ``DECODING_ERROR`` when an attribute cannot be decoded.
    """
    envelope = classify_envelope(raw)
    return _DECODERS[envelope.kind](envelope)


def decode_storage(envelope: ClassifiedEnvelope) -> Message:
    # Storage notifications carry one record per event.
    record = envelope.body["Records"][0]
    event_name = record.get("eventName") if isinstance(record, dict) else None
    event_source = record.get("eventSource") if isinstance(record, dict) else None
    return Message(
        type=event_name if isinstance(event_name, str) else "",
        source=event_source if isinstance(event_source, str) else "",
        checksum=0,
        message=envelope.body_text,
        body=record,
    )


def decode_relayed(envelope: ClassifiedEnvelope) -> Message:
    return map_relayed_attributes(envelope.body)


def map_relayed_attributes(data: Mapping[str, Any]) -> Message:
    """Build a Message from an SNS notification body.

    Relayed attributes are ``{Type, Value}`` pairs. Strings and numbers come
    through intact; Binary values are recovered as raw bytes only.
    """
    attributes = {
        name: _relayed_value(name, value)
        for name, value in (data.get("MessageAttributes") or {}).items()
    }
    text = data.get("Message")
    text = text if isinstance(text, str) else ""
    body, is_json = _parse_body(text)
    return _build_message(attributes, text, body if is_json else text, {})


def decode_direct(envelope: ClassifiedEnvelope) -> Message:
    attributes = {
        name: _native_value(name, value)
        for name, value in (envelope.raw.get("MessageAttributes") or {}).items()
    }
    system = envelope.raw.get("Attributes") or {}
    body = envelope.body if envelope.body_is_json else envelope.body_text
    return _build_message(attributes, envelope.body_text, body, system)


def decode_unknown(envelope: ClassifiedEnvelope) -> Message:
    body = envelope.body if envelope.body_is_json else envelope.body_text
    return Message(type="", checksum=0, message=envelope.body_text, body=body)


_DECODERS: dict[EnvelopeKind, Callable[[ClassifiedEnvelope], Message]] = {
    EnvelopeKind.STORAGE: decode_storage,
    EnvelopeKind.RELAYED: decode_relayed,
    EnvelopeKind.DIRECT: decode_direct,
    EnvelopeKind.UNKNOWN: decode_unknown,
}


def _parse_body(text: str) -> tuple[Any, bool]:
    if not text:
        return None, False
    try:
        return json.loads(text), True
    except ValueError:
        return None, False


def _is_notification(body: Mapping[str, Any]) -> bool:
    if body.get("Type") == NOTIFICATION_TYPE:
        return True
    # Older relays omit Type but keep both Message and MessageAttributes.
    return (
        "Type" not in body
        and "Message" in body
        and isinstance(body.get("MessageAttributes"), dict)
    )


def _build_message(
    attributes: dict[str, Any],
    text: str,
    body: Any,
    system: Mapping[str, Any],
) -> Message:
    checksum = attributes.get("checksum", 0)
    if isinstance(checksum, str):
        checksum = to_number(checksum)
    return Message(
        type=str(attributes.get("type", "")),
        source=str(attributes.get("source", "")),
        checksum=checksum,
        message=text,
        uri=_optional_str(attributes.get("uri")),
        id=_optional_str(attributes.get("id")),
        json=attributes.get(JSON_ATTRIBUTE),
        groupId=_optional_str(
            attributes.get("groupId") or system.get("MessageGroupId")
        ),
        transactionId=_optional_str(
            attributes.get("transactionId") or system.get("MessageDeduplicationId")
        ),
        attributes=attributes,
        body=body,
    )


def _native_value(name: str, value: Mapping[str, Any]) -> Any:
    data_type = str(value.get("DataType", ""))
    base = data_type.split(".", 1)[0]
    if base == "String":
        text = value.get("StringValue", "")
        return decode_json(text) if name == JSON_ATTRIBUTE else text
    if base == "Number":
        return to_number(value.get("StringValue", ""))
    if base == "Binary":
        return _binary_json(value.get("BinaryValue", b""))
    raise EventError(
        ErrorKind.DECODING_ERROR,
        f"Unsupported data type {data_type!r} for attribute {name!r}",
    )


def _relayed_value(name: str, value: Any) -> Any:
    if not isinstance(value, Mapping):
        return value
    data_type = value.get("Type")
    raw = value.get("Value")
    if data_type is None:
        return raw
    base = str(data_type).split(".", 1)[0]
    if data_type == "String.Array":
        return json.loads(raw) if isinstance(raw, str) else raw
    if base == "String":
        return decode_json(raw) if name == JSON_ATTRIBUTE else raw
    if base == "Number":
        return to_number(raw)
    if base == "Binary":
        logger.warning(
            "Relayed binary attribute %r recovered as raw bytes only", name
        )
        try:
            return base64.b64decode(str(raw), validate=True)
        except (binascii.Error, ValueError):
            return None
    raise EventError(
        ErrorKind.DECODING_ERROR,
        f"Unsupported data type {data_type!r} for attribute {name!r}",
    )


def _binary_json(value: Any) -> Any:
    try:
        if isinstance(value, str):
            value = base64.b64decode(value, validate=True)
        return json.loads(bytes(value).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, TypeError) as e:
        raise EventError(
            ErrorKind.DECODING_ERROR, f"invalid binary attribute: {e}", cause=e
        ) from e


def to_number(value: Any) -> int | float:
    """Parse a Number attribute value, preferring int for integral text."""
    if isinstance(value, bool):
        raise EventError(ErrorKind.DECODING_ERROR, f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        return value
    try:
        return int(str(value))
    except ValueError:
        pass
    try:
        return float(str(value))
    except ValueError as e:
        raise EventError(
            ErrorKind.DECODING_ERROR, f"not a number: {value!r}", cause=e
        ) from e


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)
