"""Attribute codec — base64-of-JSON for the ``json`` message attribute.

Structured payloads travel as base64 text in a String attribute, which SNS
relays unchanged.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
from typing import Any

from .exceptions import ErrorKind, EventError


def encode_json(value: Any) -> str:
    """Serialize *value* to compact JSON and base64 encode the UTF-8 bytes."""
    try:
        text = json.dumps(
            value,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise EventError(
            ErrorKind.ENCODING_ERROR, f"value is not JSON serializable: {e}", cause=e
        ) from e
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_json(text: str) -> Any:
    """Invert :func:`encode_json`."""
    try:
        raw = base64.b64decode(text, validate=True)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, TypeError) as e:
        raise EventError(
            ErrorKind.DECODING_ERROR, f"invalid encoded json attribute: {e}", cause=e
        ) from e


def is_finite_number(value: Any) -> bool:
    """Return True for a finite int/float or a string parsing as one.

    ``bool`` is rejected, as are integers too large to represent as a float.
    """
    if isinstance(value, bool):
        return False
    try:
        if isinstance(value, (int, float)):
            return math.isfinite(value)
        if isinstance(value, str) and value.strip():
            return math.isfinite(float(value))
    except (ValueError, OverflowError):
        return False
    return False


def format_number(value: Any) -> str:
    """Render a value accepted by :func:`is_finite_number` as Number text."""
    if isinstance(value, str):
        value = float(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
