"""CBOR encoding of the store payload."""

from __future__ import annotations

from typing import Any

import cbor2

from ..errors import DeserializationError, SerializationError


def encode(payload: dict[str, Any]) -> bytes:
    try:
        return cbor2.dumps(payload)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to encode store: {exc}") from exc


def decode(data: bytes) -> dict[str, Any]:
    """Decode one store payload; anything but a CBOR map is rejected."""
    try:
        payload = cbor2.loads(data)
    except (cbor2.CBORDecodeError, EOFError, ValueError) as exc:
        raise DeserializationError(f"Failed to decode store: {exc}") from exc
    if not isinstance(payload, dict):
        raise DeserializationError(f"Expected a map at the top level, got {type(payload).__name__}")
    return payload
