"""Encoding between Python values and Firestore REST typed values.

Firestore's REST API wraps every field in a one-key object naming its type,
e.g. ``{"stringValue": "abc"}`` or ``{"integerValue": "42"}`` (64-bit
integers travel as strings).
"""

from __future__ import annotations

import base64
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def encode_value(value: Any) -> dict[str, Any]:
    """Encode one Python value as a Firestore ``Value``."""
    if value is None:
        return {"nullValue": None}
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, Enum):
        return encode_value(value.value)
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        stamp = value.astimezone(UTC).isoformat().replace("+00:00", "Z")
        return {"timestampValue": stamp}
    if isinstance(value, bytes):
        return {"bytesValue": base64.b64encode(value).decode("ascii")}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot encode {type(value).__name__} as a Firestore value")


def encode_fields(data: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return {key: encode_value(value) for key, value in data.items()}


def _parse_timestamp(text: str) -> datetime:
    # Firestore emits nanosecond precision; fromisoformat takes microseconds.
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if "." in text:
        head, rest = text.split(".", 1)
        digits = ""
        while rest and rest[0].isdigit():
            digits += rest[0]
            rest = rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    return datetime.fromisoformat(text)


def decode_value(value: dict[str, Any]) -> Any:
    """Decode a Firestore ``Value`` into a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return _parse_timestamp(value["timestampValue"])
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    raise ValueError(f"Unknown Firestore value type: {sorted(value)}")


def decode_fields(fields: dict[str, dict[str, Any]]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def decode_document(document: dict[str, Any]) -> dict[str, Any]:
    """Decode a REST ``Document`` resource into a plain dict.

    The document id (last segment of ``name``) is filled into ``id`` when the
    stored fields do not carry one.
    """
    data = decode_fields(document.get("fields", {}))
    name = document.get("name", "")
    if name and "id" not in data:
        data["id"] = name.rsplit("/", 1)[-1]
    return data


def nest_dotted(fields: dict[str, Any]) -> dict[str, Any]:
    """Expand dotted keys into nested dicts: ``{"a.b": 1}`` -> ``{"a": {"b": 1}}``."""
    nested: dict[str, Any] = {}
    for path, value in fields.items():
        *parents, leaf = path.split(".")
        target = nested
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = value
    return nested
