"""Conversion between documents and the backend's `[key, value]` tuples.

This is the only module that knows the positional layout of a record in the
backend space.
"""
from __future__ import annotations
import math
from collections.abc import Mapping, Sequence
from typing import Any

from .errors import DecodeError, InvalidInputError

KEY_FIELD = 0
VALUE_FIELD = 1

Document = dict[str, Any]

_SCALARS = (str, int, float, bool, type(None))

# msgpack integer range
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 64 - 1


def _check_value(value: Any, path: str) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInputError(f"non-finite number at {path or '<root>'} cannot be stored")
    if isinstance(value, int) and not isinstance(value, bool) and not INT_MIN <= value <= INT_MAX:
        raise InvalidInputError(f"integer at {path or '<root>'} is out of range")
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise InvalidInputError(f"field name {k!r} at {path or '<root>'} is not a string")
            _check_value(v, f"{path}.{k}" if path else k)
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_value(item, f"{path}[{i}]")
        return
    raise InvalidInputError(f"unsupported value of type {type(value).__name__} at {path or '<root>'}")


def encode(document: Any) -> Document:
    """Validate `document` and return it unchanged for the value slot.

    The backend stores the native mapping as-is, so encoding is the identity
    once the value is known to be a document.
    """
    if not isinstance(document, dict):
        raise InvalidInputError("value must be a document (JSON object)")
    _check_value(document, "")
    return document


def encode_record(key: str, document: Any) -> list[Any]:
    record: list[Any] = [None, None]
    record[KEY_FIELD] = key
    record[VALUE_FIELD] = encode(document)
    return record


def value_assignment(document: Any) -> list[tuple[str, int, Any]]:
    """Update operation list replacing the whole value slot."""
    return [("=", VALUE_FIELD, encode(document))]


def _decode_name(name: Any) -> str:
    if isinstance(name, str):
        return name
    if isinstance(name, bytes):
        try:
            return name.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"field name {name!r} is not valid UTF-8") from e
    raise DecodeError(f"field name {name!r} is not a string")


def _decode_value(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return decode(raw)
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("binary value is not valid UTF-8") from e
    if isinstance(raw, (list, tuple)):
        return [_decode_value(item) for item in raw]
    if isinstance(raw, _SCALARS):
        return raw
    raise DecodeError(f"unsupported stored value of type {type(raw).__name__}")


def _is_pair_sequence(raw: Any) -> bool:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        return False
    return all(
        isinstance(item, (list, tuple)) and len(item) == 2 and isinstance(item[0], (str, bytes))
        for item in raw
    )


def decode(raw: Any) -> Document:
    """Rebuild a document from a raw backend value.

    Accepts a native mapping or a sequence of `[field, value]` pairs. Field
    names may arrive as bytes. Anything else raises `DecodeError`.
    """
    if isinstance(raw, Mapping):
        items = raw.items()
    elif _is_pair_sequence(raw):
        items = ((item[0], item[1]) for item in raw)
    else:
        raise DecodeError(f"stored value of type {type(raw).__name__} is not a document")

    doc: Document = {}
    for name, value in items:
        doc[_decode_name(name)] = _decode_value(value)
    return doc


def decode_record(record: Any) -> tuple[Any, Document]:
    if isinstance(record, (str, bytes)) or not isinstance(record, Sequence):
        raise DecodeError(f"tuple of type {type(record).__name__} is not a sequence")
    if len(record) <= VALUE_FIELD:
        raise DecodeError(f"tuple has {len(record)} fields, expected at least {VALUE_FIELD + 1}")
    return record[KEY_FIELD], decode(record[VALUE_FIELD])
