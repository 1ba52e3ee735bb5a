"""
Canonical structured encoding (internal).

This module provides the deterministic JSON encoding used for values that
have no dedicated scalar rule (records, sequences of records, maps, tagged
unions). The encoding is stable for a given logical value but makes no
attempt to unify logically-equivalent values of different concrete types.

Key design decisions:
- Keys are always sorted (after being converted to text); dicts whose key
  texts collide become sorted [key, value] pair lists
- Output is compact JSON (no whitespace)
- Sets become lists sorted by their canonical text
- Dataclasses become dicts
- NaN/Inf become the strings "NaN", "+Inf", "-Inf" (encoding never fails)
- Types can take control of their encoding via canonical_payload()
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import json
import logging
import math
import uuid
from pathlib import PurePath
from typing import Any, Protocol, runtime_checkable

import numpy as np

logger = logging.getLogger(__name__)


@runtime_checkable
class CanonicalEncodable(Protocol):
    """
    Protocol for composite types that define their own canonical payload.

    The payload is encoded with the same rules as any other structured
    value, so it should be built from dicts, lists and scalars.

    Example:
    ```python
    class Order:
        def __init__(self, order_id: str, lines: list[Line]):
            self.order_id = order_id
            self.lines = lines
            self._cache = {}

        def canonical_payload(self) -> dict[str, Any]:
            # Leave the cache out of the fingerprint
            return {"order_id": self.order_id, "lines": self.lines}
    ```
    """

    def canonical_payload(self) -> Any:
        """Return the data that stands in for this object when encoding."""
        ...


def _dumps(encoded: Any) -> str:
    return json.dumps(
        encoded,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _float_value(value: float) -> float | str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return value


def _key_text(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, (bool, np.bool_)):
        return "true" if key else "false"
    if isinstance(key, enum.Enum):
        return _key_text(key.value)
    if isinstance(key, np.generic):
        return _key_text(key.item())
    if key is None:
        return "null"
    return str(key)


def _slot_attributes(obj: Any) -> dict[str, Any] | None:
    attrs: dict[str, Any] = {}
    found = False
    for cls in type(obj).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            found = True
            if name in ("__dict__", "__weakref__"):
                continue
            if hasattr(obj, name):
                attrs[name] = getattr(obj, name)
    return attrs if found else None


def _encode_mapping(obj: dict[Any, Any]) -> Any:
    """
    Encode a dict with its keys in text order.

    Keys whose text collides (1 and "1") cannot share a JSON object, so such
    dicts become a list of [key, value] pairs ordered by key text, then by
    value text.
    """
    entries = sorted(
        ((_key_text(k), _encode_value(v)) for k, v in obj.items()),
        key=lambda kv: (kv[0], _dumps(kv[1])),
    )
    keys = {k for k, _ in entries}
    if len(keys) == len(entries):
        return dict(entries)
    return [[k, v] for k, v in entries]


def _encode_value(obj: Any) -> Any:
    """
    Recursively encode a value into JSON-compatible primitives.

    Every input has an encoding; objects with no recognised shape are
    rendered with str().
    """
    if obj is None:
        return None
    if isinstance(obj, CanonicalEncodable) and not isinstance(obj, type):
        return _encode_value(obj.canonical_payload())
    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    if isinstance(obj, enum.Enum):
        return _encode_value(obj.value)
    if isinstance(obj, int):
        return int(obj)
    if isinstance(obj, float):
        return _float_value(float(obj))
    if isinstance(obj, str):
        return str.__str__(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return {"__bytes__": bytes(obj).hex()}
    if isinstance(obj, np.ndarray):
        return _encode_value(obj.tolist())
    if isinstance(obj, np.generic):
        return _encode_value(obj.item())
    if isinstance(obj, (list, tuple)):
        return [_encode_value(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        # Sets become lists sorted by canonical text for determinism
        return sorted((_encode_value(item) for item in obj), key=_dumps)
    if isinstance(obj, dict):
        return _encode_mapping(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            field.name: _encode_value(getattr(obj, field.name))
            for field in dataclasses.fields(obj)
        }
    if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
        return obj.isoformat()
    if isinstance(obj, (decimal.Decimal, uuid.UUID, PurePath)):
        return str(obj)
    if isinstance(obj, type):
        return f"{obj.__module__}.{obj.__qualname__}"
    if hasattr(obj, "__dict__"):
        # Generic object: use its __dict__
        return _encode_value(dict(vars(obj)))
    slots = _slot_attributes(obj)
    if slots is not None:
        return _encode_value(slots)

    logger.debug("No structured encoding for %s, using str()", type(obj).__name__)
    return str(obj)


def canonical(obj: Any) -> str:
    """
    Convert an object to a canonical JSON string.

    The output is deterministic: the same input always produces the same
    string, regardless of dict insertion order or set iteration order.

    Args:
        obj: The object to canonicalize. Anything is accepted; see the module
             docstring for how each kind of value is encoded.

    Returns:
        A compact JSON string with sorted keys.

    Example:
        >>> canonical({"b": 1, "a": 2})
        '{"a":2,"b":1}'
        >>> canonical({"x": float("nan")})
        '{"x":"NaN"}'
    """
    return _dumps(_encode_value(obj))
