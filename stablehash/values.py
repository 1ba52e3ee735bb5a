"""
Input value variants and their canonical byte encodings.

Every value handed to the fingerprint engine is classified into exactly one
of the variants below. Each variant owns its encoding rule; the engine only
ever concatenates the encoded bytes.

Variants:
- Null: absent value, encodes to nothing
- Boolean: "true" / "false"
- Integer: base-10 text, any width
- Float32 / Float64: integer text when the value truncates losslessly,
  otherwise "%f" text
- Text: UTF-8 bytes, no delimiter
- Bytes: verbatim
- TextList: concatenation of its elements' UTF-8 bytes
- Nullable: a present-or-absent scalar; null encodes like Null, present
  encodes like the wrapped scalar
- Structured: canonical JSON of anything else

Changing any rule here changes every fingerprint ever produced.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np

from stablehash._canonical import canonical

_INT64_BOUNDS = (-(2**63), 2**63)
_INT32_BOUNDS = (-(2**31), 2**31)

# Strings are encoded with surrogatepass so lone surrogates never fail
_TEXT_ERRORS = "surrogatepass"


def _encode_text(value: str) -> bytes:
    return value.encode("utf-8", _TEXT_ERRORS)


def _encode_float(value: float, bounds: tuple[int, int]) -> bytes:
    """
    Encode a float, collapsing whole numbers onto the integer rule.

    A value collapses when it is finite, inside the signed range of the
    integer type of the same width, and equal to its truncation.
    """
    if math.isnan(value):
        return b"NaN"
    if math.isinf(value):
        return b"+Inf" if value > 0 else b"-Inf"
    low, high = bounds
    if low <= value < high and value == math.trunc(value):
        return b"%d" % math.trunc(value)
    return b"%f" % value


@dataclass(frozen=True)
class Null:
    """An absent value."""

    def encode(self) -> bytes:
        return b""


NULL = Null()


_BOOLS = (bool, np.bool_)
_INTEGERS = (int, np.integer)
_REALS = (int, float, np.integer, np.floating)


def _reject(variant: str, expected: str, value: Any) -> TypeError:
    return TypeError(f"{variant} expects {expected}, got {type(value).__name__}")


@dataclass(frozen=True)
class Boolean:
    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, _BOOLS):
            raise _reject("Boolean", "a bool", self.value)
        object.__setattr__(self, "value", bool(self.value))

    def encode(self) -> bytes:
        return b"true" if self.value else b"false"


@dataclass(frozen=True)
class Integer:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, _BOOLS) or not isinstance(self.value, _INTEGERS):
            raise _reject("Integer", "an int", self.value)
        object.__setattr__(self, "value", int(self.value))

    def encode(self) -> bytes:
        return b"%d" % self.value


def _real(variant: str, value: Any) -> float:
    if isinstance(value, _BOOLS) or not isinstance(value, _REALS):
        raise _reject(variant, "a real number", value)
    return float(value)


@dataclass(frozen=True)
class Float64:
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _real("Float64", self.value))

    def encode(self) -> bytes:
        return _encode_float(self.value, _INT64_BOUNDS)


@dataclass(frozen=True)
class Float32:
    """
    A single-precision float.

    Python floats are double precision; wrap a value in Float32 to have it
    rounded to single precision and fingerprinted with the 32-bit rule.

    Example:
        >>> Float32(0.1).value
        0.10000000149011612
    """

    value: float

    def __post_init__(self) -> None:
        value = _real("Float32", self.value)
        object.__setattr__(self, "value", float(np.float32(value)))

    def encode(self) -> bytes:
        return _encode_float(self.value, _INT32_BOUNDS)


@dataclass(frozen=True)
class Text:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise _reject("Text", "a str", self.value)
        # str.__str__ drops subclass overrides such as Enum.__str__
        object.__setattr__(self, "value", str.__str__(self.value))

    def encode(self) -> bytes:
        return _encode_text(self.value)


@dataclass(frozen=True)
class Bytes:
    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise _reject("Bytes", "bytes", self.value)
        object.__setattr__(self, "value", bytes(self.value))

    def encode(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class TextList:
    """A sequence of strings, absorbed back to back with no separator."""

    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        values = self.values
        if not isinstance(values, (list, tuple)) or not all(
            isinstance(v, str) for v in values
        ):
            raise _reject("TextList", "a list or tuple of str", values)
        object.__setattr__(self, "values", tuple(str.__str__(v) for v in values))

    def encode(self) -> bytes:
        return b"".join(_encode_text(v) for v in self.values)


_SCALAR_TYPES = (str, bool, int, float, Float32, np.bool_, np.integer, np.floating)


@dataclass(frozen=True)
class Nullable:
    """
    An optional scalar: either a value or None.

    A present Nullable fingerprints exactly like the bare scalar it wraps;
    a null Nullable fingerprints like None (and like an empty string).

    Args:
        value: A str, bool, int, float, Float32, numpy scalar, another
               Nullable (unwrapped), or None.

    Raises:
        TypeError: If value is not a scalar.

    Example:
        >>> fingerprint(Nullable("abc")) == fingerprint("abc")
        True
        >>> fingerprint(Nullable(None)) == fingerprint("")
        True
    """

    value: Any = None

    def __post_init__(self) -> None:
        value = self.value
        while isinstance(value, Nullable):
            value = value.value
        if value is not None and not isinstance(value, _SCALAR_TYPES):
            raise TypeError(
                f"Nullable wraps scalars only, got {type(value).__name__}"
            )
        object.__setattr__(self, "value", value)

    @property
    def is_null(self) -> bool:
        return self.value is None

    def encode(self) -> bytes:
        if self.value is None:
            return NULL.encode()
        return classify(self.value).encode()


@dataclass(frozen=True, eq=False)
class Structured:
    """
    Any composite value: records, sequences of records, maps, unions.

    Encoded as canonical JSON (see stablehash._canonical). Two values of
    different concrete types with the same fields are not guaranteed to
    encode identically.
    """

    value: Any = field(default=None)

    def encode(self) -> bytes:
        return _encode_text(canonical(self.value))


Value = Union[
    Null,
    Boolean,
    Integer,
    Float32,
    Float64,
    Text,
    Bytes,
    TextList,
    Nullable,
    Structured,
]

_VARIANTS = (
    Null,
    Boolean,
    Integer,
    Float32,
    Float64,
    Text,
    Bytes,
    TextList,
    Nullable,
    Structured,
)


def _is_text_sequence(obj: Any) -> bool:
    # Named tuples are records, not string sequences
    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        return False
    return isinstance(obj, (list, tuple)) and all(isinstance(v, str) for v in obj)


def classify(obj: Any) -> Value:
    """
    Map a Python object onto its value variant.

    Variants pass through unchanged and enum members become their value.
    bool is tested before int since it is an int subclass; numpy scalars map
    onto the variant of their width.
    Anything without a dedicated rule becomes Structured.
    """
    if isinstance(obj, _VARIANTS):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, enum.Enum):
        # Enum members hash as their value, so Color.RED == "red"
        return classify(obj.value)
    if isinstance(obj, (bool, np.bool_)):
        return Boolean(bool(obj))
    if isinstance(obj, (int, np.integer)):
        return Integer(int(obj))
    if isinstance(obj, (np.float32, np.float16)):
        return Float32(float(obj))
    if isinstance(obj, (float, np.floating)):
        return Float64(float(obj))
    if isinstance(obj, str):
        return Text(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Bytes(bytes(obj))
    if _is_text_sequence(obj):
        return TextList(tuple(obj))
    return Structured(obj)
