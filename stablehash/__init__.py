"""
stablehash: Deterministic value fingerprints.

A fingerprint is a 64-bit XXH64 digest of an ordered sequence of values,
rendered as 16 lowercase hex characters. Logically equal values produce the
same fingerprint: 123 and 123.0 match, None matches "", and an optional
holding a value matches the bare value. Fingerprints are stable across runs
and processes, and suitable for cache keys, deduplication and sharding. They
are not cryptographically secure.

Example:
    import stablehash

    key = stablehash.fingerprint("orders", 2024, True)
    shard = stablehash.modulo(key, 16)

    # Values are concatenated with no separator
    assert stablehash.fingerprint("ab", "c") == stablehash.fingerprint("abc")

    # Composite values go through a canonical JSON encoding
    stablehash.fingerprint({"b": 1, "a": [1, 2]})
"""

__version__ = "0.1.0"

from stablehash._canonical import CanonicalEncodable, canonical
from stablehash.engine import (
    Absorption,
    Accumulator,
    AccumulatorFinalizedError,
    Explanation,
    explain,
    fingerprint,
    render,
)
from stablehash.errors import StablehashError
from stablehash.numeric import (
    UINT64_MAX,
    FingerprintOverflowError,
    InvalidArgumentError,
    InvalidFingerprintError,
    modulo,
    to_uint64,
    to_uint64_checked,
)
from stablehash.values import (
    Boolean,
    Bytes,
    Float32,
    Float64,
    Integer,
    Null,
    Nullable,
    Structured,
    Text,
    TextList,
    Value,
    classify,
)

__all__ = [
    # Engine
    "fingerprint",
    "explain",
    "render",
    "Accumulator",
    "Absorption",
    "Explanation",
    # Numeric helpers
    "to_uint64",
    "to_uint64_checked",
    "modulo",
    "UINT64_MAX",
    # Values
    "classify",
    "Value",
    "Null",
    "Boolean",
    "Integer",
    "Float32",
    "Float64",
    "Text",
    "Bytes",
    "TextList",
    "Nullable",
    "Structured",
    # Structured encoding
    "canonical",
    "CanonicalEncodable",
    # Errors
    "StablehashError",
    "AccumulatorFinalizedError",
    "InvalidFingerprintError",
    "FingerprintOverflowError",
    "InvalidArgumentError",
]
