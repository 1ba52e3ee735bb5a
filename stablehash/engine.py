"""
Fingerprint engine.

Single source of truth for turning an ordered sequence of values into a
16-character hex fingerprint. Values are classified (see stablehash.values),
encoded, and streamed into an XXH64 accumulator in argument order.

The engine keeps no state between calls: every call builds and discards its
own accumulator, so it is safe to call from any number of threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import xxhash

from stablehash.errors import StablehashError
from stablehash.values import Structured, classify

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 16


class AccumulatorFinalizedError(StablehashError):
    """Raised when an accumulator is used after it has been finalized."""

    pass


class Accumulator:
    """
    Order-sensitive streaming hash state (XXH64, seed 0).

    Absorbs byte strings one call at a time and is finalized exactly once.

    Example:
        >>> acc = Accumulator()
        >>> acc.absorb_value(True)
        b'true'
        >>> acc.absorb_value(1)
        b'1'
        >>> render(acc.finalize()) == fingerprint(True, 1)
        True
    """

    def __init__(self) -> None:
        self._hasher = xxhash.xxh64()
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def absorb(self, data: bytes) -> None:
        """Feed raw bytes into the hash state."""
        if self._finalized:
            raise AccumulatorFinalizedError("cannot absorb into a finalized accumulator")
        self._hasher.update(data)

    def absorb_value(self, obj: Any) -> bytes:
        """Classify and encode a value, absorb it, and return the encoded bytes."""
        value = classify(obj)
        if isinstance(value, Structured):
            logger.debug("Structured encoding for %s", type(value.value).__name__)
        encoded = value.encode()
        self.absorb(encoded)
        return encoded

    def finalize(self) -> int:
        """Return the 64-bit digest. May only be called once."""
        if self._finalized:
            raise AccumulatorFinalizedError("accumulator already finalized")
        self._finalized = True
        return self._hasher.intdigest()


def render(digest: int) -> str:
    """Render a 64-bit digest as 16 lowercase, zero-padded hex characters."""
    return format(digest, f"0{FINGERPRINT_LENGTH}x")


def fingerprint(*values: Any) -> str:
    """
    Compute the fingerprint of an ordered sequence of values.

    Never raises: every value has an encoding. Order matters, but values are
    concatenated without separators, so fingerprint("ab", "c") equals
    fingerprint("abc").

    Args:
        *values: The values to fingerprint, in order.

    Returns:
        A 16-character lowercase hex string.

    Example:
        >>> fingerprint(123) == fingerprint(123.0)
        True
        >>> fingerprint(None) == fingerprint("")
        True
    """
    acc = Accumulator()
    for value in values:
        acc.absorb_value(value)
    return render(acc.finalize())


@dataclass(frozen=True)
class Absorption:
    """One value's contribution to a fingerprint."""

    index: int
    variant: str
    data: bytes


@dataclass(frozen=True)
class Explanation:
    """
    Breakdown of a fingerprint computation.

    Attributes:
        absorptions: Per-value variant name and absorbed bytes, in order.
        digest: The 64-bit digest before hex rendering.
    """

    absorptions: tuple[Absorption, ...]
    digest: int

    @property
    def fingerprint(self) -> str:
        return render(self.digest)


def explain(*values: Any) -> Explanation:
    """
    Fingerprint values while recording what each one contributed.

    Produces the same digest as fingerprint(*values). Useful for working out
    why two inputs collide or differ.
    """
    acc = Accumulator()
    absorptions = []
    for index, obj in enumerate(values):
        variant = type(classify(obj)).__name__
        data = acc.absorb_value(obj)
        absorptions.append(Absorption(index=index, variant=variant, data=data))
    return Explanation(absorptions=tuple(absorptions), digest=acc.finalize())
