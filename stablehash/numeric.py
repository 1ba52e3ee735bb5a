"""
Numeric helpers over fingerprints: integer parsing and bucketing.
"""

from __future__ import annotations

import logging
import numbers
import re

from stablehash.errors import StablehashError

logger = logging.getLogger(__name__)

_HEX = re.compile(r"[0-9a-fA-F]+")
_UINT64_LIMIT = 2**64
UINT64_MAX = _UINT64_LIMIT - 1


class InvalidFingerprintError(StablehashError, ValueError):
    """Raised when a string is not a valid hex fingerprint."""


class FingerprintOverflowError(InvalidFingerprintError):
    """Raised when a hex fingerprint does not fit in 64 bits."""


class InvalidArgumentError(StablehashError, ValueError):
    """Raised when a numeric argument is out of its allowed range."""


def to_uint64_checked(fp: str) -> int:
    """
    Parse a hex fingerprint into an unsigned 64-bit integer.

    Accepts hex digits of either case with no sign, prefix, whitespace or
    underscores. Leading zeros are allowed as long as the value fits.

    Raises:
        InvalidFingerprintError: If fp is not hex.
        FingerprintOverflowError: If fp is hex but does not fit in 64 bits.
    """
    if not isinstance(fp, str) or _HEX.fullmatch(fp) is None:
        raise InvalidFingerprintError(f"not a hex fingerprint: {fp!r}")
    n = int(fp, 16)
    if n >= _UINT64_LIMIT:
        raise FingerprintOverflowError(f"fingerprint exceeds 64 bits: {fp!r}")
    return n


def to_uint64(fp: str) -> int:
    """
    Parse a hex fingerprint into an unsigned 64-bit integer.

    Input that is not hex yields 0 and hex values too large for 64 bits
    saturate to UINT64_MAX, rather than raising; use to_uint64_checked()
    to have failures raised.

    Example:
        >>> to_uint64("00000000000000ff")
        255
        >>> to_uint64("not hex")
        0
        >>> to_uint64("1" + "0" * 16) == UINT64_MAX
        True
    """
    try:
        return to_uint64_checked(fp)
    except FingerprintOverflowError as e:
        logger.debug("%s, using UINT64_MAX", e)
        return UINT64_MAX
    except InvalidFingerprintError as e:
        logger.debug("%s, using 0", e)
        return 0


def modulo(fp: str, buckets: int) -> int:
    """
    Map a fingerprint onto one of *buckets* partitions.

    Uses exact integer arithmetic, so the result is always in
    [0, buckets) even for digests above the signed 64-bit range.

    Args:
        fp: A hex fingerprint, parsed as by to_uint64().
        buckets: Number of buckets, must be a positive integer.

    Returns:
        to_uint64(fp) % buckets

    Raises:
        InvalidArgumentError: If buckets is not a positive integer.
    """
    if isinstance(buckets, bool) or not isinstance(buckets, numbers.Integral):
        raise InvalidArgumentError(
            f"bucket count must be an integer, got {type(buckets).__name__}"
        )
    if buckets <= 0:
        raise InvalidArgumentError(f"bucket count must be positive, got {buckets}")
    return to_uint64(fp) % int(buckets)
