"""Exception hierarchy for stablehash."""

from __future__ import annotations


class StablehashError(Exception):
    """Base class for all stablehash errors."""

    pass
