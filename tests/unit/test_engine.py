"""Tests for the fingerprint engine."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import enum
from dataclasses import dataclass

import numpy as np
import pytest

from stablehash.engine import (
    Accumulator,
    AccumulatorFinalizedError,
    explain,
    fingerprint,
    render,
)
from stablehash.numeric import to_uint64
from stablehash.values import Float32, Nullable


class TestFingerprint:
    """Tests for fingerprint()."""

    def test_deterministic(self):
        """Same input should produce same fingerprint."""
        assert fingerprint(True, 1, "x") == fingerprint(True, 1, "x")
        assert fingerprint({"a": 1, "b": 2}) == fingerprint({"b": 2, "a": 1})

    def test_fixed_width(self):
        """Fingerprints are always 16 lowercase hex characters."""
        for values in [(), ("",), ("abc",), (1, 2.5, None), ({"k": [1, 2]},)]:
            fp = fingerprint(*values)
            assert len(fp) == 16
            assert all(c in "0123456789abcdef" for c in fp)

    def test_empty_input(self):
        assert fingerprint() == "ef46db3751d8e999"

    def test_order_sensitive(self):
        assert fingerprint("x", "y") != fingerprint("y", "x")
        assert fingerprint(1, True) != fingerprint(True, 1)

    def test_null_equals_empty_string(self):
        assert fingerprint(None) == fingerprint("")
        assert fingerprint(Nullable(None)) == fingerprint("")
        assert fingerprint(None) == fingerprint()

    def test_integer_float_equivalence(self):
        assert fingerprint(123) == fingerprint(123.0)
        assert fingerprint(123) == fingerprint(np.float64(123.0))
        assert fingerprint(123) == fingerprint(Float32(123.0))
        assert fingerprint(123.5) != fingerprint(123)

    def test_numpy_integer_widths_match(self):
        assert fingerprint(np.int8(-5)) == fingerprint(-5)
        assert fingerprint(np.uint32(5)) == fingerprint(5)

    def test_concatenation_collision(self):
        """Values are absorbed with no separator between them."""
        assert fingerprint("ab", "c") == fingerprint("abc")
        assert fingerprint(["ab", "c"]) == fingerprint("abc")
        assert fingerprint(1, 23) == fingerprint("123")

    def test_single_value_matches_one_element_list(self):
        assert fingerprint("abc") == fingerprint(["abc"])

    def test_nullable_matches_bare_value(self):
        assert fingerprint(Nullable("x")) == fingerprint("x")
        assert fingerprint(Nullable(False)) == fingerprint(False)
        assert fingerprint(Nullable(7)) == fingerprint(7)
        assert fingerprint(Nullable(2.5)) == fingerprint(2.5)

    def test_bytes_match_text(self):
        assert fingerprint(b"abc") == fingerprint("abc")

    def test_boolean_matches_its_text(self):
        assert fingerprint(True) == fingerprint("true")

    def test_structured_values(self):
        @dataclass
        class Point:
            x: int
            y: int

        assert fingerprint(Point(1, 2)) == fingerprint(Point(1, 2))
        assert fingerprint(Point(1, 2)) != fingerprint(Point(2, 1))
        assert fingerprint([{"a": 1}]) == fingerprint([{"a": 1}])

    def test_enum_matches_its_value(self):
        class Color(str, enum.Enum):
            RED = "red"

        assert fingerprint(Color.RED) == fingerprint("red")
        assert fingerprint(Nullable(Color.RED)) == fingerprint("red")
        assert fingerprint({"c": Color.RED}) == fingerprint({"c": "red"})

    def test_equal_dicts_with_colliding_keys(self):
        """Dicts that compare equal fingerprint equally whatever their order."""
        assert fingerprint({1: "a", "1": "b"}) == fingerprint({"1": "b", 1: "a"})
        assert fingerprint({1: "a", "1": "b"}) != fingerprint({"1": "b"})

    def test_never_raises(self):
        """Awkward inputs still produce a fingerprint."""

        class Opaque:
            __slots__ = ()

            def __str__(self):
                return "opaque"

        fp = fingerprint(float("nan"), {"x": float("inf")}, Opaque(), object, "\ud800")
        assert len(fp) == 16

    def test_thread_safe(self):
        """Concurrent calls agree with sequential ones."""
        inputs = [("item", i, i / 3) for i in range(200)]
        expected = [fingerprint(*args) for args in inputs]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda args: fingerprint(*args), inputs))
        assert results == expected


class TestAccumulator:
    """Tests for the Accumulator."""

    def test_streaming_matches_fingerprint(self):
        acc = Accumulator()
        assert acc.absorb_value(True) == b"true"
        assert acc.absorb_value(1) == b"1"
        acc.absorb(b"x")
        assert render(acc.finalize()) == fingerprint(True, 1, "x")

    def test_finalize_once(self):
        acc = Accumulator()
        acc.finalize()
        assert acc.finalized
        with pytest.raises(AccumulatorFinalizedError):
            acc.finalize()

    def test_absorb_after_finalize(self):
        acc = Accumulator()
        acc.finalize()
        with pytest.raises(AccumulatorFinalizedError, match="finalized"):
            acc.absorb(b"late")


class TestRender:
    """Tests for render()."""

    def test_zero_padded(self):
        assert render(0) == "0000000000000000"
        assert render(255) == "00000000000000ff"

    def test_max(self):
        assert render(2**64 - 1) == "ffffffffffffffff"


class TestExplain:
    """Tests for explain()."""

    def test_records_each_value(self):
        result = explain(True, None, [1, 2], "a")
        assert [a.variant for a in result.absorptions] == [
            "Boolean",
            "Null",
            "Structured",
            "Text",
        ]
        assert [a.data for a in result.absorptions] == [b"true", b"", b"[1,2]", b"a"]
        assert [a.index for a in result.absorptions] == [0, 1, 2, 3]

    def test_matches_fingerprint(self):
        values = (False, 3.25, ["x", "y"], {"k": None})
        assert explain(*values).fingerprint == fingerprint(*values)

    def test_parse_round_trip(self):
        """Parsing the rendered fingerprint recovers the internal digest."""
        for values in [(), ("abc",), (1, 2, 3), ({"nested": [1.5]},)]:
            result = explain(*values)
            assert to_uint64(result.fingerprint) == result.digest
