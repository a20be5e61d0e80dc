"""Tests for the constant-time comparator."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from fernet_codec.crypto.compare import constant_time_equals


@pytest.mark.unit
class TestConstantTimeEquals:
    """Example-based tests for constant_time_equals."""

    def test_equal(self) -> None:
        """Identical sequences compare equal."""
        assert constant_time_equals(b"\x00\x01\x02", b"\x00\x01\x02")

    def test_empty(self) -> None:
        """Two empty sequences compare equal."""
        assert constant_time_equals(b"", b"")

    @pytest.mark.parametrize("index", [0, 15, 31])
    def test_single_difference_anywhere(self, index: int) -> None:
        """A mismatch at the first, middle or last byte is detected."""
        a = bytes(32)
        b = bytearray(a)
        b[index] = 1
        assert not constant_time_equals(a, bytes(b))

    def test_different_lengths(self) -> None:
        """Different lengths never compare equal."""
        assert not constant_time_equals(b"abc", b"abcd")
        assert not constant_time_equals(b"", b"\x00")

    def test_length_mismatch_does_not_read_content(self) -> None:
        """Content is not inspected when lengths differ."""

        class Unreadable(bytes):
            def __iter__(self):  # type: ignore[override]
                raise AssertionError("content inspected")

        assert not constant_time_equals(Unreadable(b"ab"), b"abc")

    def test_walks_whole_input(self) -> None:
        """Every byte is visited even after a mismatch in the first one."""
        visited: list[int] = []

        class Recording(bytes):
            def __iter__(self):  # type: ignore[override]
                for value in super().__iter__():
                    visited.append(value)
                    yield value

        a = Recording(b"\x01" + bytes(31))
        assert not constant_time_equals(a, bytes(32))
        assert len(visited) == 32


@pytest.mark.unit
class TestConstantTimeEqualsProperties:
    """Property-based tests for constant_time_equals."""

    @given(a=st.binary(max_size=64), b=st.binary(max_size=64))
    @settings(max_examples=200)
    def test_matches_equality(self, a: bytes, b: bytes) -> None:
        """Result agrees with ordinary equality."""
        assert constant_time_equals(a, b) == (a == b)

    @given(a=st.binary(max_size=64), b=st.binary(max_size=64))
    @settings(max_examples=200)
    def test_symmetry(self, a: bytes, b: bytes) -> None:
        """equals(a, b) == equals(b, a)."""
        assert constant_time_equals(a, b) == constant_time_equals(b, a)

    @given(a=st.binary(max_size=64))
    def test_reflexive(self, a: bytes) -> None:
        """Every sequence equals itself."""
        assert constant_time_equals(a, a)
