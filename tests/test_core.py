"""
test_core.py - Unit tests for core types and helpers

Tests:
- value_kind: classification of fetched values
- as_wei / eth_to_wei / wei_to_eth: big-integer conversions without floats
- shorten_address
- Exception taxonomy: builtin bases used by callers and pytest
"""

import pytest
from decimal import Decimal

from statewatch import (
    ValueKind, value_kind,
    as_wei, eth_to_wei, wei_to_eth, shorten_address,
    WEI_PER_ETHER,
    MonitorError, FetchError, DirtyStateError, TypeMismatchError,
    UnsupportedComparisonError, KeypathResolutionError, AssertionMismatchError,
)


class TestValueKind:
    """Tests for value classification."""

    def test_int_is_big_integer(self):
        assert value_kind(10 ** 30) is ValueKind.BIG_INTEGER

    def test_bool_is_not_big_integer(self):
        """bool subclasses int but is a primitive boolean."""
        assert value_kind(True) is ValueKind.BOOLEAN

    def test_primitives(self):
        assert value_kind("x") is ValueKind.STRING
        assert value_kind(1.5) is ValueKind.NUMBER
        assert value_kind(Decimal("1.5")) is ValueKind.NUMBER
        assert value_kind(b"\x01") is ValueKind.BYTES

    def test_records(self):
        assert value_kind({"a": 1}) is ValueKind.RECORD
        assert value_kind([1, 2]) is ValueKind.RECORD
        assert value_kind((1, 2)) is ValueKind.RECORD

    def test_none_is_unsupported(self):
        assert value_kind(None) is ValueKind.UNSUPPORTED
        assert value_kind(object()) is ValueKind.UNSUPPORTED


class TestConversions:
    """Tests for big-integer coercion."""

    def test_as_wei_passes_ints_through(self):
        assert as_wei(12) == 12

    def test_as_wei_accepts_integral_decimal_and_strings(self):
        assert as_wei(Decimal("42")) == 42
        assert as_wei("1000000000000000000000") == 10 ** 21
        assert as_wei("0xff") == 255

    def test_as_wei_rejects_fractions(self):
        with pytest.raises(TypeMismatchError, match="integral"):
            as_wei(Decimal("1.5"))

    def test_as_wei_rejects_bool_and_garbage(self):
        with pytest.raises(TypeMismatchError):
            as_wei(True)
        with pytest.raises(TypeMismatchError):
            as_wei("ten")
        with pytest.raises(TypeMismatchError):
            as_wei(1.0)

    def test_eth_to_wei_is_exact(self):
        assert eth_to_wei(1) == WEI_PER_ETHER
        assert eth_to_wei(0.1) == 10 ** 17
        assert eth_to_wei("123456789.123456789123456789") == 123456789123456789123456789

    def test_eth_to_wei_rejects_sub_wei_amounts(self):
        with pytest.raises(ValueError, match="whole number of wei"):
            eth_to_wei("0.0000000000000000001")

    def test_wei_to_eth(self):
        assert wei_to_eth(10 ** 18) == Decimal("1")
        assert wei_to_eth(-5 * 10 ** 17) == Decimal("-0.5")

    def test_shorten_address(self):
        assert shorten_address("0x00000000000000000000000000000000000a11ce") == "11CE"


class TestExceptionTaxonomy:
    """Errors derive from MonitorError and the closest builtin."""

    def test_all_errors_are_monitor_errors(self):
        for error in (FetchError, DirtyStateError, TypeMismatchError,
                      UnsupportedComparisonError, KeypathResolutionError,
                      AssertionMismatchError):
            assert issubclass(error, MonitorError)

    def test_test_visible_failures_are_assertion_errors(self):
        assert issubclass(AssertionMismatchError, AssertionError)
        assert issubclass(DirtyStateError, AssertionError)

    def test_comparison_errors_are_type_errors(self):
        assert issubclass(TypeMismatchError, TypeError)
        assert issubclass(UnsupportedComparisonError, TypeError)

    def test_keypath_error_is_lookup_error(self):
        error = KeypathResolutionError("missing", keypath="a.c", segment="c")
        assert isinstance(error, LookupError)
        assert error.segment == "c"
