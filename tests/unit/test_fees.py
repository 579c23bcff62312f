"""
Unit tests for fee computation.

Tests cover:
1. Known rate/amount pairs
2. Zero rate and rounding down
3. Precision and overflow errors
"""

from decimal import Decimal

import pytest

from bidvault.core.errors import ArithmeticOverflow
from bidvault.core.fees import (
    FEE_SCALE_FACTOR,
    fee_rate_atomics,
    fee_rate_numerator,
    owner_fee_amount,
)
from bidvault.utils.validation import MAX_AMOUNT


class TestOwnerFeeAmount:
    """Tests for owner_fee_amount."""

    @pytest.mark.parametrize(
        "amount,rate,expected",
        [
            (10_000, "0.01", 100),
            (10_000, "0.005", 50),
            (99, "0.01", 0),
            (1_000_000, "0.0001", 100),
            (10_500, "0.01", 105),
            (1_234_567, "0.0075", 9_259),
        ],
    )
    def test_known_pairs(self, amount, rate, expected):
        """Fee is floor(amount * rate)."""
        assert owner_fee_amount(amount, Decimal(rate)) == expected

    def test_zero_rate(self):
        """A zero rate never charges, whatever the amount."""
        assert owner_fee_amount(0, Decimal("0")) == 0
        assert owner_fee_amount(MAX_AMOUNT, Decimal("0")) == 0

    def test_zero_amount(self):
        assert owner_fee_amount(0, Decimal("0.01")) == 0

    def test_rounds_down(self):
        """Fractional fees are truncated."""
        assert owner_fee_amount(199, Decimal("0.01")) == 1
        assert owner_fee_amount(200, Decimal("0.01")) == 2

    def test_smallest_rate(self):
        """18 decimal places are representable exactly."""
        rate = Decimal("0.000000000000000001")
        assert owner_fee_amount(10**18, rate) == 1
        assert owner_fee_amount(10**18 - 1, rate) == 0

    def test_max_amount_at_max_rate(self):
        """The largest amount at 1% fits the wide intermediate."""
        assert owner_fee_amount(MAX_AMOUNT, Decimal("0.01")) == MAX_AMOUNT // 100

    def test_amount_out_of_range(self):
        with pytest.raises(ArithmeticOverflow):
            owner_fee_amount(MAX_AMOUNT + 1, Decimal("0.01"))
        with pytest.raises(ArithmeticOverflow):
            owner_fee_amount(-1, Decimal("0.01"))

    def test_too_precise_rate(self):
        """A 19th decimal place cannot be represented."""
        with pytest.raises(ArithmeticOverflow):
            owner_fee_amount(10_000, Decimal("0.0000000000000000001"))

    def test_numerator_overflow(self):
        """An absurd rate overflows the numerator instead of clamping."""
        with pytest.raises(ArithmeticOverflow):
            owner_fee_amount(1, Decimal("1E+20"))


class TestFeeHelpers:
    """Tests for the rate conversion helpers."""

    def test_atomics(self):
        assert fee_rate_atomics(Decimal("0.01")) == 10**16
        assert fee_rate_atomics(Decimal("0")) == 0

    def test_numerator(self):
        assert fee_rate_numerator(Decimal("0.01")) == 10**16 * FEE_SCALE_FACTOR

