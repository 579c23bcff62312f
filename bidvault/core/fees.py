"""
Fees - Protocol fee computation for BidVault.

The owner takes a fee on every accepted bid increment and on the winning
amount at close. Rates are fractions in [0, 1%] with at most 18 decimal
places; the fee is computed with exact integer arithmetic:

    atomics   = rate * 10**18                       (rate as an integer)
    numerator = atomics * FEE_SCALE_FACTOR          (basis points, scaled)
    fee       = amount * numerator // (10**18 * FEE_SCALE_FACTOR)

which is floor(amount * rate). The product is checked against a 256-bit
domain and the result against the 128-bit amount domain; going outside
either is an error, never a clamped value.
"""

from decimal import Decimal

from bidvault.core.errors import ArithmeticOverflow, DivideByZero
from bidvault.utils.validation import FEE_DECIMAL_PLACES, MAX_AMOUNT


# =============================================================================
# Constants
# =============================================================================

# Basis-points scale
FEE_SCALE_FACTOR = 10_000

# Integer scale of a fee rate's fractional part
FEE_DECIMAL_PRECISION = 10**FEE_DECIMAL_PLACES

# Width of the intermediate product
MAX_WIDE = 2**256 - 1


def fee_rate_atomics(fee_rate: Decimal) -> int:
    """
    Convert a fee rate to its scaled integer form (rate * 10**18).

    Raises ArithmeticOverflow if the rate carries more precision than can be
    represented exactly.
    """
    scaled = fee_rate.scaleb(FEE_DECIMAL_PLACES)
    atomics = int(scaled)
    if scaled != atomics:
        raise ArithmeticOverflow(
            f"fee rate {fee_rate} exceeds {FEE_DECIMAL_PLACES} decimal places",
        )
    return atomics


def fee_rate_numerator(fee_rate: Decimal) -> int:
    """Fee rate expressed in basis points, scaled by 10**18."""
    numerator = fee_rate_atomics(fee_rate) * FEE_SCALE_FACTOR
    if numerator > MAX_AMOUNT:
        raise ArithmeticOverflow(f"fee numerator overflow for rate {fee_rate}")
    return numerator


def owner_fee_amount(amount: int, fee_rate: Decimal) -> int:
    """
    Compute the owner's fee on an amount.

    Args:
        amount: Amount in the token's smallest unit
        fee_rate: Fractional rate (0.01 == 1%)

    Returns:
        floor(amount * fee_rate)
    """
    if fee_rate.is_zero():
        return 0

    if amount < 0 or amount > MAX_AMOUNT:
        raise ArithmeticOverflow(f"amount out of range: {amount}")

    numerator = fee_rate_numerator(fee_rate)

    product = amount * numerator
    if product > MAX_WIDE:
        raise ArithmeticOverflow(f"fee product overflow: {amount} * {numerator}")

    denominator = FEE_DECIMAL_PRECISION * FEE_SCALE_FACTOR
    if denominator == 0:
        raise DivideByZero("fee denominator is zero")

    fee = product // denominator
    if fee > MAX_AMOUNT:
        raise ArithmeticOverflow(f"fee does not fit amount range: {fee}")
    return fee

