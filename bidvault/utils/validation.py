"""
Input Validation - Bounds and format checks for external inputs.

Provides validation for everything that enters the contract:
- Addresses (participant identities)
- Token amounts (Uint128 range)
- Denominations
- Fee rates (bounded fraction with fixed precision)

The validate_* functions return (is_valid, error_message) like the rest of
the checks here; AddressValidator raises InvalidIdentity so it can stand in
for the host's address API inside contract calls.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Tuple

from bidvault.core.errors import InvalidIdentity
from bidvault.crypto import is_valid_address, to_checksum_address

# =============================================================================
# Constants
# =============================================================================

# Token amounts are unsigned 128-bit integers
MIN_AMOUNT = 0
MAX_AMOUNT = 2**128 - 1

# Fee rate bounds: [0, 1%]
MIN_FEE_RATE = Decimal("0")
MAX_FEE_RATE = Decimal("0.01")

# Fractional digits a fee rate may carry
FEE_DECIMAL_PLACES = 18

# Native denom format: letter first, 3-128 chars total
DENOM_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_address(address: Any) -> Tuple[bool, str]:
    """Validate a participant address."""
    if not isinstance(address, str):
        return False, f"address must be str, got {type(address).__name__}"
    if not is_valid_address(address):
        return False, f"malformed address: {address!r}"
    return True, ""


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(value: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a token amount (Uint128)."""
    return validate_integer(value, name, MIN_AMOUNT, MAX_AMOUNT)


def validate_denom(denom: Any) -> Tuple[bool, str]:
    """Validate a native token denomination."""
    if not isinstance(denom, str):
        return False, f"denom must be str, got {type(denom).__name__}"
    if not DENOM_PATTERN.fullmatch(denom):
        return False, f"invalid denom: {denom!r}"
    return True, ""


def validate_fee_rate(rate: Any) -> Tuple[bool, str]:
    """
    Validate a fee rate.

    Must be a finite Decimal in [0, 0.01] with at most 18 fractional digits.
    """
    if not isinstance(rate, Decimal):
        try:
            rate = Decimal(str(rate))
        except InvalidOperation:
            return False, f"fee rate is not a decimal: {rate!r}"

    if not rate.is_finite():
        return False, "fee rate must be finite"

    if rate < MIN_FEE_RATE or rate > MAX_FEE_RATE:
        return False, f"fee rate must be in [{MIN_FEE_RATE}, {MAX_FEE_RATE}], got {rate}"

    exponent = rate.normalize().as_tuple().exponent
    if isinstance(exponent, int) and -exponent > FEE_DECIMAL_PLACES:
        return False, f"fee rate exceeds {FEE_DECIMAL_PLACES} decimal places: {rate}"

    return True, ""


# =============================================================================
# Address API
# =============================================================================


class AddressValidator:
    """
    Address API handed to the auction engine.

    Accepts 0x-prefixed 20-byte hex addresses and returns them in checksummed
    form, so the same identity always maps to the same storage key.
    """

    def addr_validate(self, address: str) -> str:
        """Return the canonical form of address, or raise InvalidIdentity."""
        is_valid, error = validate_address(address)
        if not is_valid:
            raise InvalidIdentity(error, data={"address": str(address)})
        return to_checksum_address(address)

    def is_valid(self, address: str) -> bool:
        return validate_address(address)[0]
