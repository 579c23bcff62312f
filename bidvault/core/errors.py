"""
Contract errors for the BidVault auction.

Every failing call raises a typed exception; the host runtime rolls back the
call's writes and turns the exception into a failed ExecutionResult. None of
these are retried internally.

Hierarchy
---------
ContractError (base)
 ├─ Unauthorized
 ├─ AuctionClosed
 ├─ AuctionOpen            (alias: NotYetClosed)
 ├─ WrongPaymentAsset
 ├─ BidTooLow
 ├─ NoBids
 ├─ NoFundsToRetract
 ├─ AlreadyRetracted
 ├─ ArithmeticOverflow
 ├─ DivideByZero
 ├─ InvalidIdentity
 ├─ InvalidConfig
 ├─ NotInstantiated
 └─ AlreadyInstantiated
"""

from typing import Any, Dict, Optional


class ContractError(Exception):
    """
    Base contract error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'BID_TOO_LOW').
        data:    Optional structured details (kept JSON-serializable).
    """

    code = "CONTRACT_ERROR"
    default_message = "contract error"

    def __init__(self, message: Optional[str] = None, *, data: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results and logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Unauthorized(ContractError):
    code = "UNAUTHORIZED"
    default_message = "unauthorized"


class AuctionClosed(ContractError):
    code = "AUCTION_CLOSED"
    default_message = "bid event is closed"


class AuctionOpen(ContractError):
    code = "AUCTION_OPEN"
    default_message = "bid event is still open"


NotYetClosed = AuctionOpen


class WrongPaymentAsset(ContractError):
    code = "WRONG_PAYMENT_ASSET"
    default_message = "wrong payment asset"


class BidTooLow(ContractError):
    code = "BID_TOO_LOW"
    default_message = "total bid must exceed the current highest bid"


class NoBids(ContractError):
    code = "NO_BIDS"
    default_message = "no bid has been placed"


class NoFundsToRetract(ContractError):
    code = "NO_FUNDS_TO_RETRACT"
    default_message = "sender never placed a bid"


class AlreadyRetracted(ContractError):
    code = "ALREADY_RETRACTED"
    default_message = "funds already retracted"


class ArithmeticOverflow(ContractError):
    code = "ARITHMETIC_OVERFLOW"
    default_message = "arithmetic overflow"


class DivideByZero(ContractError):
    code = "DIVIDE_BY_ZERO"
    default_message = "division by zero"


class InvalidIdentity(ContractError):
    code = "INVALID_IDENTITY"
    default_message = "invalid address"


class InvalidConfig(ContractError):
    code = "INVALID_CONFIG"
    default_message = "invalid configuration"


class NotInstantiated(ContractError):
    code = "NOT_INSTANTIATED"
    default_message = "contract has not been instantiated"


class AlreadyInstantiated(ContractError):
    code = "ALREADY_INSTANTIATED"
    default_message = "contract is already instantiated"


__all__ = [
    "ContractError",
    "Unauthorized",
    "AuctionClosed",
    "AuctionOpen",
    "NotYetClosed",
    "WrongPaymentAsset",
    "BidTooLow",
    "NoBids",
    "NoFundsToRetract",
    "AlreadyRetracted",
    "ArithmeticOverflow",
    "DivideByZero",
    "InvalidIdentity",
    "InvalidConfig",
    "NotInstantiated",
    "AlreadyInstantiated",
]
