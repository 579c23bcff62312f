"""
Payment - Extract the payment attached to a call.
"""

from typing import List

from bidvault.core.errors import WrongPaymentAsset
from bidvault.core.messages import Coin


def must_pay(funds: List[Coin], denom: str) -> int:
    """
    Return the paid amount of denom.

    Exactly one coin must be attached, of the required denom and with a
    positive amount; anything else raises WrongPaymentAsset.
    """
    if not funds:
        raise WrongPaymentAsset("no funds sent", data={"denom": denom})

    if len(funds) > 1:
        raise WrongPaymentAsset(
            "multiple denoms sent",
            data={"denoms": sorted(coin.denom for coin in funds)},
        )

    coin = funds[0]
    if coin.denom != denom:
        raise WrongPaymentAsset(
            f"expected {denom}, got {coin.denom}",
            data={"expected": denom, "received": coin.denom},
        )

    if coin.amount == 0:
        raise WrongPaymentAsset("zero payment", data={"denom": denom})

    return coin.amount
