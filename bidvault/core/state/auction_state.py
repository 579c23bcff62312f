"""
Auction State - Singleton records of one auction instance.

Records (bucket "state"):
- owner:       identity that may close the sale and receives fees/payout
- config:      payment denom, fee rate, open flag
- highest_bid: cached (bidder, amount) of the leading bid

highest_bid is derived data. It is written in the same call as the ledger
entry that changed it and must always equal the ledger maximum.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from bidvault.core.errors import NotInstantiated
from bidvault.core.messages import Uint128

STATE_BUCKET = "state"

OWNER_KEY = "owner"
CONFIG_KEY = "config"
HIGHEST_BID_KEY = "highest_bid"


class Config(BaseModel):
    required_native_denom: str
    fee: Decimal
    open_sale: bool = True


class HighestBid(BaseModel):
    bidder: str
    amount: Uint128


class AuctionState:
    """Typed access to the singleton records."""

    def __init__(self, storage):
        self.storage = storage

    def is_instantiated(self) -> bool:
        return self.storage.get(CONFIG_KEY, bucket=STATE_BUCKET) is not None

    # =========================================================================
    # Owner
    # =========================================================================

    def load_owner(self) -> str:
        raw = self.storage.get(OWNER_KEY, bucket=STATE_BUCKET)
        if raw is None:
            raise NotInstantiated("owner not set")
        return raw.decode("utf-8")

    def save_owner(self, owner: str) -> None:
        self.storage.put(OWNER_KEY, owner.encode("utf-8"), bucket=STATE_BUCKET)

    # =========================================================================
    # Config
    # =========================================================================

    def load_config(self) -> Config:
        raw = self.storage.get(CONFIG_KEY, bucket=STATE_BUCKET)
        if raw is None:
            raise NotInstantiated("config not set")
        return Config.model_validate_json(raw)

    def save_config(self, config: Config) -> None:
        self.storage.put(CONFIG_KEY, config.model_dump_json().encode("utf-8"), bucket=STATE_BUCKET)

    # =========================================================================
    # Highest Bid
    # =========================================================================

    def may_load_highest_bid(self) -> Optional[HighestBid]:
        """The leading bid, or None before the first accepted bid."""
        raw = self.storage.get(HIGHEST_BID_KEY, bucket=STATE_BUCKET)
        if raw is None:
            return None
        return HighestBid.model_validate_json(raw)

    def highest_amount(self) -> int:
        highest = self.may_load_highest_bid()
        return highest.amount if highest else 0

    def save_highest_bid(self, bidder: str, amount: int) -> None:
        record = HighestBid(bidder=bidder, amount=amount)
        self.storage.put(HIGHEST_BID_KEY, record.model_dump_json().encode("utf-8"), bucket=STATE_BUCKET)
