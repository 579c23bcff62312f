"""
Bid Ledger - Cumulative escrowed amount per participant.

Conceptual Background:
---------------------
Every accepted bid adds to the bidder's entry. Entries are never removed:
a retraction sets the entry to zero, so "absent" (never bid) and "zero"
(already retracted) stay distinguishable.

Bid fees are paid to the owner out of the escrowed payment, so the ledger
also tracks the fee withheld from each bidder. A refund returns the
cumulative bid minus that withheld fee; otherwise refunds would pay out
more than the contract holds.

Layout:
-------
bucket "all_bids", key = checksummed address, value = amount as ASCII
decimal. Keys enumerate in ascending order. Withheld fees use the same
encoding in bucket "bid_fees".
"""

from typing import Dict, Optional

ALL_BIDS_BUCKET = "all_bids"
BID_FEES_BUCKET = "bid_fees"


class BidLedger:
    """
    Persistent identity -> amount map.

    Attributes:
        storage: Storage adapter (MemoryAdapter or SQLiteAdapter)
    """

    def __init__(self, storage):
        self.storage = storage

    def may_load(self, identity: str) -> Optional[int]:
        """Stored amount, or None if the identity never bid."""
        raw = self.storage.get(identity, bucket=ALL_BIDS_BUCKET)
        if raw is None:
            return None
        return int(raw.decode("ascii"))

    def get(self, identity: str, default: int = 0) -> int:
        amount = self.may_load(identity)
        return default if amount is None else amount

    def save(self, identity: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Ledger amount must be non-negative, got {amount}")
        self.storage.put(identity, str(amount).encode("ascii"), bucket=ALL_BIDS_BUCKET)

    def count(self) -> int:
        return self.storage.count(bucket=ALL_BIDS_BUCKET)

    def items(self) -> Dict[str, int]:
        """Snapshot of the whole ledger, in key order."""
        return {
            key: int(raw.decode("ascii"))
            for key, raw in self.storage.items(bucket=ALL_BIDS_BUCKET)
        }

    def fees_withheld(self, identity: str) -> int:
        """Bid fees already paid out of identity's escrow."""
        raw = self.storage.get(identity, bucket=BID_FEES_BUCKET)
        return int(raw.decode("ascii")) if raw is not None else 0

    def add_withheld_fee(self, identity: str, fee: int) -> None:
        if fee < 0:
            raise ValueError(f"Fee must be non-negative, got {fee}")
        total = self.fees_withheld(identity) + fee
        self.storage.put(identity, str(total).encode("ascii"), bucket=BID_FEES_BUCKET)

    def __repr__(self) -> str:
        return f"BidLedger(participants={self.count()})"
