"""Auction state: bid ledger and singleton records"""
from bidvault.core.state.bid_ledger import BidLedger, ALL_BIDS_BUCKET, BID_FEES_BUCKET
from bidvault.core.state.auction_state import (
    AuctionState,
    Config,
    HighestBid,
    STATE_BUCKET,
)

__all__ = [
    "BidLedger",
    "ALL_BIDS_BUCKET",
    "BID_FEES_BUCKET",
    "AuctionState",
    "Config",
    "HighestBid",
    "STATE_BUCKET",
]
