"""
BidVault Auction Module.

This module provides the auction state machine:
- Bid acceptance with strict-improvement enforcement
- Highest-bid tracking
- Sale closing with fee extraction
- Loser fund retraction
"""

from bidvault.core.auction.engine import AuctionEngine
from bidvault.core.auction.payment import must_pay

__all__ = [
    "AuctionEngine",
    "must_pay",
]
