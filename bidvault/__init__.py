"""
BidVault

A single-asset ascending-bid auction with escrowed funds:
- Cumulative bids held in custody by the contract
- Owner closes the sale and receives the winning amount less a fee
- Losing bidders retract their escrow after close
"""

__version__ = "0.1.0"
