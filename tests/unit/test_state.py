"""
Unit tests for the bid ledger and singleton records.
"""

from decimal import Decimal

import pytest

from bidvault.core.errors import NotInstantiated
from bidvault.core.state import AuctionState, BidLedger, Config, HighestBid
from bidvault.core.storage import MemoryAdapter


# =============================================================================
# Bid Ledger
# =============================================================================


class TestBidLedger:
    """Tests for the identity -> amount map."""

    @pytest.fixture
    def ledger(self):
        return BidLedger(MemoryAdapter())

    def test_absent_vs_zero(self, ledger):
        """Never-bid and retracted entries stay distinguishable."""
        assert ledger.may_load("0xa") is None
        ledger.save("0xa", 0)
        assert ledger.may_load("0xa") == 0

    def test_get_default(self, ledger):
        assert ledger.get("0xa") == 0
        assert ledger.get("0xa", 7) == 7

    def test_save_large_amount(self, ledger):
        ledger.save("0xa", 2**128 - 1)
        assert ledger.get("0xa") == 2**128 - 1

    def test_negative_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.save("0xa", -1)

    def test_enumeration(self, ledger):
        ledger.save("0xc", 3)
        ledger.save("0xa", 1)
        ledger.save("0xb", 0)
        assert ledger.items() == {"0xa": 1, "0xb": 0, "0xc": 3}
        assert list(ledger.items()) == ["0xa", "0xb", "0xc"]
        assert ledger.count() == 3

    def test_withheld_fees_accumulate(self, ledger):
        ledger.save("0xa", 10_000)
        ledger.add_withheld_fee("0xa", 100)
        ledger.add_withheld_fee("0xa", 5)
        assert ledger.fees_withheld("0xa") == 105
        assert ledger.fees_withheld("0xb") == 0

    def test_negative_fee_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.add_withheld_fee("0xa", -1)

    def test_withheld_fees_not_participants(self, ledger):
        ledger.add_withheld_fee("0xa", 1)
        assert ledger.count() == 0


# =============================================================================
# Auction State
# =============================================================================


class TestAuctionState:
    """Tests for owner, config and highest bid records."""

    @pytest.fixture
    def state(self):
        return AuctionState(MemoryAdapter())

    def test_not_instantiated(self, state):
        assert not state.is_instantiated()
        with pytest.raises(NotInstantiated):
            state.load_owner()
        with pytest.raises(NotInstantiated):
            state.load_config()

    def test_owner_roundtrip(self, state):
        state.save_owner("0xOwner")
        assert state.load_owner() == "0xOwner"

    def test_config_keeps_exact_rate(self, state):
        """The fee rate survives serialization without float rounding."""
        state.save_config(Config(required_native_denom="uvault", fee=Decimal("0.000000000000000001")))
        config = state.load_config()
        assert state.is_instantiated()
        assert config.fee == Decimal("0.000000000000000001")
        assert config.required_native_denom == "uvault"
        assert config.open_sale is True

    def test_config_update(self, state):
        state.save_config(Config(required_native_denom="uvault", fee=Decimal("0.01")))
        config = state.load_config()
        config.open_sale = False
        state.save_config(config)
        assert state.load_config().open_sale is False

    def test_highest_bid(self, state):
        assert state.may_load_highest_bid() is None
        assert state.highest_amount() == 0

        state.save_highest_bid("0xa", 500)
        assert state.may_load_highest_bid() == HighestBid(bidder="0xa", amount=500)
        assert state.highest_amount() == 500
