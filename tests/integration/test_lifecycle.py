"""
Integration tests for complete auction lifecycles on the mock chain.

Drives randomized bid sequences and checks, after every call, that funds are
conserved and the contract never pays out more than it holds.
"""

import random
from decimal import Decimal

import pytest

from bidvault.core.fees import owner_fee_amount
from bidvault.core.messages import HighestBidInfo, InstantiateMsg, TotalNumberOfParticipants
from bidvault.core.runtime import MockChain
from bidvault.crypto import generate_keypair

DENOM = "uvault"
STARTING_BALANCE = 10**9


def setup_auction(fee, n_bidders=4):
    chain = MockChain()
    owner = generate_keypair().address
    bidders = [generate_keypair().address for _ in range(n_bidders)]
    result = chain.instantiate(owner, InstantiateMsg(owner=owner, required_native_denom=DENOM, fee=Decimal(fee)))
    assert result.ok
    for bidder in bidders:
        chain.fund(bidder, STARTING_BALANCE, DENOM)
    return chain, owner, bidders


def total_supply(chain, accounts):
    return sum(chain.balance(a, DENOM) for a in accounts) + chain.custody()


def expected_open_custody(chain):
    """While open, custody holds every bid less the fees already paid out."""
    bids = chain.engine.bids
    return sum(amount - bids.fees_withheld(bidder) for bidder, amount in bids.items().items())


@pytest.mark.parametrize("fee", ["0", "0.0001", "0.005", "0.01"])
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_lifecycle(fee, seed):
    rng = random.Random(seed)
    chain, owner, bidders = setup_auction(fee)
    accounts = [owner] + bidders
    supply = total_supply(chain, accounts)

    # Bidding phase
    accepted = 0
    for _ in range(60):
        bidder = rng.choice(bidders)
        result = chain.bid(bidder, rng.randint(1, 5_000))
        if result.ok:
            accepted += 1
        else:
            assert result.error_code == "BID_TOO_LOW"

        assert total_supply(chain, accounts) == supply
        assert chain.custody() == expected_open_custody(chain)

        ledger = chain.engine.bids.items()
        highest = chain.query(HighestBidInfo())
        if ledger:
            assert highest.amount == max(ledger.values())
            assert ledger[highest.identity] == highest.amount

    assert accepted > 0

    # Close
    highest = chain.query(HighestBidInfo())
    winner, winning_amount = highest.identity, highest.amount
    owner_before = chain.balance(owner, DENOM)
    result = chain.close(owner)
    assert result.ok
    assert chain.balance(owner, DENOM) - owner_before == winning_amount - owner_fee_amount(winning_amount, Decimal(fee))

    # Retract every loser
    for bidder in bidders:
        result = chain.retract(bidder)
        if bidder == winner:
            assert result.error_code == "UNAUTHORIZED"
        elif chain.engine.bids.may_load(bidder) is None:
            assert result.error_code == "NO_FUNDS_TO_RETRACT"
        else:
            assert result.ok
        assert total_supply(chain, accounts) == supply
        assert chain.custody() >= 0

    # What stays behind is the winner's close fee not already taken per bid
    residual = owner_fee_amount(winning_amount, Decimal(fee)) - chain.engine.bids.fees_withheld(winner)
    assert residual >= 0
    assert chain.custody() == residual

    # Nothing can be retracted twice, and nobody leaves with more than they bid
    for bidder in bidders:
        if bidder != winner and chain.engine.bids.may_load(bidder) is not None:
            assert chain.retract(bidder).error_code == "ALREADY_RETRACTED"
    for bidder in bidders:
        if bidder != winner:
            assert chain.balance(bidder, DENOM) <= STARTING_BALANCE


def test_scenario_from_demo():
    """Alice and Bob compete; Bob's tie is refused; Alice wins."""
    chain, owner, (alice, bob) = setup_auction("0.01", n_bidders=2)

    assert chain.bid(alice, 10_000).ok
    assert chain.bid(bob, 10_000).error_code == "BID_TOO_LOW"
    assert chain.bid(bob, 10_500).ok
    assert chain.bid(alice, 1_000).attribute("total") == "11000"

    assert chain.close(owner).attribute("payout") == "10890"
    assert chain.retract(bob).attribute("refund") == "10395"
    assert chain.retract(alice).error_code == "UNAUTHORIZED"
    assert chain.retract(bob).error_code == "ALREADY_RETRACTED"

    assert chain.balance(owner, DENOM) == 11_105
    assert chain.balance(alice, DENOM) == STARTING_BALANCE - 11_000
    assert chain.balance(bob, DENOM) == STARTING_BALANCE - 105
    assert chain.custody() == 0
    assert chain.query(TotalNumberOfParticipants()) == 2


def test_owner_is_contract():
    """With no explicit owner, fees and payout stay in the contract account."""
    chain = MockChain()
    alice, bob, deployer = (generate_keypair().address for _ in range(3))
    chain.instantiate(deployer, InstantiateMsg(required_native_denom=DENOM, fee=Decimal("0.01")))
    chain.fund(alice, 10_000, DENOM)
    chain.fund(bob, 10_000, DENOM)

    chain.bid(alice, 5_000)
    chain.bid(bob, 6_000)
    assert chain.custody() == 11_000

    assert chain.close(deployer).error_code == "UNAUTHORIZED"
    assert chain.close(chain.contract_address).ok
    assert chain.retract(alice).ok
    assert chain.custody() == 11_000 - 4_950
