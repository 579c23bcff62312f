"""
Auction Engine - Ascending-bid auction with escrowed funds.

Lifecycle:
---------
    OPEN --(Close, by owner)--> CLOSED

- Bid (OPEN only): the attached payment is added to the sender's cumulative
  total, which must strictly exceed the current highest bid. An equal total
  does not take the lead. The owner's fee on the increment is paid out
  immediately; the principal stays in custody.
- Close (owner, OPEN only): the sale closes and the owner receives the
  winning amount minus the fee on that amount.
- Retract (CLOSED only, anyone but the winner): the sender's entry is
  zeroed and its escrow, less the bid fees already paid from it, goes to
  the sender or a named receiver, once.

Every call is atomic. The engine raises a ContractError on the first failed
check and never writes before all checks pass; the host additionally rolls
back the call's writes on any error. Payouts are returned as BankSend
instructions in the Response, not performed here.
"""

from typing import Optional, Union

from bidvault.core.auction.payment import must_pay
from bidvault.core.errors import (
    AlreadyInstantiated,
    AlreadyRetracted,
    ArithmeticOverflow,
    AuctionClosed,
    AuctionOpen,
    BidTooLow,
    InvalidConfig,
    NoBids,
    NoFundsToRetract,
    Unauthorized,
)
from bidvault.core.fees import owner_fee_amount
from bidvault.core.messages import (
    BankSend,
    Bid,
    BidderTotalBid,
    BidEventInfoResponse,
    Close,
    Coin,
    Env,
    HighestBidInfo,
    InstantiateMsg,
    MessageInfo,
    Response,
    Retract,
    TotalNumberOfParticipants,
)
from bidvault.core.state import AuctionState, BidLedger, Config
from bidvault.utils.logger import get_logger
from bidvault.utils.validation import (
    MAX_AMOUNT,
    AddressValidator,
    validate_denom,
    validate_fee_rate,
)

logger = get_logger("auction")


class AuctionEngine:
    """
    Contract logic for a single auction.

    Attributes:
        state: Singleton records (owner, config, highest bid)
        bids: Cumulative escrow per bidder
        api: Address validation (addr_validate)
    """

    def __init__(self, storage, api: Optional[AddressValidator] = None):
        self.storage = storage
        self.state = AuctionState(storage)
        self.bids = BidLedger(storage)
        self.api = api or AddressValidator()

    # =========================================================================
    # Instantiate
    # =========================================================================

    def instantiate(self, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
        """
        Persist owner and config; the sale starts open.

        The owner defaults to the contract's own address.
        """
        if self.state.is_instantiated():
            raise AlreadyInstantiated()

        owner = (
            self.api.addr_validate(msg.owner)
            if msg.owner is not None
            else env.contract_address
        )

        is_valid, error = validate_denom(msg.required_native_denom)
        if not is_valid:
            raise InvalidConfig(error)

        is_valid, error = validate_fee_rate(msg.fee)
        if not is_valid:
            raise InvalidConfig(error)

        self.state.save_owner(owner)
        self.state.save_config(Config(
            required_native_denom=msg.required_native_denom,
            fee=msg.fee,
            open_sale=True,
        ))

        logger.info(f"Auction instantiated: owner={owner}, denom={msg.required_native_denom}, fee={msg.fee}")
        return (
            Response()
            .add_attribute("action", "instantiate")
            .add_attribute("sender", info.sender)
            .add_attribute("owner", owner)
        )

    # =========================================================================
    # Execute
    # =========================================================================

    def execute(self, env: Env, info: MessageInfo, msg: Union[Bid, Close, Retract]) -> Response:
        """Dispatch an execute message."""
        if isinstance(msg, Bid):
            return self.bid(info)
        if isinstance(msg, Close):
            return self.close(info)
        if isinstance(msg, Retract):
            return self.retract(info, msg.friend_rec)
        raise TypeError(f"Unknown execute message: {type(msg).__name__}")

    def bid(self, info: MessageInfo) -> Response:
        """
        Add the attached payment to the sender's bid.

        Raises:
            AuctionClosed: sale already closed
            WrongPaymentAsset: no, zero, multiple or foreign coins attached
            BidTooLow: new total does not exceed the highest bid
            ArithmeticOverflow: total leaves the amount range
        """
        config = self.state.load_config()
        if not config.open_sale:
            raise AuctionClosed()

        paid = must_pay(info.funds, config.required_native_denom)

        highest = self.state.highest_amount()
        prior = self.bids.get(info.sender, 0)
        total = prior + paid
        if total > MAX_AMOUNT:
            raise ArithmeticOverflow(f"bid total overflow: {prior} + {paid}")

        # Strict improvement: matching the leader is not enough
        if total <= highest:
            raise BidTooLow(
                f"total {total} does not exceed highest {highest}",
                data={"total": total, "highest": highest},
            )

        fee = owner_fee_amount(paid, config.fee)

        self.bids.save(info.sender, total)
        self.state.save_highest_bid(info.sender, total)
        if fee > 0:
            self.bids.add_withheld_fee(info.sender, fee)

        logger.debug(f"Bid accepted: {info.sender} +{paid} -> {total} (fee={fee})")

        response = (
            Response()
            .add_attribute("action", "bid")
            .add_attribute("bidder", info.sender)
            .add_attribute("amount", paid)
            .add_attribute("total", total)
            .add_attribute("fee", fee)
        )
        if fee > 0:
            response.add_message(BankSend(
                to_address=self.state.load_owner(),
                amount=[Coin(denom=config.required_native_denom, amount=fee)],
            ))
        return response

    def close(self, info: MessageInfo) -> Response:
        """
        Close the sale and pay the winning amount, less fee, to the owner.

        Raises:
            Unauthorized: sender is not the owner
            AuctionClosed: sale already closed
            NoBids: nothing to sell to
        """
        owner = self.state.load_owner()
        if info.sender != owner:
            raise Unauthorized("only the owner can close the bid event")

        config = self.state.load_config()
        if not config.open_sale:
            raise AuctionClosed()

        highest = self.state.may_load_highest_bid()
        if highest is None:
            raise NoBids("cannot close a bid event without bids")

        fee = owner_fee_amount(highest.amount, config.fee)
        payout = highest.amount - fee

        config.open_sale = False
        self.state.save_config(config)

        logger.info(f"Bid event closed: winner={highest.bidder}, amount={highest.amount}, payout={payout}")

        return (
            Response()
            .add_message(BankSend(
                to_address=owner,
                amount=[Coin(denom=config.required_native_denom, amount=payout)],
            ))
            .add_attribute("action", "close")
            .add_attribute("winner", highest.bidder)
            .add_attribute("amount", highest.amount)
            .add_attribute("fee", fee)
            .add_attribute("payout", payout)
        )

    def retract(self, info: MessageInfo, friend_rec: Optional[str] = None) -> Response:
        """
        Return a losing bidder's escrow.

        Args:
            info: Call info; the sender's entry is retracted
            friend_rec: Optional receiver of the funds (defaults to sender)

        Raises:
            AuctionOpen: sale not closed yet
            Unauthorized: sender is the winner
            InvalidIdentity: malformed receiver
            NoFundsToRetract: sender never bid
            AlreadyRetracted: sender's entry is already zero
        """
        config = self.state.load_config()
        if config.open_sale:
            raise AuctionOpen("funds can only be retracted after close")

        highest = self.state.may_load_highest_bid()
        if highest is not None and highest.bidder == info.sender:
            raise Unauthorized("the winning bid cannot be retracted")

        receiver = (
            self.api.addr_validate(friend_rec)
            if friend_rec is not None
            else info.sender
        )

        amount = self.bids.may_load(info.sender)
        if amount is None:
            raise NoFundsToRetract()
        if amount == 0:
            raise AlreadyRetracted()

        # Each bid fee was paid to the owner out of this bidder's escrow when
        # the bid was accepted, so only stored - withheld is still in custody.
        # Refunding the full stored amount would release more than was ever
        # escrowed; netting out the withheld fees keeps total payouts within
        # total deposits.
        withheld = self.bids.fees_withheld(info.sender)
        refund = amount - withheld

        self.bids.save(info.sender, 0)

        logger.debug(f"Retracted {amount} for {info.sender} to {receiver} (refund={refund})")

        return (
            Response()
            .add_message(BankSend(
                to_address=receiver,
                amount=[Coin(denom=config.required_native_denom, amount=refund)],
            ))
            .add_attribute("action", "retract")
            .add_attribute("bidder", info.sender)
            .add_attribute("receiver", receiver)
            .add_attribute("amount", amount)
            .add_attribute("fees_withheld", withheld)
            .add_attribute("refund", refund)
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def query(self, msg: Union[BidderTotalBid, HighestBidInfo, TotalNumberOfParticipants]):
        """Dispatch a query message."""
        if isinstance(msg, BidderTotalBid):
            return self.bidder_total_bid(msg.address)
        if isinstance(msg, HighestBidInfo):
            return self.highest_bid_info()
        if isinstance(msg, TotalNumberOfParticipants):
            return self.total_number_of_participants()
        raise TypeError(f"Unknown query message: {type(msg).__name__}")

    def bidder_total_bid(self, address: str) -> int:
        """Cumulative bid of address; 0 if unknown or malformed."""
        if not self.api.is_valid(address):
            return 0
        return self.bids.get(self.api.addr_validate(address), 0)

    def highest_bid_info(self) -> BidEventInfoResponse:
        config = self.state.load_config()
        highest = self.state.may_load_highest_bid()
        return BidEventInfoResponse(
            identity=highest.bidder if highest else None,
            amount=highest.amount if highest else 0,
            is_closed=not config.open_sale,
        )

    def total_number_of_participants(self) -> int:
        return self.bids.count()
