"""
Messages - Typed request, response and effect models for the auction.

Models:
- Coin, MessageInfo, Env: what the host hands to every call
- InstantiateMsg, Bid, Close, Retract: contract entry points
- BidderTotalBid, HighestBidInfo, TotalNumberOfParticipants: queries
- parse_execute_msg, parse_query_msg: JSON input for the discriminated unions
- BankSend, Response: effects and attributes returned by a call
- BidEventInfoResponse: highest-bid query result
"""

from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from bidvault.utils.validation import MAX_AMOUNT

Uint128 = Annotated[int, Field(ge=0, le=MAX_AMOUNT)]


# =============================================================================
# Host Context
# =============================================================================


class Coin(BaseModel):
    """An amount of a native token."""
    model_config = ConfigDict(frozen=True)

    denom: str
    amount: Uint128

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class MessageInfo(BaseModel):
    """Sender of the call and the funds attached to it."""
    sender: str
    funds: List[Coin] = Field(default_factory=list)


class Env(BaseModel):
    """Execution environment supplied by the host."""
    contract_address: str
    chain_id: str = "bidvault-local"
    block_height: int = 0


# =============================================================================
# Instantiate / Execute
# =============================================================================


class InstantiateMsg(BaseModel):
    owner: Optional[str] = None
    required_native_denom: str
    fee: Decimal


class Bid(BaseModel):
    kind: Literal["bid"] = "bid"


class Close(BaseModel):
    kind: Literal["close"] = "close"


class Retract(BaseModel):
    kind: Literal["retract"] = "retract"
    friend_rec: Optional[str] = None


ExecuteMsg = Annotated[Union[Bid, Close, Retract], Field(discriminator="kind")]

_EXECUTE_ADAPTER = TypeAdapter(ExecuteMsg)


def parse_execute_msg(raw: str) -> Union[Bid, Close, Retract]:
    """
    Parse a JSON execute message, e.g. {"kind": "retract", "friend_rec": "0x.."}.

    Raises pydantic.ValidationError on an unknown kind or bad fields.
    """
    return _EXECUTE_ADAPTER.validate_json(raw)


# =============================================================================
# Queries
# =============================================================================


class BidderTotalBid(BaseModel):
    kind: Literal["bidder_total_bid"] = "bidder_total_bid"
    address: str


class HighestBidInfo(BaseModel):
    kind: Literal["highest_bid_info"] = "highest_bid_info"


class TotalNumberOfParticipants(BaseModel):
    kind: Literal["total_number_of_participants"] = "total_number_of_participants"


QueryMsg = Annotated[
    Union[BidderTotalBid, HighestBidInfo, TotalNumberOfParticipants],
    Field(discriminator="kind"),
]

_QUERY_ADAPTER = TypeAdapter(QueryMsg)


def parse_query_msg(raw: str) -> Union[BidderTotalBid, HighestBidInfo, TotalNumberOfParticipants]:
    """Parse a JSON query message; raises pydantic.ValidationError."""
    return _QUERY_ADAPTER.validate_json(raw)


class BidEventInfoResponse(BaseModel):
    identity: Optional[str] = None
    amount: Uint128 = 0
    is_closed: bool


# =============================================================================
# Effects
# =============================================================================


class BankSend(BaseModel):
    """
    Payout instruction.

    Declarative: the host's dispatcher moves the funds after the call's
    state changes commit.
    """
    model_config = ConfigDict(frozen=True)

    to_address: str
    amount: List[Coin]

    @property
    def total(self) -> int:
        return sum(coin.amount for coin in self.amount)


class Response(BaseModel):
    """Payout instructions and observability attributes of one call."""
    messages: List[BankSend] = Field(default_factory=list)
    attributes: List[Tuple[str, str]] = Field(default_factory=list)

    def add_message(self, message: BankSend) -> "Response":
        self.messages.append(message)
        return self

    def add_attribute(self, key: str, value) -> "Response":
        self.attributes.append((key, str(value)))
        return self

    def attribute(self, key: str) -> Optional[str]:
        """First value recorded under key, if any."""
        for k, v in self.attributes:
            if k == key:
                return v
        return None
