"""
Runtime - Mock host chain for running the auction contract.

The real contract runs inside a ledger that executes each transaction
atomically and moves funds itself. MockChain plays that role locally:

1. Moves the attached funds from the sender into the contract's custody
2. Runs the engine call
3. Dispatches the returned BankSend payouts from the contract's balance
4. Commits all of it, or rolls all of it back on any error

Balances live in the same storage as contract state, so a rollback undoes
escrow, state changes and payouts together.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from bidvault.core.auction import AuctionEngine
from bidvault.core.errors import ContractError, WrongPaymentAsset
from bidvault.core.messages import (
    BankSend,
    Bid,
    Close,
    Coin,
    Env,
    InstantiateMsg,
    MessageInfo,
    Response,
    Retract,
)
from bidvault.core.storage import MemoryAdapter
from bidvault.crypto import generate_keypair
from bidvault.utils.logger import get_logger
from bidvault.utils.validation import MAX_AMOUNT, AddressValidator, validate_amount

logger = get_logger("runtime")

BANK_BUCKET = "bank"
HOST_BUCKET = "host"
CONTRACT_ADDRESS_KEY = "contract_address"


class InsufficientFunds(ContractError):
    """Raised by the mock bank when a transfer exceeds the balance."""
    code = "INSUFFICIENT_FUNDS"
    default_message = "insufficient funds"


# =============================================================================
# Bank
# =============================================================================


class MockBank:
    """
    Native token balances.

    Stands in for the host ledger's bank module; it is the only component
    that moves funds, and it only does so for BankSend instructions and
    attached payments.
    """

    def __init__(self, storage):
        self.storage = storage

    @staticmethod
    def _key(address: str, denom: str) -> str:
        return f"{address}/{denom}"

    def balance(self, address: str, denom: str) -> int:
        raw = self.storage.get(self._key(address, denom), bucket=BANK_BUCKET)
        return int(raw.decode("ascii")) if raw is not None else 0

    def _set_balance(self, address: str, denom: str, amount: int) -> None:
        self.storage.put(self._key(address, denom), str(amount).encode("ascii"), bucket=BANK_BUCKET)

    def mint(self, address: str, coins: List[Coin]) -> None:
        """Credit new tokens to address (faucet)."""
        for coin in coins:
            new_balance = self.balance(address, coin.denom) + coin.amount
            if new_balance > MAX_AMOUNT:
                raise ContractError(f"balance overflow for {address}")
            self._set_balance(address, coin.denom, new_balance)

    def send(self, from_address: str, to_address: str, coins: List[Coin]) -> None:
        for coin in coins:
            available = self.balance(from_address, coin.denom)
            if available < coin.amount:
                raise InsufficientFunds(
                    f"{from_address} has {available}{coin.denom}, needs {coin}",
                    data={"address": from_address, "denom": coin.denom},
                )
            self._set_balance(from_address, coin.denom, available - coin.amount)
            self._set_balance(to_address, coin.denom, self.balance(to_address, coin.denom) + coin.amount)

    def dispatch(self, from_address: str, messages: List[BankSend]) -> None:
        """Execute payout instructions in order."""
        for message in messages:
            self.send(from_address, message.to_address, message.amount)
            logger.debug(f"Paid out {', '.join(str(c) for c in message.amount)} to {message.to_address}")


# =============================================================================
# Execution Result
# =============================================================================


@dataclass
class ExecutionResult:
    """Outcome of one contract call."""
    ok: bool
    response: Optional[Response] = None
    error: Optional[ContractError] = None
    messages: List[BankSend] = field(default_factory=list)

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    def attribute(self, key: str) -> Optional[str]:
        return self.response.attribute(key) if self.response else None


# =============================================================================
# Mock Chain
# =============================================================================


class MockChain:
    """
    Local host for one auction contract.

    Attributes:
        storage: Storage adapter shared by contract state and bank
        engine: The auction contract
        bank: Native balances
        contract_address: Address holding escrowed funds
    """

    def __init__(
        self,
        storage=None,
        chain_id: str = "bidvault-local",
        api: Optional[AddressValidator] = None,
    ):
        self.storage = storage if storage is not None else MemoryAdapter()
        self.api = api or AddressValidator()
        self.engine = AuctionEngine(self.storage, self.api)
        self.bank = MockBank(self.storage)
        self.chain_id = chain_id
        self.block_height = 0
        self.contract_address = self._load_contract_address()

    def _load_contract_address(self) -> str:
        raw = self.storage.get(CONTRACT_ADDRESS_KEY, bucket=HOST_BUCKET)
        if raw is not None:
            return raw.decode("utf-8")
        address = generate_keypair().address
        with self.storage.transaction():
            self.storage.put(CONTRACT_ADDRESS_KEY, address.encode("utf-8"), bucket=HOST_BUCKET)
        logger.info(f"Contract deployed at {address}")
        return address

    @property
    def env(self) -> Env:
        return Env(
            contract_address=self.contract_address,
            chain_id=self.chain_id,
            block_height=self.block_height,
        )

    # =========================================================================
    # Calls
    # =========================================================================

    def _run(self, sender: str, funds: Optional[List[Coin]], call) -> ExecutionResult:
        """
        Run one call atomically.

        Returns a failed result (with nothing persisted) on ContractError.
        """
        funds = list(funds or [])
        try:
            with self.storage.transaction():
                sender = self.api.addr_validate(sender)
                info = MessageInfo(sender=sender, funds=funds)
                if funds:
                    self.bank.send(sender, self.contract_address, funds)
                response = call(info)
                self.bank.dispatch(self.contract_address, response.messages)
        except ContractError as e:
            logger.warning(f"Call from {sender} failed: {e}")
            return ExecutionResult(ok=False, error=e)

        self.block_height += 1
        return ExecutionResult(ok=True, response=response, messages=list(response.messages))

    def instantiate(self, sender: str, msg: InstantiateMsg) -> ExecutionResult:
        return self._run(sender, None, lambda info: self.engine.instantiate(self.env, info, msg))

    def execute(
        self,
        sender: str,
        msg: Union[Bid, Close, Retract],
        funds: Optional[List[Coin]] = None,
    ) -> ExecutionResult:
        return self._run(sender, funds, lambda info: self.engine.execute(self.env, info, msg))

    def query(self, msg):
        """Read-only; errors propagate to the caller."""
        return self.engine.query(msg)

    # =========================================================================
    # Convenience
    # =========================================================================

    def bid(self, sender: str, amount: int, denom: Optional[str] = None) -> ExecutionResult:
        if denom is None:
            try:
                denom = self.engine.state.load_config().required_native_denom
            except ContractError as e:
                return ExecutionResult(ok=False, error=e)
        is_valid, error = validate_amount(amount)
        if not is_valid:
            logger.warning(f"Bid from {sender} rejected: {error}")
            return ExecutionResult(ok=False, error=WrongPaymentAsset(error, data={"amount": str(amount)}))
        return self.execute(sender, Bid(), funds=[Coin(denom=denom, amount=amount)])

    def close(self, sender: str) -> ExecutionResult:
        return self.execute(sender, Close())

    def retract(self, sender: str, receiver: Optional[str] = None) -> ExecutionResult:
        return self.execute(sender, Retract(friend_rec=receiver))

    def fund(self, address: str, amount: int, denom: str) -> None:
        """Mint tokens to an account."""
        address = self.api.addr_validate(address)
        is_valid, error = validate_amount(amount)
        if not is_valid:
            raise ContractError(error, data={"amount": str(amount)})
        with self.storage.transaction():
            self.bank.mint(address, [Coin(denom=denom, amount=amount)])

    def balance(self, address: str, denom: str) -> int:
        return self.bank.balance(self.api.addr_validate(address), denom)

    def custody(self) -> int:
        """Funds currently held by the contract."""
        config = self.engine.state.load_config()
        return self.bank.balance(self.contract_address, config.required_native_denom)
