"""
BidVault CLI - Command line interface for the escrowed auction.

Drives one auction persisted in <data-dir>/auction.db through the mock host
chain, plus a scripted in-memory demo.
"""

import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from bidvault import __version__
from bidvault.core.errors import ContractError
from bidvault.utils.logger import setup_logging
from bidvault.utils.validation import validate_amount


def _open_chain(ctx):
    from bidvault.core.runtime import MockChain
    from bidvault.core.storage import SQLiteAdapter

    config = ctx.obj["config"]
    config.ensure_dirs()
    return MockChain(storage=SQLiteAdapter(config.db_path), chain_id=config.chain_id)


def _fail(error) -> None:
    click.echo(f"❌ {error.code}: {error.message}")
    sys.exit(1)


def _amount_param(ctx, param, value):
    if value is None:
        return value
    is_valid, error = validate_amount(value, param.name)
    if not is_valid:
        raise click.BadParameter(error)
    return value


def _fee_param(ctx, param, value):
    if value is None:
        return value
    try:
        return Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"not a decimal number: {value!r}")


def _report(result) -> None:
    """Print a call result; exit non-zero on failure."""
    if not result.ok:
        _fail(result.error)

    click.echo("✅ OK")
    for key, value in result.response.attributes:
        click.echo(f"   {key}: {value}")
    for message in result.messages:
        coins = ", ".join(str(c) for c in message.amount)
        click.echo(f"   → pay {coins} to {message.to_address}")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default: $BIDVAULT_DATA_DIR or ./data)")
@click.option("--env-file", default=None, help="Load settings from a .env file")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, data_dir, env_file):
    """BidVault - ascending-bid auction with escrowed funds"""
    from bidvault.core.config import load_config

    config = load_config(env_file)
    if data_dir:
        config.data_dir = Path(data_dir).expanduser()

    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Auction Commands
# =============================================================================


@cli.command("init")
@click.option("--sender", required=True, help="Address submitting the instantiation")
@click.option("--denom", default=None, help="Payment denom (default from config)")
@click.option("--fee", default=None, callback=_fee_param, help="Fee rate in [0, 0.01] (default from config)")
@click.option("--owner", default=None, help="Owner address (default: the contract itself)")
@click.pass_context
def init(ctx, sender, denom, fee, owner):
    """Instantiate the auction"""
    from bidvault.core.messages import InstantiateMsg

    config = ctx.obj["config"]
    chain = _open_chain(ctx)
    msg = InstantiateMsg(
        owner=owner,
        required_native_denom=denom or config.default_denom,
        fee=fee if fee is not None else config.default_fee,
    )
    click.echo(f"Contract: {chain.contract_address}")
    _report(chain.instantiate(sender, msg))


@cli.command("fund")
@click.argument("address")
@click.option("--amount", required=True, type=int, callback=_amount_param, help="Amount to mint")
@click.option("--denom", default=None, help="Denom (default from config)")
@click.pass_context
def fund(ctx, address, amount, denom):
    """Mint test tokens to an address"""
    chain = _open_chain(ctx)
    denom = denom or ctx.obj["config"].default_denom
    try:
        chain.fund(address, amount, denom)
    except ContractError as e:
        _fail(e)
    click.echo(f"✅ {address}: {chain.balance(address, denom)}{denom}")


@cli.command("bid")
@click.option("--sender", required=True, help="Bidder address")
@click.option("--amount", required=True, type=int, callback=_amount_param, help="Amount to attach")
@click.option("--denom", default=None, help="Denom to attach (default: auction denom)")
@click.pass_context
def bid(ctx, sender, amount, denom):
    """Place or raise a bid"""
    chain = _open_chain(ctx)
    _report(chain.bid(sender, amount, denom))


@cli.command("close")
@click.option("--sender", required=True, help="Owner address")
@click.pass_context
def close(ctx, sender):
    """Close the sale and pay the owner"""
    chain = _open_chain(ctx)
    _report(chain.close(sender))


@cli.command("retract")
@click.option("--sender", required=True, help="Losing bidder address")
@click.option("--receiver", default=None, help="Send the funds here instead")
@click.pass_context
def retract(ctx, sender, receiver):
    """Withdraw a losing bid after close"""
    chain = _open_chain(ctx)
    _report(chain.retract(sender, receiver))


@cli.command("execute")
@click.argument("msg")
@click.option("--sender", required=True, help="Address submitting the message")
@click.option("--amount", default=None, type=int, callback=_amount_param, help="Amount to attach")
@click.option("--denom", default=None, help="Denom to attach (default: auction denom)")
@click.pass_context
def execute(ctx, msg, sender, amount, denom):
    """Submit a raw JSON execute message, e.g. '{"kind": "close"}'"""
    from pydantic import ValidationError

    from bidvault.core.messages import Coin, parse_execute_msg

    try:
        parsed = parse_execute_msg(msg)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="MSG")

    chain = _open_chain(ctx)
    funds = None
    if amount is not None:
        if denom is None:
            try:
                denom = chain.engine.state.load_config().required_native_denom
            except ContractError as e:
                _fail(e)
        funds = [Coin(denom=denom, amount=amount)]
    _report(chain.execute(sender, parsed, funds=funds))


# =============================================================================
# Query Commands
# =============================================================================


@cli.group()
def query():
    """Read-only queries"""
    pass


@query.command("bidder")
@click.argument("address")
@click.pass_context
def query_bidder(ctx, address):
    """Cumulative bid of ADDRESS"""
    from bidvault.core.messages import BidderTotalBid

    chain = _open_chain(ctx)
    try:
        click.echo(chain.query(BidderTotalBid(address=address)))
    except ContractError as e:
        _fail(e)


@query.command("highest")
@click.pass_context
def query_highest(ctx):
    """Current highest bid"""
    from bidvault.core.messages import HighestBidInfo

    chain = _open_chain(ctx)
    try:
        info = chain.query(HighestBidInfo())
    except ContractError as e:
        _fail(e)
    click.echo(json.dumps(info.model_dump(), indent=2))


@query.command("participants")
@click.pass_context
def query_participants(ctx):
    """Number of distinct bidders"""
    from bidvault.core.messages import TotalNumberOfParticipants

    chain = _open_chain(ctx)
    try:
        click.echo(chain.query(TotalNumberOfParticipants()))
    except ContractError as e:
        _fail(e)


@query.command("smart")
@click.argument("msg")
@click.pass_context
def query_smart(ctx, msg):
    """Run a raw JSON query, e.g. '{"kind": "highest_bid_info"}'"""
    from pydantic import BaseModel, ValidationError

    from bidvault.core.messages import parse_query_msg

    try:
        parsed = parse_query_msg(msg)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="MSG")

    chain = _open_chain(ctx)
    try:
        result = chain.query(parsed)
    except ContractError as e:
        _fail(e)
    click.echo(json.dumps(result.model_dump() if isinstance(result, BaseModel) else result, indent=2))


# =============================================================================
# Utilities
# =============================================================================


@cli.command("keygen")
def keygen():
    """Generate a new address"""
    from bidvault.crypto import generate_keypair

    kp = generate_keypair()
    click.echo(f"Address: {kp.address}")
    click.echo(f"Private key: {kp.private_key.hex()}")


@cli.command("demo")
@click.option("--fee", default="0.01", callback=_fee_param, help="Fee rate for the demo auction")
def demo(fee):
    """Run a full auction lifecycle in memory"""
    from bidvault.core.messages import HighestBidInfo, InstantiateMsg
    from bidvault.core.runtime import MockChain
    from bidvault.crypto import generate_keypair

    denom = "uvault"

    click.echo("=" * 60)
    click.echo("  BIDVAULT - DEMO")
    click.echo("=" * 60)
    click.echo()

    chain = MockChain()
    owner = generate_keypair().address
    alice = generate_keypair().address
    bob = generate_keypair().address
    for addr in (alice, bob):
        chain.fund(addr, 100_000, denom)

    click.echo(f"🏛️  Instantiating auction (fee {fee})...")
    result = chain.instantiate(owner, InstantiateMsg(owner=owner, required_native_denom=denom, fee=fee))
    if not result.ok:
        _fail(result.error)
    click.echo(f"  ✓ Owner: {result.attribute('owner')}")
    click.echo()

    click.echo("💸 Bidding...")
    for who, name, amount in ((alice, "Alice", 10_000), (bob, "Bob", 10_000), (bob, "Bob", 10_500), (alice, "Alice", 1_000)):
        result = chain.bid(who, amount)
        status = f"fee={result.attribute('fee')}, total={result.attribute('total')}" if result.ok else result.error_code
        click.echo(f"  {'✓' if result.ok else '✗'} {name} bids {amount}: {status}")
    info = chain.query(HighestBidInfo())
    click.echo(f"  Highest: {info.amount} by {info.identity}")
    click.echo()

    click.echo("⚖️  Closing...")
    result = chain.close(owner)
    click.echo(f"  ✓ Owner payout: {result.attribute('payout')} (fee {result.attribute('fee')})")
    click.echo()

    click.echo("↩️  Retracting...")
    for who, name in ((bob, "Bob"), (alice, "Alice"), (bob, "Bob")):
        result = chain.retract(who)
        status = f"refund={result.attribute('refund')}" if result.ok else result.error_code
        click.echo(f"  {'✓' if result.ok else '✗'} {name}: {status}")
    click.echo()

    click.echo("📊 Balances:")
    click.echo(f"  Owner:    {chain.balance(owner, denom)}")
    click.echo(f"  Alice:    {chain.balance(alice, denom)}")
    click.echo(f"  Bob:      {chain.balance(bob, denom)}")
    click.echo(f"  Custody:  {chain.custody()}")
    click.echo()
    click.echo("✅ Demo complete!")


if __name__ == "__main__":
    cli()
