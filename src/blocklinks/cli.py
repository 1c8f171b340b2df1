"""
Blocklinks CLI

Thin command-line consumer of ``EthClient`` for poking at a node.

Commands:
  coinbase   - Show the node's coinbase address
  accounts   - List accounts managed by the node
  balance    - Balance of an address in wei
  nonce      - Transaction count of an address
  tx         - Look up a transaction by hash
  receipt    - Look up a transaction receipt
  block      - Fetch a block by number or tag
  gas-limit  - Gas limit of the latest block
  send-raw   - Broadcast a signed raw transaction
  call       - Execute a read-only contract call
  compile    - Compile Solidity source on the node

Configuration is read from --rpc-url / --timeout, or from the
BLOCKLINKS_RPC_URL / BLOCKLINKS_TIMEOUT environment variables (a .env file
in the working directory is loaded first).
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO

import click
from dotenv import load_dotenv

from .config import DEFAULT_TIMEOUT, DEFAULT_URL
from .errors import BlocklinksError
from .eth.client import EthClient
from .eth.hexcodec import BlockTag, decode_quantity
from .eth.wire import TransactionCall


# ============ Constants ============

VERSION = "2.0.0"


# ============ Helpers ============


def _make_client(rpc_url: str, timeout: float) -> EthClient:
    return EthClient(rpc_url, timeout)


@contextmanager
def _fail_on_error() -> Iterator[None]:
    try:
        yield
    except BlocklinksError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)


def _echo_json(value: Any) -> None:
    if dataclasses.is_dataclass(value):
        value = dataclasses.asdict(value)
    click.echo(json.dumps(value, indent=2, sort_keys=True))


def _parse_tag(value: str) -> BlockTag:
    if value.isascii() and value.isdigit():
        return int(value)
    if value.startswith("0x"):
        with _fail_on_error():
            return decode_quantity(value)
    return value


def _client(ctx: click.Context) -> EthClient:
    return ctx.obj["client"]


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="blocklinks")
@click.option("--rpc-url", envvar="BLOCKLINKS_RPC_URL", default=DEFAULT_URL, show_default=True, help="Node JSON-RPC URL")
@click.option("--timeout", envvar="BLOCKLINKS_TIMEOUT", default=DEFAULT_TIMEOUT, type=float, help="Request timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Log every JSON-RPC request")
@click.pass_context
def cli(ctx: click.Context, rpc_url: str, timeout: float, verbose: bool) -> None:
    """Blocklinks - Ethereum JSON-RPC client."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    with _fail_on_error():
        client = _make_client(rpc_url, timeout)
    ctx.obj = {"client": ctx.with_resource(client)}


# ============ Accounts ============


@cli.command()
@click.pass_context
def coinbase(ctx: click.Context) -> None:
    """Show the node's coinbase address."""
    with _fail_on_error():
        click.echo(_client(ctx).coinbase())


@cli.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List accounts managed by the node."""
    with _fail_on_error():
        for address in _client(ctx).accounts():
            click.echo(address)


@cli.command()
@click.argument("address")
@click.option("--block", "tag", default="latest", help="Block number or tag")
@click.pass_context
def balance(ctx: click.Context, address: str, tag: str) -> None:
    """Balance of ADDRESS in wei."""
    with _fail_on_error():
        click.echo(_client(ctx).balance(address, _parse_tag(tag)))


@cli.command()
@click.argument("address")
@click.option("--block", "tag", default="latest", help="Block number or tag")
@click.pass_context
def nonce(ctx: click.Context, address: str, tag: str) -> None:
    """Transaction count of ADDRESS."""
    with _fail_on_error():
        click.echo(_client(ctx).nonce(address, _parse_tag(tag)))


# ============ Transactions ============


@cli.command()
@click.argument("tx_hash")
@click.pass_context
def tx(ctx: click.Context, tx_hash: str) -> None:
    """Look up a transaction by TX_HASH."""
    with _fail_on_error():
        found = _client(ctx).get_transaction_by_hash(tx_hash)
    if found is None:
        click.echo(f"Transaction not found: {tx_hash}")
        sys.exit(1)
    _echo_json(found)


@cli.command()
@click.argument("tx_hash")
@click.pass_context
def receipt(ctx: click.Context, tx_hash: str) -> None:
    """Look up the receipt of TX_HASH."""
    with _fail_on_error():
        found = _client(ctx).get_transaction_receipt(tx_hash)
    if found is None:
        click.echo("Transaction pending: no receipt yet.")
        return
    _echo_json(found)


@cli.command("send-raw")
@click.argument("signed_tx")
@click.pass_context
def send_raw(ctx: click.Context, signed_tx: str) -> None:
    """Broadcast SIGNED_TX (0x-prefixed hex)."""
    with _fail_on_error():
        click.echo(_client(ctx).send_raw_transaction(signed_tx))


@cli.command()
@click.option("--to", required=True, help="Contract address")
@click.option("--data", default=None, help="Call data (0x-prefixed hex)")
@click.option("--from", "sender", default=None, help="Caller address")
@click.option("--block", "tag", default="latest", help="Block number or tag")
@click.pass_context
def call(ctx: click.Context, to: str, data: Optional[str], sender: Optional[str], tag: str) -> None:
    """Execute a read-only contract call and print the raw output."""
    with _fail_on_error():
        click.echo(_client(ctx).call_method(TransactionCall(from_=sender, to=to, data=data), _parse_tag(tag)))


# ============ Blocks ============


@cli.command()
@click.argument("number_or_tag", default="latest")
@click.option("--full", is_flag=True, help="Include full transaction objects")
@click.pass_context
def block(ctx: click.Context, number_or_tag: str, full: bool) -> None:
    """Fetch a block by NUMBER_OR_TAG (default: latest)."""
    with _fail_on_error():
        found = _client(ctx).get_block_by_number(_parse_tag(number_or_tag), full)
    if found is None:
        click.echo(f"Block not found: {number_or_tag}")
        sys.exit(1)
    _echo_json(found)


@cli.command("gas-limit")
@click.pass_context
def gas_limit(ctx: click.Context) -> None:
    """Gas limit of the latest block."""
    with _fail_on_error():
        limit = _client(ctx).get_latest_block_gas_limit()
    if limit is None:
        click.echo("No latest block.")
        sys.exit(1)
    click.echo(limit)


# ============ Solidity ============


@cli.command("compile")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_context
def compile_source(ctx: click.Context, source: TextIO) -> None:
    """Compile the Solidity SOURCE file on the node."""
    with _fail_on_error():
        output = _client(ctx).compile_solidity(source.read())
    _echo_json(output)


def main() -> None:
    load_dotenv()
    cli()
