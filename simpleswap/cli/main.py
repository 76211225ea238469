#!/usr/bin/env python3
"""
SimpleSwap CLI

Command-line access to the pricing rules and a throwaway in-memory engine.

Usage:
    simpleswap quote <amount_in> <reserve_in> <reserve_out>
    simpleswap price <reserve_in> <reserve_out> [--decimals N]
    simpleswap pair <token_x> <token_y>
    simpleswap config [PATH]
    simpleswap demo [--liquidity N] [--swap N] [--config PATH]
"""

import asyncio
import json
from typing import Optional

import click

from simpleswap import __version__
from simpleswap.config import SwapConfig, load_config
from simpleswap.exceptions import ConfigurationError, ExchangeError
from simpleswap.exchange.pairs import canonicalize
from simpleswap.exchange.pricing import quote_output, quote_price
from simpleswap.logger import LogManager


# Accounts used by the demo command
DEMO_DEPLOYER = "0x" + "d1" * 20
DEMO_TRADER = "0x" + "7a" * 20


@click.group()
@click.version_option(version=__version__, prog_name="simpleswap")
def cli():
    """SimpleSwap Command Line Interface

    Constant-product exchange quotes and pool identifiers.
    """
    pass


@cli.command("quote")
@click.argument("amount_in", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
def quote_cmd(amount_in: int, reserve_in: int, reserve_out: int):
    """Output of an exact-input swap after the 0.3% fee.

    Examples:

        simpleswap quote 10 1000 1000
    """
    try:
        amount_out = quote_output(amount_in, reserve_in, reserve_out)
    except ExchangeError as e:
        raise click.ClickException(str(e))
    click.echo(amount_out)


@cli.command("price")
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
@click.option(
    "--decimals", "-d",
    type=click.IntRange(0, 36),
    default=18,
    show_default=True,
    help="Fixed-point decimals of the result",
)
def price_cmd(reserve_in: int, reserve_out: int, decimals: int):
    """Units of asset-out per unit of asset-in, as a fixed-point integer."""
    try:
        price = quote_price(reserve_in, reserve_out, 10 ** decimals)
    except ExchangeError as e:
        raise click.ClickException(str(e))
    click.echo(price)


@cli.command("pair")
@click.argument("token_x")
@click.argument("token_y")
def pair_cmd(token_x: str, token_y: str):
    """Canonical ordering and pool id of a pair.

    Examples:

        simpleswap pair 0x00...02 0x00...01
    """
    try:
        pair = canonicalize(token_x, token_y)
    except ExchangeError as e:
        raise click.ClickException(str(e))
    click.echo(f"token0:  {pair.token0}")
    click.echo(f"token1:  {pair.token1}")
    click.echo(f"pool_id: {pair.pool_id}")


@cli.command("config")
@click.argument("path", required=False, type=click.Path())
def config_cmd(path: Optional[str]):
    """Show the effective configuration as JSON."""
    try:
        cfg = load_config(path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(cfg.to_dict(), indent=2))


@cli.command("demo")
@click.option("--liquidity", "-l", type=click.IntRange(min=1), default=1000, show_default=True,
              help="Units of each asset deposited")
@click.option("--swap", "-s", "swap_amount", type=click.IntRange(min=1), default=10, show_default=True,
              help="Units of token A sold")
@click.option("--config", "-c", "config_path", type=click.Path(), default=None,
              help="TOML config file (default: SIMPLESWAP_CONFIG or ./simpleswap.toml)")
def demo_cmd(liquidity: int, swap_amount: int, config_path: Optional[str]):
    """Run a deposit and a swap against an in-memory engine."""
    try:
        cfg = load_config(config_path)
        LogManager().apply(cfg.logging)
        summary = asyncio.run(_run_demo(liquidity, swap_amount, cfg))
    except (ExchangeError, ConfigurationError) as e:
        raise click.ClickException(str(e))

    click.echo(click.style("✓ Demo complete", fg="green"))
    click.echo(json.dumps(summary, indent=2))


async def _run_demo(liquidity: int, swap_amount: int, config: SwapConfig) -> dict:
    from simpleswap.exchange.engine import SimpleSwap
    from simpleswap.tokens.asset import AssetRegistry, AssetToken

    supply = (liquidity + swap_amount) * 2
    registry = AssetRegistry()
    token_a = registry.register(AssetToken("Token A", "TKA", DEMO_DEPLOYER, 0, supply))
    token_b = registry.register(AssetToken("Token B", "TKB", DEMO_DEPLOYER, 0, supply))
    engine = SimpleSwap(registry, config=config)
    deadline = float("inf")

    await token_a.approve(DEMO_DEPLOYER, engine.custody, liquidity)
    await token_b.approve(DEMO_DEPLOYER, engine.custody, liquidity)
    _, _, shares = await engine.add_liquidity(
        DEMO_DEPLOYER, token_a.address, token_b.address,
        liquidity, liquidity, 0, 0, DEMO_DEPLOYER, deadline,
    )

    await token_a.transfer(DEMO_DEPLOYER, DEMO_TRADER, swap_amount)
    await token_a.approve(DEMO_TRADER, engine.custody, swap_amount)
    amount_out = await engine.swap_exact_tokens_for_tokens(
        DEMO_TRADER, swap_amount, 0, [token_a.address, token_b.address], DEMO_TRADER, deadline,
    )

    return {
        "shares": shares,
        "amount_out": amount_out,
        "pool": engine.get_pool_info(token_a.address, token_b.address),
        "events": [e.to_dict() for e in engine.events],
    }


if __name__ == "__main__":
    cli()
