"""Command-line interface for the stablecoin engine."""
from __future__ import annotations

import argparse
import asyncio
import sys
from decimal import Decimal

from .config import AppConfig, load_config
from .constants import MAX_HEALTH_FACTOR, PRECISION
from .engine import calculate_health_factor
from .errors import PriceUnavailableError
from .logging_setup import configure_logging
from .oracles import PythOracle
from .services import Simulator, build_oracle, load_scenario
from .services.simulator import to_wei


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="stablecoin-engine",
        description="Over-collateralized stablecoin accounting engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    health_parser = sub.add_parser("health", help="Compute a health factor")
    health_parser.add_argument("debt", help="Debt minted")
    health_parser.add_argument("collateral_usd", help="Collateral value in USD")
    health_parser.add_argument(
        "--units",
        action="store_true",
        help="Arguments are whole units instead of 18-decimal integers",
    )

    sub.add_parser("prices", help="Show the price of every collateral asset")

    simulate_parser = sub.add_parser("simulate", help="Replay a scenario file")
    simulate_parser.add_argument("scenario", help="Path to scenario YAML")

    return parser


def _format_health_factor(health_factor: int) -> str:
    if health_factor == MAX_HEALTH_FACTOR:
        return "∞ (no debt)"
    return f"{Decimal(health_factor) / PRECISION:.4f}"


def _health(args: argparse.Namespace) -> None:
    if args.units:
        debt, collateral = to_wei(args.debt), to_wei(args.collateral_usd)
    else:
        debt, collateral = int(args.debt), int(args.collateral_usd)
    print(_format_health_factor(calculate_health_factor(debt, collateral)))


async def _prices(config: AppConfig) -> None:
    oracle = build_oracle(config)
    if isinstance(oracle, PythOracle):
        await oracle.refresh()
    for asset in config.collateral:
        try:
            price_round = oracle.latest_price(asset.price_feed)
        except PriceUnavailableError:
            print(f"{asset.symbol} ({asset.price_feed}): unavailable")
            continue
        price = Decimal(price_round.price) / (10**price_round.decimals)
        print(f"{asset.symbol} ({asset.price_feed}): ${price:,.4f}")


async def _simulate(config: AppConfig, scenario: str) -> None:
    steps = load_scenario(scenario)
    simulator = Simulator(config)
    if isinstance(simulator.oracle, PythOracle):
        await simulator.oracle.refresh()

    results = simulator.run(steps)
    for result in results:
        status = "ok" if result.ok else f"rejected ({result.error})"
        print(f"[{result.index}] {result.action}: {status}")

    print()
    for user in simulator.users:
        print(simulator.account_report(user))

    report = simulator.engine.solvency_report()
    print(
        f"\nTotal debt {Decimal(report.total_debt) / PRECISION:f} · "
        f"collateral ${Decimal(report.total_collateral_value_usd) / PRECISION:,.2f} · "
        f"{'solvent' if report.is_solvent else 'INSOLVENT'}"
    )


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)

    if args.command == "health":
        _health(args)
        return

    config = load_config(args.config)
    if args.command == "prices":
        await _prices(config)
    elif args.command == "simulate":
        await _simulate(config, args.scenario)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
