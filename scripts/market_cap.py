"""
PokéSweep — Market Cap Calculator

Adds up price x population for manually entered cards.

Usage:
    python scripts/market_cap.py --card "Charizard,350.00,1204" --card "Blastoise,120,3310"
"""

from __future__ import annotations

import argparse
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pokesweep.portfolio import Portfolio


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Total market cap (sum of price x population) for a list of cards.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/market_cap.py --card "Charizard,350.00,1204"
  python scripts/market_cap.py --card "Pikachu,12.5,300" --card "Raichu,20,150"
""",
    )
    parser.add_argument(
        "--card",
        action="append",
        default=[],
        metavar="NAME,PRICE,POPULATION",
        help="One card entry; repeat for more. Entries with an empty field are skipped.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    portfolio = Portfolio()

    for raw in args.card:
        name, _, rest = raw.partition(",")
        price, _, population = rest.rpartition(",")
        try:
            added = portfolio.add(name, price, population)
        except ValueError as e:
            print(f"Invalid entry {raw!r}: {e}", file=sys.stderr)
            return 1
        if not added:
            print(f"Skipping incomplete entry {raw!r}", file=sys.stderr)

    for entry in portfolio.entries:
        print(f"{entry.name} — Price: {entry.price}, Population: {entry.population}")
    print(f"Total Market Cap: {portfolio.total_market_cap}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
