"""
PokéSweep — Application Entrypoint

Configures structlog and either runs a single set scrape (printing the JSON
result) or serves the HTTP API.

Run via:
    python -m pokesweep.main scrape baseset --name charizard --limit 5
    python -m pokesweep.main scrape "Evolving Skies" --strategy structural_first --debug
    python -m pokesweep.main serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import structlog

from pokesweep import __version__
from pokesweep.config import AcquisitionMode, SelectionStrategy, settings
from pokesweep.errors import AcquisitionError, PokeSweepError
from pokesweep.scraper.runner import PageAcquirer
from pokesweep.service import scrape_set


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    # stdlib logging first (uvicorn, httpx)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    # Logs go to stderr so `scrape` output on stdout stays valid JSON
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pokesweep",
        description="Scrape PSA population reports for a Pokémon TCG set.",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="DEBUG | INFO | WARNING | ERROR")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scrape = subparsers.add_parser("scrape", help="Scrape one set and print the JSON result.")
    scrape.add_argument("set_slug", help="Set slug, e.g. baseset or 'Evolving Skies'.")
    scrape.add_argument("--name", dest="pokemon_name", default=None, help="Substring filter on name/details.")
    scrape.add_argument("--number", dest="card_number", default=None, help="Exact card number, e.g. 4/102.")
    scrape.add_argument("--limit", type=int, default=None, help="Result cap (clamped to 1-200).")
    scrape.add_argument("--debug", action="store_true", help="Include internal counts.")
    scrape.add_argument(
        "--strategy",
        choices=[s.value for s in SelectionStrategy],
        default=None,
        help=f"Block selection strategy (default: {settings.DEFAULT_SELECTION_STRATEGY.value}).",
    )
    scrape.add_argument(
        "--mode",
        choices=[m.value for m in AcquisitionMode],
        default=None,
        help=f"Page acquisition mode (default: {settings.ACQUISITION_MODE.value}).",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default=settings.API_HOST)
    serve.add_argument("--port", type=int, default=settings.API_PORT)

    return parser.parse_args(argv)


async def run_scrape(args: argparse.Namespace) -> int:
    logger = structlog.get_logger(__name__)
    acquirer = PageAcquirer(mode=args.mode) if args.mode else PageAcquirer()
    try:
        result = await scrape_set(
            args.set_slug,
            pokemon_name=args.pokemon_name,
            card_number=args.card_number,
            limit=args.limit,
            debug=args.debug,
            strategy=args.strategy,
            acquirer=acquirer,
        )
    except AcquisitionError as e:
        logger.error("cli_acquisition_failed", error=str(e), status_code=e.status_code, hint=e.hint)
        print(json.dumps({"error": str(e), "hint": e.hint}), file=sys.stderr)
        return 2
    except PokeSweepError as e:
        logger.error("cli_scrape_failed", error=str(e), error_type=type(e).__name__)
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 1

    print(json.dumps(result.to_response(), indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(log_level=args.log_level)
    logger = structlog.get_logger(__name__)
    logger.info("pokesweep_startup", version=__version__, command=args.command)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("pokesweep.api:app", host=args.host, port=args.port, log_level=args.log_level.lower())
        return 0

    return asyncio.run(run_scrape(args))


if __name__ == "__main__":
    sys.exit(main())
