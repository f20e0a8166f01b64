"""LotCalc — application entry point.

Boots the FastAPI server and provides the CLI entry point for serving the
API and for one-shot calculations.
"""

import logging

from fastapi import FastAPI

from lotcalc.api.routers import router

app = FastAPI(title="LotCalc Position Sizing API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("lotcalc")


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}


def parse_rate_override(text: str) -> tuple[str, float]:
    """Parse a ``CODE=VALUE`` command-line rate, e.g. ``JPY=150``."""
    code, sep, value = text.partition("=")
    if not sep or not code.strip():
        raise ValueError(f"Expected CODE=VALUE, got {text!r}")
    return code.strip().upper(), float(value)


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to the requested command."""
    import argparse

    parser = argparse.ArgumentParser(description="LotCalc position sizer")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=None)

    calc = sub.add_parser("calc", help="Size one position and print the result")
    calc.add_argument("--pair", required=True, help="e.g. EUR/USD, USD_JPY, XAUUSD")
    calc.add_argument("--entry", type=float, required=True)
    calc.add_argument("--stop", type=float, required=True)
    calc.add_argument("--capital", type=float, default=1000.0)
    calc.add_argument("--risk", type=float, default=1.0, help="Risk percentage")
    calc.add_argument("--direction", choices=["buy", "sell"], default="buy")
    calc.add_argument(
        "--rate",
        action="append",
        default=[],
        metavar="CODE=VALUE",
        help="Use these USD->X rates instead of fetching (repeatable)",
    )
    calc.add_argument("--gold-price", type=float, default=None)
    calc.add_argument("--env-file", default=None)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _serve(args.host, args.port)
    return _calc(args)


def _serve(host: str, port: int | None) -> int:
    """Start the API server with the configured rate source and form store."""
    import uvicorn

    from lotcalc.api.routers import configure_routers
    from lotcalc.config import load_config
    from lotcalc.rates.exchange_rate_client import ExchangeRateClient
    from lotcalc.repos.db import init_db
    from lotcalc.repos.form_state_repo import FormStateRepo

    config = load_config()
    logging.getLogger().setLevel(config.log_level)
    init_db(config.db_path)

    configure_routers(
        rate_source=ExchangeRateClient(config),
        form_repo=FormStateRepo(config.db_path),
        gold=config.gold_convention,
    )

    port = port or config.http_port
    logger.info("LotCalc API available at http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")
    return 0


def _calc(args) -> int:
    """Run a single calculation and print the report."""
    import asyncio

    from lotcalc.cli.report import format_result
    from lotcalc.engine.calculator import calculate
    from lotcalc.engine.models import DEFAULT_GOLD, TradeParameters
    from lotcalc.engine.rate_table import RateTable

    gold = DEFAULT_GOLD
    try:
        if args.rate:
            rates = dict(parse_rate_override(r) for r in args.rate)
            table = RateTable.from_provider(rates, args.gold_price)
        else:
            from lotcalc.config import load_config
            from lotcalc.rates.exchange_rate_client import (
                ExchangeRateClient,
                RateSourceError,
            )

            config = load_config(env_path=args.env_file)
            gold = config.gold_convention
            client = ExchangeRateClient(config)
            try:
                table = asyncio.run(client.get_rates("USD"))
            except RateSourceError as exc:
                logger.error("%s", exc)
                return 1
            if args.gold_price is not None:
                table = RateTable.from_provider(table, args.gold_price)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    params = TradeParameters(
        symbol=args.pair,
        entry_price=args.entry,
        stop_loss_price=args.stop,
        account_capital=args.capital,
        risk_percentage=args.risk,
        direction=args.direction,
    )
    result = calculate(params, table, gold)
    format_result(args.pair, result)
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(_run_cli())
