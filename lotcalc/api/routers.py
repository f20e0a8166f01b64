"""API routers — /instruments, /rates, /quote, /calculate, /form-state endpoints.

No sizing math here. Delegates to the engine, the rate source, and the
form state repo.
"""

import logging
import sqlite3
from typing import Optional

from fastapi import APIRouter, Query

from lotcalc.engine.calculator import calculate, quote
from lotcalc.engine.cross_rate import resolve
from lotcalc.engine.errors import CalculationError
from lotcalc.engine.models import (
    DEFAULT_GOLD,
    CalculationResult,
    GoldConvention,
    InstrumentSymbol,
    TradeParameters,
)
from lotcalc.engine.pip_metric import pip_size, price_step
from lotcalc.engine.rate_table import RateTable
from lotcalc.rates.exchange_rate_client import RateSourceError

logger = logging.getLogger("lotcalc")
router = APIRouter()

SUPPORTED_INSTRUMENTS = [
    "GBP/JPY",
    "XAUUSD",
    "USD/JPY",
    "EUR/USD",
    "GBP/USD",
    "USD/CAD",
    "CAD/CHF",
]

# ── Shared state (set during app startup) ────────────────────────────────

_rate_source = None   # Set via configure_routers()
_form_repo = None     # Set via configure_routers()
_gold: GoldConvention = DEFAULT_GOLD
_rate_table: Optional[RateTable] = None  # Replaced wholesale on refresh


def configure_routers(
    rate_source=None,
    form_repo=None,
    gold: GoldConvention = DEFAULT_GOLD,
    rate_table: Optional[RateTable] = None,
) -> None:
    """Inject dependencies from the application startup.

    Args:
        rate_source: An ``ExchangeRateClient`` (or duck-type for tests).
        form_repo: A ``FormStateRepo`` instance.
        gold: Gold pip convention used for every calculation.
        rate_table: Optional table to serve until the next refresh.
    """
    global _rate_source, _form_repo, _gold, _rate_table  # noqa: PLW0603
    _rate_source = rate_source
    _form_repo = form_repo
    _gold = gold
    _rate_table = rate_table


async def _load_rates(force: bool = False) -> RateTable:
    """Return the cached table, fetching a new one when absent or forced."""
    global _rate_table  # noqa: PLW0603
    if _rate_table is not None and not force:
        return _rate_table
    if _rate_source is None:
        raise RateSourceError("No rate source configured")
    _rate_table = await _rate_source.get_rates("USD")
    return _rate_table


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get("/instruments")
async def get_instruments():
    """Return the supported instruments with their pip size and input step."""
    instruments = []
    for name in SUPPORTED_INSTRUMENTS:
        symbol = InstrumentSymbol.parse(name)
        instruments.append({
            "symbol": symbol.display,
            "base": symbol.base,
            "quote": symbol.quote,
            "pip_size": pip_size(symbol, _gold),
            "price_step": price_step(symbol),
            "is_gold": symbol.is_gold,
        })
    return {"instruments": instruments}


@router.get("/rates")
async def get_rates():
    """Return the current rate table, fetching it on first use."""
    try:
        table = await _load_rates()
    except RateSourceError as exc:
        logger.error("Rate fetch failed: %s", exc)
        return {"error": str(exc)}
    return {"rates": table.to_dict()}


@router.post("/rates/refresh")
async def refresh_rates():
    """Replace the cached rate table with a fresh fetch."""
    try:
        table = await _load_rates(force=True)
    except RateSourceError as exc:
        logger.error("Rate refresh failed: %s", exc)
        return {"error": str(exc)}
    return {"status": "refreshed", "count": len(table)}


@router.get("/rates/cross")
async def get_cross_rate(
    from_code: str = Query(..., min_length=3, max_length=3),
    to_code: str = Query(..., min_length=3, max_length=3),
):
    """Return the exchange rate from *from_code* to *to_code*."""
    try:
        table = await _load_rates()
        rate = resolve(table, from_code, to_code)
    except (RateSourceError, CalculationError) as exc:
        return {"error": str(exc)}
    return {"from": from_code.upper(), "to": to_code.upper(), "rate": rate}


@router.get("/quote/{symbol}")
async def get_quote(
    symbol: str,
    direction: str = Query(default="buy"),
    stop_pips: float = Query(default=10.0, ge=0),
):
    """Return the current price and a default stop for *symbol*.

    Use ``EUR_USD`` or ``EURUSD`` style symbols in the path.
    """
    try:
        instrument = InstrumentSymbol.parse(symbol)
        table = await _load_rates()
        return quote(table, instrument, direction, stop_pips, _gold)
    except (RateSourceError, CalculationError) as exc:
        return {"error": str(exc)}


@router.post("/calculate")
async def post_calculate(body: dict):
    """Size a position from the posted trade parameters."""
    params = TradeParameters(
        symbol=body.get("symbol") or body.get("pair") or "",
        entry_price=body.get("entry_price"),
        stop_loss_price=body.get("stop_loss_price", body.get("stop_loss")),
        account_capital=body.get("account_capital"),
        risk_percentage=body.get("risk_percentage"),
        direction=body.get("direction", "buy"),
    )
    try:
        table = await _load_rates()
    except RateSourceError as exc:
        logger.error("Rate fetch failed: %s", exc)
        return CalculationResult.failure(str(exc), "RateSourceError").to_dict()
    return calculate(params, table, _gold).to_dict()


@router.get("/form-state")
async def get_form_state():
    """Return the last-used form values."""
    if _form_repo is None:
        return {"error": "No form state store configured"}
    return _form_repo.load()


@router.post("/form-state")
async def post_form_state(body: dict):
    """Persist changed form values and return the full state."""
    if _form_repo is None:
        return {"error": "No form state store configured"}
    try:
        return _form_repo.save(body)
    except sqlite3.Error as exc:
        logger.error("Failed to persist form state: %s", exc)
        return {"error": "Failed to persist form state"}
