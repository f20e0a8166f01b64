"""Calculation facade — the single entry point of the sizing engine.

``calculate`` orchestrates pip metrics and position sizing and always
returns a ``CalculationResult``; engine errors never escape it.
"""

import logging
import math

from lotcalc.engine import pip_metric, position_sizer
from lotcalc.engine.cross_rate import price
from lotcalc.engine.errors import CalculationError, InvalidInput
from lotcalc.engine.models import (
    DEFAULT_GOLD,
    DIRECTIONS,
    CalculationResult,
    GoldConvention,
    InstrumentSymbol,
    TradeParameters,
)
from lotcalc.engine.rate_table import RateTable

logger = logging.getLogger("lotcalc")


def _number(name: str, value, *, positive: bool = False) -> float:
    """Coerce *value* to a finite float, enforcing its sign constraint."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    if positive and number <= 0:
        raise InvalidInput(f"{name} must be positive, got {number}")
    if number < 0:
        raise InvalidInput(f"{name} must not be negative, got {number}")
    return number


def _check_direction(direction: str) -> None:
    if direction not in DIRECTIONS:
        raise InvalidInput(f"direction must be 'buy' or 'sell', got {direction!r}")


def _calculate(
    params: TradeParameters,
    table: RateTable,
    gold: GoldConvention,
) -> CalculationResult:
    symbol = InstrumentSymbol.parse(params.symbol)
    _check_direction(params.direction)
    entry = _number("entry_price", params.entry_price, positive=True)
    stop = _number("stop_loss_price", params.stop_loss_price, positive=True)
    capital = _number("account_capital", params.account_capital)
    risk_pct = _number("risk_percentage", params.risk_percentage)
    if risk_pct > 100:
        raise InvalidInput(f"risk_percentage must be at most 100, got {risk_pct}")

    risk_amount = capital * (risk_pct / 100.0)
    distance = pip_metric.pip_distance(entry, stop, symbol, gold)
    pip_value = position_sizer.per_lot_pip_value(table, symbol, gold)
    lots = position_sizer.size(risk_amount, distance, pip_value.value)
    if not math.isfinite(lots):
        raise InvalidInput("Position size is not a finite number")

    return CalculationResult.ok(
        risk_amount=round(risk_amount, 2),
        pip_distance=round(distance, 1),
        lot_size=round(lots, 2),
        pip_value=round(pip_value.value, 4),
        conversion_trace=pip_value.trace,
    )


def calculate(
    params: TradeParameters,
    table: RateTable,
    gold: GoldConvention = DEFAULT_GOLD,
) -> CalculationResult:
    """Size a position for *params* against *table*.

    Returns:
        A success result with risk amount (2 dp), pip distance (1 dp),
        lot size (2 dp) and the conversion trace, or a failure result
        naming the ``MissingRate``, ``DivideByZero`` or ``InvalidInput``
        condition.
    """
    try:
        return _calculate(params, table, gold)
    except CalculationError as exc:
        logger.info(
            "Calculation failed for %s: %s (%s)",
            params.symbol, exc, exc.error_type,
        )
        return CalculationResult.failure(str(exc), exc.error_type)


def quote(
    table: RateTable,
    symbol: InstrumentSymbol,
    direction: str = "buy",
    stop_pips: float = 10.0,
    gold: GoldConvention = DEFAULT_GOLD,
) -> dict:
    """Current price of *symbol* and a default stop to pre-fill the form.

    The entry is rounded to the instrument precision before the stop is
    derived from it.

    Raises:
        CalculationError: If a rate is missing or zero, or the direction
            or pip count is invalid.
    """
    _check_direction(direction)
    pips = _number("stop_pips", stop_pips)
    precision = pip_metric.price_precision(symbol)
    entry = round(price(table, symbol), precision)
    return {
        "symbol": symbol.display,
        "direction": direction,
        "entry_price": entry,
        "stop_loss_price": pip_metric.suggest_stop(entry, direction, symbol, pips, gold),
        "pip_size": pip_metric.pip_size(symbol, gold),
        "price_step": pip_metric.price_step(symbol),
    }
