"""Pip metrics — pure math, no I/O.

Pip size by instrument class, pip distance between two prices, and the
default stop suggested when the form is pre-filled.  Gold uses the pip
unit of the supplied ``GoldConvention`` everywhere.
"""

from lotcalc.engine.errors import InvalidInput
from lotcalc.engine.models import DEFAULT_GOLD, GoldConvention, InstrumentSymbol

_STANDARD_PIP = 0.0001
_YEN_PIP = 0.01


def pip_size(
    symbol: InstrumentSymbol,
    gold: GoldConvention = DEFAULT_GOLD,
) -> float:
    """Price units per pip: gold per convention, 0.01 for JPY, else 0.0001."""
    if symbol.is_gold:
        return gold.pip_size
    if symbol.is_yen_quoted:
        return _YEN_PIP
    return _STANDARD_PIP


def pip_distance(
    entry: float,
    stop: float,
    symbol: InstrumentSymbol,
    gold: GoldConvention = DEFAULT_GOLD,
) -> float:
    """Distance between *entry* and *stop* in pips (always non-negative)."""
    return abs(entry - stop) / pip_size(symbol, gold)


def price_step(symbol: InstrumentSymbol) -> float:
    """Smallest price increment the entry and stop inputs accept."""
    if symbol.is_gold:
        return 0.01
    if symbol.is_yen_quoted:
        return 0.001
    return 0.00001


def price_precision(symbol: InstrumentSymbol) -> int:
    """Number of decimals matching ``price_step``."""
    if symbol.is_gold:
        return 2
    if symbol.is_yen_quoted:
        return 3
    return 5


def suggest_stop(
    entry: float,
    direction: str,
    symbol: InstrumentSymbol,
    pips: float,
    gold: GoldConvention = DEFAULT_GOLD,
) -> float:
    """Default stop *pips* away from *entry* on the losing side.

    Below the entry for a buy, above it for a sell.  Rounded to the
    instrument's input precision after the offset is applied.

    Raises:
        InvalidInput: If *direction* is not ``"buy"`` or ``"sell"``.
    """
    offset = pips * pip_size(symbol, gold)
    if direction == "buy":
        stop = entry - offset
    elif direction == "sell":
        stop = entry + offset
    else:
        raise InvalidInput(f"direction must be 'buy' or 'sell', got {direction!r}")
    return round(stop, price_precision(symbol))
