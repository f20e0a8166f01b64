"""Position sizing — pure math, no I/O.

Converts the value of a one-pip move on one standard lot into USD and
divides the risk amount by the dollar risk of one lot at the stop.
"""

from dataclasses import dataclass, field

from lotcalc.engine.cross_rate import resolve
from lotcalc.engine.errors import DivideByZero
from lotcalc.engine.models import (
    DEFAULT_GOLD,
    JPY,
    USD,
    GoldConvention,
    InstrumentSymbol,
)
from lotcalc.engine.rate_table import RateTable

# Pip value of one standard lot (100,000 units), in the quote currency.
_STANDARD_PIP_VALUE = 10.0
_YEN_PIP_VALUE = 1000.0


@dataclass(frozen=True)
class PipValue:
    """Per-lot pip value in USD and the rates consulted to get it."""

    value: float
    trace: tuple[str, ...] = field(default_factory=tuple)


def _trace_entry(table: RateTable, code: str) -> str:
    return f"USD/{code}: {resolve(table, USD, code):.3f}"


def _usd_rate(table: RateTable, code: str) -> float:
    rate = table.require(code)
    if rate == 0:
        raise DivideByZero(f"Rate for {code} is zero")
    return rate


def per_lot_pip_value(
    table: RateTable,
    symbol: InstrumentSymbol,
    gold: GoldConvention = DEFAULT_GOLD,
) -> PipValue:
    """Return the USD value of a one-pip move on one standard lot.

    Branches:

    * gold → ``gold.pip_value``
    * ``XXX/USD`` → 10
    * ``USD/JPY`` → ``1000 / table[JPY]``
    * ``USD/XXX`` → 10
    * ``XXX/JPY`` → ``(1000 / table[JPY]) * (1 / table[XXX])``
    * ``XXX/YYY`` → ``10 / table[XXX]``

    Raises:
        MissingRate: If a required code is absent.
        DivideByZero: If a required rate is zero.
    """
    if symbol.is_gold:
        return PipValue(gold.pip_value)

    if symbol.is_usd_quoted:
        return PipValue(_STANDARD_PIP_VALUE)

    if symbol.is_usd_based:
        trace = (_trace_entry(table, symbol.quote),)
        if symbol.is_yen_quoted:
            return PipValue(_YEN_PIP_VALUE / _usd_rate(table, JPY), trace)
        return PipValue(_STANDARD_PIP_VALUE, trace)

    # Cross pair: neither leg is USD
    base_rate = _usd_rate(table, symbol.base)
    trace = (
        _trace_entry(table, symbol.base),
        _trace_entry(table, symbol.quote),
    )
    if symbol.is_yen_quoted:
        value = (_YEN_PIP_VALUE / _usd_rate(table, JPY)) * (1.0 / base_rate)
    else:
        value = _STANDARD_PIP_VALUE / base_rate
    return PipValue(value, trace)


def size(risk_amount: float, pip_distance: float, pip_value: float) -> float:
    """Calculate position size in standard lots.

    Formula::

        lots = risk_amount / (pip_distance × pip_value)

    Raises:
        DivideByZero: If the pip distance or pip value is zero.
    """
    denominator = pip_distance * pip_value
    if denominator == 0:
        raise DivideByZero(
            "Cannot size a position with zero pip distance or zero pip value"
        )
    return risk_amount / denominator
