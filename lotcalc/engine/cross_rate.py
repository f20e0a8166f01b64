"""Cross-rate resolution — pure math over a ``RateTable``.

Both legs of a cross are USD->X multipliers, so their ratio cancels the
implicit USD leg and yields the quote-per-base rate directly.
"""

from lotcalc.engine.errors import DivideByZero
from lotcalc.engine.models import GOLD, USD, InstrumentSymbol
from lotcalc.engine.rate_table import RateTable


def _divide(numerator: float, denominator: float, what: str) -> float:
    if denominator == 0:
        raise DivideByZero(f"Rate for {what} is zero")
    return numerator / denominator


def resolve(table: RateTable, from_code: str, to_code: str) -> float:
    """Return how many units of *to_code* one unit of *from_code* buys.

    Rules, first match wins:

    1. identical codes → 1.0
    2. ``XAU`` → ``USD`` → the stored gold price, not inverted
    3. ``USD`` → X → the table's multiplier for X
    4. X → ``USD`` → ``1 / table[X]``
    5. X → Y → ``table[Y] / table[X]``

    Raises:
        MissingRate: If either code is absent from the table.
        DivideByZero: If the divisor rate is zero.
    """
    from_code = from_code.upper()
    to_code = to_code.upper()

    if from_code == to_code:
        return 1.0
    if from_code == GOLD and to_code == USD:
        return table.gold_price_usd
    if from_code == USD:
        return table.usd_multiplier(to_code)
    if to_code == USD:
        return _divide(1.0, table.usd_multiplier(from_code), from_code)
    return _divide(
        table.usd_multiplier(to_code), table.usd_multiplier(from_code), from_code,
    )


def price(table: RateTable, symbol: InstrumentSymbol) -> float:
    """Current quote-per-base price of *symbol* implied by the table."""
    return resolve(table, symbol.base, symbol.quote)
