"""Rate table — immutable USD->X multipliers plus the gold price.

Every entry is "units of that currency per 1 USD", except ``XAU`` which is
the gold price in USD per troy ounce.  Lookups are fallible: an absent code
is ``None`` from ``get`` and ``MissingRate`` from ``require``, never 0 or 1.
"""

import math
from collections.abc import Mapping
from typing import Iterator, Optional

from lotcalc.engine.errors import DivideByZero, InvalidInput, MissingRate
from lotcalc.engine.models import GOLD, USD


class RateTable(Mapping):
    """Read-only mapping of currency code to rate.

    Args:
        rates: Mapping of code to rate.  Codes are upper-cased; ``USD`` is
               added as 1.0 when absent.

    Raises:
        InvalidInput: If a rate is non-numeric, non-finite, or negative.
    """

    def __init__(self, rates: Mapping) -> None:
        table: dict[str, float] = {}
        for code, raw in rates.items():
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise InvalidInput(f"Rate for {code} is not a number: {raw!r}") from None
            if not math.isfinite(value):
                raise InvalidInput(f"Rate for {code} is not finite: {raw!r}")
            if value < 0:
                raise InvalidInput(f"Rate for {code} is negative: {value}")
            table[str(code).upper()] = value
        table.setdefault(USD, 1.0)
        self._rates = table

    @classmethod
    def from_provider(
        cls,
        conversion_rates: Mapping,
        gold_price_usd: Optional[float] = None,
    ) -> "RateTable":
        """Build a table from a provider payload, injecting the gold price."""
        rates = dict(conversion_rates)
        if gold_price_usd is not None:
            rates[GOLD] = gold_price_usd
        return cls(rates)

    # ── Mapping protocol ─────────────────────────────────────────────────

    def __getitem__(self, code: str) -> float:
        if not isinstance(code, str):
            raise KeyError(code)
        return self._rates[code.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"RateTable({self._rates!r})"

    # ── Lookups ──────────────────────────────────────────────────────────

    def require(self, code: str) -> float:
        """Return the rate for *code* or raise ``MissingRate``."""
        rate = self.get(code)
        if rate is None:
            raise MissingRate(code.upper())
        return rate

    @property
    def gold_price_usd(self) -> float:
        """Gold price in USD per troy ounce."""
        return self.require(GOLD)

    def usd_multiplier(self, code: str) -> float:
        """Units of *code* per 1 USD.

        For gold this is the inverse of the stored price.
        """
        if code.upper() == GOLD:
            price = self.gold_price_usd
            if price == 0:
                raise DivideByZero("Gold price is zero")
            return 1.0 / price
        return self.require(code)

    def to_dict(self) -> dict[str, float]:
        return dict(self._rates)
