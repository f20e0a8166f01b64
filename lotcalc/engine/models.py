"""Engine data models — instruments, trade parameters, and results."""

import math
from dataclasses import dataclass, field
from typing import Optional

from lotcalc.engine.errors import InvalidInput

USD = "USD"
JPY = "JPY"
GOLD = "XAU"

DIRECTIONS = ("buy", "sell")


@dataclass(frozen=True)
class GoldConvention:
    """Pip unit for gold and the lot size it is measured against.

    The per-lot pip value is derived from the two, so pip size and pip
    value can never drift apart.
    """

    pip_size: float = 0.1
    contract_ounces: float = 100.0

    def __post_init__(self) -> None:
        for name in ("pip_size", "contract_ounces"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise InvalidInput(f"Gold {name} must be a positive number, got {value!r}")

    @property
    def pip_value(self) -> float:
        """USD value of a one-pip move on one standard lot."""
        return self.pip_size * self.contract_ounces


DEFAULT_GOLD = GoldConvention()


def _normalize_code(code: str) -> str:
    code = code.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise InvalidInput(f"Invalid currency code: {code!r}")
    return code


@dataclass(frozen=True)
class InstrumentSymbol:
    """A currency pair ``BASE/QUOTE`` or the gold symbol ``XAUUSD``."""

    base: str
    quote: str

    def __post_init__(self) -> None:
        if self.base == self.quote:
            raise InvalidInput(
                f"Base and quote must differ, got {self.base}/{self.quote}"
            )
        if GOLD in (self.base, self.quote) and (self.base, self.quote) != (GOLD, USD):
            raise InvalidInput("Gold is only sized as XAUUSD")

    @classmethod
    def parse(cls, symbol: str) -> "InstrumentSymbol":
        """Parse ``"EUR/USD"``, ``"EUR_USD"``, ``"EURUSD"`` or ``"XAUUSD"``.

        Raises:
            InvalidInput: If the symbol is empty or not two 3-letter codes.
        """
        if not isinstance(symbol, str) or not symbol.strip():
            raise InvalidInput("Instrument symbol is empty")
        text = symbol.strip().upper()
        for sep in ("/", "_"):
            if sep in text:
                parts = text.split(sep)
                if len(parts) != 2:
                    raise InvalidInput(f"Invalid instrument symbol: {symbol!r}")
                return cls(_normalize_code(parts[0]), _normalize_code(parts[1]))
        if len(text) != 6:
            raise InvalidInput(f"Invalid instrument symbol: {symbol!r}")
        return cls(_normalize_code(text[:3]), _normalize_code(text[3:]))

    @property
    def is_gold(self) -> bool:
        return self.base == GOLD

    @property
    def is_yen_quoted(self) -> bool:
        return self.quote == JPY

    @property
    def is_usd_quoted(self) -> bool:
        return self.quote == USD

    @property
    def is_usd_based(self) -> bool:
        return self.base == USD

    @property
    def is_cross(self) -> bool:
        """``True`` when neither leg is USD."""
        return USD not in (self.base, self.quote)

    @property
    def display(self) -> str:
        """Symbol as shown in the instrument list."""
        if self.is_gold:
            return f"{self.base}{self.quote}"
        return f"{self.base}/{self.quote}"

    def __str__(self) -> str:
        return self.display


@dataclass(frozen=True)
class TradeParameters:
    """Raw trade inputs as entered in the form.

    ``symbol`` is kept as text; the calculator parses and validates it so a
    malformed symbol becomes a failure result rather than an exception.
    A stop on the wrong side of the entry is not rejected here.
    """

    symbol: str
    entry_price: float
    stop_loss_price: float
    account_capital: float
    risk_percentage: float
    direction: str = "buy"


@dataclass(frozen=True)
class CalculationResult:
    """Tagged success/failure outcome of one calculation."""

    success: bool
    risk_amount: Optional[float] = None
    pip_distance: Optional[float] = None
    lot_size: Optional[float] = None
    pip_value: Optional[float] = None
    conversion_trace: tuple[str, ...] = field(default_factory=tuple)
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(
        cls,
        risk_amount: float,
        pip_distance: float,
        lot_size: float,
        pip_value: float,
        conversion_trace: tuple[str, ...] = (),
    ) -> "CalculationResult":
        return cls(
            success=True,
            risk_amount=risk_amount,
            pip_distance=pip_distance,
            lot_size=lot_size,
            pip_value=pip_value,
            conversion_trace=tuple(conversion_trace),
        )

    @classmethod
    def failure(cls, error: str, error_type: str) -> "CalculationResult":
        return cls(success=False, error=error, error_type=error_type)

    def to_dict(self) -> dict:
        """JSON envelope returned by the API."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "error_type": self.error_type,
            }
        return {
            "success": True,
            "risk_amount": self.risk_amount,
            "pips": self.pip_distance,
            "lot_size": self.lot_size,
            "pip_value": self.pip_value,
            "conversion_info": list(self.conversion_trace),
        }
