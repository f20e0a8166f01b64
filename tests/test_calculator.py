"""Tests for the calculation facade.

Covers the worked scenarios, the failure taxonomy, and the guarantee that
``calculate`` never raises.
"""

import pytest

from lotcalc.engine.calculator import calculate, quote
from lotcalc.engine.errors import InvalidInput, MissingRate
from lotcalc.engine.models import (
    CalculationResult,
    GoldConvention,
    InstrumentSymbol,
    TradeParameters,
)
from lotcalc.engine.rate_table import RateTable


def _rates(**overrides) -> RateTable:
    rates = {
        "EUR": 0.92,
        "GBP": 0.79,
        "JPY": 150.0,
        "CAD": 1.36,
        "CHF": 0.88,
        "XAU": 1950.25,
    }
    rates.update(overrides)
    return RateTable(rates)


def _params(**overrides) -> TradeParameters:
    defaults = dict(
        symbol="EUR/USD",
        entry_price=1.10000,
        stop_loss_price=1.09900,
        account_capital=1000.0,
        risk_percentage=1.0,
        direction="buy",
    )
    defaults.update(overrides)
    return TradeParameters(**defaults)


# ── Scenarios ────────────────────────────────────────────────────────────


class TestScenarios:
    def test_eur_usd(self):
        result = calculate(_params(), _rates())
        assert result.success
        assert result.risk_amount == 10.00
        assert result.pip_distance == 10.0
        assert result.pip_value == 10.0
        assert result.lot_size == 0.10
        assert result.conversion_trace == ()

    def test_usd_jpy(self):
        result = calculate(
            _params(symbol="USD/JPY", entry_price=150.000, stop_loss_price=149.900),
            _rates(JPY=150.0),
        )
        assert result.success
        assert result.risk_amount == 10.00
        assert result.pip_distance == 10.0
        assert result.pip_value == pytest.approx(6.6667)
        assert result.lot_size == 0.15
        assert result.conversion_trace == ("USD/JPY: 150.000",)

    def test_gbp_jpy_cross(self):
        result = calculate(
            _params(symbol="GBP/JPY", entry_price=190.000, stop_loss_price=189.500),
            _rates(),
        )
        # pip value = (1000 / 150) / 0.79 ≈ 8.4388; 10 / (50 × 8.4388) ≈ 0.0237
        assert result.success
        assert result.pip_distance == 50.0
        assert result.lot_size == 0.02
        assert len(result.conversion_trace) == 2

    def test_gold(self):
        result = calculate(
            _params(
                symbol="XAUUSD",
                entry_price=1950.0,
                stop_loss_price=1945.0,
                account_capital=10_000.0,
            ),
            _rates(),
        )
        # 50 pips of 0.1 at $10/pip/lot, $100 risk → 0.2 lots
        assert result.success
        assert result.risk_amount == 100.00
        assert result.pip_distance == 50.0
        assert result.lot_size == 0.20

    def test_gold_alternative_convention(self):
        gold = GoldConvention(pip_size=1.0, contract_ounces=10.0)
        result = calculate(
            _params(
                symbol="XAUUSD",
                entry_price=1950.0,
                stop_loss_price=1945.0,
                account_capital=10_000.0,
            ),
            _rates(),
            gold,
        )
        assert result.pip_distance == 5.0
        assert result.lot_size == 2.00

    def test_zero_capital_is_not_an_error(self):
        result = calculate(_params(account_capital=0), _rates())
        assert result.success
        assert result.risk_amount == 0.00
        assert result.lot_size == 0.00

    def test_stop_on_wrong_side_still_sized(self):
        right = calculate(_params(), _rates())
        wrong = calculate(_params(stop_loss_price=1.10100), _rates())
        assert wrong.success
        assert wrong.pip_distance == right.pip_distance
        assert wrong.lot_size == right.lot_size

    def test_idempotent(self):
        params = _params(symbol="CAD/CHF", entry_price=0.64700, stop_loss_price=0.64500)
        table = _rates()
        assert calculate(params, table) == calculate(params, table)


# ── Failures ─────────────────────────────────────────────────────────────


class TestFailures:
    def test_missing_rate(self):
        result = calculate(
            _params(symbol="USD/JPY", entry_price=150.0, stop_loss_price=149.9),
            RateTable({"EUR": 0.92}),
        )
        assert not result.success
        assert result.error_type == "MissingRate"
        assert "JPY" in result.error
        assert result.lot_size is None

    def test_zero_pip_distance(self):
        result = calculate(_params(stop_loss_price=1.10000), _rates())
        assert not result.success
        assert result.error_type == "DivideByZero"

    def test_zero_rate(self):
        result = calculate(
            _params(symbol="CAD/CHF", entry_price=0.647, stop_loss_price=0.645),
            _rates(CAD=0.0),
        )
        assert result.error_type == "DivideByZero"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"symbol": ""},
            {"symbol": None},
            {"symbol": "EURUSDX"},
            {"entry_price": float("nan")},
            {"entry_price": float("inf")},
            {"entry_price": 0},
            {"stop_loss_price": -1.0},
            {"stop_loss_price": None},
            {"account_capital": -5.0},
            {"account_capital": "lots"},
            {"risk_percentage": 101.0},
            {"risk_percentage": -1.0},
            {"direction": "hold"},
        ],
    )
    def test_invalid_input(self, overrides):
        result = calculate(_params(**overrides), _rates())
        assert not result.success
        assert result.error_type == "InvalidInput"
        assert result.error

    def test_to_dict_failure_envelope(self):
        result = CalculationResult.failure("Missing rate for JPY", "MissingRate")
        assert result.to_dict() == {
            "success": False,
            "error": "Missing rate for JPY",
            "error_type": "MissingRate",
        }

    def test_to_dict_success_envelope(self):
        data = calculate(_params(), _rates()).to_dict()
        assert data["success"] is True
        assert data["lot_size"] == 0.1
        assert data["pips"] == 10.0
        assert data["risk_amount"] == 10.0
        assert data["conversion_info"] == []


# ── Gold convention ──────────────────────────────────────────────────────


class TestGoldConvention:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"pip_size": 0.0},
            {"pip_size": -0.1},
            {"pip_size": float("nan")},
            {"contract_ounces": 0.0},
            {"contract_ounces": -100.0},
            {"contract_ounces": float("inf")},
        ],
    )
    def test_rejects_non_positive_settings(self, kwargs):
        with pytest.raises(InvalidInput, match="Gold"):
            GoldConvention(**kwargs)

    def test_gold_needs_no_table_entry(self):
        result = calculate(
            _params(
                symbol="XAUUSD",
                entry_price=1950.0,
                stop_loss_price=1945.0,
                account_capital=10_000.0,
            ),
            RateTable({}),
            GoldConvention(),
        )
        assert result.success
        assert result.lot_size > 0
        assert result.pip_value == 10.0


# ── Quote ────────────────────────────────────────────────────────────────


class TestQuote:
    def test_eur_usd_quote(self):
        q = quote(_rates(), InstrumentSymbol.parse("EUR/USD"), "buy", 10)
        assert q["entry_price"] == round(1 / 0.92, 5)
        assert q["stop_loss_price"] == pytest.approx(q["entry_price"] - 0.0010)
        assert q["pip_size"] == 0.0001

    def test_gold_quote_sell(self):
        q = quote(_rates(), InstrumentSymbol.parse("XAUUSD"), "sell", 10)
        assert q["entry_price"] == 1950.25
        assert q["stop_loss_price"] == pytest.approx(1951.25)
        assert q["symbol"] == "XAUUSD"

    def test_quote_missing_rate(self):
        with pytest.raises(MissingRate):
            quote(RateTable({}), InstrumentSymbol.parse("USD/JPY"))
