"""Tests for the command-line entry point and the console report."""

import pytest

from lotcalc.cli.report import format_result
from lotcalc.engine.models import CalculationResult
from lotcalc.main import _run_cli, parse_rate_override


class TestParseRateOverride:
    def test_parses_code_and_value(self):
        assert parse_rate_override("jpy=150.5") == ("JPY", 150.5)

    @pytest.mark.parametrize("text", ["JPY", "=150", "JPY=abc"])
    def test_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            parse_rate_override(text)


class TestFormatResult:
    def test_success_with_trace(self, capsys):
        result = CalculationResult.ok(
            risk_amount=10.0,
            pip_distance=10.0,
            lot_size=0.15,
            pip_value=6.6667,
            conversion_trace=("USD/JPY: 150.000",),
        )
        output = format_result("USD/JPY", result)
        assert "0.15 Lots" in output
        assert "$10.00" in output
        assert "USD/JPY: 150.000" in output
        assert capsys.readouterr().out.strip() == output.strip()

    def test_failure(self):
        result = CalculationResult.failure("Missing rate for JPY", "MissingRate")
        output = format_result("USD/JPY", result)
        assert "MissingRate" in output
        assert "Missing rate for JPY" in output


class TestCalcCommand:
    def test_offline_calculation(self, capsys):
        code = _run_cli([
            "calc", "--pair", "USD/JPY",
            "--entry", "150", "--stop", "149.9",
            "--capital", "1000", "--risk", "1",
            "--rate", "JPY=150",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "0.15 Lots" in out
        assert "USD/JPY: 150.000" in out

    def test_failure_exit_code(self, capsys):
        code = _run_cli([
            "calc", "--pair", "GBP/JPY",
            "--entry", "190", "--stop", "189.5",
            "--rate", "JPY=150",
        ])
        assert code == 1
        assert "MissingRate" in capsys.readouterr().out

    def test_bad_rate_override(self):
        code = _run_cli([
            "calc", "--pair", "EUR/USD",
            "--entry", "1.1", "--stop", "1.099",
            "--rate", "EUR",
        ])
        assert code == 1
