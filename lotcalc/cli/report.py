"""CLI report — prints a calculation result to the console."""

from lotcalc.engine.models import CalculationResult


def format_result(symbol: str, result: CalculationResult) -> str:
    """Format and print a calculation result.

    Args:
        symbol: Instrument the calculation was run for.
        result: Outcome returned by ``calculate``.

    Returns:
        The formatted string (also printed to stdout).
    """
    lines = [f"──────────────── LotCalc: {symbol} ────────────────"]
    if result.success:
        lines += [
            f"  Risk Amount:     ${result.risk_amount:,.2f}",
            f"  Position Size:   {result.lot_size:.2f} Lots",
            f"  Pips:            {result.pip_distance:.1f}",
            f"  Pip Value/Lot:   ${result.pip_value:,.4f}",
        ]
        if result.conversion_trace:
            lines.append("  Conversion Rates Used:")
            lines += [f"    {entry}" for entry in result.conversion_trace]
    else:
        lines.append(f"  Error ({result.error_type}): {result.error}")
    lines.append("─" * 50)
    output = "\n".join(lines)
    print(output)
    return output
