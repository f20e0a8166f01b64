"""Calculation errors — the failure taxonomy of the sizing engine.

Engine functions raise these; ``calculator.calculate`` turns them into a
failure-tagged ``CalculationResult``.
"""


class CalculationError(ValueError):
    """Base class for every recoverable engine failure."""

    error_type = "CalculationError"


class MissingRate(CalculationError):
    """The rate table lacks a code the instrument needs."""

    error_type = "MissingRate"

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Missing rate for {code}")


class DivideByZero(CalculationError):
    """A rate, pip distance, or pip value that would be divided by is zero."""

    error_type = "DivideByZero"


class InvalidInput(CalculationError):
    """A price, capital, percentage, or symbol is malformed or out of range."""

    error_type = "InvalidInput"
