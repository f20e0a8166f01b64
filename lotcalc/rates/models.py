"""Rate provider data models — typed representations of API payloads."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RateSnapshot:
    """One ``latest`` response from the rate provider."""

    base_code: str
    rates: dict[str, float] = field(default_factory=dict)
    last_update_utc: str = ""
    next_update_utc: str = ""
