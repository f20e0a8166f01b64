"""LotCalc — application configuration.

Loads .env variables into a typed config object.
Validates required variables on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from lotcalc.engine.models import GoldConvention


_REQUIRED_VARS = [
    "EXCHANGE_RATE_API_KEY",
]


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    exchange_rate_api_key: str
    exchange_rate_base_url: str
    gold_price_usd: float
    gold_pip_size: float
    gold_contract_ounces: float
    db_path: str
    log_level: str
    http_port: int

    @property
    def gold_convention(self) -> GoldConvention:
        """Pip size and lot size used to size gold positions."""
        return GoldConvention(
            pip_size=self.gold_pip_size,
            contract_ounces=self.gold_contract_ounces,
        )


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the missing variable when a
    required variable is absent, or when the gold pip size or contract size
    is not positive.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [v for v in _REQUIRED_VARS if not os.environ.get(v)]
    if missing:
        raise ValueError(
            f"Missing required environment variable(s): {', '.join(missing)}"
        )

    gold_pip_size = float(os.environ.get("GOLD_PIP_SIZE", "0.1"))
    if gold_pip_size <= 0:
        raise ValueError(f"GOLD_PIP_SIZE must be positive, got {gold_pip_size}")

    gold_contract_ounces = float(os.environ.get("GOLD_CONTRACT_OUNCES", "100"))
    if gold_contract_ounces <= 0:
        raise ValueError(
            f"GOLD_CONTRACT_OUNCES must be positive, got {gold_contract_ounces}"
        )

    return Config(
        exchange_rate_api_key=os.environ["EXCHANGE_RATE_API_KEY"],
        exchange_rate_base_url=os.environ.get(
            "EXCHANGE_RATE_BASE_URL", "https://v6.exchangerate-api.com/v6"
        ).rstrip("/"),
        gold_price_usd=float(os.environ.get("GOLD_PRICE_USD", "1950.25")),
        gold_pip_size=gold_pip_size,
        gold_contract_ounces=gold_contract_ounces,
        db_path=os.environ.get("DB_PATH", "data/lotcalc.db"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        http_port=int(os.environ.get("HTTP_PORT", "8080")),
    )
