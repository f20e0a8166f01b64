"""ExchangeRate-API v6 async client.

Fetches USD->X conversion rates and turns them into a ``RateTable`` with
the configured gold price injected as the ``XAU`` entry.
"""

import asyncio
import logging
from typing import Optional

import httpx

from lotcalc.config import Config
from lotcalc.engine.errors import CalculationError
from lotcalc.engine.rate_table import RateTable
from lotcalc.rates.models import RateSnapshot

logger = logging.getLogger("lotcalc")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}


class RateSourceError(Exception):
    """The provider could not deliver a usable rate table."""


class ExchangeRateClient:
    """Async client wrapping the ExchangeRate-API ``latest`` endpoint."""

    def __init__(self, config: Config) -> None:
        self._base_url = config.exchange_rate_base_url
        self._api_key = config.exchange_rate_api_key
        self._gold_price_usd = config.gold_price_usd

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _get_with_retry(self, url: str) -> httpx.Response:
        """GET *url* with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504) and rate-limits
        (429).  Other HTTP errors are raised immediately.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(url, timeout=30.0)

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "Rate provider returned %d — retry %d/%d in %.1fs",
                        resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                    )
                    await asyncio.sleep(delay)
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "Rate provider transport error (%s) — retry %d/%d in %.1fs",
                    exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        # All retries exhausted — raise the last error
        raise last_exc  # type: ignore[misc]

    # ── Rates ────────────────────────────────────────────────────────────

    async def fetch_snapshot(self, base_currency: str = "USD") -> RateSnapshot:
        """Fetch the latest rates quoted against *base_currency*.

        Raises:
            RateSourceError: On HTTP failure, a malformed body or a provider
                error payload.
        """
        # The API key is part of the path; keep it out of log messages.
        url = f"{self._base_url}/{self._api_key}/latest/{base_currency.upper()}"

        try:
            resp = await self._get_with_retry(url)
        except httpx.HTTPStatusError as exc:
            raise RateSourceError(
                f"Failed to fetch currency rates: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RateSourceError(
                f"Failed to fetch currency rates: {type(exc).__name__}"
            ) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise RateSourceError("Rate provider returned a malformed payload") from exc
        if not isinstance(data, dict):
            raise RateSourceError("Rate provider returned a malformed payload")

        if data.get("result") != "success":
            raise RateSourceError(
                f"Rate provider error: {data.get('error-type', 'unknown')}"
            )

        rates = data.get("conversion_rates") or {}
        if not isinstance(rates, dict):
            raise RateSourceError("Rate provider returned a malformed payload")

        return RateSnapshot(
            base_code=data.get("base_code", base_currency.upper()),
            rates=dict(rates),
            last_update_utc=data.get("time_last_update_utc", ""),
            next_update_utc=data.get("time_next_update_utc", ""),
        )

    async def get_rates(self, base_currency: str = "USD") -> RateTable:
        """Return a ``RateTable`` of USD->X rates plus the gold price.

        Raises:
            RateSourceError: If the fetch fails, the base is not USD, or
                the payload holds an unusable rate.
        """
        if base_currency.upper() != "USD":
            raise RateSourceError(
                f"Rate tables are USD based, got base {base_currency!r}"
            )
        snapshot = await self.fetch_snapshot(base_currency)
        try:
            table = RateTable.from_provider(snapshot.rates, self._gold_price_usd)
        except CalculationError as exc:
            raise RateSourceError(f"Unusable rate payload: {exc}") from exc
        logger.info(
            "Loaded %d rates (provider update %s)",
            len(table), snapshot.last_update_utc or "unknown",
        )
        return table
