# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from cryptodash.domain.markets.entities import PricePoint, TokenPrice
from cryptodash.domain.markets.exceptions import MarketDataUnavailableError
from cryptodash.domain.markets.repositories import MarketDataPort
from cryptodash.infrastructure.cache import TTLCache
from cryptodash.infrastructure.resilience import CircuitBreaker, CircuitOpenError, resilient_call
from cryptodash.shared.config import MarketConfig, ResilienceConfig
from cryptodash.shared.logging import logger


def _as_float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def parse_token(raw: dict[str, Any]) -> TokenPrice:
    return TokenPrice(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        symbol=str(raw.get("symbol") or ""),
        image=str(raw.get("image") or ""),
        current_price=_as_float(raw.get("current_price")),
        price_change_percentage_24h=_as_float(raw.get("price_change_percentage_24h")),
        market_cap=_as_float(raw.get("market_cap")),
        total_volume=_as_float(raw.get("total_volume")),
        circulating_supply=_as_float(raw.get("circulating_supply")),
    )


def parse_prices(payload: dict[str, Any]) -> list[PricePoint]:
    points = []
    for item in payload.get("prices") or []:
        if not isinstance(item, (list, tuple)) or len(item) < 2 or item[1] is None:
            continue
        points.append(PricePoint(timestamp=int(item[0]), price=float(item[1])))
    return points


class CoinGeckoMarketData(MarketDataPort):
    """CoinGecko v3 REST adapter.

    GETs are retried a bounded number of times behind a circuit breaker and
    cached for ``MARKET_CACHE_TTL`` seconds. Every failure surfaces as
    ``MarketDataUnavailableError``.
    """

    def __init__(
        self,
        config: MarketConfig,
        resilience: ResilienceConfig,
        *,
        http: httpx.Client | None = None,
        breaker: CircuitBreaker | None = None,
        cache: TTLCache[tuple, Any] | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if config.api_key:
            headers["x-cg-demo-api-key"] = config.api_key
        self._http = http or httpx.Client(
            base_url=config.base_url,
            headers=headers,
            timeout=resilience.default_timeout,
        )
        self._resilience = resilience
        self._breaker = breaker or CircuitBreaker.from_config(resilience)
        self._cache: TTLCache[tuple, Any] = cache or TTLCache(config.cache_ttl)

    def close(self) -> None:
        self._http.close()

    def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        key = (path, tuple(sorted(params.items())))

        def fetch() -> httpx.Response:
            response = self._http.get(path, params=params)
            # Only upstream faults are retried; 4xx answers are final
            if response.status_code >= 500:
                response.raise_for_status()
            return response

        def load() -> Any:
            try:
                response = resilient_call(
                    fetch,
                    config=self._resilience,
                    breaker=self._breaker,
                    retry_on=(httpx.TransportError, httpx.HTTPStatusError),
                )
                response.raise_for_status()
                return response.json()
            except CircuitOpenError as exc:
                raise MarketDataUnavailableError(path, "circuit open") from exc
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    f"markets: {path} answered {exc.response.status_code} "
                    f"body={exc.response.text[:200]}"
                )
                raise MarketDataUnavailableError(
                    path, f"status {exc.response.status_code}"
                ) from exc
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning(f"markets: {path} failed: {type(exc).__name__}: {exc}")
                raise MarketDataUnavailableError(path, type(exc).__name__) from exc

        return self._cache.get_or_set(key, load)

    def list_markets(self, vs_currency: str, per_page: int, page: int = 1) -> Sequence[TokenPrice]:
        payload = self._get_json(
            "/coins/markets",
            {
                "vs_currency": vs_currency,
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": page,
                "sparkline": "false",
            },
        )
        if not isinstance(payload, list):
            raise MarketDataUnavailableError("/coins/markets", "unexpected payload")
        tokens = []
        for raw in payload:
            try:
                tokens.append(parse_token(raw))
            except (KeyError, TypeError) as exc:
                logger.debug(f"markets: skipping malformed token entry: {exc!r}")
        return tokens

    def price_history(self, token_id: str, vs_currency: str, days: int) -> Sequence[PricePoint]:
        path = f"/coins/{quote(token_id, safe='')}/market_chart"
        payload = self._get_json(path, {"vs_currency": vs_currency, "days": days})
        if not isinstance(payload, dict):
            raise MarketDataUnavailableError(path, "unexpected payload")
        return parse_prices(payload)
