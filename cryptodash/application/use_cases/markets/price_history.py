# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from cryptodash.domain.markets.entities import PriceHistory
from cryptodash.domain.markets.repositories import MarketDataPort


class GetPriceHistoryUseCase:
    def __init__(self, *, market: MarketDataPort, vs_currency: str) -> None:
        self._market = market
        self._vs_currency = vs_currency

    def execute(self, token_id: str, days: int) -> PriceHistory:
        points = sorted(
            self._market.price_history(token_id, self._vs_currency, days),
            key=lambda point: point.timestamp,
        )
        return PriceHistory(
            token_id=token_id,
            vs_currency=self._vs_currency,
            days=days,
            points=tuple(points),
        )
