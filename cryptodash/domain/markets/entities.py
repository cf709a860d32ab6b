# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

HISTORY_RANGES = (7, 30, 90, 365, 1825)
DEFAULT_HISTORY_DAYS = 30


@dataclass(slots=True, frozen=True)
class TokenPrice:

    id: str
    name: str
    symbol: str
    image: str
    current_price: float
    price_change_percentage_24h: float
    market_cap: float
    total_volume: float
    circulating_supply: float

    @property
    def volume_to_market_cap(self) -> float | None:
        if not self.market_cap:
            return None
        return self.total_volume / self.market_cap


@dataclass(slots=True, frozen=True)
class PricePoint:

    timestamp: int  # epoch milliseconds
    price: float


@dataclass(slots=True, frozen=True)
class PriceHistory:

    token_id: str
    vs_currency: str
    days: int
    points: tuple[PricePoint, ...]

    @property
    def chart_unit(self) -> str:
        if self.days <= 7:
            return "day"
        if self.days <= 30:
            return "week"
        return "month"
