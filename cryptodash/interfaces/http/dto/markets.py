# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from cryptodash.domain.markets.entities import (
    DEFAULT_HISTORY_DAYS,
    HISTORY_RANGES,
    PriceHistory,
    TokenPrice,
)


class HistoryQuery(BaseModel):
    days: int = DEFAULT_HISTORY_DAYS

    @field_validator("days", mode="before")
    @classmethod
    def _days(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_HISTORY_DAYS
        try:
            days = int(value)
        except (TypeError, ValueError):
            days = -1
        if days not in HISTORY_RANGES:
            raise PydanticCustomError(
                "days_range",
                "Days must be one of {choices}",
                {"choices": ", ".join(str(choice) for choice in HISTORY_RANGES)},
            )
        return days


class TokenPriceDTO(BaseModel):
    id: str
    name: str
    symbol: str
    image: str
    current_price: float
    price_change_percentage_24h: float
    market_cap: float
    total_volume: float
    circulating_supply: float
    volume_to_market_cap: float | None = None

    @classmethod
    def from_entity(cls, token: TokenPrice) -> TokenPriceDTO:
        return cls(
            id=token.id,
            name=token.name,
            symbol=token.symbol,
            image=token.image,
            current_price=token.current_price,
            price_change_percentage_24h=token.price_change_percentage_24h,
            market_cap=token.market_cap,
            total_volume=token.total_volume,
            circulating_supply=token.circulating_supply,
            volume_to_market_cap=token.volume_to_market_cap,
        )


class PricePointDTO(BaseModel):
    timestamp: int
    price: float


class PriceHistoryDTO(BaseModel):
    token_id: str
    vs_currency: str
    days: int
    unit: str
    prices: list[PricePointDTO] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, history: PriceHistory) -> PriceHistoryDTO:
        return cls(
            token_id=history.token_id,
            vs_currency=history.vs_currency,
            days=history.days,
            unit=history.chart_unit,
            prices=[
                PricePointDTO(timestamp=point.timestamp, price=point.price)
                for point in history.points
            ],
        )
