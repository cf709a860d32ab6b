# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from cryptodash.domain.markets.entities import TokenPrice
from cryptodash.domain.markets.repositories import MarketDataPort
from cryptodash.shared.logging import logger


class ListTopTokensUseCase:
    def __init__(self, *, market: MarketDataPort, vs_currency: str, per_page: int) -> None:
        self._market = market
        self._vs_currency = vs_currency
        self._per_page = per_page

    def execute(self, page: int = 1) -> list[TokenPrice]:
        tokens = list(self._market.list_markets(self._vs_currency, self._per_page, page))
        # Upstream orders by market cap already; keep it stable if it ever doesn't
        tokens.sort(key=lambda token: token.market_cap, reverse=True)
        logger.debug(f"markets.list: page={page} count={len(tokens)}")
        return tokens
