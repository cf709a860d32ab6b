# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .entities import PricePoint, TokenPrice


class MarketDataPort(Protocol):
    def list_markets(
        self, vs_currency: str, per_page: int, page: int = 1
    ) -> Sequence[TokenPrice]: ...

    def price_history(
        self, token_id: str, vs_currency: str, days: int
    ) -> Sequence[PricePoint]: ...
