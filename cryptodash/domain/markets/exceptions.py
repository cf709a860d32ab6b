# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from cryptodash.shared.errors.base import InfrastructureError

MARKET_FAILURE_MESSAGE = "Failed to load token prices. Please try again later."


class MarketDataUnavailableError(InfrastructureError):
    def __init__(self, endpoint: str, detail: str | None = None) -> None:
        super().__init__(
            "market_data_unavailable",
            status=HTTPStatus.BAD_GATEWAY,
            message=MARKET_FAILURE_MESSAGE,
            context={"endpoint": endpoint, "detail": detail},
        )
