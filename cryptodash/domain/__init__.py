# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .markets import MarketDataPort, PriceHistory, PricePoint, TokenPrice
from .users import NewUser, OAuthIdentity, User

__all__ = [
    "MarketDataPort",
    "NewUser",
    "OAuthIdentity",
    "PriceHistory",
    "PricePoint",
    "TokenPrice",
    "User",
]
