from .entities import DEFAULT_HISTORY_DAYS, HISTORY_RANGES, PriceHistory, PricePoint, TokenPrice
from .exceptions import MARKET_FAILURE_MESSAGE, MarketDataUnavailableError
from .repositories import MarketDataPort

__all__ = [
    "DEFAULT_HISTORY_DAYS",
    "HISTORY_RANGES",
    "MARKET_FAILURE_MESSAGE",
    "MarketDataPort",
    "MarketDataUnavailableError",
    "PriceHistory",
    "PricePoint",
    "TokenPrice",
]
