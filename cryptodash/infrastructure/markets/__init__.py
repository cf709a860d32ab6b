from .coingecko import CoinGeckoMarketData, parse_prices, parse_token

__all__ = ["CoinGeckoMarketData", "parse_prices", "parse_token"]
