"""Market data services for Crypto RSI Signal Bot."""

from crypto_rsi_bot.services.market_data.rsi_calculator import calculate_rsi
from crypto_rsi_bot.services.market_data.providers import (
    get_provider, MarketDataError, MarketDataProviderBase
)

__all__ = [
    "calculate_rsi",
    "get_provider",
    "MarketDataError",
    "MarketDataProviderBase",
]
