"""
Market Data Provider Base Interface.

Defines the interface the scanner uses to talk to an exchange: the tradable
symbol universe and closing prices for one symbol.
"""
from abc import ABC, abstractmethod
from typing import List


class MarketDataError(Exception):
    """Exchange returned an error or a payload we cannot use."""
    pass


class MarketDataProviderBase(ABC):
    """
    Abstract base class for exchange market data providers.

    Transport errors (aiohttp.ClientError, asyncio.TimeoutError) may propagate
    unchanged; API-level errors are raised as MarketDataError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this provider (for logging/display)."""
        pass

    @abstractmethod
    async def fetch_universe(self) -> List[str]:
        """
        Fetch the list of currently tradable symbols.

        Returns:
            Symbols in the order reported by the exchange
        """
        pass

    @abstractmethod
    async def fetch_closes(self, symbol: str, timeframe: str, limit: int) -> List[float]:
        """
        Fetch closing prices for a symbol.

        Args:
            symbol: Exchange symbol (e.g., "BTCUSDT")
            timeframe: Candle interval in minutes (e.g., "5", "60")
            limit: Number of candles to request

        Returns:
            Closing prices ordered oldest -> newest
        """
        pass

    async def close(self) -> None:
        """Release network resources held by the provider."""
        return None
