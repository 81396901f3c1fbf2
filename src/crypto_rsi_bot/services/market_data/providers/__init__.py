"""Exchange providers for the market scanner.

Bybit linear contracts are the only data source. `get_provider()` returns one
shared BybitProvider so the whole bot reuses a single aiohttp session; the
scanner and the bot's shutdown path both go through it.
"""

import logging
from typing import Callable, Dict, Optional

from crypto_rsi_bot.services.market_data.providers.base import MarketDataError, MarketDataProviderBase

logger = logging.getLogger(__name__)


def _bybit() -> MarketDataProviderBase:
    from crypto_rsi_bot.services.market_data.providers.bybit_provider import BybitProvider
    return BybitProvider()


# Accepted names -> factory. "bybit_linear" matches the category we query.
PROVIDER_FACTORIES: Dict[str, Callable[[], MarketDataProviderBase]] = {
    "bybit": _bybit,
    "bybit_linear": _bybit,
}
DEFAULT_PROVIDER = "bybit"

_shared: Optional[MarketDataProviderBase] = None


def get_provider(provider_name: Optional[str] = None) -> MarketDataProviderBase:
    """
    Return the shared exchange provider, creating it on first use.

    Raises:
        ValueError: For a name not in PROVIDER_FACTORIES
    """
    global _shared

    key = (provider_name or DEFAULT_PROVIDER).lower().strip()
    factory = PROVIDER_FACTORIES.get(key)
    if factory is None:
        raise ValueError(
            f"Unsupported market data provider: {provider_name!r} "
            f"(known: {', '.join(sorted(PROVIDER_FACTORIES))})"
        )

    if _shared is None:
        _shared = factory()
        logger.info(f"Market data from {_shared.name}")

    return _shared


def reset_provider() -> None:
    """Forget the shared provider; the next get_provider() builds a new one."""
    global _shared
    _shared = None


__all__ = [
    "MarketDataProviderBase",
    "MarketDataError",
    "get_provider",
    "reset_provider",
]
