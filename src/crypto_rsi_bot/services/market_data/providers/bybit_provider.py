"""
Bybit RSI data provider.

Uses the public Bybit v5 market API (linear category) over aiohttp:
- /v5/market/instruments-info for the tradable symbol universe
- /v5/market/kline for candle closes

Documentation: https://bybit-exchange.github.io/docs/v5/market/kline
"""
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from crypto_rsi_bot.config import (
    BYBIT_BASE_URL, BYBIT_CATEGORY, BYBIT_INSTRUMENTS_PAGE_LIMIT, HTTP_TIMEOUT_SECONDS
)
from crypto_rsi_bot.services.market_data.providers.base import MarketDataError, MarketDataProviderBase

logger = logging.getLogger(__name__)

# Kline row layout: [startTime, open, high, low, close, volume, turnover]
KLINE_CLOSE_INDEX = 4


class BybitProvider(MarketDataProviderBase):
    """
    Market data provider for Bybit linear (USDT/USDC perpetual) contracts.

    A single aiohttp session is created lazily and reused for every request.
    """

    def __init__(
        self,
        base_url: str = BYBIT_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def name(self) -> str:
        return "Bybit"

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _get_json(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        """
        GET an endpoint and return the decoded payload.

        Raises:
            MarketDataError: On HTTP >= 400, a body that is not JSON, a non-dict
                payload or retCode != 0
        """
        session = await self._get_session()
        url = f"{self.base_url}{path}"

        async with session.get(url, params=params) as resp:
            if resp.status >= 400:
                body = await resp.text()
                raise MarketDataError(f"HTTP {resp.status} from {path}: {body[:200]}")

            try:
                data = await resp.json(content_type=None)
            except (ValueError, aiohttp.ContentTypeError) as e:
                raise MarketDataError(f"Invalid JSON from {path}: {e}") from e

        if not isinstance(data, dict):
            raise MarketDataError(f"Unexpected payload type from {path}: {type(data).__name__}")

        if data.get("retCode") not in (0, None):
            raise MarketDataError(
                f"Bybit retCode={data.get('retCode')} retMsg={data.get('retMsg')}"
            )

        return data

    async def fetch_universe(self) -> List[str]:
        """Return symbols with status "Trading", following pagination cursors."""
        symbols: List[str] = []
        cursor = ""

        while True:
            params = {"category": BYBIT_CATEGORY, "limit": str(BYBIT_INSTRUMENTS_PAGE_LIMIT)}
            if cursor:
                params["cursor"] = cursor

            payload = await self._get_json("/v5/market/instruments-info", params)
            result = payload.get("result") or {}

            for item in result.get("list") or []:
                symbol = item.get("symbol", "")
                if symbol and item.get("status") == "Trading":
                    symbols.append(symbol)

            cursor = result.get("nextPageCursor") or ""
            if not cursor:
                break

        logger.info(f"Fetched {len(symbols)} tradable {BYBIT_CATEGORY} symbols from {self.name}")
        return symbols

    async def fetch_closes(self, symbol: str, timeframe: str, limit: int) -> List[float]:
        """Return closes oldest -> newest (Bybit returns klines newest first)."""
        params = {
            "category": BYBIT_CATEGORY,
            "symbol": symbol,
            "interval": str(timeframe),
            "limit": str(limit),
        }
        payload = await self._get_json("/v5/market/kline", params)
        rows = (payload.get("result") or {}).get("list") or []

        closes: List[float] = []
        for row in reversed(rows):
            try:
                closes.append(float(row[KLINE_CLOSE_INDEX]))
            except (IndexError, TypeError, ValueError):
                logger.debug(f"Skipping malformed kline row for {symbol}: {row!r}")
                continue

        return closes

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
