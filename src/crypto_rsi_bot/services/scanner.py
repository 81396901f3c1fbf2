"""
Market scanner for Crypto RSI Signal Bot.

Runs forever as an asyncio task next to the Discord client:
1. Fetch the tradable symbol universe from the exchange
2. For each symbol: take a settings snapshot, fetch closes, compute RSI,
   evaluate thresholds, send new signals / clear neutral symbols
3. Pause SYMBOL_DELAY_SECONDS between symbols (exchange request quota)
4. Sleep CYCLE_INTERVAL_SECONDS and start over

A timeframe or candle-count change posts a request on the RestartChannel. The
scanner checks it before every symbol and, if set, drops the rest of the cycle
and re-fetches the universe right away. A failed universe fetch is retried
after ERROR_BACKOFF_SECONDS; a failed symbol is skipped.
"""
import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from crypto_rsi_bot.config import (
    SYMBOL_DELAY_SECONDS, CYCLE_INTERVAL_SECONDS, ERROR_BACKOFF_SECONDS
)
from crypto_rsi_bot.cogs.alert_engine import SignalStateTracker, evaluate_signal
from crypto_rsi_bot.repositories.settings_store import SettingsStore
from crypto_rsi_bot.services.market_data.providers.base import MarketDataProviderBase
from crypto_rsi_bot.services.market_data.rsi_calculator import calculate_rsi
from crypto_rsi_bot.services.notifier import AlertDispatcher
from crypto_rsi_bot.services.restart_channel import RestartChannel

logger = logging.getLogger(__name__)


class ScanState(Enum):
    IDLE = "IDLE"
    FETCHING_UNIVERSE = "FETCHING_UNIVERSE"
    PROCESSING_SYMBOL = "PROCESSING_SYMBOL"
    SLEEPING = "SLEEPING"
    RESTARTING = "RESTARTING"


class CycleOutcome(Enum):
    COMPLETED = "COMPLETED"
    RESTARTED = "RESTARTED"
    UNIVERSE_FAILED = "UNIVERSE_FAILED"


class MarketScanner:
    """Scan loop driving RSI evaluation and alert dispatch."""

    def __init__(
        self,
        provider: MarketDataProviderBase,
        settings: SettingsStore,
        tracker: SignalStateTracker,
        dispatcher: AlertDispatcher,
        restart_channel: RestartChannel,
        symbol_delay: float = SYMBOL_DELAY_SECONDS,
        cycle_interval: float = CYCLE_INTERVAL_SECONDS,
        error_backoff: float = ERROR_BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.provider = provider
        self.settings = settings
        self.tracker = tracker
        self.dispatcher = dispatcher
        self.restart_channel = restart_channel
        self.symbol_delay = symbol_delay
        self.cycle_interval = cycle_interval
        self.error_backoff = error_backoff
        self._sleep = sleep

        self.state = ScanState.IDLE
        self.cycles_completed = 0
        self._running = False
        self._task: Optional[asyncio.Task] = None

    # ==================== Lifecycle ====================

    def start(self) -> asyncio.Task:
        """Start the scan loop as a background task."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name="market-scanner")
        return self._task

    def stop(self) -> None:
        """Ask the loop to exit at the next cycle boundary."""
        self._running = False

    async def close(self) -> None:
        """Stop the loop and cancel the task if it is sleeping or fetching."""
        self.stop()
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self.state = ScanState.IDLE

    async def run_forever(self) -> None:
        """Run scan cycles until stop() is called."""
        self._running = True
        logger.info(f"Market scanner started (provider: {self.provider.name})")

        while self._running:
            outcome = await self.run_cycle()

            if not self._running:
                break

            if outcome is CycleOutcome.RESTARTED:
                continue

            self.state = ScanState.SLEEPING
            if outcome is CycleOutcome.UNIVERSE_FAILED:
                logger.info(f"Retrying universe fetch in {self.error_backoff:.0f}s")
                await self._sleep(self.error_backoff)
            else:
                logger.info(f"Scan complete. Next run in {self.cycle_interval:.0f}s")
                await self._sleep(self.cycle_interval)

        self.state = ScanState.IDLE
        logger.info("Market scanner stopped")

    # ==================== Cycle ====================

    async def run_cycle(self) -> CycleOutcome:
        """Run one pass over the symbol universe."""
        start_time = datetime.now()
        self.state = ScanState.FETCHING_UNIVERSE
        logger.info("=" * 60)
        logger.info("MARKET SCAN START")

        try:
            symbols = await self.provider.fetch_universe()
        except Exception as e:
            logger.error(f"Failed to fetch symbol universe: {e}")
            return CycleOutcome.UNIVERSE_FAILED

        logger.info(f"Scanning {len(symbols)} symbols")

        for index, symbol in enumerate(symbols, 1):
            if self.restart_channel.consume():
                self.state = ScanState.RESTARTING
                logger.info(
                    f"Restarting scan on request (timeframe or candle count changed), "
                    f"abandoned at {index}/{len(symbols)}"
                )
                return CycleOutcome.RESTARTED

            self.state = ScanState.PROCESSING_SYMBOL
            await self.process_symbol(symbol)
            await self._sleep(self.symbol_delay)

        self.cycles_completed += 1
        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"MARKET SCAN COMPLETE: {len(symbols)} symbols in {duration:.1f}s")
        logger.info("=" * 60)
        return CycleOutcome.COMPLETED

    async def process_symbol(self, symbol: str) -> Optional[float]:
        """
        Evaluate one symbol.

        Returns:
            The RSI value, or None if it could not be computed
        """
        config = await self.settings.snapshot()

        try:
            closes = await self.provider.fetch_closes(symbol, config.timeframe, config.limit)
            rsi_value = calculate_rsi(closes, config.rsi_period)
        except Exception as e:
            logger.warning(f"Failed to get candles for {symbol}: {e}")
            return None

        if rsi_value is None:
            logger.debug(f"{symbol}: not enough candles for RSI{config.rsi_period} ({len(closes)})")
            return None

        logger.info(f"{symbol} RSI={rsi_value:.2f}")

        kind = evaluate_signal(rsi_value, config)
        if kind is None:
            self.tracker.clear(symbol)
            return rsi_value

        if self.tracker.should_emit(symbol, kind):
            try:
                await self.dispatcher.dispatch(symbol, kind, rsi_value, config)
            except Exception as e:
                logger.error(f"Error dispatching {kind.value} signal for {symbol}: {e}", exc_info=True)

        return rsi_value
