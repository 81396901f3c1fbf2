"""
Alert Engine module for Crypto RSI Signal Bot.
Handles threshold evaluation and the per-symbol anti-spam state.
"""
import logging
import threading
from enum import Enum
from typing import Dict, Optional

from crypto_rsi_bot.repositories.settings_store import RunConfig

logger = logging.getLogger(__name__)


class SignalKind(str, Enum):
    SHORT = "SHORT"  # overbought
    LONG = "LONG"  # oversold


def evaluate_signal(rsi_value: float, config: RunConfig) -> Optional[SignalKind]:
    """
    Map an RSI value to a signal kind using the configured thresholds.

    Returns:
        SignalKind.SHORT, SignalKind.LONG, or None for the neutral zone
    """
    if rsi_value >= config.overbought:
        return SignalKind.SHORT
    elif rsi_value <= config.oversold:
        return SignalKind.LONG
    return None


class SignalStateTracker:
    """
    Remembers the last signal sent per symbol.

    The same kind is never sent twice in a row for a symbol; `clear` (called
    when RSI is back in the neutral zone) re-arms it.
    """

    def __init__(self):
        self._last_signal: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    def should_emit(self, symbol: str, kind: str) -> bool:
        """
        Record `kind` for `symbol` if it differs from the stored one.

        Returns:
            True if the signal is new and should be sent
        """
        kind = _kind_value(kind)
        with self._lock:
            if self._last_signal.get(symbol) == kind:
                logger.debug(f"{symbol}: {kind} already sent, suppressed")
                return False
            self._last_signal[symbol] = kind
            return True

    def clear(self, symbol: str) -> None:
        """Reset the symbol to neutral."""
        with self._lock:
            self._last_signal[symbol] = None

    def last_signal(self, symbol: str) -> Optional[str]:
        with self._lock:
            return self._last_signal.get(symbol)

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of all symbols currently holding a signal."""
        with self._lock:
            return {s: k for s, k in self._last_signal.items() if k is not None}


def _kind_value(kind) -> str:
    return kind.value if isinstance(kind, Enum) else str(kind)
