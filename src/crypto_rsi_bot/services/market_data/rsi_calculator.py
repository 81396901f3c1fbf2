"""crypto_rsi_bot.services.market_data.rsi_calculator

Local RSI calculation from candle closes.

The value is a simple-average RSI over the first `period` price changes of the
series (no Wilder smoothing). `None` means the series is too short to produce
a value; it is never reported as 0.
"""

import logging
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


def calculate_rsi(closes: Sequence[float], period: int) -> Optional[float]:
    """Calculate RSI from closing prices ordered oldest to newest.

    Args:
        closes: Closing prices in chronological order.
        period: Number of price changes to average (usually 14).

    Returns:
        RSI in [0, 100], or None when fewer than period + 1 closes are given.

    Raises:
        ValueError: If period is not a positive integer.
    """
    if period < 1:
        raise ValueError(f"RSI period must be positive, got {period}")

    if len(closes) < period + 1:
        return None

    gain = 0.0
    loss = 0.0
    for i in range(1, period + 1):
        diff = closes[i] - closes[i - 1]
        if diff > 0:
            gain += diff
        else:
            loss -= diff

    avg_gain = gain / period
    avg_loss = loss / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))
