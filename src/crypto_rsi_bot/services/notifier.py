"""
Alert dispatch for Crypto RSI Signal Bot.

Renders a signal into a Discord message and fans it out to every subscribed
channel. Delivery is best effort: a failing channel is logged and skipped.
"""
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Set

import pytz

from crypto_rsi_bot.config import DEFAULT_TIMEZONE
from crypto_rsi_bot.repositories.settings_store import RunConfig

logger = logging.getLogger(__name__)

SubscriberSource = Callable[[], Awaitable[Set[int]]]
MessageSender = Callable[[int, str], Awaitable[None]]

# Placeholders: {kind} {symbol} {rsi} {timeframe} {limit} {timestamp}
SIGNAL_TEMPLATES: Dict[str, str] = {
    "SHORT": (
        "🔴 📉 **SHORT** | overbought\n\n"
        "Symbol: `{symbol}`\n"
        "RSI: **{rsi:.2f}**\n"
        "Timeframe: {timeframe} min, candles: {limit}\n"
        "{timestamp}"
    ),
    "LONG": (
        "🟢 📈 **LONG** | oversold\n\n"
        "Symbol: `{symbol}`\n"
        "RSI: **{rsi:.2f}**\n"
        "Timeframe: {timeframe} min, candles: {limit}\n"
        "{timestamp}"
    ),
}

DEFAULT_TEMPLATE = (
    "🚨 {kind} SIGNAL\n"
    "Symbol: {symbol}\n"
    "RSI: {rsi:.2f}\n"
    "Timeframe: {timeframe} min, candles: {limit}\n"
    "{timestamp}"
)


class AlertDispatcher:
    """
    Formats signals and broadcasts them to subscribers.

    The subscriber list is requested on every dispatch, so channels that just
    subscribed get the next alert and removed ones do not.
    """

    def __init__(
        self,
        get_subscribers: SubscriberSource,
        send: MessageSender,
        timezone: str = DEFAULT_TIMEZONE,
        templates: Optional[Dict[str, str]] = None
    ):
        self._get_subscribers = get_subscribers
        self._send = send
        self.timezone = pytz.timezone(timezone)
        self.templates: Dict[str, str] = dict(SIGNAL_TEMPLATES if templates is None else templates)

    def register_template(self, kind: str, template: str) -> None:
        """Add or replace the message template for a signal kind."""
        self.templates[str(kind)] = template

    def render(self, symbol: str, kind: str, rsi_value: float, config: RunConfig) -> str:
        kind = getattr(kind, "value", kind)
        template = self.templates.get(kind, DEFAULT_TEMPLATE)
        now = datetime.now(self.timezone)
        return template.format(
            kind=kind,
            symbol=symbol,
            rsi=rsi_value,
            timeframe=config.timeframe,
            limit=config.limit,
            timestamp=f"Time: {now.strftime('%Y-%m-%d %H:%M %Z')}",
        )

    async def dispatch(self, symbol: str, kind: str, rsi_value: float, config: RunConfig) -> int:
        """
        Send a signal to all current subscribers.

        Returns:
            Number of channels the message was delivered to
        """
        message = self.render(symbol, kind, rsi_value, config)
        delivered = await self.broadcast(message)
        logger.info(f"Signal {getattr(kind, 'value', kind)} for {symbol} (RSI {rsi_value:.2f}) sent to {delivered} subscribers")
        return delivered

    async def broadcast(self, message: str) -> int:
        """Send a message to every subscriber; failures are logged, not raised."""
        subscribers = await self._get_subscribers()
        delivered = 0

        for channel_id in subscribers:
            try:
                await self._send(channel_id, message)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to send message to {channel_id}: {e}")

        return delivered
