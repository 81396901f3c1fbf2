"""
Subscriber list for Crypto RSI Signal Bot.

Subscribers are Discord channel IDs (a guild text channel or a DM channel),
stored as a JSON list.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Set

from crypto_rsi_bot.config import SUBSCRIBERS_PATH

logger = logging.getLogger(__name__)


class SubscriberStore:
    """Set of subscribed channel IDs, persisted on every change."""

    def __init__(self, path: Path = SUBSCRIBERS_PATH):
        self.path = Path(path)
        self._subscribers: Set[int] = set()
        self._lock = asyncio.Lock()

    async def load(self) -> int:
        """
        Load subscribers from disk.

        Returns:
            Number of subscribers loaded (0 if the file does not exist yet)
        """
        async with self._lock:
            if not self.path.exists():
                self._subscribers = set()
                return 0

            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)

            if not isinstance(data, list):
                raise ValueError(f"Subscribers file {self.path} must contain a JSON list")

            self._subscribers = {int(chat_id) for chat_id in data}
            return len(self._subscribers)

    async def snapshot(self) -> Set[int]:
        """Return a copy of the current subscriber set."""
        async with self._lock:
            return set(self._subscribers)

    async def is_subscribed(self, channel_id: int) -> bool:
        async with self._lock:
            return channel_id in self._subscribers

    async def count(self) -> int:
        async with self._lock:
            return len(self._subscribers)

    async def subscribe(self, channel_id: int) -> bool:
        """
        Add a channel to the subscriber list.

        Returns:
            False if the channel was already subscribed
        """
        async with self._lock:
            if channel_id in self._subscribers:
                return False
            self._subscribers.add(channel_id)
            self._write()

        logger.info(f"Channel subscribed: {channel_id}")
        return True

    async def unsubscribe(self, channel_id: int) -> bool:
        """
        Remove a channel from the subscriber list.

        Returns:
            False if the channel was not subscribed
        """
        async with self._lock:
            if channel_id not in self._subscribers:
                return False
            self._subscribers.discard(channel_id)
            self._write()

        logger.info(f"Channel unsubscribed: {channel_id}")
        return True

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(sorted(self._subscribers), f, indent=2)
