#!/usr/bin/env python3
"""Crypto RSI Signal Bot - Main Entry Point

Scans Bybit linear contracts for RSI extremes and posts SHORT/LONG signals to
subscribed Discord channels.

Usage:
    export DISCORD_TOKEN=your_bot_token
    export PYTHONPATH=src
    python -m crypto_rsi_bot.main
"""
import logging
import sys
from typing import Optional

import discord
from discord.ext import commands

from crypto_rsi_bot.config import DISCORD_TOKEN, LOG_PATH, LOG_LEVEL, DEFAULT_TIMEZONE
from crypto_rsi_bot.cogs.alert_engine import SignalStateTracker
from crypto_rsi_bot.cogs.commands import SignalCommands
from crypto_rsi_bot.repositories.settings_store import SettingsStore
from crypto_rsi_bot.repositories.subscribers import SubscriberStore
from crypto_rsi_bot.services.market_data.providers import get_provider
from crypto_rsi_bot.services.notifier import AlertDispatcher
from crypto_rsi_bot.services.restart_channel import RestartChannel
from crypto_rsi_bot.services.scanner import MarketScanner

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(LOG_PATH, encoding="utf-8")
    ]
)
logger = logging.getLogger(__name__)


class RSIBot(commands.Bot):
    """Discord bot for RSI signals with an integrated market scanner."""

    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(
            command_prefix="!",
            intents=intents
        )

        self.settings = SettingsStore()
        self.subscribers = SubscriberStore()
        self.tracker = SignalStateTracker()
        self.restart_channel = RestartChannel()
        self.provider = get_provider()
        self.dispatcher = AlertDispatcher(
            get_subscribers=self.subscribers.snapshot,
            send=self.send_to_channel,
            timezone=DEFAULT_TIMEZONE
        )
        self.scanner: Optional[MarketScanner] = None

    async def setup_hook(self):
        """Initialize bot components."""
        logger.info("Loading settings...")
        config = await self.settings.load()
        logger.info(
            f"Timeframe {config.timeframe} min, {config.limit} candles, RSI{config.rsi_period}, "
            f"overbought {config.overbought}, oversold {config.oversold}"
        )

        try:
            count = await self.subscribers.load()
            logger.info(f"Loaded {count} subscribers")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading subscribers: {e}")

        await self.add_cog(SignalCommands(
            self, self.settings, self.subscribers, self.tracker, self.restart_channel
        ))

        logger.info("Syncing slash commands...")
        await self.tree.sync()

        logger.info("Starting market scanner...")
        self.scanner = MarketScanner(
            provider=self.provider,
            settings=self.settings,
            tracker=self.tracker,
            dispatcher=self.dispatcher,
            restart_channel=self.restart_channel
        )
        self.scanner.start()

        logger.info("Bot setup complete")

    async def on_ready(self):
        """Called when bot is ready."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guilds")
        await self.change_presence(
            activity=discord.Activity(
                type=discord.ActivityType.watching,
                name="crypto RSI levels"
            )
        )

    async def send_to_channel(self, channel_id: int, message: str) -> None:
        """Send a message to a channel or DM by ID; errors propagate to the caller."""
        channel = self.get_channel(channel_id)
        if channel is None:
            channel = await self.fetch_channel(channel_id)
        await channel.send(message)

    async def close(self):
        """Clean shutdown."""
        if self.scanner:
            await self.scanner.close()
        await self.provider.close()
        await super().close()


# ==================== Main ====================

def main():
    """Run the bot."""
    if not DISCORD_TOKEN:
        logger.error("DISCORD_TOKEN environment variable not set")
        print("Error: Please set the DISCORD_TOKEN environment variable")
        print("  export DISCORD_TOKEN=your_bot_token")
        print("  python -m crypto_rsi_bot.main")
        sys.exit(1)

    logger.info("Starting Crypto RSI Signal Bot...")
    bot = RSIBot()
    bot.run(DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
