"""
Slash commands and button menus for Crypto RSI Signal Bot.

The channel a command is used in is the subscriber identity: /subscribe in a
server channel or a DM makes that channel receive signals.

Message building and settings changes are plain functions so they can be
used (and tested) without a Discord connection. /start and /settings also
attach button menus; a picked setting goes through the same apply_settings
as /set.
"""
import logging
from typing import Dict, Optional, Tuple

import discord
from discord import app_commands
from discord.ext import commands

from crypto_rsi_bot.config import (
    TIMEFRAME_CHOICES, CANDLE_LIMIT_CHOICES, RSI_PERIOD_CHOICES,
    OVERBOUGHT_CHOICES, OVERSOLD_CHOICES, DISCORD_SAFE_LIMIT, MENU_TIMEOUT_SECONDS
)
from crypto_rsi_bot.cogs.alert_engine import SignalStateTracker
from crypto_rsi_bot.repositories.settings_store import RunConfig, SettingsStore
from crypto_rsi_bot.repositories.subscribers import SubscriberStore
from crypto_rsi_bot.services.restart_channel import RestartChannel

logger = logging.getLogger(__name__)


# ==================== Message builders ====================

def format_menu() -> str:
    return (
        "🤖 **RSI Signal Bot**\n\n"
        "• `/subscribe` - receive RSI signals in this channel\n"
        "• `/unsubscribe` - stop receiving signals\n"
        "• `/status` - subscription status\n"
        "• `/settings` - current scan settings\n"
        "• `/help` - commands and parameters\n\n"
        "Or choose an action below:"
    )


def format_settings(config: RunConfig) -> str:
    return (
        "⚙️ **Current settings**\n\n"
        f"• **Timeframe:** {config.timeframe} min\n"
        f"• **Candles:** {config.limit}\n"
        f"• **RSI period:** {config.rsi_period}\n"
        f"• **Overbought threshold:** {config.overbought:.0f}\n"
        f"• **Oversold threshold:** {config.oversold:.0f}\n\n"
        "Pick a setting below or use `/set`."
    )


def format_help(config: RunConfig) -> str:
    return (
        "🤖 **RSI Signal Bot**\n\n"
        "**Commands:**\n"
        "`/start` - Show the main menu\n"
        "`/subscribe` - Subscribe this channel to signals\n"
        "`/unsubscribe` - Unsubscribe this channel\n"
        "`/status` - Check subscription status\n"
        "`/settings` - Show settings\n"
        "`/set` - Change timeframe, candles, RSI period or thresholds\n"
        "`/signals` - Symbols currently in a signal zone\n"
        "`/help` - Show this help\n\n"
        "**Current parameters:**\n"
        f"Timeframe: {config.timeframe} min, candles: {config.limit}, RSI period: {config.rsi_period}\n"
        f"Signals: RSI >= {config.overbought:.0f} (SHORT) or RSI <= {config.oversold:.0f} (LONG)"
    )


def format_status(subscribed: bool) -> str:
    if subscribed:
        return "📊 **Subscription status**\n\n✅ Active: this channel receives all RSI signals."
    return "📊 **Subscription status**\n\n❌ Inactive: use `/subscribe` to receive signals."


def format_signal_state(signals: Dict[str, str]) -> str:
    """List symbols whose last signal has not been reset yet."""
    if not signals:
        return "📭 No symbols are currently in a signal zone."

    lines = [f"📋 **Active signals** ({len(signals)})", ""]
    length = len(lines[0]) + 1
    symbols = sorted(signals)
    for index, symbol in enumerate(symbols):
        kind = signals[symbol]
        marker = "🔴" if kind == "SHORT" else "🟢" if kind == "LONG" else "🚨"
        line = f"{marker} `{symbol}` {kind}"
        if length + len(line) + 1 > DISCORD_SAFE_LIMIT:
            lines.append(f"...and {len(symbols) - index} more")
            break
        lines.append(line)
        length += len(line) + 1
    return "\n".join(lines)


# ==================== Settings changes ====================

async def apply_settings(
    settings: SettingsStore,
    restart_channel: RestartChannel,
    timeframe: Optional[str] = None,
    limit: Optional[int] = None,
    rsi_period: Optional[int] = None,
    overbought: Optional[float] = None,
    oversold: Optional[float] = None
) -> Tuple[RunConfig, bool]:
    """
    Update settings and restart the scan cycle when the fetched data changes.

    Only timeframe and candle count change what is fetched, so only they
    request a restart. Period and thresholds apply from the next symbol.

    Returns:
        Tuple of (new config, restart_requested)

    Raises:
        ValueError: If a value is out of range (settings are left unchanged)
    """
    old = await settings.snapshot()
    new = await settings.update(
        timeframe=timeframe,
        limit=limit,
        rsi_period=rsi_period,
        overbought=overbought,
        oversold=oversold
    )

    restart = new.timeframe != old.timeframe or new.limit != old.limit
    if restart:
        restart_channel.request_restart()

    return new, restart


def format_settings_update(config: RunConfig, restarted: bool) -> str:
    response = (
        "✅ **Settings updated**\n"
        f"• **Timeframe:** {config.timeframe} min\n"
        f"• **Candles:** {config.limit}\n"
        f"• **RSI period:** {config.rsi_period}\n"
        f"• **Overbought:** {config.overbought:.0f}\n"
        f"• **Oversold:** {config.oversold:.0f}"
    )
    if restarted:
        response += "\n\n🔄 Scan cycle restarted."
    return response


def can_change_settings(interaction: discord.Interaction) -> bool:
    """DM channels belong to their user; in a server Manage Server is required."""
    if interaction.guild is None:
        return True
    permissions = getattr(interaction.user, "guild_permissions", None)
    return bool(permissions and permissions.manage_guild)


NO_PERMISSION_MESSAGE = "❌ You need the Manage Server permission to change settings."


def _display(value) -> str:
    """80.0 -> "80", "15" -> "15"."""
    return value if isinstance(value, str) else f"{value:g}"


# ==================== Button menus ====================

# RunConfig field -> (button label, selectable values, unit shown in the picker)
SETTING_OPTIONS: Dict[str, Tuple[str, list, str]] = {
    "timeframe": ("📐 Timeframe", TIMEFRAME_CHOICES, " min"),
    "limit": ("🕯 Candles", CANDLE_LIMIT_CHOICES, ""),
    "rsi_period": ("📈 RSI period", RSI_PERIOD_CHOICES, ""),
    "overbought": ("⬆️ Overbought", OVERBOUGHT_CHOICES, ""),
    "oversold": ("⬇️ Oversold", OVERSOLD_CHOICES, ""),
}


class MainMenuView(discord.ui.View):
    """Buttons under the /start menu."""

    def __init__(self, cog: "SignalCommands"):
        super().__init__(timeout=MENU_TIMEOUT_SECONDS)
        self.cog = cog

    @discord.ui.button(label="Subscribe", emoji="✅", style=discord.ButtonStyle.success, row=0)
    async def subscribe_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.cog.subscribe_channel(interaction)

    @discord.ui.button(label="Unsubscribe", emoji="❌", style=discord.ButtonStyle.danger, row=0)
    async def unsubscribe_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.cog.unsubscribe_channel(interaction)

    @discord.ui.button(label="Status", emoji="📊", style=discord.ButtonStyle.secondary, row=1)
    async def status_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.cog.send_status(interaction)

    @discord.ui.button(label="Settings", emoji="⚙️", style=discord.ButtonStyle.primary, row=1)
    async def settings_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        config = await self.cog.settings.snapshot()
        await interaction.response.edit_message(
            content=format_settings(config), view=SettingsMenuView(self.cog)
        )


class SettingsMenuView(discord.ui.View):
    """One button per setting plus a way back to the main menu."""

    def __init__(self, cog: "SignalCommands"):
        super().__init__(timeout=MENU_TIMEOUT_SECONDS)
        self.cog = cog
        self.option_buttons: Dict[str, discord.ui.Button] = {}

        for index, (field, (label, _, _)) in enumerate(SETTING_OPTIONS.items()):
            button = discord.ui.Button(
                label=label, style=discord.ButtonStyle.secondary, row=0 if index < 2 else 1
            )
            button.callback = self._opener(field)
            self.add_item(button)
            self.option_buttons[field] = button

    def _opener(self, field: str):
        async def callback(interaction: discord.Interaction):
            await self.open_choices(interaction, field)
        return callback

    async def open_choices(self, interaction: discord.Interaction, field: str):
        """Replace the menu with a picker for one setting."""
        if not can_change_settings(interaction):
            await interaction.response.send_message(NO_PERMISSION_MESSAGE, ephemeral=True)
            return

        config = await self.cog.settings.snapshot()
        label, _, unit = SETTING_OPTIONS[field]
        current = _display(getattr(config, field))
        await interaction.response.edit_message(
            content=f"{label}: currently **{current}{unit}**\nPick a new value:",
            view=SettingChoiceView(self.cog, field, current)
        )

    @discord.ui.button(label="Main menu", emoji="📋", style=discord.ButtonStyle.primary, row=2)
    async def main_menu_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        await interaction.response.edit_message(content=format_menu(), view=MainMenuView(self.cog))


class SettingChoiceView(discord.ui.View):
    """Dropdown of allowed values for a single setting."""

    def __init__(self, cog: "SignalCommands", field: str, current: Optional[str] = None):
        super().__init__(timeout=MENU_TIMEOUT_SECONDS)
        self.cog = cog
        self.field = field

        label, values, unit = SETTING_OPTIONS[field]
        options = [
            discord.SelectOption(
                label=f"{value}{unit}",
                value=str(value),
                default=str(value) == current
            )
            for value in values
        ]
        self.select = discord.ui.Select(placeholder=label, options=options, row=0)
        self.select.callback = self._on_select
        self.add_item(self.select)

    async def _on_select(self, interaction: discord.Interaction):
        await self.apply_choice(interaction, self.select.values[0])

    async def apply_choice(self, interaction: discord.Interaction, value: str):
        """Save the picked value and go back to the settings menu."""
        if not can_change_settings(interaction):
            await interaction.response.send_message(NO_PERMISSION_MESSAGE, ephemeral=True)
            return

        try:
            config, restarted = await apply_settings(
                self.cog.settings, self.cog.restart_channel, **{self.field: value}
            )
        except ValueError as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        logger.info(f"{self.field} set to {value} by {interaction.user} from the settings menu")
        await interaction.response.edit_message(
            content=format_settings_update(config, restarted), view=SettingsMenuView(self.cog)
        )

    @discord.ui.button(label="Back", emoji="↩️", style=discord.ButtonStyle.secondary, row=1)
    async def back_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        config = await self.cog.settings.snapshot()
        await interaction.response.edit_message(
            content=format_settings(config), view=SettingsMenuView(self.cog)
        )


# ==================== Cog ====================

class SignalCommands(commands.Cog):
    """Subscription and settings commands."""

    def __init__(
        self,
        bot: commands.Bot,
        settings: SettingsStore,
        subscribers: SubscriberStore,
        tracker: SignalStateTracker,
        restart_channel: RestartChannel
    ):
        self.bot = bot
        self.settings = settings
        self.subscribers = subscribers
        self.tracker = tracker
        self.restart_channel = restart_channel

    # ==================== Shared by commands and menu buttons ====================

    async def subscribe_channel(self, interaction: discord.Interaction):
        added = await self.subscribers.subscribe(interaction.channel_id)
        if added:
            logger.info(f"{interaction.user} subscribed channel {interaction.channel_id}")
            await interaction.response.send_message("✅ This channel is now subscribed to RSI signals!")
        else:
            await interaction.response.send_message("⚠️ This channel is already subscribed.", ephemeral=True)

    async def unsubscribe_channel(self, interaction: discord.Interaction):
        removed = await self.subscribers.unsubscribe(interaction.channel_id)
        if removed:
            logger.info(f"{interaction.user} unsubscribed channel {interaction.channel_id}")
        await interaction.response.send_message(
            "❌ This channel no longer receives signals. Use `/subscribe` to come back."
        )

    async def send_status(self, interaction: discord.Interaction):
        subscribed = await self.subscribers.is_subscribed(interaction.channel_id)
        await interaction.response.send_message(format_status(subscribed), ephemeral=True)

    # ==================== Slash commands ====================

    @app_commands.command(name="start", description="Show the RSI signal bot menu")
    async def show_menu(self, interaction: discord.Interaction):
        await interaction.response.send_message(format_menu(), view=MainMenuView(self))

    @app_commands.command(name="subscribe", description="Receive RSI signals in this channel")
    async def subscribe(self, interaction: discord.Interaction):
        await self.subscribe_channel(interaction)

    @app_commands.command(name="unsubscribe", description="Stop RSI signals in this channel")
    async def unsubscribe(self, interaction: discord.Interaction):
        await self.unsubscribe_channel(interaction)

    @app_commands.command(name="status", description="Check the subscription status of this channel")
    async def status(self, interaction: discord.Interaction):
        await self.send_status(interaction)

    @app_commands.command(name="settings", description="Show current scan settings")
    async def show_settings(self, interaction: discord.Interaction):
        config = await self.settings.snapshot()
        await interaction.response.send_message(
            format_settings(config), view=SettingsMenuView(self), ephemeral=True
        )

    @app_commands.command(name="help", description="Show commands and current parameters")
    async def show_help(self, interaction: discord.Interaction):
        config = await self.settings.snapshot()
        await interaction.response.send_message(format_help(config), ephemeral=True)

    @app_commands.command(name="signals", description="Show symbols currently in a signal zone")
    async def signals(self, interaction: discord.Interaction):
        await interaction.response.send_message(
            format_signal_state(self.tracker.snapshot()), ephemeral=True
        )

    @app_commands.command(name="set", description="Change scan settings")
    @app_commands.default_permissions(manage_guild=True)
    @app_commands.describe(
        timeframe="Candle timeframe in minutes (restarts the scan)",
        candles="Number of candles per request (restarts the scan)",
        rsi_period="RSI period",
        overbought="Overbought threshold (SHORT signal)",
        oversold="Oversold threshold (LONG signal)"
    )
    @app_commands.choices(
        timeframe=[app_commands.Choice(name=f"{tf} min", value=tf) for tf in TIMEFRAME_CHOICES],
        candles=[app_commands.Choice(name=str(n), value=n) for n in CANDLE_LIMIT_CHOICES],
        rsi_period=[app_commands.Choice(name=str(n), value=n) for n in RSI_PERIOD_CHOICES],
        overbought=[app_commands.Choice(name=str(n), value=n) for n in OVERBOUGHT_CHOICES],
        oversold=[app_commands.Choice(name=str(n), value=n) for n in OVERSOLD_CHOICES]
    )
    async def set_settings(
        self,
        interaction: discord.Interaction,
        timeframe: Optional[app_commands.Choice[str]] = None,
        candles: Optional[app_commands.Choice[int]] = None,
        rsi_period: Optional[app_commands.Choice[int]] = None,
        overbought: Optional[app_commands.Choice[int]] = None,
        oversold: Optional[app_commands.Choice[int]] = None
    ):
        """Apply any combination of setting changes."""
        try:
            config, restarted = await apply_settings(
                self.settings,
                self.restart_channel,
                timeframe=timeframe.value if timeframe else None,
                limit=candles.value if candles else None,
                rsi_period=rsi_period.value if rsi_period else None,
                overbought=overbought.value if overbought else None,
                oversold=oversold.value if oversold else None
            )
        except ValueError as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        logger.info(f"Settings changed by {interaction.user}: {config}")
        await interaction.response.send_message(format_settings_update(config, restarted))
