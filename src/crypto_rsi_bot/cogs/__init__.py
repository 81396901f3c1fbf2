"""Cogs (command handlers and alert logic) for Crypto RSI Signal Bot."""
from crypto_rsi_bot.cogs.alert_engine import SignalKind, SignalStateTracker, evaluate_signal
from crypto_rsi_bot.cogs.commands import SignalCommands, apply_settings

__all__ = [
    'SignalKind',
    'SignalStateTracker',
    'evaluate_signal',
    'SignalCommands',
    'apply_settings',
]
