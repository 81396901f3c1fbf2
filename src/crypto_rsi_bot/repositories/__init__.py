"""Repository modules for Crypto RSI Signal Bot."""
from crypto_rsi_bot.repositories.settings_store import RunConfig, SettingsStore, validate_config
from crypto_rsi_bot.repositories.subscribers import SubscriberStore

__all__ = [
    'RunConfig',
    'SettingsStore',
    'validate_config',
    'SubscriberStore',
]
