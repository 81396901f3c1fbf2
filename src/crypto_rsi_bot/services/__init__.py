"""Services package for Crypto RSI Signal Bot."""
from crypto_rsi_bot.services.notifier import AlertDispatcher
from crypto_rsi_bot.services.restart_channel import RestartChannel
from crypto_rsi_bot.services.scanner import MarketScanner, ScanState, CycleOutcome

__all__ = ['AlertDispatcher', 'RestartChannel', 'MarketScanner', 'ScanState', 'CycleOutcome']
