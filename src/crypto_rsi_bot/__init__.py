"""Crypto RSI Signal Bot package.

A Discord bot that scans Bybit linear perpetuals, computes RSI per symbol and
pushes overbought (SHORT) / oversold (LONG) alerts to subscribed channels.
"""

__version__ = "1.0.0"
