"""
Settings store for Crypto RSI Signal Bot.

Holds the run configuration users can change from Discord (timeframe, candle
count, RSI period, thresholds) and persists it as a whole-file JSON document.

Readers always get an immutable RunConfig snapshot; the live value is only
replaced under the store lock.
"""
import asyncio
import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from crypto_rsi_bot.config import (
    SETTINGS_PATH, DEFAULT_TIMEFRAME, DEFAULT_CANDLE_LIMIT, DEFAULT_RSI_PERIOD,
    DEFAULT_OVERBOUGHT_THRESHOLD, DEFAULT_OVERSOLD_THRESHOLD
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """Parameters for one RSI evaluation; field names match the JSON file."""
    timeframe: str = DEFAULT_TIMEFRAME  # candle interval in minutes
    limit: int = DEFAULT_CANDLE_LIMIT  # candles requested per symbol
    rsi_period: int = DEFAULT_RSI_PERIOD
    overbought: float = DEFAULT_OVERBOUGHT_THRESHOLD  # RSI >= overbought -> SHORT
    oversold: float = DEFAULT_OVERSOLD_THRESHOLD  # RSI <= oversold -> LONG

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunConfig":
        """Build a config from JSON data, ignoring unknown keys."""
        # Field types are plain str/int/float, so they double as converters
        casts = {f.name: f.type for f in fields(cls)}
        values = {k: casts[k](v) for k, v in data.items() if k in casts}
        config = cls(**values)
        validate_config(config)
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_config(config: RunConfig) -> None:
    """
    Check a RunConfig for values the scanner cannot work with.

    Raises:
        ValueError: With a user-readable description of the first problem
    """
    timeframe = str(config.timeframe)
    if not timeframe.isdigit() or int(timeframe) <= 0:
        raise ValueError(f"Timeframe must be a positive number of minutes, got {config.timeframe!r}")
    if int(config.limit) <= 0:
        raise ValueError(f"Candle limit must be positive, got {config.limit}")
    if int(config.rsi_period) <= 0:
        raise ValueError(f"RSI period must be positive, got {config.rsi_period}")
    if not 0 <= float(config.overbought) <= 100:
        raise ValueError(f"Overbought threshold must be between 0 and 100, got {config.overbought}")
    if not 0 <= float(config.oversold) <= 100:
        raise ValueError(f"Oversold threshold must be between 0 and 100, got {config.oversold}")
    if float(config.oversold) >= float(config.overbought):
        raise ValueError(
            f"Oversold threshold ({config.oversold}) must be below "
            f"overbought threshold ({config.overbought})"
        )


class SettingsStore:
    """JSON-file backed holder of the current RunConfig."""

    def __init__(self, path: Path = SETTINGS_PATH):
        self.path = Path(path)
        self._config = RunConfig()
        self._lock = asyncio.Lock()

    async def load(self) -> RunConfig:
        """
        Load settings from disk.

        A missing file is created with defaults. A malformed file raises, so
        the bot refuses to start on a broken configuration.
        """
        async with self._lock:
            if not self.path.exists():
                self._config = RunConfig()
                self._write(self._config)
                logger.info(f"Settings file not found, created defaults at {self.path}")
                return self._config

            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError(f"Settings file {self.path} must contain a JSON object")

            self._config = RunConfig.from_dict(data)
            logger.info(f"Loaded settings from {self.path}: {self._config}")
            return self._config

    async def snapshot(self) -> RunConfig:
        """Return the current configuration (immutable copy)."""
        async with self._lock:
            return self._config

    async def update(
        self,
        timeframe: Optional[str] = None,
        limit: Optional[int] = None,
        rsi_period: Optional[int] = None,
        overbought: Optional[float] = None,
        oversold: Optional[float] = None
    ) -> RunConfig:
        """Update configuration with provided values and rewrite the file."""
        changes: Dict[str, Any] = {}
        if timeframe is not None:
            changes["timeframe"] = str(timeframe)
        if limit is not None:
            changes["limit"] = int(limit)
        if rsi_period is not None:
            changes["rsi_period"] = int(rsi_period)
        if overbought is not None:
            changes["overbought"] = float(overbought)
        if oversold is not None:
            changes["oversold"] = float(oversold)

        async with self._lock:
            if not changes:
                return self._config

            updated = replace(self._config, **changes)
            validate_config(updated)
            self._write(updated)
            self._config = updated

        logger.info(f"Settings updated: {changes}")
        return updated

    def _write(self, config: RunConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
