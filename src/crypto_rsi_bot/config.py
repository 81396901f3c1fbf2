"""Configuration settings for the Crypto RSI Signal Bot.

Static settings are read from environment variables. Settings that users can
change from Discord (timeframe, candle count, RSI period, thresholds) live in
the JSON settings file managed by `repositories.settings_store`; the values
below are only the defaults written on first start.

Runtime paths
-------------
By default, the bot stores its settings, subscriber list and log file under
`runtime/` inside the repo. For systemd deployments, override via environment
variables:
- SETTINGS_PATH
- SUBSCRIBERS_PATH
- LOG_PATH
"""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
RUNTIME_DIR = PROJECT_ROOT / "runtime"

# Create runtime dir automatically (settings/subscribers/log need this)
RUNTIME_DIR.mkdir(parents=True, exist_ok=True)

SETTINGS_PATH = Path(os.getenv("SETTINGS_PATH", str(RUNTIME_DIR / "config.json")))
SUBSCRIBERS_PATH = Path(os.getenv("SUBSCRIBERS_PATH", str(RUNTIME_DIR / "subscribers.json")))
LOG_PATH = Path(os.getenv("LOG_PATH", str(RUNTIME_DIR / "crypto_rsi_bot.log")))

# Ensure parent directories exist for runtime paths
SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
SUBSCRIBERS_PATH.parent.mkdir(parents=True, exist_ok=True)
LOG_PATH.parent.mkdir(parents=True, exist_ok=True)

# =============================================================================
# Environment
# =============================================================================

# Bot token (set via environment variable)
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "").strip()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Timezone used for the timestamp line in alert messages
DEFAULT_TIMEZONE = os.getenv("TIMEZONE", "UTC")

# =============================================================================
# Exchange (Bybit v5 public market API, linear category)
# =============================================================================
BYBIT_BASE_URL = os.getenv("BYBIT_BASE_URL", "https://api.bybit.com").rstrip("/")
BYBIT_CATEGORY = "linear"
BYBIT_INSTRUMENTS_PAGE_LIMIT = 1000
HTTP_TIMEOUT_SECONDS = 10.0

# =============================================================================
# RSI defaults (first start only, afterwards the settings file wins)
# =============================================================================
DEFAULT_TIMEFRAME = "5"  # minutes
DEFAULT_CANDLE_LIMIT = 100
DEFAULT_RSI_PERIOD = 14
DEFAULT_OVERBOUGHT_THRESHOLD = 80.0
DEFAULT_OVERSOLD_THRESHOLD = 20.0

# =============================================================================
# Scan pacing
# =============================================================================
# Pause between symbols keeps us under the exchange request quota
SYMBOL_DELAY_SECONDS = 0.1
CYCLE_INTERVAL_SECONDS = 60.0
ERROR_BACKOFF_SECONDS = 60.0

# =============================================================================
# Settings choices offered by /set and the /settings menu
# =============================================================================
TIMEFRAME_CHOICES = ["5", "15", "30", "60", "240"]
CANDLE_LIMIT_CHOICES = [50, 100, 200]
RSI_PERIOD_CHOICES = [7, 14, 21]
OVERBOUGHT_CHOICES = [70, 75, 80, 85, 90, 95, 100]
OVERSOLD_CHOICES = [0, 15, 20, 25, 30]

# Menu buttons stop responding after this many seconds
MENU_TIMEOUT_SECONDS = 300.0

# =============================================================================
# Discord formatting
# =============================================================================
DISCORD_SAFE_LIMIT = 1900  # Discord rejects messages over 2000 characters
