"""Configuration: env vars, provider endpoints, cache and nonce settings."""

import os
from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Process-wide constants (override persisted options, see settings.py)
# ---------------------------------------------------------------------------
PROVIDER: str = os.getenv("STOCKTICKER_PROVIDER", "")
TWELVE_DATA_API_KEY: str = os.getenv("TWELVE_DATA_API_KEY", "")
FMP_API_KEY: str = os.getenv("FMP_API_KEY", "")
DEFAULT_SYMBOL: str = os.getenv("STOCKTICKER_DEFAULT_SYMBOL", "")
DEFAULT_THEME: str = os.getenv("STOCKTICKER_DEFAULT_THEME", "")

# ---------------------------------------------------------------------------
# Built-in defaults (lowest precedence)
# ---------------------------------------------------------------------------
BUILTIN_DEFAULTS: dict[str, str] = {
    "provider": "twelve",
    "twelve_api_key": "",
    "fmp_api_key": "",
    "default_symbol": "MUR:TSXV",
    "default_theme": "dark",
}

VALID_THEMES: tuple[str, ...] = ("light", "dark")

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
DATABASE_URL: str = os.getenv("DATABASE_URL", "")
DATABASE_PATH: str = os.getenv("DATABASE_PATH", "stockticker.db")

# ---------------------------------------------------------------------------
# Upstream providers
# ---------------------------------------------------------------------------
TWELVE_DATA_BASE_URL: str = "https://api.twelvedata.com"
FMP_BASE_URL: str = "https://financialmodelingprep.com/api/v3"
REQUEST_TIMEOUT_SECONDS: float = 12.0

# Venture exchange spellings used by both providers
EXCHANGE_TAG: str = "TSXV"
EXCHANGE_SUFFIX: str = ".V"

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
CACHE_TTL_SECONDS: int = 60 * 60
CACHE_SWEEP_MINUTES: int = int(os.getenv("CACHE_SWEEP_MINUTES", "10"))

# ---------------------------------------------------------------------------
# Client refresh + request-forgery tokens
# ---------------------------------------------------------------------------
REFRESH_INTERVAL_SECONDS: int = int(os.getenv("REFRESH_INTERVAL_SECONDS", "60"))
NONCE_SECRET: str = os.getenv("NONCE_SECRET", "change-me-in-production")
NONCE_ALGORITHM: str = "HS256"
NONCE_LIFETIME_MINUTES: int = int(os.getenv("NONCE_LIFETIME_MINUTES", str(24 * 60)))

QUOTE_REFRESH_ACTION: str = "quote_refresh"
SETTINGS_UPDATE_ACTION: str = "settings_update"
