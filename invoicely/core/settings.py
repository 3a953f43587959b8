"""
Invoicely runtime settings.

Everything is read from the environment once at import time.
"""
import os
import secrets

# Storage
DB_PATH = os.getenv("INVOICELY_DB_PATH", "invoicely.db")
DATABASE_URL = os.getenv("DATABASE_URL")

# Sessions
SECRET_KEY = os.getenv("INVOICELY_SECRET_KEY", secrets.token_urlsafe(32))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_MAX_AGE_DAYS = int(os.getenv("SESSION_MAX_AGE_DAYS", "7"))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

# Exchange rates
EXCHANGE_RATE_API_URL = os.getenv(
    "EXCHANGE_RATE_API_URL", "https://api.exchangerate-api.com/v4/latest"
).rstrip("/")
EXCHANGE_RATE_TIMEOUT = float(os.getenv("EXCHANGE_RATE_TIMEOUT", "10"))
EXCHANGE_RATE_CACHE_SECONDS = int(os.getenv("EXCHANGE_RATE_CACHE_SECONDS", "3600"))

# Presentation defaults
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD").upper()
DEFAULT_TEMPLATE_ID = os.getenv("DEFAULT_TEMPLATE_ID", "modern-minimalist")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
USE_JSON_LOGS = os.getenv("USE_JSON_LOGS", "false").lower() == "true"
