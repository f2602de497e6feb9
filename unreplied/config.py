# /unreplied/config.py
"""
Configuration settings for the application.
Loads environment variables and provides them throughout the app.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv(override=True)


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# PostgreSQL settings
POSTGRES_CONNECTION_STRING = os.getenv("POSTGRES_CONNECTION_STRING")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "farcaster")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "2"))  # seconds
DB_IDLE_TIMEOUT = int(os.getenv("DB_IDLE_TIMEOUT", "30"))  # seconds

# Reputation cache
REPUTATION_CACHE_TTL = int(os.getenv("REPUTATION_CACHE_TTL", "300"))  # seconds
CACHE_PER_ENTRY_TTL = _env_bool("CACHE_PER_ENTRY_TTL", False)
PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "10"))  # seconds

# Reputation providers
OPENRANK_URL = os.getenv("OPENRANK_URL", "https://graph.cast.k3l.io/")
OPENRANK_STRATEGY = os.getenv("OPENRANK_STRATEGY", "following")
QUOTIENT_API_URL = os.getenv("QUOTIENT_API_URL", "https://api.quotient.social/v1/user-reputation")
QUOTIENT_API_KEY = os.getenv("QUOTIENT_API_KEY", "")

# Conversations
CONVERSATION_FETCH_TIMEOUT = float(os.getenv("CONVERSATION_FETCH_TIMEOUT", "15"))  # seconds
CONVERSATION_WINDOW_DAYS = int(os.getenv("CONVERSATION_WINDOW_DAYS", "90"))
EXCLUDE_ANSWERED_THREADS = _env_bool("EXCLUDE_ANSWERED_THREADS", True)

# Mock mode
USE_MOCKS = _env_bool("USE_MOCKS", False)
MOCK_DELAY_MS = int(os.getenv("MOCK_DELAY_MS", "500"))
