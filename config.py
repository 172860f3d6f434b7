# config.py
import os

# Persistence
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///ecoscore.db")

# Logging level for the whole service (DEBUG, INFO, WARNING, ...)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Default page size for GET /history
HISTORY_PAGE_SIZE = int(os.getenv("HISTORY_PAGE_SIZE", "10"))

# Uploads larger than this are rejected by Flask with a 413
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "16"))

# Colour counting for uploaded photos: quantize to PALETTE_SIZE colours and
# count the ones that cover at least COLOR_SHARE_THRESHOLD of the pixels.
PALETTE_SIZE = int(os.getenv("PALETTE_SIZE", "32"))
COLOR_SHARE_THRESHOLD = float(os.getenv("COLOR_SHARE_THRESHOLD", "0.02"))

# Optional LLM hook (off by default)
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "")          # e.g., "openai"
LLM_API_KEY = os.getenv("LLM_API_KEY", "")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "3"))
LLM_RETRY_DELAY = float(os.getenv("LLM_RETRY_DELAY", "2"))  # seconds
