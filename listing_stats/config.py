import os
from dotenv import load_dotenv

load_dotenv()

USER_AGENT = os.getenv("USER_AGENT", "Mozilla/5.0")
HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "15"))
HTTP_MAX_RETRIES = int(os.getenv("HTTP_MAX_RETRIES", "3"))
HTTP_BACKOFF_BASE = float(os.getenv("HTTP_BACKOFF_BASE", "1.5"))
HTTP_RATE_GAP_DEFAULT = float(os.getenv("HTTP_RATE_GAP_DEFAULT", "3.0"))
PROXY_URL = os.getenv("PROXY_URL", "")

# Extraction
SELECTORS_FILE = os.getenv("SELECTORS_FILE", "")
STRICT_AREA = os.getenv("STRICT_AREA", "0").lower() in ("1", "true", "yes")
MAX_PAGES = int(os.getenv("MAX_PAGES", "20"))

# Output / logging
RESULTS_DIR = os.getenv("RESULTS_DIR", "scraper_results")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "listing_stats.log")

# API
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
