"""Configuration management - loads environment variables."""

import os
from dotenv import load_dotenv

from constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_PAGES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_DELAY,
)

load_dotenv()

# Canvas API Configuration
CANVAS_TOKEN = os.getenv("CANVAS_TOKEN")
CANVAS_BASE_URL = os.getenv("CANVAS_BASE_URL", DEFAULT_BASE_URL)

# Transport Configuration
CANVAS_CONCURRENCY_LIMIT = int(os.getenv("CANVAS_CONCURRENCY_LIMIT", str(DEFAULT_CONCURRENCY_LIMIT)))
CANVAS_MAX_ATTEMPTS = int(os.getenv("CANVAS_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS)))
CANVAS_RETRY_DELAY = float(os.getenv("CANVAS_RETRY_DELAY", str(DEFAULT_RETRY_DELAY)))
CANVAS_REQUEST_TIMEOUT = float(os.getenv("CANVAS_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT)))

# 0 disables the pagination safety cap
CANVAS_MAX_PAGES = int(os.getenv("CANVAS_MAX_PAGES", str(DEFAULT_MAX_PAGES)))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
