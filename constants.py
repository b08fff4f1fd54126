"""Application constants."""

# Pagination
DEFAULT_PER_PAGE = 100
STUDENTS_PER_PAGE = 150
PAGE_PARAM = "page"
PER_PAGE_PARAM = "per_page"
DEFAULT_MAX_PAGES = 1000

# Concurrency
DEFAULT_CONCURRENCY_LIMIT = 20

# Seconds between cancellation checks while queued for a permit
GATE_POLL_INTERVAL = 0.05

# Retry policy
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = 1.0  # seconds
RATE_LIMIT_STATUS = 403
TRANSPORT_ERROR_STATUS = 0

# File uploads
UPLOAD_MAX_ATTEMPTS = 3
UPLOAD_RETRY_DELAY = 1.0

# Timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT = 30

# Keyring
KEYRING_SERVICE = "canvas-connector"
KEYRING_URL_KEY = "URL_CANVAS"
KEYRING_TOKEN_KEY = "TOKEN_CANVAS"

DEFAULT_BASE_URL = "https://canvas.instructure.com/api/v1/"
