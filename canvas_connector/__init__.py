"""Canvas LMS API connector: retrying, paginated, concurrency-bounded access."""

from .client import CanvasClient
from .credentials import Credentials, load_credentials, save_credentials_to_keyring
from .errors import (
    CanvasAPIError,
    CanvasHTTPError,
    CredentialsError,
    DeserializationError,
    PaginationLimitExceeded,
    RequestCancelled,
    RetriesExhaustedError,
)
from .gate import ConcurrencyGate
from .pagination import PageResult, Paginator
from .retry import RetryPolicy
from .transport import Dispatcher, HttpMethod, Request

__all__ = [
    'CanvasClient',
    'Credentials',
    'load_credentials',
    'save_credentials_to_keyring',
    'CanvasAPIError',
    'CanvasHTTPError',
    'CredentialsError',
    'DeserializationError',
    'PaginationLimitExceeded',
    'RequestCancelled',
    'RetriesExhaustedError',
    'ConcurrencyGate',
    'PageResult',
    'Paginator',
    'RetryPolicy',
    'Dispatcher',
    'HttpMethod',
    'Request',
]
