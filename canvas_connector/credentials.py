"""
Canvas credential lookup.

Credentials are resolved from the environment first (a ``.env`` file is
honoured through python-dotenv) and then from the operating system keyring.
Prompting the user for new credentials is left to the calling application.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

import keyring
from dotenv import load_dotenv
from keyring.errors import KeyringError

from constants import KEYRING_SERVICE, KEYRING_TOKEN_KEY, KEYRING_URL_KEY

from .errors import CredentialsError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Base API URL and bearer token authorizing every request."""

    base_url: str
    token: str

    def __post_init__(self) -> None:
        if not self.base_url or not self.token:
            raise ValueError("Canvas API base URL and token are required")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        # Never leak the token into logs or tracebacks
        return f"Credentials(base_url={self.base_url!r}, token='***')"


def load_credentials_from_env() -> Optional[Credentials]:
    """Read CANVAS_BASE_URL and CANVAS_TOKEN from the environment."""
    load_dotenv()
    url = os.getenv("CANVAS_BASE_URL")
    token = os.getenv("CANVAS_TOKEN")
    if not url or not token:
        return None
    logger.debug("Credentials loaded from environment for %s", url)
    return Credentials(base_url=url, token=token)


def load_credentials_from_keyring(service: str = KEYRING_SERVICE) -> Optional[Credentials]:
    """Read the URL and token stored in the system keyring, if any."""
    try:
        url = keyring.get_password(service, KEYRING_URL_KEY)
        token = keyring.get_password(service, KEYRING_TOKEN_KEY)
    except KeyringError as e:
        logger.warning("Could not access system keyring: %s", e)
        return None
    if not url or not token:
        return None
    logger.debug("Credentials loaded from keyring for %s", url)
    return Credentials(base_url=url, token=token)


def save_credentials_to_keyring(credentials: Credentials, service: str = KEYRING_SERVICE) -> None:
    """Store credentials in the system keyring."""
    try:
        keyring.set_password(service, KEYRING_URL_KEY, credentials.base_url)
        keyring.set_password(service, KEYRING_TOKEN_KEY, credentials.token)
    except KeyringError as e:
        raise CredentialsError(f"Could not save credentials to keyring: {e}") from e


def load_credentials(service: str = KEYRING_SERVICE) -> Credentials:
    """Return credentials from the environment, falling back to the keyring."""
    credentials = load_credentials_from_env() or load_credentials_from_keyring(service)
    if credentials is None:
        raise CredentialsError(
            "No Canvas credentials found. Set CANVAS_BASE_URL and CANVAS_TOKEN "
            "or store them in the system keyring."
        )
    return credentials
