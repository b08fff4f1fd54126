"""Bounded retry loop wrapped around the dispatcher."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import FrozenSet, Optional

import requests

from constants import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY, TRANSPORT_ERROR_STATUS

from .credentials import Credentials
from .errors import CanvasHTTPError, RequestCancelled, RetriesExhaustedError
from .transport import (
    DEFAULT_RETRYABLE_STATUSES,
    Dispatcher,
    Request,
    RetryableFailure,
    Success,
    check_cancelled,
)

logger = logging.getLogger(__name__)


def _status_label(status: int) -> str:
    return "transport error (status 0)" if status == TRANSPORT_ERROR_STATUS else f"status {status}"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry only on statuses in ``retryable_statuses`` (403 rate limiting and
    transport errors by default), with a fixed delay between attempts.
    Every other non-2xx status fails after a single attempt.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY
    retryable_statuses: FrozenSet[int] = DEFAULT_RETRYABLE_STATUSES

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.retry_delay < 0:
            raise ValueError("retry_delay cannot be negative")
        object.__setattr__(self, "retryable_statuses", frozenset(self.retryable_statuses))

    def execute(
        self,
        dispatcher: Dispatcher,
        request: Request,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> requests.Response:
        """Send ``request`` until it succeeds, fails fatally or runs out of attempts."""
        method = request.method.value
        outcome = None

        for attempt in range(1, self.max_attempts + 1):
            check_cancelled(request, cancel_event, deadline)
            outcome = dispatcher.dispatch(request, credentials, cancel_event, deadline)

            if isinstance(outcome, Success):
                return outcome.response

            if isinstance(outcome, RetryableFailure) and outcome.status in self.retryable_statuses:
                if attempt < self.max_attempts:
                    logger.warning(
                        "%s failed with %s (attempt %d/%d), retrying in %.1fs",
                        request.describe(), _status_label(outcome.status),
                        attempt, self.max_attempts, self.retry_delay,
                    )
                    self._wait(request, cancel_event, deadline)
                continue

            message = f"{request.describe()} failed with {_status_label(outcome.status)}"
            if outcome.error:
                message += f": {outcome.error}"
            logger.debug(message)
            raise CanvasHTTPError(message, method=method, url=request.url, status=outcome.status)

        message = (
            f"{request.describe()} failed with {_status_label(outcome.status)} "
            f"after {self.max_attempts} attempts"
        )
        logger.debug(message)
        raise RetriesExhaustedError(
            message, method=method, url=request.url, status=outcome.status, attempts=self.max_attempts
        )

    def _wait(
        self,
        request: Request,
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> None:
        if deadline is not None and time.monotonic() + self.retry_delay >= deadline:
            # The next attempt could not start before the deadline
            raise RequestCancelled(
                f"{request.describe()} exceeded its deadline while waiting to retry",
                method=request.method.value, url=request.url,
            )
        if self.retry_delay <= 0:
            return
        if cancel_event is not None:
            # Wakes early on cancellation; the next loop iteration raises
            cancel_event.wait(self.retry_delay)
        else:
            time.sleep(self.retry_delay)
