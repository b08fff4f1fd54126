"""
Single-attempt HTTP dispatch for the Canvas API.

A ``Request`` describes one logical call. The ``Dispatcher`` performs exactly
one round-trip for it, inside the concurrency gate, and classifies what came
back as ``Success``, ``RetryableFailure`` or ``FatalFailure``. It never raises
for network or HTTP problems; deciding what to do with a failure is the job
of the retry policy. The only exception it raises is ``RequestCancelled``,
when the caller gives up while the request is still queued at the gate.
"""

import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

import requests

from constants import (
    DEFAULT_REQUEST_TIMEOUT,
    GATE_POLL_INTERVAL,
    RATE_LIMIT_STATUS,
    TRANSPORT_ERROR_STATUS,
)

from .credentials import Credentials
from .errors import RequestCancelled
from .gate import ConcurrencyGate

logger = logging.getLogger(__name__)

Params = Tuple[Tuple[str, str], ...]


class HttpMethod(str, enum.Enum):
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"


def normalize_params(
    params: Union[None, Mapping[str, Any], Iterable[Tuple[str, Any]]]
) -> Params:
    """Turn a dict or sequence of pairs into an ordered tuple of string pairs."""
    if not params:
        return ()
    items = params.items() if isinstance(params, Mapping) else params
    return tuple((str(key), str(value)) for key, value in items)


@dataclass(frozen=True)
class Request:
    """Immutable description of one HTTP call."""

    method: HttpMethod
    url: str
    body: Optional[Any] = None
    params: Params = ()
    form: Optional[Mapping[str, str]] = None
    files: Optional[Mapping[str, Any]] = field(default=None, compare=False)
    authenticated: bool = True

    def with_params(self, *extra: Tuple[str, str]) -> "Request":
        return Request(
            method=self.method,
            url=self.url,
            body=self.body,
            params=self.params + tuple(extra),
            form=self.form,
            files=self.files,
            authenticated=self.authenticated,
        )

    def describe(self) -> str:
        return f"{self.method.value} {self.url}"


def check_cancelled(
    request: Request,
    cancel_event: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> None:
    """Raise RequestCancelled if the event is set or the monotonic deadline passed."""
    if cancel_event is not None and cancel_event.is_set():
        raise RequestCancelled(f"{request.describe()} cancelled", method=request.method.value, url=request.url)
    if deadline is not None and time.monotonic() >= deadline:
        raise RequestCancelled(
            f"{request.describe()} exceeded its deadline", method=request.method.value, url=request.url
        )


@dataclass(frozen=True)
class Success:
    response: requests.Response


@dataclass(frozen=True)
class RetryableFailure:
    status: int
    error: Optional[str] = None


@dataclass(frozen=True)
class FatalFailure:
    status: int
    error: Optional[str] = None


Outcome = Union[Success, RetryableFailure, FatalFailure]

DEFAULT_RETRYABLE_STATUSES: FrozenSet[int] = frozenset({RATE_LIMIT_STATUS, TRANSPORT_ERROR_STATUS})


def classify_status(status: int, retryable_statuses: FrozenSet[int], error: Optional[str] = None) -> Outcome:
    """Map a failed status (0 for transport errors) onto an outcome."""
    if status in retryable_statuses:
        return RetryableFailure(status, error)
    return FatalFailure(status, error)


class Dispatcher:
    """Issues one request attempt per call, always inside the concurrency gate."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        gate: Optional[ConcurrencyGate] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        retryable_statuses: FrozenSet[int] = DEFAULT_RETRYABLE_STATUSES,
    ) -> None:
        self.session = session or requests.Session()
        self.gate = gate or ConcurrencyGate()
        self.timeout = timeout
        self.retryable_statuses = frozenset(retryable_statuses)

    def dispatch(
        self,
        request: Request,
        credentials: Credentials,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> Outcome:
        kwargs = self._build_kwargs(request, credentials)
        self._enter_gate(request, cancel_event, deadline)
        try:
            response = self.session.request(request.method.value, request.url, **kwargs)
        except requests.RequestException as e:
            logger.debug("%s raised transport error: %s", request.describe(), e)
            return classify_status(TRANSPORT_ERROR_STATUS, self.retryable_statuses, str(e))
        finally:
            self.gate.release()

        if 200 <= response.status_code < 300:
            return Success(response)
        logger.debug("%s returned status %s", request.describe(), response.status_code)
        return classify_status(response.status_code, self.retryable_statuses, response.reason)

    def _enter_gate(
        self,
        request: Request,
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> None:
        """Take a permit, polling so a queued request can still be cancelled."""
        if cancel_event is None and deadline is None:
            self.gate.acquire()
            return
        while True:
            check_cancelled(request, cancel_event, deadline)
            timeout = GATE_POLL_INTERVAL
            if deadline is not None:
                timeout = max(0.0, min(timeout, deadline - time.monotonic()))
            if self.gate.acquire(timeout=timeout):
                return

    def _build_kwargs(self, request: Request, credentials: Credentials) -> dict:
        headers = credentials.authorization_header() if request.authenticated else {}
        kwargs = {"headers": headers, "timeout": self.timeout}

        if request.method in (HttpMethod.GET, HttpMethod.DELETE):
            kwargs["params"] = list(request.params)
        elif request.files is not None or request.form is not None:
            # Multipart upload; requests sets the Content-Type boundary itself
            kwargs["data"] = dict(request.form or {})
            kwargs["files"] = dict(request.files or {})
        elif request.body is not None:
            kwargs["json"] = request.body
        return kwargs
