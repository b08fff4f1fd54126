"""Canvas API client for making authenticated requests."""

import logging
import threading
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import requests

import config
from constants import DEFAULT_PER_PAGE

from .credentials import Credentials
from .errors import CanvasAPIError, DeserializationError
from .gate import ConcurrencyGate
from .pagination import Mapper, PageResult, Paginator
from .retry import RetryPolicy
from .transport import Dispatcher, HttpMethod, Request, normalize_params

logger = logging.getLogger(__name__)

ParamsArg = Union[None, Mapping[str, Any], Iterable[Tuple[str, Any]]]

__all__ = ["CanvasClient", "CanvasAPIError"]


class CanvasClient:
    """
    Client for interacting with the Canvas LMS API.

    Every request goes through the same path: the retry policy calls the
    dispatcher, and the dispatcher holds a permit of the concurrency gate for
    the duration of each attempt. Pass one ``ConcurrencyGate`` to several
    clients to share a single limit between them.
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        *,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        gate: Optional[ConcurrencyGate] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: Optional[float] = None,
        max_pages: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the Canvas API client."""
        if credentials is None:
            base_url = base_url if base_url is not None else config.CANVAS_BASE_URL
            token = token if token is not None else config.CANVAS_TOKEN
            if not base_url or not token:
                raise ValueError("Canvas API base URL and token are required")
            credentials = Credentials(base_url=base_url, token=token)

        self.credentials = credentials
        self.base_url = credentials.base_url
        self.gate = gate or ConcurrencyGate(config.CANVAS_CONCURRENCY_LIMIT)
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.CANVAS_MAX_ATTEMPTS,
            retry_delay=config.CANVAS_RETRY_DELAY,
        )
        self.dispatcher = Dispatcher(
            session=session,
            gate=self.gate,
            timeout=timeout if timeout is not None else config.CANVAS_REQUEST_TIMEOUT,
            retryable_statuses=self.retry_policy.retryable_statuses,
        )
        # None uses the configured cap; 0 disables it
        if max_pages is None:
            max_pages = config.CANVAS_MAX_PAGES
        self.max_pages = max_pages or None

    @property
    def session(self) -> requests.Session:
        return self.dispatcher.session

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def send(
        self,
        request: Request,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> requests.Response:
        """Send a prepared request through the retry policy."""
        return self.retry_policy.execute(
            self.dispatcher, request, self.credentials, cancel_event=cancel_event, deadline=deadline
        )

    def request(
        self,
        method: HttpMethod,
        endpoint: str,
        params: ParamsArg = None,
        body: Optional[Any] = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> requests.Response:
        request = Request(
            method=HttpMethod(method),
            url=self.url_for(endpoint),
            body=body,
            params=normalize_params(params),
        )
        return self.send(request, cancel_event, deadline)

    def get(self, endpoint: str, params: ParamsArg = None) -> Any:
        """Make a GET request and return the decoded JSON body (no pagination)."""
        response = self.request(HttpMethod.GET, endpoint, params=params)
        return self._json(response, HttpMethod.GET, endpoint)

    def get_paginated(
        self,
        endpoint: str,
        params: ParamsArg = None,
        mapper: Optional[Mapper] = None,
        per_page: int = DEFAULT_PER_PAGE,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> PageResult:
        """Fetch every page of a list endpoint, mapping each element with ``mapper``."""
        paginator = Paginator(self.send, per_page=per_page, max_pages=self.max_pages)
        return paginator.fetch(
            self.url_for(endpoint),
            params=normalize_params(params),
            mapper=mapper,
            cancel_event=cancel_event,
            deadline=deadline,
        )

    def put(self, endpoint: str, body: Optional[Any] = None) -> requests.Response:
        return self.request(HttpMethod.PUT, endpoint, body=body)

    def post(self, endpoint: str, body: Optional[Any] = None) -> requests.Response:
        return self.request(HttpMethod.POST, endpoint, body=body)

    def delete(self, endpoint: str, params: ParamsArg = None) -> requests.Response:
        return self.request(HttpMethod.DELETE, endpoint, params=params)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "CanvasClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _json(self, response: requests.Response, method: HttpMethod, endpoint: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            url = self.url_for(endpoint)
            raise DeserializationError(
                f"{method.value} {url} returned a body that is not valid JSON: {e}",
                method=method.value, url=url, status=response.status_code,
            ) from e

    def json_body(self, response: requests.Response, method: HttpMethod, endpoint: str) -> Dict[str, Any]:
        """Decode a response that must hold a JSON object."""
        data = self._json(response, method, endpoint)
        if not isinstance(data, dict):
            url = self.url_for(endpoint)
            raise DeserializationError(
                f"{method.value} {url} returned {type(data).__name__}, expected a JSON object",
                method=method.value, url=url, status=response.status_code,
            )
        return data
