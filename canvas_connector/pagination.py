"""Page-number pagination over Canvas list endpoints."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, TypeVar

import requests

from constants import DEFAULT_MAX_PAGES, DEFAULT_PER_PAGE, PAGE_PARAM, PER_PAGE_PARAM

from .errors import DeserializationError, PaginationLimitExceeded
from .transport import HttpMethod, Params, Request, check_cancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Takes the request to send plus the cancellation event and deadline
SendFunc = Callable[[Request, Optional[threading.Event], Optional[float]], requests.Response]
Mapper = Callable[[Any], Optional[T]]

MAPPING_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


@dataclass
class PageResult(Generic[T]):
    """Everything collected by one paginated fetch, in server order."""

    items: List[T] = field(default_factory=list)
    pages: int = 0
    skipped: int = 0

    @property
    def mapped(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def map_elements(elements: List[Any], mapper: Optional[Mapper], result: PageResult) -> None:
    """
    Append mapped elements to ``result``.

    Mapping is lossy on purpose: an element the mapper rejects (returns None
    or raises a lookup/type/value error) is counted in ``result.skipped`` and
    dropped instead of failing the whole fetch.
    """
    for element in elements:
        if mapper is None:
            result.items.append(element)
            continue
        try:
            mapped = mapper(element)
        except MAPPING_ERRORS as e:
            logger.debug("Skipping element that failed to map: %s", e)
            mapped = None
        if mapped is None:
            result.skipped += 1
            continue
        result.items.append(mapped)


class Paginator:
    """
    Fetches ``page=1, 2, ...`` until the server returns an empty JSON array.

    Pages are requested strictly in order. ``max_pages`` caps how many pages
    are read without seeing the empty terminator; pass None to disable it.
    """

    def __init__(
        self,
        send: SendFunc,
        per_page: int = DEFAULT_PER_PAGE,
        max_pages: Optional[int] = DEFAULT_MAX_PAGES,
        page_param: str = PAGE_PARAM,
        per_page_param: str = PER_PAGE_PARAM,
    ) -> None:
        if per_page < 1:
            raise ValueError("per_page must be at least 1")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be at least 1 or None")
        self.send = send
        self.per_page = per_page
        self.max_pages = max_pages
        self.page_param = page_param
        self.per_page_param = per_page_param

    def fetch(
        self,
        url: str,
        params: Params = (),
        mapper: Optional[Mapper] = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> PageResult:
        base = Request(HttpMethod.GET, url, params=tuple(params))
        result: PageResult = PageResult()
        page = 1

        while True:
            if self.max_pages is not None and result.pages >= self.max_pages:
                message = (
                    f"GET {url} returned data on all {result.pages} pages without an empty "
                    f"page; stopping at the page limit"
                )
                logger.warning(message)
                raise PaginationLimitExceeded(message, url=url, pages=result.pages, items=result.items)

            check_cancelled(base, cancel_event, deadline)
            request = base.with_params(
                (self.page_param, str(page)),
                (self.per_page_param, str(self.per_page)),
            )
            response = self.send(request, cancel_event, deadline)
            result.pages += 1
            elements = self._decode_page(request, response)
            logger.debug("GET %s page %d returned %d elements", url, page, len(elements))

            if not elements:
                break
            map_elements(elements, mapper, result)
            page += 1

        if result.skipped:
            logger.warning("GET %s: skipped %d elements that could not be mapped", url, result.skipped)
        return result

    @staticmethod
    def _decode_page(request: Request, response: requests.Response) -> List[Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise DeserializationError(
                f"{request.describe()} returned a body that is not valid JSON: {e}",
                method=request.method.value, url=request.url, status=response.status_code,
            ) from e
        if not isinstance(data, list):
            raise DeserializationError(
                f"{request.describe()} returned {type(data).__name__}, expected a JSON array",
                method=request.method.value, url=request.url, status=response.status_code,
            )
        return data
