# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import logging
from abc import ABC
from enum import Enum
from typing import Any, Generic

from typing_extensions import Protocol

from recurlypy.data.pagers.pagination import TRAW, Page
from recurlypy.exceptions import (
    PagerProtocolException,
    UnsupportedPagerOperationException,
)

logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    """
    The contract a pager expects from the object retrieving pages for it,
    such as a `RecurlyClient`.

    Both methods perform exactly one HTTP request to the provided URL and
    return the parsed page, raising (and never swallowing) any error:
    `RecurlyHttpException` for non-success statuses,
    `UnexpectedRecurlyResponseException` for malformed bodies,
    `RecurlyTimeoutException` for timeouts.
    """

    def fetch_page(self, url: str) -> Page[Any]: ...

    async def async_fetch_page(self, url: str) -> Page[Any]: ...


class PagerState(Enum):
    """
    This enum expresses the possible states for a `Pager`.

    Values:
        IDLE: No item has been yielded yet (pages may have been fetched already)
        STARTED: Items are being yielded, *can* still yield more
        EXHAUSTED: The last page has been drained. Won't return more items
        FAILED: The API broke the pagination protocol. Unusable
    """

    # No item has been yielded yet (pages may have been fetched already)
    IDLE = "idle"
    # Items are being yielded, *can* still yield more
    STARTED = "started"
    # The last page has been drained. Won't return more items
    EXHAUSTED = "exhausted"
    # The API broke the pagination protocol. Unusable
    FAILED = "failed"


class AbstractPager(ABC, Generic[TRAW]):
    """
    A pager obtained from the invocation of a listing method on the client.
    This is the main interface to scroll through the results.

    This class is not meant to be directly instantiated by the user, rather it
    is a superclass capturing the state machine common to all pagers.

    Pagers provide a seamless interface to the caller code, allowing iteration
    over results while pages of new data are fetched from the API whenever the
    current one is exhausted and the API declared there are more. For this
    reason, pagers internally keep the current page and a position within it.

    Pagers are single-pass: once an item is yielded, it is never yielded again,
    and a pager cannot be rewound. Pagers are not thread-safe nor safe for
    concurrent use from several coroutines: such usage patterns require
    external locking.
    """

    _state: PagerState
    _page: Page[TRAW] | None
    _position: int
    _next_url: str | None
    _has_more: bool
    _pages_retrieved: int
    _consumed: int
    _failure: PagerProtocolException | None

    def __init__(self, *, url: str) -> None:
        if not url:
            raise ValueError("A pager requires a non-empty starting URL.")
        self._state = PagerState.IDLE
        self._page = None
        self._position = 0
        self._next_url = url
        self._has_more = True
        self._pages_retrieved = 0
        self._consumed = 0
        self._failure = None

    def _ensure_usable(self) -> None:
        if self._failure is not None:
            raise self._failure.with_traceback(None)

    def _needs_fetch(self) -> bool:
        return self._page is None or self._position >= len(self._page.data)

    def _mark_exhausted(self) -> None:
        if self._state != PagerState.EXHAUSTED:
            logger.debug(
                f"Pager {self.pager_id} exhausted after {self._pages_retrieved} "
                f"page(s), {self._consumed} item(s) yielded"
            )
        self._state = PagerState.EXHAUSTED

    def _apply_page(self, page: Page[TRAW], url: str) -> None:
        """
        The only transition replacing the current page of the pager.
        Both the sync and the async fetch paths funnel the fetched page here.

        A page declaring more pages to come but lacking the pointer to the
        next one is rejected: the pager state is left as it was, except that
        it becomes permanently FAILED.
        """

        if page.has_more and not page.next:
            logger.warning(
                f"Pager {self.pager_id}: page from '{url}' has more results "
                "but no 'next' cursor"
            )
            self._failure = PagerProtocolException(
                text=(
                    "The API response declares more pages ('has_more') without "
                    "a usable 'next' cursor."
                ),
                pager_state=PagerState.FAILED.value,
                url=url,
            )
            self._state = PagerState.FAILED
            raise self._failure
        self._page = page
        self._next_url = page.next
        self._has_more = page.has_more
        self._position = 0
        self._pages_retrieved += 1
        logger.debug(
            f"Pager {self.pager_id}: page {self._pages_retrieved} applied "
            f"({len(page.data)} items, has_more={page.has_more})"
        )

    def _peek_from_page(self) -> TRAW:
        if self._page is None:
            raise RuntimeError("Pager has no page to take items from.")
        return self._page.data[self._position]

    def _take_from_page(self) -> TRAW:
        item = self._peek_from_page()
        self._position += 1
        self._consumed += 1
        self._state = PagerState.STARTED
        return item

    @property
    def state(self) -> PagerState:
        """
        The current state of this pager.

        Returns:
            a value in `recurlypy.pagers.PagerState`.
        """

        return self._state

    @property
    def consumed(self) -> int:
        """
        The number of items the pager has yielded, i.e. how many items
        have been already read by the code consuming the pager.

        Returns:
            consumed: a non-negative integer, the count of items yielded so far.
        """

        return self._consumed

    @property
    def pages_retrieved(self) -> int:
        """The number of pages fetched from the API so far."""

        return self._pages_retrieved

    @property
    def pager_id(self) -> int:
        """
        An integer uniquely identifying this pager.

        Returns:
            pager_id: an integer number uniquely identifying the pager.
        """

        return id(self)

    @property
    def buffered_count(self) -> int:
        """
        The number of items of the current page not yet yielded. Reading this
        property never triggers new API calls.

        Returns:
            buffered_count: a non-negative integer, the amount of items
                from the current page still to be consumed.
        """

        if self._page is None:
            return 0
        return len(self._page.data) - self._position

    @property
    def current_page(self) -> Page[TRAW] | None:
        """
        The page items are currently being taken from, as last received from
        the API (None before the first fetch). Reading it never triggers API
        calls, and it does not move the pager: to drain the rest of this page,
        use `consume_buffer`.
        """

        return self._page

    @property
    def has_more(self) -> bool:
        """
        Whether the API, as of the last page fetched, may have further pages.
        This is True before the first fetch.
        """

        return self._has_more

    @property
    def next_url(self) -> str | None:
        """The URL the next page would be fetched from (an opaque string)."""

        return self._next_url

    def consume_buffer(self, n: int | None = None) -> list[TRAW]:
        """
        Consume (return) up to the requested number of items from the current
        page, without fetching. The returned items are marked as consumed,
        meaning that subsequently consuming the pager will start after them.

        No mapping function is applied to the returned items.

        Args:
            n: amount of items to return. If omitted, the rest of the current
                page is returned.

        Returns:
            list: a list of items. If there are fewer items than requested, the
                rest of the current page is returned without errors: in particular,
                if the page is drained (or none was fetched yet), an empty list
                is returned.
        """

        _n = n if n is not None else self.buffered_count
        if _n < 0:
            raise ValueError("A negative amount of items was requested.")
        if self._page is None or _n == 0:
            return []
        returned = self._page.data[self._position : self._position + _n]
        self._position += len(returned)
        self._consumed += len(returned)
        if returned:
            self._state = PagerState.STARTED
        return returned

    def reset(self) -> None:
        """
        Pagers cannot be reset, rewound or restarted: this method always raises.

        Raises:
            UnsupportedPagerOperationException: always.
        """

        raise UnsupportedPagerOperationException(
            text="Pagers cannot be reset: create a new pager instead.",
            pager_state=self._state.value,
        )
