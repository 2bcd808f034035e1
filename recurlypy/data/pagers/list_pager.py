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

import asyncio
import logging
from inspect import iscoroutinefunction
from typing import Any, Awaitable, Callable, Generic, cast

from recurlypy.constants import QueryParamsType
from recurlypy.data.pagers.pagination import TRAW, Page, T
from recurlypy.data.pagers.pager import AbstractPager, PageFetcher
from recurlypy.exceptions import PagerCancelledException
from recurlypy.utils.request_tools import append_query_string

logger = logging.getLogger(__name__)


class Pager(Generic[TRAW, T], AbstractPager[TRAW]):
    """
    A pager over the results of a listing endpoint of the Recurly API, as
    returned e.g. by the `list_accounts` method of a RecurlyClient. A pager
    can be consumed either synchronously or asynchronously (from a coroutine),
    with pages being fetched lazily, one at a time and in order, whenever the
    current one is drained and the API declared there are more.

    The primitives are `advance` and `async_advance`, each returning an
    `(item, True)` pair, or `(None, False)` once all pages are exhausted.
    Pagers also support the iteration protocols (`for` and `async for`).

    A pager has two type parameters: TRAW and T. The first is the type of the "raw"
    items as they are obtained from the API, the second is the type of the
    items after the optional mapping function. If there is no mapping, TRAW = T.

    Args:
        fetcher: the object retrieving pages, typically a RecurlyClient.
        url: the URL of the first page (possibly relative to the API root).
        params: an optional dictionary of filtering parameters, encoded into
            the query string of the first page URL.
        mapper: an optional function applied to each raw item as it is yielded.
            If the mapper raises, the error propagates and the item is not
            consumed: advancing again retries it.

    Example:
        >>> pager = client.list_accounts(params={"limit": 2, "state": "active"})
        >>> for account in pager:
        ...     print(account["code"])
        ...
        acc-1
        acc-2
        acc-3
        >>> pager.advance()
        (None, False)
    """

    _fetcher: PageFetcher
    _mapper: Callable[[TRAW], T] | None

    def __init__(
        self,
        *,
        fetcher: PageFetcher,
        url: str,
        params: QueryParamsType | None = None,
        mapper: Callable[[TRAW], T] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._mapper = mapper
        AbstractPager.__init__(self, url=append_query_string(url, params))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"{self._state.value}, "
            f"pages retrieved: {self._pages_retrieved}, "
            f"consumed so far: {self.consumed})"
        )

    def _map(self, traw: TRAW) -> T:
        return cast(T, self._mapper(traw) if self._mapper is not None else traw)

    def _take_mapped(self) -> T:
        # the position moves only once the mapping has succeeded
        mapped = self._map(self._peek_from_page())
        self._take_from_page()
        return mapped

    def _try_ensure_fill_buffer(self) -> bool:
        """
        Fetch pages, if needed, until an item is available or the API has no more.
        Empty pages announcing more results are skipped over.

        Returns:
            whether an item is available to take from the current page.
        """

        self._ensure_usable()
        while self._needs_fetch():
            if not self._has_more:
                self._mark_exhausted()
                return False
            url = cast(str, self._next_url)
            logger.debug(f"Pager {self.pager_id}: fetching page from '{url}'")
            page = self._fetcher.fetch_page(url)
            self._apply_page(page, url)
        return True

    async def _async_fetch_page(
        self,
        url: str,
        cancel_event: asyncio.Event | None,
    ) -> Page[TRAW]:
        if cancel_event is None:
            return await self._fetcher.async_fetch_page(url)
        if cancel_event.is_set():
            raise PagerCancelledException(
                text="Page fetch cancelled before starting.",
                pager_state=self._state.value,
            )
        fetch_task = asyncio.create_task(self._fetcher.async_fetch_page(url))
        cancel_task = asyncio.create_task(cancel_event.wait())
        try:
            await asyncio.wait(
                {fetch_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()
            if not fetch_task.done():
                fetch_task.cancel()
        # a page that arrived in time wins over a simultaneous cancellation
        if fetch_task.done() and not fetch_task.cancelled():
            return fetch_task.result()
        await asyncio.gather(fetch_task, return_exceptions=True)
        logger.debug(f"Pager {self.pager_id}: fetch from '{url}' cancelled")
        raise PagerCancelledException(
            text="Page fetch cancelled while in progress.",
            pager_state=self._state.value,
        )

    async def _async_try_ensure_fill_buffer(
        self,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        """
        Async counterpart of `_try_ensure_fill_buffer`. A cancelled fetch leaves
        the pager exactly as it was before the fetch started.
        """

        self._ensure_usable()
        while self._needs_fetch():
            if not self._has_more:
                self._mark_exhausted()
                return False
            url = cast(str, self._next_url)
            logger.debug(f"Pager {self.pager_id}: fetching page from '{url}'")
            page = await self._async_fetch_page(url, cancel_event)
            self._apply_page(page, url)
        return True

    def advance(self) -> tuple[T | None, bool]:
        """
        Move the pager one item forward, fetching the next page(s) from the
        API if necessary. This method blocks for the duration of the fetch.

        Once the pager is exhausted, it stays so: further calls keep returning
        `(None, False)` without contacting the API.

        Returns:
            a pair `(item, True)` if an item is available, `(None, False)` if
            the pager is exhausted.

        Raises:
            any error from fetching a page: in that case the pager is unchanged
                and the call can be retried. A `PagerProtocolException`, on
                the other hand, makes the pager unusable.
        """

        if self._try_ensure_fill_buffer():
            return self._take_mapped(), True
        return None, False

    async def async_advance(
        self,
        cancel_event: asyncio.Event | None = None,
    ) -> tuple[T | None, bool]:
        """
        Move the pager one item forward, awaiting the fetch of the next page(s)
        from the API if necessary. No suspension occurs if the item is taken
        from the current page.

        Args:
            cancel_event: an optional asyncio.Event acting as a cancellation
                signal. If it is set before an ongoing page fetch completes, the
                fetch is abandoned and `PagerCancelledException` is raised.

        Returns:
            a pair `(item, True)` if an item is available, `(None, False)` if
            the pager is exhausted.

        Raises:
            PagerCancelledException: if `cancel_event` fired during a fetch.
                The pager is left as it was before that fetch, so the call can
                be repeated. Cancelling the task running this coroutine also
                leaves the pager untouched, while raising `asyncio.CancelledError`.
            any error from fetching a page, as for `advance`.
        """

        if await self._async_try_ensure_fill_buffer(cancel_event):
            return self._take_mapped(), True
        return None, False

    def __iter__(self: Pager[TRAW, T]) -> Pager[TRAW, T]:
        self._ensure_usable()
        return self

    def __next__(self) -> T:
        if self._try_ensure_fill_buffer():
            return self._take_mapped()
        raise StopIteration

    def __aiter__(self: Pager[TRAW, T]) -> Pager[TRAW, T]:
        self._ensure_usable()
        return self

    async def __anext__(self) -> T:
        if await self._async_try_ensure_fill_buffer():
            return self._take_mapped()
        raise StopAsyncIteration

    def has_next(self) -> bool:
        """
        Whether the pager actually has more items to return.

        This method can trigger the fetch of new pages, if the current one
        is drained, but never consumes items.

        Returns:
            a boolean value of True if there is at least one further item
                available to consume; False otherwise.
        """

        return self._try_ensure_fill_buffer()

    async def async_has_next(
        self,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        """
        Async counterpart of `has_next`.

        Args:
            cancel_event: an optional cancellation signal, as for `async_advance`.

        Returns:
            a boolean value of True if there is at least one further item
                available to consume; False otherwise.
        """

        return await self._async_try_ensure_fill_buffer(cancel_event)

    def to_list(self) -> list[T]:
        """
        Materialize all items that remain to be consumed from the pager into a list.

        Calling this method is not recommended if a huge list of results is
        anticipated: it would involve a large number of requests to the API and
        possibly a massive memory usage to construct the list. In such cases, a
        lazy pattern of iterating and consuming the items is to be preferred.

        Returns:
            a list of items (after the mapping function, if one is set).
                These are all items that were left to be consumed on the
                pager when `to_list` is called.
        """

        return [item for item in self]

    async def async_to_list(self) -> list[T]:
        """
        Async counterpart of `to_list`.

        Returns:
            a list of items, all those left to be consumed on the pager.
        """

        return [item async for item in self]

    def for_each(self, function: Callable[[T], bool | None]) -> None:
        """
        Consume the remaining items in the pager, invoking a provided callback
        function on each of them.

        The callback function can return any value. The return value is generally
        discarded, with the following exception: if the function returns the boolean
        `False`, it is taken to signify that the method should quit early, leaving
        the pager half-consumed.

        Args:
            function: a callback function whose only parameter is of the type
                returned by the pager.
        """

        for item in self:
            res = function(item)
            if res is False:
                break

    async def async_for_each(
        self,
        function: Callable[[T], bool | None] | Callable[[T], Awaitable[bool | None]],
    ) -> None:
        """
        Async counterpart of `for_each`. The callback can be either a regular
        function or a coroutine function.

        Args:
            function: a callback function (or coroutine function) whose only
                parameter is of the type returned by the pager. If it returns
                `False`, consumption stops early.
        """

        is_coro = iscoroutinefunction(function)
        async for item in self:
            res: Any
            if is_coro:
                res = await cast(Callable[[T], Awaitable[Any]], function)(item)
            else:
                res = function(item)
            if res is False:
                break
