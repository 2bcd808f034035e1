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

from typing import Any

import httpx
import pytest

from recurlypy.data.pagers.pagination import Page
from recurlypy.exceptions import (
    PagerProtocolException,
    RecurlyHttpException,
    UnexpectedRecurlyResponseException,
    UnsupportedPagerOperationException,
)
from recurlypy.pagers import Pager, PagerState

from .pager_assets import START_URL, FakeFetcher, make_pages, page_url

PAGE_LAYOUTS = [
    [],
    [[]],
    [[1]],
    [[1, 2, 3]],
    [[1, 2], [3, 4], [5]],
    [[1], [], [], [2, 3]],
    [[], [], [1, 2, 3]],
    [[1, 2, 3], []],
    [[1], [2], [3], [4], [5], [6], [7]],
]


def _drain_with_advance(pager: Pager[Any, Any]) -> list[Any]:
    items: list[Any] = []
    while True:
        item, ok = pager.advance()
        if not ok:
            return items
        items.append(item)


class TestPagerSync:
    @pytest.mark.describe("test of pager yielding every item exactly once, sync")
    @pytest.mark.parametrize("chunks", PAGE_LAYOUTS)
    def test_pager_no_loss_no_duplication_sync(self, chunks: list[list[int]]) -> None:
        fetcher = FakeFetcher(make_pages(chunks))
        pager = Pager(fetcher=fetcher, url=START_URL)
        expected = [item for chunk in chunks for item in chunk]

        assert _drain_with_advance(pager) == expected
        assert pager.consumed == len(expected)
        assert pager.state == PagerState.EXHAUSTED
        # each page fetched exactly once, in order
        assert fetcher.calls == [page_url(i) for i in range(max(len(chunks), 1))]

    @pytest.mark.describe("test of pager terminal exhaustion, sync")
    def test_pager_terminal_exhaustion_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2], [3]]))
        pager = Pager(fetcher=fetcher, url=START_URL)
        assert _drain_with_advance(pager) == [1, 2, 3]
        calls_at_exhaustion = len(fetcher.calls)

        for _ in range(5):
            assert pager.advance() == (None, False)
        assert not pager.has_next()
        assert list(pager) == []
        assert pager.to_list() == []
        assert len(fetcher.calls) == calls_at_exhaustion
        assert pager.state == PagerState.EXHAUSTED

    @pytest.mark.describe("test of pager skipping empty pages in one advance, sync")
    def test_pager_empty_pages_single_advance_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[], [], ["x"]]))
        pager = Pager(fetcher=fetcher, url=START_URL)

        assert pager.advance() == ("x", True)
        assert len(fetcher.calls) == 3
        assert pager.pages_retrieved == 3
        assert pager.advance() == (None, False)
        assert len(fetcher.calls) == 3

    @pytest.mark.describe("test of pager over a single empty page, sync")
    def test_pager_single_empty_page_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([]))
        pager = Pager(fetcher=fetcher, url=START_URL)

        assert pager.state == PagerState.IDLE
        assert pager.advance() == (None, False)
        assert pager.state == PagerState.EXHAUSTED
        assert pager.consumed == 0
        assert fetcher.calls == [START_URL]

    @pytest.mark.describe("test of pager protocol violation, sync")
    def test_pager_protocol_violation_sync(self) -> None:
        pages = {
            START_URL: Page(has_more=True, data=[1, 2], next=page_url(1)),
            page_url(1): Page(has_more=True, data=[3], next=None),
        }
        fetcher = FakeFetcher(pages)
        pager = Pager(fetcher=fetcher, url=START_URL)
        assert pager.advance() == (1, True)
        assert pager.advance() == (2, True)

        with pytest.raises(PagerProtocolException) as exc:
            pager.advance()
        assert exc.value.url == page_url(1)
        assert pager.state == PagerState.FAILED
        # the offending page was discarded
        assert pager.pages_retrieved == 1
        assert pager.consumed == 2
        calls_at_failure = len(fetcher.calls)

        with pytest.raises(PagerProtocolException):
            pager.advance()
        with pytest.raises(PagerProtocolException):
            pager.has_next()
        with pytest.raises(PagerProtocolException):
            iter(pager)
        assert len(fetcher.calls) == calls_at_failure

    @pytest.mark.describe("test of pager protocol violation with empty next, sync")
    def test_pager_protocol_violation_empty_next_sync(self) -> None:
        fetcher = FakeFetcher({START_URL: Page(has_more=True, data=[1], next="")})
        pager = Pager(fetcher=fetcher, url=START_URL)

        with pytest.raises(PagerProtocolException):
            pager.advance()
        assert pager.consumed == 0
        assert pager.pages_retrieved == 0

    @pytest.mark.describe("test of pager ignoring next on the last page, sync")
    def test_pager_ignores_next_on_last_page_sync(self) -> None:
        pages = {
            START_URL: Page(has_more=False, data=[1], next="/things?cursor=bogus"),
        }
        fetcher = FakeFetcher(pages)
        pager = Pager(fetcher=fetcher, url=START_URL)

        assert pager.to_list() == [1]
        assert pager.advance() == (None, False)
        assert fetcher.calls == [START_URL]

    @pytest.mark.describe("test of pager reset, sync")
    def test_pager_reset_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2], [3]]))
        pager = Pager(fetcher=fetcher, url=START_URL)

        with pytest.raises(UnsupportedPagerOperationException) as exc:
            pager.reset()
        assert exc.value.pager_state == "idle"
        assert pager.state == PagerState.IDLE
        assert fetcher.calls == []

        pager.advance()
        with pytest.raises(NotImplementedError):
            pager.reset()
        assert pager.advance() == (2, True)

        pager.to_list()
        with pytest.raises(UnsupportedPagerOperationException) as exc:
            pager.reset()
        assert exc.value.pager_state == "exhausted"
        assert pager.advance() == (None, False)

    @pytest.mark.describe("test of pager fetch errors leaving it unchanged, sync")
    def test_pager_fetch_error_retry_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2], [3, 4]]))
        fetcher.one_time_errors[page_url(1)] = UnexpectedRecurlyResponseException(
            text="Faulty response from API: missing or invalid 'data'.",
            raw_response={"has_more": True},
        )
        pager = Pager(fetcher=fetcher, url=START_URL)
        assert pager.advance() == (1, True)
        assert pager.advance() == (2, True)

        with pytest.raises(UnexpectedRecurlyResponseException):
            pager.advance()
        assert pager.state == PagerState.STARTED
        assert pager.consumed == 2
        assert pager.pages_retrieved == 1
        assert pager.next_url == page_url(1)

        assert pager.to_list() == [3, 4]
        assert fetcher.calls == [START_URL, page_url(1), page_url(1)]

    @pytest.mark.describe("test of pager fetch errors on the first page, sync")
    def test_pager_first_fetch_error_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1]]))
        fetcher.one_time_errors[START_URL] = ValueError("boom")
        pager = Pager(fetcher=fetcher, url=START_URL)

        with pytest.raises(ValueError):
            pager.advance()
        assert pager.state == PagerState.IDLE
        assert pager.pages_retrieved == 0
        assert pager.advance() == (1, True)

    @pytest.mark.describe("test of pager iteration protocol, sync")
    def test_pager_iteration_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2], [3], [4, 5]]))
        pager = Pager(fetcher=fetcher, url=START_URL)

        collected: list[int] = []
        for item in pager:
            collected.append(item)
            if item == 3:
                break
        assert collected == [1, 2, 3]
        assert pager.state == PagerState.STARTED
        assert list(pager) == [4, 5]
        assert pager.state == PagerState.EXHAUSTED

    @pytest.mark.describe("test of pager mapping function, sync")
    def test_pager_mapper_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[{"code": "a"}], [{"code": "b"}]]))
        pager = Pager(
            fetcher=fetcher,
            url=START_URL,
            mapper=lambda item: item["code"].upper(),
        )

        assert pager.advance() == ("A", True)
        assert pager.to_list() == ["B"]

    @pytest.mark.describe("test of pager has_next, sync")
    def test_pager_has_next_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1], [], [2]]))
        pager = Pager(fetcher=fetcher, url=START_URL)

        assert pager.has_next()
        assert pager.consumed == 0
        assert pager.state == PagerState.IDLE
        assert pager.advance() == (1, True)
        assert pager.has_next()
        assert pager.pages_retrieved == 3
        assert pager.consumed == 1
        assert pager.advance() == (2, True)
        assert not pager.has_next()

    @pytest.mark.describe("test of pager consume_buffer, sync")
    def test_pager_consume_buffer_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2, 3, 4], [5]]))
        pager = Pager(fetcher=fetcher, url=START_URL, mapper=lambda x: x * 10)

        assert pager.consume_buffer() == []
        assert pager.buffered_count == 0
        assert fetcher.calls == []

        assert pager.advance() == (10, True)
        assert pager.buffered_count == 3
        assert pager.consume_buffer(2) == [2, 3]
        assert pager.consumed == 3
        assert pager.consume_buffer(0) == []
        assert pager.consume_buffer(10) == [4]
        assert pager.buffered_count == 0
        assert len(fetcher.calls) == 1
        with pytest.raises(ValueError):
            pager.consume_buffer(-1)

        assert pager.to_list() == [50]

    @pytest.mark.describe("test of pager for_each, sync")
    def test_pager_for_each_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2], [3, 4], [5]]))
        pager = Pager(fetcher=fetcher, url=START_URL)

        seen: list[int] = []

        def _visit(item: int) -> bool:
            seen.append(item)
            return item < 3

        pager.for_each(_visit)
        assert seen == [1, 2, 3]
        assert pager.advance() == (4, True)

        pager.for_each(seen.append)
        assert seen == [1, 2, 3, 5]
        assert pager.state == PagerState.EXHAUSTED

    @pytest.mark.describe("test of pager initial properties and repr, sync")
    def test_pager_properties_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2], [3]]))
        pager = Pager(
            fetcher=fetcher,
            url=START_URL,
            params={"limit": 2, "order": None},
        )

        assert pager.state == PagerState.IDLE
        assert pager.has_more
        assert pager.next_url == "/things?limit=2"
        assert pager.pages_retrieved == 0
        assert pager.buffered_count == 0
        assert "idle" in repr(pager)
        assert pager.pager_id != Pager(fetcher=fetcher, url=START_URL).pager_id

        with pytest.raises(ValueError):
            Pager(fetcher=fetcher, url="")

    @pytest.mark.describe("test of pager propagating http errors, sync")
    def test_pager_http_error_sync(self) -> None:
        request = httpx.Request("GET", "https://v3.recurly.com/things")
        response = httpx.Response(
            status_code=404,
            request=request,
            text='{"error": {"type": "not_found", "message": "Nope"}}',
        )
        http_error = RecurlyHttpException.from_httpx_error(
            httpx.HTTPStatusError("404", request=request, response=response)
        )
        fetcher = FakeFetcher(make_pages([[1]]))
        fetcher.one_time_errors[START_URL] = http_error
        pager = Pager(fetcher=fetcher, url=START_URL)

        with pytest.raises(RecurlyHttpException) as exc:
            pager.advance()
        assert exc.value.status_code == 404
        assert pager.state == PagerState.IDLE
        assert pager.advance() == (1, True)

    @pytest.mark.describe("test of pager mapper failures not consuming items, sync")
    def test_pager_mapper_failure_sync(self) -> None:
        fetcher = FakeFetcher(make_pages([[1, 2, 3]]))
        failures = [ValueError("mapping failed")]

        def _flaky_mapper(item: int) -> int:
            if failures:
                raise failures.pop()
            return item * 10

        pager = Pager(fetcher=fetcher, url=START_URL, mapper=_flaky_mapper)

        with pytest.raises(ValueError):
            pager.advance()
        assert pager.consumed == 0
        assert pager.buffered_count == 3
        assert pager.state == PagerState.IDLE
        assert pager.to_list() == [10, 20, 30]
        assert len(fetcher.calls) == 1

    @pytest.mark.describe("test of pager current_page, sync")
    def test_pager_current_page_sync(self) -> None:
        pages = make_pages([[1, 2], [3]])
        fetcher = FakeFetcher(pages)
        pager = Pager(fetcher=fetcher, url=START_URL)

        assert pager.current_page is None
        assert pager.advance() == (1, True)
        assert pager.current_page is pages[START_URL]
        assert pager.current_page is not None
        assert pager.current_page.data == [1, 2]
        assert pager.consume_buffer() == [2]
        assert pager.current_page is pages[START_URL]
        assert len(fetcher.calls) == 1

        assert pager.advance() == (3, True)
        assert pager.current_page is pages[page_url(1)]
        assert pager.advance() == (None, False)
        assert pager.current_page is pages[page_url(1)]
