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

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from recurlypy.exceptions import UnexpectedRecurlyResponseException

# A pager reads TRAW from the API and maps them to T if any mapping.
TRAW = TypeVar("TRAW")
T = TypeVar("T")


@dataclass
class Page(Generic[TRAW]):
    """
    A whole pageful of results from a listing endpoint of the Recurly API,
    i.e. the "list" envelope the API wraps the results into:

        {"object": "list", "has_more": true, "data": [...], "next": "/items?..."}

    A page is never modified once received: pagers replace it wholesale
    when moving on to the next one.

    Attributes:
        has_more: whether the API may have further pages beyond this one.
        data: the list of entries obtained on this page, in API order.
        next: an opaque string (a URL, possibly relative to the API root)
            pointing to the next page. It is meaningful only if `has_more`
            is True, and may be None otherwise.
    """

    has_more: bool
    data: list[TRAW]
    next: str | None

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"has_more={self.has_more}",
                f"data=<{len(self.data)} entries>",
                "next=..." if self.next else None,
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @classmethod
    def from_response(cls, raw_response: Any) -> Page[Any]:
        """
        Parse the JSON-decoded response of a listing endpoint into a Page.

        Args:
            raw_response: the dictionary obtained from the API response body.

        Returns:
            a Page with the contents of the response.

        Raises:
            UnexpectedRecurlyResponseException: if the response does not have
                the shape of a list envelope (missing fields, wrong types).
        """

        if not isinstance(raw_response, dict):
            raise UnexpectedRecurlyResponseException(
                text="Faulty response from API: list envelope is not an object.",
                raw_response={"raw_response": raw_response},
            )
        has_more = raw_response.get("has_more")
        if not isinstance(has_more, bool):
            raise UnexpectedRecurlyResponseException(
                text="Faulty response from API: missing or invalid 'has_more'.",
                raw_response=raw_response,
            )
        data = raw_response.get("data")
        if not isinstance(data, list):
            raise UnexpectedRecurlyResponseException(
                text="Faulty response from API: missing or invalid 'data'.",
                raw_response=raw_response,
            )
        next_url = raw_response.get("next")
        if next_url is not None and not isinstance(next_url, str):
            raise UnexpectedRecurlyResponseException(
                text="Faulty response from API: invalid 'next'.",
                raw_response=raw_response,
            )
        return Page(
            has_more=has_more,
            data=data,
            next=next_url,
        )
