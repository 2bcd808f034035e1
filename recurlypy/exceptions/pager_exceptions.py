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

from recurlypy.exceptions.api_exceptions import RecurlyException


@dataclass
class PagerException(RecurlyException):
    """
    An operation on a pager could not be carried out.

    Attributes:
        text: a text message about the exception.
        pager_state: a string description of the current state
            of the pager. See the documentation for PagerState.
    """

    text: str
    pager_state: str

    def __init__(
        self,
        text: str,
        *,
        pager_state: str,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.pager_state = pager_state


@dataclass
class PagerProtocolException(PagerException):
    """
    The API returned a page declaring that more pages exist, but without
    a usable cursor to reach the next one. The page is discarded and the
    pager cannot be used any further: each subsequent attempt to advance it
    raises this very exception again, without contacting the API.

    Attributes:
        text: a text message about the exception.
        pager_state: a string description of the state of the pager.
        url: the URL that returned the offending page.
    """

    url: str | None

    def __init__(
        self,
        text: str,
        *,
        pager_state: str,
        url: str | None,
    ) -> None:
        super().__init__(text, pager_state=pager_state)
        self.url = url


class PagerCancelledException(PagerException):
    """
    An asynchronous page fetch was abandoned because its cancellation signal
    fired before the API responded. The pager is left exactly as it was
    before the fetch attempt, so the same operation can be retried safely.
    """

    pass


class UnsupportedPagerOperationException(PagerException, NotImplementedError):
    """
    The requested operation is not supported by pagers, which are single-pass:
    they can be neither rewound nor restarted.
    """

    pass
