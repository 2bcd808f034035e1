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
from types import TracebackType
from typing import Any, Callable, Sequence, TypeVar

from recurlypy.constants import CallerType, DefaultResourceType, QueryParamsType
from recurlypy.data.pagers.list_pager import Pager
from recurlypy.data.pagers.pagination import Page
from recurlypy.exceptions import _TimeoutContext
from recurlypy.settings.defaults import (
    ACCOUNTS_PATH,
    DEFAULT_RECURLY_API_URL,
    ITEMS_PATH,
    PLANS_PATH,
    SUBSCRIPTIONS_PATH,
)
from recurlypy.utils.api_commander import APICommander
from recurlypy.utils.api_options import (
    APIOptions,
    defaultAPIOptions,
)
from recurlypy.utils.request_tools import HttpMethod
from recurlypy.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)

TNEW = TypeVar("TNEW")


class RecurlyClient:
    """
    A client for the Recurly v3 API. This is the entry point to list the
    resources (items, accounts, subscriptions, plans...) through pagers.

    The client is the object pagers rely upon to fetch their pages: it issues
    exactly one GET request per page, either blocking or async, and parses
    the response into a `Page`. The client holds no per-listing state, hence
    it can be shared freely among any number of pagers.

    Args:
        api_url: the root URL of the API. Defaults to "https://v3.recurly.com".
        headers: additional headers to send with each request, such as the
            "Authorization" header (whose value is never logged).
        callers: a list of caller identities, i.e. applications, or frameworks,
            on behalf of which API calls are performed. These end up in the
            request user-agent. Each caller identity is a
            ("caller_name", "caller_version") pair.
        api_options: a specification - complete or partial - of the API Options
            to override the system defaults. If this is passed alongside the
            named parameters (headers, callers), those will take precedence.

    Example:
        >>> from recurlypy import RecurlyClient
        >>> client = RecurlyClient(headers={"Authorization": "Basic ..."})
        >>> for item in client.list_items(params={"limit": 200, "state": "active"}):
        ...     print(item["code"])
        ...
        gift-card
        t-shirt
    """

    def __init__(
        self,
        *,
        api_url: str | None = None,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> None:
        arg_api_options = APIOptions(
            callers=callers,
            additional_headers=headers,
        )
        self.api_options = (
            defaultAPIOptions()
            .with_override(api_options)
            .with_override(arg_api_options)
        )
        self.api_url = api_url or DEFAULT_RECURLY_API_URL
        self._api_commander = APICommander(
            api_endpoint=self.api_url,
            headers=self.api_options.additional_headers,
            callers=self.api_options.callers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}("{self.api_url}", {self.api_options})'

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, RecurlyClient):
            return all(
                [
                    self.api_url == other.api_url,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    async def __aenter__(self) -> RecurlyClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the resources (connections) held by the async HTTP client."""

        await self._api_commander.aclose()

    def _get_timeout_context(self) -> _TimeoutContext:
        return _TimeoutContext(
            request_ms=self.api_options.timeout_options.request_timeout_ms,
            label="request_timeout_ms",
        )

    def fetch_page(self, url: str) -> Page[DefaultResourceType]:
        """
        Fetch a single page of a listing, issuing one blocking GET request.

        Args:
            url: the URL of the page. Relative URLs (such as the "next" cursors
                returned by the API) are resolved against the API root.

        Returns:
            the Page parsed from the response.

        Raises:
            RecurlyHttpException: if the API responds with a 4xx/5xx status.
            RecurlyTimeoutException: if the request times out.
            UnexpectedRecurlyResponseException: if the body is not a list envelope.
        """

        logger.info(f"fetching page '{url}'")
        raw_response = self._api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=url,
            timeout_context=self._get_timeout_context(),
        )
        logger.info(f"finished fetching page '{url}'")
        return Page.from_response(raw_response)

    async def async_fetch_page(self, url: str) -> Page[DefaultResourceType]:
        """
        Fetch a single page of a listing, issuing one async GET request.
        Cancelling the awaiting task cancels the request as well.

        Args:
            url: the URL of the page. Relative URLs (such as the "next" cursors
                returned by the API) are resolved against the API root.

        Returns:
            the Page parsed from the response.

        Raises:
            the same exceptions as `fetch_page`.
        """

        logger.info(f"fetching page '{url}', async")
        raw_response = await self._api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=url,
            timeout_context=self._get_timeout_context(),
        )
        logger.info(f"finished fetching page '{url}', async")
        return Page.from_response(raw_response)

    def paginate(
        self,
        path: str,
        *,
        params: QueryParamsType | None = None,
        mapper: Callable[[DefaultResourceType], TNEW] | None = None,
    ) -> Pager[DefaultResourceType, TNEW]:
        """
        Create a pager over the results of a listing endpoint. No request is
        issued until the pager is first advanced.

        Args:
            path: the path of the listing endpoint, e.g. "/accounts".
            params: optional filtering parameters for the listing, such as
                `{"limit": 200, "sort": "created_at", "order": "asc"}`.
            mapper: an optional function applied to each resource (a dictionary)
                as it is yielded by the pager.

        Returns:
            a Pager, ready to be consumed.
        """

        return Pager(
            fetcher=self,
            url=path,
            params=params,
            mapper=mapper,
        )

    def list_items(
        self,
        *,
        params: QueryParamsType | None = None,
        mapper: Callable[[DefaultResourceType], TNEW] | None = None,
    ) -> Pager[DefaultResourceType, TNEW]:
        """
        Create a pager over the items of the site.

        Args:
            params: optional filtering parameters, see `paginate`.
            mapper: an optional function applied to each item.

        Returns:
            a Pager over the items.
        """

        return self.paginate(ITEMS_PATH, params=params, mapper=mapper)

    def list_accounts(
        self,
        *,
        params: QueryParamsType | None = None,
        mapper: Callable[[DefaultResourceType], TNEW] | None = None,
    ) -> Pager[DefaultResourceType, TNEW]:
        """
        Create a pager over the accounts of the site.

        Args:
            params: optional filtering parameters, see `paginate`.
            mapper: an optional function applied to each account.

        Returns:
            a Pager over the accounts.
        """

        return self.paginate(ACCOUNTS_PATH, params=params, mapper=mapper)

    def list_subscriptions(
        self,
        *,
        params: QueryParamsType | None = None,
        mapper: Callable[[DefaultResourceType], TNEW] | None = None,
    ) -> Pager[DefaultResourceType, TNEW]:
        """Create a pager over the subscriptions of the site."""

        return self.paginate(SUBSCRIPTIONS_PATH, params=params, mapper=mapper)

    def list_plans(
        self,
        *,
        params: QueryParamsType | None = None,
        mapper: Callable[[DefaultResourceType], TNEW] | None = None,
    ) -> Pager[DefaultResourceType, TNEW]:
        """Create a pager over the plans of the site."""

        return self.paginate(PLANS_PATH, params=params, mapper=mapper)
