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

import json
import logging
from typing import Any, Dict, Iterable, Sequence, cast

import httpx

from recurlypy import __version__
from recurlypy.constants import CallerType
from recurlypy.exceptions import (
    RecurlyHttpException,
    UnexpectedRecurlyResponseException,
    _TimeoutContext,
    to_recurly_timeout_exception,
)
from recurlypy.settings.defaults import (
    DEFAULT_RECURLY_ACCEPT_HEADER,
    DEFAULT_REDACTED_HEADER_NAMES,
    FIXED_SECRET_PLACEHOLDER,
)
from recurlypy.utils.request_tools import (
    HttpMethod,
    log_httpx_request,
    log_httpx_response,
    to_httpx_timeout,
)

RECURLYPY_CALLER: CallerType = ("recurlypy", __version__)

logger = logging.getLogger(__name__)


def compose_user_agent(callers: Sequence[CallerType]) -> str:
    """
    Build the User-Agent header value: the callers, outermost first, each as
    "name/version" (or just "name"), followed by "recurlypy/<version>".
    Callers without a name are skipped. For instance, the callers
    `[("my-app", "1.2"), ("framework", None)]` yield
    "my-app/1.2 framework recurlypy/<version>".
    """

    return " ".join(
        f"{name}/{version}" if version else name
        for name, version in [*callers, RECURLYPY_CALLER]
        if name
    )


class APICommander:
    """
    The object in charge of issuing HTTP GET requests to the Recurly API and
    decoding their JSON responses, in either a blocking or an async fashion.

    Each request is executed exactly once: no retry is attempted. The httpx
    clients are never mutated after construction, hence an APICommander can
    be shared by any number of concurrent pagers.
    """

    client = httpx.Client()

    def __init__(
        self,
        *,
        api_endpoint: str,
        headers: dict[str, str | None] = {},
        callers: Sequence[CallerType] = [],
        redacted_header_names: Iterable[str] | None = None,
    ) -> None:
        self.async_client = httpx.AsyncClient()
        self.api_endpoint = api_endpoint.rstrip("/")
        self.headers = headers
        self.callers = callers
        self.redacted_header_names = set(redacted_header_names or [])
        self.upper_full_redacted_header_names = {
            header_name.upper()
            for header_name in (
                self.redacted_header_names | DEFAULT_REDACTED_HEADER_NAMES
            )
        }

        self.full_headers: dict[str, str] = {
            k: v
            for k, v in {
                "Accept": DEFAULT_RECURLY_ACCEPT_HEADER,
                "User-Agent": compose_user_agent(self.callers),
                **self.headers,
            }.items()
            if v is not None
        }
        self._loggable_headers = {
            k: v
            if k.upper() not in self.upper_full_redacted_header_names
            else FIXED_SECRET_PLACEHOLDER
            for k, v in self.full_headers.items()
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"api_endpoint={self.api_endpoint}, callers={self.callers})"
        )

    async def aclose(self) -> None:
        await self.async_client.aclose()

    def _compose_request_url(self, additional_path: str | None) -> str:
        if additional_path:
            # absolute URLs (e.g. pagination cursors from the API) are kept as-is
            if httpx.URL(additional_path).is_absolute_url:
                return additional_path
            return "/".join([self.api_endpoint, additional_path.lstrip("/")])
        else:
            return self.api_endpoint

    def _raw_response_to_json(
        self,
        raw_response: httpx.Response,
    ) -> dict[str, Any]:
        # try to process the httpx raw response into a JSON or throw a failure
        raw_response_json: Any
        try:
            raw_response_json = json.loads(raw_response.text)
        except ValueError:
            # json() parsing has failed (e.g., empty body)
            raise UnexpectedRecurlyResponseException(
                text=f"Unparseable response from API '{raw_response.request.url}'.",
                raw_response={
                    "raw_response": raw_response.text,
                },
            )
        if not isinstance(raw_response_json, dict):
            raise UnexpectedRecurlyResponseException(
                text="Response from API is not a JSON object.",
                raw_response={
                    "raw_response": raw_response.text,
                },
            )
        return cast(Dict[str, Any], raw_response_json)

    def raw_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url = self._compose_request_url(additional_path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            timeout_context=_timeout_context,
        )
        httpx_timeout_s = to_httpx_timeout(_timeout_context)

        try:
            raw_response = self.client.request(
                method=http_method,
                url=request_url,
                params=request_params or None,
                timeout=httpx_timeout_s,
                headers=self.full_headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_recurly_timeout_exception(
                timeout_exc, timeout_context=_timeout_context
            )

        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise RecurlyHttpException.from_httpx_error(http_exc)
        log_httpx_response(response=raw_response)
        return raw_response

    async def async_raw_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url = self._compose_request_url(additional_path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            timeout_context=_timeout_context,
        )
        httpx_timeout_s = to_httpx_timeout(_timeout_context)

        try:
            raw_response = await self.async_client.request(
                method=http_method,
                url=request_url,
                params=request_params or None,
                timeout=httpx_timeout_s,
                headers=self.full_headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_recurly_timeout_exception(
                timeout_exc, timeout_context=_timeout_context
            )

        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise RecurlyHttpException.from_httpx_error(http_exc)
        log_httpx_response(response=raw_response)
        return raw_response

    def request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> dict[str, Any]:
        raw_response = self.raw_request(
            http_method=http_method,
            additional_path=additional_path,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(raw_response)

    async def async_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> dict[str, Any]:
        raw_response = await self.async_raw_request(
            http_method=http_method,
            additional_path=additional_path,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(raw_response)
