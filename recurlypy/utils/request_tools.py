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

import datetime
import logging
from typing import Any

import httpx

from recurlypy.constants import QueryParamsType
from recurlypy.exceptions import _TimeoutContext

logger = logging.getLogger(__name__)


def log_httpx_request(
    http_method: str,
    full_url: str,
    request_params: dict[str, Any] | None,
    redacted_request_headers: dict[str, str],
    timeout_context: _TimeoutContext,
) -> None:
    """
    Log the details of an HTTP request for debugging purposes.

    Args:
        http_method: the HTTP verb of the request (e.g. "GET").
        full_url: the URL of the request (e.g. "https://domain.com/full/path").
        request_params: parameters of the request.
        redacted_request_headers: caution, as these will be logged as they are.
        timeout_context: the timeout information attached to the request.
    """
    logger.debug(f"Request URL: {http_method} {full_url}")
    if request_params:
        logger.debug(f"Request params: '{request_params}'")
    if redacted_request_headers:
        logger.debug(f"Request headers: '{redacted_request_headers}'")
    if timeout_context:
        logger.debug(
            f"Timeout (ms): for request {timeout_context.request_ms or '(unset)'} ms"
        )


def log_httpx_response(response: httpx.Response) -> None:
    """
    Log the details of an httpx.Response.

    Args:
        response: the httpx.Response object to log.
    """
    logger.debug(f"Response status code: {response.status_code}")
    logger.debug(f"Response headers: '{response.headers}'")
    logger.debug(f"Response text: '{response.text}'")


class HttpMethod:
    GET = "GET"


def to_httpx_timeout(timeout_context: _TimeoutContext) -> httpx.Timeout | None:
    if timeout_context.request_ms is None or timeout_context.request_ms == 0:
        return None
    else:
        return httpx.Timeout(timeout_context.request_ms / 1000)


def _encode_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    elif isinstance(value, (list, tuple)):
        return ",".join(_encode_query_value(item) for item in value)
    else:
        return str(value)


def encode_query_string(params: QueryParamsType | None) -> str:
    """
    Serialize a mapping of filter parameters into a query string.

    The keys are encoded in their insertion order, so that a given mapping
    always yields the same string. Parameters whose value is None are skipped.

    Args:
        params: a dictionary of parameter names to values. Booleans are
            rendered as "true"/"false", dates and datetimes in ISO-8601 format,
            lists and tuples as comma-separated values.

    Returns:
        the encoded query string, without the leading "?". An empty string
        if there are no parameters to encode.

    Example:
        >>> encode_query_string({"limit": 200, "state": "active", "sort": None})
        'limit=200&state=active'
    """

    if not params:
        return ""
    query_params = httpx.QueryParams(
        [
            (key, _encode_query_value(value))
            for key, value in params.items()
            if value is not None
        ]
    )
    return str(query_params)


def append_query_string(url: str, params: QueryParamsType | None) -> str:
    """Append the encoded parameters, if any, to a URL (possibly with a query)."""

    query_string = encode_query_string(params)
    if not query_string:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query_string}"
