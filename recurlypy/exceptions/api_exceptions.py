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
from typing import Any

import httpx

from recurlypy.exceptions.error_descriptors import RecurlyErrorDescriptor


class RecurlyException(Exception):
    """
    The root of all exceptions raised by recurlypy, either while issuing
    requests to the Recurly API or while consuming a pager over its results.
    """

    pass


class RecurlyAPIException(RecurlyException):
    """
    Any exception occurred while issuing requests to the Recurly API
    and specific to it, such as:
      - the API returns a non-success HTTP status code,
      - the API returns a response that cannot be parsed,
    but not, for instance,
      - a network error while sending an HTTP request to the API.
    """

    pass


@dataclass
class RecurlyHttpException(RecurlyAPIException, httpx.HTTPStatusError):
    """
    A request to the Recurly API resulted in an HTTP 4xx or 5xx response.

    The error information found in the response body, if any, is exposed
    in a structured way, while this still is (a subclass of)
    `httpx.HTTPStatusError`. This exception is never retried by recurlypy.

    Attributes:
        text: a text message about the exception.
        status_code: the HTTP status code of the response.
        body: the text of the response body (possibly empty).
        error_descriptors: a list of all RecurlyErrorDescriptor objects
            found in the response.
    """

    text: str | None
    status_code: int | None
    body: str
    error_descriptors: list[RecurlyErrorDescriptor]

    def __init__(
        self,
        text: str | None,
        *,
        httpx_error: httpx.HTTPStatusError,
        status_code: int | None,
        body: str,
        error_descriptors: list[RecurlyErrorDescriptor],
    ) -> None:
        RecurlyAPIException.__init__(self, text)
        httpx.HTTPStatusError.__init__(
            self,
            message=str(httpx_error),
            request=httpx_error.request,
            response=httpx_error.response,
        )
        self.text = text
        self.httpx_error = httpx_error
        self.status_code = status_code
        self.body = body
        self.error_descriptors = error_descriptors

    def __str__(self) -> str:
        return self.text or str(self.httpx_error)

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.HTTPStatusError,
        **kwargs: Any,
    ) -> RecurlyHttpException:
        """Parse a httpx status error into this exception."""

        status_code: int | None
        body: str
        raw_response: dict[str, Any]
        # the attempt to extract a response structure cannot afford failure.
        try:
            status_code = httpx_error.response.status_code
            body = httpx_error.response.text
        except Exception:
            status_code = None
            body = ""
        try:
            raw_response = httpx_error.response.json() or {}
        except Exception:
            raw_response = {}
        error_dict = (
            raw_response.get("error") if isinstance(raw_response, dict) else None
        )
        error_descriptors = (
            [RecurlyErrorDescriptor(error_dict)]
            if isinstance(error_dict, (dict, str))
            else []
        )
        if error_descriptors:
            text = f"{error_descriptors[0].summary()}. {str(httpx_error)}"
        else:
            text = str(httpx_error)

        return cls(
            text=text,
            httpx_error=httpx_error,
            status_code=status_code,
            body=body,
            error_descriptors=error_descriptors,
            **kwargs,
        )


@dataclass
class RecurlyTimeoutException(RecurlyAPIException):
    """
    A Recurly API request timed out.

    Attributes:
        text: a textual description of the error
        timeout_type: this denotes the phase of the HTTP request when the event
            occurred ("connect", "read", "write", "pool") or "generic" if there is
            not a specific phase associated to the exception.
        endpoint: if the timeout is tied to a specific request, this is the
            URL that the request was targeting.
    """

    text: str
    timeout_type: str
    endpoint: str | None

    def __init__(
        self,
        text: str,
        *,
        timeout_type: str,
        endpoint: str | None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.timeout_type = timeout_type
        self.endpoint = endpoint


@dataclass
class UnexpectedRecurlyResponseException(RecurlyAPIException):
    """
    The Recurly API response is malformed in that it cannot be parsed,
    it does not have the expected field(s), or they are of the wrong type.

    When raised while fetching a page for a pager, the fetch is treated
    as never having happened: the pager state is unchanged.

    Attributes:
        text: a text message about the exception.
        raw_response: the response returned by the API (as a dict if it
            could be decoded, otherwise wrapped in a dict as a string).
    """

    text: str
    raw_response: dict[str, Any] | None

    def __init__(
        self,
        text: str,
        raw_response: dict[str, Any] | None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.raw_response = raw_response
