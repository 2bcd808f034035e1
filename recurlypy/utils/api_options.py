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
from typing import Iterable, Sequence

from recurlypy.constants import CallerType
from recurlypy.settings.defaults import (
    DEFAULT_REDACTED_HEADER_NAMES,
    DEFAULT_REQUEST_TIMEOUT_MS,
    FIXED_SECRET_PLACEHOLDER,
)
from recurlypy.utils.unset import _UNSET, UnsetType


@dataclass
class TimeoutOptions:
    """
    The group of settings for the API Options concerning the configured timeouts.

    All timeout values are integers expressed in milliseconds. A timeout of zero
    signifies that no timeout is imposed at all.

    This class is used to override default settings when creating a
    RecurlyClient. Values that are left unspecified keep their defaults.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request, such as
            the fetch of one page by a pager. Defaults to 10 s.
    """

    request_timeout_ms: int | UnsetType = _UNSET


@dataclass
class FullTimeoutOptions(TimeoutOptions):
    """
    The group of settings for the API Options concerning the configured timeouts.

    This is the "full" version of the class, with the guarantee that all of
    its members have defined values.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request.
    """

    request_timeout_ms: int

    def __init__(
        self,
        *,
        request_timeout_ms: int,
    ) -> None:
        TimeoutOptions.__init__(
            self,
            request_timeout_ms=request_timeout_ms,
        )

    def with_override(self, other: TimeoutOptions) -> FullTimeoutOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        return FullTimeoutOptions(
            request_timeout_ms=(
                other.request_timeout_ms
                if not isinstance(other.request_timeout_ms, UnsetType)
                else self.request_timeout_ms
            ),
        )


@dataclass
class APIOptions:
    """
    This class represents all settings that can be configured for how recurlypy
    interacts with the Recurly API.

    In order to customize the behavior from its preset defaults, one should create
    an `APIOptions` object, defining zero, some or all of its members, and pass it
    as the `api_options` argument to the RecurlyClient constructor.

    With the exception of the "additional headers" and the "redacted header
    names", which are merged with the inherited ones, the override logic is the
    following: if an override is provided, it completely replaces the default value.

    Attributes:
        callers: a list of caller identities, i.e. applications, or frameworks,
            on behalf of which API requests are made. Each item is a
            `(name, version)` pair and ends up in the User-Agent header.
        additional_headers: a free-form dictionary of additional headers to
            employ when issuing requests to the API. Headers with a None value
            are not sent.
        redacted_header_names: a set of (case-insensitive) strings denoting the
            headers whose value must not be logged. The "Authorization" header
            is always redacted.
        timeout_options: an instance of `TimeoutOptions`.
    """

    callers: Sequence[CallerType] | UnsetType = _UNSET
    additional_headers: dict[str, str | None] | UnsetType = _UNSET
    redacted_header_names: set[str] | UnsetType = _UNSET
    timeout_options: TimeoutOptions | UnsetType = _UNSET

    def __init__(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        additional_headers: dict[str, str | None] | UnsetType = _UNSET,
        redacted_header_names: Iterable[str] | UnsetType = _UNSET,
        timeout_options: TimeoutOptions | UnsetType = _UNSET,
    ) -> None:
        self.callers = callers
        self.additional_headers = additional_headers
        self.redacted_header_names = (
            _UNSET
            if isinstance(redacted_header_names, UnsetType)
            else set(redacted_header_names)
        )
        self.timeout_options = timeout_options

    def __repr__(self) -> str:
        _redacted_header_names = (
            set()
            if isinstance(self.redacted_header_names, UnsetType)
            else self.redacted_header_names
        )
        _upper_redacted_names = {
            header_name.upper()
            for header_name in _redacted_header_names | DEFAULT_REDACTED_HEADER_NAMES
        }
        _additional_headers: dict[str, str | None] | UnsetType
        if not isinstance(self.additional_headers, UnsetType):
            _additional_headers = {
                k: v
                if k.upper() not in _upper_redacted_names
                else FIXED_SECRET_PLACEHOLDER
                for k, v in self.additional_headers.items()
            }
        else:
            _additional_headers = _UNSET

        non_unset_pieces = [
            pc
            for pc in (
                None
                if isinstance(self.callers, UnsetType)
                else f"callers={self.callers}",
                None
                if isinstance(_additional_headers, UnsetType)
                else f"additional_headers={_additional_headers}",
                None
                if isinstance(self.redacted_header_names, UnsetType)
                else f"redacted_header_names={self.redacted_header_names}",
                None
                if isinstance(self.timeout_options, UnsetType)
                else f"timeout_options={self.timeout_options}",
            )
            if pc is not None
        ]
        inner_desc = ", ".join(non_unset_pieces)
        return f"{self.__class__.__name__}({inner_desc})"


@dataclass
class FullAPIOptions(APIOptions):
    """
    This class represents all settings that can be configured for how recurlypy
    interacts with the Recurly API.

    This is the "full" version of the class, with the guarantee that all of its
    members have defined values. This is what a RecurlyClient has as its
    `.api_options` attribute.
    """

    callers: Sequence[CallerType]
    additional_headers: dict[str, str | None]
    redacted_header_names: set[str]
    timeout_options: FullTimeoutOptions

    def __init__(
        self,
        *,
        callers: Sequence[CallerType],
        additional_headers: dict[str, str | None],
        redacted_header_names: Iterable[str],
        timeout_options: FullTimeoutOptions,
    ) -> None:
        APIOptions.__init__(
            self,
            callers=callers,
            additional_headers=additional_headers,
            redacted_header_names=redacted_header_names,
            timeout_options=timeout_options,
        )

    def __repr__(self) -> str:
        return APIOptions.__repr__(self)

    def with_override(self, other: APIOptions | None | UnsetType) -> FullAPIOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Defined attributes completely replace the pre-existing ones, except for
        `additional_headers` and `redacted_header_names`, which are merged.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        if isinstance(other, UnsetType) or other is None:
            return self

        additional_headers: dict[str, str | None]
        redacted_header_names: set[str]
        timeout_options: FullTimeoutOptions

        if isinstance(other.additional_headers, UnsetType):
            additional_headers = self.additional_headers
        else:
            additional_headers = {
                **self.additional_headers,
                **other.additional_headers,
            }
        if isinstance(other.redacted_header_names, UnsetType):
            redacted_header_names = self.redacted_header_names
        else:
            redacted_header_names = (
                self.redacted_header_names | other.redacted_header_names
            )
        if isinstance(other.timeout_options, TimeoutOptions):
            timeout_options = self.timeout_options.with_override(other.timeout_options)
        else:
            timeout_options = self.timeout_options

        return FullAPIOptions(
            callers=(
                other.callers
                if not isinstance(other.callers, UnsetType)
                else self.callers
            ),
            additional_headers=additional_headers,
            redacted_header_names=redacted_header_names,
            timeout_options=timeout_options,
        )


defaultTimeoutOptions = FullTimeoutOptions(
    request_timeout_ms=DEFAULT_REQUEST_TIMEOUT_MS,
)


def defaultAPIOptions() -> FullAPIOptions:
    """
    Return the default APIOptions object, based on 'grand defaults'
    hardcoded in recurlypy.
    """

    return FullAPIOptions(
        callers=[],
        additional_headers={},
        redacted_header_names=set(),
        timeout_options=defaultTimeoutOptions,
    )
