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

import importlib.metadata


def get_version() -> str:
    try:
        return importlib.metadata.version(__package__ or "recurlypy")

    # If the package is not installed, the version cannot be determined
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


__version__: str = get_version()


import recurlypy.exceptions  # noqa: E402
import recurlypy.pagers  # noqa: F401, E402
from recurlypy.client import RecurlyClient  # noqa: E402
from recurlypy.data.pagers.list_pager import Pager  # noqa: E402
from recurlypy.data.pagers.pager import PagerState  # noqa: E402
from recurlypy.data.pagers.pagination import Page  # noqa: E402
from recurlypy.utils.api_options import APIOptions, TimeoutOptions  # noqa: E402

__all__ = [
    "APIOptions",
    "Page",
    "Pager",
    "PagerState",
    "RecurlyClient",
    "TimeoutOptions",
    "__version__",
]


__pdoc__ = {
    "data": False,
    "settings": False,
    "utils": False,
}
