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

# Defaults/settings for the Recurly v3 API
DEFAULT_RECURLY_API_URL = "https://v3.recurly.com"
DEFAULT_RECURLY_API_VERSION = "v2021-02-25"
DEFAULT_RECURLY_ACCEPT_HEADER = (
    f"application/vnd.recurly.{DEFAULT_RECURLY_API_VERSION}+json"
)
DEFAULT_RECURLY_AUTH_HEADER = "Authorization"
DEFAULT_REQUEST_TIMEOUT_MS = 10000

# Paths for the listing endpoints offered by the client
ITEMS_PATH = "/items"
ACCOUNTS_PATH = "/accounts"
SUBSCRIPTIONS_PATH = "/subscriptions"
PLANS_PATH = "/plans"

# Settings for redacting secrets in string representations and logging
FIXED_SECRET_PLACEHOLDER = "***"
DEFAULT_REDACTED_HEADER_NAMES = {
    DEFAULT_RECURLY_AUTH_HEADER,
}
