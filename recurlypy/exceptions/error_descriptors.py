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


@dataclass
class RecurlyErrorDescriptor:
    """
    An object representing the error returned by the Recurly API in the body
    of a non-success HTTP response, typically with a type, a text message
    and a list of offending parameters.

    Attributes:
        error_type: a string code as found in the API error's "type" field.
        message: the text found in the API error's "message" field.
        params: the list found in the API error's "params" field, if any.
        attributes: a dict with any further key-value pairs returned by the API.
    """

    error_type: str | None
    message: str | None
    params: list[Any]
    attributes: dict[str, Any]

    _known_dict_fields = {
        "object",
        "type",
        "message",
        "params",
    }

    def __init__(self, error_dict: dict[str, Any] | str) -> None:
        if isinstance(error_dict, str):
            self.message = error_dict
            self.error_type = None
            self.params = []
            self.attributes = {}
        else:
            self.error_type = error_dict.get("type")
            self.message = error_dict.get("message")
            self.params = error_dict.get("params") or []
            self.attributes = {
                k: v for k, v in error_dict.items() if k not in self._known_dict_fields
            }

    def __repr__(self) -> str:
        pieces = [
            f"error_type={self.error_type.__repr__()}" if self.error_type else None,
            f"message={self.message.__repr__()}" if self.message else None,
            f"params={self.params.__repr__()}" if self.params else None,
            f"attributes={self.attributes.__repr__()}" if self.attributes else None,
        ]
        return f"{self.__class__.__name__}({', '.join(pc for pc in pieces if pc)})"

    def __str__(self) -> str:
        return self.summary()

    def summary(self) -> str:
        """
        Determine a string succinct description of this descriptor.

        The precise format of this summary is determined by which fields are set.
        """
        if self.message:
            if self.error_type:
                return f"{self.message} ({self.error_type})"
            else:
                return f"{self.message}"
        else:
            if self.error_type:
                return f"{self.error_type}"
            else:
                return ""
