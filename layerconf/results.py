# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Public API return types for layerconf.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Inspecting where each value came from:
        ```python
        for report in manager.explain(Config):
            print(report.path, report.source, report.env_key)
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ValueSource = Literal["default", "file", "env"]


@dataclass(frozen=True)
class FieldReport:
    """Provenance of one leaf field of a resolved config.

    Attributes:
        path: Dotted field path (e.g., "server.port").
        env_key: Environment variable that overrides this field, or None
            for fields that cannot be overridden (lists, dicts, ...).
        value: Resolved value.
        source: Layer the value came from: "default", "file" or "env".
    """

    path: str
    env_key: str | None
    value: Any
    source: ValueSource
