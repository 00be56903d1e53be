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

"""Environment variable naming for config fields.

Every leaf field maps to exactly one environment variable:

    <PREFIX>_<TYPE>_<FIELD>[_<NESTED>...]

Segments are uppercased, and characters that are awkward in variable names
("." and "-") become underscores. An empty prefix drops the leading part.

Example:
    ```python
    build_env_key("APP", ["CONFIG", "SERVER", "PORT"])
    # -> "APP_CONFIG_SERVER_PORT"
    ```
"""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_ENV_PREFIX = "LAYERCONF"


def normalize_prefix(prefix: str) -> str:
    """Trim surrounding whitespace and trailing underscores from a prefix."""
    return prefix.strip().rstrip("_")


def normalize_segment(segment: str) -> str:
    """Uppercase a path segment and replace "." and "-" with "_"."""
    return segment.replace(".", "_").replace("-", "_").upper()


def build_env_key(prefix: str, parts: Iterable[str]) -> str:
    """Build the full environment variable name for a field path.

    Args:
        prefix: Variable prefix (already normalized). May be empty.
        parts: Path segments, type name first.

    Returns:
        The environment variable name.
    """
    body = "_".join(normalize_segment(part) for part in parts)
    return f"{prefix}_{body}" if prefix else body
