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

"""Structural merge of loaded config values with defaults.

The merge is field-by-field with "loaded wins unless null":

    - **Leaf / opaque fields**: loaded value if not None, else the default
    - **Nested fields**: merged recursively, so a partially specified block
      still gets its missing leaves from the defaults
    - **Missing fields**: treated exactly like None

Lists and dicts are OPAQUE fields and are therefore replaced, never
concatenated, matching the deep-merge rules of YAML layering.

The loaded side may be a config instance or a partial mapping produced by
layerconf.io.decode(). The result is always a new instance; inputs are
never mutated.
"""

from __future__ import annotations

from typing import Any

from layerconf.schema import ConfigSchema, FieldKind, default_of

__all__ = ["merge"]


def merge(loaded: Any, defaults: Any, schema: ConfigSchema) -> Any:
    """Merge a loaded (possibly partial) value with defaults.

    Args:
        loaded: Config instance, partial mapping, or None.
        defaults: Fully populated default instance of the same type.
        schema: Schema of the config type.

    Returns:
        A new instance with no missing values where defaults has none.

    Example:
        ```python
        schema = build_schema(Config)
        merged = merge({"server": {"port": 9000}}, default_of(schema), schema)
        merged.server.port  # 9000
        merged.server.host  # "0.0.0.0" (from defaults)
        ```
    """
    if loaded is None:
        return defaults

    values: dict[str, Any] = {}
    for spec in schema.fields:
        default_value = spec.get(defaults)
        loaded_value = spec.get(loaded)

        if loaded_value is None:
            values[spec.name] = default_value
        elif spec.kind is FieldKind.NESTED:
            base = default_value if default_value is not None else default_of(spec.nested)
            values[spec.name] = merge(loaded_value, base, spec.nested)
        else:
            values[spec.name] = loaded_value

    return schema.build(values)
