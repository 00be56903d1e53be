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

"""Default construction of config instances."""

from __future__ import annotations

from typing import Any

from layerconf.exceptions import SchemaError
from layerconf.schema.descriptor import ConfigSchema, FieldKind, build_schema

__all__ = ["default_of"]


def default_of(target: ConfigSchema | type) -> Any:
    """Create an instance using only declared defaults.

    Nested config fields declared without a default are filled with their
    own default instance, recursively.

    Args:
        target: A config dataclass or its schema.

    Returns:
        A fully populated instance.

    Raises:
        SchemaError: If the schema is invalid or the dataclass rejects its
            own defaults.
    """
    schema = target if isinstance(target, ConfigSchema) else build_schema(target)

    values: dict[str, Any] = {}
    for spec in schema.fields:
        if not spec.has_default and spec.kind is FieldKind.NESTED:
            values[spec.name] = default_of(spec.nested)

    try:
        return schema.build(values)
    except (TypeError, ValueError) as err:
        raise SchemaError(
            f"Cannot construct default {schema.name}: {err}"
        ) from err
