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

"""Removal of environment overrides before persisting.

The in-memory value of a config type mixes three layers (defaults, file,
environment) and may also carry updates made by the application. Only the
first two layers plus those updates may be written back to disk.

strip_env_overrides() rebuilds the persistable value leaf by leaf:

    - env variable for the leaf is set   -> value from the persisted base
    - nested field                       -> recurse
    - otherwise                          -> value from the runtime instance

The persisted base is "file + defaults" re-read from disk at save time, not a
snapshot taken at load time, so external edits to fields forced by the
environment are preserved.

Presence of the variable decides, not whether it parsed: an invalid override
still marks the leaf as environment-controlled and the file keeps its value.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from layerconf.resolve.env import EnvSettings
from layerconf.schema import ConfigSchema, FieldKind, default_of

__all__ = ["strip_env_overrides"]


def strip_env_overrides(
    runtime: Any,
    base: Any,
    schema: ConfigSchema,
    settings: EnvSettings,
    path: Sequence[str] | None = None,
) -> Any:
    """Build the value to persist from a runtime instance.

    Args:
        runtime: Current in-memory value (environment applied, maybe updated).
        base: File + defaults, without environment influence.
        schema: Schema of both instances' type.
        settings: Prefix and environment source.
        path: Segments leading to this instance. Defaults to the type name.

    Returns:
        A new instance containing no environment-sourced values.
    """
    if path is None:
        path = (schema.env_segment,)

    values: dict[str, Any] = {}
    for spec in schema.fields:
        runtime_value = spec.get(runtime)
        base_value = spec.get(base)
        field_path = (*path, spec.env_segment)

        if spec.is_leaf and settings.is_set(settings.key_for(field_path)):
            values[spec.name] = base_value
        elif spec.kind is FieldKind.NESTED and runtime_value is not None:
            # A null block on disk still must not receive env values
            if base_value is None:
                base_value = default_of(spec.nested)
            values[spec.name] = strip_env_overrides(
                runtime_value, base_value, spec.nested, settings, field_path
            )
        else:
            values[spec.name] = runtime_value

    return schema.build(values)
