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

"""Per-field provenance of resolved config values.

A leaf is reported as coming from:

- env: its variable is set and the override was applied
- file: the file supplied a non-null value (as read before self-healing,
  plus any value written by a later update)
- default: otherwise
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from layerconf.resolve.env import EnvSettings, parse_field
from layerconf.results import FieldReport, ValueSource
from layerconf.schema import ConfigSchema, FieldKind, FieldSpec, default_of

__all__ = ["explain", "record_file_changes"]


def _source_of(
    spec: FieldSpec,
    value: Any,
    file_value: Any,
    env_key: str | None,
    settings: EnvSettings,
) -> ValueSource:
    if env_key is not None and settings.enabled:
        raw = settings.lookup(env_key)
        if raw is not None:
            try:
                parsed = parse_field(raw, spec)
            except ValueError:
                pass
            else:
                if parsed == value:
                    return "env"
    if file_value is not None:
        return "file"
    return "default"


def explain(
    resolved: Any,
    file_values: Any,
    schema: ConfigSchema,
    settings: EnvSettings,
    path: Sequence[str] | None = None,
) -> tuple[FieldReport, ...]:
    """Report the source layer of every leaf in a resolved config.

    Args:
        resolved: Resolved instance (what ConfigManager.get() returns).
        file_values: Partial mapping decoded from the file, or None.
        schema: Schema of the config type.
        settings: Prefix and environment source.
        path: Segments leading to this instance. Defaults to the type name.

    Returns:
        One FieldReport per leaf, in declaration order.
    """
    if path is None:
        path = (schema.env_segment,)

    reports: list[FieldReport] = []
    for spec in schema.fields:
        field_path = (*path, spec.env_segment)
        value = spec.get(resolved) if resolved is not None else None
        file_value = spec.get(file_values) if file_values is not None else None

        if spec.kind is FieldKind.NESTED:
            for child in explain(value, file_value, spec.nested, settings, field_path):
                reports.append(
                    FieldReport(
                        path=f"{spec.name}.{child.path}",
                        env_key=child.env_key,
                        value=child.value,
                        source=child.source,
                    )
                )
            continue

        env_key = settings.key_for(field_path) if spec.is_leaf else None
        reports.append(
            FieldReport(
                path=spec.name,
                env_key=env_key,
                value=value,
                source=_source_of(spec, value, file_value, env_key, settings),
            )
        )

    return tuple(reports)


def record_file_changes(
    file_values: Mapping[str, Any] | None,
    persisted: Any,
    previous: Any,
    schema: ConfigSchema,
) -> dict[str, Any]:
    """Add the leaves a save changed on disk to a partial file mapping.

    Args:
        file_values: Partial mapping of values the file supplied so far.
        persisted: Value just written.
        previous: Persisted value before the write (file + defaults).
        schema: Schema of the config type.

    Returns:
        A new partial mapping; leaves whose persisted value differs from
        ``previous`` now count as file-supplied.
    """
    values = dict(file_values) if file_values is not None else {}
    for spec in schema.fields:
        new = spec.get(persisted)
        old = spec.get(previous)

        if spec.kind is FieldKind.NESTED and new is not None:
            nested = values.get(spec.name)
            values[spec.name] = record_file_changes(
                nested if isinstance(nested, Mapping) else None,
                new,
                old if old is not None else default_of(spec.nested),
                spec.nested,
            )
        elif new != old:
            values[spec.name] = new

    return values
