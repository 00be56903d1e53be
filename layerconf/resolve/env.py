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

"""Environment variable overrides for config instances.

Every leaf field of a registered config type can be overridden at runtime by
an environment variable named after its path:

    <PREFIX>_<TYPE>_<FIELD>[_<NESTED>...]

For example, with prefix "APP" the field ``server.port`` of ``Config`` reads
``APP_CONFIG_SERVER_PORT``.

Parsing Rules:

- str: used verbatim
- int: optional sign and decimal digits
- float: decimal or exponent notation (no nan, inf or underscores)
- bool: "true"/"1" and "false"/"0", case-insensitive
- Path: Path(raw)
- Enum: exact (case-sensitive) member name

A value that does not parse is ignored with a warning and the field keeps its
file/default value. A value that parses but is refused by the dataclass
constructor is dropped the same way, one variable at a time, so the other
overrides of that block still apply. Invalid overrides never abort a load.

Nested fields recurse with the path extended by the field name. When the
nested value is absent, a fresh default instance is used as the base so the
environment can populate a block the file omitted entirely.

Example:
    Resolve overrides against an injected environment:
        ```python
        settings = EnvSettings(prefix="APP", environ={"APP_CONFIG_SERVER_PORT": "9000"})
        resolved = apply_env(merged, build_schema(Config), settings)
        resolved.server.port  # 9000
        ```
"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
import os
from pathlib import Path
import re
from typing import Any

from dotenv import dotenv_values

from layerconf.logging import Logger, get_global_logger
from layerconf.schema import (
    DEFAULT_ENV_PREFIX,
    ConfigSchema,
    FieldKind,
    FieldSpec,
    build_env_key,
    default_of,
    iter_leaves,
    normalize_prefix,
)

__all__ = [
    "EnvSettings",
    "apply_env",
    "env_keys",
    "load_dotenv_environ",
    "parse_enum",
    "parse_field",
    "parse_scalar",
]

_TRUE_VALUES = ("true", "1")
_FALSE_VALUES = ("false", "0")

# Plain decimal literals only: no whitespace, underscores, nan or inf
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


@dataclass(frozen=True)
class EnvSettings:
    """Settings controlling environment overrides.

    Attributes:
        prefix: Variable prefix, normalized (no trailing underscore).
        enabled: If False, no overrides are applied.
        environ: Mapping to read variables from. None means the live
            process environment (os.environ).
    """

    prefix: str = DEFAULT_ENV_PREFIX
    enabled: bool = True
    environ: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "prefix", normalize_prefix(self.prefix))

    def lookup(self, key: str) -> str | None:
        """Return the raw value of an environment variable, or None if unset."""
        source = self.environ if self.environ is not None else os.environ
        return source.get(key)

    def is_set(self, key: str) -> bool:
        return self.lookup(key) is not None

    def key_for(self, path: Sequence[str]) -> str:
        return build_env_key(self.prefix, path)


def load_dotenv_environ(
    dotenv_path: str | os.PathLike[str], base: Mapping[str, str] | None = None
) -> Mapping[str, str]:
    """Layer a .env file underneath an environment mapping.

    Variables already present in ``base`` (default: os.environ) win over the
    file. Keys declared without a value in the file are skipped.

    Args:
        dotenv_path: Path to the .env file. A missing file adds nothing.
        base: Mapping that takes precedence over the file.

    Returns:
        A read-only view combining both sources.
    """
    file_values = {
        key: value
        for key, value in dotenv_values(dotenv_path).items()
        if value is not None
    }
    return ChainMap(base if base is not None else os.environ, file_values)


def parse_scalar(raw: str, target: type) -> Any:
    """Parse a raw environment string into a scalar type.

    Raises:
        ValueError: If the string is not a valid value of ``target``.
    """
    if target is str:
        return raw
    if target is bool:
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if target is int:
        if not _INT_PATTERN.fullmatch(raw):
            raise ValueError(f"not an integer: {raw!r}")
        return int(raw)
    if target is float:
        if not _FLOAT_PATTERN.fullmatch(raw):
            raise ValueError(f"not a number: {raw!r}")
        return float(raw)
    if target is Path:
        if not raw:
            raise ValueError("empty path")
        return Path(raw)
    raise ValueError(f"unsupported scalar type {target!r}")


def parse_enum(raw: str, enum_type: type[Enum]) -> Enum:
    """Match a raw string against enum member names (case-sensitive).

    Raises:
        ValueError: If no member has that name.
    """
    member = enum_type.__members__.get(raw)
    if member is None:
        raise ValueError(f"not a member of {enum_type.__name__}: {raw!r}")
    return member


def _expected(spec: FieldSpec) -> str:
    if spec.kind is FieldKind.ENUM:
        return f"enum {spec.type.__name__}"
    return spec.type.__name__


def parse_field(raw: str, spec: FieldSpec) -> Any:
    """Parse a raw environment value for a leaf field.

    Raises:
        ValueError: If the value does not parse for the field's type.
    """
    if spec.kind is FieldKind.ENUM:
        return parse_enum(raw, spec.type)
    if spec.kind is FieldKind.SCALAR:
        return parse_scalar(raw, spec.type)
    raise ValueError(f"field {spec.name!r} cannot be set from the environment")


def apply_env(
    instance: Any,
    schema: ConfigSchema,
    settings: EnvSettings,
    path: Sequence[str] | None = None,
    logger: Logger | None = None,
) -> Any:
    """Return a copy of ``instance`` with environment overrides applied.

    Args:
        instance: Fully merged config instance.
        schema: Schema of the instance's type.
        settings: Prefix and environment source.
        path: Segments leading to this instance. Defaults to the type name,
            which is what top-level callers want.
        logger: Receives warnings for invalid values. Defaults to the
            global logger.

    Returns:
        A new instance. Fields with no (valid) override keep their value.
    """
    if logger is None:
        logger = get_global_logger()
    if path is None:
        path = (schema.env_segment,)

    values: dict[str, Any] = {}
    # field name -> (label for warnings, overridden value)
    changes: dict[str, tuple[str, Any]] = {}
    for spec in schema.fields:
        current = spec.get(instance)
        values[spec.name] = current
        field_path = (*path, spec.env_segment)

        if spec.kind is FieldKind.NESTED:
            base = current if current is not None else default_of(spec.nested)
            resolved = apply_env(base, spec.nested, settings, field_path, logger)
            if resolved != base:
                changes[spec.name] = (f"{settings.key_for(field_path)}_*", resolved)
            continue

        if spec.kind is FieldKind.OPAQUE:
            continue

        key = settings.key_for(field_path)
        raw = settings.lookup(key)
        if raw is None:
            continue

        try:
            changes[spec.name] = (key, parse_field(raw, spec))
        except ValueError:
            logger.warning(
                "ENV",
                f"Invalid environment value for '{key}'. Expected "
                f"{_expected(spec)}, got '{raw}'. This override will be ignored.",
            )
        else:
            logger.debug("ENV", f"{key} overrides {'.'.join(field_path[1:])}")

    return _build_with_overrides(schema, values, changes, logger)


def _build_with_overrides(
    schema: ConfigSchema,
    values: dict[str, Any],
    changes: dict[str, tuple[str, Any]],
    logger: Logger,
) -> Any:
    """Build an instance, dropping only the overrides its constructor refuses."""
    try:
        return schema.build({**values, **{n: v for n, (_, v) in changes.items()}})
    except (TypeError, ValueError):
        if not changes:
            raise

    accepted = dict(values)
    for name, (label, value) in changes.items():
        trial = {**accepted, name: value}
        try:
            schema.build(trial)
        except (TypeError, ValueError) as err:
            logger.warning(
                "ENV",
                f"Environment value for '{label}' was rejected by {schema.name}: "
                f"{err}. This override will be ignored.",
            )
        else:
            accepted = trial
    return schema.build(accepted)


def env_keys(schema: ConfigSchema, settings: EnvSettings) -> tuple[str, ...]:
    """List the environment variable for every overridable leaf of a schema."""
    return tuple(
        settings.key_for((schema.env_segment, *field_path))
        for field_path, spec in iter_leaves(schema)
        if spec.is_leaf
    )
