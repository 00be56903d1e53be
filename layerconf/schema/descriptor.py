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

"""Schema descriptors for config dataclasses.

A config type is a plain ``@dataclass`` whose fields all have defaults (or are
themselves config dataclasses). build_schema() inspects the class once and
turns it into a ConfigSchema: an ordered tuple of FieldSpec records, each with
a closed FieldKind. Every traversal in layerconf (merge, environment
overrides, stripping, provenance, YAML encode/decode) walks these records
instead of inspecting classes again.

Field Kinds:

- SCALAR: str, int, float, bool, pathlib.Path
- ENUM: enum.Enum subclasses (matched by member name)
- NESTED: another config dataclass
- OPAQUE: anything else (lists, dicts, ...). Merged as a whole value and
  never overridden from the environment.

``Optional[T]`` and ``T | None`` annotations are unwrapped to ``T``.

Schema Checks (raise SchemaError):

- The type is not a dataclass
- A field has no default and is not a nested config dataclass
- A dataclass contains itself, directly or through nested fields
- Two leaf fields produce the same environment variable name
- Type annotations cannot be resolved

Example:
    ```python
    from dataclasses import dataclass, field
    from layerconf.schema import build_schema

    @dataclass(frozen=True)
    class Server:
        host: str = "0.0.0.0"
        port: int = 8080

    @dataclass(frozen=True)
    class Config:
        server: Server = field(default_factory=Server)

    schema = build_schema(Config)
    [f.name for f in schema.fields]  # ["server"]
    ```
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import dataclasses
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import threading
import types
from typing import Any, Union, get_args, get_origin, get_type_hints

from layerconf.exceptions import SchemaError
from layerconf.schema.envkeys import build_env_key, normalize_segment

__all__ = [
    "FieldKind",
    "FieldSpec",
    "ConfigSchema",
    "SCALAR_TYPES",
    "build_schema",
    "clear_schema_cache",
    "iter_leaves",
]

SCALAR_TYPES: tuple[type, ...] = (str, int, float, bool, Path)


class FieldKind(Enum):
    """How a field is treated by merge, env overrides and the codec."""

    SCALAR = "scalar"
    ENUM = "enum"
    NESTED = "nested"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class FieldSpec:
    """Description of one dataclass field.

    Attributes:
        name: Attribute name on the dataclass (also the YAML key).
        kind: Field kind.
        type: Declared type with Optional unwrapped.
        optional: True if the annotation allowed None.
        has_default: True if the dataclass declares a default or factory.
        nested: Schema of the nested dataclass (NESTED fields only).
    """

    name: str
    kind: FieldKind
    type: Any
    optional: bool
    has_default: bool
    nested: ConfigSchema | None = None

    @property
    def env_segment(self) -> str:
        return normalize_segment(self.name)

    @property
    def is_leaf(self) -> bool:
        return self.kind in (FieldKind.SCALAR, FieldKind.ENUM)

    def get(self, instance: Any) -> Any:
        """Read this field from an instance or a partial mapping.

        Partial mappings come from decoded files; a missing key reads as
        None, the same as an explicit null.
        """
        if isinstance(instance, Mapping):
            return instance.get(self.name)
        return getattr(instance, self.name)


@dataclass(frozen=True)
class ConfigSchema:
    """Ordered field descriptors for one config dataclass."""

    type: type
    fields: tuple[FieldSpec, ...]

    @property
    def name(self) -> str:
        return self.type.__name__

    @property
    def env_segment(self) -> str:
        return normalize_segment(self.name)

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def build(self, values: Mapping[str, Any]) -> Any:
        """Construct an instance from field values (missing keys use defaults)."""
        return self.type(**values)


_SCHEMA_CACHE: dict[type, ConfigSchema] = {}
_SCHEMA_LOCK = threading.RLock()


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        non_none = [arg for arg in args if arg is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            return non_none[0], True
    return annotation, False


def _classify(annotation: Any) -> FieldKind:
    if isinstance(annotation, type):
        if dataclasses.is_dataclass(annotation):
            return FieldKind.NESTED
        if issubclass(annotation, Enum):
            return FieldKind.ENUM
    if annotation in SCALAR_TYPES:
        return FieldKind.SCALAR
    return FieldKind.OPAQUE


def _build(cls: type, stack: tuple[type, ...]) -> ConfigSchema:
    if cls in stack:
        chain = " -> ".join(t.__name__ for t in (*stack, cls))
        raise SchemaError(f"Config type {cls.__name__} contains itself: {chain}")

    cached = _SCHEMA_CACHE.get(cls)
    if cached is not None:
        return cached

    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise SchemaError(f"Config type {cls!r} is not a dataclass")

    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError) as err:
        raise SchemaError(
            f"Cannot resolve type annotations of {cls.__name__}: {err}"
        ) from err

    specs: list[FieldSpec] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        declared, optional = _unwrap_optional(hints.get(f.name, Any))
        kind = _classify(declared)
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )
        nested = _build(declared, (*stack, cls)) if kind is FieldKind.NESTED else None
        if not has_default and kind is not FieldKind.NESTED:
            raise SchemaError(
                f"Field {cls.__name__}.{f.name} has no default and no way to "
                f"synthesize one"
            )
        specs.append(
            FieldSpec(
                name=f.name,
                kind=kind,
                type=declared,
                optional=optional,
                has_default=has_default,
                nested=nested,
            )
        )

    schema = ConfigSchema(type=cls, fields=tuple(specs))
    _SCHEMA_CACHE[cls] = schema
    return schema


def iter_leaves(
    schema: ConfigSchema, path: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], FieldSpec]]:
    """Yield (field name path, spec) for every non-nested field, depth first."""
    for spec in schema.fields:
        field_path = (*path, spec.name)
        if spec.kind is FieldKind.NESTED and spec.nested is not None:
            yield from iter_leaves(spec.nested, field_path)
        else:
            yield field_path, spec


def _check_env_collisions(schema: ConfigSchema) -> None:
    seen: dict[str, str] = {}
    for field_path, _spec in iter_leaves(schema):
        key = build_env_key("", (schema.name, *field_path))
        dotted = ".".join(field_path)
        if key in seen:
            raise SchemaError(
                f"Fields {seen[key]!r} and {dotted!r} of {schema.name} both map "
                f"to environment variable suffix {key}"
            )
        seen[key] = dotted


def build_schema(cls: type) -> ConfigSchema:
    """Build (or fetch from cache) the schema for a config dataclass.

    Args:
        cls: The config dataclass.

    Returns:
        The schema describing cls.

    Raises:
        SchemaError: If cls cannot be described (see module docstring).
    """
    with _SCHEMA_LOCK:
        schema = _build(cls, ())
    _check_env_collisions(schema)
    return schema


def clear_schema_cache() -> None:
    """Forget all cached schemas (mainly for tests that redefine classes)."""
    with _SCHEMA_LOCK:
        _SCHEMA_CACHE.clear()
