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

"""YAML reading, writing and typed decoding for config files.

This module is the boundary between the YAML text on disk and config
dataclass instances. It has two halves:

File I/O:

- read_config_file: Parse a YAML file into a mapping. Missing, empty,
  unreadable or malformed files (and top-level non-mappings) read as None so
  the caller can fall back to defaults.
- write_config_file: Dump a mapping as block-style YAML, keeping key order.
  The text goes to a sibling temp file that is then renamed over the target,
  so readers never see a half-written file.

Typed conversion:

- decode: Mapping -> partial mapping of typed field values. Keys missing from
  the file are left out; explicit nulls stay None. Both mean "use the
  default" to merge().
- encode: Config instance -> plain mapping (enums by name, paths as strings,
  nested dataclasses as nested mappings).

Decode Rules:

- int fields accept integers (not booleans)
- float fields accept integers and floats
- bool fields accept booleans only
- str fields accept strings; numbers are converted with str()
- Path fields accept strings
- Enum fields accept member names (case-sensitive)
- Nested fields accept mappings
- Opaque fields (lists, dicts, ...) are taken as-is
- Unknown keys are ignored

Any other value raises DecodeError.

Example:
    ```python
    from pathlib import Path
    from layerconf.io import decode, encode, read_config_file, write_config_file

    schema = build_schema(Config)
    data = read_config_file(Path("config/app.yaml"))
    partial = decode(data, schema) if data is not None else None
    write_config_file(Path("config/app.yaml"), encode(default_of(schema), schema))
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
import os
from pathlib import Path
from typing import Any

import yaml

from layerconf.exceptions import DecodeError
from layerconf.logging import Logger, get_global_logger
from layerconf.schema import ConfigSchema, FieldKind, FieldSpec

__all__ = [
    "decode",
    "dump_yaml",
    "encode",
    "read_config_file",
    "write_config_file",
]


# -------------------------------
# File I/O
# -------------------------------


def read_config_file(path: Path, logger: Logger | None = None) -> dict[str, Any] | None:
    """Read a YAML config file.

    Args:
        path: File to read.
        logger: Receives verbose notes about files that could not be used.

    Returns:
        The top-level mapping, or None if the file is missing, empty,
        unreadable, malformed, or not a mapping.
    """
    if logger is None:
        logger = get_global_logger()

    if not path.exists():
        logger.verbose("LOAD", f"No config file at {path}")
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as err:
        logger.verbose("LOAD", f"Could not read {path}: {err}")
        return None
    except yaml.YAMLError as err:
        logger.verbose("LOAD", f"Malformed YAML in {path}: {err}")
        return None

    if data is None:
        logger.verbose("LOAD", f"Config file is empty: {path}")
        return None
    if not isinstance(data, dict):
        logger.verbose(
            "LOAD", f"Top-level YAML must be a mapping, got {type(data).__name__}: {path}"
        )
        return None
    return data


def dump_yaml(data: Mapping[str, Any]) -> str:
    """Render a mapping as block-style YAML, preserving key order."""
    return yaml.safe_dump(
        dict(data), default_flow_style=False, sort_keys=False, allow_unicode=True
    )


def write_config_file(path: Path, data: Mapping[str, Any]) -> None:
    """Write a mapping to a YAML file, replacing it atomically.

    Creates parent directories if needed.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    text = dump_yaml(data)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


# -------------------------------
# Typed conversion
# -------------------------------


def _mismatch(where: str, spec: FieldSpec, raw: Any) -> DecodeError:
    expected = spec.type.__name__ if isinstance(spec.type, type) else str(spec.type)
    return DecodeError(
        f"{where}: expected {expected}, got {type(raw).__name__} ({raw!r})"
    )


def _decode_scalar(raw: Any, spec: FieldSpec, where: str) -> Any:
    target = spec.type
    if target is bool:
        if isinstance(raw, bool):
            return raw
    elif target is int:
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
    elif target is float:
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return float(raw)
    elif target is str:
        if isinstance(raw, str):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return str(raw)
    elif target is Path:
        if isinstance(raw, str):
            return Path(raw)
    raise _mismatch(where, spec, raw)


def _decode_enum(raw: Any, spec: FieldSpec, where: str) -> Enum:
    if isinstance(raw, spec.type):
        return raw
    if isinstance(raw, str) and raw in spec.type.__members__:
        return spec.type.__members__[raw]
    names = ", ".join(spec.type.__members__)
    raise DecodeError(f"{where}: {raw!r} is not one of {names}")


def decode(
    data: Mapping[str, Any],
    schema: ConfigSchema,
    logger: Logger | None = None,
    _where: str = "",
) -> dict[str, Any]:
    """Convert a parsed YAML mapping into a partial mapping of typed values.

    Args:
        data: Mapping read from the file.
        schema: Schema of the config type.
        logger: Receives verbose notes about ignored keys.

    Returns:
        Field name -> typed value for every field present in ``data``.
        Nested fields become nested partial mappings.

    Raises:
        DecodeError: If a value does not fit its field.
    """
    if logger is None:
        logger = get_global_logger()

    known = {spec.name for spec in schema.fields}
    for key in data:
        if key not in known:
            logger.verbose(
                "LOAD", f"Ignoring unknown key {_where}{key} for {schema.name}"
            )

    values: dict[str, Any] = {}
    for spec in schema.fields:
        if spec.name not in data:
            continue
        raw = data[spec.name]
        where = f"{_where}{spec.name}"

        if raw is None:
            values[spec.name] = None
        elif spec.kind is FieldKind.NESTED:
            if not isinstance(raw, Mapping):
                raise DecodeError(
                    f"{where}: expected a mapping, got {type(raw).__name__}"
                )
            values[spec.name] = decode(raw, spec.nested, logger, f"{where}.")
        elif spec.kind is FieldKind.ENUM:
            values[spec.name] = _decode_enum(raw, spec, where)
        elif spec.kind is FieldKind.SCALAR:
            values[spec.name] = _decode_scalar(raw, spec, where)
        else:
            values[spec.name] = raw

    return values


def _plain(value: Any) -> Any:
    """Convert opaque values into types yaml.safe_dump accepts."""
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return [_plain(item) for item in sorted(value, key=repr)]
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def encode(instance: Any, schema: ConfigSchema) -> dict[str, Any]:
    """Convert a config instance into a plain mapping for YAML output."""
    out: dict[str, Any] = {}
    for spec in schema.fields:
        value = spec.get(instance)
        if value is None:
            out[spec.name] = None
        elif spec.kind is FieldKind.NESTED:
            out[spec.name] = encode(value, spec.nested)
        else:
            out[spec.name] = _plain(value)
    return out
