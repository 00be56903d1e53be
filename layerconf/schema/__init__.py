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

"""Config type descriptors for layerconf.

This package turns config dataclasses into explicit schemas and builds
default instances from them:

- build_schema: Describe a dataclass as an ordered list of FieldSpec records
- default_of: Construct an instance from declared defaults only
- build_env_key: Map a field path to its environment variable name

Example:
    ```python
    from layerconf.schema import build_schema, default_of

    schema = build_schema(Config)
    defaults = default_of(schema)
    ```
"""

from .defaults import default_of
from .descriptor import (
    SCALAR_TYPES,
    ConfigSchema,
    FieldKind,
    FieldSpec,
    build_schema,
    clear_schema_cache,
    iter_leaves,
)
from .envkeys import (
    DEFAULT_ENV_PREFIX,
    build_env_key,
    normalize_prefix,
    normalize_segment,
)

__all__ = [
    "ConfigSchema",
    "DEFAULT_ENV_PREFIX",
    "FieldKind",
    "FieldSpec",
    "SCALAR_TYPES",
    "build_env_key",
    "build_schema",
    "clear_schema_cache",
    "default_of",
    "iter_leaves",
    "normalize_prefix",
    "normalize_segment",
]
