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

"""Layer resolution for layerconf.

This package combines the three configuration layers and separates them
again before persisting:

- merge: File values over defaults (null/missing fields take the default)
- apply_env: Environment variables over file + defaults
- strip_env_overrides: Runtime value minus environment-forced leaves
- explain: Which layer each leaf value came from

Precedence for any leaf is environment > file > default.
"""

from .env import (
    EnvSettings,
    apply_env,
    env_keys,
    load_dotenv_environ,
    parse_enum,
    parse_field,
    parse_scalar,
)
from .merge import merge
from .provenance import explain, record_file_changes
from .strip import strip_env_overrides

__all__ = [
    "EnvSettings",
    "apply_env",
    "env_keys",
    "explain",
    "load_dotenv_environ",
    "merge",
    "parse_enum",
    "parse_field",
    "parse_scalar",
    "record_file_changes",
    "strip_env_overrides",
]
