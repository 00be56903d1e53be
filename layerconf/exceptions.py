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

"""Exception hierarchy for layerconf.

This module defines the exceptions raised by the configuration engine so
callers can tell programmer errors apart from each other:

- SchemaError: A config dataclass cannot be turned into a usable schema
- RegistrationError: A config type was registered twice
- ConfigAccessError: A config type was used before registration or load
- DecodeError: File content does not fit the schema (recovered internally)

All exceptions inherit from LayerConfError, allowing users to catch all
layerconf errors with a single except clause if needed.

Note that file write failures are not wrapped: the OSError raised by the
filesystem reaches the caller of load(), save() or update() unchanged.

Example:
    Catching specific error types:
        ```python
        from layerconf import ConfigManager
        from layerconf.exceptions import NotLoadedError

        manager = ConfigManager()
        manager.register(AppConfig, "config/app.yaml")
        try:
            cfg = manager.get(AppConfig)
        except NotLoadedError as e:
            print(f"Load the config first: {e}")
        ```

    Catching all layerconf errors:
        ```python
        from layerconf.exceptions import LayerConfError

        try:
            manager.register(AppConfig, "config/app.yaml")
        except LayerConfError as e:
            print(f"layerconf error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "LayerConfError",
    "SchemaError",
    "RegistrationError",
    "ConfigAccessError",
    "NotRegisteredError",
    "NotLoadedError",
    "DecodeError",
]


class LayerConfError(Exception):
    """Base exception for all layerconf errors."""

    pass


class SchemaError(LayerConfError):
    """Raised when a config type cannot be described as a schema.

    This exception is raised when there are problems with:

    - A registered type that is not a dataclass
    - A field with no default that is not itself a nested config dataclass
    - A dataclass that contains itself (directly or indirectly)
    - Two leaf fields that map to the same environment variable name

    Schema errors are detected when the type is registered, so they surface
    at startup rather than on first use.
    """

    pass


class RegistrationError(LayerConfError):
    """Raised when a config type is registered more than once.

    The existing registration is left untouched.
    """

    pass


class ConfigAccessError(LayerConfError):
    """Raised when a config type is used in a state that does not allow it."""

    pass


class NotRegisteredError(ConfigAccessError):
    """Raised when a config type was never registered."""

    pass


class NotLoadedError(ConfigAccessError):
    """Raised when a registered config type has not been loaded yet."""

    pass


class DecodeError(LayerConfError):
    """Raised when file content does not match the config schema.

    Example:
        A string where an integer field is declared:
            ```yaml
            server:
              port: "not a number"
            ```

    Note:
        The load and save pipeline catches this error and falls back to
        defaults. It only escapes when layerconf.io.decode() is called
        directly.
    """

    pass
