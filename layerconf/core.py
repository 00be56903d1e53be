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

"""Config registry and load/update/save pipeline.

ConfigManager owns one entry per registered config dataclass: the backing
YAML file, the schema, and the currently published resolved value.

Pipeline
--------
load(cls):
    1. Read the YAML file (missing/empty/malformed -> no content).
    2. Merge file content over the type's defaults.
    3. Write the merged value back (self-healing: new fields appear,
       broken files are replaced by a clean one).
    4. Apply environment overrides (if enabled).
    5. Publish the result for get().

update(cls, transform):
    Apply transform to the current value, re-apply environment overrides so
    the environment keeps winning in memory, publish, then save().

save(cls):
    1. Re-read file + defaults from disk (the persisted base).
    2. For every leaf whose env variable is set under the settings that
       resolved the value (prefix and enabled flag as they were at load or
       update), take the base value; otherwise take the in-memory value.
    3. Write the result.

The file never receives an environment-sourced value, no matter how many
load/update/save cycles run.

Thread Safety
-------------
Registration is guarded by a registry lock. File work for one type (load,
update, save, explain) is serialized by a per-entry lock, so two concurrent
update() calls cannot lose each other's change. get() does not lock: the
published value is swapped as a whole and never mutated in place.

Example:
    Basic usage:
        ```python
        from dataclasses import dataclass, field, replace
        from layerconf import ConfigManager

        @dataclass(frozen=True)
        class Server:
            host: str = "0.0.0.0"
            port: int = 8080

        @dataclass(frozen=True)
        class Config:
            server: Server = field(default_factory=Server)

        manager = ConfigManager(env_prefix="APP")
        manager.register(Config, "config/app.yaml")
        manager.load_all()

        port = manager.get(Config).server.port   # APP_CONFIG_SERVER_PORT wins
        manager.update(Config, lambda c: replace(c, server=replace(c.server, host="::")))
        ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
import os
from pathlib import Path
import threading
from typing import Any, TypeVar

from layerconf.exceptions import (
    DecodeError,
    NotLoadedError,
    NotRegisteredError,
    RegistrationError,
)
from layerconf.io import decode, encode, read_config_file, write_config_file
from layerconf.logging import Logger, get_global_logger
from layerconf.resolve import (
    EnvSettings,
    apply_env,
    env_keys,
    explain,
    load_dotenv_environ,
    merge,
    record_file_changes,
    strip_env_overrides,
)
from layerconf.results import FieldReport
from layerconf.schema import (
    DEFAULT_ENV_PREFIX,
    ConfigSchema,
    build_schema,
    default_of,
)

__all__ = ["ConfigEntry", "ConfigManager"]

T = TypeVar("T")


@dataclass
class ConfigEntry:
    """Registry record for one config type.

    Attributes:
        type: The config dataclass.
        path: Backing YAML file.
        schema: Schema built at registration.
        value: Published resolved value (None until first load).
        resolved_with: Env settings whose overrides may be in ``value``.
            Saving strips the variables of each of them, so changing the
            prefix or disabling overrides after a load cannot leak an
            applied override into the file. Reset on every load.
        file_values: Partial mapping the file supplied, decoded before the
            load rewrote it and extended by every later save. None if the
            file was missing or unusable.
        lock: Serializes file work for this type.
    """

    type: type
    path: Path
    schema: ConfigSchema
    value: Any = None
    resolved_with: tuple[EnvSettings, ...] = ()
    file_values: dict[str, Any] | None = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class ConfigManager:
    """Registry of config types with layered load, update and save.

    Attributes:
        env_settings: Current environment override settings.

    Example:
        Inject an environment for tests:
            ```python
            manager = ConfigManager(env_prefix="APP", environ={"APP_CONFIG_SERVER_PORT": "9000"})
            manager.register(Config, tmp_path / "app.yaml")
            manager.load(Config).server.port  # 9000
            ```
    """

    def __init__(
        self,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        env_overrides: bool = True,
        environ: Mapping[str, str] | None = None,
        dotenv_path: str | os.PathLike[str] | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            env_prefix: Prefix for override variables (trailing "_" trimmed).
            env_overrides: If False, environment variables are ignored.
            environ: Mapping to read variables from instead of os.environ.
            dotenv_path: Optional .env file layered underneath the
                environment (real variables win over the file).
            logger: Logger for warnings and verbose output. Defaults to the
                global logger, looked up on each use.
        """
        if dotenv_path is not None:
            environ = load_dotenv_environ(dotenv_path, environ)
        self.env_settings = EnvSettings(
            prefix=env_prefix, enabled=env_overrides, environ=environ
        )
        self._logger = logger
        self._entries: dict[type, ConfigEntry] = {}
        self._registry_lock = threading.Lock()

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    # ------------------------ Configurable behavior ------------------------

    def set_env_prefix(self, prefix: str) -> None:
        """Set the environment variable prefix (trailing "_" trimmed)."""
        self.env_settings = replace(self.env_settings, prefix=prefix)

    def enable_env_overrides(self, enabled: bool) -> None:
        """Enable or disable environment variable overrides."""
        self.env_settings = replace(self.env_settings, enabled=enabled)

    # ------------------------ Registration ------------------------

    def register(self, config_type: type, path: str | os.PathLike[str]) -> Path:
        """Register a config dataclass with its YAML file.

        No file is read or written.

        Args:
            config_type: The config dataclass.
            path: Path to its YAML file (created on first load).

        Returns:
            The file path as a Path.

        Raises:
            SchemaError: If the type cannot be used as a config schema.
            RegistrationError: If the type is already registered.
        """
        schema = build_schema(config_type)
        default_of(schema)
        file_path = Path(path).expanduser()

        with self._registry_lock:
            if config_type in self._entries:
                raise RegistrationError(
                    f"Config {config_type.__name__} already registered"
                )
            self._entries[config_type] = ConfigEntry(
                type=config_type, path=file_path, schema=schema
            )

        self.logger.verbose(
            "REGISTER", f"{config_type.__name__} -> {file_path}"
        )
        return file_path

    def is_registered(self, config_type: type) -> bool:
        return config_type in self._entries

    def registered(self) -> tuple[type, ...]:
        """Return registered config types in registration order."""
        with self._registry_lock:
            return tuple(self._entries)

    def path_for(self, config_type: type) -> Path:
        return self._entry(config_type).path

    def _entry(self, config_type: type) -> ConfigEntry:
        entry = self._entries.get(config_type)
        if entry is None:
            name = getattr(config_type, "__name__", repr(config_type))
            raise NotRegisteredError(f"Config {name} not registered")
        return entry

    # ------------------------ Loading ------------------------

    def load(self, config_type: type[T]) -> T:
        """Load a config type from disk and publish its resolved value.

        The merged file + defaults value is written back to the file before
        environment overrides are applied.

        Args:
            config_type: A registered config dataclass.

        Returns:
            The resolved value (same object get() returns afterwards).

        Raises:
            NotRegisteredError: If the type was never registered.
            OSError: If the merged file cannot be written.
        """
        entry = self._entry(config_type)
        settings = self.env_settings
        with entry.lock:
            merged, file_values = self._read_persisted(entry)
            write_config_file(entry.path, encode(merged, entry.schema))
            runtime = self._resolve(merged, entry, settings, self.logger)
            entry.value = runtime
            entry.resolved_with = (settings,) if settings.enabled else ()
            entry.file_values = file_values

        self.logger.verbose("LOAD", f"Loaded {entry.schema.name} from {entry.path}")
        return runtime

    def load_all(self) -> dict[type, Any]:
        """Load every registered config type, in registration order.

        Returns:
            Mapping of config type to its resolved value.
        """
        return {config_type: self.load(config_type) for config_type in self.registered()}

    # ------------------------ Access ------------------------

    def get(self, config_type: type[T]) -> T:
        """Return the resolved value of a loaded config type.

        Raises:
            NotRegisteredError: If the type was never registered.
            NotLoadedError: If the type has not been loaded yet.
        """
        entry = self._entry(config_type)
        value = entry.value
        if value is None:
            raise NotLoadedError(f"Config {entry.schema.name} not loaded yet")
        return value

    # ------------------------ Update / Save ------------------------

    def update(self, config_type: type[T], transform: Callable[[T], T]) -> T:
        """Replace the resolved value via ``transform`` and persist it.

        Environment overrides are re-applied to the transformed value, so a
        field forced by the environment keeps its environment value in memory
        and its file value on disk. Invalid override warnings were already
        reported by load() and are repeated at verbose level only.

        Args:
            config_type: A registered, loaded config dataclass.
            transform: Function from the current value to a new value.

        Returns:
            The newly published resolved value.

        Raises:
            NotRegisteredError: If the type was never registered.
            NotLoadedError: If the type has not been loaded yet.
            TypeError: If transform does not return a config_type instance.
            OSError: If the file cannot be written.
        """
        entry = self._entry(config_type)
        settings = self.env_settings
        with entry.lock:
            current = entry.value
            if current is None:
                raise NotLoadedError(f"Config {entry.schema.name} not loaded yet")

            updated = transform(current)
            if not isinstance(updated, entry.type):
                raise TypeError(
                    f"update() transform for {entry.schema.name} returned "
                    f"{type(updated).__name__}"
                )

            runtime = self._resolve(
                updated, entry, settings, _RepeatedWarnings(self.logger)
            )
            entry.value = runtime
            if settings.enabled and settings not in entry.resolved_with:
                entry.resolved_with = (*entry.resolved_with, settings)
            self._save_entry(entry)

        return runtime

    def save(self, config_type: type) -> None:
        """Persist the resolved value without environment overrides.

        Raises:
            NotRegisteredError: If the type was never registered.
            NotLoadedError: If the type has not been loaded yet.
            OSError: If the file cannot be written.
        """
        entry = self._entry(config_type)
        with entry.lock:
            if entry.value is None:
                raise NotLoadedError(f"Config {entry.schema.name} not loaded yet")
            self._save_entry(entry)

    # ------------------------ Introspection ------------------------

    def env_keys(self, config_type: type) -> tuple[str, ...]:
        """List every environment variable that overrides a field of the type."""
        return env_keys(self._entry(config_type).schema, self.env_settings)

    def explain(self, config_type: type) -> tuple[FieldReport, ...]:
        """Report which layer each leaf of the resolved value came from.

        Raises:
            NotRegisteredError: If the type was never registered.
            NotLoadedError: If the type has not been loaded yet.
        """
        entry = self._entry(config_type)
        with entry.lock:
            resolved = self.get(config_type)
            file_values = entry.file_values
            if entry.resolved_with:
                settings = entry.resolved_with[-1]
            else:
                settings = replace(self.env_settings, enabled=False)
        return explain(resolved, file_values, entry.schema, settings)

    # ------------------------ Internal helpers ------------------------

    @staticmethod
    def _resolve(
        value: Any, entry: ConfigEntry, settings: EnvSettings, logger: Logger
    ) -> Any:
        if not settings.enabled:
            return value
        return apply_env(value, entry.schema, settings, logger=logger)

    def _read_file_values(self, entry: ConfigEntry) -> dict[str, Any] | None:
        """Decode the file into a partial mapping, or None if unusable."""
        data = read_config_file(entry.path, self.logger)
        if data is None:
            return None
        try:
            return decode(data, entry.schema, self.logger)
        except DecodeError as err:
            self.logger.verbose(
                "LOAD", f"{entry.path} does not match {entry.schema.name}: {err}"
            )
            return None

    def _read_persisted(
        self, entry: ConfigEntry
    ) -> tuple[Any, dict[str, Any] | None]:
        """Return file + defaults with no environment influence.

        The second item is the decoded file mapping that was merged, or None
        when the defaults were used alone.
        """
        defaults = default_of(entry.schema)
        file_values = self._read_file_values(entry)
        if file_values is None:
            return defaults, None
        try:
            return merge(file_values, defaults, entry.schema), file_values
        except (TypeError, ValueError) as err:
            # The dataclass rejected the file's values
            self.logger.verbose(
                "LOAD", f"{entry.path} rejected by {entry.schema.name}: {err}"
            )
            return defaults, None

    def _save_entry(self, entry: ConfigEntry) -> None:
        base, _ = self._read_persisted(entry)
        persistable = entry.value
        for settings in entry.resolved_with:
            persistable = strip_env_overrides(
                persistable, base, entry.schema, settings
            )
        write_config_file(entry.path, encode(persistable, entry.schema))
        entry.file_values = record_file_changes(
            entry.file_values, persistable, base, entry.schema
        )
        self.logger.verbose("SAVE", f"Saved {entry.schema.name} to {entry.path}")


class _RepeatedWarnings:
    """Logger view that reports warnings at verbose level."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def warning(self, prefix: str, message: str) -> None:
        self._logger.verbose(prefix, message)

    def verbose(self, prefix: str, message: str) -> None:
        self._logger.verbose(prefix, message)

    def debug(self, prefix: str, message: str) -> None:
        self._logger.debug(prefix, message)
