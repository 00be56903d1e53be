"""
layerconf - layered configuration for Python applications

layerconf keeps one YAML file per typed configuration object and resolves
every field through three layers:

    environment variable  >  YAML file  >  dataclass default

It also keeps the layers apart when writing: environment overrides are
applied in memory only and are stripped before anything is saved, so a value
forced through the environment is never baked into the file.

layerconf provides:
  - Config types declared as plain (frozen) dataclasses
  - Self-healing YAML files (missing fields added, broken files replaced)
  - Deterministic environment variable names (<PREFIX>_<TYPE>_<FIELD>...)
  - Typed parsing of overrides with warnings instead of crashes
  - Thread-safe updates that are persisted immediately
  - Per-field provenance reports (default / file / env)

Quick Start
-----------
Declare, register, load:

    from dataclasses import dataclass, field
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
    manager.get(Config).server.port   # APP_CONFIG_SERVER_PORT, file, or 8080

Inspect a config from the shell:

    $ layerconf explain myapp.settings:Config config/app.yaml --prefix APP

Package Structure
-----------------
core : module
    ConfigManager (registry + load/update/save pipeline).
schema : package
    Dataclass schemas, default construction, env key naming.
resolve : package
    Merge, environment overrides, override stripping, provenance.
io : package
    YAML file I/O and typed encode/decode.
cli : module
    Command-line interface with argparse.
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Layered YAML + environment configuration for dataclasses"

from layerconf.core import ConfigEntry, ConfigManager
from layerconf.exceptions import (
    ConfigAccessError,
    DecodeError,
    LayerConfError,
    NotLoadedError,
    NotRegisteredError,
    RegistrationError,
    SchemaError,
)
from layerconf.results import FieldReport
from layerconf.schema import build_schema, default_of

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "ConfigAccessError",
    "ConfigEntry",
    "ConfigManager",
    "DecodeError",
    "FieldReport",
    "LayerConfError",
    "NotLoadedError",
    "NotRegisteredError",
    "RegistrationError",
    "SchemaError",
    "build_schema",
    "default_of",
]
