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

"""Command-line interface for layerconf.

This module provides the ``layerconf`` entry point for inspecting config
types and their files from the shell. A config type is given as
``package.module:ClassName``.

Commands:

    show: Load a config file and print the resolved value as YAML
    explain: Print each field's resolved value, source layer and env key
    env-keys: Print every environment variable a config type reacts to
    init: Load once so the file is created or healed, then exit

Example:
    Print the resolved config:
        ```bash
        $ layerconf show myapp.settings:Config config/app.yaml --prefix APP
        ```

    See where each value comes from:
        ```bash
        $ APP_CONFIG_SERVER_PORT=9000 layerconf explain myapp.settings:Config config/app.yaml --prefix APP
        ```

    List override variables:
        ```bash
        $ layerconf env-keys myapp.settings:Config --prefix APP
        ```

Exit Codes:

- 0: Success
- 1: Error (bad target, schema error, unwritable file)

Note:
    show, explain and init all run a normal load, which rewrites the file
    with any missing fields filled in from the defaults.

"""

from __future__ import annotations

import argparse
import importlib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
import traceback

from layerconf.core import ConfigManager
from layerconf.exceptions import LayerConfError
from layerconf.io import dump_yaml, encode
from layerconf.logging import get_logger, set_global_logger
from layerconf.resolve import EnvSettings, env_keys
from layerconf.schema import DEFAULT_ENV_PREFIX, build_schema


def resolve_target(target: str) -> type:
    """Import a config class from a ``module:ClassName`` string.

    Args:
        target: Import path such as "myapp.settings:Config". Nested
            attributes are allowed after the colon ("mod:Outer.Inner").

    Returns:
        The referenced class.

    Raises:
        ValueError: If the string has no ":" or names nothing.
        ImportError: If the module cannot be imported.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Expected 'module:ClassName', got {target!r}")

    obj: object = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as err:
            raise ValueError(f"{module_name} has no attribute {attr_path!r}") from err
    if not isinstance(obj, type):
        raise ValueError(f"{target!r} is not a class")
    return obj


def _build_manager(args: argparse.Namespace) -> ConfigManager:
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)
    return ConfigManager(
        env_prefix=args.prefix,
        env_overrides=not args.no_env,
        dotenv_path=args.dotenv,
        logger=logger,
    )


def _report_error(args: argparse.Namespace, err: Exception) -> int:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        traceback.print_exc()
    return 1


def _load(args: argparse.Namespace) -> tuple[ConfigManager, type]:
    config_type = resolve_target(args.target)
    manager = _build_manager(args)
    manager.register(config_type, Path(args.file))
    manager.load(config_type)
    return manager, config_type


def cmd_show(args: argparse.Namespace) -> int:
    """Handler for 'layerconf show' command.

    Loads the config file (healing it) and prints the resolved value,
    environment overrides included, as YAML.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    try:
        manager, config_type = _load(args)
    except (LayerConfError, ImportError, ValueError, OSError) as err:
        return _report_error(args, err)

    schema = build_schema(config_type)
    print(dump_yaml(encode(manager.get(config_type), schema)), end="")
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    """Handler for 'layerconf explain' command.

    Prints one line per leaf field: dotted path, resolved value, the layer
    it came from (default, file or env) and its environment variable.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    try:
        manager, config_type = _load(args)
        reports = manager.explain(config_type)
    except (LayerConfError, ImportError, ValueError, OSError) as err:
        return _report_error(args, err)

    width = max((len(r.path) for r in reports), default=0)
    print("=" * 70)
    print(f"CONFIG: {config_type.__name__}  FILE: {manager.path_for(config_type)}")
    print("=" * 70)
    for report in reports:
        env_key = report.env_key or "-"
        print(
            f"{report.path:<{width}}  {report.source:<7}  "
            f"{report.value!r}  [{env_key}]"
        )
    print("=" * 70)
    return 0


def cmd_env_keys(args: argparse.Namespace) -> int:
    """Handler for 'layerconf env-keys' command.

    Prints every environment variable name the config type reacts to, one
    per line. No file is read or written.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    try:
        config_type = resolve_target(args.target)
        keys = env_keys(build_schema(config_type), EnvSettings(prefix=args.prefix))
    except (LayerConfError, ImportError, ValueError) as err:
        return _report_error(args, err)

    for key in keys:
        print(key)
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Handler for 'layerconf init' command.

    Loads the config once so the file exists and contains every field.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    try:
        manager, config_type = _load(args)
    except (LayerConfError, ImportError, ValueError, OSError) as err:
        return _report_error(args, err)

    print(f"[SUCCESS] Wrote {manager.path_for(config_type)}")
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--prefix",
        default=DEFAULT_ENV_PREFIX,
        help=f"Environment variable prefix (default: {DEFAULT_ENV_PREFIX})",
    )
    parser.add_argument(
        "--no-env",
        action="store_true",
        help="Ignore environment variable overrides",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Read additional variables from a .env file (real variables win)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and file handling details",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _package_version() -> str:
    try:
        return version("layerconf")
    except PackageNotFoundError:
        from layerconf import __version__

        return __version__


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the layerconf CLI."""
    parser = argparse.ArgumentParser(
        prog="layerconf",
        description="layerconf - inspect layered YAML + environment configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"layerconf {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'show' command
    parser_show = subparsers.add_parser(
        "show",
        help="Print the resolved config as YAML",
        description="Load a config file and print the resolved value, environment overrides included.",
    )
    parser_show.add_argument("target", help="Config class as module:ClassName")
    parser_show.add_argument("file", help="Path to the YAML config file")
    _add_common_arguments(parser_show)
    parser_show.set_defaults(func=cmd_show)

    # 'explain' command
    parser_explain = subparsers.add_parser(
        "explain",
        help="Show where each field value comes from",
        description="Print each leaf field with its resolved value, source layer and environment variable.",
    )
    parser_explain.add_argument("target", help="Config class as module:ClassName")
    parser_explain.add_argument("file", help="Path to the YAML config file")
    _add_common_arguments(parser_explain)
    parser_explain.set_defaults(func=cmd_explain)

    # 'env-keys' command
    parser_env_keys = subparsers.add_parser(
        "env-keys",
        help="List environment variables for a config type",
        description="Print every environment variable name that overrides a field of the config type.",
    )
    parser_env_keys.add_argument("target", help="Config class as module:ClassName")
    _add_common_arguments(parser_env_keys)
    parser_env_keys.set_defaults(func=cmd_env_keys)

    # 'init' command
    parser_init = subparsers.add_parser(
        "init",
        help="Create or heal a config file",
        description="Load the config once so the file exists with every field filled in.",
    )
    parser_init.add_argument("target", help="Config class as module:ClassName")
    parser_init.add_argument("file", help="Path to the YAML config file")
    _add_common_arguments(parser_init)
    parser_init.set_defaults(func=cmd_init)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the layerconf CLI.

    This function is registered as the 'layerconf' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
