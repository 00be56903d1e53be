"""
Tests for layerconf.resolve.strip module.

Tests removal of environment overrides before persisting including:
- Env-controlled leaves taking the persisted base value
- Application updates on other leaves surviving
- Invalid overrides still stripped
- Null nested blocks on disk
"""

from __future__ import annotations

from dataclasses import replace

from layerconf.resolve import EnvSettings, apply_env, strip_env_overrides
from layerconf.schema import build_schema, default_of
from sample_configs import Config, OptionalBlock, Server


class TestStripEnvOverrides:
    """Tests for strip_env_overrides()."""

    def test_env_leaf_takes_base_value(self):
        """Test that a leaf with its variable set is restored from the base."""
        schema = build_schema(Config)
        settings = EnvSettings(prefix="APP", environ={"APP_CONFIG_SERVER_PORT": "9000"})
        base = replace(default_of(schema), server=Server(port=8081))
        runtime = apply_env(base, schema, settings)

        stripped = strip_env_overrides(runtime, base, schema, settings)

        assert runtime.server.port == 9000
        assert stripped.server.port == 8081

    def test_other_leaves_keep_runtime_value(self):
        """Test that updates to fields without a variable survive."""
        schema = build_schema(Config)
        settings = EnvSettings(prefix="APP", environ={"APP_CONFIG_SERVER_PORT": "9000"})
        base = default_of(schema)
        runtime = replace(
            apply_env(base, schema, settings),
            server=Server(host="example.org", port=9000),
            tags=["edited"],
        )

        stripped = strip_env_overrides(runtime, base, schema, settings)

        assert stripped.server == Server(host="example.org", port=8080)
        assert stripped.tags == ["edited"]

    def test_invalid_override_is_still_stripped(self):
        """Test that presence of the variable decides, not parse success."""
        schema = build_schema(Config)
        settings = EnvSettings(prefix="APP", environ={"APP_CONFIG_SERVER_PORT": "abc"})
        base = replace(default_of(schema), server=Server(port=8081))
        runtime = replace(base, server=Server(port=1))

        stripped = strip_env_overrides(runtime, base, schema, settings)

        assert stripped.server.port == 8081

    def test_nothing_set_returns_runtime_values(self):
        """Test that an empty environment strips nothing."""
        schema = build_schema(Config)
        settings = EnvSettings(prefix="APP", environ={})
        runtime = replace(default_of(schema), server=Server(port=1))

        stripped = strip_env_overrides(runtime, default_of(schema), schema, settings)

        assert stripped == runtime

    def test_null_block_on_disk_uses_defaults(self):
        """Test that env values do not leak through a block missing from disk."""
        schema = build_schema(OptionalBlock)
        settings = EnvSettings(
            prefix="APP", environ={"APP_OPTIONALBLOCK_PROXY_PORT": "3128"}
        )
        base = default_of(schema)
        runtime = apply_env(base, schema, settings)

        stripped = strip_env_overrides(runtime, base, schema, settings)

        assert runtime.proxy.port == 3128
        assert stripped.proxy.port == 8080
