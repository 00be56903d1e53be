"""
Tests for layerconf.cli module.

Tests the command-line interface including:
- Target resolution (module:ClassName)
- show, explain, env-keys and init commands
- Exit codes for invalid targets
"""

from __future__ import annotations

import os

import pytest

from layerconf.cli import main, resolve_target
from sample_configs import Config


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove APP_ variables that could leak in from the outer environment."""
    for key in list(os.environ):
        if key.startswith("APP_"):
            monkeypatch.delenv(key)


class TestResolveTarget:
    """Tests for resolve_target()."""

    def test_resolves_class(self):
        """Test importing a class from module:ClassName."""
        assert resolve_target("sample_configs:Config") is Config

    @pytest.mark.parametrize(
        "target", ["sample_configs", "sample_configs:", "sample_configs:Missing"]
    )
    def test_invalid_target(self, target):
        """Test malformed or unknown targets."""
        with pytest.raises(ValueError):
            resolve_target(target)

    def test_not_a_class(self):
        """Test that a non-class attribute is rejected."""
        with pytest.raises(ValueError, match="not a class"):
            resolve_target("layerconf.schema:DEFAULT_ENV_PREFIX")

    def test_missing_module(self):
        """Test that an unknown module raises ImportError."""
        with pytest.raises(ImportError):
            resolve_target("no_such_module_xyz:Config")


class TestShowCommand:
    """Tests for 'layerconf show'."""

    def test_prints_resolved_yaml(self, tmp_path, monkeypatch, capsys):
        """Test that env overrides appear in the printed YAML."""
        monkeypatch.setenv("APP_CONFIG_SERVER_PORT", "9000")
        config_file = tmp_path / "app.yaml"

        code = _run(["show", "sample_configs:Config", str(config_file), "--prefix", "APP"])

        out = capsys.readouterr().out
        assert code == 0
        assert "server:\n  host: 0.0.0.0\n  port: 9000\n" in out
        assert "port: 8080" in config_file.read_text()

    def test_no_env_flag(self, tmp_path, monkeypatch, capsys):
        """Test that --no-env ignores variables."""
        monkeypatch.setenv("APP_CONFIG_SERVER_PORT", "9000")

        code = _run(
            [
                "show",
                "sample_configs:Config",
                str(tmp_path / "app.yaml"),
                "--prefix",
                "APP",
                "--no-env",
            ]
        )

        assert code == 0
        assert "port: 8080" in capsys.readouterr().out

    def test_dotenv_flag(self, tmp_path, capsys):
        """Test that --dotenv supplies overrides."""
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text("APP_CONFIG_NETWORK_RETRY_COUNT=9\n")

        code = _run(
            [
                "show",
                "sample_configs:Config",
                str(tmp_path / "app.yaml"),
                "--prefix",
                "APP",
                "--dotenv",
                str(dotenv_file),
            ]
        )

        assert code == 0
        assert "retry_count: 9" in capsys.readouterr().out

    def test_bad_target_exits_with_error(self, tmp_path, capsys):
        """Test exit code 1 for an invalid target."""
        code = _run(["show", "sample_configs", str(tmp_path / "app.yaml")])

        assert code == 1
        assert capsys.readouterr().out.startswith("Error:")
        assert not (tmp_path / "app.yaml").exists()

    def test_schema_error_exits_with_error(self, tmp_path, capsys):
        """Test exit code 1 for a type that is not a valid config."""
        code = _run(["show", "sample_configs:Colliding", str(tmp_path / "app.yaml")])

        assert code == 1
        assert "COLLIDING_A_B" in capsys.readouterr().out


class TestExplainCommand:
    """Tests for 'layerconf explain'."""

    def test_reports_sources(self, tmp_path, monkeypatch, capsys):
        """Test the provenance table."""
        monkeypatch.setenv("APP_CONFIG_SERVER_PORT", "9000")

        code = _run(
            ["explain", "sample_configs:Config", str(tmp_path / "app.yaml"), "--prefix", "APP"]
        )

        lines = capsys.readouterr().out.splitlines()
        port_line = next(line for line in lines if line.startswith("server.port"))
        host_line = next(line for line in lines if line.startswith("server.host"))
        assert code == 0
        assert " env " in port_line
        assert "9000" in port_line
        assert "[APP_CONFIG_SERVER_PORT]" in port_line
        assert " default " in host_line
        assert any(line.startswith("tags") and "[-]" in line for line in lines)


class TestEnvKeysCommand:
    """Tests for 'layerconf env-keys'."""

    def test_lists_keys(self, capsys):
        """Test that one variable is printed per line."""
        code = _run(["env-keys", "sample_configs:Config", "--prefix", "APP"])

        lines = capsys.readouterr().out.splitlines()
        assert code == 0
        assert lines[0] == "APP_CONFIG_SERVER_HOST"
        assert "APP_CONFIG_LOGGER_LEVEL" in lines
        assert len(lines) == 14

    def test_default_prefix(self, capsys):
        """Test the default LAYERCONF prefix."""
        _run(["env-keys", "sample_configs:Config"])

        assert capsys.readouterr().out.startswith("LAYERCONF_CONFIG_SERVER_HOST\n")


class TestInitCommand:
    """Tests for 'layerconf init'."""

    def test_creates_file(self, tmp_path, capsys):
        """Test that init writes a complete file."""
        config_file = tmp_path / "nested" / "app.yaml"

        code = _run(["init", "sample_configs:Config", str(config_file)])

        assert code == 0
        assert config_file.exists()
        assert "[SUCCESS] Wrote" in capsys.readouterr().out
        assert "concurrent_requests: 8" in config_file.read_text()


class TestParser:
    """Tests for argument parsing."""

    def test_command_required(self, capsys):
        """Test that running without a command is a usage error."""
        assert _run([]) == 2

    def test_version(self, capsys):
        """Test --version output."""
        assert _run(["--version"]) == 0
        assert "layerconf" in capsys.readouterr().out
