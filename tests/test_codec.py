"""
Tests for layerconf.io.yaml_codec module.

Tests YAML file handling and typed conversion including:
- Reading missing, empty and malformed files
- Atomic writes with parent directory creation
- Decoding typed values and rejecting mismatches
- Encoding enums, paths and nested blocks
"""

from __future__ import annotations

from pathlib import Path

import pytest

from layerconf.exceptions import DecodeError
from layerconf.io import decode, dump_yaml, encode, read_config_file, write_config_file
from layerconf.schema import build_schema, default_of
from sample_configs import Config, Level


class TestReadConfigFile:
    """Tests for read_config_file()."""

    def test_missing_file(self, tmp_path, logger):
        """Test that a missing file reads as None."""
        assert read_config_file(tmp_path / "missing.yaml", logger) is None

    def test_empty_file(self, tmp_path, logger):
        """Test that an empty file reads as None."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert read_config_file(path, logger) is None

    def test_malformed_file(self, tmp_path, logger, write_yaml):
        """Test that invalid YAML reads as None."""
        path = write_yaml(tmp_path / "bad.yaml", "server: [unclosed\n  port: 1")

        assert read_config_file(path, logger) is None
        assert any("Malformed YAML" in m for m in logger.messages)

    def test_top_level_list(self, tmp_path, logger, write_yaml):
        """Test that a non-mapping document reads as None."""
        path = write_yaml(tmp_path / "list.yaml", "- a\n- b\n")

        assert read_config_file(path, logger) is None

    def test_mapping(self, tmp_path, logger, write_yaml):
        """Test that a mapping is returned as parsed."""
        path = write_yaml(tmp_path / "ok.yaml", {"server": {"port": 9000}})

        assert read_config_file(path, logger) == {"server": {"port": 9000}}


class TestWriteConfigFile:
    """Tests for write_config_file()."""

    def test_creates_parent_directories(self, tmp_path, read_yaml):
        """Test that missing directories are created."""
        path = tmp_path / "a" / "b" / "app.yaml"

        write_config_file(path, {"x": 1})

        assert read_yaml(path) == {"x": 1}

    def test_no_temp_file_left(self, tmp_path):
        """Test that only the target file remains after writing."""
        write_config_file(tmp_path / "app.yaml", {"x": 1})

        assert [p.name for p in tmp_path.iterdir()] == ["app.yaml"]

    def test_key_order_preserved(self, tmp_path):
        """Test that keys are written in insertion order, block style."""
        path = tmp_path / "app.yaml"

        write_config_file(path, {"zeta": 1, "alpha": {"b": 2, "a": 3}})

        assert path.read_text(encoding="utf-8") == "zeta: 1\nalpha:\n  b: 2\n  a: 3\n"

    def test_unwritable_location_raises(self, tmp_path):
        """Test that a parent path that is a file raises OSError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            write_config_file(blocker / "app.yaml", {"x": 1})


class TestDecode:
    """Tests for decode()."""

    def test_partial_mapping(self, logger):
        """Test that only present keys are returned."""
        values = decode({"server": {"port": 9000}}, build_schema(Config), logger)

        assert values == {"server": {"port": 9000}}

    def test_nulls_are_kept(self, logger):
        """Test that explicit nulls stay None."""
        values = decode({"server": None}, build_schema(Config), logger)

        assert values == {"server": None}

    def test_typed_values(self, logger):
        """Test enum, Path and float conversion."""
        values = decode(
            {"logger": {"level": "WARN", "log_dir": "/var/log", "sample_rate": 1}},
            build_schema(Config),
            logger,
        )

        assert values["logger"]["level"] is Level.WARN
        assert values["logger"]["log_dir"] == Path("/var/log")
        assert values["logger"]["sample_rate"] == 1.0
        assert isinstance(values["logger"]["sample_rate"], float)

    def test_numbers_accepted_for_strings(self, logger):
        """Test that a numeric YAML scalar fits a str field."""
        values = decode({"database": {"password": 1234}}, build_schema(Config), logger)

        assert values["database"]["password"] == "1234"

    def test_unknown_keys_ignored(self, logger):
        """Test that keys outside the schema are dropped with a note."""
        values = decode({"legacy": True, "server": {"port": 1}}, build_schema(Config), logger)

        assert "legacy" not in values
        assert any("legacy" in m for m in logger.messages)

    def test_opaque_taken_as_is(self, logger):
        """Test that list fields are not converted."""
        values = decode({"tags": ["a", 1]}, build_schema(Config), logger)

        assert values["tags"] == ["a", 1]

    @pytest.mark.parametrize(
        "data",
        [
            {"server": {"port": "not a number"}},
            {"server": {"port": True}},
            {"features": {"cache": "yes"}},
            {"logger": {"level": "warn"}},
            {"server": "localhost:8080"},
        ],
    )
    def test_mismatch_raises(self, data, logger):
        """Test that values not fitting their field raise DecodeError."""
        with pytest.raises(DecodeError):
            decode(data, build_schema(Config), logger)

    def test_error_names_the_field(self, logger):
        """Test that the error message carries the dotted field path."""
        with pytest.raises(DecodeError, match="server.port"):
            decode({"server": {"port": "x"}}, build_schema(Config), logger)


class TestEncode:
    """Tests for encode() and dump_yaml()."""

    def test_plain_values(self):
        """Test that enums become names and paths become strings."""
        data = encode(default_of(Config), build_schema(Config))

        assert data["logger"] == {
            "level": "INFO",
            "log_dir": "logs",
            "sample_rate": 1.0,
        }
        assert data["server"] == {"host": "0.0.0.0", "port": 8080}
        assert list(data) == ["server", "logger", "database", "network", "features", "tags"]

    def test_decode_accepts_encoded_output(self, logger):
        """Test that the written form is readable by decode."""
        schema = build_schema(Config)
        encoded = encode(default_of(schema), schema)

        values = decode(encoded, schema, logger)

        assert values["logger"]["level"] is Level.INFO

    def test_dump_yaml_is_block_style(self):
        """Test that dump_yaml writes nested blocks, not flow mappings."""
        text = dump_yaml({"server": {"port": 1}})

        assert text == "server:\n  port: 1\n"
