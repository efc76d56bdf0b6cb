"""Tests for configuration module."""

import pytest
from club_convergence.core.config import Config, ConfigLoader
from club_convergence.core.exceptions import ConfigError, ConfigValidationError


class TestConfigLoader:
    """Tests for ConfigLoader class."""

    def test_load_valid_config(self, temp_config_file):
        """Test loading a valid configuration file."""
        config = ConfigLoader.load(temp_config_file)

        assert isinstance(config, Config)
        assert config.merge.method == "vLT"
        assert config.merge.merge_divergent is True
        assert config.merge.estar == -1.0
        assert config.merge.time_trim is None
        assert config.regression.hac_method == "AQSB"
        assert config.regression.time_trim == 0.3

    def test_load_nonexistent_file(self, tmp_path):
        """Test loading non-existent file raises error."""
        with pytest.raises(ConfigError):
            ConfigLoader.load(tmp_path / "nonexistent.yaml")

    def test_load_or_default(self, tmp_path):
        """Test load_or_default returns default config when file missing."""
        config = ConfigLoader.load_or_default(tmp_path / "missing.yaml")

        assert isinstance(config, Config)
        assert config.merge.method == "PS"
        assert config.merge.threshold == -1.65

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ConfigLoader.load(path) == ConfigLoader.get_default()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("merge: [unclosed")

        with pytest.raises(ConfigError):
            ConfigLoader.load(path)


class TestConfigValidation:
    """Tests for ConfigLoader.validate."""

    def test_collects_all_errors(self):
        raw = {
            "merge": {"method": "ward", "threshold": "low", "time_trim": 1.5},
            "regression": {"hac_method": "NW", "bandwidth": -1},
        }

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader.validate(raw)

        assert len(exc_info.value.errors) == 5

    def test_unknown_section(self):
        with pytest.raises(ConfigValidationError):
            ConfigLoader.validate({"plots": {}})

    def test_bool_is_not_a_number(self):
        with pytest.raises(ConfigValidationError):
            ConfigLoader.validate({"merge": {"estar": True}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigValidationError):
            ConfigLoader.validate({"merge": ["PS"]})

    def test_valid_sections(self, sample_config_dict):
        ConfigLoader.validate(sample_config_dict)
