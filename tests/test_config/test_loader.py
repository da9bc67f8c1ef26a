"""Tests for armprobe configuration loader."""

from pathlib import Path

import pytest

from armprobe.config import loader
from armprobe.config.loader import ConfigError, load_probe_config, load_yaml
from armprobe.hardware.models import StorageType


@pytest.fixture
def tmp_yaml(tmp_path):
    """Create a temporary YAML file."""

    def _create(content: str, filename: str = "config.yaml") -> Path:
        path = tmp_path / filename
        path.write_text(content)
        return path

    return _create


class TestLoadYaml:
    def test_valid_yaml(self, tmp_yaml):
        data = load_yaml(tmp_yaml("parallel: true\n"))
        assert data["parallel"] is True

    def test_empty_yaml(self, tmp_yaml):
        assert load_yaml(tmp_yaml("")) == {}

    def test_file_not_found(self):
        with pytest.raises(ConfigError, match="not found"):
            load_yaml(Path("/nonexistent/config.yaml"))

    def test_invalid_yaml(self, tmp_yaml):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml(tmp_yaml("invalid: [yaml: {broken"))

    def test_non_mapping(self, tmp_yaml):
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml(tmp_yaml("- a\n- b\n"))


class TestLoadProbeConfig:
    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(loader, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
        config = load_probe_config()
        assert config.root == Path("/")
        assert config.command_timeout_s == 5.0
        assert config.parallel is False
        assert set(config.target_types) == {StorageType.EMMC, StorageType.NVME}
        assert config.logging.level == "INFO"
        assert config.logging.file is None

    def test_default_file_used_when_present(self, tmp_yaml, monkeypatch):
        monkeypatch.setattr(loader, "DEFAULT_CONFIG_PATH", tmp_yaml("parallel: true\n"))
        assert load_probe_config().parallel is True

    def test_full_config(self, tmp_yaml, tmp_path):
        path = tmp_yaml(
            f"""
root: {tmp_path}
command_timeout_s: 2.5
parallel: true
target_types: [NVMe]
logging:
  level: debug
  file: {tmp_path / 'armprobe.log'}
"""
        )
        config = load_probe_config(path)
        assert config.root == tmp_path
        assert config.command_timeout_s == 2.5
        assert config.target_types == [StorageType.NVME]
        assert config.logging.level == "DEBUG"
        assert config.logging.file == tmp_path / "armprobe.log"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_probe_config(tmp_path / "nope.yaml")

    def test_unknown_storage_type(self, tmp_yaml):
        with pytest.raises(ConfigError, match="validation failed"):
            load_probe_config(tmp_yaml("target_types: [Floppy]\n"))

    def test_empty_target_types(self, tmp_yaml):
        with pytest.raises(ConfigError, match="validation failed"):
            load_probe_config(tmp_yaml("target_types: []\n"))

    def test_non_positive_timeout(self, tmp_yaml):
        with pytest.raises(ConfigError, match="validation failed"):
            load_probe_config(tmp_yaml("command_timeout_s: 0\n"))

    def test_bad_log_level(self, tmp_yaml):
        with pytest.raises(ConfigError, match="validation failed"):
            load_probe_config(tmp_yaml("logging:\n  level: chatty\n"))
