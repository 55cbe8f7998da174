"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from metaprog.core.config import AppConfig, detect_format, load_app_config, load_config
from metaprog.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("OPENAI_API_KEY", "METAPROG_MODEL", "METAPROG_CACHE_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestDetectFormat:
    """Tests for detect_format."""

    @pytest.mark.parametrize(
        ("name", "fmt"),
        [("c.json", "json"), ("c.yaml", "yaml"), ("c.YML", "yaml")],
    )
    def test_known_extensions(self, name: str, fmt: str):
        assert detect_format(name) == fmt

    def test_unknown_extension_raises(self):
        with pytest.raises(ConfigError):
            detect_format("config.toml")


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "metaprog.yaml"
        path.write_text("generator:\n  model: gpt-test\n")

        assert load_config(path) == {"generator": {"model": "gpt-test"}}

    def test_empty_yaml_is_empty_dict(self, tmp_path: Path):
        path = tmp_path / "metaprog.yaml"
        path.write_text("")

        assert load_config(path) == {}

    def test_invalid_json_raises_config_error(self, tmp_path: Path):
        path = tmp_path / "metaprog.json"
        path.write_text("{broken")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestLoadAppConfig:
    """Tests for load_app_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = load_app_config(tmp_path / "absent.yaml")

        assert config == AppConfig()
        assert config.build.retries == 3
        assert config.cache.resolved_index_path() == Path(".metaprog/metaprog-cache.json")
        assert config.cache.resolved_generated_dir() == Path(".metaprog/generated")

    def test_json_file_is_validated(self, tmp_path: Path):
        path = tmp_path / "metaprog.json"
        path.write_text(json.dumps({"build": {"retries": 5}, "unknown_section": {"x": 1}}))

        assert load_app_config(path).build.retries == 5

    def test_invalid_values_raise_config_error(self, tmp_path: Path):
        path = tmp_path / "metaprog.json"
        path.write_text(json.dumps({"build": {"retries": -1}}))

        with pytest.raises(ConfigError):
            load_app_config(path)

    def test_environment_overrides(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("METAPROG_MODEL", "gpt-env")
        monkeypatch.setenv("METAPROG_CACHE_DIR", str(tmp_path / "cache"))

        config = load_app_config(tmp_path / "absent.yaml")

        assert config.generator.api_key == "sk-env"
        assert config.generator.model == "gpt-env"
        assert config.cache.resolved_index_path() == tmp_path / "cache" / "metaprog-cache.json"

    def test_explicit_api_key_is_kept(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        path = tmp_path / "metaprog.yaml"
        path.write_text("generator:\n  api_key: sk-file\n")

        assert load_app_config(path).generator.api_key == "sk-file"
