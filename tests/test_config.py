"""
Test: Config system (config.py)

Tests SpecConfig and the layered ConfigLoader.
"""

import json

import pytest

from routespec.config import ConfigLoader, SpecConfig
from routespec.controller.base import Authentication, Principal, RequestCtx
from routespec.faults import ConfigInvalidFault


# ============================================================================
# SpecConfig
# ============================================================================

class TestSpecConfig:

    def test_defaults(self):
        cfg = SpecConfig()
        assert cfg.title == "API"
        assert cfg.version == "1.0.0"
        assert cfg.openapi_version == "3.0.1"
        assert cfg.default_media_type == "application/json"
        assert cfg.servers == []

    def test_from_dict(self):
        cfg = SpecConfig.from_dict({"title": "Pets", "version": "2.0.0"})
        assert cfg.title == "Pets"
        assert cfg.version == "2.0.0"

    def test_from_dict_ignores_unknown_and_private_keys(self):
        cfg = SpecConfig.from_dict({"_source": "file", "unknown_key": 1, "title": "X"})
        assert cfg.title == "X"
        assert not hasattr(cfg, "unknown_key")

    def test_default_ignored_types(self):
        ignored = SpecConfig().resolve_ignored_types()
        assert Principal in ignored
        assert RequestCtx in ignored
        assert issubclass(Authentication, ignored)

    def test_ignored_types_accept_classes(self):
        cfg = SpecConfig(ignored_types=[dict])
        assert cfg.resolve_ignored_types() == (dict,)

    def test_unimportable_ignored_type(self):
        cfg = SpecConfig(ignored_types=["nowhere.Missing"])
        with pytest.raises(ConfigInvalidFault):
            cfg.resolve_ignored_types()


# ============================================================================
# ConfigLoader
# ============================================================================

class TestConfigLoader:

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "routespec.yaml"
        path.write_text("openapi:\n  title: From YAML\n  servers:\n    - url: https://api.example.com\n")
        loader = ConfigLoader.load(paths=[str(path)], env_prefix="RS_TEST_")
        cfg = loader.spec_config()
        assert cfg.title == "From YAML"
        assert cfg.servers == [{"url": "https://api.example.com"}]

    def test_json_file(self, tmp_path):
        path = tmp_path / "routespec.json"
        path.write_text(json.dumps({"openapi": {"version": "3.1.4"}}))
        loader = ConfigLoader.load(paths=[str(path)], env_prefix="RS_TEST_")
        assert loader.get("openapi.version") == "3.1.4"

    def test_glob_pattern_merges_in_order(self, tmp_path):
        (tmp_path / "a.yaml").write_text("openapi:\n  title: A\n  version: '1'\n")
        (tmp_path / "b.yaml").write_text("openapi:\n  title: B\n")
        loader = ConfigLoader.load(paths=[str(tmp_path / "*.yaml")], env_prefix="RS_TEST_")
        assert loader.get("openapi.title") == "B"
        assert loader.get("openapi.version") == "1"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "routespec.yaml"
        path.write_text("openapi:\n  title: From YAML\n")
        monkeypatch.setenv("RS_TEST_OPENAPI__TITLE", "From env")
        loader = ConfigLoader.load(paths=[str(path)], env_prefix="RS_TEST_")
        assert loader.spec_config().title == "From env"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("RS_TEST_OPENAPI__DESCRIPTION=From dotenv\n")
        loader = ConfigLoader.load(env_prefix="RS_TEST_", env_file=str(env_file))
        assert loader.get("openapi.description") == "From dotenv"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("RS_TEST_OPENAPI__TITLE", "From env")
        loader = ConfigLoader.load(env_prefix="RS_TEST_", overrides={"openapi": {"title": "Override"}})
        assert loader.spec_config().title == "Override"

    def test_parse_value(self):
        loader = ConfigLoader()
        assert loader._parse_value("true") is True
        assert loader._parse_value("no") is False
        assert loader._parse_value("42") == 42
        assert loader._parse_value("1.5") == 1.5
        assert loader._parse_value('["a"]') == ["a"]
        assert loader._parse_value("text") == "text"

    def test_get_default(self):
        loader = ConfigLoader()
        assert loader.get("missing.key", "fallback") == "fallback"

    def test_invalid_section(self):
        loader = ConfigLoader.load(env_prefix="RS_TEST_", overrides={"openapi": "nope"})
        with pytest.raises(ConfigInvalidFault):
            loader.spec_config()
