"""
Config system - Layered configuration for specification generation.

Merge precedence (later overrides earlier):
defaults < config files (YAML/JSON) < .env file < environment variables < overrides
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from pathlib import Path
import importlib
import json
import os

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault


@dataclass
class SpecConfig:
    """
    Configuration for a specification generation pass.

    Attributes:
        title, version, description: ``info`` of the document
        servers: Top-level servers (``{"url": ..., "description": ...}``)
        openapi_version: Value of the ``openapi`` field
        default_media_type: Media type used when a route declares none
        properties: Values for ``${name}`` placeholders in path templates
        env_file: ``.env`` file consulted by the placeholder resolver
        components: Shared components seeded into every document
            (``callbacks``, ``securitySchemes``, ``schemas``)
        ignored_types: Dotted paths of parameter types never documented
    """
    title: str = "API"
    version: str = "1.0.0"
    description: str = ""
    servers: List[Dict[str, Any]] = field(default_factory=list)
    openapi_version: str = "3.0.1"
    default_media_type: str = "application/json"
    properties: Dict[str, Any] = field(default_factory=dict)
    env_file: Optional[str] = None
    components: Dict[str, Any] = field(default_factory=dict)
    ignored_types: List[str] = field(default_factory=lambda: [
        "routespec.controller.base.Principal",
        "routespec.controller.base.RequestCtx",
    ])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpecConfig":
        """Create config from dict (e.g., the ``openapi`` section of a config file)."""
        config = cls()
        for key, value in data.items():
            if key.startswith("_"):
                continue
            if hasattr(config, key):
                setattr(config, key, value)
        return config

    def resolve_ignored_types(self) -> tuple:
        """Import every entry of ``ignored_types``."""
        resolved = []
        for dotted in self.ignored_types:
            if isinstance(dotted, type):
                resolved.append(dotted)
                continue
            module_name, _, attr = str(dotted).rpartition(".")
            try:
                resolved.append(getattr(importlib.import_module(module_name), attr))
            except (ImportError, AttributeError, ValueError) as exc:
                raise ConfigInvalidFault("ignored_types", f"cannot import '{dotted}': {exc}")
        return tuple(resolved)


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "RS_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[List[str]] = None,
        env_prefix: str = "RS_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        if not paths and Path("routespec.yaml").exists():
            paths = ["routespec.yaml"]

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from files matching pattern."""
        from glob import glob

        for path_str in sorted(glob(pattern)):
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return
        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert RS_OPENAPI__TITLE to {"openapi": {"title": ...}}."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def spec_config(self) -> SpecConfig:
        """Build the SpecConfig from the ``openapi`` section."""
        section = self.get("openapi", {})
        if not isinstance(section, dict):
            raise ConfigInvalidFault("openapi", "expected a mapping")
        return SpecConfig.from_dict(section)
