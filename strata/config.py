"""
Config system - layered configuration with merge precedence.

Sources, later overriding earlier:

1. Workspace file (``strata.yaml`` / ``strata.yml`` / ``strata.json``, or explicit paths)
2. ``config/base.yaml`` (shared defaults)
3. ``config/{mode}.yaml`` where mode comes from ``runtime.mode`` (default ``dev``)
4. ``.env`` file entries carrying the prefix
5. Environment variables (``STRATA_*``; ``__`` separates nesting levels)
6. Manual overrides
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import fields
from glob import glob
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .faults import ConfigInvalidFault
from .openapi.config import OpenAPIConfig


logger = logging.getLogger("strata.config")

DEFAULT_ENV_PREFIX = "STRATA_"
WORKSPACE_FILES = ("strata.yaml", "strata.yml", "strata.json")


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Example:
        >>> loader = ConfigLoader.load(paths=["strata.yaml"])
        >>> loader.get("openapi.title")
        'Users API'
        >>> loader.openapi_config().docs_path
        '/api/docs'
    """

    def __init__(self, env_prefix: str = DEFAULT_ENV_PREFIX):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        root: Optional[str] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from every source.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)
            root: Directory searched for the workspace file and ``config/``

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)
        base = Path(root) if root else Path(".")

        if not paths:
            for name in WORKSPACE_FILES:
                if (base / name).exists():
                    paths = [str(base / name)]
                    break

        for pattern in paths or ():
            loader._load_from_files(pattern)

        base_config = base / "config" / "base.yaml"
        if base_config.exists():
            loader._load_yaml_file(base_config)

        mode = loader.get("runtime.mode", "dev")
        mode_config = base / "config" / f"{mode}.yaml"
        if mode_config.exists():
            loader._load_yaml_file(mode_config)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        logger.debug("Configuration loaded (mode=%s, keys=%s)", mode, sorted(loader.config_data))
        return loader

    # ── Sources ──────────────────────────────────────────────────────────

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matches = sorted(glob(pattern))
        if not matches:
            logger.debug("No configuration files match %s", pattern)
        for path_str in matches:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                logger.warning("Ignoring configuration file with unknown type: %s", path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigInvalidFault(str(path), f"invalid JSON: {exc}") from exc
        self._merge_section(path, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigInvalidFault(str(path), f"invalid YAML: {exc}") from exc
        self._merge_section(path, data)

    def _merge_section(self, path: Path, data: Any):
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), "top level must be a mapping")
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")

                    if key.startswith(self.env_prefix):
                        self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert STRATA_OPENAPI__DOCS_PATH to nested dict."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nesting levels
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

    # ── Access ───────────────────────────────────────────────────────────

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        parts = path.split(".")
        current = self.config_data

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def to_dict(self) -> dict:
        return self.config_data

    def openapi_config(self) -> OpenAPIConfig:
        """
        Build the base ``OpenAPIConfig`` from the ``openapi`` section.

        Numbers parsed from text sources are turned back into strings for
        text fields (``STRATA_OPENAPI__VERSION=2`` is the version ``"2"``).
        """
        section = self.get("openapi", {})
        if not isinstance(section, dict):
            raise ConfigInvalidFault("openapi", "section must be a mapping")

        text_fields = {f.name for f in fields(OpenAPIConfig) if f.type in ("str", str)}
        data = {
            key: str(value)
            if key in text_fields and isinstance(value, (int, float)) and not isinstance(value, bool)
            else value
            for key, value in section.items()
        }
        return OpenAPIConfig.from_dict(data)
