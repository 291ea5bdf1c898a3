"""
Taskmaster configuration management (YAML only).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from taskmaster.core.exceptions import ConfigError
from taskmaster.core.utils.merge import deep_merge as _deep_merge
from taskmaster.data import get_data_path

from .cache import get_cached_config

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKMASTER_"


class ConfigManager:
    """Load, merge, and validate taskmaster configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: ``TASKMASTER_<section>__<key>[__<key>...]``
    2. Project config: ``<root>/.taskmaster/config/*.yml|*.yaml`` (alphabetical order)
    3. Bundled defaults: ``taskmaster.data/config/*.yaml`` (alphabetical order)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        from taskmaster.core.utils.paths import get_project_config_dir, resolve_project_root

        self.repo_root = Path(repo_root).resolve() if repo_root else resolve_project_root()
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = get_project_config_dir(self.repo_root) / "config"

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        from taskmaster.core.utils.io import read_yaml

        # Configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except Exception as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    def validate_schema(self, config: Dict[str, Any]) -> None:
        from taskmaster.core.schemas import SchemaValidationError, validate_payload

        try:
            validate_payload(config, "config")
        except SchemaValidationError as exc:
            raise ConfigError(
                f"{exc}. Fix the files in {self.project_config_dir} or the TASKMASTER_* environment overrides.",
            ) from exc

    # ========== Environment overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if s == "null":
            return None
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        if value.strip() == "null":
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            # Only nested keys are overrides; TASKMASTER_PROJECT_ROOT and friends are not.
            if "__" not in raw:
                continue
            segments = raw.split("__")
            if any(seg == "" for seg in segments):
                raise ConfigError(f"Malformed {ENV_PREFIX}* key: empty segment in '{key}'.")
            yield segments, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Dict[str, Any] = root
        for part in path[:-1]:
            # Case-insensitive match on existing keys so FEATURES__WORKTREES works.
            existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            use_key = existing.get(part.lower(), part)
            nxt = cur.get(use_key)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[use_key] = nxt
            cur = nxt
        leaf = path[-1]
        existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
        cur[existing.get(leaf.lower(), leaf)] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        """Merge all YAML files from ``directory`` (alphabetical) into ``cfg``."""
        from taskmaster.core.utils.io import iter_yaml_files

        merged = dict(cfg)
        for path in iter_yaml_files(directory):
            merged = self.deep_merge(merged, self.load_yaml(path))
        return merged

    def _load_config_uncached(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration from disk, bypassing the cache.

        Layers, lowest priority first:
            1. Bundled defaults
            2. Project config files
            3. Environment variable overrides (TASKMASTER_*)
        """
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)
        logger.debug("Loaded configuration for %s", self.repo_root)

        if validate:
            self.validate_schema(cfg)
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration using the centralized cache.

        The returned dict should be treated as immutable.
        """
        cfg = get_cached_config(repo_root=self.repo_root, validate=False)
        if validate:
            self.validate_schema(cfg)
        return cfg

    # ========== Accessor Methods ==========

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> manager.get('worktrees.prefix')
            'task'
            >>> manager.get('nonexistent.key', 'fallback')
            'fallback'
        """
        current: Any = self.load_config(validate=False)
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["ConfigManager", "ENV_PREFIX"]
