"""Configuration loading for hackindex.

Reads a YAML (or JSON) config file, validates it against a Draft-07 JSON
Schema and turns it into a ``HackIndexConfig``. CLI flags are applied on
top by ``apply_cli_overrides``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft7Validator

from constants import Constants, RepoKinds, _find_default_config
from index.models import LocalRepo, RemoteRepo, Repository

logger = logging.getLogger(__name__)

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "repositories": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "local_dir": {"type": "string", "minLength": 1},
                    "kind": {"enum": [k.value for k in RepoKinds]},
                    "uri": {"type": "string"},
                },
                "required": ["local_dir"],
                "additionalProperties": False,
            },
        },
        "index": {
            "type": "object",
            "properties": {
                "stale_threshold_days": {"type": "integer", "minimum": 0},
                "preferred_versions": {"type": "boolean"},
                "max_workers": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
        "installed": {
            "type": "object",
            "properties": {
                "scope_preference": {"type": "array", "items": {"type": "string"}},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


class ConfigError(ValueError):
    """Raised when a config file cannot be read or fails validation."""


@dataclass
class HackIndexConfig:
    """Effective runtime configuration."""
    repositories: List[Repository] = field(default_factory=list)
    stale_threshold_days: int = Constants.INDEX_STALE_THRESHOLD_DAYS
    preferred_versions: bool = Constants.PREFERRED_VERSIONS_ENABLED
    max_workers: int = Constants.MAX_WORKERS
    scope_preference: List[str] = field(
        default_factory=lambda: list(Constants.DEFAULT_SCOPE_PREFERENCE)
    )


def validate_config(data: Dict[str, Any]) -> None:
    """Validate raw config data and raise ConfigError on the first problem."""
    validator = Draft7Validator(CONFIG_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ConfigError(f"Invalid config at '{path}': {first.message}")


def _repository_from_config(entry: Dict[str, Any]) -> Repository:
    local_dir = os.path.expanduser(entry["local_dir"])
    kind = entry.get("kind", RepoKinds.REMOTE.value if "name" in entry else RepoKinds.LOCAL.value)
    if kind == RepoKinds.REMOTE.value:
        name = entry.get("name") or os.path.basename(os.path.normpath(local_dir))
        return Repository(local_dir, RemoteRepo(name, entry.get("uri", "")))
    return Repository(local_dir, LocalRepo())


def config_from_dict(data: Dict[str, Any]) -> HackIndexConfig:
    """Build a HackIndexConfig from already-loaded config data."""
    validate_config(data)
    index_cfg = data.get("index", {})
    installed_cfg = data.get("installed", {})
    cfg = HackIndexConfig(
        repositories=[_repository_from_config(r) for r in data.get("repositories", [])],
    )
    if "stale_threshold_days" in index_cfg:
        cfg.stale_threshold_days = index_cfg["stale_threshold_days"]
    if "preferred_versions" in index_cfg:
        cfg.preferred_versions = index_cfg["preferred_versions"]
    if "max_workers" in index_cfg:
        cfg.max_workers = index_cfg["max_workers"]
    if "scope_preference" in installed_cfg:
        cfg.scope_preference = list(installed_cfg["scope_preference"])
    return cfg


def load_config(path: Optional[str] = None) -> HackIndexConfig:
    """Load configuration from ``path`` or from the default locations.

    With no file anywhere, returns the built-in defaults (no repositories).

    Raises:
        ConfigError: the file cannot be read, parsed or validated.
    """
    path = path or _find_default_config()
    if not path:
        return HackIndexConfig()
    logger.debug("Loading config from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)


def apply_cli_overrides(cfg: HackIndexConfig, args) -> HackIndexConfig:
    """Apply CLI flags on top of file configuration; CLI wins."""
    for local_dir in getattr(args, "REPO_DIRS", None) or []:
        cfg.repositories.append(Repository(os.path.expanduser(local_dir), LocalRepo()))
    for spec in getattr(args, "REMOTE_REPOS", None) or []:
        name, sep, local_dir = spec.partition("=")
        if not sep or not name or not local_dir:
            raise ConfigError(f"Expected NAME=DIR for --remote, got {spec!r}")
        cfg.repositories.append(Repository(os.path.expanduser(local_dir), RemoteRepo(name)))
    if getattr(args, "STALE_DAYS", None) is not None:
        cfg.stale_threshold_days = int(args.STALE_DAYS)
    if getattr(args, "SCOPE_PREFERENCE", None):
        cfg.scope_preference = [s.strip() for s in args.SCOPE_PREFERENCE.split(",") if s.strip()]
    return cfg
