from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from autonomy_gate.features.role_inference import DEFAULT_FALLBACK_ROLE, RoleCatalog

_AUTONOMY_CONFIG_CACHE: dict[str, Any] | None = None
_ROLE_CATALOG_CACHE: RoleCatalog | None = None
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "autonomy.yaml"


def _config_path() -> Path:
    override = (os.getenv("AUTONOMY_CONFIG_PATH") or "").strip()
    return Path(override) if override else _DEFAULT_CONFIG_PATH


def get_autonomy_config() -> dict[str, Any]:
    """Load the role catalog / verdict config from config/autonomy.yaml and cache it."""
    global _AUTONOMY_CONFIG_CACHE

    if _AUTONOMY_CONFIG_CACHE is not None:
        return _AUTONOMY_CONFIG_CACHE

    path = _config_path()
    if not path.exists():
        raise RuntimeError(
            f"Autonomy config not found at '{path}'. "
            "Expected file: config/autonomy.yaml"
        )

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Failed to read autonomy config '{path}': {exc}") from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in autonomy config '{path}': {exc}") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"Invalid autonomy config '{path}': expected a top-level mapping.")

    _AUTONOMY_CONFIG_CACHE = parsed
    return _AUTONOMY_CONFIG_CACHE


def get_autonomy_value(path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'verdict.pass_threshold'."""
    if not path:
        return default

    current: Any = get_autonomy_config()
    for key in path.split("."):
        if not isinstance(current, dict):
            return default
        if key not in current:
            return default
        current = current[key]
    return current


def get_role_catalog() -> RoleCatalog:
    """Build the immutable role catalog once per process."""
    global _ROLE_CATALOG_CACHE

    if _ROLE_CATALOG_CACHE is not None:
        return _ROLE_CATALOG_CACHE

    roles = get_autonomy_value("roles", {}) or {}
    if not isinstance(roles, dict):
        raise RuntimeError("Invalid autonomy config: 'roles' must be a mapping of role name to keywords.")
    for name, keywords in roles.items():
        if not isinstance(keywords, list):
            raise RuntimeError(f"Invalid autonomy config: keywords for role '{name}' must be a list.")

    fallback = str(get_autonomy_value("fallback_role", DEFAULT_FALLBACK_ROLE) or DEFAULT_FALLBACK_ROLE)
    _ROLE_CATALOG_CACHE = RoleCatalog.from_mapping(roles, fallback_role=fallback)
    return _ROLE_CATALOG_CACHE


def reset_autonomy_config_cache() -> None:
    global _AUTONOMY_CONFIG_CACHE, _ROLE_CATALOG_CACHE
    _AUTONOMY_CONFIG_CACHE = None
    _ROLE_CATALOG_CACHE = None
