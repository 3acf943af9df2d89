"""
Load settings from config.yaml with optional env overrides.

Merge order: defaults <- config.yaml <- environment <- explicit overrides
(CLI flags). The merged `version_manager` section is validated once, in
Settings.from_mapping, so bad values are rejected before any AWS call.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .core.context import DEFAULT_STAGE, ServiceContext
from .core.errors import ConfigurationError
from .retention import validate_retention_count

CONFIG_ENV_VAR = "VERSION_MANAGER_CONFIG"
DEFAULT_CONFIG_FILE = "config.yaml"

# Defaults if no YAML or env
_DEFAULTS: Dict[str, Any] = {
    "version_manager": {
        "retain_policy": None,
        "api_version": None,
        "stage": DEFAULT_STAGE,
        "region": None,
        "version_prefix": "v",
        "alias_tag": "ALIAS",
        "api_output_key": "ApiGatewayRestApi",
        "tag_separators": "-.",
        "wait_delay_s": 30,
        "wait_max_attempts": 120,
    },
}


def _config_yaml_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, else $VERSION_MANAGER_CONFIG, else ./config.yaml."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_FILE


def _load_yaml(path: Optional[Union[str, Path]] = None) -> dict:
    config_path = _config_yaml_path(path)
    if not config_path.exists():
        if path is not None:
            raise ConfigurationError(f"Config file not found: {config_path}")
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    retain = os.environ.get("VERSION_MANAGER_RETAIN_POLICY")
    if retain:
        overrides.setdefault("version_manager", {})["retain_policy"] = retain
    api_version = os.environ.get("VERSION_MANAGER_API_VERSION")
    if api_version:
        overrides.setdefault("version_manager", {})["api_version"] = api_version
    stage = os.environ.get("VERSION_MANAGER_STAGE")
    if stage:
        overrides.setdefault("version_manager", {})["stage"] = stage
    region = os.environ.get("AWS_REGION")
    if region:
        overrides.setdefault("version_manager", {})["region"] = region
    return overrides


def get_config(path: Optional[Union[str, Path]] = None) -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml(path))
    merged = _deep_merge(merged, _env_overrides())
    return merged


@dataclass(frozen=True)
class Settings:
    """Validated version-manager settings."""

    retention_count: int
    candidate_version: Optional[str] = None
    stage: str = DEFAULT_STAGE
    region: Optional[str] = None
    version_prefix: str = "v"
    alias_tag: str = "ALIAS"
    api_output_key: str = "ApiGatewayRestApi"
    tag_separators: str = "-."
    wait_delay_s: float = 30.0
    wait_max_attempts: int = 120

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any]) -> "Settings":
        """Single validation pass over a `version_manager` section."""
        retention = validate_retention_count(section.get("retain_policy"))
        candidate = section.get("api_version")
        if candidate is not None:
            candidate = str(candidate).strip() or None
        try:
            wait_delay_s = float(section.get("wait_delay_s", 30))
            wait_max_attempts = int(section.get("wait_max_attempts", 120))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid waiter settings: {exc}") from exc
        if wait_delay_s <= 0 or wait_max_attempts <= 0:
            raise ConfigurationError("wait_delay_s and wait_max_attempts must be positive")
        return cls(
            retention_count=retention,
            candidate_version=candidate,
            stage=str(section.get("stage") or DEFAULT_STAGE),
            region=section.get("region"),
            version_prefix=str(section.get("version_prefix") or "v"),
            alias_tag=str(section.get("alias_tag") or "ALIAS"),
            api_output_key=str(section.get("api_output_key") or "ApiGatewayRestApi"),
            tag_separators=str(section.get("tag_separators") or "-."),
            wait_delay_s=wait_delay_s,
            wait_max_attempts=wait_max_attempts,
        )

    def context_for(self, service: Optional[str]) -> ServiceContext:
        return ServiceContext(service=service, stage=self.stage, region=self.region)


def load_settings(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """Merged config plus explicit overrides (None values ignored), validated."""
    section = dict(get_config(path)["version_manager"])
    for key, value in (overrides or {}).items():
        if value is not None:
            section[key] = value
    return Settings.from_mapping(section)
