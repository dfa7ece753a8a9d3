from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator

from ..models import UsageGuidelines

log = logging.getLogger(__name__)

BuildProfile = Literal["standard", "dev", "testing"]

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "scoring.yaml"

_CONF_CACHE: Dict[str, Dict[str, Any]] = {}


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    key = str(Path(path).resolve())
    if key in _CONF_CACHE:
        return _CONF_CACHE[key]
    if not os.path.exists(key):
        raise FileNotFoundError(f"Missing config file: {path}")
    with open(key, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    _CONF_CACHE[key] = data
    return data


def clear_config_cache() -> None:
    _CONF_CACHE.clear()


class ScoringSettings(BaseModel):
    """
    Knobs that are fixed per deployment rather than per scoring call.
    """

    build: BuildProfile = "standard"
    strict_scan_history: bool = False
    required_storage: Dict[str, int] = Field(
        default_factory=lambda: {
            "standard": 20_000_000_000,
            "dev": 1_000_000,
            "testing": 1_000,
        }
    )
    usage_guidelines: UsageGuidelines = Field(default_factory=UsageGuidelines)

    @model_validator(mode="after")
    def validate_required_storage(self) -> "ScoringSettings":
        if self.build not in self.required_storage:
            raise ValueError(f"required_storage has no entry for build {self.build!r}")
        if any(v <= 0 for v in self.required_storage.values()):
            raise ValueError("required_storage values must be positive")
        return self

    @property
    def required_storage_bytes(self) -> int:
        return self.required_storage[self.build]


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    build = os.getenv("HOSTSCORE_BUILD")
    if build:
        overrides["build"] = build.strip().lower()
    strict = os.getenv("HOSTSCORE_STRICT")
    if strict is not None:
        overrides["strict_scan_history"] = strict.strip().lower() in {"1", "true", "yes", "on"}
    return overrides


def load_settings(path: Optional[Union[str, Path]] = None) -> ScoringSettings:
    """
    Load scoring settings from YAML, then apply HOSTSCORE_* environment overrides.

    Resolution order for the file: explicit `path`, then HOSTSCORE_CONFIG,
    then the packaged hostscore/config/scoring.yaml.
    """
    if path is None:
        path = os.getenv("HOSTSCORE_CONFIG") or DEFAULT_SETTINGS_PATH

    raw = dict(load_yaml(path))
    overrides = _env_overrides()
    if overrides:
        log.debug("Applying environment overrides to %s: %s", path, overrides)
        raw.update(overrides)
    return ScoringSettings.model_validate(raw)
