"""Resolution configuration helpers."""

import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

from .constants import (
    CONFIG_FILE,
    DEFAULT_GIT_EXECUTABLE,
    DEFAULT_GIT_TIMEOUT,
    MAX_ASCENT,
    REVISION_MODULE,
    VCS_INFO_FILE,
)
from .errors import ConfigError

# Environment overrides (env var -> field)
ENV_OVERRIDES = {
    "GIT_REVISION_GIT": "git_executable",
    "GIT_REVISION_TIMEOUT": "timeout",
    "GIT_REVISION_METADATA_FILE": "metadata_file",
}


@dataclass(frozen=True)
class RevisionConfig:
    """Configuration controlling revision resolution."""

    git_executable: str = DEFAULT_GIT_EXECUTABLE
    timeout: float = DEFAULT_GIT_TIMEOUT  # seconds, per git invocation
    metadata_file: str = VCS_INFO_FILE
    module_name: str = REVISION_MODULE
    max_ascent: int = MAX_ASCENT

    def __post_init__(self):
        if not self.git_executable:
            raise ConfigError("git_executable must not be empty")
        if not self.metadata_file:
            raise ConfigError("metadata_file must not be empty")
        if not self.module_name.endswith(".py"):
            raise ConfigError(f"module_name must be a .py file, got {self.module_name!r}")
        if (
            isinstance(self.timeout, bool)
            or not isinstance(self.timeout, (int, float))
            or not math.isfinite(self.timeout)
            or self.timeout <= 0
        ):
            raise ConfigError(f"timeout must be a finite positive number, got {self.timeout!r}")
        if isinstance(self.max_ascent, bool) or not isinstance(self.max_ascent, int) or self.max_ascent < 0:
            raise ConfigError(f"max_ascent must be a non-negative integer, got {self.max_ascent!r}")


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(RevisionConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {unknown}")
    return data


def _apply_env(config: RevisionConfig) -> RevisionConfig:
    overrides: Dict[str, Any] = {}
    for var, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value is None or value == "":
            continue
        if field_name == "timeout":
            try:
                overrides[field_name] = float(value)
            except ValueError as e:
                raise ConfigError(f"{var} must be a number of seconds, got {value!r}") from e
        else:
            overrides[field_name] = value
    return replace(config, **overrides) if overrides else config


def load_config(package_root: Path) -> RevisionConfig:
    """Load configuration from .git-revision.yaml if present, then env overrides.

    Raises:
        ConfigError: If the file or an override is invalid
    """
    cfg_path = package_root / CONFIG_FILE
    data = _read_config_file(cfg_path) if cfg_path.exists() else {}
    try:
        config = RevisionConfig(**data)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration in {cfg_path}: {e}") from e
    return _apply_env(config)
