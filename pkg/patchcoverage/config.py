"""Typed loader for patch-coverage.yml."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_FALLBACK_ENV = "PATCH_CHANGED_LINES"
DEFAULT_LOG_PREFIX = "Patch coverage: "

# Resolve relative to this file: pkg/patchcoverage/ -> repo root
CONFIG_FILE = Path(__file__).parent.parent.parent / "patch-coverage.yml"


class ConfigError(RuntimeError):
    """Raised when patch-coverage.yml is missing or malformed."""
    pass


_KEYS = {
    "fallback_env": "fallback_env",
    "fallbackEnv": "fallback_env",
    "log_prefix": "log_prefix",
    "logPrefix": "log_prefix",
    "verbose_renames": "verbose_renames",
    "verboseRenames": "verbose_renames",
}


def _require_env_name(value: Any, ctx: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{ctx}: expected string")
    s = value.strip()
    if not s:
        raise ConfigError(f"{ctx}: must be non-empty")
    if "=" in s or any(ch.isspace() for ch in s):
        raise ConfigError(f"{ctx}: not a valid environment variable name: {s!r}")
    return s


def _require_str(value: Any, ctx: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{ctx}: expected string")
    return value


def _require_bool(value: Any, ctx: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{ctx}: expected boolean")
    return value


@dataclass(frozen=True)
class PatchCoverageConfig:
    """Runtime options for changed-line loading."""
    fallback_env: str = DEFAULT_FALLBACK_ENV
    log_prefix: str = DEFAULT_LOG_PREFIX
    verbose_renames: bool = True

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None = None) -> "PatchCoverageConfig":
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigError("config: expected mapping")

        values: dict[str, Any] = {}
        for key, value in raw.items():
            field_name = _KEYS.get(key)
            if field_name is None:
                raise ConfigError(f"config: unknown key {key!r}")
            if field_name in values:
                raise ConfigError(f"config.{field_name}: given more than once")
            values[field_name] = value

        cfg = cls()
        return cls(
            fallback_env=_require_env_name(
                values.get("fallback_env", cfg.fallback_env), "config.fallback_env"
            ),
            log_prefix=_require_str(values.get("log_prefix", cfg.log_prefix), "config.log_prefix"),
            verbose_renames=_require_bool(
                values.get("verbose_renames", cfg.verbose_renames), "config.verbose_renames"
            ),
        )


def _load_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text())
    except FileNotFoundError:
        raise ConfigError(f"missing config file: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e


def load_config(path: Path | None = CONFIG_FILE) -> PatchCoverageConfig:
    """Load config from `path` (the repo-root file by default); `None` means built-in defaults."""
    if path is None:
        return PatchCoverageConfig()
    raw = _load_yaml(path)
    # An empty file parses to None: defaults.
    return PatchCoverageConfig.from_dict(raw)
