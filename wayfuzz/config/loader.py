"""Settings file loading for wayfuzz."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import Settings

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_ENV_VAR = "WAYFUZZ_CONFIG"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "settings"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the settings file from an explicit path or the environment."""

    explicit_path: Path | None = None

    def resolve(self) -> Path | None:
        if self.explicit_path is not None:
            return self.explicit_path.expanduser()
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()
        return None


def load_settings(
    path: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> Settings:
    """Build :class:`Settings` from an optional file plus command-line overrides.

    Overrides whose value is ``None`` are ignored so that unset flags fall back
    to the file (or model defaults).
    """

    config_path = ConfigLocator(path).resolve()
    payload: dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        if config_path.suffix not in CONFIG_EXTENSIONS:
            raise ConfigError(f"Unsupported configuration format: {config_path.suffix}")
        try:
            payload = _read_file(config_path)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Could not parse {config_path}: {exc}") from exc
    for key, value in (overrides or {}).items():
        if value is not None:
            payload[key] = value
    try:
        return Settings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


__all__ = ["CONFIG_ENV_VAR", "CONFIG_EXTENSIONS", "ConfigLocator", "load_settings"]
