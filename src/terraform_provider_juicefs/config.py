"""Provider process settings and logging setup."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_BINARY = "JUICEFS_PROVIDER_BINARY"
ENV_LOG_LEVEL = "JUICEFS_PROVIDER_LOG_LEVEL"
ENV_SELF_CHECK = "JUICEFS_PROVIDER_SELF_CHECK"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Terraform's TF_LOG levels mapped onto logging levels
_TF_LOG_LEVELS = {
    "TRACE": "DEBUG",
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARN": "WARNING",
    "ERROR": "ERROR",
}

_FALSY = {"0", "false", "no", "off"}


def tf_log_level(value: str) -> str:
    """Map a TF_LOG value onto a logging level; unknown values mean TRACE."""
    level = value.strip().upper()
    if level == "OFF":
        return "CRITICAL"
    return _TF_LOG_LEVELS.get(level, "DEBUG")


class ProviderSettings(BaseModel):
    """Settings of the provider process itself, not of any resource."""

    juicefs_binary: str = Field("juicefs", description="Wrapped JuiceFS executable")
    log_level: str = Field("WARNING", description="Python logging level name")
    self_check: bool = Field(
        True, description="Run `juicefs --version` when the provider is configured"
    )

    @field_validator("juicefs_binary")
    @classmethod
    def _binary_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("juicefs_binary cannot be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        level = _TF_LOG_LEVELS.get(level, level)
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return level


def _settings_from_env(env: Mapping[str, str]) -> Dict[str, object]:
    data: Dict[str, object] = {}
    if env.get(ENV_BINARY):
        data["juicefs_binary"] = env[ENV_BINARY]
    if env.get(ENV_LOG_LEVEL):
        data["log_level"] = env[ENV_LOG_LEVEL]
    elif env.get("TF_LOG"):
        data["log_level"] = tf_log_level(env["TF_LOG"])
    if env.get(ENV_SELF_CHECK):
        data["self_check"] = env[ENV_SELF_CHECK].strip().lower() not in _FALSY
    return data


def load_settings(
    path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
) -> ProviderSettings:
    """Build settings from the environment, then overlay an optional YAML file."""
    data = _settings_from_env(os.environ if env is None else env)
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        try:
            file_data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise RuntimeError(f"Failed to parse settings at {path}: {exc}") from exc
        if not isinstance(file_data, dict):
            raise RuntimeError(f"Settings file {path} must contain a mapping")
        data.update(file_data)
    return ProviderSettings.model_validate(data)


def configure_logging(level: str = "WARNING") -> None:
    """Send log records to stderr; stdout carries protocol and command output."""
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
        force=True,
    )
