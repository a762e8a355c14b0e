"""Settings for llm-bridge — pricing source and tracing.

Settings are optional: every field has a default, so the library works
without a file. The CLI (and any embedding service) can point
:func:`load_settings` at a YAML file such as::

    pricing:
      source_url: ${LLM_BRIDGE_PRICING_URL}
      timeout: 5
    telemetry:
      enabled: true
      otlp_endpoint: http://localhost:4317
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from llm_bridge.exceptions import ConfigError

DEFAULT_PRICING_URL = "https://raw.githubusercontent.com/AgentOps-AI/tokencost/main/tokencost/model_prices.json"
CONFIG_ENV_VAR = "LLM_BRIDGE_CONFIG"


class PricingSettings(BaseModel):
    """Where model prices and context limits come from."""

    enabled: bool = True
    source_url: str = DEFAULT_PRICING_URL
    timeout: float = Field(default=10.0, gt=0)


class TelemetrySettings(BaseModel):
    """OpenTelemetry export options; tracing is a no-op unless enabled."""

    enabled: bool = False
    service_name: str = "llm-bridge"
    export_to_console: bool = False
    otlp_endpoint: str | None = None


class BridgeSettings(BaseModel):
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)


class SettingsLoader:
    """Load and validate a YAML settings file into :class:`BridgeSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> BridgeSettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing. An empty file
        yields the defaults.

        Raises:
            ConfigError: On unreadable files, YAML parse errors or schema
                validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        try:
            data: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            return BridgeSettings()
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            return BridgeSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_settings(path: str | Path | None = None) -> BridgeSettings:
    """Load settings from *path*, or from ``$LLM_BRIDGE_CONFIG``, or defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return BridgeSettings()
    return SettingsLoader(Path(path)).load()
