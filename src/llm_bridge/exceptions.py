"""Shared exception types for llm-bridge.

Provider API failures are *values* (:class:`~llm_bridge.errors.models.ErrorEnvelope`),
not exceptions. The classes below cover programmer errors and local setup
problems only.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base error for all llm-bridge failures."""


class UnsupportedProviderError(BridgeError, ValueError):
    """A provider tag outside the supported set was passed to the core."""

    def __init__(self, provider: object) -> None:
        self.provider = provider
        super().__init__(f"Unsupported provider: {provider!r}")


class ConfigError(BridgeError):
    """A settings file could not be read, parsed, or validated."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Invalid configuration" + (f": {detail}" if detail else ""))
