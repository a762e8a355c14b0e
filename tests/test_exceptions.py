"""Tests for the shared exception types."""

from __future__ import annotations

import pytest

from llm_bridge.exceptions import BridgeError, ConfigError, UnsupportedProviderError


class TestUnsupportedProviderError:
    def test_is_value_error(self) -> None:
        exc = UnsupportedProviderError("cohere")
        assert isinstance(exc, ValueError)
        assert isinstance(exc, BridgeError)

    def test_message_and_attribute(self) -> None:
        exc = UnsupportedProviderError("cohere")
        assert exc.provider == "cohere"
        assert str(exc) == "Unsupported provider: 'cohere'"

    def test_catchable_as_value_error(self) -> None:
        with pytest.raises(ValueError, match="Unsupported provider"):
            raise UnsupportedProviderError("mistral")


class TestConfigError:
    def test_detail_in_message(self) -> None:
        exc = ConfigError("bad timeout")
        assert exc.detail == "bad timeout"
        assert str(exc) == "Invalid configuration: bad timeout"

    def test_without_detail(self) -> None:
        assert str(ConfigError()) == "Invalid configuration"
