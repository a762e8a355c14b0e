"""llm-bridge — lossless translation of LLM request bodies and errors between providers."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from llm_bridge.core.interface.detector import detect_provider as detect_provider
    from llm_bridge.core.interface.models import UniversalBody as UniversalBody
    from llm_bridge.core.interface.translate import from_universal as from_universal
    from llm_bridge.core.interface.translate import to_universal as to_universal
    from llm_bridge.core.interface.translate import (
        translate_between_providers as translate_between_providers,
    )
    from llm_bridge.errors.parser import parse_provider_error as parse_provider_error

_EXPORTS = {
    "UniversalBody": "llm_bridge.core.interface.models",
    "detect_provider": "llm_bridge.core.interface.detector",
    "from_universal": "llm_bridge.core.interface.translate",
    "to_universal": "llm_bridge.core.interface.translate",
    "translate_between_providers": "llm_bridge.core.interface.translate",
    "parse_provider_error": "llm_bridge.errors.parser",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'llm_bridge' has no attribute {name!r}")
