"""Token & cost estimation — heuristic counting, pricing lookup, observability."""

from llm_bridge.core.context.counter import (
    EstimatingCounter,
    TokenAnalysis,
    TokenCounter,
    count_universal_tokens,
    extract_model_from_universal,
)
from llm_bridge.core.context.observability import ObservabilityData, create_observability_data
from llm_bridge.core.context.pricing import ModelCosts, ModelDetails, ModelMetadataCache

__all__ = [
    "EstimatingCounter",
    "ModelCosts",
    "ModelDetails",
    "ModelMetadataCache",
    "ObservabilityData",
    "TokenAnalysis",
    "TokenCounter",
    "count_universal_tokens",
    "create_observability_data",
    "extract_model_from_universal",
]
