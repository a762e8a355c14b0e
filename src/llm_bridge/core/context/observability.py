"""Observability records — token and cost summary of one translate/edit cycle."""

from __future__ import annotations

import logging
import time

from pydantic import BaseModel, Field

from llm_bridge.core.context.counter import DEFAULT_OUTPUT_TOKENS
from llm_bridge.core.context.pricing import ModelCosts, ModelMetadataCache
from llm_bridge.core.interface.models import Provider
from llm_bridge.utils.telemetry import (
    ATTR_COST_SAVED,
    ATTR_MODEL,
    ATTR_TARGET_PROVIDER,
    ATTR_TOKENS_FINAL,
    ATTR_TOKENS_ORIGINAL,
    ATTR_TOKENS_SAVED,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

UNKNOWN_MODEL = "unknown_model"
_COST_PRECISION = 4


class ObservabilityData(BaseModel):
    original_token_count: int
    final_token_count: int
    tokens_saved: int
    cost_saved_usd: float = 0.0
    estimated_input_cost: float = 0.0
    estimated_output_cost: float = 0.0
    provider: Provider
    model: str
    context_modified: bool
    multimodal_content_count: int = 0
    tool_calls_count: int = 0
    request_id: str | None = None
    timestamp: float = Field(default_factory=time.time)


async def create_observability_data(
    original_tokens: int,
    final_tokens: int,
    provider: Provider,
    model: str,
    context_modified: bool,
    *,
    cache: ModelMetadataCache | None = None,
    estimated_output_tokens: int = DEFAULT_OUTPUT_TOKENS,
    multimodal_content_count: int = 0,
    tool_calls_count: int = 0,
    request_id: str | None = None,
) -> ObservabilityData:
    """Summarise token savings and estimated cost for one request.

    Costs come from *cache*; without one, or for an unknown model, every
    cost field is zero. Never raises on lookup failure.
    """
    tokens_saved = max(0, original_tokens - final_tokens)

    with _tracer.start_as_current_span("bridge.observability") as span:
        span.set_attribute(ATTR_TARGET_PROVIDER, provider)
        span.set_attribute(ATTR_MODEL, model)
        span.set_attribute(ATTR_TOKENS_ORIGINAL, original_tokens)
        span.set_attribute(ATTR_TOKENS_FINAL, final_tokens)
        span.set_attribute(ATTR_TOKENS_SAVED, tokens_saved)

        costs = ModelCosts()
        if cache is not None and model and model != UNKNOWN_MODEL:
            try:
                costs = await cache.get_model_costs(model)
            except Exception as exc:
                logger.warning("Cost lookup for model %r failed: %s", model, exc)

        input_cost = final_tokens * costs.input_cost
        output_cost = estimated_output_tokens * costs.output_cost
        cost_saved = tokens_saved * costs.input_cost if context_modified else 0.0
        span.set_attribute(ATTR_COST_SAVED, cost_saved)

    return ObservabilityData(
        original_token_count=original_tokens,
        final_token_count=final_tokens,
        tokens_saved=tokens_saved,
        cost_saved_usd=round(cost_saved, _COST_PRECISION),
        estimated_input_cost=round(input_cost, _COST_PRECISION),
        estimated_output_cost=round(output_cost, _COST_PRECISION),
        provider=provider,
        model=model,
        context_modified=context_modified,
        multimodal_content_count=multimodal_content_count,
        tool_calls_count=tool_calls_count,
        request_id=request_id,
    )
