"""Model pricing and capability lookup backed by a remote JSON price table.

The table maps model names to details such as ``max_input_tokens`` and
``input_cost_per_token``. It is fetched lazily with ``httpx`` and kept on the
:class:`ModelMetadataCache` instance; lookups never raise. Any failure
(network error, non-200, bad JSON, unknown model) yields zero-valued
defaults so cost reporting degrades instead of breaking a request.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from llm_bridge.config import DEFAULT_PRICING_URL, PricingSettings
from llm_bridge.utils.telemetry import ATTR_PRICING_HIT, ATTR_PRICING_SOURCE, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class ModelDetails(BaseModel):
    """Capabilities and per-token prices of one model; unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    max_input_tokens: int = 0
    input_cost_per_token: float = 0.0
    output_cost_per_token: float = 0.0
    supports_function_calling: bool = False
    supports_vision: bool = False


class ModelCosts(BaseModel):
    """USD cost per input and output token."""

    input_cost: float = 0.0
    output_cost: float = 0.0


class ModelMetadataCache:
    """Per-instance cache of model details fetched from *source_url*.

    Pass *transport* to route requests through a custom ``httpx`` transport
    (tests use :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        source_url: str = DEFAULT_PRICING_URL,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._source_url = source_url
        self._timeout = timeout
        self._transport = transport
        self._prices: dict[str, Any] | None = None
        self._details: dict[str, ModelDetails] = {}

    @classmethod
    def from_settings(
        cls,
        settings: PricingSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ModelMetadataCache:
        return cls(settings.source_url, timeout=settings.timeout, transport=transport)

    @property
    def source_url(self) -> str:
        return self._source_url

    def clear(self) -> None:
        """Forget the fetched table and every cached model."""
        self._prices = None
        self._details.clear()

    async def get_model_details(self, model: str) -> ModelDetails:
        """Details for *model*, or all-zero defaults when unavailable."""
        if not model:
            return ModelDetails()
        cached = self._details.get(model)
        if cached is not None:
            return cached

        prices = await self._load_prices()
        if prices is None:
            return ModelDetails()

        entry = _lookup(prices, model)
        if not isinstance(entry, dict):
            logger.debug("No pricing entry for model %r", model)
            return ModelDetails()
        try:
            details = ModelDetails.model_validate({k: v for k, v in entry.items() if v is not None})
        except ValueError:
            logger.warning("Malformed pricing entry for model %r", model)
            return ModelDetails()
        self._details[model] = details
        return details

    async def get_model_input_token_limit(self, model: str) -> int:
        details = await self.get_model_details(model)
        return details.max_input_tokens

    async def get_model_costs(self, model: str) -> ModelCosts:
        details = await self.get_model_details(model)
        return ModelCosts(
            input_cost=details.input_cost_per_token,
            output_cost=details.output_cost_per_token,
        )

    async def _load_prices(self) -> dict[str, Any] | None:
        if self._prices is not None:
            return self._prices

        with _tracer.start_as_current_span("bridge.pricing.fetch") as span:
            span.set_attribute(ATTR_PRICING_SOURCE, self._source_url)
            try:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.get(self._source_url)
                    response.raise_for_status()
                    data = response.json()
            except Exception as exc:
                # Failures are not cached; the next lookup retries.
                logger.warning("Failed to fetch model prices from %s: %s", self._source_url, exc)
                span.set_attribute(ATTR_PRICING_HIT, False)
                return None

            if not isinstance(data, dict):
                logger.warning("Model price table at %s is not a JSON object", self._source_url)
                span.set_attribute(ATTR_PRICING_HIT, False)
                return None

            span.set_attribute(ATTR_PRICING_HIT, True)
            self._prices = data
            return data


def _lookup(prices: dict[str, Any], model: str) -> Any:
    """Exact name first, then without a ``provider/`` or ``models/`` prefix."""
    if model in prices:
        return prices[model]
    if "/" in model:
        return prices.get(model.rsplit("/", 1)[1])
    return None
