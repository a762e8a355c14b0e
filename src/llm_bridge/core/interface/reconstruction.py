"""Reconstruction reporting — how faithfully a body can be written back.

A body read from provider X and written back to X is reproduced exactly.
Written to another provider, quality depends on how many of its elements
still carry an ``original`` snapshot from the target.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel

from llm_bridge.core.interface.models import Provider, SystemPrompt, UniversalBody
from llm_bridge.core.interface.translate import from_universal

PERFECT_QUALITY = 100
BASE_QUALITY = 80


class Preservation(BaseModel):
    total: int = 0
    with_original: int = 0

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.with_original / self.total * 100)


class OriginalDataSummary(BaseModel):
    has_top_level_original: bool
    original_provider: Provider | None = None
    messages: Preservation
    content: Preservation
    tools: Preservation


class ReconstructionInfo(BaseModel):
    result: dict[str, Any]
    reconstruction_quality: int
    used_original_data: bool
    summary: OriginalDataSummary


def can_perfectly_reconstruct(universal: UniversalBody, target: str) -> bool:
    return universal.original is not None and universal.original.provider == target


def get_reconstruction_quality(universal: UniversalBody, target: str) -> int:
    """Score 0-100: 100 for a same-provider write, else 80 plus up to 19 for preserved elements."""
    if can_perfectly_reconstruct(universal, target):
        return PERFECT_QUALITY

    total = 0
    preserved = 0
    for message in universal.messages:
        total += 1
        preserved += message.metadata.get("provider") == target
        for part in message.content:
            total += 1
            preserved += part.original is not None and part.original.provider == target
    for tool in universal.tools or []:
        total += 1
        preserved += tool.original is not None and tool.original.provider == target
    if isinstance(universal.system, SystemPrompt):
        total += 1
        preserved += universal.system.original is not None and universal.system.original.provider == target

    ratio = preserved / total if total else 0.0
    return min(math.floor(BASE_QUALITY + ratio * 20), PERFECT_QUALITY - 1)


def get_original_data_summary(universal: UniversalBody) -> OriginalDataSummary:
    """Count the messages, content parts and tools that still carry source data."""
    messages = Preservation()
    content = Preservation()
    for message in universal.messages:
        messages.total += 1
        messages.with_original += message.original is not None or "original_index" in message.metadata
        for part in message.content:
            content.total += 1
            content.with_original += part.original is not None

    tools = Preservation()
    for tool in universal.tools or []:
        tools.total += 1
        tools.with_original += tool.original is not None

    return OriginalDataSummary(
        has_top_level_original=universal.original is not None,
        original_provider=universal.original.provider if universal.original else None,
        messages=messages,
        content=content,
        tools=tools,
    )


def from_universal_with_info(
    provider: str,
    universal: UniversalBody,
    target_url: str | None = None,
) -> ReconstructionInfo:
    """Render *universal* for *provider* and report how much source data was reused."""
    return ReconstructionInfo(
        result=from_universal(provider, universal, target_url),
        reconstruction_quality=get_reconstruction_quality(universal, provider),
        used_original_data=can_perfectly_reconstruct(universal, provider),
        summary=get_original_data_summary(universal),
    )
