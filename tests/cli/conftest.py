"""Shared fixtures for CLI tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], str]:
    """Write *data* to a JSON file under tmp_path and return its path."""

    def _write(name: str, data: Any) -> str:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    return _write
