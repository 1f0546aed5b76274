"""Pytest configuration for repository test runs."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import StepGraphConfig


@pytest.fixture()
def config(tmp_path: Path) -> StepGraphConfig:
    """Config rooted at an empty temporary data directory."""
    return StepGraphConfig(data_root=tmp_path)
