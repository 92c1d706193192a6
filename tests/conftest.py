from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation so that 'src' and the sample providers are importable.
2. Shared fixtures for the sample configuration, its flags and blocks.
"""

import os
import sys
from typing import List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
_FIXTURES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "fixtures"))
for _path in (_SRC_PATH, _FIXTURES_PATH):
    if _path not in sys.path:
        sys.path.insert(0, _path)

import sample_app  # noqa: E402

from confdoc.core.services.flag_registry import FlagSet  # noqa: E402
from confdoc.domain.config_models import BlockSpec  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def app_config() -> sample_app.AppConfig:
    """Fresh, unregistered sample configuration."""
    return sample_app.AppConfig()


@pytest.fixture
def registered_flags(app_config: sample_app.AppConfig) -> FlagSet:
    """FlagSet populated by the sample configuration's registrar."""
    fs = FlagSet("test")
    app_config.register_flags(fs)
    return fs


@pytest.fixture
def sample_blocks() -> List[BlockSpec]:
    return sample_app.blocks()
