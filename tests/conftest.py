"""
Root test configuration for the grouping project.

Tests live under unit/, mirroring the package tree. Shared model factories
are in fixtures/grouping_factories.py.

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def clear_grouping_env(monkeypatch):
    """Keep GROUPING_* variables from the host out of every test."""
    import os

    for key in list(os.environ):
        if key.startswith("GROUPING_") or key == "LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)

    from grouping.config.settings import get_grouping_settings

    get_grouping_settings.cache_clear()
    yield
    get_grouping_settings.cache_clear()
