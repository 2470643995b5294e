"""
Pytest configuration and shared fixtures for commitment tree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_tree = importlib.import_module("fixtures.tree_fixtures")

make_leaves = _tree.make_leaves
make_tree = _tree.make_tree
make_zeros = _tree.make_zeros


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def leaves():
    """Eight distinct field-element leaves."""
    return make_leaves(8)


@pytest.fixture
def empty_tree():
    """Empty height-4 tree over the default hash."""
    return make_tree(height=4)


@pytest.fixture
def filled_tree(leaves):
    """Height-4 tree holding the eight default leaves."""
    return make_tree(height=4, leaves=leaves)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep ZKPOOL_* variables from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("ZKPOOL_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
