"""
Pytest configuration and shared fixtures for descriptor commitment tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
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

_trees = importlib.import_module("fixtures.trees")

make_scenario_tree = _trees.make_scenario_tree
scenario_json = _trees.scenario_json


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def scenario_tree():
    """Provide the scenario field tree."""
    return make_scenario_tree()


@pytest.fixture
def scenario_file(tmp_path):
    """Write the scenario tree to a JSON file and return its path."""
    path = tmp_path / "tree.json"
    path.write_text(scenario_json(indent=2), encoding="utf-8")
    return path


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_check_failed():
    """Helper to assert a specific check failed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert not checks[0].ok, f"Check '{check_id}' unexpectedly passed"
    return _assert
