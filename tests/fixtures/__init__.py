"""
Test fixtures package for descriptor commitment tests.

This package provides factory functions for field trees used across
modules:
- trees.py: The scenario tree, its JSON form and its expected leaf paths

Usage:
    from fixtures import make_scenario_tree, SCENARIO_PATHS

    def test_something():
        commitment = commit_field_tree(make_scenario_tree())
        assert [leaf.path for leaf in commitment.leaves] == SCENARIO_PATHS
"""

from .trees import (
    SCENARIO_PATHS,
    make_leaves,
    make_scenario_tree,
    scenario_json,
)

__all__ = [
    "SCENARIO_PATHS",
    "make_leaves",
    "make_scenario_tree",
    "scenario_json",
]
