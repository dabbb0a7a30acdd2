# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for symgraph Python tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import symgraph
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from symgraph import Graph  # noqa: E402
from symgraph.config import EngineConfig, set_config  # noqa: E402
from symgraph.observability import SymgraphLogger  # noqa: E402

# Skip test modules that require optional dependencies not installed
collect_ignore = []

# Check for hypothesis
try:
    import hypothesis  # noqa: F401
except ImportError:
    collect_ignore.append("test_property_based.py")


@pytest.fixture(autouse=True)
def fresh_defaults():
    """Isolate the process-wide config and logger between tests."""
    SymgraphLogger.reset()
    set_config(EngineConfig())
    yield
    set_config(None)
    SymgraphLogger.reset()


@pytest.fixture
def graph():
    return Graph("test")
