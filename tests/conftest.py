"""Pytest configuration and fixtures for structgraph tests."""

import pytest

from structgraph.config import LabelConfig, StructGraphConfig
from structgraph.graph import StructGraph


@pytest.fixture
def graph():
    """Directed graph with default configuration."""
    return StructGraph(directed=True)


@pytest.fixture
def undirected_graph():
    """Undirected graph with default configuration."""
    return StructGraph(directed=False)


@pytest.fixture
def strict_config():
    """Configuration that rejects colliding anchors."""
    return StructGraphConfig(label=LabelConfig(strict_anchors=True))
