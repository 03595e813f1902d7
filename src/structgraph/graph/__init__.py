"""Graph assembly and rendering for structgraph.

Structures are registered as clustered Graphviz record nodes and explicit
connections become edges between field ports.
"""

from .dot import DotRenderer
from .framework import GraphRenderer, StructGraph
from .label import DEFAULT_MAX_DEPTH, LabelBuilder
from .models import EdgeSpec, GraphSpec, NodeSpec

__all__ = [
    "StructGraph",
    "GraphRenderer",
    "DotRenderer",
    "LabelBuilder",
    "DEFAULT_MAX_DEPTH",
    "GraphSpec",
    "NodeSpec",
    "EdgeSpec",
]
