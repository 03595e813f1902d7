"""structgraph - Render record types as Graphviz structure graphs.

structgraph introspects dataclasses, pydantic models and named tuples and
emits DOT documents with one record node per structure and explicit,
field-anchored connections between them.
"""

__version__ = "0.1.0"
__description__ = "Render record types as Graphviz structure graphs"

from structgraph.config import StructGraphConfig, load_config
from structgraph.errors import (
    AnchorCollisionError,
    DotFileCreateError,
    DotFileWriteError,
    NotAStructureError,
    RenderError,
    RendererError,
    StructGraphError,
)
from structgraph.graph import StructGraph

__all__ = [
    "__version__",
    "__description__",
    "StructGraph",
    "StructGraphConfig",
    "load_config",
    "StructGraphError",
    "NotAStructureError",
    "AnchorCollisionError",
    "RenderError",
    "DotFileCreateError",
    "DotFileWriteError",
    "RendererError",
]
