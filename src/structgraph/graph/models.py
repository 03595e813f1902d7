"""Graph document models: node blocks and connection statements."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NodeSpec:
    """Specification for one registered structure (a cluster holding one record node)."""
    type_name: str  # Node and cluster identifier
    label: str  # Record label
    rank: int | None = None  # Layout rank hint


@dataclass(frozen=True)
class EdgeSpec:
    """Specification for an explicit connection between two structures."""
    tail: str  # Source type name
    head: str  # Destination type name
    tail_port: str | None = None
    head_port: str | None = None
    label: str | None = None


@dataclass
class GraphSpec:
    """Complete graph document: append-only node and edge sequences."""
    directed: bool
    nodes: list[NodeSpec] = field(default_factory=list)
    edges: list[EdgeSpec] = field(default_factory=list)

    def add_node(self, node: NodeSpec) -> None:
        """Append a node block."""
        self.nodes.append(node)

    def add_edge(self, edge: EdgeSpec) -> None:
        """Append a connection statement."""
        self.edges.append(edge)

    def get_dangling_edges(self) -> list[EdgeSpec]:
        """Get edges referencing a type that was never registered as a node."""
        registered = {node.type_name for node in self.nodes}
        return [
            edge for edge in self.edges
            if edge.tail not in registered or edge.head not in registered
        ]
