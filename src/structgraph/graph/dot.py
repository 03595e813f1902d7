"""Graphviz DOT renderer for structure graphs."""

import html
import logging
from collections.abc import Iterator

from ..config import LayoutConfig, RankDir
from .framework import GraphRenderer
from .models import EdgeSpec, GraphSpec, NodeSpec

logger = logging.getLogger(__name__)


class DotRenderer(GraphRenderer):
    """DOT renderer emitting one clustered record node per structure."""

    def __init__(self, layout: LayoutConfig | None = None):
        self.layout = layout or LayoutConfig()

    @property
    def format_name(self) -> str:
        return "dot"

    def get_file_extension(self) -> str:
        return ".dot"

    def render(self, spec: GraphSpec) -> str:
        """Render graph specification as a DOT document."""
        return "".join(self.iter_chunks(spec))

    def iter_chunks(self, spec: GraphSpec) -> Iterator[str]:
        """Yield the document piece by piece: header, nodes, edges, footer."""
        yield self._render_header(spec.directed)

        for node in spec.nodes:
            yield self._render_node(node)

        yield "\n"

        connector = "->" if spec.directed else "--"
        for edge in spec.edges:
            yield self._render_edge(edge, connector)

        yield "\n}\n"

    def _render_header(self, directed: bool) -> str:
        layout = self.layout
        keyword = "digraph" if directed else "graph"
        rankdir = RankDir(layout.rankdir).value
        newrank = "true" if layout.newrank else "false"

        lines = [
            f"{keyword} {layout.graph_name} {{",
            f'\trankdir = "{rankdir}";',
            f"\tnodesep={layout.nodesep};",
            f"\tnewrank={newrank};",
            f"\tranksep={layout.ranksep};",
            "",
            f'\tfontname="{layout.fontname}"',
            f'\tnode [fontname="{layout.fontname}"]',
            f'\tedge [fontname="{layout.fontname}"]',
            f'\tnode [fontsize = "{layout.node_fontsize}"];',
            f'\tedge [fontsize = "{layout.edge_fontsize}"];',
            "",
            "",
        ]
        return "\n".join(lines)

    def _render_node(self, node: NodeSpec) -> str:
        """Render a cluster holding the record node of one structure."""
        name = node.type_name
        lines = [
            f'subgraph "cluster_{self._escape(name)}" {{',
            f"  label = < <B>{html.escape(name)}</B> >",
            "  color = transparent",
        ]
        if node.rank is not None:
            lines.append(f"  rank = {node.rank}")
        lines.extend([
            "",
            f'"{self._escape(name)}" [',
            f'  label = "{self._escape(node.label)}" ',
            '  shape = "record"',
            "]",
            "}",
            "",
        ])
        return "\n".join(lines)

    def _render_edge(self, edge: EdgeSpec, connector: str) -> str:
        tail = self._endpoint(edge.tail, edge.tail_port)
        head = self._endpoint(edge.head, edge.head_port)
        if edge.label is not None:
            head += f' [ label = "{self._escape(edge.label)}" ]'
        return f"{tail} {connector} {head};\n"

    def _endpoint(self, name: str, port: str | None) -> str:
        endpoint = f'"{self._escape(name)}"'
        if port:
            endpoint += f":{port}"
        return endpoint

    def _escape(self, text: str) -> str:
        """Escape double quotes for a quoted DOT string."""
        return text.replace('"', '\\"')
