"""Graph assembly and emission for structure graphs."""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, TextIO

from ..config import StructGraphConfig, create_default_config
from ..errors import DotFileCreateError, DotFileWriteError, NotAStructureError, RendererError
from ..introspect import is_structure, normalize, type_name
from .label import LabelBuilder
from .models import EdgeSpec, GraphSpec, NodeSpec

logger = logging.getLogger(__name__)


class GraphRenderer(ABC):
    """Abstract base class for graph renderers."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the output format."""
        pass

    @abstractmethod
    def render(self, spec: GraphSpec) -> str:
        """Render graph specification to string format."""
        pass

    def iter_chunks(self, spec: GraphSpec) -> Iterator[str]:
        """Yield the rendered document in pieces, in output order."""
        yield self.render(spec)

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format."""
        pass


class StructGraph:
    """Accumulates structures and connections and emits them as a graph.

    The directed/undirected mode is fixed at construction. Registrations are
    appended in call order and never deduplicated.

    Example:
        graph = StructGraph(directed=True)
        graph.add_struct(Person, flatten=["address"])
        graph.add_struct(Address, rank=1)
        graph.connect(Person, "address", Address, "", label="lives at")
        graph.emit(sys.stdout)
    """

    def __init__(
        self,
        directed: bool = True,
        config: StructGraphConfig | None = None,
        renderer: GraphRenderer | None = None,
    ):
        self.config = config or create_default_config()
        self._spec = GraphSpec(directed=directed)

        label_config = self.config.label
        self.label_builder = LabelBuilder(
            max_depth=label_config.max_depth,
            internal_prefix=label_config.internal_prefix,
            strict_anchors=label_config.strict_anchors,
        )

        if renderer is None:
            from .dot import DotRenderer
            renderer = DotRenderer(self.config.layout)
        self.renderer = renderer

    @property
    def directed(self) -> bool:
        return self._spec.directed

    @property
    def spec(self) -> GraphSpec:
        """The accumulated graph document."""
        return self._spec

    def _name(self, tp: Any) -> str:
        return type_name(tp, qualified=self.config.label.qualified_names)

    def add_struct(
        self,
        value: Any,
        flatten: Iterable[str] | None = (),
        *,
        rank: int | None = None,
        no_fields: bool = False,
    ) -> None:
        """Register a structure as a clustered record node.

        Args:
            value: Structure class or instance, or a single-level wrapper of one
            flatten: Field names whose nested structures are inlined into the label
            rank: Optional rank hint written on the structure's cluster
            no_fields: Collapse the label to a field-count summary

        Raises:
            NotAStructureError: If ``value`` does not resolve to a structure
        """
        _, tp = normalize(value)
        if not is_structure(tp):
            raise NotAStructureError(tp)

        if no_fields:
            label = self.label_builder.summary(tp)
        else:
            label = self.label_builder.build_label(tp, flatten)

        name = self._name(tp)
        self._spec.add_node(NodeSpec(type_name=name, label=label, rank=rank))
        logger.debug(f"Added structure {name}")

    def connect(
        self,
        value1: Any,
        anchor1: str,
        value2: Any,
        anchor2: str,
        label: str | None = None,
    ) -> None:
        """Declare a connection between two structures.

        Anchors are only attached to structure endpoints; an anchor given for a
        non-structure endpoint is ignored. Neither endpoint has to be registered.
        """
        _, tp1 = normalize(value1)
        _, tp2 = normalize(value2)

        edge = EdgeSpec(
            tail=self._name(tp1),
            head=self._name(tp2),
            tail_port=anchor1 if is_structure(tp1) and anchor1 else None,
            head_port=anchor2 if is_structure(tp2) and anchor2 else None,
            label=label,
        )
        self._spec.add_edge(edge)
        logger.debug(f"Connected {edge.tail} to {edge.head}")

    def emit(self, sink: TextIO) -> None:
        """Write the complete document to a text sink.

        The first failing write propagates; nothing is rolled back.
        """
        for edge in self._spec.get_dangling_edges():
            logger.warning(f"Connection {edge.tail} -> {edge.head} references an unregistered structure")

        logger.info(
            f"Emitting {self.renderer.format_name} graph with {len(self._spec.nodes)} nodes "
            f"and {len(self._spec.edges)} edges"
        )
        for chunk in self.renderer.iter_chunks(self._spec):
            sink.write(chunk)

    def render(self) -> str:
        """Render the complete document to a string."""
        return self.renderer.render(self._spec)

    def emit_to_image(self, path: str | Path) -> Path:
        """Write ``<stem>.dot`` and render it to ``<stem>.<format>``.

        A trailing image suffix on ``path`` is stripped, so ``out`` and
        ``out.png`` produce the same files.

        Args:
            path: Output path stem, with or without the image suffix

        Returns:
            Path of the rendered image

        Raises:
            DotFileCreateError: If the .dot file cannot be created
            DotFileWriteError: If writing the document fails
            RendererError: If the renderer cannot be run or exits non-zero
        """
        renderer_config = self.config.renderer
        image_suffix = f".{renderer_config.format}"

        stem = str(path)
        if stem.endswith(image_suffix):
            stem = stem[: -len(image_suffix)]
        dot_file = Path(stem + self.renderer.get_file_extension())
        image_file = Path(stem + image_suffix)

        try:
            out = open(dot_file, "w", encoding="utf-8")
        except OSError as e:
            raise DotFileCreateError(f"error creating dot file {dot_file}: {e}") from e

        try:
            with out:
                self.emit(out)
        except OSError as e:
            raise DotFileWriteError(f"error writing dot file {dot_file}: {e}") from e

        command = [
            renderer_config.executable,
            f"-T{renderer_config.format}",
            f"-o{image_file}",
            str(dot_file),
        ]
        logger.info(f"Running {' '.join(command)}")
        try:
            subprocess.run(command, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise RendererError(f"error running {renderer_config.executable}: {e}") from e

        return image_file
