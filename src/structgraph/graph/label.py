"""Record label generation for structure nodes.

Labels use the Graphviz record mini-language: entries separated by ``|``,
ports written as ``<anchor>`` and sub-records wrapped in braces. Nested
structures named in the flatten set are inlined up to ``max_depth`` levels.
"""

import logging
from collections.abc import Iterable

from ..config import MAX_LABEL_DEPTH
from ..errors import AnchorCollisionError
from ..introspect import FieldKind, count_fields, describe_fields, type_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5


class LabelBuilder:
    """Builds record labels by walking structure fields."""

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        internal_prefix: str = "_",
        strict_anchors: bool = False,
    ):
        if not 0 <= max_depth <= MAX_LABEL_DEPTH:
            raise ValueError(f"max_depth must be between 0 and {MAX_LABEL_DEPTH}, got: {max_depth}")
        self.max_depth = max_depth
        self.internal_prefix = internal_prefix
        self.strict_anchors = strict_anchors

    def build_label(
        self,
        tp: type,
        flatten: Iterable[str] | None = (),
        path: tuple[str, ...] = (),
    ) -> str:
        """Build the record label of a structure.

        Args:
            tp: Structure class to label
            flatten: Field names whose nested structures are inlined, at any depth
            path: Field path of ``tp`` below the root structure

        Returns:
            Label string, empty when ``path`` is deeper than ``max_depth``
        """
        if flatten is None:
            flatten = ()
        elif isinstance(flatten, str):
            flatten = [flatten]
        seen: set[str] = set()
        return self._label(tp, frozenset(flatten), tuple(path), seen, type_name(tp))

    def summary(self, tp: type) -> str:
        """Collapsed label reporting only the number of fields."""
        return f"<fields> {count_fields(tp)} ..."

    def _label(
        self,
        tp: type,
        flatten: frozenset[str],
        path: tuple[str, ...],
        seen: set[str],
        root_name: str,
    ) -> str:
        if len(path) > self.max_depth:
            return ""

        entries = []
        for field in describe_fields(tp, path, internal_prefix=self.internal_prefix):
            self._claim(field.anchor, seen, root_name)

            if field.kind == FieldKind.STRUCTURE and field.name in flatten:
                nested = self._label(field.type, flatten, field.path, seen, root_name)
                if nested:
                    nested = "|" + nested
                entries.append(f"{{<{field.anchor}> {field.name} {nested} }}")
            else:
                entries.append(f"<{field.anchor}> {field.name}")

        return "|".join(entries)

    def _claim(self, anchor: str, seen: set[str], root_name: str) -> None:
        if anchor in seen:
            if self.strict_anchors:
                raise AnchorCollisionError(root_name, anchor)
            logger.warning(f"Duplicate anchor '{anchor}' in label of {root_name}")
        seen.add(anchor)
