"""Exception types raised by structgraph."""


class StructGraphError(Exception):
    """Base class for all structgraph errors."""


class NotAStructureError(StructGraphError, TypeError):
    """Raised when a registration target does not resolve to a structure type."""

    def __init__(self, target_type: type):
        self.target_type = target_type
        name = getattr(target_type, "__name__", repr(target_type))
        super().__init__(f"not a structure type: {name}")


class AnchorCollisionError(StructGraphError, ValueError):
    """Raised when two fields of one label resolve to the same anchor."""

    def __init__(self, type_name: str, anchor: str):
        self.type_name = type_name
        self.anchor = anchor
        super().__init__(f"duplicate anchor '{anchor}' in label of {type_name}")


class RenderError(StructGraphError):
    """Base class for failures while writing a document or running the renderer."""


class DotFileCreateError(RenderError):
    """The .dot file could not be created."""


class DotFileWriteError(RenderError):
    """Writing the document into the .dot file failed."""


class RendererError(RenderError):
    """The external renderer could not be launched or exited with an error."""
