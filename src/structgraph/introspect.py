"""Structure introspection: type normalization and field descriptors.

A structure is a dataclass, a pydantic model or a ``typing.NamedTuple``.
Wrappers are unwrapped a single level only: ``Optional[list[X]]`` resolves
to ``list[X]``, which is not a structure.
"""

import collections.abc
import dataclasses
import inspect
import logging
import sys
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
    collections.abc.Collection,
)
_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class FieldKind(str, Enum):
    """Kinds of structure fields."""
    SCALAR = "scalar"
    STRUCTURE = "structure"


@dataclass(frozen=True)
class FieldDescriptor:
    """A single field of a structure, located by its path from the root."""
    name: str
    kind: FieldKind
    type: Any  # Normalized field type
    path: tuple[str, ...]  # Ancestor field names plus own name

    @property
    def anchor(self) -> str:
        """Port identifier of this field inside the enclosing record node."""
        return "_".join(self.path)


def _is_namedtuple_class(tp: Any) -> bool:
    return (
        isinstance(tp, type)
        and issubclass(tp, tuple)
        and hasattr(tp, "_fields")
    )


def is_structure(tp: Any) -> bool:
    """Return True if ``tp`` is a structure class."""
    # Parameterized generics such as list[X] pass isinstance(..., type)
    if typing.get_origin(tp) is not None or not isinstance(tp, type):
        return False
    if dataclasses.is_dataclass(tp):
        return True
    if issubclass(tp, BaseModel):
        return True
    return _is_namedtuple_class(tp)


def normalize_annotation(tp: Any) -> Any:
    """Unwrap one level of optional or sequence wrapping from a type annotation."""
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in (typing.Union, types.UnionType):
        remaining = [arg for arg in args if arg is not type(None)]
        if len(remaining) == 1 and len(remaining) < len(args):
            return remaining[0]
        return tp

    if origin in _SEQUENCE_ORIGINS and args:
        return args[0]

    return tp


def normalize(value: Any) -> tuple[Any, Any]:
    """Resolve a value to its underlying structure type.

    Accepts structure classes, structure instances, typing annotations and
    non-empty containers. Only one level of wrapping is removed.

    Returns:
        Tuple of the (possibly unwrapped) value and its resolved type
    """
    if typing.get_origin(value) is not None:
        inner = normalize_annotation(value)
        return inner, inner

    if isinstance(value, type):
        return value, value

    if is_structure(type(value)):
        return value, type(value)

    if isinstance(value, _SEQUENCE_TYPES) and value:
        value = next(iter(value))

    if isinstance(value, type):
        return value, value
    return value, type(value)


def type_name(tp: Any, qualified: bool = False) -> str:
    """Display name of a type, used as node and cluster identifier."""
    if isinstance(tp, type):
        if qualified:
            return f"{tp.__module__}.{tp.__qualname__}"
        return tp.__name__
    return str(tp)


def _resolve_annotation(owner: type, name: str, annotation: Any) -> Any:
    """Evaluate one string annotation against the module of its defining class."""
    if not isinstance(annotation, str):
        return annotation

    module = sys.modules.get(owner.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    localns = {owner.__name__: owner}
    holder = types.SimpleNamespace(__annotations__={name: annotation})
    try:
        return typing.get_type_hints(holder, globalns, localns)[name]
    except (NameError, TypeError, AttributeError, SyntaxError) as e:
        logger.debug(f"Could not resolve annotation of {owner.__name__}.{name}: {e}")
        return annotation


def _field_annotation(tp: type, name: str) -> Any:
    for klass in tp.__mro__:
        annotations = inspect.get_annotations(klass)
        if name in annotations:
            return _resolve_annotation(klass, name, annotations[name])
    return Any


def _declared_fields(tp: type) -> list[tuple[str, Any]]:
    """Declared (name, annotation) pairs of a structure in declaration order.

    Annotations are resolved together when possible. If any of them cannot
    be resolved, each field is resolved on its own so that only the failing
    ones stay unresolved strings.
    """
    if issubclass(tp, BaseModel):
        return [(name, info.annotation) for name, info in tp.model_fields.items()]

    if dataclasses.is_dataclass(tp):
        names = [f.name for f in dataclasses.fields(tp)]
    else:
        names = list(tp._fields)

    try:
        hints = typing.get_type_hints(tp)
    except (NameError, TypeError) as e:
        logger.debug(f"Resolving fields of {tp.__name__} one by one: {e}")
        return [(name, _field_annotation(tp, name)) for name in names]

    return [(name, hints[name] if name in hints else _field_annotation(tp, name)) for name in names]


def count_fields(tp: type) -> int:
    """Number of declared fields of a structure, internal ones included."""
    return len(_declared_fields(tp))


def describe_fields(
    tp: type,
    path: tuple[str, ...] = (),
    internal_prefix: str = "_",
    include_internal: bool = False,
) -> list[FieldDescriptor]:
    """Build the ordered field descriptors of a structure.

    Args:
        tp: Structure class to describe
        path: Field path of ``tp`` relative to the root structure
        internal_prefix: Fields starting with this prefix are skipped
        include_internal: Keep internal fields instead of skipping them

    Returns:
        Field descriptors in declaration order
    """
    if not is_structure(tp):
        raise TypeError(f"{type_name(tp)} is not a structure type")

    descriptors = []
    for name, annotation in _declared_fields(tp):
        if not include_internal and name.startswith(internal_prefix):
            continue
        field_type = normalize_annotation(annotation)
        kind = FieldKind.STRUCTURE if is_structure(field_type) else FieldKind.SCALAR
        descriptors.append(FieldDescriptor(
            name=name,
            kind=kind,
            type=field_type,
            path=path + (name,),
        ))
    return descriptors
