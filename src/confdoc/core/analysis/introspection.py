from __future__ import annotations

"""
Configuration Introspection Helpers.

Static analysis primitives over dataclass-based configuration schemas:
naming tag parsing, semantic type classification and enumeration of the
visible fields of a structure (including fields promoted from embedded
structures).
"""

import collections.abc
import dataclasses
import functools
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from confdoc.domain import constants as const
from confdoc.domain.errors import TypeResolutionError

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
)

_UNION_ORIGINS: Tuple[Any, ...] = (typing.Union,)
if hasattr(types, "UnionType"):
    _UNION_ORIGINS += (types.UnionType,)

# -----------------------------------------------------------------------------
# TAG PARSING
# -----------------------------------------------------------------------------

def parse_tag(tag: Any) -> Tuple[str, Tuple[str, ...]]:
    """
    Split a naming tag into its primary name and modifier tokens.

    'name2,omitempty' yields ('name2', ('omitempty',)). Modifiers keep their
    first occurrence order and are de-duplicated. A missing or malformed
    tag yields an empty name, which callers treat as "not documented".

    Args:
        tag: Raw tag value read from field metadata.

    Returns:
        Tuple[str, Tuple[str, ...]]: Primary name and modifiers.
    """
    if tag is None:
        return "", ()
    if not isinstance(tag, str):
        logger.debug(f"Ignoring malformed naming tag: {tag!r}")
        return "", ()
    if not tag:
        return "", ()

    parts = tag.split(const.TAG_DELIMITER)
    name = parts[0].strip()
    modifiers: List[str] = []
    for token in parts[1:]:
        token = token.strip()
        if token and token not in modifiers:
            modifiers.append(token)
    return name, tuple(modifiers)


def is_excluded_name(name: str) -> bool:
    return name == "" or name == const.EXCLUDED_FIELD_NAME

# -----------------------------------------------------------------------------
# TYPE CLASSIFICATION
# -----------------------------------------------------------------------------

def is_struct_type(tp: Any) -> bool:
    """True for dataclass types (the structured/composite kind)."""
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def optional_inner(tp: Any) -> Any:
    """Return T for Optional[T], or None when tp is not an optional."""
    if typing.get_origin(tp) not in _UNION_ORIGINS:
        return None
    arms = [a for a in typing.get_args(tp) if a is not type(None)]
    if len(arms) == 1 and len(typing.get_args(tp)) == 2:
        return arms[0]
    return None


def classify_type(tp: Any) -> str:
    """
    Map a static type to its short semantic label.

    Args:
        tp: Resolved annotation, or None when the type is absent.

    Returns:
        str: 'int', 'float', 'list[T]', '*T', 'module.Struct' or the
        underlying kind name.
    """
    if tp is None:
        return const.UNKNOWN_TYPE_LABEL

    if isinstance(tp, type) and typing.get_origin(tp) is None:
        # bool derives from int
        if issubclass(tp, bool):
            return const.BOOL_TYPE_LABEL
        if issubclass(tp, int):
            return const.INT_TYPE_LABEL
        if issubclass(tp, float):
            return const.FLOAT_TYPE_LABEL
        if tp in _SEQUENCE_ORIGINS:
            return f"list[{const.UNKNOWN_TYPE_LABEL}]"
        if is_struct_type(tp):
            return f"{tp.__module__}.{tp.__qualname__}"
        return _kind_name(tp)

    inner = optional_inner(tp)
    if inner is not None:
        return const.POINTER_PREFIX + classify_type(inner)

    origin = typing.get_origin(tp)
    if origin in _SEQUENCE_ORIGINS:
        return f"list[{classify_type(_element_type(tp))}]"

    if origin in _UNION_ORIGINS:
        return "union"
    if origin is not None:
        name = getattr(origin, "__name__", None) or getattr(origin, "_name", None)
        if name:
            return str(name)
    return str(tp)


def _element_type(tp: Any) -> Any:
    args = typing.get_args(tp)
    if not args:
        return None
    if typing.get_origin(tp) is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        if all(a == args[0] for a in args):
            return args[0]
        return None
    return args[0]


def _kind_name(tp: type) -> str:
    """Name of the first builtin base of tp, or tp's own name."""
    for base in tp.__mro__:
        if base is object:
            break
        if base.__module__ == "builtins":
            return base.__name__
    return tp.__name__

# -----------------------------------------------------------------------------
# FIELD ENUMERATION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class VisibleField:
    """
    A field reachable by name on a structure, possibly through embedding.

    Attributes:
        field: The dataclass field object.
        type: Resolved annotation of the field.
        owner_path: Attribute chain leading from the structure to the
            instance that owns the field ('()' for direct fields).
        depth: Embedding depth; 0 for direct fields.
    """
    field: dataclasses.Field
    type: Any
    owner_path: Tuple[str, ...]
    depth: int

    @property
    def name(self) -> str:
        return self.field.name

    @property
    def tag(self) -> Any:
        return self.field.metadata.get(const.TAG_METADATA_KEY)

    @property
    def embedded(self) -> bool:
        return bool(self.field.metadata.get(const.EMBEDDED_METADATA_KEY, False)) and is_struct_type(self.type)


@functools.lru_cache(maxsize=None)
def resolved_hints(cls: type) -> Dict[str, Any]:
    """
    Evaluate the annotations of a dataclass into real types.

    String annotations (postponed evaluation) are resolved against the
    module namespace of the class, so classes defined inside a function
    and referenced by name cannot be resolved.

    Raises:
        TypeResolutionError: If any annotation cannot be evaluated.
    """
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError, AttributeError) as e:
        raise TypeResolutionError(
            f"Cannot resolve the field annotations of {cls.__module__}.{cls.__qualname__}: {e}"
        ) from e


def visible_fields(cls: type) -> List[VisibleField]:
    """
    Enumerate the visible fields of a dataclass in declaration order.

    Fields of embedded structures follow their embedding field, as if
    declared directly. On a name collision the shallower field wins, then
    the first declared one.

    Args:
        cls: Dataclass type to inspect.

    Returns:
        List[VisibleField]: Visible fields in stable order.
    """
    collected: List[VisibleField] = []
    _collect_fields(cls, (), 0, collected, (cls,))

    winners: Dict[str, VisibleField] = {}
    for vf in collected:
        current = winners.get(vf.name)
        if current is None or vf.depth < current.depth:
            winners[vf.name] = vf
    return [vf for vf in collected if winners[vf.name] is vf]


def _collect_fields(
        cls: type,
        owner_path: Tuple[str, ...],
        depth: int,
        out: List[VisibleField],
        lineage: Tuple[type, ...],
) -> None:
    hints = resolved_hints(cls)
    for f in dataclasses.fields(cls):
        vf = VisibleField(field=f, type=hints.get(f.name, f.type), owner_path=owner_path, depth=depth)
        out.append(vf)
        if vf.embedded and vf.type not in lineage:
            _collect_fields(vf.type, owner_path + (f.name,), depth + 1, out, lineage + (vf.type,))
