from __future__ import annotations

"""
Configuration Tree Builder.

Derives the documentation tree from the static shape of a live
configuration value. Nested dataclass fields become branches; every other
documented field becomes a leaf carrying the storage identity that flag
correlation later relies on.
"""

import dataclasses
import logging
from typing import Any, FrozenSet, List, Set

from confdoc.core.analysis.introspection import (
    is_excluded_name,
    is_struct_type,
    parse_tag,
    visible_fields,
)
from confdoc.domain import constants as const
from confdoc.domain.config_models import ConfigNode, StorageRef
from confdoc.domain.errors import NotAddressableError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def root_node() -> ConfigNode:
    """Create the synthetic, untyped root of a documentation tree."""
    return ConfigNode(name=const.ROOT_NODE_NAME, is_branch=True)


def build_tree(config: Any) -> ConfigNode:
    """
    Build the documentation tree of a configuration value.

    Args:
        config: Live, mutable dataclass instance.

    Returns:
        ConfigNode: Root node named 'root' with the full field hierarchy.

    Raises:
        NotAddressableError: If the value (or a nested structure) cannot
            provide stable storage identities.
    """
    ensure_addressable(config, const.ROOT_NODE_NAME)
    tree = parse_tree(root_node(), config)
    logger.debug(
        f"Built configuration tree for {type(config).__qualname__}: "
        f"{sum(1 for _ in tree.iter_nodes())} nodes"
    )
    return tree


def parse_tree(node: ConfigNode, value: Any, _lineage: FrozenSet[int] = frozenset()) -> ConfigNode:
    """
    Attach the documented fields of 'value' as children of 'node'.

    Args:
        node: Branch node describing 'value'.
        value: Dataclass instance whose visible fields are documented.

    Returns:
        ConfigNode: A copy of 'node' with its children populated.
    """
    lineage = _lineage | {id(value)}
    children: List[ConfigNode] = []
    seen_names: Set[str] = set()

    for vf in visible_fields(type(value)):
        name, modifiers = parse_tag(vf.tag)
        if is_excluded_name(name):
            continue

        if name in seen_names:
            logger.warning(f"Duplicate documentation name '{name}' under '{node.path or node.name}'")
        seen_names.add(name)

        owner = _resolve_owner(value, vf.owner_path, node)
        path = f"{node.path}.{name}" if node.path else name

        if is_struct_type(vf.type):
            nested = getattr(owner, vf.name)
            ensure_addressable(nested, path)
            if id(nested) in lineage:
                raise NotAddressableError(f"Configuration value at '{path}' refers back to an ancestor")
            branch = ConfigNode(
                name=name,
                declared_type=vf.type,
                tag_modifiers=modifiers,
                is_branch=True,
                path=path,
            )
            children.append(parse_tree(branch, nested, lineage))
        else:
            children.append(ConfigNode(
                name=name,
                declared_type=vf.type,
                tag_modifiers=modifiers,
                storage=StorageRef.of(owner, vf.name),
                path=path,
            ))

    return dataclasses.replace(node, children=tuple(children))


def ensure_addressable(value: Any, where: str) -> None:
    """
    Verify that 'value' is a live, mutable dataclass instance.

    Raises:
        NotAddressableError: For classes, plain values or frozen dataclasses.
    """
    if isinstance(value, type) or not dataclasses.is_dataclass(value):
        raise NotAddressableError(
            f"Configuration value at '{where}' is not a dataclass instance: {type(value).__name__}"
        )
    params = getattr(type(value), "__dataclass_params__", None)
    if params is not None and params.frozen:
        raise NotAddressableError(
            f"Configuration value at '{where}' is a frozen dataclass ({type(value).__qualname__})"
        )

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _resolve_owner(value: Any, owner_path: tuple, node: ConfigNode) -> Any:
    """Follow the embedding chain from 'value' to the instance owning a field."""
    owner = value
    for attr in owner_path:
        owner = getattr(owner, attr)
        ensure_addressable(owner, f"{node.path or node.name}.{attr}")
    return owner
