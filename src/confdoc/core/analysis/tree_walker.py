from __future__ import annotations

"""
Tree Walker.

Generic bottom-up traversal over documentation trees. 'walk' rebuilds the
tree node by node (nodes are immutable), 'fold' projects it into an
external representation such as the structured document.
"""

import dataclasses
from typing import Callable, Mapping, Optional

from confdoc.domain.config_models import ConfigBlock, ConfigNode, FlagInfo, StorageRef

ApplyFunc = Callable[[ConfigNode], ConfigNode]
TransformFunc = Callable[[ConfigNode], Optional[ConfigBlock]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def walk(node: ConfigNode, fn: ApplyFunc) -> ConfigNode:
    """
    Apply 'fn' to every node after its children have been transformed.

    The input tree is left untouched; sibling order is preserved.

    Args:
        node: Tree (or subtree) to transform.
        fn: Receives a node whose children are already transformed.

    Returns:
        ConfigNode: The transformed tree.
    """
    if node.children:
        node = dataclasses.replace(node, children=tuple(walk(c, fn) for c in node.children))
    return fn(node)


def fold(node: ConfigNode, fn: TransformFunc) -> Optional[ConfigBlock]:
    """
    Project a tree into ConfigBlock records.

    Each child's record is appended, in order, to its parent's 'fields'.
    When 'fn' returns None the node and its whole subtree are dropped.

    Args:
        node: Tree (or subtree) to fold.
        fn: Builds the record of a single node.

    Returns:
        Optional[ConfigBlock]: Record of 'node' with nested fields attached.
    """
    block = fn(node)
    if block is None:
        return None
    for child in node.children:
        child_block = fold(child, fn)
        if child_block is not None:
            block.fields.append(child_block)
    return block

# -----------------------------------------------------------------------------
# ANNOTATORS
# -----------------------------------------------------------------------------

def attach_flags(flag_map: Mapping[StorageRef, FlagInfo]) -> ApplyFunc:
    """
    Build a walk function binding leaves to the flags writing their storage.

    A leaf without description inherits the flag's usage text.
    """
    def _attach(node: ConfigNode) -> ConfigNode:
        if node.storage is None:
            return node
        flag = flag_map.get(node.storage)
        if flag is None:
            return node
        description = node.description or flag.usage
        return dataclasses.replace(node, flag=flag, description=description)

    return _attach
