from __future__ import annotations

"""
Root Block Matching Service.

Marks the subtrees whose structural type is registered as an
independently documented configuration block, and projects the annotated
tree into the structured document.
"""

import dataclasses
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from confdoc.core.analysis.introspection import classify_type
from confdoc.core.analysis.tree_walker import fold, walk
from confdoc.domain.config_models import BlockSpec, ConfigBlock, ConfigNode
from confdoc.domain.errors import BlockRegistryError, ConfDocError

logger = logging.getLogger(__name__)

FlagPrefixFunc = Callable[[ConfigNode], str]

# -----------------------------------------------------------------------------
# MATCHING
# -----------------------------------------------------------------------------

def block_for_node(node: ConfigNode, blocks: Sequence[BlockSpec]) -> Optional[BlockSpec]:
    """
    Return the first registry entry whose type is the node's declared type.

    The untyped root never matches.
    """
    if node.declared_type is None:
        return None
    for block in blocks:
        if block.match_type is node.declared_type:
            return block
    return None


def mark_root_blocks(tree: ConfigNode, blocks: Sequence[BlockSpec]) -> ConfigNode:
    """
    Flag every node whose declared type is registered as a root block.

    Args:
        tree: Documentation tree.
        blocks: Registry in priority order; the first match wins.

    Returns:
        ConfigNode: Annotated copy of the tree.
    """
    def _mark(node: ConfigNode) -> ConfigNode:
        block = block_for_node(node, blocks)
        if block is None:
            return node
        return dataclasses.replace(
            node,
            is_root_block=True,
            root_block_name=block.name,
            root_block_description=block.description,
            description=node.description or block.description,
        )

    return walk(tree, _mark)


def find_duplicate_block_types(blocks: Sequence[BlockSpec]) -> List[Tuple[str, str]]:
    """
    List (winner, shadowed) name pairs of entries sharing a match type.
    """
    first_by_type: Dict[type, BlockSpec] = {}
    duplicates: List[Tuple[str, str]] = []
    for block in blocks:
        first = first_by_type.get(block.match_type)
        if first is None:
            first_by_type[block.match_type] = block
        else:
            duplicates.append((first.name, block.name))
    return duplicates


def check_block_registry(blocks: Sequence[BlockSpec], strict: bool = False) -> None:
    """
    Report registry entries that can never match.

    Raises:
        BlockRegistryError: In strict mode, if match types are not unique.
    """
    for block in blocks:
        if not isinstance(block.match_type, type):
            raise BlockRegistryError(f"Block '{block.name}' has no match type")

    for winner, shadowed in find_duplicate_block_types(blocks):
        msg = f"Blocks '{winner}' and '{shadowed}' share a match type; '{winner}' takes precedence"
        if strict:
            raise BlockRegistryError(msg)
        logger.warning(msg)

# -----------------------------------------------------------------------------
# DOCUMENT PROJECTION
# -----------------------------------------------------------------------------

def default_flag_prefix(node: ConfigNode) -> str:
    """
    Longest common dotted prefix of the flags bound inside a subtree.

    Flags 'server.http-port' and 'server.grpc-port' give 'server.'; an
    empty string is returned when there is no shared prefix.
    """
    names = [n.flag.name for n in node.iter_nodes() if n.flag is not None]
    if not names:
        return ""

    split_names = [name.split(".")[:-1] for name in names]
    common: List[str] = []
    for parts in zip(*split_names):
        if any(p != parts[0] for p in parts):
            break
        common.append(parts[0])
    return ".".join(common) + "." if common else ""


def to_document(tree: ConfigNode, flag_prefix_fn: FlagPrefixFunc = default_flag_prefix) -> ConfigBlock:
    """
    Fold an annotated tree into the structured document.

    A bound flag's usage takes precedence over the block description.

    Args:
        tree: Flag- and block-annotated tree.
        flag_prefix_fn: Computes the flag prefix advertised by root blocks.

    Returns:
        ConfigBlock: Root record of the document.

    Raises:
        ConfDocError: If the projection yields no root record.
    """
    def _transform(node: ConfigNode) -> ConfigBlock:
        block = ConfigBlock(
            name=node.name,
            description=node.description,
            type=classify_type(node.declared_type),
        )
        if node.is_root_block:
            block.root = True
            block.description = node.root_block_description
            prefix = flag_prefix_fn(node)
            if prefix:
                block.flag_prefix.append(prefix)
        if node.flag is not None:
            block.flag = node.flag.name
            block.description = node.flag.usage
        return block

    document = fold(tree, _transform)
    if document is None:
        raise ConfDocError(f"Document root '{tree.name}' was dropped by the projection")
    return document
