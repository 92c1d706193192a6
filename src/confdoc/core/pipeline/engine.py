from __future__ import annotations

"""
Core documentation pipeline.

This module coordinates one documentation pass:
1. Builds the raw tree from the configuration value.
2. Registers the provider's flags against a fresh FlagSet.
3. Indexes flags by storage identity and binds them to leaves.
4. Marks root blocks from the block registry.
5. Renders the text tree and the structured document.
"""

import logging
from typing import Any, Callable, Dict, Optional, Sequence

from confdoc.core.analysis.tree_builder import build_tree
from confdoc.core.analysis.tree_renderer import render_text_tree
from confdoc.core.analysis.tree_walker import attach_flags, walk
from confdoc.core.services.block_matcher import (
    FlagPrefixFunc,
    check_block_registry,
    default_flag_prefix,
    mark_root_blocks,
    to_document,
)
from confdoc.core.services.flag_registry import FlagSet, index_flags_with_stats
from confdoc.domain.config_models import BlockSpec, ConfigNode
from confdoc.domain.errors import ConfDocError, FlagRegistrationError
from confdoc.domain.pipeline_models import (
    DocOptions,
    DocResult,
    create_error_result,
    create_success_result,
)

logger = logging.getLogger(__name__)

RegisterFunc = Callable[[Any, FlagSet], None]


def run_pipeline(
        config: Any,
        blocks: Optional[Sequence[BlockSpec]] = None,
        *,
        register: Optional[RegisterFunc] = None,
        options: Optional[DocOptions] = None,
        flag_prefix_fn: FlagPrefixFunc = default_flag_prefix,
) -> DocResult:
    """
    Execute a full documentation pass over a configuration value.

    Args:
        config: Live dataclass instance to document.
        blocks: Root block registry, in priority order.
        register: Optional 'register(config, flag_set)' replacing the
            value's own 'register_flags' method.
        options: Output switches.
        flag_prefix_fn: Computes the flag prefix of root blocks.

    Returns:
        DocResult: Annotated tree, rendered outputs and run metrics.
    """
    opts = options or DocOptions()
    registry = list(blocks or [])
    logger.info(f"Documenting configuration {type(config).__qualname__}")

    summary: Dict[str, Any] = {}
    try:
        # ---------------------------------------------------------------------
        # 1) Tree construction
        # ---------------------------------------------------------------------
        tree = build_tree(config)
        summary["nodes"] = sum(1 for _ in tree.iter_nodes())
        summary["leaves"] = sum(1 for n in tree.iter_nodes() if n.is_leaf)

        # ---------------------------------------------------------------------
        # 2) Flag registration and indexing
        # ---------------------------------------------------------------------
        flag_set = FlagSet("docs")
        register_flags(config, flag_set, register)
        flag_map, skipped = index_flags_with_stats(flag_set)
        summary["flags_registered"] = len(flag_set)
        summary["flags_indexed"] = len(flag_map)
        summary["flags_deprecated"] = skipped

        annotated = walk(tree, attach_flags(flag_map))
        summary["flags_bound"] = sum(1 for n in annotated.iter_nodes() if n.flag is not None)

        # ---------------------------------------------------------------------
        # 3) Root block marking
        # ---------------------------------------------------------------------
        check_block_registry(registry, strict=opts.strict_blocks)
        annotated = mark_root_blocks(annotated, registry)
        summary["root_blocks"] = sum(1 for n in annotated.iter_nodes() if n.is_root_block)

    except ConfDocError as e:
        msg = f"{type(e).__name__}: {e}"
        logger.error(msg)
        return create_error_result(msg, summary_extra=summary)

    # -------------------------------------------------------------------------
    # 4) Rendering
    # -------------------------------------------------------------------------
    text = render_text_tree(annotated) if opts.render_tree else ""
    document = to_document(annotated, flag_prefix_fn) if opts.build_document else None

    _log_unbound_leaves(annotated)
    logger.info(
        f"Documented {summary['leaves']} fields, {summary['flags_bound']} bound flags, "
        f"{summary['root_blocks']} root blocks"
    )
    return create_success_result(annotated, text=text, document=document, summary_extra=summary)


def register_flags(config: Any, flag_set: FlagSet, register: Optional[RegisterFunc] = None) -> None:
    """
    Let the configuration provider register its flags.

    Raises:
        FlagRegistrationError: If registration fails.
    """
    if register is not None:
        register(config, flag_set)
        return

    method = getattr(config, "register_flags", None)
    if method is None:
        logger.warning(f"{type(config).__qualname__} does not define register_flags; no flags documented")
        return
    if not callable(method):
        raise FlagRegistrationError(f"{type(config).__qualname__}.register_flags is not callable")
    method(flag_set)


def _log_unbound_leaves(tree: ConfigNode) -> None:
    for node in tree.iter_nodes():
        if node.is_leaf and node.flag is None:
            logger.debug(f"No flag bound to '{node.path}'")
