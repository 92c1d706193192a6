from __future__ import annotations

"""
Tree Renderer.

Converts documentation trees into an indented, brace-delimited text
listing and serializes structured documents to YAML or JSON.
"""

import json
from typing import List

import yaml

from confdoc.core.analysis.introspection import classify_type
from confdoc.domain import constants as const
from confdoc.domain.config_models import ConfigBlock, ConfigNode

# -----------------------------------------------------------------------------
# TEXT TREE
# -----------------------------------------------------------------------------

def render_text_tree(node: ConfigNode, depth: int = 0) -> str:
    """
    Render a node and its descendants as an indented text tree.

    Branches print as 'name {' ... '}', leaves as 'name: type' followed by
    ' -flag=default' when a flag is bound.

    Args:
        node: Node to render.
        depth: Indentation level of 'node'.

    Returns:
        str: Rendered text without a trailing newline.
    """
    lines: List[str] = []
    _render_node(node, depth, lines, first_prefix="")
    return "\n".join(lines)


def _render_node(node: ConfigNode, depth: int, lines: List[str], first_prefix: str) -> None:
    """Append the lines of 'node'; its first line has no indentation."""
    if node.is_branch:
        if not node.children:
            lines.append(f"{first_prefix}{node.name} {{}}")
            return
        lines.append(f"{first_prefix}{node.name} {{")
        child_indent = const.INDENT_UNIT * (depth + 1)
        for child in node.children:
            _render_node(child, depth + 1, lines, first_prefix=child_indent)
        lines.append(f"{const.INDENT_UNIT * depth}}}")
        return

    line = f"{first_prefix}{node.name}: {classify_type(node.declared_type)}"
    if node.flag is not None:
        line += f" -{node.flag.name}={node.flag.default_text}"
    lines.append(line)

# -----------------------------------------------------------------------------
# STRUCTURED DOCUMENT
# -----------------------------------------------------------------------------

def render_document(block: ConfigBlock, fmt: str = const.DEFAULT_DOCUMENT_FORMAT) -> str:
    """
    Serialize a structured document.

    Args:
        block: Root record of the document.
        fmt: 'yaml' or 'json'.

    Returns:
        str: Serialized document, keys in declaration order.

    Raises:
        ValueError: For unsupported formats.
    """
    data = block.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    if fmt == "json":
        return json.dumps(data, ensure_ascii=False, indent=2) + "\n"
    raise ValueError(f"Unsupported document format: {fmt!r}")
