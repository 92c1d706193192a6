from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the options and result structures used to communicate between
the documentation engine and the interface layer (CLI).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from confdoc.domain.config_models import ConfigBlock, ConfigNode
from confdoc.domain.constants import DEFAULT_DOCUMENT_FORMAT

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DocOptions:
    """
    Runtime switches of a documentation pass.

    Attributes:
        render_tree: Produce the indented text tree.
        build_document: Produce the structured document.
        document_format: Serialization format of the document (yaml/json).
        strict_blocks: Fail on duplicate match types in the block registry.
    """
    render_tree: bool = True
    build_document: bool = True
    document_format: str = DEFAULT_DOCUMENT_FORMAT
    strict_blocks: bool = False


@dataclass(frozen=True)
class DocResult:
    """
    Outcome of a complete documentation pass.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        tree: Flag- and block-annotated documentation tree.
        text: Rendered text tree (empty when disabled).
        document: Structured document root (None when disabled).
        summary: Counters describing the run.
    """
    ok: bool
    error: str

    tree: Optional[ConfigNode] = None
    text: str = ""
    document: Optional[ConfigBlock] = None

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(error: str, summary_extra: Optional[Dict[str, Any]] = None) -> DocResult:
    """
    Create a failed documentation result.

    Args:
        error: Detailed error description.
        summary_extra: Metrics gathered before the failure.

    Returns:
        DocResult: An immutable error result object.
    """
    return DocResult(ok=False, error=error, summary=summary_extra or {})


def create_success_result(
        tree: ConfigNode,
        text: str = "",
        document: Optional[ConfigBlock] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> DocResult:
    """
    Create a successful documentation result.

    Args:
        tree: The annotated documentation tree.
        text: Rendered text tree.
        document: Structured document root.
        summary_extra: Execution metrics.

    Returns:
        DocResult: An immutable success result object.
    """
    return DocResult(
        ok=True,
        error="",
        tree=tree,
        text=text,
        document=document,
        summary=summary_extra or {},
    )
