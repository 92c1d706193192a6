from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the documentation tool and translates
the parsed namespace into engine options.
"""

import argparse

from confdoc.domain import constants as const
from confdoc.domain.pipeline_models import DocOptions

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the confdoc CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=const.APP_NAME,
        description=(
            "Document every field of a dataclass configuration: name, type, "
            "default and the command-line flag controlling it."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {const.APP_VERSION}")

    # --- Providers ---
    p.add_argument(
        "-c", "--config",
        dest="config_ref",
        required=True,
        help="Configuration provider as 'module:attribute' (instance or factory).",
    )
    p.add_argument(
        "-b", "--blocks",
        dest="blocks_ref",
        default=None,
        help="Root block registry as 'module:attribute' (sequence or factory).",
    )
    p.add_argument(
        "--register",
        dest="register_ref",
        default=None,
        help="Flag registration callable 'module:attribute' taking (config, flag_set).",
    )

    # --- Outputs ---
    p.add_argument(
        "--format",
        dest="document_format",
        choices=const.DOCUMENT_FORMATS,
        default=const.DEFAULT_DOCUMENT_FORMAT,
        help="Serialization of the structured document.",
    )
    p.add_argument(
        "--no-tree",
        action="store_true",
        help="Do not print the text tree on stdout.",
    )
    p.add_argument(
        "--no-document",
        action="store_true",
        help="Do not write the structured document on stderr.",
    )
    p.add_argument(
        "--document-file",
        dest="document_file",
        default=None,
        help="Also write the structured document to this file.",
    )
    p.add_argument(
        "--strict-blocks",
        action="store_true",
        help="Fail when two registry entries share a match type.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Write a rotating diagnostic log to this path.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_options(args: argparse.Namespace) -> DocOptions:
    """
    Translate the argparse Namespace into engine options.

    The document is still built when only '--document-file' needs it.
    """
    return DocOptions(
        render_tree=not args.no_tree,
        build_document=(not args.no_document) or bool(args.document_file),
        document_format=args.document_format,
        strict_blocks=bool(args.strict_blocks),
    )
