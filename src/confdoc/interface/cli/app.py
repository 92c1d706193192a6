from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, resolution of the
configuration and block registry providers, execution of the
documentation pass and delivery of its outputs (text tree on stdout,
structured document on stderr and optionally a file).
"""

import os
import sys
from typing import List, Optional

from confdoc.core.analysis.tree_renderer import render_document
from confdoc.core.pipeline.engine import run_pipeline
from confdoc.domain.errors import ConfDocError, ProviderResolutionError
from confdoc.domain.pipeline_models import DocResult
from confdoc.infra.logging import LoggingConfig, configure_logging, get_logger, shutdown_logging
from confdoc.infra.providers import load_blocks, load_config, load_register
from confdoc.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the documentation workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on introspection failure, 2 when a provider
        cannot be resolved, 130 when interrupted.
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)
    options = cli_args.args_to_options(args)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file), force=True)

    # 3. Provider resolution
    try:
        config = load_config(args.config_ref)
        blocks = load_blocks(args.blocks_ref)
        register = load_register(args.register_ref)
    except ProviderResolutionError as e:
        logger.error(str(e))
        shutdown_logging()
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except ConfDocError as e:
        logger.error(str(e))
        shutdown_logging()
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # 4. Documentation pass
    try:
        result = run_pipeline(config, blocks, register=register, options=options)
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        shutdown_logging()
        return 130

    # Drain queued log records before writing to the shared streams
    shutdown_logging()

    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return 1

    # 5. Output delivery
    _emit_outputs(result, args.document_format, args.no_document, args.document_file)
    return 0

# -----------------------------------------------------------------------------
# OUTPUT DELIVERY
# -----------------------------------------------------------------------------

def _emit_outputs(result: DocResult, fmt: str, no_document: bool, document_file: Optional[str]) -> None:
    """Write the text tree to stdout and the document to stderr and/or a file."""
    if result.text:
        print(result.text)
        sys.stdout.flush()

    if result.document is None:
        return

    serialized = render_document(result.document, fmt)
    if not no_document:
        sys.stderr.write(serialized)
        sys.stderr.flush()

    if document_file:
        _save_document(document_file, serialized)


def _save_document(path: str, content: str) -> None:
    """Persist the serialized document, creating parent directories."""
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
