from __future__ import annotations

"""
Logging Lifecycle for a Documentation Run.

A confdoc invocation is a single pass: logging is set up once by the CLI,
records produced while the tree is built and annotated are queued, and
the queue is drained before the text tree and the document are written
so that diagnostics never interleave with the outputs.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from confdoc.infra.logging.config import _LEVEL_MAP, LoggingConfig
from confdoc.infra.logging.handlers import (
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

# Markers stored on the root logger
_CONFIGURED_FLAG_ATTR: str = "_confdoc_configured"
_QUEUE_LISTENER_ATTR: str = "_confdoc_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Route every record of the run through one queue on the root logger.

    The root logger receives a single tagged QueueHandler; a QueueListener
    forwards queued records to the stderr console and, when 'log_file' is
    set, to a rotating diagnostic file. A second call keeps the current
    setup unless 'force' is given, which replaces it.

    Args:
        cfg: Level, sinks and formats for this run.
        force: Replace an existing confdoc setup.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    try:
        level_int = _parse_level(cfg.level)
        root.setLevel(level_int)

        _remove_our_handlers(root)
        _stop_existing_listener(root)

        sinks = _build_sinks(cfg, level_int)
        if not sinks:
            return root

        record_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        queue_handler = QueueHandler(record_queue)
        _tag_handler(queue_handler)

        listener = QueueListener(record_queue, *sinks, respect_handler_level=True)
        listener.start()
        root.addHandler(queue_handler)

        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)

        # Runs that end without shutdown_logging() still flush
        atexit.register(_safe_stop_listener, listener)
        return root

    except Exception:
        return _install_emergency_console(root)


def get_logger(name: str) -> logging.Logger:
    """Return the named logger; records propagate to the queued root."""
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """
    Drain the queue and stop the listener.

    Called by the CLI right before it writes the text tree and the document.
    Safe to call when logging was never configured.
    """
    _stop_existing_listener(logging.getLogger())


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _build_sinks(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    sinks: List[logging.Handler] = []

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level_int)
        console.setFormatter(logging.Formatter(cfg.console_fmt))
        _tag_handler(console)
        sinks.append(console)

    if cfg.log_file:
        file_handler = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if file_handler:
            sinks.append(file_handler)

    return sinks


def _install_emergency_console(root: logging.Logger) -> logging.Logger:
    """Fall back to a plain stderr handler when the queue cannot be set up."""
    root.setLevel(logging.INFO)
    _remove_our_handlers(root)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
    _tag_handler(console)
    root.addHandler(console)

    root.warning("confdoc logging setup failed; writing records directly to stderr.")
    return root


def _parse_level(level: str) -> int:
    """Map a level name such as 'debug' to its numeric value; INFO if unknown."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a listener once; a listener already stopped is left alone."""
    if not listener:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
