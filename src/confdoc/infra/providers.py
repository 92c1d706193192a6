from __future__ import annotations

"""
External Provider Resolution.

Resolves 'package.module:attribute' references supplied on the command
line into the configuration value, the block registry and the optional
flag registration callable.
"""

import dataclasses
import importlib
import logging
import os
import sys
from typing import Any, Callable, List, Optional

from confdoc.domain.config_models import BlockSpec, coerce_blocks
from confdoc.domain.errors import BlockRegistryError, ProviderResolutionError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve_object(reference: str) -> Any:
    """
    Import the object named by 'module:attribute' (dotted attributes allowed).

    The current working directory is importable, like 'python -m'.

    Raises:
        ProviderResolutionError: If the module or attribute cannot be found.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ProviderResolutionError(f"Expected 'module:attribute', got {reference!r}")

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ProviderResolutionError(f"Cannot import module '{module_name}': {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ProviderResolutionError(f"'{module_name}' has no attribute '{attr_path}'") from e

    logger.debug(f"Resolved provider {reference}")
    return obj


def load_config(reference: str) -> Any:
    """
    Obtain the configuration value from a provider reference.

    The reference may name a dataclass instance, or a factory (including
    the dataclass type itself) that builds one.
    """
    obj = resolve_object(reference)
    if callable(obj) and not _is_dataclass_instance(obj):
        obj = obj()
    return obj


def load_blocks(reference: Optional[str]) -> List[BlockSpec]:
    """
    Obtain the root block registry from a provider reference.

    Raises:
        BlockRegistryError: If the provider yields malformed entries.
    """
    if not reference:
        return []
    obj = resolve_object(reference)
    if callable(obj):
        obj = obj()
    try:
        return coerce_blocks(list(obj))
    except TypeError as e:
        raise BlockRegistryError(f"Invalid block registry from '{reference}': {e}") from e


def load_register(reference: Optional[str]) -> Optional[Callable[[Any, Any], None]]:
    """Resolve an optional 'register(config, flag_set)' callable."""
    if not reference:
        return None
    obj = resolve_object(reference)
    if not callable(obj):
        raise ProviderResolutionError(f"'{reference}' is not callable")
    return obj

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _is_dataclass_instance(obj: Any) -> bool:
    return dataclasses.is_dataclass(obj) and not isinstance(obj, type)
