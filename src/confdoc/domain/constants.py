from __future__ import annotations

"""
Domain Constants.

Centralizes the literals shared by the introspection, flag correlation
and rendering layers: tag keys, sentinels and output defaults.
"""

from typing import Tuple

APP_NAME = "confdoc"
APP_VERSION = "0.3.0"

# -----------------------------------------------------------------------------
# TREE CONSTRUCTION
# -----------------------------------------------------------------------------
ROOT_NODE_NAME = "root"

# Dataclass field metadata keys
TAG_METADATA_KEY = "yaml"
EMBEDDED_METADATA_KEY = "embedded"

TAG_DELIMITER = ","
EXCLUDED_FIELD_NAME = "-"

# -----------------------------------------------------------------------------
# TYPE LABELS
# -----------------------------------------------------------------------------
UNKNOWN_TYPE_LABEL = "-"
INT_TYPE_LABEL = "int"
FLOAT_TYPE_LABEL = "float"
BOOL_TYPE_LABEL = "bool"
POINTER_PREFIX = "*"

# -----------------------------------------------------------------------------
# FLAGS
# -----------------------------------------------------------------------------
# Soft-delete marker written by registrars into flags kept only for
# backward compatibility.
DEPRECATED_FLAG_VALUE = "deprecated"

# -----------------------------------------------------------------------------
# RENDERING
# -----------------------------------------------------------------------------
INDENT_UNIT = "  "

DOCUMENT_FORMATS: Tuple[str, ...] = ("yaml", "json")
DEFAULT_DOCUMENT_FORMAT = "yaml"
