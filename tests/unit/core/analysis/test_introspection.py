from __future__ import annotations

"""
Unit tests for the introspection primitives.

Verifies naming tag parsing, semantic type classification and visible
field enumeration with embedded-structure promotion.
"""

import enum
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import pytest

from confdoc.core.analysis.introspection import (
    classify_type,
    is_excluded_name,
    optional_inner,
    parse_tag,
    visible_fields,
)


class Level(enum.IntEnum):
    LOW = 1


class Mode(str, enum.Enum):
    FAST = "fast"


@dataclass
class Inner:
    a: int = field(default=0, metadata={"yaml": "a"})
    shared: str = field(default="", metadata={"yaml": "inner_shared"})


@dataclass
class Deeper:
    shared: str = field(default="", metadata={"yaml": "deeper_shared"})
    z: int = field(default=0, metadata={"yaml": "z"})


@dataclass
class Middle:
    deeper: Deeper = field(default_factory=Deeper, metadata={"embedded": True})
    m: int = field(default=0, metadata={"yaml": "m"})


@dataclass
class Outer:
    first: int = field(default=0, metadata={"yaml": "first"})
    inner: Inner = field(default_factory=Inner, metadata={"embedded": True})
    shared: str = field(default="", metadata={"yaml": "outer_shared"})
    middle: Middle = field(default_factory=Middle, metadata={"embedded": True})


@dataclass
class Base:
    base_field: int = field(default=0, metadata={"yaml": "base_field"})


@dataclass
class Derived(Base):
    own_field: int = field(default=0, metadata={"yaml": "own_field"})


# -----------------------------------------------------------------------------
# Tag Parser
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("tag, expected", [
    ("", ("", ())),
    (None, ("", ())),
    ("name1", ("name1", ())),
    ("name2,omitempty", ("name2", ("omitempty",))),
    ("-", ("-", ())),
    ("x,omitempty,flow,omitempty", ("x", ("omitempty", "flow"))),
    (",inline", ("", ("inline",))),
])
def test_parse_tag(tag, expected):
    assert parse_tag(tag) == expected


def test_parse_tag_tolerates_malformed_values():
    """Non-string tags are treated as 'no name'."""
    assert parse_tag(42) == ("", ())
    assert parse_tag(["a"]) == ("", ())


def test_is_excluded_name():
    assert is_excluded_name("")
    assert is_excluded_name("-")
    assert not is_excluded_name("name")

# -----------------------------------------------------------------------------
# Type Classifier
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("tp, label", [
    (None, "-"),
    (int, "int"),
    (Level, "int"),
    (float, "float"),
    (bool, "bool"),
    (str, "str"),
    (Mode, "str"),
    (timedelta, "timedelta"),
    (List[int], "list[int]"),
    (List[float], "list[float]"),
    (List[List[str]], "list[list[str]]"),
    (Sequence[int], "list[int]"),
    (Tuple[float, ...], "list[float]"),
    (FrozenSet[str], "list[str]"),
    (list, "list[-]"),
    (Optional[int], "*int"),
    (Optional[List[int]], "*list[int]"),
    (Dict[str, int], "dict"),
    (dict, "dict"),
    (Union[int, str], "union"),
])
def test_classify_type(tp, label):
    assert classify_type(tp) == label


def test_classify_struct_is_qualified_by_module():
    assert classify_type(Inner) == f"{__name__}.Inner"
    assert classify_type(Optional[Inner]) == f"*{__name__}.Inner"


def test_optional_inner():
    assert optional_inner(Optional[int]) is int
    assert optional_inner(int) is None
    assert optional_inner(Union[int, str, None]) is None

# -----------------------------------------------------------------------------
# Visible Fields
# -----------------------------------------------------------------------------

def test_visible_fields_promote_embedded_in_place():
    """Embedded fields follow their embedding field; shallower names win."""
    names = [(vf.name, vf.depth) for vf in visible_fields(Outer)]

    assert names == [
        ("first", 0),
        ("inner", 0),
        ("a", 1),
        ("shared", 0),
        ("middle", 0),
        ("deeper", 1),
        ("z", 2),
        ("m", 1),
    ]


def test_visible_fields_owner_path():
    by_name = {vf.name: vf for vf in visible_fields(Outer)}

    assert by_name["first"].owner_path == ()
    assert by_name["a"].owner_path == ("inner",)
    assert by_name["z"].owner_path == ("middle", "deeper")
    assert by_name["shared"].tag == "outer_shared"


def test_visible_fields_include_inherited_first():
    assert [vf.name for vf in visible_fields(Derived)] == ["base_field", "own_field"]
