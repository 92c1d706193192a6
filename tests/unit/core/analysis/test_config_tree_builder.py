from __future__ import annotations

"""
Unit tests for the Configuration Tree Builder.

Verifies tree shape, declaration order, exclusion rules, storage identity
of leaves and the rejection of non-addressable configuration values.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import pytest

import sample_app
from confdoc.core.analysis.tree_builder import build_tree, parse_tree, root_node
from confdoc.domain.config_models import StorageRef
from confdoc.domain.errors import NotAddressableError, TypeResolutionError


@dataclass
class Excluded:
    hidden_leaf: int = field(default=0, metadata={"yaml": "hidden_leaf"})


@dataclass
class TagScenario:
    first: int = field(default=0, metadata={"yaml": "name1"})
    second: List[float] = field(default_factory=list, metadata={"yaml": "name2,omitempty"})
    skipped: Excluded = field(default_factory=Excluded, metadata={"yaml": "-"})
    no_tag: int = 0


@dataclass(frozen=True)
class FrozenConfig:
    value: int = field(default=0, metadata={"yaml": "value"})


@dataclass
class HoldsFrozen:
    nested: FrozenConfig = field(default_factory=FrozenConfig, metadata={"yaml": "nested"})


@dataclass
class HoldsNone:
    nested: Optional[Excluded] = field(default=None, metadata={"yaml": "maybe"})
    required: Excluded = field(default=None, metadata={"yaml": "required"})  # type: ignore[assignment]


@dataclass
class Node:
    child: "Node" = field(default=None, metadata={"yaml": "child"})  # type: ignore[assignment]


def test_tag_scenario_yields_two_children():
    """Tags 'name1', 'name2,omitempty' and '-' produce exactly two children."""
    tree = build_tree(TagScenario())

    assert tree.name == "root"
    assert tree.declared_type is None
    assert [c.name for c in tree.children] == ["name1", "name2"]
    assert tree.children[0].tag_modifiers == ()
    assert tree.children[1].tag_modifiers == ("omitempty",)
    assert tree.find("hidden_leaf") is None
    assert all(n.name != "hidden_leaf" for n in tree.iter_nodes())


def test_leaves_carry_storage_identity():
    cfg = TagScenario()
    tree = build_tree(cfg)

    first = tree.child("name1")
    assert first.is_leaf
    assert first.storage == StorageRef.of(cfg, "first")
    assert first.flag is None
    assert tree.storage is None


def test_sample_config_shape_and_order(app_config):
    tree = build_tree(app_config)

    assert [c.name for c in tree.children] == [
        "target",
        "auth_enabled",
        "path_prefix",
        "replication_factor",
        "server",
        "storage_config",
        "limits_config",
        "placeholder",
    ]
    storage = tree.child("storage_config")
    assert storage.is_branch
    assert storage.declared_type is sample_app.StorageConfig
    assert [c.name for c in storage.children] == ["directory", "chunk_sizes", "retention", "client"]
    assert storage.find("client.backoff_config.max_retries").path == "storage_config.client.backoff_config.max_retries"


def test_node_count(app_config):
    """Root + every documented field (branches included)."""
    tree = build_tree(app_config)

    nodes = list(tree.iter_nodes())
    assert len(nodes) == 25
    assert sum(1 for n in nodes if n.is_leaf) == 18


def test_promoted_field_identity_points_to_embedded_owner(app_config):
    tree = build_tree(app_config)

    assert tree.child("path_prefix").storage == StorageRef.of(app_config.common, "path_prefix")
    # CommonConfig.target is shadowed by AppConfig.target
    assert tree.child("common_target") is None
    assert tree.child("target").storage == StorageRef.of(app_config, "target")


def test_empty_structure_is_still_a_branch(app_config):
    placeholder = build_tree(app_config).child("placeholder")

    assert placeholder.is_branch
    assert placeholder.children == ()
    assert placeholder.storage is None


def test_distinct_leaves_never_share_identity(app_config):
    tree = build_tree(app_config)
    refs = [n.storage for n in tree.iter_nodes() if n.is_leaf]

    assert len(refs) == len(set(refs))


def test_build_is_pure_with_respect_to_input_node():
    root = root_node()
    built = parse_tree(root, TagScenario())

    assert root.children == ()
    assert len(built.children) == 2


@pytest.mark.parametrize("value", [
    TagScenario,
    {"name1": 1},
    None,
    FrozenConfig(),
])
def test_non_addressable_root_is_rejected(value):
    with pytest.raises(NotAddressableError):
        build_tree(value)


def test_frozen_nested_structure_is_rejected():
    with pytest.raises(NotAddressableError, match="nested"):
        build_tree(HoldsFrozen())


def test_optional_structure_is_a_leaf_but_missing_required_one_fails():
    with pytest.raises(NotAddressableError, match="required"):
        build_tree(HoldsNone())


def test_self_referencing_value_is_rejected():
    node = Node()
    node.child = node

    with pytest.raises(NotAddressableError, match="ancestor"):
        build_tree(node)


def _make_local_config():
    """Structures declared in a function scope; their annotations stay unresolvable strings."""
    @dataclass
    class Inner:
        size: int = field(default=0, metadata={"yaml": "size"})

    @dataclass
    class Outer:
        sizes: List[float] = field(default_factory=list, metadata={"yaml": "sizes"})
        inner: Inner = field(default_factory=Inner, metadata={"yaml": "inner"})

    return Outer()


def test_unresolvable_annotation_aborts_build():
    with pytest.raises(TypeResolutionError) as exc_info:
        build_tree(_make_local_config())

    message = str(exc_info.value)
    assert "Outer" in message
    assert "Inner" in message
