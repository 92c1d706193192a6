from __future__ import annotations

"""
Configuration Documentation Data Models.

Defines the immutable documentation tree produced by the introspection
subsystem, the storage identity used to correlate leaves with flags,
the root block registry entries and the serializable document records.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

# -----------------------------------------------------------------------------
# CORRELATION KEYS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class StorageRef:
    """
    Stable handle identifying one attribute slot of a live object.

    Attributes:
        owner_id: id() of the dataclass instance holding the attribute.
        attribute: Attribute name within the owner.
    """
    owner_id: int
    attribute: str

    @classmethod
    def of(cls, owner: Any, attribute: str) -> "StorageRef":
        return cls(owner_id=id(owner), attribute=attribute)

# -----------------------------------------------------------------------------
# FLAG METADATA
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FlagInfo:
    """
    Immutable snapshot of a registered command-line flag.

    Attributes:
        name: Flag name without leading dashes.
        usage: Help text supplied at registration.
        default_text: Rendered default value.
        storage: Storage slot the flag writes into.
        deprecated: Whether the flag is kept only for compatibility.
    """
    name: str
    usage: str
    default_text: str
    storage: StorageRef
    deprecated: bool = False

# -----------------------------------------------------------------------------
# DOCUMENTATION TREE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigNode:
    """
    One entry of the documentation tree.

    The synthetic root and every nested dataclass field are branches;
    every other documented field is a leaf carrying its storage identity.

    Attributes:
        name: Documentation name taken from the naming tag.
        description: Free text filled in by flag or block matching.
        declared_type: Resolved field annotation, None for the root.
        tag_modifiers: Modifier tokens of the naming tag, in tag order.
        children: Nested nodes in declaration order.
        is_branch: True for the root and for nested structures.
        storage: Storage identity of a leaf, None for branches.
        flag: Bound flag, set only by flag correlation.
        is_root_block: Set by the block matcher.
        root_block_name: Registry name of the matched block.
        root_block_description: Registry description of the matched block.
        path: Dotted path of names below the root.
    """
    name: str
    description: str = ""
    declared_type: Any = None
    tag_modifiers: Tuple[str, ...] = ()
    children: Tuple["ConfigNode", ...] = ()
    is_branch: bool = False
    storage: Optional[StorageRef] = None
    flag: Optional[FlagInfo] = None
    is_root_block: bool = False
    root_block_name: str = ""
    root_block_description: str = ""
    path: str = ""

    @property
    def is_leaf(self) -> bool:
        return not self.is_branch

    def iter_nodes(self) -> Iterator["ConfigNode"]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def child(self, name: str) -> Optional["ConfigNode"]:
        for c in self.children:
            if c.name == name:
                return c
        return None

    def find(self, path: str) -> Optional["ConfigNode"]:
        """Resolve a dotted path relative to this node."""
        node: Optional[ConfigNode] = self
        for part in path.split("."):
            if node is None:
                return None
            node = node.child(part)
        return node

# -----------------------------------------------------------------------------
# ROOT BLOCK REGISTRY
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BlockSpec:
    """
    Registry entry describing an independently documented structure.

    Attributes:
        name: Block identifier, e.g. 'server_config'.
        description: Human readable summary of the block.
        match_type: Dataclass type identifying the block by identity.
    """
    name: str
    description: str
    match_type: type

    @classmethod
    def coerce(cls, entry: Any) -> "BlockSpec":
        """Accept a BlockSpec or a (name, description, type) triple."""
        if isinstance(entry, BlockSpec):
            return entry
        if isinstance(entry, (tuple, list)) and len(entry) == 3:
            name, description, match_type = entry
            return cls(name=str(name), description=str(description), match_type=match_type)
        raise TypeError(f"Unsupported block registry entry: {entry!r}")

# -----------------------------------------------------------------------------
# STRUCTURED DOCUMENT
# -----------------------------------------------------------------------------

@dataclass
class ConfigBlock:
    """
    Serializable record of the structured documentation output.

    'value' is a placeholder kept for downstream templates; it is never
    populated by the documentation pass.
    """
    name: str
    description: str = ""
    type: str = ""
    value: Any = None
    flag: str = ""
    flag_prefix: List[str] = field(default_factory=list)
    fields: List["ConfigBlock"] = field(default_factory=list)
    root: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain data, preserving field order at every level."""
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "value": self.value,
            "flag": self.flag,
            "flag_prefix": list(self.flag_prefix),
            "fields": [f.to_dict() for f in self.fields],
            "root": self.root,
        }


def coerce_blocks(entries: Optional[Sequence[Any]]) -> List[BlockSpec]:
    if not entries:
        return []
    return [BlockSpec.coerce(e) for e in entries]
