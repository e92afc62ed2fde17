"""Element trees: building, serialization and editor operations.

Key Components:
    ComponentTreeBuilder: Stack machine turning tokens into element nodes
    ElementNode: One element with attributes and ordered children
    serialize: Inverse of parsing
    find_with_parent, insert_node, remove_node, ...: Copy-on-write edits
"""

from .builder import ComponentTreeBuilder, ParseResult, build_tree
from .node import TEXT_ATTR, ElementNode, IdGenerator, SequentialIdGenerator
from .serializer import (
    collect_tag_names,
    format_attribute,
    format_text,
    format_value,
    serialize,
)
from .utils import (
    CONTAINER_TYPES,
    NodeLocation,
    RemovalResult,
    count_nodes,
    find_node,
    find_with_parent,
    get_path,
    insert_node,
    is_container_type,
    is_descendant,
    iter_nodes,
    move_node,
    remove_node,
    update_node,
)
from .validation import validate_tree

__all__ = [
    "CONTAINER_TYPES",
    "TEXT_ATTR",
    "ComponentTreeBuilder",
    "ElementNode",
    "IdGenerator",
    "NodeLocation",
    "ParseResult",
    "RemovalResult",
    "SequentialIdGenerator",
    "build_tree",
    "collect_tag_names",
    "count_nodes",
    "find_node",
    "find_with_parent",
    "format_attribute",
    "format_text",
    "format_value",
    "get_path",
    "insert_node",
    "is_container_type",
    "is_descendant",
    "iter_nodes",
    "move_node",
    "remove_node",
    "serialize",
    "update_node",
    "validate_tree",
]
