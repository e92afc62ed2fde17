"""Editor operations on parsed trees.

All functions are copy-on-write: they never modify the lists or nodes they
are given. Nodes on the path to a change are copied together with their
attribute maps, untouched subtrees are shared between the old and the new
tree. A missing id is never an error;
the caller gets a "not found" value or an unchanged copy of the roots.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from jsx_component_tree.attributes import from_python
from jsx_component_tree.shared import get_logger

from .node import ElementNode

CONTAINER_TYPES = frozenset({
    "Container", "Group", "Stack", "Card", "Paper", "Box",
    "Flex", "Grid", "GridCol", "SimpleGrid", "Tabs",
})

_UPDATABLE_FIELDS = ("type", "display_name", "category", "children")

logger = get_logger(__name__, component="tree_utils")


@dataclass(frozen=True)
class NodeLocation:
    """A node together with its parent (None for roots) and sibling index."""

    node: ElementNode
    parent: Optional[ElementNode]
    index: int


@dataclass(frozen=True)
class RemovalResult:
    """Roots after a removal and the removed subtree, if one was found."""

    roots: List[ElementNode]
    removed: Optional[ElementNode] = None

    @property
    def found(self) -> bool:
        return self.removed is not None


def iter_nodes(roots: Sequence[ElementNode]) -> Iterator[ElementNode]:
    """Iterate over every node in pre-order."""
    for root in roots:
        yield from root.iter()


def count_nodes(roots: Sequence[ElementNode]) -> int:
    return sum(1 for _ in iter_nodes(roots))


def is_container_type(node_type: str) -> bool:
    """Check whether the editor lets nodes of ``node_type`` take children."""
    return node_type in CONTAINER_TYPES


def find_with_parent(
    roots: Sequence[ElementNode], node_id: str
) -> Optional[NodeLocation]:
    """Locate the first node with ``node_id`` in pre-order."""
    return _find(roots, node_id, None)


def _find(
    nodes: Sequence[ElementNode], node_id: str, parent: Optional[ElementNode]
) -> Optional[NodeLocation]:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return NodeLocation(node=node, parent=parent, index=index)
        if node.children:
            found = _find(node.children, node_id, node)
            if found is not None:
                return found
    return None


def find_node(roots: Sequence[ElementNode], node_id: str) -> Optional[ElementNode]:
    """Return the node with ``node_id``, or None."""
    for node in iter_nodes(roots):
        if node.id == node_id:
            return node
    return None


def get_path(roots: Sequence[ElementNode], node_id: str) -> Optional[List[str]]:
    """Ancestor ids of ``node_id``, root first; ``[]`` for a root node.

    Returns None when the id is not in the tree.
    """
    stack: List[tuple] = [(root, []) for root in reversed(roots)]
    while stack:
        node, path = stack.pop()
        if node.id == node_id:
            return path
        child_path = path + [node.id]
        for child in reversed(node.children):
            stack.append((child, child_path))
    return None


def is_descendant(
    roots: Sequence[ElementNode], ancestor_id: str, descendant_id: str
) -> bool:
    """Check whether ``descendant_id`` lies strictly below ``ancestor_id``."""
    path = get_path(roots, descendant_id)
    return path is not None and ancestor_id in path


def _rewrite(
    nodes: Sequence[ElementNode],
    node_id: str,
    change: Callable[[ElementNode], ElementNode],
) -> Optional[List[ElementNode]]:
    # New sibling list with the target replaced, or None if not found
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return list(nodes[:index]) + [change(node)] + list(nodes[index + 1:])
        if node.children:
            children = _rewrite(node.children, node_id, change)
            if children is not None:
                updated = replace(node, attrs=dict(node.attrs), children=children)
                return list(nodes[:index]) + [updated] + list(nodes[index + 1:])
    return None


def _insert_at(
    siblings: Sequence[ElementNode], node: ElementNode, index: Optional[int]
) -> List[ElementNode]:
    if index is None:
        return list(siblings) + [node]
    return list(siblings[:index]) + [node] + list(siblings[index:])


def remove_node(roots: Sequence[ElementNode], node_id: str) -> RemovalResult:
    """Remove the subtree rooted at ``node_id``."""
    removed: List[ElementNode] = []

    def _remove(nodes: Sequence[ElementNode]) -> Optional[List[ElementNode]]:
        for index, node in enumerate(nodes):
            if node.id == node_id:
                removed.append(node)
                return list(nodes[:index]) + list(nodes[index + 1:])
            if node.children:
                children = _remove(node.children)
                if children is not None:
                    updated = replace(node, attrs=dict(node.attrs), children=children)
                    return list(nodes[:index]) + [updated] + list(nodes[index + 1:])
        return None

    new_roots = _remove(roots)
    if new_roots is None:
        return RemovalResult(roots=list(roots), removed=None)
    return RemovalResult(roots=new_roots, removed=removed[0])


def insert_node(
    roots: Sequence[ElementNode],
    node: ElementNode,
    parent_id: Optional[str] = None,
    index: Optional[int] = None,
) -> List[ElementNode]:
    """Insert ``node`` under ``parent_id`` (or at root level when None).

    ``index`` follows list slicing rules; None appends. An unknown parent,
    or a node whose subtree reuses an id already in the tree, leaves the
    tree unchanged. A self-closing parent stops being self-closing.
    """
    existing = {item.id for item in iter_nodes(roots)}
    clashes = sorted(existing.intersection(item.id for item in node.iter()))
    if clashes:
        logger.debug("Insert refused for duplicate ids", extra={"node_ids": clashes})
        return list(roots)

    if parent_id is None:
        return _insert_at(roots, node, index)

    updated = _rewrite(
        roots,
        parent_id,
        lambda parent: replace(
            parent,
            attrs=dict(parent.attrs),
            children=_insert_at(parent.children, node, index),
            self_closing=False,
        ),
    )
    if updated is None:
        logger.debug("Insert parent not found", extra={"parent_id": parent_id})
        return list(roots)
    return updated


def update_node(
    roots: Sequence[ElementNode],
    node_id: str,
    attrs: Optional[Dict[str, Any]] = None,
    **fields: Any,
) -> List[ElementNode]:
    """Update one node's fields and merge attribute changes.

    Attribute values may be ``Value`` instances or plain Python values; a
    value of None deletes the attribute.

    Raises:
        TypeError: For fields other than type, display_name, category and
            children, or attribute values without a literal form
    """
    unknown = set(fields) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise TypeError(f"Cannot update node fields: {sorted(unknown)}")

    new_attrs = {}
    deleted = set()
    for name, value in (attrs or {}).items():
        if value is None:
            deleted.add(name)
        else:
            new_attrs[name] = from_python(value)

    def _apply(node: ElementNode) -> ElementNode:
        merged = {name: value for name, value in node.attrs.items() if name not in deleted}
        merged.update(new_attrs)
        changes = dict(fields)
        if changes.get("children"):
            changes["self_closing"] = False
        return replace(node, attrs=merged, **changes)

    updated = _rewrite(roots, node_id, _apply)
    return list(roots) if updated is None else updated


def move_node(
    roots: Sequence[ElementNode],
    node_id: str,
    parent_id: Optional[str] = None,
    index: Optional[int] = None,
) -> List[ElementNode]:
    """Move a subtree under ``parent_id`` (root level when None).

    ``index`` is a position in the target sibling list after the node has
    been taken out. Moving a node into itself or one of its descendants,
    or to an unknown parent, leaves the tree unchanged.
    """
    if parent_id is not None:
        if parent_id == node_id or is_descendant(roots, node_id, parent_id):
            logger.debug(
                "Move into own subtree refused",
                extra={"node_id": node_id, "parent_id": parent_id},
            )
            return list(roots)
        if find_node(roots, parent_id) is None:
            return list(roots)

    removal = remove_node(roots, node_id)
    if removal.removed is None:
        return list(roots)
    return insert_node(removal.roots, removal.removed, parent_id, index)
