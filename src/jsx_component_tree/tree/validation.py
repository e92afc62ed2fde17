"""Structural checks for trees handed over by an editor."""

from typing import List, Optional, Sequence, Set

from jsx_component_tree.attributes import Raw, Str
from jsx_component_tree.registry import ComponentRegistry

from .node import TEXT_ATTR, ElementNode

TEXT_TYPE = "Text"


def validate_tree(
    roots: Sequence[ElementNode], registry: Optional[ComponentRegistry] = None
) -> List[str]:
    """Return human-readable problems found in ``roots``; empty means valid.

    Checks for missing or duplicate ids, missing types, a ``children``
    attribute that is neither literal text nor text markup, self-closing
    nodes with children and, when a registry is given, types it does not
    know (``Text`` is always accepted).
    """
    problems: List[str] = []
    seen: Set[str] = set()

    for root in roots:
        for node in root.iter():
            label = node.id or f"<{node.type or '?'}>"
            if not node.id:
                problems.append(f"Node {label} is missing an id")
            elif node.id in seen:
                problems.append(f"Duplicate node id '{node.id}'")
            else:
                seen.add(node.id)

            if not node.type:
                problems.append(f"Node {label} is missing a type")
            elif (
                registry is not None
                and node.type != TEXT_TYPE
                and not registry.is_known(node.type)
            ):
                problems.append(f"Node {label} has unrecognized type '{node.type}'")

            text = node.attrs.get(TEXT_ATTR)
            if text is not None and not isinstance(text, (Str, Raw)):
                problems.append(
                    f"Node {label} has a non-text '{TEXT_ATTR}' attribute"
                )
            if node.self_closing and node.children:
                problems.append(f"Node {label} is self-closing but has children")
    return problems
