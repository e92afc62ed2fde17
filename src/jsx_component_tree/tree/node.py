"""Element nodes and id generation.

Nodes do not hold a reference to their parent; parent lookups go through
``jsx_component_tree.tree.utils`` so trees stay acyclic and cheap to copy.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from jsx_component_tree.attributes import Raw, Str, Value, from_python

# Attribute that holds inline text content
TEXT_ATTR = "children"

IdGenerator = Callable[[str], str]


@dataclass
class ElementNode:
    """One parsed element with its attributes and ordered children.

    Inline text lives in ``attrs["children"]``: a ``Str`` is literal text, a
    ``Raw`` is text markup holding ``{...}`` expressions, kept verbatim.
    ``self_closing`` records a node written as ``<Tag />``; such a node has
    no children and no inline text, so ``children`` stays an attribute.
    """

    id: str
    type: str
    display_name: str = ""
    category: str = "Other"
    attrs: Dict[str, Value] = field(default_factory=dict)
    children: List["ElementNode"] = field(default_factory=list)
    self_closing: bool = False

    def __post_init__(self) -> None:
        """Validate node identity."""
        if not self.id:
            raise ValueError("Node id cannot be empty")
        if not self.type:
            raise ValueError("Node type cannot be empty")
        if not self.display_name:
            self.display_name = self.type

    @property
    def text(self) -> Optional[str]:
        """Inline text content, if any.

        Literal text is returned as is and text markup verbatim, expressions
        included.
        """
        if self.self_closing:
            return None
        value = self.attrs.get(TEXT_ATTR)
        if isinstance(value, Str):
            return value.value
        if isinstance(value, Raw):
            return value.text
        return None

    @property
    def has_children(self) -> bool:
        """Check if this node has element children."""
        return len(self.children) > 0

    def iter(self) -> Iterator["ElementNode"]:
        """Iterate over this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def copy(self) -> "ElementNode":
        """Deep copy of the subtree. Values are immutable and shared."""
        return ElementNode(
            id=self.id,
            type=self.type,
            display_name=self.display_name,
            category=self.category,
            attrs=dict(self.attrs),
            children=[child.copy() for child in self.children],
            self_closing=self.self_closing,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to the JSON shape consumed by the editor."""
        return {
            "id": self.id,
            "type": self.type,
            "displayName": self.display_name,
            "category": self.category,
            "props": {name: value.to_python() for name, value in self.attrs.items()},
            "children": [child.to_dict() for child in self.children],
            "selfClosing": self.self_closing,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementNode":
        """Rebuild a node from ``to_dict`` output.

        Props are lifted with ``from_python``, so expressions that were kept
        verbatim come back as strings.
        """
        return cls(
            id=data["id"],
            type=data["type"],
            display_name=data.get("displayName", ""),
            category=data.get("category", "Other"),
            attrs={name: from_python(value) for name, value in data.get("props", {}).items()},
            children=[cls.from_dict(child) for child in data.get("children", [])],
            self_closing=bool(data.get("selfClosing", False)),
        )


class SequentialIdGenerator:
    """Deterministic id source: ``card-1``, ``text-2``, ``card-section-3``...

    One counter is shared by all types. Create a fresh generator for every
    parse so ids never depend on earlier calls.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 0:
            raise ValueError("start must be >= 0")
        self._start = start
        self._next = start

    def __call__(self, type_name: str) -> str:
        slug = type_name.lower().replace(".", "-")
        node_id = f"{slug}-{self._next}"
        self._next += 1
        return node_id

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        return self._next - self._start
