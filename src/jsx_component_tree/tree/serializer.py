"""Tree-to-markup serializer.

The inverse of parsing: walks the tree in pre-order and writes markup that
parses back into the same types, children and attribute values. Formatting
is normalized, so output is not byte-identical to the original source.

Serialization always returns a string. Attribute values an editor left as
plain Python objects are lifted with ``coerce_value``, entries that are not
nodes are skipped with a warning, and a failing inverse resolver falls back
to the canonical type.
"""

import json
import re
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from jsx_component_tree.attributes import (
    Bool,
    Num,
    Obj,
    Raw,
    Str,
    coerce_value,
    unwrap_braces,
)
from jsx_component_tree.registry import ResolverLike, inverse_name
from jsx_component_tree.shared import SerializerConfig, get_logger

from .node import TEXT_ATTR, ElementNode

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
_TEXT_SPECIAL_CHARS = frozenset("<>{}")
# Whitespace that collapsing would change
_UNSTABLE_WHITESPACE_RE = re.compile(r"\s{2,}|[^\S ]")
_SPREAD_PREFIX = "..."

logger = get_logger(__name__, component="serializer")


def format_value(value: Any) -> str:
    """Render a value in literal syntax, as it appears inside ``{...}``.

    Plain Python values are lifted first; objects without a literal form are
    written as their ``repr``.

    >>> format_value(Obj({"padding": Num(10), "color": Str("red")}))
    '{padding: 10, color: "red"}'
    """
    value = coerce_value(value)
    if isinstance(value, Str):
        return json.dumps(value.value, ensure_ascii=False)
    if isinstance(value, Bool):
        return "true" if value.value else "false"
    if isinstance(value, Num):
        return _format_number(value)
    if isinstance(value, Raw):
        return value.text
    if isinstance(value, Obj):
        if not value.entries:
            return "{}"
        entries = ", ".join(
            f"{_format_key(key)}: {format_value(item)}"
            for key, item in value.entries.items()
        )
        return "{" + entries + "}"
    return "[" + ", ".join(format_value(item) for item in value.items) + "]"


def _format_number(value: Num) -> str:
    if value.is_integral:
        return str(int(value.value))
    text = repr(float(value.value))
    if "e" in text:
        # Exponent notation does not parse back as a number literal
        text = format(Decimal(text), "f")
    return text


def _format_key(key: str) -> str:
    if _IDENTIFIER_RE.match(key):
        return key
    return json.dumps(key, ensure_ascii=False)


def format_attribute(name: str, value: Any) -> str:
    """Render one attribute as it appears inside a tag."""
    value = coerce_value(value)
    if name.startswith(_SPREAD_PREFIX) and isinstance(value, Raw):
        return "{" + value.text + "}"
    if isinstance(value, Str):
        if any(char in value.value for char in '"\\\n\r'):
            return f"{name}={{{format_value(value)}}}"
        return f'{name}="{value.value}"'
    if (
        isinstance(value, Raw)
        and value.text.startswith("{")
        and unwrap_braces("{" + value.text + "}") is None
    ):
        # Unbalanced source text, written back as it was found
        return f"{name}={value.text}"
    return f"{name}={{{format_value(value)}}}"


def format_text(text: str) -> str:
    """Render literal inline text, quoting it when it would not survive re-parsing.

    Braces, angle brackets, edge whitespace and whitespace that collapsing
    would change all force the ``{"..."}`` form.
    """
    if (
        any(char in _TEXT_SPECIAL_CHARS for char in text)
        or _UNSTABLE_WHITESPACE_RE.search(text)
        or text != text.strip()
    ):
        return "{" + json.dumps(text, ensure_ascii=False) + "}"
    return text


def _inline_text(node: ElementNode) -> Optional[str]:
    # Markup placed between the tags; None keeps ``children`` an attribute
    if node.self_closing:
        return None
    value = node.attrs.get(TEXT_ATTR)
    if isinstance(value, Str) and value.value:
        return format_text(value.value)
    if isinstance(value, Raw) and value.text:
        return value.text
    return None


def _text_attribute(value: Any) -> str:
    # ``children`` written inside the tag; text markup drops its outer braces
    if isinstance(value, Raw):
        inner = unwrap_braces(value.text)
        if inner is not None:
            return format_attribute(TEXT_ATTR, Raw(inner))
    return format_attribute(TEXT_ATTR, value)


class _Writer:
    def __init__(self, resolver: ResolverLike, config: SerializerConfig) -> None:
        self.resolver = resolver
        self.config = config
        self.lines: List[str] = []
        self.skipped = 0

    def write(self, node: ElementNode, depth: int) -> None:
        if not isinstance(node, ElementNode):
            self.skipped += 1
            logger.warning(
                "Skipped entry that is not an element node",
                extra={"entry_type": type(node).__name__, "depth": depth},
            )
            return

        pad = " " * (self.config.indent * depth)
        tag = inverse_name(self.resolver, node.type)
        text = _inline_text(node)

        attributes = []
        for name, value in node.attrs.items():
            if name != TEXT_ATTR:
                attributes.append(format_attribute(name, value))
            elif text is None:
                attributes.append(_text_attribute(value))
        opening = f"<{tag}" + "".join(f" {attr}" for attr in attributes)

        if not node.children and text is None:
            self.lines.append(f"{pad}{opening} />")
        elif not node.children:
            self.lines.append(f"{pad}{opening}>{text}</{tag}>")
        else:
            self.lines.append(f"{pad}{opening}>")
            if text is not None:
                child_pad = " " * (self.config.indent * (depth + 1))
                self.lines.append(f"{child_pad}{text}")
            for child in node.children:
                self.write(child, depth + 1)
            self.lines.append(f"{pad}</{tag}>")

    def output(self) -> str:
        separator = "" if self.config.single_line else self.config.newline
        return separator.join(self.lines)


def serialize(
    nodes: Sequence[ElementNode],
    inverse_resolver: ResolverLike = None,
    config: Optional[SerializerConfig] = None,
) -> str:
    """Write a list of root nodes back to markup.

    Args:
        nodes: Root nodes, written in order
        inverse_resolver: Maps canonical types back to literal tag names
        config: Serializer configuration

    Returns:
        Markup text; entries that are not element nodes are left out
    """
    writer = _Writer(inverse_resolver, config or SerializerConfig())
    for node in nodes:
        writer.write(node, 0)
    output = writer.output()
    logger.debug(
        "Serialization completed",
        extra={
            "root_count": len(nodes),
            "output_length": len(output),
            "skipped_entries": writer.skipped,
        },
    )
    return output


def collect_tag_names(
    nodes: Sequence[ElementNode], inverse_resolver: ResolverLike = None
) -> List[str]:
    """Sorted component names to import for the given trees.

    Dotted names contribute their first segment (``Card.Section`` needs
    ``Card``); lowercase intrinsic elements such as ``div`` are skipped.
    """
    names = set()
    for root in nodes:
        for node in root.iter():
            tag = inverse_name(inverse_resolver, node.type).split(".", 1)[0]
            if tag and not tag[0].islower():
                names.add(tag)
    return sorted(names)
