"""Attribute splitting and value classification.

``parse_attrs`` receives the raw attribute text of one tag, splits it into
individual attributes and classifies each value into the ``Value`` union.
Literal syntax (strings, numbers, booleans, object and array literals) is
interpreted; every other expression is kept verbatim as ``Raw``. Nothing in
this module raises on malformed input: problems are reported as warning
strings next to the best-effort result.
"""

import re
from typing import Dict, List, Optional, Tuple

from .values import Arr, Bool, Num, Obj, Raw, Str, Value

INTEGER_RE = re.compile(r"^-?\d+$")
DECIMAL_RE = re.compile(r"^-?\d*\.\d+$")
IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
ATTRIBUTE_NAME_RE = re.compile(r"^[A-Za-z_$][\w$.:-]*$")

QUOTE_CHARS = frozenset("\"'`")
BRACKETS = {"{": "}", "[": "]", "(": ")"}
CLOSING_BRACKETS = frozenset(BRACKETS.values())
SPREAD_PREFIX = "..."

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

AttributeMap = Dict[str, Value]


def split_attributes(raw: str) -> List[str]:
    """Split raw attribute text on whitespace outside quotes and braces.

    >>> split_attributes('a="x y" b={ {c: 1, d: 2} }')
    ['a="x y"', 'b={ {c: 1, d: 2} }']
    """
    pieces: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None
    depth = 0
    i = 0

    while i < len(raw):
        char = raw[i]
        if quote is not None:
            current.append(char)
            if char == "\\" and i + 1 < len(raw):
                current.append(raw[i + 1])
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTE_CHARS:
            quote = char
            current.append(char)
        elif char == "{":
            depth += 1
            current.append(char)
        elif char == "}":
            depth = max(0, depth - 1)
            current.append(char)
        elif char.isspace() and depth == 0:
            if current:
                pieces.append("".join(current))
                current = []
        else:
            current.append(char)
        i += 1

    if current:
        pieces.append("".join(current))
    return _join_assignments(pieces)


def _join_assignments(pieces: List[str]) -> List[str]:
    # Re-attach "a", "=", "value" written with spaces around the "="
    joined: List[str] = []
    for piece in pieces:
        if joined and (piece.startswith("=") or joined[-1].endswith("=")):
            joined[-1] += piece
        else:
            joined.append(piece)
    return joined


def parse_attrs(raw: str) -> Tuple[AttributeMap, List[str]]:
    """Parse the raw attribute text of one tag.

    Args:
        raw: Text between the tag name and the tag terminator

    Returns:
        Tuple of the attribute map (in source order) and warning messages
    """
    attrs: AttributeMap = {}
    warnings: List[str] = []

    for piece in split_attributes(raw or ""):
        if piece.startswith("{"):
            _parse_spread(piece, attrs, warnings)
            continue

        eq_index = piece.find("=")
        if eq_index == -1:
            name, value_text = piece, None
        else:
            name, value_text = piece[:eq_index].strip(), piece[eq_index + 1:].strip()

        if not ATTRIBUTE_NAME_RE.match(name):
            warnings.append(f"Malformed attribute {piece!r} ignored")
            continue
        if name in attrs:
            warnings.append(f"Duplicate attribute '{name}'; last value wins")

        if value_text is None:
            attrs[name] = Bool(True)
        else:
            attrs[name] = parse_attribute_value(value_text, warnings, name)

    return attrs, warnings


def _parse_spread(piece: str, attrs: AttributeMap, warnings: List[str]) -> None:
    inner = _wrapped_inner(piece, "{", "}")
    expression = inner.strip() if inner is not None else ""
    if expression.startswith(SPREAD_PREFIX) and len(expression) > len(SPREAD_PREFIX):
        attrs[expression] = Raw(expression)
        warnings.append(f"Spread attribute {{{expression}}} was not evaluated")
    else:
        warnings.append(f"Attribute expression {piece!r} without a name ignored")


def parse_attribute_value(
    text: str, warnings: List[str], name: str = "value"
) -> Value:
    """Classify the text to the right of ``=``.

    Warnings are appended to ``warnings`` and mention ``name``.
    """
    if not text:
        warnings.append(f"Attribute '{name}' has an empty value")
        return Str("")

    if text[0] in "\"'":
        if len(text) >= 2 and text[-1] == text[0]:
            return Str(text[1:-1])
        warnings.append(f"Attribute '{name}' has an unterminated string {text!r}; kept verbatim")
        return Raw(text)

    if text[0] == "{":
        inner = _wrapped_inner(text, "{", "}")
        if inner is None:
            warnings.append(f"Attribute '{name}' has unbalanced braces {text!r}; kept verbatim")
            return Raw(text)
        return classify_expression(inner, warnings, name)

    warnings.append(f"Attribute '{name}' has an unquoted value {text!r}; kept verbatim")
    return Raw(text)


def classify_expression(expression: str, warnings: List[str], path: str = "value") -> Value:
    """Classify the inside of a ``{...}`` attribute expression.

    Object literals are interpreted recursively; an object entry holding an
    array literal is reduced to the array's first element. Anything that is
    not literal syntax becomes ``Raw`` with a "not evaluated" warning.

    >>> classify_expression("{padding: 10}", [])
    Obj(entries={'padding': Num(value=10.0)})
    """
    expression = expression.strip()
    if not expression:
        warnings.append(f"Attribute '{path}' has an empty expression; kept verbatim")
        return Raw(expression)
    return _literal(expression, warnings, path)


def _literal(text: str, warnings: List[str], path: str) -> Value:
    text = text.strip()
    if text in ("true", "false"):
        return Bool(text == "true")

    number = _number(text)
    if number is not None:
        return number

    string = parse_string_literal(text)
    if string is not None:
        return Str(string)

    if text.startswith("{") and text.endswith("}"):
        obj = _object_literal(text, warnings, path)
        if obj is not None:
            return obj
    elif text.startswith("[") and text.endswith("]"):
        arr = _array_literal(text, warnings, path)
        if arr is not None:
            return arr

    warnings.append(f"Expression {text!r} in '{path}' was not evaluated; kept verbatim")
    return Raw(text)


def _number(text: str) -> Optional[Num]:
    if not (INTEGER_RE.match(text) or DECIMAL_RE.match(text)):
        return None
    try:
        return Num(float(text))
    except ValueError:
        # Too large to be finite
        return None


def parse_string_literal(text: str) -> Optional[str]:
    """Decode a single quoted or template string literal, or return None.

    >>> parse_string_literal("'hi'")
    'hi'
    """
    if len(text) < 2 or text[0] not in QUOTE_CHARS or text[-1] != text[0]:
        return None
    quote = text[0]
    body = text[1:-1]
    if quote == "`" and "${" in body:
        return None

    i = 0
    while i < len(body):
        if body[i] == "\\":
            i += 2
            continue
        if body[i] == quote:
            # Two literals joined by an operator, e.g. "a" + "b"
            return None
        i += 1
    if body.endswith("\\") and not body.endswith("\\\\"):
        return None
    return decode_escapes(body)


def decode_escapes(body: str) -> str:
    """Decode JavaScript string escapes."""
    if "\\" not in body:
        return body

    out: List[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 >= len(body):
            out.append(char)
            i += 1
            continue

        code = body[i + 1]
        if code in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[code])
            i += 2
        elif code == "u" and re.match(r"[0-9a-fA-F]{4}", body[i + 2:i + 6]):
            out.append(chr(int(body[i + 2:i + 6], 16)))
            i += 6
        elif code == "x" and re.match(r"[0-9a-fA-F]{2}", body[i + 2:i + 4]):
            out.append(chr(int(body[i + 2:i + 4], 16)))
            i += 4
        elif code == "\n":
            i += 2
        else:
            out.append(code)
            i += 2
    return "".join(out)


def _object_literal(text: str, warnings: List[str], path: str) -> Optional[Obj]:
    entries = split_top_level(text[1:-1], ",")
    if entries is None:
        return None

    result: Dict[str, Value] = {}
    for index, entry in enumerate(entries):
        entry = entry.strip()
        if not entry:
            if index == len(entries) - 1:
                continue
            return None

        colon = find_top_level(entry, ":")
        if colon == -1:
            # Shorthand, spread or method entries are not literal syntax
            return None
        key = _object_key(entry[:colon].strip())
        value_text = entry[colon + 1:].strip()
        if key is None or not value_text:
            return None

        entry_path = f"{path}.{key}"
        value = _literal(value_text, warnings, entry_path)
        if isinstance(value, Arr):
            value = _reduce_array(value, value_text, warnings, entry_path)
        result[key] = value

    return Obj(result)


def _reduce_array(value: Arr, text: str, warnings: List[str], path: str) -> Value:
    if not value.items:
        warnings.append(f"Empty array in '{path}' cannot be reduced; kept verbatim")
        return Raw(text)
    warnings.append(
        f"Array in '{path}' reduced to its first element (lossy): {text}"
    )
    return value.items[0]


def _array_literal(text: str, warnings: List[str], path: str) -> Optional[Arr]:
    items = split_top_level(text[1:-1], ",")
    if items is None:
        return None

    values: List[Value] = []
    for index, item in enumerate(items):
        item = item.strip()
        if not item:
            if index == len(items) - 1:
                continue
            return None
        values.append(_literal(item, warnings, f"{path}[{index}]"))
    return Arr(values)


def _object_key(text: str) -> Optional[str]:
    if IDENTIFIER_RE.match(text) or INTEGER_RE.match(text) or DECIMAL_RE.match(text):
        return text
    return parse_string_literal(text)


def _scan_top_level(text: str) -> Tuple[List[int], bool]:
    """Indices outside quotes and brackets, and whether ``text`` is balanced."""
    positions: List[int] = []
    stack: List[str] = []
    quote: Optional[str] = None
    i = 0

    while i < len(text):
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTE_CHARS:
            quote = char
        elif char in BRACKETS:
            stack.append(BRACKETS[char])
        elif stack and char == stack[-1]:
            stack.pop()
        elif char in CLOSING_BRACKETS:
            return positions, False
        elif not stack:
            positions.append(i)
        i += 1

    return positions, quote is None and not stack


def split_top_level(text: str, separator: str) -> Optional[List[str]]:
    """Split on ``separator`` outside quotes and brackets.

    Returns None when quotes or brackets are unbalanced.
    """
    positions, balanced = _scan_top_level(text)
    if not balanced:
        return None

    parts: List[str] = []
    start = 0
    for index in positions:
        if text[index] == separator:
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return parts


def find_top_level(text: str, char: str) -> int:
    """Index of the first ``char`` outside quotes and brackets, or -1."""
    positions, _ = _scan_top_level(text)
    for index in positions:
        if text[index] == char:
            return index
    return -1


def _wrapped_inner(text: str, opener: str, closer: str) -> Optional[str]:
    # Inner text when the opener at 0 is closed by the last character
    if len(text) < 2 or text[0] != opener or text[-1] != closer:
        return None
    if split_top_level(text, ",") is None:
        return None

    depth = 0
    quote: Optional[str] = None
    i = 0
    while i < len(text):
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTE_CHARS:
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0 and i != len(text) - 1:
                return None
        i += 1
    return text[1:-1]


def unwrap_braces(text: str) -> Optional[str]:
    """Inner text of a single balanced ``{...}`` expression, or None.

    >>> unwrap_braces("{a < b}")
    'a < b'
    >>> unwrap_braces("{a} {b}") is None
    True
    """
    return _wrapped_inner(text, "{", "}")
