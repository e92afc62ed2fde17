"""Attribute parsing and the typed value union.

Key Components:
    parse_attrs: Split and classify the raw attribute text of one tag
    Str, Num, Bool, Obj, Arr, Raw: Value variants
"""

from .parser import (
    classify_expression,
    decode_escapes,
    parse_attribute_value,
    parse_attrs,
    parse_string_literal,
    split_attributes,
    unwrap_braces,
)
from .values import (
    VALUE_TYPES,
    Arr,
    Bool,
    Num,
    Obj,
    Raw,
    Str,
    Value,
    coerce_value,
    from_python,
    is_value,
    to_tagged,
)

__all__ = [
    "VALUE_TYPES",
    "Arr",
    "Bool",
    "Num",
    "Obj",
    "Raw",
    "Str",
    "Value",
    "classify_expression",
    "coerce_value",
    "decode_escapes",
    "from_python",
    "is_value",
    "parse_attribute_value",
    "parse_attrs",
    "parse_string_literal",
    "split_attributes",
    "to_tagged",
    "unwrap_braces",
]
