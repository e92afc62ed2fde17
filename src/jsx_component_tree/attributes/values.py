"""Typed attribute values.

Every attribute value is exactly one of six variants. ``Raw`` keeps an
expression that was not evaluated verbatim so it can be written back
unchanged.
"""

import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Union


@dataclass(frozen=True)
class Str:
    """String literal."""

    kind: ClassVar[str] = "str"
    value: str

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class Num:
    """Numeric literal."""

    kind: ClassVar[str] = "num"
    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Num requires an int or float, got {type(self.value).__name__}")
        if not math.isfinite(self.value):
            raise ValueError("Num value must be finite")

    @property
    def is_integral(self) -> bool:
        return float(self.value).is_integer()

    def to_python(self) -> Union[int, float]:
        if self.is_integral:
            return int(self.value)
        return float(self.value)


@dataclass(frozen=True)
class Bool:
    """Boolean literal, also used for bare attributes."""

    kind: ClassVar[str] = "bool"
    value: bool

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class Obj:
    """Object literal with insertion-ordered entries."""

    kind: ClassVar[str] = "obj"
    entries: Dict[str, "Value"] = field(default_factory=dict, hash=False)

    def to_python(self) -> Dict[str, Any]:
        return {key: value.to_python() for key, value in self.entries.items()}


@dataclass(frozen=True)
class Arr:
    """Array literal."""

    kind: ClassVar[str] = "arr"
    items: List["Value"] = field(default_factory=list, hash=False)

    def to_python(self) -> List[Any]:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class Raw:
    """Expression kept verbatim because it was not evaluated."""

    kind: ClassVar[str] = "raw"
    text: str

    def to_python(self) -> str:
        return self.text


Value = Union[Str, Num, Bool, Obj, Arr, Raw]
VALUE_TYPES = (Str, Num, Bool, Obj, Arr, Raw)


def is_value(obj: Any) -> bool:
    """Check whether ``obj`` is one of the value variants."""
    return isinstance(obj, VALUE_TYPES)


def from_python(obj: Any) -> Value:
    """Lift a plain Python value into the value union.

    Editors use this when a property form hands back plain values.

    Raises:
        TypeError: If ``obj`` has no literal representation
    """
    if is_value(obj):
        return obj
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, (int, float)):
        return Num(obj)
    if isinstance(obj, str):
        return Str(obj)
    if isinstance(obj, dict):
        return Obj({str(key): from_python(value) for key, value in obj.items()})
    if isinstance(obj, (list, tuple)):
        return Arr([from_python(item) for item in obj])
    raise TypeError(f"Cannot convert {type(obj).__name__} to an attribute value")


def coerce_value(obj: Any) -> Value:
    """Like ``from_python``, but objects without a literal form become ``Raw(repr(obj))``."""
    try:
        return from_python(obj)
    except (TypeError, ValueError):
        return Raw(repr(obj))


def to_tagged(value: Value) -> Dict[str, Any]:
    """Lossless JSON form that keeps the variant of every nested value."""
    if isinstance(value, Obj):
        return {
            "kind": value.kind,
            "value": {key: to_tagged(item) for key, item in value.entries.items()},
        }
    if isinstance(value, Arr):
        return {"kind": value.kind, "value": [to_tagged(item) for item in value.items]}
    return {"kind": value.kind, "value": value.to_python()}
