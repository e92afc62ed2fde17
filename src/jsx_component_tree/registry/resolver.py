"""Tag name resolution.

The builder asks a resolver for the canonical type and palette category of
every literal tag name, and the serializer asks for the inverse. Resolution
is configuration, not part of the parsing algorithm: any object with
``resolve``/``inverse`` methods works, as do plain callables, and an unknown
name always passes through unchanged with the fallback category.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from jsx_component_tree.shared import ConfigError, ConfigValidationError, get_logger

OTHER_CATEGORY = "Other"

Resolution = Tuple[str, str]


@runtime_checkable
class NameResolver(Protocol):
    """Two-way mapping between literal tag names and canonical types."""

    def resolve(self, raw_name: str) -> Resolution:
        """Return ``(canonical_type, category)`` for a literal tag name."""
        ...

    def inverse(self, canonical_type: str) -> str:
        """Return the literal tag name to write for a canonical type."""
        ...


ResolverLike = Union[NameResolver, Callable[[str], Any], None]


@dataclass(frozen=True)
class ComponentEntry:
    """Registry row for one literal tag name."""

    tag: str
    type: str
    category: str = OTHER_CATEGORY
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate entry values."""
        if not self.tag or not self.tag.strip():
            raise ValueError("Component tag cannot be empty")
        if not self.type or not self.type.strip():
            raise ValueError("Component type cannot be empty")
        if not self.category:
            raise ValueError("Component category cannot be empty")

    @property
    def label(self) -> str:
        """Name shown in the editor palette."""
        return self.display_name or self.type

    def to_dict(self) -> Dict[str, str]:
        data = {"tag": self.tag, "type": self.type, "category": self.category}
        if self.display_name:
            data["displayName"] = self.display_name
        return data


class ComponentRegistry:
    """Configurable ``NameResolver`` backed by a table of components.

    Several tags may map to one type (``span`` and ``Text`` both become
    ``Text``); the inverse uses the first tag registered for a type.
    """

    def __init__(
        self,
        entries: Iterable[ComponentEntry] = (),
        fallback_category: str = OTHER_CATEGORY,
    ) -> None:
        if not fallback_category:
            raise ValueError("fallback_category cannot be empty")
        self.fallback_category = fallback_category
        self._by_tag: Dict[str, ComponentEntry] = {}
        self._by_type: Dict[str, ComponentEntry] = {}
        for entry in entries:
            self.register(entry)

    def register(self, entry: ComponentEntry) -> None:
        """Add or replace the entry for ``entry.tag``."""
        self._by_tag[entry.tag] = entry
        self._by_type.setdefault(entry.type, entry)

    def resolve(self, raw_name: str) -> Resolution:
        entry = self._by_tag.get(raw_name)
        if entry is not None:
            return entry.type, entry.category
        known = self._by_type.get(raw_name)
        if known is not None:
            return raw_name, known.category
        return raw_name, self.fallback_category

    def inverse(self, canonical_type: str) -> str:
        entry = self._by_type.get(canonical_type)
        return entry.tag if entry is not None else canonical_type

    def display_name(self, canonical_type: str) -> str:
        entry = self._by_type.get(canonical_type)
        return entry.label if entry is not None else canonical_type

    def is_known(self, canonical_type: str) -> bool:
        """Check whether any registered tag resolves to ``canonical_type``."""
        return canonical_type in self._by_type

    def types(self) -> List[str]:
        """Known canonical types, in registration order."""
        return list(self._by_type)

    def __contains__(self, raw_name: object) -> bool:
        return raw_name in self._by_tag

    def __iter__(self) -> Iterator[ComponentEntry]:
        return iter(self._by_tag.values())

    def __len__(self) -> int:
        return len(self._by_tag)

    def to_dict(self) -> Dict[str, Any]:
        """Convert registry to the JSON layout read by ``from_dict``."""
        return {
            "fallbackCategory": self.fallback_category,
            "components": [entry.to_dict() for entry in self],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentRegistry":
        """Create a registry from a dictionary.

        Expected layout::

            {"fallbackCategory": "Other",
             "components": [{"tag": "div", "type": "Box", "category": "Layout"}]}
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Registry data must be an object")
        components = data.get("components", [])
        if not isinstance(components, list):
            raise ConfigValidationError(
                "Registry 'components' must be a list", field_name="components"
            )

        entries = []
        for index, item in enumerate(components):
            if not isinstance(item, dict):
                raise ConfigValidationError(
                    f"Registry component {index} must be an object",
                    field_name=f"components[{index}]",
                )
            try:
                entries.append(ComponentEntry(
                    tag=item["tag"],
                    type=item.get("type", item["tag"]),
                    category=item.get("category", OTHER_CATEGORY),
                    display_name=item.get("displayName", item.get("display_name")),
                ))
            except KeyError as e:
                raise ConfigValidationError(
                    f"Registry component {index} is missing {e}",
                    field_name=f"components[{index}]",
                    suggestions=["tag", "type", "category", "displayName"],
                ) from e
            except ValueError as e:
                raise ConfigValidationError(
                    f"Registry component {index}: {e}",
                    field_name=f"components[{index}]",
                ) from e

        try:
            return cls(entries, data.get("fallbackCategory", OTHER_CATEGORY))
        except ValueError as e:
            raise ConfigValidationError(str(e), field_name="fallbackCategory") from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ComponentRegistry":
        """Load a registry from a JSON file."""
        registry_path = Path(path)
        try:
            data = json.loads(registry_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Could not read registry file {registry_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid registry JSON in {registry_path}: {e}") from e

        registry = cls.from_dict(data)
        get_logger(__name__, component="registry").debug(
            "Component registry loaded",
            extra={"path": str(registry_path), "entry_count": len(registry)},
        )
        return registry

    @classmethod
    def default(cls) -> "ComponentRegistry":
        """Registry for the visual builder's component palette."""
        return cls([
            ComponentEntry("Container", "Container", "Layout"),
            ComponentEntry("Stack", "Stack", "Layout"),
            ComponentEntry("SimpleGrid", "SimpleGrid", "Layout"),
            ComponentEntry("Group", "Group", "Layout"),
            ComponentEntry("div", "Box", "Layout"),
            ComponentEntry("Card", "Card", "Data Display"),
            ComponentEntry("Card.Section", "CardSection", "Data Display", "Card Section"),
            ComponentEntry("Image", "Image", "Data Display"),
            ComponentEntry("Avatar", "Avatar", "Data Display"),
            ComponentEntry("Text", "Text", "Typography"),
            ComponentEntry("span", "Text", "Typography"),
            ComponentEntry("Title", "Title", "Typography"),
            ComponentEntry("Badge", "Badge", "Feedback"),
            ComponentEntry("Button", "Button", "Inputs"),
            ComponentEntry("TextInput", "TextInput", "Inputs", "Text Input"),
        ])


def resolve_name(resolver: ResolverLike, raw_name: str) -> Tuple[str, str, str]:
    """Resolve ``raw_name`` to ``(type, category, display_name)``.

    Accepts a ``NameResolver``, a callable returning ``(type, category)``
    or None. Missing or malformed answers fall back to the raw name with
    the ``Other`` category.
    """
    answer: Any = None
    if isinstance(resolver, NameResolver):
        answer = resolver.resolve(raw_name)
    elif callable(resolver):
        answer = resolver(raw_name)

    canonical, category = raw_name, OTHER_CATEGORY
    if isinstance(answer, tuple) and len(answer) == 2:
        canonical = answer[0] or raw_name
        category = answer[1] or OTHER_CATEGORY
    elif isinstance(answer, str) and answer:
        canonical = answer

    display = canonical
    display_lookup = getattr(resolver, "display_name", None)
    if callable(display_lookup):
        display = display_lookup(canonical) or canonical
    return canonical, category, display


def inverse_name(resolver: ResolverLike, canonical_type: str) -> str:
    """Literal tag name for ``canonical_type``, falling back to the type.

    Plain callables only resolve forward, so they have no inverse. A
    resolver that fails is treated like one without an entry.
    """
    literal: Any = None
    if isinstance(resolver, NameResolver):
        try:
            literal = resolver.inverse(canonical_type)
        except Exception:
            get_logger(__name__, component="registry").warning(
                "Inverse name lookup failed",
                extra={"canonical_type": canonical_type},
                exc_info=True,
            )
    if isinstance(literal, str) and literal:
        return literal
    return canonical_type
