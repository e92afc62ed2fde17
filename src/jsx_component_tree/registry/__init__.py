"""Tag name and category resolution.

Key Components:
    NameResolver: Protocol used by the builder and serializer
    ComponentRegistry: Table-driven resolver loadable from JSON
"""

from .resolver import (
    OTHER_CATEGORY,
    ComponentEntry,
    ComponentRegistry,
    NameResolver,
    ResolverLike,
    inverse_name,
    resolve_name,
)

__all__ = [
    "OTHER_CATEGORY",
    "ComponentEntry",
    "ComponentRegistry",
    "NameResolver",
    "ResolverLike",
    "inverse_name",
    "resolve_name",
]
