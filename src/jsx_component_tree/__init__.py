"""JSX Component Tree.

A never-fail converter between JSX-like markup snippets and editable trees
of typed component nodes, for visual editors that import and export code.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), serialize(), parse_file()
- Level 2: Configured parser - ComponentTreeParser class
- Level 3: Pipeline stages - JSXTokenizer, ComponentTreeBuilder, tree utilities
"""

__version__ = "0.1.0"
__author__ = "JSX Component Tree Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Advanced configuration
from .api import ComponentTreeParser, parse, parse_file, serialize

# Value union for attribute access
from .attributes import Arr, Bool, Num, Obj, Raw, Str, Value

# Name resolution
from .registry import ComponentRegistry, NameResolver

# Configuration classes for advanced usage
from .shared.config import ParserConfig

# Core result objects and editor operations
from .tree import (
    ElementNode,
    ParseResult,
    SequentialIdGenerator,
    find_with_parent,
    get_path,
    insert_node,
    is_descendant,
    move_node,
    remove_node,
    update_node,
    validate_tree,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_file",
    "serialize",

    # Level 2: Advanced parser class
    "ComponentTreeParser",

    # Result objects and data structures
    "ParseResult",
    "ElementNode",
    "SequentialIdGenerator",
    "Value",
    "Str",
    "Num",
    "Bool",
    "Obj",
    "Arr",
    "Raw",

    # Configuration and name resolution
    "ParserConfig",
    "ComponentRegistry",
    "NameResolver",

    # Editor operations
    "find_with_parent",
    "get_path",
    "insert_node",
    "is_descendant",
    "move_node",
    "remove_node",
    "update_node",
    "validate_tree",
]
