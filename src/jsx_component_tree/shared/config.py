"""Configuration classes for component tree parsing.

This module provides configuration objects for the tokenizer, the tree builder
and the serializer, plus the immutable ``ParserConfig`` that aggregates them.
Component configs validate themselves in ``__post_init__``; the aggregate
converts those failures into ``ConfigValidationError``.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

_COMPONENT_FIELDS = ("tokenizer", "builder", "serializer")
_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class TokenizerConfig:
    """Configuration for the markup scanner."""

    allow_fragments: bool = True
    max_input_chars: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if self.max_input_chars is not None and self.max_input_chars <= 0:
            raise ValueError("max_input_chars must be > 0 or None")


@dataclass
class BuilderConfig:
    """Configuration for tree building."""

    collapse_whitespace: bool = True
    unquote_text_expressions: bool = True
    text_node_type: str = "Text"

    def __post_init__(self) -> None:
        """Validate builder configuration."""
        if not self.text_node_type or not self.text_node_type.strip():
            raise ValueError("text_node_type cannot be empty")


@dataclass
class SerializerConfig:
    """Configuration for turning trees back into markup."""

    indent: int = 2
    newline: str = "\n"

    def __post_init__(self) -> None:
        """Validate serializer configuration."""
        if self.indent < 0:
            raise ValueError("indent must be >= 0")
        if self.newline not in ("\n", "\r\n"):
            raise ValueError("newline must be '\\n' or '\\r\\n'")

    @property
    def single_line(self) -> bool:
        """Check whether output is written on one line."""
        return self.indent == 0


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for parsing and serialization.

    Immutable, so a single instance can be shared between editor sessions.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    builder: BuilderConfig = field(default_factory=BuilderConfig)
    serializer: SerializerConfig = field(default_factory=SerializerConfig)
    logging_level: str = "INFO"

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tokenizer.__post_init__()
            self.builder.__post_init__()
            self.serializer.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.logging_level not in _VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {list(_VALID_LOG_LEVELS)}",
                field_name="logging_level",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use a double underscore, e.g.
        ``config.override(serializer__indent=4, tokenizer__allow_fragments=False)``.
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENT_FIELDS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENT_FIELDS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, (list, tuple)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from a dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        silently fall back to defaults.
        """
        component_types = {
            "tokenizer": TokenizerConfig,
            "builder": BuilderConfig,
            "serializer": SerializerConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in cls.__dataclass_fields__:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
            if key in component_types:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Configuration section '{key}' must be an object",
                        field_name=key,
                    )
                try:
                    values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                values[key] = value
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ParserConfig":
        """Load configuration from a JSON file."""
        config_path = Path(path)
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read configuration file {config_path}: {e}") from e
        return cls.from_json(text)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration used by the editor."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Create a preset that keeps text verbatim and rejects fragments."""
        return cls(
            tokenizer=TokenizerConfig(allow_fragments=False),
            builder=BuilderConfig(
                collapse_whitespace=False,
                unquote_text_expressions=False,
            ),
            name="strict",
            description="Keeps text content verbatim and treats fragments as text",
        )

    @classmethod
    def compact(cls) -> "ParserConfig":
        """Create a preset that serializes every tree on a single line."""
        return cls(
            serializer=SerializerConfig(indent=0),
            name="compact",
            description="Single-line serialization for storage and diffing",
        )
