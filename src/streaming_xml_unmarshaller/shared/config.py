"""Configuration classes for streaming XML unmarshalling.

This module provides configuration objects for the event cursor, the
primitive value converters and global behaviour such as logging and
metrics collection.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
MIN_CHUNK_SIZE = 64


@dataclass
class CursorConfig:
    """Configuration for the lxml-backed event cursor."""

    chunk_size: int = 8192
    strip_namespaces: bool = True
    resolve_entities: bool = False
    no_network: bool = True
    huge_tree: bool = False
    release_consumed_elements: bool = True

    def __post_init__(self) -> None:
        """Validate cursor configuration."""
        if self.chunk_size < MIN_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be >= {MIN_CHUNK_SIZE}")


@dataclass
class ConversionConfig:
    """Configuration for primitive value conversion."""

    empty_as_none: bool = True
    strict_booleans: bool = True


@dataclass
class GlobalConfig:
    """Global settings that apply across all components."""

    logging_level: str = "WARNING"
    enable_correlation_tracking: bool = True
    enable_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ("cursor", "conversion", "global_")


@dataclass(frozen=True)
class UnmarshallerConfig:
    """Complete configuration for an unmarshalling run.

    Immutable; use :meth:`override` to derive a modified copy.
    """

    cursor: CursorConfig = field(default_factory=CursorConfig)
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-run component validation and cross-component checks."""
        try:
            self.cursor.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.cursor.huge_tree and not self.cursor.release_consumed_elements:
            raise ConfigValidationError(
                "huge_tree requires release_consumed_elements",
                field_name="cursor.release_consumed_elements",
                suggestions=["Enable cursor.release_consumed_elements",
                             "Disable cursor.huge_tree"],
            )

    def override(self, **kwargs: Any) -> "UnmarshallerConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, using ``component__field`` notation
                for component settings

        Returns:
            New UnmarshallerConfig instance with overrides applied

        Example:
            >>> config = UnmarshallerConfig()
            >>> config.override(cursor__chunk_size=1024).cursor.chunk_size
            1024
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component = next(
                    (c for c in _COMPONENTS if key.startswith(f"{c}__")), None
                )
                if component is None:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {key.split('__', 1)[0]}",
                        field_name=key,
                    )
                field_name = key[len(component) + 2:]
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS:
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if hasattr(value, "__dataclass_fields__"):
                result[name] = {
                    key: getattr(value, key) for key in value.__dataclass_fields__
                }
            else:
                result[name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnmarshallerConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than ignored.
        """
        component_types = {
            "cursor": CursorConfig,
            "conversion": ConversionConfig,
            "global_": GlobalConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                try:
                    values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "UnmarshallerConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict(cls) -> "UnmarshallerConfig":
        """Preset that rejects anything but canonical wire values."""
        return cls(
            conversion=ConversionConfig(empty_as_none=False, strict_booleans=True),
            name="strict",
            description="Canonical wire values only; empty non-string fields fail",
        )

    @classmethod
    def lenient(cls) -> "UnmarshallerConfig":
        """Preset tolerant of loosely encoded values."""
        return cls(
            conversion=ConversionConfig(empty_as_none=True, strict_booleans=False),
            name="lenient",
            description="Accepts 1/0 and yes/no booleans; empty fields become None",
        )

    @classmethod
    def large_documents(cls) -> "UnmarshallerConfig":
        """Preset for very large or deeply nested responses."""
        return cls(
            cursor=CursorConfig(
                chunk_size=65536,
                huge_tree=True,
                release_consumed_elements=True,
            ),
            global_=GlobalConfig(enable_metrics=False),
            name="large_documents",
            description="Bigger read chunks and lxml huge_tree support",
        )
