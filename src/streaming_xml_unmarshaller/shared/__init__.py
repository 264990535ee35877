"""Shared utilities for streaming XML unmarshalling.

This module provides configuration objects, exceptions, metrics and logging
helpers used across the cursor, converter and API layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ConversionConfig,
    CursorConfig,
    GlobalConfig,
    UnmarshallerConfig,
)
from .errors import (
    MalformedDocumentError,
    UnknownResultTypeError,
    UnmarshallingError,
    ValueConversionError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    UnmarshalledResponse,
    UnmarshallingMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConversionConfig",
    "CursorConfig",
    "GlobalConfig",
    "UnmarshallerConfig",
    "MalformedDocumentError",
    "UnknownResultTypeError",
    "UnmarshallingError",
    "ValueConversionError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "UnmarshalledResponse",
    "UnmarshallingMetrics",
]
