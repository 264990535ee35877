"""Streaming XML Unmarshaller.

Turns XML API responses into plain result objects by walking a streaming,
depth-aware event cursor and dispatching each element to the converter its
path expression is bound to.

Progressive API Disclosure:
- Level 1: Simple functions - unmarshall(), unmarshall_string(), unmarshall_file()
- Level 2: Reusable front end - ResponseUnmarshaller class
- Level 3: Building blocks - UnmarshallerContext, StructUnmarshaller, registry
"""

__version__ = "0.1.0"
__author__ = "Streaming XML Unmarshaller Team"

# Level 1 and 2 entry points
from .api import (
    ResponseUnmarshaller,
    unmarshall,
    unmarshall_file,
    unmarshall_response,
    unmarshall_string,
)

# Level 3 building blocks
from .context import UnmarshallerContext, XmlEvent
from .shared.config import UnmarshallerConfig
from .shared.errors import (
    MalformedDocumentError,
    UnknownResultTypeError,
    UnmarshallingError,
    ValueConversionError,
)
from .shared.result import UnmarshalledResponse
from .transform import (
    FieldBinding,
    StructUnmarshaller,
    UnmarshallerRegistry,
    default_registry,
    xml_field,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "unmarshall",
    "unmarshall_string",
    "unmarshall_file",
    "unmarshall_response",

    # Level 2: Reusable front end
    "ResponseUnmarshaller",

    # Level 3: Building blocks
    "UnmarshallerContext",
    "XmlEvent",
    "FieldBinding",
    "StructUnmarshaller",
    "UnmarshallerRegistry",
    "default_registry",
    "xml_field",

    # Results, configuration and errors
    "UnmarshalledResponse",
    "UnmarshallerConfig",
    "UnmarshallingError",
    "MalformedDocumentError",
    "ValueConversionError",
    "UnknownResultTypeError",
]
