"""Unmarshallers turning cursor events into Python values.

Key Components:
    StructUnmarshaller: Table-driven unmarshaller for result objects
    FieldBinding: One (path expression, attribute, converter) table row
    ListUnmarshaller / MapUnmarshaller: Wrapped collections
    UnmarshallerRegistry: Memoised unmarshaller per result type
    STRING, BOOLEAN, INTEGER, FLOAT, DECIMAL, DATE, BYTES: Leaf converters
"""

from .base import Unmarshaller
from .collections import ListUnmarshaller, MapEntryUnmarshaller, MapUnmarshaller
from .registry import UnmarshallerRegistry, default_registry
from .simple import (
    BOOLEAN,
    BYTES,
    DATE,
    DECIMAL,
    FLOAT,
    INTEGER,
    STRING,
    SimpleTypeUnmarshaller,
    StringUnmarshaller,
    parse_date,
)
from .struct import FieldBinding, StructUnmarshaller, xml_field

__all__ = [
    "Unmarshaller",
    "ListUnmarshaller",
    "MapEntryUnmarshaller",
    "MapUnmarshaller",
    "UnmarshallerRegistry",
    "default_registry",
    "BOOLEAN",
    "BYTES",
    "DATE",
    "DECIMAL",
    "FLOAT",
    "INTEGER",
    "STRING",
    "SimpleTypeUnmarshaller",
    "StringUnmarshaller",
    "parse_date",
    "FieldBinding",
    "StructUnmarshaller",
    "xml_field",
]
