"""Event cursor for streaming XML unmarshalling.

Key Components:
    UnmarshallerContext: Depth-aware cursor shared by all unmarshallers
    XmlEvent: Event kinds reported by the cursor
"""

from .cursor import InputType, UnmarshallerContext
from .events import XmlEvent

__all__ = [
    "InputType",
    "UnmarshallerContext",
    "XmlEvent",
]
