"""Event kinds reported by the unmarshaller cursor."""

from enum import Enum, auto


class XmlEvent(Enum):
    """Events produced while walking a response document."""

    START_DOCUMENT = auto()  # Cursor has not consumed anything yet
    START_ELEMENT = auto()   # Opening tag; depth already includes the element
    END_ELEMENT = auto()     # Closing tag; depth already excludes the element
    END_DOCUMENT = auto()    # Input exhausted and parser closed cleanly
