"""Exceptions raised while unmarshalling XML responses."""

from typing import Any, Dict, Optional


class UnmarshallingError(Exception):
    """Base exception for all unmarshalling failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MalformedDocumentError(UnmarshallingError):
    """The underlying XML parser rejected the document.

    Raised for syntax errors and for documents that end before every open
    element has been closed. Never recovered from.
    """

    def __init__(
        self,
        message: str = "Malformed XML document",
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message, details={"line": line, "column": column})
        self.line = line
        self.column = column


class ValueConversionError(UnmarshallingError):
    """Element text could not be converted to the field's primitive type."""

    def __init__(self, target_type: str, text: str, path: str):
        super().__init__(
            f"Cannot convert {text!r} at {path} to {target_type}",
            details={"target_type": target_type, "text": text, "path": path},
        )
        self.target_type = target_type
        self.text = text
        self.path = path


class UnknownResultTypeError(UnmarshallingError):
    """No unmarshaller is registered for the requested result type."""

    def __init__(self, type_name: str):
        super().__init__(
            f"No unmarshaller registered for {type_name}",
            details={"type_name": type_name},
        )
        self.type_name = type_name
