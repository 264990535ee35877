"""Public unmarshalling API."""

from .unmarshal import (
    ResponseUnmarshaller,
    resolve_unmarshaller,
    unmarshall,
    unmarshall_file,
    unmarshall_response,
    unmarshall_string,
)

__all__ = [
    "ResponseUnmarshaller",
    "resolve_unmarshaller",
    "unmarshall",
    "unmarshall_file",
    "unmarshall_response",
    "unmarshall_string",
]
