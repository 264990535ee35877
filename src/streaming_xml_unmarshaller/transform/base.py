"""Common interface for every unmarshaller."""

from typing import Any, Protocol, TypeVar, runtime_checkable

from streaming_xml_unmarshaller.context import UnmarshallerContext

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Unmarshaller(Protocol[T_co]):
    """Consumes one element from a shared cursor and returns its value.

    Called with the cursor on the element's ``START_ELEMENT`` event (or at
    the start of the document), and must return with the cursor on that
    element's ``END_ELEMENT`` event.
    """

    def unmarshall(self, context: UnmarshallerContext) -> T_co:
        ...


def describe(unmarshaller: Any) -> str:
    """Short human readable name used in log records."""
    return getattr(unmarshaller, "name", type(unmarshaller).__name__)
