"""Unmarshallers for wrapped lists and key/value maps.

Both follow the same depth-bounded loop as the struct unmarshaller: they own
the wrapper element the cursor is on and return when it closes.
"""

from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from streaming_xml_unmarshaller.context import UnmarshallerContext, XmlEvent

from .base import Unmarshaller, describe

K = TypeVar("K")
V = TypeVar("V")


class ListUnmarshaller(Generic[V]):
    """Collects ``<wrapper><item>..</item><item>..</item></wrapper>`` into a list.

    Args:
        member_unmarshaller: Converter for each member element
        member_expression: Tag of the member elements
    """

    def __init__(
        self, member_unmarshaller: Unmarshaller[V], member_expression: str = "item"
    ) -> None:
        self.member_unmarshaller = member_unmarshaller
        self.member_expression = member_expression

    @property
    def name(self) -> str:
        return f"list[{describe(self.member_unmarshaller)}]"

    def unmarshall(self, context: UnmarshallerContext) -> List[V]:
        members: List[V] = []
        context.enter_document_element()
        original_depth = context.current_depth
        target_depth = original_depth + 1

        while True:
            event = context.next_event()
            if event is XmlEvent.END_DOCUMENT:
                return members
            if event is XmlEvent.START_ELEMENT:
                if context.test_expression(self.member_expression, target_depth):
                    members.append(self.member_unmarshaller.unmarshall(context))
            elif event is XmlEvent.END_ELEMENT:
                if context.current_depth < original_depth:
                    return members


class MapEntryUnmarshaller(Generic[K, V]):
    """Reads one ``<entry><key>..</key><value>..</value></entry>`` element."""

    def __init__(
        self,
        key_unmarshaller: Unmarshaller[K],
        value_unmarshaller: Unmarshaller[V],
        key_expression: str = "key",
        value_expression: str = "value",
    ) -> None:
        self.key_unmarshaller = key_unmarshaller
        self.value_unmarshaller = value_unmarshaller
        self.key_expression = key_expression
        self.value_expression = value_expression

    def unmarshall(self, context: UnmarshallerContext) -> Tuple[Optional[K], Optional[V]]:
        key: Optional[K] = None
        value: Optional[V] = None
        original_depth = context.current_depth
        target_depth = original_depth + 1

        while True:
            event = context.next_event()
            if event is XmlEvent.END_DOCUMENT:
                return key, value
            if event is XmlEvent.START_ELEMENT:
                if context.test_expression(self.key_expression, target_depth):
                    key = self.key_unmarshaller.unmarshall(context)
                elif context.test_expression(self.value_expression, target_depth):
                    value = self.value_unmarshaller.unmarshall(context)
            elif event is XmlEvent.END_ELEMENT:
                if context.current_depth < original_depth:
                    return key, value


class MapUnmarshaller(Generic[K, V]):
    """Collects a wrapper of map entries into a dict.

    Entries without a key are dropped; a repeated key keeps the last value.
    """

    def __init__(
        self,
        key_unmarshaller: Unmarshaller[K],
        value_unmarshaller: Unmarshaller[V],
        entry_expression: str = "entry",
        key_expression: str = "key",
        value_expression: str = "value",
    ) -> None:
        self.entry_expression = entry_expression
        self.entry_unmarshaller = MapEntryUnmarshaller(
            key_unmarshaller, value_unmarshaller, key_expression, value_expression
        )

    @property
    def name(self) -> str:
        entry = self.entry_unmarshaller
        return (
            f"map[{describe(entry.key_unmarshaller)}, "
            f"{describe(entry.value_unmarshaller)}]"
        )

    def unmarshall(self, context: UnmarshallerContext) -> Dict[K, Optional[V]]:
        entries: Dict[K, Optional[V]] = {}
        context.enter_document_element()
        original_depth = context.current_depth
        target_depth = original_depth + 1

        while True:
            event = context.next_event()
            if event is XmlEvent.END_DOCUMENT:
                return entries
            if event is XmlEvent.START_ELEMENT:
                if context.test_expression(self.entry_expression, target_depth):
                    key, value = self.entry_unmarshaller.unmarshall(context)
                    if key is not None:
                        entries[key] = value
            elif event is XmlEvent.END_ELEMENT:
                if context.current_depth < original_depth:
                    return entries
