"""Table-driven unmarshaller for structured result objects.

A :class:`StructUnmarshaller` owns one element of the document. It walks the
shared cursor until that element closes, and for each start tag one level
below it looks for the first :class:`FieldBinding` whose path expression
matches. The matching binding's unmarshaller consumes the element and its
value is stored on the result object. Start tags that match no binding are
skipped, which keeps older clients working when a service adds fields.

Field tables are data. Result types are usually dataclasses whose fields
are declared with :func:`xml_field`, and :meth:`StructUnmarshaller.for_dataclass`
turns that metadata into a table.
"""

import dataclasses
from typing import Any, Callable, Generic, List, Optional, Sequence, Type, TypeVar

from streaming_xml_unmarshaller.context import UnmarshallerContext, XmlEvent
from streaming_xml_unmarshaller.shared.logging import get_logger

from .base import Unmarshaller, describe

T = TypeVar("T")

XML_PATH_KEY = "xml_path"
XML_UNMARSHALLER_KEY = "xml_unmarshaller"
XML_REPEATED_KEY = "xml_repeated"


class FieldBinding:
    """One row of a field table: path expression, attribute, value converter.

    Args:
        expression: Relative path, matched one level below the owning element
        attribute: Attribute of the result object receiving the value
        unmarshaller: Converter consuming the matched element
        repeated: Append to a list attribute instead of assigning
    """

    __slots__ = ("expression", "attribute", "unmarshaller", "repeated")

    def __init__(
        self,
        expression: str,
        attribute: str,
        unmarshaller: Unmarshaller[Any],
        repeated: bool = False,
    ) -> None:
        if not expression:
            raise ValueError("expression must not be empty")
        self.expression = expression
        self.attribute = attribute
        self.unmarshaller = unmarshaller
        self.repeated = repeated

    def __repr__(self) -> str:
        return (
            f"FieldBinding({self.expression!r}, {self.attribute!r}, "
            f"{describe(self.unmarshaller)}, repeated={self.repeated})"
        )

    def assign(self, result: Any, value: Any) -> None:
        if self.repeated:
            values = getattr(result, self.attribute, None)
            if values is None:
                values = []
                setattr(result, self.attribute, values)
            values.append(value)
        else:
            setattr(result, self.attribute, value)


def xml_field(
    path: str,
    unmarshaller: Any,
    repeated: bool = False,
    default: Any = None,
    default_factory: Optional[Callable[[], Any]] = None,
) -> Any:
    """Declare a dataclass field bound to an XML path.

    ``unmarshaller`` may be an unmarshaller instance or, for nested
    structures, the nested dataclass type itself; types are resolved through
    the registry when the table is built. Repeated fields default to an
    empty list.

    Example:
        >>> from streaming_xml_unmarshaller.transform import STRING
        >>> @dataclasses.dataclass
        ... class Tag:
        ...     key: Optional[str] = xml_field("key", STRING)
    """
    metadata = {
        XML_PATH_KEY: path,
        XML_UNMARSHALLER_KEY: unmarshaller,
        XML_REPEATED_KEY: repeated,
    }
    if repeated and default_factory is None:
        default_factory = list
    if default_factory is not None:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


class StructUnmarshaller(Generic[T]):
    """Rebuilds one result object from the element the cursor is on.

    Stateless between calls: everything a call needs lives in the result
    object and the cursor, so one instance per result type can be shared.
    """

    def __init__(
        self,
        result_factory: Callable[[], T],
        bindings: Sequence[FieldBinding],
        name: Optional[str] = None,
    ) -> None:
        self.result_factory = result_factory
        self.bindings = tuple(bindings)
        self.name = name or getattr(result_factory, "__name__", "struct")
        # Leading tags of multi-step expressions such as "enableDnsSupport/value"
        self._wrapper_tags = frozenset(
            b.expression.split("/", 1)[0] for b in self.bindings if "/" in b.expression
        )

    def __repr__(self) -> str:
        return f"StructUnmarshaller({self.name!r}, fields={len(self.bindings)})"

    @classmethod
    def for_dataclass(
        cls,
        result_type: Type[T],
        resolve: Optional[Callable[[type], Unmarshaller[Any]]] = None,
    ) -> "StructUnmarshaller[T]":
        """Build an unmarshaller from ``xml_field`` metadata of a dataclass.

        Args:
            result_type: Dataclass whose fields carry ``xml_field`` metadata
            resolve: Looks up unmarshallers for nested dataclass types;
                defaults to building them directly

        Returns:
            StructUnmarshaller with bindings in field declaration order
        """
        if not dataclasses.is_dataclass(result_type):
            raise TypeError(f"{result_type!r} is not a dataclass")
        if resolve is None:
            def resolve(nested: type) -> Unmarshaller[Any]:
                return cls.for_dataclass(nested)

        bindings: List[FieldBinding] = []
        for field in dataclasses.fields(result_type):
            path = field.metadata.get(XML_PATH_KEY)
            if path is None:
                continue
            unmarshaller = field.metadata[XML_UNMARSHALLER_KEY]
            if isinstance(unmarshaller, type):
                unmarshaller = resolve(unmarshaller)
            bindings.append(
                FieldBinding(
                    path,
                    field.name,
                    unmarshaller,
                    repeated=field.metadata.get(XML_REPEATED_KEY, False),
                )
            )
        return cls(result_type, bindings, name=result_type.__name__)

    def match(self, context: UnmarshallerContext, target_depth: int) -> Optional[FieldBinding]:
        """Return the first binding matching the current start tag, if any."""
        for binding in self.bindings:
            if context.test_expression(binding.expression, target_depth):
                return binding
        return None

    def unmarshall(self, context: UnmarshallerContext) -> T:
        """Consume the owning element and return the populated result.

        On return the cursor sits on the owning element's closing tag, or at
        the end of the document.
        """
        result = self.result_factory()
        context.enter_document_element()
        original_depth = context.current_depth
        target_depth = original_depth + 1

        while True:
            event = context.next_event()
            if event is XmlEvent.END_DOCUMENT:
                return result

            if event is XmlEvent.START_ELEMENT:
                binding = self.match(context, target_depth)
                if binding is not None:
                    context.metrics.elements_matched += 1
                    binding.assign(result, binding.unmarshaller.unmarshall(context))
                elif (
                    context.current_depth == target_depth
                    and context.current_element_name not in self._wrapper_tags
                ):
                    context.metrics.elements_skipped += 1
                    _log_skipped(context, self.name)
            elif event is XmlEvent.END_ELEMENT:
                if context.current_depth < original_depth:
                    return result


def _log_skipped(context: UnmarshallerContext, owner: str) -> None:
    logger = get_logger(__name__, context.correlation_id, "struct")
    if logger.is_debug_enabled():
        logger.debug(
            "Skipping unrecognised element",
            extra={"owner": owner, "path": context.current_path},
        )
