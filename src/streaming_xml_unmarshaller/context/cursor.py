"""Forward-only, depth-aware cursor over an XML response document.

The cursor wraps :class:`lxml.etree.XMLPullParser`, feeding it the input in
chunks and handing out one event at a time. Every unmarshaller taking part
in a traversal advances the same cursor, so the depth it reports is the
contract that keeps parent and nested unmarshallers in step:

* ``current_depth`` is the number of open elements. It is 0 before the
  document element opens and again after it closes.
* On ``START_ELEMENT`` the depth already counts the new element.
* On ``END_ELEMENT`` the depth no longer counts the closed element.
"""

import io
import time
from collections import deque
from pathlib import Path
from typing import IO, Any, Deque, Dict, List, Mapping, Optional, Tuple, Union

from lxml import etree

from streaming_xml_unmarshaller.shared.config import UnmarshallerConfig
from streaming_xml_unmarshaller.shared.errors import (
    MalformedDocumentError,
    UnmarshallingError,
)
from streaming_xml_unmarshaller.shared.logging import get_logger
from streaming_xml_unmarshaller.shared.result import UnmarshallingMetrics

from .events import XmlEvent

InputType = Union[str, bytes, IO[Any], Path]

MS_PER_SECOND = 1000

CURRENT_ELEMENT = "."


def _open_source(source: InputType) -> Tuple[IO[Any], bool]:
    """Return a readable stream for ``source`` and whether the cursor owns it."""
    if isinstance(source, Path):
        return source.open("rb"), True
    if isinstance(source, str):
        return io.StringIO(source), False
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source)), False
    if hasattr(source, "read"):
        return source, False
    raise TypeError(f"Unsupported input type: {type(source).__name__}")


class MetadataExpression:
    """A path whose element text is captured as response metadata."""

    __slots__ = ("expression", "target_depth", "key")

    def __init__(self, expression: str, target_depth: int, key: str) -> None:
        self.expression = expression
        self.target_depth = target_depth
        self.key = key


class UnmarshallerContext:
    """Stateful cursor shared by all unmarshallers of one document traversal.

    Not safe for concurrent use. Nested unmarshallers delegate to it
    sequentially and each one resumes exactly where the previous left it.

    Example:
        >>> context = UnmarshallerContext("<a><b>1</b></a>")
        >>> context.next_event(), context.current_depth
        (<XmlEvent.START_ELEMENT: 2>, 1)
        >>> context.next_event(), context.current_path
        (<XmlEvent.START_ELEMENT: 2>, '/a/b')
        >>> context.read_text(), context.current_depth
        ('1', 1)
    """

    def __init__(
        self,
        source: InputType,
        config: Optional[UnmarshallerConfig] = None,
        correlation_id: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize the cursor.

        Args:
            source: XML content as string, bytes, file-like object or Path
            config: Unmarshalling configuration; defaults are used if omitted
            correlation_id: Optional correlation ID for log records
            headers: Transport headers of the response, if any
        """
        self.config = config or UnmarshallerConfig()
        self.correlation_id = correlation_id
        self.metrics = UnmarshallingMetrics()
        self._headers = {key.lower(): value for key, value in (headers or {}).items()}
        self._logger = get_logger(__name__, correlation_id, "cursor")

        self._stream, self._owns_stream = _open_source(source)
        cursor_config = self.config.cursor
        self._parser = etree.XMLPullParser(
            events=("start", "end"),
            resolve_entities=cursor_config.resolve_entities,
            no_network=cursor_config.no_network,
            huge_tree=cursor_config.huge_tree,
            remove_comments=True,
            remove_pis=True,
        )

        self._pending: Deque[Tuple[str, Any]] = deque()
        self._input_exhausted = False
        self._stack: List[str] = []
        self._path = ""
        self._event = XmlEvent.START_DOCUMENT
        self._element: Any = None
        self._consumed: Any = None
        self._metadata_expressions: List[MetadataExpression] = []
        self._metadata: Dict[str, str] = {}
        self._started_at = time.perf_counter()

    # Context manager support

    def __enter__(self) -> "UnmarshallerContext":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the input stream if the cursor opened it."""
        if self._owns_stream and not self._stream.closed:
            self._stream.close()

    # Position

    @property
    def current_depth(self) -> int:
        """Number of currently open elements."""
        return len(self._stack)

    @property
    def current_event(self) -> XmlEvent:
        return self._event

    @property
    def current_path(self) -> str:
        """Slash-separated tags of the open elements, e.g. ``/a/b``."""
        return self._path

    @property
    def current_element_name(self) -> Optional[str]:
        return self._stack[-1] if self._stack else None

    @property
    def current_parent_element(self) -> Optional[str]:
        return self._stack[-2] if len(self._stack) > 1 else None

    @property
    def is_start_of_document(self) -> bool:
        """True until the first event has been consumed."""
        return self._event is XmlEvent.START_DOCUMENT

    # Transport headers and response metadata

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    def get_header(self, name: str) -> Optional[str]:
        """Look up a transport header case-insensitively."""
        return self._headers.get(name.lower())

    def register_metadata_expression(
        self, expression: str, target_depth: int, key: str
    ) -> None:
        """Capture the text of elements matching ``expression`` under ``key``.

        Capture happens when the matching element closes and does not move
        the cursor, so a field binding for the same element still sees it.
        """
        self._metadata_expressions.append(
            MetadataExpression(expression, target_depth, key)
        )

    @property
    def metadata(self) -> Dict[str, str]:
        return dict(self._metadata)

    # Traversal

    def test_expression(self, expression: str, target_depth: Optional[int] = None) -> bool:
        """Check whether the current path ends with ``expression``.

        When ``target_depth`` is given, the expression's first step must sit
        at that depth, i.e. the current depth must equal ``target_depth``
        plus the number of additional steps in the expression. ``"."``
        always matches.
        """
        if expression == CURRENT_ELEMENT:
            return True
        if target_depth is not None:
            if target_depth + expression.count("/") != len(self._stack):
                return False
        return self._path.endswith("/" + expression)

    def next_event(self) -> XmlEvent:
        """Advance the cursor by one event and return it.

        Raises:
            MalformedDocumentError: If the parser rejects the input
        """
        if self._event is XmlEvent.END_DOCUMENT:
            return self._event

        self._release_consumed()
        item = self._pull()
        if item is None:
            self._event = XmlEvent.END_DOCUMENT
            self._element = None
            self._finish()
            return self._event

        action, element = item
        if action == "start":
            self._stack.append(self._tag_name(element))
            self._event = XmlEvent.START_ELEMENT
            if len(self._stack) > self.metrics.max_depth:
                self.metrics.max_depth = len(self._stack)
        else:
            self._capture_metadata(element)
            self._stack.pop()
            self._event = XmlEvent.END_ELEMENT
            self._consumed = element

        self._element = element
        self._path = "/" + "/".join(self._stack) if self._stack else ""
        self.metrics.events_processed += 1
        return self._event

    def read_text(self) -> str:
        """Consume the current element and return its text content.

        Must be called on a ``START_ELEMENT`` event. The cursor is left on the
        element's ``END_ELEMENT`` event; nested child elements are skipped.
        """
        if self._event is not XmlEvent.START_ELEMENT:
            raise UnmarshallingError(
                "read_text requires the cursor to be on a start tag",
                details={"event": self._event.name, "path": self._path},
            )

        element = self._element
        path = self._path
        owning_depth = len(self._stack)
        while True:
            event = self.next_event()
            if event is XmlEvent.END_DOCUMENT:
                raise MalformedDocumentError(f"Document ended inside {path}")
            if event is XmlEvent.END_ELEMENT and len(self._stack) < owning_depth:
                return element.text or ""

    def enter_document_element(self) -> None:
        """Move from the start of the document onto the document element.

        Does nothing once the traversal has begun.
        """
        if not self.is_start_of_document:
            return
        if self.next_event() is not XmlEvent.START_ELEMENT:
            raise MalformedDocumentError("Document has no root element")

    # Internals

    def _tag_name(self, element: Any) -> str:
        if self.config.cursor.strip_namespaces:
            return etree.QName(element).localname
        return element.tag

    def _pull(self) -> Optional[Tuple[str, Any]]:
        while not self._pending:
            if self._input_exhausted:
                return None
            # str chunks are fed as is; lxml ignores the declared encoding for them
            chunk = self._stream.read(self.config.cursor.chunk_size)
            try:
                if chunk:
                    self._parser.feed(chunk)
                else:
                    self._input_exhausted = True
                    self._parser.close()
                self._pending.extend(self._parser.read_events())
            except etree.XMLSyntaxError as e:
                self.close()
                line, column = getattr(e, "position", (None, None))
                self._logger.debug(
                    "Parser rejected document",
                    extra={"error": str(e), "line": line, "column": column},
                )
                raise MalformedDocumentError(str(e), line=line, column=column) from e
        return self._pending.popleft()

    def _capture_metadata(self, element: Any) -> None:
        for expression in self._metadata_expressions:
            if self.test_expression(expression.expression, expression.target_depth):
                self._metadata[expression.key] = element.text or ""

    def _release_consumed(self) -> None:
        # Closed elements are never revisited; dropping them keeps memory flat
        element = self._consumed
        self._consumed = None
        if element is None or not self.config.cursor.release_consumed_elements:
            return
        element.clear()
        parent = element.getparent()
        if parent is not None:
            while element.getprevious() is not None:
                del parent[0]

    def _finish(self) -> None:
        self.metrics.processing_time_ms = (
            (time.perf_counter() - self._started_at) * MS_PER_SECOND
        )
        self.close()
        self._logger.debug("Document traversal complete", extra=self.metrics.to_dict())
