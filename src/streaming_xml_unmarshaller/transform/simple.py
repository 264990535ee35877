"""Converters for leaf elements holding a single primitive value.

Each converter reads exactly one element's text through the shared cursor and
leaves the cursor on that element's closing tag. They hold no per-call state,
so the module-level instances below are shared by every field table.
"""

import base64
import re
from datetime import datetime, timezone
from decimal import Decimal
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Optional

from streaming_xml_unmarshaller.context import UnmarshallerContext
from streaming_xml_unmarshaller.shared.config import ConversionConfig
from streaming_xml_unmarshaller.shared.errors import ValueConversionError

TRUE_LITERALS = frozenset(["true"])
FALSE_LITERALS = frozenset(["false"])
LENIENT_TRUE_LITERALS = frozenset(["true", "1", "yes"])
LENIENT_FALSE_LITERALS = frozenset(["false", "0", "no"])

ISO8601_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
)

_EPOCH_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")

Converter = Callable[[str, ConversionConfig], Any]


def _to_bool(text: str, config: ConversionConfig) -> bool:
    value = text.lower()
    if config.strict_booleans:
        true_literals, false_literals = TRUE_LITERALS, FALSE_LITERALS
    else:
        true_literals, false_literals = LENIENT_TRUE_LITERALS, LENIENT_FALSE_LITERALS
    if value in true_literals:
        return True
    if value in false_literals:
        return False
    raise ValueError(f"not a boolean literal: {text}")


def parse_date(text: str) -> datetime:
    """Parse the timestamp encodings used by cloud XML APIs.

    Accepts ISO-8601 (with or without fractional seconds or offset), epoch
    seconds and RFC 822 dates. The result is always timezone-aware.
    """
    if _EPOCH_PATTERN.match(text):
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    for fmt in ISO8601_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError) as e:
            raise ValueError(f"unrecognised timestamp: {text}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SimpleTypeUnmarshaller:
    """Reads one element's text and converts it with ``converter``.

    Args:
        name: Type name used in error messages
        converter: Callable turning stripped text into the Python value
        strip: Strip surrounding whitespace before conversion
    """

    def __init__(self, name: str, converter: Converter, strip: bool = True) -> None:
        self.name = name
        self._converter = converter
        self._strip = strip

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def unmarshall(self, context: UnmarshallerContext) -> Optional[Any]:
        path = context.current_path
        text = context.read_text()
        if self._strip:
            text = text.strip()
        return self.convert(text, context.config.conversion, path)

    def convert(self, text: str, config: ConversionConfig, path: str = "") -> Optional[Any]:
        """Convert already extracted text, applying the empty-value policy."""
        if text == "" and config.empty_as_none:
            return None
        try:
            return self._converter(text, config)
        except (ValueError, ArithmeticError) as e:
            raise ValueConversionError(self.name, text, path) from e


class StringUnmarshaller(SimpleTypeUnmarshaller):
    """Strings are returned verbatim; an empty element yields ``""``."""

    def __init__(self) -> None:
        super().__init__("string", lambda text, config: text, strip=False)

    def convert(self, text: str, config: ConversionConfig, path: str = "") -> str:
        return text


STRING = StringUnmarshaller()
BOOLEAN = SimpleTypeUnmarshaller("boolean", _to_bool)
INTEGER = SimpleTypeUnmarshaller("integer", lambda text, config: int(text))
FLOAT = SimpleTypeUnmarshaller("float", lambda text, config: float(text))
DECIMAL = SimpleTypeUnmarshaller("decimal", lambda text, config: Decimal(text))
DATE = SimpleTypeUnmarshaller("date", lambda text, config: parse_date(text))
BYTES = SimpleTypeUnmarshaller(
    "bytes", lambda text, config: base64.b64decode(text, validate=True)
)
