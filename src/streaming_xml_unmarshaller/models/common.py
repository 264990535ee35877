"""Shapes shared by every XML response."""

from dataclasses import dataclass
from typing import Optional

from streaming_xml_unmarshaller.transform.simple import STRING
from streaming_xml_unmarshaller.transform.struct import xml_field

# Where services report the request ID, relative to the document element
REQUEST_ID_EXPRESSIONS = (
    "ResponseMetadata/RequestId",
    "requestId",
    "RequestId",
)


@dataclass
class ResponseMetadata:
    """Service-side identifiers of one response."""

    request_id: Optional[str] = xml_field("RequestId", STRING)
