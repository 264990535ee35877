"""Bundled request and response shapes.

Response shapes are dataclasses declared with ``xml_field``; their
unmarshallers are derived from that metadata by the registry.
"""

from streaming_xml_unmarshaller.transform.registry import UnmarshallerRegistry

from . import ec2
from .common import REQUEST_ID_EXPRESSIONS, ResponseMetadata
from .rekognition import Image, S3Object, SearchFacesByImageRequest

RESPONSE_TYPES = {
    "common.ResponseMetadata": ResponseMetadata,
    "ec2.CreateVpcResult": ec2.CreateVpcResult,
    "ec2.DescribeSecurityGroupsResult": ec2.DescribeSecurityGroupsResult,
    "ec2.DescribeVpcAttributeResult": ec2.DescribeVpcAttributeResult,
    "ec2.DescribeVpcsResult": ec2.DescribeVpcsResult,
    "ec2.ModifyVpcAttributeResult": ec2.ModifyVpcAttributeResult,
}


def register_models(registry: UnmarshallerRegistry) -> None:
    """Register every bundled response shape under its qualified name."""
    for name, result_type in RESPONSE_TYPES.items():
        registry.register(result_type, name=name)


__all__ = [
    "REQUEST_ID_EXPRESSIONS",
    "RESPONSE_TYPES",
    "Image",
    "ResponseMetadata",
    "S3Object",
    "SearchFacesByImageRequest",
    "ec2",
    "register_models",
]
