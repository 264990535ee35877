"""EC2 query-protocol response shapes.

EC2 wraps lists as ``<fooSet><item>..</item></fooSet>`` and boxes attribute
values as ``<attribute><value>..</value></attribute>``; the path expressions
below follow that layout.
"""

from dataclasses import dataclass
from typing import List, Optional

from streaming_xml_unmarshaller.transform.collections import ListUnmarshaller
from streaming_xml_unmarshaller.transform.simple import BOOLEAN, INTEGER, STRING
from streaming_xml_unmarshaller.transform.struct import StructUnmarshaller, xml_field


@dataclass
class DescribeVpcAttributeResult:
    vpc_id: Optional[str] = xml_field("vpcId", STRING)
    enable_dns_support: Optional[bool] = xml_field("enableDnsSupport/value", BOOLEAN)
    enable_dns_hostnames: Optional[bool] = xml_field("enableDnsHostnames/value", BOOLEAN)


@dataclass
class Tag:
    key: Optional[str] = xml_field("key", STRING)
    value: Optional[str] = xml_field("value", STRING)


@dataclass
class GroupIdentifier:
    group_id: Optional[str] = xml_field("groupId", STRING)
    group_name: Optional[str] = xml_field("groupName", STRING)


@dataclass
class IpRange:
    cidr_ip: Optional[str] = xml_field("cidrIp", STRING)


@dataclass
class IpPermission:
    """One ingress or egress rule of a security group."""

    ip_protocol: Optional[str] = xml_field("ipProtocol", STRING)
    from_port: Optional[int] = xml_field("fromPort", INTEGER)
    to_port: Optional[int] = xml_field("toPort", INTEGER)
    ip_ranges: List[IpRange] = xml_field("ipRanges/item", IpRange, repeated=True)
    user_id_group_pairs: List[GroupIdentifier] = xml_field(
        "groups/item", GroupIdentifier, repeated=True
    )


TAG_LIST = ListUnmarshaller(StructUnmarshaller.for_dataclass(Tag))


@dataclass
class SecurityGroup:
    owner_id: Optional[str] = xml_field("ownerId", STRING)
    group_id: Optional[str] = xml_field("groupId", STRING)
    group_name: Optional[str] = xml_field("groupName", STRING)
    description: Optional[str] = xml_field("groupDescription", STRING)
    vpc_id: Optional[str] = xml_field("vpcId", STRING)
    ip_permissions: List[IpPermission] = xml_field(
        "ipPermissions/item", IpPermission, repeated=True
    )
    ip_permissions_egress: List[IpPermission] = xml_field(
        "ipPermissionsEgress/item", IpPermission, repeated=True
    )
    tags: List[Tag] = xml_field("tagSet", TAG_LIST, default_factory=list)


@dataclass
class DescribeSecurityGroupsResult:
    security_groups: List[SecurityGroup] = xml_field(
        "securityGroupInfo/item", SecurityGroup, repeated=True
    )
    next_token: Optional[str] = xml_field("nextToken", STRING)


@dataclass
class Vpc:
    vpc_id: Optional[str] = xml_field("vpcId", STRING)
    state: Optional[str] = xml_field("state", STRING)
    cidr_block: Optional[str] = xml_field("cidrBlock", STRING)
    dhcp_options_id: Optional[str] = xml_field("dhcpOptionsId", STRING)
    instance_tenancy: Optional[str] = xml_field("instanceTenancy", STRING)
    is_default: Optional[bool] = xml_field("isDefault", BOOLEAN)
    tags: List[Tag] = xml_field("tagSet", TAG_LIST, default_factory=list)


@dataclass
class DescribeVpcsResult:
    vpcs: List[Vpc] = xml_field("vpcSet/item", Vpc, repeated=True)
    next_token: Optional[str] = xml_field("nextToken", STRING)


@dataclass
class CreateVpcResult:
    vpc: Optional[Vpc] = xml_field("vpc", Vpc)


@dataclass
class ModifyVpcAttributeResult:
    return_: Optional[bool] = xml_field("return", BOOLEAN)
