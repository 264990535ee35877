"""Tests for the table-driven struct unmarshaller."""

import logging
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Optional

import pytest

from streaming_xml_unmarshaller.context import UnmarshallerContext, XmlEvent
from streaming_xml_unmarshaller.models.ec2 import DescribeVpcAttributeResult
from streaming_xml_unmarshaller.transform import (
    BOOLEAN,
    INTEGER,
    STRING,
    FieldBinding,
    StructUnmarshaller,
    xml_field,
)

VPC_ATTRIBUTE_XML = (
    "<Result><vpcId>vpc-1</vpcId>"
    "<enableDnsSupport><value>true</value></enableDnsSupport></Result>"
)


@pytest.fixture
def vpc_attribute_unmarshaller():
    return StructUnmarshaller.for_dataclass(DescribeVpcAttributeResult)


def unmarshall_xml(unmarshaller, xml):
    return unmarshaller.unmarshall(UnmarshallerContext(xml))


class TestFieldTable:
    """Building field tables from dataclass metadata."""

    def test_bindings_follow_declaration_order(self, vpc_attribute_unmarshaller):
        """Test one binding per xml_field in declaration order."""
        bindings = vpc_attribute_unmarshaller.bindings

        assert [b.expression for b in bindings] == [
            "vpcId",
            "enableDnsSupport/value",
            "enableDnsHostnames/value",
        ]
        assert [b.attribute for b in bindings] == [
            "vpc_id",
            "enable_dns_support",
            "enable_dns_hostnames",
        ]
        assert bindings[0].unmarshaller is STRING
        assert bindings[1].unmarshaller is BOOLEAN

    def test_plain_fields_are_ignored(self):
        """Test dataclass fields without xml metadata get no binding."""

        @dataclass
        class Partial:
            name: Optional[str] = xml_field("name", STRING)
            local_only: int = 0

        unmarshaller = StructUnmarshaller.for_dataclass(Partial)

        assert [b.attribute for b in unmarshaller.bindings] == ["name"]

    def test_non_dataclass_rejected(self):
        """Test for_dataclass refuses other types."""
        with pytest.raises(TypeError, match="not a dataclass"):
            StructUnmarshaller.for_dataclass(dict)

    def test_empty_expression_rejected(self):
        """Test a binding needs a path expression."""
        with pytest.raises(ValueError, match="expression must not be empty"):
            FieldBinding("", "name", STRING)

    def test_repr(self, vpc_attribute_unmarshaller):
        """Test reprs name the result type and converters."""
        assert repr(vpc_attribute_unmarshaller) == (
            "StructUnmarshaller('DescribeVpcAttributeResult', fields=3)"
        )
        assert "boolean" in repr(vpc_attribute_unmarshaller.bindings[1])


class TestUnmarshall:
    """The unmarshalling loop itself."""

    def test_end_to_end_example(self, vpc_attribute_unmarshaller):
        """Test the document from the top-level example."""
        result = unmarshall_xml(vpc_attribute_unmarshaller, VPC_ATTRIBUTE_XML)

        assert result.vpc_id == "vpc-1"
        assert result.enable_dns_support is True
        assert result.enable_dns_hostnames is None

    def test_field_order_does_not_matter(self, vpc_attribute_unmarshaller):
        """Test fields are found in any order."""
        forward = (
            "<R><vpcId>vpc-2</vpcId>"
            "<enableDnsSupport><value>false</value></enableDnsSupport>"
            "<enableDnsHostnames><value>true</value></enableDnsHostnames></R>"
        )
        backward = (
            "<R><enableDnsHostnames><value>true</value></enableDnsHostnames>"
            "<enableDnsSupport><value>false</value></enableDnsSupport>"
            "<vpcId>vpc-2</vpcId></R>"
        )

        expected = DescribeVpcAttributeResult(
            vpc_id="vpc-2", enable_dns_support=False, enable_dns_hostnames=True
        )
        assert unmarshall_xml(vpc_attribute_unmarshaller, forward) == expected
        assert unmarshall_xml(vpc_attribute_unmarshaller, backward) == expected

    def test_unknown_elements_are_ignored(self, vpc_attribute_unmarshaller):
        """Test an extra element does not change the result."""
        with_extra = (
            "<Result><vpcId>vpc-1</vpcId>"
            "<ipv6Support><value>true</value></ipv6Support>"
            "<enableDnsSupport><value>true</value></enableDnsSupport></Result>"
        )

        assert unmarshall_xml(vpc_attribute_unmarshaller, with_extra) == (
            unmarshall_xml(vpc_attribute_unmarshaller, VPC_ATTRIBUTE_XML)
        )

    def test_known_names_below_unknown_elements(self, vpc_attribute_unmarshaller):
        """Test a known tag nested in an unknown element is not bound."""
        xml = "<Result><wrapper><vpcId>wrong</vpcId></wrapper></Result>"

        assert unmarshall_xml(vpc_attribute_unmarshaller, xml).vpc_id is None

    def test_empty_element_gives_defaults(self, vpc_attribute_unmarshaller):
        """Test an empty owning element yields an all-default result."""
        assert unmarshall_xml(vpc_attribute_unmarshaller, "<Result/>") == (
            DescribeVpcAttributeResult()
        )
        assert unmarshall_xml(vpc_attribute_unmarshaller, "<Result></Result>") == (
            DescribeVpcAttributeResult()
        )

    def test_first_matching_binding_wins(self):
        """Test dispatch stops at the first matching row."""
        unmarshaller = StructUnmarshaller(
            SimpleNamespace,
            [
                FieldBinding("count", "first", INTEGER),
                FieldBinding("count", "second", INTEGER),
            ],
        )

        result = unmarshall_xml(unmarshaller, "<R><count>3</count></R>")

        assert result.first == 3
        assert not hasattr(result, "second")

    def test_repeated_binding_appends(self):
        """Test repeated bindings collect every occurrence."""
        unmarshaller = StructUnmarshaller(
            SimpleNamespace,
            [FieldBinding("member", "members", STRING, repeated=True)],
        )

        result = unmarshall_xml(
            unmarshaller, "<R><member>a</member><x/><member>b</member></R>"
        )

        assert result.members == ["a", "b"]

    def test_match_metrics(self, vpc_attribute_unmarshaller):
        """Test matched and skipped start tags are counted."""
        context = UnmarshallerContext(
            "<Result><vpcId>v</vpcId><other>x</other></Result>"
        )

        vpc_attribute_unmarshaller.unmarshall(context)

        assert context.metrics.elements_matched == 1
        assert context.metrics.elements_skipped == 1

    def test_wrapper_elements_not_counted_as_skipped(self, vpc_attribute_unmarshaller):
        """Test the wrapper of a boxed value is neither matched nor skipped."""
        context = UnmarshallerContext(VPC_ATTRIBUTE_XML)

        vpc_attribute_unmarshaller.unmarshall(context)

        assert context.metrics.elements_matched == 2
        assert context.metrics.elements_skipped == 0

    def test_skipped_elements_logged_at_debug(self, vpc_attribute_unmarshaller, caplog):
        """Test unknown elements leave a DEBUG record."""
        caplog.set_level(logging.DEBUG, logger="streaming_xml_unmarshaller")

        unmarshall_xml(
            vpc_attribute_unmarshaller, "<Result><newField>1</newField></Result>"
        )

        records = [r for r in caplog.records if r.message == "Skipping unrecognised element"]
        assert len(records) == 1
        assert records[0].path == "/Result/newField"
        assert records[0].owner == "DescribeVpcAttributeResult"

    def test_returns_at_end_of_document(self, vpc_attribute_unmarshaller):
        """Test an unmarshaller entered after the last element returns defaults."""
        context = UnmarshallerContext("<Result/>")
        context.next_event()
        context.next_event()

        assert vpc_attribute_unmarshaller.unmarshall(context) == (
            DescribeVpcAttributeResult()
        )
        assert context.current_event is XmlEvent.END_DOCUMENT


class TestDelegateDepth:
    """Nested use on a shared cursor."""

    def test_delegate_stops_after_its_element(self, vpc_attribute_unmarshaller):
        """Test a delegate consumes exactly its own element."""
        context = UnmarshallerContext(
            "<Root><first><vpcId>a</vpcId>"
            "<enableDnsSupport><value>false</value></enableDnsSupport></first>"
            "<second>after</second></Root>"
        )
        context.next_event()
        context.next_event()
        assert context.current_path == "/Root/first"

        result = vpc_attribute_unmarshaller.unmarshall(context)

        assert result.vpc_id == "a"
        assert result.enable_dns_support is False
        assert context.current_event is XmlEvent.END_ELEMENT
        assert context.current_depth == 1
        assert context.next_event() is XmlEvent.START_ELEMENT
        assert context.current_path == "/Root/second"
        assert context.read_text() == "after"

    def test_sibling_structs_stay_in_step(self):
        """Test consecutive nested structs each get their own fields."""

        @dataclass
        class Endpoint:
            host: Optional[str] = xml_field("host", STRING)
            port: Optional[int] = xml_field("port", INTEGER)

        @dataclass
        class Route:
            source: Optional[Endpoint] = xml_field("source", Endpoint)
            target: Optional[Endpoint] = xml_field("target", Endpoint)
            enabled: Optional[bool] = xml_field("enabled", BOOLEAN)

        xml = (
            "<Route>"
            "<source><host>a</host><port>1</port><extra><host>x</host></extra></source>"
            "<target><port>2</port><host>b</host></target>"
            "<enabled>true</enabled>"
            "</Route>"
        )

        result = unmarshall_xml(StructUnmarshaller.for_dataclass(Route), xml)

        assert result.source == Endpoint(host="a", port=1)
        assert result.target == Endpoint(host="b", port=2)
        assert result.enabled is True

    def test_empty_nested_struct(self):
        """Test an empty nested element yields a default nested object."""

        @dataclass
        class Inner:
            value: Optional[str] = xml_field("value", STRING)

        @dataclass
        class Outer:
            inner: Optional[Inner] = xml_field("inner", Inner)
            after: Optional[str] = xml_field("after", STRING)

        result = unmarshall_xml(
            StructUnmarshaller.for_dataclass(Outer),
            "<Outer><inner/><after>z</after></Outer>",
        )

        assert result.inner == Inner()
        assert result.after == "z"
