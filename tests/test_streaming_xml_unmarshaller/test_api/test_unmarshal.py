"""Tests for the public unmarshalling entry points."""

import logging

import pytest

from streaming_xml_unmarshaller.api import (
    ResponseUnmarshaller,
    resolve_unmarshaller,
    unmarshall,
    unmarshall_file,
    unmarshall_response,
    unmarshall_string,
)
from streaming_xml_unmarshaller.models.common import ResponseMetadata
from streaming_xml_unmarshaller.models.ec2 import (
    DescribeVpcAttributeResult,
    ModifyVpcAttributeResult,
)
from streaming_xml_unmarshaller.shared.config import UnmarshallerConfig
from streaming_xml_unmarshaller.shared.errors import (
    MalformedDocumentError,
    UnknownResultTypeError,
    ValueConversionError,
)
from streaming_xml_unmarshaller.transform import STRING, StructUnmarshaller, default_registry

VPC_ATTRIBUTE_RESPONSE = (
    '<DescribeVpcAttributeResponse xmlns="http://ec2.amazonaws.com/doc/2016-11-15/">'
    "<requestId>req-ec2</requestId>"
    "<vpcId>vpc-1</vpcId>"
    "<enableDnsSupport><value>true</value></enableDnsSupport>"
    "</DescribeVpcAttributeResponse>"
)

QUERY_STYLE_RESPONSE = (
    "<ModifyVpcAttributeResponse>"
    "<return>true</return>"
    "<ResponseMetadata><RequestId>req-query</RequestId></ResponseMetadata>"
    "</ModifyVpcAttributeResponse>"
)


class TestResolveUnmarshaller:
    """Targets given as types, names or instances."""

    def test_by_type(self):
        """Test result types resolve through the default registry."""
        assert resolve_unmarshaller(DescribeVpcAttributeResult) is (
            default_registry().get(DescribeVpcAttributeResult)
        )

    def test_by_name(self):
        """Test registered names resolve to the same instance."""
        assert resolve_unmarshaller("ec2.DescribeVpcAttributeResult") is (
            resolve_unmarshaller(DescribeVpcAttributeResult)
        )

    def test_instance_passthrough(self):
        """Test unmarshaller instances are used as given."""
        assert resolve_unmarshaller(STRING) is STRING

    def test_unknown_name(self):
        """Test unknown names fail."""
        with pytest.raises(UnknownResultTypeError):
            resolve_unmarshaller("ec2.Nothing")

    def test_unsupported_target(self):
        """Test arbitrary objects are rejected."""
        with pytest.raises(TypeError, match="Cannot unmarshall into"):
            resolve_unmarshaller(42)


class TestUnmarshall:
    """The convenience functions."""

    def test_top_level_example(self):
        """Test the canonical VPC attribute document."""
        xml = (
            "<Result><vpcId>vpc-1</vpcId>"
            "<enableDnsSupport><value>true</value></enableDnsSupport></Result>"
        )

        result = unmarshall(xml, DescribeVpcAttributeResult)

        assert result == DescribeVpcAttributeResult(
            vpc_id="vpc-1", enable_dns_support=True, enable_dns_hostnames=None
        )

    def test_bytes_and_name_target(self):
        """Test bytes input with a registered name."""
        result = unmarshall(
            VPC_ATTRIBUTE_RESPONSE.encode("utf-8"), "ec2.DescribeVpcAttributeResult"
        )

        assert result.vpc_id == "vpc-1"

    def test_string_with_latin1_declaration(self):
        """Test str input keeps non-ASCII text whatever encoding it declares."""
        xml = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>'
            "<Result><vpcId>café</vpcId></Result>"
        )

        assert unmarshall(xml, DescribeVpcAttributeResult).vpc_id == "café"

    def test_explicit_unmarshaller(self):
        """Test an unmarshaller instance as target."""
        unmarshaller = StructUnmarshaller.for_dataclass(ModifyVpcAttributeResult)

        assert unmarshall(QUERY_STYLE_RESPONSE, unmarshaller).return_ is True

    def test_unmarshall_string_type_check(self):
        """Test unmarshall_string only takes str."""
        with pytest.raises(TypeError, match="Expected str, got bytes"):
            unmarshall_string(b"<a/>", DescribeVpcAttributeResult)

    def test_unmarshall_string(self):
        """Test unmarshalling from a string."""
        result = unmarshall_string(VPC_ATTRIBUTE_RESPONSE, DescribeVpcAttributeResult)

        assert result.enable_dns_support is True

    def test_unmarshall_file(self, tmp_path):
        """Test unmarshalling a saved response."""
        path = tmp_path / "response.xml"
        path.write_text(VPC_ATTRIBUTE_RESPONSE, encoding="utf-8")

        assert unmarshall_file(str(path), DescribeVpcAttributeResult).vpc_id == "vpc-1"
        assert unmarshall_file(path, DescribeVpcAttributeResult).vpc_id == "vpc-1"

    def test_unmarshall_missing_file(self, tmp_path):
        """Test a missing file is reported before parsing."""
        with pytest.raises(FileNotFoundError, match="File not found"):
            unmarshall_file(tmp_path / "missing.xml", DescribeVpcAttributeResult)

    def test_conversion_error_propagates(self):
        """Test conversion errors reach the caller."""
        xml = "<R><enableDnsSupport><value>maybe</value></enableDnsSupport></R>"

        with pytest.raises(ValueConversionError) as exc_info:
            unmarshall(xml, DescribeVpcAttributeResult)

        assert exc_info.value.path == "/R/enableDnsSupport/value"


class TestUnmarshallResponse:
    """Response metadata and metrics."""

    def test_ec2_request_id(self):
        """Test the EC2 requestId child is captured."""
        response = unmarshall_response(VPC_ATTRIBUTE_RESPONSE, DescribeVpcAttributeResult)

        assert response.request_id == "req-ec2"
        assert response.result.vpc_id == "vpc-1"

    def test_response_metadata_request_id(self):
        """Test the ResponseMetadata/RequestId form."""
        response = unmarshall_response(QUERY_STYLE_RESPONSE, ModifyVpcAttributeResult)

        assert response.request_id == "req-query"
        assert response.result.return_ is True

    def test_response_metadata_document(self):
        """Test a bare ResponseMetadata document."""
        response = unmarshall_response(
            "<ResponseMetadata><RequestId>req-bare</RequestId></ResponseMetadata>",
            "common.ResponseMetadata",
        )

        assert response.result == ResponseMetadata(request_id="req-bare")
        assert response.request_id == "req-bare"

    def test_header_fallback(self):
        """Test the request ID header is used when the body has none."""
        response = unmarshall_response(
            "<R><vpcId>v</vpcId></R>",
            DescribeVpcAttributeResult,
            headers={"X-Amzn-RequestId": "req-header"},
        )

        assert response.request_id == "req-header"

    def test_body_wins_over_header(self):
        """Test the body's request ID takes precedence."""
        response = unmarshall_response(
            VPC_ATTRIBUTE_RESPONSE,
            DescribeVpcAttributeResult,
            headers={"x-amzn-requestid": "req-header"},
        )

        assert response.request_id == "req-ec2"

    def test_no_request_id(self):
        """Test responses without any request ID."""
        response = unmarshall_response("<R/>", DescribeVpcAttributeResult)

        assert response.request_id is None

    def test_metrics_collected(self):
        """Test metrics describe the traversal."""
        response = unmarshall_response(VPC_ATTRIBUTE_RESPONSE, DescribeVpcAttributeResult)

        assert response.metrics.elements_matched == 2
        assert response.metrics.elements_skipped == 1
        assert response.metrics.max_depth == 3
        assert response.metrics.events_processed > 0
        assert response.metrics.processing_time_ms >= 0.0

    def test_metrics_disabled(self):
        """Test metrics are zeroed when disabled."""
        config = UnmarshallerConfig().override(global___enable_metrics=False)

        response = unmarshall_response(
            VPC_ATTRIBUTE_RESPONSE, DescribeVpcAttributeResult, config=config
        )

        assert response.metrics.events_processed == 0
        assert response.result.vpc_id == "vpc-1"

    def test_correlation_id(self):
        """Test the correlation ID is carried on the response."""
        response = unmarshall_response(
            "<R/>", DescribeVpcAttributeResult, correlation_id="corr-1"
        )
        assert response.correlation_id == "corr-1"

        config = UnmarshallerConfig().override(global___enable_correlation_tracking=False)
        response = unmarshall_response(
            "<R/>", DescribeVpcAttributeResult, config=config, correlation_id="corr-1"
        )
        assert response.correlation_id is None

    def test_operation_logged(self, caplog):
        """Test start and completion are logged at INFO."""
        caplog.set_level(logging.INFO, logger="streaming_xml_unmarshaller")

        unmarshall_response(
            VPC_ATTRIBUTE_RESPONSE, DescribeVpcAttributeResult, correlation_id="corr-log"
        )

        messages = [r.message for r in caplog.records]
        assert "Starting unmarshall operation" in messages
        assert "Unmarshall operation completed" in messages
        completed = [r for r in caplog.records if r.message == "Unmarshall operation completed"]
        assert completed[0].request_id == "req-ec2"
        assert completed[0].correlation_id == "corr-log"

    def test_malformed_document_logged_and_raised(self, caplog):
        """Test parser failures are logged and re-raised."""
        caplog.set_level(logging.INFO, logger="streaming_xml_unmarshaller")

        with pytest.raises(MalformedDocumentError):
            unmarshall_response("<R><vpcId>v</R>", DescribeVpcAttributeResult)

        failed = [r for r in caplog.records if r.message == "Unmarshall operation failed"]
        assert len(failed) == 1
        assert failed[0].levelno == logging.ERROR
        assert failed[0].exc_info is not None


class TestResponseUnmarshaller:
    """Reusable front end."""

    def test_unmarshall_and_statistics(self):
        """Test calls and failures are counted."""
        unmarshaller = ResponseUnmarshaller(correlation_id="corr-5")

        assert unmarshaller.unmarshall(
            VPC_ATTRIBUTE_RESPONSE, DescribeVpcAttributeResult
        ).vpc_id == "vpc-1"
        with pytest.raises(MalformedDocumentError):
            unmarshaller.unmarshall("<R>", DescribeVpcAttributeResult)

        stats = unmarshaller.statistics
        assert stats["total_calls"] == 2
        assert stats["failed_calls"] == 1
        assert stats["success_rate"] == 0.5
        assert stats["total_processing_time_ms"] >= 0.0
        assert stats["correlation_id"] == "corr-5"

    def test_empty_statistics(self):
        """Test statistics before any call."""
        stats = ResponseUnmarshaller().statistics

        assert stats["total_calls"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["average_processing_time_ms"] == 0.0

    def test_reset_statistics(self):
        """Test counters can be reset."""
        unmarshaller = ResponseUnmarshaller()
        unmarshaller.unmarshall("<R/>", DescribeVpcAttributeResult)

        unmarshaller.reset_statistics()

        assert unmarshaller.statistics["total_calls"] == 0

    def test_reconfigure(self):
        """Test reconfiguration changes conversion behaviour."""
        xml = "<R><enableDnsSupport><value>1</value></enableDnsSupport></R>"
        unmarshaller = ResponseUnmarshaller()

        with pytest.raises(ValueConversionError):
            unmarshaller.unmarshall(xml, DescribeVpcAttributeResult)

        unmarshaller.reconfigure(conversion__strict_booleans=False)

        assert unmarshaller.unmarshall(xml, DescribeVpcAttributeResult).enable_dns_support is True

    def test_correlation_id_override(self):
        """Test a per-call correlation ID."""
        unmarshaller = ResponseUnmarshaller(correlation_id="default")

        response = unmarshaller.unmarshall_response(
            "<R/>", DescribeVpcAttributeResult, correlation_id_override="call-1"
        )

        assert response.correlation_id == "call-1"
