"""Entry points for unmarshalling XML responses.

Progressive disclosure, from simple to configurable:

* :func:`unmarshall`, :func:`unmarshall_string`, :func:`unmarshall_file`
  return the result object for a registered type or an explicit unmarshaller.
* :func:`unmarshall_response` also returns response metadata and metrics.
* :class:`ResponseUnmarshaller` keeps a configuration and registry for reuse
  across many responses and tracks usage statistics.

Failures are logged and re-raised; nothing here swallows parser errors.
"""

import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from streaming_xml_unmarshaller.context import InputType, UnmarshallerContext
from streaming_xml_unmarshaller.models.common import (
    REQUEST_ID_EXPRESSIONS,
    ResponseMetadata,
)
from streaming_xml_unmarshaller.shared.config import UnmarshallerConfig
from streaming_xml_unmarshaller.shared.logging import get_logger
from streaming_xml_unmarshaller.shared.result import (
    UnmarshalledResponse,
    UnmarshallingMetrics,
)
from streaming_xml_unmarshaller.transform.base import Unmarshaller
from streaming_xml_unmarshaller.transform.registry import (
    UnmarshallerRegistry,
    default_registry,
)

# A registered result type, its registered name, or an unmarshaller instance
Target = Union[type, str, Unmarshaller[Any]]

# Children of the document element sit at depth 2
RESPONSE_CHILD_DEPTH = 2
REQUEST_ID_KEY = "request_id"
MS_PER_SECOND = 1000


def resolve_unmarshaller(
    target: Target, registry: Optional[UnmarshallerRegistry] = None
) -> Unmarshaller[Any]:
    """Turn a type, registered name or unmarshaller into an unmarshaller.

    Raises:
        UnknownResultTypeError: If the type or name is not registered
    """
    registry = registry or default_registry()
    if isinstance(target, str):
        return registry.get(registry.lookup(target))
    if isinstance(target, type):
        return registry.get(target)
    if hasattr(target, "unmarshall"):
        return target
    raise TypeError(f"Cannot unmarshall into {target!r}")


def _target_name(target: Target) -> str:
    if isinstance(target, str):
        return target
    return getattr(target, "__name__", None) or getattr(target, "name", repr(target))


def unmarshall(
    source: InputType,
    target: Target,
    config: Optional[UnmarshallerConfig] = None,
    correlation_id: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    registry: Optional[UnmarshallerRegistry] = None,
) -> Any:
    """Unmarshall an XML document into a result object.

    Args:
        source: XML content as string, bytes, file-like object, or Path
        target: Result type, registered type name, or unmarshaller
        config: Optional configuration, defaults apply otherwise
        correlation_id: Optional correlation ID for log records
        headers: Transport headers made available to unmarshallers
        registry: Registry used to resolve ``target``

    Returns:
        The populated result object

    Examples:
        >>> from streaming_xml_unmarshaller.models.ec2 import DescribeVpcAttributeResult
        >>> result = unmarshall(
        ...     "<Result><vpcId>vpc-1</vpcId></Result>", DescribeVpcAttributeResult
        ... )
        >>> result.vpc_id
        'vpc-1'
    """
    return unmarshall_response(
        source, target, config, correlation_id, headers, registry
    ).result


def unmarshall_string(
    xml_string: str,
    target: Target,
    config: Optional[UnmarshallerConfig] = None,
    correlation_id: Optional[str] = None,
    registry: Optional[UnmarshallerRegistry] = None,
) -> Any:
    """Unmarshall XML held in a string."""
    if not isinstance(xml_string, str):
        raise TypeError(f"Expected str, got {type(xml_string).__name__}")
    return unmarshall(xml_string, target, config, correlation_id, registry=registry)


def unmarshall_file(
    file_path: Union[str, Path],
    target: Target,
    config: Optional[UnmarshallerConfig] = None,
    correlation_id: Optional[str] = None,
    registry: Optional[UnmarshallerRegistry] = None,
) -> Any:
    """Unmarshall a saved XML response from disk.

    Raises:
        FileNotFoundError: If ``file_path`` does not exist
    """
    path_obj = Path(file_path) if isinstance(file_path, str) else file_path
    if not path_obj.is_file():
        raise FileNotFoundError(f"File not found: {path_obj}")
    return unmarshall(path_obj, target, config, correlation_id, registry=registry)


def unmarshall_response(
    source: InputType,
    target: Target,
    config: Optional[UnmarshallerConfig] = None,
    correlation_id: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    registry: Optional[UnmarshallerRegistry] = None,
) -> UnmarshalledResponse[Any]:
    """Unmarshall a response and collect its request ID and metrics.

    The request ID is taken from ``ResponseMetadata/RequestId``, an EC2
    style ``requestId`` child of the document element, or a top-level
    ``RequestId`` as found in error bodies.
    """
    config = config or UnmarshallerConfig()
    if not config.global_.enable_correlation_tracking:
        correlation_id = None
    logger = get_logger(__name__, correlation_id, "unmarshall")
    unmarshaller = resolve_unmarshaller(target, registry)

    logger.info(
        "Starting unmarshall operation",
        extra={
            "input_type": type(source).__name__,
            "target": _target_name(target),
        },
    )

    start_time = time.perf_counter()
    try:
        with UnmarshallerContext(source, config, correlation_id, headers) as context:
            for expression in REQUEST_ID_EXPRESSIONS:
                context.register_metadata_expression(
                    expression, RESPONSE_CHILD_DEPTH, REQUEST_ID_KEY
                )
            result = unmarshaller.unmarshall(context)
    except Exception:
        logger.exception(
            "Unmarshall operation failed",
            extra={
                "target": _target_name(target),
                "processing_time_ms": (time.perf_counter() - start_time) * MS_PER_SECOND,
            },
        )
        raise

    metrics = context.metrics
    metrics.processing_time_ms = (time.perf_counter() - start_time) * MS_PER_SECOND
    if not config.global_.enable_metrics:
        metrics = UnmarshallingMetrics()

    request_id = context.metadata.get(REQUEST_ID_KEY) or context.get_header(
        "x-amzn-requestid"
    )
    logger.info(
        "Unmarshall operation completed",
        extra={"request_id": request_id, **metrics.to_dict()},
    )
    return UnmarshalledResponse(
        result=result,
        response_metadata=ResponseMetadata(request_id=request_id),
        metrics=metrics,
        correlation_id=correlation_id,
    )


class ResponseUnmarshaller:
    """Reusable unmarshaller front end with fixed configuration and registry.

    Examples:
        >>> unmarshaller = ResponseUnmarshaller(UnmarshallerConfig.lenient())
        >>> response = unmarshaller.unmarshall_response(
        ...     "<R><requestId>req-1</requestId><vpcId>vpc-1</vpcId></R>",
        ...     "ec2.DescribeVpcAttributeResult",
        ... )
        >>> response.request_id
        'req-1'
    """

    def __init__(
        self,
        config: Optional[UnmarshallerConfig] = None,
        registry: Optional[UnmarshallerRegistry] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or UnmarshallerConfig()
        self.registry = registry or default_registry()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "response_unmarshaller")

        self._call_count = 0
        self._failure_count = 0
        self._total_processing_time = 0.0

    def unmarshall(self, source: InputType, target: Target,
                   headers: Optional[Mapping[str, str]] = None) -> Any:
        """Unmarshall ``source`` into ``target`` and return the result object."""
        return self.unmarshall_response(source, target, headers).result

    def unmarshall_response(
        self,
        source: InputType,
        target: Target,
        headers: Optional[Mapping[str, str]] = None,
        correlation_id_override: Optional[str] = None,
    ) -> UnmarshalledResponse[Any]:
        """Unmarshall ``source`` and return result, metadata and metrics."""
        self._call_count += 1
        start_time = time.perf_counter()
        try:
            return unmarshall_response(
                source,
                target,
                self.config,
                correlation_id_override or self.correlation_id,
                headers,
                self.registry,
            )
        except Exception:
            self._failure_count += 1
            raise
        finally:
            self._total_processing_time += (
                (time.perf_counter() - start_time) * MS_PER_SECOND
            )

    def reconfigure(self, **overrides: Any) -> None:
        """Apply ``UnmarshallerConfig.override`` keyword overrides."""
        self.config = self.config.override(**overrides)
        self.logger.info("Unmarshaller reconfigured", extra={"overrides": sorted(overrides)})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Usage statistics since construction or the last reset."""
        return {
            "total_calls": self._call_count,
            "failed_calls": self._failure_count,
            "success_rate": (
                (self._call_count - self._failure_count) / self._call_count
                if self._call_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._call_count
                if self._call_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        self._call_count = 0
        self._failure_count = 0
        self._total_processing_time = 0.0
