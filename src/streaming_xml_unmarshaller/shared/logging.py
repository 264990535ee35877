"""Correlation-aware logging for unmarshalling operations.

Every record emitted through :class:`CorrelationLogger` carries the component
name and the correlation ID of the response being unmarshalled, so the
events of one traversal can be grouped when several responses are processed
by the same service.
"""

import logging
from typing import Any, Dict, Optional

DEFAULT_LOG_FORMAT = (
    "%(asctime)s %(levelname)s [%(component)s] %(message)s"
)


class CorrelationLogger:
    """Logger that automatically includes correlation ID and component information."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for response tracking
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split(".")[-1]

    def child(self, component: str) -> "CorrelationLogger":
        """Create a logger for a sub-component sharing this correlation ID."""
        return CorrelationLogger(self.logger.name, self.correlation_id, component)

    def is_debug_enabled(self) -> bool:
        """Check whether DEBUG records would be emitted."""
        return self.logger.isEnabledFor(logging.DEBUG)

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with correlation info."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with correlation info."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with correlation info."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True
    ) -> None:
        """Log error message with correlation info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)

    def exception(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log exception message with correlation info and traceback."""
        self.logger.exception(message, extra=self._get_extra(extra))


class _ComponentDefaultsFilter(logging.Filter):
    """Fill in correlation fields for records logged outside CorrelationLogger."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name.split(".")[-1]
        if not hasattr(record, "correlation_id"):
            record.correlation_id = None
        return True


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for response tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """Attach a stderr handler to the package logger.

    Used by the command-line tool; library callers are expected to configure
    logging themselves.
    """
    package_logger = logging.getLogger("streaming_xml_unmarshaller")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler.addFilter(_ComponentDefaultsFilter())
        package_logger.addHandler(handler)
