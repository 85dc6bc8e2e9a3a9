"""Structured logging utilities for the full-unicode XML reader.

Every record carries the emitting component and an optional correlation ID,
so that log lines from one reader can be told apart from another's.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Logger that tags records with a reader's component and correlation ID.

    Only the levels the reader emits are exposed: DEBUG for source
    resolution and per-code-point escapes, WARNING for detection issues
    and ignored stop indicators.
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for request tracking
            component: Component name; defaults to the last part of ``name``
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rpartition(".")[2]

    def _tagged(self, extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        tags: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        tags.update(extra or {})
        return tags

    def is_enabled_for(self, level: int) -> bool:
        """Return whether records of the given level would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.debug(message, extra=self._tagged(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.warning(message, extra=self._tagged(extra))


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger for a module or reader instance."""
    return CorrelationLogger(name, correlation_id, component)
