"""Shared utilities for the full-unicode XML reader.

This module provides the configuration object, the error hierarchy, result
statistics, and the logging helpers used across all layers.
"""

from .config import (
    ConfigError,
    ConfigurationFrozenError,
    ReaderConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import TransformStatistics

__all__ = [
    "ConfigError",
    "ConfigurationFrozenError",
    "ReaderConfig",
    "CorrelationLogger",
    "get_logger",
    "TransformStatistics",
]
