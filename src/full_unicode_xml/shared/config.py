"""Configuration for the full-unicode XML reader.

This module provides the configuration object shared by the decoding
collaborator and the pull adapter, together with the configuration error
hierarchy.
"""

import codecs
from dataclasses import dataclass, fields, replace
from typing import Any

# Refill size for the lookahead buffer, in characters
DEFAULT_CHUNK_SIZE = 4096

# Bytes inspected for a byte order mark and an XML declaration
DEFAULT_HEADER_SAMPLE_SIZE = 8192

# Minimum header needed to recognise every BOM and raw byte family
MIN_HEADER_SAMPLE_SIZE = 4

VALID_DECODE_ERRORS = ("strict", "replace", "ignore", "surrogateescape")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigurationFrozenError(ConfigError):
    """Raised when a reader is reconfigured after its source was resolved."""

    def __init__(self, setter: str) -> None:
        super().__init__(
            f"stream has already been read when calling {setter}()"
        )
        self.setter = setter


@dataclass(frozen=True)
class ReaderConfig:
    """Configuration for source decoding and lookahead buffering.

    Attributes:
        chunk_size: Characters requested from the decoded source per refill
        header_sample_size: Bytes sniffed for a BOM and an XML declaration
        fallback_encoding: Encoding used when nothing can be detected
        decode_errors: Codec error handler for undecodable bytes
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    header_sample_size: int = DEFAULT_HEADER_SAMPLE_SIZE
    fallback_encoding: str = "utf-8"
    decode_errors: str = "replace"

    def __post_init__(self) -> None:
        """Validate reader configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.header_sample_size < MIN_HEADER_SAMPLE_SIZE:
            raise ValueError(
                f"header_sample_size must be >= {MIN_HEADER_SAMPLE_SIZE}"
            )
        if self.decode_errors not in VALID_DECODE_ERRORS:
            raise ValueError(
                f"decode_errors must be one of {list(VALID_DECODE_ERRORS)}"
            )
        try:
            codecs.lookup(self.fallback_encoding)
        except LookupError as e:
            raise ValueError(
                f"Unknown fallback_encoding: {self.fallback_encoding}"
            ) from e

    @classmethod
    def create_preset(cls, preset: str) -> "ReaderConfig":
        """Create configuration preset.

        Args:
            preset: Preset name ('strict', 'lenient')

        Returns:
            Configured ReaderConfig instance
        """
        if preset == "strict":
            return cls(decode_errors="strict")
        if preset == "lenient":
            return cls(decode_errors="replace", fallback_encoding="latin-1")
        raise ValueError(f"Unknown preset: {preset}")

    def override(self, **kwargs: Any) -> "ReaderConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field values to replace

        Returns:
            New validated ReaderConfig instance
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration fields: {unknown}")
        return replace(self, **kwargs)
