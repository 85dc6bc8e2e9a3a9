"""Pull-based reader exposing the transform engine as a character stream.

The reader is configured with exactly one effective input: a character
stream, a byte stream, or a system id, in that order of precedence. The
input is resolved lazily on the first read and the configuration is frozen
from then on.
"""

from enum import Enum, auto
from typing import (
    Any,
    BinaryIO,
    Callable,
    Iterator,
    MutableSequence,
    Optional,
    TextIO,
)

from full_unicode_xml.character.encoding import EncodingResult, open_decoded_stream
from full_unicode_xml.character.resolution import open_system_id
from full_unicode_xml.shared.config import (
    ConfigError,
    ConfigurationFrozenError,
    ReaderConfig,
)
from full_unicode_xml.shared.logging import get_logger
from full_unicode_xml.shared.result import TransformStatistics
from full_unicode_xml.tokenization.engine import TransformEngine
from full_unicode_xml.tokenization.grammar import XML_GRAMMAR, Grammar

# Returned by read_into() once the stream is exhausted
EOF = -1

# Collaborator signatures
Decoder = Callable[[BinaryIO, Optional[str], ReaderConfig], Any]
Opener = Callable[[str], BinaryIO]


class ReaderState(Enum):
    """Lifecycle of a reader."""

    CONFIGURING = auto()  # Setters allowed, nothing read yet
    STREAMING = auto()    # Source resolved, configuration frozen
    CLOSED = auto()       # Source released


class FullUnicodeXmlReader:
    """Character stream that escapes supplementary characters in attribute values.

    Supplementary code points inside quoted attribute values are replaced by
    decimal numeric character references; all other text is passed through.
    A byte stream is decoded with the explicit encoding if one is set,
    otherwise the encoding is sniffed from a BOM and the XML declaration.

    Example:
        >>> reader = FullUnicodeXmlReader(character_stream=io.StringIO("<a b='\U0001F602'/>"))
        >>> reader.read()
        "<a b='&#128514;'/>"
    """

    def __init__(
        self,
        character_stream: Optional[TextIO] = None,
        byte_stream: Optional[BinaryIO] = None,
        system_id: Optional[str] = None,
        encoding: Optional[str] = None,
        config: Optional[ReaderConfig] = None,
        grammar: Grammar = XML_GRAMMAR,
        decoder: Decoder = open_decoded_stream,
        opener: Opener = open_system_id,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the reader.

        Args:
            character_stream: Already decoded input; takes precedence
            byte_stream: Raw input, decoded with ``encoding`` or by sniffing
            system_id: Absolute URI or file path, used if no stream is given
            encoding: Explicit encoding for byte input
            config: Decoding and buffering configuration
            grammar: Parse modes driving the transform engine
            decoder: Collaborator turning a byte stream into characters
            opener: Collaborator turning a system id into a byte stream
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ReaderConfig()
        self._character_stream = character_stream
        self._byte_stream = byte_stream
        self._system_id = system_id
        self._encoding = encoding
        self._decoder = decoder
        self._opener = opener
        self._source: Any = None
        self._pull: Any = None
        self._detection: Optional[EncodingResult] = None
        self._state = ReaderState.CONFIGURING
        self._eof_logged = False
        self.logger = get_logger(__name__, correlation_id, "full_unicode_reader")
        self._engine = TransformEngine(
            self._read_source,
            grammar=grammar,
            chunk_size=self.config.chunk_size,
            correlation_id=correlation_id,
        )

    # Configuration

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def encoding(self) -> Optional[str]:
        return self._encoding

    @property
    def character_stream(self) -> Optional[TextIO]:
        return self._character_stream

    @property
    def byte_stream(self) -> Optional[BinaryIO]:
        return self._byte_stream

    @property
    def system_id(self) -> Optional[str]:
        return self._system_id

    def set_encoding(self, encoding: Optional[str]) -> None:
        """Set the encoding used to decode a byte stream.

        If no encoding is given, it is inferred from the XML header.
        """
        self._assert_configuring("set_encoding")
        self._encoding = encoding

    def set_byte_stream(self, byte_stream: Optional[BinaryIO]) -> None:
        """Set the raw, undecoded input stream."""
        self._assert_configuring("set_byte_stream")
        self._byte_stream = byte_stream

    def set_character_stream(self, character_stream: Optional[TextIO]) -> None:
        """Set the decoded input stream, which takes precedence over bytes."""
        self._assert_configuring("set_character_stream")
        self._character_stream = character_stream

    def set_system_id(self, system_id: Optional[str]) -> None:
        """Set the system id, used if neither stream is given."""
        self._assert_configuring("set_system_id")
        self._system_id = system_id

    def _assert_configuring(self, setter: str) -> None:
        # Late changes would not match the characters already read.
        if self._state is not ReaderState.CONFIGURING:
            raise ConfigurationFrozenError(setter)

    # Source resolution

    @property
    def detection(self) -> Optional[EncodingResult]:
        """How the byte input was decoded, once resolved."""
        return self._detection

    @property
    def statistics(self) -> TransformStatistics:
        return self._engine.statistics

    def _resolve_source(self) -> Any:
        if self._character_stream is not None:
            source_kind = "character_stream"
            source = self._character_stream
        else:
            if self._byte_stream is not None:
                source_kind = "byte_stream"
                byte_stream = self._byte_stream
            elif self._system_id is not None:
                source_kind = "system_id"
                byte_stream = self._opener(self._system_id)
            else:
                raise ConfigError(
                    "No character stream, byte stream or system id configured"
                )
            try:
                source = self._decoder(byte_stream, self._encoding, self.config)
            except BaseException:
                # Only a stream opened from the system id is owned here.
                if source_kind == "system_id":
                    byte_stream.close()
                raise
            self._detection = getattr(source, "detection", None)

        self._state = ReaderState.STREAMING
        self.logger.debug(
            "Resolved input source",
            extra={
                "source_kind": source_kind,
                "system_id": self._system_id,
                "encoding": self._detection.encoding if self._detection else None,
                "detection_method": (
                    self._detection.method.value if self._detection else None
                ),
            },
        )
        if self._detection and self._detection.issues:
            self.logger.warning(
                "Encoding detection reported issues",
                extra={"issues": self._detection.issues},
            )
        return source

    def _read_source(self, size: int) -> str:
        if self._state is ReaderState.CLOSED:
            raise ValueError("I/O operation on closed reader")
        if self._source is None:
            self._source = self._resolve_source()
            # Partial reads keep a live source from being waited on for a
            # whole refill chunk.
            self._pull = getattr(self._source, "read1", None) or self._source.read
        return self._pull(size)

    # Pull contract

    def read_into(self, buffer: MutableSequence[str], offset: int, length: int) -> int:
        """Read up to ``length`` characters into ``buffer`` starting at ``offset``.

        Returns:
            Number of characters stored, or EOF if none were available
        """
        if length < 0 or offset < 0 or offset + length > len(buffer):
            raise ValueError(
                f"Invalid window offset={offset} length={length} "
                f"for buffer of {len(buffer)}"
            )
        if length == 0:
            return 0
        text = self._read_transformed(length)
        if not text:
            return EOF
        buffer[offset:offset + len(text)] = list(text)
        return len(text)

    def read(self, size: Optional[int] = -1) -> str:
        """Read up to ``size`` characters; everything remaining if negative.

        Returns:
            The characters read, or "" at end of stream
        """
        if size is None or size < 0:
            parts = []
            while True:
                chunk = self._read_transformed(self.config.chunk_size)
                if not chunk:
                    break
                parts.append(chunk)
            return "".join(parts)
        if size == 0:
            return ""
        return self._read_transformed(size)

    def readline(self, size: Optional[int] = -1) -> str:
        """Read one line including its terminating newline."""
        self._check_open()
        chars = []
        while size is None or size < 0 or len(chars) < size:
            char = self._engine.read_char()
            if char is None:
                self._log_end_of_stream()
                break
            chars.append(char)
            if char == "\n":
                break
        return "".join(chars)

    def _read_transformed(self, size: int) -> str:
        self._check_open()
        text = self._engine.read(size)
        if len(text) < size:
            self._log_end_of_stream()
        return text

    def _check_open(self) -> None:
        if self._state is ReaderState.CLOSED:
            raise ValueError("I/O operation on closed reader")

    def _log_end_of_stream(self) -> None:
        if not self._eof_logged:
            self._eof_logged = True
            self.logger.debug(
                "Reached end of stream",
                extra=self._engine.statistics.as_dict(),
            )

    # Resource handling

    @property
    def closed(self) -> bool:
        return self._state is ReaderState.CLOSED

    def close(self) -> None:
        """Release the underlying source."""
        if self._state is ReaderState.CLOSED:
            return
        if self._source is not None:
            self._source.close()
        elif self._character_stream is not None:
            self._character_stream.close()
        elif self._byte_stream is not None:
            self._byte_stream.close()
        self._state = ReaderState.CLOSED
        self.logger.debug("Closed reader")

    def __enter__(self) -> "FullUnicodeXmlReader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self.readline()
        if not line:
            raise StopIteration
        return line
