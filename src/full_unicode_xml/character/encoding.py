"""XML-aware encoding detection and incremental decoding of byte streams.

Detection follows the order suggested by XML 1.0 Appendix F: a byte order
mark wins; otherwise the first four bytes identify the byte family
(UTF-32, UTF-16, ASCII-compatible or EBCDIC), which is then used to read
the ``encoding`` pseudo-attribute of the XML declaration. Without either,
the configured fallback encoding is used.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, ClassVar, Dict, List, Optional, Tuple

from full_unicode_xml.shared.config import MIN_HEADER_SAMPLE_SIZE, ReaderConfig

# Raw byte families
FAMILY_UTF32 = "utf-32"
FAMILY_UTF16 = "utf-16"
FAMILY_ASCII = "ascii"
FAMILY_EBCDIC = "ebcdic"

# Bytes requested from the underlying stream per decode step
DECODE_CHUNK_SIZE = 8192


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    EXPLICIT = "explicit"
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    RAW_BYTES = "raw_bytes"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Python codec name used to decode the stream
        method: Detection method that decided the encoding
        bom_length: Number of leading bytes to skip before decoding
        declared: Encoding named by the XML declaration, if any
        issues: Inconsistencies noticed during detection
    """
    encoding: str
    method: DetectionMethod
    bom_length: int = 0
    declared: Optional[str] = None
    issues: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate BOM length."""
        if self.bom_length < 0:
            raise ValueError(f"bom_length must be >= 0, got {self.bom_length}")


def canonical_codec_name(encoding: str) -> Optional[str]:
    """Return Python's canonical codec name, or None if the codec is unknown."""
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        return None


def codec_family(encoding: str) -> str:
    """Classify a codec by the width and layout of its ASCII characters."""
    name = canonical_codec_name(encoding) or encoding.lower()
    if name.startswith("utf-32"):
        return FAMILY_UTF32
    if name.startswith("utf-16"):
        return FAMILY_UTF16
    if _encodes_lt_as(name, b"\x4c"):
        return FAMILY_EBCDIC
    return FAMILY_ASCII


def _encodes_lt_as(encoding: str, expected: bytes) -> bool:
    try:
        return "<".encode(encoding) == expected
    except (LookupError, UnicodeError):
        return False


class BOMDetector:
    """Byte Order Mark (BOM) detection for the Unicode encodings."""

    # Longer patterns first: the UTF-32LE BOM starts with the UTF-16LE one
    BOM_PATTERNS: ClassVar[List[Tuple[bytes, str]]] = [
        (b"\xff\xfe\x00\x00", "utf-32-le"),
        (b"\x00\x00\xfe\xff", "utf-32-be"),
        (b"\xef\xbb\xbf", "utf-8"),
        (b"\xff\xfe", "utf-16-le"),
        (b"\xfe\xff", "utf-16-be"),
    ]

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Leading bytes of the stream

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        for bom_bytes, encoding in self.BOM_PATTERNS:
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )
        return None


class RawByteGuesser:
    """Guess the byte family from the encoding of ``<?`` or ``<?xm``."""

    RAW_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\x00\x00\x00\x3c": "utf-32-be",
        b"\x3c\x00\x00\x00": "utf-32-le",
        b"\x00\x3c\x00\x3f": "utf-16-be",
        b"\x3c\x00\x3f\x00": "utf-16-le",
        b"\x3c\x3f\x78\x6d": "utf-8",
        b"\x4c\x6f\xa7\x94": "cp037",
    }

    def guess(self, data: bytes) -> Optional[EncodingResult]:
        """Guess the encoding family from the first four bytes.

        Returns:
            EncodingResult for the most general member of the family, or None
        """
        encoding = self.RAW_PATTERNS.get(data[:4])
        if encoding is None:
            return None
        return EncodingResult(encoding=encoding, method=DetectionMethod.RAW_BYTES)


class XMLDeclarationParser:
    """Parser for the encoding pseudo-attribute of an XML declaration."""

    XML_DECLARATION_PATTERN = re.compile(
        r"""^<\?xml\s[^>]*?encoding\s*=\s*(["'])([A-Za-z][A-Za-z0-9._\-]*)\1"""
    )

    def parse_declaration(self, text: str) -> Optional[str]:
        """Return the declared encoding name, or None if there is none.

        Args:
            text: Decoded start of the document, without BOM
        """
        match = self.XML_DECLARATION_PATTERN.match(text)
        if not match:
            return None
        return match.group(2)


class XMLEncodingSniffer:
    """Determine the encoding of an XML byte stream from its header."""

    def __init__(self, fallback_encoding: str = "utf-8") -> None:
        """Initialize detection components.

        Args:
            fallback_encoding: Encoding used when nothing else applies
        """
        self.fallback_encoding = fallback_encoding
        self.bom_detector = BOMDetector()
        self.raw_guesser = RawByteGuesser()
        self.xml_parser = XMLDeclarationParser()

    def sniff(self, header: bytes) -> EncodingResult:
        """Detect encoding from the first bytes of an XML document.

        Args:
            header: Leading bytes of the stream, as many as available

        Returns:
            EncodingResult describing how to decode the stream
        """
        bom_result = self.bom_detector.detect(header)
        if bom_result is not None:
            declared = self._declared_encoding(header, bom_result)
            bom_result.declared = declared
            if declared and codec_family(declared) != codec_family(bom_result.encoding):
                bom_result.issues.append(
                    f"Declared encoding {declared} contradicts "
                    f"{bom_result.encoding} byte order mark"
                )
            return bom_result

        raw_result = self.raw_guesser.guess(header)
        base = raw_result or EncodingResult(
            encoding=self.fallback_encoding, method=DetectionMethod.FALLBACK
        )
        declared = self._declared_encoding(header, base)
        if declared is None:
            return base
        return self._reconcile(base, declared)

    def _declared_encoding(self, header: bytes, base: EncodingResult) -> Optional[str]:
        decoder = codecs.getincrementaldecoder(base.encoding)(errors="replace")
        text = decoder.decode(header[base.bom_length:])
        return self.xml_parser.parse_declaration(text)

    def _reconcile(self, base: EncodingResult, declared: str) -> EncodingResult:
        codec_name = canonical_codec_name(declared)
        if codec_name is None:
            base.declared = declared
            base.issues.append(f"Unknown declared encoding: {declared}")
            return base

        base.declared = declared
        base_family = codec_family(base.encoding)
        if codec_family(codec_name) != base_family:
            base.issues.append(
                f"Declared encoding {declared} contradicts "
                f"{base.encoding} byte layout"
            )
            return base
        if base_family in (FAMILY_UTF16, FAMILY_UTF32):
            # The raw bytes already fix width and byte order.
            return base

        return EncodingResult(
            encoding=codec_name,
            method=DetectionMethod.XML_DECLARATION,
            declared=declared,
        )


class DecodedCharacterStream:
    """Incrementally decoded view of a byte stream.

    Bytes consumed while sniffing are replayed before the rest of the stream.
    """

    def __init__(
        self,
        byte_stream: BinaryIO,
        encoding: str,
        prefix: bytes = b"",
        errors: str = "replace",
        detection: Optional[EncodingResult] = None,
    ) -> None:
        """Initialize decoded stream.

        Args:
            byte_stream: Underlying binary stream
            encoding: Python codec name
            prefix: Bytes already read from the stream and not yet decoded
            errors: Codec error handler
            detection: How the encoding was determined

        Raises:
            LookupError: If the codec is unknown
        """
        self._stream = byte_stream
        self._read_bytes = partial_reader(byte_stream)
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
        self._prefix = prefix
        self._pending = ""
        self._eof = False
        self.encoding = encoding
        self.detection = detection or EncodingResult(
            encoding=encoding, method=DetectionMethod.EXPLICIT
        )

    def read(self, size: int = -1) -> str:
        """Read up to ``size`` characters; all remaining if negative."""
        while (size < 0 or len(self._pending) < size) and not self._eof:
            self._decode_next()
        return self._take(size)

    def read1(self, size: int = -1) -> str:
        """Read up to ``size`` characters, returning as soon as any are decoded.

        Returns "" only at end of stream.
        """
        while not self._pending and not self._eof:
            self._decode_next()
        return self._take(size)

    def _decode_next(self) -> None:
        if self._prefix:
            data, self._prefix = self._prefix, b""
        else:
            data = self._read_bytes(DECODE_CHUNK_SIZE)
        if not data:
            self._pending += self._decoder.decode(b"", final=True)
            self._eof = True
        else:
            self._pending += self._decoder.decode(data)

    def _take(self, size: int) -> str:
        if size < 0:
            text, self._pending = self._pending, ""
        else:
            text, self._pending = self._pending[:size], self._pending[size:]
        return text

    def close(self) -> None:
        """Close the underlying byte stream."""
        self._stream.close()


def partial_reader(byte_stream: BinaryIO) -> Callable[[int], bytes]:
    """Return the stream's ``read1`` if it has one, else its ``read``.

    ``read1`` returns what is available after at most one raw read, so a
    live source is never waited on for a whole chunk.
    """
    return getattr(byte_stream, "read1", None) or byte_stream.read


def header_complete(header: bytes) -> bool:
    """Return whether enough bytes were seen to decide the encoding.

    A header in a recognised byte family is complete once it contains the
    ``>`` that ends a possible XML declaration; any other header cannot
    carry a declaration and is complete after the first four bytes.
    """
    if len(header) < MIN_HEADER_SAMPLE_SIZE:
        return False
    detection = BOMDetector().detect(header) or RawByteGuesser().guess(header)
    if detection is None:
        return True
    return ">".encode(detection.encoding) in header[detection.bom_length:]


def read_header(byte_stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, stopping early once the header is complete."""
    read = partial_reader(byte_stream)
    header = b""
    while len(header) < size:
        data = read(size - len(header))
        if not data:
            break
        header += data
        if header_complete(header):
            break
    return header


def open_decoded_stream(
    byte_stream: BinaryIO,
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
) -> DecodedCharacterStream:
    """Wrap a byte stream in a decoder, sniffing the encoding if none is given.

    Args:
        byte_stream: Binary stream positioned at the start of the document
        encoding: Explicit encoding; used exactly as given when set
        config: Reader configuration

    Returns:
        DecodedCharacterStream reading characters from the byte stream

    Raises:
        LookupError: If the explicit encoding is unknown
    """
    config = config or ReaderConfig()
    if encoding is not None:
        codecs.lookup(encoding)
        return DecodedCharacterStream(byte_stream, encoding, errors=config.decode_errors)

    header = read_header(byte_stream, config.header_sample_size)
    detection = XMLEncodingSniffer(config.fallback_encoding).sniff(header)
    return DecodedCharacterStream(
        byte_stream,
        detection.encoding,
        prefix=header[detection.bom_length:],
        errors=config.decode_errors,
        detection=detection,
    )
