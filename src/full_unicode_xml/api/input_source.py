"""SAX input source backed by the transforming reader.

``FullUnicodeInputSource`` can be handed to any ``xml.sax`` parser in place
of a plain ``InputSource``: the parser reads the transformed character
stream, so supplementary characters in attribute values arrive as numeric
character references.
"""

import io
import os
from typing import Any, BinaryIO, Optional, TextIO, Union
from xml.sax.xmlreader import InputSource

from full_unicode_xml.shared.config import ReaderConfig

from .reader import FullUnicodeXmlReader

SourceType = Union[str, "os.PathLike[str]", BinaryIO, TextIO]


def is_text_stream(stream: Any) -> bool:
    """Return whether a file-like object yields ``str`` rather than ``bytes``."""
    if isinstance(stream, io.TextIOBase):
        return True
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return False
    return isinstance(stream.read(0), str)


class FullUnicodeInputSource(InputSource):
    """Drop-in replacement for ``xml.sax.xmlreader.InputSource``.

    The character stream reported to the parser is always the transforming
    reader; streams, system id and encoding configure that reader and are
    frozen once parsing has started.
    """

    def __init__(
        self,
        source: Optional[SourceType] = None,
        encoding: Optional[str] = None,
        config: Optional[ReaderConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Create an input source.

        Args:
            source: System id (URI or path), text stream or byte stream
            encoding: Explicit encoding for byte input
            config: Reader configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self._reader = FullUnicodeXmlReader(
            config=config, correlation_id=correlation_id
        )
        super().__init__()
        if isinstance(source, os.PathLike):
            source = os.fspath(source)
        if isinstance(source, str):
            self.setSystemId(source)
        elif source is not None:
            if is_text_stream(source):
                self.setCharacterStream(source)
            else:
                self.setByteStream(source)
        if encoding is not None:
            self.setEncoding(encoding)

    @property
    def reader(self) -> FullUnicodeXmlReader:
        return self._reader

    def getCharacterStream(self) -> FullUnicodeXmlReader:
        return self._reader

    def setByteStream(self, bytefile: Optional[BinaryIO]) -> None:
        self._reader.set_byte_stream(bytefile)

    def setCharacterStream(self, charfile: Optional[TextIO]) -> None:
        self._reader.set_character_stream(charfile)

    def setSystemId(self, system_id: Optional[str]) -> None:
        # Reader first, so a frozen reader leaves the base URI untouched.
        self._reader.set_system_id(system_id)
        super().setSystemId(system_id)

    def setEncoding(self, encoding: Optional[str]) -> None:
        self._reader.set_encoding(encoding)
