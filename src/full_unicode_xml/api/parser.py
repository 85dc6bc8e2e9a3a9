"""Convenience API on top of the transforming reader.

Module-level functions cover the common cases: transforming strings, bytes
and files, and parsing through ``xml.etree.ElementTree``, ``xml.sax`` or,
when installed, ``lxml``.
"""

import io
import os
import xml.etree.ElementTree as ET
import xml.sax
from pathlib import Path
from typing import Any, BinaryIO, Optional, TextIO, Union
from xml.sax.handler import ContentHandler

from full_unicode_xml.shared.config import ReaderConfig
from full_unicode_xml.shared.logging import get_logger

from .input_source import FullUnicodeInputSource, is_text_stream
from .reader import FullUnicodeXmlReader

# Type definitions for input data
InputType = Union[str, bytes, bytearray, Path, BinaryIO, TextIO]


def open_reader(
    source: InputType,
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> FullUnicodeXmlReader:
    """Create a transforming reader for any supported input.

    Args:
        source: System id (``str`` URI or path), ``Path``, raw ``bytes``,
            or a text or binary file-like object
        encoding: Explicit encoding for byte input
        config: Reader configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Unstarted FullUnicodeXmlReader

    Raises:
        TypeError: If the input type is not supported
    """
    reader = FullUnicodeXmlReader(
        encoding=encoding, config=config, correlation_id=correlation_id
    )
    if isinstance(source, os.PathLike):
        reader.set_system_id(os.fspath(source))
    elif isinstance(source, str):
        reader.set_system_id(source)
    elif isinstance(source, (bytes, bytearray)):
        reader.set_byte_stream(io.BytesIO(source))
    elif hasattr(source, "read"):
        if is_text_stream(source):
            reader.set_character_stream(source)
        else:
            reader.set_byte_stream(source)
    else:
        raise TypeError(f"Unsupported input type: {type(source).__name__}")
    return reader


def transform_string(text: str, config: Optional[ReaderConfig] = None) -> str:
    """Escape supplementary characters in the attribute values of an XML string.

    Examples:
        >>> transform_string("<a b='\\U0001F602'>\\U0001F602</a>")
        "<a b='&#128514;'>\\U0001F602</a>"
    """
    with open_reader(io.StringIO(text), config=config) as reader:
        return reader.read()


def transform_bytes(
    data: bytes,
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
) -> str:
    """Decode XML bytes, sniffing the encoding unless given, and transform them."""
    with open_reader(data, encoding=encoding, config=config) as reader:
        return reader.read()


def transform_file(
    path: Union[str, Path],
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
) -> str:
    """Read an XML file, sniffing the encoding unless given, and transform it."""
    with open_reader(Path(path), encoding=encoding, config=config) as reader:
        return reader.read()


def parse_reader(reader: FullUnicodeXmlReader) -> ET.Element:
    """Feed a transforming reader into an ElementTree parser.

    Returns:
        Root element of the document
    """
    # Feeding text makes expat ignore the declared encoding.
    parser = ET.XMLParser()
    chunk = reader.read(reader.config.chunk_size)
    while chunk:
        parser.feed(chunk)
        chunk = reader.read(reader.config.chunk_size)
    return parser.close()


def parse_tree(
    source: InputType,
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> ET.ElementTree:
    """Parse an XML document into an ElementTree through the transforming reader.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is not well-formed
    """
    logger = get_logger(__name__, correlation_id, "parse_tree")
    with open_reader(source, encoding, config, correlation_id) as reader:
        tree = ET.ElementTree(parse_reader(reader))
        logger.debug(
            "Parsed element tree",
            extra={"root_tag": tree.getroot().tag, **reader.statistics.as_dict()},
        )
        return tree


def parse_sax(
    source: InputType,
    handler: ContentHandler,
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """Run a SAX content handler over the transformed document.

    Raises:
        xml.sax.SAXParseException: If the document is not well-formed
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    input_source = FullUnicodeInputSource(
        source, encoding=encoding, config=config, correlation_id=correlation_id
    )
    parser = xml.sax.make_parser()
    parser.setContentHandler(handler)
    parser.parse(input_source)


def parse_lxml(
    source: InputType,
    encoding: Optional[str] = None,
    config: Optional[ReaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Any:
    """Parse through ``lxml.etree``; requires the ``lxml`` extra.

    Returns:
        ``lxml.etree._ElementTree`` of the document

    Raises:
        ImportError: If lxml is not installed
        lxml.etree.XMLSyntaxError: If the document is not well-formed
    """
    from lxml import etree

    with open_reader(source, encoding, config, correlation_id) as reader:
        # The reader yields decoded text; re-encode it and override the
        # declared encoding accordingly.
        parser = etree.XMLParser(encoding="utf-8")
        chunk = reader.read(reader.config.chunk_size)
        while chunk:
            parser.feed(chunk.encode("utf-8"))
            chunk = reader.read(reader.config.chunk_size)
        return parser.close().getroottree()
