"""Public API layer for the full-unicode XML reader.

- FullUnicodeXmlReader: pull-based transforming character stream
- FullUnicodeInputSource: SAX input source wrapping the reader
- transform_* / parse_* functions: one-call convenience entry points
"""

from .input_source import FullUnicodeInputSource
from .parser import (
    open_reader,
    parse_lxml,
    parse_reader,
    parse_sax,
    parse_tree,
    transform_bytes,
    transform_file,
    transform_string,
)
from .reader import EOF, FullUnicodeXmlReader, ReaderState

__all__ = [
    "EOF",
    "FullUnicodeInputSource",
    "FullUnicodeXmlReader",
    "ReaderState",
    "open_reader",
    "parse_lxml",
    "parse_reader",
    "parse_sax",
    "parse_tree",
    "transform_bytes",
    "transform_file",
    "transform_string",
]
