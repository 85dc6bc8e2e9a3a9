"""Full-Unicode XML reader.

A streaming character reader that rewrites supplementary Unicode characters
(code points above U+FFFF) as decimal numeric character references when
they occur inside XML attribute values, and passes everything else through
unchanged. It works around XML parsers that corrupt such characters in
attribute values while handling them correctly everywhere else.

Progressive API Disclosure:
- Level 1: Simple functions - transform_string(), transform_bytes(),
  transform_file(), parse_tree()
- Level 2: Pull reader - FullUnicodeXmlReader
- Level 3: SAX integration - FullUnicodeInputSource
- Level 4: Engine and grammar - TransformEngine, Grammar
"""

__version__ = "0.1.0"
__author__ = "Full Unicode XML Team"

# Levels 1 to 3: Simple functions, reader and SAX input source
from .api import (
    EOF,
    FullUnicodeInputSource,
    FullUnicodeXmlReader,
    ReaderState,
    open_reader,
    parse_lxml,
    parse_sax,
    parse_tree,
    transform_bytes,
    transform_file,
    transform_string,
)

# Configuration and errors
from .shared.config import ConfigError, ConfigurationFrozenError, ReaderConfig

# Level 4: Engine and grammar
from .tokenization import XML_GRAMMAR, Grammar, ParseMode, TransformEngine

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "transform_string",
    "transform_bytes",
    "transform_file",
    "parse_tree",
    "parse_sax",
    "parse_lxml",
    "open_reader",

    # Level 2 and 3: Reader and input source
    "EOF",
    "FullUnicodeXmlReader",
    "FullUnicodeInputSource",
    "ReaderState",

    # Configuration and errors
    "ReaderConfig",
    "ConfigError",
    "ConfigurationFrozenError",

    # Level 4: Engine and grammar
    "TransformEngine",
    "Grammar",
    "ParseMode",
    "XML_GRAMMAR",
]
