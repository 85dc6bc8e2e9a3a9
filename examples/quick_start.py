#!/usr/bin/env python3
"""
Quick Start Guide for full-unicode-xml.

Shows the reader on its own, the one-call helpers, and hand-off to the
standard library parsers.
"""

import io
import sys
import xml.sax
from pathlib import Path
from xml.sax.handler import ContentHandler

# Add src to path for running examples directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from full_unicode_xml import (
    FullUnicodeInputSource,
    FullUnicodeXmlReader,
    ReaderConfig,
    parse_tree,
    transform_bytes,
)

DOCUMENT = (
    "<?xml version='1.0' encoding='UTF-16'?>"
    "<message author='\U0001F600' mood=\"\U0001F680 ready\">"
    "Hello \U0001F30D"
    "</message>"
)


def example_reader():
    """Example 1: Pull transformed characters from a reader."""
    print("=== Example 1: Reader ===")

    reader = FullUnicodeXmlReader(byte_stream=io.BytesIO(DOCUMENT.encode("utf-16")))
    with reader:
        print(reader.read())
        print(f"Detected encoding: {reader.detection.encoding} "
              f"({reader.detection.method.value})")
        print(f"Escaped code points: {reader.statistics.code_points_escaped}")
    print()


def example_helpers():
    """Example 2: One-call helpers and configuration."""
    print("=== Example 2: Helpers ===")

    config = ReaderConfig.create_preset("strict").override(chunk_size=64)
    print(transform_bytes(DOCUMENT.encode("utf-16"), config=config))

    tree = parse_tree(DOCUMENT.encode("utf-16"))
    root = tree.getroot()
    print(f"Element tree: <{root.tag}> author={root.get('author')!r}")
    print()


class AttributePrinter(ContentHandler):
    def startElement(self, name, attrs):
        for key, value in attrs.items():
            print(f"  {name}@{key} = {value!r}")


def example_sax():
    """Example 3: Feed a SAX parser through the input source."""
    print("=== Example 3: SAX ===")

    parser = xml.sax.make_parser()
    parser.setContentHandler(AttributePrinter())
    parser.parse(FullUnicodeInputSource(io.BytesIO(DOCUMENT.encode("utf-16"))))
    print()


def main():
    example_reader()
    example_helpers()
    example_sax()


if __name__ == "__main__":
    main()
