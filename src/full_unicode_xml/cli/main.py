"""Main CLI entry point for the full-unicode-xml command-line tool.

Provides commands to transform XML documents and to check that they parse
through the transforming reader.
"""

import argparse
import json
import logging
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

from full_unicode_xml import __version__
from full_unicode_xml.api.parser import open_reader, parse_reader
from full_unicode_xml.shared.config import ConfigError
from full_unicode_xml.shared.logging import get_logger

logger = get_logger(__name__, component="cli")

# Characters written per output chunk
OUTPUT_CHUNK_SIZE = 8192


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="full-unicode-xml",
        description=(
            "Escape supplementary Unicode characters in XML attribute values "
            "as numeric character references"
        )
    )

    parser.add_argument("--version", action="version", version=__version__)
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Transform command
    transform_parser = subparsers.add_parser(
        "transform", help="Write the transformed document as UTF-8"
    )
    transform_parser.add_argument(
        "path",
        nargs="?",
        default="-",
        help="XML file, URI, or - for stdin (default: -)"
    )
    transform_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    transform_parser.add_argument(
        "--encoding", "-e",
        help="Input encoding (default: detect from BOM and XML declaration)"
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check", help="Parse documents through the transforming reader"
    )
    check_parser.add_argument(
        "paths",
        nargs="+",
        help="XML files or URIs to check"
    )
    check_parser.add_argument(
        "--encoding", "-e",
        help="Input encoding (default: detect from BOM and XML declaration)"
    )
    check_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    return parser


def _stdin_bytes() -> BinaryIO:
    return sys.stdin.buffer


def cmd_transform(args: argparse.Namespace) -> int:
    """Handle transform command."""
    source: Any = _stdin_bytes() if args.path == "-" else args.path
    try:
        with open_reader(source, encoding=args.encoding) as reader:
            if args.output:
                with args.output.open("wb") as out:
                    _copy(reader, out)
            else:
                sys.stdout.flush()
                _copy(reader, sys.stdout.buffer)
                sys.stdout.buffer.flush()
    except (OSError, LookupError, ConfigError) as e:
        print(f"Error transforming {args.path}: {e}", file=sys.stderr)
        return 1
    return 0


def _copy(reader: Any, out: BinaryIO) -> None:
    chunk = reader.read(OUTPUT_CHUNK_SIZE)
    while chunk:
        out.write(chunk.encode("utf-8", "surrogatepass"))
        chunk = reader.read(OUTPUT_CHUNK_SIZE)


def check_document(path: str, encoding: Optional[str] = None) -> Dict[str, Any]:
    """Parse one document and summarize the outcome."""
    result: Dict[str, Any] = {"file": path, "valid": False}
    try:
        with open_reader(path, encoding=encoding) as reader:
            root = parse_reader(reader)
            statistics = reader.statistics
            result.update({
                "valid": True,
                "root": root.tag,
                "encoding": reader.detection.encoding if reader.detection else None,
                "escaped": statistics.code_points_escaped,
            })
    except ET.ParseError as e:
        result["error"] = f"Parse error: {e}"
    except (OSError, LookupError, ConfigError) as e:
        result["error"] = str(e)

    if not result["valid"]:
        logger.warning("Document check failed", extra=result)
    return result


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format check results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    lines = []
    for result in results:
        if result["valid"]:
            lines.append(
                f"OK    {result['file']}: <{result['root']}>, "
                f"{result['escaped']} escaped"
            )
        else:
            lines.append(f"FAIL  {result['file']}: {result['error']}")
    valid_count = sum(1 for r in results if r["valid"])
    lines.append(f"Checked {len(results)} documents, {valid_count} valid")
    return "\n".join(lines)


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    results = [check_document(path, args.encoding) for path in args.paths]
    print(format_results(results, args.format))
    return 0 if all(r["valid"] for r in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "transform":
            return cmd_transform(args)
        if args.command == "check":
            return cmd_check(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
