"""Main CLI entry point for the xml-unmarshall command-line tool.

Unmarshalls saved XML responses into registered result types and prints the
cursor's event stream when debugging path expressions.
"""

import argparse
import base64
import dataclasses
import json
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional

from streaming_xml_unmarshaller import __version__
from streaming_xml_unmarshaller.api import unmarshall_response
from streaming_xml_unmarshaller.context import UnmarshallerContext, XmlEvent
from streaming_xml_unmarshaller.shared.config import ConfigError, UnmarshallerConfig
from streaming_xml_unmarshaller.shared.errors import (
    UnknownResultTypeError,
    UnmarshallingError,
)
from streaming_xml_unmarshaller.shared.logging import configure_logging, get_logger
from streaming_xml_unmarshaller.transform.registry import default_registry

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

PRESETS = {
    "default": UnmarshallerConfig,
    "strict": UnmarshallerConfig.strict,
    "lenient": UnmarshallerConfig.lenient,
    "large_documents": UnmarshallerConfig.large_documents,
}


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-unmarshall",
        description="Unmarshall XML API responses into typed result objects"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Unmarshall command
    unmarshall_parser = subparsers.add_parser(
        "unmarshall", help="Unmarshall a saved response"
    )
    unmarshall_parser.add_argument(
        "path",
        type=Path,
        help="XML response file"
    )
    unmarshall_parser.add_argument(
        "--type", "-t",
        dest="type_name",
        required=True,
        help="Registered result type, e.g. ec2.DescribeVpcAttributeResult"
    )
    unmarshall_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )
    unmarshall_parser.add_argument(
        "--request-id",
        action="store_true",
        help="Include the response's request ID in the output"
    )
    unmarshall_parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Configuration preset"
    )
    unmarshall_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file (overrides --preset)"
    )

    # Events command
    events_parser = subparsers.add_parser(
        "events", help="Print the event stream of a document"
    )
    events_parser.add_argument(
        "path",
        type=Path,
        help="XML file"
    )

    # Types command
    subparsers.add_parser("types", help="List registered result types")

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def to_jsonable(value: Any) -> Any:
    """Convert result objects into JSON-serialisable structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name.rstrip("_"): to_jsonable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


def format_text(value: Any, indent: int = 0) -> List[str]:
    """Render a result object as indented ``name: value`` lines."""
    pad = "  " * indent
    lines: List[str] = []
    for name, item in to_jsonable(value).items():
        if isinstance(item, dict):
            lines.append(f"{pad}{name}:")
            lines.extend(format_text(item, indent + 1))
        elif isinstance(item, list) and item and isinstance(item[0], dict):
            lines.append(f"{pad}{name}:")
            for member in item:
                lines.append(f"{pad}  -")
                lines.extend(format_text(member, indent + 2))
        else:
            lines.append(f"{pad}{name}: {item}")
    return lines


def load_config(args: argparse.Namespace) -> UnmarshallerConfig:
    if args.config is not None:
        return UnmarshallerConfig.from_json(args.config.read_text())
    return PRESETS[args.preset]()


def cmd_unmarshall(args: argparse.Namespace) -> int:
    """Unmarshall one file and print the result."""
    logger = get_logger(__name__, None, "cli")
    registry = default_registry()
    try:
        result_type = registry.lookup(args.type_name)
        config = load_config(args)
    except UnknownResultTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Known types: {', '.join(registry.names())}", file=sys.stderr)
        return EXIT_USAGE
    except (ConfigError, OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    if not (args.verbose or args.quiet):
        configure_logging(config.global_.logging_level)

    if not args.path.is_file():
        print(f"Error: file not found: {args.path}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        response = unmarshall_response(
            args.path, result_type, config=config, registry=registry
        )
    except UnmarshallingError as e:
        logger.debug("Unmarshalling failed", extra={"path": str(args.path)})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.format == "json":
        payload = to_jsonable(response.result)
        if args.request_id:
            payload = {"request_id": response.request_id, "result": payload}
        print(json.dumps(payload, indent=2))
    else:
        if args.request_id:
            print(f"request_id: {response.request_id}")
        print("\n".join(format_text(response.result)))
    return EXIT_OK


def cmd_events(args: argparse.Namespace) -> int:
    """Print every cursor event with its depth and path."""
    if not args.path.is_file():
        print(f"Error: file not found: {args.path}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        with UnmarshallerContext(args.path) as context:
            while True:
                event = context.next_event()
                if event is XmlEvent.END_DOCUMENT:
                    break
                print(f"{event.name:<14} {context.current_depth:>3} {context.current_path}")
    except UnmarshallingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def cmd_types(args: argparse.Namespace) -> int:
    for name in default_registry().names():
        print(name)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")

    try:
        if args.command == "unmarshall":
            return cmd_unmarshall(args)
        if args.command == "events":
            return cmd_events(args)
        if args.command == "types":
            return cmd_types(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return EXIT_USAGE

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
