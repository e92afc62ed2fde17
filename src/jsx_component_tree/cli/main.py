"""Main CLI entry point for the jsx-tree command-line tool.

Provides parsing to JSON, reformatting through a parse/serialize round trip,
and structural validation of markup snippet files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsx_component_tree import __version__
from jsx_component_tree.api import ComponentTreeParser, parse_file
from jsx_component_tree.registry import ComponentRegistry
from jsx_component_tree.shared import ConfigError, ParserConfig, get_logger

PRESETS = {
    "default": ParserConfig.default,
    "strict": ParserConfig.strict,
    "compact": ParserConfig.compact,
}

MAX_LISTED_MESSAGES = 3
PACKAGE_LOGGER = "jsx_component_tree"


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig.default()
        self.registry = ComponentRegistry.default()
        self.output_format = "json"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CLIConfig":
        """Build configuration from command-line options.

        The configuration's ``logging_level`` is applied to the package
        logger unless ``-v`` or ``-q`` chose a level.

        Raises:
            ConfigError: If a configuration or registry file is unusable
        """
        config = cls()
        preset = getattr(args, "preset", None)
        if preset:
            config.parser_config = PRESETS[preset]()
        config_path = getattr(args, "config", None)
        if config_path:
            config.parser_config = ParserConfig.from_file(config_path)
        registry_path = getattr(args, "registry", None)
        if registry_path:
            config.registry = ComponentRegistry.from_file(registry_path)
        config.output_format = getattr(args, "format", None) or config.output_format
        if not (getattr(args, "verbose", False) or getattr(args, "quiet", False)):
            logging.getLogger(PACKAGE_LOGGER).setLevel(config.parser_config.logging_level)
        return config


class TreeProcessor:
    """Core processing logic for CLI operations."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.parser = ComponentTreeParser(
            config=config.parser_config, registry=config.registry
        )
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse one file and return a JSON-compatible summary."""
        result = parse_file(
            file_path, registry=self.config.registry, config=self.config.parser_config
        )
        file_logger = self.logger.bind(file=str(file_path))
        file_logger.debug("File processed", extra={"node_count": result.node_count})
        return {
            "file": str(file_path),
            "success": result.success,
            "node_count": result.node_count,
            "processing_time_ms": result.processing_time_ms,
            "warnings": result.warnings,
            "errors": result.errors,
            "roots": [root.to_dict() for root in result.roots],
            "_result": result,
        }


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="jsx-tree",
        description="Fault-tolerant JSX-like markup to component tree converter",
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "paths",
            nargs="+",
            type=Path,
            help="Markup files to process"
        )
        sub.add_argument(
            "--registry",
            type=Path,
            help="Component registry JSON file"
        )
        sub.add_argument(
            "--config", "-c",
            type=Path,
            help="Parser configuration JSON file"
        )

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse markup files into trees")
    add_common_options(parse_parser)
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    parse_parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Parser configuration preset"
    )

    # Format command
    format_parser = subparsers.add_parser(
        "format", help="Rewrite markup files through a parse/serialize round trip"
    )
    add_common_options(format_parser)
    format_parser.add_argument(
        "--indent",
        type=int,
        help="Spaces per nesting level; 0 writes a single line"
    )
    format_parser.add_argument(
        "--in-place", "-i",
        action="store_true",
        help="Overwrite the input files instead of printing"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate markup files")
    add_common_options(validate_parser)
    validate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as failures"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

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


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format parse results for output."""
    public = [
        {key: value for key, value in result.items() if not key.startswith("_")}
        for result in results
    ]
    if format_type != "text":
        return json.dumps(public, indent=2)

    if not public:
        return "No results to display."

    successful = sum(1 for r in public if r.get("success", False))
    lines = [f"Processed {len(public)} files, {successful} successful", "-" * 60]
    for result in public:
        status = "OK" if result.get("success", False) else "FAIL"
        lines.append(f"{status} {result['file']}")
        lines.append(
            f"   Nodes: {result.get('node_count', 0)}, "
            f"Warnings: {len(result.get('warnings', []))}, "
            f"Time: {result.get('processing_time_ms', 0):.1f}ms"
        )
        lines.extend(_listed("Error", result.get("errors", [])))
        lines.extend(_listed("Warning", result.get("warnings", [])))
        lines.append("")
    return "\n".join(lines)


def _listed(label: str, messages: List[str]) -> List[str]:
    lines = [f"   {label}: {message}" for message in messages[:MAX_LISTED_MESSAGES]]
    if len(messages) > MAX_LISTED_MESSAGES:
        lines.append(f"   ... and {len(messages) - MAX_LISTED_MESSAGES} more")
    return lines


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    config = CLIConfig.from_args(args)
    processor = TreeProcessor(config)
    results = [processor.process_single_file(path) for path in args.paths]

    formatted_output = format_results(results, args.format)
    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
            print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(formatted_output)

    if not results:
        return 1
    return 0 if all(r["success"] for r in results) else 1


def cmd_format(args: argparse.Namespace) -> int:
    """Handle format command."""
    config = CLIConfig.from_args(args)
    if args.indent is not None:
        try:
            config.parser_config = config.parser_config.override(serializer__indent=args.indent)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    processor = TreeProcessor(config)
    exit_code = 0
    for path in args.paths:
        summary = processor.process_single_file(path)
        result = summary["_result"]
        for warning in result.warnings:
            print(f"{path}: warning: {warning}", file=sys.stderr)
        if not result.success:
            for error in result.errors:
                print(f"{path}: error: {error}", file=sys.stderr)
            exit_code = 1
            continue

        output = processor.parser.serialize(result.roots)
        if args.in_place:
            try:
                path.write_text(output + "\n", encoding="utf-8")
            except OSError as e:
                print(f"Error writing {path}: {e}", file=sys.stderr)
                exit_code = 1
        else:
            print(output)
    return exit_code


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    config = CLIConfig.from_args(args)
    processor = TreeProcessor(config)
    results = []

    for path in args.paths:
        summary = processor.process_single_file(path)
        problems = processor.parser.validate(summary["_result"].roots)
        valid = summary["success"] and not problems
        if args.strict and summary["warnings"]:
            valid = False
        results.append({
            "file": str(path),
            "valid": valid,
            "problems": problems,
            "warnings": summary["warnings"],
            "errors": summary["errors"],
        })

    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        valid_count = sum(1 for r in results if r["valid"])
        print(f"Validated {len(results)} files, {valid_count} valid")
        print("-" * 50)
        for result in results:
            status = "OK" if result["valid"] else "FAIL"
            print(f"{status} {result['file']}")
            if not result["valid"]:
                details = result["errors"] + result["problems"]
                if args.strict:
                    details += result["warnings"]
                for line in _listed("Problem", details):
                    print(line)

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

    handlers = {
        "parse": cmd_parse,
        "format": cmd_format,
        "validate": cmd_validate,
    }

    try:
        return handlers[args.command](args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
