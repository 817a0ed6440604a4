"""Main CLI entry point for the markup-tree command-line tool.

Provides commands to query documents, print their tree structure, dump the
plain-data projection and check files for malformed markup.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from markup_tree import __version__
from markup_tree.api import MarkupParser, format_tree, to_html
from markup_tree.shared import MalformedInput, ParserConfig
from markup_tree.shared.logging import get_logger
from markup_tree.tree import Root


def _create_parser(args: argparse.Namespace) -> MarkupParser:
    config = ParserConfig.xml() if args.xml else ParserConfig.html()
    return MarkupParser(config=config)


def _load(args: argparse.Namespace) -> Optional[Root]:
    """Parse ``args.file``, reporting failures on stderr."""
    logger = get_logger(__name__, None, "cli")
    try:
        return _create_parser(args).parse(args.file)
    except MalformedInput as e:
        print(f"Error: {args.file}: {e}", file=sys.stderr)
    except OSError as e:
        logger.debug("Could not read input", extra={"file": str(args.file)})
        print(f"Error: {e}", file=sys.stderr)
    return None


def cmd_query(args: argparse.Namespace) -> int:
    """Handle query command."""
    root = _load(args)
    if root is None:
        return 1

    matches = root.xpath(args.pattern)

    if args.attribute:
        for node in matches:
            print(node.get_attribute(args.attribute, ""))
    elif args.format == "json":
        print(json.dumps([node.to_dict() for node in matches], indent=2))
    elif args.format == "html":
        for node in matches:
            print(to_html(node))
    else:
        for node in matches:
            print(node.text_content)

    return 0 if matches else 1


def cmd_tree(args: argparse.Namespace) -> int:
    """Handle tree command."""
    root = _load(args)
    if root is None:
        return 1
    print(format_tree(root))
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    """Handle dump command."""
    root = _load(args)
    if root is None:
        return 1
    print(json.dumps(root.to_dict(), indent=2))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    parser = _create_parser(args)
    results: List[Dict[str, Any]] = []

    for path in args.paths:
        try:
            build = parser.build(path)
        except (MalformedInput, OSError) as e:
            results.append({"file": str(path), "valid": False, "error": str(e)})
            continue
        results.append({
            "file": str(path),
            "valid": True,
            "node_count": build.node_count,
            "repairs": build.get_repair_summary(),
        })

    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        valid_count = sum(1 for r in results if r["valid"])
        print(f"Checked {len(results)} files, {valid_count} valid")
        print("-" * 50)

        for result in results:
            status = "✓" if result["valid"] else "✗"
            print(f"{status} {result['file']}")
            if not result["valid"]:
                print(f"   Error: {result['error']}")
            elif result["repairs"]:
                repairs = ", ".join(
                    f"{name}: {count}" for name, count in sorted(result["repairs"].items())
                )
                print(f"   Repairs: {repairs}")

    return 0 if all(r["valid"] for r in results) else 1


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="markup-tree",
        description="Parse HTML/XML-like markup and query the resulting tree"
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
    parser.add_argument(
        "--xml",
        action="store_true",
        help="Use the XML preset (no raw-text or implicit self-closing elements)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Query command
    query_parser = subparsers.add_parser("query", help="Evaluate a path query")
    query_parser.add_argument("file", type=Path, help="Markup file to query")
    query_parser.add_argument("pattern", help="Query pattern, e.g. //p[2] or #main")
    query_parser.add_argument(
        "--format", "-f",
        choices=["text", "html", "json"],
        default="text",
        help="Output format for matches (default: text)"
    )
    query_parser.add_argument(
        "--attribute", "-a",
        help="Print this attribute of each match instead"
    )

    # Tree command
    tree_parser = subparsers.add_parser("tree", help="Print the document tree")
    tree_parser.add_argument("file", type=Path, help="Markup file to display")

    # Dump command
    dump_parser = subparsers.add_parser("dump", help="Print the tree as JSON")
    dump_parser.add_argument("file", type=Path, help="Markup file to dump")

    # Check command
    check_parser = subparsers.add_parser("check", help="Check files for malformed markup")
    check_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to check"
    )
    check_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    return parser


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

    # Route to appropriate command handler
    try:
        if args.command == "query":
            return cmd_query(args)
        elif args.command == "tree":
            return cmd_tree(args)
        elif args.command == "dump":
            return cmd_dump(args)
        elif args.command == "check":
            return cmd_check(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
