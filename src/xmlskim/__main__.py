#!/usr/bin/env python3
"""Command-line interface for xmlskim."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import NoReturn

from .dispatcher import STOP
from .errors import MarkupSyntaxError, SelectorSyntaxError, StructureError
from .node import Node
from .skimmer import skim

EXIT_NO_MATCHES = 1
EXIT_BAD_SELECTOR = 2
EXIT_MALFORMED_DOCUMENT = 3


def _get_version() -> str:
    try:
        return version("xmlskim")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="xmlskim",
        description="Scan an XML document once and print the nodes matching CSS-style selectors.",
        epilog=(
            "Examples:\n"
            "  xmlskim feed.xml -s item\n"
            "  curl -s https://example.com/feed.xml | xmlskim - -s 'channel > item' --format json\n"
            "  xmlskim data.xml -s 'record[status=active]' --count\n"
            "  xmlskim data.xml -s 'record' -s 'record > field[name]' --format name\n"
            "\n"
            "If you don't have the 'xmlskim' command available, use:\n"
            "  python -m xmlskim ...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="XML file to scan, or '-' to read from stdin",
    )
    parser.add_argument(
        "-s",
        "--selector",
        action="append",
        dest="selectors",
        default=[],
        help="Selector to match; repeat for several selectors",
    )
    parser.add_argument(
        "--format",
        choices=["xml", "json", "name"],
        default="xml",
        help="Output format for each match (default: xml, the node's start tag)",
    )
    parser.add_argument(
        "--first",
        action="store_true",
        help="Stop after the first matching node",
    )
    parser.add_argument(
        "--count",
        action="store_true",
        help="Print the number of matches per selector instead of the nodes",
    )
    parser.add_argument(
        "--encoding",
        help="Encoding of the input, overriding detection",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log the node trace to stderr",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"xmlskim {_get_version()}",
    )

    args = parser.parse_args(argv)

    if not args.path or not args.selectors:
        parser.print_help(sys.stderr)
        raise SystemExit(1)

    return args


def _read_xml(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()

    return Path(path).read_bytes()


def _format_node(selector: str, node: Node, fmt: str) -> str:
    if fmt == "name":
        return node.name
    if fmt == "json":
        return json.dumps(
            {"selector": selector, "name": node.name, "attrs": dict(node.attrs), "depth": node.depth},
            ensure_ascii=False,
        )
    return node.to_xml()


def main() -> NoReturn | None:
    args = _parse_args(sys.argv[1:])
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    data = _read_xml(args.path)
    counts = dict.fromkeys(args.selectors, 0)
    out = sys.stdout

    def make_handler(selector: str):
        def handle(node: Node) -> object:
            counts[selector] += 1
            if not args.count:
                out.write(_format_node(selector, node, args.format))
                out.write("\n")
            return STOP if args.first else None

        return handle

    try:
        skim(
            data,
            [(selector, make_handler(selector)) for selector in counts],
            encoding=args.encoding,
        )
    except SelectorSyntaxError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(EXIT_BAD_SELECTOR) from e
    except (MarkupSyntaxError, StructureError) as e:
        print(f"{args.path}: {e}", file=sys.stderr)
        raise SystemExit(EXIT_MALFORMED_DOCUMENT) from e

    if args.count:
        for selector, count in counts.items():
            out.write(f"{count}\t{selector}\n")

    if not any(counts.values()):
        raise SystemExit(EXIT_NO_MATCHES)
    return None


if __name__ == "__main__":
    main()
