#!/usr/bin/env python3
"""
mapdown CLI

A tool for scanning a tree of markdown documents for links between them and
rendering the resulting link graph in various formats.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from config import FORMATS, Config, load_config
from graph.model import LinkGraph
from scanner.builder import build_graph
from scanner.errors import MapdownError
from exporters import to_mermaid, to_ascii, to_json


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mapdown",
        description="Scan markdown documents for links and generate a link graph.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mapdown .                          # Scan current directory, ASCII output
  mapdown ./notes -f mermaid         # Mermaid output for the notes directory
  mapdown . -f json -o graph.json    # JSON nodes/edges document to file
  mapdown . --ext .markdown          # Scan *.markdown documents
  mapdown . --ignore-missing         # Hide links to documents that don't exist
  mapdown . -f json -o graph.json --watch   # Rewrite graph.json on every change
        """,
    )

    # Positional arguments
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Document root directory (default: current directory)",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default: ascii)",
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )

    # Mermaid-specific options
    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--group-by-dir",
        action="store_true",
        help="Group documents by top-level directory in Mermaid output",
    )

    # ASCII-specific options
    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="ASCII output style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )

    # Scanning options
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (default: <root>/.mapdown.yaml if present)",
    )

    parser.add_argument(
        "--ext",
        default=None,
        help="Document extension to scan (default: .md)",
    )

    parser.add_argument(
        "--exclude-dir",
        nargs="+",
        default=None,
        help="Directory names to exclude",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum directory depth to scan",
    )

    parser.add_argument(
        "--keep-duplicates",
        action="store_true",
        default=None,
        help="Emit one edge per link occurrence instead of one per document pair",
    )

    # Filtering options
    parser.add_argument(
        "--ignore-missing",
        action="store_true",
        help="Hide links to documents that were not found",
    )

    parser.add_argument(
        "--ignore-remote",
        action="store_true",
        help="Hide links to external URLs",
    )

    parser.add_argument(
        "--show-all",
        action="store_true",
        help="Include documents without links in ASCII and Mermaid output (JSON always includes them)",
    )

    # Watch mode
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and regenerate the output whenever a file under root changes",
    )

    parser.add_argument(
        "--debounce",
        type=float,
        default=None,
        help="Seconds to wait for changes to settle before rebuilding (default: 1.0)",
    )

    # Logging
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every document and skipped link",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )

    return parser.parse_args(args)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr at the requested level."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def merge_config(config: Config, parsed: argparse.Namespace) -> Config:
    """Apply command line flags over file configuration."""
    if parsed.format is not None:
        config.format = parsed.format
    if parsed.ext:
        config.extension = parsed.ext if parsed.ext.startswith(".") else "." + parsed.ext
    if parsed.exclude_dir:
        config.exclude_dirs = set(config.exclude_dirs) | set(parsed.exclude_dir)
    if parsed.max_depth is not None:
        config.max_depth = parsed.max_depth
    if parsed.keep_duplicates is not None:
        config.keep_duplicates = parsed.keep_duplicates
    if parsed.debounce is not None:
        config.debounce = parsed.debounce
    return config


def render(graph: LinkGraph, root: Path, config: Config, parsed: argparse.Namespace) -> str:
    """Render the graph in the configured format."""
    include_missing = not parsed.ignore_missing
    include_remote = not parsed.ignore_remote

    if config.format == "mermaid":
        return to_mermaid(
            graph=graph,
            root=root,
            orientation=parsed.orientation,
            group_by_directory=parsed.group_by_dir,
            include_missing=include_missing,
            include_remote=include_remote,
            show_all=parsed.show_all,
        )
    if config.format == "json":
        return to_json(
            graph=graph,
            indent=parsed.indent,
            include_missing=include_missing,
            include_remote=include_remote,
        )
    return to_ascii(
        graph=graph,
        root=root,
        style=parsed.ascii_style,
        include_missing=include_missing,
        include_remote=include_remote,
        show_all=parsed.show_all,
    )


def write_output(output: str, destination: Optional[str]) -> None:
    """Write to the output file, or stdout when none is given."""
    if destination:
        output_path = Path(destination)
        output_path.write_text(output, encoding="utf-8")
        print(f"Output written to: {output_path}", file=sys.stderr)
    else:
        print(output)


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)
    configure_logging(parsed.verbose, parsed.quiet)

    root = Path(parsed.root).absolute()
    if not root.is_dir():
        print(f"Error: '{parsed.root}' is not a directory", file=sys.stderr)
        return 1

    try:
        config = load_config(root, Path(parsed.config) if parsed.config else None)
    except MapdownError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    config = merge_config(config, parsed)

    if parsed.watch:
        return _watch(root, config, parsed)

    try:
        graph = build_graph(root=root, **config.build_options())
    except MapdownError as e:
        print(f"Error scanning documents: {e}", file=sys.stderr)
        return 1

    output = render(graph, root, config, parsed)

    try:
        write_output(output, parsed.output)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return 0


def _watch(root: Path, config: Config, parsed: argparse.Namespace) -> int:
    from watcher import watch

    def on_rebuild(graph: LinkGraph) -> None:
        try:
            write_output(render(graph, root, config, parsed), parsed.output)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)

    ignore = [Path(parsed.output)] if parsed.output else []
    print(f"Watching {root} for changes, press Ctrl+C to stop", file=sys.stderr)
    count = watch(
        root,
        on_rebuild,
        debounce_seconds=config.debounce,
        build_options=config.build_options(),
        ignore_paths=ignore,
    )
    print(f"Stopped watching. Rebuilt {count} time(s).", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
