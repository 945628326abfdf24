"""Command Line Interface for the project graph engine.

This module provides a CLI for loading a project graph and running analytics,
queries, filters and format conversions against it. Results are printed as JSON
(or as the raw exported document for ``export``).

The CLI supports the following commands:
    - analyze: Print graph analytics
    - export: Convert a graph to json, graphml or dot
    - path: Shortest directed path between two nodes
    - neighbors: Nodes within a number of hops of a node
    - filter: Apply filters and print the remaining graph
    - query: Run a tagged query given as JSON
    - sample: Generate a sample project graph

Graph input can be provided either as a direct JSON document string or as a file
path prefixed with '@'. Files are read according to their extension, so
``@plan.graphml`` is imported as GraphML.

Example Usage:
    projgraph analyze @data/plan.json
    projgraph path @data/plan.json task-1 task-4
    projgraph filter @data/plan.json '{"id": "open", "criteria": [...]}'
    projgraph sample --nodes 30 --seed 7 --format dot
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, List, Optional

from .core.enums import GraphFormat
from .core.exceptions import (
    QueryError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
)
from .core.graph_operations import GraphAnalytics
from .core.models import GraphSnapshot
from .engine import GraphEngine
from .query.engine import PatternMatch
from .serialization.document import document_to_dict, filter_from_dict
from .serialization.registry import export_graph
from .utils.sample import generate_sample_graph

EXPORT_FORMATS = [GraphFormat.JSON.value, GraphFormat.GRAPHML.value, GraphFormat.DOT.value]


def parse_json_input(json_str: str) -> Any:
    """Parse JSON input from either a string or file.

    Args:
        json_str (str): Either a JSON string or a file path prefixed with '@'.
                       Relative paths are resolved against the current directory.

    Returns:
        Parsed JSON data.

    Raises:
        ValueError: If the JSON is invalid or the specified file is not found.
    """
    if json_str.startswith("@"):
        file_path = os.path.abspath(json_str[1:])
        if not os.path.exists(file_path):
            raise ValueError(f"File not found: {file_path}")
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {file_path}: {e}") from e

    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON input: {e}") from e


async def load_graph(engine: GraphEngine, source: str) -> None:
    """Load a graph document into the engine from a JSON string or '@file'."""
    if source.startswith("@"):
        file_path = os.path.abspath(source[1:])
        if not os.path.exists(file_path):
            raise ValueError(f"File not found: {file_path}")
        await engine.import_file(file_path)
    else:
        engine.import_data(source, GraphFormat.JSON)


def to_jsonable(result: Any) -> Any:
    """Convert query and analytics results into plain JSON values."""
    if isinstance(result, GraphSnapshot):
        return document_to_dict(result)
    if isinstance(result, (GraphAnalytics, PatternMatch)):
        return result.to_dict()
    if isinstance(result, list):
        return [to_jsonable(item) for item in result]
    return result


def print_json(data: Any) -> None:
    print(json.dumps(to_jsonable(data), indent=2))


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="projgraph", description="Project graph CLI")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    graph_help = "JSON document string or @filename (json or graphml)"

    analyze = subparsers.add_parser("analyze", help="Print graph analytics")
    analyze.add_argument("graph", help=graph_help)

    export = subparsers.add_parser("export", help="Convert a graph to another format")
    export.add_argument("graph", help=graph_help)
    export.add_argument("--format", default="json", choices=EXPORT_FORMATS)
    export.add_argument("--output", help="Write to this file instead of stdout")
    export.add_argument(
        "--no-metadata", action="store_true", help="Leave node and edge metadata out"
    )

    path = subparsers.add_parser("path", help="Shortest directed path between two nodes")
    path.add_argument("graph", help=graph_help)
    path.add_argument("source", help="Source node id")
    path.add_argument("target", help="Target node id")

    neighbors = subparsers.add_parser("neighbors", help="Nodes within N hops of a node")
    neighbors.add_argument("graph", help=graph_help)
    neighbors.add_argument("node", help="Node id")
    neighbors.add_argument("--depth", type=int, default=1, help="Number of hops (default: 1)")

    graph_filter = subparsers.add_parser("filter", help="Apply filters to a graph")
    graph_filter.add_argument("graph", help=graph_help)
    graph_filter.add_argument(
        "filters",
        nargs="?",
        help="JSON filter, list of filters or @filename; defaults to the document's filters",
    )

    query = subparsers.add_parser("query", help="Run a tagged query")
    query.add_argument("graph", help=graph_help)
    query.add_argument("query", help='JSON string or @filename like {"type": "path", ...}')

    sample = subparsers.add_parser("sample", help="Generate a sample project graph")
    sample.add_argument("--nodes", type=int, default=20, help="Number of nodes (default: 20)")
    sample.add_argument("--seed", type=int, help="Random seed for a reproducible graph")
    sample.add_argument("--format", default="json", choices=EXPORT_FORMATS)

    return parser


async def run(args: argparse.Namespace) -> None:
    """Execute one parsed command."""
    if args.command == "sample":
        snapshot = generate_sample_graph(args.nodes, seed=args.seed)
        print(export_graph(snapshot, args.format).data)
        return

    engine = GraphEngine()
    try:
        await load_graph(engine, args.graph)

        if args.command == "analyze":
            print_json(engine.get_analytics())

        elif args.command == "export":
            options = {"include_metadata": not args.no_metadata}
            if args.output:
                await engine.export_file(args.output, args.format, **options)
                print(f"Exported graph to {args.output}")
            else:
                print(engine.export(args.format, **options).data)

        elif args.command == "path":
            parameters = {"source": args.source, "target": args.target}
            print_json(engine.query({"type": "path", "parameters": parameters}))

        elif args.command == "neighbors":
            parameters = {"nodeId": args.node, "depth": args.depth}
            print_json(engine.query({"type": "neighbors", "parameters": parameters}))

        elif args.command == "filter":
            filters = None
            if args.filters:
                raw = parse_json_input(args.filters)
                raw_filters: List[Any] = raw if isinstance(raw, list) else [raw]
                try:
                    filters = [filter_from_dict(item) for item in raw_filters]
                except (KeyError, TypeError) as e:
                    raise ValidationError(f"Invalid filter: {e}") from e
            print_json(engine.apply_filters(filters))

        elif args.command == "query":
            print_json(engine.query(parse_json_input(args.query)))

    finally:
        await engine.destroy()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI application.

    Returns:
        int: Process exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        asyncio.run(run(args))
    except (
        ValueError,
        ValidationError,
        QueryError,
        StorageError,
        UnsupportedFormatError,
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
