"""
Task Dependency Scheduling
==========================

Critical path analysis for a project file or the bundled example.
"""

import argparse
import json
import sys

from .domain.errors import DependencyValidationError, GraphConsistencyError
from .domain.task import TaskError
from .examples.simple_project import print_report, run_example
from .services.critical_path import CriticalPathAnalyzer
from .services.sequencer import topological_order
from .utils.graph_io import load_project
from .utils.logging_config import configure_logging


def build_parser():
    parser = argparse.ArgumentParser(
        prog="taskgraph", description="Task dependency critical path analysis"
    )
    parser.add_argument(
        "--example", action="store_true", help="Run the example project"
    )
    parser.add_argument(
        "--input",
        type=str,
        help='Project JSON file: {"tasks": [...], "dependencies": [...]}',
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the analysis as JSON"
    )
    parser.add_argument(
        "--sequence",
        action="store_true",
        help="Print only the suggested execution sequence",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=1e-9,
        help="Slack values within this distance of zero count as zero",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.example:
        print("Running example project...")
        run_example()
        return 0

    if not args.input:
        parser.print_help()
        return 1

    try:
        graph = load_project(args.input)
    except (OSError, ValueError, TaskError) as e:
        print(f"Could not read project file: {e}", file=sys.stderr)
        return 2
    except DependencyValidationError as e:
        print(f"Invalid dependency in project file: {e}", file=sys.stderr)
        return 2

    if args.sequence:
        for task_id in topological_order(graph):
            print(task_id)
        return 0

    try:
        analysis = CriticalPathAnalyzer(tolerance=args.tolerance).analyze(graph)
    except GraphConsistencyError as e:
        print(f"Internal consistency error: {e}", file=sys.stderr)
        return 3

    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2, default=str))
    else:
        print_report(graph, analysis)
    return 0


if __name__ == "__main__":
    sys.exit(main())
