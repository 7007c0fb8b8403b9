#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Command-line entry point for ROC-TOPSIS ranking.

Usage:
    roc-topsis compute request.json [--output DIR]
    roc-topsis rank-csv data.csv --alternative-column Name \\
        --criteria price,quality --types cost,benefit --priority quality,price \\
        [--map "quality:Good=4" ...] [--output DIR]
    roc-topsis projects list [--store DIR]
    roc-topsis projects show ID [--store DIR]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import Config, get_default_config, set_config
from .data_loader import DecisionDataLoader
from .exceptions import DataLoadError, RankingError
from .logger import get_module_logger, setup_from_config
from .output_manager import OutputManager
from .pipeline import PipelineResult, RankingPipeline
from .projects import ProjectStore

logger = get_module_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="roc-topsis",
        description="Rank alternatives with ROC weights and TOPSIS.",
    )
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a JSON configuration file.")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Console log level (DEBUG, INFO, WARNING, ERROR).")
    sub = parser.add_subparsers(dest="command", required=True)

    compute = sub.add_parser("compute", help="Rank a JSON request document.")
    compute.add_argument("request", type=str, help="Path to the JSON request.")
    compute.add_argument("--output", type=str, default=None,
                         help="Directory to export ranking, weights and report.")

    csv_cmd = sub.add_parser("rank-csv", help="Rank alternatives from a CSV file.")
    csv_cmd.add_argument("data", type=str, help="Path to the CSV file.")
    csv_cmd.add_argument("--alternative-column", required=True,
                         help="Column holding the alternative names.")
    csv_cmd.add_argument("--criteria", required=True,
                         help="Comma-separated criteria columns.")
    csv_cmd.add_argument("--types", default=None,
                         help="Comma-separated benefit/cost per criterion "
                              "(default: all benefit).")
    csv_cmd.add_argument("--priority", default=None,
                         help="Comma-separated criteria, most important first "
                              "(default: column order).")
    csv_cmd.add_argument("--map", action="append", default=[], dest="mappings",
                         metavar="CRIT:VALUE=NUM",
                         help="Numeric value for a qualitative label; repeatable.")
    csv_cmd.add_argument("--output", type=str, default=None,
                         help="Directory to export ranking, weights and report.")

    projects = sub.add_parser("projects", help="Inspect the project store.")
    projects.add_argument("action", choices=["list", "show"])
    projects.add_argument("project_id", nargs="?", default=None)
    projects.add_argument("--store", type=str, default=None,
                          help="Project directory (default: ./projects).")

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI; returns the process exit code."""
    args = parse_args(argv)

    try:
        config = Config.load(args.config) if args.config else get_default_config()
    except (OSError, ValueError) as e:
        print(f"Error: cannot load configuration: {e}", file=sys.stderr)
        return 1
    if args.log_level:
        config.logging.level = args.log_level
    set_config(config)
    setup_from_config(config.logging)

    try:
        if args.command == "compute":
            return _cmd_compute(args, config)
        if args.command == "rank-csv":
            return _cmd_rank_csv(args, config)
        return _cmd_projects(args, config)
    except RankingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _cmd_compute(args: argparse.Namespace, config: Config) -> int:
    path = Path(args.request)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except OSError as e:
        raise DataLoadError(f"Cannot read request file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Request file {path} is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise DataLoadError(f"Request file {path} must contain a JSON object.")

    result = RankingPipeline(config).run(document)
    print_results(result)
    _export(result, args.output, config)
    return 0


def _cmd_rank_csv(args: argparse.Namespace, config: Config) -> int:
    criteria = _split(args.criteria)
    loaded = DecisionDataLoader().load_csv(args.data, args.alternative_column, criteria)

    for crit, mapping in parse_mappings(args.mappings).items():
        loaded.set_mapping(crit, mapping)
    if loaded.unmapped:
        details = "; ".join(f"{c}: {', '.join(v)}" for c, v in loaded.unmapped.items())
        raise DataLoadError(
            f"Qualitative values without a numeric mapping ({details}). "
            f"Provide them with --map CRIT:VALUE=NUM."
        )

    types = _split(args.types) if args.types else None
    priority = _split(args.priority) if args.priority else None
    problem = loaded.to_problem(types, priority)

    result = RankingPipeline(config).run(problem)
    print_results(result)
    _export(result, args.output, config)
    return 0


def _cmd_projects(args: argparse.Namespace, config: Config) -> int:
    store = ProjectStore(args.store or config.paths.projects_dir)
    if args.action == "list":
        summaries = store.list()
        if not summaries:
            print("No projects stored.")
        for p in summaries:
            print(f"{p.id}  {p.updated_at}  {p.name}")
        return 0

    if not args.project_id:
        print("Error: 'projects show' needs a project id.", file=sys.stderr)
        return 2
    project = store.get(args.project_id)
    print(json.dumps(project.to_dict(), indent=2, ensure_ascii=False))
    return 0


def parse_mappings(items: Sequence[str]) -> Dict[str, Dict[str, float]]:
    """Parse ``CRIT:VALUE=NUM`` items into criterion → label → number."""
    mappings: Dict[str, Dict[str, float]] = {}
    for item in items:
        crit, sep, rest = item.partition(":")
        label, eq, number = rest.rpartition("=")
        if not sep or not eq or not crit.strip() or not label.strip():
            raise DataLoadError(f"Invalid mapping '{item}'. Expected CRIT:VALUE=NUM.")
        try:
            value = float(number)
        except ValueError:
            raise DataLoadError(f"Invalid number in mapping '{item}'.") from None
        mappings.setdefault(crit.strip(), {})[label.strip()] = value
    return mappings


def print_results(result: PipelineResult) -> None:
    """Print ranking summary."""
    print(f"{'─'*60}")
    print("  WEIGHTS (ROC)")
    print(f"{'─'*60}")
    ranks = result.weights.details.get('ranks', {})
    for crit in sorted(result.weights.weights, key=lambda c: ranks.get(c, 0)):
        print(f"  {ranks.get(crit, '-'):>3}. {crit:<30} {result.weights.weights[crit]:.4f}")

    print(f"{'─'*60}")
    print("  RANKING (TOPSIS)")
    print(f"{'─'*60}")
    print(result.summary())


def _export(result: PipelineResult, output: Optional[str], config: Config) -> None:
    if not output:
        return
    paths = OutputManager(output, config.output).save_all(result)
    for name, path in paths.items():
        print(f"  saved {name}: {path}")


def _split(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


if __name__ == '__main__':
    sys.exit(main())
