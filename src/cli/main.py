"""StepGraph CLI entry points.
This module exposes data-author commands for dataset validation and
catalog inspection. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.steps_command import add_steps_command, run_steps_command
from core.catalog import load_catalog
from core.config import StepGraphConfig
from core.errors import DatasetValidationError
from dataset.resource_reader import decode_resource
from dataset.validator import validate_dataset
from session.visualizer_session import VisualizerSession


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="stepgraph", description="StepGraph dataset CLI")
    parser.add_argument("--data-root", help="Override STEPGRAPH_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_validate_command(subparsers)
    _add_catalog_command(subparsers)
    add_steps_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the StepGraph CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.data_root)
    if args.command == "validate":
        return _run_validate_command(config, args)
    if args.command == "catalog":
        return _run_catalog_command(config, args)
    if args.command == "steps":
        return run_steps_command(VisualizerSession(config), args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> StepGraphConfig:
    """Build config with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Runtime configuration.
    """
    config = StepGraphConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _run_validate_command(config: StepGraphConfig, args: argparse.Namespace) -> int:
    """Handle validate command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    dataset_path = Path(args.path).expanduser()
    if not dataset_path.is_file():
        print(f"Dataset file not found at {dataset_path}.", file=sys.stderr)
        return 1
    strict_references = args.strict or config.strict_references
    try:
        payload = decode_resource(dataset_path.read_text(encoding="utf-8"), str(dataset_path))
        dataset = validate_dataset(payload, strict_references=strict_references)
    except DatasetValidationError as error:
        print(f"invalid\tfield={error.field_path}\t{error.reason}")
        return 1
    node_total = sum(len(step.nodes) for step in dataset.steps)
    relationship_total = sum(len(step.relationships) for step in dataset.steps)
    print(
        f"valid\ttitle={dataset.title}\t"
        f"steps={dataset.step_count}\t"
        f"nodes={node_total}\t"
        f"relationships={relationship_total}"
    )
    return 0


def _run_catalog_command(config: StepGraphConfig, args: argparse.Namespace) -> int:
    """Handle catalog command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for category in load_catalog(config.catalog_path):
        for algorithm in category.algorithms:
            if args.enabled_only and not algorithm.enabled:
                continue
            variant_ids = ",".join(
                f"{variant.variant_id}{'*' if variant.is_default else ''}"
                for variant in algorithm.variants
            )
            print(
                f"{category.category_id}\t"
                f"{algorithm.algorithm_id}\t"
                f"{'enabled' if algorithm.enabled else 'disabled'}\t"
                f"{variant_ids or '-'}"
            )
    return 0


def _add_validate_command(subparsers: Any) -> None:
    """Register validate subcommand."""
    parser = subparsers.add_parser("validate", help="Validate a dataset JSON file")
    parser.add_argument("path", help="Dataset JSON file path")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Also reject duplicate ids and dangling relationship endpoints",
    )


def _add_catalog_command(subparsers: Any) -> None:
    """Register catalog subcommand."""
    parser = subparsers.add_parser("catalog", help="List catalog algorithms and variants")
    parser.add_argument(
        "--enabled-only",
        action="store_true",
        help="Only list algorithms navigation can select",
    )
