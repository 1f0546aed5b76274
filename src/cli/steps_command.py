"""Steps command wiring for StepGraph CLI.

This module loads an algorithm through the same loader and timeline the
visualizer uses, so data authors can check what a session would show.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

from core.types import GraphProjection
from session.visualizer_session import VisualizerSession
from timeline.states import Failed, Ready, TimelineState


def add_steps_command(subparsers: Any) -> None:
    """Register steps subcommand."""
    parser = subparsers.add_parser(
        "steps",
        help="Load an algorithm dataset and list its steps",
    )
    parser.add_argument("algorithm", help="Algorithm id from the catalog")
    parser.add_argument("--variant", help="Optional variant id")
    parser.add_argument(
        "--step",
        type=int,
        help="Step index to select; prints its projection as JSON",
    )


def run_steps_command(session: VisualizerSession, args: argparse.Namespace) -> int:
    """Handle steps command invocation."""
    state = asyncio.run(_load_state(session, args.algorithm, args.variant))
    if isinstance(state, Failed):
        print(state.message)
        return 1
    if not isinstance(state, Ready):
        print(f"Algorithm '{args.algorithm}' did not finish loading.")
        return 1
    if args.step is not None:
        state = session.go_to_step(args.step)
    if not isinstance(state, Ready):
        return 1
    _print_step_list(state)
    if args.step is not None:
        print(json.dumps(_projection_payload(state.step_index, state.projection()), indent=2))
    return 0


async def _load_state(
    session: VisualizerSession,
    algorithm_id: str,
    variant_id: str | None,
) -> TimelineState:
    state = await session.select_algorithm(algorithm_id)
    if variant_id is not None and isinstance(state, Ready) and state.variant_id != variant_id:
        state = await session.select_variant(variant_id)
    return state


def _print_step_list(state: Ready) -> None:
    view = state.timeline_view()
    print(f"{view.title}\tvariant={view.current_variant_id or '-'}\tsteps={view.total_steps}")
    for index, name in enumerate(view.step_names):
        marker = "*" if index == view.step_index else " "
        print(f"{marker} {index}\t{name}")


def _projection_payload(step_index: int, projection: GraphProjection) -> dict[str, object]:
    return {
        "step_index": step_index,
        "directed": projection.directed,
        "nodes": [dict(node.attributes) for node in projection.nodes],
        "relationships": [dict(item.attributes) for item in projection.relationships],
    }
