"""Unit tests for selection and overlay coordination."""

from __future__ import annotations

import asyncio

from core.config import StepGraphConfig
from core.types import AlgorithmCategory, AlgorithmMetadata, AlgorithmVariant
from loader.dataset_loader import DatasetLoader
from selection.coordinator import SelectionCoordinator
from tests.dataset_payloads import StaticFetcher, dataset_text
from tests.fixture_paths import fixture_text
from timeline.state_machine import TimelineController
from timeline.states import Ready


def _coordinator(
    config: StepGraphConfig,
) -> tuple[SelectionCoordinator, TimelineController, StaticFetcher]:
    fetcher = StaticFetcher(
        {
            "aggregation": fixture_text("datasets/aggregation.json"),
            "other": dataset_text("Other", ["a", "b"]),
        }
    )
    timeline = TimelineController(DatasetLoader(config, catalog=(), fetcher=fetcher))
    return SelectionCoordinator(timeline), timeline, fetcher


def _ready_coordinator(config: StepGraphConfig) -> tuple[SelectionCoordinator, TimelineController]:
    coordinator, timeline, _ = _coordinator(config)
    asyncio.run(timeline.select_algorithm("aggregation"))
    return coordinator, timeline


def test_select_node_opens_details_for_current_step(config: StepGraphConfig) -> None:
    """Selecting a present node should resolve it from the current step."""
    coordinator, _ = _ready_coordinator(config)

    view = coordinator.select_node("a")

    assert view.visible and view.overlay_kind == "node_details"
    assert view.selected_node is not None
    assert (view.selected_node.node_id, view.selected_node.color) == ("a", "#ff6b6b")
    assert view.selected_node.label == "A"


def test_select_node_ignores_ids_absent_from_step(config: StepGraphConfig) -> None:
    """Unknown node ids should leave the selection unchanged."""
    coordinator, _ = _ready_coordinator(config)

    view = coordinator.select_node("c1")

    assert (view.selected_node, view.overlay_kind) == (None, "none")
    assert coordinator.selected_node_id is None


def test_select_node_is_ignored_before_ready(config: StepGraphConfig) -> None:
    """Nothing can be selected without an active dataset."""
    coordinator, _, _ = _coordinator(config)

    view = coordinator.select_node("a")

    assert (view.selected_node, view.visible) == (None, False)


def test_step_change_clears_node_missing_from_new_step(config: StepGraphConfig) -> None:
    """A selected node absent at the new step should be deselected."""
    coordinator, timeline = _ready_coordinator(config)
    coordinator.select_node("a")

    timeline.go_to_step(1)

    view = coordinator.detail_view()
    assert (coordinator.selected_node_id, view.overlay_kind) == (None, "none")


def test_step_change_keeps_node_present_in_new_step(config: StepGraphConfig) -> None:
    """A node that exists at the new step stays selected."""
    coordinator, timeline = _ready_coordinator(config)
    coordinator.select_node("b")

    timeline.go_to_step(2)

    view = coordinator.detail_view()
    assert view.selected_node is not None
    assert view.selected_node.node_id == "b"


def test_profile_overlay_survives_step_changes(config: StepGraphConfig) -> None:
    """The profile overlay is independent of step contents."""
    coordinator, timeline = _ready_coordinator(config)
    coordinator.select_node("a")

    coordinator.show_profile()
    timeline.go_to_step(1)

    view = coordinator.detail_view()
    assert (view.overlay_kind, view.selected_node) == ("profile", None)


def test_dismiss_closes_overlay_and_clears_selection(config: StepGraphConfig) -> None:
    """Dismiss should return to the empty detail view."""
    coordinator, _ = _ready_coordinator(config)
    coordinator.select_node("a")

    view = coordinator.dismiss()

    assert (view.selected_node, view.overlay_kind, view.visible) == (None, "none", False)


def test_algorithm_switch_clears_selection_even_for_shared_ids(
    config: StepGraphConfig,
) -> None:
    """A new dataset never inherits the previous selection."""
    coordinator, timeline = _ready_coordinator(config)
    coordinator.select_node("a")

    asyncio.run(timeline.select_algorithm("other"))

    assert (coordinator.selected_node_id, coordinator.overlay_kind) == (None, "none")


def test_failed_load_clears_overlay(config: StepGraphConfig) -> None:
    """A failed load should leave no overlay open."""
    coordinator, timeline = _ready_coordinator(config)
    coordinator.show_profile()

    asyncio.run(timeline.select_algorithm("missing"))

    assert coordinator.overlay_kind == "none"


def test_close_stops_following_timeline(config: StepGraphConfig) -> None:
    """A closed coordinator no longer reacts to transitions."""
    coordinator, timeline = _ready_coordinator(config)
    coordinator.show_profile()
    coordinator.close()

    asyncio.run(timeline.select_algorithm("other"))

    assert coordinator.overlay_kind == "profile"


def _variant_coordinator(
    config: StepGraphConfig,
) -> tuple[SelectionCoordinator, TimelineController]:
    catalog = (
        AlgorithmCategory(
            category_id="community",
            name="Community Detection",
            algorithms=(
                AlgorithmMetadata(
                    "louvain",
                    "Louvain",
                    True,
                    (
                        AlgorithmVariant(
                            "small", "Small", resource_ref="small.json", is_default=True
                        ),
                        AlgorithmVariant("large", "Large", resource_ref="large.json"),
                    ),
                ),
            ),
        ),
    )
    fetcher = StaticFetcher(
        {
            "small": fixture_text("datasets/aggregation.json"),
            "large": dataset_text("Large", ["a", "b", "e"]),
        }
    )
    timeline = TimelineController(DatasetLoader(config, catalog=catalog, fetcher=fetcher))
    coordinator = SelectionCoordinator(timeline)
    asyncio.run(timeline.select_algorithm("louvain"))
    return coordinator, timeline


def test_variant_switch_clears_selection_even_for_shared_ids(config: StepGraphConfig) -> None:
    """A variant dataset never inherits the previous selection."""
    coordinator, timeline = _variant_coordinator(config)
    coordinator.select_node("a")

    state = asyncio.run(timeline.select_variant("large"))

    assert isinstance(state, Ready) and state.variant_id == "large"
    assert (coordinator.selected_node_id, coordinator.overlay_kind) == (None, "none")


def test_reload_clears_selection(config: StepGraphConfig) -> None:
    """Reloading replaces the dataset and clears any selection."""
    coordinator, timeline = _variant_coordinator(config)
    coordinator.select_node("a")

    state = asyncio.run(timeline.reload())

    assert isinstance(state, Ready) and state.step_index == 0
    assert (coordinator.selected_node_id, coordinator.overlay_kind) == (None, "none")
