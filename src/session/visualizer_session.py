"""Visualizer session facade.

This module wires the dataset loader, timeline, and selection coordinator
into one object that presentation collaborators drive, and forwards
layout resize intents to the collaborator that owns layout.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Sequence

from core.config import StepGraphConfig
from core.logging_config import get_logger
from core.types import AlgorithmCategory, DetailView, GraphProjection, TimelineView
from loader.dataset_loader import DatasetLoader, ResourceFetcher
from selection.coordinator import SelectionCoordinator
from timeline.state_machine import TimelineController
from timeline.states import Loading, TimelineState

_LOGGER = get_logger(__name__)

ResizeCallback = Callable[[int], None]


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything the presentation layer renders at one moment.

    Attributes:
        loading: Whether a dataset load is in flight.
        failure_message: User-facing load failure, if any.
        graph: Projection for the visualization widget.
        timeline: Payload for the timeline panel.
        detail: Payload for the node details overlay.
    """

    loading: bool
    failure_message: str | None
    graph: GraphProjection | None
    timeline: TimelineView | None
    detail: DetailView


class VisualizerSession:
    """Primary entry point for one visualizer view."""

    def __init__(
        self,
        config: StepGraphConfig | None = None,
        catalog: Sequence[AlgorithmCategory] | None = None,
        fetcher: ResourceFetcher | None = None,
    ) -> None:
        """Create a session.

        Args:
            config: Optional runtime configuration; read from env when omitted.
            catalog: Optional catalog override.
            fetcher: Optional resource fetcher override.
        """
        self._config = config or StepGraphConfig.from_env()
        self._loader = DatasetLoader(self._config, catalog=catalog, fetcher=fetcher)
        self._timeline = TimelineController(self._loader)
        self._selection = SelectionCoordinator(self._timeline)
        self._resize_callback: ResizeCallback | None = None

    @property
    def config(self) -> StepGraphConfig:
        """Runtime configuration."""
        return self._config

    @property
    def catalog(self) -> tuple[AlgorithmCategory, ...]:
        """Catalog offered to navigation."""
        return self._loader.catalog

    @property
    def timeline(self) -> TimelineController:
        """Timeline state machine."""
        return self._timeline

    @property
    def selection(self) -> SelectionCoordinator:
        """Selection coordinator."""
        return self._selection

    async def select_algorithm(self, algorithm_id: str) -> TimelineState:
        """Load an algorithm chosen in navigation."""
        return await self._timeline.select_algorithm(algorithm_id)

    async def select_variant(self, variant_id: str) -> TimelineState:
        """Switch to another variant of the current algorithm."""
        return await self._timeline.select_variant(variant_id)

    async def retry(self) -> TimelineState:
        """Retry a failed load."""
        return await self._timeline.retry()

    async def reload(self) -> TimelineState:
        """Reload the current dataset from its resource."""
        return await self._timeline.reload()

    def go_to_step(self, step_index: int) -> TimelineState:
        """Jump to a step (clamped)."""
        return self._timeline.go_to_step(step_index)

    def advance(self, delta: int = 1) -> TimelineState:
        """Move relative to the current step."""
        return self._timeline.advance(delta)

    def select_node(self, node_id: str) -> DetailView:
        """Open node details for a node of the current step."""
        return self._selection.select_node(node_id)

    def show_profile(self) -> DetailView:
        """Open the profile overlay."""
        return self._selection.show_profile()

    def dismiss(self) -> DetailView:
        """Close any overlay."""
        return self._selection.dismiss()

    def on_resize(self, callback: ResizeCallback | None) -> None:
        """Register the layout owner's resize callback.

        Args:
            callback: Callable receiving the requested size, or None to clear.
        """
        self._resize_callback = callback

    def request_resize(self, new_size: int) -> None:
        """Forward a resize intent to the layout owner.

        Args:
            new_size: Requested panel size in layout units.
        """
        _LOGGER.debug("resize_requested", new_size=new_size)
        if self._resize_callback is None:
            return
        self._resize_callback(new_size)

    def snapshot(self) -> SessionSnapshot:
        """Capture the current render payloads."""
        return SessionSnapshot(
            loading=isinstance(self._timeline.state, Loading),
            failure_message=self._timeline.failure_message(),
            graph=self._timeline.graph_projection(),
            timeline=self._timeline.timeline_view(),
            detail=self._selection.detail_view(),
        )

    def with_data_root(self, data_root: str) -> "VisualizerSession":
        """Clone the session configuration with a different data root.

        Args:
            data_root: New data root path.

        Returns:
            New session starting uninitialized.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        updated_config = replace(self._config, data_root=resolved_root)
        return VisualizerSession(updated_config, catalog=self._loader.catalog)
