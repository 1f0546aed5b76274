"""Selection and overlay coordination.

This module owns the selected node id and the visible overlay kind. It
follows the timeline through a subscription: a dataset replacement or a
failed load clears everything, and a step change clears a selected node
that the new step does not contain. The selected node itself is resolved
from the current step on every read, never stored.
"""

from __future__ import annotations

from core.logging_config import get_logger
from core.types import DetailView, GraphNode, OverlayKind
from timeline.state_machine import TimelineController
from timeline.states import Ready, TimelineEvent

_LOGGER = get_logger(__name__)


class SelectionCoordinator:
    """Detail-panel state bound to one timeline."""

    def __init__(self, timeline: TimelineController) -> None:
        """Create an empty selection and subscribe to timeline events.

        Args:
            timeline: Timeline whose lifecycle bounds the selection.
        """
        self._timeline = timeline
        self._selected_node_id: str | None = None
        self._overlay_kind: OverlayKind = "none"
        self._unsubscribe = timeline.subscribe(self._on_timeline_event)

    @property
    def selected_node_id(self) -> str | None:
        """Selected node id, if any."""
        return self._selected_node_id

    @property
    def overlay_kind(self) -> OverlayKind:
        """Visible overlay kind."""
        return self._overlay_kind

    def select_node(self, node_id: str) -> DetailView:
        """Select a node of the current step and open its details.

        Ignored when the timeline is not ready or the node is not in the
        current step.

        Args:
            node_id: Node id picked in the visualization.

        Returns:
            Resulting detail view.
        """
        state = self._timeline.state
        if not isinstance(state, Ready) or state.current_step.find_node(node_id) is None:
            _LOGGER.debug("node_selection_ignored", node_id=node_id)
            return self.detail_view()
        self._selected_node_id = node_id
        self._overlay_kind = "node_details"
        return self.detail_view()

    def show_profile(self) -> DetailView:
        """Open the profile overlay, clearing any node selection."""
        self._selected_node_id = None
        self._overlay_kind = "profile"
        return self.detail_view()

    def dismiss(self) -> DetailView:
        """Close the overlay and clear the selection."""
        self._selected_node_id = None
        self._overlay_kind = "none"
        return self.detail_view()

    def detail_view(self) -> DetailView:
        """Current detail-panel payload."""
        return DetailView(
            selected_node=self._resolve_selected_node(),
            overlay_kind=self._overlay_kind,
        )

    def close(self) -> None:
        """Stop following the timeline."""
        self._unsubscribe()

    def _resolve_selected_node(self) -> GraphNode | None:
        if self._selected_node_id is None:
            return None
        state = self._timeline.state
        if not isinstance(state, Ready):
            return None
        return state.current_step.find_node(self._selected_node_id)

    def _on_timeline_event(self, event: TimelineEvent) -> None:
        if event.kind == "step_changed":
            self._prune_missing_node(event)
            return
        if event.replaces_dataset or event.kind == "failed":
            self._reset(event)

    def _prune_missing_node(self, event: TimelineEvent) -> None:
        if self._selected_node_id is None or not isinstance(event.state, Ready):
            return
        if self._selected_node_id in event.state.current_step.node_ids():
            return
        _LOGGER.debug(
            "selection_cleared",
            node_id=self._selected_node_id,
            reason="node_absent_from_step",
            step_index=event.state.step_index,
        )
        self._selected_node_id = None
        if self._overlay_kind == "node_details":
            self._overlay_kind = "none"

    def _reset(self, event: TimelineEvent) -> None:
        if self._selected_node_id is None and self._overlay_kind == "none":
            return
        _LOGGER.debug(
            "selection_cleared",
            node_id=self._selected_node_id,
            reason=f"{event.cause}_{event.kind}",
        )
        self._selected_node_id = None
        self._overlay_kind = "none"
