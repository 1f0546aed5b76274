"""Step timeline state machine.

This module owns the active dataset, variant, and step index. Loads are
asynchronous and last-request-wins: a load that resolves after a newer
request was issued is discarded. Step navigation is synchronous and only
acts on a ready timeline.
"""

from __future__ import annotations

from typing import Callable

from core.logging_config import get_logger
from core.types import GraphProjection, LoadFailure, TimelineView
from loader.dataset_loader import DatasetLoader
from timeline.states import (
    Failed,
    Loading,
    Ready,
    TimelineEvent,
    TimelineEventKind,
    TimelineState,
    TransitionCause,
    Uninitialized,
)

_LOGGER = get_logger(__name__)

TimelineListener = Callable[[TimelineEvent], None]


class TimelineController:
    """Owner of timeline state and its transitions."""

    def __init__(self, loader: DatasetLoader) -> None:
        """Create an uninitialized timeline.

        Args:
            loader: Dataset loader used by every load transition.
        """
        self._loader = loader
        self._state: TimelineState = Uninitialized()
        self._listeners: list[TimelineListener] = []
        self._latest_request = 0

    @property
    def state(self) -> TimelineState:
        """Current timeline state."""
        return self._state

    @property
    def loader(self) -> DatasetLoader:
        """Loader backing this timeline."""
        return self._loader

    def subscribe(self, listener: TimelineListener) -> Callable[[], None]:
        """Register a transition listener.

        Args:
            listener: Callable invoked synchronously with each event.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def select_algorithm(self, algorithm_id: str) -> TimelineState:
        """Load an algorithm's default dataset from any state.

        Args:
            algorithm_id: Algorithm id supplied by navigation.

        Returns:
            State after the load resolves, or the current state when the
            result was superseded by a newer request.
        """
        return await self._load(algorithm_id, None, "algorithm")

    async def select_variant(self, variant_id: str) -> TimelineState:
        """Switch the ready timeline to another variant.

        Unknown variants and variants without a resource are ignored.

        Args:
            variant_id: Variant id from the timeline panel.

        Returns:
            State after the load resolves, or the unchanged state.
        """
        state = self._state
        if not isinstance(state, Ready):
            _LOGGER.debug("variant_selection_ignored", variant_id=variant_id, reason="not_ready")
            return state
        variant = next(
            (item for item in state.variants if item.variant_id == variant_id),
            None,
        )
        if variant is None or not variant.loadable:
            _LOGGER.debug(
                "variant_selection_ignored",
                algorithm_id=state.algorithm_id,
                variant_id=variant_id,
                reason="unknown_variant" if variant is None else "no_resource",
            )
            return state
        return await self._load(state.algorithm_id, variant_id, "variant")

    def go_to_step(self, step_index: int) -> TimelineState:
        """Move to a step, clamped to the dataset bounds.

        Args:
            step_index: Requested zero-based step index.

        Returns:
            Resulting state; unchanged when not ready or already at the step.
        """
        state = self._state
        if not isinstance(state, Ready):
            return state
        clamped_index = max(0, min(step_index, state.dataset.step_count - 1))
        if clamped_index == state.step_index:
            return state
        next_state = Ready(
            algorithm_id=state.algorithm_id,
            dataset=state.dataset,
            variant_id=state.variant_id,
            step_index=clamped_index,
            variants=state.variants,
        )
        _LOGGER.debug(
            "timeline_step_changed",
            algorithm_id=state.algorithm_id,
            requested_step=step_index,
            step_index=clamped_index,
        )
        self._transition(next_state, "step_changed", "step")
        return next_state

    def advance(self, delta: int = 1) -> TimelineState:
        """Move ``delta`` steps forward (negative moves back)."""
        state = self._state
        if not isinstance(state, Ready):
            return state
        return self.go_to_step(state.step_index + delta)

    async def retry(self) -> TimelineState:
        """Re-issue the failed algorithm request.

        Returns:
            State after the retried load, or the unchanged state when the
            timeline has not failed.
        """
        state = self._state
        if not isinstance(state, Failed):
            return state
        return await self.select_algorithm(state.algorithm_id)

    async def reload(self) -> TimelineState:
        """Re-run the loader for the current algorithm and variant.

        The reloaded dataset replaces the active one and starts at step 0.

        Returns:
            State after the reload resolves, or the unchanged state when
            there is nothing to reload.
        """
        state = self._state
        if isinstance(state, Ready):
            return await self._load(state.algorithm_id, state.variant_id, "reload")
        if isinstance(state, Failed):
            return await self._load(state.algorithm_id, state.failure.variant_id, "reload")
        return state

    def graph_projection(self) -> GraphProjection | None:
        """Current render projection, or None when not ready."""
        state = self._state
        if isinstance(state, Ready):
            return state.projection()
        return None

    def timeline_view(self) -> TimelineView | None:
        """Current timeline panel payload, or None when not ready."""
        state = self._state
        if isinstance(state, Ready):
            return state.timeline_view()
        return None

    def failure_message(self) -> str | None:
        """User-facing failure message, or None when not failed."""
        state = self._state
        if isinstance(state, Failed):
            return state.message
        return None

    async def _load(
        self,
        algorithm_id: str,
        variant_id: str | None,
        cause: TransitionCause,
    ) -> TimelineState:
        self._latest_request += 1
        request_token = self._latest_request
        self._transition(Loading(algorithm_id=algorithm_id, variant_id=variant_id), "loading", cause)
        result = await self._loader.load(algorithm_id, variant_id)
        if request_token != self._latest_request:
            _LOGGER.info(
                "stale_load_discarded",
                algorithm_id=algorithm_id,
                variant_id=variant_id,
                request_token=request_token,
                latest_request=self._latest_request,
            )
            return self._state
        if isinstance(result, LoadFailure):
            self._transition(Failed(algorithm_id=algorithm_id, failure=result), "failed", cause)
            return self._state
        ready_state = Ready(
            algorithm_id=algorithm_id,
            dataset=result.dataset,
            variant_id=result.resolved_variant_id,
            step_index=0,
            variants=result.variants,
        )
        self._transition(ready_state, "loaded", cause)
        return self._state

    def _transition(
        self,
        next_state: TimelineState,
        kind: TimelineEventKind,
        cause: TransitionCause,
    ) -> None:
        previous = self._state
        self._state = next_state
        event = TimelineEvent(kind=kind, cause=cause, state=next_state, previous=previous)
        for listener in tuple(self._listeners):
            listener(event)
