"""Typed timeline states and transition events.

This module defines the four timeline states and the event payload sent to
observers on every accepted transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from core.types import (
    AlgorithmDataset,
    AlgorithmStep,
    AlgorithmVariant,
    GraphProjection,
    LoadFailure,
    TimelineView,
)

TimelineEventKind = Literal["loading", "loaded", "step_changed", "failed"]
TransitionCause = Literal["algorithm", "variant", "reload", "step"]
DATASET_REPLACING_CAUSES: tuple[TransitionCause, ...] = ("algorithm", "variant", "reload")


@dataclass(frozen=True)
class Uninitialized:
    """No algorithm has been requested yet."""


@dataclass(frozen=True)
class Loading:
    """A dataset load is in flight."""

    algorithm_id: str
    variant_id: str | None


@dataclass(frozen=True)
class Ready:
    """A validated dataset is active.

    Attributes:
        algorithm_id: Active algorithm id.
        dataset: Active dataset, never mutated.
        variant_id: Variant the dataset was loaded from, if any.
        step_index: Current step, always within ``dataset.steps``.
        variants: Variants declared for the algorithm.
    """

    algorithm_id: str
    dataset: AlgorithmDataset
    variant_id: str | None
    step_index: int
    variants: tuple[AlgorithmVariant, ...] = ()

    @property
    def current_step(self) -> AlgorithmStep:
        """Step snapshot at ``step_index``."""
        return self.dataset.steps[self.step_index]

    def projection(self) -> GraphProjection:
        """Build the render projection for the current step."""
        step = self.current_step
        return GraphProjection(
            nodes=step.nodes,
            relationships=step.relationships,
            directed=self.dataset.directed,
        )

    def timeline_view(self) -> TimelineView:
        """Build the timeline panel payload for this state."""
        return TimelineView(
            title=self.dataset.title,
            category=self.dataset.category,
            description=self.dataset.description,
            step_index=self.step_index,
            total_steps=self.dataset.step_count,
            step_names=tuple(step.name for step in self.dataset.steps),
            step_descriptions=tuple(step.description for step in self.dataset.steps),
            variants=self.variants,
            current_variant_id=self.variant_id,
        )


@dataclass(frozen=True)
class Failed:
    """The latest load request failed."""

    algorithm_id: str
    failure: LoadFailure

    @property
    def message(self) -> str:
        """User-facing failure message."""
        return f"Algorithm '{self.algorithm_id}' failed to load: {self.failure.message}"


TimelineState = Uninitialized | Loading | Ready | Failed


@dataclass(frozen=True)
class TimelineEvent:
    """One accepted timeline transition.

    Attributes:
        kind: Transition kind.
        cause: Operation that caused the transition.
        state: State after the transition.
        previous: State before the transition.
    """

    kind: TimelineEventKind
    cause: TransitionCause
    state: TimelineState
    previous: TimelineState

    @property
    def replaces_dataset(self) -> bool:
        """Whether the transition leaves the previous dataset behind."""
        return self.cause in DATASET_REPLACING_CAUSES

    @property
    def projection(self) -> GraphProjection | None:
        """Render projection when the new state is ready."""
        if isinstance(self.state, Ready):
            return self.state.projection()
        return None
