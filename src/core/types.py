"""Shared typed models.

This module defines immutable data models used by the validator, loader,
timeline, and selection layers to keep interfaces explicit and stable.
Dataset models are only ever built by ``dataset.validator``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

from core.constants import DEFAULT_NODE_LABEL_PREFIX

LoadErrorKind = Literal["resource_unavailable", "invalid_schema"]
OverlayKind = Literal["none", "node_details", "profile"]


@dataclass(frozen=True)
class GraphNode:
    """One node of a step snapshot.

    Attributes:
        node_id: Identifier, unique within its step.
        captions: Caption entries shown by the renderer.
        color: Optional display color.
        size: Optional display size.
        x: Optional fixed x position.
        y: Optional fixed y position.
        attributes: Full raw payload passed through to rendering.
    """

    node_id: str
    captions: tuple[Mapping[str, object], ...] = ()
    color: str | None = None
    size: float | None = None
    x: float | None = None
    y: float | None = None
    attributes: Mapping[str, object] = field(default_factory=dict)

    @property
    def label(self) -> str:
        """Display label: first caption value, else a generic node name."""
        for caption in self.captions:
            value = caption.get("value")
            if isinstance(value, str) and value:
                return value
        return f"{DEFAULT_NODE_LABEL_PREFIX} {self.node_id}"


@dataclass(frozen=True)
class GraphRelationship:
    """One relationship of a step snapshot.

    Attributes:
        relationship_id: Identifier, unique within its step.
        from_id: Source node id.
        to_id: Target node id.
        captions: Caption entries shown by the renderer.
        attributes: Full raw payload passed through to rendering.
    """

    relationship_id: str
    from_id: str
    to_id: str
    captions: tuple[Mapping[str, object], ...] = ()
    attributes: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class AlgorithmStep:
    """One full graph snapshot in an algorithm narrative.

    Attributes:
        name: Short step title.
        description: Markdown explanation of the step.
        nodes: Nodes present at this step.
        relationships: Relationships present at this step.
    """

    name: str
    description: str
    nodes: tuple[GraphNode, ...]
    relationships: tuple[GraphRelationship, ...]

    def node_ids(self) -> frozenset[str]:
        """Return the set of node ids declared in this step."""
        return frozenset(node.node_id for node in self.nodes)

    def find_node(self, node_id: str) -> GraphNode | None:
        """Return the node with ``node_id`` or None when absent."""
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None


@dataclass(frozen=True)
class AlgorithmDataset:
    """Validated dataset describing one algorithm run.

    Attributes:
        title: Dataset title.
        category: Algorithm family label.
        description: Markdown description of the whole run.
        directed: Whether relationships are rendered as directed.
        steps: Ordered, non-empty step snapshots.
    """

    title: str
    steps: tuple[AlgorithmStep, ...]
    category: str = ""
    description: str = ""
    directed: bool = True

    @property
    def step_count(self) -> int:
        """Number of steps in the dataset."""
        return len(self.steps)


@dataclass(frozen=True)
class AlgorithmVariant:
    """Alternative dataset for the same algorithm id.

    Attributes:
        variant_id: Variant identifier.
        name: Display name.
        resource_ref: Dataset resource reference; None for placeholders.
        is_default: Whether this variant is loaded first.
    """

    variant_id: str
    name: str
    resource_ref: str | None = None
    is_default: bool = False

    @property
    def loadable(self) -> bool:
        """Whether the variant points at a dataset resource."""
        return self.resource_ref is not None


@dataclass(frozen=True)
class AlgorithmMetadata:
    """Catalog entry for one algorithm.

    Attributes:
        algorithm_id: Identifier used by navigation and the loader.
        name: Display name.
        enabled: Whether navigation offers the algorithm.
        variants: Optional alternative datasets.
    """

    algorithm_id: str
    name: str
    enabled: bool
    variants: tuple[AlgorithmVariant, ...] = ()


@dataclass(frozen=True)
class AlgorithmCategory:
    """Catalog group of algorithms."""

    category_id: str
    name: str
    algorithms: tuple[AlgorithmMetadata, ...]


@dataclass(frozen=True)
class ResourceResolution:
    """Resolved dataset resource for an algorithm request.

    Attributes:
        resource_key: Key passed to the resource fetcher.
        variant_id: Variant picked by resolution, if any.
        variants: Variants declared by the catalog entry.
    """

    resource_key: str
    variant_id: str | None
    variants: tuple[AlgorithmVariant, ...]


@dataclass(frozen=True)
class LoadedDataset:
    """Successful loader result.

    Attributes:
        algorithm_id: Requested algorithm id.
        dataset: Validated dataset.
        resolved_variant_id: Variant that was loaded, if any.
        variants: Variants declared for the algorithm.
        resource_key: Resource key that was fetched.
    """

    algorithm_id: str
    dataset: AlgorithmDataset
    resolved_variant_id: str | None
    variants: tuple[AlgorithmVariant, ...]
    resource_key: str


@dataclass(frozen=True)
class LoadFailure:
    """Failed loader result.

    Attributes:
        algorithm_id: Requested algorithm id.
        kind: Failure class.
        message: Human-readable explanation.
        field_path: First invalid field for schema failures.
        variant_id: Variant that was requested or resolved.
    """

    algorithm_id: str
    kind: LoadErrorKind
    message: str
    field_path: str | None = None
    variant_id: str | None = None


LoadResult = LoadedDataset | LoadFailure


@dataclass(frozen=True)
class GraphProjection:
    """Node and relationship set handed to the visualization widget."""

    nodes: tuple[GraphNode, ...]
    relationships: tuple[GraphRelationship, ...]
    directed: bool


@dataclass(frozen=True)
class TimelineView:
    """Step navigation payload for the timeline panel."""

    title: str
    category: str
    description: str
    step_index: int
    total_steps: int
    step_names: tuple[str, ...]
    step_descriptions: tuple[str, ...]
    variants: tuple[AlgorithmVariant, ...]
    current_variant_id: str | None


@dataclass(frozen=True)
class DetailView:
    """Overlay payload for the node details panel."""

    selected_node: GraphNode | None
    overlay_kind: OverlayKind

    @property
    def visible(self) -> bool:
        """Whether the overlay panel should be shown."""
        return self.overlay_kind != "none"
