"""Public SDK surface for StepGraph.

This module provides a stable import path for presentation collaborators.
It re-exports the session facade, the core components, and typed models.
"""

from __future__ import annotations

from core.catalog import DEFAULT_CATALOG, enabled_algorithms, find_algorithm, load_catalog
from core.config import StepGraphConfig
from core.errors import (
    DatasetValidationError,
    ResourceUnavailableError,
    StepGraphCatalogError,
    StepGraphConfigError,
    StepGraphError,
)
from core.types import (
    AlgorithmDataset,
    AlgorithmStep,
    AlgorithmVariant,
    DetailView,
    GraphNode,
    GraphProjection,
    GraphRelationship,
    LoadedDataset,
    LoadFailure,
    TimelineView,
)
from dataset.validator import is_valid_dataset, validate_dataset
from loader.dataset_loader import DatasetLoader, resolve_resource
from selection.coordinator import SelectionCoordinator
from session.visualizer_session import SessionSnapshot, VisualizerSession
from timeline.state_machine import TimelineController
from timeline.states import Failed, Loading, Ready, TimelineEvent, Uninitialized

__all__ = [
    "AlgorithmDataset",
    "AlgorithmStep",
    "AlgorithmVariant",
    "DEFAULT_CATALOG",
    "DatasetLoader",
    "DatasetValidationError",
    "DetailView",
    "Failed",
    "GraphNode",
    "GraphProjection",
    "GraphRelationship",
    "LoadFailure",
    "LoadedDataset",
    "Loading",
    "Ready",
    "ResourceUnavailableError",
    "SelectionCoordinator",
    "SessionSnapshot",
    "StepGraphCatalogError",
    "StepGraphConfig",
    "StepGraphConfigError",
    "StepGraphError",
    "TimelineController",
    "TimelineEvent",
    "TimelineView",
    "Uninitialized",
    "VisualizerSession",
    "enabled_algorithms",
    "find_algorithm",
    "is_valid_dataset",
    "load_catalog",
    "resolve_resource",
    "validate_dataset",
]
