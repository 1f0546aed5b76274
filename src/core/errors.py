"""StepGraph exception hierarchy.

Fetch and validation errors are raised by the dataset layer and turned
into failure results by the loader; the other types surface to callers.
"""

from __future__ import annotations


class StepGraphError(Exception):
    """Base exception for all StepGraph failures."""


class StepGraphConfigError(StepGraphError):
    """Raised for invalid runtime configuration."""


class StepGraphCatalogError(StepGraphError):
    """Raised for invalid algorithm catalog definitions."""


class StepGraphDependencyError(StepGraphError):
    """Raised when an optional runtime dependency is missing."""


class ResourceUnavailableError(StepGraphError):
    """Raised when a dataset resource cannot be fetched."""


class DatasetValidationError(StepGraphError):
    """Raised when a dataset payload does not match the snapshot schema.

    Attributes:
        field_path: Path of the first offending field, e.g. ``steps[1].nodes[0].id``.
    """

    def __init__(self, field_path: str, message: str) -> None:
        super().__init__(f"Invalid dataset field '{field_path}': {message}")
        self.field_path = field_path
        self.reason = message
