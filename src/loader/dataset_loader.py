"""Asynchronous dataset loading.

This module resolves an algorithm id and optional variant id to a dataset
resource, fetches it, and validates it. Load calls share no mutable state,
so concurrent loads for different ids cannot interfere, and every call
re-reads the resource.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence

from core.catalog import find_algorithm, load_catalog
from core.config import StepGraphConfig
from core.errors import DatasetValidationError, StepGraphError
from core.logging_config import get_logger
from core.types import (
    AlgorithmCategory,
    AlgorithmVariant,
    LoadedDataset,
    LoadErrorKind,
    LoadFailure,
    LoadResult,
    ResourceResolution,
)
from dataset.resource_reader import decode_resource, normalize_resource_key, read_resource_text
from dataset.validator import validate_dataset

_LOGGER = get_logger(__name__)

ResourceFetcher = Callable[[str], Awaitable[str]]


def resolve_resource(
    catalog: Sequence[AlgorithmCategory],
    algorithm_id: str,
    variant_id: str | None = None,
) -> ResourceResolution:
    """Resolve the dataset resource for an algorithm request.

    Priority order for algorithms that declare variants:
    1. The variant whose id equals ``variant_id``
    2. The variant marked default
    3. The first variant with a resource reference

    The algorithm id itself is the resource key when the algorithm is
    unknown, declares no variants, or the picked variant has no resource.

    Args:
        catalog: Catalog categories.
        algorithm_id: Requested algorithm id.
        variant_id: Optional requested variant id.

    Returns:
        Resource key, picked variant id, and declared variants.
    """
    metadata = find_algorithm(catalog, algorithm_id)
    if metadata is None or not metadata.variants:
        return ResourceResolution(resource_key=algorithm_id, variant_id=None, variants=())
    variant = _pick_variant(metadata.variants, variant_id)
    if variant is None:
        return ResourceResolution(
            resource_key=algorithm_id,
            variant_id=None,
            variants=metadata.variants,
        )
    resource_key = algorithm_id
    if variant.resource_ref is not None:
        resource_key = normalize_resource_key(variant.resource_ref)
    return ResourceResolution(
        resource_key=resource_key,
        variant_id=variant.variant_id,
        variants=metadata.variants,
    )


def _pick_variant(
    variants: tuple[AlgorithmVariant, ...],
    variant_id: str | None,
) -> AlgorithmVariant | None:
    if variant_id is not None:
        for variant in variants:
            if variant.variant_id == variant_id:
                return variant
    for variant in variants:
        if variant.is_default:
            return variant
    for variant in variants:
        if variant.loadable:
            return variant
    return None


def build_resource_fetcher(config: StepGraphConfig) -> ResourceFetcher:
    """Build the default fetcher reading resources in a worker thread.

    Args:
        config: Runtime configuration selecting local or S3 storage.

    Returns:
        Coroutine function mapping a resource key to its text.
    """

    async def _fetch(resource_key: str) -> str:
        return await asyncio.to_thread(read_resource_text, resource_key, config)

    return _fetch


class DatasetLoader:
    """Request/response dataset loader.

    The loader holds only immutable collaborators: config, catalog, and
    fetcher. Each ``load`` call is independent of every other call.
    """

    def __init__(
        self,
        config: StepGraphConfig,
        catalog: Sequence[AlgorithmCategory] | None = None,
        fetcher: ResourceFetcher | None = None,
    ) -> None:
        """Create a loader.

        Args:
            config: Runtime configuration.
            catalog: Optional catalog; loaded from config when omitted.
            fetcher: Optional resource fetcher; local/S3 reader when omitted.
        """
        self._config = config
        self._catalog = tuple(catalog) if catalog is not None else load_catalog(config.catalog_path)
        self._fetcher = fetcher or build_resource_fetcher(config)

    @property
    def catalog(self) -> tuple[AlgorithmCategory, ...]:
        """Catalog used for variant resolution."""
        return self._catalog

    def resolve(self, algorithm_id: str, variant_id: str | None = None) -> ResourceResolution:
        """Resolve a request against this loader's catalog."""
        return resolve_resource(self._catalog, algorithm_id, variant_id)

    async def load(self, algorithm_id: str, variant_id: str | None = None) -> LoadResult:
        """Fetch and validate the dataset for an algorithm request.

        Args:
            algorithm_id: Requested algorithm id.
            variant_id: Optional requested variant id.

        Returns:
            ``LoadedDataset`` on success, ``LoadFailure`` otherwise. Never raises
            for fetch or validation problems.
        """
        resolution = self.resolve(algorithm_id, variant_id)
        _LOGGER.info(
            "dataset_load_started",
            algorithm_id=algorithm_id,
            requested_variant_id=variant_id,
            resolved_variant_id=resolution.variant_id,
            resource_key=resolution.resource_key,
        )
        try:
            text = await asyncio.wait_for(
                self._fetcher(resolution.resource_key),
                timeout=self._config.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return self._failure(
                algorithm_id,
                resolution,
                "resource_unavailable",
                f"Timed out after {self._config.fetch_timeout_seconds}s fetching dataset "
                f"resource '{resolution.resource_key}'.",
            )
        except StepGraphError as error:
            return self._failure(algorithm_id, resolution, "resource_unavailable", str(error))
        except Exception as error:
            return self._failure(
                algorithm_id,
                resolution,
                "resource_unavailable",
                f"Fetching dataset resource '{resolution.resource_key}' failed: {error}.",
            )
        try:
            dataset = validate_dataset(
                decode_resource(text, resolution.resource_key),
                strict_references=self._config.strict_references,
            )
        except DatasetValidationError as error:
            return self._failure(
                algorithm_id,
                resolution,
                "invalid_schema",
                str(error),
                field_path=error.field_path,
            )
        _LOGGER.info(
            "dataset_loaded",
            algorithm_id=algorithm_id,
            resolved_variant_id=resolution.variant_id,
            resource_key=resolution.resource_key,
            step_count=dataset.step_count,
        )
        return LoadedDataset(
            algorithm_id=algorithm_id,
            dataset=dataset,
            resolved_variant_id=resolution.variant_id,
            variants=resolution.variants,
            resource_key=resolution.resource_key,
        )

    def _failure(
        self,
        algorithm_id: str,
        resolution: ResourceResolution,
        kind: LoadErrorKind,
        message: str,
        field_path: str | None = None,
    ) -> LoadFailure:
        _LOGGER.warning(
            "dataset_load_failed",
            algorithm_id=algorithm_id,
            resource_key=resolution.resource_key,
            kind=kind,
            field_path=field_path,
            message=message,
        )
        return LoadFailure(
            algorithm_id=algorithm_id,
            kind=kind,
            message=message,
            field_path=field_path,
            variant_id=resolution.variant_id,
        )
