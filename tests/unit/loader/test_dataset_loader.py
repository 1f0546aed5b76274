"""Unit tests for variant resolution and asynchronous dataset loading."""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from core.config import StepGraphConfig
from core.types import (
    AlgorithmCategory,
    AlgorithmMetadata,
    AlgorithmVariant,
    LoadedDataset,
    LoadFailure,
)
from loader.dataset_loader import DatasetLoader, resolve_resource
from tests.dataset_payloads import StaticFetcher, dataset_text

_VARIANTS = (
    AlgorithmVariant("small", "Small graph", resource_ref="louvain-small.json", is_default=True),
    AlgorithmVariant("large", "Large graph", resource_ref="louvain-large.json"),
    AlgorithmVariant("planned", "Planned graph"),
)
_CATALOG = (
    AlgorithmCategory(
        category_id="community",
        name="Community Detection",
        algorithms=(AlgorithmMetadata("louvain", "Louvain", True, _VARIANTS),),
    ),
)


def test_resolve_resource_prefers_requested_variant() -> None:
    """An existing requested variant should win over the default."""
    resolution = resolve_resource(_CATALOG, "louvain", "large")

    assert (resolution.resource_key, resolution.variant_id) == ("louvain-large", "large")


def test_resolve_resource_falls_back_to_default_variant() -> None:
    """Missing or unknown variant ids should resolve to the default."""
    implicit = resolve_resource(_CATALOG, "louvain")
    unknown = resolve_resource(_CATALOG, "louvain", "missing")

    assert (implicit.resource_key, unknown.resource_key) == ("louvain-small", "louvain-small")
    assert implicit.variants == _VARIANTS


def test_resolve_resource_uses_first_loadable_without_default() -> None:
    """Without a default, the first variant with a resource is picked."""
    catalog = (
        AlgorithmCategory(
            category_id="community",
            name="Community Detection",
            algorithms=(
                AlgorithmMetadata(
                    "louvain",
                    "Louvain",
                    True,
                    (_VARIANTS[2], replace(_VARIANTS[1], is_default=False)),
                ),
            ),
        ),
    )

    resolution = resolve_resource(catalog, "louvain")

    assert (resolution.resource_key, resolution.variant_id) == ("louvain-large", "large")


def test_resolve_resource_uses_algorithm_id_for_unknown_algorithm() -> None:
    """Algorithms outside the catalog are fetched by their own id."""
    resolution = resolve_resource(_CATALOG, "aggregation")

    assert resolution.resource_key == "aggregation"
    assert (resolution.variant_id, resolution.variants) == (None, ())


def test_resolve_resource_uses_algorithm_id_for_placeholder_variant() -> None:
    """A requested variant without a resource falls back to the algorithm id."""
    resolution = resolve_resource(_CATALOG, "louvain", "planned")

    assert (resolution.resource_key, resolution.variant_id) == ("louvain", "planned")


def test_load_returns_validated_dataset(config: StepGraphConfig) -> None:
    """Successful loads should carry the dataset and resolved variant."""
    fetcher = StaticFetcher({"louvain-small": dataset_text("Small", ["a", "b"], ["a"])})
    loader = DatasetLoader(config, catalog=_CATALOG, fetcher=fetcher)

    result = asyncio.run(loader.load("louvain"))

    assert isinstance(result, LoadedDataset)
    assert (result.dataset.title, result.dataset.step_count) == ("Small", 2)
    assert (result.resolved_variant_id, result.resource_key) == ("small", "louvain-small")
    assert result.variants == _VARIANTS


def test_load_reports_unknown_algorithm_as_unavailable(config: StepGraphConfig) -> None:
    """Missing resources should become failure results instead of exceptions."""
    loader = DatasetLoader(config, catalog=_CATALOG)

    result = asyncio.run(loader.load("does-not-exist"))

    assert isinstance(result, LoadFailure)
    assert (result.kind, result.algorithm_id) == ("resource_unavailable", "does-not-exist")
    assert result.field_path is None


def test_load_reports_schema_violation_with_field_path(config: StepGraphConfig) -> None:
    """Validation failures should name the first invalid field."""
    fetcher = StaticFetcher({"louvain-small": '{"title": "No steps"}'})
    loader = DatasetLoader(config, catalog=_CATALOG, fetcher=fetcher)

    result = asyncio.run(loader.load("louvain"))

    assert isinstance(result, LoadFailure)
    assert (result.kind, result.field_path, result.variant_id) == (
        "invalid_schema",
        "steps",
        "small",
    )


def test_load_reports_malformed_json_at_root(config: StepGraphConfig) -> None:
    """Unparsable documents should fail schema validation at the root."""
    fetcher = StaticFetcher({"louvain-small": '{"title": '})
    loader = DatasetLoader(config, catalog=_CATALOG, fetcher=fetcher)

    result = asyncio.run(loader.load("louvain"))

    assert isinstance(result, LoadFailure)
    assert (result.kind, result.field_path) == ("invalid_schema", "$")


def test_load_reports_timeout_as_unavailable(config: StepGraphConfig) -> None:
    """Fetches exceeding the configured timeout should fail cleanly."""

    async def _slow_fetch(resource_key: str) -> str:
        await asyncio.sleep(5)
        return dataset_text("Late", ["a"])

    loader = DatasetLoader(
        replace(config, fetch_timeout_seconds=0.01),
        catalog=_CATALOG,
        fetcher=_slow_fetch,
    )

    result = asyncio.run(loader.load("louvain"))

    assert isinstance(result, LoadFailure)
    assert result.kind == "resource_unavailable"
    assert "Timed out" in result.message


def test_load_reports_unexpected_fetch_errors_as_unavailable(config: StepGraphConfig) -> None:
    """Arbitrary fetcher exceptions should not escape the loader."""

    async def _broken_fetch(resource_key: str) -> str:
        raise ConnectionError("connection reset")

    loader = DatasetLoader(config, catalog=_CATALOG, fetcher=_broken_fetch)

    result = asyncio.run(loader.load("louvain"))

    assert isinstance(result, LoadFailure)
    assert result.kind == "resource_unavailable"
    assert "connection reset" in result.message


def test_load_reads_local_resource_again_on_every_call(config: StepGraphConfig) -> None:
    """Reloading should observe content changed between calls."""
    resource_file = config.data_root / "louvain-small.json"
    resource_file.write_text(dataset_text("Before", ["a"]), encoding="utf-8")
    loader = DatasetLoader(config, catalog=_CATALOG)

    first = asyncio.run(loader.load("louvain"))
    resource_file.write_text(dataset_text("After", ["a"]), encoding="utf-8")
    second = asyncio.run(loader.load("louvain"))

    assert isinstance(first, LoadedDataset) and isinstance(second, LoadedDataset)
    assert (first.dataset.title, second.dataset.title) == ("Before", "After")


def test_load_runs_concurrent_requests_independently(config: StepGraphConfig) -> None:
    """Concurrent loads for different ids should each get their own result."""
    fetcher = StaticFetcher(
        {
            "louvain-small": dataset_text("Small", ["a"]),
            "louvain-large": dataset_text("Large", ["a", "b"]),
        }
    )
    loader = DatasetLoader(config, catalog=_CATALOG, fetcher=fetcher)

    async def _load_both() -> tuple[object, object]:
        small, large = await asyncio.gather(
            loader.load("louvain", "small"),
            loader.load("louvain", "large"),
        )
        return small, large

    small, large = asyncio.run(_load_both())

    assert isinstance(small, LoadedDataset) and isinstance(large, LoadedDataset)
    assert (small.dataset.title, large.dataset.title) == ("Small", "Large")
    assert sorted(fetcher.requested_keys) == ["louvain-large", "louvain-small"]


@pytest.mark.parametrize(
    "text",
    [
        '{"title": "Huge", "steps": [{"name": "s", "description": "d", "nodes": '
        '[{"id": "a", "captions": [], "size": ' + "9" * 5000 + '}], "relationships": []}]}',
        "[" * 100000 + "]" * 100000,
    ],
    ids=["oversized-integer", "deep-nesting"],
)
def test_load_reports_undecodable_json_as_invalid_schema(
    config: StepGraphConfig,
    text: str,
) -> None:
    """Decoder limit errors should become failures instead of escaping the loader."""
    loader = DatasetLoader(config, catalog=_CATALOG, fetcher=StaticFetcher({"hostile": text}))

    result = asyncio.run(loader.load("hostile"))

    assert isinstance(result, LoadFailure)
    assert (result.kind, result.field_path) == ("invalid_schema", "$")
