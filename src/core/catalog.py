"""Static algorithm catalog and YAML catalog parsing.

This module owns the list of algorithms navigation can offer and the
variants each algorithm declares. The built-in catalog can be replaced
by a YAML file with the same shape.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, cast

import yaml

from core.errors import StepGraphCatalogError
from core.types import AlgorithmCategory, AlgorithmMetadata, AlgorithmVariant


def _algorithm(
    algorithm_id: str,
    name: str,
    enabled: bool = False,
    variants: tuple[AlgorithmVariant, ...] = (),
) -> AlgorithmMetadata:
    return AlgorithmMetadata(
        algorithm_id=algorithm_id,
        name=name,
        enabled=enabled,
        variants=variants,
    )


DEFAULT_CATALOG: tuple[AlgorithmCategory, ...] = (
    AlgorithmCategory(
        category_id="pathfinding",
        name="Path Finding",
        algorithms=(
            _algorithm("dijkstra", "Dijkstra"),
            _algorithm("astar", "A*"),
            _algorithm("yens", "Yen's K-shortest paths"),
            _algorithm("allshortestpaths", "All Shortest Paths"),
        ),
    ),
    AlgorithmCategory(
        category_id="centrality",
        name="Centrality",
        algorithms=(
            _algorithm("betweenness", "Betweenness Centrality"),
            _algorithm("closeness", "Closeness Centrality"),
            _algorithm("degree", "Degree Centrality"),
            _algorithm("eigenvector", "Eigenvector Centrality"),
            _algorithm("pagerank", "PageRank"),
        ),
    ),
    AlgorithmCategory(
        category_id="community",
        name="Community Detection",
        algorithms=(
            _algorithm(
                "louvain",
                "Louvain",
                enabled=True,
                variants=(
                    AlgorithmVariant(
                        variant_id="simple",
                        name="Simple graph",
                        resource_ref="louvain.json",
                        is_default=True,
                    ),
                    AlgorithmVariant(variant_id="karate", name="Karate club"),
                ),
            ),
            _algorithm("leiden", "Leiden"),
            _algorithm("weakly-connected", "Weakly Connected Components"),
            _algorithm("strongly-connected", "Strongly Connected Components"),
            _algorithm("triangle-count", "Triangle Count"),
            _algorithm("local-clustering", "Local Clustering Coefficient"),
        ),
    ),
    AlgorithmCategory(
        category_id="similarity",
        name="Similarity",
        algorithms=(
            _algorithm("node-similarity", "Node Similarity"),
            _algorithm("jaccard", "Jaccard Similarity"),
            _algorithm("cosine", "Cosine Similarity"),
            _algorithm("pearson", "Pearson Similarity"),
        ),
    ),
    AlgorithmCategory(
        category_id="link-prediction",
        name="Link Prediction",
        algorithms=(
            _algorithm("adamic-adar", "Adamic Adar"),
            _algorithm("common-neighbors", "Common Neighbors"),
            _algorithm("preferential-attachment", "Preferential Attachment"),
            _algorithm("resource-allocation", "Resource Allocation"),
        ),
    ),
)


def find_algorithm(
    catalog: Sequence[AlgorithmCategory],
    algorithm_id: str,
) -> AlgorithmMetadata | None:
    """Look up algorithm metadata by id across all categories.

    Args:
        catalog: Catalog categories to search.
        algorithm_id: Algorithm identifier.

    Returns:
        First matching metadata entry, or None when unknown.
    """
    for category in catalog:
        for algorithm in category.algorithms:
            if algorithm.algorithm_id == algorithm_id:
                return algorithm
    return None


def enabled_algorithms(catalog: Sequence[AlgorithmCategory]) -> tuple[AlgorithmMetadata, ...]:
    """Return algorithms navigation may select, in catalog order."""
    return tuple(
        algorithm
        for category in catalog
        for algorithm in category.algorithms
        if algorithm.enabled
    )


def load_catalog(catalog_path: Path | None) -> tuple[AlgorithmCategory, ...]:
    """Load a YAML catalog, or return the built-in catalog.

    Args:
        catalog_path: Optional YAML catalog path.

    Returns:
        Parsed catalog categories.

    Raises:
        StepGraphCatalogError: If the file is missing or malformed.
    """
    if catalog_path is None:
        return DEFAULT_CATALOG
    payload = _load_yaml_payload(catalog_path)
    root_mapping = _expect_mapping(payload, "catalog root")
    raw_categories = root_mapping.get("categories")
    if raw_categories is None:
        raise StepGraphCatalogError(
            f"Catalog at {catalog_path} is missing 'categories'. Add a list of categories."
        )
    category_rows = _expect_sequence(raw_categories, "catalog categories")
    categories = tuple(
        _parse_category(row, index) for index, row in enumerate(category_rows)
    )
    _validate_unique_algorithm_ids(categories)
    return categories


def _load_yaml_payload(catalog_path: Path) -> object:
    if not catalog_path.exists():
        raise StepGraphCatalogError(
            f"Catalog file does not exist at {catalog_path}. "
            "Provide a valid STEPGRAPH_CATALOG_PATH or unset it."
        )
    try:
        payload = cast(object, yaml.safe_load(catalog_path.read_text(encoding="utf-8")))
    except OSError as error:
        raise StepGraphCatalogError(
            f"Failed to read catalog at {catalog_path}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise StepGraphCatalogError(
            f"Failed to parse YAML catalog at {catalog_path}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise StepGraphCatalogError(f"Catalog at {catalog_path} is empty. Define 'categories'.")
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise StepGraphCatalogError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise StepGraphCatalogError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise StepGraphCatalogError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _required_string(mapping: Mapping[str, object], field_name: str, context: str) -> str:
    raw_value = mapping.get(field_name)
    if isinstance(raw_value, str) and raw_value.strip():
        return raw_value.strip()
    raise StepGraphCatalogError(f"Invalid {context}: field '{field_name}' must be a string.")


def _optional_bool(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
    default: bool,
) -> bool:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        return raw_value
    raise StepGraphCatalogError(f"Invalid {context}: field '{field_name}' must be a boolean.")


def _parse_category(value: object, index: int) -> AlgorithmCategory:
    context = f"catalog category #{index + 1}"
    mapping = _expect_mapping(value, context)
    raw_algorithms = _expect_sequence(mapping.get("algorithms", []), f"{context} algorithms")
    return AlgorithmCategory(
        category_id=_required_string(mapping, "id", context),
        name=_required_string(mapping, "name", context),
        algorithms=tuple(
            _parse_algorithm(row, f"{context} algorithm #{position + 1}")
            for position, row in enumerate(raw_algorithms)
        ),
    )


def _parse_algorithm(value: object, context: str) -> AlgorithmMetadata:
    mapping = _expect_mapping(value, context)
    raw_variants = _expect_sequence(mapping.get("variants", []), f"{context} variants")
    variants = tuple(
        _parse_variant(row, f"{context} variant #{position + 1}")
        for position, row in enumerate(raw_variants)
    )
    default_count = sum(1 for variant in variants if variant.is_default)
    if default_count > 1:
        raise StepGraphCatalogError(
            f"Invalid {context}: {default_count} variants are marked default. Mark at most one."
        )
    return AlgorithmMetadata(
        algorithm_id=_required_string(mapping, "id", context),
        name=_required_string(mapping, "name", context),
        enabled=_optional_bool(mapping, "enabled", context, default=False),
        variants=variants,
    )


def _parse_variant(value: object, context: str) -> AlgorithmVariant:
    mapping = _expect_mapping(value, context)
    raw_file = mapping.get("file")
    if raw_file is not None and not isinstance(raw_file, str):
        raise StepGraphCatalogError(f"Invalid {context}: field 'file' must be a string.")
    return AlgorithmVariant(
        variant_id=_required_string(mapping, "id", context),
        name=_required_string(mapping, "name", context),
        resource_ref=(raw_file.strip() or None) if isinstance(raw_file, str) else None,
        is_default=_optional_bool(mapping, "default", context, default=False),
    )


def _validate_unique_algorithm_ids(categories: tuple[AlgorithmCategory, ...]) -> None:
    seen_ids: set[str] = set()
    for category in categories:
        for algorithm in category.algorithms:
            if algorithm.algorithm_id in seen_ids:
                raise StepGraphCatalogError(
                    f"Catalog declares algorithm id '{algorithm.algorithm_id}' more than once."
                )
            seen_ids.add(algorithm.algorithm_id)
