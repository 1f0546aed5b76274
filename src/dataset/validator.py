"""Snapshot dataset schema validation.

This module is the only boundary where untrusted dataset payloads become
typed models. Checks run in a fixed order and stop at the first failure,
reporting the offending field path.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.constants import ROOT_FIELD_PATH
from core.errors import DatasetValidationError
from core.types import AlgorithmDataset, AlgorithmStep, GraphNode, GraphRelationship


def validate_dataset(raw: object, strict_references: bool = False) -> AlgorithmDataset:
    """Validate a raw dataset payload and build typed models.

    Args:
        raw: Decoded JSON payload of unknown shape.
        strict_references: Also reject duplicate ids and relationships whose
            endpoints are not declared in the same step.

    Returns:
        Validated dataset.

    Raises:
        DatasetValidationError: On the first missing or mistyped field.
    """
    root = _expect_mapping(raw, ROOT_FIELD_PATH)
    title = _required_string(root, "title", "title")
    raw_steps = root.get("steps")
    if raw_steps is None:
        raise DatasetValidationError("steps", "required field is missing.")
    step_rows = _expect_sequence(raw_steps, "steps")
    if len(step_rows) == 0:
        raise DatasetValidationError("steps", "must contain at least one step.")
    steps = tuple(
        _parse_step(step_value, f"steps[{index}]", strict_references)
        for index, step_value in enumerate(step_rows)
    )
    return AlgorithmDataset(
        title=title,
        steps=steps,
        category=_optional_string(root, "category", "category"),
        description=_optional_string(root, "description", "description"),
        directed=_optional_bool(root, "directed", "directed", default=True),
    )


def is_valid_dataset(raw: object) -> bool:
    """Return whether ``raw`` passes default validation."""
    try:
        validate_dataset(raw)
    except DatasetValidationError:
        return False
    return True


def _parse_step(value: object, path: str, strict_references: bool) -> AlgorithmStep:
    step_mapping = _expect_mapping(value, path)
    name = _required_string(step_mapping, "name", f"{path}.name")
    description = _required_string(step_mapping, "description", f"{path}.description")
    node_rows = _expect_sequence(step_mapping.get("nodes"), f"{path}.nodes")
    nodes = tuple(
        _parse_node(node_value, f"{path}.nodes[{index}]")
        for index, node_value in enumerate(node_rows)
    )
    relationship_rows = _expect_sequence(
        step_mapping.get("relationships"),
        f"{path}.relationships",
    )
    relationships = tuple(
        _parse_relationship(relationship_value, f"{path}.relationships[{index}]")
        for index, relationship_value in enumerate(relationship_rows)
    )
    if strict_references:
        _check_step_references(nodes, relationships, path)
    return AlgorithmStep(
        name=name,
        description=description,
        nodes=nodes,
        relationships=relationships,
    )


def _parse_node(value: object, path: str) -> GraphNode:
    node_mapping = _expect_mapping(value, path)
    node_id = _required_string(node_mapping, "id", f"{path}.id")
    captions = _parse_captions(node_mapping.get("captions"), f"{path}.captions", required=True)
    return GraphNode(
        node_id=node_id,
        captions=captions,
        color=_passthrough_string(node_mapping.get("color")),
        size=_passthrough_number(node_mapping.get("size")),
        x=_passthrough_number(node_mapping.get("x")),
        y=_passthrough_number(node_mapping.get("y")),
        attributes=dict(node_mapping),
    )


def _parse_relationship(value: object, path: str) -> GraphRelationship:
    relationship_mapping = _expect_mapping(value, path)
    return GraphRelationship(
        relationship_id=_required_string(relationship_mapping, "id", f"{path}.id"),
        from_id=_required_string(relationship_mapping, "from", f"{path}.from"),
        to_id=_required_string(relationship_mapping, "to", f"{path}.to"),
        captions=_parse_captions(
            relationship_mapping.get("captions"),
            f"{path}.captions",
            required=False,
        ),
        attributes=dict(relationship_mapping),
    )


def _parse_captions(
    value: object,
    path: str,
    required: bool,
) -> tuple[Mapping[str, object], ...]:
    if value is None and not required:
        return ()
    caption_rows = _expect_sequence(value, path)
    captions = []
    for caption in caption_rows:
        # Caption entries are rendering attributes; non-object entries are kept as values.
        if isinstance(caption, Mapping):
            captions.append(dict(caption))
        else:
            captions.append({"value": caption})
    return tuple(captions)


def _check_step_references(
    nodes: tuple[GraphNode, ...],
    relationships: tuple[GraphRelationship, ...],
    path: str,
) -> None:
    node_ids: set[str] = set()
    for index, node in enumerate(nodes):
        if node.node_id in node_ids:
            raise DatasetValidationError(
                f"{path}.nodes[{index}].id",
                f"duplicate node id '{node.node_id}' within the step.",
            )
        node_ids.add(node.node_id)
    relationship_ids: set[str] = set()
    for index, relationship in enumerate(relationships):
        relationship_path = f"{path}.relationships[{index}]"
        if relationship.relationship_id in relationship_ids:
            raise DatasetValidationError(
                f"{relationship_path}.id",
                f"duplicate relationship id '{relationship.relationship_id}' within the step.",
            )
        relationship_ids.add(relationship.relationship_id)
        for endpoint_name, endpoint_id in (
            ("from", relationship.from_id),
            ("to", relationship.to_id),
        ):
            if endpoint_id not in node_ids:
                raise DatasetValidationError(
                    f"{relationship_path}.{endpoint_name}",
                    f"references node '{endpoint_id}' which is not declared in the step.",
                )


def _expect_mapping(value: object, path: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        return value
    raise DatasetValidationError(path, f"expected object, got {_type_name(value)}.")


def _expect_sequence(value: object, path: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise DatasetValidationError(path, f"expected list, got {_type_name(value)}.")


def _required_string(mapping: Mapping[str, object], field_name: str, path: str) -> str:
    raw_value = mapping.get(field_name)
    if isinstance(raw_value, str):
        return raw_value
    raise DatasetValidationError(path, f"expected string, got {_type_name(raw_value)}.")


def _optional_string(mapping: Mapping[str, object], field_name: str, path: str) -> str:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return ""
    if isinstance(raw_value, str):
        return raw_value
    raise DatasetValidationError(path, f"expected string, got {_type_name(raw_value)}.")


def _optional_bool(
    mapping: Mapping[str, object],
    field_name: str,
    path: str,
    default: bool,
) -> bool:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        return raw_value
    raise DatasetValidationError(path, f"expected boolean, got {_type_name(raw_value)}.")


def _passthrough_string(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _passthrough_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _type_name(value: object) -> str:
    if value is None:
        return "nothing"
    return type(value).__name__
