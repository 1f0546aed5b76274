"""Dataset resource readers.

This module fetches dataset JSON documents from a local data root or an
S3 prefix. Every call reads the current content; nothing is cached.
"""

from __future__ import annotations

import json
from contextlib import closing
from pathlib import Path, PurePosixPath
from typing import Any

from core.config import StepGraphConfig
from core.constants import DATASET_FILE_SUFFIX, ROOT_FIELD_PATH
from core.errors import DatasetValidationError, ResourceUnavailableError, StepGraphDependencyError
from core.s3_uri import S3Location, parse_s3_uri


def normalize_resource_key(resource_ref: str) -> str:
    """Strip a trailing ``.json`` suffix from a resource reference.

    Args:
        resource_ref: Catalog file reference or algorithm id.

    Returns:
        Resource key without file extension.
    """
    return resource_ref.removesuffix(DATASET_FILE_SUFFIX)


def read_resource_text(resource_key: str, config: StepGraphConfig) -> str:
    """Read the raw JSON text of a dataset resource.

    Args:
        resource_key: Resource key without extension.
        config: Runtime configuration selecting local or S3 storage.

    Returns:
        Resource document text.

    Raises:
        ResourceUnavailableError: If the key is unsafe or the resource cannot be read.
        StepGraphDependencyError: If S3 storage is configured without boto3.
    """
    relative_path = _resource_relative_path(resource_key)
    if config.s3_data_uri:
        return _read_s3_text(relative_path, config)
    return _read_local_text(config.data_root / relative_path)


def decode_resource(text: str, resource_key: str) -> object:
    """Decode resource text into a JSON payload.

    Args:
        text: Raw resource text.
        resource_key: Resource key, for error context.

    Returns:
        Decoded JSON value of unknown shape.

    Raises:
        DatasetValidationError: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as error:
        if isinstance(error, json.JSONDecodeError):
            detail = f"{error.msg} at line {error.lineno}, column {error.colno}"
        elif isinstance(error, RecursionError):
            detail = "nesting is too deep"
        else:
            detail = str(error)
        raise DatasetValidationError(
            ROOT_FIELD_PATH,
            f"resource '{resource_key}' is not valid JSON ({detail}). "
            "Fix the dataset file and retry.",
        ) from error


def _resource_relative_path(resource_key: str) -> str:
    """Build a safe relative file path for a resource key.

    Args:
        resource_key: Resource key without extension.

    Returns:
        POSIX relative path ending with the dataset suffix.

    Raises:
        ResourceUnavailableError: If the key is empty, absolute, or escapes the root.
    """
    key_path = PurePosixPath(resource_key)
    if not resource_key.strip() or key_path.is_absolute() or ".." in key_path.parts:
        raise ResourceUnavailableError(
            f"Invalid dataset resource key '{resource_key}': "
            "expected a relative name inside the data root."
        )
    return f"{key_path.as_posix()}{DATASET_FILE_SUFFIX}"


def _read_local_text(resource_path: Path) -> str:
    """Read a dataset file from local disk.

    Args:
        resource_path: Absolute dataset file path.

    Returns:
        File text.

    Raises:
        ResourceUnavailableError: If the file is missing or unreadable.
    """
    if not resource_path.is_file():
        raise ResourceUnavailableError(
            f"Dataset resource not found at {resource_path}. "
            "Check STEPGRAPH_DATA_ROOT and the catalog file reference."
        )
    try:
        return resource_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise ResourceUnavailableError(
            f"Failed to read dataset resource at {resource_path}: {error}."
        ) from error


def _read_s3_text(relative_path: str, config: StepGraphConfig) -> str:
    """Read a dataset object from the configured S3 prefix.

    Args:
        relative_path: Object path below the configured prefix.
        config: Runtime configuration with S3 location and session defaults.

    Returns:
        Object body text.

    Raises:
        ResourceUnavailableError: If the object cannot be fetched.
    """
    location = parse_s3_uri(str(config.s3_data_uri))
    object_key = _join_s3_key(location, relative_path)
    s3_client = _create_s3_client(config)
    try:
        response = s3_client.get_object(Bucket=location.bucket, Key=object_key)
        with closing(response["Body"]) as body:
            return str(body.read().decode("utf-8"))
    except Exception as error:
        raise ResourceUnavailableError(
            f"Failed to fetch dataset resource s3://{location.bucket}/{object_key}: {error}."
        ) from error


def _join_s3_key(location: S3Location, relative_path: str) -> str:
    prefix = location.prefix.rstrip("/")
    return f"{prefix}/{relative_path}" if prefix else relative_path


def _create_s3_client(config: StepGraphConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        StepGraphDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise StepGraphDependencyError(
            "S3 dataset storage requires boto3, but it is not installed. "
            "Install boto3 to read datasets from s3:// locations."
        ) from error
    session_kwargs = _build_boto3_session_kwargs(config)
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _build_boto3_session_kwargs(config: StepGraphConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config.

    Args:
        config: Runtime config.

    Returns:
        Session keyword arguments.
    """
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs
