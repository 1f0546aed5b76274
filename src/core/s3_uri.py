"""S3 URI parsing helpers.

This module centralizes S3 URI parsing for dataset resource locations.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import StepGraphConfigError


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    prefix: str


def parse_s3_uri(uri: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket`` or ``s3://bucket/prefix``.

    Returns:
        Parsed bucket and prefix pair; prefix may be empty.

    Raises:
        StepGraphConfigError: If the URI has no bucket.
    """
    if not uri.startswith("s3://"):
        _raise_uri_error(uri)
    stripped_uri = uri.removeprefix("s3://")
    bucket, _, prefix = stripped_uri.partition("/")
    if not bucket:
        _raise_uri_error(uri)
    return S3Location(bucket=bucket, prefix=prefix)


def _raise_uri_error(uri: str) -> None:
    raise StepGraphConfigError(
        f"Invalid S3 URI '{uri}': expected s3://bucket/prefix. Provide at least a bucket."
    )
