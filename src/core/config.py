"""Runtime configuration model for StepGraph.

All STEPGRAPH_* environment variables are read and checked here; the
loader, reader and CLI only see the resulting frozen config.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    FALSE_ENV_VALUES,
    TRUE_ENV_VALUES,
)
from core.errors import StepGraphConfigError


@dataclass(frozen=True)
class StepGraphConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory holding dataset JSON files.
        s3_data_uri: Optional ``s3://bucket/prefix`` location of dataset files.
        s3_region: Optional default AWS region for S3 reads.
        s3_profile: Optional AWS profile for boto3 session initialization.
        catalog_path: Optional YAML file overriding the built-in catalog.
        fetch_timeout_seconds: Upper bound for one dataset fetch.
        strict_references: Reject dangling or duplicate ids inside a step.
    """

    data_root: Path
    s3_data_uri: str | None = None
    s3_region: str | None = None
    s3_profile: str | None = None
    catalog_path: Path | None = None
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    strict_references: bool = False

    @classmethod
    def from_env(cls) -> "StepGraphConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            StepGraphConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("STEPGRAPH_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        s3_data_uri = os.getenv("STEPGRAPH_S3_DATA_URI") or None
        if s3_data_uri is not None and not s3_data_uri.startswith("s3://"):
            raise StepGraphConfigError(
                f"Invalid STEPGRAPH_S3_DATA_URI value '{s3_data_uri}': "
                "expected s3://bucket/prefix."
            )
        catalog_value = os.getenv("STEPGRAPH_CATALOG_PATH")
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            s3_data_uri=s3_data_uri,
            s3_region=os.getenv("STEPGRAPH_S3_REGION"),
            s3_profile=os.getenv("STEPGRAPH_S3_PROFILE"),
            catalog_path=Path(catalog_value).expanduser().resolve() if catalog_value else None,
            fetch_timeout_seconds=_parse_fetch_timeout(
                os.getenv("STEPGRAPH_FETCH_TIMEOUT_SECONDS", str(DEFAULT_FETCH_TIMEOUT_SECONDS))
            ),
            strict_references=_parse_flag(
                "STEPGRAPH_STRICT_REFERENCES",
                os.getenv("STEPGRAPH_STRICT_REFERENCES", "false"),
            ),
        )


def _parse_fetch_timeout(raw_value: str) -> float:
    """Parse the fetch timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        StepGraphConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise StepGraphConfigError(
            "Invalid STEPGRAPH_FETCH_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. "
            "Set STEPGRAPH_FETCH_TIMEOUT_SECONDS to a positive number of seconds."
        ) from error
    if timeout <= 0:
        raise StepGraphConfigError(
            f"Invalid STEPGRAPH_FETCH_TIMEOUT_SECONDS value {timeout}: must be greater than zero."
        )
    return timeout


def _parse_flag(variable_name: str, raw_value: str) -> bool:
    normalized_value = raw_value.strip().lower()
    if normalized_value in TRUE_ENV_VALUES:
        return True
    if normalized_value in FALSE_ENV_VALUES:
        return False
    raise StepGraphConfigError(
        f"Invalid {variable_name} value '{raw_value}': expected true or false."
    )
