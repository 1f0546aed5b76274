"""Core constants used across StepGraph modules.

Defaults and fixed spellings shared by the config and dataset layers.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path("data")
DATASET_FILE_SUFFIX = ".json"
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0
ROOT_FIELD_PATH = "$"
DEFAULT_NODE_LABEL_PREFIX = "Node"
TRUE_ENV_VALUES = ("1", "true", "yes", "on")
FALSE_ENV_VALUES = ("0", "false", "no", "off", "")
