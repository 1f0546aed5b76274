"""Unit tests for CLI command handling."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from cli.main import main
from tests.fixture_paths import fixture_path

_BUNDLED_DATA_ROOT = Path(__file__).resolve().parents[3] / "data"


@pytest.fixture(autouse=True)
def _clear_stepgraph_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for variable_name in (
        "STEPGRAPH_DATA_ROOT",
        "STEPGRAPH_S3_DATA_URI",
        "STEPGRAPH_CATALOG_PATH",
        "STEPGRAPH_FETCH_TIMEOUT_SECONDS",
        "STEPGRAPH_STRICT_REFERENCES",
    ):
        monkeypatch.delenv(variable_name, raising=False)


def test_cli_validate_reports_summary_for_valid_dataset(capsys) -> None:
    """Validate should print counts for a valid dataset."""
    exit_code = main(["validate", str(fixture_path("datasets/minimal.json"))])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0
    assert output == "valid\ttitle=x\tsteps=1\tnodes=1\trelationships=0"


def test_cli_validate_reports_first_invalid_field(capsys) -> None:
    """Validate should name the failing field path."""
    exit_code = main(["validate", str(fixture_path("datasets/missing_steps.json"))])
    output = capsys.readouterr().out.strip()

    assert exit_code == 1
    assert output.startswith("invalid\tfield=steps\t")


def test_cli_validate_reports_malformed_json_at_root(capsys) -> None:
    """Unparsable files fail at the root path."""
    exit_code = main(["validate", str(fixture_path("datasets/broken.json"))])
    output = capsys.readouterr().out.strip()

    assert exit_code == 1
    assert output.startswith("invalid\tfield=$\t")


def test_cli_validate_strict_flag_checks_references(capsys) -> None:
    """Dangling endpoints only fail when strict checks are requested."""
    dataset_file = str(fixture_path("datasets/dangling_reference.json"))

    relaxed_exit = main(["validate", dataset_file])
    capsys.readouterr()
    strict_exit = main(["validate", dataset_file, "--strict"])
    strict_output = capsys.readouterr().out.strip()

    assert (relaxed_exit, strict_exit) == (0, 1)
    assert strict_output.startswith("invalid\tfield=steps[0].relationships[0].to\t")


def test_cli_validate_reports_missing_file(tmp_path: Path, capsys) -> None:
    """Missing files are reported on stderr."""
    exit_code = main(["validate", str(tmp_path / "absent.json")])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "not found" in captured.err and captured.out == ""


def test_cli_catalog_lists_enabled_algorithms(capsys) -> None:
    """Built-in catalog should offer louvain with its default variant marked."""
    exit_code = main(["catalog", "--enabled-only"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0
    assert output.splitlines() == ["community\tlouvain\tenabled\tsimple*,karate"]


def test_cli_catalog_reads_yaml_catalog(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    """A catalog file configured through env should replace the built-in one."""
    monkeypatch.setenv("STEPGRAPH_CATALOG_PATH", str(fixture_path("catalog/valid_catalog.yaml")))

    exit_code = main(["catalog"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert lines == [
        "community\tlouvain\tenabled\tsmall*,large,planned",
        "community\tleiden\tdisabled\t-",
    ]


def test_cli_steps_lists_bundled_louvain_dataset(capsys) -> None:
    """The bundled louvain dataset should load through the default catalog."""
    exit_code = main(["--data-root", str(_BUNDLED_DATA_ROOT), "steps", "louvain"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert lines[0] == "Louvain Community Detection\tvariant=simple\tsteps=4"
    assert lines[1] == "* 0\tInitial Graph"


def test_cli_steps_prints_selected_step_projection(tmp_path: Path, capsys) -> None:
    """Selecting a step should mark it and print its projection."""
    shutil.copy(fixture_path("datasets/aggregation.json"), tmp_path / "aggregation.json")

    exit_code = main(["--data-root", str(tmp_path), "steps", "aggregation", "--step", "1"])
    output = capsys.readouterr().out
    header, *rest = output.split("\n", 4)
    payload = json.loads(rest[-1])

    assert exit_code == 0
    assert header == "Aggregation\tvariant=-\tsteps=3"
    assert rest[1] == "* 1\tAggregated"
    assert (payload["step_index"], payload["directed"]) == (1, False)
    assert [node["id"] for node in payload["nodes"]] == ["c1", "c2"]


def test_cli_steps_reports_load_failure(tmp_path: Path, capsys) -> None:
    """Unknown datasets fail with the user-facing message."""
    exit_code = main(["--data-root", str(tmp_path), "steps", "ghost"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 1
    assert output.startswith("Algorithm 'ghost' failed to load:")
