"""Shared fixtures for CLI tests.

Provides temporary manifest and index files for the diamond scenario in
both its satisfiable and its conflicting form.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

DIAMOND_INDEX = """\
packages:
  X:
    "1.0.0":
      dependencies:
        Z: "== 2.0.0"
  Y:
    "1.0.0":
      dependencies:
        Z: "{y_requires_z}"
  Z:
    "1.0.0":
    "2.0.0":
"""


@pytest.fixture
def runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """A manifest declaring X == 1.0.0 and Y >= 1.0.0."""
    path = tmp_path / "deps.yaml"
    path.write_text('dependencies:\n  X: "== 1.0.0"\n  Y: ">= 1.0.0"\n')
    return path


@pytest.fixture
def empty_manifest_file(tmp_path: Path) -> Path:
    """A manifest with no dependencies."""
    path = tmp_path / "empty.yaml"
    path.write_text("dependencies: {}\n")
    return path


@pytest.fixture
def index_file(tmp_path: Path) -> Path:
    """An index in which the diamond resolves to Z 2.0.0."""
    path = tmp_path / "index.yaml"
    path.write_text(DIAMOND_INDEX.format(y_requires_z=">= 1.5.0"))
    return path


@pytest.fixture
def conflicting_index_file(tmp_path: Path) -> Path:
    """An index in which X and Y require different exact versions of Z."""
    path = tmp_path / "conflicting.yaml"
    path.write_text(DIAMOND_INDEX.format(y_requires_z="== 1.0.0"))
    return path
