"""Shared fixtures for cartograph tests."""

import pathlib

import pytest

from cartograph.index import LocalIndex
from tests.helpers import diamond_packages, make_index


@pytest.fixture
def diamond_index() -> LocalIndex:
    """Index in which X and Y both depend on Z."""
    return make_index(diamond_packages())


@pytest.fixture
def manifest_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a minimal manifest file declaring the diamond roots."""
    manifest = tmp_path / "manifest.yaml"
    manifest.write_text('dependencies:\n  X: "== 1.0.0"\n  Y: ">= 1.0.0"\n')
    return manifest
