"""Cartograph: transitive dependency version resolution for project manifests."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
