"""Loading manifests from YAML.

A manifest file maps dependency names to specifier text::

    dependencies:
      x: "== 1.0.0"
      y: ">= 1.0.0"
      z: "*"

A missing or empty ``dependencies`` key means no dependencies. Declaration
order is preserved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from cartograph.core.dependency.models import Manifest
from cartograph.exceptions import ManifestError


def scalar_text(value: Any, source: str) -> str:
    """Return a version or specifier scalar from decoded YAML or JSON as text.

    Integers are accepted (``2`` means ``2.0.0``). Floats are rejected
    because the decoder has already lost their digits: ``1.10`` arrives as
    ``1.1``.

    Raises:
        ManifestError: For floats, booleans, and non-scalar values.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:d}"
    if isinstance(value, float):
        raise ManifestError(
            f"{source}: {value!r} was read as a number; quote versions as strings"
        )
    raise ManifestError(f"{source}: expected a version string, got {value!r}")


def parse_manifest(data: Any, source: str = "<manifest>") -> Manifest:
    """Build a ``Manifest`` from already-decoded YAML or JSON data.

    Args:
        data: The decoded document (a mapping, or None for an empty file).
        source: Where the data came from, used in error messages.

    Raises:
        ManifestError: If the document does not have the expected shape or
            a specifier cannot be parsed.
    """
    if data is None:
        return Manifest()
    if not isinstance(data, dict):
        raise ManifestError(f"{source}: manifest root must be a mapping")

    declared = data.get("dependencies") or {}
    if not isinstance(declared, dict):
        raise ManifestError(f"{source}: 'dependencies' must be a mapping")

    pairs: dict[str, str] = {}
    for name, spec in declared.items():
        if spec is None:
            spec = "*"
        if not isinstance(name, str):
            raise ManifestError(f"{source}: invalid declaration {name!r}: {spec!r}")
        pairs[name] = scalar_text(spec, f"{source}: {name}")

    try:
        return Manifest.from_pairs(pairs)
    except ManifestError as exc:
        raise ManifestError(f"{source}: {exc}") from exc


def load_manifest(path: Path | str) -> Manifest:
    """Read and parse a YAML manifest file.

    Raises:
        ManifestError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"{path}: {exc}") from exc
    return parse_manifest(data, source=str(path))
