"""In-memory version index, loadable from a YAML index file.

Index file format::

    packages:
      x:
        "1.0.0":
          dependencies:
            z: "== 2.0.0"
        "1.1.0": {}
      z:
        "2.0.0":

A version mapped to nothing declares no dependencies.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, AsyncIterator

import yaml

from cartograph.core.dependency.constraints import SemanticVersion
from cartograph.core.dependency.models import (
    DependencyIdentifier,
    DependencyVersion,
    Manifest,
)
from cartograph.exceptions import CollaboratorError, ManifestError
from cartograph.index.base import VersionIndex
from cartograph.manifest import parse_manifest, scalar_text

logger = logging.getLogger(__name__)


class LocalIndex(VersionIndex):
    """Version index backed by a dictionary of packages.

    Args:
        packages: identifier -> {version -> manifest or None}.
        name: Label used in log and error messages.
    """

    def __init__(
        self,
        packages: dict[DependencyIdentifier, dict[SemanticVersion, Manifest | None]],
        name: str = "local",
    ) -> None:
        self._packages = packages
        self._name = name

    @property
    def index_name(self) -> str:
        return self._name

    @classmethod
    def from_dict(cls, data: Any, name: str = "local") -> LocalIndex:
        """Build an index from decoded index-file data.

        Raises:
            ManifestError: If the data does not follow the index format.
        """
        if data is None:
            return cls({}, name=name)
        if not isinstance(data, dict) or not isinstance(data.get("packages") or {}, dict):
            raise ManifestError(f"{name}: index must contain a 'packages' mapping")

        packages: dict[DependencyIdentifier, dict[SemanticVersion, Manifest | None]] = {}
        for package, versions in (data.get("packages") or {}).items():
            versions = versions or {}
            if not isinstance(versions, dict):
                raise ManifestError(f"{name}: versions of {package!r} must be a mapping")
            entries: dict[SemanticVersion, Manifest | None] = {}
            for version, manifest in versions.items():
                parsed = SemanticVersion.parse(scalar_text(version, f"{name}:{package}"))
                if parsed in entries:
                    raise ManifestError(f"{name}: duplicate version {parsed} of {package!r}")
                source = f"{name}:{package}@{parsed}"
                entries[parsed] = parse_manifest(manifest, source) if manifest else None
            packages[DependencyIdentifier(str(package))] = entries
        return cls(packages, name=name)

    @classmethod
    def load(cls, path: Path | str) -> LocalIndex:
        """Read a YAML index file.

        Raises:
            CollaboratorError: If the file cannot be read.
            ManifestError: If its content is not a valid index.
        """
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise CollaboratorError(f"Cannot read index {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ManifestError(f"{path}: {exc}") from exc
        return cls.from_dict(data, name=str(path))

    async def list_versions(
        self, identifier: DependencyIdentifier
    ) -> AsyncIterator[SemanticVersion]:
        versions = self._packages.get(identifier)
        if versions is None:
            logger.debug("%s: no package named %s", self._name, identifier)
            return
        for version in sorted(versions, reverse=True):
            # Let sibling listings interleave with this one.
            await asyncio.sleep(0)
            yield version

    async def fetch_manifest(
        self, pinned: DependencyVersion[SemanticVersion]
    ) -> AsyncIterator[Manifest]:
        versions = self._packages.get(pinned.identifier, {})
        if pinned.version not in versions:
            logger.warning("%s: %s is not in the index", self._name, pinned)
            raise CollaboratorError(f"{self._name}: unknown dependency version {pinned}")
        await asyncio.sleep(0)
        manifest = versions[pinned.version]
        if manifest is not None:
            yield manifest
