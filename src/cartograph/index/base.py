"""Abstract version index consumed by the resolver.

A version index answers two questions about the outside world: which
versions of a dependency exist, and what a dependency declares at one
exact version. Concrete indexes (in-memory/YAML, HTTP) implement both as
async generators so the resolver can consume them lazily.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from cartograph.core.dependency.constraints import SemanticVersion
from cartograph.core.dependency.models import (
    DependencyIdentifier,
    DependencyVersion,
    Manifest,
)


class VersionIndex(ABC):
    """Abstract base class for sources of versions and pinned manifests.

    Every call performs a fresh lookup: indexes do not cache, and the
    resolver re-invokes them for each independent traversal.

    Implementations raise ``CollaboratorError`` (or ``ManifestError`` for
    unparseable manifests) on failures; either aborts the whole resolution.
    """

    @property
    @abstractmethod
    def index_name(self) -> str:
        """Human-readable name of this index, used in log messages."""

    @abstractmethod
    def list_versions(
        self, identifier: DependencyIdentifier
    ) -> AsyncIterator[SemanticVersion]:
        """Yield every available version of *identifier*, in any order.

        Yielding nothing means the dependency cannot be resolved.
        """

    @abstractmethod
    def fetch_manifest(
        self, pinned: DependencyVersion[SemanticVersion]
    ) -> AsyncIterator[Manifest]:
        """Yield the manifest of *pinned*, or nothing if it declares none."""
