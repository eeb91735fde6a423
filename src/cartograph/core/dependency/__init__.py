"""Dependency constraints, candidate graphs, and the resolution search.

The package is split into focused submodules:

- ``constraints``: ``SemanticVersion`` and ``VersionSpecifier`` with the
  ``intersection`` operator.
- ``models``: identifiers, declarations, manifests, and pinned versions.
- ``graph``: ``DependencyNode``, ``DependencyGraph`` and ``insert_all``.
- ``permutations``: ``cross_combine`` and ``all_permutations`` over async
  iterables.
- ``resolver``: ``DependencyResolver`` and ``SelectionPolicy``.

All public names are re-exported here, so
``from cartograph.core.dependency import X`` works for any of them.
"""

from cartograph.core.dependency.constraints import (
    SemanticVersion,
    VersionSpecifier,
    intersection,
)
from cartograph.core.dependency.graph import (
    DependencyGraph,
    DependencyNode,
    insert_all,
)
from cartograph.core.dependency.models import (
    Dependency,
    DependencyIdentifier,
    DependencyVersion,
    Manifest,
)
from cartograph.core.dependency.permutations import (
    all_permutations,
    cross_combine,
)
from cartograph.core.dependency.resolver import (
    DependencyResolver,
    SearchStats,
    SelectionPolicy,
)

__all__ = [
    "SemanticVersion",
    "VersionSpecifier",
    "intersection",
    "DependencyGraph",
    "DependencyNode",
    "insert_all",
    "Dependency",
    "DependencyIdentifier",
    "DependencyVersion",
    "Manifest",
    "all_permutations",
    "cross_combine",
    "DependencyResolver",
    "SearchStats",
    "SelectionPolicy",
]
