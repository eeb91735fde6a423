"""Candidate dependency graphs built during the resolution search.

A ``DependencyGraph`` holds at most one node per identifier. Inserting a node
for an identifier that is already present merges the two: their specifiers
are intersected and the version committed by the first appearance must
still satisfy the narrowed result, otherwise a ``ConstraintConflict`` is
raised and the branch that owns the graph is abandoned. An edge that would
close a loop raises ``DependencyCycle``, a kind of conflict.

Graphs are branch-local. ``insert`` mutates in place; ``insert_all`` works
on a copy and returns it, so sibling branches never observe each other's
insertions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from cartograph.core.dependency.constraints import (
    SemanticVersion,
    VersionSpecifier,
    intersection,
)
from cartograph.core.dependency.models import DependencyIdentifier, DependencyVersion
from cartograph.exceptions import ConstraintConflict, DependencyCycle


# ---------------------------------------------------------------------------
# DependencyNode: one candidate appearance of a dependency
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyNode:
    """A dependency proposed at a concrete version within one branch.

    The graph keys nodes by ``identifier``; ``proposed_version`` is fixed for
    the branch and ``specifier`` narrows as more declarations are merged.
    """

    identifier: DependencyIdentifier
    proposed_version: SemanticVersion
    specifier: VersionSpecifier

    @property
    def dependency_version(self) -> DependencyVersion[SemanticVersion]:
        return DependencyVersion(self.identifier, self.proposed_version)

    def __str__(self) -> str:
        return (
            f"{self.identifier} @ {self.proposed_version} "
            f"(restricted to {self.specifier})"
        )


# ---------------------------------------------------------------------------
# DependencyGraph
# ---------------------------------------------------------------------------


class DependencyGraph:
    """Nodes, depends-on edges, and roots of one candidate resolution.

    Edge targets are stored as frozensets, so ``copy()`` only has to copy the
    top-level mappings to give the new graph independent state.

    Thread safety: This class is NOT thread-safe. Each search branch owns
    its own copy.
    """

    def __init__(self) -> None:
        self._nodes: dict[DependencyIdentifier, DependencyNode] = {}
        self._edges: dict[DependencyIdentifier, frozenset[DependencyIdentifier]] = {}
        self._roots: frozenset[DependencyIdentifier] = frozenset()

    # -- queries ------------------------------------------------------------

    @property
    def nodes(self) -> dict[DependencyIdentifier, DependencyNode]:
        """All nodes keyed by identifier."""
        return dict(self._nodes)

    @property
    def edges(self) -> dict[DependencyIdentifier, frozenset[DependencyIdentifier]]:
        """Parent identifier -> identifiers it directly depends on."""
        return dict(self._edges)

    @property
    def roots(self) -> frozenset[DependencyIdentifier]:
        return self._roots

    def get_node(self, identifier: DependencyIdentifier) -> DependencyNode | None:
        return self._nodes.get(identifier)

    def children(self, identifier: DependencyIdentifier) -> frozenset[DependencyIdentifier]:
        return self._edges.get(identifier, frozenset())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def pins(self) -> list[DependencyVersion[SemanticVersion]]:
        """One resolved ``identifier@version`` pair per node, sorted by identifier."""
        return [
            self._nodes[identifier].dependency_version
            for identifier in sorted(self._nodes)
        ]

    # -- mutation -----------------------------------------------------------

    def copy(self) -> DependencyGraph:
        clone = DependencyGraph()
        clone._nodes = dict(self._nodes)
        clone._edges = dict(self._edges)
        clone._roots = self._roots
        return clone

    def insert(
        self,
        node: DependencyNode,
        dependency_of: DependencyNode | None = None,
    ) -> DependencyNode:
        """Add *node*, merging it with any node already present for its identifier.

        Args:
            node: The proposed node.
            dependency_of: The node that declared this dependency, or None
                when *node* is a root.

        Returns:
            The canonical node for the identifier after the merge.

        Raises:
            ConstraintConflict: If the specifiers do not intersect, or the
                version already committed for the identifier does not
                satisfy their intersection.
            DependencyCycle: If the new edge would let *dependency_of* reach
                itself.
            ValueError: If *dependency_of* is not part of this graph.
        """
        if dependency_of is not None and dependency_of.identifier not in self._nodes:
            raise ValueError(f"Parent {dependency_of.identifier} is not in the graph")

        existing = self._nodes.get(node.identifier)
        if existing is not None:
            narrowed = intersection(existing.specifier, node.specifier)
            if narrowed is None:
                raise ConstraintConflict(
                    node.identifier,
                    f"{existing.specifier} and {node.specifier} have no common version",
                )
            if not narrowed.satisfied_by(existing.proposed_version):
                raise ConstraintConflict(
                    node.identifier,
                    f"committed version {existing.proposed_version} "
                    f"does not satisfy {narrowed}",
                )
            node = replace(existing, specifier=narrowed)

        if dependency_of is not None:
            loop = self._path(node.identifier, dependency_of.identifier)
            if loop is not None:
                raise DependencyCycle(node.identifier, loop)

        self._nodes[node.identifier] = node

        if dependency_of is not None:
            parent = dependency_of.identifier
            self._edges[parent] = self.children(parent) | {node.identifier}
        else:
            self._roots = self._roots | {node.identifier}

        return node

    def _path(
        self, source: DependencyIdentifier, target: DependencyIdentifier
    ) -> tuple[DependencyIdentifier, ...] | None:
        """Identifiers on some edge path from *source* to *target*, or None."""
        stack: list[tuple[DependencyIdentifier, ...]] = [(source,)]
        seen = {source}
        while stack:
            path = stack.pop()
            if path[-1] == target:
                return path
            for child in sorted(self.children(path[-1])):
                if child not in seen:
                    seen.add(child)
                    stack.append((*path, child))
        return None

    # -- comparison & display -------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._roots == other._roots and self._edges == other._edges

    __hash__ = None  # type: ignore[assignment]

    def describe(self) -> str:
        """Multi-line dump of roots and edges, for logs and debugging output."""
        lines = ["Roots:"]
        for identifier in sorted(self._roots):
            lines.append(f"\t{self._nodes[identifier]}")
        lines.append("")
        lines.append("Edges:")
        for parent in sorted(self._edges):
            children = ", ".join(str(c) for c in sorted(self._edges[parent]))
            lines.append(f"\t{self._nodes[parent]} -> {children}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        pins = ", ".join(str(p) for p in self.pins())
        return f"DependencyGraph({pins})"


def insert_all(
    graph: DependencyGraph,
    nodes: Iterable[DependencyNode],
    dependency_of: DependencyNode | None = None,
) -> DependencyGraph:
    """Insert *nodes* into a copy of *graph* and return the copy.

    *graph* itself is never modified.

    Raises:
        ConstraintConflict: On the first node that cannot be merged.
    """
    result = graph.copy()
    for node in nodes:
        result.insert(node, dependency_of)
    return result
