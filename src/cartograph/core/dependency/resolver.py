"""Recursive search for a consistent set of dependency versions.

For a manifest, the resolver enumerates every combination of available
versions for its declared dependencies, inserts each combination into an
empty ``DependencyGraph``, and then expands every node it introduced:
the node's own manifest is fetched at the proposed version, its
dependencies are permuted in turn, and each inner combination is merged
into a copy of the graph. A ``ConstraintConflict`` at any point discards
that branch only. Graphs with nothing left to expand are valid candidates;
a ``SelectionPolicy`` picks the one reported to the caller.

Failures of the version index are never treated as conflicts: they abort
the whole search.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, AsyncIterator

from cartograph.core.dependency.constraints import SemanticVersion
from cartograph.core.dependency.graph import DependencyGraph, DependencyNode, insert_all
from cartograph.core.dependency.models import (
    Dependency,
    DependencyIdentifier,
    DependencyVersion,
    Manifest,
)
from cartograph.core.dependency.permutations import all_permutations, closing
from cartograph.exceptions import ConstraintConflict, NoSolutionError

if TYPE_CHECKING:
    from cartograph.index.base import VersionIndex

logger = logging.getLogger(__name__)


class SelectionPolicy(str, Enum):
    """How one graph is chosen when several satisfy every constraint.

    NEWEST searches exhaustively and prefers the highest root versions, in
    manifest order. Remaining ties compare the other nodes as
    ``(identifier, version)`` pairs, breadth-first from the roots, so a
    dependency's version is weighed before the versions of what it pulls in.
    FIRST stops at the first valid graph and cancels the rest of the search.
    """

    NEWEST = "newest"
    FIRST = "first"


@dataclass
class SearchStats:
    """Counters for the most recent search."""

    candidates: int = 0
    pruned: int = 0


def _preference_key(graph: DependencyGraph, manifest: Manifest) -> tuple:
    root_ids = list(dict.fromkeys(d.identifier for d in manifest))
    nodes = graph.nodes
    roots = tuple(nodes[i].proposed_version for i in root_ids)
    order: list[DependencyIdentifier] = []
    seen = set(root_ids)
    queue = deque(root_ids)
    while queue:
        for child in sorted(graph.children(queue.popleft())):
            if child not in seen:
                seen.add(child)
                order.append(child)
                queue.append(child)
    rest = tuple((i, nodes[i].proposed_version) for i in order)
    return roots, rest


class DependencyResolver:
    """Resolves manifests against a ``VersionIndex``.

    Args:
        index: Source of available versions and pinned manifests.
        policy: Selection policy applied by ``resolve_graph`` and
            ``resolve``.
    """

    def __init__(
        self,
        index: VersionIndex,
        policy: SelectionPolicy = SelectionPolicy.NEWEST,
    ) -> None:
        self._index = index
        self._policy = policy
        self.stats = SearchStats()

    @property
    def policy(self) -> SelectionPolicy:
        return self._policy

    # -- public API -----------------------------------------------------------

    async def resolve(
        self, manifest: Manifest
    ) -> AsyncIterator[DependencyVersion[SemanticVersion]]:
        """Yield the chosen version of every direct and transitive dependency.

        Raises:
            NoSolutionError: If no combination satisfies every constraint.
            CollaboratorError: If the index fails.
        """
        graph = await self.resolve_graph(manifest)
        for pin in graph.pins():
            yield pin

    async def resolve_graph(self, manifest: Manifest) -> DependencyGraph:
        """Search *manifest* and return the graph chosen by the policy.

        Raises:
            NoSolutionError: If every branch was pruned.
        """
        self.stats = SearchStats()
        best: DependencyGraph | None = None
        best_key: tuple | None = None

        async with closing(self.candidate_graphs(manifest)) as graphs:
            async for graph in graphs:
                if self._policy is SelectionPolicy.FIRST:
                    best = graph
                    break
                key = _preference_key(graph, manifest)
                if best_key is None or key > best_key:
                    best, best_key = graph, key

        if best is None:
            raise NoSolutionError(
                f"No combination of versions satisfies all constraints "
                f"({self.stats.pruned} branches pruned)",
                pruned=self.stats.pruned,
            )
        logger.info(
            "Selected resolution of %d dependencies (%s policy, %d candidates, %d pruned)",
            len(best), self._policy.value, self.stats.candidates, self.stats.pruned,
        )
        return best

    async def candidate_graphs(self, manifest: Manifest) -> AsyncIterator[DependencyGraph]:
        """Yield every fully expanded graph that satisfies all constraints."""
        async with closing(self.node_permutations(manifest)) as permutations:
            async for roots in permutations:
                try:
                    graph = insert_all(DependencyGraph(), roots)
                except ConstraintConflict as exc:
                    self._prune(exc)
                    continue

                pending = tuple(dict.fromkeys(n.identifier for n in roots))
                async with closing(self._expand(graph, pending)) as graphs:
                    async for candidate in graphs:
                        self.stats.candidates += 1
                        logger.debug("Candidate graph:\n%s", candidate.describe())
                        yield candidate

    def node_permutations(
        self, manifest: Manifest
    ) -> AsyncIterator[tuple[DependencyNode, ...]]:
        """Every way of choosing one available version per declared dependency."""
        return all_permutations([self._candidate_nodes(d) for d in manifest])

    async def version_map(
        self, manifest: Manifest
    ) -> dict[DependencyIdentifier, set[SemanticVersion]]:
        """Map every reachable dependency to all of its available versions.

        Walks each available version of each dependency, recursively, without
        checking any constraint. Each pinned manifest is fetched once.
        """
        versions: dict[DependencyIdentifier, set[SemanticVersion]] = {}
        await self._collect_versions(manifest, versions, set())
        return versions

    # -- search internals -----------------------------------------------------

    async def _candidate_nodes(self, dependency: Dependency) -> AsyncIterator[DependencyNode]:
        # Only versions the declaration itself accepts become candidates.
        async with closing(self._index.list_versions(dependency.identifier)) as versions:
            async for version in versions:
                if dependency.specifier.satisfied_by(version):
                    yield DependencyNode(dependency.identifier, version, dependency.specifier)

    async def _expand(
        self,
        graph: DependencyGraph,
        pending: tuple[DependencyIdentifier, ...],
    ) -> AsyncIterator[DependencyGraph]:
        if not pending:
            yield graph
            return

        identifier, rest = pending[0], pending[1:]
        node = graph.nodes[identifier]

        has_manifest = False
        async with closing(self._index.fetch_manifest(node.dependency_version)) as manifests:
            async for manifest in manifests:
                has_manifest = True
                async with closing(self._expand_manifest(graph, node, manifest, rest)) as graphs:
                    async for expanded in graphs:
                        yield expanded

        if not has_manifest:
            async with closing(self._expand(graph, rest)) as graphs:
                async for expanded in graphs:
                    yield expanded

    async def _expand_manifest(
        self,
        graph: DependencyGraph,
        node: DependencyNode,
        manifest: Manifest,
        rest: tuple[DependencyIdentifier, ...],
    ) -> AsyncIterator[DependencyGraph]:
        async with closing(self.node_permutations(manifest)) as permutations:
            async for children in permutations:
                # Cycles surface from insert_all as DependencyCycle conflicts.
                try:
                    added = [
                        i for i in dict.fromkeys(c.identifier for c in children)
                        if i not in graph
                    ]
                    extended = insert_all(graph, children, dependency_of=node)
                except ConstraintConflict as exc:
                    self._prune(exc)
                    continue

                # Depth-first: children of this node before its siblings.
                queued = tuple(added) + rest
                async with closing(self._expand(extended, queued)) as graphs:
                    async for expanded in graphs:
                        yield expanded

    def _prune(self, conflict: ConstraintConflict) -> None:
        self.stats.pruned += 1
        logger.debug("Pruned branch: %s", conflict)

    async def _collect_versions(
        self,
        manifest: Manifest,
        versions: dict[DependencyIdentifier, set[SemanticVersion]],
        visited: set[DependencyVersion[SemanticVersion]],
    ) -> None:
        for dependency in manifest:
            known = versions.setdefault(dependency.identifier, set())
            async with closing(self._index.list_versions(dependency.identifier)) as available:
                async for version in available:
                    known.add(version)
                    pinned = DependencyVersion(dependency.identifier, version)
                    if pinned in visited:
                        continue
                    visited.add(pinned)
                    async with closing(self._index.fetch_manifest(pinned)) as manifests:
                        async for nested in manifests:
                            await self._collect_versions(nested, versions, visited)
