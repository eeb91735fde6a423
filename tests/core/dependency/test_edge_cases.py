"""Tests for edge cases and boundary conditions in the dependency module.

Validates empty graphs and manifests, packages with no manifest, pinned
manifests that declare nothing, repeated resolution with one resolver,
and other unusual index configurations.
"""

from __future__ import annotations

import pytest

from cartograph.core.dependency import (
    DependencyGraph,
    DependencyIdentifier,
    DependencyResolver,
    Manifest,
    SemanticVersion,
    VersionSpecifier,
)
from cartograph.exceptions import (
    CartographError,
    ConstraintConflict,
    DependencyCycle,
    NoSolutionError,
    ResolutionError,
)
from tests.helpers import collect, make_index, resolve_pins, run


# ===========================================================================
# Edge Cases
# ===========================================================================


class TestEmptyInputs:
    """Tests for empty graphs, manifests, and indexes."""

    def test_empty_graph(self) -> None:
        """A fresh graph has no nodes, roots, or edges."""
        g = DependencyGraph()
        assert len(g) == 0
        assert g.roots == frozenset()
        assert g.edges == {}
        assert g.pins() == []

    def test_empty_graphs_equal(self) -> None:
        """Two empty graphs compare equal."""
        assert DependencyGraph() == DependencyGraph()

    def test_empty_manifest_yields_one_empty_graph(self) -> None:
        """The only candidate for an empty manifest is the empty graph."""
        resolver = DependencyResolver(make_index({}))
        graphs = run(collect(resolver.candidate_graphs(Manifest())))
        assert len(graphs) == 1
        assert len(graphs[0]) == 0

    def test_empty_manifest_version_map(self) -> None:
        """An empty manifest reaches no dependencies."""
        resolver = DependencyResolver(make_index({}))
        assert run(resolver.version_map(Manifest())) == {}

    def test_pinned_manifest_declaring_nothing(self) -> None:
        """A pinned version with an empty manifest is a leaf."""
        pins = resolve_pins(make_index({"A": {"1.0.0": {}}}), Manifest.from_pairs({"A": "*"}))
        assert pins == {"A": "1.0.0"}


class TestUnusualIndexes:
    """Tests for indexes with surprising contents."""

    def test_no_version_satisfies_declaration(self) -> None:
        """Versions exist but none meets the declared specifier."""
        index = make_index({"A": {"1.0.0": None, "1.1.0": None}})
        with pytest.raises(NoSolutionError):
            resolve_pins(index, Manifest.from_pairs({"A": ">= 2.0.0"}))

    def test_no_solution_is_resolution_error(self) -> None:
        """NoSolutionError belongs to the resolution error family."""
        with pytest.raises(ResolutionError):
            resolve_pins(make_index({}), Manifest.from_pairs({"A": "*"}))

    def test_one_of_many_roots_missing(self) -> None:
        """A single unavailable root spoils every combination."""
        index = make_index({"A": {"1.0.0": None}})
        with pytest.raises(NoSolutionError):
            resolve_pins(index, Manifest.from_pairs({"A": "*", "B": "*"}))

    def test_zero_major_compatibility(self) -> None:
        """~> on a 0.x version does not cross into the next minor."""
        index = make_index({"A": {"0.3.0": None, "0.3.5": None, "0.4.0": None}})
        assert resolve_pins(index, Manifest.from_pairs({"A": "~> 0.3.0"})) == {"A": "0.3.5"}

    def test_resolver_is_reusable(self) -> None:
        """Running a second search resets the counters."""
        index = make_index({"A": {"1.0.0": None, "2.0.0": None}})
        resolver = DependencyResolver(index)
        manifest = Manifest.from_pairs({"A": "*"})
        run(resolver.resolve_graph(manifest))
        run(resolver.resolve_graph(manifest))
        assert resolver.stats.candidates == 2
        assert resolver.stats.pruned == 0

    def test_resolved_graph_node_is_narrowed(self) -> None:
        """The resolved node records every constraint placed on it."""
        index = make_index({
            "A": {"1.0.0": {"C": ">= 1.0.0"}},
            "B": {"1.0.0": {"C": "< 3.0.0"}},
            "C": {"2.0.0": None},
        })
        graph = run(DependencyResolver(index).resolve_graph(
            Manifest.from_pairs({"A": "*", "B": "*"})
        ))
        node = graph.get_node(DependencyIdentifier("C"))
        assert node is not None
        assert node.specifier == VersionSpecifier.parse(">= 1.0.0, < 3.0.0")
        assert node.proposed_version == SemanticVersion(2, 0, 0)


class TestErrors:
    """Tests for the error values raised by the dependency module."""

    def test_conflict_message_names_identifier(self) -> None:
        """ConstraintConflict prefixes the identifier."""
        exc = ConstraintConflict(DependencyIdentifier("Z"), "no overlap")
        assert exc.identifier == DependencyIdentifier("Z")
        assert str(exc).startswith("Z")
        assert "no overlap" in str(exc)

    def test_cycle_is_conflict(self) -> None:
        """Cycles are pruned like any other conflict."""
        exc = DependencyCycle(
            DependencyIdentifier("A"),
            (DependencyIdentifier("A"), DependencyIdentifier("B")),
        )
        assert isinstance(exc, ConstraintConflict)
        assert isinstance(exc, CartographError)
        assert "A -> B" in str(exc)

    def test_no_solution_records_pruned(self) -> None:
        """NoSolutionError keeps the number of pruned branches."""
        assert NoSolutionError("nothing", pruned=4).pruned == 4
