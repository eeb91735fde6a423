"""Cartograph exception hierarchy.

All public exceptions inherit from CartographError, giving callers a single
base class to catch when they want to handle any Cartograph-specific failure
without swallowing unrelated errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartograph.core.dependency.models import DependencyIdentifier


class CartographError(Exception):
    """Base exception for all Cartograph errors."""


class ManifestError(CartographError, ValueError):
    """Raised when a manifest, specifier, or version string cannot be parsed.

    Covers malformed YAML, unknown specifier operators, unsatisfiable
    specifier text, and invalid version numbers.
    """


class CollaboratorError(CartographError):
    """Raised when a version index cannot list versions or fetch a manifest.

    Fatal to a resolution run: it is never treated as a reason to prune a
    single branch.
    """


class ResolutionError(CartographError):
    """Base class for outcomes of the dependency search itself."""


class ConstraintConflict(ResolutionError):
    """Raised when a node cannot be merged into a candidate graph.

    Either the two specifiers on one identifier have no common version, or
    the version already committed for that identifier falls outside the
    narrowed specifier. Local to one search branch.
    """

    def __init__(self, identifier: DependencyIdentifier, message: str) -> None:
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier


class DependencyCycle(ConstraintConflict):
    """Raised when an identifier depends, transitively, on itself."""

    def __init__(
        self,
        identifier: DependencyIdentifier,
        path: tuple[DependencyIdentifier, ...],
    ) -> None:
        chain = " -> ".join(str(i) for i in (*path, identifier))
        super().__init__(identifier, f"dependency cycle ({chain})")
        self.path = path


class NoSolutionError(ResolutionError):
    """Raised when every explored branch was pruned.

    Distinct from CollaboratorError so callers can report incompatible
    requirements rather than an I/O failure.
    """

    def __init__(self, message: str, pruned: int = 0) -> None:
        super().__init__(message)
        self.pruned = pruned
