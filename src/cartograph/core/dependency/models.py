"""Identifiers, declarations, manifests, and pinned versions.

These are the plain value types exchanged between the resolver and its
collaborators: a manifest is an ordered list of ``Dependency`` declarations,
and a ``DependencyVersion`` pins one identifier to one concrete version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

from cartograph.core.dependency.constraints import VersionSpecifier

V = TypeVar("V")


@dataclass(frozen=True, order=True)
class DependencyIdentifier:
    """Opaque identity of a dependency source.

    Two declarations naming the same identifier always refer to the same
    package, whichever manifest they appear in.
    """

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Dependency:
    """One declared dependency: an identifier and the specifier it must meet."""

    identifier: DependencyIdentifier
    specifier: VersionSpecifier

    def __str__(self) -> str:
        return f"{self.identifier} {self.specifier}"


@dataclass(frozen=True)
class DependencyVersion(Generic[V]):
    """An identifier paired with a concrete version value."""

    identifier: DependencyIdentifier
    version: V

    def __str__(self) -> str:
        return f"{self.identifier}@{self.version}"


@dataclass(frozen=True)
class Manifest:
    """An ordered list of declared dependencies.

    Order is kept for traversal; it does not affect which graphs are valid.
    """

    dependencies: tuple[Dependency, ...] = ()

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.dependencies)

    def __len__(self) -> int:
        return len(self.dependencies)

    @classmethod
    def from_pairs(cls, pairs: dict[str, str]) -> Manifest:
        """Build a manifest from ``{name: specifier_text}`` in insertion order."""
        return cls(tuple(
            Dependency(DependencyIdentifier(name), VersionSpecifier.parse(text))
            for name, text in pairs.items()
        ))
