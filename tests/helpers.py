"""Shared test helpers for building indexes and running async searches."""

from __future__ import annotations

import asyncio
from typing import AsyncIterable, AsyncIterator, Awaitable, TypeVar

from cartograph.core.dependency import (
    DependencyIdentifier,
    DependencyResolver,
    DependencyVersion,
    Manifest,
    SelectionPolicy,
    SemanticVersion,
)
from cartograph.exceptions import CollaboratorError
from cartograph.index import LocalIndex, VersionIndex

T = TypeVar("T")

# name -> {version -> {dependency name -> specifier} or None}
PackageTable = dict[str, dict[str, "dict[str, str] | None"]]


def make_index(packages: PackageTable) -> LocalIndex:
    """Build a LocalIndex from plain strings."""
    return LocalIndex({
        DependencyIdentifier(name): {
            SemanticVersion.parse(version): (
                Manifest.from_pairs(deps) if deps is not None else None
            )
            for version, deps in versions.items()
        }
        for name, versions in packages.items()
    })


def run(coro: Awaitable[T]) -> T:
    return asyncio.run(coro)  # type: ignore[arg-type]


async def collect(source: AsyncIterable[T]) -> list[T]:
    return [item async for item in source]


def resolve_pins(
    index: VersionIndex,
    manifest: Manifest,
    policy: SelectionPolicy = SelectionPolicy.NEWEST,
) -> dict[str, str]:
    """Resolve *manifest* and return ``{name: version}``."""
    resolver = DependencyResolver(index, policy=policy)
    pins = run(collect(resolver.resolve(manifest)))
    return {p.identifier.name: str(p.version) for p in pins}


class RecordingIndex(VersionIndex):
    """Wraps another index and records every call made to it."""

    def __init__(self, inner: VersionIndex) -> None:
        self.inner = inner
        self.listed: list[str] = []
        self.fetched: list[str] = []

    @property
    def index_name(self) -> str:
        return f"recording({self.inner.index_name})"

    async def list_versions(
        self, identifier: DependencyIdentifier
    ) -> AsyncIterator[SemanticVersion]:
        self.listed.append(identifier.name)
        async for version in self.inner.list_versions(identifier):
            yield version

    async def fetch_manifest(
        self, pinned: DependencyVersion[SemanticVersion]
    ) -> AsyncIterator[Manifest]:
        self.fetched.append(str(pinned))
        async for manifest in self.inner.fetch_manifest(pinned):
            yield manifest


class FailingIndex(VersionIndex):
    """Index whose lookups fail for selected identifiers."""

    def __init__(self, inner: VersionIndex, broken: set[str]) -> None:
        self.inner = inner
        self.broken = broken

    @property
    def index_name(self) -> str:
        return "failing"

    async def list_versions(
        self, identifier: DependencyIdentifier
    ) -> AsyncIterator[SemanticVersion]:
        if identifier.name in self.broken:
            raise CollaboratorError(f"cannot list versions of {identifier}")
        async for version in self.inner.list_versions(identifier):
            yield version

    async def fetch_manifest(
        self, pinned: DependencyVersion[SemanticVersion]
    ) -> AsyncIterator[Manifest]:
        if pinned.identifier.name in self.broken:
            raise CollaboratorError(f"cannot fetch {pinned}")
        async for manifest in self.inner.fetch_manifest(pinned):
            yield manifest


def diamond_packages(y_requires_z: str = ">= 1.5.0") -> PackageTable:
    """X ==1.0.0 and Y >=1.0.0 at the root; both depend on Z."""
    return {
        "X": {"1.0.0": {"Z": "== 2.0.0"}},
        "Y": {"1.0.0": {"Z": y_requires_z}},
        "Z": {"1.0.0": None, "2.0.0": None},
    }


def diamond_manifest() -> Manifest:
    return Manifest.from_pairs({"X": "== 1.0.0", "Y": ">= 1.0.0"})
