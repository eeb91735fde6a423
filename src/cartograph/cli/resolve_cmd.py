"""``cartograph resolve|versions|graphs``: Resolve a manifest against an index.

Usage::

    cartograph resolve deps.yaml --index index.yaml
    cartograph resolve deps.yaml --index https://example.org/index --policy first
    cartograph versions deps.yaml --index index.yaml
    cartograph graphs deps.yaml --index index.yaml --limit 5

Exit Codes:
    0 - Resolution succeeded.
    1 - No combination of versions satisfies every constraint.
    2 - The manifest or the index could not be read.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Coroutine, TypeVar

import click

from cartograph.cli.output import (
    print_failure,
    print_graph,
    print_json,
    print_resolution,
    print_version_map,
)
from cartograph.core.dependency import (
    DependencyGraph,
    DependencyResolver,
    Manifest,
    SelectionPolicy,
)
from cartograph.core.dependency.permutations import closing
from cartograph.exceptions import CollaboratorError, ManifestError, NoSolutionError
from cartograph.index import HttpIndex, LocalIndex, VersionIndex
from cartograph.index.http import DEFAULT_TIMEOUT
from cartograph.manifest import load_manifest

T = TypeVar("T")


def _run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine in a synchronous context."""
    return asyncio.run(coro)


def _open_index(location: str, timeout: float) -> VersionIndex:
    """Return an HTTP index for URLs and a YAML index for anything else."""
    if location.startswith(("http://", "https://")):
        return HttpIndex(location, timeout=timeout)
    return LocalIndex.load(location)


def _load(manifest_path: str, index: str, timeout: float) -> tuple[Manifest, VersionIndex]:
    try:
        return load_manifest(manifest_path), _open_index(index, timeout)
    except (ManifestError, CollaboratorError) as exc:
        print_failure("Cannot load inputs", str(exc))
        sys.exit(2)


_index_option = click.option(
    "--index", "-i",
    required=True,
    help="YAML index file, or base URL of an HTTP index.",
)
_timeout_option = click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Timeout in seconds for HTTP index requests.",
)


@click.command("resolve")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@_index_option
@_timeout_option
@click.option(
    "--policy",
    type=click.Choice([p.value for p in SelectionPolicy]),
    default=SelectionPolicy.NEWEST.value,
    show_default=True,
    help="How to choose among several valid resolutions.",
)
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table.")
def resolve_command(
    manifest: str, index: str, timeout: float, policy: str, as_json: bool
) -> None:
    """Resolve every dependency of MANIFEST to one exact version.

    Exit code 0 on success, 1 when no solution exists, 2 when the manifest
    or index cannot be read.
    """
    declared, source = _load(manifest, index, timeout)
    resolver = DependencyResolver(source, policy=SelectionPolicy(policy))

    async def _collect() -> list:
        return [pin async for pin in resolver.resolve(declared)]

    try:
        pins = _run_async(_collect())
    except NoSolutionError as exc:
        if as_json:
            print_json({"success": False, "error": str(exc)})
        else:
            print_failure("No solution", str(exc))
        sys.exit(1)
    except (ManifestError, CollaboratorError) as exc:
        if as_json:
            print_json({"success": False, "error": str(exc)})
        else:
            print_failure("Index failure", str(exc))
        sys.exit(2)

    if as_json:
        print_json({
            "success": True,
            "resolved": {str(p.identifier): str(p.version) for p in pins},
        })
    else:
        print_resolution(pins, resolver.stats)


@click.command("versions")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@_index_option
@_timeout_option
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table.")
def versions_command(manifest: str, index: str, timeout: float, as_json: bool) -> None:
    """List every dependency reachable from MANIFEST with its available versions."""
    declared, source = _load(manifest, index, timeout)
    resolver = DependencyResolver(source)
    try:
        versions = _run_async(resolver.version_map(declared))
    except (ManifestError, CollaboratorError) as exc:
        print_failure("Index failure", str(exc))
        sys.exit(2)

    if as_json:
        print_json({
            str(identifier): [str(v) for v in sorted(found, reverse=True)]
            for identifier, found in sorted(versions.items())
        })
    else:
        print_version_map(versions)


@click.command("graphs")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@_index_option
@_timeout_option
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=10,
    show_default=True,
    help="Stop after this many candidate graphs (0 for no limit).",
)
def graphs_command(manifest: str, index: str, timeout: float, limit: int) -> None:
    """Print the candidate graphs that satisfy every constraint of MANIFEST."""
    declared, source = _load(manifest, index, timeout)
    resolver = DependencyResolver(source)

    async def _collect() -> list[DependencyGraph]:
        found: list[DependencyGraph] = []
        async with closing(resolver.candidate_graphs(declared)) as graphs:
            async for graph in graphs:
                found.append(graph)
                if limit and len(found) >= limit:
                    break
        return found

    try:
        graphs = _run_async(_collect())
    except (ManifestError, CollaboratorError) as exc:
        print_failure("Index failure", str(exc))
        sys.exit(2)

    if not graphs:
        click.echo("No candidate graph satisfies every constraint.")
        sys.exit(1)
    for number, graph in enumerate(graphs, start=1):
        print_graph(graph, number)
    click.echo(f"{len(graphs)} candidate graph(s), {resolver.stats.pruned} branch(es) pruned")
