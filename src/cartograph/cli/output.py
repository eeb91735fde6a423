"""Rich output formatting helpers for the Cartograph CLI.

Provides consistent terminal output for resolution results, failures,
version maps, and candidate graphs.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from cartograph.core.dependency import (
    DependencyGraph,
    DependencyIdentifier,
    DependencyVersion,
    SearchStats,
    SemanticVersion,
)

console = Console()


def print_resolution(
    pins: list[DependencyVersion[SemanticVersion]],
    stats: SearchStats,
) -> None:
    """Print the resolved version of every dependency.

    Args:
        pins: Resolved identifier/version pairs.
        stats: Counters from the search that produced them.
    """
    console.print(
        Panel("[bold green]Resolution successful[/bold green]",
              title="Dependency Resolution")
    )
    if pins:
        table = Table(show_header=True)
        table.add_column("Dependency", style="bold")
        table.add_column("Resolved Version")
        for pin in sorted(pins, key=lambda p: p.identifier):
            table.add_row(str(pin.identifier), str(pin.version))
        console.print(table)
    else:
        console.print("[dim]No dependencies to resolve.[/dim]")
    console.print(
        f"[dim]{stats.candidates} candidate graph(s), "
        f"{stats.pruned} branch(es) pruned[/dim]"
    )


def print_failure(title: str, message: str) -> None:
    """Print a resolution failure panel with its reason."""
    console.print(Panel(f"[bold red]{title}[/bold red]", title="Dependency Resolution"))
    console.print(f"  [red]- {escape(message)}[/red]")


def print_version_map(versions: dict[DependencyIdentifier, set[SemanticVersion]]) -> None:
    """Print every reachable dependency with its available versions, newest first."""
    if not versions:
        console.print("[dim]No dependencies declared.[/dim]")
        return

    table = Table(title="Available Versions", show_header=True, header_style="bold")
    table.add_column("Dependency", style="bold")
    table.add_column("Versions")
    for identifier in sorted(versions):
        available = sorted(versions[identifier], reverse=True)
        text = ", ".join(str(v) for v in available) if available else "[red]none[/red]"
        table.add_row(str(identifier), text)
    console.print(table)


def _add_children(
    branch: Tree,
    graph: DependencyGraph,
    identifier: DependencyIdentifier,
    seen: frozenset[DependencyIdentifier],
) -> None:
    for child in sorted(graph.children(identifier)):
        node = graph.get_node(child)
        label = f"{child} [cyan]{node.proposed_version}[/cyan] [dim]({node.specifier})[/dim]"
        sub = branch.add(label)
        if child not in seen:
            _add_children(sub, graph, child, seen | {child})


def print_graph(graph: DependencyGraph, number: int) -> None:
    """Print one candidate graph as a tree rooted at its top-level dependencies."""
    tree = Tree(f"[bold]Candidate graph {number}[/bold]")
    for root in sorted(graph.roots):
        node = graph.get_node(root)
        branch = tree.add(
            f"[bold]{root}[/bold] [cyan]{node.proposed_version}[/cyan] "
            f"[dim]({node.specifier})[/dim]"
        )
        _add_children(branch, graph, root, frozenset({root}))
    console.print(tree)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    console.print_json(json.dumps(data, default=str))
