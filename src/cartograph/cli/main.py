"""Cartograph CLI: Transitive dependency version resolution.

Entry point for the ``cartograph`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    resolve   - Resolve every dependency of a manifest to one exact version.
    versions  - List reachable dependencies and their available versions.
    graphs    - Print candidate dependency graphs.

Usage::

    cartograph resolve deps.yaml --index index.yaml
    cartograph --log-level debug resolve deps.yaml --index index.yaml
    cartograph versions deps.yaml --index https://example.org/index
    cartograph graphs deps.yaml --index index.yaml --limit 3
"""

from __future__ import annotations

import logging

import click

from cartograph import __version__
from cartograph.cli.resolve_cmd import graphs_command, resolve_command, versions_command

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
    help="Logging verbosity (written to stderr).",
)
def cli(log_level: str) -> None:
    """Cartograph: resolve a manifest's dependencies to exact versions.

    Finds one version per dependency, direct or transitive, that meets
    every version constraint declared on it anywhere in the dependency tree.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format=LOG_FORMAT,
    )


# Register all subcommands
cli.add_command(resolve_command)
cli.add_command(versions_command)
cli.add_command(graphs_command)
