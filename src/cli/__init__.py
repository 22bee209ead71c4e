"""CLI entry point for the batch progress engine."""

from __future__ import annotations

import click

from src.cli.commands import (
    build_baseline,
    cleanup,
    purge,
    status,
    verify_files,
    watch,
)


@click.group()
def cli() -> None:
    """Batch job execution with out-of-band progress snapshots."""


cli.add_command(status)
cli.add_command(watch)
cli.add_command(cleanup)
cli.add_command(purge)
cli.add_command(build_baseline)
cli.add_command(verify_files)
