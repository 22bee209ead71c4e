"""CLI command implementations for the batch progress engine."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from src.core.errors import OperationError
from src.core.result_aggregation import format_batch_summary
from src.models.config import Config
from src.services.progress_store import ProgressStore
from src.utils.logger import configure_logging

if TYPE_CHECKING:
    from src.models.progress_snapshot import ProgressSnapshot


def _get_config() -> Config:
    """Load configuration from .env file."""
    return Config()


def _get_store(config: Config, operation_id: str) -> ProgressStore:
    """Build the progress store for an operation id, failing as a usage error."""
    try:
        return ProgressStore(operation_id, progress_dir=config.progress_dir)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="OPERATION_ID") from exc


def _print_snapshot(snapshot: ProgressSnapshot, output_format: str) -> None:
    """Print a snapshot as a short summary or as its raw JSON record."""
    if output_format == "json":
        click.echo(json.dumps(snapshot.to_record(), indent=2))
        return

    click.echo(f"[{snapshot.status.upper()}] {snapshot.progress}% {snapshot.message}")
    if snapshot.details:
        click.echo(f"  {snapshot.details}")
    if snapshot.summary:
        click.echo(format_batch_summary(snapshot.summary))
    if snapshot.error:
        click.echo(f"  Error: {snapshot.error}")
    if snapshot.warning:
        click.echo(f"  Warning: {snapshot.warning}")


# --- Snapshot inspection ---


@click.command()
@click.argument("operation_id")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def status(operation_id: str, output_format: str) -> None:
    """Show the latest progress snapshot of an operation."""
    config = _get_config()
    configure_logging(config.log_level)
    store = _get_store(config, operation_id)

    snapshot = store.get_current_progress()
    if snapshot is None:
        click.echo(f"[INFO] No progress recorded for '{operation_id}'")
        return

    _print_snapshot(snapshot, output_format)
    if store.is_stale(config.stale_after_seconds):
        click.echo(
            f"[WARNING] No update for over {config.stale_after_seconds:.0f}s; "
            "the operation may have stopped"
        )


@click.command()
@click.argument("operation_id")
@click.option("--timeout", default=None, type=float, help="Give up after this many seconds")
@click.option("--interval", default=None, type=float, help="Seconds between polls")
def watch(operation_id: str, timeout: float | None, interval: float | None) -> None:
    """Poll an operation until it completes or fails."""
    from src.services.progress_poller import ProgressPoller

    config = _get_config()
    configure_logging(config.log_level)
    store = _get_store(config, operation_id)

    poller = ProgressPoller(
        store,
        on_update=lambda snapshot: click.echo(f"  {snapshot.progress:3d}% {snapshot.message}"),
        interval=interval if interval is not None else config.poll_interval_seconds,
    )
    try:
        snapshot = poller.wait_for_completion(
            timeout=timeout,
            stale_after=config.stale_after_seconds,
        )
    except OperationError as exc:
        raise click.ClickException(exc.message) from exc

    _print_snapshot(snapshot, "summary")
    if snapshot.status == "error":
        raise click.exceptions.Exit(1)


@click.command()
@click.argument("operation_id")
def cleanup(operation_id: str) -> None:
    """Remove the progress snapshot of an operation."""
    config = _get_config()
    configure_logging(config.log_level)
    store = _get_store(config, operation_id)

    if not store.cleanup():
        raise click.ClickException(f"Could not remove {store.snapshot_path}")
    click.echo(f"[SUCCESS] Removed progress for '{operation_id}'")


@click.command()
@click.option("--max-age", default=None, type=float, help="Maximum snapshot age in seconds")
def purge(max_age: float | None) -> None:
    """Delete progress snapshots older than the configured maximum age."""
    from src.services.progress_store import purge_expired_snapshots

    config = _get_config()
    configure_logging(config.log_level)

    removed = purge_expired_snapshots(
        config.progress_dir,
        max_age if max_age is not None else config.snapshot_max_age_seconds,
    )
    click.echo(f"[SUCCESS] Removed {removed} expired snapshot(s)")


# --- File integrity ---


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--output",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the baseline JSON",
)
def build_baseline(directory: Path, output: Path) -> None:
    """Record MD5 checksums of every file under DIRECTORY."""
    from src.domains.integrity.core.baseline import build_baseline as build

    config = _get_config()
    configure_logging(config.log_level)

    files = build(directory)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps({"files": files}, indent=2, sort_keys=True), encoding="utf-8")
    click.echo(f"[SUCCESS] Baseline of {len(files)} file(s) written to {output}")


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--baseline",
    "baseline_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Baseline JSON produced by build-baseline",
)
@click.option("--operation-id", default=None, help="Progress snapshot id (generated if omitted)")
@click.option("--batch-size", default=None, type=int, help="Files per chunk")
@click.option("--no-delay", is_flag=True, help="Disable pacing delays between files and chunks")
def verify_files(
    directory: Path,
    baseline_path: Path,
    operation_id: str | None,
    batch_size: int | None,
    no_delay: bool,
) -> None:
    """Verify files under DIRECTORY against a checksum baseline."""
    from src.domains.integrity.core.baseline import parse_baseline
    from src.domains.integrity.services.file_verifier import FileVerifier
    from src.services.batch_processor import BatchExecutor

    config = _get_config()
    configure_logging(config.log_level)

    operation_id = operation_id or f"verify-{uuid.uuid4().hex[:12]}"
    store = _get_store(config, operation_id)

    try:
        baseline = parse_baseline(json.loads(baseline_path.read_text(encoding="utf-8")))
    except ValueError as exc:
        store.send_error(f"Invalid baseline: {exc}", {"baseline": str(baseline_path)})
        raise click.ClickException(f"Invalid baseline: {exc}") from exc

    executor = BatchExecutor(
        store,
        chunk_size=batch_size if batch_size is not None else config.batch_size,
        item_delay=0.0 if no_delay else config.item_delay_seconds,
        chunk_delay=0.0 if no_delay else config.chunk_delay_seconds,
    )
    click.echo(f"[INFO] Verifying {len(baseline)} file(s); progress id: {operation_id}")

    try:
        report = FileVerifier(executor).verify(directory, baseline)
    except OperationError as exc:
        store.send_error(exc.message, exc)
        raise click.ClickException(exc.message) from exc

    stats: dict[str, Any] = {
        "total_processed": report.result.total_processed,
        "total_successful": report.result.total_succeeded,
        "total_failed": report.result.total_failed,
    }
    click.echo(format_batch_summary(stats, report.result.errors))
    if report.unexpected_files:
        click.echo(f"  Unexpected files ({len(report.unexpected_files)}):")
        for path in report.unexpected_files[:10]:
            click.echo(f"    - {path}")
    if report.result.total_failed:
        raise click.exceptions.Exit(1)
