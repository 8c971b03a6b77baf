"""Command line interface for the mediaseq project."""

from __future__ import annotations

import logging
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from mediaseq.config import SETTING_KEYS, ConfigError, ConfigManager, MediaseqConfig
from mediaseq.config.models import LoggingSettings
from mediaseq.errors import MonitorError
from mediaseq.ingestion import ExifMetadataProvider, MediaScanner
from mediaseq.naming import (
    FilenameGenerator,
    MediaItem,
    MetadataFilenameGenerator,
    RenameConfig,
    SortStrategy,
    sort_items,
)
from mediaseq.renaming import (
    BatchExecutor,
    BatchReport,
    CancellationToken,
    ExecutionProgress,
    ExecutionStatus,
    LocalRenameProvider,
    PreviewEngine,
    PreviewEntry,
    PreviewSummary,
    collect,
)
from mediaseq.watch import (
    FileSystemEvent,
    FolderMonitor,
    MonitorStatus,
    StatusActive,
    StatusError,
    StatusInactive,
    WatchedFolder,
)

console = Console()
LOGGER = logging.getLogger(__name__)

_STATUS_STYLES = {
    ExecutionStatus.SUCCESS: "green",
    ExecutionStatus.FAILED: "red",
    ExecutionStatus.SKIPPED: "yellow",
}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        root: Target root path relevant to the command.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _configure_logging(settings: LoggingSettings) -> None:
    """Route package logs through a rich handler at the configured level."""

    logger = logging.getLogger("mediaseq")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(settings.level)


def _resolve_output_modes(
    ctx: click.Context,
    config: MediaseqConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _load_config(template_overrides: dict[str, Any], *, json_output: bool) -> MediaseqConfig:
    """Load configuration with CLI template flags applied last."""

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        config = manager.load(template_overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        raise
    _configure_logging(config.logging)
    return config


def _template_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the naming template and selection options shared by commands."""

    options = [
        click.option("--prefix", type=str, help="Text placed before the sequence number."),
        click.option("--start", "start_number", type=int, help="First sequence number."),
        click.option("--digits", "digit_count", type=int, help="Zero-padded number width (1-6)."),
        click.option(
            "--keep-ext/--drop-ext",
            "preserve_extension",
            help="Keep or drop the original file extension.",
        ),
        click.option(
            "--sort",
            "sort_strategy",
            type=click.Choice([strategy.value for strategy in SortStrategy]),
            help="Ordering applied before numbering.",
        ),
        click.option(
            "--metadata/--no-metadata",
            "use_metadata",
            help="Expand {date}, {camera}, and other EXIF placeholders in the prefix.",
        ),
        click.option("--pattern", type=str, help="Only include names matching a wildcard."),
        click.option("-r", "--recursive", is_flag=True, help="Include subfolders."),
        click.option(
            "--save-template",
            is_flag=True,
            help="Store the effective naming template as the new default.",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


_TEMPLATE_KEYS = {
    "prefix": "rename.prefix",
    "start_number": "rename.start_number",
    "digit_count": "rename.digit_count",
    "preserve_extension": "rename.preserve_extension",
    "sort_strategy": "rename.sort_strategy",
    "use_metadata": "rename.use_metadata",
    "pattern": "{section}.pattern",
    "recursive": "{section}.recursive",
}


def _template_overrides(
    ctx: click.Context, section: str, params: dict[str, Any]
) -> dict[str, Any]:
    """Return dotted config overrides for the template flags given on the command line."""

    overrides: dict[str, Any] = {}
    for name, key in _TEMPLATE_KEYS.items():
        if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE:
            overrides[key.format(section=section)] = params[name]
    return overrides


def _build_generator(config: MediaseqConfig) -> FilenameGenerator:
    if config.rename.use_metadata:
        return MetadataFilenameGenerator(ExifMetadataProvider())
    return FilenameGenerator()


def _collect_items(
    root: Path, config: MediaseqConfig, rename_config: RenameConfig
) -> list[MediaItem]:
    scanner = MediaScanner(
        recursive=config.scan.recursive,
        include_hidden=config.scan.include_hidden,
        follow_symlinks=config.scan.follow_symlinks,
        media_types=config.scan.media_types,
        pattern=config.scan.pattern,
    )
    return sort_items(list(scanner.scan(root)), rename_config.sort_strategy)


def _save_template(config: MediaseqConfig, *, quiet: bool, summary_only: bool) -> None:
    ConfigManager().save_rename_settings(config.rename)
    _emit_message(
        "[cyan]Saved naming template as the default.[/cyan]",
        mode="detail",
        quiet=quiet,
        summary_only=summary_only,
    )


def _entry_payload(entry: PreviewEntry) -> dict[str, Any]:
    return {
        "original": entry.original.name,
        "path": entry.original.path.as_posix(),
        "new_name": entry.candidate_name,
        "sequence_index": entry.sequence_index,
        "changed": entry.is_changed,
        "error": _error_payload(entry.error),
    }


def _progress_payload(progress: ExecutionProgress) -> dict[str, Any]:
    return {
        "original": progress.item.name,
        "new_name": progress.candidate_name,
        "status": progress.status.value,
        "sequence_index": progress.sequence_index,
        "error": _error_payload(progress.error),
    }


def _context_payload(root: Path, rename_config: RenameConfig) -> dict[str, Any]:
    return {"root": root.as_posix(), "config": rename_config.model_dump(mode="json")}


def _error_payload(error: Any) -> Optional[dict[str, str]]:
    if error is None:
        return None
    return {"kind": error.kind.value, "reason": error.reason}


def _summary_metrics(summary: PreviewSummary) -> dict[str, int]:
    return {
        "files": summary.total,
        "ready": summary.committable,
        "conflicts": summary.conflicts,
        "unchanged": summary.unchanged,
    }


def _preview_table(root: Path, entries: list[PreviewEntry]) -> Table:
    table = Table(title=f"Rename preview for {root}")
    table.add_column("#", justify="right")
    table.add_column("Original", overflow="fold")
    table.add_column("New name", overflow="fold")
    table.add_column("Status", overflow="fold")
    for entry in entries:
        if entry.has_conflict:
            status = f"[red]{entry.conflict_reason}[/red]"
        elif not entry.is_changed:
            status = "[dim]unchanged[/dim]"
        else:
            status = "[green]ready[/green]"
        table.add_row(
            str(entry.sequence_index + 1), entry.original.name, entry.candidate_name, status
        )
    return table


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Translate Ctrl+C into a cancellation request between items."""

    def _request_cancel(signum: int, frame: Any) -> None:
        token.cancel()

    try:
        previous = signal.signal(signal.SIGINT, _request_cancel)
    except ValueError:  # pragma: no cover - not on the main thread
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _list_strategies(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    table = Table(title="Sort strategies")
    table.add_column("Value", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Example")
    for strategy in SortStrategy:
        table.add_row(strategy.value, strategy.display_name, strategy.description, strategy.example)
    console.print(table)
    ctx.exit()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="mediaseq")
@click.option(
    "--list-strategies",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_list_strategies,
    help="Show the available sort strategies and exit.",
)
def cli() -> None:
    """Rename media files into clean numbered sequences."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@_template_options
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the preview.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def preview(
    ctx: click.Context,
    path: str,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    save_template: bool,
    **template: Any,
) -> None:
    """Show the names files in PATH would receive without renaming anything.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Folder containing the media files.
        json_output: If True, emit the preview as JSON.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
        save_template: When True, store the effective template as the default.
        template: Naming template and selection overrides.
    """

    config = _load_config(_template_overrides(ctx, "scan", template), json_output=json_output)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )
    root = Path(path).expanduser().resolve()
    rename_config = config.rename.to_rename_config()
    items = _collect_items(root, config, rename_config)

    engine = PreviewEngine(generator=_build_generator(config))
    entries = engine.preview(items, rename_config)
    summary = engine.summarize(entries)

    if save_template:
        _save_template(config, quiet=quiet_enabled or json_output, summary_only=summary_only)

    if json_output:
        console.print_json(
            data={
                "context": _context_payload(root, rename_config),
                "summary": {**_summary_metrics(summary), "can_proceed": summary.can_proceed},
                "entries": [_entry_payload(entry) for entry in entries],
            }
        )
        return

    if not entries:
        _emit_message(
            "[yellow]No media files matched the selection.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        return

    _emit_message(
        _preview_table(root, entries),
        mode="detail",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    _emit_message(
        f"[cyan]{summary.message}[/cyan]",
        mode="detail",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    _emit_message(
        _format_summary_line("Preview", root, _summary_metrics(summary)),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@_template_options
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
@click.option("--dry-run", is_flag=True, help="Preview changes without renaming files.")
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retry failed renames this many times.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the results.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def rename(
    ctx: click.Context,
    path: str,
    assume_yes: bool,
    dry_run: bool,
    retries: int,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    save_template: bool,
    **template: Any,
) -> None:
    """Rename media files in PATH into a numbered sequence.

    The batch is previewed first; nothing is renamed while any file has a
    conflict. Press Ctrl+C during execution to stop after the current file.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Folder containing the media files.
        assume_yes: Skip the confirmation prompt.
        dry_run: If True, only show the preview.
        retries: Number of retry passes over failed renames.
        json_output: If True, emit JSON describing the results.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
        save_template: When True, store the effective template as the default.
        template: Naming template and selection overrides.

    Raises:
        click.ClickException: If the template is invalid or conflicts block the batch.
    """

    config = _load_config(_template_overrides(ctx, "scan", template), json_output=json_output)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )
    root = Path(path).expanduser().resolve()
    rename_config = config.rename.to_rename_config()

    config_error = rename_config.validation_error()
    if config_error is not None:
        _handle_cli_error(
            f"Invalid naming template: {config_error}",
            code="invalid_template",
            json_output=json_output,
        )
        return

    items = _collect_items(root, config, rename_config)
    generator = _build_generator(config)
    engine = PreviewEngine(generator=generator)
    entries = engine.preview(items, rename_config)
    summary = engine.summarize(entries)

    if save_template:
        _save_template(config, quiet=quiet_enabled or json_output, summary_only=summary_only)

    if summary.conflicts:
        _handle_cli_error(
            f"{summary.message}; nothing was renamed.",
            code="conflicts",
            json_output=json_output,
            details=[_entry_payload(entry) for entry in entries if entry.has_conflict],
        )
        return

    if not json_output:
        _emit_message(
            _preview_table(root, entries),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    if dry_run or not summary.can_proceed:
        if json_output:
            console.print_json(
                data={
                    "context": {"root": root.as_posix(), "dry_run": dry_run},
                    "summary": _summary_metrics(summary),
                    "entries": [_entry_payload(entry) for entry in entries],
                }
            )
            return
        _emit_message(
            f"[yellow]{summary.message}; dry run, no files renamed.[/yellow]"
            if dry_run
            else f"[yellow]{summary.message}.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        return

    if not assume_yes and not json_output:
        click.confirm(f"Rename {summary.committable} file(s) in {root}?", abort=True)

    executor = BatchExecutor(LocalRenameProvider(), generator=generator)
    token = CancellationToken()
    report = BatchReport(total=len(items))
    show_progress = (
        config.cli.progress_enabled and not (json_output or quiet_enabled or summary_only)
    )

    with _cancel_on_interrupt(token):
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            disable=not show_progress,
            transient=True,
        ) as progress_bar:
            task = progress_bar.add_task("Renaming", total=len(items))
            for event in executor.execute(items, rename_config, token):
                report.record(event)
                if event.is_terminal:
                    progress_bar.advance(task)

        for attempt in range(retries):
            if not report.failed or token.cancelled:
                break
            LOGGER.info("Retrying %d failed rename(s), attempt %d", len(report.failed), attempt + 1)
            retry_report = collect(executor.retry_failed(report, rename_config, token))
            report.failed = retry_report.failed
            report.succeeded.extend(retry_report.succeeded)
            report.skipped.extend(retry_report.skipped)

    report.cancelled = token.cancelled and report.processed < report.total
    outcomes = sorted(
        [*report.succeeded, *report.failed, *report.skipped],
        key=lambda event: event.sequence_index,
    )
    counts = {
        "renamed": len(report.succeeded),
        "failed": len(report.failed),
        "skipped": len(report.skipped),
        "cancelled": report.cancelled,
    }

    if json_output:
        console.print_json(
            data={
                "context": _context_payload(root, rename_config),
                "counts": counts,
                "results": [_progress_payload(event) for event in outcomes],
            }
        )
        return

    for event in outcomes:
        if event.status is ExecutionStatus.SUCCESS:
            continue
        style = _STATUS_STYLES[event.status]
        _emit_message(
            f"[{style}]{event.status.value}: {event.item.name} ({event.error})[/{style}]",
            mode="warning" if event.status is ExecutionStatus.SKIPPED else "error",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    if report.cancelled:
        _emit_message(
            f"[yellow]Cancelled after {report.processed} of {report.total} file(s).[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line("Rename", root, counts),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@_template_options
@click.option("--json", "json_output", is_flag=True, help="Emit one JSON object per change.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def watch(
    ctx: click.Context,
    path: str,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    save_template: bool,
    **template: Any,
) -> None:
    """Rename new files as they appear in PATH until interrupted.

    Args:
        ctx: Click context for parameter source inspection.
        path: Folder to monitor.
        json_output: When True, emit JSON payloads instead of text.
        summary_mode: When True, restrict output to summary/warning lines.
        quiet: When True, suppress non-error output entirely.
        save_template: When True, store the effective template as the default.
        template: Naming template and filter overrides.

    Raises:
        click.ClickException: If the folder cannot be monitored or monitoring fails.
    """

    config = _load_config(_template_overrides(ctx, "watch", template), json_output=json_output)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )
    root = Path(path).expanduser().resolve()
    if save_template:
        _save_template(config, quiet=quiet_enabled or json_output, summary_only=summary_only)

    folder = WatchedFolder(
        path=root,
        config=config.rename.to_rename_config(),
        pattern=config.watch.pattern,
        recursive=config.watch.recursive,
    )
    monitor = FolderMonitor(
        LocalRenameProvider(),
        generator=_build_generator(config),
        health_interval=config.watch.health_interval_seconds,
    )

    def _on_status(status: MonitorStatus) -> None:
        if json_output:
            console.print_json(data={"status": _status_payload(status)})
        elif isinstance(status, StatusActive):
            _emit_message(
                f"[cyan]Watching {status.folder_path} "
                f"({status.files_processed} new file(s) processed).[/cyan]",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    def _on_event(event: FileSystemEvent) -> None:
        if json_output:
            console.print_json(
                data={"event": {"kind": event.kind.value, "path": event.path}}
            )

    def _on_result(progress: ExecutionProgress) -> None:
        if json_output:
            console.print_json(data={"result": _progress_payload(progress)})
            return
        if progress.status is ExecutionStatus.SUCCESS:
            _emit_message(
                f"[green]{progress.item.name} -> {progress.candidate_name}[/green]",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        else:
            _emit_message(
                f"[yellow]Could not rename {progress.item.name}: {progress.error}[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    monitor.subscribe_status(_on_status)
    monitor.subscribe_events(_on_event)
    monitor.results.subscribe(_on_result)

    try:
        monitor.start(folder)
    except MonitorError as exc:
        _handle_cli_error(str(exc), code="watch_error", json_output=json_output, original=exc)
        return

    _emit_message(
        "[cyan]Press Ctrl+C to stop.[/cyan]",
        mode="detail",
        quiet=quiet_enabled or json_output,
        summary_only=summary_only,
    )
    final: Optional[MonitorStatus] = None
    try:
        while final is None:
            final = monitor.status.wait_for(
                lambda status: not isinstance(status, StatusActive), timeout=0.5
            )
    except KeyboardInterrupt:
        processed = monitor.files_processed
        monitor.stop()
        if not json_output:
            _emit_message(
                "[yellow]Watch stopped by user request.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            _emit_message(
                _format_summary_line("Watch", root, {"processed": processed}),
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        return

    if isinstance(final, StatusError):
        _handle_cli_error(final.message, code="watch_error", json_output=json_output)


def _status_payload(status: MonitorStatus) -> dict[str, Any]:
    if isinstance(status, StatusActive):
        return {
            "state": status.state,
            "folder": status.folder_path,
            "files_processed": status.files_processed,
        }
    if isinstance(status, StatusError):
        return {"state": status.state, "message": status.message}
    return {"state": StatusInactive.state}


@cli.group()
def config() -> None:
    """View and change stored mediaseq settings."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore MEDIASEQ__ environment overrides.")
@click.option("--keys", "list_keys", is_flag=True, help="List the setting names accepted by set.")
def config_view(no_env: bool, list_keys: bool) -> None:
    """Show the effective settings, or the setting names with --keys.

    Raises:
        click.ClickException: If the settings cannot be loaded.
    """
    if list_keys:
        for key in SETTING_KEYS:
            console.print(key, markup=False)
        return

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(use_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[dim]# {manager.path}[/dim]")
    yaml_text = yaml.safe_dump(loaded.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Store VALUE for the dotted setting KEY, e.g. ``rename.digit_count 4``.

    Raises:
        click.ClickException: If KEY is unknown or VALUE is invalid for it.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        change = manager.set_value(key, value)
        stored = manager.load(use_env=False)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if not change.changed:
        console.print(f"[yellow]{change.key} is already {change.current!r}.[/yellow]")
        return
    console.print(
        f"[green]Updated {change.key}: {change.previous!r} -> {change.current!r}.[/green]"
    )

    template_error = stored.rename.to_rename_config().validation_error()
    if change.key.startswith("rename.") and template_error is not None:
        console.print(f"[yellow]The stored template cannot be used yet: {template_error}[/yellow]")


@config.command("edit")
def config_edit() -> None:
    """Edit the settings file and store it once it validates.

    Raises:
        click.ClickException: If the edited document is invalid.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None or edited == original:
        console.print("[yellow]No changes applied.[/yellow]")
        return

    try:
        updated = manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print("[green]Settings updated.[/green]")
    template_error = updated.rename.to_rename_config().validation_error()
    if template_error is not None:
        console.print(f"[yellow]The stored template cannot be used yet: {template_error}[/yellow]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
