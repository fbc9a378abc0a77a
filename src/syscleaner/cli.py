"""CLI interface for SysCleaner."""

from __future__ import annotations

import json
import logging
import sys
from datetime import timedelta
from pathlib import Path

import click

from syscleaner.config import Config, ConfigError, default_config_path, load_config, save_config
from syscleaner.core.categories import CATEGORIES, get_category, resolve_targets
from syscleaner.core.engine import CleanReport, CleanupEngine
from syscleaner.core.optimizer import get_network_tuner, get_startup_optimizer
from syscleaner.models.clean_result import CleanResult
from syscleaner.models.target import CleanOptions, CleanTarget
from syscleaner.utils import bytes_to_human, format_elapsed

log = logging.getLogger("syscleaner")

_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _setup_logging(verbosity: int, log_file: str | None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    if log_file:
        path = Path(log_file).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as e:
            log.warning("Cannot open log file %s: %s", path, e)
            return
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, _LOG_DATEFMT))
        logging.getLogger().addHandler(handler)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="Also write log lines to this file")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help="Config file to use")
@click.pass_context
def main(ctx: click.Context, verbose: int, log_file: str | None, config_path: Path | None) -> None:
    """SysCleaner: reclaim disk space from temp folders, caches and logs."""
    config = load_config(config_path)
    _setup_logging(verbose, log_file or config.log_file)
    ctx.obj = {"config": config, "config_path": config_path}


# ── categories ───────────────────────────────────────────────────────────

@main.command("categories")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def categories_cmd(obj: dict, as_json: bool) -> None:
    """List cleanup categories and the directories they resolve to."""
    config: Config = obj["config"]
    everything = CleanOptions(**{name: True for name in CleanOptions.option_names()})
    resolved: dict[str, list[str]] = {}
    for target in resolve_targets(everything, existing_only=False):
        resolved.setdefault(target.category_id, []).append(str(target.path))

    if as_json:
        data = [
            {
                "id": c.id,
                "name": c.name,
                "description": c.description,
                "max_age_seconds": int(c.max_age.total_seconds()),
                "enabled_by_default": config.default_clean_options.is_enabled(c.id),
                "directories": resolved.get(c.id, []),
            }
            for c in CATEGORIES
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for category in CATEGORIES:
        enabled = config.default_clean_options.is_enabled(category.id)
        mark = click.style("●", fg="green") if enabled else click.style("○", fg="bright_black")
        click.echo(f"  {mark} {click.style(category.id, fg='cyan', bold=True):30s}  {category.name}")
        click.echo(f"      {category.description}")
        dirs = resolved.get(category.id)
        if not dirs:
            click.echo(f"      {click.style('not available on this system', fg='bright_black')}")
        for directory in dirs or ():
            click.echo(f"      {click.style(directory, fg='bright_black')}")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("category_ids", nargs=-1)
@click.option("--all", "all_categories", is_flag=True, help="Clean every category")
@click.option("--path", "paths", multiple=True, type=click.Path(file_okay=False, path_type=Path),
              help="Clean this directory instead of categories (repeatable)")
@click.option("--max-age", type=click.FloatRange(min=0), default=0.0, show_default=True,
              help="Minimum file age in days for --path targets (0 = any age)")
@click.option("--dry-run", is_flag=True, help="Report what would be deleted without deleting it")
@click.option("--sequential", is_flag=True, help="Clean one directory at a time")
@click.option("--deadline", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Give up on directories still running after this many seconds")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def clean(
    obj: dict,
    category_ids: tuple[str, ...],
    all_categories: bool,
    paths: tuple[Path, ...],
    max_age: float,
    dry_run: bool,
    sequential: bool,
    deadline: float | None,
    as_json: bool,
    yes: bool,
) -> None:
    """Delete old files from the selected categories or directories."""
    config: Config = obj["config"]
    dry_run = dry_run or config.default_clean_options.dry_run

    if paths:
        if category_ids or all_categories:
            raise click.UsageError("--path cannot be combined with categories or --all")
        targets = [
            CleanTarget(category_id="custom", path=p, max_age=timedelta(days=max_age), dry_run=dry_run)
            for p in paths
        ]
    else:
        options = _build_options(config.default_clean_options, category_ids, all_categories, dry_run)
        targets = resolve_targets(options)

    if not targets:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "results": []}))
        else:
            click.echo("Nothing to clean.")
        return

    if not as_json:
        click.echo(f"\n{click.style('🧹', bold=True)} {'Simulating' if dry_run else 'Cleaning'} "
                   f"{len(targets)} directories:\n")
        for target in targets:
            age = f" (older than {_format_age(target.max_age)})" if target.max_age else ""
            click.echo(f"  {click.style(target.category_id, fg='cyan'):25s} {target.path}{age}")
        click.echo()

    if not dry_run and not yes and not as_json:
        if not click.confirm("Delete these files?", default=False):
            click.echo("Aborted.")
            return

    def on_progress(category_id: str, status: str) -> None:
        if not as_json and status == "timeout":
            click.echo(f"  {click.style('✗', fg='red')} {category_id:25s} — did not finish in time")

    engine = CleanupEngine(logger=log, max_workers=config.max_workers)
    report = engine.run(targets, parallel=not sequential, deadline=deadline, on_progress=on_progress)

    if as_json:
        click.echo(json.dumps(_report_to_dict(report, dry_run), indent=2))
        return

    _print_report(report, dry_run)


def _build_options(
    defaults: CleanOptions,
    category_ids: tuple[str, ...],
    all_categories: bool,
    dry_run: bool,
) -> CleanOptions:
    """Pick the categories to run: explicit ids, --all, or the configured defaults."""
    for cid in category_ids:
        if get_category(cid) is None:
            raise click.BadParameter(f"unknown category '{cid}'", param_hint="CATEGORY_IDS")

    if all_categories:
        options = CleanOptions(**{name: True for name in CleanOptions.option_names()})
    elif category_ids:
        options = CleanOptions(**{name: name in category_ids for name in CleanOptions.option_names()})
    else:
        options = CleanOptions.from_dict(defaults.to_dict())
    options.dry_run = dry_run
    return options


def _format_age(age: timedelta) -> str:
    if age.days >= 1 and age.seconds == 0:
        return f"{age.days} day{'s' if age.days != 1 else ''}"
    hours = age.total_seconds() / 3600
    return f"{hours:g} hours"


def _result_to_dict(result: CleanResult) -> dict:
    return {
        "files_deleted": result.files_deleted,
        "skipped_files": result.skipped_files,
        "space_freed": result.space_freed,
        "locked_files": result.locked_files,
        "permission_files": result.permission_files,
        "errors": [{"path": e.path, "kind": e.kind.value, "message": str(e.err)} for e in result.errors],
    }


def _report_to_dict(report: CleanReport, dry_run: bool) -> dict:
    return {
        "status": "dry_run" if dry_run else "cleaned",
        "elapsed_seconds": round(report.elapsed, 3),
        "total": _result_to_dict(report.total),
        "results": [
            {"category_id": target.category_id, "path": str(target.path), **_result_to_dict(result)}
            for target, result in report.outcomes
        ],
    }


def _print_report(report: CleanReport, dry_run: bool) -> None:
    verb = "would free" if dry_run else "freed"
    for category_id, result in report.by_category().items():
        if result.has_errors:
            click.echo(
                f"  {click.style('!', fg='yellow')} {category_id:25s} — "
                f"{verb} {bytes_to_human(result.space_freed)} ({result.files_deleted:,} files), "
                f"{len(result.errors)} error(s)"
            )
        else:
            click.echo(
                f"  {click.style('✓', fg='green')} {category_id:25s} — "
                f"{verb} {click.style(bytes_to_human(result.space_freed), fg='green', bold=True)} "
                f"({result.files_deleted:,} files)"
            )

    total = report.total
    label = "Total reclaimable" if dry_run else "Total freed"
    click.echo(
        f"\n{label}: {click.style(bytes_to_human(total.space_freed), fg='green', bold=True)} "
        f"in {format_elapsed(report.elapsed)}"
    )
    if total.failed_files:
        click.echo(
            click.style(
                f"{total.failed_files:,} files skipped: {total.locked_files:,} locked, "
                f"{total.permission_files:,} permission-denied",
                fg="yellow",
            )
        )
        for error in total.errors[:10]:
            click.echo(f"  {click.style(error.kind.value, fg='yellow'):20s} {error}")
        if len(total.errors) > 10:
            click.echo(f"  … and {len(total.errors) - 10} more (use --json for the full list)")
    click.echo()


# ── config ───────────────────────────────────────────────────────────────

@main.group("config")
def config_group() -> None:
    """Show or edit the configuration file."""


@config_group.command("show")
@click.pass_obj
def config_show(obj: dict) -> None:
    """Print the effective configuration as JSON."""
    config: Config = obj["config"]
    click.echo(json.dumps(config.to_dict(), indent=2))


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_obj
def config_init(obj: dict, force: bool) -> None:
    """Write a configuration file with default values."""
    path: Path = obj["config_path"] or default_config_path()
    if path.exists() and not force:
        click.echo(f"{path} already exists (use --force to overwrite).", err=True)
        sys.exit(1)
    try:
        save_config(Config(), path)
    except ConfigError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(f"Wrote {path}")


@config_group.command("set-option")
@click.argument("name", type=click.Choice([*CleanOptions.option_names(), "dry_run"]))
@click.argument("value", type=click.BOOL)
@click.pass_obj
def config_set_option(obj: dict, name: str, value: bool) -> None:
    """Turn a default clean option on or off."""
    config: Config = obj["config"]
    setattr(config.default_clean_options, name, value)
    try:
        path = save_config(config, obj["config_path"])
    except ConfigError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(f"{name} = {str(value).lower()} ({path})")


# ── optimize ─────────────────────────────────────────────────────────────

@main.command()
@click.option("--all", "run_all", is_flag=True, help="Run all optimizations")
@click.option("--startup", is_flag=True, help="Disable unnecessary startup programs")
@click.option("--network", is_flag=True, help="Disable network throttling")
def optimize(run_all: bool, startup: bool, network: bool) -> None:
    """Optimize startup programs and network settings."""
    if run_all:
        startup = network = True
    if not startup and not network:
        click.echo("No optimization targets specified. Use --all or --startup/--network.")
        return

    if startup:
        click.echo(f"\n{click.style('Startup', bold=True)}")
        result = get_startup_optimizer().optimize()
        if not result.supported:
            click.echo(f"  {click.style('not available on this system', fg='bright_black')}")
        else:
            for program in result.programs:
                status = click.style("disabled", fg="green") if program.disabled else program.impact
                click.echo(f"  {program.name:30s} {status}")
            click.echo(f"  Disabled {result.disabled} of {len(result.programs)} entries")

    if network:
        click.echo(f"\n{click.style('Network', bold=True)}")
        result = get_network_tuner().tune()
        if not result.supported:
            click.echo(f"  {click.style('not available on this system', fg='bright_black')}")
        elif result.throttling_disabled:
            click.echo(f"  {click.style('✓', fg='green')} Network throttling disabled")
        else:
            click.echo(f"  {click.style('✗', fg='red')} {result.error}")
    click.echo()
