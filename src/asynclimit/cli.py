"""Click CLI for asynclimit — inspect limiter behaviour and configuration."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from asynclimit.config.hierarchy import load_config_hierarchy
from asynclimit.errors.exceptions import LimiterConfigError, QueueFullError
from asynclimit.types import CallOutcome, CallRecord, LimiterKind

console = Console()
error_console = Console(stderr=True)

_OUTCOME_STYLES = {
    CallOutcome.OK: "green",
    CallOutcome.FAILED: "red",
    CallOutcome.REJECTED: "yellow",
}


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="asynclimit")
def cli() -> None:
    """asynclimit — concurrency and rate limiting for async callables."""


@cli.command()
@click.option(
    "--mode",
    type=click.Choice([k.value for k in LimiterKind]),
    default=None,
    help="Limiter to simulate (default: limit, or the profile's kind).",
)
@click.option("--calls", type=int, default=None, help="Number of calls to issue at once.")
@click.option("--duration", type=float, default=None, help="Seconds each synthetic call takes.")
@click.option("--concurrency", type=int, default=None, help="Lanes for the concurrency limiter.")
@click.option("--interval", type=float, default=None, help="Rate limit interval in seconds.")
@click.option("--requests-per-interval", type=int, default=None, help="Starts allowed per interval.")
@click.option("--max-queue-size", type=int, default=None, help="Queued calls before rejecting.")
@click.option("--fail-every", type=int, default=0, help="Make every Nth call fail.")
@click.option("--profile", type=str, default=None, help="Limiter profile name.")
@click.option(
    "--config",
    "limits_file",
    type=click.Path(exists=True),
    default=None,
    help="Limits YAML containing the profile.",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def simulate(
    mode: str | None,
    calls: int | None,
    duration: float | None,
    concurrency: int | None,
    interval: float | None,
    requests_per_interval: int | None,
    max_queue_size: int | None,
    fail_every: int,
    profile: str | None,
    limits_file: str | None,
    verbose: int,
) -> None:
    """Run a synthetic workload through a limiter and show the schedule."""
    try:
        config = load_config_hierarchy(
            concurrency=concurrency,
            interval=interval,
            requests_per_interval=requests_per_interval,
            max_queue_size=max_queue_size,
            simulate_calls=calls,
            simulate_duration=duration,
            limits_file=limits_file,
        )
    except LimiterConfigError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    _setup_logging(verbose, str(config["log_level"]))

    async def _run() -> tuple[list[CallRecord], object]:
        limiter = _build_limiter(config, mode, profile)
        records = await _simulate(
            limiter,
            calls=config["simulate_calls"],
            duration=config["simulate_duration"],
            fail_every=fail_every,
        )
        return records, limiter.stats

    try:
        records, stats = asyncio.run(_run())
    except (LimiterConfigError, FileNotFoundError, ValueError, TypeError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    _print_schedule(records)
    _print_stats(stats)


def _build_limiter(config: dict, mode: str | None, profile_name: str | None) -> object:
    """Create the limiter described by CLI options, config, or a profile."""
    from asynclimit.concurrency.limiter import limit
    from asynclimit.concurrency.rate_limiter import rate_limit
    from asynclimit.core import from_profile

    if profile_name:
        path = config.get("limits_file")
        if not path:
            raise LimiterConfigError("--profile needs --config or ASYNCLIMIT_LIMITS_FILE")
        return from_profile(_run_work, profile_name, path)

    if mode == LimiterKind.RATE_LIMIT:
        return rate_limit(
            _run_work,
            config["interval"],
            requests_per_interval=config["requests_per_interval"],
            max_queue_size=config["max_queue_size"],
            queue_full_error=config["queue_full_error"],
        )
    return limit(_run_work, config["concurrency"])


async def _run_work(work: object) -> object:
    """Operation used by the simulator: awaits the work it is handed."""
    return await work()  # type: ignore[operator]


async def _simulate(
    limiter: object,
    calls: int,
    duration: float,
    fail_every: int = 0,
) -> list[CallRecord]:
    """Issue ``calls`` calls back-to-back and record when each ran."""
    loop = asyncio.get_running_loop()
    started = loop.time()
    records: list[CallRecord] = []
    futures = []

    def make_work(record: CallRecord):
        async def work() -> int:
            record.started_at = loop.time() - started
            try:
                await asyncio.sleep(duration)
                if fail_every and record.call % fail_every == 0:
                    raise RuntimeError(f"synthetic failure on call {record.call}")
                return record.call
            finally:
                record.ended_at = loop.time() - started

        return work

    for i in range(1, calls + 1):
        record = CallRecord(
            call=i,
            lane=limiter.pool.cursor,  # type: ignore[attr-defined]
            queued_at=loop.time() - started,
        )
        records.append(record)
        futures.append(limiter(make_work(record)))  # type: ignore[operator]

    results = await asyncio.gather(*futures, return_exceptions=True)
    for record, result in zip(records, results, strict=True):
        if isinstance(result, QueueFullError):
            record.outcome = CallOutcome.REJECTED
            record.error = str(result)
        elif isinstance(result, Exception):
            record.outcome = CallOutcome.FAILED
            record.error = str(result)

    return records


def _print_schedule(records: list[CallRecord]) -> None:
    table = Table(title="Call Schedule", show_header=True)
    table.add_column("Call", style="cyan")
    table.add_column("Lane")
    table.add_column("Start (s)")
    table.add_column("End (s)")
    table.add_column("Waited (s)")
    table.add_column("Outcome")

    for r in records:
        rejected = r.outcome == CallOutcome.REJECTED
        style = _OUTCOME_STYLES[r.outcome]
        table.add_row(
            str(r.call),
            "-" if rejected else str(r.lane),
            "-" if r.started_at is None else f"{r.started_at:.3f}",
            "-" if r.ended_at is None else f"{r.ended_at:.3f}",
            "-" if r.wait_seconds is None else f"{r.wait_seconds:.3f}",
            f"[{style}]{r.outcome.value}[/{style}]",
        )

    console.print(table)


def _print_stats(stats: object) -> None:
    from asynclimit.types import LimiterStats

    if not isinstance(stats, LimiterStats):
        return

    table = Table(title="Limiter Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("Lanes", str(stats.lanes))
    table.add_row("Accepted", str(stats.accepted))
    table.add_row("Rejected", str(stats.rejected))
    table.add_row("Rejection rate", f"{stats.rejection_rate:.1%}")
    table.add_row("Settled", str(stats.settled))
    table.add_row("Failed", str(stats.failed))
    table.add_row("Per lane", ", ".join(str(n) for n in stats.per_lane_dispatched))

    console.print(table)


@cli.command("config")
def show_config() -> None:
    """Show the resolved configuration."""
    try:
        config = load_config_hierarchy()
    except LimiterConfigError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    table = Table(title="Resolved Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for key in sorted(config):
        value = config[key]
        table.add_row(key, "unbounded" if value is None else str(value))

    console.print(table)


@cli.command("validate-config")
@click.argument("limits_yaml", type=click.Path(exists=True))
def validate_config(limits_yaml: str) -> None:
    """Validate a limits YAML file."""
    from asynclimit.config.loader import load_limits_yaml

    try:
        limits = load_limits_yaml(limits_yaml)
    except LimiterConfigError as e:
        error_console.print(f"[red]Invalid limits file:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Valid limits file:[/green] {len(limits.limiters)} limiter(s)")
    for name, profile in sorted(limits.limiters.items()):
        if profile.kind == LimiterKind.RATE_LIMIT:
            detail = f"{profile.requests_per_interval} per {profile.interval}s"
            if profile.max_queue_size is not None:
                detail += f", max queue {profile.max_queue_size}"
        else:
            detail = f"concurrency {profile.concurrency}"
        console.print(f"    - {name} ({profile.kind.value}: {detail})")


def main() -> None:
    """Entry point for the CLI."""
    cli()
