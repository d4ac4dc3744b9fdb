"""
SmartMatch CLI

Command-line interface for ranking recommendations from a platform export.
"""

import asyncio
import logging
import sys
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

# Initialize console for rich output
console = Console()

UNAVAILABLE_MESSAGE = "recommendations currently unavailable"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    show_time: bool = True,
) -> None:
    """Configure logging with rich handler."""
    handlers = [RichHandler(console=console, show_path=False, show_time=show_time)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=handlers,
    )


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    """Parse --now as naive UTC, converting any UTC offset."""
    from smartmatch.models.entities import to_naive_utc

    if value is None:
        return None
    try:
        return to_naive_utc(datetime.fromisoformat(value))
    except ValueError:
        raise click.BadParameter(f"not an ISO timestamp: {value}", param_hint="--now")


def _build_orchestrator(input_dir: str, use_cache: Optional[bool] = None):
    """Load the export and config and wire up an orchestrator."""
    from smartmatch.pipeline.data_access import SnapshotDataAccess
    from smartmatch.pipeline.ingest import load_platform_snapshot
    from smartmatch.pipeline.orchestrator import RecommendationOrchestrator
    from smartmatch.utils.config import load_config

    config = load_config()
    if use_cache is not None:
        config.cache.enabled = use_cache

    snapshot = load_platform_snapshot(input_dir)
    orchestrator = RecommendationOrchestrator.from_config(config, SnapshotDataAccess(snapshot))
    return config, snapshot, orchestrator


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """SmartMatch - Rank entrepreneur and funder recommendations."""
    from smartmatch.utils.config import load_config

    ctx.ensure_object(dict)
    logging_config = load_config().logging

    if verbose:
        ctx.obj["log_level"] = "DEBUG"
    elif quiet:
        ctx.obj["log_level"] = "WARNING"
    else:
        ctx.obj["log_level"] = logging_config.level

    setup_logging(ctx.obj["log_level"], logging_config.file, logging_config.timestamps)


@cli.command()
@click.option(
    "--input", "-i",
    "input_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Directory containing the platform export files",
)
@click.option("--user", "-u", "user_id", required=True, help="User to rank candidates for")
@click.option("--now", "now_value", default=None, help="Reference time (ISO 8601, default: now)")
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum candidates to return",
)
@click.option(
    "--output", "-o",
    "output_dir",
    default=None,
    type=click.Path(file_okay=False, dir_okay=True),
    help="Output directory for reports",
)
@click.option(
    "--format", "-f",
    "formats",
    multiple=True,
    type=click.Choice(["csv", "markdown", "json"]),
    default=None,
    help="Output formats to generate",
)
@click.option(
    "--cache/--no-cache",
    "use_cache",
    default=None,
    help="Enable or disable the ranking cache (default: from config)",
)
@click.pass_context
def recommend(
    ctx: click.Context,
    input_dir: str,
    user_id: str,
    now_value: Optional[str],
    limit: Optional[int],
    output_dir: Optional[str],
    formats: tuple[str, ...],
    use_cache: Optional[bool],
) -> None:
    """Rank candidates for a user and write recommendation reports."""
    from smartmatch.errors import UpstreamTimeoutError, UserNotFoundError
    from smartmatch.pipeline.outputs import OutputGenerator

    now = _parse_now(now_value)

    console.print(f"\n[bold blue]Recommendations for {user_id}[/bold blue]")
    console.print("=" * 50)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Loading platform export...", total=None)
        try:
            config, snapshot, orchestrator = _build_orchestrator(input_dir, use_cache)
            progress.update(task, completed=True)
            console.print(
                f"  [green]✓[/green] Loaded {len(snapshot.users)} users, "
                f"{len(snapshot.swipes)} swipes, {len(snapshot.matches)} matches"
            )
        except (FileNotFoundError, ValueError) as e:
            progress.update(task, completed=True)
            console.print(f"  [red]✗[/red] Failed to load data: {e}")
            sys.exit(1)

        task = progress.add_task("Ranking candidates...", total=None)
        try:
            ranked = asyncio.run(orchestrator.get_recommendations(
                user_id,
                now=now,
                limit=limit if limit is not None else config.pipeline.max_results,
            ))
            progress.update(task, completed=True)
        except (UserNotFoundError, UpstreamTimeoutError) as e:
            progress.update(task, completed=True)
            logging.debug(f"Recommendation error: {e}", exc_info=True)
            console.print(f"[red]{UNAVAILABLE_MESSAGE}[/red]")
            sys.exit(1)
        finally:
            orchestrator.cache.close()

        task = progress.add_task("Generating reports...", total=None)
        generator = OutputGenerator(
            output_dir=output_dir or config.output.directory,
            formats=list(formats) or config.output.formats,
            timestamp_filenames=config.output.timestamp_filenames,
            max_items_per_section=config.output.markdown.get("max_items_per_section", 20),
            include_methodology=config.output.markdown.get("include_methodology", True),
        )
        output_files = generator.generate_recommendations(ranked, user_id)
        progress.update(task, completed=True)

    console.print("\n[bold]Reports Generated:[/bold]")
    for fmt, path in output_files.items():
        console.print(f"  • {fmt}: [cyan]{path}[/cyan]")

    if not ranked:
        console.print("\n[yellow]No candidates are currently available.[/yellow]\n")
        return

    console.print(f"\n[bold]Top {min(len(ranked), 10)} Candidates:[/bold]")
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Smart", justify="right")
    table.add_column("Base", justify="right")
    table.add_column("Behavior", justify="right")
    table.add_column("Pattern", justify="right")
    table.add_column("Insights")

    for i, r in enumerate(ranked[:10], 1):
        table.add_row(
            str(i),
            r.candidate.name,
            r.candidate.profile_type.value if r.candidate.profile_type else "-",
            f"{r.smart_score:.1f}",
            f"{r.base_score:.1f}",
            f"{r.behavior_score:.1f}",
            f"{r.pattern_score:.1f}",
            ", ".join(insight.type.value for insight in r.insights) or "[dim]-[/dim]",
        )

    console.print(table)
    console.print()


@cli.command()
@click.option(
    "--input", "-i",
    "input_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Directory containing the platform export files",
)
@click.option("--user", "-u", "user_id", required=True, help="User to profile")
@click.option("--now", "now_value", default=None, help="Reference time (ISO 8601, default: now)")
@click.pass_context
def profile(ctx: click.Context, input_dir: str, user_id: str, now_value: Optional[str]) -> None:
    """Show the behavior profile and success patterns derived for a user."""
    from smartmatch.errors import UpstreamTimeoutError, UserNotFoundError

    now = _parse_now(now_value)

    try:
        _, _, orchestrator = _build_orchestrator(input_dir, use_cache=False)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading data: {e}[/red]")
        sys.exit(1)

    try:
        signals = asyncio.run(orchestrator.get_user_signals(user_id, now=now))
    except (UserNotFoundError, UpstreamTimeoutError) as e:
        logging.debug(f"Profile error: {e}", exc_info=True)
        console.print(f"[red]{UNAVAILABLE_MESSAGE}[/red]")
        sys.exit(1)

    behavior = signals.profile

    console.print(f"\n[bold blue]Behavior Profile: {signals.user.name}[/bold blue]")
    console.print("=" * 50)

    table = Table(show_header=False)
    table.add_column("Signal", style="bold")
    table.add_column("Value", justify="right")

    table.add_row(
        "Preferred industries",
        ", ".join(sorted(behavior.preferred_industries)) or "-",
    )
    if behavior.investment_range is not None:
        table.add_row(
            "Investment range",
            f"{behavior.investment_range.min:,.0f} - {behavior.investment_range.max:,.0f}",
        )
    else:
        table.add_row("Investment range", "-")
    table.add_row("Active hours", ", ".join(str(h) for h in sorted(behavior.active_hours)) or "-")
    table.add_row("Active days", ", ".join(str(d) for d in sorted(behavior.active_days)) or "-")
    table.add_row("Response rate", f"{behavior.response_rate:.0%}")
    table.add_row("Match rate", f"{behavior.historical_match_rate:.0%}")

    console.print(table)

    if not signals.patterns:
        console.print("\n[dim]No successful matches to learn from yet.[/dim]\n")
        return

    console.print(f"\n[bold]Success Patterns ({len(signals.patterns)}):[/bold]")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Industry", justify="right")
    table.add_column("Experience gap", justify="right")
    table.add_column("Investment", justify="right")
    table.add_column("Verification")
    table.add_column("Conversion", justify="right")

    for p in sorted(signals.patterns, key=lambda p: p.conversion_rate, reverse=True):
        table.add_row(
            f"{p.industry_alignment:.2f}",
            f"{p.experience_gap:.1f}y",
            f"{p.investment_alignment:.2f}",
            p.verification_level.value,
            f"{p.conversion_rate:.2f}",
        )

    console.print(table)
    console.print()


@cli.command()
@click.option(
    "--input", "-i",
    "input_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Directory containing the platform export files",
)
@click.pass_context
def stats(ctx: click.Context, input_dir: str) -> None:
    """Show quick statistics about a platform export."""
    from smartmatch.pipeline.ingest import load_platform_snapshot

    console.print("\n[bold blue]Platform Export Statistics[/bold blue]")
    console.print("=" * 50)

    try:
        snapshot = load_platform_snapshot(input_dir)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading data: {e}[/red]")
        sys.exit(1)

    console.print(f"\n[bold]Source:[/bold] {input_dir}")
    console.print("\n[bold]Files loaded:[/bold]")
    for f in snapshot.loaded_files:
        console.print(f"  • {f}")

    if snapshot.skipped_files:
        console.print("\n[dim]Files not found:[/dim]")
        for f in snapshot.skipped_files:
            console.print(f"  • {f}")

    console.print("\n[bold]Data Summary:[/bold]")
    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")

    profile_types: dict[str, int] = {}
    for user in snapshot.users:
        key = user.get("profile_type") or "unknown"
        profile_types[key] = profile_types.get(key, 0) + 1

    table.add_row("Users", str(len(snapshot.users)))
    for profile_type, count in sorted(profile_types.items()):
        table.add_row(f"  {profile_type}", str(count))
    table.add_row("Swipes", str(len(snapshot.swipes)))
    table.add_row("Messages", str(len(snapshot.messages)))
    table.add_row("Matches", str(len(snapshot.matches)))
    table.add_row("Interactions", str(len(snapshot.interactions)))

    console.print(table)

    industries: dict[str, int] = {}
    for user in snapshot.users:
        for industry in user.get("industries", []):
            industries[industry] = industries.get(industry, 0) + 1

    if industries:
        top_industries = sorted(industries.items(), key=lambda x: x[1], reverse=True)[:10]

        console.print("\n[bold]Top Industries:[/bold]")
        table = Table(show_header=True, header_style="bold")
        table.add_column("Industry")
        table.add_column("Profiles", justify="right")

        for industry, count in top_industries:
            table.add_row(industry, str(count))

        console.print(table)

    console.print()


@cli.command()
@click.option("--clear", is_flag=True, help="Remove all cached rankings")
@click.pass_context
def cache(ctx: click.Context, clear: bool) -> None:
    """Show or clear the ranking cache."""
    from smartmatch.utils.cache import RecommendationCache
    from smartmatch.utils.config import load_config

    config = load_config()
    store = RecommendationCache(
        cache_path=config.cache.path,
        ttl_seconds=config.cache.ttl_seconds,
        bucket_minutes=config.cache.bucket_minutes,
        max_size_mb=config.cache.max_size_mb,
    )

    try:
        if clear:
            store.clear()
            console.print("[green]Cache cleared[/green]")
            return

        table = Table(show_header=False)
        table.add_column("Property", style="bold")
        table.add_column("Value", justify="right")
        for key, value in store.stats().items():
            table.add_row(key, str(value))
        console.print(table)
    finally:
        store.close()


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from smartmatch import __version__

    console.print(f"SmartMatch v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
