"""
Recipe Diversity - CLI Entry Point.

Usage:
    recipe-diversity serve               Run the HTTP API
    recipe-diversity health              Check configuration
    recipe-diversity summary USER_ID     Show a user's diversity summary
    recipe-diversity aggregate           Recompute metrics for all users
    recipe-diversity cleanup             Delete recipes past retention
    recipe-diversity --help              Show help
"""

import asyncio

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="recipe-diversity",
    help="Recipe Diversity - generate recipes that don't repeat what you cooked last week.",
    add_completion=False,
)
console = Console()


def _setup_logging() -> None:
    from recipe_diversity.config import get_settings
    from recipe_diversity.logging_config import configure_logging

    configure_logging(get_settings().log_level)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, envvar="PORT", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    _setup_logging()
    console.print(f"[bold green]Recipe Diversity[/bold green] listening on {host}:{port}")
    uvicorn.run("recipe_diversity.web.app:app", host=host, port=port, reload=reload)


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from recipe_diversity.config import get_settings
    from recipe_diversity.scoring.diversity import DIVERSITY_WEIGHTS

    console.print("\n[bold]Recipe Diversity Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.environment}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Models: {settings.generation_model} / {settings.embedding_model}")

        if settings.openai_api_key.startswith("sk-"):
            console.print("✅ OpenAI API key configured")
        else:
            console.print("⚠️  OpenAI API key may be invalid")

        if settings.supabase_url.startswith("https://"):
            console.print("✅ Supabase URL configured")
        else:
            console.print("❌ Supabase URL missing or invalid")

        # Weights were validated at import
        console.print(f"✅ Diversity weights sum to {DIVERSITY_WEIGHTS.total:.2f}")
        if not DIVERSITY_WEIGHTS.cuisine_constraints_enabled:
            console.print("ℹ️  Cuisine weight is 0: cuisine avoid/suggest lists are disabled")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from recipe_diversity import __version__

    console.print(f"Recipe Diversity version {__version__}")


@app.command()
def summary(
    user_id: str = typer.Argument(..., help="User to summarize"),
    refresh: bool = typer.Option(False, "--refresh", help="Recalculate even if a recent snapshot exists"),
) -> None:
    """Show a user's diversity metrics and insights."""
    from recipe_diversity.analytics.aggregator import AnalyticsAggregator
    from recipe_diversity.config import get_settings
    from recipe_diversity.db.supabase_store import SupabaseMemoryStore

    _setup_logging()
    stale_days = 0 if refresh else get_settings().metrics_stale_days
    aggregator = AnalyticsAggregator(SupabaseMemoryStore(), stale_after_days=stale_days)

    with Live(Spinner("dots", text="Calculating..."), console=console, transient=True):
        result = asyncio.run(aggregator.get_user_diversity_summary(user_id))

    metrics, insights = result.metrics, result.insights
    source = "cached" if result.cached else "fresh"
    console.print(Panel.fit(insights.summary, title=f"Diversity ({source})", border_style="green"))

    table = Table(title="Distributions")
    table.add_column("Dimension", style="bold")
    table.add_column("Counts")
    table.add_row("Cuisine", _format_counts(metrics.cuisine_distribution))
    table.add_row("Protein", _format_counts(metrics.protein_distribution))
    table.add_row("Method", _format_counts(metrics.method_distribution))
    console.print(table)
    console.print(f"Trend: [bold]{metrics.trend}[/bold]")

    for achievement in insights.achievements:
        console.print(f"🏆 {achievement}")
    for recommendation in insights.recommendations:
        console.print(f"💡 {recommendation}")


@app.command()
def aggregate(
    window_days: int = typer.Option(30, "--window-days", help="Metrics window in days"),
) -> None:
    """Recompute and store diversity metrics for every user."""
    from recipe_diversity.background.maintenance import aggregate_all_users
    from recipe_diversity.db.supabase_store import SupabaseMemoryStore

    _setup_logging()
    store = SupabaseMemoryStore()
    report = asyncio.run(aggregate_all_users(store, window_days=window_days))
    _print_report("Aggregation", report)


@app.command()
def cleanup(
    retention_days: int | None = typer.Option(None, "--retention-days", help="Defaults to RETENTION_DAYS (90)"),
) -> None:
    """Delete recipe memories older than the retention period."""
    from recipe_diversity.background.maintenance import cleanup_all_users
    from recipe_diversity.config import get_settings
    from recipe_diversity.db.supabase_store import SupabaseMemoryStore

    _setup_logging()
    days = retention_days or get_settings().retention_days
    report = asyncio.run(cleanup_all_users(SupabaseMemoryStore(), days))
    _print_report("Cleanup", report)
    console.print(f"   Deleted: {report.deleted} recipes older than {days} days")


def _format_counts(counts: dict[str, int]) -> str:
    if not counts:
        return "[dim]none[/dim]"
    return ", ".join(f"{name} ({count})" for name, count in counts.items())


def _print_report(label: str, report) -> None:
    status = "green" if not report.failed else "yellow"
    console.print(
        f"\n[{status}]{label}: {report.succeeded}/{report.processed} users succeeded[/{status}]"
    )
    for user_id, message in report.errors.items():
        console.print(f"  ❌ {user_id}: {message}")
    if report.failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
