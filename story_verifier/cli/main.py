"""Command-line interface for story verification using Typer and Rich."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from story_verifier.config.logging import configure_logging, get_logger
from story_verifier.config.settings import settings
from story_verifier.data_management.schemas.story_schema import PolicyArea, Story
from story_verifier.data_management.schemas.verification_schema import AggregatedVerification

app = typer.Typer(
    help="Citizen story verification against public government datasets",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")

# Settings fields holding credentials, shown by `status`
CREDENTIALS = (
    ("Census", "census_api_key"),
    ("EIA", "eia_api_key"),
    ("NOAA", "noaa_token"),
    ("HUD", "hud_api_token"),
    ("api.data.gov", "data_gov_api_key"),
    ("Congress.gov", "congress_api_key"),
    ("OpenFEC", "fec_api_key"),
)


def _load_stories(path: Path) -> List[Story]:
    """Read one story object or a list of them from a JSON file."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        console.print(f"[red]✗[/red] Cannot read {path}: {escape(str(e))}")
        raise typer.Exit(1)

    items = payload if isinstance(payload, list) else [payload]
    try:
        return [Story.model_validate(item) for item in items]
    except ValidationError as e:
        console.print(f"[red]✗[/red] Invalid story in {path}:\n{escape(str(e))}")
        raise typer.Exit(1)


def _print_verification(result: AggregatedVerification) -> None:
    status = "[green]✓ Verified[/green]" if result.verified else "[yellow]⚠ Not verified[/yellow]"
    console.print(Panel(
        f"{status}\n"
        f"Confidence: [bold]{result.confidence}[/bold]\n"
        f"Sources: {result.data_source}",
        title=f"Story {result.story_id}",
        border_style="green" if result.verified else "yellow",
    ))

    if result.per_adapter:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Adapter", style="cyan")
        table.add_column("Confidence", justify="right")
        table.add_column("Verified")
        table.add_column("Source", style="dim")
        for name in result.adapters_invoked:
            record = result.per_adapter.get(name)
            if record is None:
                table.add_row(name, "-", "-", "failed")
                continue
            confidence = "n/a" if record.confidence is None else str(record.confidence)
            table.add_row(name, confidence, "yes" if record.verified else "no", record.data_source)
        console.print(table)

    for insight in result.insights:
        console.print(f"  [cyan]•[/cyan] [bold]{insight.type}[/bold]: {insight.message}")
    for flag in result.flags:
        color = {"high": "red", "medium": "yellow"}.get(flag.severity.value, "dim")
        console.print(f"  [{color}]⚑ {flag.severity.value}[/{color}] {flag.message}")


@app.command()
def verify(
    story_file: Path = typer.Argument(..., help="JSON file with one story or a list of stories"),
    adapters: Optional[List[str]] = typer.Option(
        None, "--adapter", "-a", help="Verify against these adapters instead of routing"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Verify stories against the government datasets their topics route to.

    Args:
        story_file: Path to the story JSON
        adapters: Optional explicit adapter names
        as_json: Emit machine-readable output
        verbose: Debug logging
    """
    if verbose:
        configure_logging("DEBUG")
    stories = _load_stories(story_file)
    logger.info(f"Verifying {len(stories)} story(ies) from {story_file}")

    from story_verifier.pipeline.verification_pipeline import VerificationPipeline

    async def run() -> List[AggregatedVerification]:
        async with VerificationPipeline() as pipeline:
            if adapters:
                return [await pipeline.verify_story(s, adapters) for s in stories]
            return await pipeline.verify_batch(stories)

    results = asyncio.run(run())

    if as_json:
        console.print_json(json.dumps([r.model_dump(mode="json") for r in results]))
        return
    for result in results:
        _print_verification(result)


@app.command()
def context(
    state: str = typer.Option(..., "--state", "-s", help="Two-letter state code"),
    policy_area: str = typer.Option(..., "--policy-area", "-p", help="Policy area"),
    zip_code: Optional[str] = typer.Option(None, "--zip", "-z", help="5-digit ZIP code"),
) -> None:
    """
    Show the raw datasets for a state and policy area without scoring.

    Args:
        state: Two-letter state code
        policy_area: Policy area selecting adapters
        zip_code: Optional ZIP code
    """
    from story_verifier.pipeline.verification_pipeline import VerificationPipeline

    area = PolicyArea(policy_area)

    async def run():
        async with VerificationPipeline() as pipeline:
            return await pipeline.get_story_context(state, area, zip_code)

    story_context = asyncio.run(run())

    if not story_context.datasets:
        console.print(f"[yellow]⚠[/yellow] No datasets are routed for policy area '{area.value}'")
        return

    for name, dataset in story_context.datasets.items():
        body = json.dumps(
            dataset.model_dump(
                mode="json",
                exclude={"adapter", "geography", "retrieved_at", "degraded", "failure_reason"},
            ),
            indent=2,
        )
        console.print(Panel(
            body,
            title=f"{name} · {dataset.provenance}",
            border_style="yellow" if dataset.degraded else "green",
        ))


@app.command()
def route(
    story_file: Path = typer.Argument(..., help="JSON file with one story or a list of stories"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Routing profile: base or extended"),
) -> None:
    """
    Show which adapters each story would be verified against.

    Args:
        story_file: Path to the story JSON
        profile: Routing profile override
    """
    from story_verifier.config.scoring_weights import AdapterConfigurationError
    from story_verifier.routing.topic_router import TopicRouter

    try:
        router = TopicRouter(profile=profile)
    except AdapterConfigurationError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title=f"Routing ({router.profile})", show_header=True, header_style="bold magenta")
    table.add_column("Story", style="cyan")
    table.add_column("Policy area")
    table.add_column("Adapters", style="green")
    for story in _load_stories(story_file):
        names = router.route(story)
        table.add_row(story.id, story.policy_area.value, ", ".join(names) or "[dim]none[/dim]")
    console.print(table)


@app.command()
def status() -> None:
    """
    Display configuration: credentials, quotas, retry policy and routing.
    """
    logger.info("Displaying configuration status")

    table = Table(title="Story Verifier Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=16)
    table.add_column("Details", style="yellow")

    for label, field_name in CREDENTIALS:
        value = getattr(settings, field_name)
        configured = bool(value) and value != "DEMO_KEY"
        table.add_row(
            label,
            "✓ Configured" if configured else "⚠ Not Configured",
            field_name.upper(),
        )

    table.add_row(
        "Quotas",
        "✓ Active",
        f"data.gov {settings.data_gov_daily_limit}/day, Congress {settings.congress_hourly_limit}/h, "
        f"FEC {settings.fec_hourly_limit}/h, Census {settings.census_daily_limit}/day",
    )
    table.add_row(
        "Retry Policy",
        "✓ Active",
        f"{settings.max_retries} retries, backoff {settings.backoff_base_seconds:g}s base, "
        f"429 cooldown {settings.rate_limit_cooldown_seconds:g}s",
    )
    table.add_row("Routing", "✓ Active", f"Profile: {settings.routing_profile}")
    cache_status = "✓ Enabled" if settings.dataset_cache_ttl_seconds > 0 else "✗ Disabled"
    table.add_row("Dataset Cache", cache_status, f"TTL {settings.dataset_cache_ttl_seconds:g}s")
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


if __name__ == "__main__":
    app()
