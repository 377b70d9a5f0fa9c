"""CLI for the judging engine."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import structlog
import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from judging_engine import __version__
from judging_engine.core.config import EngineConfig, load_config
from judging_engine.core.errors import ConfigurationError, JudgingError
from judging_engine.engine import JudgingEngine
from judging_engine.models import JudgingMode
from judging_engine.services.standings import TeamStanding, render_standings
from judging_engine.services.storage import JudgingStore
from judging_engine.simulation import simulate_event

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="judging-engine",
    help="Judging Engine - assign judges to demo teams and rank them by pairwise Elo or criteria",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
DatabaseOption = Annotated[
    str | None, typer.Option("--database-url", help="Override the configured database URL")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"judging-engine v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Judging Engine CLI."""


def _configure_logging(config: EngineConfig, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _load(config_path: Path | None, database_url: str | None) -> EngineConfig:
    config = load_config(config_path) if config_path else EngineConfig()
    if database_url is not None:
        config.database_url = database_url
    return config


def _fail(e: Exception, verbose: bool = False) -> typer.Exit:
    if isinstance(e, FileNotFoundError):
        console.print(f"[red]Error:[/red] {e}")
    elif isinstance(e, ConfigurationError | JudgingError):
        console.print(f"[red]{escape(str(e))}")
    elif isinstance(e, PydanticValidationError):
        console.print(f"[red]Invalid configuration:[/red]\n{escape(str(e))}")
    else:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
    return typer.Exit(1)


def _print_standings(standings: list[TeamStanding], title: str) -> None:
    table = Table(title=title)
    table.add_column("Rank", justify="right")
    table.add_column("Team")
    table.add_column("Rating", justify="right")
    table.add_column("Confidence", justify="right")
    for rank, s in enumerate(standings, start=1):
        table.add_row(str(rank), s.team_name or s.team_id, f"{s.rating:.2f}", str(s.confidence))
    console.print(table)


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file."""
    try:
        config = load_config(config_path)
    except Exception as e:
        raise _fail(e) from e

    console.print("[green]Configuration is valid.[/green]")
    console.print(f"  Database: {config.database_url}")
    console.print(f"  K-factor: {config.rating.k_factor}")
    console.print(f"  Require team location: {config.matchmaking.require_team_location}")


@app.command("init-db")
def init_db(
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
) -> None:
    """Create the judging tables."""
    try:
        config = _load(config_path, database_url)
        store = JudgingStore(config.database_url)
        asyncio.run(store.close())
    except Exception as e:
        raise _fail(e) from e
    console.print(f"[green]Tables ready at[/green] {config.database_url}")


@app.command()
def standings(
    event_id: Annotated[str, typer.Argument(help="Event identifier")],
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
    markdown: Annotated[
        bool, typer.Option("--markdown", help="Print a markdown table instead")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Show the leaderboard of an event."""
    try:
        config = _load(config_path, database_url)
        _configure_logging(config, verbose)

        async def _run() -> list[TeamStanding]:
            engine = JudgingEngine.from_config(config)
            try:
                return await engine.get_team_standings(event_id)
            finally:
                await engine.close()

        rows = asyncio.run(_run())
    except Exception as e:
        raise _fail(e, verbose) from e

    if markdown:
        console.print(render_standings(rows), markup=False)
    else:
        _print_standings(rows, f"Standings for {event_id}")


@app.command()
def simulate(
    config_path: ConfigOption = None,
    database_url: DatabaseOption = None,
    mode: Annotated[
        JudgingMode, typer.Option("--mode", help="Judging mode of the simulated event")
    ] = JudgingMode.PAIRWISE_JUDGE,
    teams: Annotated[int, typer.Option("--teams", min=2, help="Number of teams")] = 8,
    judges: Annotated[int, typer.Option("--judges", min=1, help="Number of judges")] = 4,
    min_judges: Annotated[
        int, typer.Option("--min-judges", min=1, help="Judges wanted per team")
    ] = 2,
    seed: Annotated[int, typer.Option("--seed", help="Simulation seed")] = 42,
    verbose: VerboseOption = False,
) -> None:
    """Run a simulated event and print the resulting standings."""
    try:
        config = _load(config_path, database_url)
        _configure_logging(config, verbose)
        console.print(f"[bold green]Simulating {mode.value} event...[/bold green]")

        async def _run():
            engine = JudgingEngine.from_config(config)
            try:
                return await simulate_event(
                    engine,
                    mode=mode,
                    teams=teams,
                    judges=judges,
                    min_judges_per_project=min_judges,
                    seed=seed,
                )
            finally:
                await engine.close()

        report = asyncio.run(_run())
    except Exception as e:
        raise _fail(e, verbose) from e

    _print_standings(report.standings, f"Event {report.event_id}")
    console.print(f"Completed visits: {report.total_visits}")


if __name__ == "__main__":
    app()
