"""CLI commands for generating and inspecting leaderboards."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from leaderboard_generator.datastore import entries_frame, list_leaderboards
from leaderboard_generator.exceptions import ConfigValidationError, LeaderboardGeneratorError
from leaderboard_generator.interactive import collect_config
from leaderboard_generator.logging import configure_logging
from leaderboard_generator.pipeline import generate_leaderboard
from leaderboard_generator.settings import load_settings
from leaderboard_generator.validator import load_config_file, validate

logger = logging.getLogger(__name__)
console = Console()


def exit_with_error(error: LeaderboardGeneratorError) -> typer.Exit:
    logger.debug("Command failed: %s", error)
    console.print(f"[bold red]Error: {error.user_message}[/bold red]")
    if isinstance(error, ConfigValidationError):
        for issue in error.errors:
            console.print(f"  [red]{issue}[/red]")
    return typer.Exit(code=1)


def generate_command(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the configuration file"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Run in interactive mode"),
    skip_navigation: bool = typer.Option(False, "--skip-navigation", "-s", help="Skip updating navigation links"),
    site_root: Optional[Path] = typer.Option(None, "--site-root", help="Site root directory (default: .)"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="YAML settings file"),
    template: Optional[Path] = typer.Option(None, "--template", help="Page template (default: packaged)"),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
) -> None:
    """Generate a leaderboard page, update the datastore and site navigation.

    Examples:

        leaderboard-generator generate --config examples/qc-test.json

        leaderboard-generator generate --interactive --skip-navigation
    """
    configure_logging(level=log_level)
    console.print("[bold blue]Quantum Advantage Framework - Leaderboard Generator[/bold blue]")

    try:
        settings = load_settings(settings_file, site_root=site_root, template_path=template)
        if config is not None:
            console.print(f"Loading configuration from: {config.resolve()}")
            leaderboard_config = load_config_file(config)
        elif interactive:
            leaderboard_config = collect_config()
        else:
            console.print("[bold red]Error: No configuration provided. Use --config or --interactive option.[/bold red]")
            raise typer.Exit(code=1)

        result = generate_leaderboard(leaderboard_config, settings, skip_navigation=skip_navigation)
    except LeaderboardGeneratorError as e:
        raise exit_with_error(e) from e

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    if result.navigation is not None:
        console.print(f"Navigation: {result.navigation.summary()}")

    console.print("[bold green]✓ Leaderboard generation completed successfully![/bold green]")
    console.print(f"New leaderboard available at: {settings.leaderboard_dir}/{result.leaderboard_id}/")


def validate_command(
    path: Path = typer.Argument(..., help="Configuration file to check"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Check a configuration file against the leaderboard schema."""
    configure_logging(level=log_level)
    try:
        result = validate(load_config_file(path))
    except LeaderboardGeneratorError as e:
        raise exit_with_error(e) from e

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    if not result.valid:
        raise exit_with_error(ConfigValidationError(result.errors))
    console.print(f"[green]✓[/green] {path} is valid")


def list_command(
    site_root: Optional[Path] = typer.Option(None, "--site-root", help="Site root directory (default: .)"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="YAML settings file"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """List the leaderboards stored in the site datastore."""
    configure_logging(level=log_level)
    try:
        settings = load_settings(settings_file, site_root=site_root)
        summaries = list_leaderboards(settings.site_path, settings.data_file)
    except LeaderboardGeneratorError as e:
        raise exit_with_error(e) from e

    if not summaries:
        console.print("[yellow]No leaderboards found[/yellow]")
        return

    table = Table(title="Leaderboards")
    for header in ("ID", "Title", "Entries", "Created", "Last updated"):
        table.add_column(header)
    for summary in summaries:
        table.add_row(
            summary["id"],
            summary["title"],
            str(summary["entries"]),
            summary["created"],
            summary["lastUpdated"],
        )
    console.print(table)


def export_command(
    leaderboard_id: str = typer.Argument(..., help="Leaderboard ID"),
    output: Path = typer.Option(..., "--output", "-o", help="CSV file to write"),
    site_root: Optional[Path] = typer.Option(None, "--site-root", help="Site root directory (default: .)"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="YAML settings file"),
) -> None:
    """Export a leaderboard's entries to CSV."""
    try:
        settings = load_settings(settings_file, site_root=site_root)
        frame = entries_frame(settings.site_path, leaderboard_id, settings.data_file)
    except LeaderboardGeneratorError as e:
        raise exit_with_error(e) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, index=False)
    console.print(f"[green]✓[/green] Exported {len(frame)} entries to {output}")
